"""
Pricing Engine for Carts.

This module turns a cart into subtotal, delivery fee and total. Unit prices
come from a catalog lookup; a product the catalog does not know is charged
DEFAULT_UNIT_PRICE rather than failing the computation.

Everything here is deterministic and side-effect free, so summaries can be
re-rendered as often as needed and always agree with what gets persisted.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from ..config import DELIVERY_FEE, DEFAULT_UNIT_PRICE
from .models import CartItem

logger = logging.getLogger(__name__)


def _round_money(value: float) -> float:
    return round(value + 1e-9, 2)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    delivery_fee: float
    total: float
    total_items: int
    # Unit price per cart line, in cart order
    unit_prices: tuple[float, ...] = ()


class DeliveryFeePolicy:
    """
    Delivery fee schedule.

    Flat fee for delivery, nothing for pickup. The address is passed through
    so a distance-based schedule can replace this without touching callers.
    """

    def __init__(self, flat_fee: float = DELIVERY_FEE):
        self.flat_fee = flat_fee

    def fee_for(self, delivery_type: str | None, address: str | None = None) -> float:
        if delivery_type == "delivery":
            return _round_money(self.flat_fee)
        return 0.0


class PricingEngine:
    """
    Handles price lookups and totals for carts.

    Requires a price lookup function that resolves a product name to its unit
    price, returning None on a miss.
    """

    def __init__(
        self,
        price_lookup: Callable[[str], float | None],
        fee_policy: DeliveryFeePolicy | None = None,
        default_unit_price: float = DEFAULT_UNIT_PRICE,
    ):
        """
        Initialize the pricing engine.

        Args:
            price_lookup: Function to look up a unit price by product name.
                          Signature: (product: str) -> float | None
            fee_policy: Delivery fee schedule (flat DELIVERY_FEE by default).
            default_unit_price: Price charged when the lookup misses.
        """
        self._lookup_price = price_lookup
        self.fee_policy = fee_policy or DeliveryFeePolicy()
        self.default_unit_price = default_unit_price

    def unit_price(self, product: str) -> float:
        """Unit price for a product, falling back to the default on a miss."""
        price = self._lookup_price(product)
        if price is None:
            logger.warning("No catalog price for %r, using default %.2f", product, self.default_unit_price)
            return self.default_unit_price
        return float(price)

    def line_total(self, item: CartItem) -> float:
        return _round_money(self.unit_price(item.product) * item.quantity)

    def calculate_order_totals(
        self,
        cart: Iterable[CartItem],
        delivery_type: str | None,
        address: str | None = None,
    ) -> OrderTotals:
        """
        Compute subtotal, delivery fee and total for a cart.

        total is always subtotal + delivery_fee; pickup never pays a fee. Each
        catalog price is looked up once, so the per-line unit_prices and the
        subtotal always agree.
        """
        items = list(cart)
        unit_prices = tuple(self.unit_price(i.product) for i in items)
        subtotal = _round_money(sum(p * i.quantity for p, i in zip(unit_prices, items)))
        delivery_fee = self.fee_policy.fee_for(delivery_type, address)
        return OrderTotals(
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            total=_round_money(subtotal + delivery_fee),
            total_items=sum(i.quantity for i in items),
            unit_prices=unit_prices,
        )


def calculate_order_totals(
    cart: Iterable[CartItem],
    delivery_type: str | None,
    address: str | None,
    price_lookup: Callable[[str], float | None],
    fee_policy: DeliveryFeePolicy | None = None,
) -> OrderTotals:
    """Module-level shortcut for one-off calculations."""
    engine = PricingEngine(price_lookup, fee_policy=fee_policy)
    return engine.calculate_order_totals(cart, delivery_type, address)
