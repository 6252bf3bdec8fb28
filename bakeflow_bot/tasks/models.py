"""
Pydantic models for a user's conversation state.

One UserState exists per chat user while a conversation is in progress:
- UserState (root)
  - PendingItem (the product currently being added, if any)
  - CartItem list (what the user has added so far)
"""

from datetime import datetime, timezone
from typing import Literal
from pydantic import BaseModel, Field

from .schemas import ConversationState


class CartItem(BaseModel):
    """A line in the cart. Prices are resolved from the catalog when needed."""
    product: str
    emoji: str = "🍰"
    quantity: int = Field(default=1, ge=1)

    def get_summary(self) -> str:
        return f"{self.quantity}× {self.emoji} {self.product}"


class PendingItem(BaseModel):
    """Product chosen but not yet folded into the cart."""
    product: str
    emoji: str = "🍰"
    quantity: int | None = Field(default=None, ge=1)

    def to_cart_item(self) -> CartItem:
        if self.quantity is None:
            raise ValueError("Pending item has no quantity yet")
        return CartItem(product=self.product, emoji=self.emoji, quantity=self.quantity)


class UserState(BaseModel):
    """Where a user is in the ordering flow, plus what they've told us so far."""

    state: ConversationState = ConversationState.LANGUAGE_SELECTION
    language: Literal["en", "my"] | None = None
    pending_item: PendingItem | None = None
    cart: list[CartItem] = Field(default_factory=list)
    customer_name: str | None = None
    delivery_type: Literal["pickup", "delivery"] | None = None
    address: str | None = None

    # Cart came from the quick-order path
    quick_order: bool = False
    # Prior order this cart was copied from
    reordered_from: int | None = None
    # Order the user is rating
    rating_order_id: int | None = None

    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def lang(self) -> str:
        return self.language or "en"

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    def total_quantity(self) -> int:
        """Sum of quantities across the cart."""
        return sum(item.quantity for item in self.cart)

    def add_to_cart(self, product: str, emoji: str, quantity: int = 1) -> CartItem:
        """
        Add units of a product, merging with an existing line for the same product.

        Returns the cart line that now holds the product.
        """
        for item in self.cart:
            if item.product == product:
                item.quantity += quantity
                return item
        item = CartItem(product=product, emoji=emoji, quantity=quantity)
        self.cart.append(item)
        return item

    def fold_pending_item(self) -> CartItem:
        """Move the pending item into the cart as its own line and clear it."""
        if self.pending_item is None:
            raise ValueError("No pending item to add")
        item = self.pending_item.to_cart_item()
        self.cart.append(item)
        self.pending_item = None
        return item

    def clear_cart(self) -> None:
        self.cart = []
        self.quick_order = False

    def reset(self, keep_language: bool = True) -> None:
        """Return to a fresh state, optionally keeping the chosen language."""
        language = self.language if keep_language else None
        fresh = UserState(language=language)
        for name in type(self).model_fields:
            setattr(self, name, getattr(fresh, name))
