"""
Product Catalog Service for BakeFlow
====================================

Read-only product lookups used by the conversation and by pricing. The
conversation never touches the products table directly; it goes through a
ProductCatalog so tests and alternative stores can supply their own.

Implementations:
----------------
- DatabaseCatalog: Reads active rows from the `products` table.
- StaticCatalog: Serves a fixed list, used for the default bakery menu and
  in tests.

Lookups never raise for a missing product; they return None and the caller
decides what a miss means (pricing falls back to DEFAULT_UNIT_PRICE, the
conversation replies "product not found").
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import Product
from ..tasks.parsers import emoji_for_category


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogProduct:
    """A product as seen by the ordering flow."""
    id: int
    key: str
    name: str
    price: float
    category: str
    emoji: str = "🍰"
    description: str = ""
    image_url: Optional[str] = None

    @classmethod
    def from_model(cls, product: Product) -> "CatalogProduct":
        return cls(
            id=product.id,
            key=product.key,
            name=product.name,
            price=float(product.price),
            category=product.category,
            emoji=product.emoji or emoji_for_category(product.category),
            description=product.description or "",
            image_url=product.image_url,
        )


# Bakery default menu, loaded by seed_catalog.py
DEFAULT_PRODUCTS: List[CatalogProduct] = [
    CatalogProduct(1, "Chocolate Cake", "Chocolate Cake", 25.00, "cakes", "🍫",
                   "Rich, moist chocolate cake",
                   "https://images.unsplash.com/photo-1578985545062-69928b1d9587?w=400"),
    CatalogProduct(2, "Vanilla Cake", "Vanilla Cake", 24.00, "cakes", "🎂",
                   "Classic vanilla layer cake",
                   "https://images.unsplash.com/photo-1464349095431-e9a21285b5f3?w=400"),
    CatalogProduct(3, "Red Velvet Cake", "Red Velvet Cake", 28.00, "cakes", "❤️",
                   "Smooth red velvet with cream cheese",
                   "https://images.unsplash.com/photo-1586985289688-ca3cf47d3e6e?w=400"),
    CatalogProduct(4, "Croissant", "Croissant", 4.50, "pastries", "🥐",
                   "Buttery, flaky croissant",
                   "https://images.unsplash.com/photo-1555507036-ab1f4038808a?w=400"),
    CatalogProduct(5, "Cinnamon Roll", "Cinnamon Roll", 5.00, "pastries", "🥯",
                   "Sweet cinnamon roll with glaze",
                   "https://images.unsplash.com/photo-1509440159596-0249088772ff?w=400"),
    CatalogProduct(6, "Chocolate Cupcake", "Chocolate Cupcake", 3.50, "cupcakes", "🧁",
                   "Chocolate cupcake with frosting",
                   "https://images.unsplash.com/photo-1614707267537-b85aaf00c4b7?w=400"),
    CatalogProduct(7, "Coffee", "Coffee", 5.00, "coffee", "☕",
                   "Freshly brewed coffee",
                   "https://images.unsplash.com/photo-1509042239860-f550ce710b93?w=400"),
    CatalogProduct(8, "Bread", "Bread", 6.00, "bread", "🍞",
                   "Fresh artisan bread loaf",
                   "https://images.unsplash.com/photo-1509440159596-0249088772ff?w=400"),
]


class ProductCatalog:
    """Interface consumed by the conversation and pricing."""

    def product_by_key(self, key: str) -> Optional[CatalogProduct]:
        raise NotImplementedError

    def product_by_id(self, product_id: int) -> Optional[CatalogProduct]:
        raise NotImplementedError

    def list_products(self, limit: int = 10) -> List[CatalogProduct]:
        raise NotImplementedError

    def price_for(self, key: str) -> Optional[float]:
        """Unit price for a product key, or None on a miss."""
        product = self.product_by_key(key)
        return product.price if product else None


class StaticCatalog(ProductCatalog):
    """Catalog backed by an in-memory list."""

    def __init__(self, products: Iterable[CatalogProduct] = DEFAULT_PRODUCTS):
        self._products = list(products)
        self._by_key = {p.key.lower(): p for p in self._products}
        self._by_name = {p.name.lower(): p for p in self._products}
        self._by_id = {p.id: p for p in self._products}

    def product_by_key(self, key: str) -> Optional[CatalogProduct]:
        if not key:
            return None
        lowered = key.strip().lower()
        return self._by_key.get(lowered) or self._by_name.get(lowered)

    def product_by_id(self, product_id: int) -> Optional[CatalogProduct]:
        return self._by_id.get(product_id)

    def list_products(self, limit: int = 10) -> List[CatalogProduct]:
        return self._products[:limit]


class DatabaseCatalog(ProductCatalog):
    """
    Catalog backed by the `products` table.

    Each lookup opens its own short session from the factory so callers can
    use the catalog while holding a user's conversation lock.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def product_by_key(self, key: str) -> Optional[CatalogProduct]:
        if not key:
            return None
        lowered = key.strip().lower()
        db = self._session_factory()
        try:
            product = (
                db.query(Product)
                .filter(Product.is_active.is_(True))
                .filter((func.lower(Product.key) == lowered) | (func.lower(Product.name) == lowered))
                .first()
            )
            return CatalogProduct.from_model(product) if product else None
        finally:
            db.close()

    def product_by_id(self, product_id: int) -> Optional[CatalogProduct]:
        db = self._session_factory()
        try:
            product = db.get(Product, product_id)
            if product is None or not product.is_active:
                return None
            return CatalogProduct.from_model(product)
        finally:
            db.close()

    def list_products(self, limit: int = 10) -> List[CatalogProduct]:
        db = self._session_factory()
        try:
            rows = (
                db.query(Product)
                .filter(Product.is_active.is_(True))
                .order_by(Product.id)
                .limit(limit)
                .all()
            )
            return [CatalogProduct.from_model(row) for row in rows]
        finally:
            db.close()
