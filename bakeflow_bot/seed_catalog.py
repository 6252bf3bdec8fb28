from typing import Callable, Iterable

from sqlalchemy.orm import Session

from bakeflow_bot.db import SessionLocal
from bakeflow_bot.models import Product
from bakeflow_bot.services.catalog import CatalogProduct, DEFAULT_PRODUCTS


def seed_catalog(
    session_factory: Callable[[], Session] = SessionLocal,
    products: Iterable[CatalogProduct] = DEFAULT_PRODUCTS,
) -> int:
    """Insert the default bakery products into an empty catalog. Returns rows added."""
    # Note: Tables should be created via Alembic migrations.
    # Run `alembic upgrade head` before seeding if database is empty.

    db = session_factory()
    try:
        existing = db.query(Product).count()
        if existing > 0:
            print(f"Catalog already has {existing} products. Not seeding again.")
            return 0

        rows = [
            Product(
                key=p.key,
                name=p.name,
                emoji=p.emoji,
                category=p.category,
                description=p.description,
                image_url=p.image_url,
                price=p.price,
                is_active=True,
            )
            for p in products
        ]

        db.add_all(rows)
        db.commit()
        print(f"Seeded {len(rows)} products.")
        return len(rows)
    finally:
        db.close()


if __name__ == "__main__":
    seed_catalog()
