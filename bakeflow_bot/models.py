from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Boolean,
    DateTime,
    ForeignKey,
    Text,
    Index,
    CheckConstraint,
    func,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# Fulfillment chain, in order. "delivered" is terminal.
ORDER_STATUSES = ("pending", "preparing", "ready", "delivered")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_name = Column(String, nullable=False)
    delivery_type = Column(String, nullable=False, default="pickup")  # pickup / delivery
    address = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending", index=True)
    total_items = Column(Integer, nullable=False, default=0)
    subtotal = Column(Float, nullable=False, default=0.0)
    delivery_fee = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False, default=0.0)
    reordered_from = Column(Integer, ForeignKey("orders.id"), nullable=True)
    rating_id = Column(Integer, nullable=True)  # set once the customer rates the order
    sender_id = Column(String, nullable=True, index=True)  # Messenger PSID, used for notifications
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    rating = relationship("Rating", back_populates="order", uselist=False)

    # Admin dashboard filters by status and sorts by date
    __table_args__ = (
        Index("ix_orders_status_created_at", "status", "created_at"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)  # unit price at the time of ordering
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )


class Rating(Base):
    """Customer rating for a delivered order. At most one per order."""
    __tablename__ = "ratings"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)
    user_id = Column(String, nullable=False)
    stars = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    order = relationship("Order", back_populates="rating")

    __table_args__ = (
        CheckConstraint("stars >= 1 AND stars <= 5", name="ck_ratings_stars_range"),
    )


# --- Product catalog (read by the conversation through ProductCatalog) ---

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String, unique=True, nullable=False, index=True)  # lookup name, e.g. "Chocolate Cake"
    name = Column(String, nullable=False)
    emoji = Column(String, nullable=False, default="🍰")
    category = Column(String, nullable=False, index=True)  # 'cakes', 'pastries', 'coffee', 'bread', ...
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    price = Column(Float, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
