from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Product(Base):
    __tablename__ = "products"

    id = Column(String, primary_key=True)
    store_id = Column(String, nullable=True, index=True)
    name = Column(String, nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    sale_price = Column(Float, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Addon pricing: units bundled into the base price
    max_included_quantity = Column(Integer, nullable=True)
    excess_unit_price = Column(Float, nullable=True)

    # Daily stock ledger (authoritative). NULL daily_stock = not tracked
    daily_stock = Column(Integer, nullable=True)
    current_stock = Column(Integer, nullable=True)
    stock_last_reset = Column(DateTime, nullable=True)
    allow_same_day_scheduling = Column(Boolean, nullable=False, default=True)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    store_id = Column(String, nullable=True, index=True)
    status = Column(String, nullable=False, default="pending", index=True)  # pending/confirmed/cancelled
    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False)
    customer_email = Column(String, nullable=True)
    delivery_type = Column(String, nullable=False)  # delivery / pickup
    payment_method = Column(String, nullable=False)  # cash / credit_card / pix
    subtotal = Column(Float, nullable=False, default=0.0)
    delivery_fee = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False, default=0.0)
    notes = Column(Text, nullable=True)
    scheduled_for = Column(DateTime, nullable=True)

    # Delivery address, only filled for delivery orders
    street = Column(String, nullable=True)
    number = Column(String, nullable=True)
    complement = Column(String, nullable=True)
    neighborhood = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip = Column(String, nullable=True)
    address = Column(String, nullable=True)  # single-line legacy rendering

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_orders_store_created_at", "store_id", "created_at"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(String, nullable=True, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)  # line total: product + addons
    notes = Column(Text, nullable=True)

    order = relationship("Order", back_populates="items")
    addons = relationship("OrderItemAddon", back_populates="order_item", cascade="all, delete-orphan")


class OrderItemAddon(Base):
    __tablename__ = "order_item_addons"

    id = Column(Integer, primary_key=True, index=True)
    order_item_id = Column(Integer, ForeignKey("order_items.id"), nullable=False, index=True)
    addon_item_id = Column(String, nullable=True)
    price = Column(Float, nullable=False)  # unit price x quantity

    order_item = relationship("OrderItem", back_populates="addons")
