"""SQLAlchemy models for products, customers, orders and the discount ledger."""

from decimal import Decimal

from sqlalchemy import (
    DECIMAL,
    TIMESTAMP,
    Column,
    Date,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

ZERO = Decimal("0.00")


class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    category = Column(Integer, nullable=False)
    price = Column(DECIMAL(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    order_items = relationship("OrderItem", back_populates="product")


class Customer(Base):
    __tablename__ = "customers"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    since = Column(Date, nullable=True)
    revenue = Column(DECIMAL(12, 2), nullable=False, default=ZERO)
    orders = relationship("Order", back_populates="customer")


class Order(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    total = Column(DECIMAL(10, 2), nullable=False, default=ZERO)
    total_discount = Column(DECIMAL(10, 2), nullable=False, default=ZERO)
    # 0 means "no discount applied yet", see discounts.reconcile
    discounted_total = Column(DECIMAL(10, 2), nullable=False, default=ZERO)
    created_at = Column(TIMESTAMP, server_default=func.now())

    customer = relationship("Customer", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    discounts = relationship(
        "OrderDiscount",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderDiscount.id",
    )


class OrderItem(Base):
    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(DECIMAL(10, 2), nullable=False)
    total = Column(DECIMAL(10, 2), nullable=False)
    discount_amount = Column(DECIMAL(10, 2), nullable=False, default=ZERO)
    discounted_total = Column(DECIMAL(10, 2), nullable=False, default=ZERO)

    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")


class OrderDiscount(Base):
    __tablename__ = "order_discounts"
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    order_item_id = Column(Integer, ForeignKey("order_items.id", ondelete="CASCADE"), nullable=True)
    discount_reason = Column(String(50), nullable=False)
    discount_amount = Column(DECIMAL(10, 2), nullable=False)
    subtotal = Column(DECIMAL(10, 2), nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())

    order = relationship("Order", back_populates="discounts")
    order_item = relationship("OrderItem")
