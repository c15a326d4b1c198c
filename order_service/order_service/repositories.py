"""Persistence collaborators used by the engines.

Each repository wraps the unit of work's session and exposes the
find/create/delete/paginate operations for one entity. None of them commit;
the commit decision belongs to :class:`order_service.unit_of_work.UnitOfWork`.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Generic, Optional, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from .models import ZERO, Customer, Order, OrderDiscount, OrderItem, Product

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of a listing. Page numbers start at 1."""

    items: list[T] = field(default_factory=list)
    page: int = 1
    page_size: int = 15
    total: int = 0

    @property
    def pages(self) -> int:
        return (self.total + self.page_size - 1) // self.page_size


def _paginate(session: Session, model, page: int, page_size: int, *options) -> Page:
    total = session.scalar(select(func.count()).select_from(model))
    stmt = select(model).options(*options).order_by(model.id).offset((page - 1) * page_size).limit(page_size)
    items = list(session.scalars(stmt).all())
    return Page(items=items, page=page, page_size=page_size, total=total or 0)


class CatalogRepository:
    """Product records."""

    def __init__(self, session: Session):
        self.session = session

    def find_product(self, product_id: int, lock: bool = False) -> Optional[Product]:
        """Find a product by id.

        Args:
            product_id: Product primary key
            lock: Take a row lock (``SELECT ... FOR UPDATE``) until the unit of work ends

        Returns:
            The product, or None if absent
        """
        stmt = select(Product).where(Product.id == product_id)
        if lock:
            stmt = stmt.with_for_update()
        return self.session.scalars(stmt).first()

    def create_product(self, name: str, category: int, price: Decimal, stock: int) -> Product:
        product = Product(name=name, category=category, price=price, stock=stock)
        self.session.add(product)
        self.session.flush()
        return product

    def debit_stock(self, product: Product, quantity: int) -> bool:
        """Take units out of stock in a single guarded UPDATE.

        The row is only changed while it still holds enough units, so two
        transactions that both passed a stock check cannot drive it negative.

        Returns:
            bool: False if the stock no longer covers the quantity
        """
        stmt = (
            update(Product)
            .where(Product.id == product.id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
        )
        result = self.session.execute(stmt, execution_options={"synchronize_session": False})
        self.session.expire(product, ["stock"])
        return result.rowcount == 1

    def is_referenced(self, product_id: int) -> bool:
        stmt = select(func.count()).select_from(OrderItem).where(OrderItem.product_id == product_id)
        return bool(self.session.scalar(stmt))

    def delete_product(self, product_id: int) -> bool:
        product = self.session.get(Product, product_id)
        if product is None:
            return False
        self.session.delete(product)
        self.session.flush()
        return True

    def paginate(self, page: int, page_size: int) -> Page[Product]:
        return _paginate(self.session, Product, page, page_size)


class CustomerRepository:
    """Customer records."""

    def __init__(self, session: Session):
        self.session = session

    def find_customer(self, customer_id: int) -> Optional[Customer]:
        return self.session.get(Customer, customer_id)

    def create_customer(self, name: str, since=None, revenue: Decimal = ZERO) -> Customer:
        customer = Customer(name=name, since=since, revenue=revenue)
        self.session.add(customer)
        self.session.flush()
        return customer

    def add_revenue(self, customer: Customer, amount: Decimal) -> None:
        """Increment revenue in SQL rather than writing back a value read earlier."""
        stmt = update(Customer).where(Customer.id == customer.id).values(revenue=Customer.revenue + amount)
        self.session.execute(stmt, execution_options={"synchronize_session": False})
        self.session.expire(customer, ["revenue"])

    def is_referenced(self, customer_id: int) -> bool:
        stmt = select(func.count()).select_from(Order).where(Order.customer_id == customer_id)
        return bool(self.session.scalar(stmt))

    def delete_customer(self, customer_id: int) -> bool:
        customer = self.session.get(Customer, customer_id)
        if customer is None:
            return False
        self.session.delete(customer)
        self.session.flush()
        return True

    def paginate(self, page: int, page_size: int) -> Page[Customer]:
        return _paginate(self.session, Customer, page, page_size)


class OrderRepository:
    """Orders together with their items and discount ledger."""

    def __init__(self, session: Session):
        self.session = session

    def create_order(self, customer_id: int, total: Decimal = ZERO) -> Order:
        order = Order(
            customer_id=customer_id,
            total=total,
            total_discount=ZERO,
            discounted_total=ZERO,
        )
        self.session.add(order)
        self.session.flush()
        return order

    def save_order(self, order: Order) -> None:
        self.session.add(order)
        self.session.flush()

    def find_order(self, order_id: int) -> Optional[Order]:
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items), selectinload(Order.discounts))
        )
        return self.session.scalars(stmt).first()

    def delete_order(self, order_id: int) -> bool:
        order = self.find_order(order_id)
        if order is None:
            return False
        self.session.delete(order)
        self.session.flush()
        return True

    def list_orders(self, page: int, page_size: int) -> Page[Order]:
        return _paginate(self.session, Order, page, page_size, selectinload(Order.items))


class OrderItemRepository:
    """Order line snapshots."""

    def __init__(self, session: Session):
        self.session = session

    def create_item(self, order: Order, product: Product, quantity: int, unit_price: Decimal, total: Decimal) -> OrderItem:
        item = OrderItem(
            product=product,
            quantity=quantity,
            unit_price=unit_price,
            total=total,
            discount_amount=ZERO,
            discounted_total=ZERO,
        )
        order.items.append(item)
        self.session.flush()
        return item


class DiscountLedger:
    """Append-only discount entries."""

    def __init__(self, session: Session):
        self.session = session

    def append(self, entry: OrderDiscount) -> OrderDiscount:
        self.session.add(entry)
        self.session.flush()
        return entry
