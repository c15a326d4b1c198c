"""Read-only views over orders and their discount ledgers."""

from decimal import Decimal

from sqlalchemy.orm import sessionmaker

from .discounts import DiscountReason, to_cents
from .errors import NotFound, ValidationFailure
from .models import Order, OrderDiscount, OrderItem
from .schemas import DiscountEntryView, OrderDiscountsView, OrderItemView, OrderPage, OrderView
from .unit_of_work import UnitOfWork


def format_money(value: Decimal | int | None) -> str:
    """Format an amount with two decimals and thousands separators, e.g. ``1,633.77``."""
    return f"{to_cents(value or 0):,.2f}"


def describe_reason(reason: str) -> str:
    try:
        return DiscountReason(reason).description
    except ValueError:
        return ""


def check_page(page: int, page_size: int, max_page_size: int) -> None:
    if page < 1:
        raise ValidationFailure("Page must be at least 1")
    if not 1 <= page_size <= max_page_size:
        raise ValidationFailure(f"Page size must be between 1 and {max_page_size}")


def discount_entry_view(entry: OrderDiscount) -> DiscountEntryView:
    return DiscountEntryView(
        discount_reason=entry.discount_reason,
        description=describe_reason(entry.discount_reason),
        discount_amount=format_money(entry.discount_amount),
        subtotal=format_money(entry.subtotal),
    )


def order_item_view(item: OrderItem) -> OrderItemView:
    return OrderItemView(
        product_id=item.product_id,
        quantity=item.quantity,
        unit_price=format_money(item.unit_price),
        total=format_money(item.total),
        discount_amount=format_money(item.discount_amount),
        discounted_total=format_money(item.discounted_total),
    )


def order_view(order: Order) -> OrderView:
    return OrderView(
        id=order.id,
        customer_id=order.customer_id,
        items=[order_item_view(item) for item in order.items],
        total=format_money(order.total),
        total_discount=format_money(order.total_discount),
        discounted_total=format_money(order.discounted_total),
    )


def get_order_discounts(session_factory: sessionmaker, order_id: int) -> OrderDiscountsView:
    """Return the discount ledger and totals of one order.

    Raises:
        NotFound: If the order does not exist
    """
    with UnitOfWork(session_factory) as uow:
        order = uow.orders.find_order(order_id)
        if order is None:
            raise NotFound(f"Order {order_id} not found")
        return OrderDiscountsView(
            id=order.id,
            discounts=[discount_entry_view(entry) for entry in order.discounts],
            total=format_money(order.total),
            total_discount=format_money(order.total_discount),
            discounted_total=format_money(order.discounted_total),
        )


def list_orders(session_factory: sessionmaker, page: int, page_size: int, max_page_size: int = 100) -> OrderPage:
    """Return one page of orders with their items, oldest first."""
    check_page(page, page_size, max_page_size)
    with UnitOfWork(session_factory) as uow:
        result = uow.orders.list_orders(page, page_size)
        return OrderPage(
            items=[order_view(order) for order in result.items],
            page=result.page,
            page_size=result.page_size,
            total=result.total,
            pages=result.pages,
        )
