"""Discount rules applied to a fully priced order.

Three rules run in a fixed order. Each rule computes its amount from the
original ``total`` of the order or item, while the running
``discounted_total`` and cumulative discount fields accumulate across rules.
Every application appends one :class:`OrderDiscount` row to the ledger.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from logging_utils import get_component_logger

from .logger import SERVICE_NAME
from .models import ZERO, Order, OrderDiscount, OrderItem
from .repositories import DiscountLedger

logger = get_component_logger(SERVICE_NAME, "discounts")

CENT = Decimal("0.01")
ORDER_TOTAL_THRESHOLD = Decimal("1000")
ORDER_TOTAL_RATE = Decimal("0.10")
BULK_CATEGORY = 2
BULK_MIN_QUANTITY = 6
CHEAPEST_CATEGORY = 1
CHEAPEST_MIN_ITEMS = 2
CHEAPEST_RATE = Decimal("0.20")


class DiscountReason(str, Enum):
    """Closed set of reasons written to the discount ledger."""

    OVER_1000 = "10_PERCENT_OVER_1000"
    BUY_5_GET_1 = "BUY_5_GET_1"
    CATEGORY_1_DISCOUNT = "CATEGORY_1_DISCOUNT"

    @property
    def description(self) -> str:
        return DISCOUNT_DESCRIPTIONS[self]


DISCOUNT_DESCRIPTIONS: dict[DiscountReason, str] = {
    DiscountReason.OVER_1000: "10% discount applied to orders of 1000 or more.",
    DiscountReason.BUY_5_GET_1: "One of six or more units bought was given free.",
    DiscountReason.CATEGORY_1_DISCOUNT: "20% discount applied to the cheapest category 1 item.",
}


def to_cents(value: Decimal) -> Decimal:
    """Quantize a monetary value to cents, rounding halves up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class RunningTotal:
    """Discount state of an order or an order item.

    Attributes:
        base_total: The undiscounted total the state started from
        discount: Cumulative discount applied so far
        discounted_total: Net total after discounts; 0 until the first discount
    """

    base_total: Decimal
    discount: Decimal = ZERO
    discounted_total: Decimal = ZERO


def reconcile(state: RunningTotal, amount: Decimal) -> RunningTotal:
    """Apply one discount amount to a running total.

    The first discount seeds ``discounted_total`` from ``base_total``; later
    ones subtract from the seeded value. The net total never drops below 0,
    while the cumulative discount keeps growing.
    """
    current = state.discounted_total if state.discounted_total > 0 else state.base_total
    return RunningTotal(
        base_total=state.base_total,
        discount=state.discount + amount,
        discounted_total=max(ZERO, current - amount),
    )


def discount_order(order: Order, amount: Decimal) -> None:
    state = reconcile(RunningTotal(order.total, order.total_discount, order.discounted_total), amount)
    order.total_discount = state.discount
    order.discounted_total = state.discounted_total


def discount_item(item: OrderItem, amount: Decimal) -> None:
    state = reconcile(RunningTotal(item.total, item.discount_amount, item.discounted_total), amount)
    item.discount_amount = state.discount
    item.discounted_total = state.discounted_total


class DiscountEngine:
    """Applies the order-total, bulk and cheapest-item rules to an order."""

    def __init__(self, ledger: DiscountLedger):
        self.ledger = ledger

    def apply_discounts(self, order: Order) -> list[OrderDiscount]:
        """Run every rule against the order and return the ledger entries written.

        Args:
            order: A persisted order whose items and total are final

        Returns:
            list[OrderDiscount]: Entries in the order they were appended
        """
        entries = []
        entries += self._apply_order_total_discount(order)
        entries += self._apply_bulk_discount(order)
        entries += self._apply_cheapest_item_discount(order)
        logger.info(
            f"Order {order.id}: {len(entries)} discount(s) applied, "
            f"total={order.total} discount={order.total_discount} net={order.discounted_total}"
        )
        return entries

    def _apply_order_total_discount(self, order: Order) -> list[OrderDiscount]:
        if order.total < ORDER_TOTAL_THRESHOLD:
            return []

        amount = to_cents(order.total * ORDER_TOTAL_RATE)
        discount_order(order, amount)
        for item in order.items:
            share = to_cents(item.total / order.total * amount) if order.total > 0 else ZERO
            discount_item(item, share)

        return [self._record(order, None, DiscountReason.OVER_1000, amount)]

    def _apply_bulk_discount(self, order: Order) -> list[OrderDiscount]:
        entries = []
        for item in order.items:
            if item.product.category == BULK_CATEGORY and item.quantity >= BULK_MIN_QUANTITY:
                amount = to_cents(item.unit_price)
                discount_order(order, amount)
                discount_item(item, amount)
                entries.append(self._record(order, item, DiscountReason.BUY_5_GET_1, amount))
        return entries

    def _apply_cheapest_item_discount(self, order: Order) -> list[OrderDiscount]:
        candidates = [item for item in order.items if item.product.category == CHEAPEST_CATEGORY]
        if len(candidates) < CHEAPEST_MIN_ITEMS:
            return []

        # Ties on total go to the earliest line
        item = min(candidates, key=lambda i: (i.total, i.id))
        amount = to_cents(item.total * CHEAPEST_RATE)
        discount_order(order, amount)
        discount_item(item, amount)

        return [self._record(order, item, DiscountReason.CATEGORY_1_DISCOUNT, amount)]

    def _record(self, order: Order, item: OrderItem | None, reason: DiscountReason, amount: Decimal) -> OrderDiscount:
        entry = OrderDiscount(
            order=order,
            order_item=item,
            discount_reason=reason.value,
            discount_amount=amount,
            subtotal=order.discounted_total,
        )
        self.ledger.append(entry)
        logger.debug(f"Order {order.id}: {reason.value} -{amount} (item={item.id if item else None})")
        return entry
