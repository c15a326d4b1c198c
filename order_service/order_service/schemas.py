"""Pydantic models for order service requests and responses."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire and snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderItemRequest(CamelModel):
    """A single line of an order request.

    Attributes:
        product_id (int): Product to order.
        quantity (int): Number of units, at least 1.
    """

    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., ge=1)


class OrderCreateRequest(CamelModel):
    """An order request.

    Attributes:
        customer_id (int): Customer placing the order.
        items (list[OrderItemRequest]): Order lines, at least one required.
    """

    customer_id: int = Field(..., gt=0)
    items: list[OrderItemRequest] = Field(..., min_length=1, description="At least one item required")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "customerId": 1,
                "items": [{"productId": 100, "quantity": 10}],
            }
        }
    )


class OrderCreated(CamelModel):
    """Result of a successful order creation."""

    message: str = "Your order has been created."
    order_id: int
    total: Decimal
    total_discount: Decimal
    discounted_total: Decimal


class OrderItemView(CamelModel):
    product_id: int
    quantity: int
    unit_price: str
    total: str
    discount_amount: str
    discounted_total: str


class OrderView(CamelModel):
    id: int
    customer_id: int
    items: list[OrderItemView]
    total: str
    total_discount: str
    discounted_total: str


class DiscountEntryView(CamelModel):
    discount_reason: str
    description: str
    discount_amount: str
    subtotal: str


class OrderDiscountsView(CamelModel):
    """Discount ledger of one order with its formatted totals."""

    id: int
    discounts: list[DiscountEntryView]
    total: str
    total_discount: str
    discounted_total: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 36,
                "discounts": [
                    {
                        "discountReason": "10_PERCENT_OVER_1000",
                        "description": "10% discount applied to orders of 1000 or more.",
                        "discountAmount": "181.53",
                        "subtotal": "1,633.77",
                    }
                ],
                "total": "1,815.30",
                "totalDiscount": "291.81",
                "discountedTotal": "1,523.49",
            }
        }
    )


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: int = Field(..., ge=0)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    stock: int = Field(0, ge=0)


class ProductView(CamelModel):
    id: int
    name: str
    category: int
    price: str
    stock: int


class CustomerCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    since: Optional[date] = None
    revenue: Decimal = Field(Decimal("0.00"), ge=0, max_digits=12, decimal_places=2)


class CustomerView(CamelModel):
    id: int
    name: str
    since: Optional[date]
    revenue: str


class PageView(CamelModel):
    """Page metadata shared by every listing."""

    page: int
    page_size: int
    total: int
    pages: int


class OrderPage(PageView):
    items: list[OrderView]


class ProductPage(PageView):
    items: list[ProductView]


class CustomerPage(PageView):
    items: list[CustomerView]
