"""Tests for product and customer maintenance."""

from datetime import date
from decimal import Decimal

import pytest

from order_service.catalog import CatalogService
from order_service.errors import ValidationFailure
from order_service.schemas import CustomerCreate, OrderCreateRequest, OrderItemRequest, ProductCreate


@pytest.fixture
def catalog(session_factory):
    return CatalogService(session_factory, max_page_size=50)


def test_create_and_list_products(catalog):
    for name in ("Hammer", "Saw", "Pliers"):
        catalog.create_product(ProductCreate(name=name, category=2, price=Decimal("1299.50"), stock=3))

    first = catalog.list_products(page=1, page_size=2)
    assert first.total == 3
    assert first.pages == 2
    assert [p.name for p in first.items] == ["Hammer", "Saw"]
    assert first.items[0].price == "1,299.50"

    second = catalog.list_products(page=2, page_size=2)
    assert [p.name for p in second.items] == ["Pliers"]


def test_list_products_respects_max_page_size(catalog):
    with pytest.raises(ValidationFailure, match="between 1 and 50"):
        catalog.list_products(page=1, page_size=51)


def test_delete_product(catalog, fetch):
    product = catalog.create_product(ProductCreate(name="Tape", category=3, price=Decimal("2.00")))

    assert catalog.delete_product(product.id) is True
    assert fetch.product(product.id) is None
    assert catalog.delete_product(product.id) is False


def test_delete_referenced_product_is_rejected(catalog, order_engine, make_customer, fetch):
    product = catalog.create_product(ProductCreate(name="Glue", category=3, price=Decimal("4.00"), stock=5))
    order_engine.create_order(
        OrderCreateRequest(customer_id=make_customer(), items=[OrderItemRequest(product_id=product.id, quantity=1)])
    )

    with pytest.raises(ValidationFailure, match="referenced by existing orders"):
        catalog.delete_product(product.id)

    assert fetch.product(product.id) is not None


def test_create_customer(catalog, fetch):
    customer = catalog.create_customer(CustomerCreate(name="Kaptan Demir", since=date(2015, 1, 15), revenue=Decimal("1505.95")))

    stored = fetch.customer(customer.id)
    assert stored.name == "Kaptan Demir"
    assert stored.since == date(2015, 1, 15)
    assert stored.revenue == Decimal("1505.95")


def test_delete_customer_with_orders_is_rejected(catalog, order_engine, make_product, fetch):
    customer = catalog.create_customer(CustomerCreate(name="Türker"))
    order_engine.create_order(
        OrderCreateRequest(customer_id=customer.id, items=[OrderItemRequest(product_id=make_product(), quantity=1)])
    )

    with pytest.raises(ValidationFailure, match="has existing orders"):
        catalog.delete_customer(customer.id)

    assert fetch.customer(customer.id) is not None
