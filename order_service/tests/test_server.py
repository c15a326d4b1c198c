"""Tests for the Order Service HTTP API."""

from decimal import Decimal
from http import HTTPStatus


def post_order(test_client, customer_id, *lines):
    return test_client.post(
        "/orders",
        json={
            "customerId": customer_id,
            "items": [{"productId": product_id, "quantity": quantity} for product_id, quantity in lines],
        },
    )


def test_health_check(test_client):
    """Test the basic health check endpoint."""
    response = test_client.get("/health")
    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"status": "healthy"}


def test_readiness_check_success(test_client):
    response = test_client.get("/health/ready")
    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"status": "ready", "database": "connected"}


def test_readiness_check_database_down(test_client, mocker):
    mocker.patch("order_service.server.check_connection", return_value=False)
    response = test_client.get("/health/ready")
    assert response.json() == {"status": "not_ready", "database": "disconnected"}


def test_create_order(test_client, make_product, make_customer, fetch):
    customer_id = make_customer()
    product_id = make_product(category=2, price="100.00", stock=20)

    response = post_order(test_client, customer_id, (product_id, 10))

    assert response.status_code == HTTPStatus.CREATED
    body = response.json()
    assert body["message"] == "Your order has been created."
    assert Decimal(body["total"]) == Decimal("1000")
    assert Decimal(body["totalDiscount"]) == Decimal("200")
    assert Decimal(body["discountedTotal"]) == Decimal("800")
    assert fetch.order(body["orderId"]) is not None


def test_create_order_unknown_customer(test_client, make_product):
    product_id = make_product()

    response = post_order(test_client, 404, (product_id, 1))

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.json() == {"detail": "Customer 404 not found"}


def test_create_order_insufficient_stock(test_client, make_product, make_customer):
    customer_id = make_customer()
    product_id = make_product(name="Keyboard", stock=1)

    response = post_order(test_client, customer_id, (product_id, 2))

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert response.json() == {"detail": "Insufficient stock for product 'Keyboard'"}


def test_create_order_rejects_empty_items(test_client, make_customer):
    response = test_client.post("/orders", json={"customerId": make_customer(), "items": []})
    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_create_order_store_failure(test_client, make_product, make_customer, mocker):
    from order_service.errors import PersistenceFailure

    mocker.patch("order_service.server.OrderEngine.create_order", side_effect=PersistenceFailure("disk full"))

    response = post_order(test_client, make_customer(), (make_product(), 1))

    assert response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert response.json() == {"detail": "Internal server error"}


def test_order_discounts_endpoint(test_client, make_product, make_customer):
    customer_id = make_customer()
    product_id = make_product(category=2, price="100.00", stock=20)
    order_id = post_order(test_client, customer_id, (product_id, 10)).json()["orderId"]

    response = test_client.get(f"/discounted/{order_id}")

    assert response.status_code == HTTPStatus.OK
    body = response.json()
    assert body["id"] == order_id
    assert [d["discountReason"] for d in body["discounts"]] == ["10_PERCENT_OVER_1000", "BUY_5_GET_1"]
    assert body["total"] == "1,000.00"
    assert body["discountedTotal"] == "800.00"

    assert test_client.get(f"/discounted/{order_id}").json() == body


def test_order_discounts_not_found(test_client):
    response = test_client.get("/discounted/999")
    assert response.status_code == HTTPStatus.NOT_FOUND


def test_list_and_delete_orders(test_client, make_product, make_customer):
    customer_id = make_customer()
    product_id = make_product(price="3.00")
    order_ids = [post_order(test_client, customer_id, (product_id, n)).json()["orderId"] for n in (1, 2)]

    response = test_client.get("/orders", params={"page": 1, "pageSize": 1})
    assert response.status_code == HTTPStatus.OK
    body = response.json()
    assert body["total"] == 2
    assert body["pages"] == 2
    assert body["pageSize"] == 1
    assert body["items"][0]["id"] == order_ids[0]
    assert body["items"][0]["items"][0]["unitPrice"] == "3.00"

    response = test_client.delete(f"/orders/{order_ids[0]}")
    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"message": "Order deleted"}

    response = test_client.delete(f"/orders/{order_ids[0]}")
    assert response.status_code == HTTPStatus.NOT_FOUND

    assert test_client.get("/orders").json()["total"] == 1


def test_list_orders_rejects_oversized_page(test_client):
    response = test_client.get("/orders", params={"pageSize": 1000})
    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_product_endpoints(test_client, make_customer):
    response = test_client.post("/products", json={"name": "Chair", "category": 1, "price": "49.90", "stock": 12})
    assert response.status_code == HTTPStatus.CREATED
    product = response.json()
    assert product["price"] == "49.90"
    assert product["stock"] == 12

    listing = test_client.get("/products").json()
    assert [p["name"] for p in listing["items"]] == ["Chair"]

    post_order(test_client, make_customer(), (product["id"], 1))
    response = test_client.delete(f"/products/{product['id']}")
    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY

    assert test_client.delete("/products/999").status_code == HTTPStatus.NOT_FOUND


def test_product_validation(test_client):
    response = test_client.post("/products", json={"name": "Free", "category": 1, "price": "0", "stock": 1})
    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_customer_endpoints(test_client):
    response = test_client.post("/customers", json={"name": "Türker", "since": "2014-06-28", "revenue": "492.12"})
    assert response.status_code == HTTPStatus.CREATED
    customer = response.json()
    assert customer == {"id": customer["id"], "name": "Türker", "since": "2014-06-28", "revenue": "492.12"}

    listing = test_client.get("/customers").json()
    assert listing["total"] == 1

    assert test_client.delete(f"/customers/{customer['id']}").status_code == HTTPStatus.OK
    assert test_client.delete(f"/customers/{customer['id']}").status_code == HTTPStatus.NOT_FOUND
