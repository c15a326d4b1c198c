"""Test fixtures for the order service tests."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from order_service.database import build_engine, build_session_factory, init_db
from order_service.models import Customer, Product
from order_service.orders import OrderEngine
from order_service.repositories import OrderRepository
from order_service.server import app, get_engine, get_session_factory


@pytest.fixture
def db_engine(tmp_path):
    """Create a fresh SQLite database for one test.

    Returns:
        Engine: Engine bound to a temporary database file with the schema created.
    """
    engine = build_engine(f"sqlite:///{tmp_path / 'orders.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture
def order_engine(session_factory):
    return OrderEngine(session_factory)


@pytest.fixture
def make_product(session_factory):
    """Factory fixture that stores a product and returns its id."""

    def _make(name="Widget", category=3, price="10.00", stock=100):
        with session_factory() as session:
            product = Product(name=name, category=category, price=Decimal(price), stock=stock)
            session.add(product)
            session.commit()
            return product.id

    return _make


@pytest.fixture
def make_customer(session_factory):
    """Factory fixture that stores a customer and returns its id."""

    def _make(name="Acme Ltd", revenue="0.00"):
        with session_factory() as session:
            customer = Customer(name=name, revenue=Decimal(revenue))
            session.add(customer)
            session.commit()
            return customer.id

    return _make


@pytest.fixture
def fetch(session_factory):
    """Read helpers that always go through a new session."""

    class Fetch:
        @staticmethod
        def product(product_id):
            with session_factory() as session:
                return session.get(Product, product_id)

        @staticmethod
        def customer(customer_id):
            with session_factory() as session:
                return session.get(Customer, customer_id)

        @staticmethod
        def order(order_id):
            with session_factory() as session:
                return OrderRepository(session).find_order(order_id)

        @staticmethod
        def count(model):
            with session_factory() as session:
                return session.query(model).count()

    return Fetch()


@pytest.fixture
def test_client(session_factory, db_engine):
    """Create a test client wired to the temporary database."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_engine] = lambda: db_engine
    yield TestClient(app)
    app.dependency_overrides.clear()
