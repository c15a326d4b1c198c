"""Order creation and deletion."""

from collections import defaultdict
from decimal import Decimal

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .discounts import DiscountEngine
from .errors import NotFound, PersistenceFailure, ValidationFailure
from .logger import logger
from .models import ZERO, Customer, Order, Product
from .schemas import OrderCreated, OrderCreateRequest
from .unit_of_work import UnitOfWork


class OrderEngine:
    """Runs the order pipeline: validate, create items, discount, post revenue.

    Every step of one order shares a single :class:`UnitOfWork`; nothing is
    visible to other sessions until the final commit.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def create_order(self, request: OrderCreateRequest | dict) -> OrderCreated:
        """Create an order, debit stock, apply discounts and post customer revenue.

        Args:
            request: The order request, or a raw dict with the same shape

        Returns:
            OrderCreated: The persisted order's id and totals

        Raises:
            NotFound: If the customer or a product does not exist
            ValidationFailure: If the request is malformed or stock is insufficient
            PersistenceFailure: If the store rejects a write
        """
        if not isinstance(request, OrderCreateRequest):
            try:
                request = OrderCreateRequest.model_validate(request)
            except ValidationError as e:
                raise ValidationFailure(f"Invalid order request: {e.errors()[0]['msg']}") from e

        logger.info(f"Creating order for customer {request.customer_id} with {len(request.items)} item(s)")
        try:
            with UnitOfWork(self.session_factory) as uow:
                customer = self._validate_customer(uow, request.customer_id)
                products = self._validate_stock(uow, request)
                order = uow.orders.create_order(customer_id=customer.id, total=ZERO)
                self._create_items_and_debit_stock(uow, order, request, products)
                DiscountEngine(uow.ledger).apply_discounts(order)
                self._post_revenue(uow, order, customer)
                uow.commit()
        except (NotFound, ValidationFailure, PersistenceFailure) as e:
            logger.bind(
                customer_id=request.customer_id,
                items=[item.model_dump() for item in request.items],
            ).error(f"Order creation failed: {e.reason}")
            raise
        except SQLAlchemyError as e:
            logger.bind(customer_id=request.customer_id).error(f"Order creation failed on the store: {e}")
            raise PersistenceFailure(f"Order could not be created: {e}") from e

        logger.info(
            f"Order {order.id} created: total={order.total} "
            f"discount={order.total_discount} net={net_payable(order)}"
        )
        return OrderCreated(
            order_id=order.id,
            total=order.total,
            total_discount=order.total_discount,
            discounted_total=order.discounted_total,
        )

    def delete_order(self, order_id: int) -> bool:
        """Hard-delete an order with its items and ledger.

        Stock and customer revenue are left untouched.

        Returns:
            bool: True if the order existed
        """
        with UnitOfWork(self.session_factory) as uow:
            deleted = uow.orders.delete_order(order_id)
            if not deleted:
                logger.error(f"Order delete failed: order {order_id} not found")
                return False
            uow.commit()
        logger.info(f"Order {order_id} deleted")
        return True

    @staticmethod
    def _validate_customer(uow: UnitOfWork, customer_id: int) -> Customer:
        customer = uow.customers.find_customer(customer_id)
        if customer is None:
            raise NotFound(f"Customer {customer_id} not found")
        return customer

    @staticmethod
    def _validate_stock(uow: UnitOfWork, request: OrderCreateRequest) -> dict[int, Product]:
        """Check every requested product covers the summed quantity.

        Rows are read with ``FOR UPDATE`` where the backend supports it; the
        debit itself is guarded again so a concurrent order cannot oversell.
        """
        requested: dict[int, int] = defaultdict(int)
        for item in request.items:
            requested[item.product_id] += item.quantity

        products = {}
        for product_id, quantity in requested.items():
            product = uow.catalog.find_product(product_id, lock=True)
            if product is None:
                raise NotFound(f"Product {product_id} not found")
            if product.stock < quantity:
                raise ValidationFailure(f"Insufficient stock for product '{product.name}'")
            products[product_id] = product
        return products

    @staticmethod
    def _create_items_and_debit_stock(
        uow: UnitOfWork, order: Order, request: OrderCreateRequest, products: dict[int, Product]
    ) -> None:
        for line in request.items:
            product = products[line.product_id]
            item_total = product.price * line.quantity
            order.total += item_total
            uow.order_items.create_item(
                order=order,
                product=product,
                quantity=line.quantity,
                unit_price=product.price,
                total=item_total,
            )
            if not uow.catalog.debit_stock(product, line.quantity):
                raise ValidationFailure(f"Insufficient stock for product '{product.name}'")
            logger.debug(f"Order {order.id}: {line.quantity}x product {product.id}, stock now {product.stock}")

        uow.orders.save_order(order)

    @staticmethod
    def _post_revenue(uow: UnitOfWork, order: Order, customer: Customer) -> None:
        uow.customers.add_revenue(customer, net_payable(order))


def net_payable(order: Order) -> Decimal:
    """What the customer pays: the discounted total once a discount applies, else the total."""
    return order.discounted_total if order.discounted_total > 0 else order.total
