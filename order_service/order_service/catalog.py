"""Product and customer maintenance."""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .errors import PersistenceFailure, ValidationFailure
from .logger import logger
from .models import Customer, Product
from .schemas import CustomerCreate, CustomerPage, CustomerView, ProductCreate, ProductPage, ProductView
from .unit_of_work import UnitOfWork
from .views import check_page, format_money


def product_view(product: Product) -> ProductView:
    return ProductView(
        id=product.id,
        name=product.name,
        category=product.category,
        price=format_money(product.price),
        stock=product.stock,
    )


def customer_view(customer: Customer) -> CustomerView:
    return CustomerView(
        id=customer.id,
        name=customer.name,
        since=customer.since,
        revenue=format_money(customer.revenue),
    )


class CatalogService:
    """Create, list and delete products and customers."""

    def __init__(self, session_factory: sessionmaker, max_page_size: int = 100):
        self.session_factory = session_factory
        self.max_page_size = max_page_size

    def create_product(self, data: ProductCreate) -> Product:
        try:
            with UnitOfWork(self.session_factory) as uow:
                product = uow.catalog.create_product(
                    name=data.name, category=data.category, price=data.price, stock=data.stock
                )
                uow.commit()
        except SQLAlchemyError as e:
            logger.error(f"Product creation failed: {e}")
            raise PersistenceFailure(f"Product could not be created: {e}") from e
        logger.info(f"Product {product.id} '{product.name}' created (category {product.category}, stock {product.stock})")
        return product

    def list_products(self, page: int, page_size: int) -> ProductPage:
        check_page(page, page_size, self.max_page_size)
        with UnitOfWork(self.session_factory) as uow:
            result = uow.catalog.paginate(page, page_size)
            return ProductPage(
                items=[product_view(p) for p in result.items],
                page=result.page,
                page_size=result.page_size,
                total=result.total,
                pages=result.pages,
            )

    def delete_product(self, product_id: int) -> bool:
        """Delete a product that no order refers to.

        Raises:
            ValidationFailure: If an order line still references the product
        """
        with UnitOfWork(self.session_factory) as uow:
            if uow.catalog.is_referenced(product_id):
                raise ValidationFailure(f"Product {product_id} is referenced by existing orders")
            if not uow.catalog.delete_product(product_id):
                logger.error(f"Product delete failed: product {product_id} not found")
                return False
            uow.commit()
        logger.info(f"Product {product_id} deleted")
        return True

    def create_customer(self, data: CustomerCreate) -> Customer:
        try:
            with UnitOfWork(self.session_factory) as uow:
                customer = uow.customers.create_customer(name=data.name, since=data.since, revenue=data.revenue)
                uow.commit()
        except SQLAlchemyError as e:
            logger.error(f"Customer creation failed: {e}")
            raise PersistenceFailure(f"Customer could not be created: {e}") from e
        logger.info(f"Customer {customer.id} '{customer.name}' created")
        return customer

    def list_customers(self, page: int, page_size: int) -> CustomerPage:
        check_page(page, page_size, self.max_page_size)
        with UnitOfWork(self.session_factory) as uow:
            result = uow.customers.paginate(page, page_size)
            return CustomerPage(
                items=[customer_view(c) for c in result.items],
                page=result.page,
                page_size=result.page_size,
                total=result.total,
                pages=result.pages,
            )

    def delete_customer(self, customer_id: int) -> bool:
        """Delete a customer without orders.

        Raises:
            ValidationFailure: If the customer still has orders
        """
        with UnitOfWork(self.session_factory) as uow:
            if uow.customers.is_referenced(customer_id):
                raise ValidationFailure(f"Customer {customer_id} has existing orders")
            if not uow.customers.delete_customer(customer_id):
                logger.error(f"Customer delete failed: customer {customer_id} not found")
                return False
            uow.commit()
        logger.info(f"Customer {customer_id} deleted")
        return True
