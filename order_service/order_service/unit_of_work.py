"""Transaction boundary shared by every step of an order pipeline."""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import PersistenceFailure
from .logger import logger
from .repositories import (
    CatalogRepository,
    CustomerRepository,
    DiscountLedger,
    OrderItemRepository,
    OrderRepository,
)


class UnitOfWork:
    """One database transaction and the repositories bound to it.

    Used as a context manager. Work is kept only when :meth:`commit` is
    called explicitly; leaving the block without a commit, or with an
    exception, rolls everything back.

    Example:
        with UnitOfWork(SessionLocal) as uow:
            customer = uow.customers.find_customer(1)
            ...
            uow.commit()
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self.session: Optional[Session] = None
        self._committed = False

    def __enter__(self) -> "UnitOfWork":
        self.session = self._session_factory()
        self._committed = False
        self.catalog = CatalogRepository(self.session)
        self.customers = CustomerRepository(self.session)
        self.orders = OrderRepository(self.session)
        self.order_items = OrderItemRepository(self.session)
        self.ledger = DiscountLedger(self.session)
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        try:
            if not self._committed:
                self.rollback()
        finally:
            self.session.close()

    def commit(self) -> None:
        """Commit the transaction.

        Raises:
            PersistenceFailure: If the store rejects the commit
        """
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Commit failed, rolling back: {e}")
            self.session.rollback()
            raise PersistenceFailure(f"Could not persist changes: {e}") from e
        self._committed = True

    def rollback(self) -> None:
        self.session.rollback()
