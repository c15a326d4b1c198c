"""Error taxonomy raised by the order and discount engines."""


class OrderServiceError(Exception):
    """Base class for failures reported to callers of the service."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NotFound(OrderServiceError):
    """A referenced customer, product or order does not exist."""


class ValidationFailure(OrderServiceError):
    """Malformed input, insufficient stock, or an entity still in use."""


class PersistenceFailure(OrderServiceError):
    """The backing store rejected a read or write."""
