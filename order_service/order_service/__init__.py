"""Order Service: orders, stock and the promotional discount ledger."""

__version__ = "0.1.0"
