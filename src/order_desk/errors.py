"""Error kinds raised by the CRUD layer.

The shell catches `OrderDeskError` and prints only the message.
"""


class OrderDeskError(Exception):
    pass


class ValidationError(OrderDeskError, ValueError):
    """Malformed or missing input (bad id, empty field, bad quantity)."""


class NotFoundError(OrderDeskError):
    """A referenced customer, product, order, order detail or payment does not exist."""


class ConflictError(OrderDeskError):
    """A uniqueness or business-state rule was violated."""


class StoreError(OrderDeskError):
    """The database failed for a reason unrelated to business rules."""
