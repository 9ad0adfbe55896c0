"""Domain-level exceptions.

All ledger rule violations are expressed as subclasses of DomainException
so callers (the CLI, a web handler) can catch them uniformly and display
user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InsufficientStockError(DomainException):
    """More units were requested than the item's live lots hold."""

    def __init__(self, item_name: str, requested: int, available: int) -> None:
        self.item_name = item_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {item_name} "
            f"(need {requested}, have {available} available)"
        )


class LotInUseError(DomainException):
    """A purchase cannot be deleted because one of its lots was drawn from."""

    def __init__(self, item_name: str) -> None:
        self.item_name = item_name
        super().__init__(
            f"Cannot delete purchase: stock of {item_name} from this "
            f"purchase has already been used"
        )


class ConcurrencyConflictError(DomainException):
    """A transaction read data that another writer changed before commit."""
