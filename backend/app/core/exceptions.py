"""Domain errors raised by repositories and services, mapped to HTTP by the routes."""


class DomainError(Exception):
    """Base class for business-rule failures."""


class NotFoundError(DomainError):
    pass


class DuplicateError(DomainError):
    pass


class InsufficientStockError(DomainError):
    def __init__(self, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient inventory at source location (available {available}, requested {requested})"
        )


class TransferError(DomainError):
    pass
