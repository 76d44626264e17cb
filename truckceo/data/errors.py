"""Error types raised by the data-access layer."""


class TruckCeoError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(TruckCeoError):
    """No business context or gateway is bound to the caller."""


class DocumentNotFoundError(TruckCeoError):
    """A merge-update targeted a document that does not exist."""

    def __init__(self, path: str):
        super().__init__(f"No document to update: {path}")
        self.path = path


class StoreOperationError(TruckCeoError):
    """The underlying database rejected or failed an operation."""


class InvalidPathError(TruckCeoError, ValueError):
    """A document or collection path has the wrong shape."""
