"""Persistence errors raised by DBStorage."""


class StoreError(Exception):
    """Unclassified persistence failure."""


class DuplicateKeyError(StoreError):
    """A unique constraint was violated."""


class RecordNotFoundError(StoreError):
    """The targeted row does not exist (or is not visible to the caller)."""
