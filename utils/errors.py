"""
utils/errors.py
---------------
Exception taxonomy shared by every layer.

Callers (the HTTP layer) translate these into protocol responses:
    ValidationError     -> 400
    NotFoundError       -> 404
    OperationCancelled  -> 499 / 504
    StorageError        -> 500
    CorruptRowError     -> 500
"""


class CatalogError(Exception):
    """Base class for every error raised by the catalog backend."""


class ValidationError(CatalogError):
    """A payload broke a domain rule. Raised before anything is written."""


class NotFoundError(CatalogError):
    """A get or delete targeted an identifier with no matching row."""


class StorageError(CatalogError):
    """The database call itself failed (network, constraint, serialization)."""


class CorruptRowError(CatalogError):
    """A row read back from storage failed response validation."""


class OperationCancelled(CatalogError):
    """The caller's QueryContext was cancelled or ran past its deadline."""
