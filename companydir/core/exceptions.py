"""Custom exceptions for the company store."""


class StoreError(Exception):
    """Base exception for company store errors."""
    pass


class ValidationError(StoreError):
    """Raised when a company record violates the field size rules."""
    pass


class DuplicateNameError(ValidationError):
    """Raised when a company name is already bound to another record."""
    pass


class MissingKeyError(StoreError):
    """Raised when neither an INN nor a name was supplied for a lookup."""
    pass


class NotFoundError(StoreError):
    """Raised when the supplied key is not present in the index."""
    pass


class DecodeError(StoreError):
    """Raised when a stored row cannot be turned back into a record."""
    pass


class CorruptionError(DecodeError):
    """Raised when the data file as a whole is inconsistent."""
    pass


class StoreClosedError(StoreError):
    """Raised when an operation is attempted on a closed store."""
    pass


class InvalidRowError(DecodeError, ValidationError):
    """Raised when a stored row decodes but breaks the field size rules."""
    pass
