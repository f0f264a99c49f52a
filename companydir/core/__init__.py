from .exceptions import (
    StoreError,
    ValidationError,
    DuplicateNameError,
    MissingKeyError,
    NotFoundError,
    DecodeError,
    CorruptionError,
    StoreClosedError,
    InvalidRowError,
)
from .company import Company, KEY_SIZE, MAX_FIELD_SIZE

__all__ = [
    "StoreError",
    "ValidationError",
    "DuplicateNameError",
    "MissingKeyError",
    "NotFoundError",
    "DecodeError",
    "CorruptionError",
    "StoreClosedError",
    "InvalidRowError",
    "Company",
    "KEY_SIZE",
    "MAX_FIELD_SIZE",
]
