"""
Storage layer for the company directory.

This package contains the fixed-width row codec, the in-memory key index,
the byte store abstraction and the company store built on top of them.
"""

from .codec import RowCodec, RECORD_SIZE, FIELD_COUNT
from .index import CompanyIndex
from .disk import ByteStore, FileByteStore, MemoryByteStore, StorageError
from .company_store import CompanyStore, StoreStats

__all__ = [
    'RowCodec',
    'RECORD_SIZE',
    'FIELD_COUNT',
    'CompanyIndex',
    'ByteStore',
    'FileByteStore',
    'MemoryByteStore',
    'StorageError',
    'CompanyStore',
    'StoreStats',
]
