from .byte_store import ByteStore, FileByteStore, MemoryByteStore
from .exceptions import StorageError

__all__ = ["ByteStore", "FileByteStore", "MemoryByteStore", "StorageError"]
