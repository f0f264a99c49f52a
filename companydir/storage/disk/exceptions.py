class StorageError(Exception):
    """Raised when the underlying byte store fails to seek, read, write,
    truncate or sync"""
    pass
