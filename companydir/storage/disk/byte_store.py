import io
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from .exceptions import StorageError


class ByteStore(ABC):
    """
    Random-access byte storage backing a company store.

    Every capability the store relies on is declared up front, so any
    implementation handed to the store supports seeking, reading, writing,
    truncating and durable syncing without runtime type checks.
    """

    @abstractmethod
    def seek(self, offset: int) -> int:
        """
        Move to an absolute byte offset.

        Returns:
            The new position
        """
        pass

    @abstractmethod
    def read(self, size: int) -> bytes:
        """
        Read up to `size` bytes from the current position.

        Returns fewer bytes only at end of data.
        """
        pass

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Write all of `data` at the current position."""
        pass

    @abstractmethod
    def truncate(self, size: int) -> None:
        """Cut the data down to exactly `size` bytes."""
        pass

    @abstractmethod
    def flush(self) -> None:
        """Push buffered writes to the operating system."""
        pass

    @abstractmethod
    def sync(self) -> None:
        """Flush and force the data onto durable storage."""
        pass

    @abstractmethod
    def size(self) -> int:
        """Return the current length of the data in bytes."""
        pass

    @abstractmethod
    def close(self) -> None:
        pass


class FileByteStore(ByteStore):
    """
    ByteStore over a regular file opened in binary read-write mode.

    OS-level failures are reported as StorageError.
    """

    def __init__(self, file_path: Union[str, Path], truncate: bool = False):
        self.file_path = Path(file_path)

        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            if not self.file_path.exists():
                self.file_path.touch()
            self._file = open(self.file_path, 'r+b')
            if truncate:
                self._file.truncate(0)
        except (IOError, OSError) as e:
            raise StorageError(f"Failed to open {self.file_path}: {e}") from e

    def seek(self, offset: int) -> int:
        try:
            return self._file.seek(offset)
        except (IOError, OSError, ValueError) as e:
            raise StorageError(
                f"Failed to seek to offset {offset} in {self.file_path}: {e}") from e

    def read(self, size: int) -> bytes:
        try:
            return self._file.read(size)
        except (IOError, OSError, ValueError) as e:
            raise StorageError(
                f"Failed to read {size} bytes from {self.file_path}: {e}") from e

    def write(self, data: bytes) -> None:
        try:
            self._file.write(data)
        except (IOError, OSError, ValueError) as e:
            raise StorageError(
                f"Failed to write {len(data)} bytes to {self.file_path}: {e}") from e

    def truncate(self, size: int) -> None:
        try:
            self._file.flush()
            self._file.truncate(size)
        except (IOError, OSError, ValueError) as e:
            raise StorageError(
                f"Failed to truncate {self.file_path} to {size} bytes: {e}") from e

    def flush(self) -> None:
        try:
            self._file.flush()
        except (IOError, OSError, ValueError) as e:
            raise StorageError(f"Failed to flush {self.file_path}: {e}") from e

    def sync(self) -> None:
        try:
            self._file.flush()  # Flush to OS buffers
            os.fsync(self._file.fileno())  # Force OS to write to disk
        except (IOError, OSError, ValueError) as e:
            raise StorageError(f"Failed to sync {self.file_path}: {e}") from e

    def size(self) -> int:
        try:
            self._file.flush()
            return os.fstat(self._file.fileno()).st_size
        except (IOError, OSError, ValueError) as e:
            raise StorageError(f"Failed to stat {self.file_path}: {e}") from e

    def close(self) -> None:
        try:
            self._file.close()
        except (IOError, OSError) as e:
            raise StorageError(f"Failed to close {self.file_path}: {e}") from e

    def __repr__(self) -> str:
        return f"FileByteStore({str(self.file_path)!r})"


class MemoryByteStore(ByteStore):
    """
    ByteStore kept entirely in memory.

    Useful for tests and for embedding a throwaway directory; nothing
    survives close().
    """

    def __init__(self, initial: bytes = b""):
        self._buffer = io.BytesIO(initial)

    def seek(self, offset: int) -> int:
        try:
            return self._buffer.seek(offset)
        except ValueError as e:
            raise StorageError(f"Failed to seek to offset {offset}: {e}") from e

    def read(self, size: int) -> bytes:
        try:
            return self._buffer.read(size)
        except ValueError as e:
            raise StorageError(f"Failed to read {size} bytes: {e}") from e

    def write(self, data: bytes) -> None:
        try:
            self._buffer.write(data)
        except ValueError as e:
            raise StorageError(f"Failed to write {len(data)} bytes: {e}") from e

    def truncate(self, size: int) -> None:
        try:
            self._buffer.truncate(size)
        except ValueError as e:
            raise StorageError(f"Failed to truncate to {size} bytes: {e}") from e

    def flush(self) -> None:
        pass

    def sync(self) -> None:
        pass

    def size(self) -> int:
        try:
            with self._buffer.getbuffer() as view:
                return view.nbytes
        except ValueError as e:
            raise StorageError(f"Failed to read buffer size: {e}") from e

    def getvalue(self) -> bytes:
        """Return a copy of the whole buffer."""
        return self._buffer.getvalue()

    def close(self) -> None:
        self._buffer.close()
