import logging
import threading
from copy import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from companydir.core.company import Company
from companydir.core.exceptions import (
    CorruptionError,
    DecodeError,
    DuplicateNameError,
    StoreClosedError,
)
from .codec import RowCodec
from .disk import ByteStore, FileByteStore
from .index import CompanyIndex

logger = logging.getLogger(__name__)


@dataclass
class StoreStats:
    rows_read: int = 0
    rows_written: int = 0
    rows_relocated: int = 0
    truncations: int = 0
    index_rebuilds: int = 0


class CompanyStore:
    """
    Company directory persisted as fixed-width rows in a single byte store.

    Rows are packed from offset 0 with no gaps, so the store always holds
    exactly len(index) * RECORD_SIZE bytes and the row of every live record
    sits at one of the offsets 0, RECORD_SIZE, 2 * RECORD_SIZE, ...

    Key Design Decisions:
    1. **In-memory index**: INN and name map straight to row offsets, so
       updates and deletes touch only the rows involved
    2. **Update in place**: re-adding an existing INN overwrites its row
    3. **Swap-with-last delete**: the last row is copied over the deleted
       one and the file is truncated by one row, so a delete costs the same
       whatever the file size; record order is not preserved
    4. **Full scan on open**: the index is always rebuilt from the rows
       already on disk

    Concurrency:
    A single lock wraps the whole body of every public operation, close()
    included. Delete moves another record's row, so no finer-grained
    locking is safe.
    """

    def __init__(self, byte_store: ByteStore, codec: Optional[RowCodec] = None,
                 sync_writes: bool = False):
        """
        Wrap an open byte store and index the rows it already contains.

        Args:
            byte_store: Storage for the rows; the store takes ownership of it
            codec: Row codec, defaults to RowCodec()
            sync_writes: fsync after every mutation instead of only flushing

        Raises:
            DecodeError: If an existing row cannot be decoded
            CorruptionError: If the existing data is not a valid row sequence
            StorageError: If the byte store fails
        """
        self._byte_store = byte_store
        self._codec = codec or RowCodec()
        self._record_size = self._codec.record_size
        self._sync_writes = sync_writes

        self._index = CompanyIndex()
        self._shared_names: set[str] = set()
        self._lock = threading.Lock()
        self._closed = False
        self.stats = StoreStats()

        with self._lock:
            self._rebuild_index()

    @classmethod
    def open(cls, file_path: Union[str, Path], truncate: bool = False,
             sync_writes: bool = False) -> 'CompanyStore':
        """
        Open a file-backed store, creating the file if it does not exist.

        Args:
            file_path: Path of the data file
            truncate: Discard any existing contents (fresh or test instances)
            sync_writes: fsync after every mutation
        """
        byte_store = FileByteStore(file_path, truncate=truncate)
        try:
            store = cls(byte_store, sync_writes=sync_writes)
        except Exception:
            byte_store.close()
            raise

        logger.info("Opened company store %s with %d companies",
                    file_path, len(store._index))
        return store

    def add(self, company: Company) -> None:
        """
        Insert a company, or update it in place if its INN is already stored.

        Raises:
            ValidationError: If the record violates the layout rules
            DuplicateNameError: If the name belongs to a different company
            StoreClosedError: If the store has been closed
            StorageError: If the byte store fails
        """
        with self._lock:
            self._check_open()
            row = self._codec.encode(company)
            # Keys are indexed as they read back, without trailing spaces.
            company = self._codec.decode_row(row)

            offset = self._index.by_inn.get(company.inn)
            previous = self._read_company(offset) if offset is not None else None
            renamed = previous is None or previous.name != company.name

            if renamed and company.name:
                name_offset = self._index.by_name.get(company.name)
                if name_offset is not None and name_offset != offset:
                    raise DuplicateNameError(
                        f"company name {company.name!r} is already in use")

            if previous is not None:
                self._write_row(offset, row)
                self._commit()

                if renamed:
                    self._index.remove_name(previous.name, offset)
                    self._index.put(company.inn, company.name, offset)
                    self._rescan_if_shared(previous.name)
                logger.debug("Updated company %s at offset %d", company.inn, offset)
                return

            offset = self._record_size * len(self._index)
            self._write_row(offset, row)
            self._commit()

            self._index.put(company.inn, company.name, offset)
            logger.debug("Appended company %s at offset %d", company.inn, offset)

    def delete(self, inn: Optional[str] = None, name: Optional[str] = None) -> None:
        """
        Delete a company by INN, or by name when no INN is given.

        The last row is moved into the freed slot and the file shrinks by
        one row.

        Raises:
            MissingKeyError: If neither key is supplied
            NotFoundError: If the key is not stored
            StoreClosedError: If the store has been closed
            StorageError: If the byte store fails
        """
        with self._lock:
            self._check_open()
            offset = self._index.lookup(inn=inn, name=name)
            target = self._read_company(offset)

            file_size = self._byte_store.size()
            if file_size != len(self._index) * self._record_size:
                raise CorruptionError(
                    f"file holds {file_size} bytes but {len(self._index)} "
                    f"companies are indexed")

            last_offset = file_size - self._record_size
            last = None
            if offset != last_offset:
                last_row = self._read_row(last_offset)
                last = self._codec.decode_row(last_row)
                self._write_row(offset, last_row)
                self.stats.rows_relocated += 1
                logger.debug("Moved company %s from offset %d to %d",
                             last.inn, last_offset, offset)

            self._byte_store.truncate(last_offset)
            self.stats.truncations += 1
            self._commit()

            self._index.remove(target.inn, target.name, offset)
            if last is not None:
                self._index.remove(last.inn, last.name, last_offset)
                self._index.put(last.inn, last.name, offset)
                self._rescan_if_shared(target.name, last.name)
            else:
                self._rescan_if_shared(target.name)
            logger.debug("Deleted company %s from offset %d", target.inn, offset)

    def get(self, inn: Optional[str] = None, name: Optional[str] = None) -> Company:
        """
        Fetch one company by INN, or by name when no INN is given.

        Raises:
            MissingKeyError: If neither key is supplied
            NotFoundError: If the key is not stored
        """
        with self._lock:
            self._check_open()
            offset = self._index.lookup(inn=inn, name=name)
            return self._read_company(offset)

    def list(self) -> list[Company]:
        """
        Return every company in file order.

        After deletes the order is the swap order, not insertion order.
        Any undecodable row aborts the whole listing.

        Raises:
            DecodeError: If a row cannot be decoded
            StorageError: If the byte store fails
        """
        with self._lock:
            self._check_open()
            file_size = self._byte_store.size()
            if file_size % self._record_size:
                raise CorruptionError(
                    f"file size {file_size} is not a multiple of {self._record_size}")

            companies = []
            self._byte_store.seek(0)
            while True:
                row = self._byte_store.read(self._record_size)
                if not row:
                    break
                self.stats.rows_read += 1
                companies.append(self._codec.decode_row(row))
            return companies

    def rebuild_index(self) -> None:
        """Discard the in-memory index and rebuild it from a full file scan."""
        with self._lock:
            self._check_open()
            self._rebuild_index()

    def scan_index(self) -> CompanyIndex:
        """Build an index from the file contents without installing it."""
        with self._lock:
            self._check_open()
            index, _, _ = self._scan()
            return index

    def is_consistent(self) -> bool:
        """Return True if the live index matches a fresh scan of the file."""
        with self._lock:
            self._check_open()
            try:
                index, leftover, _ = self._scan()
            except DecodeError:
                return False
            return leftover is None and index == self._index

    def close(self) -> None:
        """
        Flush, sync and close the byte store.

        Waits for any in-flight operation to finish. Closing twice is a no-op.
        """
        with self._lock:
            if self._closed:
                return
            try:
                self._byte_store.flush()
                self._byte_store.sync()
            finally:
                self._closed = True
                self._byte_store.close()
            logger.info("Closed company store with %d companies", len(self._index))

    @property
    def closed(self) -> bool:
        return self._closed

    def get_stats(self) -> StoreStats:
        """Get I/O statistics for monitoring"""
        with self._lock:
            return copy(self.stats)

    def __len__(self) -> int:
        with self._lock:
            return len(self._index)

    def __enter__(self) -> 'CompanyStore':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise StoreClosedError("company store is closed")

    def _read_row(self, offset: int) -> bytes:
        self._byte_store.seek(offset)
        row = self._byte_store.read(self._record_size)
        if len(row) != self._record_size:
            raise DecodeError(
                f"short row at offset {offset}: {len(row)} of {self._record_size} bytes")
        self.stats.rows_read += 1
        return row

    def _read_company(self, offset: int) -> Company:
        return self._codec.decode_row(self._read_row(offset))

    def _write_row(self, offset: int, row: bytes) -> None:
        self._byte_store.seek(offset)
        self._byte_store.write(row)
        self.stats.rows_written += 1

    def _commit(self) -> None:
        if self._sync_writes:
            self._byte_store.sync()
        else:
            self._byte_store.flush()

    def _scan(self) -> tuple[CompanyIndex, Optional[int], set[str]]:
        """
        Index every row from offset 0 to end of file.

        Returns:
            The index, the offset of a trailing row left behind by an
            interrupted delete (None if there is none), and the names held
            by more than one row
        """
        file_size = self._byte_store.size()
        if file_size % self._record_size:
            raise CorruptionError(
                f"file size {file_size} is not a multiple of {self._record_size}")

        index = CompanyIndex()
        shared_names = set()
        last_offset = file_size - self._record_size

        self._byte_store.seek(0)
        for offset in range(0, file_size, self._record_size):
            row = self._byte_store.read(self._record_size)
            self.stats.rows_read += 1
            company = self._codec.decode_row(row)

            if company.inn in index:
                earlier = index.by_inn[company.inn]
                # A delete that moved the last row but never truncated leaves
                # an identical copy of that row at the end of the file.
                if offset == last_offset and self._read_row(earlier) == row:
                    return index, offset, shared_names
                raise CorruptionError(
                    f"inn {company.inn} stored at offsets {earlier} and {offset}")

            if company.name in index.by_name:
                logger.warning("Company name %r stored at offsets %d and %d; "
                               "the later row wins name lookups",
                               company.name, index.by_name[company.name], offset)
                shared_names.add(company.name)

            index.put(company.inn, company.name, offset)

        return index, None, shared_names

    def _rebuild_index(self) -> None:
        index, leftover, shared_names = self._scan()
        if leftover is not None:
            logger.warning("Dropping duplicate trailing row at offset %d left by "
                           "an interrupted delete", leftover)
            self._byte_store.truncate(leftover)
            self.stats.truncations += 1
            self._commit()

        self._index = index
        self._shared_names = shared_names
        self.stats.index_rebuilds += 1
        logger.info("Rebuilt index with %d companies", len(index))

    def _rescan_if_shared(self, *names: str) -> None:
        # Only files written before names were unique can hold a name twice.
        # One offset per name cannot follow such a name through swaps, so
        # touching one re-derives the index from the file.
        if self._shared_names.intersection(names):
            self._rebuild_index()
