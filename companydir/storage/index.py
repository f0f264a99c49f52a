from typing import Optional

from companydir.core.exceptions import MissingKeyError, NotFoundError


class CompanyIndex:
    """
    In-memory index from company keys to row offsets in the data file.

    Two mappings are kept side by side:
    - by_inn: INN -> byte offset of the row
    - by_name: company name -> byte offset of the row

    The index does not check that the two mappings agree; the store is
    responsible for pointing both keys of a live record at the same offset.
    Empty names are never indexed.
    """

    def __init__(self):
        self.by_inn: dict[str, int] = {}
        self.by_name: dict[str, int] = {}

    def lookup(self, inn: Optional[str] = None, name: Optional[str] = None) -> int:
        """
        Find the offset of a record.

        The INN takes precedence; the name is consulted only when no INN
        is supplied.

        Raises:
            MissingKeyError: If neither key is supplied
            NotFoundError: If the supplied key is not indexed
        """
        if inn:
            offset = self.by_inn.get(inn)
            key = f"inn {inn!r}"
        elif name:
            offset = self.by_name.get(name)
            key = f"name {name!r}"
        else:
            raise MissingKeyError("missing inn/name")

        if offset is None:
            raise NotFoundError(f"company with {key} not found")
        return offset

    def put(self, inn: str, name: str, offset: int) -> None:
        self.by_inn[inn] = offset
        if name:
            self.by_name[name] = offset

    def remove(self, inn: str, name: str, offset: int) -> None:
        self.by_inn.pop(inn, None)
        self.remove_name(name, offset)

    def remove_name(self, name: str, offset: int) -> None:
        """Drop a name entry, but only while it still points at `offset`."""
        if name and self.by_name.get(name) == offset:
            del self.by_name[name]

    def offsets(self) -> set[int]:
        """Return the set of offsets referenced by the primary mapping."""
        return set(self.by_inn.values())

    def clear(self) -> None:
        self.by_inn.clear()
        self.by_name.clear()

    def copy(self) -> 'CompanyIndex':
        clone = CompanyIndex()
        clone.by_inn = dict(self.by_inn)
        clone.by_name = dict(self.by_name)
        return clone

    def __len__(self) -> int:
        return len(self.by_inn)

    def __contains__(self, inn: object) -> bool:
        return inn in self.by_inn

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompanyIndex):
            return False
        return self.by_inn == other.by_inn and self.by_name == other.by_name

    def __repr__(self) -> str:
        return f"CompanyIndex(records={len(self.by_inn)}, names={len(self.by_name)})"
