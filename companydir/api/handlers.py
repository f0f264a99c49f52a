import logging
from dataclasses import dataclass
from typing import Any, Optional

from companydir.core.company import Company
from companydir.core.exceptions import (
    DecodeError,
    MissingKeyError,
    NotFoundError,
    StoreClosedError,
    ValidationError,
)
from companydir.storage import CompanyStore, StorageError

logger = logging.getLogger(__name__)


@dataclass
class Response:
    """Outcome of a handler: a status and a JSON-serializable payload, if any."""
    status: int
    payload: Any = None


class InvalidRequest(Exception):
    """Raised when a request body cannot be turned into store arguments."""
    pass


class CompanyHandlers:
    """
    Translates decoded JSON requests into CompanyStore calls.

    Caller mistakes (invalid records, unknown keys) become 400 responses;
    a corrupt file or failing disk becomes a 500. The store is injected so
    tests can hand in any instance.
    """

    def __init__(self, store: CompanyStore):
        self.store = store

    def list_companies(self) -> Response:
        return self._dispatch(self._list)

    def add_company(self, data: Any) -> Response:
        return self._dispatch(self._add, data)

    def delete_company(self, data: Any) -> Response:
        return self._dispatch(self._delete, data)

    def _list(self) -> Response:
        companies = self.store.list()
        return Response(200, [company.to_dict() for company in companies])

    def _add(self, data: Any) -> Response:
        self.store.add(Company.from_dict(data))
        return Response(200)

    def _delete(self, data: Any) -> Response:
        if not isinstance(data, dict):
            raise InvalidRequest(f"request must be an object, got {type(data).__name__}")
        self.store.delete(inn=optional_str(data, 'inn'), name=optional_str(data, 'name'))
        return Response(200)

    def _dispatch(self, handler, *args) -> Response:
        try:
            return handler(*args)
        except DecodeError as e:
            # Checked first: InvalidRowError is also a ValidationError.
            return self._error(500, e)
        except (InvalidRequest, ValidationError, MissingKeyError, NotFoundError) as e:
            return self._error(400, e)
        except (StoreClosedError, StorageError) as e:
            return self._error(500, e)

    @staticmethod
    def _error(status: int, error: Exception) -> Response:
        if status >= 500:
            logger.warning("Request failed with %s: %s", type(error).__name__, error)
        else:
            logger.debug("Rejected request: %s", error)
        return Response(status, {"error": str(error)})


def optional_str(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidRequest(f"{key} must be a string, got {type(value).__name__}")
    return value
