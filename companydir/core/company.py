from dataclasses import dataclass, asdict, fields
from typing import Any

from .exceptions import ValidationError

KEY_SIZE = 12
MAX_FIELD_SIZE = 100

# Characters a delimited-text reader would treat specially.
FORBIDDEN_CHARACTERS = (',', '"', '\r', '\n')


@dataclass
class Company:
    """
    A single company in the directory.

    Fields:
    - inn: 12-digit taxpayer number, the primary key
    - name: company name, the secondary key
    - phone, address, individual: display-only, `individual` is the
      representative (director) of the company

    Every field except `inn` is limited to MAX_FIELD_SIZE bytes once
    encoded as UTF-8, so that each record fits a fixed-width row.
    """
    inn: str
    name: str = ""
    phone: str = ""
    address: str = ""
    individual: str = ""

    def validate(self) -> None:
        """
        Check the record against the fixed-width layout rules.

        Raises:
            ValidationError: If the INN is not exactly 12 digits, a field is
                too long, or a field contains a delimiter-breaking character
        """
        if not isinstance(self.inn, str) or len(self.inn) != KEY_SIZE:
            raise ValidationError(
                f"inn size should be {KEY_SIZE} numbers, got {self.inn!r}")
        if not (self.inn.isascii() and self.inn.isdigit()):
            raise ValidationError(f"inn should contain only digits, got {self.inn!r}")

        for name, value in self.non_key_fields():
            if not isinstance(value, str):
                raise ValidationError(
                    f"{name} should be a string, got {type(value).__name__}")
            try:
                size = len(value.encode('utf-8'))
            except UnicodeEncodeError as e:
                raise ValidationError(f"{name} cannot be encoded as UTF-8: {e}") from e
            if size > MAX_FIELD_SIZE:
                raise ValidationError(
                    f"{name} max size {MAX_FIELD_SIZE} exceeded: {size} bytes")

        for name, value in (('inn', self.inn),) + self.non_key_fields():
            for char in FORBIDDEN_CHARACTERS:
                if char in value:
                    raise ValidationError(f"{name} cannot contain {char!r}")

    def non_key_fields(self) -> tuple:
        """Return (field name, value) pairs for every field but the INN, in row order."""
        return (
            ('name', self.name),
            ('phone', self.phone),
            ('address', self.address),
            ('individual', self.individual),
        )

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Company':
        """
        Build a Company from a mapping such as a decoded JSON request.

        Missing fields become empty strings and unknown keys are ignored.
        Values are not validated here; that happens on write.
        """
        if not isinstance(data, dict):
            raise ValidationError(
                f"company must be an object, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        for key in known:
            values.setdefault(key, "")
        return cls(**values)
