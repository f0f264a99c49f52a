from companydir.core.company import Company, KEY_SIZE, MAX_FIELD_SIZE
from companydir.core.exceptions import DecodeError, InvalidRowError, ValidationError

FIELD_COUNT = 5
FIELD_DELIMITER = b','
ROW_TERMINATOR = b'\n'
PADDING = b' '

# 12 (inn) + 4 * 100 (padded fields) + 4 delimiters + 1 terminator
RECORD_SIZE = KEY_SIZE + MAX_FIELD_SIZE * (FIELD_COUNT - 1) + FIELD_COUNT


class RowCodec:
    """
    Converts a Company to and from its fixed-width on-disk row.

    Row format (RECORD_SIZE = 417 bytes):
    - 12 bytes: INN, unpadded
    - 4 x 100 bytes: name, phone, address, individual, UTF-8 encoded and
      right-padded with spaces
    - fields separated by ',' and the row terminated by '\\n'

    The codec writes raw bytes and never quotes or escapes, so every row
    has the same length and a record's position in the file is simply
    index * RECORD_SIZE. Values that would need quoting are rejected by
    Company.validate() instead.

    Trailing spaces in a field are indistinguishable from padding and are
    stripped on decode.
    """

    record_size = RECORD_SIZE

    def encode(self, company: Company) -> bytes:
        """
        Encode a company as exactly RECORD_SIZE bytes.

        Raises:
            ValidationError: If the company violates the layout rules
        """
        company.validate()

        parts = [company.inn.encode('ascii')]
        for _, value in company.non_key_fields():
            parts.append(value.encode('utf-8').ljust(MAX_FIELD_SIZE, PADDING))

        row = FIELD_DELIMITER.join(parts) + ROW_TERMINATOR
        assert len(row) == RECORD_SIZE, f"Expected {RECORD_SIZE} bytes, got {len(row)}"
        return row

    def split(self, row: bytes) -> list[bytes]:
        """
        Split a raw row into its fields.

        Raises:
            DecodeError: If the row has the wrong size or no terminator
        """
        if not isinstance(row, (bytes, bytearray)):
            raise TypeError(f"Expected bytes or bytearray, got {type(row)}")

        if len(row) != RECORD_SIZE:
            raise DecodeError(
                f"row must be exactly {RECORD_SIZE} bytes, got {len(row)}")

        if row[-1:] != ROW_TERMINATOR:
            raise DecodeError("row is not terminated by a newline")

        return bytes(row[:-1]).split(FIELD_DELIMITER)

    def decode(self, fields: list[bytes]) -> Company:
        """
        Build a company from the fields of one row.

        Raises:
            DecodeError: If the field count is wrong or a field is not UTF-8
            InvalidRowError: If the decoded record violates the layout rules
                (it is both a DecodeError and a ValidationError)
        """
        if len(fields) != FIELD_COUNT:
            raise DecodeError(
                f"wrong number of fields {len(fields)}, expected {FIELD_COUNT}")

        try:
            values = [field.decode('utf-8') for field in fields]
        except UnicodeDecodeError as e:
            raise DecodeError(f"invalid UTF-8 data in row: {e}") from e

        company = Company(
            inn=values[0],
            name=values[1].rstrip(' '),
            phone=values[2].rstrip(' '),
            address=values[3].rstrip(' '),
            individual=values[4].rstrip(' '),
        )
        try:
            company.validate()
        except ValidationError as e:
            raise InvalidRowError(
                f"stored row for inn {values[0]!r} is invalid: {e}") from e
        return company

    def decode_row(self, row: bytes) -> Company:
        return self.decode(self.split(row))
