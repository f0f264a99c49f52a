import pytest

from companydir.core import (
    Company,
    ValidationError,
    DuplicateNameError,
    DecodeError,
    CorruptionError,
    InvalidRowError,
    StoreError,
    MAX_FIELD_SIZE,
)


def make_company(**overrides) -> Company:
    values = dict(
        inn="123456789000",
        name="Name123456789000",
        phone="Phone123456789000",
        address="Address123456789000",
        individual="IndividualSomethingBigMore123456789000",
    )
    values.update(overrides)
    return Company(**values)


class TestCompanyValidation:
    """Tests for Company.validate()."""

    def test_valid_company(self):
        make_company().validate()

    def test_empty_display_fields_are_valid(self):
        Company(inn="000000000001").validate()

    def test_short_inn_raises_error(self):
        with pytest.raises(ValidationError, match="inn size should be 12"):
            make_company(inn="12345").validate()

    def test_long_inn_raises_error(self):
        with pytest.raises(ValidationError, match="inn size should be 12"):
            make_company(inn="1234567890123").validate()

    def test_non_numeric_inn_raises_error(self):
        with pytest.raises(ValidationError, match="only digits"):
            make_company(inn="12345678900A").validate()

    def test_non_ascii_digits_rejected(self):
        # Arabic-Indic digits are str.isdigit() but not ASCII
        with pytest.raises(ValidationError):
            make_company(inn="١" * 12).validate()

    def test_field_at_max_size_is_valid(self):
        make_company(address="a" * MAX_FIELD_SIZE).validate()

    def test_oversized_field_raises_error(self):
        with pytest.raises(ValidationError, match="address max size 100 exceeded"):
            make_company(address="a" * (MAX_FIELD_SIZE + 1)).validate()

    def test_size_is_counted_in_utf8_bytes(self):
        # Cyrillic letters take two bytes each in UTF-8
        make_company(name="Ж" * 50).validate()
        with pytest.raises(ValidationError, match="name max size"):
            make_company(name="Ж" * 51).validate()

    @pytest.mark.parametrize("char", [",", '"', "\n", "\r"])
    def test_delimiter_breaking_characters_rejected(self, char):
        with pytest.raises(ValidationError, match="cannot contain"):
            make_company(phone=f"+7{char}999").validate()

    def test_non_string_field_rejected(self):
        with pytest.raises(ValidationError, match="phone should be a string"):
            make_company(phone=79990001122).validate()

    def test_non_string_inn_rejected(self):
        with pytest.raises(ValidationError):
            make_company(inn=123456789000).validate()

    def test_unencodable_field_chains_cause(self):
        # A lone surrogate cannot be encoded as UTF-8
        with pytest.raises(ValidationError, match="cannot be encoded") as excinfo:
            make_company(name="\udcff").validate()
        assert isinstance(excinfo.value.__cause__, UnicodeEncodeError)


class TestCompanyConversion:
    """Tests for dict conversion helpers."""

    def test_to_dict(self):
        company = make_company()
        assert company.to_dict() == {
            "inn": "123456789000",
            "name": "Name123456789000",
            "phone": "Phone123456789000",
            "address": "Address123456789000",
            "individual": "IndividualSomethingBigMore123456789000",
        }

    def test_from_dict_round_trip(self):
        company = make_company()
        assert Company.from_dict(company.to_dict()) == company

    def test_from_dict_fills_missing_fields(self):
        company = Company.from_dict({"inn": "123456789000"})
        assert company == Company(inn="123456789000")

    def test_from_dict_ignores_unknown_keys(self):
        company = Company.from_dict({"inn": "123456789000", "ceo": "someone"})
        assert company.name == ""

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(ValidationError, match="must be an object"):
            Company.from_dict(["123456789000"])


class TestExceptionHierarchy:
    """Tests for the exception classes."""

    def test_all_errors_share_a_base(self):
        for error in (ValidationError, DecodeError, DuplicateNameError):
            assert issubclass(error, StoreError)

    def test_duplicate_name_is_a_validation_error(self):
        assert issubclass(DuplicateNameError, ValidationError)

    def test_corruption_is_a_decode_error(self):
        assert issubclass(CorruptionError, DecodeError)

    def test_invalid_row_is_both(self):
        error = InvalidRowError("bad row")
        assert isinstance(error, DecodeError)
        assert isinstance(error, ValidationError)
        assert str(error) == "bad row"
