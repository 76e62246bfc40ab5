"""
Tests for field validators.
"""

from decimal import Decimal

import pytest

from invoice_fields.postprocessor.validators import AmountValidator, DateValidator, FieldValidator


@pytest.fixture
def field_validator():
    return FieldValidator()


@pytest.mark.parametrize("value", [
    "INV-2024-0099",
    "INV001",
    "2024-AB-17",
    "A1B2C3",
    "12345678",
])
def test_invoice_number_accepted(field_validator, value):
    is_valid, message = field_validator.validate_invoice_number(value)
    assert is_valid, message


@pytest.mark.parametrize("value,reason", [
    ("15/03/2024", "date"),
    ("2024-03-15", "ISO date"),
    ("USD", "currency code"),
    ("1,234.56", "amount"),
    ("99.90", "amount"),
    ("2024", "too short"),
    ("Date", "no digits"),
    ("A1", "out of bounds"),
    ("X" * 51, "out of bounds"),
])
def test_invoice_number_rejected(field_validator, value, reason):
    is_valid, message = field_validator.validate_invoice_number(value)
    assert not is_valid
    assert reason in message


def test_clean_invoice_number_strips_separators():
    assert FieldValidator.clean_invoice_number(" -INV-001/ ") == "INV-001"


def test_name_length_bounds(field_validator):
    assert field_validator.validate_name("provider", "AWS")[0]
    assert not field_validator.validate_name("provider", "A")[0]
    assert not field_validator.validate_name("provider", "x" * 101)[0]
    assert not field_validator.validate_name("provider", None)[0]


class TestAmountValidator:

    def setup_method(self):
        self.validator = AmountValidator()

    def test_valid_amount(self):
        assert self.validator.validate(Decimal("1234.56")) == (True, "Valid amount")

    def test_non_positive(self):
        assert self.validator.validate(Decimal("-50"))[1] == "Amount must be positive"
        assert not self.validator.is_valid(Decimal("0"))

    def test_upper_bound_is_exclusive(self):
        assert not self.validator.is_valid(Decimal("1000000000"))
        assert self.validator.is_valid(Decimal("999999999.99"))

    def test_too_many_fractional_digits(self):
        assert not self.validator.is_valid(Decimal("1.005"))

    def test_requires_decimal(self):
        assert not self.validator.is_valid(12.5)

    def test_plausible_total(self):
        assert self.validator.is_plausible_total(Decimal("450.00"))
        assert not self.validator.is_plausible_total(Decimal("250000"))


def test_date_validator():
    validator = DateValidator()
    assert validator.is_valid("2024-03-20")
    assert validator.validate("1999-12-31") == (False, "Year 1999 is too old")
    assert not validator.is_valid("20/03/2024")
    assert not validator.is_valid("")
