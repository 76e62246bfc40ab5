"""
Tests for date and amount normalization.

Numeric dates are ambiguous between day/month and month/day order; the
normalizer resolves impossible orders first and otherwise applies the
configured default.
"""

from datetime import date
from decimal import Decimal

import pytest

from config import ConfigurationManager
from invoice_fields.postprocessor.normalizers import AmountNormalizer, DateNormalizer


@pytest.fixture
def normalizer():
    return DateNormalizer()


def test_day_greater_than_twelve_is_day(normalizer):
    """20/03/2024 can only be 20 March"""
    assert normalizer.normalize("20/03/2024") == "2024-03-20"


def test_second_component_greater_than_twelve_is_day(normalizer):
    """03/20/2024 can only be 20 March"""
    assert normalizer.normalize("03/20/2024") == "2024-03-20"


def test_ambiguous_date_defaults_to_day_first(normalizer):
    assert normalizer.normalize("03/04/2024") == "2024-04-03"


def test_ambiguous_date_month_first_override():
    assert DateNormalizer(day_first=False).normalize("03/04/2024") == "2024-03-04"


def test_day_first_read_from_configuration():
    ConfigurationManager().set("postprocessing.date.day_first", False)
    assert DateNormalizer().normalize("03/04/2024") == "2024-03-04"


def test_dash_and_dot_delimiters(normalizer):
    assert normalizer.normalize("15-03-2024") == "2024-03-15"
    assert normalizer.normalize("15.03.2024") == "2024-03-15"


def test_mixed_delimiters_are_not_a_date(normalizer):
    assert normalizer.normalize("15/03-2024") is None


@pytest.mark.parametrize("raw", [
    "January 15, 2024",
    "Jan 15 2024",
    "15 January 2024",
    "15-Jan-2024",
    "Jan-15-2024",
    "15th January 2024",
    "January 15th, 2024",
])
def test_month_name_shapes(normalizer, raw):
    assert normalizer.normalize(raw) == "2024-01-15"


def test_iso_dates_pass_through(normalizer):
    assert normalizer.normalize("2024-03-20") == "2024-03-20"
    assert normalizer.normalize("2024/3/5") == "2024-03-05"


def test_iso_timestamp(normalizer):
    assert normalizer.normalize("2024-03-20T10:15:00Z") == "2024-03-20"


def test_two_digit_year_pivot(normalizer):
    assert normalizer.normalize("20/03/24") == "2024-03-20"
    # 1987 falls outside the accepted year range
    assert normalizer.normalize("20/03/87") is None


def test_year_out_of_range(normalizer):
    assert normalizer.normalize("15/03/1999") is None
    assert normalizer.normalize("15/03/2101") is None


def test_impossible_dates(normalizer):
    assert normalizer.normalize("31/02/2024") is None
    assert normalizer.normalize("13/13/2024") is None
    assert normalizer.normalize("February 30, 2024") is None


def test_unambiguous_dates_ignore_default_order():
    month_first = DateNormalizer(day_first=False)
    assert month_first.normalize("20/03/2024") == "2024-03-20"
    assert month_first.resolve_numeric(12, 31, 2024) == date(2024, 12, 31)


def test_garbage_returns_none(normalizer):
    assert normalizer.normalize("") is None
    assert normalizer.normalize("not a date") is None
    assert normalizer.normalize(None) is None


def test_label_prefix_is_stripped(normalizer):
    assert normalizer.normalize("Due Date: 20/03/2024") == "2024-03-20"


class TestAmountNormalizer:

    def setup_method(self):
        self.normalizer = AmountNormalizer()

    def test_currency_symbol_and_thousands(self):
        assert self.normalizer.normalize("$1,234.56") == Decimal("1234.56")

    def test_european_format(self):
        assert self.normalizer.normalize("€ 1.234,56") == Decimal("1234.56")

    def test_currency_code(self):
        assert self.normalizer.normalize("USD 99.90") == Decimal("99.90")
        assert self.normalizer.normalize("Rs. 450") == Decimal("450.00")

    def test_numbers_are_quantized(self):
        assert self.normalizer.normalize(1234.5) == Decimal("1234.50")
        assert self.normalizer.normalize(10) == Decimal("10.00")
        assert self.normalizer.normalize(Decimal("2.345")) == Decimal("2.35")

    def test_negative_kept_for_validator(self):
        assert self.normalizer.normalize(-50) == Decimal("-50.00")

    def test_rejects_non_numbers(self):
        assert self.normalizer.normalize(None) is None
        assert self.normalizer.normalize(True) is None
        assert self.normalizer.normalize("abc") is None
        assert self.normalizer.normalize(float("nan")) is None

    def test_rejects_numbers_too_large_to_quantize(self):
        assert self.normalizer.normalize("123456789012345678901234567890") is None
        assert self.normalizer.normalize(1e30) is None
        assert self.normalizer.normalize(Decimal("1E+40")) is None
