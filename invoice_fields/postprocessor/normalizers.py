"""
Data Normalizers Module.

This module provides normalization for:
    - Date strings (month names, locale-ambiguous numeric dates, ISO)
    - Currency/amount values

Numeric dates such as 03/04/2024 cannot be resolved with certainty from
the digits alone. DateNormalizer uses the following order:

    1. first component > 12  -> it is the day   (day/month/year)
    2. second component > 12 -> it is the day   (month/day/year)
    3. otherwise use the default order (day/month unless day_first=False)
       and retry the other order if the result is not a valid date

The default is a best guess and can be overridden through the
postprocessing.date.day_first setting or the constructor argument.

Author: ML Engineering Team
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Tuple, Union
from dateutil import parser as date_parser

from config import get_config
from invoice_fields.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


MONTH_NAME_PATTERN = (
    r'(?:January|February|March|April|May|June|July|August|September|'
    r'October|November|December|Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sept|Sep|'
    r'Oct|Nov|Dec)'
)

MONTHS = {
    'january': 1, 'jan': 1,
    'february': 2, 'feb': 2,
    'march': 3, 'mar': 3,
    'april': 4, 'apr': 4,
    'may': 5,
    'june': 6, 'jun': 6,
    'july': 7, 'jul': 7,
    'august': 8, 'aug': 8,
    'september': 9, 'sept': 9, 'sep': 9,
    'october': 10, 'oct': 10,
    'november': 11, 'nov': 11,
    'december': 12, 'dec': 12,
}


class DateNormalizer:
    """
    Normalizes date strings to ISO format (YYYY-MM-DD).

    Attributes:
        day_first: Default order for ambiguous numeric dates
        min_year: Earliest plausible invoice year
        max_year: Latest plausible invoice year

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("20/03/2024")
        "2024-03-20"
        >>> normalizer.normalize("January 15, 2024")
        "2024-01-15"
        >>> normalizer.normalize("03/04/2024")
        "2024-04-03"
    """

    # Year expansion pivot for two-digit years
    YEAR_PIVOT = 50

    ISO_PATTERN = re.compile(r'^(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})$')
    ISO_TIMESTAMP_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}')
    NUMERIC_PATTERN = re.compile(r'^(\d{1,2})([-/.])(\d{1,2})\2(\d{4}|\d{2})$')
    MONTH_FIRST_PATTERN = re.compile(
        rf'^({MONTH_NAME_PATTERN})\.?[\s\-/]+(\d{{1,2}})(?:st|nd|rd|th)?,?[\s\-/,]+(\d{{4}}|\d{{2}})$',
        re.IGNORECASE
    )
    DAY_FIRST_PATTERN = re.compile(
        rf'^(\d{{1,2}})(?:st|nd|rd|th)?[\s\-/]+({MONTH_NAME_PATTERN})\.?,?[\s\-/]+(\d{{4}}|\d{{2}})$',
        re.IGNORECASE
    )

    def __init__(self, day_first: Optional[bool] = None) -> None:
        """
        Initialize the date normalizer with configuration.

        Args:
            day_first: Override for the ambiguous-date default order.
                      If None, postprocessing.date.day_first is used.
        """
        if day_first is None:
            day_first = get_config("postprocessing.date.day_first", True)

        self.day_first = bool(day_first)
        self.output_format = get_config("postprocessing.date.output_format", "%Y-%m-%d")
        self.min_year = get_config("postprocessing.date.min_year", 2000)
        self.max_year = get_config("postprocessing.date.max_year", 2100)

        logger.debug(f"DateNormalizer initialized (day_first={self.day_first})")

    def normalize(self, date_str: str) -> Optional[str]:
        """
        Normalize a date string to YYYY-MM-DD.

        Args:
            date_str: Raw date text in any supported shape.

        Returns:
            Normalized date string, or None if the text is not a valid,
            plausible date.
        """
        parsed = self.parse(date_str)
        if parsed is None:
            return None
        return parsed.strftime(self.output_format)

    def parse(self, date_str: str) -> Optional[date]:
        """
        Parse a date string into a calendar date within the plausible range.

        Args:
            date_str: Raw date text.

        Returns:
            datetime.date or None.
        """
        if not date_str:
            return None

        cleaned = self._clean_date_string(str(date_str))
        if not cleaned:
            return None

        parsed = self._parse_shapes(cleaned)

        if parsed is None:
            logger.debug(f"Could not parse date: '{date_str}'")
            return None

        if not self.min_year <= parsed.year <= self.max_year:
            logger.debug(
                f"Rejected date '{date_str}': year {parsed.year} outside "
                f"[{self.min_year}, {self.max_year}]"
            )
            return None

        return parsed

    def _clean_date_string(self, date_str: str) -> str:
        """
        Clean and prepare date string for parsing.

        Args:
            date_str: Raw date string.

        Returns:
            Cleaned date string.
        """
        date_str = ' '.join(date_str.split())

        # Remove common prefixes
        prefixes = ['date:', 'dated:', 'invoice date:', 'due date:', 'on ']
        for prefix in prefixes:
            if date_str.lower().startswith(prefix):
                date_str = date_str[len(prefix):].strip()

        return date_str.strip(' .,;:')

    def _parse_shapes(self, cleaned: str) -> Optional[date]:
        """Dispatch on the shape of the cleaned string."""
        match = self.ISO_PATTERN.match(cleaned)
        if match:
            year, month, day = (int(g) for g in match.groups())
            return self._build_date(year, month, day)

        if self.ISO_TIMESTAMP_PATTERN.match(cleaned):
            try:
                return date_parser.isoparse(cleaned).date()
            except (ValueError, OverflowError):
                return None

        match = self.NUMERIC_PATTERN.match(cleaned)
        if match:
            first, _, second, year = match.groups()
            return self.resolve_numeric(int(first), int(second), self.expand_year(year))

        match = self.MONTH_FIRST_PATTERN.match(cleaned)
        if match:
            month_name, day, year = match.groups()
            return self._build_date(
                self.expand_year(year), MONTHS[month_name.lower()], int(day)
            )

        match = self.DAY_FIRST_PATTERN.match(cleaned)
        if match:
            day, month_name, year = match.groups()
            return self._build_date(
                self.expand_year(year), MONTHS[month_name.lower()], int(day)
            )

        return None

    def resolve_numeric(self, first: int, second: int, year: int) -> Optional[date]:
        """
        Resolve an A/B/Y numeric date to a calendar date.

        Args:
            first: First component (A).
            second: Second component (B).
            year: Four-digit year.

        Returns:
            datetime.date or None when no ordering yields a valid date.

        Example:
            >>> normalizer.resolve_numeric(20, 3, 2024)
            datetime.date(2024, 3, 20)
            >>> normalizer.resolve_numeric(3, 20, 2024)
            datetime.date(2024, 3, 20)
        """
        orders = self._candidate_orders(first, second)

        for day, month in orders:
            resolved = self._build_date(year, month, day)
            if resolved is not None:
                return resolved

        return None

    def _candidate_orders(self, first: int, second: int) -> Tuple[Tuple[int, int], ...]:
        """Return (day, month) pairs to try, most likely first."""
        if first > 12:
            return ((first, second),)
        if second > 12:
            return ((second, first),)

        day_month = (first, second)
        month_day = (second, first)
        if self.day_first:
            return (day_month, month_day)
        return (month_day, day_month)

    def expand_year(self, year: Union[str, int]) -> int:
        """
        Expand a two-digit year using a 50-year pivot.

        Example:
            >>> normalizer.expand_year("24")
            2024
            >>> normalizer.expand_year("87")
            1987
        """
        year_str = str(year)
        value = int(year_str)
        if len(year_str) <= 2:
            return 2000 + value if value < self.YEAR_PIVOT else 1900 + value
        return value

    @staticmethod
    def _build_date(year: int, month: int, day: int) -> Optional[date]:
        try:
            return date(year, month, day)
        except ValueError:
            return None


class AmountNormalizer:
    """
    Normalizes currency/amount strings to a two-digit Decimal.

    Handles various currency symbols, thousand separators, and
    decimal formats. Range checks are left to AmountValidator.

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.normalize("$1,234.56")
        Decimal('1234.56')
        >>> normalizer.normalize("€ 1.234,56")
        Decimal('1234.56')
    """

    # Currency symbols and codes to remove
    CURRENCY_SYMBOLS = ['$', '€', '£', '¥', '₹', '₽', '₿', '฿', '₫', '₴', '₦']
    CURRENCY_CODES = ['USD', 'EUR', 'GBP', 'JPY', 'INR', 'CAD', 'AUD', 'CNY', 'RUB', 'RS']

    TWO_PLACES = Decimal("0.01")

    def __init__(self) -> None:
        """Initialize the amount normalizer."""
        logger.debug("AmountNormalizer initialized")

    def normalize(self, amount: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
        """
        Normalize an amount to a Decimal rounded to two places.

        Args:
            amount: Raw amount as text (e.g., "$1,234.56") or a number.

        Returns:
            Decimal value, or None if the input is not a finite number.
        """
        if amount is None or isinstance(amount, bool):
            return None

        if isinstance(amount, (int, float, Decimal)):
            return self._to_decimal(str(amount))

        amount_str = self._clean_amount_string(str(amount))
        if not amount_str:
            return None

        amount_str = self._handle_european_format(amount_str)
        amount_str = amount_str.replace(',', '')

        return self._to_decimal(amount_str)

    def _to_decimal(self, text: str) -> Optional[Decimal]:
        try:
            value = Decimal(text)
        except (InvalidOperation, ValueError):
            logger.debug(f"Could not parse amount: '{text}'")
            return None

        if not value.is_finite():
            return None

        try:
            return value.quantize(self.TWO_PLACES, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            # More digits than the decimal context can hold at two places
            logger.debug(f"Amount out of range: '{text}'")
            return None

    def _clean_amount_string(self, amount_str: str) -> str:
        """
        Clean and prepare amount string for parsing.

        Args:
            amount_str: Raw amount string.

        Returns:
            Cleaned amount string.
        """
        amount_str = ' '.join(amount_str.split())

        for symbol in self.CURRENCY_SYMBOLS:
            amount_str = amount_str.replace(symbol, '')

        for code in self.CURRENCY_CODES:
            amount_str = re.sub(rf'\b{code}\b\.?', '', amount_str, flags=re.IGNORECASE)

        prefixes = ['total:', 'amount:', 'total amount:', 'due:', 'balance:']
        for prefix in prefixes:
            if amount_str.lower().startswith(prefix):
                amount_str = amount_str[len(prefix):]

        # Keep only digits, comma, dot, and minus
        amount_str = re.sub(r'[^\d,.\-]', '', amount_str)

        return amount_str.strip()

    def _handle_european_format(self, amount_str: str) -> str:
        """
        Convert European format (comma decimal) to US format (dot decimal).

        Args:
            amount_str: Amount string.

        Returns:
            Amount string in US format.
        """
        comma_count = amount_str.count(',')

        if comma_count == 1:
            comma_pos = amount_str.rfind(',')
            dot_pos = amount_str.rfind('.')

            # Comma is after dot - likely European format
            if comma_pos > dot_pos:
                after_comma = amount_str[comma_pos + 1:]
                if len(after_comma) <= 2 and after_comma.isdigit():
                    amount_str = amount_str.replace('.', '')
                    amount_str = amount_str.replace(',', '.')

        return amount_str
