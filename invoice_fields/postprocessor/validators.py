"""
Data Validators Module.

This module provides validation functions for:
    - Date fields
    - Amount fields
    - Invoice number and free-text name fields

The same validators guard pattern candidates and values proposed by the
completion service, so both sources obey one set of field rules.

Author: ML Engineering Team
"""

import re
from decimal import Decimal
from typing import Any, Tuple
from datetime import datetime

from config import get_config
from invoice_fields.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class DateValidator:
    """
    Validates normalized date fields.

    Checks for:
        - Valid YYYY-MM-DD format and calendar date
        - Plausible year range

    Example:
        >>> validator = DateValidator()
        >>> validator.is_valid("2024-01-15")
        True
        >>> validator.validate("1999-12-31")
        (False, "Year 1999 is too old")
    """

    def __init__(self) -> None:
        """Initialize the date validator."""
        self.date_format = get_config(
            "postprocessing.date.output_format",
            "%Y-%m-%d"
        )
        self.min_year = get_config("postprocessing.date.min_year", 2000)
        self.max_year = get_config("postprocessing.date.max_year", 2100)
        logger.debug("DateValidator initialized")

    def is_valid(self, date_str: str) -> bool:
        """
        Check if date string is valid.

        Args:
            date_str: Date string to validate.

        Returns:
            True if valid, False otherwise.
        """
        valid, _ = self.validate(date_str)
        return valid

    def validate(self, date_str: str) -> Tuple[bool, str]:
        """
        Validate a date string with detailed feedback.

        Args:
            date_str: Date string to validate.

        Returns:
            Tuple of (is_valid, message).
        """
        if not date_str:
            return False, "Date is empty"

        try:
            parsed = datetime.strptime(date_str, self.date_format)
        except (TypeError, ValueError) as e:
            return False, f"Invalid date format: {str(e)}"

        if parsed.year < self.min_year:
            return False, f"Year {parsed.year} is too old"
        if parsed.year > self.max_year:
            return False, f"Year {parsed.year} is too far in future"

        return True, "Valid date"


class AmountValidator:
    """
    Validates amount fields.

    Checks for:
        - Positive value
        - Upper bound
        - At most two fractional digits

    Example:
        >>> validator = AmountValidator()
        >>> validator.is_valid(Decimal("1234.56"))
        True
        >>> validator.validate(Decimal("-50"))
        (False, "Amount must be positive")
    """

    def __init__(self) -> None:
        """Initialize the amount validator."""
        self.max_amount = Decimal(str(get_config(
            "postprocessing.amount.max_amount",
            1_000_000_000
        )))
        self.plausible_min = Decimal(str(get_config("postprocessing.amount.plausible_min", 1)))
        self.plausible_max = Decimal(str(get_config("postprocessing.amount.plausible_max", 100_000)))
        logger.debug("AmountValidator initialized")

    def is_valid(self, amount: Decimal) -> bool:
        """
        Check if amount is valid.

        Args:
            amount: Amount to validate.

        Returns:
            True if valid, False otherwise.
        """
        valid, _ = self.validate(amount)
        return valid

    def validate(self, amount: Decimal) -> Tuple[bool, str]:
        """
        Validate an amount with detailed feedback.

        Args:
            amount: Normalized amount.

        Returns:
            Tuple of (is_valid, message).
        """
        if amount is None:
            return False, "Amount is empty"

        if not isinstance(amount, Decimal):
            return False, f"Amount is not a decimal: {amount!r}"

        if amount <= 0:
            return False, "Amount must be positive"

        if amount >= self.max_amount:
            return False, f"Amount {amount} exceeds maximum"

        if amount.as_tuple().exponent < -2:
            return False, f"Amount {amount} has more than two fractional digits"

        return True, "Valid amount"

    def is_plausible_total(self, amount: Decimal) -> bool:
        """
        Check if amount lies in the typical invoice range.

        Args:
            amount: Amount value.

        Returns:
            True if plausible, False otherwise.
        """
        return self.plausible_min <= amount <= self.plausible_max


class FieldValidator:
    """
    Validation for identifier and name fields.

    Validates:
        - Invoice number shape (not a date, amount or currency code)
        - Provider / category length bounds

    Example:
        >>> validator = FieldValidator()
        >>> validator.validate_invoice_number("INV-2024-0099")
        (True, "Valid invoice number")
        >>> validator.validate_invoice_number("15/03/2024")
        (False, "Invoice number looks like a date")
    """

    DATE_SHAPE = re.compile(r'^\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}$')
    ISO_DATE_SHAPE = re.compile(r'^\d{4}[/\-.]\d{1,2}[/\-.]\d{1,2}$')
    CURRENCY_CODE_SHAPE = re.compile(r'^[A-Z]{3}$')
    AMOUNT_SHAPES = (
        re.compile(r'^\$?\d{1,3}(?:,\d{3})+(?:\.\d+)?$'),
        re.compile(r'^\$?\d+\.\d{1,2}$'),
    )

    # Pure digit identifiers shorter than this are usually years or amounts
    MIN_NUMERIC_ID_LENGTH = 7

    def __init__(self) -> None:
        """Initialize the field validator."""
        self.invoice_number_min = get_config("postprocessing.text.invoice_number_min_length", 3)
        self.invoice_number_max = get_config("postprocessing.text.invoice_number_max_length", 50)
        self.name_min = get_config("postprocessing.text.name_min_length", 2)
        self.name_max = get_config("postprocessing.text.name_max_length", 100)

        logger.debug("FieldValidator initialized")

    @staticmethod
    def clean_invoice_number(value: str) -> str:
        """Strip whitespace and surrounding separators from an identifier."""
        return value.strip().strip('-_/').strip()

    def validate_invoice_number(self, value: Any) -> Tuple[bool, str]:
        """
        Validate invoice number format.

        Args:
            value: Invoice number to validate.

        Returns:
            Tuple of (is_valid, message).
        """
        if not isinstance(value, str) or not value.strip():
            return False, "Invoice number is empty"

        value = value.strip()

        if not self.invoice_number_min <= len(value) <= self.invoice_number_max:
            return False, f"Invoice number length {len(value)} out of bounds"

        if self.DATE_SHAPE.match(value):
            return False, "Invoice number looks like a date"

        if self.ISO_DATE_SHAPE.match(value):
            return False, "Invoice number looks like an ISO date"

        if self.CURRENCY_CODE_SHAPE.match(value):
            return False, "Invoice number looks like a currency code"

        if any(shape.match(value) for shape in self.AMOUNT_SHAPES):
            return False, "Invoice number looks like an amount"

        if value.isdigit() and len(value) < self.MIN_NUMERIC_ID_LENGTH:
            return False, "Numeric invoice number too short"

        if not re.search(r'\d', value):
            return False, "Invoice number has no digits"

        return True, "Valid invoice number"

    def validate_name(self, field_name: str, value: Any) -> Tuple[bool, str]:
        """
        Validate a free-text name such as provider or category.

        Args:
            field_name: Name of the field, used in messages.
            value: Value to validate.

        Returns:
            Tuple of (is_valid, message).
        """
        if not isinstance(value, str) or not value.strip():
            return False, f"{field_name} is empty"

        length = len(value.strip())
        if length < self.name_min:
            return False, f"{field_name} too short"
        if length > self.name_max:
            return False, f"{field_name} too long"

        return True, f"Valid {field_name}"
