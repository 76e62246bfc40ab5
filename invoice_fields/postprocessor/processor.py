"""
Field Merge Module.

This module provides the FieldMerger class that combines the values
proposed by the completion service with the pattern extraction results.

Policy, per field:
    1. A model value that passes validation is used (FromModel)
    2. Otherwise the pattern result is used (FromPattern)
    3. Otherwise the field stays unset

Category is resolved last, from the merged provider. Currency is never
taken from either source.

Author: ML Engineering Team
"""

from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple

from invoice_fields.utils.logger import get_logger
from invoice_fields.utils.exceptions import FieldValidationError
from invoice_fields.model_inference.extraction_result import (
    FIELD_NAMES, ExtractedInvoiceFields, FieldResult, FromModel, UNSET
)
from .normalizers import DateNormalizer, AmountNormalizer
from .validators import FieldValidator, DateValidator, AmountValidator

# Initialize module logger
logger = get_logger(__name__)

CategoryFallback = Callable[[Optional[str]], FieldResult]


class FieldMerger:
    """
    Merges model guesses and pattern results into the output record.

    Attributes:
        date_normalizer: DateNormalizer for model dates
        amount_normalizer: AmountNormalizer for model amounts
        field_validator: FieldValidator for identifiers and names

    Example:
        >>> merger = FieldMerger()
        >>> record = merger.merge(
        ...     {"amount": -50, "provider": "AWS"},
        ...     pattern_results,
        ...     category_fallback
        ... )
        >>> record.sources["amount"]
        "pattern"
    """

    def __init__(self, date_normalizer: Optional[DateNormalizer] = None) -> None:
        """Initialize the merger with all sub-components."""
        self.date_normalizer = date_normalizer or DateNormalizer()
        self.amount_normalizer = AmountNormalizer()

        self.field_validator = FieldValidator()
        self.date_validator = DateValidator()
        self.amount_validator = AmountValidator()

        self._model_checks: Dict[str, Callable[[Any], Any]] = {
            'invoice_number': self._check_invoice_number,
            'amount': self._check_amount,
            'provider': lambda value: self._check_name('provider', value),
            'billing_date': lambda value: self._check_date('billing_date', value),
            'due_date': lambda value: self._check_date('due_date', value),
            'category': lambda value: self._check_name('category', value),
        }

        logger.debug("FieldMerger initialized")

    def merge(
        self,
        model_fields: Optional[Dict[str, Any]],
        pattern_results: Dict[str, FieldResult],
        category_fallback: Optional[CategoryFallback] = None
    ) -> ExtractedInvoiceFields:
        """
        Merge model guesses with pattern results, field by field.

        Args:
            model_fields: Raw guesses from the completion service, or None
                         when the service was skipped or failed.
            pattern_results: FieldResult per field from pattern extraction.
            category_fallback: Derives the category from the merged
                              provider. If None, the category pattern
                              result is used.

        Returns:
            ExtractedInvoiceFields with per-field sources recorded.
        """
        model_fields = model_fields or {}
        record = ExtractedInvoiceFields()

        for field_name in FIELD_NAMES:
            if field_name == 'category' and category_fallback is not None:
                fallback = category_fallback(record.provider)
            else:
                fallback = pattern_results.get(field_name, UNSET)

            record.apply(field_name, self._resolve(field_name, model_fields.get(field_name), fallback))

        logger.info(
            f"Merged fields: {len(record.extracted_fields)} extracted "
            f"({sum(1 for s in record.sources.values() if s == 'model')} from model), "
            f"missing: {record.missing_fields}"
        )
        return record

    def _resolve(self, field_name: str, model_value: Any, fallback: FieldResult) -> FieldResult:
        if model_value is None:
            return fallback

        is_valid, result = self.validate_model_value(field_name, model_value)
        if not is_valid:
            logger.info(
                f"Rejected model value for {field_name}: {model_value!r} "
                f"({result}); using pattern result"
            )
            return fallback

        return FromModel(result)

    def validate_model_value(self, field_name: str, value: Any) -> Tuple[bool, Any]:
        """
        Validate a single model value.

        Returns:
            Tuple of (is_valid, normalized value or rejection reason).
        """
        try:
            return True, self._model_checks[field_name](value)
        except FieldValidationError as e:
            return False, e.details.get('reason')
        except Exception as e:
            logger.warning(f"Check of model value for {field_name} failed: {e}")
            return False, str(e)

    def _check_amount(self, value: Any) -> Decimal:
        if isinstance(value, bool) or not isinstance(value, (str, int, float, Decimal)):
            raise FieldValidationError('amount', value, "Not a number")

        amount = self.amount_normalizer.normalize(value)
        if amount is None:
            raise FieldValidationError('amount', value, "Not a number")

        is_valid, message = self.amount_validator.validate(amount)
        if not is_valid:
            raise FieldValidationError('amount', value, message)
        return amount

    def _check_date(self, field_name: str, value: Any) -> str:
        if not isinstance(value, str):
            raise FieldValidationError(field_name, value, "Not a string")

        normalized = self.date_normalizer.normalize(value)
        if normalized is None:
            raise FieldValidationError(field_name, value, "Invalid or implausible date")

        is_valid, message = self.date_validator.validate(normalized)
        if not is_valid:
            raise FieldValidationError(field_name, value, message)
        return normalized

    def _check_invoice_number(self, value: Any) -> str:
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise FieldValidationError('invoice_number', value, "Not a string")

        # Whitespace inside identifiers becomes a dash: "INV 2024 01" -> "INV-2024-01"
        cleaned = '-'.join(str(value).split())
        cleaned = self.field_validator.clean_invoice_number(cleaned)

        is_valid, message = self.field_validator.validate_invoice_number(cleaned)
        if not is_valid:
            raise FieldValidationError('invoice_number', value, message)
        return cleaned

    def _check_name(self, field_name: str, value: Any) -> str:
        if not isinstance(value, str):
            raise FieldValidationError(field_name, value, "Not a string")

        cleaned = ' '.join(value.split())
        is_valid, message = self.field_validator.validate_name(field_name, cleaned)
        if not is_valid:
            raise FieldValidationError(field_name, value, message)
        return cleaned
