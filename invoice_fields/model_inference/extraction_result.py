"""
Extraction Result Data Classes.

This module defines the data structures that flow through one extraction
call:

    ExtractedInvoiceFields: the engine's only output record
    FieldResult variants:   Unset, FromPattern, FromModel

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Union
import json


# The record is always expressed in this single currency
SUPPORTED_CURRENCY = "USD"

# Field names in resolution order; category depends on the resolved provider
FIELD_NAMES = (
    'invoice_number',
    'amount',
    'provider',
    'billing_date',
    'due_date',
    'category',
)

# Serialized key for each field
FIELD_KEYS = {
    'invoice_number': 'invoiceNumber',
    'amount': 'amount',
    'currency': 'currency',
    'provider': 'provider',
    'billing_date': 'billingDate',
    'due_date': 'dueDate',
    'category': 'category',
}


@dataclass(frozen=True)
class Unset:
    """No source produced a valid value for the field."""

    @property
    def value(self) -> None:
        return None


@dataclass(frozen=True)
class FromPattern:
    """
    Value chosen by a pattern extractor.

    Attributes:
        value: Normalized field value.
        confidence: Ordinal score of the winning candidate.
        source: Tag of the rule that produced it.
    """
    value: Any
    confidence: int
    source: str = "pattern"


@dataclass(frozen=True)
class FromModel:
    """Value proposed by the completion service that passed validation."""
    value: Any


FieldResult = Union[Unset, FromPattern, FromModel]

UNSET = Unset()


@dataclass
class ExtractedInvoiceFields:
    """
    Represents the best-effort result of invoice field extraction.

    Every field except currency is optional; an unset field is the only
    failure signal exposed to callers.

    Attributes:
        invoice_number: Invoice identifier (3-50 characters)
        amount: Total amount, 0 < amount < 1e9, two fractional digits
        currency: Always SUPPORTED_CURRENCY
        provider: Vendor / service name
        billing_date: Issue date as YYYY-MM-DD
        due_date: Payment due date as YYYY-MM-DD
        category: Spending category derived from provider or keywords
        sources: Which source produced each field ("model" or "pattern")

    Example:
        >>> result = ExtractedInvoiceFields(
        ...     invoice_number="INV-2024-001",
        ...     amount=Decimal("1234.56"),
        ...     billing_date="2024-03-15"
        ... )
        >>> print(result.to_json())
    """
    invoice_number: Optional[str] = None
    amount: Optional[Decimal] = None
    currency: str = SUPPORTED_CURRENCY
    provider: Optional[str] = None
    billing_date: Optional[str] = None
    due_date: Optional[str] = None
    category: Optional[str] = None

    sources: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Currency is never taken from any source
        self.currency = SUPPORTED_CURRENCY

    @property
    def fields(self) -> Dict[str, Any]:
        """
        Get all extractable fields as a dictionary.

        Returns:
            Dictionary of field names to values (None when unset).
        """
        return {name: getattr(self, name) for name in FIELD_NAMES}

    @property
    def extracted_fields(self) -> Dict[str, Any]:
        """Fields that have a value."""
        return {k: v for k, v in self.fields.items() if v is not None}

    @property
    def missing_fields(self) -> list:
        """Names of fields that were not extracted."""
        return [k for k, v in self.fields.items() if v is None]

    def apply(self, field_name: str, result: FieldResult) -> None:
        """
        Store a resolved field result.

        Args:
            field_name: Name of the field.
            result: Unset, FromPattern or FromModel.
        """
        if field_name not in FIELD_NAMES:
            raise KeyError(f"Unknown invoice field: {field_name}")

        if isinstance(result, Unset):
            setattr(self, field_name, None)
            self.sources.pop(field_name, None)
            return

        setattr(self, field_name, result.value)
        self.sources[field_name] = "model" if isinstance(result, FromModel) else "pattern"

    def to_dict(self, include_sources: bool = False) -> Dict[str, Any]:
        """
        Convert to the serialized record.

        Unset fields are omitted; the amount is rendered as a float.

        Args:
            include_sources: Add the per-field source map under "sources".

        Returns:
            Dictionary keyed by the record's camelCase field names.
        """
        data: Dict[str, Any] = {}

        for name in ('invoice_number', 'amount', 'currency', 'provider',
                     'billing_date', 'due_date', 'category'):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, Decimal):
                value = float(value)
            data[FIELD_KEYS[name]] = value

        if include_sources:
            data['sources'] = dict(self.sources)

        return data

    def to_json(self, indent: int = 2, include_sources: bool = False) -> str:
        """
        Convert to JSON string.

        Args:
            indent: JSON indentation level.
            include_sources: Include the per-field source map.

        Returns:
            JSON string representation.
        """
        return json.dumps(self.to_dict(include_sources=include_sources), indent=indent)

    def __repr__(self) -> str:
        return (
            f"ExtractedInvoiceFields("
            f"invoice={self.invoice_number}, "
            f"provider={self.provider}, "
            f"amount={self.amount}, "
            f"billing={self.billing_date}, "
            f"due={self.due_date})"
        )
