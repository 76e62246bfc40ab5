"""
Pattern Candidate Extractors.

Deterministic, regex-driven extractors for each invoice field. Every
extractor scores all matches of its rule table and keeps the best one;
a field with no surviving candidate is left Unset.

Extractors:
    - InvoiceNumberExtractor
    - AmountExtractor
    - ProviderExtractor
    - DateExtractor (billing / due)
    - CategoryExtractor
    - PatternExtractor: runs all of the above over one text

Author: ML Engineering Team
"""

import re
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from config import get_config
from invoice_fields.utils.logger import get_logger
from invoice_fields.model_inference.extraction_result import (
    FieldResult, Unset, UNSET
)
from invoice_fields.postprocessor.normalizers import AmountNormalizer, DateNormalizer
from invoice_fields.postprocessor.validators import AmountValidator, FieldValidator
from .candidates import Candidate, collect_candidates, select_best, to_field_result
from .rules import (
    AMOUNT_RULES,
    CATEGORY_KEYWORD_BASE_CONFIDENCE,
    CATEGORY_PROVIDER_CONFIDENCE,
    DATE_RULES,
    INVOICE_NUMBER_RULES,
    PROVIDER_LABEL_RULES,
    VENDOR_BODY_CONFIDENCE,
    VENDOR_FILENAME_CONFIDENCE,
)
from .vendors import CATEGORY_KEYWORDS, KNOWN_VENDORS, PROVIDER_CATEGORIES

# Initialize module logger
logger = get_logger(__name__)


def _log_result(field_name: str, result: FieldResult) -> None:
    if isinstance(result, Unset):
        logger.debug(f"[{field_name}] no candidate survived")
    else:
        logger.debug(
            f"[{field_name}] selected '{result.value}' "
            f"(confidence: {result.confidence}, rule: {result.source})"
        )


def _term_pattern(term: str) -> re.Pattern:
    """Case-insensitive match of a term not glued to other letters or digits."""
    return re.compile(rf'(?<![A-Za-z0-9]){re.escape(term)}(?![A-Za-z0-9])', re.IGNORECASE)


class InvoiceNumberExtractor:
    """
    Extracts the invoice identifier.

    Example:
        >>> extractor = InvoiceNumberExtractor()
        >>> extractor.extract("Invoice Number: INV-2024-001").value
        "INV-2024-001"
    """

    def __init__(self, validator: Optional[FieldValidator] = None) -> None:
        self.validator = validator or FieldValidator()

    def candidates(self, text: str) -> List[Candidate]:
        """Collect all plausible invoice number candidates."""
        return collect_candidates(
            text,
            INVOICE_NUMBER_RULES,
            parse=self.validator.clean_invoice_number,
            accept=self.validator.validate_invoice_number,
            field_name="invoice_number"
        )

    def extract(self, text: str) -> FieldResult:
        result = to_field_result(select_best(self.candidates(text)))
        _log_result("invoice_number", result)
        return result


class AmountExtractor:
    """
    Extracts the invoice total.

    Base confidences come from the rule table and are then adjusted:
        - +1 for values in the plausible invoice range
        - -2 for values above it
        - +1 for exactly two fractional digits
    Identical values found by several rules keep their best score.

    Example:
        >>> extractor = AmountExtractor()
        >>> extractor.extract("Total: $1,234.56").value
        Decimal('1234.56')
    """

    TWO_DECIMALS = re.compile(r'\.\d{2}$')

    def __init__(
        self,
        normalizer: Optional[AmountNormalizer] = None,
        validator: Optional[AmountValidator] = None
    ) -> None:
        self.normalizer = normalizer or AmountNormalizer()
        self.validator = validator or AmountValidator()

    def candidates(self, text: str) -> List[Candidate]:
        """Collect, rescore and deduplicate amount candidates."""
        raw_candidates = collect_candidates(
            text,
            AMOUNT_RULES,
            parse=self.normalizer.normalize,
            accept=self.validator.validate,
            field_name="amount"
        )

        best_by_value: Dict[Decimal, Candidate] = {}
        for candidate in raw_candidates:
            scored = Candidate(
                candidate.value,
                self._score(candidate),
                candidate.source,
                candidate.raw
            )
            current = best_by_value.get(scored.value)
            if current is None or scored.confidence > current.confidence:
                best_by_value[scored.value] = scored

        return list(best_by_value.values())

    def _score(self, candidate: Candidate) -> int:
        confidence = candidate.confidence

        if self.validator.is_plausible_total(candidate.value):
            confidence += 1
        elif candidate.value > self.validator.plausible_max:
            confidence -= 2

        if self.TWO_DECIMALS.search(candidate.raw):
            confidence += 1

        return confidence

    def extract(self, text: str) -> FieldResult:
        result = to_field_result(select_best(self.candidates(text)))
        _log_result("amount", result)
        return result


class ProviderExtractor:
    """
    Extracts the vendor / service provider.

    Known vendors are matched in the filename first, then in the body,
    before falling back to labeled fields such as "Vendor:".

    Example:
        >>> extractor = ProviderExtractor()
        >>> extractor.extract("...", "AWS-INV-2024-0099.pdf").value
        "AWS"
    """

    REJECTED_WORDS = re.compile(r'invoice|bill|statement', re.IGNORECASE)

    def __init__(self, vendors: Optional[List[str]] = None) -> None:
        if vendors is None:
            vendors = KNOWN_VENDORS + list(get_config("extraction.provider.extra_vendors", []) or [])
        self.vendors: List[Tuple[str, re.Pattern]] = [
            (vendor, _term_pattern(vendor)) for vendor in vendors
        ]

    def candidates(self, text: str, filename: str = "") -> List[Candidate]:
        candidates: List[Candidate] = []

        for vendor, pattern in self.vendors:
            if filename and pattern.search(filename):
                candidates.append(Candidate(vendor, VENDOR_FILENAME_CONFIDENCE, "vendor_filename", vendor))
            elif pattern.search(text):
                candidates.append(Candidate(vendor, VENDOR_BODY_CONFIDENCE, "vendor_body", vendor))

        candidates.extend(collect_candidates(
            text,
            PROVIDER_LABEL_RULES,
            parse=self._clean_label_value,
            accept=self._accept_label_value,
            field_name="provider"
        ))
        return candidates

    @staticmethod
    def _clean_label_value(raw: str) -> Optional[str]:
        value = ' '.join(raw.split()).strip(' .,;:-')
        return value or None

    def _accept_label_value(self, value: str) -> Tuple[bool, str]:
        if self.REJECTED_WORDS.search(value):
            return False, "mentions invoice/bill/statement"
        if not 2 < len(value) < 50:
            return False, f"length {len(value)} out of bounds"
        return True, "Valid provider"

    def extract(self, text: str, filename: str = "") -> FieldResult:
        result = to_field_result(select_best(self.candidates(text, filename)))
        _log_result("provider", result)
        return result


class DateExtractor:
    """
    Extracts a billing or due date.

    Label-directed rules ("Invoice Date", "Due Date", ...) outrank the
    generic date shapes, which are scored ISO > month name > numeric.

    Example:
        >>> DateExtractor("due").extract("Due Date: 20/03/2024").value
        "2024-03-20"
    """

    KINDS = ("billing", "due")

    def __init__(self, kind: str, normalizer: Optional[DateNormalizer] = None) -> None:
        if kind not in self.KINDS:
            raise ValueError(f"Unknown date kind: {kind}")
        self.kind = kind
        self.normalizer = normalizer or DateNormalizer()

    @property
    def field_name(self) -> str:
        return f"{self.kind}_date"

    def candidates(self, text: str) -> List[Candidate]:
        return collect_candidates(
            text,
            DATE_RULES[self.kind],
            parse=self.normalizer.normalize,
            field_name=self.field_name
        )

    def extract(self, text: str) -> FieldResult:
        result = to_field_result(select_best(self.candidates(text)))
        _log_result(self.field_name, result)
        return result


class CategoryExtractor:
    """
    Derives the spending category.

    The resolved provider is looked up first; otherwise category keyword
    sets are counted in the text and the set with the most hits wins.
    """

    def __init__(self) -> None:
        self.keyword_sets = [
            (category, [_term_pattern(keyword) for keyword in keywords])
            for category, keywords in CATEGORY_KEYWORDS
        ]

    @staticmethod
    def from_provider(provider: Optional[str]) -> Optional[str]:
        """Return the category mapped to a provider name, if any."""
        if not provider:
            return None
        provider_lower = provider.lower()
        for key, category in PROVIDER_CATEGORIES.items():
            if key.lower() in provider_lower:
                return category
        return None

    def candidates(self, text: str, provider: Optional[str] = None) -> List[Candidate]:
        mapped = self.from_provider(provider)
        if mapped:
            return [Candidate(mapped, CATEGORY_PROVIDER_CONFIDENCE, "provider_category", provider)]

        candidates = []
        for category, patterns in self.keyword_sets:
            hits = sum(1 for pattern in patterns if pattern.search(text))
            if hits:
                candidates.append(Candidate(
                    category,
                    CATEGORY_KEYWORD_BASE_CONFIDENCE + hits,
                    "category_keywords",
                    category
                ))
        return candidates

    def extract(self, text: str, provider: Optional[str] = None) -> FieldResult:
        result = to_field_result(select_best(self.candidates(text, provider)))
        _log_result("category", result)
        return result


class PatternExtractor:
    """
    Runs every pattern extractor over one normalized text.

    Example:
        >>> extractor = PatternExtractor()
        >>> results = extractor.extract_all(text, "AWS-INV-2024-0099.pdf")
        >>> results["provider"]
        FromPattern(value='AWS', confidence=10, source='vendor_filename')
    """

    def __init__(self, date_normalizer: Optional[DateNormalizer] = None) -> None:
        date_normalizer = date_normalizer or DateNormalizer()

        self.invoice_number = InvoiceNumberExtractor()
        self.amount = AmountExtractor()
        self.provider = ProviderExtractor()
        self.billing_date = DateExtractor("billing", date_normalizer)
        self.due_date = DateExtractor("due", date_normalizer)
        self.category = CategoryExtractor()

        logger.debug("PatternExtractor initialized")

    def extract_all(self, text: str, filename: str = "") -> Dict[str, FieldResult]:
        """
        Extract every field from text.

        Category is derived from the provider found here; callers that
        resolve the provider differently should use extract_category().
        """
        provider = self._run('provider', self.provider.extract, text, filename)

        return {
            'invoice_number': self._run('invoice_number', self.invoice_number.extract, text),
            'amount': self._run('amount', self.amount.extract, text),
            'provider': provider,
            'billing_date': self._run('billing_date', self.billing_date.extract, text),
            'due_date': self._run('due_date', self.due_date.extract, text),
            'category': self._run('category', self.category.extract, text, provider.value),
        }

    @staticmethod
    def _run(field_name: str, extract: Callable[..., FieldResult], *args: Any) -> FieldResult:
        """Run one extractor; a failure leaves only its own field unset."""
        try:
            return extract(*args)
        except Exception as e:
            logger.exception(f"[{field_name}] extraction failed, leaving field unset: {e}")
            return UNSET

    def extract_category(self, text: str, provider: Optional[str]) -> FieldResult:
        return self.category.extract(text, provider)
