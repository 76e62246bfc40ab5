"""
Rule Tables for Pattern Extraction.

Each table is an ordered list of Rule(pattern, confidence, source),
from the most label-specific rule to the least specific one. The
extractors are generic; changing extraction behavior means editing
these tables.

Author: ML Engineering Team
"""

import re
from typing import Dict, List

from invoice_fields.postprocessor.normalizers import MONTH_NAME_PATTERN
from .candidates import Rule, rule


# =============================================================================
# INVOICE NUMBER
# =============================================================================

_ID_TOKEN = r'([A-Z0-9][A-Z0-9\-_/]*)'

INVOICE_NUMBER_RULES: List[Rule] = [
    rule(r'\binvoice\s*(?:number|num\.?|no\.?|#|id)\s*[:#.]?\s*' + _ID_TOKEN, 10, "invoice_label"),
    rule(r'\b(INV[-_ ]?\d{4}[-_ ]?\d{2,})\b', 9, "inv_year_sequence"),
    rule(r'\b(INV[-_ ]?\d{3,})(?![-_ ]?\d)\b', 9, "inv_sequence"),
    rule(r'\b(\d{4}[-_/ ]?[A-Z]{2,4}[-_/ ]?\d{2,})\b', 8, "year_code_sequence", flags=0),
    rule(r'\b(?:bill|reference|document|order)\s*(?:number|num\.?|no\.?|#|id)\s*[:#.]?\s*' + _ID_TOKEN,
         8, "document_label"),
    rule(r'\bref\.?\s*[:#]\s*' + _ID_TOKEN, 7, "ref_label"),
    rule(r'(?<!\w)#\s*([A-Z0-9][A-Z0-9\-_/]{2,})', 7, "hash_prefix"),
    rule(r'\b(?:invoice|inv)\b\.?\s*[:#]?\s*' + _ID_TOKEN, 6, "invoice_word"),
    rule(r'\b([A-Z]{2,}\d{2,}|\d{2,}[A-Z]{2,})\b', 5, "alphanumeric_code", flags=0),
    rule(r'^filename:.*?(?<![A-Za-z0-9])([A-Za-z0-9]+(?:[-_][A-Za-z0-9]+)+)', 3, "filename_token",
         flags=re.IGNORECASE | re.MULTILINE),
]


# =============================================================================
# AMOUNT
# =============================================================================

_CURRENCY_SYMBOL = r'[₹$€£¥]'
_CURRENCY_CODE = r'(?:USD|EUR|GBP|INR|CAD|AUD|JPY|CNY)'

# Not glued to a date, an identifier, or a longer number
_NUMBER = (
    r'(?<![\d.,])'
    r'(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)'
    r'(?![\d/\-]|[.,]\d)'
)
_LABEL_GAP = r'\s*(?:\([A-Z]{3}\))?\s*[:\-]?\s*(?:' + _CURRENCY_CODE + r'\s*)?' + _CURRENCY_SYMBOL + r'?\s*'

AMOUNT_RULES: List[Rule] = [
    rule(r'\b(?:grand\s+total|amount\s+due|balance\s+due|total\s+due|total\s+amount|'
         r'invoice\s+amount|amount\s+payable)\b' + _LABEL_GAP + _NUMBER, 11, "strong_total_label"),
    rule(r'\b(?:total|amount|balance|due|payable|charges)\b' + _LABEL_GAP + _NUMBER, 10, "total_label"),
    rule(_CURRENCY_SYMBOL + r'\s*' + _NUMBER, 9, "currency_symbol"),
    rule(r'\bsub[\s-]?total\b' + _LABEL_GAP + _NUMBER, 8, "subtotal_label"),
    rule(r'\b' + _CURRENCY_CODE + r'\s*' + _NUMBER, 8, "currency_code_prefix"),
    rule(_NUMBER + r'\s*' + _CURRENCY_CODE + r'\b', 8, "currency_code_suffix"),
    rule(r'\bRs\.?\s*' + _NUMBER, 8, "rupee_prefix"),
    rule(r'(?<![\d.,])(\d{1,3}(?:,\d{3})+\.\d{2}|\d+\.\d{2})(?![\d/\-]|[.,]\d)', 7, "two_decimals"),
    rule(r'(?<![\d.,])(\d{1,3}(?:,\d{3})+)(?![\d/\-]|[.,]\d)', 5, "thousands_grouped"),
    rule(r'(?<![\w.,/-])(\d+(?:\.\d{1,2})?)(?![\w/-]|[.,]\d)', 3, "bare_number"),
]


# =============================================================================
# PROVIDER
# =============================================================================

PROVIDER_LABEL_RULES: List[Rule] = [
    rule(r'\b(?:from|vendor|supplier|company)\s*:[ \t]*([^\n]+)', 5, "provider_label"),
    rule(r'\b(?:billed\s+by|issued\s+by|invoice\s+from)\s*:?[ \t]*([^\n]+)', 5, "provider_phrase"),
]

VENDOR_FILENAME_CONFIDENCE = 10
VENDOR_BODY_CONFIDENCE = 8

CATEGORY_PROVIDER_CONFIDENCE = 10
CATEGORY_KEYWORD_BASE_CONFIDENCE = 4


# =============================================================================
# DATES
# =============================================================================

_M = MONTH_NAME_PATTERN
_ORDINAL = r'(?:st|nd|rd|th)?'

_ISO_DATE = r'\d{4}[-/.]\d{1,2}[-/.]\d{1,2}'
_MONTH_DATE = (
    rf'(?:{_M}\.?[ \-/]+\d{{1,2}}{_ORDINAL},?[ \-/]+\d{{4}}'
    rf'|\d{{1,2}}{_ORDINAL}[ \-/]+{_M}\.?,?[ \-/]+\d{{4}})'
)
_NUMERIC_DATE = r'(?:\d{1,2}/\d{1,2}/\d{4}|\d{1,2}-\d{1,2}-\d{4}|\d{1,2}\.\d{1,2}\.\d{4})'
_SHORT_NUMERIC_DATE = r'(?:\d{1,2}/\d{1,2}/\d{2}|\d{1,2}-\d{1,2}-\d{2}|\d{1,2}\.\d{1,2}\.\d{2})'
_ANY_DATE = rf'(?:{_ISO_DATE}|{_MONTH_DATE}|{_NUMERIC_DATE}|{_SHORT_NUMERIC_DATE})'

_DATE_START = r'(?<![\d/.\-])'
_DATE_END = r'(?![\d/\-]|\.\d)'

BILLING_LABELS = (
    r'invoice\s*date', r'billing\s*date', r'date\s+of\s+invoice', r'issue\s*date',
    r'invoice\s+issued', r'date\s+issued', r'bill\s*date',
)
DUE_LABELS = (
    r'payment\s+due\s+date', r'amount\s+due\s+by', r'due\s*date', r'payment\s+due',
    r'pay\s+by', r'due\s+by', r'payable\s+by', r'pay\s+on',
)


def _label_rule(labels, source: str) -> Rule:
    # The gap may include a line break: label on one line, date on the next
    return rule(
        r'\b(?:' + '|'.join(labels) + r')\b\s*[:=]?\s*(' + _ANY_DATE + r')' + _DATE_END,
        10, source
    )


GENERIC_DATE_RULES: List[Rule] = [
    rule(_DATE_START + r'(' + _ISO_DATE + r')' + _DATE_END, 8, "iso_date"),
    rule(r'(?<![\w/.\-])(' + _MONTH_DATE + r')' + _DATE_END, 7, "month_name_date"),
    rule(_DATE_START + r'(' + _NUMERIC_DATE + r')' + _DATE_END, 5, "numeric_date"),
    rule(_DATE_START + r'(' + _SHORT_NUMERIC_DATE + r')' + _DATE_END, 4, "short_year_date"),
]

DATE_RULES: Dict[str, List[Rule]] = {
    "billing": [
        _label_rule(BILLING_LABELS, "billing_label"),
        rule(r'^\s*dated?\s*[:=]\s*(' + _ANY_DATE + r')' + _DATE_END, 9, "date_line",
             flags=re.IGNORECASE | re.MULTILINE),
    ] + GENERIC_DATE_RULES,
    "due": [
        _label_rule(DUE_LABELS, "due_label"),
    ] + GENERIC_DATE_RULES,
}
