"""
Model Field Extractor Module.

This module asks the external completion service for all invoice fields
at once. The answer is treated as a set of untrusted guesses: it is
parsed here and validated field by field during the merge.

Approach:
    A bounded, head-truncated excerpt of the text plus explicit
    extraction rules is sent as one prompt; a single JSON object is
    expected back.

Author: ML Engineering Team
"""

import json
import re
from typing import Any, Dict, Optional

from config import get_config
from invoice_fields.utils.logger import get_logger
from invoice_fields.utils.helpers import truncate_text
from invoice_fields.utils.exceptions import CompletionServiceError
from .completion_client import CompletionClient

# Initialize module logger
logger = get_logger(__name__)


SYSTEM_PROMPT = (
    "You are an expert invoice parser. Extract invoice data with high accuracy, "
    "especially for amounts and dates. Always return valid JSON only. Amount must "
    "be a number (not string). Dates must be in YYYY-MM-DD format."
)

PROMPT_TEMPLATE = """Extract the following information from this invoice text and return ONLY a valid JSON object.

REQUIRED FIELDS (use null if not found):
{{
  "invoiceNumber": "string or null",
  "amount": number or null,
  "provider": "string or null",
  "billingDate": "YYYY-MM-DD or null",
  "dueDate": "YYYY-MM-DD or null",
  "category": "string or null"
}}

RULES:
1. AMOUNT: use the value labeled "Total", "Amount Due", "Grand Total" or
   "Balance Due". Remove currency symbols and thousands separators;
   "$5,000.00" becomes 5000.00.
2. DATES: billing date follows "Invoice Date", "Billing Date", "Issue Date";
   due date follows "Due Date", "Payment Due", "Pay By". Convert to
   YYYY-MM-DD. When a numeric date is ambiguous, the first number is the
   day unless it cannot be.
3. INVOICE NUMBER: follows "Invoice Number", "Invoice #", "Invoice No",
   "Reference"; typical shapes are INV-2024-001 or BILL-001.
4. PROVIDER: the vendor issuing the invoice ("From:", "Vendor:",
   "Billed By:", or the header), e.g. AWS, Azure, GitHub, Stripe.
5. CATEGORY: a short spending category such as "Cloud Services".

Invoice Text:
{text}

Filename: {filename}

Return ONLY valid JSON. No explanations, no markdown."""

# Keys of the JSON answer, mapped to field names
RESPONSE_KEYS = {
    'invoiceNumber': 'invoice_number',
    'amount': 'amount',
    'provider': 'provider',
    'billingDate': 'billing_date',
    'dueDate': 'due_date',
    'category': 'category',
}


def parse_json_object(content: str) -> Optional[Dict[str, Any]]:
    """
    Extract the first JSON object from a completion answer.

    Tolerates markdown code fences and text around the object.

    Args:
        content: Raw completion text.

    Returns:
        Parsed dict, or None if no JSON object could be read.
    """
    if not content or not content.strip():
        return None

    stripped = re.sub(r'^```(?:json)?\s*|\s*```$', '', content.strip(), flags=re.IGNORECASE)

    try:
        parsed = json.loads(stripped)
    except ValueError:
        parsed = _first_balanced_object(stripped)

    return parsed if isinstance(parsed, dict) else None


def _first_balanced_object(text: str) -> Optional[Any]:
    start = text.find('{')
    while start != -1:
        depth = 0
        in_string = False
        escape = False

        for index in range(start, len(text)):
            char = text[index]
            if escape:
                escape = False
            elif char == '\\' and in_string:
                escape = True
            elif char == '"':
                in_string = not in_string
            elif not in_string and char == '{':
                depth += 1
            elif not in_string and char == '}':
                depth -= 1
                if depth == 0:
                    try:
                        return json.loads(text[start:index + 1])
                    except ValueError:
                        break

        start = text.find('{', start + 1)

    return None


class ModelFieldExtractor:
    """
    Field extraction through the completion service.

    Attributes:
        client: CompletionClient used for the request
        max_prompt_chars: Length of the text excerpt sent

    Example:
        >>> extractor = ModelFieldExtractor(client)
        >>> guesses = extractor.extract(text, "AWS-INV-2024-0099.pdf")
        >>> guesses.get("amount")
        1234.56
    """

    TRUNCATION_MARKER = " ... (truncated)"

    def __init__(self, client: CompletionClient, max_prompt_chars: Optional[int] = None) -> None:
        self.client = client
        self.max_prompt_chars = max_prompt_chars or get_config("completion.max_prompt_chars", 6000)

    def build_prompt(self, text: str, filename: str) -> str:
        excerpt = truncate_text(text, self.max_prompt_chars, self.TRUNCATION_MARKER)
        return PROMPT_TEMPLATE.format(text=excerpt, filename=filename)

    def extract(self, text: str, filename: str) -> Dict[str, Any]:
        """
        Ask the completion service for every field.

        Args:
            text: Normalized invoice text.
            filename: Original filename.

        Returns:
            Raw guesses keyed by field name; keys with null values are
            omitted.

        Raises:
            CompletionServiceError: If the call fails or the answer is
                not a single JSON object.
        """
        content = self.client.complete(self.build_prompt(text, filename), SYSTEM_PROMPT)

        parsed = parse_json_object(content)
        if parsed is None:
            raise CompletionServiceError(
                f"Response is not a JSON object: {truncate_text(content, 200)}",
                getattr(self.client, "provider", None)
            )

        guesses = {
            field_name: parsed[key]
            for key, field_name in RESPONSE_KEYS.items()
            if parsed.get(key) is not None
        }

        logger.debug(f"Completion service proposed: {guesses}")
        return guesses
