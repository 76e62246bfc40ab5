"""
Candidate Scoring Module.

Every pattern extractor follows the same shape: scan the text with an
ordered rule table, collect all matches as scored candidates, drop the
implausible ones, and keep the highest-scoring survivor.

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Pattern, Tuple

from invoice_fields.utils.logger import get_logger
from invoice_fields.model_inference.extraction_result import (
    FieldResult, FromPattern, UNSET
)

# Initialize module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class Rule:
    """
    One entry of a rule table.

    Attributes:
        pattern: Compiled regex; group 1 (or the first group that
                 participated) is the candidate text.
        confidence: Base score inherited by every match.
        source: Short tag identifying the rule in logs.
    """
    pattern: Pattern
    confidence: int
    source: str


@dataclass(frozen=True)
class Candidate:
    """A provisional field value proposed by one rule."""
    value: Any
    confidence: int
    source: str
    raw: str = ""


# parse(raw) -> value or None; accept(value) -> (is_valid, message)
Parser = Callable[[str], Any]
Acceptor = Callable[[Any], Tuple[bool, str]]


def rule(regex: str, confidence: int, source: str, flags: int = re.IGNORECASE) -> Rule:
    """
    Compile a rule table entry.

    Example:
        >>> rule(r'\\btotal\\s*:?\\s*(\\d+)', 10, "total_label")
    """
    return Rule(re.compile(regex, flags), confidence, source)


def match_text(match) -> str:
    """Return the first participating capture group, or the whole match."""
    for group in match.groups():
        if group is not None:
            return group
    return match.group(0)


def collect_candidates(
    text: str,
    rules: Iterable[Rule],
    parse: Optional[Parser] = None,
    accept: Optional[Acceptor] = None,
    field_name: str = "field"
) -> List[Candidate]:
    """
    Scan text with every rule and collect all surviving matches.

    Args:
        text: Normalized invoice text.
        rules: Ordered rule table.
        parse: Converts the matched text to a field value; returning
               None drops the match.
        accept: Plausibility filter returning (is_valid, message).
        field_name: Field name used in log messages.

    Returns:
        Candidates in rule order, then text order.
    """
    candidates: List[Candidate] = []

    for entry in rules:
        for match in entry.pattern.finditer(text):
            raw = match_text(match).strip()
            if not raw:
                continue

            value = parse(raw) if parse else raw
            if value is None:
                logger.debug(f"[{field_name}] {entry.source}: could not parse '{raw}'")
                continue

            if accept:
                is_valid, message = accept(value)
                if not is_valid:
                    logger.debug(f"[{field_name}] {entry.source}: rejected '{raw}' ({message})")
                    continue

            candidates.append(Candidate(value, entry.confidence, entry.source, raw))

    return candidates


def select_best(candidates: Iterable[Candidate]) -> Optional[Candidate]:
    """
    Pick the highest-confidence candidate.

    Ties go to the earliest candidate, so rule order and text order
    decide between equally scored matches.
    """
    best: Optional[Candidate] = None
    for candidate in candidates:
        if best is None or candidate.confidence > best.confidence:
            best = candidate
    return best


def to_field_result(candidate: Optional[Candidate]) -> FieldResult:
    """Wrap the winning candidate as a FieldResult."""
    if candidate is None:
        return UNSET
    return FromPattern(candidate.value, candidate.confidence, candidate.source)
