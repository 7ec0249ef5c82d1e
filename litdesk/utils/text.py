"""Text helpers: lenient JSON decoding of model output, field coercion,
citation-code derivation and timeline text parsing."""

import json
import logging
import math
import re
from typing import Any, Iterable, Optional

from litdesk.errors import DecodeError

logger = logging.getLogger(__name__)

# First top-level {...} / [...] span, greedy so nested braces stay inside.
OBJECT_SPAN_RE = re.compile(r"\{[\s\S]*\}")
ARRAY_SPAN_RE = re.compile(r"\[[\s\S]*\]")
YEAR_RE = re.compile(r"\d{4}")
BULLET_RE = re.compile(r"^[-*•]\s*")
SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")

DEFAULT_CODE_PREFIX = "X"
MAX_KEYWORDS = 8
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


# ---------------------------------------------------------------------------
# Lenient JSON
# ---------------------------------------------------------------------------

def _loads_lenient(content: str, span_re: re.Pattern) -> Any:
    """``json.loads`` with a regex-span fallback.

    Raises:
        DecodeError: If neither the whole text nor the span parses
    """
    try:
        return json.loads(content)
    except (TypeError, ValueError):
        pass
    match = span_re.search(content or "")
    if not match:
        raise DecodeError(f"No JSON in model output ({len(content or '')} chars)")
    try:
        return json.loads(match.group(0))
    except ValueError as e:
        raise DecodeError(f"JSON span in model output did not parse: {e}") from e


def parse_json_object(content: str) -> dict[str, Any]:
    """Decode a JSON object from free model text; never raises.

    Tries the whole text, then the first ``{...}`` span; anything that
    does not end up as a dict becomes ``{}``.
    """
    try:
        parsed = _loads_lenient(content, OBJECT_SPAN_RE)
    except DecodeError as e:
        logger.debug("%s", e.message)
        return {}
    return parsed if isinstance(parsed, dict) else {}


def parse_json_array(content: str) -> list[Any]:
    """Decode a JSON array from free model text; never raises."""
    try:
        parsed = _loads_lenient(content, ARRAY_SPAN_RE)
    except DecodeError as e:
        logger.debug("%s", e.message)
        return []
    return parsed if isinstance(parsed, list) else []


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

def coerce_text(value: Any) -> str:
    """Trimmed string, or ``""`` for anything that is not a string."""
    return value.strip() if isinstance(value, str) else ""


def coerce_citation_count(value: Any) -> Optional[int]:
    """Normalise a citation count.

    ``42`` / ``17.0`` / ``"42"`` → int; ``None``, ``""``, ``"abc"``,
    booleans, non-finite numbers and values outside SQLite's 64-bit
    INTEGER range → ``None``.  Fractions are truncated.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return _in_int64(value)
    if isinstance(value, float):
        return _in_int64(int(value)) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        return _in_int64(int(number)) if math.isfinite(number) else None
    return None


def _in_int64(number: int) -> Optional[int]:
    return number if INT64_MIN <= number <= INT64_MAX else None


def normalize_keywords(values: Iterable[Any], limit: int = MAX_KEYWORDS) -> list[str]:
    """Trim, drop empties and non-strings, dedupe (case-sensitive), cap."""
    keywords: list[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        word = value.strip()
        if word and word not in keywords:
            keywords.append(word)
        if len(keywords) >= limit:
            break
    return keywords


# ---------------------------------------------------------------------------
# Citation codes
# ---------------------------------------------------------------------------

def author_prefix(author: Optional[str]) -> str:
    """Initials of the first one or two alphabetic tokens of *author*.

    >>> author_prefix("Jane Doe")
    'JD'
    >>> author_prefix("")
    'X'
    """
    initials = []
    for token in (author or "").split():
        letters = "".join(ch for ch in token if ch.isalpha())
        if letters:
            initials.append(letters[0].upper())
        if len(initials) == 2:
            break
    return "".join(initials) or DEFAULT_CODE_PREFIX


def next_code(author: Optional[str], existing_codes: Iterable[str]) -> str:
    """Smallest ``<prefix><n>`` (n ≥ 1) not already in *existing_codes*."""
    prefix = author_prefix(author)
    taken = set(existing_codes)
    n = 1
    while f"{prefix}{n}" in taken:
        n += 1
    return f"{prefix}{n}"


# ---------------------------------------------------------------------------
# Timeline text
# ---------------------------------------------------------------------------

def parse_year(value: Optional[str]) -> Optional[int]:
    """First 4-digit run in *value*, as an int."""
    match = YEAR_RE.search(str(value or ""))
    return int(match.group(0)) if match else None


def key_points(note: Optional[str], limit: int = 2) -> list[str]:
    """Up to *limit* highlights: bullet lines if any, else leading sentences."""
    text = note or ""
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    bullets = [line for line in lines if BULLET_RE.match(line)]
    if bullets:
        return [BULLET_RE.sub("", line) for line in bullets][:limit]
    sentences = [s.strip() for s in SENTENCE_SPLIT_RE.split(text) if s.strip()]
    return sentences[:limit]
