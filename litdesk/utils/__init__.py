"""Utility functions."""

from litdesk.utils.text import (
    coerce_citation_count,
    coerce_text,
    next_code,
    parse_json_array,
    parse_json_object,
    parse_year,
)

__all__ = [
    "coerce_citation_count",
    "coerce_text",
    "next_code",
    "parse_json_array",
    "parse_json_object",
    "parse_year",
]
