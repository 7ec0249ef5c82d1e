"""Metadata and keyword extraction from raw research notes."""

import logging

from litdesk.errors import BackendUnavailableError, ExtractionError, ValidationError
from litdesk.models.paper import ExtractedMetadata
from litdesk.services.llm_service import ChatBackend
from litdesk.utils.text import (
    MAX_KEYWORDS,
    coerce_citation_count,
    coerce_text,
    normalize_keywords,
    parse_json_array,
    parse_json_object,
)

logger = logging.getLogger(__name__)

METADATA_PROMPT = (
    "You are a strict JSON generator.\n"
    "Extract the paper metadata from the note below.\n"
    "Return ONLY a JSON object with keys: author, title, url, published_date, citation_count.\n"
    "If a field is unknown, use an empty string or null for citation_count.\n"
    "\n"
    "NOTE:\n"
    "{note}"
)

KEYWORD_PROMPT = (
    "You are a strict JSON generator.\n"
    "Read the research note below and return ONLY a JSON array of 5 to 8 short "
    "keywords (one to three words each) describing its topics and methods.\n"
    'Example: ["protein folding", "cryo-EM", "deep learning"]\n'
    "\n"
    "NOTE:\n"
    "{note}"
)


class MetadataExtractor:
    """Turns free-form note text into an :class:`ExtractedMetadata`."""

    def __init__(self, backend: ChatBackend):
        self.backend = backend

    def extract(self, note_text: str) -> ExtractedMetadata:
        """Extract metadata with one backend call.

        Malformed model output never raises; it degrades to empty fields.

        Raises:
            ValidationError: If *note_text* is blank
            ExtractionError: If the backend call fails
        """
        if not note_text or not note_text.strip():
            raise ValidationError("noteText is required")

        prompt = METADATA_PROMPT.format(note=note_text)
        try:
            content = self.backend.complete(prompt, json_mode=True)
        except BackendUnavailableError as e:
            logger.error(
                "Metadata extraction failed: backend=%s status=%s",
                self.backend.name,
                e.status_code,
            )
            raise ExtractionError(e.message, status_code=e.status_code, body=e.body) from e

        return self.from_response(content or "{}")

    @staticmethod
    def from_response(content: str) -> ExtractedMetadata:
        """Decode and coerce a raw model response."""
        parsed = parse_json_object(content)
        return ExtractedMetadata(
            author=coerce_text(parsed.get("author")),
            title=coerce_text(parsed.get("title")),
            url=coerce_text(parsed.get("url")),
            published_date=coerce_text(parsed.get("published_date")),
            citation_count=coerce_citation_count(parsed.get("citation_count")),
        )


class KeywordExtractor:
    """Derives up to eight short keyword tags from a note."""

    def __init__(self, backend: ChatBackend, limit: int = MAX_KEYWORDS):
        self.backend = backend
        self.limit = limit

    def extract(self, note_text: str) -> list[str]:
        """Return normalised keywords for *note_text*.

        Raises:
            ValidationError: If *note_text* is blank
            ExtractionError: If the backend call fails
        """
        if not note_text or not note_text.strip():
            raise ValidationError("note is required for keyword extraction")

        prompt = KEYWORD_PROMPT.format(note=note_text)
        try:
            content = self.backend.complete(prompt)
        except BackendUnavailableError as e:
            raise ExtractionError(e.message, status_code=e.status_code, body=e.body) from e

        return normalize_keywords(parse_json_array(content or "[]"), self.limit)
