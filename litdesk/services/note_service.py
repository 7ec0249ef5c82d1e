"""Note ingestion: extract metadata from a note and store the paper."""

import logging
from dataclasses import asdict
from typing import Any, Optional

from litdesk.database.repository import PaperRepository
from litdesk.errors import ValidationError
from litdesk.models.paper import Paper
from litdesk.services.extraction_service import MetadataExtractor
from litdesk.utils.text import coerce_citation_count

logger = logging.getLogger(__name__)


class NoteService:
    """Creates papers from raw notes or from manually entered fields."""

    def __init__(self, repo: PaperRepository, extractor: Optional[MetadataExtractor] = None):
        self.repo = repo
        self.extractor = extractor

    def submit_note(self, note_text: str) -> Paper:
        """Extract metadata from *note_text* and store it with the note.

        The note is trimmed once at the edge and then stored as-is;
        extraction never alters it.

        Raises:
            ValidationError: If the note is blank
            ExtractionError: If the backend call fails (nothing is stored)
        """
        note = note_text.strip() if isinstance(note_text, str) else ""
        if not note:
            raise ValidationError("noteText is required")
        if self.extractor is None:
            raise ValidationError("No metadata extractor configured")

        metadata = self.extractor.extract(note)
        fields = asdict(metadata)
        fields["note"] = note
        return self.repo.create(fields)

    def add_manual(self, fields: dict[str, Any]) -> Paper:
        """Store a paper typed in by hand (no model call).

        Raises:
            ValidationError: If both title and note are blank, or the
                citation count is not a number
        """
        cleaned: dict[str, Any] = {}
        for key in ("author", "title", "url", "published_date", "note"):
            value = fields.get(key)
            cleaned[key] = value.strip() if isinstance(value, str) else ""
        if not cleaned["title"] and not cleaned["note"]:
            raise ValidationError("Add at least a title or a note.")

        raw_count = fields.get("citation_count")
        count = coerce_citation_count(raw_count)
        if count is None and raw_count not in (None, ""):
            raise ValidationError("citation_count must be a number")
        cleaned["citation_count"] = count
        return self.repo.create(cleaned)
