"""Paper data model."""

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass
class ExtractedMetadata:
    """Best-effort metadata pulled out of a free-text note."""

    author: str = ""
    title: str = ""
    url: str = ""
    published_date: str = ""
    citation_count: Optional[int] = None


@dataclass
class Paper:
    """A stored literature note plus its extracted metadata."""

    note: str
    author: str = ""
    title: str = ""
    url: str = ""
    published_date: str = ""
    citation_count: Optional[int] = None
    keywords: list[str] = field(default_factory=list)

    # Database fields (set after persistence)
    id: Optional[int] = None
    code: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self, include_note: bool = True) -> dict[str, Any]:
        """Serialise for the JSON API (``note`` optional for list views)."""
        data = asdict(self)
        if not include_note:
            data.pop("note")
        return data
