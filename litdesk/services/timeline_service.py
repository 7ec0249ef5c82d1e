"""Timeline view model: papers placed by year with short highlights."""

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from litdesk.models.paper import Paper
from litdesk.utils.text import key_points, parse_year


@dataclass
class TimelineEntry:
    """One paper on the timeline."""

    id: Optional[int]
    code: Optional[str]
    year: Optional[int]
    title: str
    points: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)

    @property
    def year_label(self) -> str:
        return "—" if self.year is None else str(self.year)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["year_label"] = self.year_label
        return data


def build_timeline(papers: list[Paper]) -> list[TimelineEntry]:
    """Oldest first by year of publication (falling back to creation year).

    Papers with no recognisable year sort first; ties keep list order.
    """
    entries = []
    for paper in papers:
        year = parse_year(paper.published_date)
        if year is None:
            year = parse_year(paper.created_at)
        entries.append(
            TimelineEntry(
                id=paper.id,
                code=paper.code,
                year=year,
                title=paper.title or "Untitled",
                points=key_points(paper.note),
                keywords=list(paper.keywords),
            )
        )
    entries.sort(key=lambda e: 0 if e.year is None else e.year)
    return entries
