"""Tests for the timeline view model."""

from litdesk.models.paper import Paper
from litdesk.services.timeline_service import build_timeline


def test_sorted_oldest_first():
    papers = [
        Paper(note="", id=1, code="A1", title="New", published_date="2022"),
        Paper(note="", id=2, code="B1", title="Old", published_date="May 1999"),
        Paper(note="", id=3, code="C1", title="Mid", published_date="2010-01-01"),
    ]
    assert [e.year for e in build_timeline(papers)] == [1999, 2010, 2022]


def test_falls_back_to_created_year_then_unknown_first():
    papers = [
        Paper(note="", id=1, published_date="2001"),
        Paper(note="", id=2, published_date="", created_at="2015-03-01T10:00:00+00:00"),
        Paper(note="", id=3, published_date="n.d."),
    ]
    entries = build_timeline(papers)
    assert [e.id for e in entries] == [3, 1, 2]
    assert entries[0].year is None
    assert entries[0].year_label == "—"
    assert entries[2].year == 2015


def test_entry_content():
    paper = Paper(
        note="- first\n- second\n- third",
        id=7,
        code="JD1",
        published_date="2020",
        keywords=["graphs"],
    )
    entry = build_timeline([paper])[0]
    assert entry.title == "Untitled"
    assert entry.points == ["first", "second"]
    assert entry.to_dict() == {
        "id": 7,
        "code": "JD1",
        "year": 2020,
        "title": "Untitled",
        "points": ["first", "second"],
        "keywords": ["graphs"],
        "year_label": "2020",
    }


def test_empty():
    assert build_timeline([]) == []


def test_year_zero_is_a_year():
    papers = [
        Paper(note="", id=1, published_date="0001"),
        Paper(note="", id=2, published_date="0000", created_at="2015-03-01T10:00:00+00:00"),
    ]
    entries = build_timeline(papers)
    assert [e.id for e in entries] == [2, 1]
    assert entries[0].year == 0
    assert entries[0].year_label == "0"
