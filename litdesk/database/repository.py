"""Paper repository for database operations."""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

from litdesk.errors import NotFoundError
from litdesk.models.paper import Paper
from litdesk.utils.text import next_code

logger = logging.getLogger(__name__)

# Fields callers may set on create/update. id, code, created_at are owned here.
MUTABLE_FIELDS = (
    "author",
    "title",
    "url",
    "published_date",
    "citation_count",
    "note",
    "keywords",
)

COLUMNS = (
    "id, code, author, title, url, published_date, citation_count, "
    "note, keywords, created_at"
)

DEMO_PAPER = {
    "author": "Ada Lovelace",
    "title": "Welcome to Literature Desk",
    "url": "",
    "published_date": "1843",
    "citation_count": None,
    "note": (
        "This is a sample note. Paste a raw research note, abstract or "
        "citation and the author, title, link and date are extracted for you."
    ),
}


class PaperRepository:
    """Repository for paper CRUD operations using SQLite."""

    def __init__(self, db_path: Path):
        """Initialize repository with database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._init_db()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS papers (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    code TEXT,
                    author TEXT NOT NULL DEFAULT '',
                    title TEXT NOT NULL DEFAULT '',
                    url TEXT NOT NULL DEFAULT '',
                    published_date TEXT NOT NULL DEFAULT '',
                    citation_count INTEGER,
                    note TEXT NOT NULL DEFAULT '',
                    keywords TEXT,
                    created_at TEXT NOT NULL
                );
            """)

            # Databases written before codes and keywords existed
            cursor.execute("PRAGMA table_info(papers)")
            columns = [row[1] for row in cursor.fetchall()]
            if "keywords" not in columns:
                cursor.execute("ALTER TABLE papers ADD COLUMN keywords TEXT")
            if "code" not in columns:
                cursor.execute("ALTER TABLE papers ADD COLUMN code TEXT")
            self._backfill_codes(cursor)

            cursor.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_code ON papers(code);")
            conn.commit()

    @staticmethod
    def _backfill_codes(cursor: sqlite3.Cursor) -> None:
        """Assign codes, oldest first, to rows that have none."""
        cursor.execute("SELECT code FROM papers WHERE code IS NOT NULL")
        codes = {row[0] for row in cursor.fetchall()}
        cursor.execute("SELECT id, author FROM papers WHERE code IS NULL ORDER BY id ASC")
        for paper_id, author in cursor.fetchall():
            code = next_code(author, codes)
            codes.add(code)
            cursor.execute("UPDATE papers SET code = ? WHERE id = ?", (code, paper_id))
            logger.info("Backfilled code %s for paper %d", code, paper_id)

    @staticmethod
    def _to_paper(row: sqlite3.Row) -> Paper:
        keywords: list[str] = []
        if row["keywords"]:
            try:
                decoded = json.loads(row["keywords"])
                if isinstance(decoded, list):
                    keywords = [str(k) for k in decoded]
            except ValueError:
                logger.warning("Unreadable keywords on paper %s", row["id"])
        return Paper(
            id=row["id"],
            code=row["code"],
            author=row["author"] or "",
            title=row["title"] or "",
            url=row["url"] or "",
            published_date=row["published_date"] or "",
            citation_count=row["citation_count"],
            note=row["note"] or "",
            keywords=keywords,
            created_at=row["created_at"],
        )

    @staticmethod
    def _encode_keywords(keywords: Optional[list[str]]) -> Optional[str]:
        return json.dumps(list(keywords), ensure_ascii=False) if keywords else None

    # ── Create ────────────────────────────────────────────────────────

    def create(self, fields: dict[str, Any]) -> Paper:
        """Insert a new paper and return it as stored.

        The note is stored exactly as given.  A code is derived from the
        author against every code present at call time.

        Args:
            fields: Any of ``MUTABLE_FIELDS``; missing ones default to empty

        Returns:
            The created Paper with id, code and created_at set
        """
        now = datetime.now(timezone.utc).isoformat()
        author = fields.get("author") or ""

        with self._connection() as conn:
            cursor = conn.cursor()
            code = next_code(author, self._codes(cursor))
            cursor.execute(
                """
                INSERT INTO papers
                (code, author, title, url, published_date, citation_count, note, keywords, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    code,
                    author,
                    fields.get("title") or "",
                    fields.get("url") or "",
                    fields.get("published_date") or "",
                    fields.get("citation_count"),
                    fields.get("note") or "",
                    self._encode_keywords(fields.get("keywords")),
                    now,
                ),
            )
            conn.commit()
            paper_id = cursor.lastrowid

        logger.info("Created paper %d (%s)", paper_id, code)
        return self.get(paper_id)

    # ── Read ──────────────────────────────────────────────────────────

    def list_papers(self) -> list[Paper]:
        """Return all papers, newest id first.

        When the table is empty a single demo paper is seeded first, so
        the first listing (and any listing after everything was deleted)
        is never blank.
        """
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS cnt FROM papers")
            empty = cursor.fetchone()["cnt"] == 0

        if empty:
            logger.info("Empty store, seeding demo paper")
            self.create(DEMO_PAPER)

        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {COLUMNS} FROM papers ORDER BY id DESC")
            rows = cursor.fetchall()

        return [self._to_paper(row) for row in rows]

    def list_summaries(self) -> list[dict[str, Any]]:
        """Return ``list_papers()`` as dicts without the note field."""
        return [p.to_dict(include_note=False) for p in self.list_papers()]

    def get(self, paper_id: int) -> Paper:
        """Find a single paper by ID.

        Raises:
            NotFoundError: If no paper has this id
        """
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {COLUMNS} FROM papers WHERE id = ?",
                (paper_id,),
            )
            row = cursor.fetchone()

        if row is None:
            raise NotFoundError(paper_id)
        return self._to_paper(row)

    def count(self) -> int:
        """Number of stored papers (no seeding)."""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS cnt FROM papers")
            return cursor.fetchone()["cnt"]

    def get_codes(self) -> set[str]:
        """Every code currently assigned."""
        with self._connection() as conn:
            return self._codes(conn.cursor())

    @staticmethod
    def _codes(cursor: sqlite3.Cursor) -> set[str]:
        cursor.execute("SELECT code FROM papers WHERE code IS NOT NULL")
        return {row[0] for row in cursor.fetchall()}

    # ── Update ────────────────────────────────────────────────────────

    def update(self, paper_id: int, fields: dict[str, Any]) -> Paper:
        """Merge *fields* onto an existing paper.

        Only ``MUTABLE_FIELDS`` are applied; id, code and created_at never
        change.  Changing the note without supplying keywords clears the
        keywords so they are regenerated from the new text.

        Raises:
            NotFoundError: If no paper has this id
        """
        current = self.get(paper_id)
        changes = {k: v for k, v in fields.items() if k in MUTABLE_FIELDS}
        if "note" in changes and "keywords" not in changes and changes["note"] != current.note:
            changes["keywords"] = []
        if not changes:
            return current

        assignments = []
        params: list[Any] = []
        for key, value in changes.items():
            if key == "keywords":
                value = self._encode_keywords(value)
            elif key != "citation_count":
                value = value or ""
            assignments.append(f"{key} = ?")
            params.append(value)
        params.append(paper_id)

        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"UPDATE papers SET {', '.join(assignments)} WHERE id = ?",
                params,
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(paper_id)

        return self.get(paper_id)

    # ── Delete ────────────────────────────────────────────────────────

    def delete(self, ids: Iterable[Any]) -> int:
        """Delete papers by id.

        Ids that are not positive integers are dropped, duplicates are
        collapsed and unknown ids are ignored.

        Returns:
            Number of papers actually deleted (0 without touching the DB
            when nothing valid was given)
        """
        unique_ids = clean_ids(ids)
        if not unique_ids:
            return 0

        placeholders = ",".join(["?"] * len(unique_ids))
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"DELETE FROM papers WHERE id IN ({placeholders})",
                unique_ids,
            )
            conn.commit()
            deleted = cursor.rowcount

        logger.info("Deleted %d of %d requested papers", deleted, len(unique_ids))
        return deleted


def clean_ids(ids: Iterable[Any]) -> list[int]:
    """Positive integer ids from *ids*, deduplicated, in first-seen order.

    Accepts ints and digit strings; bools and everything else are dropped.
    """
    seen: list[int] = []
    for raw in ids:
        if isinstance(raw, bool):
            continue
        if isinstance(raw, int):
            value = raw
        elif isinstance(raw, str) and raw.strip().isdigit():
            value = int(raw.strip())
        elif isinstance(raw, float) and raw.is_integer():
            value = int(raw)
        else:
            continue
        if value > 0 and value not in seen:
            seen.append(value)
    return seen
