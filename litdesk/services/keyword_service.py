"""Background keyword population.

Papers with a note but no keywords are processed one per trigger, in
listing order.  A process-local in-flight set keeps a paper from being
submitted twice, and a single worker thread keeps at most one extraction
running against the backend at a time.  Failures are logged and dropped;
the paper simply stays eligible for the next scan.
"""

import logging
import threading
from typing import Callable, Optional

from litdesk.database.repository import PaperRepository
from litdesk.errors import LitDeskError
from litdesk.models.paper import Paper
from litdesk.services.extraction_service import KeywordExtractor

logger = logging.getLogger(__name__)


class KeywordWorker:
    """Serialised keyword extraction over the paper store."""

    def __init__(
        self,
        repo: PaperRepository,
        extractor_factory: Callable[[], KeywordExtractor],
    ):
        """Initialize worker.

        Args:
            repo: Store to scan and write keywords back to
            extractor_factory: Builds the extractor at run time, so backend
                settings changed after startup are picked up
        """
        self.repo = repo
        self.extractor_factory = extractor_factory
        self._in_flight: set[int] = set()
        self._lock = threading.Lock()
        self._running = False
        self._stopped = False

    @property
    def in_flight(self) -> list[int]:
        with self._lock:
            return sorted(self._in_flight)

    @property
    def running(self) -> bool:
        return self._running

    def eligible(self, papers: list[Paper]) -> list[int]:
        """Ids of papers needing keywords and not already in flight."""
        with self._lock:
            busy = set(self._in_flight)
        return [
            p.id
            for p in papers
            if p.id is not None and p.note and not p.keywords and p.id not in busy
        ]

    def run_once(self) -> Optional[int]:
        """Process the first eligible paper, if any.

        Returns:
            The id that was attempted, or None when nothing was eligible
            or the worker has been stopped
        """
        if self._stopped:
            return None
        for paper_id in self.eligible(self.repo.list_papers()):
            if self._process(paper_id):
                return paper_id
        return None

    def run_until_idle(self, max_cycles: int = 100) -> list[int]:
        """Run scan cycles back to back until nothing is left to do.

        A paper whose extraction yields nothing stays eligible, so each
        id is attempted at most once per call.

        Returns:
            Ids attempted, in order
        """
        attempted: list[int] = []
        for _ in range(max_cycles):
            if self._stopped:
                break
            candidates = [
                pid for pid in self.eligible(self.repo.list_papers()) if pid not in attempted
            ]
            if not candidates:
                break
            self._process(candidates[0])
            attempted.append(candidates[0])
        return attempted

    def _process(self, paper_id: int) -> bool:
        """Extract and store keywords for one paper.

        Returns:
            False if the paper was already in flight, True otherwise
            (whether or not extraction succeeded)
        """
        with self._lock:
            if paper_id in self._in_flight:
                return False
            self._in_flight.add(paper_id)
        try:
            paper = self.repo.get(paper_id)
            keywords = self.extractor_factory().extract(paper.note)
            if keywords:
                self.repo.update(paper_id, {"keywords": keywords})
            logger.info("Keywords for paper %d: %d found", paper_id, len(keywords))
        except LitDeskError as e:
            logger.warning("Keyword extraction for paper %d failed: %s", paper_id, e)
        finally:
            with self._lock:
                self._in_flight.discard(paper_id)
        return True

    def trigger(self) -> bool:
        """Start one ``run_once`` on a daemon thread (non-blocking).

        Returns:
            True if a run was started, False if one is already active or
            the worker is stopped
        """
        with self._lock:
            if self._running or self._stopped:
                return False
            self._running = True
        threading.Thread(target=self._run_bg, daemon=True).start()
        return True

    def _run_bg(self) -> None:
        try:
            self.run_once()
        except Exception:
            logger.exception("Keyword worker crashed")
        finally:
            self._running = False

    def stop(self) -> None:
        """Stop scheduling further scans; an outstanding call still finishes."""
        self._stopped = True
