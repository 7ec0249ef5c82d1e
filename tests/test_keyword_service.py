"""Tests for the background keyword worker."""

import threading

from litdesk.services.extraction_service import KeywordExtractor
from litdesk.services.keyword_service import KeywordWorker

from conftest import StubBackend, backend_error


def worker_for(repo, *replies):
    backend = StubBackend(*replies)
    return KeywordWorker(repo, lambda: KeywordExtractor(backend)), backend


class TestEligibility:

    def test_needs_note_and_no_keywords(self, repo):
        with_note = repo.create({"author": "Doe", "note": "A note."})
        repo.create({"author": "Doe", "title": "No note"})
        repo.create({"author": "Doe", "note": "Tagged.", "keywords": ["x"]})
        worker, _ = worker_for(repo)
        assert worker.eligible(repo.list_papers()) == [with_note.id]

    def test_in_flight_ids_skipped(self, repo):
        paper = repo.create({"author": "Doe", "note": "A note."})
        worker, _ = worker_for(repo)
        worker._in_flight.add(paper.id)
        assert worker.eligible(repo.list_papers()) == []
        assert worker.run_once() is None


class TestRunOnce:

    def test_processes_only_first_eligible(self, repo):
        older = repo.create({"author": "Doe", "note": "Older note."})
        newer = repo.create({"author": "Doe", "note": "Newer note."})
        worker, backend = worker_for(repo, '["graphs", "GNN"]')

        assert worker.run_once() == newer.id
        assert len(backend.prompts) == 1
        assert "Newer note." in backend.prompts[0]
        assert repo.get(newer.id).keywords == ["graphs", "GNN"]
        assert repo.get(older.id).keywords == []

    def test_failure_is_swallowed_and_paper_stays_eligible(self, repo):
        paper = repo.create({"author": "Doe", "note": "A note."})
        worker, _ = worker_for(repo, backend_error())

        assert worker.run_once() == paper.id
        assert repo.get(paper.id).keywords == []
        assert worker.in_flight == []
        assert worker.eligible(repo.list_papers()) == [paper.id]

    def test_empty_extraction_leaves_keywords_unset(self, repo):
        paper = repo.create({"author": "Doe", "note": "A note."})
        worker, _ = worker_for(repo, "no idea")
        worker.run_once()
        assert repo.get(paper.id).keywords == []

    def test_nothing_to_do(self, repo):
        repo.create({"author": "Doe", "title": "No note"})
        worker, backend = worker_for(repo)
        assert worker.run_once() is None
        assert backend.prompts == []

    def test_stopped_worker_does_nothing(self, repo):
        repo.create({"author": "Doe", "note": "A note."})
        worker, backend = worker_for(repo)
        worker.stop()
        assert worker.run_once() is None
        assert worker.trigger() is False
        assert backend.prompts == []


class TestRunUntilIdle:

    def test_drains_all_papers(self, repo):
        a = repo.create({"author": "Doe", "note": "First."})
        b = repo.create({"author": "Roe", "note": "Second."})
        worker, _ = worker_for(repo, '["alpha"]')

        assert worker.run_until_idle() == [b.id, a.id]
        assert repo.get(a.id).keywords == ["alpha"]
        assert repo.get(b.id).keywords == ["alpha"]

    def test_each_paper_attempted_once(self, repo):
        paper = repo.create({"author": "Doe", "note": "A note."})
        worker, backend = worker_for(repo, backend_error())
        assert worker.run_until_idle() == [paper.id]
        assert len(backend.prompts) == 1


class TestTrigger:

    def test_background_run_writes_keywords(self, repo):
        paper = repo.create({"author": "Doe", "note": "A note."})
        done = threading.Event()
        backend = StubBackend('["async"]')

        class SignallingExtractor(KeywordExtractor):
            def extract(self, note_text):
                try:
                    return super().extract(note_text)
                finally:
                    done.set()

        worker = KeywordWorker(repo, lambda: SignallingExtractor(backend))
        assert worker.trigger() is True
        assert done.wait(timeout=5)

        for _ in range(50):
            if not worker.running:
                break
            threading.Event().wait(0.05)
        assert not worker.running
        assert repo.get(paper.id).keywords == ["async"]

    def test_second_trigger_while_running_is_refused(self, repo):
        repo.create({"author": "Doe", "note": "A note."})
        release = threading.Event()
        backend = StubBackend('["k"]')

        class BlockingExtractor(KeywordExtractor):
            def extract(self, note_text):
                release.wait(timeout=5)
                return super().extract(note_text)

        worker = KeywordWorker(repo, lambda: BlockingExtractor(backend))
        assert worker.trigger() is True
        assert worker.trigger() is False
        release.set()
