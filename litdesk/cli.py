"""Command-line interface handlers (local mode: direct store + backend)."""

import argparse
import asyncio
import sys
from typing import Any, Optional

from rich.progress import Progress, SpinnerColumn, TextColumn

from litdesk.config import Settings
from litdesk.console import ConsoleUI
from litdesk.database.repository import PaperRepository
from litdesk.errors import (
    ConfigurationError,
    ExtractionError,
    LitDeskError,
    NotFoundError,
    QueryError,
    ValidationError,
)
from litdesk.logging_config import configure_logging
from litdesk.services.extraction_service import KeywordExtractor, MetadataExtractor
from litdesk.services.keyword_service import KeywordWorker
from litdesk.services.llm_service import check_backend, create_backend
from litdesk.services.note_service import NoteService
from litdesk.services.query_service import QueryAnswerer
from litdesk.services.timeline_service import build_timeline


class LitDeskCLI:
    """CLI application for Literature Desk."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize CLI with settings.

        Args:
            settings: Application settings (loads from disk/env if not provided)
        """
        self.settings = settings or Settings.load()
        self.ui = ConsoleUI()
        self.repo = PaperRepository(self.settings.db_path)

    def cmd_add(self, note_text: str) -> None:
        """Extract metadata from a note and save it."""
        service = NoteService(self.repo, MetadataExtractor(create_backend(self.settings)))
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            console=self.ui.console,
            transient=True,
        ) as progress:
            progress.add_task("Extracting…", total=None)
            paper = service.submit_note(note_text)
        self.ui.created(paper)

    def cmd_add_manual(self, fields: dict[str, Any]) -> None:
        """Save a paper from fields given on the command line."""
        paper = NoteService(self.repo).add_manual(fields)
        self.ui.created(paper)

    def cmd_list(self) -> None:
        """List all papers, newest first."""
        self.ui.display_papers(self.repo.list_papers())

    def cmd_show(self, paper_id: int) -> None:
        """Show one paper including its note."""
        self.ui.display_paper(self.repo.get(paper_id))

    def cmd_edit(self, paper_id: int, fields: dict[str, Any]) -> None:
        """Apply field edits to one paper."""
        if not fields:
            self.ui.warning("Nothing to change.")
            return
        paper = self.repo.update(paper_id, fields)
        self.ui.success(f"Saved {paper.code}.")

    def cmd_delete(self, ids: list[int]) -> None:
        """Delete papers by id."""
        self.ui.deleted(self.repo.delete(ids))

    def cmd_ask(self, question: str) -> None:
        """Answer a question from the saved notes."""
        answerer = QueryAnswerer(create_backend(self.settings))
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            console=self.ui.console,
            transient=True,
        ) as progress:
            progress.add_task("Thinking…", total=None)
            answer = answerer.answer(self.repo.list_papers(), question)
        self.ui.answer(answer)

    def cmd_timeline(self) -> None:
        """Print papers by year."""
        self.ui.display_timeline(build_timeline(self.repo.list_papers()))

    def cmd_keywords(self, cycles: int = 100) -> None:
        """Populate missing keywords, one paper at a time."""
        backend = create_backend(self.settings)
        worker = KeywordWorker(self.repo, lambda: KeywordExtractor(backend))
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            console=self.ui.console,
            transient=True,
        ) as progress:
            progress.add_task("Extracting keywords…", total=None)
            attempted = worker.run_until_idle(max_cycles=cycles)
        done = [p for p in self.repo.list_papers() if p.id in attempted and p.keywords]
        self.ui.success(f"Keywords added to {len(done)} of {len(attempted)} paper(s).")

    def cmd_check_backend(self) -> None:
        """Probe the self-hosted backend."""
        result = asyncio.run(check_backend(self.settings.ollama_base_url))
        label = f"Ollama at {self.settings.ollama_base_url}: {result['message']}"
        if result["ok"]:
            self.ui.success(label)
        else:
            self.ui.error(label)


def _fields_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Collect the record fields that were actually given."""
    fields: dict[str, Any] = {}
    for name in ("author", "title", "url", "published_date", "citation_count", "note"):
        value = getattr(args, name, None)
        if value is not None:
            fields[name] = value
    return fields


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="litdesk",
        description="Research note → LLM metadata extraction → SQLite",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Extract metadata from a note and save it")
    add_parser.add_argument("note", help="Raw note text ('-' reads stdin)")

    def add_field_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--author")
        p.add_argument("--title")
        p.add_argument("--url")
        p.add_argument("--published", dest="published_date")
        p.add_argument("--citations", dest="citation_count", type=int)
        p.add_argument("--note")

    manual_parser = subparsers.add_parser("add-manual", help="Save a paper from explicit fields")
    add_field_args(manual_parser)

    subparsers.add_parser("list", help="List papers, newest first")

    show_parser = subparsers.add_parser("show", help="Show one paper with its note")
    show_parser.add_argument("id", type=int)

    edit_parser = subparsers.add_parser("edit", help="Edit fields of one paper")
    edit_parser.add_argument("id", type=int)
    add_field_args(edit_parser)

    delete_parser = subparsers.add_parser("delete", help="Delete papers by id")
    delete_parser.add_argument("ids", nargs="+", type=int, help="Paper IDs to delete")

    ask_parser = subparsers.add_parser("ask", help="Ask a question about your notes")
    ask_parser.add_argument("question")

    subparsers.add_parser("timeline", help="Show papers by year")

    kw_parser = subparsers.add_parser("keywords", help="Fill in missing keywords")
    kw_parser.add_argument(
        "--cycles",
        type=int,
        default=100,
        help="Maximum papers to process (default: 100)",
    )

    subparsers.add_parser("check-backend", help="Test the Ollama connection")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host")
    serve_parser.add_argument("--port", type=int)

    return parser


def run_cli(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI. Returns the process exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = Settings.load()
    configure_logging("DEBUG" if args.debug else settings.log_level)

    if args.command == "serve":
        from litdesk.__main__ import serve

        serve(host=args.host, port=args.port)
        return 0

    cli = LitDeskCLI(settings)
    try:
        if args.command == "add":
            note = sys.stdin.read() if args.note == "-" else args.note
            cli.cmd_add(note)
        elif args.command == "add-manual":
            cli.cmd_add_manual(_fields_from_args(args))
        elif args.command == "list":
            cli.cmd_list()
        elif args.command == "show":
            cli.cmd_show(args.id)
        elif args.command == "edit":
            cli.cmd_edit(args.id, _fields_from_args(args))
        elif args.command == "delete":
            cli.cmd_delete(args.ids)
        elif args.command == "ask":
            cli.cmd_ask(args.question)
        elif args.command == "timeline":
            cli.cmd_timeline()
        elif args.command == "keywords":
            cli.cmd_keywords(args.cycles)
        elif args.command == "check-backend":
            cli.cmd_check_backend()
    except ValidationError as e:
        cli.ui.error(e.message)
        return 2
    except NotFoundError as e:
        cli.ui.error(e.message)
        return 1
    except ExtractionError:
        cli.ui.error("Extraction failed. Check the backend, then try again.")
        return 1
    except (ConfigurationError, QueryError) as e:
        cli.ui.error(e.message)
        return 1
    except LitDeskError as e:
        cli.ui.error(str(e))
        return 1
    return 0
