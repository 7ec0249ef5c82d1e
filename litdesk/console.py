"""Console UI for terminal output using Rich."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from litdesk.models.paper import Paper
from litdesk.services.timeline_service import TimelineEntry


class ConsoleUI:
    """Rich-based console UI for paper display and notifications."""

    def __init__(self):
        """Initialize console."""
        self._console = Console()

    @property
    def console(self) -> Console:
        return self._console

    def info(self, message: str) -> None:
        """Print an info message."""
        self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        """Print a success message in green."""
        self._console.print(f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        """Print a warning message in yellow."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Print an error message in red."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def created(self, paper: Paper) -> None:
        self._console.print(
            f"[green]Saved[/green] [bold]{escape(paper.code or '')}[/bold] (id {paper.id}): "
            f"{escape(paper.title or 'Untitled')}"
        )

    def deleted(self, count: int) -> None:
        self._console.print(f"[green]Deleted[/green]: {count} paper(s)")

    def display_papers(self, papers: list[Paper]) -> None:
        """Display papers in a formatted table (the literature index)."""
        table = Table(title=f"Literature Index ({len(papers)} papers)")
        table.add_column("ID", justify="right")
        table.add_column("Code")
        table.add_column("Author", overflow="fold")
        table.add_column("Title", overflow="fold")
        table.add_column("Link", overflow="fold")
        table.add_column("Published", width=12)
        table.add_column("Citations", justify="right")

        for paper in papers:
            table.add_row(
                str(paper.id) if paper.id else "-",
                Text(paper.code or "—"),
                Text(paper.author or "Unknown"),
                Text(paper.title or "Untitled"),
                Text(paper.url or "—"),
                Text(paper.published_date or "—"),
                "—" if paper.citation_count is None else str(paper.citation_count),
            )

        self._console.print(table)
        if not papers:
            self._console.print("No notes yet. Add one to populate your table.")

    def display_paper(self, paper: Paper) -> None:
        """Show one paper with its full note."""
        self._console.print(
            f"[bold]{escape(paper.code or '')}[/bold]  {escape(paper.title or 'Untitled')}"
        )
        self._console.print(f"Author:    {paper.author or '—'}", markup=False)
        self._console.print(f"Link:      {paper.url or '—'}", markup=False)
        self._console.print(f"Published: {paper.published_date or '—'}", markup=False)
        count = "—" if paper.citation_count is None else paper.citation_count
        self._console.print(f"Citations: {count}")
        if paper.keywords:
            self._console.print(f"Keywords:  {', '.join(paper.keywords)}", markup=False)
        self._console.print(f"Created:   {paper.created_at}")
        self._console.print()
        self._console.print(paper.note, markup=False)

    def display_timeline(self, entries: list[TimelineEntry]) -> None:
        """Print the timeline, oldest first."""
        if not entries:
            self._console.print("Add papers to see them plotted here.")
            return
        for entry in entries:
            self._console.print(
                f"[bold]{entry.year_label}[/bold]  "
                f"[cyan]{escape(entry.code or '—')}[/cyan]  {escape(entry.title)}"
            )
            for point in entry.points:
                self._console.print(f"    • {point}", markup=False)
            if entry.keywords:
                self._console.print(f"    [dim]{escape(', '.join(entry.keywords))}[/dim]")

    def answer(self, text: str) -> None:
        self._console.print(text, markup=False)
