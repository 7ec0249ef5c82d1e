"""Question answering over stored notes, citing papers by code only."""

import logging

from litdesk.errors import BackendUnavailableError, QueryError
from litdesk.models.paper import Paper
from litdesk.services.llm_service import ChatBackend
from litdesk.utils.text import parse_year

logger = logging.getLogger(__name__)

CONTEXT_LIMIT = 20
NO_ANSWER = "No answer returned."
INSUFFICIENT = "I don't have enough information in your notes to answer that."

QUERY_PROMPT = (
    "You answer questions about a researcher's literature notes.\n"
    "Use ONLY the notes below. Each note starts with its code in square brackets.\n"
    "Rules:\n"
    "- Cite every factual claim with the code of the note it comes from, "
    "written exactly as [CODE], e.g. [D1].\n"
    "- Never write author names, paper titles or URLs; refer to papers by code only.\n"
    '- If the notes do not contain the answer, reply exactly: "{insufficient}"\n'
    "\n"
    "NOTES:\n"
    "{context}\n"
    "\n"
    "QUESTION:\n"
    "{question}"
)


def build_context(papers: list[Paper], limit: int = CONTEXT_LIMIT) -> str:
    """Render the first *limit* papers as ``[CODE] (year) note``.

    Author, title and URL are left out so the model cannot echo them.
    """
    blocks = []
    for paper in papers[:limit]:
        header = f"[{paper.code or '?'}]"
        year = parse_year(paper.published_date)
        if year is not None:
            header += f" ({year})"
        lines = [header, (paper.note or "").strip() or "(no note)"]
        if paper.keywords:
            lines.append("Keywords: " + ", ".join(paper.keywords))
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) if blocks else "(no notes saved)"


class QueryAnswerer:
    """Answers questions from a bounded slice of the paper list."""

    def __init__(self, backend: ChatBackend, context_limit: int = CONTEXT_LIMIT):
        self.backend = backend
        self.context_limit = context_limit

    def build_prompt(self, papers: list[Paper], question: str) -> str:
        return QUERY_PROMPT.format(
            insufficient=INSUFFICIENT,
            context=build_context(papers, self.context_limit),
            question=question.strip(),
        )

    def answer(self, papers: list[Paper], question: str) -> str:
        """Answer *question* from *papers* (in current list order).

        Raises:
            QueryError: If the question is blank or the backend fails
        """
        if not question or not question.strip():
            raise QueryError("Ask a question first.")

        prompt = self.build_prompt(papers, question)
        try:
            content = self.backend.complete(prompt)
        except BackendUnavailableError as e:
            logger.error("Literature query failed: backend=%s status=%s", self.backend.name, e.status_code)
            raise QueryError("Query failed. Check the backend and try again.", cause=e) from e

        return content.strip() or NO_ANSWER
