"""Literature Desk - research notes to structured paper records.

Paste a raw research note; a language model extracts author, title,
URL, date and citation count, and the record lands in a SQLite table
that can be listed, edited, queried and laid out on a timeline.
"""

__version__ = "1.0.0"

from litdesk.config import Settings
from litdesk.models.paper import ExtractedMetadata, Paper

__all__ = ["ExtractedMetadata", "Paper", "Settings", "__version__"]
