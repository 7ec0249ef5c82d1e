"""Service layer."""

from litdesk.services.extraction_service import KeywordExtractor, MetadataExtractor
from litdesk.services.keyword_service import KeywordWorker
from litdesk.services.llm_service import OllamaBackend, OpenAIBackend, create_backend
from litdesk.services.note_service import NoteService
from litdesk.services.query_service import QueryAnswerer
from litdesk.services.timeline_service import TimelineEntry, build_timeline

__all__ = [
    "KeywordExtractor",
    "KeywordWorker",
    "MetadataExtractor",
    "NoteService",
    "OllamaBackend",
    "OpenAIBackend",
    "QueryAnswerer",
    "TimelineEntry",
    "build_timeline",
    "create_backend",
]
