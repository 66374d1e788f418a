"""Search context consumed by conversational collaborators."""

from .context import (
    ContextDocument,
    FileReference,
    ProjectContext,
    SearchHit,
    calculate_relevance,
    extract_file_references,
    read_file_content,
)

__all__ = [
    "ContextDocument",
    "FileReference",
    "ProjectContext",
    "SearchHit",
    "calculate_relevance",
    "extract_file_references",
    "read_file_content",
]
