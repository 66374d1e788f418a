"""Base classes for source parser plugins."""

from abc import ABC, abstractmethod
from typing import FrozenSet, Optional

from ..models import FileRecord


class UnsupportedFileTypeError(ValueError):
    """Raised when no parser handles a file extension."""

    def __init__(self, extension: str) -> None:
        super().__init__(f"Unsupported file type: {extension or '(none)'}")
        self.extension = extension


class ScriptSyntaxError(Exception):
    """Raised when a grammar cannot build a clean tree for script content."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class SourceParser(ABC):
    """Contract for parsers that fill a FileRecord from raw file content."""

    extensions: FrozenSet[str] = frozenset()

    def supports(self, extension: str) -> bool:
        """Return True when this parser handles the (lowercase, dotted) extension."""
        return extension in self.extensions

    @abstractmethod
    def parse(self, content: str, record: FileRecord) -> FileRecord:
        """Populate ``record`` from ``content``; record non-fatal issues in parse_errors."""
