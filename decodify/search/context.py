"""Read-only search context over parsed records for conversational consumers."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..logging import get_logger
from ..models import ClassRef, ComponentRef, FileRecord, FunctionRef

MAX_FILE_CHARS = 10000
MAX_RELEVANT_ITEMS = 5
TRUNCATION_NOTICE = "\n\n... (file truncated due to size)"

_FILE_REFERENCE = re.compile(r"@([^\s@]+)")

logger = get_logger("search")


@dataclass
class ContextDocument:
    """One searchable document describing a file, function, class or component."""

    type: str
    name: str
    path: str
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SearchHit:
    document: ContextDocument
    relevance: float


@dataclass
class FileReference:
    path: str
    content: str
    mention: str


def _file_document(record: FileRecord) -> ContextDocument:
    lines = [
        f"File: {record.path}",
        f"Type: {record.extension}",
        f"Size: {record.size} bytes, {record.line_count} lines",
        "",
    ]
    if record.dependencies:
        lines.append("Dependencies:")
        lines.extend(f"- {dep.kind}: {dep.target}" for dep in record.dependencies)
        lines.append("")
    if record.exports:
        lines.append("Exports:")
        lines.extend(f"- {exp.kind}: {exp.name}" for exp in record.exports)
        lines.append("")
    summary = []
    if record.functions:
        summary.append(f"{len(record.functions)} functions")
    if record.classes:
        summary.append(f"{len(record.classes)} classes")
    if record.components:
        summary.append(f"{len(record.components)} components")
    if summary:
        lines.append(f"Contains: {', '.join(summary)}")
    return ContextDocument(
        type="file",
        name=record.path,
        path=record.path,
        content="\n".join(lines) + "\n",
        metadata={"extension": record.extension, "size": record.size, "lines": record.line_count},
    )


def _function_document(function: FunctionRef, record: FileRecord) -> ContextDocument:
    lines = [
        f"Function: {function.name}",
        f"File: {record.path}",
        f"Type: {function.kind}",
        f"Line: {function.line}",
    ]
    if function.parameters:
        lines.append(f"Parameters: {', '.join(function.parameters)}")
    if function.is_async:
        lines.append("Async: true")
    if function.is_generator:
        lines.append("Generator: true")
    return ContextDocument(
        type="function",
        name=function.name,
        path=record.path,
        content="\n".join(lines) + "\n",
        metadata={"line": function.line, "kind": function.kind},
    )


def _class_document(cls: ClassRef, record: FileRecord) -> ContextDocument:
    lines = [f"Class: {cls.name}", f"File: {record.path}", f"Line: {cls.line}"]
    if cls.superclass_name:
        lines.append(f"Extends: {cls.superclass_name}")
    return ContextDocument(
        type="class",
        name=cls.name,
        path=record.path,
        content="\n".join(lines) + "\n",
        metadata={"line": cls.line, "superclass": cls.superclass_name},
    )


def _component_document(component: ComponentRef, record: FileRecord) -> ContextDocument:
    lines = [
        f"Component: {component.name}",
        f"File: {record.path}",
        f"Type: {component.kind}",
        f"Line: {component.line}",
    ]
    if component.props:
        lines.append(f"Props: {', '.join(component.props)}")
    return ContextDocument(
        type="component",
        name=component.name,
        path=record.path,
        content="\n".join(lines) + "\n",
        metadata={"line": component.line, "kind": component.kind},
    )


def calculate_relevance(content: str, query: str) -> float:
    """Return occurrences of ``query`` per character of ``content``."""
    if not content or not query:
        return 0.0
    return content.lower().count(query.lower()) / len(content)


class ProjectContext:
    """Searchable documents and a textual summary derived from one project's records."""

    def __init__(self, documents: Sequence[ContextDocument], summary: str) -> None:
        self.documents = list(documents)
        self.summary = summary

    @classmethod
    def from_records(cls, records: Sequence[FileRecord]) -> "ProjectContext":
        documents: List[ContextDocument] = []
        usable = [record for record in records if not record.fatal_error]
        for record in usable:
            documents.append(_file_document(record))
            documents.extend(_function_document(fn, record) for fn in record.functions)
            documents.extend(_class_document(item, record) for item in record.classes)
            documents.extend(_component_document(item, record) for item in record.components)
        return cls(documents, _project_summary(usable))

    def documents_of(self, kind: str) -> List[ContextDocument]:
        return [document for document in self.documents if document.type == kind]

    def search(self, query: str, limit: int = 10) -> List[SearchHit]:
        """Return documents whose content or name mentions ``query``, most relevant first."""
        needle = query.strip().lower()
        if not needle:
            return []
        hits = [
            SearchHit(document=document, relevance=calculate_relevance(document.content, needle))
            for document in self.documents
            if needle in document.content.lower() or needle in document.name.lower()
        ]
        hits.sort(key=lambda hit: hit.relevance, reverse=True)
        return hits[:limit]

    def find_relevant(self, message: str, limit: int = MAX_RELEVANT_ITEMS) -> List[ContextDocument]:
        needle = message.strip().lower()
        if not needle:
            return []
        return [document for document in self.documents if needle in document.content.lower()][:limit]

    def render(
        self,
        message: str,
        references: Sequence[FileReference] = (),
        history: Sequence[Tuple[str, str]] = (),
    ) -> str:
        """Assemble the text context handed to a conversational model."""
        parts = [
            f"Files: {len(self.documents_of('file'))}",
            f"Functions: {len(self.documents_of('function'))}",
            f"Classes: {len(self.documents_of('class'))}",
            f"Components: {len(self.documents_of('component'))}",
            "",
            f"Project Summary:\n{self.summary}",
        ]
        if references:
            parts.append("Referenced Files Content:")
            for reference in references:
                parts.append(f"=== FILE: {reference.path} ===\n{reference.content}\n")
        relevant = self.find_relevant(message)
        if relevant:
            parts.append("Additional Relevant Code Context:")
            parts.extend(document.content for document in relevant)
        if history:
            parts.append("Previous Conversation:")
            parts.append(
                "\n\n".join(f"Human: {asked}\nAssistant: {answered}" for asked, answered in history[-5:])
            )
        return "\n".join(parts)


def _project_summary(records: Sequence[FileRecord]) -> str:
    lines = [f"This project contains {len(records)} files:"]
    for extension, count in Counter(record.extension or "unknown" for record in records).items():
        lines.append(f"- {count} {extension} files")
    lines.append("")
    lines.append("Code Structure:")
    lines.append(f"- {sum(len(r.functions) for r in records)} functions")
    lines.append(f"- {sum(len(r.classes) for r in records)} classes")
    lines.append(f"- {sum(len(r.components) for r in records)} components")
    if records:
        lines.append("")
        lines.append("Main Files:")
        lines.extend(f"- {record.path}" for record in records[:10])
    return "\n".join(lines) + "\n"


def read_file_content(root: Path, path: str, max_chars: Optional[int] = MAX_FILE_CHARS) -> Optional[str]:
    """Return the text of ``path`` under ``root``; ``None`` if missing or outside the root."""
    root_path = Path(root).resolve()
    candidate = (root_path / path.replace("\\", "/").lstrip("/")).resolve()
    if not candidate.is_relative_to(root_path):
        logger.warning("Refusing to read %s outside %s", path, root_path)
        return None
    if not candidate.is_file():
        return None
    try:
        content = candidate.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("Could not read %s: %s", candidate, exc)
        return None
    if max_chars is not None and len(content) > max_chars:
        return content[:max_chars] + TRUNCATION_NOTICE
    return content


def extract_file_references(message: str, root: Path) -> Tuple[str, List[FileReference]]:
    """Resolve ``@path`` mentions, returning the rewritten message and the loaded files."""
    references: List[FileReference] = []
    cleaned = message
    for match in _FILE_REFERENCE.finditer(message):
        mention, path = match.group(0), match.group(1)
        content = read_file_content(root, path)
        if content is None:
            logger.debug("Referenced file not found: %s", path)
            continue
        references.append(FileReference(path=path, content=content, mention=mention))
        cleaned = cleaned.replace(mention, f'file "{path}"', 1)
    return cleaned, references


__all__ = [
    "ContextDocument",
    "FileReference",
    "ProjectContext",
    "SearchHit",
    "calculate_relevance",
    "extract_file_references",
    "read_file_content",
]
