"""Core data models shared across decodify components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

IMPORT = "import"
REQUIRE = "require"
DYNAMIC_IMPORT = "dynamic_import"
SCRIPT = "script"
STYLESHEET = "stylesheet"
STYLE_IMPORT = "style_import"

DEPENDENCY_KINDS = (IMPORT, REQUIRE, DYNAMIC_IMPORT, SCRIPT, STYLESHEET, STYLE_IMPORT)


def is_external_target(target: str) -> bool:
    """Return True when a dependency target does not look like a local path."""
    return not target.startswith(".")


@dataclass
class DependencyRef:
    """A reference from one file to another module, script or stylesheet."""

    kind: str
    target: str
    is_external: bool


@dataclass
class ExportRef:
    kind: str
    name: str
    line: Optional[int] = None
    local: Optional[str] = None


@dataclass
class FunctionRef:
    """A named function captured from a script AST."""

    name: str
    kind: str
    parameters: List[str] = field(default_factory=list)
    line: Optional[int] = None
    is_async: bool = False
    is_generator: bool = False


@dataclass
class MethodRef:
    name: str
    parameters: List[str] = field(default_factory=list)
    line: Optional[int] = None
    is_async: bool = False
    is_static: bool = False


@dataclass
class ClassRef:
    """A class declaration with its heritage and recorded members."""

    name: str
    superclass_name: Optional[str] = None
    line: Optional[int] = None
    end_line: Optional[int] = None
    properties: List[str] = field(default_factory=list)
    methods: List[MethodRef] = field(default_factory=list)


@dataclass
class ComponentRef:
    """A heuristically detected UI component."""

    name: str
    kind: str
    line: Optional[int] = None
    props: List[str] = field(default_factory=list)
    exported: bool = False


@dataclass
class ParseIssue:
    """Non-fatal problem encountered while parsing a file."""

    message: str
    line: Optional[int] = None
    column: Optional[int] = None


@dataclass
class FileRecord:
    """Structural summary of a single source file."""

    path: str
    extension: str
    size: int = 0
    line_count: int = 0
    dependencies: List[DependencyRef] = field(default_factory=list)
    exports: List[ExportRef] = field(default_factory=list)
    functions: List[FunctionRef] = field(default_factory=list)
    classes: List[ClassRef] = field(default_factory=list)
    components: List[ComponentRef] = field(default_factory=list)
    parse_errors: List[ParseIssue] = field(default_factory=list)
    fatal_error: Optional[str] = None
    structure: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failed(cls, path: str, extension: str, error: str) -> "FileRecord":
        """Return a record for a file that could not be processed at all."""
        return cls(path=path, extension=extension, fatal_error=error)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "FileRecord":
        classes = []
        for raw in payload.get("classes") or []:
            methods = [MethodRef(**method) for method in raw.get("methods") or []]
            data = {key: value for key, value in raw.items() if key != "methods"}
            classes.append(ClassRef(methods=methods, **data))
        return cls(
            path=payload["path"],
            extension=payload.get("extension", ""),
            size=int(payload.get("size") or 0),
            line_count=int(payload.get("line_count") or 0),
            dependencies=[DependencyRef(**dep) for dep in payload.get("dependencies") or []],
            exports=[ExportRef(**exp) for exp in payload.get("exports") or []],
            functions=[FunctionRef(**fn) for fn in payload.get("functions") or []],
            classes=classes,
            components=[ComponentRef(**comp) for comp in payload.get("components") or []],
            parse_errors=[ParseIssue(**issue) for issue in payload.get("parse_errors") or []],
            fatal_error=payload.get("fatal_error"),
            structure=dict(payload.get("structure") or {}),
        )


@dataclass
class GraphNode:
    """One file in the dependency graph."""

    id: str
    label: str
    type: str
    size: int = 0
    functions: int = 0
    classes: int = 0
    components: int = 0
    external: bool = False


@dataclass
class GraphEdge:
    """A resolved intra-project reference between two graph nodes."""

    from_path: str
    to_path: str
    kind: str
    label: str


@dataclass
class DependencyGraph:
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "DependencyGraph":
        return cls(
            nodes=[GraphNode(**node) for node in payload.get("nodes") or []],
            edges=[GraphEdge(**edge) for edge in payload.get("edges") or []],
        )


@dataclass
class ProjectSnapshot:
    """Immutable result of one analysis run, handed to persistence."""

    project_id: str
    root: str
    file_records: List[FileRecord]
    dependency_graph: DependencyGraph
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "root": self.root,
            "created_at": self.created_at,
            "file_records": [record.to_dict() for record in self.file_records],
            "dependency_graph": self.dependency_graph.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ProjectSnapshot":
        return cls(
            project_id=str(payload["project_id"]),
            root=str(payload.get("root", "")),
            created_at=str(payload.get("created_at", "")),
            file_records=[FileRecord.from_dict(item) for item in payload.get("file_records") or []],
            dependency_graph=DependencyGraph.from_dict(payload.get("dependency_graph") or {}),
        )
