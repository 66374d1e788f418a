"""Pipeline orchestration for analysis runs and diagram rendering."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .analysis import RecordFilter
from .config import ConfigError, DecodifyConfig, load_config
from .diagrams import DEPENDENCY_FLOW, FlowchartOptions, project
from .failsafe import build_fallback_diagram
from .graph import build_graph, filter_graph
from .logging import get_logger
from .models import DependencyGraph, FileRecord, ProjectSnapshot
from .search import ProjectContext
from .stores import ContextCache, ProjectStore
from .validators import ValidationResult, validate
from .walker import DirectoryWalker

_PROJECT_ID_UNSAFE = re.compile(r"[^A-Za-z0-9_-]+")


@dataclass
class DiagramResult:
    """Diagram text with its validation verdict and the counts callers report."""

    kind: str
    text: str
    validation: ValidationResult
    counts: Dict[str, int] = field(default_factory=dict)
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "text": self.text,
            "validation": self.validation.to_dict(),
            "counts": dict(self.counts),
            "note": self.note,
        }


def default_project_id(root: Path) -> str:
    """Derive a stable identifier from the project directory name and absolute path."""
    resolved = Path(root).expanduser().resolve()
    name = _PROJECT_ID_UNSAFE.sub("-", resolved.name).strip("-_") or "project"
    digest = hashlib.sha256(str(resolved).encode("utf-8")).hexdigest()[:8]
    return f"{name}-{digest}"


class ProjectPipeline:
    """Coordinates walking, graph building, persistence and diagram rendering."""

    def __init__(
        self,
        walker: DirectoryWalker | None = None,
        store: ProjectStore | None = None,
        context_cache: ContextCache[ProjectContext] | None = None,
        config: DecodifyConfig | None = None,
    ) -> None:
        self.config = config
        self.walker = walker
        self.store = store
        self.context_cache = context_cache or (
            ContextCache.from_config(config.cache) if config is not None else ContextCache()
        )
        self.logger = get_logger("pipeline")

    def analyze(self, root: Union[str, Path], project_id: str | None = None) -> ProjectSnapshot:
        """Parse every file under ``root`` and return (and persist) a fresh snapshot."""
        root_path = Path(root).expanduser().resolve()
        self.logger.info("Starting analysis of %s", root_path)
        records = self._walker_for(root_path).parse_directory(root_path)
        return self._finish(root_path, records, project_id)

    async def analyze_async(self, root: Union[str, Path], project_id: str | None = None) -> ProjectSnapshot:
        root_path = Path(root).expanduser().resolve()
        self.logger.info("Starting analysis of %s", root_path)
        records = await self._walker_for(root_path).parse_directory_async(root_path)
        return self._finish(root_path, records, project_id)

    def load(self, project_id: str) -> Optional[ProjectSnapshot]:
        if self.store is None:
            return None
        return self.store.load(project_id)

    def context(self, snapshot: ProjectSnapshot) -> ProjectContext:
        """Return the (cached) search context for ``snapshot``."""
        key = (snapshot.project_id, snapshot.created_at)
        return self.context_cache.get_or_build(
            key, lambda: ProjectContext.from_records(snapshot.file_records)
        )

    def render(
        self,
        kind: str,
        snapshot: ProjectSnapshot,
        options: Union[FlowchartOptions, Mapping[str, Any], None] = None,
        record_filter: RecordFilter | None = None,
    ) -> DiagramResult:
        """Project ``snapshot`` into ``kind`` and substitute the fallback when it does not validate."""
        records: List[FileRecord] = list(snapshot.file_records)
        graph = snapshot.dependency_graph
        if record_filter is not None:
            records = record_filter.apply(records)
            kept = {record.path for record in records}
            graph = filter_graph(
                DependencyGraph(
                    nodes=[node for node in graph.nodes if node.id in kept],
                    edges=list(graph.edges),
                )
            )

        if kind == DEPENDENCY_FLOW:
            text = project(kind, graph, self._flowchart_options(options))
        else:
            text = project(kind, records, options if isinstance(options, Mapping) else None)

        validation = validate(text)
        counts = self._counts(kind, records, graph)
        note = None
        if not validation.is_valid:
            self.logger.warning(
                "Generated %s diagram failed validation (%s); using fallback",
                kind,
                "; ".join(validation.errors),
            )
            text = build_fallback_diagram(kind)
            note = "Returned safe fallback due to invalid diagram text"
        return DiagramResult(kind=kind, text=text, validation=validation, counts=counts, note=note)

    # ------------------------------------------------------------------
    # Internal helpers

    def _walker_for(self, root: Path) -> DirectoryWalker:
        if self.walker is not None:
            return self.walker
        config = self.config or self._load_config(root)
        return DirectoryWalker(concurrency=config.walker.concurrency)

    def _load_config(self, root: Path) -> DecodifyConfig:
        try:
            return load_config(root)
        except ConfigError as exc:
            self.logger.warning("Ignoring invalid configuration: %s", exc)
            return DecodifyConfig(root=root)

    def _flowchart_options(
        self, options: Union[FlowchartOptions, Mapping[str, Any], None]
    ) -> FlowchartOptions:
        if isinstance(options, FlowchartOptions):
            return options
        if self.config is not None and not options:
            return FlowchartOptions.from_config(self.config.diagrams)
        return FlowchartOptions.from_mapping(options)

    def _finish(self, root: Path, records: Sequence[FileRecord], project_id: str | None) -> ProjectSnapshot:
        graph = build_graph(records)
        snapshot = ProjectSnapshot(
            project_id=project_id or default_project_id(root),
            root=str(root),
            file_records=list(records),
            dependency_graph=graph,
            created_at=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        )
        self.logger.info(
            "Analysis of %s complete: %d files, %d edges",
            snapshot.project_id,
            len(graph.nodes),
            len(graph.edges),
        )
        if self.store is not None:
            path = self.store.save(snapshot)
            self.logger.debug("Snapshot written to %s", path)
        return snapshot

    @staticmethod
    def _counts(kind: str, records: Sequence[FileRecord], graph: DependencyGraph) -> Dict[str, int]:
        if kind == DEPENDENCY_FLOW:
            return {"node_count": len(graph.nodes), "edge_count": len(graph.edges)}
        return {
            "component_count": sum(len(record.components) for record in records),
            "function_count": sum(len(record.functions) for record in records),
            "class_count": sum(len(record.classes) for record in records),
        }


__all__ = ["DiagramResult", "ProjectPipeline", "default_project_id"]
