"""Dependency graph construction from parsed file records."""

from __future__ import annotations

import posixpath
from typing import Iterable, List, Optional, Sequence, Set

from .logging import get_logger
from .models import DependencyGraph, FileRecord, GraphEdge, GraphNode

RESOLVABLE_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx")

logger = get_logger("graph")


def _candidates(owner: str, target: str) -> List[str]:
    base = posixpath.normpath(posixpath.join(posixpath.dirname(owner), target))
    candidates = [base]
    candidates.extend(f"{base}{ext}" for ext in RESOLVABLE_EXTENSIONS)
    candidates.extend(f"{base}/index{ext}" for ext in RESOLVABLE_EXTENSIONS)
    return candidates


def resolve_target(owner: str, target: str, known: Set[str]) -> Optional[str]:
    """Return the first known path ``target`` resolves to from ``owner``'s directory."""
    for candidate in _candidates(owner, target):
        if candidate in known:
            return candidate
    return None


def _node_for(record: FileRecord) -> GraphNode:
    return GraphNode(
        id=record.path,
        label=posixpath.basename(record.path),
        type=record.extension,
        size=record.size,
        functions=len(record.functions),
        classes=len(record.classes),
        components=len(record.components),
    )


def build_graph(records: Sequence[FileRecord]) -> DependencyGraph:
    """Build one node per record and one edge per resolved local reference."""
    nodes = [_node_for(record) for record in records]
    known = {record.path for record in records}

    edges: List[GraphEdge] = []
    unresolved = 0
    for record in records:
        for dependency in record.dependencies:
            if dependency.is_external:
                continue
            resolved = resolve_target(record.path, dependency.target, known)
            if resolved is None:
                unresolved += 1
                continue
            edges.append(
                GraphEdge(
                    from_path=record.path,
                    to_path=resolved,
                    kind=dependency.kind,
                    label=dependency.target,
                )
            )

    logger.debug(
        "Built graph with %d nodes, %d edges (%d local references unresolved)",
        len(nodes),
        len(edges),
        unresolved,
    )
    return DependencyGraph(nodes=nodes, edges=edges)


def filter_graph(graph: DependencyGraph, extensions: Iterable[str] | None = None) -> DependencyGraph:
    """Restrict ``graph`` to nodes of the given extensions, dropping dangling edges."""
    wanted = {ext.lower() for ext in extensions or []}
    nodes = [node for node in graph.nodes if not wanted or node.type in wanted]
    node_ids = {node.id for node in nodes}
    edges = [edge for edge in graph.edges if edge.from_path in node_ids and edge.to_path in node_ids]
    return DependencyGraph(nodes=nodes, edges=edges)


__all__ = ["RESOLVABLE_EXTENSIONS", "build_graph", "filter_graph", "resolve_target"]
