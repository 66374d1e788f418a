"""Dependency-flow projection of a DependencyGraph into Mermaid flowchart text."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..config import DiagramConfig
from ..logging import get_logger
from ..models import (
    DYNAMIC_IMPORT,
    IMPORT,
    REQUIRE,
    SCRIPT,
    STYLE_IMPORT,
    STYLESHEET,
    DependencyGraph,
    GraphEdge,
    GraphNode,
)
from .sanitize import MAX_LABEL_LENGTH, normalize_shapes, sanitize_edge_label, sanitize_id, sanitize_label

DIRECTIONS = ("LR", "RL", "TB", "TD", "BT")

SHAPE_BY_EXTENSION = {
    ".js": "square",
    ".jsx": "round",
    ".ts": "diamond",
    ".tsx": "round",
    ".html": "subroutine",
    ".htm": "subroutine",
    ".css": "circle",
    ".vue": "square",
}

ARROW_BY_KIND = {
    IMPORT: "-->",
    REQUIRE: "-.->",
    DYNAMIC_IMPORT: "==>",
    SCRIPT: "-->",
    STYLESHEET: "-.->",
    STYLE_IMPORT: "-.->",
}

STYLE_CLASS_BY_EXTENSION = {
    ".js": "jsFile",
    ".jsx": "jsFile",
    ".ts": "tsFile",
    ".tsx": "tsFile",
    ".html": "htmlFile",
    ".htm": "htmlFile",
    ".css": "cssFile",
    ".vue": "vueFile",
}

_EXTERNAL_MARKERS = (
    "react",
    "vue",
    "angular",
    "lodash",
    "axios",
    "express",
    "node:",
    "@",
    "npm:",
    "http://",
    "https://",
)

_STYLING = (
    "",
    "  %% Styling",
    "  classDef jsFile fill:#f9f,stroke:#333,stroke-width:2px",
    "  classDef tsFile fill:#bbf,stroke:#333,stroke-width:2px",
    "  classDef htmlFile fill:#bfb,stroke:#333,stroke-width:2px",
    "  classDef cssFile fill:#fbb,stroke:#333,stroke-width:2px",
    "  classDef vueFile fill:#bff,stroke:#333,stroke-width:2px",
)

logger = get_logger("diagrams.flowchart")


@dataclass
class FlowchartOptions:
    """Layout options for the dependency-flow projection."""

    direction: str = "LR"
    include_external: bool = False
    max_nodes: int = 50
    group_by_directory: bool = True

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> "FlowchartOptions":
        """Coerce loosely typed options, falling back to defaults for anything unrecognised."""
        values = values or {}
        options = cls()

        direction = _first(values, "direction")
        if isinstance(direction, str) and direction.strip().upper() in DIRECTIONS:
            options.direction = direction.strip().upper()

        include_external = _coerce_bool(_first(values, "include_external", "includeExternal"))
        if include_external is not None:
            options.include_external = include_external

        max_nodes = _coerce_positive_int(_first(values, "max_nodes", "maxNodes"))
        if max_nodes is not None:
            options.max_nodes = max_nodes

        group = _coerce_bool(_first(values, "group_by_directory", "groupByDirectory"))
        if group is not None:
            options.group_by_directory = group

        return options

    @classmethod
    def from_config(cls, config: DiagramConfig) -> "FlowchartOptions":
        return cls.from_mapping(
            {
                "direction": config.direction,
                "include_external": config.include_external,
                "max_nodes": config.max_nodes,
                "group_by_directory": config.group_by_directory,
            }
        )


def _first(values: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in values:
            return values[key]
    return None


def _coerce_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _coerce_positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        try:
            parsed = int(value.strip())
        except ValueError:
            return None
        return parsed if parsed > 0 else None
    return None


def is_external_node(node: GraphNode) -> bool:
    """Heuristically decide whether ``node`` stands for an ecosystem package."""
    if node.external:
        return True
    if "node_modules" in node.id:
        return True
    lowered = node.id.lower()
    if "/" not in lowered and "\\" not in lowered and "." not in lowered:
        return True
    return any(marker in lowered for marker in _EXTERNAL_MARKERS)


def node_label(node: GraphNode) -> str:
    """Return the display label of a file node with its function/class/component counts."""
    base = sanitize_label(node.label or "Unknown")
    metadata: List[str] = []
    if node.functions > 0:
        metadata.append(f"{node.functions}f")
    if node.classes > 0:
        metadata.append(f"{node.classes}c")
    if node.components > 0:
        metadata.append(f"{node.components}comp")
    if not metadata:
        return base
    suffix = f" [{','.join(metadata)}]"
    return base[: max(0, MAX_LABEL_LENGTH - len(suffix))].rstrip() + suffix


def format_node(label: str, shape: str) -> str:
    quoted = f'"{label}"'
    if shape == "round":
        return f"({quoted})"
    if shape == "circle":
        return f"((({quoted})))"
    if shape == "subroutine":
        return f"[[{quoted}]]"
    if shape == "diamond":
        return f"{{{quoted}}}"
    return f"[{quoted}]"


def group_by_directory(nodes: Sequence[GraphNode]) -> Dict[str, List[GraphNode]]:
    groups: Dict[str, List[GraphNode]] = OrderedDict()
    for node in nodes:
        directory = "/".join(node.id.split("/")[:-1]) or "root"
        groups.setdefault(directory, []).append(node)
    return groups


def empty_flowchart(direction: str = "LR") -> str:
    lines = [
        f"graph {direction}",
        "  %% No files found to display",
        '  A["No files found"] --> B["Upload a web project to map its dependencies"]',
    ]
    lines.extend(_STYLING)
    return "\n".join(lines) + "\n"


def generate_flowchart(graph: DependencyGraph, options: FlowchartOptions | None = None) -> str:
    """Render ``graph`` as a Mermaid flowchart honouring filtering, grouping and caps."""
    options = options or FlowchartOptions()
    if not graph.nodes:
        logger.debug("Graph has no nodes; emitting placeholder flowchart")
        return empty_flowchart(options.direction)

    nodes = list(graph.nodes)
    if not options.include_external:
        nodes = [node for node in nodes if not is_external_node(node)]
    if not nodes:
        logger.debug("Every node was filtered as external; emitting placeholder flowchart")
        return empty_flowchart(options.direction)
    nodes = nodes[: options.max_nodes]

    lines = [f"graph {options.direction}"]
    lines.extend(_node_lines(nodes, options.group_by_directory))

    node_ids = {node.id for node in nodes}
    edges = [edge for edge in graph.edges if edge.from_path in node_ids and edge.to_path in node_ids]
    lines.append("")
    lines.extend(_edge_lines(edges))

    if not edges:
        lines.append("  %% No dependencies found between files")
        for current, following in list(zip(nodes, nodes[1:]))[:3]:
            lines.append(f"  {sanitize_id(current.id)} -.-> {sanitize_id(following.id)}")

    lines.extend(_STYLING)
    lines.extend(_class_assignments(nodes))
    return normalize_shapes("\n".join(lines) + "\n")


def _node_lines(nodes: Sequence[GraphNode], grouped: bool) -> List[str]:
    lines: List[str] = []
    seen = set()
    groups = group_by_directory(nodes) if grouped else {"": list(nodes)}
    for directory, members in groups.items():
        if directory:
            lines.append("")
            lines.append(f'  subgraph "{sanitize_id(directory)}"')
        for node in members:
            node_id = sanitize_id(node.id)
            if node_id in seen:
                continue
            seen.add(node_id)
            shape = SHAPE_BY_EXTENSION.get(node.type, "square")
            lines.append(f"    {node_id}{format_node(node_label(node), shape)}")
        if directory:
            lines.append("  end")
    return lines


def _edge_lines(edges: Sequence[GraphEdge]) -> List[str]:
    lines: List[str] = []
    seen = set()
    for edge in edges:
        arrow = ARROW_BY_KIND.get(edge.kind, "-->")
        label = sanitize_edge_label(edge.label) if edge.label else ""
        line = f"  {sanitize_id(edge.from_path)} {arrow}{f'|{label}|' if label else ''} {sanitize_id(edge.to_path)}"
        if line in seen:
            continue
        seen.add(line)
        lines.append(line)
    return lines


def _class_assignments(nodes: Sequence[GraphNode]) -> List[str]:
    members: Dict[str, List[str]] = OrderedDict()
    for node in nodes:
        style = STYLE_CLASS_BY_EXTENSION.get(node.type)
        if style is None:
            continue
        node_id = sanitize_id(node.id)
        bucket = members.setdefault(style, [])
        if node_id not in bucket:
            bucket.append(node_id)
    return [f"  class {','.join(ids)} {style}" for style, ids in members.items()]


__all__ = [
    "ARROW_BY_KIND",
    "DIRECTIONS",
    "FlowchartOptions",
    "SHAPE_BY_EXTENSION",
    "empty_flowchart",
    "format_node",
    "generate_flowchart",
    "group_by_directory",
    "is_external_node",
    "node_label",
]
