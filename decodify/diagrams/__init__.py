"""Diagram projection engine producing Mermaid text from graphs and file records."""

from __future__ import annotations

from typing import Any, Mapping, Sequence, Union

from ..graph import build_graph
from ..models import DependencyGraph, FileRecord
from .flowchart import FlowchartOptions, generate_flowchart, is_external_node
from .projections import class_diagram, component_diagram, function_call_diagram, sequence_diagram
from .sanitize import normalize_shapes, sanitize_edge_label, sanitize_id, sanitize_label

DEPENDENCY_FLOW = "dependency-flow"
COMPONENT = "component"
FUNCTION_CALL = "function-call"
CLASS = "class"
SEQUENCE = "sequence"

DIAGRAM_KINDS = (DEPENDENCY_FLOW, COMPONENT, FUNCTION_CALL, CLASS, SEQUENCE)

Source = Union[DependencyGraph, Sequence[FileRecord]]


def project(
    kind: str,
    source: Source,
    options: Union[FlowchartOptions, Mapping[str, Any], None] = None,
) -> str:
    """Render ``source`` as diagram text of the requested ``kind``.

    ``dependency-flow`` takes a DependencyGraph (a record list is turned into
    one first); the other kinds take the record list.
    """
    if kind not in DIAGRAM_KINDS:
        raise ValueError(f"Unknown diagram kind '{kind}'. Expected one of: {', '.join(DIAGRAM_KINDS)}")

    if kind == DEPENDENCY_FLOW:
        graph = source if isinstance(source, DependencyGraph) else build_graph(list(source))
        if not isinstance(options, FlowchartOptions):
            options = FlowchartOptions.from_mapping(options)
        return generate_flowchart(graph, options)

    if isinstance(source, DependencyGraph):
        raise TypeError(f"The '{kind}' projection needs file records, not a dependency graph")
    records = list(source)
    if kind == COMPONENT:
        return component_diagram(records)
    if kind == FUNCTION_CALL:
        return function_call_diagram(records)
    if kind == CLASS:
        return class_diagram(records)

    target = None
    if isinstance(options, Mapping):
        target = options.get("target_component") or options.get("targetComponent")
    return sequence_diagram(records, target_component=target if isinstance(target, str) else None)


__all__ = [
    "CLASS",
    "COMPONENT",
    "DEPENDENCY_FLOW",
    "DIAGRAM_KINDS",
    "FUNCTION_CALL",
    "FlowchartOptions",
    "SEQUENCE",
    "generate_flowchart",
    "is_external_node",
    "normalize_shapes",
    "project",
    "sanitize_edge_label",
    "sanitize_id",
    "sanitize_label",
]
