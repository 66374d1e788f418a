"""Fail-safe diagrams substituted when generated text does not validate."""

from __future__ import annotations

from .diagrams import CLASS, COMPONENT, DEPENDENCY_FLOW, FUNCTION_CALL, SEQUENCE

_GENERIC_FALLBACK = (
    "graph TD\n"
    '  A["Diagram Generation Error"] --> B["Invalid Mermaid detected"]\n'
    '  B --> C["Fallback diagram shown"]\n'
)

_FALLBACKS = {
    DEPENDENCY_FLOW: _GENERIC_FALLBACK
    + "  classDef error fill:#ff6b6b,stroke:#c92a2a,color:#fff\n"
    + "  class A,B,C error\n",
    COMPONENT: _GENERIC_FALLBACK,
    FUNCTION_CALL: 'graph TD\n  A["Diagram Generation Error"] --> B["Invalid Mermaid detected"]\n',
    CLASS: 'classDiagram\n  class Error {\n    +message : "Invalid Mermaid detected"\n  }\n',
    SEQUENCE: "sequenceDiagram\n  participant A as Error\n  A->>A: Invalid Mermaid detected\n",
}


def build_fallback_diagram(kind: str) -> str:
    """Return the fixed safe diagram for ``kind``; unknown kinds get the generic flowchart."""
    return _FALLBACKS.get(kind, _GENERIC_FALLBACK)


__all__ = ["build_fallback_diagram"]
