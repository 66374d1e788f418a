"""Record-based projections: component, function-call, class and sequence diagrams."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from ..analysis import is_complex
from ..models import ComponentRef, FileRecord, FunctionRef
from .sanitize import normalize_shapes, sanitize_id

MAX_FUNCTIONS = 20
MAX_ENTRY_LINKS = 5
MAX_PARTICIPANTS = 5
CLASS_SPAN_FALLBACK = 100

_ENTRY_HINTS = ("main", "init", "start")

USER_ACTOR = "User"

EMPTY_COMPONENT_DIAGRAM = (
    "graph TD\n"
    '  A["No Components Found"]\n'
    '  B["Upload a React or Vue project"]\n'
    '  C["to see the component hierarchy"]\n'
    "  A --> B\n"
    "  B --> C\n"
    "  classDef placeholder fill:#f9f,stroke:#333,stroke-width:2px\n"
    "  class A,B,C placeholder\n"
)

EMPTY_FUNCTION_DIAGRAM = (
    "graph LR\n"
    '  A["No Functions Found"]\n'
    '  B["Upload a project with"]\n'
    '  C["JavaScript or TypeScript functions"]\n'
    "  A --> B --> C\n"
    "  classDef placeholder fill:#ffa726,stroke:#f57400,color:#fff\n"
    "  class A,B,C placeholder\n"
)

EMPTY_CLASS_DIAGRAM = (
    "classDiagram\n"
    "  class NoClassesFound {\n"
    '    +message : "No classes detected in this project"\n'
    '    +suggestion : "Try uploading a project with class definitions"\n'
    "  }\n"
)

EMPTY_SEQUENCE_DIAGRAM = (
    "sequenceDiagram\n"
    "  participant User\n"
    "  Note right of User: No components detected\n"
)


def _strip_relative(target: str) -> str:
    while True:
        if target.startswith("./"):
            target = target[2:]
        elif target.startswith("../"):
            target = target[3:]
        else:
            return target


def _component_id(record: FileRecord, component: ComponentRef) -> str:
    return sanitize_id(f"{record.path}:{component.name}")


def component_diagram(records: Sequence[FileRecord]) -> str:
    """Render every component as a node, linked over-approximately through file dependencies.

    A dependency links two files when its target (without relative prefixes)
    is a substring of the other file's path; every component of the importing
    file then points at every component of the matched file.
    """
    owners = [record for record in records if record.components]
    if not owners:
        return EMPTY_COMPONENT_DIAGRAM

    lines = ["graph TD"]
    node_ids: List[str] = []
    for record in owners:
        for component in record.components:
            node_id = _component_id(record, component)
            if node_id in node_ids:
                continue
            node_ids.append(node_id)
            lines.append(f'  {node_id}["{component.name} [{component.kind}]"]')

    seen_edges = set()
    for record in owners:
        for dependency in record.dependencies:
            needle = _strip_relative(dependency.target)
            if not needle:
                continue
            target = next(
                (other for other in owners if other.path != record.path and needle in other.path),
                None,
            )
            if target is None:
                continue
            for source_component in record.components:
                for target_component in target.components:
                    edge = (_component_id(record, source_component), _component_id(target, target_component))
                    if edge in seen_edges:
                        continue
                    seen_edges.add(edge)
                    lines.append(f"  {edge[0]} --> {edge[1]}")

    lines.append("  classDef component fill:#61dafb,stroke:#21759b,color:#000")
    lines.extend(f"  class {node_id} component" for node_id in node_ids)
    return normalize_shapes("\n".join(lines) + "\n")


def _collect_functions(records: Sequence[FileRecord]) -> List[Tuple[str, FunctionRef]]:
    functions: List[Tuple[str, FunctionRef]] = []
    for record in records:
        for function in record.functions:
            functions.append((sanitize_id(f"{record.path}:{function.name}"), function))
    return functions


def function_call_diagram(records: Sequence[FileRecord]) -> str:
    """Render the first functions as nodes with an entry-point fan-out approximating calls."""
    functions = _collect_functions(records)[:MAX_FUNCTIONS]
    if not functions:
        return EMPTY_FUNCTION_DIAGRAM

    lines = ["graph LR"]
    declared: Dict[str, FunctionRef] = {}
    for node_id, function in functions:
        if node_id in declared:
            continue
        declared[node_id] = function
        label = f'"{function.name}()"'
        shape = f"(({label}))" if function.kind == "arrow" else f"[{label}]"
        lines.append(f"  {node_id}{shape}")

    entry_id = next(
        (
            node_id
            for node_id, function in declared.items()
            if any(hint in function.name.lower() for hint in _ENTRY_HINTS)
        ),
        None,
    )
    if entry_id is not None:
        others = [node_id for node_id in declared if node_id != entry_id][:MAX_ENTRY_LINKS]
        lines.extend(f"  {entry_id} --> {node_id}" for node_id in others)

    lines.append("  classDef simple fill:#4caf50,stroke:#2e7d32,color:#fff")
    lines.append("  classDef complex fill:#f44336,stroke:#c62828,color:#fff")
    for node_id, function in declared.items():
        lines.append(f"  class {node_id} {'complex' if is_complex(function) else 'simple'}")
    return normalize_shapes("\n".join(lines) + "\n")


def class_diagram(records: Sequence[FileRecord]) -> str:
    """Render class blocks with members and inheritance arrows."""
    lines = ["classDiagram"]
    found = False
    for record in records:
        for cls in record.classes:
            found = True
            class_id = sanitize_id(cls.name)
            lines.append(f"  class {class_id} {{")
            for prop in cls.properties:
                lines.append(f"    +{sanitize_id(prop)} : any")

            members: List[Tuple[str, List[str]]] = [
                (method.name, list(method.parameters)) for method in cls.methods
            ]
            start = cls.line or 0
            end = cls.end_line or start + CLASS_SPAN_FALLBACK
            for function in record.functions:
                if function.line is not None and start <= function.line <= end:
                    members.append((function.name, list(function.parameters)))

            emitted = set()
            for name, parameters in members:
                if name in emitted:
                    continue
                emitted.add(name)
                lines.append(f"    +{sanitize_id(name)}({', '.join(parameters)})")
            lines.append("  }")

            if cls.superclass_name:
                lines.append(f"  {sanitize_id(cls.superclass_name)} <|-- {class_id}")

    if not found:
        return EMPTY_CLASS_DIAGRAM
    return normalize_shapes("\n".join(lines) + "\n")


def sequence_diagram(records: Sequence[FileRecord], target_component: Optional[str] = None) -> str:
    """Render a User-initiated message chain across the first distinct components."""
    names: List[str] = []
    for record in records:
        for component in record.components:
            participant = sanitize_id(component.name)
            if participant not in names:
                names.append(participant)
    if not names:
        return EMPTY_SEQUENCE_DIAGRAM

    if target_component:
        target = sanitize_id(target_component)
        if target in names:
            names.remove(target)
            names.insert(0, target)
    participants = names[:MAX_PARTICIPANTS]

    # sanitize_id never leaves a trailing underscore, so "User_" cannot clash with a component.
    actor = USER_ACTOR if USER_ACTOR not in participants else f"{USER_ACTOR}_"
    declaration = actor if actor == USER_ACTOR else f"{actor} as {USER_ACTOR}"
    lines = ["sequenceDiagram", f"  participant {declaration}"]
    lines.extend(f"  participant {name}" for name in participants)
    lines.append(f"  {actor}->>{participants[0]}: interaction")
    for current, following in zip(participants, participants[1:]):
        lines.append(f"  {current}->>{following}: data/props")
    return normalize_shapes("\n".join(lines) + "\n")


__all__ = [
    "EMPTY_CLASS_DIAGRAM",
    "EMPTY_COMPONENT_DIAGRAM",
    "EMPTY_FUNCTION_DIAGRAM",
    "EMPTY_SEQUENCE_DIAGRAM",
    "class_diagram",
    "component_diagram",
    "function_call_diagram",
    "sequence_diagram",
]
