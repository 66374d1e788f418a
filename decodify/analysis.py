"""Project-level metrics, issue detection and record filtering over parsed files."""

from __future__ import annotations

import re
from collections import Counter, OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .graph import resolve_target
from .models import FileRecord, FunctionRef

LARGE_FILE_LINES = 500
MAX_PARAMETERS = 5
COMPLEXITY_THRESHOLD = 5


def estimate_complexity(function: FunctionRef) -> float:
    """Return the coarse complexity score used for sorting and diagram styling."""
    score = 1.0
    score += len(function.parameters) * 0.5
    if function.is_async:
        score += 1
    if function.is_generator:
        score += 1
    return round(score, 1)


def is_complex(function: FunctionRef) -> bool:
    return estimate_complexity(function) > COMPLEXITY_THRESHOLD


def _duplicates(names: Dict[str, List[str]]) -> List[Dict[str, Any]]:
    return [{"name": name, "files": files} for name, files in names.items() if len(files) > 1]


def calculate_metrics(records: Sequence[FileRecord]) -> Dict[str, Any]:
    total_files = len(records)
    total_lines = sum(record.line_count for record in records)
    file_types = Counter(record.extension for record in records)
    files_with_errors = sum(1 for record in records if record.parse_errors or record.fatal_error)

    function_names: Dict[str, List[str]] = OrderedDict()
    class_names: Dict[str, List[str]] = OrderedDict()
    component_names: Dict[str, List[str]] = OrderedDict()
    for record in records:
        for function in record.functions:
            function_names.setdefault(function.name, []).append(record.path)
        for cls in record.classes:
            class_names.setdefault(cls.name, []).append(record.path)
        for component in record.components:
            component_names.setdefault(component.name, []).append(record.path)

    total_functions = sum(len(record.functions) for record in records)
    return {
        "total_files": total_files,
        "total_lines": total_lines,
        "total_size": sum(record.size for record in records),
        "file_types": dict(file_types),
        "complexity": {
            "total_functions": total_functions,
            "total_classes": sum(len(record.classes) for record in records),
            "total_components": sum(len(record.components) for record in records),
            "avg_functions_per_file": round(total_functions / total_files, 2) if total_files else 0,
            "avg_lines_per_file": round(total_lines / total_files, 2) if total_files else 0,
        },
        "quality": {
            "files_with_errors": files_with_errors,
            "error_rate": round(files_with_errors / total_files * 100, 2) if total_files else 0,
            "duplicate_names": {
                "functions": _duplicates(function_names),
                "classes": _duplicates(class_names),
                "components": _duplicates(component_names),
            },
        },
    }


def analyze_dependencies(records: Sequence[FileRecord]) -> Dict[str, Any]:
    """Summarise external packages, local references and per-file fan-in/fan-out."""
    external: set[str] = set()
    internal: List[Dict[str, str]] = []
    kinds: Counter[str] = Counter()
    fan: Dict[str, Dict[str, int]] = OrderedDict()
    known = {record.path for record in records}

    for record in records:
        if not record.dependencies:
            continue
        fan.setdefault(record.path, {"incoming": 0, "outgoing": 0})
        fan[record.path]["outgoing"] += len(record.dependencies)
        for dependency in record.dependencies:
            kinds[dependency.kind] += 1
            if dependency.is_external:
                external.add(dependency.target)
                continue
            internal.append({"from": record.path, "to": dependency.target, "kind": dependency.kind})
            resolved = resolve_target(record.path, dependency.target, known)
            if resolved is not None:
                fan.setdefault(resolved, {"incoming": 0, "outgoing": 0})
                fan[resolved]["incoming"] += 1

    return {
        "external_dependencies": sorted(external),
        "internal_dependencies": internal,
        "dependency_kinds": dict(kinds),
        "files": [{"file": path, **counts} for path, counts in fan.items()],
    }


def analyze_functions(
    records: Sequence[FileRecord],
    *,
    sort_by: str = "complexity",
    filter_kind: Optional[str] = None,
    min_params: Optional[int] = None,
) -> Dict[str, Any]:
    entries: List[Dict[str, Any]] = []
    for record in records:
        for function in record.functions:
            entries.append(
                {
                    "name": function.name,
                    "kind": function.kind,
                    "parameters": list(function.parameters),
                    "line": function.line,
                    "is_async": function.is_async,
                    "is_generator": function.is_generator,
                    "file": record.path,
                    "file_extension": record.extension,
                    "complexity": estimate_complexity(function),
                }
            )

    filtered = entries
    if filter_kind:
        filtered = [entry for entry in filtered if entry["kind"] == filter_kind]
    if min_params:
        filtered = [entry for entry in filtered if len(entry["parameters"]) >= min_params]

    if sort_by == "complexity":
        filtered = sorted(filtered, key=lambda entry: entry["complexity"], reverse=True)
    elif sort_by == "params":
        filtered = sorted(filtered, key=lambda entry: len(entry["parameters"]), reverse=True)
    elif sort_by == "name":
        filtered = sorted(filtered, key=lambda entry: entry["name"])

    complexities = [entry["complexity"] for entry in entries]
    stats = {"min": 0, "max": 0, "avg": 0}
    if complexities:
        stats = {
            "min": min(complexities),
            "max": max(complexities),
            "avg": round(sum(complexities) / len(complexities), 2),
        }

    return {
        "functions": filtered,
        "total": len(entries),
        "filtered": len(filtered),
        "kind_distribution": dict(Counter(entry["kind"] or "unknown" for entry in entries)),
        "complexity_stats": stats,
    }


def analyze_components(records: Sequence[FileRecord]) -> Dict[str, Any]:
    entries: List[Dict[str, Any]] = []
    for record in records:
        for component in record.components:
            entries.append(
                {
                    "name": component.name,
                    "kind": component.kind,
                    "line": component.line,
                    "props": list(component.props),
                    "file": record.path,
                    "file_extension": record.extension,
                }
            )
    return {
        "components": entries,
        "total": len(entries),
        "kind_distribution": dict(Counter(entry["kind"] or "unknown" for entry in entries)),
        "file_distribution": dict(Counter(entry["file_extension"] or "unknown" for entry in entries)),
    }


def find_issues(records: Sequence[FileRecord]) -> List[Dict[str, Any]]:
    """Group parse errors, oversized files and long parameter lists into issue categories."""
    parse_errors: List[Dict[str, Any]] = []
    large_files: List[Dict[str, Any]] = []
    long_signatures: List[Dict[str, Any]] = []

    for record in records:
        if record.fatal_error:
            parse_errors.append(
                {"file": record.path, "message": record.fatal_error, "line": None, "severity": "error"}
            )
        for issue in record.parse_errors:
            parse_errors.append(
                {"file": record.path, "message": issue.message, "line": issue.line, "severity": "error"}
            )
        if record.line_count > LARGE_FILE_LINES:
            large_files.append(
                {
                    "file": record.path,
                    "lines": record.line_count,
                    "message": f"File is {record.line_count} lines long",
                    "severity": "warning",
                }
            )
        for function in record.functions:
            if len(function.parameters) > MAX_PARAMETERS:
                long_signatures.append(
                    {
                        "file": record.path,
                        "function": function.name,
                        "params": len(function.parameters),
                        "line": function.line,
                        "message": f"Function has {len(function.parameters)} parameters",
                        "severity": "warning",
                    }
                )

    return [
        {"type": "Parse Errors", "items": parse_errors, "count": len(parse_errors)},
        {"type": "Large Files", "items": large_files, "count": len(large_files)},
        {"type": "Long Functions", "items": long_signatures, "count": len(long_signatures)},
    ]


def available_diagram_kinds(records: Sequence[FileRecord]) -> List[Dict[str, str]]:
    """Return the diagram kinds that have material to show for ``records``."""
    kinds: List[Dict[str, str]] = []
    if any(record.dependencies for record in records):
        kinds.append(
            {
                "kind": "dependency-flow",
                "name": "Dependency Graph",
                "description": "Shows file dependencies and imports",
            }
        )
    if any(record.components for record in records):
        kinds.append(
            {
                "kind": "component",
                "name": "Component Hierarchy",
                "description": "Shows component relationships",
            }
        )
        kinds.append(
            {
                "kind": "sequence",
                "name": "Sequence Diagram",
                "description": "Shows component interaction flow",
            }
        )
    if any(record.functions for record in records):
        kinds.append(
            {
                "kind": "function-call",
                "name": "Function Call Graph",
                "description": "Shows function relationships",
            }
        )
    if any(record.classes for record in records):
        kinds.append(
            {
                "kind": "class",
                "name": "Class Diagram",
                "description": "Shows class inheritance and structure",
            }
        )
    return kinds


@dataclass
class RecordFilter:
    """Narrows a record list before projecting a custom diagram."""

    extensions: List[str] = field(default_factory=list)
    path_pattern: Optional[str] = None
    min_functions: int = 0
    has_components: bool = False

    def apply(self, records: Sequence[FileRecord]) -> List[FileRecord]:
        selected = list(records)
        if self.extensions:
            wanted = {ext.lower() for ext in self.extensions}
            selected = [record for record in selected if record.extension in wanted]
        if self.path_pattern:
            pattern = re.compile(self.path_pattern, re.IGNORECASE)
            selected = [record for record in selected if pattern.search(record.path)]
        if self.min_functions:
            selected = [record for record in selected if len(record.functions) >= self.min_functions]
        if self.has_components:
            selected = [record for record in selected if record.components]
        return selected


__all__ = [
    "COMPLEXITY_THRESHOLD",
    "RecordFilter",
    "analyze_components",
    "analyze_dependencies",
    "analyze_functions",
    "available_diagram_kinds",
    "calculate_metrics",
    "estimate_complexity",
    "find_issues",
    "is_complex",
]
