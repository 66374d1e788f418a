"""Structural sanity checks for generated Mermaid text."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..diagrams.sanitize import NESTED_SHAPE_RULES

DIAGRAM_KEYWORDS = ("graph", "classDiagram", "sequenceDiagram")

_OPENERS = {"[": "]", "(": ")", "{": "}"}
_CLOSERS = set(_OPENERS.values())

INVALID_DECLARATION = "Invalid diagram type declaration"
UNMATCHED_BRACKETS = "Unmatched brackets detected"
UNCLOSED_BRACKETS = "Unclosed brackets detected"
NESTED_SHAPES = "Nested shape tokens detected"


@dataclass
class ValidationResult:
    """Verdict for one diagram; valid exactly when no errors were collected."""

    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {"is_valid": self.is_valid, "errors": list(self.errors)}


def _bracket_error(text: str) -> str | None:
    stack: List[str] = []
    for char in text:
        if char in _OPENERS:
            stack.append(char)
        elif char in _CLOSERS:
            if not stack or _OPENERS[stack.pop()] != char:
                return UNMATCHED_BRACKETS
    if stack:
        return UNCLOSED_BRACKETS
    return None


def validate(text: str) -> ValidationResult:
    """Check the leading keyword, bracket balance and nested shape artifacts."""
    result = ValidationResult()
    if not text.strip().startswith(DIAGRAM_KEYWORDS):
        result.errors.append(INVALID_DECLARATION)

    bracket_error = _bracket_error(text)
    if bracket_error:
        result.errors.append(bracket_error)

    if any(pattern.search(text) for pattern, _ in NESTED_SHAPE_RULES):
        result.errors.append(NESTED_SHAPES)
    return result


__all__ = [
    "DIAGRAM_KEYWORDS",
    "INVALID_DECLARATION",
    "NESTED_SHAPES",
    "UNCLOSED_BRACKETS",
    "UNMATCHED_BRACKETS",
    "ValidationResult",
    "validate",
]
