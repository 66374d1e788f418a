"""Validation package for generated diagram text."""

from .diagram import (
    DIAGRAM_KEYWORDS,
    INVALID_DECLARATION,
    NESTED_SHAPES,
    UNCLOSED_BRACKETS,
    UNMATCHED_BRACKETS,
    ValidationResult,
    validate,
)

__all__ = [
    "DIAGRAM_KEYWORDS",
    "INVALID_DECLARATION",
    "NESTED_SHAPES",
    "UNCLOSED_BRACKETS",
    "UNMATCHED_BRACKETS",
    "ValidationResult",
    "validate",
]
