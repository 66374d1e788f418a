"""Identifier, label and shape sanitisation shared by every diagram projection."""

from __future__ import annotations

import re
from typing import Any

MAX_ID_LENGTH = 50
MAX_LABEL_LENGTH = 60
MAX_EDGE_LABEL_LENGTH = 50

_ID_UNSAFE = re.compile(r"[^a-zA-Z0-9_]")
_UNDERSCORE_RUN = re.compile(r"_+")
_LEADING_DIGIT = re.compile(r"^(\d)")
_LABEL_BREAKERS = re.compile(r"[\"\\\n\r\t]")
_LABEL_UNSAFE = re.compile(r"[^a-zA-Z0-9\s\-_\[\],\.]")
_EDGE_WHITESPACE = re.compile(r"[\n\r\t]")
_EDGE_BRACKETS = re.compile(r"[{}\[\]()]")

# Nested wrapper artifacts and the single shape each collapses to.
NESTED_SHAPE_RULES = (
    (re.compile(r"\{\((\".*?\")\)\}"), r"(\1)"),
    (re.compile(r"\[\((\".*?\")\)\]"), r"(\1)"),
    (re.compile(r"\(\[(\".*?\")\]\)"), r"(\1)"),
    (re.compile(r"\{\[(\".*?\")\]\}"), r"[\1]"),
    (re.compile(r"\(\{(\".*?\")\}\)"), r"(\1)"),
)


def sanitize_id(value: Any) -> str:
    """Return a diagram-safe identifier token for ``value``.

    Separators and punctuation become underscores, runs collapse, a leading
    digit is guarded and the result is capped. Applying it twice is a no-op.
    """
    if value is None or value == "":
        return "undefined_id"
    token = str(value).replace("\\", "_").replace("/", "_")
    token = _ID_UNSAFE.sub("_", token)
    token = _UNDERSCORE_RUN.sub("_", token)
    token = token.strip("_")
    token = _LEADING_DIGIT.sub(r"_\1", token)
    token = token[:MAX_ID_LENGTH].rstrip("_")
    return token or "id"


def sanitize_label(value: Any) -> str:
    label = _LABEL_BREAKERS.sub(" ", str(value or "")).strip()
    return _LABEL_UNSAFE.sub("", label[:MAX_LABEL_LENGTH])


def sanitize_edge_label(value: Any) -> str:
    label = _EDGE_WHITESPACE.sub(" ", str(value))
    label = label.replace("|", "/")
    label = _EDGE_BRACKETS.sub("", label)
    return label.strip()[:MAX_EDGE_LABEL_LENGTH]


def normalize_shapes(text: str) -> str:
    """Collapse composed shape wrappers such as ``{("x")}`` into one shape."""
    for pattern, replacement in NESTED_SHAPE_RULES:
        text = pattern.sub(replacement, text)
    return text


__all__ = [
    "MAX_EDGE_LABEL_LENGTH",
    "MAX_ID_LENGTH",
    "MAX_LABEL_LENGTH",
    "NESTED_SHAPE_RULES",
    "normalize_shapes",
    "sanitize_edge_label",
    "sanitize_id",
    "sanitize_label",
]
