"""Tests for the fail-safe diagrams."""

from __future__ import annotations

import pytest

from decodify.diagrams import DIAGRAM_KINDS
from decodify.failsafe import build_fallback_diagram
from decodify.validators import validate


@pytest.mark.parametrize("kind", DIAGRAM_KINDS)
def test_fallback_diagrams_validate(kind: str) -> None:
    text = build_fallback_diagram(kind)

    assert validate(text).is_valid


def test_unknown_kind_gets_generic_fallback() -> None:
    text = build_fallback_diagram("pie")

    assert text.startswith("graph TD")
    assert "Diagram Generation Error" in text
