"""Tests for the single-file component parser."""

from __future__ import annotations

from decodify.models import IMPORT, STYLE_IMPORT, STYLESHEET
from decodify.parsers import SourceFileParser

_COMPONENT = """<template>
  <div class="card">
    <link rel="stylesheet" href="./card-theme.css">
  </div>
</template>

<script>
import Button from './Button.vue';

export default {
  name: 'Card',
};

function Helper(props) {
  return props;
}
</script>

<style scoped>
@import './card.css';
.card { padding: 1rem; }
</style>
"""


def test_blocks_are_merged_into_one_record() -> None:
    record = SourceFileParser().parse("src/Card.vue", _COMPONENT)

    kinds = [(dep.kind, dep.target) for dep in record.dependencies]
    assert (IMPORT, "./Button.vue") in kinds
    assert (STYLESHEET, "./card-theme.css") in kinds
    assert (STYLE_IMPORT, "./card.css") in kinds
    assert [fn.name for fn in record.functions] == ["Helper"]
    assert [component.name for component in record.components] == ["Helper"]
    assert record.parse_errors == []


def test_script_lines_are_offset_to_the_outer_file() -> None:
    record = SourceFileParser().parse("src/Card.vue", _COMPONENT)

    helper = record.functions[0]
    expected_line = _COMPONENT.splitlines().index("function Helper(props) {") + 1
    assert helper.line == expected_line


def test_broken_script_block_does_not_drop_styles() -> None:
    content = """<script>
function broken( {
</script>
<style>
@import './still-here.css';
</style>
"""
    record = SourceFileParser().parse("src/Broken.vue", content)

    assert record.fatal_error is None
    assert len(record.parse_errors) == 1
    assert record.functions == []
    assert [dep.target for dep in record.dependencies] == ["./still-here.css"]


def test_typescript_script_block_uses_typescript_grammar() -> None:
    content = """<script lang="ts">
const count: number = 1;
export function useCounter(start: number): number {
  return start + count;
}
</script>
"""
    record = SourceFileParser().parse("src/Counter.vue", content)

    assert record.parse_errors == []
    assert [fn.name for fn in record.functions] == ["useCounter"]


def test_tsx_script_block_keeps_jsx_components() -> None:
    content = """<script lang="tsx">
const Badge = (props: { label: string }) => <span>{props.label}</span>;
</script>
"""
    record = SourceFileParser().parse("src/Badge.vue", content)

    assert record.parse_errors == []
    assert [(c.name, c.kind, c.line) for c in record.components] == [("Badge", "functional", 2)]
