"""Single-file component parser (script, template and style blocks)."""

from __future__ import annotations

import re

from .base import ScriptSyntaxError, SourceParser
from .markup import extract_markup, markup_dependencies
from .script import analyze_source
from .stylesheet import extract_css_imports
from ..logging import get_logger
from ..models import FileRecord, ParseIssue

_SCRIPT_BLOCK = re.compile(r"<script([^>]*)>([\s\S]*?)</script>", re.IGNORECASE)
_TEMPLATE_BLOCK = re.compile(r"<template[^>]*>([\s\S]*?)</template>", re.IGNORECASE)
_STYLE_BLOCK = re.compile(r"<style[^>]*>([\s\S]*?)</style>", re.IGNORECASE)
_TS_LANG = re.compile(r"""lang\s*=\s*["']?(ts|tsx)\b""", re.IGNORECASE)

logger = get_logger("parsers.composite")


class CompositeParser(SourceParser):
    """Splits a component file into blocks and delegates each to its family parser."""

    extensions = frozenset({".vue"})

    def parse(self, content: str, record: FileRecord) -> FileRecord:
        script_match = _SCRIPT_BLOCK.search(content)
        if script_match:
            self._parse_script(content, script_match, record)

        template_match = _TEMPLATE_BLOCK.search(content)
        if template_match:
            try:
                outline = extract_markup(template_match.group(1))
                record.dependencies.extend(markup_dependencies(outline))
            except Exception as exc:  # pragma: no cover - unexpected failure
                record.parse_errors.append(ParseIssue(message=f"template: {exc}"))

        for style_match in _STYLE_BLOCK.finditer(content):
            try:
                record.dependencies.extend(extract_css_imports(style_match.group(1)))
            except Exception as exc:  # pragma: no cover - unexpected failure
                record.parse_errors.append(ParseIssue(message=f"style: {exc}"))

        return record

    def _parse_script(self, content: str, match: re.Match[str], record: FileRecord) -> None:
        attributes, body = match.group(1), match.group(2)
        lang = _TS_LANG.search(attributes)
        grammar = "javascript"
        if lang:
            grammar = "tsx" if lang.group(1).lower() == "tsx" else "typescript"
        line_offset = content.count("\n", 0, match.start(2))
        try:
            summary = analyze_source(body, grammar=grammar, line_offset=line_offset)
        except ScriptSyntaxError as exc:
            record.parse_errors.append(ParseIssue(message=str(exc), line=exc.line, column=exc.column))
            return
        except Exception as exc:  # pragma: no cover - unexpected failure
            logger.debug("Script block of %s failed: %s", record.path, exc)
            record.parse_errors.append(ParseIssue(message=f"script: {exc}"))
            return
        record.dependencies.extend(summary.dependencies)
        record.functions.extend(summary.functions)
        record.classes.extend(summary.classes)
        record.components.extend(summary.components)


__all__ = ["CompositeParser"]
