"""Stylesheet parser: tree-sitter CSS rule tree plus @import extraction."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

import tree_sitter_css as tscss
from tree_sitter import Language, Node, Parser

from .base import SourceParser
from ..models import STYLE_IMPORT, DependencyRef, FileRecord, ParseIssue, is_external_target

_CSS_IMPORT_PATTERN = re.compile(r"@import\s+(?:url\()?['\"`]?([^'\"`\)]+)['\"`]?\)?")

_AT_RULES = {
    "import_statement",
    "media_statement",
    "charset_statement",
    "namespace_statement",
    "keyframes_statement",
    "supports_statement",
    "at_rule",
}

_CSS_LANGUAGE: Optional[Language] = None


def _language() -> Language:
    global _CSS_LANGUAGE
    if _CSS_LANGUAGE is None:
        _CSS_LANGUAGE = Language(tscss.language())
    return _CSS_LANGUAGE


def extract_css_imports(content: str) -> List[DependencyRef]:
    """Return @import targets found in raw stylesheet text."""
    dependencies: List[DependencyRef] = []
    for match in _CSS_IMPORT_PATTERN.finditer(content):
        target = match.group(1).strip()
        if not target:
            continue
        dependencies.append(
            DependencyRef(kind=STYLE_IMPORT, target=target, is_external=is_external_target(target))
        )
    return dependencies


def parse_rules(content: str) -> Tuple[Dict[str, object], Optional[ParseIssue]]:
    """Build a compact outline of the CSS rule tree and report the first syntax error."""
    source = content.encode("utf-8")
    tree = Parser(_language()).parse(source)
    selectors: List[str] = []
    at_rules: List[str] = []
    _collect_rules(tree.root_node, source, selectors, at_rules)

    issue: Optional[ParseIssue] = None
    if tree.root_node.has_error:
        error = _first_error(tree.root_node) or tree.root_node
        line, column = error.start_point[0] + 1, error.start_point[1]
        issue = ParseIssue(message=f"CSS syntax error ({line}:{column})", line=line, column=column)

    outline: Dict[str, object] = {
        "rules": len(selectors),
        "selectors": selectors,
        "at_rules": at_rules,
    }
    return outline, issue


def _collect_rules(node: Node, source: bytes, selectors: List[str], at_rules: List[str]) -> None:
    for child in node.named_children:
        if child.type == "rule_set":
            for part in child.named_children:
                if part.type == "selectors":
                    selectors.append(source[part.start_byte : part.end_byte].decode("utf-8", errors="ignore"))
        elif child.type in _AT_RULES:
            at_rules.append(child.type)
        _collect_rules(child, source, selectors, at_rules)


def _first_error(node: Node) -> Optional[Node]:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


class StylesheetParser(SourceParser):
    """Parses CSS files into a rule outline and style-import dependencies."""

    extensions = frozenset({".css"})

    def parse(self, content: str, record: FileRecord) -> FileRecord:
        outline, issue = parse_rules(content)
        if issue is not None:
            record.parse_errors.append(issue)
        record.dependencies.extend(extract_css_imports(content))
        record.structure.update(outline)
        return record


__all__ = ["StylesheetParser", "extract_css_imports", "parse_rules"]
