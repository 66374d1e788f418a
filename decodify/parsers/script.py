"""Tree-sitter powered parser for script and module sources."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser

from .base import ScriptSyntaxError, SourceParser
from ..models import (
    DYNAMIC_IMPORT,
    IMPORT,
    REQUIRE,
    ClassRef,
    ComponentRef,
    DependencyRef,
    ExportRef,
    FileRecord,
    FunctionRef,
    MethodRef,
    ParseIssue,
    is_external_target,
)

_IMPORT_PATTERN = re.compile(
    r"import\s+(?:(?:\{[^}]*\}|\*\s+as\s+\w+|\w+)(?:\s*,\s*(?:\{[^}]*\}|\*\s+as\s+\w+|\w+))*\s+from\s+)?"
    r"['\"`]([^'\"`]+)['\"`]"
)
_REQUIRE_PATTERN = re.compile(r"require\s*\(\s*['\"`]([^'\"`]+)['\"`]\s*\)")
_DYNAMIC_IMPORT_PATTERN = re.compile(r"import\s*\(\s*['\"`]([^'\"`]+)['\"`]\s*\)")

_GRAMMAR_BY_EXTENSION = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
}

# Node types holding a function value on the right-hand side of a declarator.
_FUNCTION_VALUES = {"function_expression", "function", "generator_function", "arrow_function"}
_FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}
_FIELD_DEFINITIONS = {"field_definition", "public_field_definition"}
_COMPONENT_BASE = "Component"

_LANGUAGES: Dict[str, Language] = {}


def grammar_for_extension(extension: str) -> str:
    return _GRAMMAR_BY_EXTENSION.get(extension.lower(), "javascript")


def _get_language(grammar: str) -> Language:
    language = _LANGUAGES.get(grammar)
    if language is not None:
        return language
    if grammar == "typescript":
        language = Language(tstypescript.language_typescript())
    elif grammar == "tsx":
        language = Language(tstypescript.language_tsx())
    else:
        language = Language(tsjavascript.language())
    _LANGUAGES[grammar] = language
    return language


def extract_dependencies(content: str) -> List[DependencyRef]:
    """Return import, require and dynamic import references found in raw text."""
    dependencies: List[DependencyRef] = []
    for pattern, kind in (
        (_IMPORT_PATTERN, IMPORT),
        (_REQUIRE_PATTERN, REQUIRE),
        (_DYNAMIC_IMPORT_PATTERN, DYNAMIC_IMPORT),
    ):
        for match in pattern.finditer(content):
            target = match.group(1)
            dependencies.append(
                DependencyRef(kind=kind, target=target, is_external=is_external_target(target))
            )
    return dependencies


@dataclass
class ScriptSummary:
    """Everything derived from one successfully parsed script block."""

    dependencies: List[DependencyRef] = field(default_factory=list)
    exports: List[ExportRef] = field(default_factory=list)
    functions: List[FunctionRef] = field(default_factory=list)
    classes: List[ClassRef] = field(default_factory=list)
    components: List[ComponentRef] = field(default_factory=list)


def analyze_source(content: str, *, grammar: str = "javascript", line_offset: int = 0) -> ScriptSummary:
    """Parse script content and return its structural summary.

    Raises ScriptSyntaxError when the grammar reports an error or missing node.
    """
    source_bytes = content.encode("utf-8")
    parser = Parser(_get_language(grammar))
    tree = parser.parse(source_bytes)
    root = tree.root_node
    if root.has_error:
        raise _syntax_error(root, line_offset)

    visitor = _ScriptVisitor(source_bytes, line_offset=line_offset)
    visitor.visit(root)
    return ScriptSummary(
        dependencies=extract_dependencies(content),
        exports=visitor.exports,
        functions=visitor.functions,
        classes=visitor.classes,
        components=visitor.components,
    )


def _syntax_error(root: Node, line_offset: int) -> ScriptSyntaxError:
    node = _first_error_node(root) or root
    line = node.start_point[0] + 1 + line_offset
    column = node.start_point[1]
    if node.is_missing:
        message = f"Missing {node.type} ({line}:{column})"
    else:
        message = f"Unexpected token ({line}:{column})"
    return ScriptSyntaxError(message, line=line, column=column)


def _first_error_node(node: Node) -> Optional[Node]:
    if node.is_error or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error_node(child)
        if found is not None:
            return found
    return None


class _ScriptVisitor:
    """Collects functions, classes, components and exports from a syntax tree."""

    def __init__(self, source_bytes: bytes, *, line_offset: int = 0) -> None:
        self._source = source_bytes
        self._line_offset = line_offset
        self._exported_components: Set[int] = set()
        self.functions: List[FunctionRef] = []
        self.classes: List[ClassRef] = []
        self.components: List[ComponentRef] = []
        self.exports: List[ExportRef] = []

    def visit(self, node: Node) -> None:
        handler = self._HANDLERS.get(node.type)
        if handler is not None:
            handler(self, node)
        for child in node.named_children:
            self.visit(child)

    # ------------------------------------------------------------------
    # Node handlers

    def _visit_function_declaration(self, node: Node) -> None:
        name = self._name_of(node) or "anonymous"
        parameters = self._parameters(node)
        line = self._line(node)
        self.functions.append(
            FunctionRef(
                name=name,
                kind="declaration",
                parameters=parameters,
                line=line,
                is_async=_has_token(node, "async"),
                is_generator=node.type.startswith("generator") or _has_token(node, "*"),
            )
        )
        if _is_component_name(name) and node.start_byte not in self._exported_components:
            self.components.append(
                ComponentRef(name=name, kind="functional", line=line, props=_props_flag(parameters))
            )

    def _visit_variable_declarator(self, node: Node) -> None:
        value = node.child_by_field_name("value")
        if value is None or value.type not in _FUNCTION_VALUES:
            return
        name_node = node.child_by_field_name("name")
        name = self._text(name_node) if name_node is not None and name_node.type == "identifier" else "anonymous"
        parameters = self._parameters(value)
        line = self._line(node)
        self.functions.append(
            FunctionRef(
                name=name,
                kind="arrow" if value.type == "arrow_function" else "expression",
                parameters=parameters,
                line=line,
                is_async=_has_token(value, "async"),
                is_generator=value.type == "generator_function" or _has_token(value, "*"),
            )
        )
        if _is_component_name(name):
            self.components.append(
                ComponentRef(name=name, kind="functional", line=line, props=_props_flag(parameters))
            )

    def _visit_class(self, node: Node) -> None:
        name = self._name_of(node) or "anonymous"
        superclass = _superclass_node(node)
        line = self._line(node)
        properties: List[str] = []
        methods: List[MethodRef] = []
        body = node.child_by_field_name("body")
        if body is not None:
            for member in body.named_children:
                if member.type == "method_definition":
                    methods.append(
                        MethodRef(
                            name=self._name_of(member) or "anonymous",
                            parameters=self._parameters(member),
                            line=self._line(member),
                            is_async=_has_token(member, "async"),
                            is_static=_has_token(member, "static"),
                        )
                    )
                elif member.type in _FIELD_DEFINITIONS:
                    prop = member.child_by_field_name("property") or member.child_by_field_name("name")
                    if prop is not None:
                        properties.append(self._text(prop))
        self.classes.append(
            ClassRef(
                name=name,
                superclass_name=self._text(superclass) if superclass is not None else None,
                line=line,
                end_line=node.end_point[0] + 1 + self._line_offset,
                properties=properties,
                methods=methods,
            )
        )
        if superclass is not None and self._extends_component(superclass):
            self.components.append(ComponentRef(name=name, kind="class", line=line, props=[]))

    def _visit_export(self, node: Node) -> None:
        line = self._line(node)
        declaration = node.child_by_field_name("declaration")
        if _has_token(node, "default"):
            target = declaration or node.child_by_field_name("value")
            name = "default"
            if target is not None:
                if target.type == "identifier":
                    name = self._text(target)
                else:
                    name = self._name_of(target) or "default"
            self.exports.append(ExportRef(kind="default", name=name, line=line))
            # Class expressions are not in the handler table; record them here.
            if target is not None and target.type == "class":
                self._visit_class(target)
            elif target is not None and name != "default":
                self._record_default_function(target, name, line)
            return

        for child in node.named_children:
            if child.type != "export_clause":
                continue
            for specifier in child.named_children:
                if specifier.type != "export_specifier":
                    continue
                local_node = specifier.child_by_field_name("name")
                alias_node = specifier.child_by_field_name("alias")
                local = self._text(local_node) if local_node is not None else None
                exported = self._text(alias_node) if alias_node is not None else local
                if exported:
                    self.exports.append(ExportRef(kind="named", name=exported, line=line, local=local))

        if declaration is not None:
            for name in self._declared_names(declaration):
                self.exports.append(ExportRef(kind="named", name=name, line=line, local=name))

    _HANDLERS: Dict[str, Callable[["_ScriptVisitor", Node], None]] = {
        "function_declaration": _visit_function_declaration,
        "generator_function_declaration": _visit_function_declaration,
        "variable_declarator": _visit_variable_declarator,
        "class_declaration": _visit_class,
        "abstract_class_declaration": _visit_class,
        "export_statement": _visit_export,
    }

    # ------------------------------------------------------------------
    # Helpers

    def _record_default_function(self, target: Node, name: str, line: int) -> None:
        if target.type in _FUNCTION_DECLARATIONS:
            if _is_component_name(name):
                self._exported_components.add(target.start_byte)
                self.components.append(
                    ComponentRef(
                        name=name,
                        kind="functional",
                        line=line,
                        props=_props_flag(self._parameters(target)),
                        exported=True,
                    )
                )
        elif target.type in _FUNCTION_VALUES and target.type != "arrow_function":
            # A named default function expression is a declaration in every other grammar.
            parameters = self._parameters(target)
            self.functions.append(
                FunctionRef(
                    name=name,
                    kind="declaration",
                    parameters=parameters,
                    line=self._line(target),
                    is_async=_has_token(target, "async"),
                    is_generator=target.type == "generator_function" or _has_token(target, "*"),
                )
            )
            if _is_component_name(name):
                self.components.append(
                    ComponentRef(
                        name=name,
                        kind="functional",
                        line=line,
                        props=_props_flag(parameters),
                        exported=True,
                    )
                )

    def _declared_names(self, declaration: Node) -> List[str]:
        if declaration.type in {"lexical_declaration", "variable_declaration"}:
            names = []
            for declarator in declaration.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                if name_node is not None and name_node.type == "identifier":
                    names.append(self._text(name_node))
            return names
        name = self._name_of(declaration)
        return [name] if name else []

    def _extends_component(self, superclass: Node) -> bool:
        if superclass.type == "identifier":
            return self._text(superclass) == _COMPONENT_BASE
        if superclass.type == "member_expression":
            prop = superclass.child_by_field_name("property")
            return prop is not None and self._text(prop) == _COMPONENT_BASE
        return False

    def _parameters(self, node: Node) -> List[str]:
        params_node = node.child_by_field_name("parameters")
        if params_node is None:
            single = node.child_by_field_name("parameter")
            return [self._text(single)] if single is not None else []
        parameters: List[str] = []
        for child in params_node.named_children:
            if child.type == "comment":
                continue
            parameters.append(self._parameter_name(child))
        return parameters

    def _parameter_name(self, node: Node) -> str:
        if node.type == "identifier":
            return self._text(node)
        if node.type in {"required_parameter", "optional_parameter"}:
            pattern = node.child_by_field_name("pattern")
            if pattern is None:
                return node.type
            if pattern.type == "identifier":
                return self._text(pattern)
            return pattern.type
        return node.type

    def _name_of(self, node: Node) -> Optional[str]:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        return self._text(name_node) or None

    def _line(self, node: Node) -> int:
        return node.start_point[0] + 1 + self._line_offset

    def _text(self, node: Node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _superclass_node(node: Node) -> Optional[Node]:
    for child in node.children:
        if child.type != "class_heritage":
            continue
        for part in child.named_children:
            if part.type == "implements_clause":
                continue
            if part.type == "extends_clause":
                value = part.child_by_field_name("value")
                if value is None and part.named_children:
                    value = part.named_children[0]
                return value
            return part
    return None


def _has_token(node: Node, token: str) -> bool:
    return any(child.type == token for child in node.children)


def _is_component_name(name: str) -> bool:
    return bool(name) and name[0].isupper()


def _props_flag(parameters: List[str]) -> List[str]:
    return ["props"] if parameters else []


class ScriptParser(SourceParser):
    """Parses JavaScript and TypeScript sources, including component markup."""

    extensions = frozenset(_GRAMMAR_BY_EXTENSION)

    def parse(self, content: str, record: FileRecord) -> FileRecord:
        try:
            summary = analyze_source(content, grammar=grammar_for_extension(record.extension))
        except ScriptSyntaxError as exc:
            record.parse_errors.append(ParseIssue(message=str(exc), line=exc.line, column=exc.column))
            return record
        record.dependencies.extend(summary.dependencies)
        record.exports.extend(summary.exports)
        record.functions.extend(summary.functions)
        record.classes.extend(summary.classes)
        record.components.extend(summary.components)
        return record


__all__ = [
    "ScriptParser",
    "ScriptSummary",
    "analyze_source",
    "extract_dependencies",
    "grammar_for_extension",
]
