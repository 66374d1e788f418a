"""Tests for the tree-sitter script parser."""

from __future__ import annotations

import textwrap

from decodify.models import DYNAMIC_IMPORT, IMPORT, REQUIRE
from decodify.parsers import SourceFileParser
from decodify.parsers.script import extract_dependencies


def _parse(path: str, source: str):
    return SourceFileParser().parse(path, textwrap.dedent(source).lstrip("\n"))


def test_scenario_default_export_of_declared_function() -> None:
    record = _parse(
        "index.js",
        "import React from 'react'; function Main(){ return 1; } export default Main;",
    )

    assert record.fatal_error is None
    assert record.parse_errors == []
    assert len(record.dependencies) == 1
    dependency = record.dependencies[0]
    assert (dependency.kind, dependency.target, dependency.is_external) == (IMPORT, "react", True)
    assert [(fn.name, fn.kind) for fn in record.functions] == [("Main", "declaration")]
    assert [(exp.kind, exp.name) for exp in record.exports] == [("default", "Main")]


def test_dependencies_are_ordered_by_form() -> None:
    dependencies = extract_dependencies(
        """
        const lazy = () => import('./lazy');
        const fs = require("fs");
        import { a, b } from "./utils";
        import './side-effect.css';
        """
    )

    assert [(dep.kind, dep.target) for dep in dependencies] == [
        (IMPORT, "./utils"),
        (IMPORT, "./side-effect.css"),
        (REQUIRE, "fs"),
        (DYNAMIC_IMPORT, "./lazy"),
    ]
    assert [dep.is_external for dep in dependencies] == [False, False, True, False]


def test_functions_capture_kind_parameters_and_flags() -> None:
    record = _parse(
        "src/utils.js",
        """
        async function load(url, { retries }) {
          return fetch(url);
        }
        function* ids() { yield 1; }
        const add = (a, b = 2) => a + b;
        const named = function (...rest) { return rest; };
        """,
    )

    functions = {fn.name: fn for fn in record.functions}
    assert functions["load"].kind == "declaration"
    assert functions["load"].is_async is True
    assert functions["load"].parameters == ["url", "object_pattern"]
    assert functions["load"].line == 1
    assert functions["ids"].is_generator is True
    assert functions["add"].kind == "arrow"
    assert functions["add"].parameters == ["a", "assignment_pattern"]
    assert functions["named"].kind == "expression"
    assert functions["named"].parameters == ["rest_pattern"]


def test_components_detected_by_capitalisation_and_superclass() -> None:
    record = _parse(
        "src/App.jsx",
        """
        import React, { Component } from 'react';

        function Header(props) {
          return <h1>{props.title}</h1>;
        }

        const Footer = () => <footer />;

        class Panel extends React.Component {
          state = {};
          render() { return <div />; }
        }

        class Legacy extends Component {}

        class Store {}

        export default function App() {
          return <Header title="x" />;
        }
        """,
    )

    components = {component.name: component for component in record.components}
    assert set(components) == {"Header", "Footer", "Panel", "Legacy", "App"}
    assert components["Header"].props == ["props"]
    assert components["Footer"].props == []
    assert components["Panel"].kind == "class"
    assert components["App"].exported is True
    assert [c.name for c in record.components].count("App") == 1

    classes = {cls.name: cls for cls in record.classes}
    assert classes["Panel"].superclass_name == "React.Component"
    assert classes["Panel"].properties == ["state"]
    assert [method.name for method in classes["Panel"].methods] == ["render"]
    assert classes["Store"].superclass_name is None
    assert ("default", "App") in [(exp.kind, exp.name) for exp in record.exports]


def test_named_exports_include_specifiers_and_declarations() -> None:
    record = _parse(
        "src/api.ts",
        """
        const base: string = "/api";
        export const get = (path: string) => fetch(base + path);
        export function post(path: string, body: unknown) { return fetch(path); }
        export { base as root };
        """,
    )

    named = {exp.name for exp in record.exports if exp.kind == "named"}
    assert named == {"get", "post", "root"}
    post = next(fn for fn in record.functions if fn.name == "post")
    assert post.parameters == ["path", "body"]


def test_syntax_error_leaves_collections_empty() -> None:
    record = _parse(
        "src/broken.js",
        """
        import x from './x';
        function broken( {
        """,
    )

    assert record.fatal_error is None
    assert len(record.parse_errors) == 1
    assert record.parse_errors[0].line is not None
    assert record.dependencies == []
    assert record.functions == []
    assert record.components == []
    assert record.exports == []


def test_anonymous_default_class_is_recorded() -> None:
    record = _parse(
        "src/Legacy.jsx",
        """
        import React from 'react';

        export default class extends React.Component {
          render() {
            return <div />;
          }
        }
        """,
    )

    assert record.parse_errors == []
    assert [(cls.name, cls.superclass_name) for cls in record.classes] == [("anonymous", "React.Component")]
    assert [method.name for method in record.classes[0].methods] == ["render"]
    assert [(c.name, c.kind) for c in record.components] == [("anonymous", "class")]
    assert [(exp.kind, exp.name) for exp in record.exports] == [("default", "default")]
