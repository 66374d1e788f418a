"""Tests for the dependency-flow projection."""

from __future__ import annotations

from decodify.diagrams import project
from decodify.diagrams.flowchart import FlowchartOptions, generate_flowchart, is_external_node
from decodify.models import DYNAMIC_IMPORT, REQUIRE, DependencyGraph, GraphEdge, GraphNode
from decodify.models import is_external_target
from decodify.validators import validate


def _node(node_id: str, **counts: int) -> GraphNode:
    extension = "." + node_id.rsplit(".", 1)[-1] if "." in node_id else ""
    return GraphNode(id=node_id, label=node_id.rsplit("/", 1)[-1], type=extension, **counts)


def test_options_coerce_loose_values() -> None:
    options = FlowchartOptions.from_mapping(
        {"direction": "td", "includeExternal": "true", "maxNodes": "12", "groupByDirectory": "false"}
    )

    assert options == FlowchartOptions(direction="TD", include_external=True, max_nodes=12, group_by_directory=False)


def test_options_fall_back_to_defaults() -> None:
    options = FlowchartOptions.from_mapping({"direction": "sideways", "max_nodes": -3, "include_external": "maybe"})

    assert options == FlowchartOptions()


def test_react_is_external_and_filtered() -> None:
    assert is_external_target("react") is True
    graph = DependencyGraph(
        nodes=[_node("src/app.js", functions=2), _node("react"), _node("src/util.js")],
        edges=[GraphEdge(from_path="src/app.js", to_path="src/util.js", kind="import", label="./util")],
    )

    text = generate_flowchart(graph)

    assert is_external_node(graph.nodes[1])
    assert "react" not in text.replace("src_app_js", "")
    assert 'src_app_js["app.js [2f]"]' in text
    assert "src_app_js -->|./util| src_util_js" in text
    assert validate(text).is_valid


def test_include_external_keeps_package_nodes() -> None:
    graph = DependencyGraph(nodes=[_node("src/app.js"), _node("lodash")])

    text = project("dependency-flow", graph, {"include_external": True})

    assert "lodash" in text


def test_shapes_arrows_and_grouping() -> None:
    graph = DependencyGraph(
        nodes=[
            _node("src/main.ts"),
            _node("src/widgets/Card.jsx"),
            _node("index.html"),
            _node("styles/site.css"),
        ],
        edges=[
            GraphEdge(from_path="src/main.ts", to_path="src/widgets/Card.jsx", kind=DYNAMIC_IMPORT, label="./widgets/Card"),
            GraphEdge(from_path="index.html", to_path="src/main.ts", kind=REQUIRE, label="./src/main.ts"),
        ],
    )

    text = generate_flowchart(graph, FlowchartOptions(direction="TB"))

    assert text.startswith("graph TB\n")
    assert 'subgraph "src"' in text
    assert 'subgraph "src_widgets"' in text
    assert 'subgraph "root"' in text
    assert 'src_main_ts{"main.ts"}' in text
    assert 'src_widgets_Card_jsx("Card.jsx")' in text
    assert 'index_html[["index.html"]]' in text
    assert 'styles_site_css((("site.css")))' in text
    assert "src_main_ts ==>|./widgets/Card| src_widgets_Card_jsx" in text
    assert "index_html -.->|./src/main.ts| src_main_ts" in text
    assert "class src_main_ts tsFile" in text
    assert validate(text).is_valid


def test_max_nodes_truncates_and_drops_outside_edges() -> None:
    graph = DependencyGraph(
        nodes=[_node("a/one.js"), _node("a/two.js"), _node("a/three.js")],
        edges=[GraphEdge(from_path="a/one.js", to_path="a/three.js", kind="import", label="./three")],
    )

    text = generate_flowchart(graph, FlowchartOptions(max_nodes=2, group_by_directory=False))

    assert "a_three_js" not in text
    assert "subgraph" not in text
    assert "%% No dependencies found between files" in text
    assert "a_one_js -.-> a_two_js" in text


def test_synthetic_chain_is_capped_at_three_edges() -> None:
    graph = DependencyGraph(nodes=[_node(f"src/f{index}.js") for index in range(6)])

    text = generate_flowchart(graph)

    assert text.count(" -.-> ") == 3


def test_empty_graph_uses_valid_placeholder() -> None:
    text = generate_flowchart(DependencyGraph())

    assert "No files found" in text
    assert validate(text).is_valid


def test_only_external_nodes_uses_placeholder() -> None:
    text = generate_flowchart(DependencyGraph(nodes=[_node("react"), _node("axios")]))

    assert "No files found" in text
    assert validate(text).is_valid
