"""Tests for decodify.graph."""

from __future__ import annotations

from decodify.graph import build_graph, filter_graph
from decodify.models import IMPORT, REQUIRE, DependencyRef, FileRecord


def _record(path: str, *targets: str, kind: str = IMPORT) -> FileRecord:
    extension = "." + path.rsplit(".", 1)[-1]
    return FileRecord(
        path=path,
        extension=extension,
        dependencies=[
            DependencyRef(kind=kind, target=target, is_external=not target.startswith("."))
            for target in targets
        ],
    )


def test_extension_probe_resolves_to_existing_file() -> None:
    graph = build_graph([_record("src/a.js", "./b"), _record("src/b.jsx")])

    assert [(edge.from_path, edge.to_path, edge.kind, edge.label) for edge in graph.edges] == [
        ("src/a.js", "src/b.jsx", IMPORT, "./b")
    ]


def test_literal_candidate_wins_over_probes() -> None:
    records = [
        _record("src/a.js", "./b.js"),
        _record("src/b.js"),
        _record("src/b.js.ts"),
    ]

    graph = build_graph(records)

    assert [edge.to_path for edge in graph.edges] == ["src/b.js"]


def test_index_files_and_parent_directories_resolve() -> None:
    records = [
        _record("src/pages/home.js", "../components", "../utils/format"),
        _record("src/components/index.tsx"),
        _record("src/utils/format.ts"),
    ]

    graph = build_graph(records)

    assert {edge.to_path for edge in graph.edges} == {"src/components/index.tsx", "src/utils/format.ts"}


def test_every_record_becomes_a_node_and_edges_are_sound() -> None:
    failed = FileRecord.failed("src/broken.js", ".js", "boom")
    records = [
        _record("src/a.js", "./missing", "react", "./b"),
        _record("src/b.js", "./a", kind=REQUIRE),
        failed,
    ]

    graph = build_graph(records)

    assert len(graph.nodes) == len(records)
    node_ids = {node.id for node in graph.nodes}
    assert all(edge.from_path in node_ids and edge.to_path in node_ids for edge in graph.edges)
    assert len(graph.edges) == 2
    node = next(node for node in graph.nodes if node.id == "src/a.js")
    assert (node.label, node.type) == ("a.js", ".js")


def test_duplicate_references_keep_independent_edges() -> None:
    graph = build_graph([_record("a.js", "./b", "./b.js"), _record("b.js")])

    assert len(graph.edges) == 2


def test_filter_graph_drops_dangling_edges() -> None:
    graph = build_graph([_record("a.js", "./style.css"), _record("style.css")])

    filtered = filter_graph(graph, [".js"])

    assert [node.id for node in filtered.nodes] == ["a.js"]
    assert filtered.edges == []
    assert len(graph.edges) == 1
