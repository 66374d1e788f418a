"""Tests for decodify.pipeline."""

from __future__ import annotations

import asyncio
from pathlib import Path

import decodify.pipeline as pipeline_module
from decodify.analysis import RecordFilter
from decodify.config import load_config
from decodify.pipeline import ProjectPipeline, default_project_id
from decodify.stores import ProjectStore
from tests._fixtures.repo_builder import RepoBuilder


def _seed_sample_repo(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "index.html": """
                <html>
                  <head><link rel="stylesheet" href="./src/site.css"></head>
                  <body><script type="module" src="./src/main.js"></script></body>
                </html>
            """,
            "src/main.js": """
                import { App } from './App';
                import { format } from './utils/format';

                function main() {
                  return App(format('hi'));
                }
            """,
            "src/App.jsx": """
                import React from 'react';

                export function App(props) {
                  return <div>{props.children}</div>;
                }
            """,
            "src/utils/format.js": "export const format = (value) => value.trim();\n",
            "src/site.css": "body { margin: 0; }\n",
        }
    )


def test_analyze_builds_graph_and_persists_snapshot(repo_builder: RepoBuilder, tmp_path: Path) -> None:
    _seed_sample_repo(repo_builder)
    store = ProjectStore(tmp_path / "store")
    pipeline = ProjectPipeline(store=store)

    snapshot = pipeline.analyze(repo_builder.path(), project_id="sample")

    assert [record.path for record in snapshot.file_records] == [
        "index.html",
        "src/App.jsx",
        "src/main.js",
        "src/site.css",
        "src/utils/format.js",
    ]
    edges = {(edge.from_path, edge.to_path) for edge in snapshot.dependency_graph.edges}
    assert ("src/main.js", "src/App.jsx") in edges
    assert ("src/main.js", "src/utils/format.js") in edges
    assert ("index.html", "src/main.js") in edges
    assert snapshot.created_at.endswith("Z")
    assert pipeline.load("sample") == snapshot


def test_analyze_async_matches_sync(repo_builder: RepoBuilder) -> None:
    _seed_sample_repo(repo_builder)
    pipeline = ProjectPipeline()

    sync = pipeline.analyze(repo_builder.path(), project_id="p")
    concurrent = asyncio.run(pipeline.analyze_async(repo_builder.path(), project_id="p"))

    assert concurrent.file_records == sync.file_records
    assert concurrent.dependency_graph == sync.dependency_graph


def test_default_project_id_is_stable(tmp_path: Path) -> None:
    project = tmp_path / "My App"
    project.mkdir()

    first = default_project_id(project)

    assert first == default_project_id(project)
    assert first.startswith("My-App-")
    assert len(first.rsplit("-", 1)[1]) == 8


def test_render_dependency_flow_reports_counts(repo_builder: RepoBuilder) -> None:
    _seed_sample_repo(repo_builder)
    pipeline = ProjectPipeline()
    snapshot = pipeline.analyze(repo_builder.path())

    result = pipeline.render("dependency-flow", snapshot, {"direction": "TD"})

    assert result.text.startswith("graph TD")
    assert result.validation.is_valid
    assert result.note is None
    assert result.counts == {
        "node_count": len(snapshot.dependency_graph.nodes),
        "edge_count": len(snapshot.dependency_graph.edges),
    }


def test_render_record_kinds_report_structure_counts(repo_builder: RepoBuilder) -> None:
    _seed_sample_repo(repo_builder)
    pipeline = ProjectPipeline()
    snapshot = pipeline.analyze(repo_builder.path())

    result = pipeline.render("component", snapshot)

    assert result.validation.is_valid
    assert "App" in result.text
    assert result.counts["component_count"] == 1
    assert result.to_dict()["kind"] == "component"


def test_render_with_record_filter_restricts_graph(repo_builder: RepoBuilder) -> None:
    _seed_sample_repo(repo_builder)
    pipeline = ProjectPipeline()
    snapshot = pipeline.analyze(repo_builder.path())

    result = pipeline.render(
        "dependency-flow",
        snapshot,
        record_filter=RecordFilter(extensions=[".js", ".jsx"]),
    )

    assert result.counts == {"node_count": 3, "edge_count": 2}
    assert "index_html" not in result.text


def test_render_substitutes_fallback_for_invalid_text(repo_builder: RepoBuilder, monkeypatch) -> None:
    _seed_sample_repo(repo_builder)
    pipeline = ProjectPipeline()
    snapshot = pipeline.analyze(repo_builder.path())
    monkeypatch.setattr(pipeline_module, "project", lambda kind, source, options=None: "graph TD\n  A[")

    result = pipeline.render("class", snapshot)

    assert not result.validation.is_valid
    assert result.text.startswith("classDiagram")
    assert result.note == "Returned safe fallback due to invalid diagram text"


def test_render_uses_configured_diagram_defaults(repo_builder: RepoBuilder) -> None:
    _seed_sample_repo(repo_builder)
    repo_builder.write({".decodify.yml": "diagrams:\n  direction: bt\n"})
    pipeline = ProjectPipeline(config=load_config(repo_builder.path()))
    snapshot = pipeline.analyze(repo_builder.path())

    result = pipeline.render("dependency-flow", snapshot)

    assert result.text.startswith("graph BT")


def test_context_is_cached_per_snapshot(repo_builder: RepoBuilder) -> None:
    _seed_sample_repo(repo_builder)
    pipeline = ProjectPipeline()
    snapshot = pipeline.analyze(repo_builder.path())

    context = pipeline.context(snapshot)

    assert pipeline.context(snapshot) is context
    assert [doc.name for doc in context.documents_of("component")] == ["App"]


def test_underscore_prefixed_directory_gets_a_storable_id(tmp_path: Path) -> None:
    project = tmp_path / "_site"
    project.mkdir()
    (project / "main.js").write_text("function main() {}\n", encoding="utf-8")
    pipeline = ProjectPipeline(store=ProjectStore(tmp_path / "store"))

    snapshot = pipeline.analyze(project)

    assert snapshot.project_id.startswith("site-")
    assert pipeline.load(snapshot.project_id) == snapshot


def test_default_project_id_passes_store_validation(tmp_path: Path) -> None:
    store = ProjectStore(tmp_path / "store")

    for name in ("_app", "my..app", ".hidden", "---"):
        project_id = default_project_id(tmp_path / name)
        assert store.path_for(project_id).parent == tmp_path / "store"

    assert default_project_id(tmp_path / "my..app").startswith("my-app-")
    assert default_project_id(tmp_path / "---").startswith("project-")
