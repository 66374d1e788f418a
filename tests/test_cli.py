"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from decodify.cli import _build_parser, main
from tests._fixtures.repo_builder import RepoBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "analyze"])
    assert args.verbose is True
    assert args.command == "analyze"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["diagram", "class", "--verbose"])
    assert args.verbose is True
    assert args.command == "diagram"
    assert args.kind == "class"


def test_cli_rejects_unknown_diagram_kind() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["diagram", "pie"])


def test_analyze_prints_json_summary(repo_builder: RepoBuilder, capsys, tmp_path: Path) -> None:
    repo_builder.write({"src/a.js": "import './b';\nfunction a(x) {}\n", "src/b.js": "export const b = 1;\n"})
    store = tmp_path / "store"

    main(["analyze", str(repo_builder.path()), "--json", "--project-id", "demo", "--store", str(store)])

    payload = json.loads(capsys.readouterr().out)
    assert payload["project_id"] == "demo"
    assert payload["metrics"]["total_files"] == 2
    assert (store / "demo.json").exists()


def test_diagram_prints_mermaid_text(repo_builder: RepoBuilder, capsys) -> None:
    repo_builder.write({"src/a.js": "import './b';\n", "src/b.js": "export const b = 1;\n"})

    main(["diagram", "dependency-flow", str(repo_builder.path()), "--direction", "TB"])

    out = capsys.readouterr().out
    assert out.startswith("graph TB")
    assert "src_a_js -->|./b| src_b_js" in out


def test_validate_reports_valid_and_invalid_files(tmp_path: Path, capsys) -> None:
    good = tmp_path / "good.mmd"
    good.write_text('graph TD\n  A["x"] --> B["y"]\n', encoding="utf-8")
    bad = tmp_path / "bad.mmd"
    bad.write_text("graph TD\n  A[\n", encoding="utf-8")

    main(["validate", str(good)])
    assert "Diagram is valid" in capsys.readouterr().out

    with pytest.raises(SystemExit) as excinfo:
        main(["validate", str(bad)])
    assert excinfo.value.code == 1
    assert "Unclosed brackets detected" in capsys.readouterr().out


def test_analyze_missing_directory_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(tmp_path / "nope")])
    assert excinfo.value.code == 1
