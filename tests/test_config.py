"""Tests for decodify.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from decodify.config import CacheConfig, ConfigError, DecodifyConfig, DiagramConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, DecodifyConfig)
    assert config.root == tmp_path.resolve()
    assert config.walker.exclude_paths == []
    assert config.walker.concurrency == 8
    assert config.diagrams == DiagramConfig()
    assert config.cache == CacheConfig()
    assert config.store.directory is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".decodify.yml"
    config_file.write_text(
        """
walker:
  exclude_paths:
    - "legacy/"
    - "fixtures/"
  concurrency: 4
exclude_paths:
  - "sandbox/"
diagrams:
  direction: td
  include_external: "yes"
  max_nodes: 25
  group_by_directory: false
cache:
  max_projects: 3
  ttl_seconds: 90
store:
  directory: ".decodify/projects"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.walker.exclude_paths == ["legacy/", "fixtures/", "sandbox/"]
    assert config.walker.concurrency == 4
    assert config.diagrams.direction == "TD"
    assert config.diagrams.include_external is True
    assert config.diagrams.max_nodes == 25
    assert config.diagrams.group_by_directory is False
    assert config.cache.max_projects == 3
    assert config.cache.ttl_seconds == pytest.approx(90.0)
    assert config.store.directory == tmp_path.resolve() / ".decodify" / "projects"


def test_load_config_ignores_invalid_values(tmp_path: Path) -> None:
    (tmp_path / ".decodify.yml").write_text(
        """
walker:
  concurrency: -2
diagrams:
  max_nodes: lots
  include_external: maybe
cache: [1, 2]
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.walker.concurrency == 8
    assert config.diagrams.max_nodes == 50
    assert config.diagrams.include_external is False
    assert config.cache == CacheConfig()


def test_load_config_rejects_malformed_yaml(tmp_path: Path) -> None:
    (tmp_path / ".decodify.yml").write_text("walker: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_requires_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".decodify.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)
