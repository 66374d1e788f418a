"""Configuration loading for decodify (.decodify.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".decodify.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class WalkerConfig:
    """Directory walker exclusions and parallelism."""

    exclude_paths: List[str] = field(default_factory=list)
    concurrency: int = 8


@dataclass
class DiagramConfig:
    """Defaults applied to dependency-flow projections."""

    direction: str = "LR"
    include_external: bool = False
    max_nodes: int = 50
    group_by_directory: bool = True


@dataclass
class CacheConfig:
    """Derived-context cache sizing."""

    max_projects: int = 32
    ttl_seconds: float = 3600.0


@dataclass
class StoreConfig:
    directory: Optional[Path] = None


@dataclass
class DecodifyConfig:
    """Represents the high-level settings defined in .decodify.yml."""

    root: Path
    walker: WalkerConfig = field(default_factory=WalkerConfig)
    diagrams: DiagramConfig = field(default_factory=DiagramConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    store: StoreConfig = field(default_factory=StoreConfig)


def load_config(config_path: Path) -> DecodifyConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DecodifyConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    walker = WalkerConfig()
    walker_data = _as_dict(data.get("walker"))
    if walker_data:
        walker.exclude_paths = _as_str_list(walker_data.get("exclude_paths"))
        concurrency = _as_int(walker_data.get("concurrency"))
        if concurrency is not None and concurrency > 0:
            walker.concurrency = concurrency
    walker.exclude_paths.extend(_as_str_list(data.get("exclude_paths")))

    diagrams = DiagramConfig()
    diagram_data = _as_dict(data.get("diagrams"))
    if diagram_data:
        direction = _as_str(diagram_data.get("direction"))
        if direction:
            diagrams.direction = direction.upper()
        include_external = _as_bool(diagram_data.get("include_external"))
        if include_external is not None:
            diagrams.include_external = include_external
        max_nodes = _as_int(diagram_data.get("max_nodes"))
        if max_nodes is not None and max_nodes > 0:
            diagrams.max_nodes = max_nodes
        group = _as_bool(diagram_data.get("group_by_directory"))
        if group is not None:
            diagrams.group_by_directory = group

    cache = CacheConfig()
    cache_data = _as_dict(data.get("cache"))
    if cache_data:
        max_projects = _as_int(cache_data.get("max_projects"))
        if max_projects is not None and max_projects > 0:
            cache.max_projects = max_projects
        ttl = _as_float(cache_data.get("ttl_seconds"))
        if ttl is not None and ttl > 0:
            cache.ttl_seconds = ttl

    store = StoreConfig()
    store_data = _as_dict(data.get("store"))
    directory = _as_str(store_data.get("directory")) if store_data else None
    if directory:
        store.directory = root / directory

    return DecodifyConfig(
        root=root,
        walker=walker,
        diagrams=diagrams,
        cache=cache,
        store=store,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "CacheConfig",
    "ConfigError",
    "DecodifyConfig",
    "DiagramConfig",
    "StoreConfig",
    "WalkerConfig",
    "load_config",
]
