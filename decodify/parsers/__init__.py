"""Source parser implementations and dispatch utilities."""

from __future__ import annotations

import posixpath
from importlib import metadata
from typing import Callable, Dict, Iterable, List, Sequence, Set

from .base import ScriptSyntaxError, SourceParser, UnsupportedFileTypeError
from .composite import CompositeParser
from .markup import MarkupParser
from .script import ScriptParser
from .stylesheet import StylesheetParser
from ..logging import get_logger
from ..models import FileRecord

_ENTRY_POINT_GROUP = "decodify.parsers"

_BUILTIN_FACTORIES: Dict[str, Callable[[], SourceParser]] = {
    "script": ScriptParser,
    "markup": MarkupParser,
    "stylesheet": StylesheetParser,
    "composite": CompositeParser,
}

logger = get_logger("parsers")


def discover_parsers(enabled: Sequence[str] | None = None) -> List[SourceParser]:
    """Return instantiated parsers, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    parsers: List[SourceParser] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], SourceParser]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, SourceParser):
            raise TypeError(f"Parser factory for '{name}' did not return a SourceParser instance")
        parsers.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - unexpected failure
            raise RuntimeError(f"Failed to load parser entry point '{entry.name}': {exc}") from exc

        def _factory(obj: object = loaded) -> SourceParser:
            return _coerce_parser(obj)

        _add(entry.name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown parsers requested: {missing}")

    return parsers


def _coerce_parser(obj: object) -> SourceParser:
    if isinstance(obj, SourceParser):
        return obj
    if isinstance(obj, type) and issubclass(obj, SourceParser):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, SourceParser):
            return instance
    raise TypeError("Parser entry point must be a SourceParser subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


def file_extension(path: str) -> str:
    return posixpath.splitext(path.replace("\\", "/"))[1].lower()


class SourceFileParser:
    """Turns one file's raw text into a FileRecord, dispatching by extension."""

    def __init__(self, parsers: Iterable[SourceParser] | None = None) -> None:
        self._parsers = list(parsers) if parsers is not None else discover_parsers()

    @property
    def supported_extensions(self) -> Set[str]:
        extensions: Set[str] = set()
        for parser in self._parsers:
            extensions.update(parser.extensions)
        return extensions

    def parser_for(self, extension: str) -> SourceParser:
        for parser in self._parsers:
            if parser.supports(extension):
                return parser
        raise UnsupportedFileTypeError(extension)

    def parse(self, path: str, content: str) -> FileRecord:
        """Return the structural record for ``content``; never raises."""
        extension = file_extension(path)
        try:
            parser = self.parser_for(extension)
            record = FileRecord(
                path=path,
                extension=extension,
                size=len(content),
                line_count=len(content.split("\n")),
            )
            return parser.parse(content, record)
        except UnsupportedFileTypeError as exc:
            return FileRecord.failed(path, extension, str(exc))
        except Exception as exc:
            logger.warning("Failed to parse %s: %s", path, exc)
            return FileRecord.failed(path, extension, str(exc) or exc.__class__.__name__)


__all__ = [
    "CompositeParser",
    "MarkupParser",
    "ScriptParser",
    "ScriptSyntaxError",
    "SourceFileParser",
    "SourceParser",
    "StylesheetParser",
    "UnsupportedFileTypeError",
    "discover_parsers",
    "file_extension",
]
