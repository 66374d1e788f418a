"""Directory walking and batch parsing of frontend source trees."""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .config import CONFIG_FILENAME, ConfigError, load_config
from .logging import get_logger
from .models import FileRecord
from .parsers import SourceFileParser, file_extension

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "bower_components",
    "dist",
    "build",
    "coverage",
    ".next",
    ".nuxt",
    ".cache",
    ".idea",
    ".vscode",
    ".decodify",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

logger = get_logger("walker")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .decodify.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            if self.directory_only and rel_path.startswith(f"{self.pattern}/"):
                return True
            return False

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8", errors="ignore").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _parse_config_excludes(path: Path) -> List[IgnoreRule]:
    try:
        config = load_config(path)
    except ConfigError as exc:
        logger.warning("Ignoring exclusions from %s: %s", path.name, exc)
        return []

    rules: List[IgnoreRule] = []
    for pattern in config.walker.exclude_paths:
        rule = build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def load_ignore_rules(root: Path) -> List[IgnoreRule]:
    rules = _parse_gitignore(root / ".gitignore")
    rules.extend(_parse_config_excludes(root / CONFIG_FILENAME))
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _resolve_root(root: str | Path) -> Path:
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise FileNotFoundError(f"Project path not found: {root}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Project path is not a directory: {root}")
    return root_path


class DirectoryWalker:
    """Enumerates supported files under a root and parses each one in isolation."""

    def __init__(
        self,
        parser: SourceFileParser | None = None,
        *,
        extra_rules: Sequence[IgnoreRule] | None = None,
        concurrency: int = 8,
    ) -> None:
        self._parser = parser or SourceFileParser()
        self._extra_rules = list(extra_rules or [])
        self._concurrency = max(1, concurrency)

    def iter_files(self, root: str | Path) -> Iterator[Path]:
        """Yield eligible files in deterministic (sorted) directory order."""
        root_path = _resolve_root(root)
        rules = load_ignore_rules(root_path) + self._extra_rules
        supported = self._parser.supported_extensions

        for dirpath, dirnames, filenames in os.walk(root_path):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root_path).as_posix() if current_dir != root_path else ""

            kept_dirs = []
            for name in sorted(dirnames):
                if name in _EXCLUDED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if _should_ignore(rel_path, True, rules):
                    continue
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                if filename in _EXCLUDED_FILES:
                    continue
                if file_extension(filename) not in supported:
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _should_ignore(rel_path, False, rules):
                    continue
                yield current_dir / filename

    def parse_file(self, root: Path, path: Path) -> FileRecord:
        """Parse one file; I/O and decoding failures become a fatal record."""
        rel_path = path.relative_to(root).as_posix()
        try:
            content = path.read_text(encoding="utf-8")
            return self._parser.parse(rel_path, content)
        except Exception as exc:
            logger.warning("Could not process %s: %s", rel_path, exc)
            return FileRecord.failed(rel_path, file_extension(rel_path), str(exc) or exc.__class__.__name__)

    def parse_directory(self, root: str | Path) -> List[FileRecord]:
        """Return one record per eligible file, sorted by project-relative path."""
        root_path = _resolve_root(root)
        records = [self.parse_file(root_path, path) for path in self.iter_files(root_path)]
        records.sort(key=lambda record: record.path)
        self._log_summary(root_path, records)
        return records

    async def parse_directory_async(self, root: str | Path) -> List[FileRecord]:
        """Parse every file as its own task and aggregate once all have finished."""
        root_path = _resolve_root(root)
        paths = list(self.iter_files(root_path))
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _parse(path: Path) -> FileRecord:
            async with semaphore:
                return await asyncio.to_thread(self.parse_file, root_path, path)

        records = list(await asyncio.gather(*(_parse(path) for path in paths)))
        records.sort(key=lambda record: record.path)
        self._log_summary(root_path, records)
        return records

    @staticmethod
    def _log_summary(root: Path, records: Sequence[FileRecord]) -> None:
        failed = sum(1 for record in records if record.fatal_error)
        with_issues = sum(1 for record in records if record.parse_errors)
        logger.info(
            "Parsed %d files under %s (%d failed, %d with parse errors)",
            len(records),
            root,
            failed,
            with_issues,
        )


__all__ = ["DirectoryWalker", "IgnoreRule", "build_ignore_rule", "load_ignore_rules"]
