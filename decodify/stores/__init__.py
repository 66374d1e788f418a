"""Persistence and caching helpers."""

from .context_cache import ContextCache
from .project_store import ProjectStore

__all__ = ["ContextCache", "ProjectStore"]
