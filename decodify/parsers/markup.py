"""Markup parser built on a BeautifulSoup DOM."""

from __future__ import annotations

from typing import Dict, List

from bs4 import BeautifulSoup

from .base import SourceParser
from ..models import SCRIPT, STYLESHEET, DependencyRef, FileRecord, is_external_target


def extract_markup(content: str) -> Dict[str, List[Dict[str, object]]]:
    """Return script, stylesheet link and inline style blocks of an HTML document."""
    soup = BeautifulSoup(content, "html.parser")
    outline: Dict[str, List[Dict[str, object]]] = {"scripts": [], "links": [], "styles": []}

    for element in soup.find_all("script"):
        outline["scripts"].append(
            {
                "src": element.get("src"),
                "type": element.get("type") or "text/javascript",
                "inline": not element.get("src"),
                "length": len(element.string or ""),
            }
        )

    for element in soup.find_all("link", rel="stylesheet"):
        outline["links"].append({"href": element.get("href")})

    for element in soup.find_all("style"):
        outline["styles"].append({"length": len(element.string or "")})

    return outline


def markup_dependencies(outline: Dict[str, List[Dict[str, object]]]) -> List[DependencyRef]:
    dependencies: List[DependencyRef] = []
    for script in outline.get("scripts", []):
        src = script.get("src")
        if isinstance(src, str) and src:
            dependencies.append(DependencyRef(kind=SCRIPT, target=src, is_external=is_external_target(src)))
    for link in outline.get("links", []):
        href = link.get("href")
        if isinstance(href, str) and href:
            dependencies.append(
                DependencyRef(kind=STYLESHEET, target=href, is_external=is_external_target(href))
            )
    return dependencies


class MarkupParser(SourceParser):
    """Extracts script and stylesheet references from HTML documents."""

    extensions = frozenset({".html", ".htm"})

    def parse(self, content: str, record: FileRecord) -> FileRecord:
        outline = extract_markup(content)
        record.dependencies.extend(markup_dependencies(outline))
        record.structure.update(outline)
        return record


__all__ = ["MarkupParser", "extract_markup", "markup_dependencies"]
