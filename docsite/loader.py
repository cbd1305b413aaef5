"""Reading host output from disk: doclet JSON, tutorial trees and readme files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .logging import get_logger
from .markup import render_markdown
from .models import Doclet, Tutorial

TUTORIAL_TYPES: Dict[str, str] = {
    ".html": "html",
    ".htm": "html",
    ".xml": "html",
    ".xhtml": "html",
    ".md": "markdown",
    ".markdown": "markdown",
}

logger = get_logger("loader")


class DocletLoadError(RuntimeError):
    """Raised when a doclet dump cannot be read."""


def load_doclets(path: Path) -> List[Doclet]:
    """Read a JSON array of doclets, as written by ``jsdoc -X``."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DocletLoadError(f"Failed to parse {path.name}: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("doclets")
    if not isinstance(data, list):
        raise DocletLoadError(f"{path.name} must contain a JSON array of doclets")
    doclets = [Doclet.from_dict(item) for item in data if isinstance(item, dict)]
    logger.debug("Loaded %d doclets from %s", len(doclets), path)
    return doclets


def render_readme(path: Path, encoding: str = "utf-8") -> str:
    """Return the readme as HTML; HTML files pass through untouched."""
    text = path.read_text(encoding=encoding)
    if path.suffix.lower() in (".html", ".htm"):
        return text
    return render_markdown(text)


def load_tutorials(directory: Optional[Path], encoding: str = "utf-8") -> Tutorial:
    """Build the tutorial tree rooted at an unnamed node.

    Every supported file becomes a tutorial named after its stem. JSON files
    either configure the tutorial of the same name (``{"title", "children"}``)
    or map several tutorial names to such configurations.
    """
    root = Tutorial()
    if directory is None or not directory.is_dir():
        return root

    tutorials: Dict[str, Tutorial] = {}
    configs: Dict[str, Any] = {}
    for path in sorted(directory.rglob("*")):
        if not path.is_file():
            continue
        suffix = path.suffix.lower()
        if suffix in TUTORIAL_TYPES:
            name = path.stem
            if name in tutorials:
                logger.warning("Tutorial %s is defined more than once; keeping the first", name)
                continue
            tutorials[name] = Tutorial(
                name=name,
                title=name,
                content=path.read_text(encoding=encoding),
                type=TUTORIAL_TYPES[suffix],
            )
        elif suffix == ".json":
            try:
                configs[path.stem] = json.loads(path.read_text(encoding=encoding))
            except json.JSONDecodeError as exc:
                raise DocletLoadError(f"Failed to parse tutorial config {path.name}: {exc}") from exc

    children: Dict[str, List[str]] = {}
    parents: Dict[str, str] = {}

    def _creates_cycle(child: str, parent: str) -> bool:
        current: Optional[str] = parent
        while current is not None:
            if current == child:
                return True
            current = parents.get(current)
        return False

    def _apply(name: str, data: Any) -> None:
        node = tutorials.get(name)
        if node is None or not isinstance(data, dict):
            return
        title = data.get("title")
        if isinstance(title, str) and title:
            node.title = title
        nested = data.get("children")
        if isinstance(nested, dict):
            names = list(nested)
        elif isinstance(nested, list):
            names = [str(child) for child in nested]
        else:
            names = []
        for child in names:
            if child not in tutorials or child in parents or _creates_cycle(child, name):
                continue
            parents[child] = name
            children.setdefault(name, []).append(child)
        if isinstance(nested, dict):
            for child, child_data in nested.items():
                _apply(child, child_data)

    for name, data in configs.items():
        if name in tutorials:
            _apply(name, data)
        elif isinstance(data, dict):
            for child, child_data in data.items():
                _apply(child, child_data)

    for name, node in tutorials.items():
        if name not in parents:
            root.add_child(node)
        for child in children.get(name, []):
            node.add_child(tutorials[child])
    return root


__all__ = ["DocletLoadError", "TUTORIAL_TYPES", "load_doclets", "load_tutorials", "render_readme"]
