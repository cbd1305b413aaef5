"""Copying template and user-specified static files into the output tree."""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Pattern

from .config import StaticFilesConfig
from .logging import get_logger

DEFAULT_STATIC_DIR = Path(__file__).with_name("static")
TEMPLATE_STATIC_DEPTH = 3
USER_STATIC_DEPTH = 10


@dataclass
class FileFilter:
    """Include/exclude rules applied to user static files (absolute paths)."""

    include_pattern: Optional[Pattern[str]] = None
    exclude_pattern: Optional[Pattern[str]] = None
    exclude: List[Path] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: StaticFilesConfig, base_dir: Path) -> "FileFilter":
        return cls(
            include_pattern=re.compile(config.include_pattern) if config.include_pattern else None,
            exclude_pattern=re.compile(config.exclude_pattern) if config.exclude_pattern else None,
            exclude=[(base_dir / item).resolve() for item in config.exclude],
        )

    def is_included(self, path: Path) -> bool:
        text = path.as_posix()
        if self.include_pattern is not None and not self.include_pattern.search(text):
            return False
        if self.exclude_pattern is not None and self.exclude_pattern.search(text):
            return False
        return not any(path == excluded or excluded in path.parents for excluded in self.exclude)


def walk_files(root: Path, depth: int) -> Iterator[Path]:
    """Yield files below ``root``, descending at most ``depth`` directory levels."""
    if root.is_file():
        yield root
        return
    if not root.is_dir():
        return
    for entry in sorted(root.iterdir()):
        if entry.is_dir():
            if depth > 0:
                yield from walk_files(entry, depth - 1)
        elif entry.is_file():
            yield entry


class StaticAssetCopier:
    """Copies static assets, keeping their layout relative to the source directory."""

    def __init__(self, outdir: Path) -> None:
        self.outdir = outdir
        self.copied: List[Path] = []
        self.logger = get_logger("assets")

    def copy_tree(self, source_dir: Path, *, depth: int, file_filter: FileFilter | None = None) -> List[Path]:
        if source_dir.is_file():
            base = source_dir.parent
        else:
            base = source_dir
        copied: List[Path] = []
        for path in walk_files(source_dir, depth):
            if file_filter is not None and not file_filter.is_included(path.resolve()):
                continue
            target = self.outdir / path.relative_to(base)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(path, target)
            copied.append(target)
        self.copied.extend(copied)
        return copied

    def copy_template_static(self, static_dir: Path | None = None) -> List[Path]:
        source = static_dir or DEFAULT_STATIC_DIR
        copied = self.copy_tree(source, depth=TEMPLATE_STATIC_DEPTH)
        self.logger.debug("Copied %d template static files from %s", len(copied), source)
        return copied

    def copy_user_static(self, config: StaticFilesConfig | None, base_dir: Path) -> List[Path]:
        if config is None:
            return []
        file_filter = FileFilter.from_config(config, base_dir)
        copied: List[Path] = []
        for entry in config.include:
            source = (base_dir / entry).resolve()
            if not source.exists():
                self.logger.warning("Static file path %s does not exist", source)
                continue
            copied.extend(self.copy_tree(source, depth=USER_STATIC_DEPTH, file_filter=file_filter))
        self.logger.debug("Copied %d user static files", len(copied))
        return copied


__all__ = ["DEFAULT_STATIC_DIR", "FileFilter", "StaticAssetCopier", "walk_files"]
