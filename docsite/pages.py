"""Template rendering and page emission."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from .links import LinkRegistry, htmlsafe
from .logging import get_logger
from .models import SourceFile, SourceListing, Tutorial

DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")
DEFAULT_LAYOUT = "layout.html"


class DuplicatePageError(RuntimeError):
    """Raised when two pages of one run would be written to the same file."""


class TemplateView:
    """Jinja environment plus the shared layout every page is wrapped in."""

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        layout_file: Path | None = None,
    ) -> None:
        directories: List[str] = []
        self.layout = DEFAULT_LAYOUT
        if layout_file is not None:
            directories.append(str(layout_file.parent))
            self.layout = layout_file.name
        if templates_dir is not None:
            directories.append(str(templates_dir))
        directories.append(str(DEFAULT_TEMPLATES_DIR))
        seen: set[str] = set()
        ordered: List[str] = []
        for directory in directories:
            if directory not in seen:
                ordered.append(directory)
                seen.add(directory)
        self.env = Environment(
            loader=FileSystemLoader(ordered),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["htmlsafe"] = htmlsafe

    @property
    def globals(self) -> Dict[str, Any]:
        return self.env.globals

    def render(self, template_name: str, data: Mapping[str, Any]) -> str:
        content = self.env.get_template(template_name).render(**data)
        if not self.layout:
            return content
        return self.env.get_template(self.layout).render({**data, "content": content})


class PageGenerator:
    """Writes rendered pages into the output directory, one file per call."""

    def __init__(self, view: TemplateView, links: LinkRegistry, outdir: Path) -> None:
        self.view = view
        self.links = links
        self.outdir = outdir
        self.written: List[Path] = []
        self._claimed: set[str] = set()
        self.logger = get_logger("pages")

    def generate(
        self,
        title: str,
        kind: str,
        docs: Sequence[Any],
        filename: str,
        *,
        resolve_links: bool = True,
    ) -> Path:
        html = self.view.render("container.html", {"title": title, "kind": kind, "docs": list(docs)})
        if resolve_links:
            html = self.links.resolve_links(html)
        return self._write(filename, html)

    def generate_tutorial(self, title: str, tutorial: Tutorial, filename: str) -> Path:
        data = {
            "title": title,
            "header": tutorial.title,
            "content": tutorial.parse(),
            "children": tutorial.children,
        }
        html = self.view.render("tutorial.html", data)
        # {@link} markers are allowed in tutorials as well
        return self._write(filename, self.links.resolve_links(html))

    def generate_source_files(
        self, source_files: Mapping[str, SourceFile], encoding: Optional[str] = None
    ) -> List[Path]:
        """Emit one pretty-printed listing per source file; unreadable files are skipped."""
        encoding = encoding or "utf-8"
        written: List[Path] = []
        for key, source in source_files.items():
            shortened = source.shortened or source.resolved
            outfile = self.links.get_unique_filename(shortened)
            try:
                code = htmlsafe(Path(source.resolved).read_text(encoding=encoding))
            except (OSError, UnicodeDecodeError) as exc:
                self.logger.error("Error while generating source file %s: %s", key, exc)
                continue
            # doclets reference listings through meta.shortpath
            self.links.register_link(shortened, outfile)
            written.append(
                self.generate(shortened, "source", [SourceListing(code=code)], outfile, resolve_links=False)
            )
        return written

    def _write(self, filename: str, html: str) -> Path:
        if filename in self._claimed:
            raise DuplicatePageError(f"Page {filename} would be written twice in one run")
        self._claimed.add(filename)
        outpath = self.outdir / filename
        outpath.parent.mkdir(parents=True, exist_ok=True)
        outpath.write_text(html, encoding="utf-8")
        self.written.append(outpath)
        self.logger.debug("Wrote %s", outpath)
        return outpath


__all__ = ["DEFAULT_TEMPLATES_DIR", "DuplicatePageError", "PageGenerator", "TemplateView"]
