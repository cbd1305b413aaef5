"""Markdown conversion for readme files and tutorials."""

from __future__ import annotations

import markdown

MARKDOWN_EXTENSIONS: tuple[str, ...] = ("tables", "fenced_code", "attr_list")


def render_markdown(text: str) -> str:
    """Convert Markdown source to an HTML fragment."""
    return markdown.markdown(text, extensions=list(MARKDOWN_EXTENSIONS))


__all__ = ["MARKDOWN_EXTENSIONS", "render_markdown"]
