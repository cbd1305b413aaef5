"""Tests for docsite.loader."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from docsite.loader import DocletLoadError, load_doclets, load_tutorials, render_readme


def test_load_doclets_reads_array_and_wrapped_forms(tmp_path: Path) -> None:
    records = [
        {"kind": "class", "name": "Foo", "longname": "Foo", "async": True, "customTag": 1},
        {"kind": "function", "name": "bar", "longname": "Foo#bar", "memberof": "Foo", "see": "Baz"},
        "not a doclet",
    ]
    plain = tmp_path / "plain.json"
    plain.write_text(json.dumps(records), encoding="utf-8")
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps({"doclets": records}), encoding="utf-8")

    doclets = load_doclets(plain)

    assert [doclet.longname for doclet in doclets] == ["Foo", "Foo#bar"]
    assert doclets[0].async_ is True
    assert doclets[0].extra == {"customTag": 1}
    assert doclets[1].see == ["Baz"]
    assert len(load_doclets(wrapped)) == 2


def test_load_doclets_rejects_invalid_input(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("[{", encoding="utf-8")
    scalar = tmp_path / "scalar.json"
    scalar.write_text("42", encoding="utf-8")

    with pytest.raises(DocletLoadError):
        load_doclets(broken)
    with pytest.raises(DocletLoadError):
        load_doclets(scalar)


def test_load_tutorials_builds_hierarchy_from_json(tmp_path: Path) -> None:
    (tmp_path / "intro.md").write_text("# Hello", encoding="utf-8")
    (tmp_path / "advanced.html").write_text("<p>Deep</p>", encoding="utf-8")
    (tmp_path / "standalone.htm").write_text("<p>Alone</p>", encoding="utf-8")
    (tmp_path / "tutorials.json").write_text(
        json.dumps({"intro": {"title": "Introduction", "children": ["advanced"]}}),
        encoding="utf-8",
    )

    root = load_tutorials(tmp_path)

    assert [child.name for child in root.children] == ["intro", "standalone"]
    intro = root.children[0]
    assert intro.title == "Introduction"
    assert [child.name for child in intro.children] == ["advanced"]
    assert intro.children[0].parent is intro
    assert intro.parse() == "<h1>Hello</h1>"
    assert intro.children[0].parse() == "<p>Deep</p>"


def test_load_tutorials_reads_per_tutorial_config_and_nested_children(tmp_path: Path) -> None:
    for name in ("guide", "setup", "usage"):
        (tmp_path / f"{name}.md").write_text(name, encoding="utf-8")
    (tmp_path / "guide.json").write_text(
        json.dumps({"title": "Guide", "children": {"setup": {"title": "Setup", "children": ["usage"]}}}),
        encoding="utf-8",
    )

    root = load_tutorials(tmp_path)

    guide = root.children[0]
    assert [child.name for child in root.children] == ["guide"]
    assert guide.title == "Guide"
    setup = guide.children[0]
    assert setup.title == "Setup"
    assert [child.name for child in setup.children] == ["usage"]


def test_load_tutorials_ignores_cycles(tmp_path: Path) -> None:
    (tmp_path / "a.html").write_text("a", encoding="utf-8")
    (tmp_path / "b.html").write_text("b", encoding="utf-8")
    (tmp_path / "a.json").write_text(json.dumps({"children": ["b"]}), encoding="utf-8")
    (tmp_path / "b.json").write_text(json.dumps({"children": ["a"]}), encoding="utf-8")

    root = load_tutorials(tmp_path)

    assert [child.name for child in root.children] == ["a"]
    assert [child.name for child in root.children[0].children] == ["b"]
    assert root.children[0].children[0].children == []


def test_load_tutorials_without_directory(tmp_path: Path) -> None:
    assert load_tutorials(None).children == []
    assert load_tutorials(tmp_path / "missing").children == []


def test_render_readme(tmp_path: Path) -> None:
    markdown_readme = tmp_path / "README.md"
    markdown_readme.write_text("# Project\n\nSome `code`.", encoding="utf-8")
    html_readme = tmp_path / "README.html"
    html_readme.write_text("<h1>Raw</h1>", encoding="utf-8")

    assert render_readme(markdown_readme) == "<h1>Project</h1>\n<p>Some <code>code</code>.</p>"
    assert render_readme(html_readme) == "<h1>Raw</h1>"
