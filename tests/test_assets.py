"""Tests for docsite.assets."""

from __future__ import annotations

from pathlib import Path

from docsite.assets import DEFAULT_STATIC_DIR, FileFilter, StaticAssetCopier, walk_files
from docsite.config import StaticFilesConfig


def _touch(path: Path, text: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_walk_files_respects_depth(tmp_path: Path) -> None:
    root = tmp_path / "static"
    _touch(root / "top.css")
    _touch(root / "a" / "b" / "c" / "deep.css")
    _touch(root / "a" / "b" / "c" / "d" / "too-deep.css")

    found = {path.relative_to(root).as_posix() for path in walk_files(root, 3)}

    assert found == {"top.css", "a/b/c/deep.css"}


def test_copy_template_static_preserves_layout(tmp_path: Path) -> None:
    static = tmp_path / "static"
    _touch(static / "styles" / "site.css", "body {}")
    _touch(static / "scripts" / "site.js")
    copier = StaticAssetCopier(tmp_path / "out")

    copied = copier.copy_template_static(static)

    assert sorted(path.relative_to(tmp_path / "out").as_posix() for path in copied) == [
        "scripts/site.js",
        "styles/site.css",
    ]
    assert (tmp_path / "out" / "styles" / "site.css").read_text(encoding="utf-8") == "body {}"


def test_default_template_static_ships_stylesheet_and_script(tmp_path: Path) -> None:
    copier = StaticAssetCopier(tmp_path / "out")

    copier.copy_template_static()

    assert (DEFAULT_STATIC_DIR / "styles" / "docsite.css").is_file()
    assert (tmp_path / "out" / "styles" / "docsite.css").is_file()
    assert (tmp_path / "out" / "scripts" / "docsite.js").is_file()


def test_copy_user_static_applies_filters(tmp_path: Path) -> None:
    project = tmp_path / "project"
    _touch(project / "assets" / "logo.png")
    _touch(project / "assets" / "draft.tmp")
    _touch(project / "assets" / "img" / "icon.png")
    _touch(project / "assets" / "private" / "secret.png")
    config = StaticFilesConfig(
        include=["assets"],
        exclude=["assets/private"],
        exclude_pattern=r"\.tmp$",
    )
    copier = StaticAssetCopier(tmp_path / "out")

    copied = copier.copy_user_static(config, project)

    assert sorted(path.relative_to(tmp_path / "out").as_posix() for path in copied) == [
        "img/icon.png",
        "logo.png",
    ]


def test_copy_user_static_include_pattern_and_single_file(tmp_path: Path) -> None:
    project = tmp_path / "project"
    _touch(project / "favicon.ico")
    _touch(project / "docs" / "guide.pdf")
    _touch(project / "docs" / "notes.txt")
    config = StaticFilesConfig(include=["favicon.ico", "docs"], include_pattern=r"\.(ico|pdf)$")
    copier = StaticAssetCopier(tmp_path / "out")

    copier.copy_user_static(config, project)

    assert (tmp_path / "out" / "favicon.ico").is_file()
    assert (tmp_path / "out" / "guide.pdf").is_file()
    assert not (tmp_path / "out" / "notes.txt").exists()


def test_copy_user_static_skips_missing_paths(tmp_path: Path) -> None:
    copier = StaticAssetCopier(tmp_path / "out")

    assert copier.copy_user_static(StaticFilesConfig(include=["nope"]), tmp_path) == []
    assert copier.copy_user_static(None, tmp_path) == []


def test_file_filter_excludes_nested_paths(tmp_path: Path) -> None:
    file_filter = FileFilter.from_config(StaticFilesConfig(exclude=["vendor"]), tmp_path)

    assert file_filter.is_included((tmp_path / "app.js").resolve())
    assert not file_filter.is_included((tmp_path / "vendor" / "lib" / "x.js").resolve())
