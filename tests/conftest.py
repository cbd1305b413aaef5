from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Callable

import pytest

from docsite.config import SiteConfig
from docsite.models import Doclet, DocletParam, TypeSpec

DocletFactory = Callable[..., Doclet]


def _default_name(longname: str) -> str:
    name = re.split(r"[.#~]", longname)[-1]
    return re.sub(r"^(module|external|event):", "", name)


@pytest.fixture
def make_doclet() -> DocletFactory:
    """Build doclets with a name derived from the longname unless given."""

    def _make(kind: str, longname: str, **fields: Any) -> Doclet:
        fields.setdefault("name", _default_name(longname))
        return Doclet(kind=kind, longname=longname, **fields)

    return _make


@pytest.fixture
def make_param() -> Callable[..., DocletParam]:
    def _make(name: str | None = None, *types: str, **fields: Any) -> DocletParam:
        type_spec = TypeSpec(names=list(types)) if types else None
        return DocletParam(name=name, type=type_spec, **fields)

    return _make


@pytest.fixture
def site_config(tmp_path: Path) -> SiteConfig:
    return SiteConfig(root=tmp_path, destination=tmp_path / "out")
