"""Core data models shared across docsite components."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from .markup import render_markdown

CONTAINER_KINDS: tuple[str, ...] = (
    "class",
    "module",
    "external",
    "namespace",
    "mixin",
    "interface",
)


@dataclass
class TypeSpec:
    """Type expression names attached to a doclet, param or return value."""

    names: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["TypeSpec"]:
        if not isinstance(payload, dict):
            return None
        names = payload.get("names") or []
        return cls(names=[str(name) for name in names])


@dataclass
class DocletParam:
    """A parameter, property, exception or return value description."""

    name: Optional[str] = None
    type: Optional[TypeSpec] = None
    description: Optional[str] = None
    optional: Optional[bool] = None
    nullable: Optional[bool] = None
    variable: Optional[bool] = None
    defaultvalue: Any = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "DocletParam":
        return cls(
            name=payload.get("name"),
            type=TypeSpec.from_dict(payload.get("type")),
            description=payload.get("description"),
            optional=payload.get("optional"),
            nullable=payload.get("nullable"),
            variable=payload.get("variable"),
            defaultvalue=payload.get("defaultvalue"),
        )


@dataclass
class DocletMeta:
    """Source location of a doclet."""

    filename: Optional[str] = None
    path: Optional[str] = None
    lineno: Optional[int] = None
    shortpath: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["DocletMeta"]:
        if not isinstance(payload, dict):
            return None
        return cls(
            filename=payload.get("filename"),
            path=payload.get("path"),
            lineno=payload.get("lineno"),
            shortpath=payload.get("shortpath"),
        )


@dataclass
class Example:
    """An example block with its optional caption split out."""

    code: str
    caption: str = ""


@dataclass
class Doclet:
    """One documented symbol as handed over by the documentation host."""

    kind: str
    name: Optional[str] = None
    longname: Optional[str] = None
    memberof: Optional[str] = None
    scope: Optional[str] = None
    access: Optional[str] = None
    description: Optional[str] = None
    summary: Optional[str] = None
    classdesc: Optional[str] = None
    params: List[DocletParam] = field(default_factory=list)
    returns: List[DocletParam] = field(default_factory=list)
    properties: List[DocletParam] = field(default_factory=list)
    exceptions: List[DocletParam] = field(default_factory=list)
    type: Optional[TypeSpec] = None
    meta: Optional[DocletMeta] = None
    inherited: bool = False
    inherits: Optional[str] = None
    examples: List[Any] = field(default_factory=list)
    see: List[str] = field(default_factory=list)
    augments: List[str] = field(default_factory=list)
    fires: List[str] = field(default_factory=list)
    version: Optional[str] = None
    since: Optional[str] = None
    deprecated: Any = None
    virtual: bool = False
    readonly: bool = False
    async_: bool = False
    generator: bool = False
    nullable: Optional[bool] = None
    optional: Optional[bool] = None
    variation: Optional[str] = None
    defaultvalue: Any = None
    undocumented: bool = False
    ignore: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    # populated while publishing
    signature: Optional[str] = None
    attribs: str = ""
    id: Optional[str] = None
    ancestors: List[str] = field(default_factory=list)
    modules: Optional[List["Doclet"]] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Doclet":
        """Build a doclet from a host JSON record, keeping unknown keys in ``extra``."""
        data = dict(payload)
        if "async" in data:
            data["async_"] = data.pop("async")
        known = {item.name for item in fields(cls)}
        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = dict(data.pop("extra", None) or {})
        for key, value in data.items():
            if key in known:
                kwargs[key] = value
            else:
                extra[key] = value

        for key in ("params", "returns", "properties", "exceptions"):
            items = kwargs.get(key) or []
            kwargs[key] = [DocletParam.from_dict(item) for item in items if isinstance(item, dict)]
        kwargs["type"] = TypeSpec.from_dict(kwargs.get("type"))
        kwargs["meta"] = DocletMeta.from_dict(kwargs.get("meta"))
        for key in ("examples", "see", "augments", "fires"):
            value = kwargs.get(key)
            if value is None:
                kwargs[key] = []
            elif isinstance(value, str):
                kwargs[key] = [value]
        for key in ("inherited", "virtual", "readonly", "async_", "generator", "undocumented", "ignore"):
            kwargs[key] = bool(kwargs.get(key))
        kwargs.setdefault("kind", "member")
        return cls(extra=extra, **kwargs)

    def copy(self) -> "Doclet":
        return copy.deepcopy(self)


@dataclass
class MemberGroups:
    """Doclets partitioned into the buckets used by navigation and page generation."""

    classes: List[Doclet] = field(default_factory=list)
    modules: List[Doclet] = field(default_factory=list)
    namespaces: List[Doclet] = field(default_factory=list)
    mixins: List[Doclet] = field(default_factory=list)
    interfaces: List[Doclet] = field(default_factory=list)
    externals: List[Doclet] = field(default_factory=list)
    events: List[Doclet] = field(default_factory=list)
    globals: List[Doclet] = field(default_factory=list)
    tutorials: List["Tutorial"] = field(default_factory=list)


@dataclass
class SourceFile:
    """A physical source file referenced by at least one doclet."""

    resolved: str
    shortened: Optional[str] = None


@dataclass
class MainPage:
    kind: str = field(default="mainpage", init=False)
    longname: str = "Main Page"
    readme: Optional[str] = None


@dataclass
class SourceListing:
    code: str
    kind: str = field(default="source", init=False)


@dataclass
class GlobalPage:
    kind: str = field(default="globalobj", init=False)


@dataclass
class Tutorial:
    """A node of the tutorial tree; the root has an empty name."""

    name: str = ""
    title: str = ""
    content: str = ""
    type: str = "html"
    children: List["Tutorial"] = field(default_factory=list)
    parent: Optional["Tutorial"] = field(default=None, repr=False, compare=False)

    @property
    def longname(self) -> str:
        return self.name

    def add_child(self, child: "Tutorial") -> None:
        child.parent = self
        self.children.append(child)

    def parse(self) -> str:
        """Return the tutorial body as HTML."""
        if self.type == "markdown":
            return render_markdown(self.content)
        return self.content


__all__ = [
    "CONTAINER_KINDS",
    "Doclet",
    "DocletMeta",
    "DocletParam",
    "Example",
    "GlobalPage",
    "MainPage",
    "MemberGroups",
    "SourceFile",
    "SourceListing",
    "Tutorial",
    "TypeSpec",
]
