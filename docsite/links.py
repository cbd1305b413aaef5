"""Longname to URL registry and the HTML link helpers built on top of it."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Dict, List, Optional, Union
from urllib.parse import quote

from .logging import get_logger
from .models import CONTAINER_KINDS, Doclet, Tutorial

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .store import DocletStore

FILE_EXTENSION = ".html"
GLOBAL_NAME = "global"
SCOPE_TO_PUNC: Dict[str, str] = {"static": ".", "inner": "~", "instance": "#"}

_NAMESPACE_PREFIX = re.compile(r"^(module|external|event):")
_UNSAFE_FILENAME_CHARS = re.compile(r"[\\/?*:|'\"<>]")
_VARIATION_SUFFIX = re.compile(r"\([\s\S]*\)$")
_URL_PREFIX = re.compile(r"^(?:[a-z][a-z0-9+.-]*:)?//", re.IGNORECASE)
_TYPE_TOKEN = re.compile(r"[A-Za-z_$][\w$:~#/\-]*(?:\.[A-Za-z_$][\w$:~#/\-]*)*")
_INLINE_TAG = re.compile(
    r"(?:\[(?P<caption>[^\]]+)\])?\{@(?P<tag>linkcode|linkplain|link|tutorial)\s+(?P<body>[^}]*)\}"
)
_AUTHOR = re.compile(r"^\s?([\s\S]+)\b\s+<(\S+@\S+)>\s?$")
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"


def htmlsafe(value: object) -> str:
    """Escape ``&`` and ``<`` so identifiers can be embedded in markup."""
    text = "" if value is None else str(value)
    return text.replace("&", "&amp;").replace("<", "&lt;")


def encode_uri(url: str) -> str:
    return quote(url, safe=_URI_SAFE)


def is_module_exports(doclet: Doclet) -> bool:
    longname = doclet.longname
    return bool(
        longname
        and longname == doclet.name
        and longname.startswith("module:")
        and doclet.kind != "module"
    )


def get_attribs(item: object) -> List[str]:
    """Return the attribute tags (async, static, nullable...) shown beside a symbol."""
    attribs: List[str] = []
    if item is None:
        return attribs
    kind = getattr(item, "kind", None)
    if getattr(item, "async_", False):
        attribs.append("async")
    if getattr(item, "generator", False):
        attribs.append("generator")
    if getattr(item, "virtual", False):
        attribs.append("abstract")
    access = getattr(item, "access", None)
    if access and access != "public":
        attribs.append(access)
    scope = getattr(item, "scope", None)
    if scope and scope not in ("instance", GLOBAL_NAME):
        if kind in ("function", "member", "constant"):
            attribs.append(scope)
    if getattr(item, "readonly", False) is True and kind == "member":
        attribs.append("readonly")
    if kind == "constant":
        attribs.append("constant")
    nullable = getattr(item, "nullable", None)
    if nullable is True:
        attribs.append("nullable")
    elif nullable is False:
        attribs.append("non-null")
    return attribs


class LinkRegistry:
    """Hands out unique output filenames and tracks the URL of every longname.

    One registry is created per publish run; every page of that run links
    through it, so a longname always resolves to the same URL.
    """

    def __init__(self) -> None:
        self.longname_to_url: Dict[str, str] = {}
        self._files: Dict[str, str] = {}
        self._filenames: Dict[str, str] = {}
        self._ids: Dict[str, Dict[str, str]] = {}
        self._longname_to_id: Dict[str, str] = {}
        self._tutorials: Dict[str, Tutorial] = {}
        self._tutorial_urls: Dict[str, str] = {}
        self.logger = get_logger("links")

    # filenames -----------------------------------------------------------

    def get_unique_filename(self, value: Optional[str]) -> str:
        """Turn a longname (or path) into a filesystem-safe, unique ``.html`` name."""
        basename = _NAMESPACE_PREFIX.sub(r"\1-", value or "")
        basename = _UNSAFE_FILENAME_CHARS.sub("_", basename)
        basename = basename.replace("~", "-").replace("#", "_")
        basename = _VARIATION_SUFFIX.sub("", basename)
        basename = re.sub(r"^[.-]", "", basename)
        if not basename:
            basename = "_"
        return self._make_unique_filename(basename, value or "") + FILE_EXTENSION

    def _make_unique_filename(self, filename: str, source: str) -> str:
        if not filename or filename.startswith("_"):
            filename = f"-{filename}"
        key = filename.lower()
        while key in self._files:
            filename += "_"
            key = filename.lower()
        self._files[key] = source
        return filename

    def get_filename(self, longname: str) -> str:
        url = self.longname_to_url.get(longname)
        if url is not None:
            return url.split("#", 1)[0]
        if longname not in self._filenames:
            self._filenames[longname] = self.get_unique_filename(longname)
        return self._filenames[longname]

    def register_link(self, longname: str, url: str) -> None:
        self.longname_to_url[longname] = url

    # urls ----------------------------------------------------------------

    def create_link(self, doclet: Doclet) -> str:
        """Compute the URL at which ``doclet`` is documented."""
        longname = doclet.longname or ""
        fragment = ""
        if doclet.kind in CONTAINER_KINDS or is_module_exports(doclet):
            filename = self.get_filename(longname)
        else:
            match = re.match(r"(\S+?):", longname)
            fake_container = bool(match and match.group(1) in CONTAINER_KINDS)
            if fake_container:
                filename = self.get_filename(doclet.memberof or longname)
                needs_fragment = doclet.name != longname
            else:
                filename = self.get_filename(doclet.memberof or GLOBAL_NAME)
                needs_fragment = doclet.name != longname or doclet.scope == GLOBAL_NAME
            if needs_fragment:
                fragment = self._get_id(filename, longname, self._format_name_for_link(doclet))
        return encode_uri(filename + (f"#{fragment}" if fragment else ""))

    @staticmethod
    def _format_name_for_link(doclet: Doclet) -> str:
        namespace = f"{doclet.kind}:" if doclet.kind in ("module", "external", "event") else ""
        name = namespace + (doclet.name or "") + (doclet.variation or "")
        punc = SCOPE_TO_PUNC.get(doclet.scope or "", "")
        # "#" already introduces the fragment, "foo.html##bar" would be confusing
        if punc != "#" and not name.startswith(punc):
            name = punc + name
        return name

    def _get_id(self, filename: str, longname: str, candidate: str) -> str:
        if longname in self._longname_to_id:
            return self._longname_to_id[longname]
        if not candidate:
            return ""
        ident = re.sub(r"\s", "", candidate)
        taken = self._ids.setdefault(filename, {})
        key = ident.lower()
        while key in taken:
            ident += "_"
            key = ident.lower()
        taken[key] = ident
        self._longname_to_id[longname] = ident
        return ident

    # link rendering ------------------------------------------------------

    def linkto(
        self,
        longname: Optional[str],
        link_text: Optional[str] = None,
        css_class: Optional[str] = None,
        fragment_id: Optional[str] = None,
        *,
        monospace: bool = False,
    ) -> str:
        """Return an anchor for ``longname``, or the plain text when it is unknown."""
        stripped = re.sub(r"^<|>$", "", longname or "")
        if _URL_PREFIX.match(stripped):
            url: Optional[str] = stripped
            text = link_text or stripped
        elif longname and _is_complex_type(longname) and not re.search(r"\{@.+\}", longname):
            return self._link_type_expression(longname, css_class)
        else:
            url = self.longname_to_url.get(longname or "")
            text = link_text or (longname or "")
        if monospace:
            text = f"<code>{text}</code>"
        if not url:
            return text
        class_attr = f' class="{css_class}"' if css_class else ""
        fragment = f"#{fragment_id}" if fragment_id else ""
        return f'<a href="{encode_uri(url + fragment)}"{class_attr}>{text}</a>'

    def _link_type_expression(self, expression: str, css_class: Optional[str]) -> str:
        parts: List[str] = []
        position = 0
        for match in _TYPE_TOKEN.finditer(expression):
            parts.append(htmlsafe(expression[position : match.start()]))
            token = match.group(0)
            parts.append(self.linkto(token, htmlsafe(token), css_class))
            position = match.end()
        parts.append(htmlsafe(expression[position:]))
        return "".join(parts)

    def resolve_links(self, html: str) -> str:
        """Replace ``{@link}``, ``{@linkcode}``, ``{@linkplain}`` and ``{@tutorial}`` markers."""

        def _replace(match: re.Match[str]) -> str:
            tag = match.group("tag")
            caption = match.group("caption")
            target, text = _split_link_body(match.group("body"))
            if tag == "tutorial":
                return self.tutorial_link(target, caption or text)
            return self.linkto(target, caption or text or target, monospace=tag == "linkcode")

        return _INLINE_TAG.sub(_replace, html)

    # tutorials -----------------------------------------------------------

    def set_tutorials(self, root: Tutorial) -> None:
        self._tutorials.clear()
        stack = list(root.children)
        while stack:
            node = stack.pop()
            self._tutorials[node.name] = node
            stack.extend(node.children)

    def tutorial_to_url(self, name: str) -> Optional[str]:
        if name not in self._tutorials:
            self.logger.error("No such tutorial: %s", name)
            return None
        if name not in self._tutorial_urls:
            self._tutorial_urls[name] = self.get_unique_filename(f"tutorial-{name}")
        return self._tutorial_urls[name]

    def tutorial_link(
        self,
        name: str,
        content: Optional[str] = None,
        *,
        tag: str = "em",
        classname: str = "disabled",
        prefix: str = "Tutorial: ",
    ) -> str:
        node = self._tutorials.get(name)
        if node is None:
            return f'<{tag} class="{classname}">{prefix}{htmlsafe(name)}</{tag}>'
        return f'<a href="{self.tutorial_to_url(name)}">{content or node.title}</a>'

    # doclet helpers ------------------------------------------------------

    def get_ancestor_links(
        self, store: "DocletStore", doclet: Doclet, css_class: Optional[str] = None
    ) -> List[str]:
        ancestors: List[Doclet] = []
        visited = {doclet.longname}
        current = doclet
        while current.memberof and current.memberof not in visited:
            visited.add(current.memberof)
            parent = store.first(current.memberof)
            if parent is None:
                break
            ancestors.insert(0, parent)
            current = parent

        links = [
            self.linkto(ancestor.longname, SCOPE_TO_PUNC.get(ancestor.scope or "", "") + (ancestor.name or ""), css_class)
            for ancestor in ancestors
        ]
        if links:
            links[-1] += SCOPE_TO_PUNC.get(doclet.scope or "", "")
        return links

    @staticmethod
    def resolve_author_links(text: Union[str, None]) -> str:
        match = _AUTHOR.match(text or "")
        if match:
            return f'<a href="mailto:{match.group(2)}">{htmlsafe(match.group(1))}</a>'
        return htmlsafe(text)


def _is_complex_type(expression: str) -> bool:
    return bool(
        re.match(r"^\{.+\}$", expression)
        or re.match(r"^.+\|.+$", expression)
        or re.match(r"^.+<.+>$", expression)
    )


def _split_link_body(body: str) -> tuple[str, str]:
    body = body.strip()
    if "|" in body:
        target, text = body.split("|", 1)
        return target.strip(), text.strip()
    pieces = body.split(None, 1)
    if len(pieces) == 2:
        return pieces[0], pieces[1].strip()
    return body, ""


__all__ = [
    "FILE_EXTENSION",
    "GLOBAL_NAME",
    "LinkRegistry",
    "SCOPE_TO_PUNC",
    "encode_uri",
    "get_attribs",
    "htmlsafe",
    "is_module_exports",
]
