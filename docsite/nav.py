"""Navigation sidebar assembly."""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set, Union

from .config import MenuLink, SiteConfig
from .links import GLOBAL_NAME, LinkRegistry, htmlsafe
from .models import Doclet, MemberGroups, Tutorial
from .store import DocletStore

LinkFn = Callable[[Optional[str], str], str]
NavEntry = Union[Doclet, Tutorial]


@dataclass
class SeenTracker:
    """Longnames already placed in the sidebar for one tracking scope."""

    seen: Set[str] = field(default_factory=set)

    def __contains__(self, longname: object) -> bool:
        return longname in self.seen

    def mark(self, longname: str) -> None:
        self.seen.add(longname)


def nav_type(kind: str, link: str) -> str:
    initial = kind[:1].upper()
    return (
        f'<span class="nav-item-type type-{kind}" title="{kind}">{initial}</span>'
        f'<span class="nav-item-name is-{kind}">{link}</span>'
    )


def nav_heading(content: str) -> str:
    return f'<li class="nav-heading">{content}</li>'


def nav_item(content: str) -> str:
    return f'<li class="nav-item">{content}</li>'


def menu_link(link: MenuLink) -> str:
    target = f' target="{html.escape(link.target, quote=True)}"' if link.target else ""
    return f'<a href="{html.escape(link.link, quote=True)}"{target}>{htmlsafe(link.title)}</a>'


class NavigationBuilder:
    """Renders the sidebar once per run from the member groups."""

    def __init__(self, store: DocletStore, links: LinkRegistry, config: SiteConfig) -> None:
        self.store = store
        self.links = links
        self.config = config

    # link functions ------------------------------------------------------

    def link_doclet(self, longname: Optional[str], name: str) -> str:
        return self.links.linkto(longname, name)

    def link_tutorial(self, longname: Optional[str], name: str) -> str:
        return self.links.tutorial_link(longname or name)

    def link_external(self, longname: Optional[str], name: str) -> str:
        return self.links.linkto(longname, re.sub(r'(^"|"$)', "", name))

    # assembly ------------------------------------------------------------

    def display_name(self, item: NavEntry) -> str:
        longname = item.longname or ""
        mode = self.config.use_longname_in_nav
        if mode:
            name = longname
            if mode is not True and isinstance(mode, int) and mode > 0:
                cropped = ".".join(longname.split(".")[-mode:])
                if cropped != name:
                    name = "..." + cropped
        else:
            name = item.name or ""
        return re.sub(r"^module:", "", name)

    def _children(self, longname: str) -> List[Doclet]:
        children = self.store.members_of(longname, "member")
        children += self.store.members_of(longname, "function")
        if self.config.show_typedefs_in_nav:
            children += self.store.members_of(longname, "typedef")
        children += self.store.members_of(longname, "event")
        if not self.config.show_inherited_in_nav:
            children = [child for child in children if not child.inherited]
        return children

    def build_member_nav(
        self,
        items: Sequence[NavEntry],
        heading: str,
        seen: SeenTracker,
        link_fn: LinkFn,
    ) -> str:
        """Render one sidebar group; returns an empty string when nothing is emitted."""
        entries: List[str] = []
        for item in items:
            if not item.longname:
                entries.append(nav_item(link_fn("", item.name or "")))
                continue
            if item.longname in seen:
                continue

            display = self.display_name(item)
            if isinstance(item, Tutorial):
                entries.append(nav_item(link_fn(item.longname, display)))
            else:
                entries.append(nav_heading(nav_type(item.kind, link_fn(item.longname, display))))
                for child in self._children(item.longname):
                    entries.append(
                        nav_item(nav_type(child.kind, self.links.linkto(child.longname, child.name)))
                    )
            seen.mark(item.longname)

        if not entries:
            return ""
        return "<ul>" + nav_heading(heading) + "".join(entries) + "</ul>"

    def build_globals_nav(self, items: Sequence[Doclet], seen: SeenTracker) -> str:
        if not items:
            return ""
        entries: List[str] = []
        for item in items:
            if item.longname not in seen:
                entries.append(nav_item(nav_type(item.kind, self.links.linkto(item.longname, item.name))))
            if item.longname:
                seen.mark(item.longname)
        if not entries:
            return ""
        return "<ul>" + nav_heading(self.links.linkto(GLOBAL_NAME, "Globals")) + "".join(entries) + "</ul>"

    def build_menu_nav(self, seen: SeenTracker) -> str:
        if not self.config.menu:
            return ""
        entries = [nav_heading("Links")]
        for link in self.config.menu:
            if link.title not in seen:
                entries.append(nav_item(menu_link(link)))
            seen.mark(link.title)
        return "<ul>" + "".join(entries) + "</ul>"

    def build(self, members: MemberGroups) -> str:
        """Return the whole sidebar.

        Classes, externals, namespaces, mixins, interfaces and globals share one
        tracker; modules and tutorials each get their own, so a symbol can show
        up once as a namespace and again as a module.
        """
        seen = SeenTracker()
        parts = [
            self.build_menu_nav(seen),
            self.build_member_nav(members.tutorials, "Tutorials", SeenTracker(), self.link_tutorial),
            self.build_member_nav(members.classes, "Classes", seen, self.link_doclet),
            self.build_member_nav(members.modules, "Modules", SeenTracker(), self.link_doclet),
            self.build_member_nav(members.externals, "Externals", seen, self.link_external),
            self.build_member_nav(members.namespaces, "Namespaces", seen, self.link_doclet),
            self.build_member_nav(members.mixins, "Mixins", seen, self.link_doclet),
            self.build_member_nav(members.interfaces, "Interfaces", seen, self.link_doclet),
            self.build_globals_nav(members.globals, seen),
        ]
        return "".join(parts)


__all__ = [
    "NavigationBuilder",
    "SeenTracker",
    "nav_heading",
    "nav_item",
    "nav_type",
]
