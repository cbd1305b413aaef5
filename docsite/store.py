"""Indexed, queryable collection of doclets."""

from __future__ import annotations

from collections import defaultdict
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Union

from .links import is_module_exports
from .models import Doclet, MemberGroups

GLOBAL_KINDS: tuple[str, ...] = ("member", "function", "constant", "typedef")
_ANY = object()


class DocletStore:
    """Holds the doclets of one run with lookups by kind, memberof and longname.

    The indexes are rebuilt whenever the collection is pruned or re-sorted, so
    queries always see the current order.
    """

    def __init__(self, doclets: Iterable[Doclet]) -> None:
        self._doclets: List[Doclet] = list(doclets)
        self._by_kind: Dict[str, List[Doclet]] = {}
        self._by_memberof: Dict[tuple[str, str], List[Doclet]] = {}
        self._by_longname: Dict[str, List[Doclet]] = {}
        self.reindex()

    def __iter__(self) -> Iterator[Doclet]:
        return iter(self._doclets)

    def __len__(self) -> int:
        return len(self._doclets)

    def reindex(self) -> None:
        by_kind: Dict[str, List[Doclet]] = defaultdict(list)
        by_memberof: Dict[tuple[str, str], List[Doclet]] = defaultdict(list)
        by_longname: Dict[str, List[Doclet]] = defaultdict(list)
        for doclet in self._doclets:
            by_kind[doclet.kind].append(doclet)
            if doclet.memberof:
                by_memberof[(doclet.kind, doclet.memberof)].append(doclet)
            if doclet.longname is not None:
                by_longname[doclet.longname].append(doclet)
        self._by_kind = dict(by_kind)
        self._by_memberof = dict(by_memberof)
        self._by_longname = dict(by_longname)

    # queries -------------------------------------------------------------

    def by_kind(self, *kinds: str) -> List[Doclet]:
        if len(kinds) == 1:
            return list(self._by_kind.get(kinds[0], []))
        wanted = set(kinds)
        return [doclet for doclet in self._doclets if doclet.kind in wanted]

    def members_of(self, longname: str, kind: str) -> List[Doclet]:
        return list(self._by_memberof.get((kind, longname), []))

    def by_longname(self, longname: str) -> List[Doclet]:
        return list(self._by_longname.get(longname, []))

    def first(self, longname: str) -> Optional[Doclet]:
        matches = self._by_longname.get(longname)
        return matches[0] if matches else None

    def with_longname_prefix(self, prefix: str) -> List[Doclet]:
        return [
            doclet
            for doclet in self._doclets
            if doclet.longname is not None and doclet.longname.startswith(prefix)
        ]

    def globals(self) -> List[Doclet]:
        return [
            doclet
            for doclet in self._doclets
            if doclet.kind in GLOBAL_KINDS and not doclet.memberof and not is_module_exports(doclet)
        ]

    def find(
        self,
        kind: Union[str, Sequence[str], None] = None,
        memberof: object = _ANY,
        longname: Optional[str] = None,
    ) -> List[Doclet]:
        """Template-facing query; ``memberof=None`` selects global-scope doclets."""
        if isinstance(kind, str) and isinstance(memberof, str):
            candidates = self.members_of(memberof, kind)
        elif longname is not None:
            candidates = self.by_longname(longname)
        elif isinstance(kind, str):
            candidates = self.by_kind(kind)
        else:
            candidates = list(self._doclets)

        kinds = {kind} if isinstance(kind, str) else set(kind or ())
        return [
            doclet
            for doclet in candidates
            if (not kinds or doclet.kind in kinds)
            and (memberof is _ANY or doclet.memberof == memberof or (memberof is None and not doclet.memberof))
            and (longname is None or doclet.longname == longname)
        ]

    def filter(self, predicate: Callable[[Doclet], bool]) -> List[Doclet]:
        return [doclet for doclet in self._doclets if predicate(doclet)]

    def longnames(self) -> List[str]:
        return list(self._by_longname)

    # mutation ------------------------------------------------------------

    def prune(self, *, private: bool = False, access: Sequence[str] = ()) -> int:
        """Drop undocumented, ignored, anonymous and access-filtered doclets.

        Returns the number of doclets removed.
        """
        allowed = {level.lower() for level in access}
        before = len(self._doclets)

        def _keep(doclet: Doclet) -> bool:
            if doclet.undocumented or doclet.ignore:
                return False
            if doclet.memberof == "<anonymous>":
                return False
            if "all" in allowed:
                return True
            level = doclet.access or "public"
            if level == "private":
                return private or "private" in allowed
            if allowed and level not in allowed:
                return False
            return True

        self._doclets = [doclet for doclet in self._doclets if _keep(doclet)]
        self.reindex()
        return before - len(self._doclets)

    def sort(self) -> None:
        """Order doclets by longname, then version, then since (ordinal, ascending)."""
        self._doclets.sort(
            key=lambda doclet: (doclet.longname or "", doclet.version or "", doclet.since or "")
        )
        self.reindex()

    def member_groups(self) -> MemberGroups:
        return MemberGroups(
            classes=self.by_kind("class"),
            modules=self.by_kind("module"),
            namespaces=self.by_kind("namespace"),
            mixins=self.by_kind("mixin"),
            interfaces=self.by_kind("interface"),
            externals=self.by_kind("external"),
            events=self.by_kind("event"),
            globals=self.globals(),
        )


__all__ = ["DocletStore", "GLOBAL_KINDS"]
