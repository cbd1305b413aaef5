"""Tests for docsite.store."""

from __future__ import annotations

from docsite.store import DocletStore


def _longnames(store: DocletStore) -> list[str]:
    return [doclet.longname for doclet in store]


def test_prune_drops_undocumented_ignored_anonymous_and_private(make_doclet) -> None:
    store = DocletStore(
        [
            make_doclet("function", "kept"),
            make_doclet("function", "hidden", undocumented=True),
            make_doclet("function", "skipped", ignore=True),
            make_doclet("function", "<anonymous>~fn", memberof="<anonymous>"),
            make_doclet("function", "secret", access="private"),
        ]
    )

    removed = store.prune()

    assert removed == 4
    assert _longnames(store) == ["kept"]


def test_prune_keeps_private_when_requested(make_doclet) -> None:
    store = DocletStore([make_doclet("function", "secret", access="private")])

    assert store.prune(private=True) == 0
    assert _longnames(store) == ["secret"]


def test_prune_applies_access_list(make_doclet) -> None:
    doclets = [
        make_doclet("function", "open"),
        make_doclet("function", "guarded", access="protected"),
        make_doclet("function", "internal", access="package"),
        make_doclet("function", "secret", access="private"),
    ]

    public_only = DocletStore([doclet.copy() for doclet in doclets])
    public_only.prune(access=["public"])
    everything = DocletStore([doclet.copy() for doclet in doclets])
    everything.prune(access=["all"])

    assert _longnames(public_only) == ["open"]
    assert _longnames(everything) == ["open", "guarded", "internal", "secret"]


def test_sort_orders_by_longname_then_version(make_doclet) -> None:
    store = DocletStore(
        [
            make_doclet("function", "b"),
            make_doclet("function", "a", version="2.0"),
            make_doclet("function", "a", version="1.0"),
        ]
    )

    store.sort()

    assert [(doclet.longname, doclet.version) for doclet in store] == [
        ("a", "1.0"),
        ("a", "2.0"),
        ("b", None),
    ]
    assert [doclet.version for doclet in store.by_longname("a")] == ["1.0", "2.0"]


def test_find_by_memberof_and_globals(make_doclet) -> None:
    store = DocletStore(
        [
            make_doclet("class", "Foo"),
            make_doclet("function", "Foo#run", memberof="Foo"),
            make_doclet("member", "Foo#size", memberof="Foo"),
            make_doclet("function", "helper"),
            make_doclet("member", "VERSION"),
        ]
    )

    assert _longnames(store.find(kind="function", memberof="Foo")) == ["Foo#run"]
    assert _longnames(store.find(kind="function", memberof=None)) == ["helper"]
    assert _longnames(store.find(kind=["function", "member"], memberof=None)) == ["helper", "VERSION"]
    assert _longnames(store.find(longname="Foo")) == ["Foo"]


def test_member_groups_partition_by_kind(make_doclet) -> None:
    store = DocletStore(
        [
            make_doclet("class", "Foo"),
            make_doclet("module", "module:util"),
            make_doclet("function", "module:util", name="module:util"),
            make_doclet("namespace", "ns"),
            make_doclet("mixin", "Mixable"),
            make_doclet("interface", "Shape"),
            make_doclet("external", "external:String"),
            make_doclet("event", "Foo#event:ready", memberof="Foo"),
            make_doclet("typedef", "Options"),
            make_doclet("function", "Foo#run", memberof="Foo"),
        ]
    )

    groups = store.member_groups()

    assert _longnames(groups.classes) == ["Foo"]
    assert _longnames(groups.modules) == ["module:util"]
    assert _longnames(groups.namespaces) == ["ns"]
    assert _longnames(groups.mixins) == ["Mixable"]
    assert _longnames(groups.interfaces) == ["Shape"]
    assert _longnames(groups.externals) == ["external:String"]
    assert _longnames(groups.events) == ["Foo#event:ready"]
    # module exports and members of a container are not globals
    assert _longnames(groups.globals) == ["Options"]


def test_reindex_reflects_kind_changes(make_doclet) -> None:
    constant = make_doclet("constant", "LIMIT")
    store = DocletStore([constant])

    constant.kind = "member"
    store.reindex()

    assert store.by_kind("constant") == []
    assert _longnames(store.by_kind("member")) == ["LIMIT"]
