"""Tests for docsite.links."""

from __future__ import annotations

from docsite.links import LinkRegistry, get_attribs, htmlsafe
from docsite.models import Doclet, Tutorial
from docsite.store import DocletStore


def test_unique_filename_replaces_unsafe_characters() -> None:
    links = LinkRegistry()

    assert links.get_unique_filename("module:foo/bar") == "module-foo_bar.html"
    assert links.get_unique_filename("Foo#bar") == "Foo_bar.html"
    assert links.get_unique_filename("Foo~inner") == "Foo-inner.html"
    assert links.get_unique_filename("render(variant)") == "render.html"
    assert links.get_unique_filename(".hidden") == "hidden.html"


def test_unique_filename_prefixes_underscores_and_empty_names() -> None:
    links = LinkRegistry()

    assert links.get_unique_filename("_private") == "-_private.html"
    assert links.get_unique_filename("") == "-_.html"


def test_unique_filename_is_case_insensitive() -> None:
    links = LinkRegistry()

    assert links.get_unique_filename("Foo") == "Foo.html"
    assert links.get_unique_filename("foo") == "foo_.html"
    assert links.get_unique_filename("FOO") == "FOO__.html"


def test_create_link_for_containers_and_members(make_doclet) -> None:
    links = LinkRegistry()
    links.register_link("global", links.get_unique_filename("global"))

    cls = make_doclet("class", "Foo")
    method = make_doclet("function", "Foo#bar", memberof="Foo", scope="instance")
    static = make_doclet("member", "Foo.baz", memberof="Foo", scope="static")
    inner = make_doclet("function", "module:foo~helper", memberof="module:foo", scope="inner")
    global_fn = make_doclet("function", "doThing", scope="global")

    assert links.create_link(cls) == "Foo.html"
    assert links.create_link(method) == "Foo.html#bar"
    assert links.create_link(static) == "Foo.html#.baz"
    assert links.create_link(inner) == "module-foo.html#~helper"
    assert links.create_link(global_fn) == "global.html#doThing"


def test_create_link_is_stable_and_fragments_are_unique(make_doclet) -> None:
    links = LinkRegistry()
    lower = make_doclet("function", "Foo#bar", memberof="Foo", scope="instance")
    upper = make_doclet("function", "Foo#Bar", memberof="Foo", scope="instance")

    first = links.create_link(lower)

    assert links.create_link(lower) == first
    assert links.create_link(upper) == "Foo.html#Bar_"


def test_linkto_known_unknown_and_external() -> None:
    links = LinkRegistry()
    links.register_link("Foo", "Foo.html")

    assert links.linkto("Foo") == '<a href="Foo.html">Foo</a>'
    assert links.linkto("Foo", "the foo", "cls") == '<a href="Foo.html" class="cls">the foo</a>'
    assert links.linkto("Foo", "line 3", None, "line3") == '<a href="Foo.html#line3">line 3</a>'
    assert links.linkto("Bar") == "Bar"
    assert links.linkto("https://example.com") == '<a href="https://example.com">https://example.com</a>'


def test_linkto_links_parts_of_type_expressions() -> None:
    links = LinkRegistry()
    links.register_link("Foo", "Foo.html")

    assert links.linkto("Array.<Foo>") == 'Array.&lt;<a href="Foo.html">Foo</a>>'
    assert links.linkto("Foo|string") == '<a href="Foo.html">Foo</a>|string'


def test_resolve_links_handles_inline_tags() -> None:
    links = LinkRegistry()
    links.register_link("Foo", "Foo.html")

    assert links.resolve_links("See {@link Foo}.") == 'See <a href="Foo.html">Foo</a>.'
    assert links.resolve_links("{@link Foo|the class}") == '<a href="Foo.html">the class</a>'
    assert links.resolve_links("{@link Foo the class}") == '<a href="Foo.html">the class</a>'
    assert links.resolve_links("[caption]{@link Foo}") == '<a href="Foo.html">caption</a>'
    assert links.resolve_links("{@linkcode Foo}") == '<a href="Foo.html"><code>Foo</code></a>'
    assert links.resolve_links("{@linkplain Missing}") == "Missing"


def test_tutorial_links() -> None:
    links = LinkRegistry()
    root = Tutorial()
    root.add_child(Tutorial(name="intro", title="Intro"))
    links.set_tutorials(root)

    assert links.resolve_links("{@tutorial intro}") == '<a href="tutorial-intro.html">Intro</a>'
    assert links.tutorial_link("missing") == '<em class="disabled">Tutorial: missing</em>'
    assert links.tutorial_to_url("missing") is None


def test_get_attribs_collects_badges(make_doclet) -> None:
    method = make_doclet("function", "Foo.run", async_=True, access="private", scope="static")
    constant = make_doclet("constant", "LIMIT", nullable=False)
    readonly = make_doclet("member", "Foo#size", scope="instance", readonly=True)

    assert get_attribs(method) == ["async", "private", "static"]
    assert get_attribs(constant) == ["constant", "non-null"]
    assert get_attribs(readonly) == ["readonly"]
    assert get_attribs(None) == []


def test_get_ancestor_links(make_doclet) -> None:
    namespace = make_doclet("namespace", "ns")
    cls = make_doclet("class", "ns.Foo", memberof="ns", scope="static")
    method = make_doclet("function", "ns.Foo#bar", memberof="ns.Foo", scope="instance")
    store = DocletStore([namespace, cls, method])
    links = LinkRegistry()
    for doclet in store:
        links.register_link(doclet.longname, links.create_link(doclet))

    ancestors = links.get_ancestor_links(store, method)

    assert ancestors == [
        '<a href="ns.html">ns</a>',
        '<a href="ns.Foo.html">.Foo</a>#',
    ]


def test_author_links_and_htmlsafe() -> None:
    assert (
        LinkRegistry.resolve_author_links("Jane Doe <jane@example.com>")
        == '<a href="mailto:jane@example.com">Jane Doe</a>'
    )
    assert LinkRegistry.resolve_author_links("Anonymous <unknown") == "Anonymous &lt;unknown"
    assert htmlsafe("a < b & c") == "a &lt; b &amp; c"
    assert htmlsafe(None) == ""


def test_doclet_with_unregistered_container_keeps_one_filename() -> None:
    links = LinkRegistry()
    first = Doclet(kind="function", name="a", longname="Thing#a", memberof="Thing", scope="instance")
    second = Doclet(kind="function", name="b", longname="Thing#b", memberof="Thing", scope="instance")

    assert links.create_link(first).split("#")[0] == links.create_link(second).split("#")[0]
