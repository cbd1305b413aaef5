"""Pipeline orchestration for a single site build."""

from __future__ import annotations

import os
import re
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .assets import DEFAULT_STATIC_DIR, StaticAssetCopier
from .config import SiteConfig, load_config
from .links import GLOBAL_NAME, LinkRegistry, htmlsafe
from .loader import load_doclets, load_tutorials, render_readme
from .logging import get_logger
from .models import (
    Doclet,
    Example,
    GlobalPage,
    MainPage,
    MemberGroups,
    SourceFile,
    Tutorial,
)
from .nav import NavigationBuilder
from .pages import DuplicatePageError, PageGenerator, TemplateView
from .signature import SignatureBuilder
from .store import DocletStore

_CAPTION = re.compile(r"^\s*<caption>([\s\S]+?)</caption>(\s*[\n\r])([\s\S]+)$", re.IGNORECASE)

# Container groups rendered as their own pages, in rendering order.
PAGE_KINDS: tuple[tuple[str, str], ...] = (
    ("modules", "Module"),
    ("classes", "Class"),
    ("namespaces", "Namespace"),
    ("mixins", "Mixin"),
    ("externals", "External"),
    ("interfaces", "Interface"),
)


@dataclass
class PublishResult:
    """Files produced by a publish run."""

    outdir: Path
    pages: List[Path]
    static_files: List[Path]


@dataclass
class RunContext:
    """Everything one publish run reads and mutates, threaded through each step."""

    config: SiteConfig
    store: DocletStore
    tutorials: Tutorial
    links: LinkRegistry = field(default_factory=LinkRegistry)
    outdir: Optional[Path] = None
    source_files: Dict[str, SourceFile] = field(default_factory=dict)
    members: Optional[MemberGroups] = None
    view: Optional[TemplateView] = None
    index_url: str = ""
    global_url: str = ""


def split_example(example: object) -> Example:
    if isinstance(example, Example):
        return example
    text = str(example)
    match = _CAPTION.match(text)
    if match:
        return Example(code=match.group(3), caption=match.group(1))
    return Example(code=text)


def hash_to_link(links: LinkRegistry, doclet: Doclet, target: str) -> str:
    """Turn a ``#fragment`` reference into a link on the doclet's own page."""
    if not re.match(r"^(#.+)", target):
        return target
    url = re.sub(r"(#.+|$)", target, links.create_link(doclet), count=1)
    return f'<a href="{url}">{target}</a>'


def doclet_source_path(doclet: Doclet) -> Optional[str]:
    meta = doclet.meta
    if meta is None or not meta.filename:
        return None
    if meta.path and meta.path != "null":
        return os.path.join(meta.path, meta.filename)
    return meta.filename


def common_path_prefix(paths: Sequence[str]) -> str:
    """Longest shared directory prefix (with trailing ``/``) of ``paths``."""
    if not paths:
        return ""
    directories = [path.replace("\\", "/").split("/")[:-1] for path in paths]
    common = directories[0]
    for segments in directories[1:]:
        index = 0
        while index < min(len(common), len(segments)) and common[index] == segments[index]:
            index += 1
        common = common[:index]
    if not common:
        return ""
    return "/".join(common) + "/"


def shorten_paths(files: Dict[str, SourceFile], prefix: str) -> Dict[str, SourceFile]:
    for source in files.values():
        normalised = source.resolved.replace("\\", "/")
        if prefix and normalised.startswith(prefix):
            normalised = normalised[len(prefix) :]
        source.shortened = normalised
    return files


def attach_module_symbols(doclets: Iterable[Doclet], modules: Iterable[Doclet]) -> None:
    """Attach classes/functions sharing a module's longname to ``module.modules``.

    Such a symbol is the module's single export. Only described symbols are
    kept, except classes, whose constructor heading is always shown. Attached
    symbols are copies renamed to ``(require("name"))``.
    """
    symbols: Dict[str, List[Doclet]] = defaultdict(list)
    for symbol in doclets:
        if symbol.longname is not None:
            symbols[symbol.longname].append(symbol)

    for module in modules:
        candidates = symbols.get(module.longname or "")
        if not candidates:
            continue
        attached: List[Doclet] = []
        for symbol in candidates:
            if symbol.kind not in ("class", "function"):
                continue
            if not symbol.description and symbol.kind != "class":
                continue
            exported = symbol.copy()
            bare = re.sub(r"^module:", "", exported.name or "")
            exported.name = f'(require("{bare}"))'
            attached.append(exported)
        module.modules = attached


class Orchestrator:
    """Coordinates a site build: prune, link, format, navigate, render."""

    def __init__(
        self,
        *,
        templates_dir: Path | None = None,
        static_dir: Path | None = None,
        working_dir: Path | None = None,
    ) -> None:
        self.templates_dir = templates_dir
        self.static_dir = static_dir
        self.working_dir = working_dir
        self.logger = get_logger("orchestrator")

    def run_build(
        self,
        doclets_path: str | Path,
        config_path: str | Path | None = None,
        *,
        destination: str | Path | None = None,
        tutorials_path: str | Path | None = None,
        readme_path: str | Path | None = None,
        template_path: str | Path | None = None,
        encoding: str | None = None,
    ) -> PublishResult:
        """Load doclets, configuration and tutorials from disk, then publish.

        Explicit arguments override the matching configuration options.
        """
        doclets_file = Path(doclets_path).expanduser().resolve()
        if not doclets_file.is_file():
            raise FileNotFoundError(f"Doclet file not found: {doclets_file}")
        if config_path is not None:
            config_file = Path(config_path).expanduser()
            if not config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_file}")
            config = load_config(config_file)
        else:
            config = load_config(self.working_dir)

        if destination is not None:
            config.destination = Path(destination).expanduser().resolve()
        if tutorials_path is not None:
            config.tutorials = Path(tutorials_path).expanduser().resolve()
        if readme_path is not None:
            config.readme = Path(readme_path).expanduser().resolve()
        if template_path is not None:
            config.template = Path(template_path).expanduser().resolve()
        if encoding:
            config.encoding = encoding
        if config.readme is not None and not config.readme.is_file():
            raise FileNotFoundError(f"Readme not found: {config.readme}")

        self.logger.debug("Loading doclets from %s", doclets_file)
        doclets = load_doclets(doclets_file)
        tutorials = load_tutorials(config.tutorials, config.encoding)
        return self.publish(doclets, config, tutorials)

    def publish(
        self,
        doclets: Iterable[Doclet],
        config: SiteConfig,
        tutorials: Tutorial | None = None,
    ) -> PublishResult:
        context = RunContext(config=config, store=DocletStore(doclets), tutorials=tutorials or Tutorial())
        store = context.store
        links = context.links
        self.logger.info("Publishing %d doclets", len(store))

        # Claim the special filenames before any page can take them.
        context.index_url = links.get_unique_filename("index")
        # "index" is also a valid longname, so only "global" is registered
        context.global_url = links.get_unique_filename(GLOBAL_NAME)
        links.register_link(GLOBAL_NAME, context.global_url)
        links.set_tutorials(context.tutorials)

        removed = store.prune(private=config.private, access=config.access)
        store.sort()
        self.logger.debug("Pruned %d doclets; %d remain", removed, len(store))

        self._normalise_doclets(context)
        self._collect_source_files(context)

        context.outdir = self._resolve_outdir(context)
        context.outdir.mkdir(parents=True, exist_ok=True)

        copier = StaticAssetCopier(context.outdir)
        copier.copy_template_static(self._template_static_dir(config))
        copier.copy_user_static(config.static_files, self.working_dir or Path.cwd())

        self._register_links(context)
        self._format_doclets(context)

        members = store.member_groups()
        members.tutorials = list(context.tutorials.children)
        context.members = members
        context.view = self._create_view(context)
        context.view.globals["nav"] = NavigationBuilder(store, links, config).build(members)

        attach_module_symbols(store.with_longname_prefix("module:"), members.modules)

        generator = PageGenerator(context.view, links, context.outdir)
        self._generate_pages(context, generator)

        self.logger.info("Wrote %d pages to %s", len(generator.written), context.outdir)
        return PublishResult(
            outdir=context.outdir,
            pages=list(generator.written),
            static_files=list(copier.copied),
        )

    # steps ---------------------------------------------------------------

    def _normalise_doclets(self, context: RunContext) -> None:
        for doclet in context.store:
            doclet.attribs = ""
            if doclet.examples:
                doclet.examples = [split_example(example) for example in doclet.examples]
            if doclet.see:
                doclet.see = [hash_to_link(context.links, doclet, item) for item in doclet.see]
        self._add_event_listeners(context.store)

    @staticmethod
    def _add_event_listeners(store: DocletStore) -> None:
        for doclet in store:
            for event in doclet.extra.get("listens") or []:
                for target in store.by_longname(event):
                    listeners = target.extra.setdefault("listeners", [])
                    if doclet.longname not in listeners:
                        listeners.append(doclet.longname)

    def _collect_source_files(self, context: RunContext) -> None:
        paths: List[str] = []
        for doclet in context.store:
            source_path = doclet_source_path(doclet)
            if source_path is None:
                continue
            if source_path not in context.source_files:
                context.source_files[source_path] = SourceFile(resolved=source_path)
                paths.append(source_path)
        if paths:
            shorten_paths(context.source_files, common_path_prefix(paths))
        self.logger.debug("Found %d source files", len(paths))

    def _resolve_outdir(self, context: RunContext) -> Path:
        outdir = context.config.destination
        packages = context.store.by_kind("package")
        package = packages[0] if packages else None
        if package is not None and package.name:
            outdir = outdir / package.name / (package.version or "")
        return outdir

    def _template_static_dir(self, config: SiteConfig) -> Path:
        if self.static_dir is not None:
            return self.static_dir
        if config.template is not None and (config.template / "static").is_dir():
            return config.template / "static"
        return DEFAULT_STATIC_DIR

    def _register_links(self, context: RunContext) -> None:
        links = context.links
        for doclet in context.store:
            if doclet.longname is None:
                continue
            # one URL per longname; later doclets sharing it link to the first
            if doclet.longname not in links.longname_to_url:
                links.register_link(doclet.longname, links.create_link(doclet))
            source_path = doclet_source_path(doclet)
            if source_path is not None and doclet.meta is not None:
                shortened = context.source_files[source_path].shortened
                if shortened:
                    doclet.meta.shortpath = shortened

    def _format_doclets(self, context: RunContext) -> None:
        links = context.links
        signatures = SignatureBuilder(links)
        for doclet in context.store:
            url = links.longname_to_url.get(doclet.longname or "", "")
            doclet.id = url.split("#")[-1] if "#" in url else doclet.name
            signatures.format_callable(doclet)

        # ancestors need every URL to exist first
        for doclet in context.store:
            doclet.ancestors = links.get_ancestor_links(context.store, doclet)
            signatures.format_member(doclet)
        context.store.reindex()

    def _create_view(self, context: RunContext) -> TemplateView:
        config = context.config
        templates_dir = self.templates_dir
        if templates_dir is None and config.template is not None and (config.template / "tmpl").is_dir():
            templates_dir = config.template / "tmpl"
        view = TemplateView(templates_dir, layout_file=config.layout_file)
        packages = context.store.by_kind("package")
        view.globals.update(
            {
                "find": context.store.find,
                "linkto": context.links.linkto,
                "resolve_author_links": context.links.resolve_author_links,
                "tutoriallink": context.links.tutorial_link,
                "htmlsafe": htmlsafe,
                "output_source_files": config.output_source_files,
                "repository": config.repository,
                "prism_theme": config.prism_theme,
                "package": packages[0] if packages else None,
                "generated_at": datetime.now(timezone.utc).strftime("%a %b %d %Y %H:%M:%S UTC"),
            }
        )
        return view

    def _generate_pages(self, context: RunContext, generator: PageGenerator) -> None:
        config = context.config
        members = context.members or MemberGroups()
        store = context.store

        # source listings first, so later pages can link into them
        if config.output_source_files:
            generator.generate_source_files(context.source_files, config.encoding)

        if members.globals:
            generator.generate("Global", "", [GlobalPage()], context.global_url)

        readme = render_readme(config.readme, config.encoding) if config.readme else None
        main_page = MainPage(longname=config.mainpagetitle or "Main Page", readme=readme)
        generator.generate(
            "",
            "",
            [*store.by_kind("package"), main_page, *store.by_kind("file")],
            context.index_url,
        )

        groups: Dict[str, Dict[str, List[Doclet]]] = {}
        for attribute, _ in PAGE_KINDS:
            by_longname: Dict[str, List[Doclet]] = defaultdict(list)
            for doclet in getattr(members, attribute):
                if doclet.longname is not None:
                    by_longname[doclet.longname].append(doclet)
            groups[attribute] = by_longname

        # a module's single export is rendered on the module page itself
        exported = {module.longname for module in members.modules if module.modules}

        for longname, url in list(context.links.longname_to_url.items()):
            matches = [
                (title, groups[attribute][longname])
                for attribute, title in PAGE_KINDS
                if longname in groups[attribute]
                and (attribute == "modules" or longname not in exported)
            ]
            if len(matches) > 1:
                kinds = ", ".join(title for title, _ in matches)
                raise DuplicatePageError(f"{longname} is documented as more than one page kind ({kinds})")
            for title, docs in matches:
                generator.generate(docs[0].name or longname, title, docs, url)

        self._generate_tutorials(context, generator, context.tutorials)

    def _generate_tutorials(self, context: RunContext, generator: PageGenerator, node: Tutorial) -> None:
        # a tutorial has exactly one parent, so the walk cannot loop
        for child in node.children:
            filename = context.links.tutorial_to_url(child.name)
            if filename is not None:
                generator.generate_tutorial(f"Tutorial: {child.title}", child, filename)
            self._generate_tutorials(context, generator, child)


def publish(
    doclets: Iterable[Doclet],
    config: SiteConfig,
    tutorials: Tutorial | None = None,
) -> PublishResult:
    """Build a site with a default :class:`Orchestrator`."""
    return Orchestrator().publish(doclets, config, tutorials)


__all__ = [
    "Orchestrator",
    "PAGE_KINDS",
    "PublishResult",
    "RunContext",
    "attach_module_symbols",
    "common_path_prefix",
    "doclet_source_path",
    "hash_to_link",
    "publish",
    "shorten_paths",
    "split_example",
]
