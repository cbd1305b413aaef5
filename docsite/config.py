"""Configuration loading for docsite (YAML or JSON, laid out like a jsdoc conf.json)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

DEFAULT_CONFIG_NAMES: tuple[str, ...] = (".docsite.yml", ".docsite.yaml", "conf.json")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class MenuLink:
    """Custom link rendered at the top of the navigation sidebar."""

    title: str
    link: str
    target: str = ""


@dataclass
class RepositoryConfig:
    """Hosted repository used to link source listings back to their origin."""

    link: str
    branch: str = "main"
    type: str = "github"

    def file_url(self, shortpath: str, lineno: int | None = None) -> str:
        base = self.link.rstrip("/")
        if self.type == "gitlab":
            url = f"{base}/-/blob/{self.branch}/{shortpath}"
        elif self.type == "bitbucket":
            url = f"{base}/src/{self.branch}/{shortpath}"
        else:
            url = f"{base}/blob/{self.branch}/{shortpath}"
        if lineno:
            anchor = f"lines-{lineno}" if self.type == "bitbucket" else f"L{lineno}"
            url = f"{url}#{anchor}"
        return url


@dataclass
class StaticFilesConfig:
    """User-specified static files copied into the output directory."""

    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    include_pattern: Optional[str] = None
    exclude_pattern: Optional[str] = None


@dataclass
class SiteConfig:
    """Represents the settings that drive one site build."""

    root: Path
    destination: Path = Path("out")
    encoding: str = "utf-8"
    readme: Optional[Path] = None
    tutorials: Optional[Path] = None
    template: Optional[Path] = None
    mainpagetitle: Optional[str] = None
    private: bool = False
    access: List[str] = field(default_factory=list)
    menu: List[MenuLink] = field(default_factory=list)
    repository: Optional[RepositoryConfig] = None
    use_longname_in_nav: Union[bool, int] = False
    show_inherited_in_nav: bool = True
    show_typedefs_in_nav: bool = False
    output_source_files: bool = True
    static_files: Optional[StaticFilesConfig] = None
    layout_file: Optional[Path] = None
    prism_theme: Optional[str] = None


def load_config(config_path: Path | None = None) -> SiteConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    if config_path is None:
        config_path = Path.cwd()
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SiteConfig(root=root, destination=root / "out")

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")
    return config_from_mapping(data, root=root)


def config_from_mapping(data: Dict[str, Any], *, root: Path) -> SiteConfig:
    """Build a :class:`SiteConfig` from an already-parsed mapping."""
    opts = _as_dict(data.get("opts"))
    templates = _as_dict(data.get("templates"))
    defaults = _as_dict(templates.get("default"))

    destination = _as_path(opts.get("destination"), root) or (root / "out")
    config = SiteConfig(root=root, destination=destination)
    config.encoding = _normalise_encoding(_as_str(opts.get("encoding")) or "utf-8")
    config.readme = _as_path(opts.get("readme"), root)
    config.tutorials = _as_path(opts.get("tutorials"), root)
    config.template = _as_path(opts.get("template"), root)
    config.mainpagetitle = _as_str(opts.get("mainpagetitle"))
    config.private = _as_bool(opts.get("private")) or False
    config.access = _as_str_list(opts.get("access"))

    config.menu = _parse_menu(data.get("menu"))
    config.repository = _parse_repository(data.get("repository"))

    config.use_longname_in_nav = _as_longname_mode(defaults.get("useLongnameInNav"))
    inherited = _as_bool(templates.get("showInheritedInNav"))
    config.show_inherited_in_nav = True if inherited is None else inherited
    typedefs = _as_bool(opts.get("showTypedefsInNav"))
    if typedefs is None:
        typedefs = _as_bool(templates.get("showTypedefsInNav"))
    config.show_typedefs_in_nav = bool(typedefs)
    config.output_source_files = _as_bool(defaults.get("outputSourceFiles")) is not False
    config.layout_file = _as_path(defaults.get("layoutFile"), root)
    config.prism_theme = _as_str(templates.get("prism-theme") or data.get("prism-theme"))

    static_data = _as_dict(defaults.get("staticFiles"))
    if static_data:
        # `paths` is the legacy spelling of `include`.
        include = _as_str_list(static_data.get("include")) or _as_str_list(static_data.get("paths"))
        config.static_files = StaticFilesConfig(
            include=include,
            exclude=_as_str_list(static_data.get("exclude")),
            include_pattern=_as_str(static_data.get("includePattern")),
            exclude_pattern=_as_str(static_data.get("excludePattern")),
        )
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        for name in DEFAULT_CONFIG_NAMES:
            candidate = config_path / name
            if candidate.exists():
                return candidate.resolve()
        return (config_path / DEFAULT_CONFIG_NAMES[0]).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    if path.suffix.lower() == ".json":
        # tab-indented JSON is valid JSON but not valid YAML
        try:
            loaded = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    else:
        try:
            loaded = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _parse_menu(value: Any) -> List[MenuLink]:
    links: List[MenuLink] = []
    if not isinstance(value, list):
        return links
    for item in value:
        if not isinstance(item, dict):
            continue
        title = _as_str(item.get("title"))
        link = _as_str(item.get("link"))
        if not title or not link:
            continue
        links.append(MenuLink(title=title, link=link, target=_as_str(item.get("target")) or ""))
    return links


def _parse_repository(value: Any) -> Optional[RepositoryConfig]:
    data = _as_dict(value)
    link = _as_str(data.get("link"))
    if not link:
        return None
    return RepositoryConfig(
        link=link,
        branch=_as_str(data.get("branch")) or "main",
        type=(_as_str(data.get("type")) or "github").lower(),
    )


def _normalise_encoding(value: str) -> str:
    # node spells it "utf8"; Python accepts both, but keep the canonical name
    return "utf-8" if value.lower() in {"utf8", "utf-8"} else value


def _as_longname_mode(value: Any) -> Union[bool, int]:
    if isinstance(value, bool):
        return value
    number = _as_int(value)
    if number is not None:
        return number if number > 0 else False
    return bool(_as_bool(value))


def _as_path(value: Any, root: Path) -> Optional[Path]:
    text = _as_str(value)
    if not text:
        return None
    path = Path(text).expanduser()
    return path if path.is_absolute() else root / path


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "ConfigError",
    "MenuLink",
    "RepositoryConfig",
    "SiteConfig",
    "StaticFilesConfig",
    "config_from_mapping",
    "load_config",
]
