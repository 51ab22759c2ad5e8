"""Source and webpath tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import yaml
from loguru import logger

from cyrus_site_builder.exceptions import ConfigError

DEFAULT_SOURCES_YML = Path(__file__).parent / "sources.yml"
SITE_DIR_NAME = "cyrus-site"


@dataclass(frozen=True)
class Source:
    name: str
    repo: str
    branch: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigError("source name must not be empty")
        # the name is used as a directory below the build dir
        if "/" in self.name or self.name in {".", "..", SITE_DIR_NAME}:
            raise ConfigError(f"source name {self.name!r} is not usable as a checkout directory")
        if not self.repo:
            raise ConfigError(f"source {self.name!r} has no repo")
        if not self.branch:
            object.__setattr__(self, "branch", self.name)


@dataclass(frozen=True)
class WebPath:
    path: str
    source: str

    def __post_init__(self) -> None:
        if not self.path.startswith("/"):
            raise ConfigError(f"webpath {self.path!r} must start with '/'")
        if any(part in {".", ".."} for part in self.path.split("/")):
            raise ConfigError(f"webpath {self.path!r} must not contain '.' or '..' segments")

    @property
    def relative(self) -> str:
        """Path below the site root ('' for '/')."""
        return self.path.strip("/")


@dataclass(frozen=True)
class SiteConfig:
    """Validated, read-only view of what to build and where it goes."""

    sources: Mapping[str, Source]
    webpaths: Mapping[str, WebPath]
    dev_source: Source | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        for path, webpath in self.webpaths.items():
            if webpath.source not in self.sources:
                raise ConfigError(f"webpath {path!r} refers to unknown source {webpath.source!r}")
        object.__setattr__(self, "sources", MappingProxyType(dict(self.sources)))
        object.__setattr__(self, "webpaths", MappingProxyType(dict(self.webpaths)))

    def sorted_sources(self) -> list[Source]:
        return [self.sources[name] for name in sorted(self.sources)]

    def sorted_webpaths(self) -> list[WebPath]:
        return [self.webpaths[path] for path in sorted(self.webpaths)]


def _require_str(value: object, what: str) -> str:
    # YAML turns unquoted values like 3.10 into numbers
    if not isinstance(value, str):
        raise ConfigError(f"{what} must be a string, got {type(value).__name__} {value!r} (quote it in YAML)")
    return value


def _parse_source(name: object, entry: object) -> Source:
    name = _require_str(name, "source name")
    if isinstance(entry, str):
        return Source(name=name, repo=entry)
    if not isinstance(entry, dict):
        raise ConfigError(f"source {name!r} must be a mapping, got {type(entry).__name__}")

    repo = _require_str(entry.get("repo", ""), f"repo of source {name!r}")
    branch = entry.get("branch")
    if branch is not None:
        branch = _require_str(branch, f"branch of source {name!r}")
    return Source(name=name, repo=repo, branch=branch or "")


def _parse_webpath(path: object, source: object) -> WebPath:
    path = _require_str(path, "webpath")
    return WebPath(path=path, source=_require_str(source, f"source of webpath {path!r}"))


def parse_site_config(data: dict) -> SiteConfig:
    """Build a SiteConfig from the decoded YAML document.

    Args:
        data: mapping with `sources`, `webpaths` and optionally `dev_source`

    Returns:
        The validated configuration

    Raises:
        ConfigError: missing sections, non-string values or inconsistent references
    """
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping")

    raw_sources = data.get("sources") or {}
    raw_webpaths = data.get("webpaths") or {}
    if not isinstance(raw_sources, dict) or not raw_sources:
        raise ConfigError("no sources configured")
    if not isinstance(raw_webpaths, dict) or not raw_webpaths:
        raise ConfigError("no webpaths configured")

    sources = {}
    for name, entry in raw_sources.items():
        source = _parse_source(name, entry)
        sources[source.name] = source

    webpaths = {}
    for path, src in raw_webpaths.items():
        webpath = _parse_webpath(path, src)
        webpaths[webpath.path] = webpath

    dev_source = None
    raw_dev = data.get("dev_source")
    if raw_dev:
        if not isinstance(raw_dev, dict) or "name" not in raw_dev:
            raise ConfigError("dev_source needs a name")
        dev_source = _parse_source(raw_dev["name"], raw_dev)

    return SiteConfig(sources=sources, webpaths=webpaths, dev_source=dev_source)


def load_site_config(sources_yml: Path = DEFAULT_SOURCES_YML) -> SiteConfig:
    try:
        with open(sources_yml, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigError(f"cannot read {sources_yml}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {sources_yml}: {exc}") from exc

    config = parse_site_config(data)
    logger.info(f"Loaded {len(config.sources)} sources and {len(config.webpaths)} webpaths from {sources_yml}")
    return config


def resolve_config(config: SiteConfig, only_dev: bool = False) -> SiteConfig:
    """Return the configuration for the requested run mode.

    In dev-only mode the tables collapse to the development source published
    at the site root.
    """
    if not only_dev:
        return config
    if config.dev_source is None:
        raise ConfigError("--only-dev requested but no dev_source is configured")

    dev = config.dev_source
    logger.info(f"Dev-only mode: building {dev.name} ({dev.branch}) at /")
    return SiteConfig(
        sources={dev.name: dev},
        webpaths={"/": WebPath(path="/", source=dev.name)},
        dev_source=dev,
    )
