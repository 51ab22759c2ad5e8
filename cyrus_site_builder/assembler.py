"""Copy built HTML trees into the aggregated site directory."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from cyrus_site_builder.config import SiteConfig, WebPath
from cyrus_site_builder.docs import html_output_dir
from cyrus_site_builder.runner import CommandRunner


def webpath_dir(site_dir: Path, webpath: WebPath) -> Path:
    rel = webpath.relative
    return site_dir / rel if rel else site_dir


def assemble_webpath(config: SiteConfig, webpath: WebPath, base_dir: Path, site_dir: Path, runner: CommandRunner) -> Path:
    source = config.sources[webpath.source]
    src = html_output_dir(base_dir, source)
    dest = webpath_dir(site_dir, webpath)
    dest.mkdir(parents=True, exist_ok=True)

    logger.info(f"Publishing {source.name} at {webpath.path}")
    # trailing slashes: copy the contents of html/, not the directory itself
    runner.strict(["rsync", "-av", f"{src}/", f"{dest}/"])
    return dest


def assemble_site(config: SiteConfig, base_dir: Path, site_dir: Path, runner: CommandRunner) -> list[Path]:
    """Copy every webpath's source output into the site tree.

    Files already in the site tree but absent from a source output are left
    alone. Several webpaths may map to the same source.

    Args:
        config: resolved configuration
        base_dir: directory holding the source checkouts
        site_dir: root of the assembled site
        runner: command runner

    Returns:
        Destination directories in the order they were written
    """
    site_dir.mkdir(parents=True, exist_ok=True)
    return [assemble_webpath(config, wp, base_dir, site_dir, runner) for wp in config.sorted_webpaths()]
