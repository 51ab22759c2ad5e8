"""Site build orchestrator: sync sources, build docs, assemble, optionally publish."""

from __future__ import annotations

import argparse
import os
from pathlib import Path

from loguru import logger

from cyrus_site_builder import __version__
from cyrus_site_builder.assembler import assemble_site
from cyrus_site_builder.config import (
    DEFAULT_SOURCES_YML,
    SITE_DIR_NAME,
    SiteConfig,
    load_site_config,
    resolve_config,
)
from cyrus_site_builder.docs import build_all_docs
from cyrus_site_builder.exceptions import SiteBuildError
from cyrus_site_builder.fetcher import sync_all_sources
from cyrus_site_builder.publisher import publish_site
from cyrus_site_builder.runner import CommandRunner
from cyrus_site_builder.versions import update_versions

BUILD_DIR_ENV = "CYRUS_DOCS_BUILD_DIR"
DEFAULT_BUILD_DIR = Path("/tmp/CYRUS_DOCS_BUILD_DIR")


def _default_build_dir() -> Path:
    value = os.environ.get(BUILD_DIR_ENV)
    return Path(value) if value else DEFAULT_BUILD_DIR


def build_site(
    config: SiteConfig,
    base_dir: Path,
    runner: CommandRunner | None = None,
    publish_to: str | None = None,
    mode: str = "full",
) -> Path:
    """Run the whole pipeline against a resolved configuration.

    Stages run in order and the first failing command aborts the run. Work done
    by earlier stages stays on disk and is reused next time.

    Args:
        config: resolved configuration
        base_dir: semi-persistent working directory
        runner: command runner (default: a real CommandRunner)
        publish_to: rsync destination for the finished site, if any
        mode: "full" or "dev", for the log

    Returns:
        The assembled site directory
    """
    runner = runner or CommandRunner()
    base_dir = Path(base_dir)
    site_dir = base_dir / SITE_DIR_NAME
    base_dir.mkdir(parents=True, exist_ok=True)

    logger.info(f"=== Site build start ({mode}) in {base_dir} ===")

    source_meta = sync_all_sources(config, base_dir, runner)
    build_all_docs(config, base_dir, runner)
    assemble_site(config, base_dir, site_dir, runner)

    update_versions(config, source_meta, site_dir, builder_version=__version__)

    if publish_to:
        publish_site(site_dir, publish_to, runner)

    logger.info(f"=== Site build done: {site_dir} ===")
    return site_dir


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(description="Build the Cyrus documentation website")
    p.add_argument(
        "--only-dev",
        action="store_true",
        help="build only the development docs, published at the site root",
    )
    ext = p.add_argument_group(
        "optional extensions",
        "not needed for a normal run; defaults reproduce the standard build",
    )
    ext.add_argument(
        "--sources-yml",
        type=Path,
        default=DEFAULT_SOURCES_YML,
        help="extension: alternative sources/webpaths table",
    )
    ext.add_argument(
        "--build-dir",
        type=Path,
        default=None,
        help=f"extension: working directory (default: ${BUILD_DIR_ENV} or {DEFAULT_BUILD_DIR})",
    )
    ext.add_argument(
        "--publish-to",
        default=None,
        help="extension: rsync destination to publish the assembled site to",
    )

    args = p.parse_args(argv)

    try:
        config = resolve_config(load_site_config(args.sources_yml), only_dev=args.only_dev)
        build_site(
            config,
            base_dir=args.build_dir or _default_build_dir(),
            publish_to=args.publish_to,
            mode="dev" if args.only_dev else "full",
        )
    except SiteBuildError as exc:
        logger.error(f"Site build failed: {exc}")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
