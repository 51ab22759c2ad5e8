"""Publish the assembled site."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from cyrus_site_builder.runner import CommandRunner


def publish_site(site_dir: Path, destination: str, runner: CommandRunner) -> None:
    if not site_dir.is_dir():
        raise FileNotFoundError(f"Site directory does not exist: {site_dir}")

    # Pages would otherwise drop the _static/ and _sources/ trees
    (site_dir / ".nojekyll").touch(exist_ok=True)

    logger.info(f"Publishing site to {destination}")
    runner.strict(["rsync", "-av", "--delete", f"{site_dir}/", destination])
    logger.info(f"Publish complete: {destination}")
