"""Clone/update documentation source repositories and record their revisions."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from loguru import logger

from cyrus_site_builder.config import SiteConfig, Source
from cyrus_site_builder.runner import CommandRunner


def checkout_dir(base_dir: Path, source: Source) -> Path:
    return base_dir / source.name


def sync_source(source: Source, dest: Path, runner: CommandRunner) -> dict:
    """Bring a checkout to the tip of its remote branch.

    A missing checkout is cloned (single branch, no tags); an existing one is
    fetched from origin. Either way the working tree is then forced onto
    origin/<branch>, detached, so local drift from an earlier crashed run is
    discarded.

    Args:
        source: source definition
        dest: checkout directory
        runner: command runner

    Returns:
        Sync metadata, used for versions.json
    """
    logger.info(f"Syncing {source.name} ({source.branch}) from {source.repo}")

    cloned = not dest.exists()
    if cloned:
        dest.parent.mkdir(parents=True, exist_ok=True)
        runner.strict(
            [
                "git",
                "clone",
                "--single-branch",
                "--no-tags",
                "--branch",
                source.branch,
                source.repo,
                str(dest),
            ]
        )
    else:
        runner.strict(["git", "fetch", "origin"], cwd=dest)

    runner.strict(["git", "checkout", "--force", "--detach", f"origin/{source.branch}"], cwd=dest)

    result = runner.strict(["git", "rev-parse", "HEAD"], cwd=dest, capture=True)
    commit_hash = (result.stdout or "").strip()
    logger.info(f"{source.name} at commit {commit_hash[:8]}")

    return {
        "name": source.name,
        "repo": source.repo,
        "branch": source.branch,
        "commit_hash": commit_hash,
        "fetched_at": datetime.now(timezone.utc).isoformat(),
        "cloned": cloned,
    }


def sync_all_sources(config: SiteConfig, base_dir: Path, runner: CommandRunner) -> list[dict]:
    results = []
    for source in config.sorted_sources():
        results.append(sync_source(source, checkout_dir(base_dir, source), runner))

    logger.info(f"Synced {len(results)} sources")
    return results
