"""versions.json: which commit each web path of the site was built from.

The file lives at the site root and is published with it. Each entry keeps the
time its content last changed, so readers can tell a fresh build of an
unchanged branch from new documentation.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from loguru import logger

from cyrus_site_builder.config import SiteConfig

VERSIONS_NAME = "versions.json"


def read_versions(site_dir: Path) -> dict:
    path = site_dir / VERSIONS_NAME
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        logger.warning(f"Ignoring unreadable {path}: {exc}")
        return {}
    return data if isinstance(data, dict) else {}


def _webpath_entries(config: SiteConfig, sources_metadata: list[dict]) -> list[dict]:
    commits = {meta["name"]: meta.get("commit_hash") for meta in sources_metadata}
    return [
        {
            "path": wp.path,
            "source": wp.source,
            "branch": config.sources[wp.source].branch,
            "commit": commits.get(wp.source),
        }
        for wp in config.sorted_webpaths()
    ]


def changed_webpaths(previous: dict, entries: list[dict]) -> list[str]:
    """Web paths whose source or commit differs from the previous build.

    Paths absent from the previous versions.json count as changed.
    """
    before = {e.get("path"): e for e in previous.get("webpaths", [])}
    changed = []
    for entry in entries:
        old = before.get(entry["path"])
        if old is None or (old.get("source"), old.get("commit")) != (entry["source"], entry["commit"]):
            changed.append(entry["path"])
    return changed


def update_versions(
    config: SiteConfig,
    sources_metadata: list[dict],
    site_dir: Path,
    builder_version: str,
) -> list[str]:
    """Rewrite the site's versions.json after an assemble.

    Args:
        config: resolved configuration
        sources_metadata: sync results, one per source
        site_dir: assembled site root
        builder_version: cyrus_site_builder version

    Returns:
        Web paths whose content changed since the previous build
    """
    now = datetime.now(timezone.utc).isoformat()
    previous = read_versions(site_dir)
    before = {e.get("path"): e for e in previous.get("webpaths", [])}

    entries = _webpath_entries(config, sources_metadata)
    changed = changed_webpaths(previous, entries)
    for entry in entries:
        if entry["path"] in changed:
            entry["updated_at"] = now
        else:
            entry["updated_at"] = before[entry["path"]].get("updated_at", now)

    versions = {
        "built_at": now,
        "builder_version": builder_version,
        "changed": changed,
        "webpaths": entries,
    }
    path = site_dir / VERSIONS_NAME
    with open(path, "w", encoding="utf-8") as f:
        json.dump(versions, f, indent=2, ensure_ascii=False)

    if changed:
        logger.info(f"Updated web paths: {', '.join(changed)}")
    else:
        logger.info("No web path changed since the previous build")
    return changed
