from __future__ import annotations

from pathlib import Path

import pytest

from cyrus_site_builder.config import SiteConfig, Source, WebPath
from cyrus_site_builder.exceptions import CommandFailedError
from cyrus_site_builder.fetcher import sync_all_sources, sync_source


def test_absent_checkout_is_cloned_then_checked_out(tmp_path: Path, fake_runner) -> None:
    """A missing checkout is cloned single-branch without tags, then checked out."""
    source = Source("A", "https://example.org/r.git", "main")
    dest = tmp_path / "A"

    meta = sync_source(source, dest, fake_runner)

    assert fake_runner.commands[:2] == [
        ("git", "clone", "--single-branch", "--no-tags", "--branch", "main", "https://example.org/r.git", str(dest)),
        ("git", "checkout", "--force", "--detach", "origin/main"),
    ]
    assert not any(cmd[:2] == ("git", "fetch") for cmd in fake_runner.commands)
    assert meta["cloned"] is True
    assert meta["branch"] == "main"
    assert len(meta["commit_hash"]) == 40


def test_present_checkout_is_fetched_never_cloned(tmp_path: Path, fake_runner) -> None:
    """An existing checkout is fetched and checked out, never re-cloned."""
    source = Source("A", "https://example.org/r.git", "main")
    dest = tmp_path / "A"
    dest.mkdir()

    meta = sync_source(source, dest, fake_runner)

    assert fake_runner.calls[0] == (("git", "fetch", "origin"), dest)
    assert fake_runner.calls[1] == (("git", "checkout", "--force", "--detach", "origin/main"), dest)
    assert not any(cmd[:2] == ("git", "clone") for cmd in fake_runner.commands)
    assert meta["cloned"] is False


def test_commit_hash_is_recorded(tmp_path: Path, fake_runner) -> None:
    """The checked-out commit is returned in the sync metadata."""
    fake_runner.commits["A"] = "f" * 40
    meta = sync_source(Source("A", "R"), tmp_path / "A", fake_runner)
    assert meta["commit_hash"] == "f" * 40


def test_sources_synced_in_name_order(tmp_path: Path, fake_runner) -> None:
    """Sources are synced in name order."""
    config = SiteConfig(
        sources={n: Source(n, f"https://example.org/{n}.git") for n in ["c", "a", "b"]},
        webpaths={"/": WebPath("/", "a")},
    )

    results = sync_all_sources(config, tmp_path, fake_runner)

    assert [r["name"] for r in results] == ["a", "b", "c"]
    clones = [cmd[-1] for cmd in fake_runner.commands if cmd[:2] == ("git", "clone")]
    assert clones == [str(tmp_path / n) for n in ["a", "b", "c"]]


def test_clone_failure_aborts(tmp_path: Path, fake_runner) -> None:
    """A failed clone stops the sync immediately."""
    fake_runner.fail_on.append(("git", "clone"))

    with pytest.raises(CommandFailedError):
        sync_source(Source("A", "R"), tmp_path / "A", fake_runner)

    assert len(fake_runner.calls) == 1
