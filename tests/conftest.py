from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from cyrus_site_builder.config import SiteConfig, Source, WebPath
from cyrus_site_builder.runner import CommandResult, CommandRunner, Outcome


class FakeRunner(CommandRunner):
    """Records commands and imitates git/make/rsync on the local filesystem."""

    def __init__(self) -> None:
        self.calls: list[tuple[tuple[str, ...], Path | None]] = []
        self.commits: dict[str, str] = {}
        self.fail_on: list[tuple[str, ...]] = []

    @property
    def commands(self) -> list[tuple[str, ...]]:
        return [args for args, _ in self.calls]

    def execute(self, args: tuple[str, ...], cwd: Path | None = None, capture: bool = False) -> CommandResult:
        self.calls.append((args, cwd))

        for prefix in self.fail_on:
            if args[: len(prefix)] == prefix:
                return CommandResult(args=args, outcome=Outcome.NONZERO_EXIT, returncode=2)

        if cwd is not None and not cwd.is_dir():
            return CommandResult(args=args, outcome=Outcome.SPAWN_ERROR, error=f"No such directory: {cwd}")

        if args[:2] == ("git", "clone"):
            dest = Path(args[-1])
            (dest / ".git").mkdir(parents=True)
            (dest / "docsrc").mkdir()
        elif args[:2] == ("git", "rev-parse"):
            commit = self.commits.get(cwd.name, "0123456789abcdef0123456789abcdef01234567")
            return CommandResult(args=args, outcome=Outcome.SUCCESS, returncode=0, stdout=commit + "\n")
        elif args[0] == "make":
            html = cwd / "build" / "html"
            html.mkdir(parents=True, exist_ok=True)
            (html / "index.html").write_text(f"<h1>{cwd.parent.name}</h1>", encoding="utf-8")
        elif args[0] == "rsync":
            src, dest = Path(args[-2]), Path(args[-1])
            if not src.is_dir():
                return CommandResult(args=args, outcome=Outcome.NONZERO_EXIT, returncode=23)
            shutil.copytree(src, dest, dirs_exist_ok=True)

        return CommandResult(args=args, outcome=Outcome.SUCCESS, returncode=0)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def fanout_config() -> SiteConfig:
    return SiteConfig(
        sources={
            "cyrus-imapd-3.10": Source("cyrus-imapd-3.10", "https://example.org/cyrus-imapd.git"),
            "cyrus-imapd-master": Source("cyrus-imapd-master", "https://example.org/cyrus-imapd.git", "master"),
        },
        webpaths={
            "/stable": WebPath("/stable", "cyrus-imapd-3.10"),
            "/dev": WebPath("/dev", "cyrus-imapd-master"),
            "/": WebPath("/", "cyrus-imapd-3.10"),
        },
    )
