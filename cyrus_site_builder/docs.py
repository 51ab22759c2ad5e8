"""Run each source's documentation build."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from cyrus_site_builder.config import SiteConfig, Source
from cyrus_site_builder.fetcher import checkout_dir
from cyrus_site_builder.runner import CommandRunner

DOCS_SUBDIR = "docsrc"
BUILD_TARGET = "html"


def docs_dir(base_dir: Path, source: Source) -> Path:
    return checkout_dir(base_dir, source) / DOCS_SUBDIR


def html_output_dir(base_dir: Path, source: Source) -> Path:
    """Where a successful `make html` leaves the rendered tree."""
    return docs_dir(base_dir, source) / "build" / "html"


def build_source_docs(source: Source, base_dir: Path, runner: CommandRunner) -> Path:
    logger.info(f"Building docs for {source.name}")
    runner.strict(["make", BUILD_TARGET], cwd=docs_dir(base_dir, source))
    return html_output_dir(base_dir, source)


def build_all_docs(config: SiteConfig, base_dir: Path, runner: CommandRunner) -> dict[str, Path]:
    outputs: dict[str, Path] = {}
    for source in config.sorted_sources():
        outputs[source.name] = build_source_docs(source, base_dir, runner)
    return outputs
