"""cyrus_site_builder: build and assemble the Cyrus documentation website.

Syncs documentation source repositories, runs their docs build and
assembles the results into a single static site tree.
"""

__version__ = "0.1.0"

from cyrus_site_builder.config import (
    SiteConfig,
    Source,
    WebPath,
    load_site_config,
    resolve_config,
)
from cyrus_site_builder.exceptions import CommandFailedError, ConfigError, SiteBuildError
from cyrus_site_builder.runner import CommandResult, CommandRunner, Outcome, RunPolicy

__all__ = [
    # config
    "Source",
    "WebPath",
    "SiteConfig",
    "load_site_config",
    "resolve_config",
    # runner
    "CommandRunner",
    "CommandResult",
    "Outcome",
    "RunPolicy",
    # exceptions
    "SiteBuildError",
    "ConfigError",
    "CommandFailedError",
]
