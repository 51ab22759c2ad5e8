"""Site builder exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cyrus_site_builder.runner import CommandResult


class SiteBuildError(Exception):
    """Base class for failures that abort a site build."""


class ConfigError(SiteBuildError):
    """The source/webpath table is malformed or inconsistent."""


class CommandFailedError(SiteBuildError):
    """An external command failed under the policy it was run with.

    Attributes:
        result: the CommandResult of the failed invocation
    """

    def __init__(self, result: CommandResult) -> None:
        self.result = result
        super().__init__(result.describe())
