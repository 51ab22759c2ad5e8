"""External command execution.

Every git/make/rsync invocation goes through CommandRunner. A run produces a
CommandResult describing how the child ended; the caller's RunPolicy decides
whether that outcome is fatal.

- STRICT: anything but a clean exit raises CommandFailedError
- TOLERANT: a non-zero exit is returned to the caller, signals and spawn
  failures still raise
"""

from __future__ import annotations

import enum
import os
import shlex
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from loguru import logger

from cyrus_site_builder.exceptions import CommandFailedError

SAFE_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"


class Outcome(enum.Enum):
    SUCCESS = "success"
    NONZERO_EXIT = "nonzero_exit"
    SIGNALED = "signaled"
    SPAWN_ERROR = "spawn_error"


class RunPolicy(enum.Enum):
    STRICT = "strict"
    TOLERANT = "tolerant"


@dataclass(frozen=True)
class CommandResult:
    args: tuple[str, ...]
    outcome: Outcome
    returncode: int | None = None
    signum: int | None = None
    core_dumped: bool = False
    error: str | None = None
    stdout: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def command_line(self) -> str:
        return shlex.join(self.args)

    def describe(self) -> str:
        cmd = self.command_line
        if self.outcome is Outcome.SUCCESS:
            return f"{cmd} succeeded"
        if self.outcome is Outcome.NONZERO_EXIT:
            return f"{cmd} exited with status {self.returncode}"
        if self.outcome is Outcome.SIGNALED:
            try:
                name = signal.Signals(self.signum).name
            except ValueError:
                name = f"signal {self.signum}"
            dumped = "with" if self.core_dumped else "without"
            return f"{cmd} died from {name} ({self.signum}), {dumped} core dump"
        return f"{cmd} could not be started: {self.error}"


def _child_env() -> dict[str, str]:
    env = dict(os.environ)
    env["PATH"] = SAFE_PATH
    return env


def _decode_status(args: tuple[str, ...], status: int, stdout: str | None) -> CommandResult:
    if os.WIFSIGNALED(status):
        return CommandResult(
            args=args,
            outcome=Outcome.SIGNALED,
            signum=os.WTERMSIG(status),
            core_dumped=os.WCOREDUMP(status),
            stdout=stdout,
        )
    code = os.waitstatus_to_exitcode(status)
    outcome = Outcome.SUCCESS if code == 0 else Outcome.NONZERO_EXIT
    return CommandResult(args=args, outcome=outcome, returncode=code, stdout=stdout)


class CommandRunner:
    """Runs external programs with a scrubbed PATH."""

    def run(
        self,
        args: Sequence[str],
        cwd: Path | None = None,
        policy: RunPolicy = RunPolicy.STRICT,
        capture: bool = False,
    ) -> CommandResult:
        args = tuple(str(a) for a in args)
        where = f" (in {cwd})" if cwd else ""
        logger.info(f"$ {shlex.join(args)}{where}")

        result = self.execute(args, cwd=cwd, capture=capture)
        return check_result(result, policy)

    def strict(self, args: Sequence[str], cwd: Path | None = None, capture: bool = False) -> CommandResult:
        return self.run(args, cwd=cwd, policy=RunPolicy.STRICT, capture=capture)

    def tolerant(self, args: Sequence[str], cwd: Path | None = None, capture: bool = False) -> CommandResult:
        return self.run(args, cwd=cwd, policy=RunPolicy.TOLERANT, capture=capture)

    def execute(self, args: tuple[str, ...], cwd: Path | None = None, capture: bool = False) -> CommandResult:
        try:
            proc = subprocess.Popen(
                args,
                cwd=cwd,
                env=_child_env(),
                stdout=subprocess.PIPE if capture else None,
                text=True,
            )
        except OSError as exc:
            return CommandResult(args=args, outcome=Outcome.SPAWN_ERROR, error=str(exc))

        stdout = None
        if capture:
            stdout = proc.stdout.read()
            proc.stdout.close()

        # Reap the child ourselves: Popen.returncode drops the core dump flag.
        _, status = os.waitpid(proc.pid, 0)
        proc.returncode = os.waitstatus_to_exitcode(status)
        return _decode_status(args, status, stdout)


def check_result(result: CommandResult, policy: RunPolicy) -> CommandResult:
    """Apply a run policy to a finished command.

    Args:
        result: outcome of the command
        policy: STRICT or TOLERANT

    Returns:
        The result itself when the policy accepts it

    Raises:
        CommandFailedError: the outcome is fatal under the policy
    """
    if result.ok:
        return result
    if policy is RunPolicy.TOLERANT and result.outcome is Outcome.NONZERO_EXIT:
        logger.debug(f"Ignoring failure: {result.describe()}")
        return result
    raise CommandFailedError(result)
