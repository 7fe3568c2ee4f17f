"""
Thin wrapper around subprocess for the external commands the lifecycle issues.

Every command is awaited to completion before control returns; no timeouts
are applied here, the surrounding job runner owns cancellation.
"""

import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import List, Optional, Mapping

from ..exceptions import ExternalCommandError

logger = logging.getLogger(__name__)

# exit status a shell reports for a command it cannot find
NOT_FOUND_EXIT_CODE = 127


@dataclass(frozen=True)
class Command:
    """A program plus its arguments, ready to be executed."""
    program: str
    args: List[str] = field(default_factory=list)

    @property
    def argv(self) -> List[str]:
        return [self.program, *self.args]

    def __str__(self) -> str:
        return shlex.join(self.argv)


@dataclass(frozen=True)
class ExecResult:
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def failure_text(self) -> str:
        """Trimmed stderr when the command failed and said something, else ''."""
        if self.exit_code != 0 and self.stderr:
            return self.stderr.strip()
        return ""


class Executor:
    """Runs commands synchronously and captures their output."""

    def __init__(self, env: Optional[Mapping[str, str]] = None):
        self.env = dict(env) if env is not None else None

    def exec(self, command: Command, ignore_return_code: bool = False, silent: bool = False) -> ExecResult:
        """
        Run `command` and wait for it.

        Args:
            command: What to run.
            ignore_return_code: Return the result instead of raising on a non-zero exit.
            silent: Do not echo the command line and its output at info level.

        Raises:
            ExternalCommandError: On a non-zero exit unless `ignore_return_code` is set.
        """
        log = logger.debug if silent else logger.info
        log(f"[command] {command}")
        try:
            proc = subprocess.run(
                command.argv,
                capture_output=True,
                text=True,
                env=self.env,
            )
            result = ExecResult(proc.returncode, proc.stdout or "", proc.stderr or "")
        except FileNotFoundError as e:
            result = ExecResult(NOT_FOUND_EXIT_CODE, "", str(e))
        except PermissionError as e:
            result = ExecResult(126, "", str(e))

        if result.stdout.strip():
            log(result.stdout.rstrip())
        if result.stderr.strip():
            logger.debug(result.stderr.rstrip())

        if not ignore_return_code and result.exit_code != 0:
            raise ExternalCommandError(
                f"'{command}' failed with exit code {result.exit_code}"
                + (f": {result.stderr.strip()}" if result.stderr.strip() else ""),
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        return result
