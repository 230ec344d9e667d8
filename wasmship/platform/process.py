"""Run external tools and capture their output as a Result.

cargo, wasm-opt, git and gh are all reached through `run`. A non-zero exit,
a timeout or a missing executable comes back as a ProcessError carrying the
tool's own output, so callers can pass it on to the operator unchanged:

    match run(["git", "describe", "--tags"], cwd=root, timeout=30.0):
        case Ok(stdout):
            previous = stdout.strip()
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from wasmship.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run"]

# Return code used when the process never ran or was killed on timeout.
NOT_RUN = -1


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A tool invocation that did not exit cleanly.

    Attributes:
        command: Full argv of the invocation.
        returncode: Exit status, or NOT_RUN.
        stdout: Whatever the tool printed before failing.
        stderr: The tool's diagnostics (or ours, for timeouts and spawn errors).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def message(self) -> str:
        """The tool's own diagnostic, verbatim, for operator-facing errors."""
        detail = self.stderr.strip() or self.stdout.strip()
        return detail or str(self)

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"


def _failure(
    cmd: list[str], returncode: int, *, stdout: str = "", stderr: str = ""
) -> Err[ProcessError]:
    return Err(ProcessError(tuple(cmd), returncode, stdout, stderr))


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run `cmd` in `cwd` and return its stdout.

    `env` replaces the inherited environment when given. With `timeout` the
    process is killed after that many seconds.
    """
    try:
        completed = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return _failure(
            cmd, NOT_RUN, stdout=partial, stderr=f"Command timed out after {timeout}s"
        )
    except OSError as e:
        return _failure(cmd, NOT_RUN, stderr=str(e))

    if completed.returncode != 0:
        return _failure(
            cmd, completed.returncode, stdout=completed.stdout, stderr=completed.stderr
        )
    return Ok(completed.stdout)
