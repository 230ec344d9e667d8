"""Error presentation utilities.

Centralized error formatting and exit code mapping for pipeline failures.
Collaborator messages are printed verbatim, one line per output line.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from wasmship.core.config import ConfigError
from wasmship.core.errors import ErrorCode
from wasmship.output.console import Style
from wasmship.release.errors import (
    BuildFailure,
    ChangelogWriteFailure,
    DistWriteFailure,
    DuplicateContractName,
    HistoryFailure,
    InvalidTagFormat,
    OptimizationFailure,
    PipelineError,
    PublishConflict,
    PublishFailure,
    RunCancelled,
)

if TYPE_CHECKING:
    from wasmship.output.console import ConsoleProtocol

__all__ = ["print_pipeline_error", "pipeline_error_exit_code"]


def _print_detail(console: ConsoleProtocol, detail: str) -> None:
    for line in detail.rstrip().splitlines():
        console.print(f"  {line}", Style.DIM)


def print_pipeline_error(error: PipelineError, console: ConsoleProtocol) -> None:
    """Print a pipeline error with its contract and collaborator message."""
    match error:
        case InvalidTagFormat():
            console.error(error.message)
            console.print("hint: expected v<major>.<minor>.<patch>[-<pre-release>]", Style.DIM)
        case BuildFailure(toolchain_message=detail) | OptimizationFailure(
            toolchain_message=detail
        ):
            console.error(error.message)
            _print_detail(console, detail)
        case DuplicateContractName():
            console.error(error.message)
        case PublishConflict():
            console.info(error.message)
        case PublishFailure(reason=reason) | HistoryFailure(reason=reason):
            console.error(error.message)
            _print_detail(console, reason)
        case DistWriteFailure(reason=reason) | ChangelogWriteFailure(reason=reason):
            console.error(error.message)
            _print_detail(console, reason)
        case RunCancelled():
            console.warning(error.message)
        case ConfigError(message=message, path=path):
            console.error(message)
            if path is not None:
                console.print(f"config: {path}", Style.DIM)


def pipeline_error_exit_code(error: PipelineError) -> int:
    match error:
        case InvalidTagFormat():
            return int(ErrorCode.USER_ERROR)
        case ConfigError() | HistoryFailure():
            return int(ErrorCode.ENV_ERROR)
        case BuildFailure() | OptimizationFailure() | DuplicateContractName() | RunCancelled():
            return int(ErrorCode.BUILD_ERROR)
        case PublishFailure():
            return int(ErrorCode.NETWORK_ERROR)
        case DistWriteFailure() | ChangelogWriteFailure():
            return int(ErrorCode.IO_ERROR)
        case PublishConflict():
            return int(ErrorCode.RELEASE_EXISTS)
    # Fallback for exhaustiveness
    return int(ErrorCode.BUILD_ERROR)
