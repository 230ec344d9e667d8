"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from wasmship.core.errors import ErrorCode
from wasmship.core.result import Err, Result
from wasmship.output.errors import pipeline_error_exit_code, print_pipeline_error

if TYPE_CHECKING:
    from wasmship.cli.context import CLIContext
    from wasmship.release.errors import PipelineError


def exit_on_error[T](result: Result[T, PipelineError], ctx: CLIContext) -> T:
    """Return the Ok value, or report the error and exit with its code.

    Replaces the per-command boilerplate:
        match result:
            case Err(e):
                print_pipeline_error(e, ctx.console)
                raise typer.Exit(code=pipeline_error_exit_code(e))
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        error = result.error
        print_pipeline_error(error, ctx.console)
        raise typer.Exit(code=pipeline_error_exit_code(error))
    return result.value


def require_tag(tag: str | None) -> str:
    if tag is None or not tag.strip():
        exit_with_code(
            int(ErrorCode.USER_ERROR),
            "no tag given (pass TAG or set GITHUB_REF_NAME)",
        )
    return tag


def exit_with_code(code: int, message: str | None = None) -> NoReturn:
    if message:
        typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=code)
