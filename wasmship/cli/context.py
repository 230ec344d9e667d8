from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime

import typer

from wasmship.core.config import Config, load_config_or_default
from wasmship.core.errors import ErrorCode
from wasmship.core.project import Project, detect_project
from wasmship.core.result import Err
from wasmship.output.console import ConsoleProtocol, RichConsole, Style


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    config: Config
    console: ConsoleProtocol


def build_context(*, stderr: bool = False) -> CLIContext:
    """Detect the project and load its config, exiting on failure.

    With `stderr`, progress goes to stderr so stdout carries only the
    command's payload (e.g. rendered markdown).
    """
    console = RichConsole(stderr=stderr)

    project_result = detect_project()
    if isinstance(project_result, Err):
        console.error(project_result.error.message)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    project = project_result.value

    config_result = load_config_or_default(project.config_path)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        console.print(f"config: {project.config_path}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(project=project, config=config_result.value, console=console)


def resolve_release_date(value: str | None) -> str:
    """Validate --date, defaulting to today's UTC date."""
    if value is None:
        return datetime.now(UTC).date().isoformat()
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        typer.echo(f"error: invalid --date (expected YYYY-MM-DD): {value}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
