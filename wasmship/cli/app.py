from __future__ import annotations

import os
from pathlib import Path

import typer

from wasmship import __version__
from wasmship.cli.commands.changelog_cmd import changelog
from wasmship.cli.commands.contracts_cmd import contracts
from wasmship.cli.commands.release_cmd import release
from wasmship.cli.commands.tag_cmd import tag
from wasmship.cli.commands.verify_cmd import verify
from wasmship.core.errors import ErrorCode

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(release)
app.command()(tag)
app.command()(changelog)
app.command()(verify)
app.command()(contracts)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Project root (overrides auto detection)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if root is not None:
        try:
            resolved = root.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --root: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not resolved.is_dir():
            typer.echo(f"error: --root '{resolved}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ["WASMSHIP_ROOT"] = str(resolved)


def main() -> None:
    app()
