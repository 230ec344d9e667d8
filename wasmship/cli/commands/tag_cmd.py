from __future__ import annotations

import typer

from wasmship.cli.commands._helpers import exit_with_code, require_tag
from wasmship.core.errors import ErrorCode
from wasmship.core.result import Err
from wasmship.release.packager import package_filename
from wasmship.release.tag import parse_tag


def tag(
    value: str | None = typer.Argument(
        None,
        envvar="GITHUB_REF_NAME",
        help="Version tag to check (default: $GITHUB_REF_NAME)",
        show_default=False,
        metavar="TAG",
    ),
) -> None:
    """Validate a version tag and print how the pipeline reads it.

    Output is key=value lines, suitable for appending to $GITHUB_OUTPUT.
    """
    parsed = parse_tag(require_tag(value))
    if isinstance(parsed, Err):
        exit_with_code(int(ErrorCode.USER_ERROR), parsed.error.message)

    t = parsed.value
    typer.echo(f"tag={t.to_tag()}")
    typer.echo(f"version={t.version}")
    typer.echo(f"major={t.major}")
    typer.echo(f"minor={t.minor}")
    typer.echo(f"patch={t.patch}")
    typer.echo(f"pre_release={t.pre_release or ''}")
    typer.echo(f"prerelease={'true' if t.is_prerelease else 'false'}")
    typer.echo(f"example_asset={package_filename('<contract>', t)}")
