from __future__ import annotations

import typer

from wasmship.cli.commands._helpers import exit_on_error, require_tag
from wasmship.cli.context import build_context, resolve_release_date
from wasmship.release.changelog import prepend_to_changelog, render_section
from wasmship.release.history import GitHistory
from wasmship.release.pipeline import collect_changelog
from wasmship.release.tag import parse_tag


def changelog(
    tag: str | None = typer.Argument(
        None,
        envvar="GITHUB_REF_NAME",
        help="Version tag to describe (default: $GITHUB_REF_NAME)",
        show_default=False,
    ),
    write: bool = typer.Option(
        False, "--write", help="Insert the section into the configured CHANGELOG.md"
    ),
    release_date: str | None = typer.Option(
        None, "--date", help="Section date, YYYY-MM-DD (default: today, UTC)"
    ),
) -> None:
    """Render the Keep-a-Changelog section for TAG from its commits."""
    tag_text = require_tag(tag)
    ctx = build_context(stderr=True)
    parsed = exit_on_error(parse_tag(tag_text), ctx)

    history = GitHistory(repo_root=ctx.project.root, timeout=ctx.config.changelog.timeout_seconds)
    section = exit_on_error(
        collect_changelog(
            history,
            parsed,
            release_date=resolve_release_date(release_date),
            types=ctx.config.changelog.types,
            console=ctx.console,
        ),
        ctx,
    )
    rendered = render_section(section)

    if not write:
        typer.echo(rendered, nl=False)
        return

    path = ctx.project.root / ctx.config.changelog.file
    exit_on_error(prepend_to_changelog(path, rendered, version_label=section.version_label), ctx)
    ctx.console.success(f"updated {path}")
