from __future__ import annotations

from wasmship.cli.commands._helpers import exit_on_error
from wasmship.cli.context import build_context
from wasmship.output.console import Style
from wasmship.release.registry import resolve_contracts


def contracts() -> None:
    """List the contracts a release would build."""
    ctx = build_context()
    units = exit_on_error(resolve_contracts(project_root=ctx.project.root, config=ctx.config), ctx)

    ctx.console.header(f"{len(units)} contracts ({ctx.config.build.target})")
    for unit in units:
        try:
            rel = unit.source_path.relative_to(ctx.project.root).as_posix()
        except ValueError:
            rel = str(unit.source_path)
        ctx.console.print(f"{unit.name:<24} {rel}")
    if not ctx.project.config_path.exists():
        ctx.console.print("(discovered; no wasmship.toml)", Style.DIM)
