from __future__ import annotations

import typer

from wasmship.cli.commands._helpers import exit_on_error, require_tag
from wasmship.cli.context import CLIContext, build_context, resolve_release_date
from wasmship.output.console import Style
from wasmship.release.history import GitHistory
from wasmship.release.model import ReleaseRecord
from wasmship.release.pipeline import PipelineContext, run_pipeline
from wasmship.release.publisher import GhReleaseHost, InMemoryReleaseHost, ReleaseHost
from wasmship.release.registry import resolve_contracts
from wasmship.release.toolchain import CargoCompiler, WasmOptOptimizer


def _host(ctx: CLIContext, *, dry_run: bool) -> ReleaseHost:
    gh = GhReleaseHost(
        project_root=ctx.project.root,
        repo=ctx.config.publish.repo,
        timeout=ctx.config.publish.timeout_seconds,
    )
    if dry_run:
        return InMemoryReleaseHost(console=ctx.console, remote=gh)
    return gh


def _print_record(ctx: CLIContext, record: ReleaseRecord, *, dry_run: bool) -> None:
    verb = "would publish" if dry_run else "published"
    suffix = " (pre-release)" if record.is_prerelease else ""
    ctx.console.success(f"{verb} {record.tag}{suffix}")
    if record.url:
        ctx.console.print(record.url, Style.INFO)
    for name in sorted(record.attached_files):
        ctx.console.print(f"  {name}", Style.DIM)


def release(
    tag: str | None = typer.Argument(
        None,
        envvar="GITHUB_REF_NAME",
        help="Version tag, e.g. v1.2.3 or v2.0.0-rc.1 (default: $GITHUB_REF_NAME)",
        show_default=False,
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Build and package, but print the release instead of publishing"
    ),
    verify_reproducible: bool = typer.Option(
        False,
        "--verify-reproducible",
        help="Optimize every module twice and fail if the outputs differ",
    ),
    jobs: int | None = typer.Option(
        None, "--jobs", "-j", min=0, help="Parallel workers (0 = one per contract)"
    ),
    release_date: str | None = typer.Option(
        None, "--date", help="Changelog date, YYYY-MM-DD (default: today, UTC)"
    ),
) -> None:
    """Build, optimize, checksum and publish every contract for TAG."""
    tag_text = require_tag(tag)
    ctx = build_context()
    cfg = ctx.config

    units = exit_on_error(resolve_contracts(project_root=ctx.project.root, config=cfg), ctx)

    pipeline_ctx = PipelineContext(
        project_root=ctx.project.root,
        config=cfg,
        console=ctx.console,
        units=units,
        compiler=CargoCompiler(project_root=ctx.project.root, target_dir=ctx.project.target_dir),
        optimizer=WasmOptOptimizer(tool=cfg.optimize.tool, args=cfg.optimize.args),
        history=GitHistory(
            repo_root=ctx.project.root, timeout=cfg.changelog.timeout_seconds
        ),
        host=_host(ctx, dry_run=dry_run),
        release_date=resolve_release_date(release_date),
        verify_reproducible=verify_reproducible,
        jobs=jobs,
    )

    record = exit_on_error(run_pipeline(pipeline_ctx, tag_text), ctx)
    _print_record(ctx, record, dry_run=dry_run)
