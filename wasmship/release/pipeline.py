"""Tag-triggered release pipeline.

    parse tag
      |-- build -> optimize -> package -> checksum -> write dist --|
      |-- previous tag -> commit messages -> changelog section ----|-- publish

Both branches run concurrently; publishing is the single join point and only
happens when both succeed. A failed changelog branch cancels the artifact
branch so no further contract is built. All run state lives in
PipelineContext, so several pipelines can run side by side (tests do).
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path

from wasmship.core.config import Config
from wasmship.core.result import Err, Ok, Result
from wasmship.output.console import ConsoleProtocol, Style
from wasmship.release.builder import build_artifacts
from wasmship.release.changelog import build_section, render_body
from wasmship.release.checksums import ChecksumManifest, build_manifest
from wasmship.release.errors import HistoryFailure, PipelineError, RunCancelled
from wasmship.release.history import CommitHistory
from wasmship.release.model import (
    ChangelogSection,
    ContractUnit,
    PackagedFile,
    ReleaseRecord,
    ReleaseRequest,
)
from wasmship.release.optimizer import optimize_artifacts
from wasmship.release.packager import package_artifacts, release_dir, write_dist
from wasmship.release.publisher import ReleaseHost, publish_release
from wasmship.release.tag import VersionTag, parse_tag
from wasmship.release.toolchain import Compiler, Optimizer


@dataclass(frozen=True, slots=True)
class PipelineContext:
    project_root: Path
    config: Config
    console: ConsoleProtocol
    units: tuple[ContractUnit, ...]
    compiler: Compiler
    optimizer: Optimizer
    history: CommitHistory
    host: ReleaseHost
    release_date: str  # YYYY-MM-DD
    verify_reproducible: bool = False
    jobs: int | None = None  # overrides build.jobs
    # Set to stop the artifact branch; contracts already compiling still finish.
    cancel: threading.Event = field(default_factory=threading.Event)

    @property
    def dist_dir(self) -> Path:
        return self.project_root / self.config.dist.dir

    @property
    def worker_jobs(self) -> int:
        return self.jobs if self.jobs is not None else self.config.build.jobs


@dataclass(frozen=True, slots=True)
class Bundle:
    directory: Path
    files: tuple[PackagedFile, ...]
    manifest: ChecksumManifest
    paths: tuple[Path, ...]


def build_bundle(ctx: PipelineContext, tag: VersionTag) -> Result[Bundle, PipelineError]:
    """Artifact branch: everything up to the files on disk."""
    cfg = ctx.config
    built = build_artifacts(
        ctx.units,
        ctx.compiler,
        target=cfg.build.target,
        timeout=cfg.build.timeout_seconds,
        console=ctx.console,
        jobs=ctx.worker_jobs,
        cancel=ctx.cancel,
    )
    if isinstance(built, Err):
        return built

    optimized = optimize_artifacts(
        built.value,
        ctx.optimizer,
        timeout=cfg.optimize.timeout_seconds,
        console=ctx.console,
        verify=ctx.verify_reproducible or cfg.optimize.verify,
        jobs=ctx.worker_jobs,
        cancel=ctx.cancel,
    )
    if isinstance(optimized, Err):
        return optimized

    packaged = package_artifacts(optimized.value, tag)
    if isinstance(packaged, Err):
        return packaged

    if ctx.cancel.is_set():
        return Err(RunCancelled())

    manifest = build_manifest(packaged.value)
    out_dir = release_dir(ctx.dist_dir, tag)
    written = write_dist(out_dir, packaged.value, manifest)
    if isinstance(written, Err):
        return written

    return Ok(
        Bundle(directory=out_dir, files=packaged.value, manifest=manifest, paths=written.value)
    )


def collect_changelog(
    history: CommitHistory,
    tag: VersionTag,
    *,
    release_date: str,
    types: Sequence[str],
    console: ConsoleProtocol,
) -> Result[ChangelogSection, HistoryFailure]:
    """Changelog branch: commits since the previous release tag."""
    tag_text = tag.to_tag()
    previous = history.previous_tag(tag_text)
    if isinstance(previous, Err):
        return previous

    messages = history.messages(previous.value, tag_text)
    if isinstance(messages, Err):
        return messages

    since = previous.value or "repository start"
    console.print(f"{len(messages.value)} commits since {since}", Style.DIM)
    return Ok(build_section(messages.value, tag, release_date=release_date, types=types))


def run_pipeline(ctx: PipelineContext, tag_text: str) -> Result[ReleaseRecord, PipelineError]:
    parsed = parse_tag(tag_text)
    if isinstance(parsed, Err):
        return parsed
    tag = parsed.value

    kind = "pre-release" if tag.is_prerelease else "release"
    ctx.console.header(f"{kind} {tag} ({len(ctx.units)} contracts)")

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="wasmship-branch") as pool:
        bundle_future = pool.submit(build_bundle, ctx, tag)
        changelog_future = pool.submit(
            collect_changelog,
            ctx.history,
            tag,
            release_date=ctx.release_date,
            types=ctx.config.changelog.types,
            console=ctx.console,
        )
        wait((bundle_future, changelog_future), return_when=FIRST_COMPLETED)
        if changelog_future.done() and isinstance(changelog_future.result(), Err):
            ctx.cancel.set()
        bundle = bundle_future.result()
        section = changelog_future.result()

    # A cancelled bundle only means the changelog branch failed first.
    if isinstance(bundle, Err) and not isinstance(bundle.error, RunCancelled):
        return bundle
    if isinstance(section, Err):
        return section
    if isinstance(bundle, Err):
        return bundle

    ctx.console.success(f"bundle written to {bundle.value.directory}")

    body = render_body(section.value)
    request = ReleaseRequest(
        tag=tag,
        title=tag.to_tag(),
        body=body,
        files=bundle.value.paths,
    )
    return publish_release(ctx.host, request)
