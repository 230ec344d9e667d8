"""End-to-end pipeline runs with deterministic collaborators."""

from __future__ import annotations

import hashlib
import threading
from dataclasses import dataclass, field
from pathlib import Path

from wasmship.core.config import Config
from wasmship.core.result import Err, Ok, Result
from wasmship.output.console import MockConsole
from wasmship.release.checksums import MANIFEST_FILENAME, verify_dist
from wasmship.release.errors import (
    BuildFailure,
    HistoryFailure,
    InvalidTagFormat,
    PublishConflict,
)
from wasmship.release.model import ContractUnit
from wasmship.release.pipeline import PipelineContext, collect_changelog, run_pipeline
from wasmship.release.publisher import InMemoryReleaseHost
from wasmship.release.tag import VersionTag


@dataclass
class FakeCompiler:
    failures: dict[str, str] = field(default_factory=dict)
    # When set, each compile waits for this event first.
    gate: threading.Event | None = None
    compiled: list[str] = field(default_factory=list)

    def compile(
        self, unit: ContractUnit, *, target: str, timeout: float | None
    ) -> Result[bytes, str]:
        del target, timeout
        self.compiled.append(unit.name)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if unit.name in self.failures:
            return Err(self.failures[unit.name])
        return Ok(b"raw:" + unit.name.encode())


@dataclass
class PrefixOptimizer:
    calls: int = 0

    def optimize(self, data: bytes, *, timeout: float | None) -> Result[bytes, str]:
        del timeout
        self.calls += 1
        return Ok(b"opt:" + data.removeprefix(b"raw:"))


@dataclass
class FakeHistory:
    previous: str | None = None
    commit_messages: tuple[str, ...] = ()
    failure: str | None = None

    def previous_tag(self, tag: str) -> Result[str | None, HistoryFailure]:
        del tag
        if self.failure is not None:
            return Err(HistoryFailure(reason=self.failure))
        return Ok(self.previous)

    def messages(self, start: str | None, end: str) -> Result[tuple[str, ...], HistoryFailure]:
        del start, end
        return Ok(self.commit_messages)


COMMITS = (
    "feat(alpha): add transfer",
    "fix: reject zero amounts",
    "chore: bump soroban-sdk",
)


def _context(
    tmp_path: Path,
    *,
    compiler: FakeCompiler | None = None,
    history: FakeHistory | None = None,
    host: InMemoryReleaseHost | None = None,
    console: MockConsole | None = None,
    optimizer: PrefixOptimizer | None = None,
    names: tuple[str, ...] = ("alpha", "beta"),
    jobs: int | None = None,
    cancel: threading.Event | None = None,
) -> PipelineContext:
    units = tuple(ContractUnit(name=n, source_path=tmp_path / "contracts" / n) for n in names)
    return PipelineContext(
        project_root=tmp_path,
        config=Config(),
        console=console or MockConsole(),
        units=units,
        compiler=compiler or FakeCompiler(),
        optimizer=optimizer or PrefixOptimizer(),
        history=history or FakeHistory(previous="v1.2.2", commit_messages=COMMITS),
        host=host or InMemoryReleaseHost(),
        release_date="2024-06-01",
        jobs=jobs,
        cancel=cancel or threading.Event(),
    )


def test_release_publishes_every_contract_with_manifest(tmp_path: Path) -> None:
    host = InMemoryReleaseHost()
    result = run_pipeline(_context(tmp_path, host=host), "v1.2.3")

    assert isinstance(result, Ok)
    record = result.value
    assert record.tag == VersionTag(1, 2, 3)
    assert record.is_prerelease is False
    assert record.attached_files == frozenset(
        {"alpha-1.2.3.wasm", "beta-1.2.3.wasm", MANIFEST_FILENAME}
    )
    assert record.changelog_body == (
        "### Added\n\n- **alpha:** add transfer\n\n### Fixed\n\n- reject zero amounts\n"
    )

    out = tmp_path / "dist" / "v1.2.3"
    manifest_lines = (out / MANIFEST_FILENAME).read_text(encoding="utf-8").splitlines()
    assert manifest_lines == [
        f"{hashlib.sha256(b'opt:alpha').hexdigest()}  alpha-1.2.3.wasm",
        f"{hashlib.sha256(b'opt:beta').hexdigest()}  beta-1.2.3.wasm",
    ]
    assert (out / "alpha-1.2.3.wasm").read_bytes() == b"opt:alpha"

    verified = verify_dist(out)
    assert isinstance(verified, Ok)
    assert verified.value.ok

    request = host.releases["v1.2.3"]
    assert request.title == "v1.2.3"
    assert [p.name for p in request.files] == [
        "alpha-1.2.3.wasm",
        "beta-1.2.3.wasm",
        MANIFEST_FILENAME,
    ]


def test_prerelease_tag(tmp_path: Path) -> None:
    host = InMemoryReleaseHost()
    result = run_pipeline(_context(tmp_path, host=host), "v2.0.0-rc.1")

    assert isinstance(result, Ok)
    assert result.value.is_prerelease is True
    assert "alpha-2.0.0-rc.1.wasm" in result.value.attached_files
    assert (tmp_path / "dist" / "v2.0.0-rc.1" / "beta-2.0.0-rc.1.wasm").is_file()
    assert host.releases["v2.0.0-rc.1"].is_prerelease


def test_second_run_for_same_tag_conflicts(tmp_path: Path) -> None:
    host = InMemoryReleaseHost()
    first = run_pipeline(_context(tmp_path, host=host), "v1.2.3")
    assert isinstance(first, Ok)
    original = host.releases["v1.2.3"]

    second = run_pipeline(_context(tmp_path, host=host), "v1.2.3")

    assert second == Err(PublishConflict(tag="v1.2.3"))
    assert host.releases["v1.2.3"] is original
    assert len(host.releases) == 1


def test_build_failure_publishes_nothing(tmp_path: Path) -> None:
    host = InMemoryReleaseHost()
    compiler = FakeCompiler(failures={"beta": "error: could not compile `beta`"})
    result = run_pipeline(_context(tmp_path, compiler=compiler, host=host), "v1.2.3")

    assert result == Err(
        BuildFailure(contract="beta", toolchain_message="error: could not compile `beta`")
    )
    assert host.releases == {}
    assert not (tmp_path / "dist" / "v1.2.3" / MANIFEST_FILENAME).exists()


def test_history_failure_publishes_nothing(tmp_path: Path) -> None:
    host = InMemoryReleaseHost()
    history = FakeHistory(failure="shallow clone")
    result = run_pipeline(_context(tmp_path, history=history, host=host), "v1.2.3")

    assert result == Err(HistoryFailure(reason="shallow clone"))
    assert host.releases == {}


def test_history_failure_stops_remaining_builds(tmp_path: Path) -> None:
    cancel = threading.Event()
    # The first compile is held until the run is cancelled; with one worker
    # nothing else may start after that.
    compiler = FakeCompiler(gate=cancel)
    optimizer = PrefixOptimizer()
    host = InMemoryReleaseHost()
    ctx = _context(
        tmp_path,
        compiler=compiler,
        optimizer=optimizer,
        history=FakeHistory(failure="fatal: ambiguous argument 'v1.2.3'"),
        host=host,
        names=("alpha", "beta", "gamma"),
        jobs=1,
        cancel=cancel,
    )

    result = run_pipeline(ctx, "v1.2.3")

    assert result == Err(HistoryFailure(reason="fatal: ambiguous argument 'v1.2.3'"))
    assert cancel.is_set()
    assert compiler.compiled in ([], ["alpha"])
    assert optimizer.calls == 0
    assert not (tmp_path / "dist").exists()
    assert host.releases == {}


def test_build_failure_skips_sibling_contracts(tmp_path: Path) -> None:
    compiler = FakeCompiler(failures={"alpha": "error[E0425]: cannot find value"})
    optimizer = PrefixOptimizer()
    ctx = _context(
        tmp_path,
        compiler=compiler,
        optimizer=optimizer,
        names=("alpha", "beta", "gamma", "delta"),
        jobs=1,
    )

    result = run_pipeline(ctx, "v1.2.3")

    assert result == Err(
        BuildFailure(contract="alpha", toolchain_message="error[E0425]: cannot find value")
    )
    assert compiler.compiled == ["alpha"]
    assert optimizer.calls == 0
    assert not (tmp_path / "dist").exists()


def test_malformed_tag_stops_before_any_work(tmp_path: Path) -> None:
    console = MockConsole()
    result = run_pipeline(_context(tmp_path, console=console), "1.2.3")

    assert isinstance(result, Err)
    assert isinstance(result.error, InvalidTagFormat)
    assert console.outputs == []
    assert not (tmp_path / "dist").exists()


def test_release_with_no_notable_commits(tmp_path: Path) -> None:
    history = FakeHistory(previous="v1.2.2", commit_messages=("chore: tidy", "ci: cache"))
    result = run_pipeline(_context(tmp_path, history=history), "v1.2.3")

    assert isinstance(result, Ok)
    assert result.value.changelog_body == "_No notable changes._\n"


def test_collect_changelog_reports_range() -> None:
    console = MockConsole()
    result = collect_changelog(
        FakeHistory(previous=None, commit_messages=("feat: first",)),
        VersionTag(0, 1, 0),
        release_date="2024-01-01",
        types=("feat",),
        console=console,
    )
    assert isinstance(result, Ok)
    assert result.value.version_label == "0.1.0"
    assert console.find("1 commits since repository start")
