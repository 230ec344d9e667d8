from __future__ import annotations

import threading
from collections.abc import Sequence
from dataclasses import replace

from wasmship.core.result import Err, Ok, Result
from wasmship.output.console import ConsoleProtocol, Style
from wasmship.release.errors import OptimizationFailure, RunCancelled
from wasmship.release.model import Artifact
from wasmship.release.toolchain import Optimizer
from wasmship.release.workers import run_fail_fast


def optimize_artifact(
    artifact: Artifact,
    optimizer: Optimizer,
    *,
    timeout: float | None,
    verify: bool = False,
) -> Result[Artifact, OptimizationFailure]:
    """Return a copy of `artifact` with its optimized bytes set.

    With `verify`, the optimizer runs a second time on the same raw bytes and
    the two outputs must be identical (reproducible builds depend on it).
    """
    name = artifact.contract_name
    if artifact.optimized is not None:
        return Err(
            OptimizationFailure(contract=name, toolchain_message="artifact already optimized")
        )

    first = optimizer.optimize(artifact.raw, timeout=timeout)
    if isinstance(first, Err):
        return Err(OptimizationFailure(contract=name, toolchain_message=first.error))
    if not first.value:
        return Err(
            OptimizationFailure(contract=name, toolchain_message="optimizer produced no bytes")
        )

    if verify:
        second = optimizer.optimize(artifact.raw, timeout=timeout)
        if isinstance(second, Err):
            return Err(OptimizationFailure(contract=name, toolchain_message=second.error))
        if second.value != first.value:
            return Err(
                OptimizationFailure(
                    contract=name,
                    toolchain_message="non-deterministic optimizer output",
                )
            )

    return Ok(replace(artifact, optimized=first.value))


def optimize_artifacts(
    artifacts: Sequence[Artifact],
    optimizer: Optimizer,
    *,
    timeout: float | None,
    console: ConsoleProtocol,
    verify: bool = False,
    jobs: int = 0,
    cancel: threading.Event | None = None,
) -> Result[tuple[Artifact, ...], OptimizationFailure | RunCancelled]:
    def optimize_one(artifact: Artifact) -> Result[Artifact, OptimizationFailure]:
        console.print(f"optimizing {artifact.contract_name}", Style.DIM)
        result = optimize_artifact(artifact, optimizer, timeout=timeout, verify=verify)
        if isinstance(result, Ok):
            size = len(result.value.optimized or b"")
            console.success(
                f"optimized {artifact.contract_name} ({len(artifact.raw)} -> {size} bytes)"
            )
        return result

    result = run_fail_fast(artifacts, optimize_one, jobs=jobs, cancel=cancel)
    if isinstance(result, Err):
        return result
    return Ok(tuple(result.value))
