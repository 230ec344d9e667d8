from __future__ import annotations

import threading
from collections.abc import Sequence

from wasmship.core.result import Err, Ok, Result
from wasmship.output.console import ConsoleProtocol, Style
from wasmship.release.errors import BuildFailure, RunCancelled
from wasmship.release.model import Artifact, ContractUnit
from wasmship.release.toolchain import Compiler
from wasmship.release.workers import run_fail_fast


def build_artifacts(
    units: Sequence[ContractUnit],
    compiler: Compiler,
    *,
    target: str,
    timeout: float | None,
    console: ConsoleProtocol,
    jobs: int = 0,
    cancel: threading.Event | None = None,
) -> Result[tuple[Artifact, ...], BuildFailure | RunCancelled]:
    """Compile every contract; one failure aborts the whole set.

    A bundle missing one contract is worse than no release, so there is no
    partial result.
    """

    def build_one(unit: ContractUnit) -> Result[Artifact, BuildFailure]:
        console.print(f"building {unit.name} ({target})", Style.DIM)
        compiled = compiler.compile(unit, target=target, timeout=timeout)
        if isinstance(compiled, Err):
            return Err(BuildFailure(contract=unit.name, toolchain_message=compiled.error))
        if not compiled.value:
            return Err(
                BuildFailure(contract=unit.name, toolchain_message="compiler produced no bytes")
            )
        console.success(f"built {unit.name} ({len(compiled.value)} bytes)")
        return Ok(Artifact(contract_name=unit.name, raw=compiled.value))

    result = run_fail_fast(units, build_one, jobs=jobs, cancel=cancel)
    if isinstance(result, Err):
        return result
    return Ok(tuple(result.value))
