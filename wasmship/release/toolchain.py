"""External toolchain capabilities.

The builder and optimizer stages only see the two small protocols below;
tests substitute deterministic fakes, production uses cargo and wasm-opt.
Errors are returned as the tool's own message, verbatim.
"""

from __future__ import annotations

import tempfile
import tomllib
from pathlib import Path
from typing import Protocol

from wasmship.core.result import Err, Ok, Result
from wasmship.core.structured import as_str_dict, get_str, get_table
from wasmship.platform.process import run as run_process
from wasmship.release.model import ContractUnit


class Compiler(Protocol):
    def compile(
        self, unit: ContractUnit, *, target: str, timeout: float | None
    ) -> Result[bytes, str]: ...


class Optimizer(Protocol):
    def optimize(self, data: bytes, *, timeout: float | None) -> Result[bytes, str]: ...


def crate_artifact_name(manifest_path: Path, *, fallback: str) -> str:
    """File stem cargo gives the compiled library of a crate.

    `[lib].name` wins over `[package].name`; dashes become underscores.
    """
    name = fallback
    try:
        data = as_str_dict(tomllib.loads(manifest_path.read_text(encoding="utf-8")))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        data = None

    if data is not None:
        lib = get_table(data, "lib") or {}
        package = get_table(data, "package") or {}
        name = get_str(lib, "name") or get_str(package, "name") or fallback
    return name.replace("-", "_")


class CargoCompiler:
    """Compile contract crates with `cargo build --release`.

    All crates share one target directory so a cargo workspace is compiled
    once; concurrent builds serialize on cargo's own lock.
    """

    def __init__(self, *, project_root: Path, target_dir: Path, cargo: str = "cargo") -> None:
        self._root = project_root
        self._target_dir = target_dir
        self._cargo = cargo

    def compile(
        self, unit: ContractUnit, *, target: str, timeout: float | None
    ) -> Result[bytes, str]:
        manifest = unit.source_path / "Cargo.toml"
        if not manifest.is_file():
            return Err(f"Cargo.toml not found: {manifest}")

        cmd = [
            self._cargo,
            "build",
            "--release",
            "--target",
            target,
            "--manifest-path",
            str(manifest),
            "--target-dir",
            str(self._target_dir),
        ]
        result = run_process(cmd, cwd=self._root, timeout=timeout)
        if isinstance(result, Err):
            return Err(result.error.message)

        stem = crate_artifact_name(manifest, fallback=unit.name)
        output = self._target_dir / target / "release" / f"{stem}.wasm"
        try:
            return Ok(output.read_bytes())
        except OSError as e:
            return Err(f"build output not found: {output} ({e})")


class WasmOptOptimizer:
    """Optimize modules with binaryen's wasm-opt (`-Oz` by default).

    Each call works in a private temp directory, so concurrent calls never
    share files.
    """

    def __init__(self, *, tool: str = "wasm-opt", args: tuple[str, ...] = ("-Oz",)) -> None:
        self._tool = tool
        self._args = args

    def optimize(self, data: bytes, *, timeout: float | None) -> Result[bytes, str]:
        with tempfile.TemporaryDirectory(prefix="wasmship-opt-") as tmp:
            work = Path(tmp)
            src = work / "input.wasm"
            dst = work / "output.wasm"
            src.write_bytes(data)

            cmd = [self._tool, *self._args, str(src), "-o", str(dst)]
            result = run_process(cmd, cwd=work, timeout=timeout)
            if isinstance(result, Err):
                return Err(result.error.message)

            try:
                return Ok(dst.read_bytes())
            except OSError as e:
                return Err(f"{self._tool} produced no output ({e})")
