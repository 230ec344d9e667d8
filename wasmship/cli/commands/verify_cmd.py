from __future__ import annotations

from pathlib import Path

import typer

from wasmship.cli.commands._helpers import exit_with_code
from wasmship.core.errors import ErrorCode
from wasmship.core.result import Err
from wasmship.output.console import RichConsole, Style
from wasmship.release.checksums import MANIFEST_FILENAME, verify_dist


def verify(
    directory: Path = typer.Argument(..., help=f"Release directory holding {MANIFEST_FILENAME}"),
) -> None:
    """Check a release directory against its SHA256SUMS manifest."""
    console = RichConsole()
    result = verify_dist(directory)
    if isinstance(result, Err):
        exit_with_code(int(ErrorCode.IO_ERROR), result.error)

    report = result.value
    for name in report.verified:
        console.success(name)
    for name in report.mismatched:
        console.error(f"{name}: checksum mismatch")
    for name in report.missing:
        console.error(f"{name}: missing")
    for name in report.unlisted:
        console.warning(f"{name}: not listed in {MANIFEST_FILENAME}")

    if not report.ok:
        raise typer.Exit(code=int(ErrorCode.BUILD_ERROR))
    console.print(f"{len(report.verified)} files verified", Style.DIM)
