"""Release bundle assembly.

Design goals:

- Deterministic file names: `<contract>-<version>.wasm`, stable across runs
- Publish exactly the optimized bytes that were checksummed
- One directory per tag under the dist dir, so runs never clobber each other
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

from wasmship.core.result import Err, Ok, Result
from wasmship.release.checksums import MANIFEST_FILENAME, ChecksumManifest
from wasmship.release.errors import DistWriteFailure, DuplicateContractName, OptimizationFailure
from wasmship.release.model import Artifact, PackagedFile
from wasmship.release.tag import VersionTag

ARTIFACT_SUFFIX = ".wasm"


def package_filename(contract_name: str, tag: VersionTag) -> str:
    return f"{contract_name}-{tag.version}{ARTIFACT_SUFFIX}"


def package_artifacts(
    artifacts: Sequence[Artifact], tag: VersionTag
) -> Result[tuple[PackagedFile, ...], DuplicateContractName | OptimizationFailure]:
    """Name every optimized artifact for `tag`, sorted by file name."""
    seen: set[str] = set()
    files: list[PackagedFile] = []
    for artifact in artifacts:
        name = artifact.contract_name
        if name in seen:
            return Err(DuplicateContractName(contract=name))
        seen.add(name)

        if artifact.optimized is None:
            return Err(
                OptimizationFailure(contract=name, toolchain_message="artifact was not optimized")
            )
        files.append(PackagedFile(filename=package_filename(name, tag), data=artifact.optimized))

    return Ok(tuple(sorted(files, key=lambda f: f.filename)))


def release_dir(dist_dir: Path, tag: VersionTag) -> Path:
    return dist_dir / tag.to_tag()


def _write_bytes_atomic(path: Path, data: bytes) -> None:
    tmp = Path(f"{path}.tmp")
    tmp.write_bytes(data)
    os.replace(tmp, path)


def write_dist(
    out_dir: Path,
    files: Sequence[PackagedFile],
    manifest: ChecksumManifest,
) -> Result[tuple[Path, ...], DistWriteFailure]:
    """Persist the packaged files and SHA256SUMS into `out_dir`.

    Artifacts left over from an earlier run for the same tag are removed, so
    the directory always matches its manifest. Returns the written paths,
    artifacts first and the manifest last.
    """
    keep = {f.filename for f in files}
    written: list[Path] = []
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        for stale in sorted(out_dir.glob(f"*{ARTIFACT_SUFFIX}")):
            if stale.name not in keep:
                stale.unlink()
        for f in files:
            path = out_dir / f.filename
            _write_bytes_atomic(path, f.data)
            written.append(path)
        manifest_path = out_dir / MANIFEST_FILENAME
        _write_bytes_atomic(manifest_path, manifest.render().encode("utf-8"))
        written.append(manifest_path)
    except OSError as e:
        return Err(DistWriteFailure(path=out_dir, reason=str(e)))

    return Ok(tuple(written))
