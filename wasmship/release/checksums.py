"""SHA-256 manifest generation and verification.

Manifest format (compatible with `sha256sum -c`):

    <64 hex chars><two spaces><filename>

one line per packaged file, sorted by filename. The manifest never lists
itself.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from wasmship.core.result import Err, Ok, Result
from wasmship.release.model import ChecksumEntry, PackagedFile

MANIFEST_FILENAME = "SHA256SUMS"

_LINE_RE = re.compile(r"^([0-9a-f]{64})  (\S(?:.*\S)?)$")


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


@dataclass(frozen=True, slots=True)
class ChecksumManifest:
    entries: tuple[ChecksumEntry, ...]

    def render(self) -> str:
        return "".join(f"{e.digest_hex}  {e.filename}\n" for e in self.entries)

    @property
    def filenames(self) -> tuple[str, ...]:
        return tuple(e.filename for e in self.entries)


def build_manifest(files: Iterable[PackagedFile]) -> ChecksumManifest:
    """Digest the exact bytes that will be published.

    Raises:
        ValueError: If two files share a name or a file is named like the
            manifest itself (both are pipeline bugs, not user errors).
    """
    entries: dict[str, ChecksumEntry] = {}
    for f in files:
        if f.filename == MANIFEST_FILENAME:
            raise ValueError(f"{MANIFEST_FILENAME} cannot list itself")
        if f.filename in entries:
            raise ValueError(f"duplicate file in manifest: {f.filename}")
        entries[f.filename] = ChecksumEntry(filename=f.filename, digest_hex=sha256_bytes(f.data))
    return ChecksumManifest(entries=tuple(entries[name] for name in sorted(entries)))


def parse_manifest(text: str) -> Result[ChecksumManifest, str]:
    entries: list[ChecksumEntry] = []
    seen: set[str] = set()
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        m = _LINE_RE.match(line)
        if m is None:
            return Err(f"line {lineno}: expected '<sha256>  <filename>'")
        digest, filename = m.group(1), m.group(2)
        if filename in seen:
            return Err(f"line {lineno}: duplicate entry for {filename}")
        seen.add(filename)
        entries.append(ChecksumEntry(filename=filename, digest_hex=digest))
    return Ok(ChecksumManifest(entries=tuple(sorted(entries, key=lambda e: e.filename))))


@dataclass(frozen=True, slots=True)
class VerifyReport:
    verified: tuple[str, ...]
    mismatched: tuple[str, ...]
    missing: tuple[str, ...]
    # Files in the directory that the manifest does not cover.
    unlisted: tuple[str, ...]

    @property
    def ok(self) -> bool:
        return not (self.mismatched or self.missing or self.unlisted)


def verify_dist(directory: Path) -> Result[VerifyReport, str]:
    """Check every file listed in `<directory>/SHA256SUMS` against its digest."""
    manifest_path = directory / MANIFEST_FILENAME
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(f"cannot read {manifest_path}: {e}")

    parsed = parse_manifest(text)
    if isinstance(parsed, Err):
        return Err(f"{manifest_path}: {parsed.error}")

    verified: list[str] = []
    mismatched: list[str] = []
    missing: list[str] = []
    for entry in parsed.value.entries:
        path = directory / entry.filename
        if not path.is_file():
            missing.append(entry.filename)
        elif sha256_file(path) == entry.digest_hex:
            verified.append(entry.filename)
        else:
            mismatched.append(entry.filename)

    listed = set(parsed.value.filenames) | {MANIFEST_FILENAME}
    unlisted = sorted(p.name for p in directory.iterdir() if p.is_file() and p.name not in listed)

    return Ok(
        VerifyReport(
            verified=tuple(verified),
            mismatched=tuple(mismatched),
            missing=tuple(missing),
            unlisted=tuple(unlisted),
        )
    )
