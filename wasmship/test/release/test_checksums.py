from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from wasmship.core.result import Err, Ok
from wasmship.release.checksums import (
    MANIFEST_FILENAME,
    build_manifest,
    parse_manifest,
    sha256_bytes,
    sha256_file,
    verify_dist,
)
from wasmship.release.model import ChecksumEntry, PackagedFile


def _files() -> list[PackagedFile]:
    return [
        PackagedFile(filename="proxy-1.2.3.wasm", data=b"\x00asm proxy"),
        PackagedFile(filename="certificate-1.2.3.wasm", data=b"\x00asm certificate"),
    ]


def test_sha256_helpers_agree(tmp_path: Path) -> None:
    data = b"\x00asm\x01\x00\x00\x00"
    path = tmp_path / "a.wasm"
    path.write_bytes(data)
    assert sha256_bytes(data) == hashlib.sha256(data).hexdigest()
    assert sha256_file(path) == sha256_bytes(data)


def test_manifest_sorted_by_filename() -> None:
    manifest = build_manifest(_files())
    assert manifest.filenames == ("certificate-1.2.3.wasm", "proxy-1.2.3.wasm")
    assert manifest.entries[0] == ChecksumEntry(
        filename="certificate-1.2.3.wasm",
        digest_hex=hashlib.sha256(b"\x00asm certificate").hexdigest(),
    )


def test_manifest_render_is_deterministic() -> None:
    first = build_manifest(_files()).render()
    second = build_manifest(list(reversed(_files()))).render()
    assert first == second
    lines = first.splitlines()
    assert len(lines) == 2
    digest, name = lines[0].split("  ")
    assert len(digest) == 64
    assert name == "certificate-1.2.3.wasm"
    assert first.endswith("\n")


def test_manifest_rejects_duplicates_and_self() -> None:
    with pytest.raises(ValueError, match="duplicate"):
        build_manifest([PackagedFile("a.wasm", b"1"), PackagedFile("a.wasm", b"2")])
    with pytest.raises(ValueError, match="cannot list itself"):
        build_manifest([PackagedFile(MANIFEST_FILENAME, b"")])


def test_parse_manifest() -> None:
    text = build_manifest(_files()).render()
    parsed = parse_manifest(text)
    assert isinstance(parsed, Ok)
    assert parsed.value.render() == text


def test_parse_manifest_rejects_garbage() -> None:
    result = parse_manifest("not-a-digest  file.wasm\n")
    assert isinstance(result, Err)
    assert "line 1" in result.error


def _write_dir(tmp_path: Path) -> Path:
    out = tmp_path / "v1.2.3"
    out.mkdir()
    for f in _files():
        (out / f.filename).write_bytes(f.data)
    (out / MANIFEST_FILENAME).write_text(build_manifest(_files()).render(), encoding="utf-8")
    return out


class TestVerifyDist:
    def test_all_files_verified(self, tmp_path: Path) -> None:
        result = verify_dist(_write_dir(tmp_path))
        assert isinstance(result, Ok)
        assert result.value.ok
        assert result.value.verified == ("certificate-1.2.3.wasm", "proxy-1.2.3.wasm")

    def test_tampered_file(self, tmp_path: Path) -> None:
        out = _write_dir(tmp_path)
        (out / "proxy-1.2.3.wasm").write_bytes(b"tampered")
        result = verify_dist(out)
        assert isinstance(result, Ok)
        assert not result.value.ok
        assert result.value.mismatched == ("proxy-1.2.3.wasm",)

    def test_missing_and_unlisted(self, tmp_path: Path) -> None:
        out = _write_dir(tmp_path)
        (out / "certificate-1.2.3.wasm").unlink()
        (out / "extra.wasm").write_bytes(b"x")
        result = verify_dist(out)
        assert isinstance(result, Ok)
        assert result.value.missing == ("certificate-1.2.3.wasm",)
        assert result.value.unlisted == ("extra.wasm",)
        assert not result.value.ok

    def test_no_manifest(self, tmp_path: Path) -> None:
        result = verify_dist(tmp_path)
        assert isinstance(result, Err)
        assert MANIFEST_FILENAME in result.error
