from __future__ import annotations

from pathlib import Path

import pytest
import typer

from wasmship.cli.commands.contracts_cmd import contracts
from wasmship.core.errors import ErrorCode


def _crate(root: Path, name: str) -> None:
    crate = root / "contracts" / name
    crate.mkdir(parents=True)
    (crate / "Cargo.toml").write_text(f'[package]\nname = "{name}"\n', encoding="utf-8")


def test_lists_discovered_contracts(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _crate(tmp_path, "proxy")
    _crate(tmp_path, "certificate")
    (tmp_path / "contracts" / "notes").mkdir()
    monkeypatch.setenv("WASMSHIP_ROOT", str(tmp_path))

    contracts()

    out = capsys.readouterr().out
    assert "2 contracts (wasm32-unknown-unknown)" in out
    assert out.index("certificate") < out.index("proxy")
    assert "contracts/certificate" in out
    assert "notes" not in out
    assert "(discovered; no wasmship.toml)" in out


def test_explicit_contracts_from_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _crate(tmp_path, "token")
    (tmp_path / "wasmship.toml").write_text(
        '[[contracts]]\nname = "token"\npath = "contracts/token"\n', encoding="utf-8"
    )
    monkeypatch.setenv("WASMSHIP_ROOT", str(tmp_path))

    contracts()

    out = capsys.readouterr().out
    assert "1 contracts" in out
    assert "token" in out
    assert "discovered" not in out


def test_missing_contracts_dir_is_env_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("WASMSHIP_ROOT", str(tmp_path))

    with pytest.raises(typer.Exit) as exc:
        contracts()

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
    assert "contracts directory not found" in capsys.readouterr().out
