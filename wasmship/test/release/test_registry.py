from __future__ import annotations

from pathlib import Path

from wasmship.core.config import Config, ContractConfig
from wasmship.core.result import Err, Ok
from wasmship.release.registry import resolve_contracts


def _crate(root: Path, name: str) -> Path:
    path = root / "contracts" / name
    path.mkdir(parents=True)
    (path / "Cargo.toml").write_text(f'[package]\nname = "{name}"\n', encoding="utf-8")
    return path


def test_discovers_crates_sorted(tmp_path: Path) -> None:
    _crate(tmp_path, "proxy")
    _crate(tmp_path, "certificate")
    (tmp_path / "contracts" / "notes").mkdir()

    result = resolve_contracts(project_root=tmp_path, config=Config())
    assert isinstance(result, Ok)
    assert [u.name for u in result.value] == ["certificate", "proxy"]
    assert result.value[0].source_path == (tmp_path / "contracts" / "certificate").resolve()


def test_exclude_skips_support_crates(tmp_path: Path) -> None:
    _crate(tmp_path, "proxy")
    _crate(tmp_path, "shared")

    config = Config(contracts_exclude=("shared",))
    result = resolve_contracts(project_root=tmp_path, config=config)
    assert isinstance(result, Ok)
    assert [u.name for u in result.value] == ["proxy"]


def test_explicit_list_keeps_order(tmp_path: Path) -> None:
    _crate(tmp_path, "proxy")
    (tmp_path / "crates" / "cert").mkdir(parents=True)
    config = Config(
        contracts=(
            ContractConfig(name="proxy", path="contracts/proxy"),
            ContractConfig(name="certificate", path="crates/cert"),
        )
    )
    result = resolve_contracts(project_root=tmp_path, config=config)
    assert isinstance(result, Ok)
    assert [u.name for u in result.value] == ["proxy", "certificate"]
    assert result.value[1].source_path == (tmp_path / "crates" / "cert").resolve()


def test_explicit_missing_source(tmp_path: Path) -> None:
    config = Config(contracts=(ContractConfig(name="ghost", path="contracts/ghost"),))
    result = resolve_contracts(project_root=tmp_path, config=config)
    assert isinstance(result, Err)
    assert "ghost" in result.error.message


def test_missing_contracts_dir(tmp_path: Path) -> None:
    result = resolve_contracts(project_root=tmp_path, config=Config())
    assert isinstance(result, Err)
    assert "contracts directory not found" in result.error.message


def test_no_contracts(tmp_path: Path) -> None:
    (tmp_path / "contracts").mkdir()
    result = resolve_contracts(project_root=tmp_path, config=Config())
    assert isinstance(result, Err)
    assert result.error.message == "no contracts to release"
