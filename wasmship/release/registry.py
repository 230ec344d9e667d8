from __future__ import annotations

from pathlib import Path

from wasmship.core.config import Config, ConfigError
from wasmship.core.result import Err, Ok, Result
from wasmship.release.model import ContractUnit


def resolve_contracts(
    *, project_root: Path, config: Config
) -> Result[tuple[ContractUnit, ...], ConfigError]:
    """Enumerate the contracts to release, in a stable order.

    Explicit `[[contracts]]` entries are used as listed. Without them, every
    `<contracts_dir>/<name>/Cargo.toml` is a contract unless its directory
    name appears in `contracts_exclude`.
    """
    if config.contracts:
        units = tuple(
            ContractUnit(name=c.name, source_path=(project_root / c.path).resolve())
            for c in config.contracts
        )
    else:
        base = project_root / config.contracts_dir
        if not base.is_dir():
            return Err(ConfigError(f"contracts directory not found: {base}", path=base))
        excluded = set(config.contracts_exclude)
        units = tuple(
            ContractUnit(name=child.name, source_path=child.resolve())
            for child in sorted(base.iterdir())
            if child.is_dir()
            and (child / "Cargo.toml").is_file()
            and child.name not in excluded
        )

    if not units:
        return Err(ConfigError("no contracts to release", path=project_root))

    missing = [u for u in units if not u.source_path.is_dir()]
    if missing:
        return Err(
            ConfigError(
                f"contract source not found: {missing[0].name} ({missing[0].source_path})",
                path=missing[0].source_path,
            )
        )

    return Ok(units)
