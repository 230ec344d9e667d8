"""Typed configuration loading and access.

This module maps the wasmship.toml structure onto frozen dataclasses. Every
section is optional; missing keys fall back to the defaults below.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_float,
    get_int,
    get_list,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "BuildConfig",
    "ChangelogConfig",
    "Config",
    "ConfigError",
    "ContractConfig",
    "DistConfig",
    "OptimizeConfig",
    "PublishConfig",
    "load_config",
    "load_config_or_default",
    "CONFIG_FILENAME",
    "DEFAULT_CHANGELOG_TYPES",
]

CONFIG_FILENAME = "wasmship.toml"

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

DEFAULT_TARGET = "wasm32-unknown-unknown"
DEFAULT_COMPILE_TIMEOUT_SECONDS = 20 * 60.0

DEFAULT_OPTIMIZER_TOOL = "wasm-opt"
DEFAULT_OPTIMIZER_ARGS = ("-Oz",)
DEFAULT_OPTIMIZE_TIMEOUT_SECONDS = 5 * 60.0

DEFAULT_CHANGELOG_TYPES = ("feat", "fix", "perf", "refactor", "revert", "docs")
DEFAULT_CHANGELOG_FILE = "CHANGELOG.md"
DEFAULT_HISTORY_TIMEOUT_SECONDS = 30.0

DEFAULT_PUBLISH_TIMEOUT_SECONDS = 60.0

DEFAULT_DIST_DIR = "dist"
DEFAULT_CONTRACTS_DIR = "contracts"

_CONTRACT_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")
_COMMIT_TYPE_RE = re.compile(r"^[a-z]+$")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BuildConfig:
    target: str = DEFAULT_TARGET
    timeout_seconds: float = DEFAULT_COMPILE_TIMEOUT_SECONDS
    # 0 means one worker per contract.
    jobs: int = 0


@dataclass(frozen=True, slots=True)
class OptimizeConfig:
    tool: str = DEFAULT_OPTIMIZER_TOOL
    args: tuple[str, ...] = DEFAULT_OPTIMIZER_ARGS
    timeout_seconds: float = DEFAULT_OPTIMIZE_TIMEOUT_SECONDS
    verify: bool = False


@dataclass(frozen=True, slots=True)
class ChangelogConfig:
    types: tuple[str, ...] = DEFAULT_CHANGELOG_TYPES
    file: str = DEFAULT_CHANGELOG_FILE
    timeout_seconds: float = DEFAULT_HISTORY_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class PublishConfig:
    repo: str | None = None  # owner/name; None lets gh infer it from the checkout
    timeout_seconds: float = DEFAULT_PUBLISH_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class DistConfig:
    dir: str = DEFAULT_DIST_DIR


@dataclass(frozen=True, slots=True)
class ContractConfig:
    """A contract registered explicitly in wasmship.toml."""

    name: str
    path: str


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    build: BuildConfig = field(default_factory=BuildConfig)
    optimize: OptimizeConfig = field(default_factory=OptimizeConfig)
    changelog: ChangelogConfig = field(default_factory=ChangelogConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)
    dist: DistConfig = field(default_factory=DistConfig)
    contracts: tuple[ContractConfig, ...] = ()
    contracts_dir: str = DEFAULT_CONTRACTS_DIR
    contracts_exclude: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: When a value is present but invalid.
        """
        build: StrDict = get_table(data, "build") or {}
        optimize: StrDict = get_table(data, "optimize") or {}
        changelog: StrDict = get_table(data, "changelog") or {}
        publish: StrDict = get_table(data, "publish") or {}
        dist: StrDict = get_table(data, "dist") or {}

        jobs = get_int(build, "jobs")
        if jobs is not None and jobs < 0:
            raise ValueError(f"build.jobs must be >= 0, got {jobs}")

        args = get_str_list(optimize, "args")
        if "args" in optimize and args is None:
            raise ValueError("optimize.args must be a list of strings")

        types = get_str_list(changelog, "types")
        if types is not None:
            types = [t.lower() for t in types]
            bad = [t for t in types if not _COMMIT_TYPE_RE.match(t)]
            if bad:
                raise ValueError(f"invalid changelog.types entries: {', '.join(bad)}")

        return cls(
            build=BuildConfig(
                target=get_str(build, "target") or DEFAULT_TARGET,
                timeout_seconds=_timeout(build, DEFAULT_COMPILE_TIMEOUT_SECONDS),
                jobs=jobs or 0,
            ),
            optimize=OptimizeConfig(
                tool=get_str(optimize, "tool") or DEFAULT_OPTIMIZER_TOOL,
                args=tuple(args) if args is not None else DEFAULT_OPTIMIZER_ARGS,
                timeout_seconds=_timeout(optimize, DEFAULT_OPTIMIZE_TIMEOUT_SECONDS),
                verify=bool(get_bool(optimize, "verify")),
            ),
            changelog=ChangelogConfig(
                types=tuple(types) if types is not None else DEFAULT_CHANGELOG_TYPES,
                file=get_str(changelog, "file") or DEFAULT_CHANGELOG_FILE,
                timeout_seconds=_timeout(changelog, DEFAULT_HISTORY_TIMEOUT_SECONDS),
            ),
            publish=PublishConfig(
                repo=get_str(publish, "repo"),
                timeout_seconds=_timeout(publish, DEFAULT_PUBLISH_TIMEOUT_SECONDS),
            ),
            dist=DistConfig(dir=get_str(dist, "dir") or DEFAULT_DIST_DIR),
            contracts=_parse_contracts(data),
            contracts_dir=get_str(data, "contracts_dir") or DEFAULT_CONTRACTS_DIR,
            contracts_exclude=tuple(get_str_list(data, "contracts_exclude") or ()),
        )


def _timeout(table: Mapping[str, object], default: float) -> float:
    value = get_float(table, "timeout_seconds")
    if value is None:
        return default
    if value <= 0:
        raise ValueError(f"timeout_seconds must be > 0, got {value}")
    return value


def _parse_contracts(data: Mapping[str, object]) -> tuple[ContractConfig, ...]:
    raw = get_list(data, "contracts")
    if raw is None:
        return ()

    out: list[ContractConfig] = []
    seen: set[str] = set()
    for item in raw:
        table = as_str_dict(item)
        if table is None:
            raise ValueError("each [[contracts]] entry must be a table")
        name = get_str(table, "name")
        if name is None or not _CONTRACT_NAME_RE.match(name):
            raise ValueError(f"invalid contract name: {table.get('name')!r}")
        if name in seen:
            raise ValueError(f"duplicate contract name: {name}")
        seen.add(name)
        path = get_str(table, "path") or f"{DEFAULT_CONTRACTS_DIR}/{name}"
        out.append(ContractConfig(name=name, path=path))
    return tuple(out)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to wasmship.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Like load_config, but a missing file yields the default Config.

    A file that exists but is invalid is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
