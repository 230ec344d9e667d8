from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from wasmship.release.tag import VersionTag


@dataclass(frozen=True, slots=True)
class ContractUnit:
    """A contract crate the pipeline compiles without looking inside."""

    name: str
    source_path: Path


@dataclass(frozen=True, slots=True)
class Artifact:
    contract_name: str
    raw: bytes
    # Set exactly once by the optimizer stage (via dataclasses.replace).
    optimized: bytes | None = None


@dataclass(frozen=True, slots=True)
class PackagedFile:
    filename: str
    data: bytes


@dataclass(frozen=True, slots=True)
class ChecksumEntry:
    filename: str
    digest_hex: str


@dataclass(frozen=True, slots=True)
class ConventionalCommit:
    type: str
    scope: str | None
    description: str
    breaking: bool = False
    breaking_note: str | None = None
    body: str | None = None
    footers: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class ChangelogEntry:
    text: str
    note: str | None = None


@dataclass(frozen=True, slots=True)
class ChangelogSection:
    version_label: str
    is_prerelease: bool
    release_date: str
    grouped_entries: Mapping[str, tuple[ChangelogEntry, ...]]

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "grouped_entries", MappingProxyType(dict(self.grouped_entries))
        )

    @property
    def is_empty(self) -> bool:
        return not any(self.grouped_entries.values())


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Everything the hosting service needs to create one release."""

    tag: VersionTag
    title: str
    body: str
    files: tuple[Path, ...]

    @property
    def is_prerelease(self) -> bool:
        return self.tag.is_prerelease


@dataclass(frozen=True, slots=True)
class ReleaseRecord:
    tag: VersionTag
    is_prerelease: bool
    attached_files: frozenset[str]
    changelog_body: str
    url: str | None = None
