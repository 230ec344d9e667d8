"""Error types for the release pipeline.

Each failure is a frozen dataclass carried in an Err. Collaborator messages
(cargo, wasm-opt, git, gh) are kept verbatim so operators can diagnose a
failed run from its output alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from wasmship.core.config import ConfigError


@dataclass(frozen=True, slots=True)
class InvalidTagFormat:
    tag: str
    reason: str

    @property
    def message(self) -> str:
        return f"invalid tag {self.tag!r}: {self.reason}"


@dataclass(frozen=True, slots=True)
class BuildFailure:
    contract: str
    toolchain_message: str

    @property
    def message(self) -> str:
        return f"build failed for contract {self.contract}"


@dataclass(frozen=True, slots=True)
class OptimizationFailure:
    contract: str
    toolchain_message: str

    @property
    def message(self) -> str:
        return f"optimization failed for contract {self.contract}"


@dataclass(frozen=True, slots=True)
class DuplicateContractName:
    contract: str

    @property
    def message(self) -> str:
        return f"duplicate contract name: {self.contract}"


@dataclass(frozen=True, slots=True)
class PublishConflict:
    """A release for this exact tag already exists. Informational, not a defect."""

    tag: str

    @property
    def message(self) -> str:
        return f"release {self.tag} already exists; refusing to overwrite"


@dataclass(frozen=True, slots=True)
class PublishFailure:
    reason: str

    @property
    def message(self) -> str:
        return "failed to publish release"


@dataclass(frozen=True, slots=True)
class HistoryFailure:
    reason: str

    @property
    def message(self) -> str:
        return "failed to read commit history"


@dataclass(frozen=True, slots=True)
class DistWriteFailure:
    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"failed to write {self.path}"


@dataclass(frozen=True, slots=True)
class ChangelogWriteFailure:
    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"failed to update {self.path}"


@dataclass(frozen=True, slots=True)
class RunCancelled:
    """Work was skipped because another part of the run already failed."""

    @property
    def message(self) -> str:
        return "release run cancelled"


PipelineError = (
    InvalidTagFormat
    | BuildFailure
    | OptimizationFailure
    | DuplicateContractName
    | PublishConflict
    | PublishFailure
    | HistoryFailure
    | DistWriteFailure
    | ChangelogWriteFailure
    | RunCancelled
    | ConfigError
)
