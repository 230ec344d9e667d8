"""Project root detection and paths.

The project root is the repository that holds the contracts being released.
It is identified by a `wasmship.toml` file, or failing that by the enclosing
git checkout (so a repo without config still releases with defaults).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .config import CONFIG_FILENAME
from .result import Err, Ok, Result

__all__ = [
    "Project",
    "ProjectError",
    "ProjectSource",
    "detect_project",
    "find_project_upward",
    "is_project_root",
]

ProjectSource = Literal["env", "config", "git"]


@dataclass(frozen=True)
class ProjectError:
    """Error when the project root cannot be detected."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """A detected contracts repository."""

    root: Path
    source: ProjectSource = "config"

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    @property
    def target_dir(self) -> Path:
        """Shared cargo target directory for every contract build."""
        return self.root / "target"

    def dist_dir(self, relative: str) -> Path:
        return self.root / relative

    def __str__(self) -> str:
        return str(self.root)


def is_project_root(path: Path) -> bool:
    return (path / CONFIG_FILENAME).is_file()


def find_project_upward(start: Path) -> Path | None:
    """Search upward from start for a directory holding wasmship.toml."""
    for parent in (start, *start.parents):
        if is_project_root(parent):
            return parent
    return None


def _find_git_root_upward(start: Path) -> Path | None:
    for parent in (start, *start.parents):
        if (parent / ".git").exists():
            return parent
    return None


def detect_project(
    *,
    start_dir: Path | None = None,
    env_var: str = "WASMSHIP_ROOT",
) -> Result[Project, ProjectError]:
    """Detect the project root directory.

    Detection order:
    1. WASMSHIP_ROOT environment variable (must be an existing directory)
    2. Search upward from start_dir (or cwd) for wasmship.toml
    3. Search upward for the enclosing git checkout
    """
    env_value = os.environ.get(env_var)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if env_path.is_dir():
            return Ok(Project(root=env_path, source="env"))
        return Err(
            ProjectError(
                message=f"${env_var} is set to '{env_value}' but it is not a directory",
            )
        )

    search_start = (start_dir or Path.cwd()).resolve()
    found = find_project_upward(search_start)
    if found is not None:
        return Ok(Project(root=found, source="config"))

    git_root = _find_git_root_upward(search_start)
    if git_root is not None:
        return Ok(Project(root=git_root, source="git"))

    return Err(
        ProjectError(
            message=f"Could not find project root ({CONFIG_FILENAME} or .git not found)",
            searched_from=search_start,
        )
    )
