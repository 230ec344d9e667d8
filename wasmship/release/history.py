from __future__ import annotations

from pathlib import Path
from typing import Protocol

from wasmship.core.result import Err, Ok, Result
from wasmship.platform.process import run as run_process
from wasmship.release.errors import HistoryFailure

_RECORD_SEP = "\x1e"
_NO_TAG_MARKERS = ("no names found", "no tags can describe", "cannot describe")


class CommitHistory(Protocol):
    def previous_tag(self, tag: str) -> Result[str | None, HistoryFailure]:
        """The release tag before `tag`, or None if `tag` is the first one."""
        ...

    def messages(self, start: str | None, end: str) -> Result[tuple[str, ...], HistoryFailure]:
        """Full commit messages in (start, end], oldest first."""
        ...


class GitHistory:
    """Commit history read from the local git checkout.

    CI must fetch tags and enough history (`fetch-depth: 0`) for the previous
    release tag to be reachable.
    """

    def __init__(self, *, repo_root: Path, timeout: float | None = 30.0) -> None:
        self._root = repo_root
        self._timeout = timeout

    def _git(self, *args: str) -> Result[str, HistoryFailure]:
        result = run_process(["git", *args], cwd=self._root, timeout=self._timeout)
        if isinstance(result, Err):
            return Err(HistoryFailure(reason=result.error.message))
        return Ok(result.value)

    def previous_tag(self, tag: str) -> Result[str | None, HistoryFailure]:
        verified = self._git("rev-parse", "--verify", "--quiet", f"{tag}^{{commit}}")
        if isinstance(verified, Err):
            return Err(HistoryFailure(reason=f"tag not found in local repository: {tag}"))

        # Root commit: nothing can precede it.
        parent = run_process(
            ["git", "rev-parse", "--verify", "--quiet", f"{tag}^"],
            cwd=self._root,
            timeout=self._timeout,
        )
        if isinstance(parent, Err):
            return Ok(None)

        described = run_process(
            ["git", "describe", "--tags", "--abbrev=0", "--match", "v[0-9]*", f"{tag}^"],
            cwd=self._root,
            timeout=self._timeout,
        )
        if isinstance(described, Err):
            text = described.error.stderr.lower()
            if any(marker in text for marker in _NO_TAG_MARKERS):
                return Ok(None)
            return Err(HistoryFailure(reason=described.error.message))

        previous = described.value.strip()
        return Ok(previous or None)

    def messages(self, start: str | None, end: str) -> Result[tuple[str, ...], HistoryFailure]:
        rev_range = f"{start}..{end}" if start else end
        out = self._git("log", "--reverse", "--no-merges", f"--format=%B{_RECORD_SEP}", rev_range)
        if isinstance(out, Err):
            return out
        records = (r.strip() for r in out.value.split(_RECORD_SEP))
        return Ok(tuple(r for r in records if r))
