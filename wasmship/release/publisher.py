from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from wasmship.core.result import Err, Ok, Result
from wasmship.output.console import ConsoleProtocol, Style
from wasmship.platform.process import run as run_process
from wasmship.release.errors import PublishConflict, PublishFailure
from wasmship.release.model import ReleaseRecord, ReleaseRequest


class ReleaseHost(Protocol):
    def release_exists(self, tag: str) -> Result[bool, PublishFailure]: ...

    def create_release(
        self, request: ReleaseRequest
    ) -> Result[str | None, PublishConflict | PublishFailure]:
        """Create the release and return its URL when the host reports one."""
        ...


def _is_not_found(stderr: str) -> bool:
    return "release not found" in stderr.lower()


def _is_already_exists(stderr: str) -> bool:
    text = stderr.lower()
    return "already exists" in text or "already_exists" in text


class GhReleaseHost:
    """Publish GitHub releases through the `gh` CLI.

    Authentication is gh's own (GH_TOKEN / GITHUB_TOKEN in CI). No retries:
    re-running the pipeline is the retry, and an existing release makes that
    safe.
    """

    def __init__(self, *, project_root: Path, repo: str | None, timeout: float | None) -> None:
        self._root = project_root
        self._repo = repo
        self._timeout = timeout

    def _repo_args(self) -> list[str]:
        return ["--repo", self._repo] if self._repo else []

    def release_exists(self, tag: str) -> Result[bool, PublishFailure]:
        cmd = ["gh", "release", "view", tag, "--json", "tagName", *self._repo_args()]
        result = run_process(cmd, cwd=self._root, timeout=self._timeout)
        if isinstance(result, Ok):
            return Ok(True)
        if _is_not_found(result.error.stderr):
            return Ok(False)
        return Err(PublishFailure(reason=result.error.message))

    def create_release(
        self, request: ReleaseRequest
    ) -> Result[str | None, PublishConflict | PublishFailure]:
        tag = request.tag.to_tag()
        cmd = [
            "gh",
            "release",
            "create",
            tag,
            *(str(p) for p in request.files),
            "--title",
            request.title,
            "--notes",
            request.body,
            "--verify-tag",
        ]
        if request.is_prerelease:
            cmd.append("--prerelease")
        cmd.extend(self._repo_args())

        result = run_process(cmd, cwd=self._root, timeout=self._timeout)
        if isinstance(result, Err):
            if _is_already_exists(result.error.stderr):
                return Err(PublishConflict(tag=tag))
            return Err(PublishFailure(reason=result.error.message))

        lines = result.value.strip().splitlines()
        return Ok(lines[-1].strip() if lines else None)


@dataclass
class InMemoryReleaseHost:
    """Release host that keeps releases in memory.

    Backs `--dry-run`: the request is printed instead of sent anywhere. With
    `remote`, existing releases are still looked up there, so a dry run on a
    published tag reports the same conflict as the real run. A lookup that
    fails is only a warning; nothing is being published.
    """

    console: ConsoleProtocol | None = None
    releases: dict[str, ReleaseRequest] = field(default_factory=dict)
    remote: ReleaseHost | None = None

    def release_exists(self, tag: str) -> Result[bool, PublishFailure]:
        if tag in self.releases:
            return Ok(True)
        if self.remote is None:
            return Ok(False)

        found = self.remote.release_exists(tag)
        if isinstance(found, Err):
            if self.console is not None:
                self.console.warning(f"could not check for an existing {tag} release")
                self.console.print(f"  {found.error.reason}", Style.DIM)
            return Ok(False)
        return found

    def create_release(
        self, request: ReleaseRequest
    ) -> Result[str | None, PublishConflict | PublishFailure]:
        tag = request.tag.to_tag()
        if tag in self.releases:
            return Err(PublishConflict(tag=tag))
        self.releases[tag] = request

        if self.console is not None:
            flag = " --prerelease" if request.is_prerelease else ""
            self.console.print(f"(dry-run) gh release create {tag}{flag}", Style.DIM)
            for path in request.files:
                self.console.print(f"(dry-run)   attach {path.name}", Style.DIM)
        return Ok(None)


def publish_release(
    host: ReleaseHost,
    request: ReleaseRequest,
) -> Result[ReleaseRecord, PublishConflict | PublishFailure]:
    """Create the release for `request.tag`; an existing one is never touched."""
    tag = request.tag.to_tag()

    exists = host.release_exists(tag)
    if isinstance(exists, Err):
        return exists
    if exists.value:
        return Err(PublishConflict(tag=tag))

    created = host.create_release(request)
    if isinstance(created, Err):
        return created

    return Ok(
        ReleaseRecord(
            tag=request.tag,
            is_prerelease=request.is_prerelease,
            attached_files=frozenset(p.name for p in request.files),
            changelog_body=request.body,
            url=created.value,
        )
    )
