"""Keep-a-Changelog rendering of Conventional Commits.

Groups, in priority order: breaking changes first (whatever the commit
type), then the recognized types in the order they are configured. Commits
of other types are left out.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from wasmship.core.config import DEFAULT_CHANGELOG_TYPES
from wasmship.core.result import Err, Ok, Result
from wasmship.release.commits import parse_commit
from wasmship.release.errors import ChangelogWriteFailure
from wasmship.release.model import ChangelogEntry, ChangelogSection, ConventionalCommit
from wasmship.release.tag import VersionTag

BREAKING_GROUP = "breaking"

GROUP_HEADINGS: dict[str, str] = {
    BREAKING_GROUP: "Breaking Changes",
    "feat": "Added",
    "fix": "Fixed",
    "perf": "Performance",
    "refactor": "Changed",
    "revert": "Reverted",
    "docs": "Documentation",
}

EMPTY_SECTION_TEXT = "_No notable changes._"

CHANGELOG_PREAMBLE = """# Changelog

All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).
"""


def group_heading(group: str) -> str:
    return GROUP_HEADINGS.get(group, group.capitalize())


def _entry_for(commit: ConventionalCommit) -> ChangelogEntry:
    text = commit.description
    if commit.scope:
        text = f"**{commit.scope}:** {text}"
    return ChangelogEntry(text=text, note=commit.breaking_note if commit.breaking else None)


def group_commits(
    commits: Iterable[ConventionalCommit],
    *,
    types: Sequence[str] = DEFAULT_CHANGELOG_TYPES,
) -> dict[str, tuple[ChangelogEntry, ...]]:
    """Bucket commits by group, keeping commit order and dropping repeats."""
    order = [BREAKING_GROUP, *(t for t in types if t != BREAKING_GROUP)]
    buckets: dict[str, list[ChangelogEntry]] = {group: [] for group in order}

    for commit in commits:
        group = BREAKING_GROUP if commit.breaking else commit.type
        if group not in buckets:
            continue
        entry = _entry_for(commit)
        if entry not in buckets[group]:
            buckets[group].append(entry)

    return {group: tuple(entries) for group, entries in buckets.items() if entries}


def build_section(
    messages: Iterable[str],
    tag: VersionTag,
    *,
    release_date: str,
    types: Sequence[str] = DEFAULT_CHANGELOG_TYPES,
) -> ChangelogSection:
    """Parse raw commit messages and group them for `tag`.

    Messages that are not Conventional Commits are skipped silently.
    """
    commits = [c for c in (parse_commit(m) for m in messages) if c is not None]
    return ChangelogSection(
        version_label=tag.version,
        is_prerelease=tag.is_prerelease,
        release_date=release_date,
        grouped_entries=group_commits(commits, types=types),
    )


def render_title(section: ChangelogSection) -> str:
    title = f"## [{section.version_label}] - {section.release_date}"
    if section.is_prerelease:
        title += " (pre-release)"
    return title


def render_body(section: ChangelogSection) -> str:
    """The section without its title; used as the release description."""
    if section.is_empty:
        return EMPTY_SECTION_TEXT + "\n"

    lines: list[str] = []
    for group, entries in section.grouped_entries.items():
        if lines:
            lines.append("")
        lines.append(f"### {group_heading(group)}")
        lines.append("")
        for entry in entries:
            lines.append(f"- {entry.text}")
            if entry.note:
                lines.extend(f"  - {line}" for line in entry.note.splitlines() if line.strip())
    return "\n".join(lines) + "\n"


def render_section(section: ChangelogSection) -> str:
    return f"{render_title(section)}\n\n{render_body(section)}"


def prepend_to_changelog(
    path: Path, rendered: str, *, version_label: str
) -> Result[None, ChangelogWriteFailure]:
    """Insert a rendered section above the newest release in CHANGELOG.md.

    An `## [Unreleased]` section, if present, stays on top. A missing file is
    created with the standard Keep-a-Changelog preamble.
    """
    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else CHANGELOG_PREAMBLE
    except (OSError, UnicodeDecodeError) as e:
        return Err(ChangelogWriteFailure(path=path, reason=str(e)))

    if re.search(rf"^## \[{re.escape(version_label)}\]", existing, flags=re.MULTILINE):
        return Err(
            ChangelogWriteFailure(path=path, reason=f"section [{version_label}] already exists")
        )

    headings = list(re.finditer(r"^## \[(?P<label>[^\]]+)\]", existing, flags=re.MULTILINE))
    insert_at = len(existing)
    for m in headings:
        if m.group("label").lower() != "unreleased":
            insert_at = m.start()
            break

    head = existing[:insert_at].strip("\n")
    tail = existing[insert_at:].strip("\n")
    blocks = [b for b in (head, rendered.strip("\n"), tail) if b]
    content = "\n\n".join(blocks) + "\n"

    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        return Err(ChangelogWriteFailure(path=path, reason=str(e)))
    return Ok(None)
