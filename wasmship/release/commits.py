"""Conventional Commits 1.0 parser.

    <type>[(<scope>)][!]: <description>

    [body]

    [footer-token: value | footer-token #value]...

Only the grammar lives here; grouping and rendering are in changelog.py.
Messages that do not follow the grammar parse to None.
"""

from __future__ import annotations

import re

from wasmship.release.model import ConventionalCommit

BREAKING_TOKENS = ("BREAKING CHANGE", "BREAKING-CHANGE")

_HEADER_RE = re.compile(
    r"^(?P<type>[A-Za-z]+)"
    r"(?:\((?P<scope>[^()]*)\))?"
    r"(?P<bang>!)?"
    r": (?P<description>.*)$"
)
# Footer tokens use `-` in place of spaces; BREAKING CHANGE is the one exception.
_FOOTER_RE = re.compile(
    r"^(?P<token>BREAKING CHANGE|[A-Za-z][A-Za-z0-9-]*)(?::(?: |$)| #)(?P<value>.*)$"
)


def _paragraphs(lines: list[str]) -> list[list[str]]:
    out: list[list[str]] = []
    current: list[str] = []
    for line in lines:
        if line.strip():
            current.append(line.rstrip())
        elif current:
            out.append(current)
            current = []
    if current:
        out.append(current)
    return out


def _parse_footers(paragraphs: list[list[str]]) -> tuple[tuple[str, str], ...]:
    """Parse the footer block, which opens with a `token: value` line.

    A value runs until the next token line, across blank lines, so a
    multi-paragraph BREAKING CHANGE note stays in one footer.
    """
    footers: list[tuple[str, list[str]]] = []
    for index, paragraph in enumerate(paragraphs):
        for number, line in enumerate(paragraph):
            m = _FOOTER_RE.match(line)
            if m is not None:
                footers.append((m.group("token"), [m.group("value").strip()]))
                continue
            value = footers[-1][1]
            if number == 0 and index > 0 and value[-1]:
                value.append("")
            value.append(line.strip())
    return tuple((token, "\n".join(value).strip("\n")) for token, value in footers)


def parse_commit(message: str) -> ConventionalCommit | None:
    lines = message.strip().splitlines()
    if not lines:
        return None

    m = _HEADER_RE.match(lines[0].strip())
    if m is None:
        return None

    description = m.group("description").strip()
    scope = m.group("scope")
    if not description or (scope is not None and not scope.strip()):
        return None

    paragraphs = _paragraphs(lines[1:])
    footers: tuple[tuple[str, str], ...] = ()
    for index, paragraph in enumerate(paragraphs):
        if _FOOTER_RE.match(paragraph[0]):
            footers = _parse_footers(paragraphs[index:])
            paragraphs = paragraphs[:index]
            break

    body = "\n\n".join("\n".join(p) for p in paragraphs) or None

    breaking_note: str | None = None
    for token, value in footers:
        if token in BREAKING_TOKENS:
            breaking_note = value or None
            break
    breaking = m.group("bang") is not None or any(t in BREAKING_TOKENS for t, _ in footers)

    return ConventionalCommit(
        type=m.group("type").lower(),
        scope=scope.strip() if scope is not None else None,
        description=description,
        breaking=breaking,
        breaking_note=breaking_note,
        body=body,
        footers=footers,
    )
