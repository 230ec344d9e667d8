from __future__ import annotations

import re
from dataclasses import dataclass

from wasmship.core.result import Err, Ok, Result
from wasmship.release.errors import InvalidTagFormat

_CORE_RE = re.compile(r"(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)")
# SemVer pre-release identifier: numeric without leading zeros, or alphanumeric.
_PRE_IDENT_RE = re.compile(r"0|[1-9][0-9]*|[0-9]*[A-Za-z-][0-9A-Za-z-]*")


@dataclass(frozen=True, slots=True)
class VersionTag:
    major: int
    minor: int
    patch: int
    pre_release: str | None = None

    @property
    def is_prerelease(self) -> bool:
        return bool(self.pre_release)

    @property
    def version(self) -> str:
        """Version without the `v` prefix, e.g. `2.0.0-rc.1`."""
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release:
            return f"{base}-{self.pre_release}"
        return base

    def to_tag(self) -> str:
        return f"v{self.version}"

    def __str__(self) -> str:
        return self.to_tag()


def parse_tag(text: str) -> Result[VersionTag, InvalidTagFormat]:
    """Parse `v<major>.<minor>.<patch>[-<preRelease>]`."""
    if not text.startswith("v"):
        return Err(InvalidTagFormat(tag=text, reason="missing 'v' prefix"))

    core, sep, pre = text[1:].partition("-")
    m = _CORE_RE.fullmatch(core)
    if m is None:
        return Err(
            InvalidTagFormat(
                tag=text,
                reason="expected numeric <major>.<minor>.<patch> without leading zeros",
            )
        )

    pre_release: str | None = None
    if sep:
        if not pre:
            return Err(InvalidTagFormat(tag=text, reason="empty pre-release label"))
        bad = [ident for ident in pre.split(".") if not _PRE_IDENT_RE.fullmatch(ident)]
        if bad:
            return Err(
                InvalidTagFormat(tag=text, reason=f"malformed pre-release label {pre!r}")
            )
        pre_release = pre

    return Ok(VersionTag(int(m.group(1)), int(m.group(2)), int(m.group(3)), pre_release))
