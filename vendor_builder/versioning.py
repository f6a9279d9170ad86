"""
versioning.py

Responsibility: read the installed library version and decide the entry strategy.

React 19 moved `createRoot`/`hydrateRoot` out of `react-dom` into
`react-dom/client`; versions at or above the split threshold need the
synthesized entry module.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path

from packaging.version import InvalidVersion, Version

from vendor_builder.errors import VersionParseError

_SEMVER_RE = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@dataclass(frozen=True)
class LibraryVersion:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    raw: str = ""

    def __str__(self) -> str:
        return self.raw or f"{self.major}.{self.minor}.{self.patch}"

    @property
    def comparable(self) -> Version:
        """
        Ordering key following semver precedence (build metadata ignored).

        Pre-releases compare lower than the release; a pre-release tag that
        PEP 440 cannot express still sorts below the release.
        """
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease is None:
            return Version(base)
        try:
            pre = Version(f"{base}-{self.prerelease}")
        except InvalidVersion:
            return Version(f"{base}.dev0")
        return pre if pre.is_prerelease else Version(f"{base}.dev0")


def parse_version(text: str) -> LibraryVersion:
    """Parse a `MAJOR.MINOR.PATCH[-pre][+build]` string."""
    if not isinstance(text, str):
        raise VersionParseError(f"Version must be a string, got {type(text).__name__}")
    raw = text.strip()
    m = _SEMVER_RE.match(raw)
    if m is None:
        raise VersionParseError(f"Not a valid semantic version: {text!r}")
    return LibraryVersion(
        major=int(m.group("major")),
        minor=int(m.group("minor")),
        patch=int(m.group("patch")),
        prerelease=m.group("pre"),
        raw=raw,
    )


def uses_split_surface(version: str | LibraryVersion, threshold: str = "19.0.0") -> bool:
    """Return True when `version` is at or above `threshold`."""
    v = parse_version(version) if isinstance(version, str) else version
    return v.comparable >= parse_version(threshold).comparable


def read_installed_version(node_modules: str | Path, package: str) -> LibraryVersion:
    """Read `version` from `<node_modules>/<package>/package.json`."""
    manifest = Path(node_modules) / package / "package.json"
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise VersionParseError(f"Package manifest not found: {manifest} (is `{package}` installed?)") from e
    except (OSError, ValueError) as e:
        raise VersionParseError(f"Unreadable package manifest: {manifest}") from e

    if not isinstance(data, dict) or "version" not in data:
        raise VersionParseError(f"Package manifest has no `version`: {manifest}")
    return parse_version(data["version"])
