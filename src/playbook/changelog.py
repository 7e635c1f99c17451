"""CHANGELOG.md parsing and ordering checks.

Versions are headed ``## [2.0.0] - 2025-01-10`` (brackets optional); an
``## [Unreleased]`` heading carries no version. The changelog mostly
records new standards documents, so each entry keeps the markdown files
it links to.
"""

import re
from dataclasses import dataclass, field
from datetime import date

_VERSION_HEADING_RE = re.compile(
    r"^##\s+\[?([^\]\s]+)\]?(?:\s*[-–—]\s*(\S+))?\s*$"
)
_SEMVER_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)$")
_MD_LINK_RE = re.compile(r"\[[^\]]*\]\(\s*([^)\s]+\.md)(?:#[^)\s]*)?\s*\)")


@dataclass
class ChangelogEntry:
    """One version section of the changelog."""
    version: str | None   # None for Unreleased
    date: str | None      # raw date text as written
    line: int
    files: list[str] = field(default_factory=list)

    @property
    def released(self) -> bool:
        return self.version is not None


def parse_semver(version: str) -> tuple[int, int, int] | None:
    """Parse 'v2.0.0' or '2.0.0' into a comparable tuple, or None."""
    match = _SEMVER_RE.match(version.strip())
    if not match:
        return None
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def parse_changelog(text: str) -> list[ChangelogEntry]:
    """Parse changelog text into entries, in file order.

    Pure function: takes raw markdown, returns structured data.
    """
    entries: list[ChangelogEntry] = []
    for lineno, line in enumerate(text.split("\n"), start=1):
        heading = _VERSION_HEADING_RE.match(line.strip())
        if heading:
            name = heading.group(1)
            version = None if name.lower() == "unreleased" else name
            entries.append(ChangelogEntry(version=version, date=heading.group(2), line=lineno))
            continue
        if entries:
            entries[-1].files.extend(_MD_LINK_RE.findall(line))
    return entries


def _entry_problems(entry: ChangelogEntry) -> list[str]:
    problems = []
    if parse_semver(entry.version) is None:
        problems.append(f"version '{entry.version}' is not MAJOR.MINOR.PATCH")
    if entry.date is None:
        problems.append(f"version {entry.version} has no release date")
    else:
        try:
            date.fromisoformat(entry.date)
        except ValueError:
            problems.append(f"version {entry.version} has invalid date '{entry.date}'")
    return problems


def check_changelog(entries: list[ChangelogEntry]) -> list[dict]:
    """Return ordering and format problems as finding dicts.

    Released versions must be semantic versions with ISO dates, newest
    first, and listed once. Each finding has 'line' and 'message'.
    """
    findings = []
    seen: set[tuple[int, int, int]] = set()
    previous: tuple[int, int, int] | None = None

    for entry in entries:
        if not entry.released:
            continue
        for problem in _entry_problems(entry):
            findings.append({"line": entry.line, "message": problem})
        parsed = parse_semver(entry.version)
        if parsed is None:
            continue
        if parsed in seen:
            findings.append({"line": entry.line, "message": f"version {entry.version} is listed twice"})
        elif previous is not None and parsed > previous:
            findings.append({"line": entry.line, "message": f"version {entry.version} is out of order (newest first)"})
        seen.add(parsed)
        previous = parsed
    return findings


def latest_version(entries: list[ChangelogEntry]) -> str | None:
    """Return the newest released version as written, or None."""
    released = [e for e in entries if e.released and parse_semver(e.version)]
    if not released:
        return None
    return max(released, key=lambda e: parse_semver(e.version)).version
