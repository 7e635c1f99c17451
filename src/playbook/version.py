"""Version information with git commit tracking.

Reports the package version plus the commit date and hash when running
from a checkout. Playbook users pin references to git tags, so the
nearest tag is shown too. All git commands run against this file's repo,
not the caller's cwd.
"""

import os
import subprocess

PACKAGE_VERSION = "2.0.0"

_REPO_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _run_git(*args: str) -> str | None:
    """Run a git command in the source repo directory. Return stdout or None on failure."""
    try:
        result = subprocess.run(
            ["git", "-C", _REPO_DIR, *args],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (FileNotFoundError, subprocess.TimeoutExpired):
        pass
    return None


def format_version(commit: str | None, date: str | None, tag: str | None, dirty: bool) -> str:
    """Build the version string from git facts.

    Pure function: returns '2.0.0' outside a checkout, otherwise something
    like '2.0.0 (v2.0.0, 2026-02-13 g3a7f2c1+dirty)'.
    """
    if not commit:
        return PACKAGE_VERSION
    parts = []
    if tag:
        parts.append(tag)
    parts.append(f"{date or 'unknown'} g{commit}{'+dirty' if dirty else ''}")
    return f"{PACKAGE_VERSION} ({', '.join(parts)})"


def get_version() -> str:
    """Return the version string for --version."""
    commit = _run_git("rev-parse", "--short", "HEAD")
    date = _run_git("log", "-1", "--format=%cs")
    tag = _run_git("describe", "--tags", "--abbrev=0")
    dirty = (_run_git("status", "--porcelain") or "") != ""
    return format_version(commit, date, tag, dirty)
