"""Configuration constants for the playbook tooling.

File names, metadata conventions and lint thresholds used by the linter in
linter.py. Environment overrides are read at call time so tests can
monkeypatch them.
"""

import os

# ---------------------------------------------------------------------------
# Files and directories
# ---------------------------------------------------------------------------

SETTINGS_FILE = "settings.json"
EXAMPLE_SETTINGS_FILE = "settings.example.json"
REFERENCES_KEY = "references"
STANDARDS_DIR = "standards"
CHANGELOG_FILE = "CHANGELOG.md"
DEFAULT_BASELINE_FILE = ".playbook-baseline.json"

# Directories never scanned for markdown
SKIP_DIRS = {".git", ".venv", "venv", "node_modules", "__pycache__", "logs", ".pytest_cache"}


# ---------------------------------------------------------------------------
# Document metadata convention
# ---------------------------------------------------------------------------

METADATA_FIELDS = ("Status", "Scope", "Last Updated")
DATE_FIELD = "Last Updated"


# ---------------------------------------------------------------------------
# Lint thresholds (two-tier: advisory at warn, violation at hard)
# ---------------------------------------------------------------------------

STALENESS_THRESHOLDS = {"warn": 180, "hard": 365}

# All finding category keys, in report order
LINT_CATEGORIES = [
    "invalid_settings",
    "unreadable_documents",
    "broken_links",
    "missing_references",
    "unclosed_fences",
    "missing_title",
    "missing_metadata",
    "stale_documents",
    "duplicate_references",
    "changelog",
]


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

DEFAULT_FETCH_TIMEOUT = 10.0


def get_settings_path() -> str:
    """Return the default settings path, honouring PLAYBOOK_SETTINGS."""
    return os.environ.get("PLAYBOOK_SETTINGS", "") or SETTINGS_FILE


def get_fetch_timeout() -> float:
    """Return the HTTP timeout in seconds, honouring PLAYBOOK_FETCH_TIMEOUT.

    Falls back to the default when the variable is unset or not a positive number.
    """
    raw = os.environ.get("PLAYBOOK_FETCH_TIMEOUT", "")
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_FETCH_TIMEOUT
    return value if value > 0 else DEFAULT_FETCH_TIMEOUT
