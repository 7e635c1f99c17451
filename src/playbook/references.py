"""Reference list parsing, classification, and tag pinning.

A reference list is the ``references`` array of a settings.json file: an
ordered list of strings, each a raw-file URL or a local path to a markdown
standards document. The list is edited by hand. Nothing here enforces
uniqueness or checks that entries exist; duplicates are only reported.
"""

import json
import os
import re
from dataclasses import dataclass
from urllib.parse import unquote, urlparse

from playbook.config import REFERENCES_KEY


class SettingsError(ValueError):
    """Raised when a settings file is missing, is not valid JSON, or has the wrong shape."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


# ============================================
# Data types
# ============================================

@dataclass(frozen=True)
class Reference:
    """A single classified entry from a reference list."""
    raw: str      # the string exactly as written in settings.json
    kind: str     # "url" or "path"
    target: str   # URL for kind="url", filesystem path for kind="path"

    @property
    def is_url(self) -> bool:
        return self.kind == "url"


# ============================================
# Parsing
# ============================================

def parse_settings(text: str) -> list[str]:
    """Parse settings.json text into its reference list.

    Pure function. The document must be a JSON object; a missing
    ``references`` key means an empty list and other keys are ignored.
    Raises SettingsError on invalid JSON or a non-string entry.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Invalid JSON: {exc.msg}", line=exc.lineno, column=exc.colno) from exc

    if not isinstance(data, dict):
        raise SettingsError("Settings must be a JSON object")

    references = data.get(REFERENCES_KEY, [])
    if not isinstance(references, list):
        raise SettingsError(f"'{REFERENCES_KEY}' must be a list of strings")

    for index, entry in enumerate(references):
        if not isinstance(entry, str):
            raise SettingsError(f"'{REFERENCES_KEY}[{index}]' must be a string, got {type(entry).__name__}")
    return list(references)


def load_settings(path: str) -> list[str]:
    """Read a settings file and return its reference list."""
    if not os.path.isfile(path):
        raise SettingsError(f"Settings file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise SettingsError(f"Could not read {path}: {exc}") from exc
    return parse_settings(text)


def classify_reference(raw: str) -> Reference:
    """Classify a reference string as a URL or a local path.

    Only http and https count as URLs. file:// URLs become paths; anything
    else is a path with ~ expanded.
    """
    value = raw.strip()
    parsed = urlparse(value)
    scheme = parsed.scheme.lower()
    if scheme in ("http", "https") and parsed.netloc:
        return Reference(raw=raw, kind="url", target=value)
    if scheme == "file":
        return Reference(raw=raw, kind="path", target=unquote(parsed.path))
    return Reference(raw=raw, kind="path", target=os.path.expanduser(value))


def find_duplicates(references: list[str]) -> list[str]:
    """Return entries listed more than once, in first-occurrence order."""
    seen: set[str] = set()
    duplicates: list[str] = []
    for entry in references:
        key = entry.strip()
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)
    return duplicates


# ============================================
# Tag pinning
# ============================================

# The ref is a bare branch or tag, or the refs/heads/<name> and refs/tags/<name>
# forms GitHub's Raw button produces. Group 3 is the name either way.
_REF = r"(?:refs/(?:heads|tags)/)?([^/]+)"
# raw.githubusercontent.com/<owner>/<repo>/<ref>/<path>
_RAW_HOST_RE = re.compile(r"^/([^/]+)/([^/]+)/" + _REF + r"/(.+)$")
# github.com/<owner>/<repo>/raw/<ref>/<path>
_GITHUB_RAW_RE = re.compile(r"^/([^/]+)/([^/]+)/raw/" + _REF + r"/(.+)$")


def _split_github_raw(url: str) -> tuple[str, re.Match] | None:
    """Return (host, match) for a raw GitHub URL, or None for anything else."""
    parsed = urlparse(url)
    host = parsed.netloc.lower()
    if host == "raw.githubusercontent.com":
        match = _RAW_HOST_RE.match(parsed.path)
    elif host == "github.com":
        match = _GITHUB_RAW_RE.match(parsed.path)
    else:
        return None
    if not match:
        return None
    return host, match


def pinned_ref(raw: str) -> str | None:
    """Return the branch or tag segment of a raw GitHub URL, or None."""
    ref = classify_reference(raw)
    if not ref.is_url:
        return None
    split = _split_github_raw(ref.target)
    if split is None:
        return None
    return split[1].group(3)


def pin_reference(raw: str, tag: str) -> str:
    """Rewrite a raw GitHub URL so its ref is *tag*.

    A refs/heads/<branch> or refs/tags/<name> ref is replaced whole.
    Paths and non-GitHub URLs are returned unchanged. The tag is used as a
    plain path segment; it is not checked against semantic versioning.
    """
    tag = tag.strip()
    if not tag or "/" in tag:
        raise ValueError(f"Invalid tag: {tag!r}")
    ref = classify_reference(raw)
    if not ref.is_url:
        return raw
    split = _split_github_raw(ref.target)
    if split is None:
        return raw
    host, match = split
    owner, repo, _old_ref, path = match.groups()
    parsed = urlparse(ref.target)
    if host == "github.com":
        new_path = f"/{owner}/{repo}/raw/{tag}/{path}"
    else:
        new_path = f"/{owner}/{repo}/{tag}/{path}"
    return parsed._replace(path=new_path).geturl()


def pin_references(references: list[str], tag: str) -> list[str]:
    """Pin every raw GitHub URL in a reference list to *tag*, preserving order."""
    return [pin_reference(entry, tag) for entry in references]
