"""Markdown document parsing: title, metadata block, sections, and links.

Standards documents follow an informal layout: an H1 title, a metadata
block with Status, Scope and Last Updated, then prose sections under H2
headings. Nothing here renders markdown; it only extracts what the linter
checks.
"""

import os
import re
from dataclasses import dataclass, field
from datetime import date
from urllib.parse import unquote, urlparse

from playbook.config import DATE_FIELD, METADATA_FIELDS


# ============================================
# Data types
# ============================================

@dataclass
class Link:
    """An inline link, image, or reference definition found in a document."""
    target: str
    line: int


@dataclass
class Document:
    """A parsed markdown document."""
    path: str
    title: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    sections: list[str] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    unclosed_fence_line: int | None = None  # line of a code fence that never closes

    @property
    def last_updated(self) -> date | None:
        return parse_iso_date(self.metadata.get(DATE_FIELD, ""))

    def missing_metadata(self) -> list[str]:
        """Return the metadata fields this document does not declare."""
        return [name for name in METADATA_FIELDS if not self.metadata.get(name)]


# ============================================
# Parsing
# ============================================

_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
_H1_RE = re.compile(r"^#\s+(.+?)(?:\s+#+)?\s*$")
_H2_RE = re.compile(r"^##\s+(.+?)(?:\s+#+)?\s*$")
_INLINE_CODE_RE = re.compile(r"`+[^`]*`+")
_INLINE_LINK_RE = re.compile(r"!?\[[^\]]*\]\(\s*(?:<([^>\n]+)>|([^)\s]+))(?:\s+[\"'(][^)]*)?\s*\)")
_REFERENCE_DEF_RE = re.compile(r"^ {0,3}\[[^\]]+\]:\s*<?(\S+?)>?(?:\s+.*)?$")
_METADATA_PREFIX_RE = re.compile(r"^[\s>*\-+]*")
_ISO_DATE_RE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")

_METADATA_RE = re.compile(
    r"^(" + "|".join(re.escape(name) for name in METADATA_FIELDS) + r")\s*:\s*(.+?)\s*$",
    re.IGNORECASE,
)
_CANONICAL_FIELDS = {name.lower(): name for name in METADATA_FIELDS}


def parse_iso_date(value: str) -> date | None:
    """Return the first YYYY-MM-DD date in *value*, or None if absent or invalid."""
    match = _ISO_DATE_RE.search(value or "")
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


def _parse_metadata_line(line: str) -> tuple[str, str] | None:
    """Extract (field, value) from a metadata line like '**Status:** Active'."""
    stripped = _METADATA_PREFIX_RE.sub("", line).replace("**", "").replace("__", "")
    match = _METADATA_RE.match(stripped.strip())
    if not match:
        return None
    return _CANONICAL_FIELDS[match.group(1).lower()], match.group(2)


def _extract_links(line: str, lineno: int) -> list[Link]:
    definition = _REFERENCE_DEF_RE.match(line)
    if definition:
        return [Link(target=definition.group(1), line=lineno)]
    text = _INLINE_CODE_RE.sub("", line)
    return [Link(target=m.group(1) or m.group(2), line=lineno) for m in _INLINE_LINK_RE.finditer(text)]


def parse_document(text: str, path: str = "") -> Document:
    """Parse markdown text into a Document.

    Pure function: takes raw markdown, returns structured data. Headings,
    metadata and links inside fenced code blocks are ignored. Metadata is
    only read before the first H2 heading.
    """
    doc = Document(path=path)
    fence: str | None = None
    fence_line = 0

    for lineno, line in enumerate(text.split("\n"), start=1):
        fence_match = _FENCE_RE.match(line)
        if fence is not None:
            if fence_match and fence_match.group(1)[0] == fence[0] \
                    and len(fence_match.group(1)) >= len(fence) and not fence_match.group(2).strip():
                fence = None
            continue
        if fence_match:
            fence = fence_match.group(1)
            fence_line = lineno
            continue

        h1 = _H1_RE.match(line)
        if h1 and doc.title is None:
            doc.title = h1.group(1)
            continue
        h2 = _H2_RE.match(line)
        if h2:
            doc.sections.append(h2.group(1))
            continue

        if not doc.sections:
            parsed = _parse_metadata_line(line)
            if parsed and parsed[0] not in doc.metadata:
                doc.metadata[parsed[0]] = parsed[1]

        doc.links.extend(_extract_links(line, lineno))

    if fence is not None:
        doc.unclosed_fence_line = fence_line
    return doc


def load_document(path: str) -> Document:
    """Read and parse a markdown file."""
    with open(path, "r", encoding="utf-8") as f:
        return parse_document(f.read(), path)


# ============================================
# Link resolution
# ============================================

def is_relative_link(target: str) -> bool:
    """True for links that point at a file in the repository.

    Anything with a scheme (https:, mailto:) or a network location, and
    pure in-page fragments, are not relative links.
    """
    if not target or target.startswith("#"):
        return False
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc:
        return False
    return True


def resolve_link(doc_path: str, target: str, root: str | None = None) -> str:
    """Return the filesystem path a relative link points at.

    The fragment and query are dropped and percent-escapes decoded. A link
    starting with '/' is taken from *root* (the repository root) when given.
    """
    path = unquote(urlparse(target).path)
    if path.startswith("/") and root is not None:
        return os.path.normpath(os.path.join(root, path.lstrip("/")))
    return os.path.normpath(os.path.join(os.path.dirname(doc_path), path))
