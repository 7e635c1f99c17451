"""Documentation linter for a playbook repository.

Checks what can actually be verified about a directory of markdown
standards and a settings.json reference list:
- settings files parse as JSON with a list of string references
- local-path references exist
- markdown files can be read as UTF-8
- every relative link in a markdown file resolves to an existing file
- fenced code blocks are closed
- standards documents have a title and a Status/Scope/Last Updated block
- standards documents are not stale (days since Last Updated)
- references are not listed twice
- the changelog is newest-first with valid versions and dates

Supports a baseline file to suppress known findings. Suppressed findings
reappear if they get worse. Output is a markdown report or JSON.
"""

import json
import os
from datetime import date

from playbook.changelog import check_changelog, parse_changelog
from playbook.config import (
    CHANGELOG_FILE,
    DATE_FIELD,
    EXAMPLE_SETTINGS_FILE,
    LINT_CATEGORIES,
    SETTINGS_FILE,
    STALENESS_THRESHOLDS,
    STANDARDS_DIR,
)
from playbook.documents import Document, is_relative_link, load_document, resolve_link
from playbook.fetcher import resolve_path
from playbook.references import SettingsError, classify_reference, find_duplicates, load_settings
from playbook.utils import collect_markdown_files, read_text

DEFAULT_LIMITS = {
    "warn_days": STALENESS_THRESHOLDS["warn"],
    "hard_days": STALENESS_THRESHOLDS["hard"],
}


# ---------------------------------------------------------------------------
# Severity classification
# ---------------------------------------------------------------------------

# Higher is worse. A finding without a severity counts as a violation.
_SEVERITY_RANK = {"advisory": 1, "violation": 2}


def severity_rank(severity: str | None) -> int:
    return _SEVERITY_RANK.get(severity, _SEVERITY_RANK["violation"])


def stale_severity(days: int, limits: dict) -> str | None:
    """Severity for a document last updated *days* ago.

    A document must be older than ``warn_days`` to be advisory and older
    than ``hard_days`` to be a violation.
    """
    if days > limits["hard_days"]:
        return "violation"
    if days > limits["warn_days"]:
        return "advisory"
    return None


def empty_findings() -> dict[str, list[dict]]:
    return {cat: [] for cat in LINT_CATEGORIES}


def count_by_severity(findings) -> tuple[int, int]:
    """Return (hard, advisory) finding counts across all categories."""
    hard = advisory = 0
    for cat in LINT_CATEGORIES:
        for f in findings.get(cat, []):
            if f.get("severity") == "advisory":
                advisory += 1
            else:
                hard += 1
    return hard, advisory


def count_all_findings(findings) -> int:
    """Sum findings across all categories."""
    return sum(len(findings.get(cat, [])) for cat in LINT_CATEGORIES)


def _rel(path: str, root: str) -> str:
    return os.path.relpath(path, root).replace(os.sep, "/")


# ---------------------------------------------------------------------------
# Settings checks
# ---------------------------------------------------------------------------

def lint_settings_file(path: str, root: str) -> dict[str, list[dict]]:
    """Check one settings file: JSON shape, local references, duplicates."""
    findings = empty_findings()
    rel = _rel(path, root)
    try:
        references = load_settings(path)
    except SettingsError as exc:
        findings["invalid_settings"].append({
            "path": rel, "line": exc.line, "subject": str(exc), "severity": "violation",
        })
        return findings

    base_dir = os.path.dirname(path)
    for raw in references:
        ref = classify_reference(raw)
        if ref.is_url:
            continue
        if not os.path.exists(resolve_path(ref.target, base_dir)):
            findings["missing_references"].append({
                "path": rel, "line": None, "subject": raw, "severity": "violation",
            })

    for raw in find_duplicates(references):
        findings["duplicate_references"].append({
            "path": rel, "line": None, "subject": raw, "severity": "advisory",
        })
    return findings


# ---------------------------------------------------------------------------
# Document checks
# ---------------------------------------------------------------------------

def is_standards_document(path: str, root: str, standards_dir: str) -> bool:
    """True when *path* lives under the standards directory of *root*."""
    standards_root = os.path.normpath(os.path.join(root, standards_dir))
    return os.path.normpath(path).startswith(standards_root + os.sep)


def lint_document(doc: Document, root: str, standards: bool, limits: dict, today: date) -> dict[str, list[dict]]:
    """Check one parsed document. Metadata rules apply only to standards documents."""
    findings = empty_findings()
    rel = _rel(doc.path, root)

    for link in doc.links:
        if not is_relative_link(link.target):
            continue
        if not os.path.exists(resolve_link(doc.path, link.target, root)):
            findings["broken_links"].append({
                "path": rel, "line": link.line, "subject": link.target, "severity": "violation",
            })

    if doc.unclosed_fence_line is not None:
        findings["unclosed_fences"].append({
            "path": rel, "line": doc.unclosed_fence_line, "subject": "code fence never closed",
            "severity": "violation",
        })

    if not standards:
        return findings

    if not doc.title:
        findings["missing_title"].append({
            "path": rel, "line": None, "subject": "no H1 title", "severity": "violation",
        })

    missing = doc.missing_metadata()
    if missing:
        findings["missing_metadata"].append({
            "path": rel, "line": None, "subject": ", ".join(missing), "severity": "violation",
        })

    updated = doc.last_updated
    if updated is not None:
        days = (today - updated).days
        severity = stale_severity(days, limits)
        if severity:
            findings["stale_documents"].append({
                "path": rel, "line": None, "subject": updated.isoformat(),
                "days": days, "limit": limits["hard_days"], "warn_limit": limits["warn_days"],
                "severity": severity,
            })
    elif DATE_FIELD not in missing:
        findings["missing_metadata"].append({
            "path": rel, "line": None, "subject": "Last Updated is not a YYYY-MM-DD date",
            "severity": "violation",
        })
    return findings


def lint_changelog_file(path: str, root: str) -> dict[str, list[dict]]:
    findings = empty_findings()
    rel = _rel(path, root)
    for problem in check_changelog(parse_changelog(read_text(path))):
        findings["changelog"].append({
            "path": rel, "line": problem["line"], "subject": problem["message"], "severity": "violation",
        })
    return findings


def _read_error(exc: Exception) -> str:
    if isinstance(exc, UnicodeDecodeError):
        return f"not valid UTF-8 (byte {exc.start})"
    return f"could not read: {exc.strerror or exc}"


def _merge(into: dict, other: dict) -> None:
    for cat in LINT_CATEGORIES:
        into[cat].extend(other.get(cat, []))


def lint_repository(root: str, standards_dir: str = STANDARDS_DIR, limits: dict | None = None,
                    today: date | None = None) -> tuple[dict[str, list[dict]], int]:
    """Lint every markdown and settings file under *root*.

    Returns (findings, files_checked).
    """
    limits = limits or DEFAULT_LIMITS
    today = today or date.today()
    findings = empty_findings()
    files_checked = 0

    for name in (SETTINGS_FILE, EXAMPLE_SETTINGS_FILE):
        path = os.path.join(root, name)
        if os.path.isfile(path):
            _merge(findings, lint_settings_file(path, root))
            files_checked += 1

    unreadable = set()
    for path in collect_markdown_files(root):
        files_checked += 1
        try:
            doc = load_document(path)
        except (OSError, UnicodeDecodeError) as exc:
            unreadable.add(path)
            findings["unreadable_documents"].append({
                "path": _rel(path, root), "line": None, "subject": _read_error(exc), "severity": "violation",
            })
            continue
        standards = is_standards_document(path, root, standards_dir)
        _merge(findings, lint_document(doc, root, standards, limits, today))

    changelog_path = os.path.join(root, CHANGELOG_FILE)
    if os.path.isfile(changelog_path) and changelog_path not in unreadable:
        _merge(findings, lint_changelog_file(changelog_path, root))

    for cat in LINT_CATEGORIES:
        findings[cat].sort(key=lambda f: (f["path"], f.get("line") or 0))
    findings["stale_documents"].sort(key=lambda f: -f["days"])
    return findings, files_checked


# ---------------------------------------------------------------------------
# Baseline support
# ---------------------------------------------------------------------------

def baseline_key_for(finding: dict) -> str:
    """Generate the unique baseline key for a finding."""
    return "{}::{}".format(finding["path"], finding.get("subject", ""))


def load_baseline(path: str | None) -> dict[str, dict[str, str]]:
    """Read a baseline file into ``{category: {key: severity}}``.

    A missing file is an empty baseline. Raises ValueError when the file is
    not JSON or not shaped like a baseline.
    """
    known: dict[str, dict[str, str]] = {cat: {} for cat in LINT_CATEGORIES}
    if not path or not os.path.exists(path):
        return known
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("baseline must be a JSON object")
    for cat in LINT_CATEGORIES:
        entries = data.get(cat, {})
        if not isinstance(entries, dict):
            raise ValueError(f"baseline category '{cat}' must map keys to severities")
        known[cat] = dict(entries)
    return known


def save_baseline(path: str, findings) -> None:
    """Record the key and severity of every current finding."""
    data = {
        cat: {baseline_key_for(f): f.get("severity", "violation") for f in findings.get(cat, [])}
        for cat in LINT_CATEGORIES
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True)
        f.write("\n")


def filter_against_baseline(findings, baseline):
    """Drop findings already in the baseline unless their severity got worse.

    Stale-document day counts grow daily, so only a move from advisory to
    violation brings a known stale document back.
    """
    filtered = {}
    for cat in LINT_CATEGORIES:
        known = baseline.get(cat, {})
        filtered[cat] = [
            f for f in findings.get(cat, [])
            if baseline_key_for(f) not in known
            or severity_rank(f.get("severity")) > severity_rank(known[baseline_key_for(f)])
        ]
    return filtered


# ---------------------------------------------------------------------------
# Markdown report
# ---------------------------------------------------------------------------

_CATEGORY_TITLES = {
    "invalid_settings": "Invalid Settings Files",
    "unreadable_documents": "Unreadable Documents",
    "broken_links": "Broken Relative Links",
    "missing_references": "Missing Local References",
    "unclosed_fences": "Unclosed Code Fences",
    "missing_title": "Missing Titles",
    "missing_metadata": "Missing Metadata",
    "stale_documents": "Stale Documents",
    "duplicate_references": "Duplicate References",
    "changelog": "Changelog Problems",
}


def _severity_label(severity):
    if severity == "advisory":
        return "advisory"
    return "VIOLATION"


def _plural(count, word):
    return "{} {}{}".format(count, word, "s" if count != 1 else "")


def format_markdown_report(findings, limits, baselined_count=0):
    """Format findings as a markdown report, hard violations and advisory items together."""
    total = count_all_findings(findings)
    hard_count, advisory_count = count_by_severity(findings)

    if total == 0:
        return "## Playbook Check: All Clear\n\nNo problems found in settings or documents."

    lines = []
    lines.append("## Playbook Check: {} found\n".format(_plural(total, "issue")))
    if hard_count:
        lines.append("**{}** (must fix) and **{} advisory**.\n".format(
            _plural(hard_count, "hard violation"), advisory_count))
    else:
        lines.append("**{}** (no hard violations).\n".format(_plural(advisory_count, "advisory item")))
    if baselined_count > 0:
        lines.append("_{} suppressed by baseline._\n".format(_plural(baselined_count, "known finding")))

    for cat in LINT_CATEGORIES:
        items = findings.get(cat)
        if not items:
            continue
        title = _CATEGORY_TITLES[cat]
        if cat == "stale_documents":
            title += " (advisory: >{} days, hard: >{} days)".format(limits["warn_days"], limits["hard_days"])
        lines.append("### {}\n".format(title))
        lines.append("| Severity | File | Line | Detail |")
        lines.append("|----------|------|------|--------|")
        for f in items:
            detail = f["subject"]
            if cat == "stale_documents":
                detail = "last updated {} (**{}** days ago)".format(f["subject"], f["days"])
            line = "L{}".format(f["line"]) if f.get("line") else ""
            lines.append("| {} | {} | {} | {} |".format(_severity_label(f["severity"]), f["path"], line, detail))
        lines.append("")

    return "\n".join(lines)


def build_json_report(findings, limits, files_checked, baselined_count=0) -> dict:
    hard_count, advisory_count = count_by_severity(findings)
    return {
        "findings": findings,
        "summary": {
            "total": count_all_findings(findings),
            "hard_violations": hard_count,
            "advisory": advisory_count,
            "baselined": baselined_count,
            "files_checked": files_checked,
            "limits": limits,
        },
    }
