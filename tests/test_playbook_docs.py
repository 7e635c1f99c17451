"""Lint the playbook shipped in this repository.

Every markdown file must have closed code fences and working relative
links, settings.example.json must parse, and each standards document
must carry its metadata block.
"""

import os
from datetime import date

from playbook.config import EXAMPLE_SETTINGS_FILE, LINT_CATEGORIES
from playbook.documents import load_document
from playbook.linter import lint_repository
from playbook.references import load_settings

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
STANDARDS = os.path.join(REPO_ROOT, "standards")

# Fixed so the suite does not start failing as documents age
REVIEW_DATE = date(2026, 10, 19)


def test_repository_lints_clean():
    findings, files_checked = lint_repository(REPO_ROOT, today=REVIEW_DATE)
    problems = {cat: findings[cat] for cat in LINT_CATEGORIES if findings[cat]}
    assert problems == {}
    assert files_checked > 5


def test_example_settings_parses_and_local_entries_exist():
    path = os.path.join(REPO_ROOT, EXAMPLE_SETTINGS_FILE)
    references = load_settings(path)
    assert references
    for entry in references:
        if not entry.startswith("https://"):
            assert os.path.isfile(os.path.join(REPO_ROOT, entry))


def test_every_standard_has_title_and_metadata():
    names = sorted(n for n in os.listdir(STANDARDS) if n.endswith(".md"))
    assert names == ["git-workflow.md", "python-style.md", "sql-style.md", "testing.md"]
    for name in names:
        doc = load_document(os.path.join(STANDARDS, name))
        assert doc.title, name
        assert doc.missing_metadata() == [], name
        assert doc.last_updated is not None, name


def test_readme_links_every_standard():
    readme = load_document(os.path.join(REPO_ROOT, "README.md"))
    targets = {link.target for link in readme.links}
    for name in os.listdir(STANDARDS):
        assert f"standards/{name}" in targets
