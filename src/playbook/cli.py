"""CLI app definition and command registration."""

import os
from typing import Annotated

import typer

from playbook.changelog import latest_version, parse_changelog
from playbook.config import CHANGELOG_FILE, STANDARDS_DIR
from playbook.documents import load_document
from playbook.utils import collect_markdown_files, console, read_text
from playbook.version import get_version


def _version_callback(value: bool):
    if value:
        console.print(get_version())
        raise typer.Exit()


app = typer.Typer(
    help="Lint and inspect a playbook of coding-standards documents for AI coding assistants.",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit.", callback=_version_callback, is_eager=True),
    ] = False,
) -> None:
    """Playbook tooling."""

# Register commands from submodules
from playbook import check as _check_mod
from playbook import refs as _refs_mod

_check_mod.register(app)
_refs_mod.register(app)


# ============================================
# Commands
# ============================================


@app.command()
def status(
    root: Annotated[str, typer.Argument(help="Playbook repository root")] = ".",
) -> None:
    """Quick view of the playbook: standards documents and latest changelog entry."""
    console.print()
    standards_root = os.path.join(root, STANDARDS_DIR)
    if os.path.isdir(standards_root):
        console.print("=== STANDARDS ===", style="bold magenta")
        for path in collect_markdown_files(standards_root):
            name = os.path.relpath(path, root)
            try:
                doc = load_document(path)
            except (OSError, UnicodeDecodeError) as exc:
                console.print(f"  WARNING: skipped {name}: {exc}", style="yellow", markup=False)
                continue
            state = doc.metadata.get("Status", "no status")
            console.print(f"  {name}: {doc.title or '(untitled)'} [{state}]", markup=False, highlight=False)
    else:
        console.print(f"No {STANDARDS_DIR}/ directory under {root}.", style="yellow", markup=False)

    console.print()

    changelog_path = os.path.join(root, CHANGELOG_FILE)
    if os.path.exists(changelog_path):
        try:
            entries = parse_changelog(read_text(changelog_path))
        except (OSError, UnicodeDecodeError) as exc:
            console.print(f"WARNING: could not read {CHANGELOG_FILE}: {exc}", style="yellow", markup=False)
            entries = []
        latest = latest_version(entries)
        console.print("=== CHANGELOG ===", style="bold cyan")
        console.print(f"  Latest version: {latest or 'none'}")
        for entry in entries:
            if entry.version == latest:
                for name in entry.files:
                    console.print(f"  + {name}", markup=False, highlight=False)
                break

    console.print()
