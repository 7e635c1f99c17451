"""Reference list commands: list, resolve, pin, and render the setup prompt."""

import json
import os
from typing import Annotated

import typer

from playbook.config import get_settings_path
from playbook.fetcher import render_context, resolve_references
from playbook.prompts import render_setup_prompt
from playbook.references import (
    SettingsError,
    classify_reference,
    find_duplicates,
    load_settings,
    pin_references,
    pinned_ref,
)
from playbook.utils import console, log

SettingsOption = Annotated[
    str,
    typer.Option("--settings", "-s", help="Path to settings.json (default: $PLAYBOOK_SETTINGS or ./settings.json)"),
]


def register(app: typer.Typer) -> None:
    """Register reference-list commands on the shared app."""
    app.command()(refs)
    app.command()(resolve)
    app.command()(pin)
    app.command()(prompt)


def _load_or_exit(settings: str | None) -> tuple[str, list[str]]:
    """Load the reference list, printing an error and exiting 1 on failure."""
    path = os.path.expanduser(settings or get_settings_path())
    try:
        return path, load_settings(path)
    except SettingsError as exc:
        console.print(f"ERROR: {exc}", style="bold red", markup=False)
        console.print("Check the file exists and is valid JSON with a 'references' list.", style="yellow")
        raise typer.Exit(1)


def refs(settings: SettingsOption = None) -> None:
    """List the configured references with their kind and pinned ref."""
    path, references = _load_or_exit(settings)
    console.print(f"=== {path} ===", style="bold cyan")
    if not references:
        console.print("No references configured.", style="yellow")
        return
    for index, raw in enumerate(references, start=1):
        ref = classify_reference(raw)
        pinned = pinned_ref(raw)
        suffix = f" @ {pinned}" if pinned else ""
        console.print(f"  {index:>2}. [{ref.kind}] {raw}{suffix}", markup=False, highlight=False)
    duplicates = find_duplicates(references)
    for raw in duplicates:
        console.print(f"  duplicate: {raw}", style="yellow", markup=False, highlight=False)


def resolve(
    settings: SettingsOption = None,
    output: Annotated[str, typer.Option("--output", "-o", help="Write the combined document context to this file")] = None,
) -> None:
    """Fetch every reference in order. Exits 1 if any reference could not be resolved."""
    path, references = _load_or_exit(settings)
    base_dir = os.path.dirname(os.path.abspath(path))
    resolved = resolve_references(references, base_dir=base_dir)

    failures = 0
    for item in resolved:
        if item.ok:
            log("resolve", f"✓ {item.reference.raw} ({len(item.content)} chars)", style="green")
        else:
            failures += 1
            log("resolve", f"✗ {item.reference.raw}: {item.error}", style="red")

    if output:
        try:
            with open(output, "w", encoding="utf-8") as f:
                f.write(render_context(resolved))
        except OSError as exc:
            console.print(f"ERROR: Could not write {output}: {exc}", style="bold red", markup=False)
            raise typer.Exit(1)
        console.print(f"Context written to {output}", style="cyan", markup=False)

    console.print(f"{len(resolved) - failures} resolved, {failures} failed")
    if failures:
        console.print("Verify each failing URL is reachable or the path exists.", style="yellow")
        raise typer.Exit(1)


def pin(
    tag: Annotated[str, typer.Argument(help="Git tag to pin raw GitHub URLs to, e.g. v2.0.0")],
    settings: SettingsOption = None,
) -> None:
    """Print the reference list with raw GitHub URLs pinned to TAG. Does not edit the file."""
    _path, references = _load_or_exit(settings)
    try:
        pinned = pin_references(references, tag)
    except ValueError as exc:
        console.print(f"ERROR: {exc}", style="bold red", markup=False)
        raise typer.Exit(1)
    typer.echo(json.dumps({"references": pinned}, indent=2))


def prompt(settings: SettingsOption = None) -> None:
    """Print the setup prompt to paste into an AI coding assistant."""
    path, references = _load_or_exit(settings)
    typer.echo(render_setup_prompt(references, path))
