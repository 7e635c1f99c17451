"""Check command: lint a playbook repository's documents and settings."""

import json
import os
from typing import Annotated

import typer

from playbook.config import DEFAULT_BASELINE_FILE, STANDARDS_DIR
from playbook.linter import (
    DEFAULT_LIMITS,
    build_json_report,
    count_all_findings,
    count_by_severity,
    filter_against_baseline,
    format_markdown_report,
    lint_repository,
    load_baseline,
    save_baseline,
)
from playbook.utils import console, log


def register(app: typer.Typer) -> None:
    """Register check commands on the shared app."""
    app.command()(check)


def check(
    root: Annotated[str, typer.Argument(help="Playbook repository root")] = ".",
    output_format: Annotated[str, typer.Option("--format", help="Output format: markdown or json")] = "markdown",
    baseline: Annotated[str, typer.Option(help="Baseline JSON file. Suppresses known findings unless they get worse.")] = None,
    update_baseline: Annotated[bool, typer.Option("--update-baseline", help="Write current findings to the baseline file and exit.")] = False,
    standards_dir: Annotated[str, typer.Option(help="Directory holding standards documents, relative to ROOT")] = STANDARDS_DIR,
    warn_days: Annotated[int, typer.Option(help="Advisory threshold for days since Last Updated")] = DEFAULT_LIMITS["warn_days"],
    hard_days: Annotated[int, typer.Option(help="Hard limit for days since Last Updated")] = DEFAULT_LIMITS["hard_days"],
) -> None:
    """Lint markdown documents and settings files. Exits 1 on hard violations."""
    if output_format not in ("markdown", "json"):
        console.print(f"ERROR: Unknown format '{output_format}'. Use markdown or json.", style="bold red", markup=False)
        raise typer.Exit(1)
    root = os.path.abspath(os.path.expanduser(root))
    if not os.path.isdir(root):
        console.print(f"ERROR: Not a directory: {root}", style="bold red", markup=False)
        raise typer.Exit(1)
    if warn_days > hard_days:
        console.print("ERROR: --warn-days must not exceed --hard-days.", style="bold red")
        raise typer.Exit(1)

    limits = {"warn_days": warn_days, "hard_days": hard_days}
    findings, files_checked = lint_repository(root, standards_dir=standards_dir, limits=limits)

    if update_baseline:
        baseline_path = baseline or os.path.join(root, DEFAULT_BASELINE_FILE)
        try:
            save_baseline(baseline_path, findings)
        except OSError as exc:
            console.print(f"ERROR: Could not write baseline {baseline_path}: {exc}", style="bold red", markup=False)
            raise typer.Exit(1)
        log("check", f"Baseline written to {baseline_path} ({count_all_findings(findings)} findings recorded)", style="green")
        raise typer.Exit(0)

    baselined_count = 0
    if baseline:
        try:
            known = load_baseline(baseline)
        except (OSError, ValueError) as exc:
            console.print(f"ERROR: Could not read baseline {baseline}: {exc}", style="bold red", markup=False)
            raise typer.Exit(1)
        filtered = filter_against_baseline(findings, known)
        baselined_count = count_all_findings(findings) - count_all_findings(filtered)
        findings = filtered

    if output_format == "json":
        report = build_json_report(findings, limits, files_checked, baselined_count)
        typer.echo(json.dumps(report, indent=2))
    else:
        typer.echo(format_markdown_report(findings, limits, baselined_count))

    hard_count, _advisory_count = count_by_severity(findings)
    if output_format == "markdown":
        log("check", f"Checked {files_checked} files under {root}: {hard_count} hard violations", style="dim")
    # Advisory items don't fail the check
    raise typer.Exit(1 if hard_count > 0 else 0)
