"""Core utility functions: logging and file discovery."""

import os

from rich.console import Console

from playbook.config import SKIP_DIRS

console = Console()


def resolve_logs_dir() -> str:
    """Find the logs directory under the working directory, creating it if needed."""
    logs_dir = os.path.join(os.getcwd(), "logs")
    os.makedirs(logs_dir, exist_ok=True)
    return logs_dir


def log(command: str, message: str, style: str = "") -> None:
    """Write a message to both the console (with optional style) and the command log file.

    Messages carry raw paths and URLs, so they are never parsed as rich markup.
    """
    if style:
        console.print(message, style=style, markup=False)
    else:
        console.print(message, markup=False)

    try:
        logs_dir = resolve_logs_dir()
        log_file = os.path.join(logs_dir, f"{command}.log")
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(message + "\n")
    except Exception:
        pass  # Never break a command over logging


def collect_markdown_files(root: str) -> list[str]:
    """Walk root and return a sorted list of .md file paths, skipping tool directories."""
    paths = []
    for dirpath, dirs, files in os.walk(root):
        dirs[:] = [d for d in dirs if d not in SKIP_DIRS]
        for name in files:
            if name.lower().endswith(".md"):
                paths.append(os.path.join(dirpath, name))
    paths.sort()
    return paths


def read_text(path: str) -> str:
    """Read a UTF-8 text file."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()
