"""Tests for file discovery and logging."""

import os

from playbook.utils import collect_markdown_files, console, log


def test_collect_markdown_files_sorted_and_skips_tool_dirs(tmp_path):
    for rel in ["b.md", "a.MD", "standards/x.md", ".git/y.md", "logs/z.md", "notes.txt"]:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("# x\n", encoding="utf-8")
    found = [os.path.relpath(p, tmp_path) for p in collect_markdown_files(str(tmp_path))]
    assert found == ["a.MD", "b.md", os.path.join("standards", "x.md")]


def test_log_appends_to_command_log(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    log("check", "first")
    log("check", "second", style="green")
    text = (tmp_path / "logs" / "check.log").read_text(encoding="utf-8")
    assert text == "first\nsecond\n"


def test_log_prints_brackets_literally(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with console.capture() as capture:
        log("resolve", "x [/x]/a.md [tag]/b.md", style="red")
    assert "x [/x]/a.md [tag]/b.md" in capture.get()
