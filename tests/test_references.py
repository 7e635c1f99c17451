"""Tests for reference list parsing, classification, duplicates, and tag pinning."""

import os

import pytest

from playbook.references import (
    SettingsError,
    classify_reference,
    find_duplicates,
    load_settings,
    parse_settings,
    pin_reference,
    pin_references,
    pinned_ref,
)


RAW_MAIN = "https://raw.githubusercontent.com/acme/playbook/main/standards/python-style.md"


# --- parse_settings ---

def test_parse_settings_returns_references_in_order():
    text = '{"references": ["b.md", "a.md", "https://example.com/c.md"]}'
    assert parse_settings(text) == ["b.md", "a.md", "https://example.com/c.md"]


def test_parse_settings_missing_key_is_empty_list():
    assert parse_settings('{"theme": "dark"}') == []


def test_parse_settings_ignores_unknown_keys():
    assert parse_settings('{"references": ["a.md"], "model": "x"}') == ["a.md"]


def test_parse_settings_keeps_duplicates():
    assert parse_settings('{"references": ["a.md", "a.md"]}') == ["a.md", "a.md"]


def test_parse_settings_invalid_json_reports_position():
    with pytest.raises(SettingsError) as exc_info:
        parse_settings('{\n  "references": [\n    "a.md"\n    "b.md"\n  ]\n}')
    assert exc_info.value.line == 4
    assert "line 4" in str(exc_info.value)


def test_parse_settings_rejects_non_object():
    with pytest.raises(SettingsError, match="JSON object"):
        parse_settings('["a.md"]')


def test_parse_settings_rejects_non_list_references():
    with pytest.raises(SettingsError, match="must be a list"):
        parse_settings('{"references": "a.md"}')


def test_parse_settings_rejects_non_string_entry():
    with pytest.raises(SettingsError, match=r"references\[1\]"):
        parse_settings('{"references": ["a.md", 3]}')


def test_settings_error_is_value_error():
    assert issubclass(SettingsError, ValueError)


# --- load_settings ---

def test_load_settings_reads_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text('{"references": ["standards/testing.md"]}', encoding="utf-8")
    assert load_settings(str(path)) == ["standards/testing.md"]


def test_load_settings_missing_file_raises(tmp_path):
    with pytest.raises(SettingsError, match="not found"):
        load_settings(str(tmp_path / "nope.json"))


# --- classify_reference ---

def test_https_url_is_url():
    ref = classify_reference(RAW_MAIN)
    assert ref.kind == "url"
    assert ref.is_url
    assert ref.target == RAW_MAIN


def test_relative_path_is_path():
    ref = classify_reference("standards/sql-style.md")
    assert ref.kind == "path"
    assert ref.target == "standards/sql-style.md"


def test_file_url_becomes_path():
    ref = classify_reference("file:///home/me/playbook/testing%20guide.md")
    assert ref.kind == "path"
    assert ref.target == "/home/me/playbook/testing guide.md"


def test_tilde_is_expanded():
    ref = classify_reference("~/playbook/testing.md")
    assert ref.target == os.path.expanduser("~/playbook/testing.md")


def test_ftp_url_is_not_a_url_reference():
    assert classify_reference("ftp://example.com/a.md").kind == "path"


def test_raw_is_preserved():
    assert classify_reference("  a.md ").raw == "  a.md "


# --- find_duplicates ---

def test_find_duplicates_first_occurrence_order():
    refs = ["a.md", "b.md", "a.md", "c.md", "b.md", "a.md"]
    assert find_duplicates(refs) == ["a.md", "b.md"]


def test_find_duplicates_none():
    assert find_duplicates(["a.md", "b.md"]) == []


def test_find_duplicates_ignores_surrounding_whitespace():
    assert find_duplicates(["a.md", " a.md"]) == ["a.md"]


# --- pinning ---

def test_pin_raw_githubusercontent_url():
    assert pin_reference(RAW_MAIN, "v2.0.0") == (
        "https://raw.githubusercontent.com/acme/playbook/v2.0.0/standards/python-style.md"
    )


def test_pin_github_raw_url():
    url = "https://github.com/acme/playbook/raw/main/standards/testing.md"
    assert pin_reference(url, "v1.1.0") == "https://github.com/acme/playbook/raw/v1.1.0/standards/testing.md"


def test_pin_replaces_existing_tag():
    url = "https://raw.githubusercontent.com/acme/playbook/v1.0.0/README.md"
    assert pin_reference(url, "v2.0.0") == "https://raw.githubusercontent.com/acme/playbook/v2.0.0/README.md"


def test_pin_leaves_other_hosts_unchanged():
    url = "https://example.com/acme/playbook/main/standards/testing.md"
    assert pin_reference(url, "v2.0.0") == url


def test_pin_leaves_paths_unchanged():
    assert pin_reference("standards/testing.md", "v2.0.0") == "standards/testing.md"


def test_pin_rejects_tag_with_slash():
    with pytest.raises(ValueError):
        pin_reference(RAW_MAIN, "release/2.0")


def test_pin_rejects_empty_tag():
    with pytest.raises(ValueError):
        pin_reference(RAW_MAIN, "  ")


def test_pin_references_preserves_order():
    refs = ["local.md", RAW_MAIN]
    pinned = pin_references(refs, "v2.0.0")
    assert pinned[0] == "local.md"
    assert "/v2.0.0/" in pinned[1]


def test_pinned_ref_extracts_segment():
    assert pinned_ref(RAW_MAIN) == "main"
    assert pinned_ref("https://github.com/acme/playbook/raw/v2.0.0/a.md") == "v2.0.0"


def test_pinned_ref_none_for_paths_and_other_urls():
    assert pinned_ref("standards/testing.md") is None
    assert pinned_ref("https://example.com/a.md") is None


# --- refs/heads and refs/tags raw URLs ---

RAW_REFS_HEADS = "https://raw.githubusercontent.com/acme/pb/refs/heads/main/standards/testing.md"


def test_pinned_ref_reads_branch_from_refs_heads():
    assert pinned_ref(RAW_REFS_HEADS) == "main"


def test_pinned_ref_reads_tag_from_refs_tags():
    url = "https://raw.githubusercontent.com/acme/pb/refs/tags/v1.1.0/standards/testing.md"
    assert pinned_ref(url) == "v1.1.0"


def test_pin_replaces_whole_refs_heads_ref():
    assert pin_reference(RAW_REFS_HEADS, "v2.0.0") == (
        "https://raw.githubusercontent.com/acme/pb/v2.0.0/standards/testing.md"
    )


def test_pin_github_raw_url_with_refs_heads():
    url = "https://github.com/acme/pb/raw/refs/heads/main/standards/testing.md"
    assert pin_reference(url, "v2.0.0") == "https://github.com/acme/pb/raw/v2.0.0/standards/testing.md"


def test_branch_named_refs_is_a_plain_ref():
    url = "https://raw.githubusercontent.com/acme/pb/refs/standards/testing.md"
    assert pinned_ref(url) == "refs"
    assert pin_reference(url, "v2.0.0") == "https://raw.githubusercontent.com/acme/pb/v2.0.0/standards/testing.md"
