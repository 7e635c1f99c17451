"""Regression tests for the setup prompt template.

The template must survive a .format() call with its expected placeholders.
This catches unescaped curly braces (like the JSON example) that would
raise KeyError at runtime.
"""

from playbook.prompts import SETUP_PROMPT, format_reference_list, render_setup_prompt


def test_setup_prompt_format_does_not_raise():
    result = SETUP_PROMPT.format(references="- a.md", settings_path="settings.json")
    assert isinstance(result, str)
    assert len(result) > 0


def test_rendered_prompt_keeps_json_braces():
    result = render_setup_prompt(["a.md"], "settings.json")
    assert '{\n  "references": [' in result
    assert "{references}" not in result


def test_rendered_prompt_lists_references_in_order():
    result = render_setup_prompt(["b.md", "https://example.com/a.md"], "config/settings.json")
    assert "- b.md\n- https://example.com/a.md" in result
    assert "`config/settings.json`" in result


def test_empty_reference_list_is_explicit():
    assert format_reference_list([]) == "- (no references configured)"
