"""Setup prompt template.

The constant is a format string. A human pastes the rendered text into an
AI coding assistant to wire the playbook into the project they are working
on. Literal braces must be doubled.
"""

SETUP_PROMPT = """\
I want you to follow my team's coding playbook in this project.

The playbook is a set of markdown standards documents. Read each of the \
following references before writing or reviewing code, and treat them as \
project conventions:

{references}

Add the same list to the `references` array in `{settings_path}` so it is \
loaded at the start of every session. The file should look like:

```json
{{
  "references": [
    "https://raw.githubusercontent.com/<owner>/<repo>/v2.0.0/standards/python-style.md"
  ]
}}
```

When a standard conflicts with existing code in this project, follow the \
standard for new code and mention the conflict instead of rewriting \
unrelated files. If a reference cannot be fetched, tell me which one and \
continue with the others.
"""


def format_reference_list(references: list[str]) -> str:
    """Render references as a markdown bullet list, in list order."""
    if not references:
        return "- (no references configured)"
    return "\n".join(f"- {entry}" for entry in references)


def render_setup_prompt(references: list[str], settings_path: str) -> str:
    return SETUP_PROMPT.format(
        references=format_reference_list(references),
        settings_path=settings_path,
    )
