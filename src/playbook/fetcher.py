"""Resolve a reference list into document content.

One sequential pass in list order: local paths are read from disk, URLs
are fetched with a single GET. A failing entry never stops the pass; it
is recorded on its ResolvedReference and the caller decides what to do.
"""

import os
from dataclasses import dataclass

import httpx

from playbook.config import get_fetch_timeout
from playbook.references import Reference, classify_reference


@dataclass
class ResolvedReference:
    """The outcome of resolving one reference."""
    reference: Reference
    content: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def resolve_path(target: str, base_dir: str) -> str:
    """Resolve a local reference path against the settings file's directory."""
    if os.path.isabs(target):
        return os.path.normpath(target)
    return os.path.normpath(os.path.join(base_dir, target))


def _read_local(reference: Reference, base_dir: str) -> ResolvedReference:
    path = resolve_path(reference.target, base_dir)
    if not os.path.isfile(path):
        return ResolvedReference(reference, error=f"not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return ResolvedReference(reference, content=f.read())
    except (OSError, UnicodeDecodeError) as exc:
        return ResolvedReference(reference, error=f"unreadable: {exc}")


def _fetch_url(reference: Reference, client: httpx.Client) -> ResolvedReference:
    try:
        response = client.get(reference.target)
    except httpx.HTTPError as exc:
        return ResolvedReference(reference, error=f"request failed: {exc}")
    if response.status_code == 404:
        return ResolvedReference(reference, error="not found (HTTP 404)")
    if response.status_code >= 400:
        return ResolvedReference(reference, error=f"HTTP {response.status_code}")
    return ResolvedReference(reference, content=response.text)


def resolve_references(
    references: list[str],
    base_dir: str = ".",
    client: httpx.Client | None = None,
) -> list[ResolvedReference]:
    """Resolve every reference in list order.

    When *client* is None a client is created (and closed) for the pass,
    using the configured timeout and following redirects.
    """
    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=get_fetch_timeout(), follow_redirects=True)
    try:
        results = []
        for raw in references:
            reference = classify_reference(raw)
            if reference.is_url:
                results.append(_fetch_url(reference, client))
            else:
                results.append(_read_local(reference, base_dir))
        return results
    finally:
        if owns_client:
            client.close()


def render_context(resolved: list[ResolvedReference]) -> str:
    """Join successfully resolved documents in list order, each under a source marker."""
    blocks = []
    for item in resolved:
        if not item.ok:
            continue
        blocks.append(f"<!-- source: {item.reference.raw} -->\n{item.content.rstrip()}\n")
    return "\n".join(blocks)
