"""Markdown -> HTML rendering for changelogs and readme sections."""

from __future__ import annotations

import markdown

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]


def render_markdown(text: str) -> str:
    """Render Markdown `text` to an HTML fragment."""
    return markdown.markdown(str(text or ""), extensions=MARKDOWN_EXTENSIONS)
