"""
Markdown rendering for the landing page.
"""

from __future__ import annotations

import html
from pathlib import Path

import markdown

MARKDOWN_EXTENSIONS = ["extra", "sane_lists", "toc"]

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


def render_markdown(text: str, title: str = "API") -> str:
    """Render markdown to a complete HTML document."""
    body = markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)
    return PAGE_TEMPLATE.format(title=html.escape(title), body=body)


def render_markdown_file(path: str | Path, title: str = "API") -> str:
    text = Path(path).read_text(encoding="utf-8")
    return render_markdown(text, title=title)
