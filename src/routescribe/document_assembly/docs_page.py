"""Viewer page for a generated document."""

from __future__ import annotations

import html

DEFAULT_SPEC_PATH = "/openapi.json"

_VIEWER_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{title}</title>
    <style>
        body {{ margin: 0; padding: 0; }}
    </style>
</head>
<body>
    <redoc spec-url="{spec_url}"></redoc>
    <script src="https://cdn.redoc.ly/redoc/latest/bundles/redoc.standalone.js"></script>
</body>
</html>
"""


def render_docs_page(spec_url: str = DEFAULT_SPEC_PATH, title: str = "API Reference") -> str:
    """Return an HTML page that renders the document served at `spec_url`."""
    return _VIEWER_TEMPLATE.format(
        title=html.escape(title),
        spec_url=html.escape(spec_url, quote=True),
    )
