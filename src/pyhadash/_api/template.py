"""Template endpoint: /api/template.

Templates are rendered server-side and come back as plain text. The
registry templates emit JSON-ish text that needs cleanup before parsing:
loops leave trailing commas behind, and the device template emits bare
comma-separated objects without surrounding brackets.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pyhadash._transport import Transport

_TRAILING_COMMA_RE = re.compile(r",\s*(?=[\]}])")


def clean_template_json(text: str) -> str:
    """Normalize rendered template output into a JSON array string."""
    cleaned = text.strip()
    if not cleaned.startswith("["):
        cleaned = "[" + cleaned.rstrip().rstrip(",") + "]"
    return _TRAILING_COMMA_RE.sub("", cleaned)


def parse_template_json(text: str) -> list[Any]:
    """Parse rendered template output as a list.

    Raises :class:`ValueError` when the cleaned text is not a JSON array.
    """
    value = json.loads(clean_template_json(text))
    if not isinstance(value, list):
        raise ValueError("Template output is not a JSON array")
    return value


async def render_template(transport: Transport, template: str) -> str:
    return await transport.request_text("POST", "/api/template", {"template": template})
