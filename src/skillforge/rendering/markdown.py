"""Markdown formatting helpers shared by the template blocks."""

from __future__ import annotations

import json
from typing import Any


def heading(text: str, level: int = 1) -> str:
    """Return a Markdown heading."""
    return f"{'#' * level} {text}\n"


def bullet_list(items: list[str]) -> str:
    """Return a Markdown bullet list."""
    if not items:
        return ""
    return "\n".join(f"- {item}" for item in items) + "\n"


def fenced_code(content: str, language: str = "") -> str:
    """Return a Markdown fenced code block."""
    return f"```{language}\n{content}\n```\n"


def labelled(label: str, value: str) -> str:
    """Return a ``**Label:** value`` line."""
    return f"**{label}:** {value}\n"


def stringify(value: Any) -> str:
    """Render an arbitrary extracted value as literal text.

    None becomes the empty string; containers become compact JSON so
    the output never contains Python reprs.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dict | list | tuple | bool):
        return json.dumps(value, ensure_ascii=False)
    return str(value)
