"""Declarative building blocks for skill document templates.

A template is a tuple of blocks. Each block knows how to render itself
against a ``TemplateData``; field paths are dotted keys into the
analysis ``extracted_data``. Missing fields render as nothing and a
non-list value where a list is expected renders as literal text, so
rendering never fails on the shape of the data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from skillforge.rendering.markdown import (
    bullet_list,
    fenced_code,
    heading,
    labelled,
    stringify,
)

_MISSING = object()

_STEP_ATTRIBUTES = (
    ("Description", "description"),
    ("Duration", "duration"),
    ("Owner", "owner"),
)


@dataclass(frozen=True)
class TemplateData:
    """Values a template can draw on."""

    skill_name: str
    description: str
    extracted_data: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )

    def lookup(self, path: str) -> Any:
        """Resolve a dotted path; returns None when any hop is missing."""
        node: Any = self.extracted_data
        for key in path.split("."):
            if not isinstance(node, dict):
                return None
            node = node.get(key, _MISSING)
            if node is _MISSING:
                return None
        return node

    def format(self, text: str) -> str:
        return text.format(
            skill_name=self.skill_name, description=self.description
        )


class Block(Protocol):
    def render(self, data: TemplateData) -> str: ...


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


@dataclass(frozen=True)
class Heading:
    text: str
    level: int = 1

    def render(self, data: TemplateData) -> str:
        return heading(data.format(self.text), self.level)


@dataclass(frozen=True)
class Text:
    """Literal paragraph; ``{skill_name}``/``{description}`` expand."""

    text: str

    def render(self, data: TemplateData) -> str:
        return data.format(self.text) + "\n"


@dataclass(frozen=True)
class Value:
    """A scalar field, optionally as a ``**Label:** value`` line."""

    path: str
    label: str | None = None
    suffix: str = ""

    def render(self, data: TemplateData) -> str:
        value = data.lookup(self.path)
        if _is_blank(value):
            return ""
        text = stringify(value) + self.suffix
        if self.label is None:
            return text + "\n"
        return labelled(self.label, text)


@dataclass(frozen=True)
class Bullets:
    """One bullet per list element; ``quote`` wraps each in quotes."""

    path: str
    quote: bool = False

    def render(self, data: TemplateData) -> str:
        value = data.lookup(self.path)
        if _is_blank(value):
            return ""
        if not isinstance(value, list):
            return stringify(value) + "\n"
        items = [stringify(item) for item in value]
        if self.quote:
            items = [f'"{item}"' for item in items]
        return bullet_list(items)


@dataclass(frozen=True)
class Terms:
    """Term → definition mapping rendered as bold-keyed bullets."""

    path: str

    def render(self, data: TemplateData) -> str:
        value = data.lookup(self.path)
        if _is_blank(value):
            return ""
        if isinstance(value, dict):
            return bullet_list(
                [f"**{term}:** {stringify(d)}" for term, d in value.items()]
            )
        if isinstance(value, list):
            return bullet_list([stringify(item) for item in value])
        return stringify(value) + "\n"


@dataclass(frozen=True)
class Steps:
    """Process steps: a sub-heading per step with its attributes."""

    path: str
    level: int = 4

    def render(self, data: TemplateData) -> str:
        value = data.lookup(self.path)
        if _is_blank(value):
            return ""
        if not isinstance(value, list):
            return stringify(value) + "\n"
        parts: list[str] = []
        for step in value:
            if not isinstance(step, dict):
                parts.append(bullet_list([stringify(step)]))
                continue
            attributes = [
                f"**{label}:** {stringify(step.get(key))}"
                for label, key in _STEP_ATTRIBUTES
            ]
            parts.append(
                heading(stringify(step.get("name")), self.level)
                + bullet_list(attributes)
            )
        return "".join(parts)


@dataclass(frozen=True)
class Examples:
    """Worked examples: scenario heading, code fence, explanation.

    ``explanation_label`` of None renders the explanation as plain text.
    """

    path: str
    level: int = 3
    explanation_label: str | None = None

    def render(self, data: TemplateData) -> str:
        value = data.lookup(self.path)
        if _is_blank(value):
            return ""
        if not isinstance(value, list):
            return stringify(value) + "\n"
        parts: list[str] = []
        for example in value:
            if not isinstance(example, dict):
                parts.append(bullet_list([stringify(example)]))
                continue
            explanation = stringify(example.get("explanation"))
            parts.append(
                heading(stringify(example.get("scenario")), self.level)
                + fenced_code(stringify(example.get("code")))
                + (
                    labelled(self.explanation_label, explanation)
                    if self.explanation_label
                    else explanation + "\n"
                )
            )
        return "".join(parts)
