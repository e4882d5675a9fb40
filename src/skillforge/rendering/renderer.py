"""Fill a content type's template set with analysis data."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from skillforge.constants import ContentType
from skillforge.rendering.blocks import TemplateData
from skillforge.rendering.templates import (
    TEMPLATE_SETS,
    Template,
    TemplateSet,
)
from skillforge.resilience.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedSkill:
    """A main document plus reference documents keyed by filename."""

    main_document: str
    references: dict[str, str] = field(
        default_factory=lambda: dict[str, str]()
    )

    @property
    def total_size(self) -> int:
        """UTF-8 byte size of every document."""
        return len(self.main_document.encode()) + sum(
            len(content.encode()) for content in self.references.values()
        )


def render_template(template: Template, data: TemplateData) -> str:
    """Render blocks in order, blank line between non-empty chunks."""
    chunks = [block.render(data) for block in template]
    return "\n".join(chunk for chunk in chunks if chunk)


class TemplateRenderer:
    """Selects the template set for a content type and renders it."""

    def __init__(
        self,
        template_sets: dict[ContentType, TemplateSet] | None = None,
    ) -> None:
        self._sets = (
            TEMPLATE_SETS if template_sets is None else template_sets
        )

    def supports(self, content_type: str) -> bool:
        try:
            return ContentType(content_type) in self._sets
        except ValueError:
            return False

    def render(
        self, content_type: str, template_data: TemplateData
    ) -> RenderedSkill:
        """Render the main document and every reference document.

        Raises ConfigurationError when ``content_type`` has no set.
        """
        if not self.supports(content_type):
            raise ConfigurationError(
                f"No template set registered for content type:"
                f" {content_type}"
            )
        template_set = self._sets[ContentType(content_type)]
        rendered = RenderedSkill(
            main_document=render_template(template_set.main, template_data),
            references={
                name: render_template(template, template_data)
                for name, template in template_set.references.items()
            },
        )
        logger.debug(
            "event=skill_rendered content_type=%s references=%d bytes=%d",
            content_type,
            len(rendered.references),
            rendered.total_size,
        )
        return rendered
