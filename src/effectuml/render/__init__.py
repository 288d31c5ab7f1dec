"""Diagram rendering: one renderer per DiagramType plus the document envelope."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from effectuml.models import DiagramType, EffectDefinition
from effectuml.render.activity import ActivityRenderer
from effectuml.render.base import DiagramRenderer, wrap_document
from effectuml.render.sequence import SequenceRenderer
from effectuml.render.template import TemplateActivityRenderer

logger = logging.getLogger(__name__)

_RENDERERS: dict[DiagramType, Callable[[], DiagramRenderer]] = {
    DiagramType.ACTIVITY: ActivityRenderer,
    DiagramType.TEMPLATE_ACTIVITY: TemplateActivityRenderer,
    DiagramType.SEQUENCE: SequenceRenderer,
}


def get_renderer(diagram_type: DiagramType | str) -> DiagramRenderer:
    """Renderer for a diagram type.

    Raises:
        UnsupportedDiagramTypeError: unknown diagram type.
    """
    return _RENDERERS[DiagramType.parse(diagram_type)]()


def render(diagram_type: DiagramType | str, model: Sequence[EffectDefinition]) -> str:
    """Render a full PlantUML document for one file's effects."""
    renderer = get_renderer(diagram_type)
    blocks = renderer.render_blocks(model)
    logger.debug("Rendered %d effect(s) with %s renderer", len(model), renderer.name)
    return wrap_document(blocks)


__all__ = [
    "ActivityRenderer",
    "DiagramRenderer",
    "SequenceRenderer",
    "TemplateActivityRenderer",
    "get_renderer",
    "render",
]
