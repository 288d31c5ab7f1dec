"""Renderer protocol and the PlantUML document envelope."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from effectuml.models import EffectDefinition

DOCUMENT_START = "@startuml"
DOCUMENT_END = "@enduml"


@runtime_checkable
class DiagramRenderer(Protocol):
    name: str

    def render_blocks(self, model: Sequence[EffectDefinition]) -> list[str]: ...


def wrap_document(blocks: Sequence[str]) -> str:
    """Join rendered blocks between the document header and footer."""
    return "\n".join([DOCUMENT_START, *(b for b in blocks if b), DOCUMENT_END])


def strip_document_markers(text: str) -> str:
    return text.replace(DOCUMENT_START, "").replace(DOCUMENT_END, "").strip()
