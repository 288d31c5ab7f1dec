"""Renderer-agnostic diagram model."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from effectuml.errors import UnsupportedDiagramTypeError


class DiagramType(str, Enum):
    ACTIVITY = "activity"
    TEMPLATE_ACTIVITY = "template-activity"
    SEQUENCE = "sequence"

    @classmethod
    def choices(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, value: DiagramType | str) -> DiagramType:
        """Coerce a user-supplied value, raising UnsupportedDiagramTypeError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedDiagramTypeError(value, cls.choices()) from None


def _as_names(values: Iterable[str] | None) -> tuple[str, ...] | None:
    if values is None:
        return None
    names = tuple(values)
    return names or None


@dataclass(frozen=True)
class EffectDefinition:
    """One @Effect() member: its name, tagging decorators and message types.

    Empty decorator/type sequences are stored as None so callers only ever
    check for absence.
    """

    name: str
    tagging_decorators: tuple[str, ...] | None = None
    input_types: tuple[str, ...] | None = None
    output_types: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("EffectDefinition.name must be a non-empty string")
        object.__setattr__(self, "tagging_decorators", _as_names(self.tagging_decorators))
        object.__setattr__(self, "input_types", _as_names(self.input_types))
        object.__setattr__(self, "output_types", _as_names(self.output_types))


# One source file's effects, in declaration order
DiagramModel = tuple[EffectDefinition, ...]
