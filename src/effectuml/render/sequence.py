"""PlantUML relation diagrams: one `(input) -> (output) : effect` line per pairing."""

from __future__ import annotations

from collections.abc import Sequence

from effectuml.models import EffectDefinition

DIRECTION = "left to right direction"


class SequenceRenderer:
    name = "sequence"

    def render_blocks(self, model: Sequence[EffectDefinition]) -> list[str]:
        return [DIRECTION, *(self.render_effect(effect) for effect in model)]

    def render_effect(self, effect: EffectDefinition) -> str:
        if effect.input_types is None or effect.output_types is None:
            return ""
        return "\n".join(
            f"({input_type}) -> ({output_type}) : {effect.name}"
            for input_type in effect.input_types
            for output_type in effect.output_types
        )
