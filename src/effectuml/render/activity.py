"""PlantUML activity diagrams: an input lane and an output lane per effect.

Several inputs funnel into one effect, so they are drawn as a fork. Several
outputs continue independently and never rejoin, so they are drawn as a
split whose branches each end in `detach`.
"""

from __future__ import annotations

from collections.abc import Sequence

from effectuml.models import EffectDefinition

INPUT_LANE = "|In|"
OUTPUT_LANE = "|Out|"
DETACH = "detach"


def action(name: str) -> str:
    return f":{name};"


def arrow(label: str) -> str:
    return f"-> {label};"


def branches(
    actions: Sequence[str], open_kw: str, again_kw: str, close_kw: str, detach: bool = False,
) -> list[str]:
    """Lines for a lane: nothing, one action, or one branch per action."""
    if not actions:
        return []
    if len(actions) == 1:
        return [action(actions[0])]
    lines = []
    for i, name in enumerate(actions):
        lines.append(open_kw if i == 0 else again_kw)
        lines.append(f"  {action(name)}")
        if detach:
            lines.append(f"  {DETACH}")
    lines.append(close_kw)
    return lines


def fork(actions: Sequence[str]) -> list[str]:
    return branches(actions, "fork", "fork again", "end fork")


def split(actions: Sequence[str]) -> list[str]:
    return branches(actions, "split", "split again", "end split", detach=True)


class ActivityRenderer:
    name = "activity"

    def render_blocks(self, model: Sequence[EffectDefinition]) -> list[str]:
        return [self.render_effect(effect) for effect in model]

    def render_effect(self, effect: EffectDefinition) -> str:
        inputs = effect.input_types or ()
        outputs = effect.output_types or ()

        lines = [INPUT_LANE, "start", arrow(effect.name)]
        if effect.tagging_decorators:
            lines.append(arrow(", ".join(effect.tagging_decorators)))
        lines.extend(fork(inputs))
        lines.append(OUTPUT_LANE)
        lines.extend(split(outputs))
        # A split has already detached every branch
        if len(outputs) < 2:
            lines.append(DETACH)
        return "\n".join(lines)
