"""Activity diagrams drawn from per-decorator Jinja2 templates.

The first tagging decorator of an effect names its template:
`@ContentBasedDecider()` -> `<templates_dir>/content-based-decider.puml`.
Templates are read from disk on every render and receive `inputActions`,
`outputActions` and `effectName`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

from jinja2 import Environment, StrictUndefined, TemplateError

from effectuml import config
from effectuml.errors import NoTaggingDecoratorError, TemplateNotFoundError, TemplateRenderError
from effectuml.models import EffectDefinition
from effectuml.render.base import strip_document_markers

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".puml"

_WORDS = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


def first_entry(values: Sequence[str]) -> str:
    return values[0] if values else ""


def _create_env() -> Environment:
    env = Environment(
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
        undefined=StrictUndefined,
        autoescape=False,
    )
    env.filters["first_entry"] = first_entry
    return env


_ENV = _create_env()


def template_key(decorator_name: str) -> str:
    """Dash-separated lookup key: `_AggregatorDecider` -> `aggregator-decider`."""
    return "-".join(word.lower() for word in _WORDS.findall(decorator_name))


class TemplateActivityRenderer:
    name = "template-activity"

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = Path(templates_dir) if templates_dir is not None else config.TEMPLATES_DIR

    def render_blocks(self, model: Sequence[EffectDefinition]) -> list[str]:
        return [self.render_effect(effect) for effect in model]

    def template_path(self, key: str) -> Path:
        return self.templates_dir / f"{key}{TEMPLATE_SUFFIX}"

    def load_template(self, key: str) -> str:
        path = self.template_path(key)
        logger.debug("Loading template %s", path)
        try:
            return path.read_text(encoding=config.SOURCE_ENCODING)
        except FileNotFoundError:
            raise TemplateNotFoundError(key, path) from None

    def render_effect(self, effect: EffectDefinition) -> str:
        if not effect.tagging_decorators:
            raise NoTaggingDecoratorError(effect.name)
        key = template_key(effect.tagging_decorators[0])
        source = self.load_template(key)
        try:
            rendered = _ENV.from_string(source).render(
                inputActions=list(effect.input_types or ()),
                outputActions=list(effect.output_types or ()),
                effectName=effect.name,
            )
        except TemplateError as e:
            raise TemplateRenderError(key, self.template_path(key), str(e)) from e
        return strip_document_markers(rendered)
