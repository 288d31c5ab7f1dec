"""Exceptions raised while extracting effects and rendering diagrams."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from effectuml.extractor.tree import Diagnostic


class EffectUmlError(Exception):
    """Base class for all effectuml failures."""


class TsConfigError(EffectUmlError):
    """Raised when a tsconfig.json (or one of its bases) cannot be loaded."""


class CompileDiagnosticsError(EffectUmlError):
    """Raised when a source unit has error-severity diagnostics."""

    def __init__(self, path: Path, diagnostics: Sequence[Diagnostic]) -> None:
        self.path = path
        self.diagnostics = list(diagnostics)
        messages = "\n".join(d.format() for d in self.diagnostics)
        super().__init__(f"{path} has compile errors:\n{messages}")


class NoEffectsFoundError(EffectUmlError):
    """Raised when a source file contains no @Effect() members."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"No effects found in source file {path}")


class MalformedAnnotationArgumentsError(EffectUmlError):
    """Raised when a tagging decorator passes explicit references in an unsupported shape."""

    def __init__(self, member_name: str, annotation: str, reason: str) -> None:
        self.member_name = member_name
        self.annotation = annotation
        self.reason = reason
        super().__init__(f"Invalid arguments for @{annotation}() on effect {member_name!r}: {reason}")


class UnsupportedDiagramTypeError(EffectUmlError):
    """Raised for a diagram type outside the supported set."""

    def __init__(self, value: object, choices: Iterable[str]) -> None:
        self.value = value
        self.choices = list(choices)
        super().__init__(
            f"Unknown diagram type {value!r}. Use one of: {', '.join(self.choices)}"
        )


class NoTaggingDecoratorError(EffectUmlError):
    """Raised when the template renderer meets an effect without tagging decorators."""

    def __init__(self, effect_name: str) -> None:
        self.effect_name = effect_name
        super().__init__(
            f"Effect {effect_name!r} has no tagging decorator to select a template with"
        )


class TemplateNotFoundError(EffectUmlError):
    """Raised when no template file exists for a tagging decorator."""

    def __init__(self, key: str, path: Path) -> None:
        self.key = key
        self.path = path
        super().__init__(f"No template {key!r} found at {path}")


class TemplateRenderError(EffectUmlError):
    """Raised when a template fails to compile or render."""

    def __init__(self, key: str, path: Path, reason: str) -> None:
        self.key = key
        self.path = path
        self.reason = reason
        super().__init__(f"Template {key!r} at {path} failed to render: {reason}")
