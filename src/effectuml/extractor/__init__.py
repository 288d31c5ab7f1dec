"""Effect extraction from TypeScript sources."""

from effectuml.extractor.effects import EffectsExtractor, extract_effects
from effectuml.extractor.registry import ActionCategory, ActionTypeRegistry, ActionVariant
from effectuml.extractor.tree import Diagnostic, DiagnosticCategory, SourceUnit, TypeScriptProject
from effectuml.extractor.tsconfig import CompilerOptions, load_compiler_options

__all__ = [
    "ActionCategory",
    "ActionTypeRegistry",
    "ActionVariant",
    "CompilerOptions",
    "Diagnostic",
    "DiagnosticCategory",
    "EffectsExtractor",
    "SourceUnit",
    "TypeScriptProject",
    "extract_effects",
    "load_compiler_options",
]
