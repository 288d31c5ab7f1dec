"""Pipeline step functions: one source file in, one .puml document out.

Each file is processed in isolation (its own project, parser and registry),
so a batch fans files out over a thread pool and fans the results back in.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from effectuml import config
from effectuml.errors import CompileDiagnosticsError, EffectUmlError, NoEffectsFoundError
from effectuml.extractor.effects import extract_effects
from effectuml.extractor.tree import DiagnosticCategory, SourceUnit, TypeScriptProject
from effectuml.extractor.tsconfig import CompilerOptions
from effectuml.models import DiagramType
from effectuml.render import render

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    source: Path
    target: Path | None = None
    effects: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def target_path_for(source: Path) -> Path:
    """`src/layout.effects.ts` -> `src/layout.effects.puml`."""
    return source.with_suffix(f".{config.TARGET_EXT}")


def check_diagnostics(unit: SourceUnit) -> None:
    """Raise on error-severity diagnostics; warnings are only logged."""
    diagnostics = unit.get_diagnostics()
    errors = [d for d in diagnostics if d.category == DiagnosticCategory.ERROR]
    for diagnostic in diagnostics:
        if diagnostic.category == DiagnosticCategory.WARNING:
            logger.warning("%s", diagnostic.format())
    if errors:
        raise CompileDiagnosticsError(unit.path, errors)


def generate_puml(
    source: Path,
    diagram_type: DiagramType | str,
    compiler_options: CompilerOptions | None = None,
) -> tuple[str, int]:
    """Parse, check, extract and render one file.

    Returns (document, number of effects).
    """
    project = TypeScriptProject(compiler_options)
    unit = project.load(source)
    check_diagnostics(unit)
    effects = extract_effects(unit)
    if not effects:
        raise NoEffectsFoundError(source)
    return render(diagram_type, effects), len(effects)


def process_source_file(
    source: Path,
    diagram_type: DiagramType | str,
    compiler_options: CompilerOptions | None = None,
) -> FileResult:
    """Generate the document for one file and write it next to the source."""
    source = Path(source)
    document, n_effects = generate_puml(source, diagram_type, compiler_options)
    target = target_path_for(source)
    target.write_text(document, encoding=config.TARGET_ENCODING)
    logger.info("Wrote %s (%d effects)", target, n_effects)
    return FileResult(source=source, target=target, effects=n_effects)


def run_batch(
    sources: Sequence[Path],
    diagram_type: DiagramType | str,
    compiler_options: CompilerOptions | None = None,
    max_workers: int | None = None,
    on_progress: Callable[[dict], None] | None = None,
) -> dict:
    """Process source files concurrently, one task per file.

    A failing file is recorded in its FileResult and never aborts its
    siblings. The diagram type is validated before any file is read.

    Returns {"files_processed": N, "written": N, "errors": N, "results": [FileResult, ...]}
    with results in input order.
    """
    diagram_type = DiagramType.parse(diagram_type)
    sources = [Path(s) for s in sources]
    total = len(sources)
    results: list[FileResult | None] = [None] * total

    def _task(source: Path) -> FileResult:
        try:
            return process_source_file(source, diagram_type, compiler_options)
        except (EffectUmlError, OSError) as e:
            logger.debug("Failed %s", source, exc_info=True)
            return FileResult(source=source, error=str(e))

    with ThreadPoolExecutor(max_workers=max_workers or config.MAX_WORKERS) as executor:
        futures = {executor.submit(_task, source): i for i, source in enumerate(sources)}
        for current, future in enumerate(as_completed(futures), 1):
            i = futures[future]
            result = future.result()
            results[i] = result
            if on_progress:
                on_progress({
                    "step": "generate", "current": current, "total": total,
                    "file": str(result.source),
                    "status": "done" if result.ok else "failed",
                    "error": result.error,
                })

    finished = [r for r in results if r is not None]
    errors = sum(1 for r in finished if not r.ok)
    return {
        "files_processed": total,
        "written": total - errors,
        "errors": errors,
        "results": finished,
    }
