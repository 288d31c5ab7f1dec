"""CLI: Generate PlantUML diagrams from NgRx effects source files."""

from __future__ import annotations

import argparse
import glob
import logging
import sys
import time
from pathlib import Path

from effectuml import __version__, config
from effectuml.errors import TsConfigError, UnsupportedDiagramTypeError
from effectuml.extractor.tsconfig import CompilerOptions, load_compiler_options
from effectuml.models import DiagramType
from effectuml.pipeline import run_batch

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def expand_sources(patterns: list[str]) -> list[Path]:
    """Expand glob patterns (recursive `**` allowed), keeping order and dropping duplicates."""
    paths: list[Path] = []
    seen: set[Path] = set()
    for pattern in patterns:
        if any(c in pattern for c in "*?["):
            matches = sorted(glob.glob(pattern, recursive=True))
        else:
            matches = [pattern]
        for match in matches:
            path = Path(match)
            key = path.resolve()
            if key not in seen:
                seen.add(key)
                paths.append(path)
    return paths


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="effectuml",
        description="Generate PlantUML diagrams from NgRx effects",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to tsconfig.json (baseUrl/paths are used to resolve imports)",
    )
    parser.add_argument(
        "-s", "--source",
        action="append",
        default=[],
        help="Path or glob of an effects source file (repeatable)",
    )
    parser.add_argument(
        "sources",
        nargs="*",
        help="More source paths or globs",
    )
    parser.add_argument(
        "-d", "--diagram",
        choices=DiagramType.choices(),
        default=config.DEFAULT_DIAGRAM,
        help="The diagram type to use (default: %(default)s)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of files processed in parallel (default: executor default)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    # The default comes from the environment and bypasses argparse choices
    try:
        diagram_type = DiagramType.parse(args.diagram)
    except UnsupportedDiagramTypeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    sources = expand_sources([*args.source, *args.sources])
    if not sources:
        print("Error: no source files given (use -s/--source or positional paths).", file=sys.stderr)
        return 1

    compiler_options: CompilerOptions | None = None
    if args.config is not None:
        try:
            compiler_options = load_compiler_options(args.config)
        except TsConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        logger.debug("Compiler options: %s", compiler_options)

    def _on_progress(event: dict) -> None:
        marker = "" if event["status"] == "done" else " (failed)"
        print(f"  [{event['current']}/{event['total']}] {event['file']}{marker}")

    print(f"Generating {diagram_type.value} diagrams for {len(sources)} file(s)")
    start = time.time()
    result = run_batch(
        sources,
        diagram_type,
        compiler_options=compiler_options,
        max_workers=args.workers,
        on_progress=_on_progress,
    )
    elapsed = time.time() - start

    for file_result in result["results"]:
        if not file_result.ok:
            print(f"Error: {file_result.source}: {file_result.error}", file=sys.stderr)

    print(f"\nDone in {elapsed:.1f}s")
    print(f"  Written: {result['written']}")
    print(f"  Errors: {result['errors']}")
    return 1 if result["errors"] else 0


if __name__ == "__main__":
    sys.exit(main())
