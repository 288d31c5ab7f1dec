"""tsconfig.json loading: comment-tolerant JSON and recursive `extends`."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from effectuml import config
from effectuml.errors import TsConfigError

logger = logging.getLogger(__name__)

# Strings are matched first so comment markers inside them survive
_JSONC_TOKENS = re.compile(
    r'("(?:\\.|[^"\\])*")|(//[^\n]*)|(/\*.*?\*/)',
    re.DOTALL,
)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


@dataclass
class CompilerOptions:
    """The subset of compilerOptions that affects module resolution."""

    base_url: Path | None = None
    paths: dict[str, list[str]] = field(default_factory=dict)
    paths_base: Path | None = None
    config_path: Path | None = None


def strip_json_comments(text: str) -> str:
    """Remove // and /* */ comments plus trailing commas from JSONC text."""

    def _keep_strings(match: re.Match[str]) -> str:
        return match.group(1) or ""

    without_comments = _JSONC_TOKENS.sub(_keep_strings, text)
    return _TRAILING_COMMA.sub(r"\1", without_comments)


def _read_config(path: Path) -> dict:
    try:
        text = path.read_text(encoding=config.SOURCE_ENCODING)
    except OSError as e:
        raise TsConfigError(f"Cannot read {path}: {e}") from e
    try:
        data = json.loads(strip_json_comments(text))
    except json.JSONDecodeError as e:
        raise TsConfigError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise TsConfigError(f"{path} does not contain a JSON object")
    return data


def _resolve_extends(base_dir: Path, ref: str) -> Path:
    if not ref.startswith("."):
        # Package-style bases would need node_modules lookup
        raise TsConfigError(f"Unsupported non-relative extends {ref!r} in {base_dir}")
    path = (base_dir / ref).resolve()
    if path.suffix != ".json":
        path = path.with_name(path.name + ".json")
    return path


def _load(path: Path, seen: tuple[Path, ...]) -> CompilerOptions:
    if path in seen:
        chain = " -> ".join(str(p) for p in (*seen, path))
        raise TsConfigError(f"Circular extends: {chain}")

    data = _read_config(path)
    base_dir = path.parent

    # Bases first, so this file's settings override them
    options = CompilerOptions()
    extends = data.get("extends")
    if isinstance(extends, str):
        extends = [extends]
    for ref in extends or []:
        base_path = _resolve_extends(base_dir, ref)
        logger.debug("%s extends %s", path, base_path)
        parent = _load(base_path, (*seen, path))
        options = CompilerOptions(
            base_url=parent.base_url or options.base_url,
            paths=parent.paths or options.paths,
            paths_base=parent.paths_base if parent.paths else options.paths_base,
        )

    compiler_options = data.get("compilerOptions") or {}
    base_url = compiler_options.get("baseUrl")
    if base_url is not None:
        options.base_url = (base_dir / base_url).resolve()
        if options.paths:
            options.paths_base = options.base_url
    paths = compiler_options.get("paths")
    if isinstance(paths, dict):
        options.paths = {
            pattern: [t for t in targets if isinstance(t, str)]
            for pattern, targets in paths.items()
            if isinstance(targets, list)
        }
        # `paths` without any baseUrl are relative to the declaring config
        options.paths_base = options.base_url or base_dir.resolve()

    options.config_path = path
    return options


def load_compiler_options(path: Path) -> CompilerOptions:
    """Load compiler options from a tsconfig, following `extends` recursively.

    Raises:
        TsConfigError: unreadable or invalid config, unsupported or circular extends.
    """
    return _load(Path(path).resolve(), ())
