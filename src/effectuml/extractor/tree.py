"""Tree-sitter TypeScript/TSX access: parse source units, resolve imports, report diagnostics."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import tree_sitter_typescript as ts_typescript
from tree_sitter import Language, Node, Parser, Query, QueryCursor, Tree

from effectuml.extractor.tsconfig import CompilerOptions

logger = logging.getLogger(__name__)

TS_LANGUAGE = Language(ts_typescript.language_typescript())
TSX_LANGUAGE = Language(ts_typescript.language_tsx())

# ── Tree-sitter queries for declaration discovery ──
# Classes (exported or not, abstract or not), enums, type aliases and every
# statement carrying a module specifier (imports and re-exports).

_DECLARATION_QUERY_SRC = """
(class_declaration
  name: (type_identifier) @name) @class

(abstract_class_declaration
  name: (type_identifier) @name) @class

(enum_declaration
  name: (identifier) @name) @enum

(type_alias_declaration
  name: (type_identifier) @name) @alias

(import_statement
  source: (string) @source) @import

(export_statement
  source: (string) @source) @import
"""

_DECLARATION_KINDS = ("class", "enum", "alias", "import")

_RESOLVE_SUFFIXES = (".ts", ".tsx", ".d.ts")
_INDEX_FILES = ("index.ts", "index.tsx", "index.d.ts")


def node_text(node: Node) -> str:
    return node.text.decode("utf-8", errors="replace")


def string_value(node: Node) -> str:
    """Value of a string literal node, without its quotes."""
    return node_text(node)[1:-1]


class DiagnosticCategory(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    category: DiagnosticCategory
    message: str
    file_path: Path
    line: int
    column: int

    def format(self) -> str:
        return f"{self.file_path}:{self.line}:{self.column} {self.category.value}: {self.message}"


class SourceUnit:
    """One parsed TypeScript file plus the project it resolves imports through."""

    def __init__(self, project: TypeScriptProject, path: Path, source: bytes, tree: Tree, query: Query) -> None:
        self.project = project
        self.path = path
        self.source = source
        self.tree = tree
        self._query = query
        self._declarations: dict[str, list[tuple[Node, Node]]] | None = None

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def _collect_declarations(self) -> dict[str, list[tuple[Node, Node]]]:
        if self._declarations is not None:
            return self._declarations

        found: dict[str, list[tuple[Node, Node]]] = {kind: [] for kind in _DECLARATION_KINDS}
        cursor = QueryCursor(self._query)
        for _pattern_idx, captures in cursor.matches(self.root):
            for kind in _DECLARATION_KINDS:
                def_nodes = captures.get(kind, [])
                if not def_nodes:
                    continue
                detail = captures.get("source") or captures.get("name") or []
                if detail:
                    found[kind].append((def_nodes[0], detail[0]))
                break

        # Document order matters for first-match lookups
        for entries in found.values():
            entries.sort(key=lambda entry: entry[0].start_byte)
        self._declarations = found
        return found

    def classes(self) -> list[Node]:
        return [node for node, _name in self._collect_declarations()["class"]]

    def enums(self) -> list[Node]:
        return [node for node, _name in self._collect_declarations()["enum"]]

    def type_aliases(self) -> list[Node]:
        return [node for node, _name in self._collect_declarations()["alias"]]

    def import_specifiers(self) -> list[str]:
        """Module specifiers of import/re-export statements, in source order."""
        return [string_value(source) for _node, source in self._collect_declarations()["import"]]

    def resolved_imports(self) -> list[tuple[str, Path | None]]:
        return [
            (specifier, self.project.resolve_module(specifier, self.path))
            for specifier in self.import_specifiers()
        ]

    def imported_units(self) -> list[SourceUnit]:
        """Directly imported units that resolve to a file on disk."""
        units = []
        seen: set[Path] = set()
        for _specifier, path in self.resolved_imports():
            if path is None or path in seen:
                continue
            seen.add(path)
            units.append(self.project.load(path))
        return units

    def import_graph(self) -> list[SourceUnit]:
        """Every unit reachable through imports, depth-first in import order.

        Each file appears once; this unit itself is excluded.
        """
        visited: set[Path] = {self.path.resolve()}
        ordered: list[SourceUnit] = []

        def _visit(unit: SourceUnit) -> None:
            for _specifier, path in unit.resolved_imports():
                if path is None or path in visited:
                    continue
                visited.add(path)
                imported = unit.project.load(path)
                ordered.append(imported)
                _visit(imported)

        _visit(self)
        logger.debug("Import graph of %s: %d unit(s)", self.path, len(ordered))
        return ordered

    def get_diagnostics(self) -> list[Diagnostic]:
        """Syntax errors (ERROR) and unresolvable relative imports (WARNING)."""
        diagnostics: list[Diagnostic] = []
        if self.root.has_error:
            self._collect_syntax_errors(self.root, diagnostics)

        for statement, source in self._collect_declarations()["import"]:
            specifier = string_value(source)
            if not specifier.startswith("."):
                continue
            if self.project.resolve_module(specifier, self.path) is None:
                diagnostics.append(
                    self._diagnostic(
                        statement,
                        f"Cannot find module '{specifier}'",
                        category=DiagnosticCategory.WARNING,
                    )
                )
        return diagnostics

    def _collect_syntax_errors(self, root: Node, out: list[Diagnostic]) -> None:
        stack = [root]
        while stack:
            node = stack.pop()
            if node.is_missing:
                out.append(self._diagnostic(node, f"Missing '{node.type}'"))
                continue
            if node.is_error:
                snippet = node_text(node).split("\n", 1)[0][:40]
                out.append(self._diagnostic(node, f"Syntax error near {snippet!r}"))
                continue
            stack.extend(
                child for child in reversed(node.children) if child.has_error or child.is_missing
            )

    def _diagnostic(
        self, node: Node, message: str,
        category: DiagnosticCategory = DiagnosticCategory.ERROR,
    ) -> Diagnostic:
        return Diagnostic(
            category=category,
            message=message,
            file_path=self.path,
            line=node.start_point[0] + 1,  # 1-indexed
            column=node.start_point[1] + 1,
        )


class TypeScriptProject:
    """Parses TypeScript/TSX files and resolves module specifiers between them.

    Parser objects are not shared: create one project per thread.
    """

    def __init__(self, compiler_options: CompilerOptions | None = None) -> None:
        self.compiler_options = compiler_options or CompilerOptions()
        self._ts_parser = Parser(TS_LANGUAGE)
        self._tsx_parser = Parser(TSX_LANGUAGE)
        self._ts_query = Query(TS_LANGUAGE, _DECLARATION_QUERY_SRC)
        self._tsx_query = Query(TSX_LANGUAGE, _DECLARATION_QUERY_SRC)

    def _get_parser_and_query(self, path: Path) -> tuple[Parser, Query]:
        if path.suffix == ".tsx":
            return self._tsx_parser, self._tsx_query
        return self._ts_parser, self._ts_query

    def load(self, path: Path) -> SourceUnit:
        """Read and parse a file. OSError propagates to the caller."""
        path = Path(path)
        source = path.read_bytes()
        return self.parse(source, path)

    def parse(self, source: str | bytes, path: Path) -> SourceUnit:
        if isinstance(source, str):
            source = source.encode("utf-8")
        path = Path(path)
        parser, query = self._get_parser_and_query(path)
        t0 = time.perf_counter()
        tree = parser.parse(source)
        logger.debug("Parsed %s (%d bytes, %.3fs)", path, len(source), time.perf_counter() - t0)
        return SourceUnit(self, path, source, tree, query)

    def resolve_module(self, specifier: str, importer: Path) -> Path | None:
        """Map a module specifier to a source file, or None if not statically resolvable."""
        if specifier.startswith("."):
            candidates = [importer.parent / specifier]
        else:
            candidates = self._mapped_candidates(specifier)

        for candidate in candidates:
            resolved = _probe(candidate)
            if resolved is not None:
                return resolved
        return None

    def _mapped_candidates(self, specifier: str) -> list[Path]:
        options = self.compiler_options
        candidates: list[Path] = []
        if options.paths and options.paths_base is not None:
            for pattern, targets in options.paths.items():
                captured = _match_path_pattern(pattern, specifier)
                if captured is None:
                    continue
                candidates.extend(
                    options.paths_base / target.replace("*", captured) for target in targets
                )
        if options.base_url is not None:
            candidates.append(options.base_url / specifier)
        return candidates


def _match_path_pattern(pattern: str, specifier: str) -> str | None:
    """Return the text matched by `*` in a `paths` pattern, or None."""
    if "*" not in pattern:
        return "" if pattern == specifier else None
    prefix, _star, suffix = pattern.partition("*")
    if (
        specifier.startswith(prefix)
        and specifier.endswith(suffix)
        and len(specifier) >= len(prefix) + len(suffix)
    ):
        return specifier[len(prefix):len(specifier) - len(suffix)]
    return None


def _probe(candidate: Path) -> Path | None:
    if candidate.suffix in (".ts", ".tsx") and candidate.is_file():
        return candidate.resolve()
    if candidate.suffix == ".js":
        swapped = candidate.with_suffix(".ts")
        if swapped.is_file():
            return swapped.resolve()
    for suffix in _RESOLVE_SUFFIXES:
        with_suffix = candidate.with_name(candidate.name + suffix)
        if with_suffix.is_file():
            return with_suffix.resolve()
    if candidate.is_dir():
        for index in _INDEX_FILES:
            index_path = candidate / index
            if index_path.is_file():
                return index_path.resolve()
    return None
