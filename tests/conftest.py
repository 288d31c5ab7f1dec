"""Shared fixtures: TypeScript projects written into per-test tmp dirs."""

import pytest

from effectuml.extractor.tree import TypeScriptProject
from tests.helpers import (
    ACTION_BASES_TS,
    FOO_EFFECTS_TS,
    LAYOUT_ACTIONS_TS,
    LAYOUT_EFFECTS_TS,
    write_tree,
)


@pytest.fixture
def project():
    """Project without compiler options (relative imports only)."""
    return TypeScriptProject()


@pytest.fixture
def layout_files(tmp_path):
    """The sidenav layout example split into actions and effects files."""
    return write_tree(tmp_path, {
        "actions.ts": ACTION_BASES_TS,
        "layout.actions.ts": LAYOUT_ACTIONS_TS,
        "layout.effects.ts": LAYOUT_EFFECTS_TS,
    })


@pytest.fixture
def foo_files(tmp_path):
    """Single file declaring FooCommand/BarCommand/BazEvent and effect X."""
    return write_tree(tmp_path, {
        "actions.ts": ACTION_BASES_TS,
        "foo.effects.ts": FOO_EFFECTS_TS,
    })


@pytest.fixture
def write_effects(tmp_path, project):
    """Write an effects source next to the action bases and parse it."""

    def _write(source: str, name: str = "test.effects.ts", extra: dict[str, str] | None = None):
        files = {"actions.ts": ACTION_BASES_TS, **(extra or {}), name: source}
        paths = write_tree(tmp_path, files)
        return project.load(paths[name])

    return _write
