"""Tests for tsconfig.json loading."""

import pytest

from effectuml.errors import TsConfigError
from effectuml.extractor.tsconfig import load_compiler_options, strip_json_comments
from tests.helpers import write_tree


def test_strip_comments_keeps_strings():
    text = '{\n  // line\n  "a": "http://x/*y*/", /* block */\n  "b": [1, 2,],\n}'
    assert strip_json_comments(text) == '{\n  \n  "a": "http://x/*y*/", \n  "b": [1, 2]\n}'


def test_base_url_and_paths(tmp_path):
    paths = write_tree(tmp_path, {
        "tsconfig.json": """{
  // Angular style config
  "compilerOptions": {
    "baseUrl": "./src",
    "paths": { "@app/*": ["app/*"], },
  },
}
""",
    })
    options = load_compiler_options(paths["tsconfig.json"])
    assert options.base_url == (tmp_path / "src").resolve()
    assert options.paths == {"@app/*": ["app/*"]}
    assert options.paths_base == (tmp_path / "src").resolve()
    assert options.config_path == paths["tsconfig.json"].resolve()


def test_paths_without_base_url_are_relative_to_config(tmp_path):
    paths = write_tree(tmp_path, {
        "config/tsconfig.json": '{"compilerOptions": {"paths": {"lib": ["lib/index.ts"]}}}',
    })
    options = load_compiler_options(paths["config/tsconfig.json"])
    assert options.base_url is None
    assert options.paths_base == (tmp_path / "config").resolve()


def test_extends_child_overrides(tmp_path):
    paths = write_tree(tmp_path, {
        "tsconfig.base.json": """{
  "compilerOptions": {
    "baseUrl": ".",
    "paths": { "@shared/*": ["shared/*"] }
  }
}""",
        "app/tsconfig.json": """{
  "extends": "../tsconfig.base.json",
  "compilerOptions": { "paths": { "@app/*": ["app/*"] } }
}""",
    })
    options = load_compiler_options(paths["app/tsconfig.json"])
    assert options.base_url == tmp_path.resolve()
    # paths are replaced, not merged
    assert options.paths == {"@app/*": ["app/*"]}
    assert options.paths_base == tmp_path.resolve()


def test_extends_inherits_when_child_is_silent(tmp_path):
    paths = write_tree(tmp_path, {
        "base.json": '{"compilerOptions": {"baseUrl": "src", "paths": {"x": ["y"]}}}',
        "tsconfig.json": '{"extends": "./base"}',
    })
    options = load_compiler_options(paths["tsconfig.json"])
    assert options.base_url == (tmp_path / "src").resolve()
    assert options.paths == {"x": ["y"]}
    assert options.paths_base == (tmp_path / "src").resolve()


def test_circular_extends(tmp_path):
    paths = write_tree(tmp_path, {
        "a.json": '{"extends": "./b.json"}',
        "b.json": '{"extends": "./a.json"}',
    })
    with pytest.raises(TsConfigError, match="Circular"):
        load_compiler_options(paths["a.json"])


def test_non_relative_extends(tmp_path):
    paths = write_tree(tmp_path, {
        "tsconfig.json": '{"extends": "@tsconfig/strictest/tsconfig.json"}',
    })
    with pytest.raises(TsConfigError, match="non-relative"):
        load_compiler_options(paths["tsconfig.json"])


def test_missing_file(tmp_path):
    with pytest.raises(TsConfigError, match="Cannot read"):
        load_compiler_options(tmp_path / "nope.json")


def test_invalid_json(tmp_path):
    paths = write_tree(tmp_path, {"tsconfig.json": '{"compilerOptions": '})
    with pytest.raises(TsConfigError, match="Invalid JSON"):
        load_compiler_options(paths["tsconfig.json"])


def test_not_an_object(tmp_path):
    paths = write_tree(tmp_path, {"tsconfig.json": "[]"})
    with pytest.raises(TsConfigError):
        load_compiler_options(paths["tsconfig.json"])
