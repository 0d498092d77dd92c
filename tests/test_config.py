"""Tests for src/config.py — QuireConfig, TOML loading, CLI overrides."""

from pathlib import Path
from unittest.mock import patch

import pytest
from quire.config import QuireConfig, load_config, merge_cli_overrides
from quire.content.compiler import DEFAULT_EXTENSIONS, MdxCompiler
from quire.content.models import LoadMode
from quire.content.tags import TagRegistry


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove env vars that _apply_env_vars reads so tests see TOML values."""
    for key in (
        "QUIRE_CONTENT_DIR",
        "QUIRE_CONTENT_TYPE",
        "QUIRE_MODE",
        "QUIRE_TAG_REGISTRY",
        "QUIRE_MARKDOWN_EXTENSIONS",
    ):
        monkeypatch.delenv(key, raising=False)


class TestQuireConfigDefaults:
    def test_default_content(self):
        cfg = QuireConfig()
        assert cfg.content.directory == "./content"
        assert cfg.content.type == "post"
        assert cfg.content.mode == LoadMode.SLIM

    def test_default_compiler(self):
        cfg = QuireConfig()
        assert cfg.compiler.extensions == list(DEFAULT_EXTENSIONS)
        assert cfg.compiler.check_jsx is True

    def test_default_tags(self):
        assert QuireConfig().tags.registry_file == ""
        assert QuireConfig().to_tag_registry() is None


class TestLoadConfig:
    def test_load_from_explicit_path(self, tmp_path: Path):
        toml_path = tmp_path / ".quire.toml"
        toml_path.write_text(
            '[content]\ndirectory = "posts"\ntype = "article"\nmode = "full"\n'
        )
        cfg = load_config(toml_path)
        assert cfg.content.directory == "posts"
        assert cfg.content.type == "article"
        assert cfg.content.mode == LoadMode.FULL

    def test_load_missing_path_returns_defaults(self, tmp_path: Path):
        cfg = load_config(tmp_path / "nonexistent.toml")
        assert cfg.content.type == "post"

    def test_load_searches_cwd(self, tmp_path: Path, monkeypatch):
        toml_path = tmp_path / ".quire.toml"
        toml_path.write_text('[content]\ndirectory = "/custom/content"\n')
        monkeypatch.chdir(tmp_path)
        with patch("quire.config.CONFIG_SEARCH_PATHS", [tmp_path]):
            cfg = load_config()
        assert cfg.content.directory == "/custom/content"

    def test_load_empty_toml(self, tmp_path: Path):
        toml_path = tmp_path / ".quire.toml"
        toml_path.write_text("")
        cfg = load_config(toml_path)
        assert cfg.content.type == "post"

    def test_load_invalid_toml(self, tmp_path: Path):
        toml_path = tmp_path / ".quire.toml"
        toml_path.write_text("[content\ndirectory = ")
        cfg = load_config(toml_path)
        assert cfg.content.directory == "./content"

    def test_load_invalid_values(self, tmp_path: Path):
        toml_path = tmp_path / ".quire.toml"
        toml_path.write_text('[content]\nmode = "medium"\n')
        cfg = load_config(toml_path)
        assert cfg.content.mode == LoadMode.SLIM

    def test_compiler_section(self, tmp_path: Path):
        toml_path = tmp_path / ".quire.toml"
        toml_path.write_text(
            '[compiler]\nextensions = ["tables"]\ncheck_jsx = false\n'
            '[compiler.extension_configs.toc]\npermalink = true\n'
        )
        cfg = load_config(toml_path)
        compiler = cfg.to_compiler()
        assert isinstance(compiler, MdxCompiler)
        assert compiler.extensions == ["tables"]
        assert compiler.check_jsx is False
        assert compiler.extension_configs == {"toc": {"permalink": True}}

    def test_tag_registry(self, tmp_path: Path):
        registry_path = tmp_path / "tags.yml"
        registry_path.write_text("- name: API\n  slug: api\n")
        toml_path = tmp_path / ".quire.toml"
        toml_path.write_text(f'[tags]\nregistry_file = "{registry_path.as_posix()}"\n')
        registry = load_config(toml_path).to_tag_registry()
        assert isinstance(registry, TagRegistry)
        assert "api" in registry


class TestEnvVars:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch):
        toml_path = tmp_path / ".quire.toml"
        toml_path.write_text('[content]\ndirectory = "from-toml"\n')
        monkeypatch.setenv("QUIRE_CONTENT_DIR", "from-env")
        monkeypatch.setenv("QUIRE_MODE", "full")
        cfg = load_config(toml_path)
        assert cfg.content.directory == "from-env"
        assert cfg.content.mode == LoadMode.FULL

    def test_invalid_env_value_ignored(self, tmp_path: Path, monkeypatch):
        toml_path = tmp_path / ".quire.toml"
        toml_path.write_text('[content]\ndirectory = "from-toml"\n')
        monkeypatch.setenv("QUIRE_MODE", "bogus")
        cfg = load_config(toml_path)
        assert cfg.content.mode == LoadMode.SLIM
        assert cfg.content.directory == "from-toml"

    def test_extensions_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("QUIRE_MARKDOWN_EXTENSIONS", "tables, toc,,")
        cfg = load_config(tmp_path / "missing.toml")
        assert cfg.compiler.extensions == ["tables", "toc"]


class TestMergeCliOverrides:
    def test_override_values(self):
        cfg = merge_cli_overrides(
            QuireConfig(), content_directory="docs", content_type="doc", mode="full"
        )
        assert cfg.content.directory == "docs"
        assert cfg.content.type == "doc"
        assert cfg.content.mode == LoadMode.FULL

    def test_none_values_ignored(self):
        cfg = merge_cli_overrides(QuireConfig(), content_directory=None, mode=None)
        assert cfg.content.directory == "./content"
        assert cfg.content.mode == LoadMode.SLIM

    def test_unknown_keys_ignored(self):
        cfg = merge_cli_overrides(QuireConfig(), whatever="x")
        assert cfg == QuireConfig()
