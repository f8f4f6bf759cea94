"""Tests for EngineConfig and stencil.yaml loading."""

import textwrap

import pytest
from pydantic import ValidationError

from stencil.config import (
    DEFAULT_SANDBOX,
    EngineConfig,
    find_config_file,
    load_config,
)
from stencil.errors import ConfigError


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.open_tag == "<%"
        assert config.close_tag == "%>"
        assert config.statement is None
        assert config.sandbox == DEFAULT_SANDBOX
        assert config.debug is False
        assert config.error_marker == "{Template Error}"

    def test_empty_tag_rejected(self):
        with pytest.raises(ValidationError):
            EngineConfig(close_tag="")

    def test_equal_tags_rejected(self):
        with pytest.raises(ValidationError):
            EngineConfig(open_tag="%%", close_tag="%%")

    def test_invalid_sandbox_rejected(self):
        with pytest.raises(ValidationError):
            EngineConfig(sandbox="(unclosed")

    def test_statement_from_colon_import_string(self):
        config = EngineConfig(statement="textwrap:dedent")
        assert config.statement is textwrap.dedent

    def test_statement_from_dotted_import_string(self):
        config = EngineConfig(statement="textwrap.dedent")
        assert config.statement is textwrap.dedent

    def test_statement_import_failure(self):
        with pytest.raises(ValidationError):
            EngineConfig(statement="no_such_module_xyz:hook")

    def test_with_options_returns_copy(self):
        config = EngineConfig()
        updated = config.with_options(debug=True, open_tag="{{", close_tag="}}")
        assert updated.debug
        assert updated.open_tag == "{{"
        assert config.open_tag == "<%"


class TestConfigFile:
    def test_load_config(self, tmp_path):
        path = tmp_path / "stencil.yaml"
        path.write_text(
            textwrap.dedent(
                """\
                open_tag: "{%"
                close_tag: "%}"
                debug: true
                template_dirs:
                  - templates
                """
            )
        )

        config = load_config(path)
        assert config.open_tag == "{%"
        assert config.close_tag == "%}"
        assert config.debug is True
        assert config.template_dirs == [tmp_path / "templates"]

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "stencil.yaml"
        path.write_text("")
        assert load_config(path) == EngineConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "stencil.yaml")

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "stencil.yaml"
        path.write_text("open_tag: ''\n")
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert "Invalid config" in exc_info.value.message

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "stencil.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_find_config_file_walks_parents(self, tmp_path):
        (tmp_path / "stencil.yaml").write_text("debug: true\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == tmp_path / "stencil.yaml"
