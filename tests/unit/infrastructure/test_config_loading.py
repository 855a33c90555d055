"""Tests for templated configuration loading and context overrides."""

import re
from pathlib import Path

import pytest

from src.library_api.runtime.config.config_data import ConfigData, PaginationConfig
from src.library_api.runtime.config.config_template import load_templated_yaml, substitute_env_vars
from src.library_api.runtime.context import get_config, with_context

SHIPPED_CONFIG = Path(__file__).resolve().parents[3] / "config.yaml"

MINIMAL_CONFIG = """
config:
  app:
    environment: ${APP_ENVIRONMENT:-development}
    session_signing_secret: ${LIB_TEST_SECRET:-}
  database:
    url: ${LIB_TEST_DB_URL:-sqlite:///./library.db}
  pagination:
    max_limit: ${LIB_TEST_MAX_LIMIT:-50}
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(MINIMAL_CONFIG)
    return path


class TestSubstituteEnvVars:
    def test_default_used_when_unset(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("LIB_TEST_VALUE", raising=False)
        assert substitute_env_vars("x: ${LIB_TEST_VALUE:-fallback}") == "x: fallback"

    def test_value_from_environment(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("LIB_TEST_VALUE", "set")
        assert substitute_env_vars("x: ${LIB_TEST_VALUE:-fallback}") == "x: set"

    def test_colon_default_also_covers_empty_values(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("LIB_TEST_VALUE", "")
        assert substitute_env_vars("x: ${LIB_TEST_VALUE:-fallback}") == "x: fallback"

    def test_plain_default_keeps_empty_values(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("LIB_TEST_VALUE", "")
        assert substitute_env_vars("x: ${LIB_TEST_VALUE-fallback}") == "x: "
        monkeypatch.delenv("LIB_TEST_VALUE")
        assert substitute_env_vars("x: ${LIB_TEST_VALUE-fallback}") == "x: fallback"

    def test_comment_lines_are_not_substituted(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("LIB_TEST_VALUE", raising=False)
        text = "# see ${LIB_TEST_VALUE}\nx: 1\n"
        assert substitute_env_vars(text) == text

    def test_required_variable_missing(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("LIB_TEST_VALUE", raising=False)

        with pytest.raises(ValueError, match="LIB_TEST_VALUE"):
            substitute_env_vars("x: ${LIB_TEST_VALUE}")
        with pytest.raises(ValueError, match="needed for tests"):
            substitute_env_vars("x: ${LIB_TEST_VALUE:?needed for tests}")


class TestLoadTemplatedYaml:
    def test_defaults_fill_unlisted_sections(self, config_file: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("APP_ENVIRONMENT", "development")
        monkeypatch.delenv("LIB_TEST_MAX_LIMIT", raising=False)

        config = load_templated_yaml(config_file)

        assert config.app.environment == "development"
        assert config.pagination.max_limit == 50
        assert config.pagination.default_limit == 10
        assert config.jwt.allowed_algorithms == ["HS256"]
        assert config.database.is_sqlite

    def test_environment_prefixed_override(self, config_file: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("APP_ENVIRONMENT", "development")
        monkeypatch.setenv("LIB_TEST_MAX_LIMIT", "50")
        monkeypatch.setenv("DEVELOPMENT_LIB_TEST_MAX_LIMIT", "25")

        assert load_templated_yaml(config_file).pagination.max_limit == 25

    def test_production_requires_signing_secret(self, config_file: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("APP_ENVIRONMENT", "production")
        monkeypatch.delenv("LIB_TEST_SECRET", raising=False)

        with pytest.raises(ValueError, match="session_signing_secret"):
            load_templated_yaml(config_file)

    def test_invalid_values_are_reported(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("config:\n  pagination:\n    max_limit: lots\n")

        with pytest.raises(ValueError, match="Invalid configuration"):
            load_templated_yaml(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_templated_yaml(tmp_path / "absent.yaml")


class TestWithContext:
    def test_override_merges_and_restores(self):
        before = get_config()

        with with_context(ConfigData(pagination=PaginationConfig(max_limit=5))):
            assert get_config().pagination.max_limit == 5
            assert get_config().pagination.default_limit == before.pagination.default_limit
            assert get_config().app.session_signing_secret == before.app.session_signing_secret

        assert get_config().pagination.max_limit == before.pagination.max_limit

    def test_rejects_other_types(self):
        with pytest.raises(ValueError):
            with with_context({"pagination": {"max_limit": 5}}):
                pass


class TestShippedConfig:
    """The repository's own config.yaml."""

    @pytest.fixture
    def clean_env(self, monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
        names = set(re.findall(r"\$\{([A-Z_][A-Z0-9_]*)", SHIPPED_CONFIG.read_text()))
        for name in names | {"VAR", "NAME"}:
            monkeypatch.delenv(name, raising=False)
        return monkeypatch

    def test_loads_without_any_variables_set(self, clean_env: pytest.MonkeyPatch):
        config = load_templated_yaml(SHIPPED_CONFIG)

        assert config.app.environment == "development"
        assert config.database.url == "sqlite:///./library.db"
        assert config.logging.file == "logs/app.log"
        assert config.jwt.max_stored_tokens == 5

    def test_empty_log_file_disables_file_logging(self, clean_env: pytest.MonkeyPatch):
        clean_env.setenv("LOG_FILE", "")

        assert load_templated_yaml(SHIPPED_CONFIG).logging.file is None
