"""Tests for sketch_calc.config — Config.from_env(), Provider enum, SurfaceSettings."""

import pytest

from sketch_calc.config import (
    API_URL_ENV,
    DEFAULT_TIMEOUT,
    DEFAULTS,
    ENV_KEYS,
    HISTORY_LIMIT_ENV,
    TIMEOUT_ENV,
    Config,
    Provider,
    SurfaceSettings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (API_URL_ENV, TIMEOUT_ENV, HISTORY_LIMIT_ENV, *ENV_KEYS.values()):
        monkeypatch.delenv(name, raising=False)


class TestProviderEnum:
    def test_values(self):
        assert Provider.HTTP.value == "http"
        assert Provider.ANTHROPIC.value == "anthropic"
        assert Provider.OPENAI.value == "openai"

    def test_string_equality(self):
        # Provider(str, Enum) means Provider.HTTP == "http"
        assert Provider.HTTP == "http"

    def test_construction_from_string(self):
        assert Provider("openai") is Provider.OPENAI


class TestHttpConfig:
    def test_api_url_read_from_env(self, monkeypatch):
        monkeypatch.setenv(API_URL_ENV, "http://calc.local")
        config = Config.from_env(Provider.HTTP)
        assert config.api_url == "http://calc.local"

    def test_api_url_override_takes_precedence(self, monkeypatch):
        monkeypatch.setenv(API_URL_ENV, "http://from-env")
        config = Config.from_env(Provider.HTTP, api_url_override="http://direct")
        assert config.api_url == "http://direct"

    def test_missing_api_url_names_env_var(self):
        with pytest.raises(RuntimeError, match=API_URL_ENV):
            Config.from_env(Provider.HTTP)

    def test_no_api_key_needed(self, monkeypatch):
        monkeypatch.setenv(API_URL_ENV, "http://calc.local")
        config = Config.from_env(Provider.HTTP)
        assert config.api_key is None
        assert config.model is None


class TestLlmConfig:
    def test_uses_default_model(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        config = Config.from_env(Provider.ANTHROPIC)
        assert config.model == DEFAULTS[Provider.ANTHROPIC]

    def test_model_override_takes_precedence(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-oai-test")
        config = Config.from_env(Provider.OPENAI, model_override="gpt-4-turbo")
        assert config.model == "gpt-4-turbo"

    def test_api_key_override_takes_precedence_over_env(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key-should-not-be-used")
        config = Config.from_env(Provider.ANTHROPIC, api_key_override="direct-key")
        assert config.api_key == "direct-key"

    def test_openai_reads_openai_env_var_not_anthropic(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "wrong-key")
        with pytest.raises(RuntimeError):
            Config.from_env(Provider.OPENAI)

    def test_error_message_names_the_env_var(self):
        with pytest.raises(RuntimeError, match="ANTHROPIC_API_KEY"):
            Config.from_env(Provider.ANTHROPIC)

    def test_error_message_names_the_provider(self):
        with pytest.raises(RuntimeError, match="openai"):
            Config.from_env(Provider.OPENAI)


class TestNumericSettings:
    @pytest.fixture(autouse=True)
    def api_url(self, monkeypatch):
        monkeypatch.setenv(API_URL_ENV, "http://calc.local")

    def test_defaults(self):
        config = Config.from_env(Provider.HTTP)
        assert config.timeout == DEFAULT_TIMEOUT
        assert config.history_limit is None

    def test_timeout_from_env(self, monkeypatch):
        monkeypatch.setenv(TIMEOUT_ENV, "2.5")
        assert Config.from_env(Provider.HTTP).timeout == 2.5

    def test_history_limit_from_env(self, monkeypatch):
        monkeypatch.setenv(HISTORY_LIMIT_ENV, "25")
        assert Config.from_env(Provider.HTTP).history_limit == 25

    @pytest.mark.parametrize("name,value", [(TIMEOUT_ENV, "soon"), (HISTORY_LIMIT_ENV, "1.5")])
    def test_non_numeric_values_raise(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(RuntimeError, match=name):
            Config.from_env(Provider.HTTP)

    def test_history_limit_must_be_positive(self, monkeypatch):
        monkeypatch.setenv(HISTORY_LIMIT_ENV, "0")
        with pytest.raises(RuntimeError):
            Config.from_env(Provider.HTTP)


class TestSurfaceSettings:
    def test_defaults(self):
        settings = SurfaceSettings()
        assert settings.stroke_width == 3
        assert settings.color == "white"
        assert settings.background == "black"
        assert settings.offset == (0, 0)
