"""Tests for gateway settings resolution."""

import dataclasses

import pytest

from proxy_transfer.core.settings import (
    DEFAULT_FALLBACK_MODEL_IDS,
    LOG_LEVELS,
    GatewaySettings,
    load_settings,
)

ENV_VARS = (
    "PROXY_TRANSFER_HOST",
    "PROXY_TRANSFER_PORT",
    "PROXY_TRANSFER_BACKEND",
    "PROXY_TRANSFER_TIMEOUT",
    "PROXY_TRANSFER_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_empty_config(self):
        settings = load_settings({})
        assert settings == GatewaySettings()
        assert settings.port == 3001
        assert settings.backend_base == "http://localhost:8080"
        assert settings.timeout_seconds == 60.0
        assert settings.fallback_model_ids == DEFAULT_FALLBACK_MODEL_IDS
        assert settings.owned_by == "proxy"
        assert settings.default_max_tokens == 4096
        assert settings.log_level == "INFO"

    def test_none_config(self):
        assert load_settings(None) == GatewaySettings()

    def test_listen_url(self):
        assert GatewaySettings(host="0.0.0.0", port=9000).listen_url == "http://0.0.0.0:9000"

    def test_settings_are_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            GatewaySettings().port = 1


class TestConfigValues:
    def test_reads_all_sections(self):
        settings = load_settings(
            {
                "server": {"host": "0.0.0.0", "port": "4000"},
                "backend": {"base_url": "http://anthropic.local:9000/", "timeout_seconds": 12},
                "models": {"fallback_ids": ["a", "b"], "owned_by": "gateway"},
                "messages": {"default_max_tokens": 1024},
                "logging": {"level": "debug"},
            }
        )
        assert settings.host == "0.0.0.0"
        assert settings.port == 4000
        assert settings.backend_base == "http://anthropic.local:9000"
        assert settings.timeout_seconds == 12.0
        assert settings.fallback_model_ids == ("a", "b")
        assert settings.owned_by == "gateway"
        assert settings.default_max_tokens == 1024
        assert settings.log_level == "DEBUG"

    def test_invalid_values_fall_back(self):
        settings = load_settings(
            {
                "server": {"port": "not-a-port"},
                "backend": {"timeout_seconds": "soon"},
                "models": {"fallback_ids": "not-a-list"},
                "messages": {"default_max_tokens": None},
            }
        )
        assert settings.port == 3001
        assert settings.timeout_seconds == 60.0
        assert settings.fallback_model_ids == DEFAULT_FALLBACK_MODEL_IDS
        assert settings.default_max_tokens == 4096

    def test_non_positive_timeout_disables_it(self):
        assert load_settings({"backend": {"timeout_seconds": 0}}).timeout_seconds is None

    def test_section_that_is_not_a_mapping_is_ignored(self):
        assert load_settings({"server": "localhost"}).host == "127.0.0.1"


class TestEnvOverrides:
    def test_env_wins_over_config(self, monkeypatch):
        monkeypatch.setenv("PROXY_TRANSFER_HOST", "10.0.0.1")
        monkeypatch.setenv("PROXY_TRANSFER_PORT", "3100")
        monkeypatch.setenv("PROXY_TRANSFER_BACKEND", "http://env-backend:1234/")
        monkeypatch.setenv("PROXY_TRANSFER_TIMEOUT", "2.5")
        monkeypatch.setenv("PROXY_TRANSFER_LOG_LEVEL", "warning")

        settings = load_settings(
            {"server": {"host": "0.0.0.0", "port": 4000}, "backend": {"base_url": "http://cfg:1"}}
        )

        assert settings.host == "10.0.0.1"
        assert settings.port == 3100
        assert settings.backend_base == "http://env-backend:1234"
        assert settings.timeout_seconds == 2.5
        assert settings.log_level == "WARNING"

    def test_invalid_env_values_are_ignored(self, monkeypatch):
        monkeypatch.setenv("PROXY_TRANSFER_PORT", "abc")
        monkeypatch.setenv("PROXY_TRANSFER_TIMEOUT", "later")

        settings = load_settings({"server": {"port": 4000}})

        assert settings.port == 4000
        assert settings.timeout_seconds == 60.0


class TestLogLevel:
    def test_unknown_config_level_falls_back(self):
        assert load_settings({"logging": {"level": "verbose"}}).log_level == "INFO"

    def test_unknown_env_level_keeps_config_level(self, monkeypatch):
        monkeypatch.setenv("PROXY_TRANSFER_LOG_LEVEL", "verbose")
        assert load_settings({"logging": {"level": "error"}}).log_level == "ERROR"

    @pytest.mark.parametrize("level", ["warn", "fatal", "notset", "trace"])
    def test_levels_outside_the_shared_set_are_rejected(self, level):
        assert load_settings({"logging": {"level": level}}).log_level == "INFO"

    def test_every_accepted_level_is_known_to_uvicorn(self):
        from uvicorn.config import LOG_LEVELS as UVICORN_LOG_LEVELS

        for level in LOG_LEVELS:
            assert load_settings({"logging": {"level": level.lower()}}).log_level == level
            assert level.lower() in UVICORN_LOG_LEVELS
