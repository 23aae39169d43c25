"""
Tests for Config
================
"""

import dataclasses
import logging

import pytest

from structlog_starlette.config import (
    HIDDEN_REQUEST_HEADERS,
    HIDDEN_RESPONSE_HEADERS,
    Config,
    ConfigurationError,
    parse_level,
)


class TestParseLevel:
    """Tests for level normalisation."""

    def test_names(self):
        assert parse_level("info") == logging.INFO
        assert parse_level("WARN") == logging.WARNING
        assert parse_level(" Error ") == logging.ERROR

    def test_numbers(self):
        assert parse_level(logging.DEBUG) == logging.DEBUG

    @pytest.mark.parametrize("value", ["verbose", 15, True])
    def test_rejects_unknown(self, value):
        with pytest.raises(ConfigurationError):
            parse_level(value)


class TestConfig:
    """Tests for the middleware configuration."""

    def test_defaults(self):
        """Should match the documented defaults."""
        config = Config()

        assert config.default_level == logging.INFO
        assert config.client_error_level == logging.WARNING
        assert config.server_error_level == logging.ERROR
        assert config.with_request_id is True
        assert config.with_request_body is False
        assert config.with_response_header is False
        assert config.filters == ()
        assert config.request_body_max_size == 64 * 1024
        assert config.response_body_max_size == 64 * 1024

    def test_hidden_header_defaults(self):
        assert HIDDEN_REQUEST_HEADERS == {
            "authorization", "cookie", "set-cookie",
            "x-auth-token", "x-csrf-token", "x-xsrf-token",
        }
        assert HIDDEN_RESPONSE_HEADERS == {"set-cookie"}

    def test_level_names_normalised(self):
        config = Config(default_level="debug", server_error_level="critical")

        assert config.default_level == logging.DEBUG
        assert config.server_error_level == logging.CRITICAL

    def test_hidden_headers_lowercased(self):
        config = Config(hidden_response_headers={"Set-Cookie", "X-Secret"})

        assert config.hidden_response_headers == {"set-cookie", "x-secret"}

    def test_negative_size_rejected(self):
        with pytest.raises(ConfigurationError):
            Config(response_body_max_size=-1)

    def test_non_callable_filter_rejected(self):
        with pytest.raises(ConfigurationError):
            Config(filters=["not a filter"])

    def test_immutable(self):
        config = Config()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.with_request_body = True

    def test_with_filters_returns_copy(self):
        """Should append filters without touching the original."""
        first = lambda context: True
        second = lambda context: False
        base = Config(filters=[first])

        derived = base.with_filters(second)

        assert base.filters == (first,)
        assert derived.filters == (first, second)


class TestConfigFromEnv:
    """Tests for environment-driven configuration."""

    def test_reads_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("REQUEST_LOG_WITH_REQUEST_BODY", "true")
        monkeypatch.setenv("REQUEST_LOG_WITH_REQUEST_ID", "0")
        monkeypatch.setenv("REQUEST_LOG_CLIENT_ERROR_LEVEL", "info")
        monkeypatch.setenv("REQUEST_LOG_RESPONSE_BODY_MAX_SIZE", "128")

        config = Config.from_env()

        assert config.with_request_body is True
        assert config.with_request_id is False
        assert config.client_error_level == logging.INFO
        assert config.response_body_max_size == 128

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("APP_WITH_TRACE_ID", "yes")

        config = Config.from_env(prefix="APP_", with_trace_id=False)

        assert config.with_trace_id is False

    def test_bad_integer(self, monkeypatch):
        monkeypatch.setenv("REQUEST_LOG_REQUEST_BODY_MAX_SIZE", "lots")

        with pytest.raises(ConfigurationError):
            Config.from_env()
