"""
Unit tests for logging configuration.
"""

import logging

import pytest
import structlog

from familyhub.logging_config import (
    bind_session_context,
    build_processors,
    clear_session_context,
    get_log_level,
    summarize_binary_values,
)


@pytest.mark.unit
class TestLoggingConfig:
    @pytest.mark.parametrize("value,level", [("debug", logging.DEBUG), ("ERROR", logging.ERROR), ("loud", logging.INFO)])
    def test_get_log_level(self, monkeypatch, value, level):
        monkeypatch.setenv("LOG_LEVEL", value)

        assert get_log_level() == level

    def test_binary_values_are_summarized(self):
        event = summarize_binary_values(None, "info", {"event": "upload", "file_data": b"12345", "path": "a.png"})

        assert event == {"event": "upload", "file_data": "<5 bytes>", "path": "a.png"}

    def test_renderer_choice(self):
        assert isinstance(build_processors(json_output=True)[-1], structlog.processors.JSONRenderer)
        assert isinstance(build_processors(json_output=False)[-1], structlog.dev.ConsoleRenderer)

    def test_session_context_is_replaced(self):
        try:
            bind_session_context(user_id="u1", page="home")
            bind_session_context(page="photos", user_id=None)

            assert structlog.contextvars.get_contextvars() == {"page": "photos"}
        finally:
            clear_session_context()

        assert structlog.contextvars.get_contextvars() == {}
