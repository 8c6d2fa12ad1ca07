"""Unit test fixtures."""

from unittest.mock import Mock

import pytest

from config.settings import Settings


@pytest.fixture
def mock_settings(monkeypatch, tmp_path):
    """Settings with safe test defaults (no real keys/DSNs)."""
    monkeypatch.setenv("SENTRY_DSN", "")
    monkeypatch.setenv("POSTHOG_API_KEY", "")
    monkeypatch.setenv("ENABLE_TELEMETRY", "false")
    return Settings(
        scoring_config_path=tmp_path / "scoring.json",
        sentry_dsn=None,
        posthog_api_key=None,
        enable_telemetry=False,
    )


@pytest.fixture
def mock_posthog_client():
    """Mock PostHog client."""
    client = Mock()
    client.capture = Mock()
    client.flush = Mock()
    client.shutdown = Mock()
    return client
