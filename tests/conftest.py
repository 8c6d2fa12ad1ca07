"""Shared test fixtures for pytest."""

from unittest.mock import AsyncMock

import pytest

import core.dependencies as deps_module
from config.settings import get_settings
from scoring.config import DEFAULT_SCORING_CONFIG, ScoringConfigStore
from tests.factories import (
    make_discogs_detail,
    make_discogs_hit,
    make_musicbrainz_detail,
    make_musicbrainz_hit,
)


@pytest.fixture(autouse=True)
def reset_shared_state(monkeypatch):
    """Drop the shared config store, PostHog client and cached settings between tests."""
    monkeypatch.setenv("ENABLE_TELEMETRY", "false")
    deps_module._config_store = None
    deps_module._posthog_client = None
    get_settings.cache_clear()
    yield
    deps_module._config_store = None
    deps_module._posthog_client = None
    get_settings.cache_clear()


@pytest.fixture
def config_store():
    """Store pre-loaded with the built-in defaults (never touches the filesystem)."""
    store = ScoringConfigStore()
    store.set(DEFAULT_SCORING_CONFIG)
    return store


@pytest.fixture
def mock_discogs_client():
    """Discogs client returning one hit with full details."""
    client = AsyncMock()
    client.search_by_barcode = AsyncMock(return_value=[make_discogs_hit()])
    client.get_release_details = AsyncMock(return_value=make_discogs_detail())
    return client


@pytest.fixture
def mock_musicbrainz_client():
    """MusicBrainz client returning one hit with full details."""
    client = AsyncMock()
    client.search_by_barcode = AsyncMock(return_value=[make_musicbrainz_hit()])
    client.get_release_details = AsyncMock(return_value=make_musicbrainz_detail())
    return client
