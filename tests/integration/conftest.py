"""Integration test fixtures.

Provides catalog clients that replay captured Discogs and MusicBrainz
payloads, so the whole pipeline runs on realistic data without network access.
"""

import pytest

from tests.integration.captured import (
    DISCOGS_DETAILS,
    DISCOGS_SEARCH,
    MUSICBRAINZ_DETAILS,
    MUSICBRAINZ_SEARCH,
    CapturedCatalogClient,
)


@pytest.fixture
def discogs_client():
    return CapturedCatalogClient("discogs", DISCOGS_SEARCH, DISCOGS_DETAILS)


@pytest.fixture
def musicbrainz_client():
    return CapturedCatalogClient("musicbrainz", MUSICBRAINZ_SEARCH, MUSICBRAINZ_DETAILS)
