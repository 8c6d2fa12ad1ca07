"""Catalog sources consumed by the lookup orchestrator.

A catalog client is any object with the two coroutines of ``CatalogClient``;
the network implementations live outside this service. Each source is
described declaratively by a ``SourceAdapter`` that knows how to read that
catalog's payloads.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import discogs.lookup as discogs_lookup
import musicbrainz.lookup as musicbrainz_lookup
from scoring.models import RawCandidate, ReleaseSource


class CatalogClient(Protocol):
    """Search and detail access to one external catalog."""

    async def search_by_barcode(self, barcode: str) -> list[Any]:
        """Return search hits (payload models or decoded JSON mappings)."""
        ...

    async def get_release_details(self, external_id: str) -> Any:
        """Return the release detail payload, or None when unavailable."""
        ...


ParseHitFunc = Callable[[Any], Any]
"""Validate one search hit payload; raises on a malformed hit."""

ParseDetailFunc = Callable[[Any], Any]
"""Validate a detail payload; returns None for an absent detail."""

ReleaseIdFunc = Callable[[Any], str | None]
"""Extract the release id from a parsed hit; None when the hit has none."""

BuildCandidateFunc = Callable[[str, Any, Any], RawCandidate]
"""Build a RawCandidate from (barcode, parsed hit, parsed detail or None)."""


@dataclass(frozen=True)
class SourceAdapter:
    """How the orchestrator reads one catalog's payloads."""

    source: ReleaseSource
    name: str
    """Lowercase key used for telemetry counters and Sentry breadcrumbs."""

    display_name: str
    parse_hit: ParseHitFunc
    release_id: ReleaseIdFunc
    parse_detail: ParseDetailFunc
    build_candidate: BuildCandidateFunc


DISCOGS_ADAPTER = SourceAdapter(
    source=ReleaseSource.DISCOGS,
    name="discogs",
    display_name="Discogs",
    parse_hit=discogs_lookup.parse_search_hit,
    release_id=discogs_lookup.extract_release_id,
    parse_detail=discogs_lookup.parse_release_detail,
    build_candidate=discogs_lookup.build_candidate,
)

MUSICBRAINZ_ADAPTER = SourceAdapter(
    source=ReleaseSource.MUSICBRAINZ,
    name="musicbrainz",
    display_name="MusicBrainz",
    parse_hit=musicbrainz_lookup.parse_search_hit,
    release_id=musicbrainz_lookup.extract_release_id,
    parse_detail=musicbrainz_lookup.parse_release_detail,
    build_candidate=musicbrainz_lookup.build_candidate,
)
