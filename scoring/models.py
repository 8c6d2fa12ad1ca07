"""Pydantic models for release candidates, scores and aggregated albums.

Every model is frozen: a pipeline stage never edits what it was given, it builds
a new instance. Field names are snake_case in Python and camelCase on the wire,
so captured lookup results round-trip through JSON unchanged.
"""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class CamelModel(BaseModel):
    """Base model: immutable, camelCase aliases, populated by either name."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ReleaseSource(StrEnum):
    """External catalog a candidate came from."""

    DISCOGS = "DISCOGS"
    MUSICBRAINZ = "MUSICBRAINZ"


class Track(CamelModel):
    """A single track on a release."""

    position: str | None = None
    title: str
    duration: str | None = None  # "m:ss"


class RawCandidate(CamelModel):
    """One release record returned by one catalog source for a barcode."""

    barcode: str
    artist: str
    title: str
    year: int | None = None
    format: str | None = None
    genre: list[str] = Field(default_factory=list)
    style: list[str] = Field(default_factory=list)
    label: str | None = None
    country: str | None = None
    cover_image_url: str | None = None
    track_list: list[Track] = Field(default_factory=list)
    catalog_number: str | None = None
    external_id: str
    source: ReleaseSource
    disambiguation: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def candidate_id(self) -> str:
        """Composite identity: ``SOURCE:externalId``."""
        return f"{self.source}:{self.external_id}"

    @property
    def track_count(self) -> int:
        """Number of tracks with a non-empty title."""
        return sum(1 for track in self.track_list if track.title and track.title.strip())


class NormalizedCandidate(RawCandidate):
    """A candidate with its normalized artist/title and grouping key attached."""

    normalized_artist: str
    normalized_title: str
    grouping_key: str


class CandidateGroup(CamelModel):
    """Candidates describing the same physical album, in discovery order."""

    grouping_key: str
    barcode: str
    normalized_artist: str
    normalized_title: str
    candidates: list[NormalizedCandidate]


class ScoreBreakdown(CamelModel):
    """Points contributed by each scoring rule. Every field is always present."""

    media_type: float = 0
    country: float = 0
    track_list: float = 0
    cover_art: float = 0
    label_info: float = 0
    source_bonus: float = 0

    @property
    def total(self) -> float:
        return (
            self.media_type
            + self.country
            + self.track_list
            + self.cover_art
            + self.label_info
            + self.source_bonus
        )


class ScoringResult(CamelModel):
    """Score of one candidate plus the audit trail that explains it."""

    candidate_id: str
    external_id: str
    source: ReleaseSource
    total_score: float
    breakdown: ScoreBreakdown
    applied_rules: list[str] = Field(default_factory=list)


class AlternativeRelease(CamelModel):
    """A non-primary member of an album group."""

    external_id: str
    source: ReleaseSource
    country: str | None = None
    year: int | None = None
    label: str | None = None
    disambiguation: str | None = None
    score: float


class Album(CamelModel):
    """Canonical album built from one scored candidate group."""

    id: str

    # Copied from the primary candidate
    title: str
    artist: str
    year: int | None = None
    label: str | None = None
    format: str | None = None
    barcode: str
    country: str | None = None
    cover_image_url: str | None = None

    track_list: list[Track] = Field(default_factory=list)
    track_list_source: ReleaseSource | None = None
    track_list_source_id: str | None = None

    discogs_ids: list[str] = Field(default_factory=list)
    musicbrainz_ids: list[str] = Field(default_factory=list)

    alternative_releases: list[AlternativeRelease] = Field(default_factory=list)
    other_titles: list[str] = Field(default_factory=list)
    edition_notes: list[str] = Field(default_factory=list)

    genres: list[str] = Field(default_factory=list)
    styles: list[str] = Field(default_factory=list)

    primary_release_id: str
    primary_release_source: ReleaseSource
    primary_release_score: float

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
