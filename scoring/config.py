"""Scoring configuration: defaults, partial overrides, validation and caching.

The override document is a partial mirror of ``ScoringConfig`` (camelCase keys,
e.g. ``{"weights": {"mediaType": 30}, "tieBreaker": "smallestId"}``). It is
merged field by field over the built-in defaults: nested objects merge key by
key, lists and scalars replace wholesale.
"""

import json
import logging
import threading
from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictStr,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from core.exceptions import ConfigurationError
from scoring.models import CamelModel, ReleaseSource

logger = logging.getLogger(__name__)


class TieBreaker(StrEnum):
    """Strategy used when several candidates share the top score."""

    EARLIEST_YEAR = "earliestYear"
    SMALLEST_ID = "smallestId"
    PREFER_DISCOGS = "preferDiscogs"
    PREFER_MUSICBRAINZ = "preferMusicBrainz"


# =============================================================================
# Complete configuration
# =============================================================================


class ScoringWeights(CamelModel):
    """Points awarded (or deducted) by each scoring rule."""

    media_type: float = 20
    preferred_country: float = 15
    deprioritized_country: float = -10
    track_list_complete: float = 25
    track_list_partial: float = 10
    cover_art: float = 15
    label_info: float = 10
    catalog_number: float = 5


class SourceConfig(CamelModel):
    """Per-source scoring settings."""

    base_score: float = 0
    trust_track_list: bool = True
    additional_affixes: list[str] = Field(default_factory=list)


class SourceSettings(CamelModel):
    discogs: SourceConfig = SourceConfig()
    musicbrainz: SourceConfig = SourceConfig()

    def for_source(self, source: ReleaseSource) -> SourceConfig:
        if source is ReleaseSource.DISCOGS:
            return self.discogs
        return self.musicbrainz


class ScoringConfig(CamelModel):
    """Complete, immutable scoring configuration for one lookup."""

    weights: ScoringWeights = ScoringWeights()
    preferred_media_types: list[str] = Field(default_factory=list)
    preferred_countries: list[str] = Field(default_factory=list)
    deprioritized_countries: list[str] = Field(default_factory=list)
    normalization_affixes: list[str] = Field(default_factory=list)
    sources: SourceSettings = SourceSettings()
    min_tracks_for_complete: float = Field(default=4, ge=1)
    tie_breaker: TieBreaker | None = TieBreaker.EARLIEST_YEAR


DEFAULT_SCORING_CONFIG = ScoringConfig(
    weights=ScoringWeights(),
    # Vinyl-focused
    preferred_media_types=["vinyl", "lp", '12"', '10"', '7"', "album"],
    preferred_countries=[
        "US",
        "USA",
        "United States",
        "UK",
        "United Kingdom",
        "GB",
        "AT",
        "Austria",
        "DE",
        "Germany",
    ],
    deprioritized_countries=["RU", "Russia", "CN", "China"],
    normalization_affixes=[
        # Remaster variants
        "(remastered)",
        "(remaster)",
        "[remastered]",
        "[remaster]",
        "- remastered",
        "- remaster",
        # Deluxe/special editions
        "(deluxe)",
        "(deluxe edition)",
        "(deluxe version)",
        "[deluxe]",
        "[deluxe edition]",
        "(special edition)",
        "[special edition]",
        "(expanded edition)",
        "[expanded edition]",
        "(anniversary edition)",
        "[anniversary edition]",
        # Format indicators
        "(vinyl)",
        "[vinyl]",
        "(lp)",
        "[lp]",
        "(album)",
        "[album]",
        # Year editions
        "(2023 remaster)",
        "(2022 remaster)",
        "(2021 remaster)",
        "(2020 remaster)",
        "(2019 remaster)",
        "(2018 remaster)",
        "(2017 remaster)",
        # Bonus material
        "(bonus tracks)",
        "[bonus tracks]",
        "(with bonus tracks)",
        "(bonus track version)",
    ],
    sources=SourceSettings(
        discogs=SourceConfig(
            base_score=5,
            trust_track_list=True,
            additional_affixes=["(promo)", "[promo]", "(test pressing)", "(white label)"],
        ),
        musicbrainz=SourceConfig(
            base_score=0,
            trust_track_list=True,
            additional_affixes=["(disambiguation)"],
        ),
    ),
    min_tracks_for_complete=4,
    tie_breaker=TieBreaker.EARLIEST_YEAR,
)
"""Built-in defaults, used as-is when no override document is present."""


# =============================================================================
# Partial override
# =============================================================================

# Accepts ints, rejects bools and numeric strings
Number = StrictFloat


class _OverrideModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ScoringWeightsOverride(_OverrideModel):
    media_type: Number | None = None
    preferred_country: Number | None = None
    deprioritized_country: Number | None = None
    track_list_complete: Number | None = None
    track_list_partial: Number | None = None
    cover_art: Number | None = None
    label_info: Number | None = None
    catalog_number: Number | None = None


class SourceConfigOverride(_OverrideModel):
    base_score: Number | None = None
    trust_track_list: StrictBool | None = None
    additional_affixes: list[StrictStr] | None = None


class SourceSettingsOverride(_OverrideModel):
    discogs: SourceConfigOverride | None = None
    musicbrainz: SourceConfigOverride | None = None


class ScoringConfigOverride(_OverrideModel):
    """Partial configuration: every field optional, strictly typed."""

    weights: ScoringWeightsOverride | None = None
    preferred_media_types: list[StrictStr] | None = None
    preferred_countries: list[StrictStr] | None = None
    deprioritized_countries: list[StrictStr] | None = None
    normalization_affixes: list[StrictStr] | None = None
    sources: SourceSettingsOverride | None = None
    min_tracks_for_complete: Number | None = Field(default=None, ge=1)
    tie_breaker: TieBreaker | None = None


def _set_fields(override: BaseModel | None) -> dict:
    """Fields explicitly given a non-null value in an override section."""
    if override is None:
        return {}
    return override.model_dump(exclude_unset=True, exclude_none=True)


def _merge_source(base: SourceConfig, override: SourceConfigOverride | None) -> SourceConfig:
    return base.model_copy(update=_set_fields(override))


def merge_scoring_config(
    base: ScoringConfig,
    override: ScoringConfigOverride,
) -> ScoringConfig:
    """Merge a partial override over a complete configuration.

    Args:
        base: Complete configuration (usually the defaults)
        override: Partial configuration, wins wherever it sets a field

    Returns:
        A new ScoringConfig; ``base`` is untouched
    """
    weights = base.weights.model_copy(update=_set_fields(override.weights))

    sources = base.sources
    if override.sources is not None:
        sources = SourceSettings(
            discogs=_merge_source(base.sources.discogs, override.sources.discogs),
            musicbrainz=_merge_source(base.sources.musicbrainz, override.sources.musicbrainz),
        )

    def pick(value, fallback):
        return fallback if value is None else value

    return ScoringConfig(
        weights=weights,
        preferred_media_types=pick(override.preferred_media_types, base.preferred_media_types),
        preferred_countries=pick(override.preferred_countries, base.preferred_countries),
        deprioritized_countries=pick(
            override.deprioritized_countries, base.deprioritized_countries
        ),
        normalization_affixes=pick(override.normalization_affixes, base.normalization_affixes),
        sources=sources,
        min_tracks_for_complete=pick(
            override.min_tracks_for_complete, base.min_tracks_for_complete
        ),
        tie_breaker=pick(override.tie_breaker, base.tie_breaker),
    )


# =============================================================================
# Validation
# =============================================================================


def _format_error(error: dict) -> str:
    path = ".".join(str(part) for part in error["loc"])
    return f"{path}: {error['msg']}"


def validate_scoring_config(candidate: object) -> list[str]:
    """Check a raw (JSON-decoded) override document.

    Never raises.

    Args:
        candidate: Decoded document to check

    Returns:
        List of human-readable errors, empty when the document is valid
    """
    if not isinstance(candidate, Mapping):
        return ["Configuration must be an object"]

    try:
        ScoringConfigOverride.model_validate(candidate)
    except ValidationError as e:
        return [_format_error(error) for error in e.errors()]
    return []


def load_override_document(path: Path) -> ScoringConfigOverride | None:
    """Read and validate an override document.

    Returns:
        The parsed override, or None when no file exists at ``path``

    Raises:
        ConfigurationError: If the file cannot be read, is not JSON, or is invalid
    """
    if not path.exists():
        return None

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Unreadable scoring config {path}: {e}", details={"path": str(path)}
        ) from e

    errors = validate_scoring_config(raw)
    if errors:
        raise ConfigurationError(
            f"Invalid scoring config {path}: {'; '.join(errors)}",
            details={"path": str(path), "errors": errors},
        )
    return ScoringConfigOverride.model_validate(raw)


# =============================================================================
# Cache
# =============================================================================


class ScoringConfigStore:
    """Lazily loads and caches the scoring configuration.

    Resolved once and reused until ``clear()`` or ``get(force_reload=True)``.
    ``set()`` injects a ready-made configuration (test fixtures, tuning runs).
    """

    def __init__(
        self,
        config_path: Path | None = None,
        defaults: ScoringConfig = DEFAULT_SCORING_CONFIG,
    ):
        self.config_path = config_path
        self.defaults = defaults
        self._config: ScoringConfig | None = None
        self._lock = threading.Lock()

    def get(self, force_reload: bool = False) -> ScoringConfig:
        """Return the cached configuration, loading it on first use."""
        with self._lock:
            if self._config is None or force_reload:
                self._config = self._load()
            return self._config

    def set(self, config: ScoringConfig) -> None:
        with self._lock:
            self._config = config

    def clear(self) -> None:
        with self._lock:
            self._config = None

    def _load(self) -> ScoringConfig:
        if self.config_path is None:
            return self.defaults

        try:
            override = load_override_document(self.config_path)
        except ConfigurationError as e:
            logger.warning(f"{e.message}; using default scoring config")
            return self.defaults

        if override is None:
            logger.info(f"Scoring config file not found at {self.config_path}, using defaults")
            return self.defaults

        logger.info(f"Loaded scoring config from {self.config_path}")
        return merge_scoring_config(self.defaults, override)
