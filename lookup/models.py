"""Result shapes returned by the lookup orchestrator."""

from pydantic import Field

from scoring.models import Album, CamelModel, RawCandidate, ScoringResult


class ScoringDetail(ScoringResult):
    """One entry of the per-candidate scoring trace, with per-area roll-ups."""

    grouping_key: str
    media_type_score: float
    country_score: float
    completeness_score: float  # track list + cover art + label info


class RescoreResult(CamelModel):
    """Albums and scoring trace for a list of already-fetched candidates."""

    albums: list[Album] = Field(default_factory=list)
    raw_candidates: list[RawCandidate] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    scoring_details: list[ScoringDetail] = Field(default_factory=list)


class LookupResult(RescoreResult):
    """Result of a barcode lookup, with timing."""

    from_cache: bool = False
    processing_time_ms: float = 0
    step_timings: dict[str, float] = Field(default_factory=dict)
