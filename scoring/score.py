"""Rule-based scoring and primary release selection.

Each rule returns ``(points, audit lines)``. Every rule always explains itself,
including when it contributes nothing, so any total can be traced back to the
rules that produced it. Selection is deterministic: highest total wins, ties
go through the configured tie breaker.
"""

import math
from dataclasses import dataclass

from scoring.config import ScoringConfig, TieBreaker
from scoring.models import (
    CandidateGroup,
    NormalizedCandidate,
    ReleaseSource,
    ScoreBreakdown,
    ScoringResult,
)

RuleOutcome = tuple[float, list[str]]

SOURCE_DISPLAY_NAMES = {
    ReleaseSource.DISCOGS: "Discogs",
    ReleaseSource.MUSICBRAINZ: "MusicBrainz",
}


def _signed(points: float) -> str:
    return f"{points:+g}"


# =============================================================================
# Rules
# =============================================================================


def score_media_type(candidate: NormalizedCandidate, config: ScoringConfig) -> RuleOutcome:
    """Award the media type weight for the first preferred type found in the format."""
    if not candidate.format:
        return 0, ["No format information available"]

    format_lower = candidate.format.lower()
    weight = config.weights.media_type
    for media_type in config.preferred_media_types:
        if media_type.lower() in format_lower:
            return weight, [
                f'Format "{candidate.format}" matches preferred type "{media_type}" '
                f"({_signed(weight)})"
            ]

    return 0, [f'Format "{candidate.format}" does not match any preferred media type']


def score_country(candidate: NormalizedCandidate, config: ScoringConfig) -> RuleOutcome:
    """Bonus for preferred countries, penalty for de-prioritized ones."""
    if not candidate.country:
        return 0, ["No country information available"]

    country_lower = candidate.country.lower()

    if any(country_lower == preferred.lower() for preferred in config.preferred_countries):
        weight = config.weights.preferred_country
        return weight, [f'Country "{candidate.country}" is preferred ({_signed(weight)})']

    if any(country_lower == other.lower() for other in config.deprioritized_countries):
        weight = config.weights.deprioritized_country
        return weight, [f'Country "{candidate.country}" is de-prioritized ({_signed(weight)})']

    return 0, [f'Country "{candidate.country}" is neutral (no bonus/penalty)']


def score_track_list(candidate: NormalizedCandidate, config: ScoringConfig) -> RuleOutcome:
    """Complete or partial track list bonus."""
    track_count = candidate.track_count
    threshold = config.min_tracks_for_complete

    if track_count == 0:
        return 0, ["No track list available"]

    if track_count >= threshold:
        weight = config.weights.track_list_complete
        return weight, [
            f"Complete track list ({track_count} tracks >= {threshold:g}) ({_signed(weight)})"
        ]

    weight = config.weights.track_list_partial
    return weight, [
        f"Partial track list ({track_count} tracks < {threshold:g}) ({_signed(weight)})"
    ]


def score_cover_art(candidate: NormalizedCandidate, config: ScoringConfig) -> RuleOutcome:
    if candidate.cover_image_url:
        weight = config.weights.cover_art
        return weight, [f"Cover art available ({_signed(weight)})"]
    return 0, ["No cover art available"]


def score_label_info(candidate: NormalizedCandidate, config: ScoringConfig) -> RuleOutcome:
    """Label and catalog number bonuses, independently additive."""
    points: float = 0
    rules = []

    if candidate.label:
        points += config.weights.label_info
        rules.append(
            f'Label information available: "{candidate.label}" '
            f"({_signed(config.weights.label_info)})"
        )
    else:
        rules.append("No label information available")

    if candidate.catalog_number:
        points += config.weights.catalog_number
        rules.append(
            f'Catalog number available: "{candidate.catalog_number}" '
            f"({_signed(config.weights.catalog_number)})"
        )
    else:
        rules.append("No catalog number available")

    return points, rules


def score_source(candidate: NormalizedCandidate, config: ScoringConfig) -> RuleOutcome:
    """Per-source base score (may be zero or negative)."""
    base_score = config.sources.for_source(candidate.source).base_score
    name = SOURCE_DISPLAY_NAMES[candidate.source]
    if base_score == 0:
        return 0, [f"No {name} source bonus (0)"]
    return base_score, [f"{name} source bonus ({_signed(base_score)})"]


# =============================================================================
# Scoring
# =============================================================================


def score_candidate(candidate: NormalizedCandidate, config: ScoringConfig) -> ScoringResult:
    """Score a candidate and record which rules produced the points."""
    media_type, media_rules = score_media_type(candidate, config)
    country, country_rules = score_country(candidate, config)
    track_list, track_rules = score_track_list(candidate, config)
    cover_art, cover_rules = score_cover_art(candidate, config)
    label_info, label_rules = score_label_info(candidate, config)
    source_bonus, source_rules = score_source(candidate, config)

    breakdown = ScoreBreakdown(
        media_type=media_type,
        country=country,
        track_list=track_list,
        cover_art=cover_art,
        label_info=label_info,
        source_bonus=source_bonus,
    )

    return ScoringResult(
        candidate_id=candidate.candidate_id,
        external_id=candidate.external_id,
        source=candidate.source,
        total_score=breakdown.total,
        breakdown=breakdown,
        applied_rules=[
            *media_rules,
            *country_rules,
            *track_rules,
            *cover_rules,
            *label_rules,
            *source_rules,
        ],
    )


def score_candidates(
    candidates: list[NormalizedCandidate], config: ScoringConfig
) -> list[ScoringResult]:
    return [score_candidate(candidate, config) for candidate in candidates]


# =============================================================================
# Tie-breaking
# =============================================================================

TIE_BREAKER_PREFERRED_SOURCE = {
    TieBreaker.PREFER_DISCOGS: ReleaseSource.DISCOGS,
    TieBreaker.PREFER_MUSICBRAINZ: ReleaseSource.MUSICBRAINZ,
}
"""Source-preference strategies and the source each one prefers."""

TIE_BREAKER_FALLBACK = {
    TieBreaker.PREFER_DISCOGS: TieBreaker.EARLIEST_YEAR,
    TieBreaker.PREFER_MUSICBRAINZ: TieBreaker.EARLIEST_YEAR,
}
"""Strategy to continue with when a source-preference strategy finds no match."""


def _earliest_year(tied: list[NormalizedCandidate]) -> int:
    # Missing years sort last; equal years fall back to the smallest composite id
    return min(
        range(len(tied)),
        key=lambda i: (
            tied[i].year if tied[i].year is not None else math.inf,
            tied[i].candidate_id,
        ),
    )


def _smallest_id(tied: list[NormalizedCandidate]) -> int:
    return min(range(len(tied)), key=lambda i: tied[i].candidate_id)


def apply_tie_breaker(tied: list[NormalizedCandidate], strategy: TieBreaker | None) -> int:
    """Pick one of several equally scored candidates.

    Args:
        tied: Candidates sharing the top score, in group order
        strategy: Configured tie breaker; None selects the first candidate

    Returns:
        Index into ``tied`` of the winner
    """
    while True:
        if len(tied) == 1:
            return 0
        if strategy == TieBreaker.EARLIEST_YEAR:
            return _earliest_year(tied)
        if strategy == TieBreaker.SMALLEST_ID:
            return _smallest_id(tied)
        if strategy in TIE_BREAKER_PREFERRED_SOURCE:
            preferred = TIE_BREAKER_PREFERRED_SOURCE[strategy]
            for index, candidate in enumerate(tied):
                if candidate.source == preferred:
                    return index
            strategy = TIE_BREAKER_FALLBACK[strategy]
            continue
        # Unset or unrecognized strategy
        return 0


@dataclass(frozen=True)
class PrimarySelection:
    """Outcome of selecting a group's primary candidate."""

    primary: NormalizedCandidate
    primary_score: ScoringResult
    all_scores: list[ScoringResult]
    """Scores for every group member, in group order."""

    primary_index: int


def select_primary(group: CandidateGroup, config: ScoringConfig) -> PrimarySelection:
    """Score every member of a group and select the primary candidate."""
    candidates = group.candidates
    all_scores = score_candidates(candidates, config)

    if len(candidates) == 1:
        return PrimarySelection(
            primary=candidates[0],
            primary_score=all_scores[0],
            all_scores=all_scores,
            primary_index=0,
        )

    max_score = max(score.total_score for score in all_scores)
    top_indices = [i for i, score in enumerate(all_scores) if score.total_score == max_score]

    if len(top_indices) == 1:
        primary_index = top_indices[0]
    else:
        tied = [candidates[i] for i in top_indices]
        primary_index = top_indices[apply_tie_breaker(tied, config.tie_breaker)]

    return PrimarySelection(
        primary=candidates[primary_index],
        primary_score=all_scores[primary_index],
        all_scores=all_scores,
        primary_index=primary_index,
    )


def format_scoring_result(result: ScoringResult) -> str:
    """Multi-line, human-readable summary of a scoring result."""
    breakdown = result.breakdown
    lines = [
        f"Release: {result.candidate_id} ({result.source})",
        f"Total Score: {result.total_score:g}",
        "Breakdown:",
        f"  - Media Type: {breakdown.media_type:g}",
        f"  - Country: {breakdown.country:g}",
        f"  - Track List: {breakdown.track_list:g}",
        f"  - Cover Art: {breakdown.cover_art:g}",
        f"  - Label Info: {breakdown.label_info:g}",
        f"  - Source Bonus: {breakdown.source_bonus:g}",
        "Applied Rules:",
        *(f"  - {rule}" for rule in result.applied_rules),
    ]
    return "\n".join(lines)
