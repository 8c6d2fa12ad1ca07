"""Build canonical Album records from scored candidate groups.

The primary candidate supplies the core fields; the rest of the group
contributes ids, alternatives, titles, edition notes, genres, styles, and
fallbacks for the track list and cover art. Every collection is sorted so
repeated runs over the same input yield the same album.
"""

import hashlib
import re

from scoring.config import ScoringConfig
from scoring.models import (
    Album,
    AlternativeRelease,
    CandidateGroup,
    NormalizedCandidate,
    ReleaseSource,
    ScoringResult,
    Track,
    utc_now,
)
from scoring.score import select_primary

ALBUM_ID_HASH_LENGTH = 12

EDITION_NOTE_PATTERNS = (
    re.compile(
        r"\(([^)]*(?:remaster|deluxe|special|expanded|anniversary|edition|version)[^)]*)\)",
        re.IGNORECASE,
    ),
    re.compile(
        r"\[([^\]]*(?:remaster|deluxe|special|expanded|anniversary|edition|version)[^\]]*)\]",
        re.IGNORECASE,
    ),
)
"""Bracketed or parenthesized phrases that name a pressing or variant."""


def generate_album_id(barcode: str, grouping_key: str) -> str:
    """Stable album id: ``album:{barcode}:{sha256(grouping_key)[:12]}``."""
    digest = hashlib.sha256(grouping_key.encode("utf-8")).hexdigest()
    return f"album:{barcode}:{digest[:ALBUM_ID_HASH_LENGTH]}"


def select_best_track_list(
    primary: NormalizedCandidate,
    candidates: list[NormalizedCandidate],
    config: ScoringConfig,
) -> tuple[list[Track], NormalizedCandidate | None]:
    """Choose the album's track list.

    Uses the primary's list when it is complete; otherwise the longest list
    from a trusted source, if strictly longer than the primary's.

    Returns:
        Tuple of (track list, candidate it came from or None for the primary)
    """
    if primary.track_count >= config.min_tracks_for_complete:
        return primary.track_list, None

    best: NormalizedCandidate | None = None
    best_count = primary.track_count
    for candidate in candidates:
        if not config.sources.for_source(candidate.source).trust_track_list:
            continue
        if candidate.track_count > best_count:
            best = candidate
            best_count = candidate.track_count

    if best is not None and best.candidate_id != primary.candidate_id:
        return best.track_list, best

    return primary.track_list, None


def collect_external_ids(candidates: list[NormalizedCandidate]) -> tuple[list[str], list[str]]:
    """Sorted Discogs and MusicBrainz ids of every member (duplicates kept)."""
    discogs_ids = []
    musicbrainz_ids = []
    for candidate in candidates:
        if candidate.source == ReleaseSource.DISCOGS:
            discogs_ids.append(candidate.external_id)
        elif candidate.source == ReleaseSource.MUSICBRAINZ:
            musicbrainz_ids.append(candidate.external_id)
    return sorted(discogs_ids), sorted(musicbrainz_ids)


def create_alternative_releases(
    primary: NormalizedCandidate,
    candidates: list[NormalizedCandidate],
    all_scores: list[ScoringResult],
) -> list[AlternativeRelease]:
    """Every non-primary member, highest score first (stable on ties)."""
    alternatives = [
        AlternativeRelease(
            external_id=candidate.external_id,
            source=candidate.source,
            country=candidate.country,
            year=candidate.year,
            label=candidate.label,
            disambiguation=candidate.disambiguation,
            score=score.total_score,
        )
        for candidate, score in zip(candidates, all_scores, strict=True)
        if candidate.candidate_id != primary.candidate_id
    ]
    return sorted(alternatives, key=lambda alternative: -alternative.score)


def collect_other_titles(
    primary: NormalizedCandidate, candidates: list[NormalizedCandidate]
) -> list[str]:
    """Titles of non-primary members that differ from the primary's (ignoring case)."""
    primary_title = primary.title.lower().strip()
    other_titles = {
        candidate.title.strip()
        for candidate in candidates
        if candidate.candidate_id != primary.candidate_id
        and candidate.title.lower().strip() != primary_title
    }
    return sorted(other_titles)


def collect_edition_notes(candidates: list[NormalizedCandidate]) -> list[str]:
    """Edition phrases from every member's title, plus disambiguation comments."""
    notes = set()
    for candidate in candidates:
        for pattern in EDITION_NOTE_PATTERNS:
            for match in pattern.finditer(candidate.title):
                note = match.group(1).strip()
                if note:
                    notes.add(note)

        if candidate.disambiguation and candidate.disambiguation.strip():
            notes.add(candidate.disambiguation.strip())

    return sorted(notes)


def _union_sorted(values_per_candidate: list[list[str]]) -> list[str]:
    return sorted(
        {value.strip() for values in values_per_candidate for value in values if value.strip()}
    )


def aggregate_genres(candidates: list[NormalizedCandidate]) -> list[str]:
    return _union_sorted([candidate.genre for candidate in candidates])


def aggregate_styles(candidates: list[NormalizedCandidate]) -> list[str]:
    return _union_sorted([candidate.style for candidate in candidates])


def select_best_cover_image(
    primary: NormalizedCandidate, candidates: list[NormalizedCandidate]
) -> str | None:
    """Primary's cover if present, else the first cover found in group order."""
    if primary.cover_image_url:
        return primary.cover_image_url
    for candidate in candidates:
        if candidate.cover_image_url:
            return candidate.cover_image_url
    return None


def build_album(group: CandidateGroup, config: ScoringConfig) -> Album:
    """Select the group's primary candidate and aggregate the group into an Album."""
    selection = select_primary(group, config)
    primary = selection.primary
    candidates = group.candidates

    track_list, track_list_candidate = select_best_track_list(primary, candidates, config)
    discogs_ids, musicbrainz_ids = collect_external_ids(candidates)
    now = utc_now()

    return Album(
        id=generate_album_id(group.barcode, group.grouping_key),
        title=primary.title,
        artist=primary.artist,
        year=primary.year,
        label=primary.label,
        format=primary.format,
        barcode=group.barcode,
        country=primary.country,
        cover_image_url=select_best_cover_image(primary, candidates),
        track_list=track_list,
        track_list_source=track_list_candidate.source if track_list_candidate else None,
        track_list_source_id=(
            track_list_candidate.candidate_id if track_list_candidate else None
        ),
        discogs_ids=discogs_ids,
        musicbrainz_ids=musicbrainz_ids,
        alternative_releases=create_alternative_releases(
            primary, candidates, selection.all_scores
        ),
        other_titles=collect_other_titles(primary, candidates),
        edition_notes=collect_edition_notes(candidates),
        genres=aggregate_genres(candidates),
        styles=aggregate_styles(candidates),
        primary_release_id=primary.candidate_id,
        primary_release_source=primary.source,
        primary_release_score=selection.primary_score.total_score,
        created_at=now,
        updated_at=now,
    )


def build_albums(groups: list[CandidateGroup], config: ScoringConfig) -> list[Album]:
    return [build_album(group, config) for group in groups]


def format_album(album: Album) -> str:
    """Multi-line, human-readable summary of an album."""
    track_source = f" (from {album.track_list_source})" if album.track_list_source else ""
    lines = [
        f"Album: {album.artist} - {album.title}",
        f"  ID: {album.id}",
        f"  Barcode: {album.barcode}",
        f"  Year: {album.year or 'Unknown'}",
        f"  Format: {album.format or 'Unknown'}",
        f"  Label: {album.label or 'Unknown'}",
        f"  Country: {album.country or 'Unknown'}",
        f"  Cover: {'Yes' if album.cover_image_url else 'No'}",
        f"  Tracks: {len(album.track_list)}{track_source}",
        f"  Genres: {', '.join(album.genres) or 'None'}",
        f"  Styles: {', '.join(album.styles) or 'None'}",
        f"  Discogs IDs: {', '.join(album.discogs_ids) or 'None'}",
        f"  MusicBrainz IDs: {', '.join(album.musicbrainz_ids) or 'None'}",
        f"  Alternative Releases: {len(album.alternative_releases)}",
        f"  Other Titles: {'; '.join(album.other_titles) or 'None'}",
        f"  Edition Notes: {'; '.join(album.edition_notes) or 'None'}",
        f"  Primary Release: {album.primary_release_id} "
        f"({album.primary_release_source}, score: {album.primary_release_score:g})",
    ]
    return "\n".join(lines)
