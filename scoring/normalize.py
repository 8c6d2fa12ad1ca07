"""Text normalization for grouping release candidates.

Candidates from different catalogs spell the same album differently
("The Wall (Remastered)", "the wall"). Normalization reduces both the artist
and the title to a canonical form so they can be grouped by barcode, artist
and title.
"""

import re

from scoring.config import ScoringConfig
from scoring.models import NormalizedCandidate, RawCandidate, ReleaseSource

UNKNOWN_ARTIST = "unknown"

COMBINED_TITLE_SEPARATOR = " - "
"""Separator in "Artist - Title" combined strings from Discogs exports."""

ARTIST_SEPARATORS = (
    " feat. ",
    " feat ",
    " ft. ",
    " ft ",
    " featuring ",
    " vs. ",
    " vs ",
    " and ",
    " & ",
    ", ",
)
"""Multi-artist separators, in priority order. Only the first one found is used."""

_WHITESPACE_RUN = re.compile(r"\s+")
_TRAILING_PUNCTUATION = re.compile(r"[\s\-:,]+$")
_LEADING_ARTICLE = re.compile(r"^(the|a|an)\s+", re.IGNORECASE)


def normalize_text(text: str | None, affixes: list[str]) -> str:
    """Normalize a title or artist name for grouping.

    Steps: lowercase, trim, remove every occurrence of each affix (longest
    affix first, so "(deluxe edition)" wins over "(deluxe)"), collapse
    whitespace, strip trailing " -:," runs, then drop one leading article.

    Args:
        text: Text to normalize
        affixes: Non-semantic affixes to remove (case-insensitive)

    Returns:
        Normalized text, empty string for empty input
    """
    if not text:
        return ""

    normalized = text.lower().strip()

    for affix in sorted(affixes, key=len, reverse=True):
        affix_lower = affix.lower()
        if not affix_lower:
            continue
        while affix_lower in normalized:
            normalized = normalized.replace(affix_lower, "")

    normalized = _WHITESPACE_RUN.sub(" ", normalized).strip()
    normalized = _TRAILING_PUNCTUATION.sub("", normalized).strip()
    return _LEADING_ARTICLE.sub("", normalized)


def extract_main_artist(artist: str | None, title: str | None = None) -> str:
    """Extract the main artist from a raw artist string.

    Handles "Artist - Title" combined strings (only when the part after the
    separator resembles ``title``) and multi-artist credits such as
    "A feat. B" or "A & B", keeping the first artist.

    Args:
        artist: Artist string from the candidate
        title: Candidate title, used to detect combined strings

    Returns:
        Main artist name, or "unknown" for an empty artist
    """
    if not artist or not artist.strip():
        return UNKNOWN_ARTIST

    if title and COMBINED_TITLE_SEPARATOR in artist:
        head, _, rest = artist.partition(COMBINED_TITLE_SEPARATOR)
        potential_title = rest.lower()
        title_lower = title.lower()
        if potential_title in title_lower or title_lower in potential_title:
            return head.strip()

    main_artist = artist
    artist_lower = artist.lower()
    for separator in ARTIST_SEPARATORS:
        index = artist_lower.find(separator)
        if index > 0:
            main_artist = artist[:index]
            break

    return main_artist.strip()


def create_grouping_key(barcode: str, normalized_title: str, normalized_artist: str) -> str:
    """Build the ``barcode|artist|title`` key that partitions candidates."""
    return f"{barcode}|{normalized_artist}|{normalized_title}"


def get_affixes_for_source(config: ScoringConfig, source: ReleaseSource) -> list[str]:
    """Global affixes plus the source's additional ones."""
    additional = config.sources.for_source(source).additional_affixes
    return [*config.normalization_affixes, *additional]


def normalize_candidate(candidate: RawCandidate, config: ScoringConfig) -> NormalizedCandidate:
    """Attach normalized artist/title and the grouping key to a candidate."""
    affixes = get_affixes_for_source(config, candidate.source)

    main_artist = extract_main_artist(candidate.artist, candidate.title)
    normalized_artist = normalize_text(main_artist, affixes)
    normalized_title = normalize_text(candidate.title, affixes)

    raw_fields = {name: getattr(candidate, name) for name in RawCandidate.model_fields}
    return NormalizedCandidate(
        **raw_fields,
        normalized_artist=normalized_artist,
        normalized_title=normalized_title,
        grouping_key=create_grouping_key(candidate.barcode, normalized_title, normalized_artist),
    )


def normalize_candidates(
    candidates: list[RawCandidate], config: ScoringConfig
) -> list[NormalizedCandidate]:
    return [normalize_candidate(candidate, config) for candidate in candidates]
