"""Map Discogs search hits and release details to raw candidates.

The Discogs client itself is an external collaborator; these helpers accept
either the typed models from ``discogs.models`` or the decoded JSON mappings it
returns, and never perform I/O.
"""

import re
from typing import Any

from discogs.models import DiscogsReleaseDetail, DiscogsSearchHit
from scoring.models import RawCandidate, ReleaseSource, Track, utc_now

UNKNOWN = "Unknown"
TITLE_SEPARATOR = " - "

_RESOURCE_URL_ID = re.compile(r"releases/(\d+)")
_URI_ID = re.compile(r"release/(\d+)")
_LEADING_ID = re.compile(r"^(?:/release/)?(\d+)")
_YEAR = re.compile(r"^(\d{4})")


def parse_search_hit(payload: Any) -> DiscogsSearchHit:
    """Validate a search hit.

    Raises:
        pydantic.ValidationError: If the payload does not look like a search hit
    """
    if isinstance(payload, DiscogsSearchHit):
        return payload
    return DiscogsSearchHit.model_validate(payload)


def parse_release_detail(payload: Any) -> DiscogsReleaseDetail | None:
    """Validate a release detail payload; None when the client returned nothing."""
    if payload is None:
        return None
    if isinstance(payload, DiscogsReleaseDetail):
        return payload
    return DiscogsReleaseDetail.model_validate(payload)


def extract_release_id(hit: DiscogsSearchHit) -> str | None:
    """Release id from ``id``, else parsed out of ``resource_url`` or ``uri``."""
    if hit.id:
        return hit.id

    if hit.resource_url:
        match = _RESOURCE_URL_ID.search(hit.resource_url)
        if match:
            return match.group(1)

    if hit.uri:
        # uri is sometimes "/release/33535479-Mumford-Sons-Rushmere"
        match = _URI_ID.search(hit.uri) or _LEADING_ID.match(hit.uri)
        if match:
            return match.group(1)

    return None


def split_discogs_title(raw_title: str | None) -> tuple[str, str]:
    """Split a Discogs "Artist - Title" search title.

    Returns:
        Tuple of (artist, title); both are the whole string when there is no separator
    """
    if not raw_title or not raw_title.strip():
        return UNKNOWN, UNKNOWN

    artist, separator, title = raw_title.partition(TITLE_SEPARATOR)
    if not separator:
        return raw_title.strip(), raw_title.strip()

    return artist.strip() or UNKNOWN, title.strip() or raw_title.strip()


def parse_year(value: str | None) -> int | None:
    """First four digits of a Discogs year ("1973", "1973-03-01")."""
    if not value:
        return None
    match = _YEAR.match(value.strip())
    return int(match.group(1)) if match else None


def _join(values: list[str]) -> str | None:
    joined = ", ".join(value for value in values if value)
    return joined or None


def build_candidate(
    barcode: str,
    hit: DiscogsSearchHit,
    detail: DiscogsReleaseDetail | None = None,
) -> RawCandidate:
    """Build a raw candidate from a search hit and its (optional) release detail.

    Raises:
        ValueError: If the hit carries no usable release id
    """
    external_id = extract_release_id(hit)
    if external_id is None:
        raise ValueError("Discogs search hit has no release id")

    artist, title = split_discogs_title(hit.title)

    genre: list[str] = []
    style: list[str] = []
    track_list: list[Track] = []
    catalog_number = None
    if detail is not None:
        genre = list(detail.genres)
        style = list(detail.styles)
        track_list = [
            Track(position=track.position, title=track.title, duration=track.duration or None)
            for track in detail.tracklist
            if track.title
        ]
        if detail.labels:
            catalog_number = detail.labels[0].catno or None

    now = utc_now()
    return RawCandidate(
        barcode=barcode,
        artist=artist,
        title=title,
        year=parse_year(hit.year),
        format=_join(hit.format),
        genre=genre,
        style=style,
        label=_join(hit.label),
        country=hit.country or None,
        cover_image_url=hit.cover_image or None,
        track_list=track_list,
        catalog_number=catalog_number,
        external_id=external_id,
        source=ReleaseSource.DISCOGS,
        created_at=now,
        updated_at=now,
    )
