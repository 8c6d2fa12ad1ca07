"""Map MusicBrainz search hits and release details to raw candidates."""

from typing import Any

from musicbrainz.models import LabelInfo, MusicBrainzReleaseDetail, MusicBrainzSearchHit
from scoring.models import RawCandidate, ReleaseSource, Track, utc_now

UNKNOWN = "Unknown"


def parse_search_hit(payload: Any) -> MusicBrainzSearchHit:
    """Validate a search hit.

    Raises:
        pydantic.ValidationError: If the payload has no id or is malformed
    """
    if isinstance(payload, MusicBrainzSearchHit):
        return payload
    return MusicBrainzSearchHit.model_validate(payload)


def parse_release_detail(payload: Any) -> MusicBrainzReleaseDetail | None:
    if payload is None:
        return None
    if isinstance(payload, MusicBrainzReleaseDetail):
        return payload
    return MusicBrainzReleaseDetail.model_validate(payload)


def extract_release_id(hit: MusicBrainzSearchHit) -> str | None:
    return hit.id or None


def ms_to_duration(ms: int | float | None) -> str | None:
    """Render a track length in milliseconds as "m:ss" (None for no length)."""
    if not ms:
        return None
    total_seconds = int(ms // 1000)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


def _parse_year(date: str | None) -> int | None:
    if not date or len(date) < 4 or not date[:4].isdigit():
        return None
    return int(date[:4])


def _first_label(label_info: list[LabelInfo]) -> str | None:
    if label_info and label_info[0].label and label_info[0].label.name:
        return label_info[0].label.name
    return None


def _first_catalog_number(label_info: list[LabelInfo]) -> str | None:
    for info in label_info:
        if info.catalog_number:
            return info.catalog_number
    return None


def _genres(detail: MusicBrainzReleaseDetail) -> list[str]:
    if detail.genres is not None:
        return [genre.name for genre in detail.genres]
    if detail.tags is not None:
        return [tag.name for tag in detail.tags]
    return []


def _track_list(detail: MusicBrainzReleaseDetail) -> list[Track]:
    return [
        Track(position=track.position, title=track.title, duration=ms_to_duration(track.length))
        for medium in detail.media
        for track in medium.tracks
        if track.title
    ]


def _format(detail: MusicBrainzReleaseDetail) -> str | None:
    formats: list[str] = []
    for medium in detail.media:
        if medium.format and medium.format not in formats:
            formats.append(medium.format)
    return ", ".join(formats) or None


def build_candidate(
    barcode: str,
    hit: MusicBrainzSearchHit,
    detail: MusicBrainzReleaseDetail | None = None,
) -> RawCandidate:
    """Build a raw candidate from a search hit and its (optional) release detail.

    MusicBrainz search results carry no format, styles or cover art; format and
    genres come from the detail when it could be fetched.
    """
    artist = hit.artist_credit[0].name if hit.artist_credit else None

    genre: list[str] = []
    track_list: list[Track] = []
    catalog_number = _first_catalog_number(hit.label_info)
    release_format = None
    if detail is not None:
        genre = _genres(detail)
        track_list = _track_list(detail)
        catalog_number = _first_catalog_number(detail.label_info) or catalog_number
        release_format = _format(detail)

    now = utc_now()
    return RawCandidate(
        barcode=barcode,
        artist=artist or UNKNOWN,
        title=hit.title or UNKNOWN,
        year=_parse_year(hit.date),
        format=release_format,
        genre=genre,
        style=[],
        label=_first_label(hit.label_info),
        country=hit.country or None,
        cover_image_url=None,
        track_list=track_list,
        catalog_number=catalog_number,
        external_id=hit.id,
        source=ReleaseSource.MUSICBRAINZ,
        disambiguation=hit.disambiguation or None,
        created_at=now,
        updated_at=now,
    )
