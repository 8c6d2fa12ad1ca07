"""Pydantic models for Discogs API payloads."""

from pydantic import BaseModel, ConfigDict, field_validator


class DiscogsModel(BaseModel):
    """Base for Discogs payloads: unknown keys ignored, nulls accepted."""

    model_config = ConfigDict(extra="ignore")


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return value


class DiscogsSearchHit(DiscogsModel):
    """A single result from ``/database/search?barcode=...``."""

    id: str | None = None
    title: str | None = None
    year: str | None = None
    format: list[str] = []
    label: list[str] = []
    country: str | None = None
    barcode: list[str] = []
    cover_image: str | None = None
    resource_url: str | None = None
    uri: str | None = None

    @field_validator("id", "year", mode="before")
    @classmethod
    def _coerce_to_str(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("format", "label", "barcode", mode="before")
    @classmethod
    def _coerce_to_list(cls, value):
        return _as_list(value)


class DiscogsTrack(DiscogsModel):
    """A single entry of a release tracklist."""

    position: str | None = None
    title: str | None = None
    duration: str | None = None


class DiscogsLabel(DiscogsModel):
    name: str | None = None
    catno: str | None = None


class DiscogsReleaseDetail(DiscogsModel):
    """Full release from ``/releases/{id}``; only the enrichment fields are kept."""

    genres: list[str] = []
    styles: list[str] = []
    tracklist: list[DiscogsTrack] = []
    labels: list[DiscogsLabel] = []

    @field_validator("genres", "styles", "tracklist", "labels", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        return [] if value is None else value
