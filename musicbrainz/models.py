"""Pydantic models for MusicBrainz web service payloads.

MusicBrainz uses hyphenated JSON keys (``artist-credit``, ``label-info``);
the models expose them as snake_case attributes.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MusicBrainzModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ArtistCredit(MusicBrainzModel):
    name: str | None = None


class LabelRef(MusicBrainzModel):
    name: str | None = None


class LabelInfo(MusicBrainzModel):
    label: LabelRef | None = None
    catalog_number: str | None = Field(default=None, alias="catalog-number")


class MusicBrainzSearchHit(MusicBrainzModel):
    """A single release from ``/release?query=barcode:...``."""

    id: str
    title: str | None = None
    date: str | None = None
    country: str | None = None
    disambiguation: str | None = None
    artist_credit: list[ArtistCredit] = Field(default_factory=list, alias="artist-credit")
    label_info: list[LabelInfo] = Field(default_factory=list, alias="label-info")

    @field_validator("artist_credit", "label_info", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        return [] if value is None else value


class Tag(MusicBrainzModel):
    name: str


class MusicBrainzTrack(MusicBrainzModel):
    position: str | None = None
    title: str | None = None
    length: int | None = None  # milliseconds

    @field_validator("position", mode="before")
    @classmethod
    def _position_to_str(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)


class Medium(MusicBrainzModel):
    format: str | None = None
    tracks: list[MusicBrainzTrack] = Field(default_factory=list)

    @field_validator("tracks", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        return [] if value is None else value


class MusicBrainzReleaseDetail(MusicBrainzModel):
    """Release from ``/release/{mbid}?inc=artists+labels+recordings+media``."""

    genres: list[Tag] | None = None
    tags: list[Tag] | None = None
    media: list[Medium] = Field(default_factory=list)
    label_info: list[LabelInfo] = Field(default_factory=list, alias="label-info")

    @field_validator("media", "label_info", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        return [] if value is None else value
