"""Models for the static mood and locale tables."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Mood(StrEnum):
    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"

    @classmethod
    def parse(cls, value: str | None) -> "Mood | None":
        """Case-insensitive lookup; unknown or empty values give None."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class SongEntry(BaseModel):
    """A song recommendation. Loaded once from the catalog and never mutated."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str
    artist: str
    media_id: str
    reason: str


class Locale(BaseModel):
    """Language and BCP 47 locale tag for a country."""

    model_config = ConfigDict(frozen=True)

    lang: str
    locale: str


class SongCatalogFile(BaseModel):
    """Shape of ``songs.json``: mood pools plus country -> mood pools."""

    model_config = ConfigDict(populate_by_name=True)

    global_pools: dict[Mood, list[SongEntry]] = Field(default_factory=dict, alias="global")
    regions: dict[str, dict[Mood, list[SongEntry]]] = Field(default_factory=dict)


class LocaleTableFile(BaseModel):
    """Shape of ``locales.json``."""

    countries: dict[str, Locale] = {}
