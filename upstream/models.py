"""Pydantic models for reshaped upstream API responses."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the client page."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GeoResult(BaseModel):
    """Best geocoder match for a city."""

    lat: float
    lon: float
    display_name: str
    country_code: str = "us"


class NewsItem(CamelModel):
    """A single headline from the news feed."""

    title: str = ""
    link: str = ""
    source: str = ""
    pub_date: str = ""


class Restaurant(BaseModel):
    """A nearby restaurant from OpenStreetMap."""

    name: str
    cuisine: str | None = None
    lat: float
    lon: float
