"""Geographic coordinate model."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Location(BaseModel):
    """A latitude/longitude pair in decimal degrees.

    No range validation is performed: out-of-range degrees are accepted
    and propagated as-is.

    Parameters
    ----------
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    latitude: float = Field(validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(validation_alias=AliasChoices("longitude", "lng", "lon"))
