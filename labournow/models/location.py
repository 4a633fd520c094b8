from pydantic import BaseModel, Field

from labournow.models.common import GeoPointIn


class GeocodeResult(BaseModel):
    place_id: str
    display_name: str
    latitude: float
    longitude: float
    address: str = ""
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    type: str | None = None
    importance: float | None = None


class GeocodeResponse(BaseModel):
    results: list[GeocodeResult]


class ReverseGeocodeResponse(BaseModel):
    location: GeoPointIn
    coordinates: str
    address: str | None = None


class DistanceMatrixRequest(BaseModel):
    origins: list[GeoPointIn] = Field(min_length=1, max_length=25)
    destinations: list[GeoPointIn] = Field(min_length=1, max_length=25)


class DistanceMatrixResponse(BaseModel):
    distances_km: list[list[float]]
