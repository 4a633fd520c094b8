from fastapi import APIRouter, HTTPException, Query

from labournow.models.common import GeoPointIn
from labournow.models.location import (
    DistanceMatrixRequest,
    DistanceMatrixResponse,
    GeocodeResponse,
    GeocodeResult,
    ReverseGeocodeResponse,
)
from labournow.services import geocoding_service
from labournow.utils.geo import GeoPoint, distance_matrix, format_coordinates, parse_coordinates

router = APIRouter(prefix="/api/v1/location", tags=["location"])


@router.get("/search", response_model=GeocodeResponse)
def search_location(
    q: str = Query(..., min_length=1, max_length=200),
    limit: int = Query(default=5, ge=1, le=10),
):
    """Place search. A query that is already ``lat, lon`` is echoed back without a lookup."""
    point = parse_coordinates(q)
    if point is not None:
        coords = format_coordinates(point.latitude, point.longitude)
        return GeocodeResponse(results=[GeocodeResult(
            place_id=coords,
            display_name=coords,
            latitude=point.latitude,
            longitude=point.longitude,
        )])

    try:
        results = geocoding_service.geocode(q, limit=limit)
    except geocoding_service.GeocodingError:
        raise HTTPException(status_code=502, detail="Location lookup service temporarily unavailable")
    return GeocodeResponse(results=[GeocodeResult(**r) for r in results])


@router.get("/reverse", response_model=ReverseGeocodeResponse)
def reverse_location(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
):
    try:
        address = geocoding_service.reverse_geocode(GeoPoint(latitude, longitude))
    except geocoding_service.GeocodingError:
        raise HTTPException(status_code=502, detail="Location lookup service temporarily unavailable")
    return ReverseGeocodeResponse(
        location=GeoPointIn(latitude=latitude, longitude=longitude),
        coordinates=format_coordinates(latitude, longitude),
        address=address,
    )


@router.post("/distance-matrix", response_model=DistanceMatrixResponse)
def get_distance_matrix(body: DistanceMatrixRequest):
    origins = [GeoPoint(p.latitude, p.longitude) for p in body.origins]
    destinations = [GeoPoint(p.latitude, p.longitude) for p in body.destinations]
    return DistanceMatrixResponse(distances_km=distance_matrix(origins, destinations).tolist())
