"""Nominatim (OpenStreetMap) geocoding, restricted to India by default."""
import logging

import httpx

from labournow.config import settings
from labournow.utils.geo import GeoPoint, GeoValidationError

logger = logging.getLogger(__name__)

# Fields are tried in order; the first one present wins.
_ADDRESS_FIELDS = (
    ("house_number",),
    ("road",),
    ("suburb",),
    ("city", "town", "village"),
    ("state",),
    ("postcode",),
    ("country",),
)


class GeocodingError(Exception):
    """Raised when the upstream geocoder is unreachable or answers with an error."""


def format_address(address: dict) -> str:
    parts = []
    for candidates in _ADDRESS_FIELDS:
        for key in candidates:
            if address.get(key):
                parts.append(str(address[key]))
                break
    return ", ".join(parts)


def _get(path: str, params: dict) -> object:
    url = f"{settings.nominatim_base_url}/{path}"
    headers = {"User-Agent": settings.nominatim_user_agent}
    try:
        with httpx.Client(timeout=settings.geocoding_timeout_seconds) as client:
            resp = client.get(url, params=params, headers=headers)
    except httpx.RequestError as e:
        logger.warning("Nominatim unavailable: %s", e)
        raise GeocodingError("Geocoding service unavailable") from e

    if resp.status_code >= 400:
        logger.warning("Nominatim error %d: %s", resp.status_code, resp.text[:200])
        raise GeocodingError(f"Geocoding service returned {resp.status_code}")
    try:
        return resp.json()
    except ValueError as e:
        logger.warning("Nominatim returned a non-JSON body: %s", resp.text[:200])
        raise GeocodingError("Geocoding service returned an unreadable response") from e


def geocode(query: str, limit: int = 5) -> list[dict]:
    query = (query or "").strip()
    if not query:
        return []

    data = _get("search", {
        "q": query,
        "format": "json",
        "addressdetails": "1",
        "limit": str(limit),
        "countrycodes": settings.nominatim_country_codes,
    })
    if isinstance(data, dict) and data.get("error"):
        raise GeocodingError(str(data["error"]))

    if not isinstance(data, list):
        logger.warning("Unexpected Nominatim search payload: %s", type(data).__name__)
        raise GeocodingError("Geocoding service returned an unexpected response")

    results = []
    for item in data:
        try:
            point = GeoPoint(float(item["lat"]), float(item["lon"]))
        except (KeyError, TypeError, ValueError, GeoValidationError):
            logger.warning(
                "Skipping malformed geocoder result: %r",
                item.get("place_id") if isinstance(item, dict) else item,
            )
            continue
        address = item.get("address")
        if not isinstance(address, dict):
            address = {}
        results.append({
            "place_id": str(item.get("place_id", "")),
            "display_name": item.get("display_name", ""),
            "latitude": point.latitude,
            "longitude": point.longitude,
            "address": format_address(address),
            "city": address.get("city") or address.get("town") or address.get("village"),
            "state": address.get("state"),
            "pincode": address.get("postcode"),
            "type": item.get("type"),
            "importance": item.get("importance"),
        })
    return results


def reverse_geocode(point: GeoPoint) -> str | None:
    """Human-readable address for a point, or None when Nominatim has nothing."""
    data = _get("reverse", {
        "lat": str(point.latitude),
        "lon": str(point.longitude),
        "format": "json",
        "zoom": "18",
        "addressdetails": "1",
    })
    if not isinstance(data, dict) or data.get("error"):
        return None
    return format_address(data.get("address") or {}) or data.get("display_name")
