import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from labournow.config import settings
from labournow.utils.geo import (
    GeoPoint,
    GeoValidationError,
    compute_bounding_box,
    haversine_distance_km,
)

logger = logging.getLogger(__name__)


class SearchValidationError(GeoValidationError):
    """Raised for bad paging or filter values."""


@dataclass(frozen=True)
class SearchableEntity:
    """Read-only view of a worker profile as far as search is concerned."""

    id: str
    point: GeoPoint | None
    category: str = ""
    is_available: bool = True
    rating: float = 0.0
    total_jobs: int = 0
    data: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_worker(cls, worker: dict) -> "SearchableEntity":
        location = worker.get("location")
        point = GeoPoint(location.latitude, location.longitude) if location is not None else None
        return cls(
            id=worker["id"],
            point=point,
            category=(worker.get("category") or "").upper(),
            is_available=bool(worker.get("is_available", False)),
            rating=float(worker.get("rating") or 0.0),
            total_jobs=int(worker.get("total_jobs") or 0),
            data=worker,
        )


@dataclass(frozen=True)
class SearchFilters:
    category: str | None = None
    available_only: bool = False
    min_rating: float | None = None


@dataclass(frozen=True)
class SearchHit:
    entity: SearchableEntity
    distance_km: float


@dataclass(frozen=True)
class SearchPage:
    hits: list[SearchHit]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


def apply_filters(
    candidates: Iterable[SearchableEntity], filters: SearchFilters
) -> list[SearchableEntity]:
    """Exact attribute filters (category, availability, minimum rating)."""
    category = filters.category.strip().upper() if filters.category else None
    if filters.min_rating is not None and not 0 <= filters.min_rating <= 5:
        raise SearchValidationError(f"min_rating must be within [0, 5], got {filters.min_rating}")

    results = []
    for entity in candidates:
        if category and entity.category != category:
            continue
        if filters.available_only and not entity.is_available:
            continue
        if filters.min_rating is not None and entity.rating < filters.min_rating:
            continue
        results.append(entity)
    return results


def within_radius(
    candidates: Iterable[SearchableEntity], center: GeoPoint, radius_km: float
) -> list[SearchHit]:
    """Coarse bounding-box prune followed by the exact haversine cut.

    Entities without a location never match.
    """
    box = compute_bounding_box(center, radius_km)

    boxed = [e for e in candidates if e.point is not None and box.contains(e.point)]
    hits = []
    for entity in boxed:
        distance = haversine_distance_km(center, entity.point)
        if distance <= radius_km:
            hits.append(SearchHit(entity=entity, distance_km=distance))

    logger.debug("Radius %.2f km: %d in box, %d in range", radius_km, len(boxed), len(hits))
    return hits


def rank(hits: Sequence[SearchHit]) -> list[SearchHit]:
    """Quality first: rating, then completed jobs. Distance only breaks ties."""
    return sorted(
        hits,
        key=lambda h: (-h.entity.rating, -h.entity.total_jobs, h.distance_km),
    )


def _check_paging(page: int, limit: int) -> None:
    if page < 1:
        raise SearchValidationError(f"page must be >= 1, got {page}")
    if not 1 <= limit <= settings.max_page_size:
        raise SearchValidationError(
            f"limit must be within [1, {settings.max_page_size}], got {limit}"
        )


def paginate(hits: Sequence[SearchHit], page: int, limit: int) -> list[SearchHit]:
    _check_paging(page, limit)
    start = (page - 1) * limit
    return list(hits[start:start + limit])


def search(
    candidates: Iterable[SearchableEntity],
    center: GeoPoint,
    radius_km: float,
    filters: SearchFilters | None = None,
    page: int = 1,
    limit: int | None = None,
) -> SearchPage:
    """Filter ``candidates`` to those within ``radius_km`` of ``center`` and rank them.

    ``total`` counts every match across all pages.
    """
    limit = settings.default_page_size if limit is None else limit
    _check_paging(page, limit)
    filtered = apply_filters(candidates, filters or SearchFilters())
    ranked = rank(within_radius(filtered, center, radius_km))
    return SearchPage(
        hits=paginate(ranked, page, limit),
        page=page,
        limit=limit,
        total=len(ranked),
    )
