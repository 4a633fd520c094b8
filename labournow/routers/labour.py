from fastapi import APIRouter, Depends, HTTPException, Query
from google.cloud.firestore import Client as FirestoreClient

from labournow import dependencies
from labournow.config import settings
from labournow.models.common import Caller, GeoPointIn, UserRole
from labournow.models.search import (
    LabourSearchHit,
    LabourSearchResponse,
    Pagination,
    WorkerResponse,
)
from labournow.services import contact_masking, firestore_service, proximity_search
from labournow.utils.geo import GeoPoint, GeoValidationError

router = APIRouter(prefix="/api/v1/labour", tags=["labour"])


def booked_worker_ids(db: FirestoreClient, caller: Caller) -> set[str]:
    if caller.role != UserRole.employer:
        return set()
    return firestore_service.active_booking_worker_ids(db, caller.user_id)


def disclose_contact(caller: Caller, worker: dict, booked: set[str]) -> dict:
    """Copy of ``worker`` with the mobile masked unless the caller may see it outright."""
    has_booking = worker["id"] in booked
    decision = contact_masking.can_disclose(caller.role, has_booking)
    disclose = decision.allowed and not decision.requires_time_boxed_token
    return contact_masking.mask_contact_fields(worker, disclose=disclose)


@router.get("/search", response_model=LabourSearchResponse)
def search_labour(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(default=settings.default_radius_km, gt=0, le=settings.max_radius_km),
    category: str | None = Query(default=None, max_length=50),
    available_only: bool = False,
    min_rating: float | None = Query(default=None, ge=0, le=5),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    caller: Caller = Depends(dependencies.get_caller),
):
    """Workers within ``radius_km`` of the given point, best rated first."""
    category = (category or "").strip() or None
    db = dependencies.get_firestore_client()
    workers = firestore_service.list_searchable_workers(db, category=category)
    candidates = [proximity_search.SearchableEntity.from_worker(w) for w in workers]

    try:
        center = GeoPoint(latitude, longitude)
        result = proximity_search.search(
            candidates,
            center,
            radius_km,
            proximity_search.SearchFilters(
                category=category,
                available_only=available_only,
                min_rating=min_rating,
            ),
            page=page,
            limit=limit,
        )
    except GeoValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    booked = booked_worker_ids(db, caller) if result.hits else set()
    results = [
        LabourSearchHit(
            **disclose_contact(caller, hit.entity.data, booked),
            distance_km=hit.distance_km,
        )
        for hit in result.hits
    ]
    return LabourSearchResponse(
        results=results,
        pagination=Pagination(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
        ),
        center=GeoPointIn(latitude=latitude, longitude=longitude),
        radius_km=radius_km,
    )


@router.get("/{worker_id}", response_model=WorkerResponse)
def get_worker(worker_id: str, caller: Caller = Depends(dependencies.get_caller)):
    db = dependencies.get_firestore_client()
    worker = firestore_service.get_worker(db, worker_id)
    if not worker or worker["is_blocked"]:
        raise HTTPException(status_code=404, detail="Worker not found")
    return WorkerResponse(**disclose_contact(caller, worker, booked_worker_ids(db, caller)))
