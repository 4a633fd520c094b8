from datetime import datetime

from pydantic import BaseModel

from labournow.models.common import GeoPointIn


class WorkerResponse(BaseModel):
    """Public view of a worker. ``mobile`` is masked unless the caller may see it."""
    id: str
    name: str
    mobile: str
    category: str
    experience_years: int = 0
    hourly_wage: float | None = None
    rating: float = 0.0
    total_jobs: int = 0
    is_available: bool = False
    is_verified: bool = False
    city: str = ""
    bio: str = ""
    languages: list[str] = []
    location: GeoPointIn | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LabourSearchHit(WorkerResponse):
    distance_km: float


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class LabourSearchResponse(BaseModel):
    results: list[LabourSearchHit]
    pagination: Pagination
    center: GeoPointIn
    radius_km: float
