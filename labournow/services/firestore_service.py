import uuid
from datetime import datetime, timezone

from google.cloud.firestore import Client as FirestoreClient
from google.cloud.firestore_v1 import FieldFilter
from google.cloud.firestore_v1.base_query import BaseQuery

from labournow.config import settings
from labournow.models.common import GeoPointIn


def _geo_to_firestore(geo: GeoPointIn | None):
    if geo is None:
        return None
    from google.cloud.firestore_v1._helpers import GeoPoint
    return GeoPoint(geo.latitude, geo.longitude)


def _geo_from_firestore(geo) -> GeoPointIn | None:
    if geo is None:
        return None
    return GeoPointIn(latitude=geo.latitude, longitude=geo.longitude)


def _now() -> datetime:
    return datetime.now(timezone.utc)


# --- Workers ---

def create_worker(db: FirestoreClient, data: dict) -> tuple[str, dict]:
    """Used by the seed script; profile management owns workers in production."""
    now = _now()
    worker_id = data.get("id") or uuid.uuid4().hex
    location = data.get("location")
    doc_data = {
        "name": data["name"],
        "mobile": data.get("mobile", ""),
        "category": (data.get("category") or "HELPER").upper(),
        "experience_years": data.get("experience_years", 0),
        "hourly_wage": data.get("hourly_wage"),
        "rating": data.get("rating", 0.0),
        "total_jobs": data.get("total_jobs", 0),
        "is_available": data.get("is_available", True),
        "is_verified": data.get("is_verified", False),
        "is_blocked": data.get("is_blocked", False),
        "city": data.get("city", ""),
        "bio": data.get("bio", ""),
        "languages": data.get("languages", []),
        "location": _geo_to_firestore(
            GeoPointIn(**location) if isinstance(location, dict) else location
        ),
        "created_at": now,
        "updated_at": now,
    }
    db.collection("workers").document(worker_id).set(doc_data)
    return worker_id, _worker_doc_to_dict(db.collection("workers").document(worker_id).get())


def get_worker(db: FirestoreClient, worker_id: str) -> dict | None:
    doc = db.collection("workers").document(worker_id).get()
    if not doc.exists:
        return None
    return _worker_doc_to_dict(doc)


def list_searchable_workers(db: FirestoreClient, category: str | None = None) -> list[dict]:
    """Verified, unblocked workers, optionally narrowed to one category.

    Category is pushed down to Firestore; the account-status checks run here
    because older documents may lack the flags entirely.
    """
    query: BaseQuery = db.collection("workers")
    category = (category or "").strip().upper()
    if category:
        query = query.where(filter=FieldFilter("category", "==", category))

    workers = []
    for doc in query.stream():
        worker = _worker_doc_to_dict(doc)
        if worker["is_verified"] and not worker["is_blocked"]:
            workers.append(worker)
    return workers


# --- Bookings ---

def has_active_booking(db: FirestoreClient, employer_id: str | None, worker_id: str) -> bool:
    if not employer_id:
        return False
    docs = (
        db.collection("bookings")
        .where(filter=FieldFilter("employer_id", "==", employer_id))
        .where(filter=FieldFilter("worker_id", "==", worker_id))
        .stream()
    )
    active = {s.upper() for s in settings.active_booking_statuses}
    return any((d.to_dict().get("status") or "").upper() in active for d in docs)


def active_booking_worker_ids(db: FirestoreClient, employer_id: str | None) -> set[str]:
    """IDs of every worker the employer currently has an active booking with."""
    if not employer_id:
        return set()
    docs = db.collection("bookings").where(filter=FieldFilter("employer_id", "==", employer_id)).stream()
    active = {s.upper() for s in settings.active_booking_statuses}
    worker_ids = set()
    for d in docs:
        data = d.to_dict()
        if (data.get("status") or "").upper() in active and data.get("worker_id"):
            worker_ids.add(data["worker_id"])
    return worker_ids


# --- Calls ---

def list_calls(db: FirestoreClient, limit: int = 1000) -> list[dict]:
    docs = (
        db.collection("calls")
        .order_by("timestamp", direction="DESCENDING")
        .limit(limit)
        .stream()
    )
    results = []
    for d in docs:
        data = d.to_dict()
        results.append({
            "id": d.id,
            "caller_id": data.get("caller_id", ""),
            "receiver_id": data.get("receiver_id", ""),
            "timestamp": data["timestamp"],
            "duration_seconds": data.get("duration_seconds", 0),
            "was_masked": data.get("was_masked", True),
            "booking_id": data.get("booking_id"),
        })
    return results


# --- Helpers ---

def _worker_doc_to_dict(doc) -> dict:
    data = doc.to_dict()
    return {
        "id": doc.id,
        "name": data.get("name", ""),
        "mobile": data.get("mobile", ""),
        "category": (data.get("category") or "").upper(),
        "experience_years": data.get("experience_years", 0),
        "hourly_wage": data.get("hourly_wage"),
        "rating": data.get("rating") or 0.0,
        "total_jobs": data.get("total_jobs") or 0,
        "is_available": data.get("is_available", False),
        "is_verified": data.get("is_verified", False),
        "is_blocked": data.get("is_blocked", False),
        "city": data.get("city", ""),
        "bio": data.get("bio", ""),
        "languages": data.get("languages", []),
        "location": _geo_from_firestore(data.get("location")),
        "created_at": data.get("created_at"),
        "updated_at": data.get("updated_at"),
    }
