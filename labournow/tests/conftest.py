"""Test fixtures with a mocked Firestore."""
import uuid
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient


# --- Fake Firestore in-memory store ---

class FakeGeoPoint:
    def __init__(self, latitude, longitude):
        self.latitude = latitude
        self.longitude = longitude


class FakeDocRef:
    def __init__(self, store, collection_path, doc_id):
        self._store = store
        self._collection_path = collection_path
        self.id = doc_id

    def _key(self):
        return (self._collection_path, self.id)

    def get(self):
        data = self._store.get(self._key())
        return FakeDocSnapshot(self.id, data, self._collection_path, self._store)

    def set(self, data):
        self._store[self._key()] = dict(data)

    def delete(self):
        self._store.pop(self._key(), None)


class FakeDocSnapshot:
    def __init__(self, doc_id, data, collection_path, store):
        self.id = doc_id
        self._data = data
        self._collection_path = collection_path
        self._store = store
        self.exists = data is not None
        self.reference = FakeDocRef(store, collection_path, doc_id)

    def to_dict(self):
        return dict(self._data) if self._data else None


class FakeQuery:
    def __init__(self, store, collection_path, docs=None):
        self._store = store
        self._collection_path = collection_path
        self._docs = docs

    def _get_docs(self):
        if self._docs is not None:
            return self._docs
        results = []
        for (coll, doc_id), data in self._store.items():
            if coll == self._collection_path:
                results.append(FakeDocSnapshot(doc_id, data, self._collection_path, self._store))
        return results

    def order_by(self, field, direction=None):
        docs = self._get_docs()
        reverse = direction == "DESCENDING" if direction else False
        docs.sort(key=lambda d: d.to_dict().get(field, datetime.min.replace(tzinfo=timezone.utc)), reverse=reverse)
        return FakeQuery(self._store, self._collection_path, docs)

    def where(self, filter=None, **kwargs):
        docs = self._get_docs()
        if filter:
            field = filter.field_path
            value = filter.value
        else:
            field = kwargs.get("field")
            value = kwargs.get("value")
        filtered = [d for d in docs if d.to_dict().get(field) == value]
        return FakeQuery(self._store, self._collection_path, filtered)

    def limit(self, n):
        docs = self._get_docs()[:n]
        return FakeQuery(self._store, self._collection_path, docs)

    def stream(self):
        return iter(self._get_docs())


class FakeCollectionRef(FakeQuery):
    def __init__(self, store, collection_path):
        super().__init__(store, collection_path)

    def document(self, doc_id):
        return FakeDocRef(self._store, self._collection_path, doc_id)


class FakeFirestoreClient:
    def __init__(self):
        self._store = {}

    def collection(self, name):
        return FakeCollectionRef(self._store, name)


# --- Seeding helpers ---

def seed_worker(fake_db, worker_id=None, latitude=19.0760, longitude=72.8777, **overrides):
    """Write a worker document straight into the fake store and return its id."""
    worker_id = worker_id or uuid.uuid4().hex
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    data = {
        "name": "Ramesh Kumar",
        "mobile": "9876543210",
        "category": "MASON",
        "experience_years": 5,
        "hourly_wage": 150.0,
        "rating": 4.0,
        "total_jobs": 10,
        "is_available": True,
        "is_verified": True,
        "is_blocked": False,
        "city": "Mumbai",
        "bio": "",
        "languages": ["Hindi", "Marathi"],
        "location": FakeGeoPoint(latitude, longitude) if latitude is not None else None,
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    fake_db.collection("workers").document(worker_id).set(data)
    return worker_id


def seed_booking(fake_db, employer_id, worker_id, status="CONFIRMED"):
    booking_id = uuid.uuid4().hex
    fake_db.collection("bookings").document(booking_id).set({
        "employer_id": employer_id,
        "worker_id": worker_id,
        "status": status,
    })
    return booking_id


# --- Fixtures ---

@pytest.fixture()
def fake_db():
    return FakeFirestoreClient()


@pytest.fixture()
def client(fake_db):
    with patch("labournow.dependencies._init_firebase"):
        with patch("labournow.dependencies.get_firestore_client", return_value=fake_db):
            with patch(
                "google.cloud.firestore_v1._helpers.GeoPoint",
                FakeGeoPoint,
            ):
                from labournow.main import app
                yield TestClient(app)


ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "ADMIN"}
EMPLOYER = {"X-User-Id": "employer-1", "X-User-Role": "EMPLOYER"}
LABOUR = {"X-User-Id": "labour-1", "X-User-Role": "LABOUR"}
