#!/usr/bin/env python3
"""
Seed Firestore with sample workers and one active booking for local development.

Idempotent: documents use fixed IDs, so re-running overwrites them.
Run from project root. Uses .env for credentials (or FIRESTORE_EMULATOR_HOST).
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from labournow.dependencies import get_firestore_client
from labournow.services.firestore_service import create_worker

WORKERS = [
    {
        "id": "seed-ramesh",
        "name": "Ramesh Kumar",
        "mobile": "9876543210",
        "category": "MASON",
        "experience_years": 8,
        "hourly_wage": 180,
        "rating": 4.6,
        "total_jobs": 54,
        "city": "Mumbai",
        "languages": ["Hindi", "Marathi"],
        "location": {"latitude": 19.0800, "longitude": 72.8800},
    },
    {
        "id": "seed-sunita",
        "name": "Sunita Devi",
        "mobile": "9123456780",
        "category": "CLEANER",
        "experience_years": 3,
        "hourly_wage": 120,
        "rating": 4.8,
        "total_jobs": 31,
        "city": "Mumbai",
        "languages": ["Hindi"],
        "location": {"latitude": 19.1197, "longitude": 72.8468},
    },
    {
        "id": "seed-arjun",
        "name": "Arjun Patil",
        "mobile": "8765432109",
        "category": "ELECTRICIAN",
        "experience_years": 5,
        "hourly_wage": 250,
        "rating": 4.2,
        "total_jobs": 19,
        "city": "Pune",
        "languages": ["Marathi", "English"],
        "location": {"latitude": 18.5204, "longitude": 73.8567},
    },
    {
        "id": "seed-imran",
        "name": "Imran Shaikh",
        "mobile": "7012345678",
        "category": "PLUMBER",
        "experience_years": 10,
        "hourly_wage": 220,
        "rating": 4.9,
        "total_jobs": 88,
        "city": "Delhi",
        "languages": ["Hindi", "Urdu"],
        "location": {"latitude": 28.7041, "longitude": 77.1025},
    },
]


def main():
    try:
        db = get_firestore_client()
    except Exception as e:
        print(f"Firestore connection failed: {e}")
        return 1

    for worker in WORKERS:
        data = {**worker, "is_available": True, "is_verified": True}
        worker_id, _ = create_worker(db, data)
        print(f"  worker {worker_id}: {worker['name']} ({worker['category']}, {worker['city']})")

    db.collection("bookings").document("seed-booking-1").set({
        "employer_id": "seed-employer",
        "worker_id": "seed-ramesh",
        "status": "CONFIRMED",
    })
    print("  booking seed-booking-1: seed-employer -> seed-ramesh (CONFIRMED)")

    print(f"\nSeeded {len(WORKERS)} workers")
    return 0


if __name__ == "__main__":
    sys.exit(main())
