"""Tests for the /api/v1/contact endpoints."""
from datetime import datetime, timezone

from conftest import ADMIN, EMPLOYER, LABOUR, seed_booking, seed_worker


def test_disclosure_for_admin(client, fake_db):
    worker_id = seed_worker(fake_db)
    resp = client.get(f"/api/v1/contact/{worker_id}/disclosure", headers=ADMIN)
    assert resp.status_code == 200
    data = resp.json()
    assert data["mobile"] == "+91-98765-43210"
    assert data["masked"] is False
    assert data["decision"]["allowed"] is True
    assert data["decision"]["requires_time_boxed_token"] is False


def test_disclosure_for_employer_without_booking(client, fake_db):
    worker_id = seed_worker(fake_db)
    data = client.get(f"/api/v1/contact/{worker_id}/disclosure", headers=EMPLOYER).json()
    assert data["mobile"] == "+91-98XXX-XXX10"
    assert data["masked"] is True
    assert data["decision"] == {
        "allowed": True,
        "requires_time_boxed_token": True,
        "reason": "Requires an active booking or a temporary unmask token",
    }


def test_disclosure_for_employer_with_booking(client, fake_db):
    worker_id = seed_worker(fake_db)
    seed_booking(fake_db, EMPLOYER["X-User-Id"], worker_id, status="IN_PROGRESS")
    data = client.get(f"/api/v1/contact/{worker_id}/disclosure", headers=EMPLOYER).json()
    assert data["mobile"] == "+91-98765-43210"
    assert data["decision"]["requires_time_boxed_token"] is False


def test_completed_booking_does_not_count(client, fake_db):
    worker_id = seed_worker(fake_db)
    seed_booking(fake_db, EMPLOYER["X-User-Id"], worker_id, status="COMPLETED")
    data = client.get(f"/api/v1/contact/{worker_id}/disclosure", headers=EMPLOYER).json()
    assert data["masked"] is True


def test_disclosure_denied_for_other_roles(client, fake_db):
    worker_id = seed_worker(fake_db)
    data = client.get(f"/api/v1/contact/{worker_id}/disclosure", headers=LABOUR).json()
    assert data["decision"]["allowed"] is False
    assert data["masked"] is True


def test_disclosure_unknown_worker(client):
    resp = client.get("/api/v1/contact/missing/disclosure", headers=ADMIN)
    assert resp.status_code == 404


def test_unmask_token_round_trip(client, fake_db):
    worker_id = seed_worker(fake_db)

    resp = client.post(
        f"/api/v1/contact/{worker_id}/unmask-token", json={"ttl_minutes": 15}, headers=EMPLOYER,
    )
    assert resp.status_code == 201
    issued = resp.json()
    assert issued["masked_number"] == "+91-98XXX-XXX10"
    assert datetime.fromisoformat(issued["expires_at"].replace("Z", "+00:00")) > datetime.now(timezone.utc)

    resp = client.post("/api/v1/contact/unmask", json={"token": issued["token"]})
    assert resp.status_code == 200
    data = resp.json()
    assert data["valid"] is True
    assert data["mobile"] == "+91-98765-43210"
    assert data["expired"] is False


def test_unmask_token_without_body_uses_default_ttl(client, fake_db):
    worker_id = seed_worker(fake_db)
    resp = client.post(f"/api/v1/contact/{worker_id}/unmask-token", headers=ADMIN)
    assert resp.status_code == 201


def test_unmask_token_denied_for_other_roles(client, fake_db):
    worker_id = seed_worker(fake_db)
    resp = client.post(f"/api/v1/contact/{worker_id}/unmask-token", headers=LABOUR)
    assert resp.status_code == 403


def test_unmask_token_rejects_too_long_ttl(client, fake_db):
    worker_id = seed_worker(fake_db)
    resp = client.post(
        f"/api/v1/contact/{worker_id}/unmask-token", json={"ttl_minutes": 10_000}, headers=ADMIN,
    )
    assert resp.status_code == 400


def test_unmask_token_for_worker_without_valid_mobile(client, fake_db):
    worker_id = seed_worker(fake_db, mobile="022-12345678")
    resp = client.post(f"/api/v1/contact/{worker_id}/unmask-token", headers=ADMIN)
    assert resp.status_code == 400


def test_unmask_invalid_token(client):
    resp = client.post("/api/v1/contact/unmask", json={"token": "not-a-token"})
    assert resp.status_code == 200
    assert resp.json() == {"valid": False, "mobile": None, "expired": False, "expires_at": None}


def test_call_analytics_admin_only(client, fake_db):
    for i, (hour, masked) in enumerate([(9, True), (9, False), (18, True)]):
        fake_db.collection("calls").document(f"c{i}").set({
            "caller_id": "employer-1",
            "receiver_id": "worker-1",
            "timestamp": datetime(2024, 6, 1, hour, tzinfo=timezone.utc),
            "duration_seconds": 60,
            "was_masked": masked,
        })

    assert client.get("/api/v1/contact/calls/analytics", headers=EMPLOYER).status_code == 403

    resp = client.get("/api/v1/contact/calls/analytics", headers=ADMIN)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_calls"] == 3
    assert data["masked_calls"] == 2
    assert data["calls_by_hour"] == {"9": 2, "18": 1}
    assert data["peak_hour"] == 9
