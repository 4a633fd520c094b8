import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from labournow import dependencies
from labournow.models.common import Caller, UserRole
from labournow.models.contact import (
    ContactResponse,
    TemporaryMask,
    UnmaskRequest,
    UnmaskTokenCheck,
    UnmaskTokenCreate,
)
from labournow.services import call_analytics, contact_masking, firestore_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/contact", tags=["contact"])


def _load_worker(db, worker_id: str) -> dict:
    worker = firestore_service.get_worker(db, worker_id)
    if not worker or worker["is_blocked"]:
        raise HTTPException(status_code=404, detail="Worker not found")
    return worker


@router.get("/calls/analytics")
def get_call_analytics(
    limit: int = Query(default=1000, ge=1, le=10000),
    caller: Caller = Depends(dependencies.get_caller),
):
    if caller.role != UserRole.admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    db = dependencies.get_firestore_client()
    calls = [call_analytics.CallRecord(**c) for c in firestore_service.list_calls(db, limit=limit)]
    return call_analytics.summarize_calls(calls)


@router.get("/{worker_id}/disclosure", response_model=ContactResponse)
def get_disclosure(worker_id: str, caller: Caller = Depends(dependencies.get_caller)):
    """What the caller is allowed to see of a worker's number, and why."""
    db = dependencies.get_firestore_client()
    worker = _load_worker(db, worker_id)

    has_booking = False
    if caller.role == UserRole.employer:
        has_booking = firestore_service.has_active_booking(db, caller.user_id, worker_id)
    decision = contact_masking.can_disclose(caller.role, has_booking)

    if decision.allowed and not decision.requires_time_boxed_token:
        mobile = contact_masking.format_indian_mobile(worker["mobile"])
    else:
        mobile = contact_masking.mask_mobile_number(worker["mobile"])

    return ContactResponse(
        worker_id=worker_id,
        mobile=mobile,
        masked=contact_masking.is_masked(mobile),
        decision=decision,
    )


@router.post("/{worker_id}/unmask-token", response_model=TemporaryMask, status_code=201)
def create_unmask_token(
    worker_id: str,
    body: UnmaskTokenCreate | None = None,
    caller: Caller = Depends(dependencies.get_caller),
):
    db = dependencies.get_firestore_client()
    worker = _load_worker(db, worker_id)

    has_booking = False
    if caller.role == UserRole.employer:
        has_booking = firestore_service.has_active_booking(db, caller.user_id, worker_id)
    decision = contact_masking.can_disclose(caller.role, has_booking)
    if not decision.allowed:
        raise HTTPException(status_code=403, detail=decision.reason)

    try:
        temp = contact_masking.issue_temporary_unmask_token(
            worker["mobile"], ttl_minutes=body.ttl_minutes if body else None,
        )
    except contact_masking.ContactValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Issued unmask token for worker=%s to user=%s", worker_id, caller.user_id)
    return temp


@router.post("/unmask", response_model=UnmaskTokenCheck)
def redeem_unmask_token(body: UnmaskRequest):
    return contact_masking.validate_unmask_token(body.token)
