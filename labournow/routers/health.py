from fastapi import APIRouter, HTTPException

from labournow import dependencies

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health")
def health_check():
    try:
        db = dependencies.get_firestore_client()
        # Lightweight read to verify connectivity
        list(db.collection("workers").limit(1).stream())
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail={"status": "unhealthy", "errors": [f"Firestore: {e}"]},
        )

    return {"status": "healthy"}
