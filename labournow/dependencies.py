import os

import firebase_admin
from fastapi import Header
from firebase_admin import credentials, firestore
from google.cloud.firestore import Client as FirestoreClient

from labournow.config import settings
from labournow.models.common import Caller, UserRole

_app: firebase_admin.App | None = None


def is_emulator() -> bool:
    """Check if running against the Firestore emulator."""
    return bool(os.environ.get("FIRESTORE_EMULATOR_HOST"))


def _init_firebase() -> None:
    global _app
    if _app is not None:
        return

    if is_emulator():
        # firebase-admin picks up FIRESTORE_EMULATOR_HOST on its own.
        _app = firebase_admin.initialize_app(
            None,
            {"projectId": settings.project_id or "labournow-dev"},
        )
    else:
        if settings.firebase_credentials_path:
            cred = credentials.Certificate(settings.firebase_credentials_path)
        else:
            cred = credentials.ApplicationDefault()
        _app = firebase_admin.initialize_app(
            cred,
            {"projectId": settings.project_id} if settings.project_id else None,
        )


def get_firestore_client() -> FirestoreClient:
    _init_firebase()
    return firestore.client()


def get_caller(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Caller:
    """Identity forwarded by the auth gateway; anonymous callers get OTHER."""
    return Caller(user_id=x_user_id, role=UserRole.parse(x_user_role))
