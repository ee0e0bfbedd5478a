"""Firebase Admin SDK initialization shared by the Firestore and Auth adapters."""

from __future__ import annotations

import os
import threading
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore

_init_lock = threading.Lock()


def _resolve_project_id(explicit_project_id: Optional[str] = None) -> Optional[str]:
    if explicit_project_id:
        return explicit_project_id
    return os.getenv("FIREBASE_PROJECT_ID") or os.getenv("GOOGLE_CLOUD_PROJECT") or None


def init_firebase_admin(*, project_id: Optional[str] = None) -> firebase_admin.App:
    """
    Initialize the Firebase Admin SDK exactly once and return the default app.

    Uses Application Default Credentials (GOOGLE_APPLICATION_CREDENTIALS
    locally, the service account on managed runtimes). When
    FIRESTORE_EMULATOR_HOST is set the SDK talks to the emulator instead.
    """
    if firebase_admin._apps:
        return firebase_admin.get_app()

    with _init_lock:
        if firebase_admin._apps:
            return firebase_admin.get_app()

        try:
            cred = credentials.ApplicationDefault()
        except Exception as e:
            raise RuntimeError(
                "Failed to load Application Default Credentials for Firebase Admin SDK. "
                "Locally: run `gcloud auth application-default login` or set "
                "GOOGLE_APPLICATION_CREDENTIALS."
            ) from e

        options = {}
        resolved_project_id = _resolve_project_id(project_id)
        if resolved_project_id:
            options["projectId"] = resolved_project_id

        return firebase_admin.initialize_app(cred, options)


def get_firestore_client(*, project_id: Optional[str] = None):
    init_firebase_admin(project_id=project_id)
    return firestore.client()
