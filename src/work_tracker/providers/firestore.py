"""Firestore document store.

Writes:
  {collection}/{uid}   (default collection: users)

Each write replaces the whole document (no merge), matching the
snapshot-overwrite contract of the sync engine.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from work_tracker.errors import RemoteUnavailableError
from work_tracker.providers.firebase_app import get_firestore_client

logger = logging.getLogger(__name__)


class FirestoreDocumentStore:
    """Document store backed by one Firestore document per user.

    The Firestore client is synchronous; calls run in a worker thread so the
    event loop stays responsive.
    """

    backend_name = "firestore"

    def __init__(
        self,
        client: Any = None,
        collection: str = "users",
        project_id: Optional[str] = None,
    ):
        if not collection or "/" in collection:
            raise ValueError("collection is required and must not contain '/'")
        self.collection = collection
        self.project_id = project_id
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_firestore_client(project_id=self.project_id)
        return self._client

    def _ref(self, key: str) -> Any:
        if not key or "/" in key:
            raise ValueError("document key is required and must not contain '/'")
        return self.client.collection(self.collection).document(key)

    async def open(self) -> None:
        try:
            self.client
        except RuntimeError as e:
            raise RemoteUnavailableError("open", str(e)) from e

    async def close(self) -> None:
        client, self._client = self._client, None
        if client is not None and hasattr(client, "close"):
            await asyncio.to_thread(client.close)

    async def get(self, key: str) -> dict[str, Any] | None:
        ref = self._ref(key)
        try:
            snapshot = await asyncio.to_thread(ref.get)
        except Exception as e:
            raise RemoteUnavailableError("get", f"{type(e).__name__}: {e}") from e

        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    async def set(self, key: str, document: dict[str, Any]) -> None:
        ref = self._ref(key)
        try:
            await asyncio.to_thread(ref.set, document)
        except Exception as e:
            raise RemoteUnavailableError("set", f"{type(e).__name__}: {e}") from e
        logger.debug("Stored document %s/%s", self.collection, key)
