"""SQL document store (SQLAlchemy async).

Defaults to a local SQLite file through aiosqlite; any SQLAlchemy async URL
works.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from work_tracker.database import create_schema, create_session_factory, get_engine, get_session
from work_tracker.errors import RemoteUnavailableError
from work_tracker.models.user_document import UserDocument

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


class SqlDocumentStore:
    """Stores each user's document as canonical JSON in the user_document table.

    Usage:
        store = SqlDocumentStore.from_url("sqlite+aiosqlite:///work_tracker.db")
        await store.open()
        await store.set("uid-1", {"companies": []})
        document = await store.get("uid-1")
        await store.close()
    """

    backend_name = "sql"

    def __init__(self, engine: AsyncEngine, collection: str = "users"):
        self.engine = engine
        self.collection = collection
        self._session_factory = create_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str, collection: str = "users") -> SqlDocumentStore:
        return cls(get_engine(database_url), collection=collection)

    async def open(self) -> None:
        try:
            await create_schema(self.engine)
        except SQLAlchemyError as e:
            raise RemoteUnavailableError("open", str(e)) from e

    async def close(self) -> None:
        await self.engine.dispose()

    async def get(self, key: str) -> dict[str, Any] | None:
        try:
            async with get_session(self._session_factory) as session:
                row = await session.get(UserDocument, (self.collection, key))
                payload = None if row is None else row.payload
        except SQLAlchemyError as e:
            raise RemoteUnavailableError("get", str(e)) from e

        if payload is None:
            return None
        return json.loads(payload)

    async def set(self, key: str, document: dict[str, Any]) -> None:
        payload = json.dumps(document, sort_keys=True, separators=(",", ":"))
        try:
            async with get_session(self._session_factory) as session:
                row = await session.get(UserDocument, (self.collection, key))
                if row is None:
                    session.add(
                        UserDocument(collection=self.collection, key=key, payload=payload)
                    )
                else:
                    row.payload = payload
                    row.updated_at = datetime.now(timezone.utc)
        except SQLAlchemyError as e:
            raise RemoteUnavailableError("set", str(e)) from e

        logger.debug("Stored document %s/%s (%d bytes)", self.collection, key, len(payload))
