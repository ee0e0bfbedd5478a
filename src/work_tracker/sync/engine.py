"""Synchronization between the entity store and the remote user document.

The remote side is only ever overwritten wholesale:
- hydrate() reads the document once per sign-in and replaces the store
- every store mutation marks the write queue dirty; a single flush task
  waits out the debounce window, captures the latest snapshot and writes it

Write queue rules:
- At most one persist is in flight per engine
- A burst of edits inside the debounce window produces one write
- A write always targets the identity captured when it started
- detach() drops queued work and discards in-flight hydrate results
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum

from pydantic import ValidationError as SchemaValidationError

from work_tracker.errors import RemoteUnavailableError
from work_tracker.models.entities import Snapshot
from work_tracker.models.schemas import snapshot_from_document, snapshot_to_document
from work_tracker.providers.base import DocumentStore, Identity
from work_tracker.store.entity_store import EntityStore
from work_tracker.store.events import SnapshotReplaced, StoreEvent

logger = logging.getLogger(__name__)


class SyncStatus(str, Enum):
    """Sync indicator values."""

    IDLE = "idle"  # No identity attached
    PENDING = "pending"  # Local changes waiting for the debounce window
    SYNCING = "syncing"  # Write in flight
    SYNCED = "synced"  # Remote matches the last captured snapshot
    FAILED = "failed"  # Last write failed; local state is ahead of remote


class SyncEngine:
    """Keeps the entity store and the per-user remote document in agreement.

    Usage:
        sync = SyncEngine(store, documents, debounce_seconds=0.5)

        await sync.hydrate(identity)     # store now mirrors the remote document
        store.add_expense("12.50")       # schedules a coalesced write
        await sync.flush()               # wait for the write to land

        sync.detach()                    # sign-out: drop queued work
    """

    def __init__(
        self,
        store: EntityStore,
        documents: DocumentStore,
        debounce_seconds: float = 0.5,
    ) -> None:
        if debounce_seconds < 0:
            raise ValueError("debounce_seconds cannot be negative")
        self.store = store
        self.documents = documents
        self.debounce_seconds = debounce_seconds

        self.status = SyncStatus.IDLE
        self.last_error: Exception | None = None
        self.last_synced_at: datetime | None = None
        self.write_count = 0

        self._identity: Identity | None = None
        self._generation = 0
        self._dirty = False
        self._flush_task: asyncio.Task[None] | None = None
        self._writing: asyncio.Task[None] | None = None

        # Keep the bound method so off() can find it again
        self._handler = self._on_store_event
        self.store.emitter.on_all(self._handler)

    # -------------------------------------------------------------------------
    # Identity binding
    # -------------------------------------------------------------------------

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def has_pending_writes(self) -> bool:
        return self._dirty or (self._flush_task is not None and not self._flush_task.done())

    def attach(self, identity: Identity) -> None:
        """Bind the engine to an identity. Re-attaching the same uid is a no-op."""
        if self._identity is not None and self._identity.uid == identity.uid:
            return
        if self._identity is not None:
            self.detach()
        self._identity = identity
        self._generation += 1
        logger.debug("Sync attached to uid=%s (generation %d)", identity.uid, self._generation)

    def detach(self) -> None:
        """Unbind the current identity.

        Queued writes are dropped. A write already in flight finishes against
        the identity it captured; its outcome no longer affects sync status.
        """
        self._generation += 1
        self._identity = None
        self._dirty = False

        task, self._flush_task = self._flush_task, None
        if task is not None and not task.done() and task is not self._writing:
            task.cancel()

        self.status = SyncStatus.IDLE
        self.last_error = None

    def close(self) -> None:
        """Detach and stop listening to the store."""
        self.detach()
        self.store.emitter.off(self._handler)

    # -------------------------------------------------------------------------
    # Hydrate / persist
    # -------------------------------------------------------------------------

    async def hydrate(self, identity: Identity) -> bool:
        """Load the identity's document into the store.

        Returns True if the remote state was applied (an absent document
        applies as empty), False if the identity was detached while the read was in
        flight and the result was discarded.

        Raises:
            RemoteUnavailableError: The read failed or the document is malformed.
        """
        self.attach(identity)
        generation = self._generation

        try:
            document = await self.documents.get(identity.uid)
        except RemoteUnavailableError as e:
            logger.warning("Failed to load document for uid=%s: %s", identity.uid, e)
            raise
        except Exception as e:
            logger.exception("Failed to load document for uid=%s", identity.uid)
            raise RemoteUnavailableError("hydrate", f"{type(e).__name__}: {e}") from e

        if generation != self._generation:
            logger.info("Discarding stale document for uid=%s", identity.uid)
            return False

        try:
            snapshot = snapshot_from_document(document)
        except SchemaValidationError as e:
            raise RemoteUnavailableError("hydrate", f"malformed document: {e}") from e

        if document is None:
            logger.info("No stored document for uid=%s; starting empty", identity.uid)

        self.store.replace_all(snapshot, reason="hydrate")
        self.status = SyncStatus.SYNCED
        logger.info(
            "Loaded document for uid=%s (%d companies, %d work records)",
            identity.uid,
            len(snapshot.companies),
            len(snapshot.work_records),
        )
        return True

    async def persist(self, identity: Identity | None, snapshot: Snapshot) -> bool:
        """Overwrite the identity's document with the snapshot.

        No-op when identity is None. Failures are logged and recorded in
        status/last_error; local state is never rolled back.
        """
        if identity is None:
            return False
        return await self._write(identity, snapshot, self._generation)

    async def flush(self, timeout: float | None = None) -> bool:
        """Wait for queued and in-flight writes.

        Returns False if the timeout expired first. Pending work is not
        cancelled by the timeout.
        """
        tasks = {t for t in (self._flush_task, self._writing) if t is not None and not t.done()}
        if not tasks:
            return True
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        return not pending

    # -------------------------------------------------------------------------
    # Write queue
    # -------------------------------------------------------------------------

    def _on_store_event(self, event: StoreEvent) -> None:
        # Hydration and clearing mirror the remote state; only imports are new data
        if isinstance(event, SnapshotReplaced) and event.reason != "import":
            return
        self._schedule()

    def _schedule(self) -> None:
        if self._identity is None:
            return
        self._dirty = True
        if self.status != SyncStatus.SYNCING:
            self.status = SyncStatus.PENDING
        if self._flush_task is None or self._flush_task.done():
            loop = asyncio.get_running_loop()
            self._flush_task = loop.create_task(self._flush_loop(self._generation))

    async def _flush_loop(self, generation: int) -> None:
        while self._dirty and generation == self._generation:
            await asyncio.sleep(self.debounce_seconds)
            if generation != self._generation:
                return

            identity = self._identity
            if identity is None:
                return
            self._dirty = False
            snapshot = self.store.snapshot()

            self._writing = asyncio.current_task()
            try:
                await self._write(identity, snapshot, generation)
            finally:
                if self._writing is asyncio.current_task():
                    self._writing = None

    async def _write(self, identity: Identity, snapshot: Snapshot, generation: int) -> bool:
        if generation == self._generation:
            self.status = SyncStatus.SYNCING

        try:
            document = snapshot_to_document(snapshot)
            await self.documents.set(identity.uid, document)
        except Exception as e:
            logger.exception("Failed to save document for uid=%s", identity.uid)
            if generation == self._generation:
                self.status = SyncStatus.FAILED
                self.last_error = e
            return False

        self.write_count += 1
        if generation == self._generation:
            self.status = SyncStatus.PENDING if self._dirty else SyncStatus.SYNCED
            self.last_error = None
            self.last_synced_at = datetime.now(timezone.utc)
        logger.debug("Saved document for uid=%s", identity.uid)
        return True
