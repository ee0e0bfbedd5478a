"""Work tracker context - the single object a UI shell talks to.

Usage:
    tracker = WorkTracker.from_settings(get_settings())
    async with tracker:
        await tracker.session.sign_in(id_token)

        acme = tracker.store.add_company("Acme", "50", "10")
        tracker.store.add_work_record(acme.id, hours="10")
        tracker.store.add_expense("50")

        totals = tracker.totals()          # net_total == Decimal("400.00")

        await tracker.session.sign_out()

The context owns one store, emitter, sync engine and session controller. It
is built at startup and torn down on close; nothing is process-global.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError as SchemaValidationError

from work_tracker.calculators.aggregation import (
    CompanyEarnings,
    GrandTotals,
    company_breakdown,
    grand_totals,
)
from work_tracker.config import Settings, get_settings
from work_tracker.errors import StoreLockedError, ValidationError
from work_tracker.models.schemas import snapshot_from_json, snapshot_to_json
from work_tracker.providers.base import DocumentStore, IdentityProvider
from work_tracker.providers.memory import InMemoryDocumentStore, LocalIdentityProvider
from work_tracker.services.session_controller import SessionController
from work_tracker.store.emitter import EventEmitter
from work_tracker.store.entity_store import EntityStore
from work_tracker.sync.engine import SyncEngine

logger = logging.getLogger(__name__)


def build_document_store(settings: Settings) -> DocumentStore:
    """Create the document store selected by settings.document_backend."""
    if settings.document_backend == "sql":
        from work_tracker.providers.sql import SqlDocumentStore

        return SqlDocumentStore.from_url(settings.database_url, collection=settings.users_collection)
    if settings.document_backend == "firestore":
        from work_tracker.providers.firestore import FirestoreDocumentStore

        return FirestoreDocumentStore(
            collection=settings.users_collection,
            project_id=settings.firebase_project_id,
        )
    return InMemoryDocumentStore()


def build_identity_provider(settings: Settings) -> IdentityProvider:
    """Firebase Auth alongside Firestore, a fixed local user otherwise."""
    if settings.document_backend == "firestore":
        from work_tracker.providers.firebase_auth import FirebaseIdentityProvider

        return FirebaseIdentityProvider(project_id=settings.firebase_project_id)
    return LocalIdentityProvider()


class WorkTracker:
    """Wires the entity store, sync engine and session controller together."""

    def __init__(
        self,
        documents: DocumentStore,
        identity_provider: IdentityProvider,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.documents = documents
        self.identity_provider = identity_provider

        self.emitter = EventEmitter()
        self.store = EntityStore(self.emitter)
        self.sync = SyncEngine(
            self.store,
            documents,
            debounce_seconds=self.settings.persist_debounce_seconds,
        )
        self.session = SessionController(self.store, self.sync, identity_provider)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        identity_provider: IdentityProvider | None = None,
    ) -> WorkTracker:
        settings = settings or get_settings()
        return cls(
            documents=build_document_store(settings),
            identity_provider=identity_provider or build_identity_provider(settings),
            settings=settings,
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Open the document store and start listening for identity changes."""
        await self.documents.open()
        self.session.start()
        logger.info(
            "Work tracker started (documents=%s, identity=%s)",
            self.documents.backend_name,
            self.identity_provider.provider_name,
        )

    async def close(self) -> None:
        """Flush pending writes and release resources."""
        self.session.stop()
        if not await self.sync.flush(timeout=self.session.flush_timeout_seconds):
            logger.warning("Closing with unsaved changes")
        self.sync.close()
        await self.documents.close()

    async def __aenter__(self) -> WorkTracker:
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def totals(self) -> GrandTotals:
        """Grand totals over the current collections."""
        return grand_totals(
            self.store.companies,
            self.store.work_records,
            self.store.expenses,
            self.store.insurance,
            self.store.payroll,
        )

    def breakdown(self) -> list[CompanyEarnings]:
        """Per-company hours and earnings."""
        return company_breakdown(self.store.companies, self.store.work_records)

    # -------------------------------------------------------------------------
    # Export / import
    # -------------------------------------------------------------------------

    def export_json(self) -> str:
        """The current collections in the persisted document layout."""
        return snapshot_to_json(self.store.snapshot())

    def import_json(self, text: str) -> None:
        """Replace every collection with an exported document and save it.

        Raises:
            StoreLockedError: No authenticated session.
            ValidationError: The text is not a valid document.
        """
        if self.store.locked:
            raise StoreLockedError()
        try:
            snapshot = snapshot_from_json(text)
        except (json.JSONDecodeError, SchemaValidationError) as e:
            raise ValidationError("snapshot", str(e)) from e
        self.store.replace_all(snapshot, reason="import")
