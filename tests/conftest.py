"""Pytest fixtures for work tracker tests."""

from __future__ import annotations

import itertools
from typing import AsyncGenerator

import pytest

from work_tracker.config import Settings
from work_tracker.providers.base import Identity
from work_tracker.providers.memory import InMemoryDocumentStore, LocalIdentityProvider
from work_tracker.services.session_controller import SessionController
from work_tracker.store.emitter import EventEmitter
from work_tracker.store.entity_store import EntityStore
from work_tracker.sync.engine import SyncEngine
from work_tracker.tracker import WorkTracker


@pytest.fixture
def settings() -> Settings:
    """Settings with no debounce so writes land on the next loop iteration."""
    return Settings(persist_debounce_seconds=0)


@pytest.fixture
def emitter() -> EventEmitter:
    return EventEmitter()


@pytest.fixture
def id_factory():
    """Deterministic ids: id1, id2, ..."""
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


@pytest.fixture
def store(emitter, id_factory) -> EntityStore:
    """An unlocked entity store."""
    return EntityStore(emitter, id_factory=id_factory)


@pytest.fixture
def documents() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def alice() -> Identity:
    return Identity(uid="alice", display_name="Alice Example", email="alice@example.com")


@pytest.fixture
def bob() -> Identity:
    return Identity(uid="bob", display_name="Bob Example")


@pytest.fixture
def sync(store, documents) -> SyncEngine:
    engine = SyncEngine(store, documents, debounce_seconds=0)
    yield engine
    engine.close()


@pytest.fixture
def identity_provider(alice) -> LocalIdentityProvider:
    return LocalIdentityProvider(alice)


@pytest.fixture
def session(store, sync, identity_provider) -> SessionController:
    controller = SessionController(store, sync, identity_provider, flush_timeout_seconds=1.0)
    controller.start()
    yield controller
    controller.stop()


@pytest.fixture
async def tracker(settings, documents, identity_provider) -> AsyncGenerator[WorkTracker, None]:
    """A started tracker on the in-memory backend."""
    async with WorkTracker(documents, identity_provider, settings=settings) as tracker:
        yield tracker


@pytest.fixture
def acme_document() -> dict:
    """A document as the web client writes it, with legacy timestamp ids."""
    return {
        "companies": [
            {"id": 1700000000001, "name": "Acme", "baseRate": 50, "deductionPercent": 10, "payRate": 45},
        ],
        "workRecords": [
            {
                "id": 1700000000002,
                "companyId": 1700000000001,
                "hours": 10,
                "rate": 45,
                "date": "2024-03-01",
                "description": "Site visit",
            },
        ],
        "expenses": [{"id": 1700000000003, "amount": 50, "description": "Fuel"}],
        "insurance": [],
        "payroll": [],
    }
