"""Tests for the session controller."""

import asyncio

import pytest

from work_tracker.errors import RemoteUnavailableError, StoreLockedError
from work_tracker.models.schemas import snapshot_from_json
from work_tracker.services.state_machine import SessionState


class TestInitialState:
    """Before the provider reports anything."""

    def test_starts_loading_and_locked(self, session, store):
        assert session.state == SessionState.LOADING
        assert session.is_loading
        assert store.locked
        with pytest.raises(StoreLockedError):
            store.add_company("Acme", "50")

    @pytest.mark.asyncio
    async def test_no_identity_goes_unauthenticated(self, session, store, identity_provider):
        await identity_provider.set_identity(None)

        assert session.state == SessionState.UNAUTHENTICATED
        assert session.identity is None
        assert store.locked


class TestSignIn:
    """Identity present."""

    @pytest.mark.asyncio
    async def test_sign_in_hydrates(self, session, store, documents, acme_document):
        documents.put_raw("alice", acme_document)

        identity = await session.sign_in()

        assert identity.uid == "alice"
        assert session.is_authenticated
        assert session.identity == identity
        assert not store.locked
        assert [c.name for c in store.companies] == ["Acme"]
        assert documents.reads == 1

    @pytest.mark.asyncio
    async def test_sign_in_without_subscription(self, store, sync, identity_provider):
        """Explicit sign-in loads even when not listening to the provider."""
        from work_tracker.services.session_controller import SessionController

        controller = SessionController(store, sync, identity_provider)
        await controller.sign_in()

        assert controller.is_authenticated

    @pytest.mark.asyncio
    async def test_mutations_rejected_while_loading(self, session, store, documents):
        documents.delay_seconds = 0.05

        task = asyncio.create_task(session.sign_in())
        await asyncio.sleep(0.01)

        assert session.is_loading
        with pytest.raises(StoreLockedError):
            store.add_expense("5")

        await task
        assert session.is_authenticated
        store.add_expense("5")

    @pytest.mark.asyncio
    async def test_load_failure_still_authenticates(self, session, store, documents):
        documents.fail_reads = True

        await session.sign_in()

        assert session.is_authenticated
        assert isinstance(session.load_error, RemoteUnavailableError)
        assert store.snapshot().is_empty
        assert not store.locked

    @pytest.mark.asyncio
    async def test_provider_rejects_sign_in(self, session, identity_provider):
        identity_provider.fail_sign_in = True

        with pytest.raises(RemoteUnavailableError):
            await session.sign_in()
        assert not session.is_authenticated

    @pytest.mark.asyncio
    async def test_repeated_identity_is_ignored(self, session, documents, identity_provider, alice):
        await session.sign_in()
        await identity_provider.set_identity(alice)

        assert documents.reads == 1


class TestSignOut:
    """Identity absent."""

    @pytest.mark.asyncio
    async def test_sign_out_flushes_and_clears(self, session, store, documents):
        await session.sign_in()
        store.add_company("Acme", "50")

        assert await session.sign_out() is None

        assert session.state == SessionState.UNAUTHENTICATED
        assert store.snapshot().is_empty
        assert store.locked
        stored = snapshot_from_json(documents.raw("alice"))
        assert [c.name for c in stored.companies] == ["Acme"]

    @pytest.mark.asyncio
    async def test_revocation_failure_still_signs_out_locally(
        self, session, store, identity_provider
    ):
        await session.sign_in()
        store.add_company("Acme", "50")
        identity_provider.fail_sign_out = True

        error = await session.sign_out()

        assert isinstance(error, RemoteUnavailableError)
        assert session.last_error is error
        assert session.state == SessionState.UNAUTHENTICATED
        assert store.snapshot().is_empty

    @pytest.mark.asyncio
    async def test_sign_out_during_load_discards_result(
        self, session, store, documents, identity_provider, acme_document
    ):
        documents.put_raw("alice", acme_document)
        documents.delay_seconds = 0.05

        task = asyncio.create_task(session.sign_in())
        await asyncio.sleep(0.01)
        await identity_provider.set_identity(None)
        await task

        assert session.state == SessionState.UNAUTHENTICATED
        assert store.snapshot().is_empty
        assert store.locked

    @pytest.mark.asyncio
    async def test_sign_out_when_signed_out(self, session, identity_provider):
        await identity_provider.set_identity(None)
        assert await session.sign_out() is None
        assert session.state == SessionState.UNAUTHENTICATED


class TestAccountSwitch:
    """A different identity replaces the current one."""

    @pytest.mark.asyncio
    async def test_switch_loads_other_users_data(
        self, session, store, documents, identity_provider, bob, acme_document
    ):
        await session.sign_in()
        store.add_expense("5")
        await session.sync.flush()
        documents.put_raw("bob", acme_document)

        await identity_provider.set_identity(bob)

        assert session.identity == bob
        assert session.is_authenticated
        assert [c.name for c in store.companies] == ["Acme"]
        assert len(store.expenses) == 1
        assert store.expenses[0].description == "Fuel"
        assert len(snapshot_from_json(documents.raw("alice")).expenses) == 1

    @pytest.mark.asyncio
    async def test_stop_unsubscribes(self, session, identity_provider, bob):
        await session.sign_in()
        session.stop()

        await identity_provider.set_identity(bob)

        assert session.identity.uid == "alice"

    @pytest.mark.asyncio
    async def test_switch_saves_queued_edits_first(self, documents, alice, bob):
        """Debounced edits of the previous account land before the switch."""
        from work_tracker.providers.memory import LocalIdentityProvider
        from work_tracker.services.session_controller import SessionController
        from work_tracker.store.entity_store import EntityStore
        from work_tracker.sync.engine import SyncEngine

        store = EntityStore()
        sync = SyncEngine(store, documents, debounce_seconds=0.2)
        provider = LocalIdentityProvider(alice)
        controller = SessionController(store, sync, provider, flush_timeout_seconds=1.0)
        controller.start()
        try:
            await controller.sign_in()
            store.add_expense("5")
            assert sync.has_pending_writes

            await provider.set_identity(bob)
        finally:
            controller.stop()
            sync.close()

        assert controller.identity == bob
        assert store.expenses == ()
        assert len(snapshot_from_json(documents.raw("alice")).expenses) == 1
        assert documents.raw("bob") is None

    @pytest.mark.asyncio
    async def test_store_locked_during_switch(self, session, store, documents, identity_provider, bob):
        await session.sign_in()
        documents.delay_seconds = 0.05

        task = asyncio.create_task(identity_provider.set_identity(bob))
        await asyncio.sleep(0.01)

        assert session.is_loading
        assert store.locked
        await task
        assert not store.locked
