"""Session lifecycle: hydrate on sign-in, clear on sign-out."""

from __future__ import annotations

import logging
from typing import Callable

from work_tracker.errors import RemoteUnavailableError
from work_tracker.providers.base import Identity, IdentityProvider
from work_tracker.services.state_machine import SessionState, SessionStateMachine
from work_tracker.store.entity_store import EntityStore
from work_tracker.sync.engine import SyncEngine

logger = logging.getLogger(__name__)


class SessionController:
    """Tracks whether an identity is present and drives the sync lifecycle.

    The entity store stays locked unless the session is authenticated, so no
    edit can land while the remote document is still loading.

    Every identity change bumps an epoch counter; an await that resumes under
    a different epoch was overtaken by a newer change and must not touch
    state.
    """

    def __init__(
        self,
        store: EntityStore,
        sync: SyncEngine,
        identity_provider: IdentityProvider,
        flush_timeout_seconds: float = 5.0,
    ) -> None:
        self.store = store
        self.sync = sync
        self.identity_provider = identity_provider
        self.flush_timeout_seconds = flush_timeout_seconds

        self.state = SessionStateMachine.INITIAL_STATE
        self.load_error: RemoteUnavailableError | None = None
        self.last_error: Exception | None = None

        self._identity: Identity | None = None
        self._epoch = 0
        self._unsubscribe: Callable[[], None] | None = None
        self._apply_lock()

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def is_loading(self) -> bool:
        return self.state == SessionState.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    # -------------------------------------------------------------------------
    # Subscription
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Start listening to the identity provider."""
        if self._unsubscribe is None:
            self._unsubscribe = self.identity_provider.on_identity_change(self.handle_identity)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # -------------------------------------------------------------------------
    # Identity events
    # -------------------------------------------------------------------------

    async def handle_identity(self, identity: Identity | None) -> None:
        """React to an identity-present or identity-absent event."""
        if identity is None:
            self._on_identity_absent()
            return

        if (
            self._identity is not None
            and self._identity.uid == identity.uid
            and self.state != SessionState.UNAUTHENTICATED
        ):
            # Already loading or loaded for this user
            return

        self._epoch += 1
        epoch = self._epoch

        previous, self._identity = self._identity, identity
        self.load_error = None
        if self.state != SessionState.LOADING:
            self._transition(SessionState.LOADING)

        if previous is not None:
            logger.info("Switching session from uid=%s to uid=%s", previous.uid, identity.uid)
            # Sync is still attached to the previous uid; let its queued edits land
            if not await self.sync.flush(timeout=self.flush_timeout_seconds):
                logger.warning("Switching away from uid=%s with unsaved changes", previous.uid)
            if epoch != self._epoch:
                return
            self.sync.detach()
            self.store.clear()

        try:
            applied = await self.sync.hydrate(identity)
        except RemoteUnavailableError as e:
            if epoch != self._epoch:
                return
            # Loading finished, no data
            logger.warning("Session for uid=%s started without remote data: %s", identity.uid, e)
            self.load_error = e
            self.store.clear()
        else:
            if not applied or epoch != self._epoch:
                return

        self._transition(SessionState.AUTHENTICATED)

    def _on_identity_absent(self) -> None:
        if self.state == SessionState.UNAUTHENTICATED and self._identity is None:
            return

        self._epoch += 1
        self.sync.detach()
        self.store.clear()
        self._identity = None
        self.load_error = None
        self._transition(SessionState.UNAUTHENTICATED)

    # -------------------------------------------------------------------------
    # Explicit actions
    # -------------------------------------------------------------------------

    async def sign_in(self, id_token: str | None = None) -> Identity:
        """Sign in through the provider and load the user's data.

        Raises:
            RemoteUnavailableError: The provider rejected the sign-in.
        """
        epoch = self._epoch
        identity = await self.identity_provider.sign_in(id_token)
        if epoch == self._epoch:
            # Provider did not report the change through the subscription
            await self.handle_identity(identity)
        return identity

    async def sign_out(self) -> Exception | None:
        """Sign out and clear local state.

        Pending writes get a bounded chance to land first. If revocation fails
        the session still ends locally; the error is returned and kept in
        last_error.
        """
        identity = self._identity
        error: Exception | None = None

        if identity is not None:
            if not await self.sync.flush(timeout=self.flush_timeout_seconds):
                logger.warning("Signing out uid=%s with unsaved changes", identity.uid)
            try:
                await self.identity_provider.sign_out(identity)
            except Exception as e:
                logger.exception("Sign-out failed for uid=%s", identity.uid)
                error = e
                self.last_error = e

        self._on_identity_absent()
        return error

    def _transition(self, to_state: SessionState) -> None:
        SessionStateMachine.validate_transition(self.state, to_state)
        logger.debug("Session %s -> %s", self.state.value, to_state.value)
        self.state = to_state
        self._apply_lock()

    def _apply_lock(self) -> None:
        if SessionStateMachine.accepts_mutations(self.state):
            self.store.unlock()
        else:
            self.store.lock()
