"""In-memory collaborators for local development and testing.

Replace with the SQL or Firestore document store and the Firebase identity
provider for real deployments.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

from work_tracker.errors import RemoteUnavailableError
from work_tracker.providers.base import Identity, IdentityHandler, IdentitySubscribers


class InMemoryDocumentStore:
    """Document store backed by a dict of JSON strings.

    Documents are stored as canonical JSON (sorted keys), so two writes of
    the same document are byte-for-byte identical.
    """

    backend_name = "memory"

    def __init__(self, delay_seconds: float = 0.0):
        """Initialize stub store.

        Args:
            delay_seconds: Simulated round-trip latency for every call.
        """
        self.delay_seconds = delay_seconds
        self.fail_reads = False
        self.fail_writes = False
        self.reads = 0
        self.writes: list[str] = []  # keys, in write order
        self._documents: dict[str, str] = {}

    async def open(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def get(self, key: str) -> dict[str, Any] | None:
        await self._round_trip()
        self.reads += 1
        if self.fail_reads:
            raise RemoteUnavailableError("get", "simulated read failure")
        raw = self._documents.get(key)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, document: dict[str, Any]) -> None:
        await self._round_trip()
        if self.fail_writes:
            raise RemoteUnavailableError("set", "simulated write failure")
        self._documents[key] = json.dumps(document, sort_keys=True, separators=(",", ":"))
        self.writes.append(key)

    def raw(self, key: str) -> str | None:
        """Stored JSON text for key."""
        return self._documents.get(key)

    def put_raw(self, key: str, document: dict[str, Any]) -> None:
        """Seed a document without counting it as a write."""
        self._documents[key] = json.dumps(document, sort_keys=True, separators=(",", ":"))

    async def _round_trip(self) -> None:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)


class LocalIdentityProvider:
    """Identity provider that signs in a fixed local user.

    Useful for single-user desktop shells and tests. set_identity() simulates
    changes detected by the provider itself (expired session, account switch).
    """

    provider_name = "local"

    def __init__(self, identity: Identity | None = None):
        self.identity = identity or Identity(uid="local-user", display_name="Local User")
        self.fail_sign_in = False
        self.fail_sign_out = False
        self.current: Identity | None = None
        self._subscribers = IdentitySubscribers()

    async def sign_in(self, id_token: str | None = None) -> Identity:
        if self.fail_sign_in:
            raise RemoteUnavailableError("sign_in", "simulated sign-in failure")
        self.current = self.identity
        await self._subscribers.notify(self.current)
        return self.current

    async def sign_out(self, identity: Identity) -> None:
        if self.fail_sign_out:
            raise RemoteUnavailableError("sign_out", "simulated revocation failure")
        self.current = None
        await self._subscribers.notify(None)

    def on_identity_change(self, handler: IdentityHandler) -> Callable[[], None]:
        return self._subscribers.add(handler)

    async def set_identity(self, identity: Identity | None) -> None:
        """Report an identity change as if it came from the provider."""
        self.current = identity
        await self._subscribers.notify(identity)
