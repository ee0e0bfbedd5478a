"""Protocols and types for the external collaborators.

The core depends on two collaborators it does not own:
- an identity provider that signs users in and out and reports changes
- a document store holding one document per user, keyed by uid

Adapters implement these protocols; the sync engine and session controller
use them without knowing backend details.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol
from urllib.parse import quote

logger = logging.getLogger(__name__)

AVATAR_FALLBACK_URL = "https://ui-avatars.com/api/?name={name}&background=3b82f6&color=fff"


@dataclass(frozen=True)
class Identity:
    """An authenticated user.

    Only uid matters to the core; the display attributes are for rendering.
    """

    uid: str
    display_name: str | None = None
    photo_url: str | None = None
    email: str | None = None

    def __post_init__(self) -> None:
        if not self.uid:
            raise ValueError("uid is required")

    @property
    def label(self) -> str:
        return self.display_name or "User"

    @property
    def avatar_url(self) -> str:
        """Photo URL, or a generated initials avatar."""
        if self.photo_url:
            return self.photo_url
        return AVATAR_FALLBACK_URL.format(name=quote(self.label))


IdentityHandler = Callable[[Optional[Identity]], Awaitable[None]]


class IdentityProvider(Protocol):
    """Protocol for identity provider adapters.

    Providers notify subscribers after every successful sign-in (with the
    identity) and sign-out (with None), as well as on changes they detect
    themselves, such as an expired session.
    """

    provider_name: str

    async def sign_in(self, id_token: str | None = None) -> Identity:
        """Authenticate and return the identity.

        Raises:
            RemoteUnavailableError: The provider rejected or failed the call.
        """
        ...

    async def sign_out(self, identity: Identity) -> None:
        """Revoke the identity's session.

        Raises:
            RemoteUnavailableError: Revocation failed.
        """
        ...

    def on_identity_change(self, handler: IdentityHandler) -> Callable[[], None]:
        """Subscribe to identity changes. Returns an unsubscribe callable."""
        ...


class DocumentStore(Protocol):
    """Protocol for per-user document storage.

    Documents are plain JSON-compatible dicts. set() replaces the whole
    document; there is no field-level merge.
    """

    backend_name: str

    async def open(self) -> None:
        """Prepare the backend (create tables, connect)."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...

    async def get(self, key: str) -> dict[str, Any] | None:
        """Fetch the document for key, or None if there is none.

        Raises:
            RemoteUnavailableError: Transport or permission failure.
        """
        ...

    async def set(self, key: str, document: dict[str, Any]) -> None:
        """Replace the document for key.

        Raises:
            RemoteUnavailableError: Transport or permission failure.
        """
        ...


class IdentitySubscribers:
    """Handler registry shared by identity provider adapters."""

    def __init__(self) -> None:
        self._handlers: list[IdentityHandler] = []

    def add(self, handler: IdentityHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    async def notify(self, identity: Identity | None) -> None:
        """Deliver a change to every handler, isolating handler failures."""
        for handler in list(self._handlers):
            try:
                await handler(identity)
            except Exception:
                logger.exception("Identity handler %s failed", handler)

    def __len__(self) -> int:
        return len(self._handlers)
