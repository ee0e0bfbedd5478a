"""Firebase Authentication identity provider.

The browser shell performs the Google sign-in popup and hands the resulting
Firebase ID token to sign_in(); this adapter verifies it server-side.
sign_out() revokes the user's refresh tokens.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from firebase_admin import auth as firebase_auth

from work_tracker.errors import RemoteUnavailableError
from work_tracker.providers.base import Identity, IdentityHandler, IdentitySubscribers
from work_tracker.providers.firebase_app import init_firebase_admin

logger = logging.getLogger(__name__)


def identity_from_claims(decoded: dict[str, Any]) -> Identity:
    """Build an Identity from verified ID-token claims."""
    uid = str(decoded.get("uid") or decoded.get("sub") or "").strip()
    if not uid:
        raise RemoteUnavailableError("sign_in", "ID token has no uid")
    return Identity(
        uid=uid,
        display_name=decoded.get("name"),
        photo_url=decoded.get("picture"),
        email=decoded.get("email"),
    )


class FirebaseIdentityProvider:
    """Identity provider backed by firebase_admin.auth."""

    provider_name = "firebase"

    def __init__(
        self,
        project_id: Optional[str] = None,
        check_revoked: bool = True,
        auth_module: Any = firebase_auth,
    ):
        self.project_id = project_id
        self.check_revoked = check_revoked
        self._auth = auth_module
        self._subscribers = IdentitySubscribers()

    async def sign_in(self, id_token: str | None = None) -> Identity:
        if not id_token or not id_token.strip():
            raise RemoteUnavailableError("sign_in", "an ID token is required")

        self._ensure_app()
        try:
            decoded = await asyncio.to_thread(
                self._auth.verify_id_token,
                id_token.strip(),
                check_revoked=self.check_revoked,
            )
        except Exception as e:
            # Never log the token value
            logger.warning("ID token verification failed: %s", type(e).__name__)
            raise RemoteUnavailableError("sign_in", f"{type(e).__name__}: {e}") from e

        identity = identity_from_claims(decoded)
        logger.info("Signed in uid=%s", identity.uid)
        await self._subscribers.notify(identity)
        return identity

    async def sign_out(self, identity: Identity) -> None:
        self._ensure_app()
        try:
            await asyncio.to_thread(self._auth.revoke_refresh_tokens, identity.uid)
        except Exception as e:
            raise RemoteUnavailableError("sign_out", f"{type(e).__name__}: {e}") from e

        logger.info("Revoked refresh tokens for uid=%s", identity.uid)
        await self._subscribers.notify(None)

    def on_identity_change(self, handler: IdentityHandler) -> Callable[[], None]:
        return self._subscribers.add(handler)

    def _ensure_app(self) -> None:
        # Injected auth modules (emulators, tests) manage their own app
        if self._auth is not firebase_auth:
            return
        try:
            init_firebase_admin(project_id=self.project_id)
        except RuntimeError as e:
            raise RemoteUnavailableError("firebase_init", str(e)) from e
