"""Tests for the Firebase identity provider with a fake auth module."""

import pytest

from work_tracker.errors import RemoteUnavailableError
from work_tracker.providers.firebase_auth import FirebaseIdentityProvider, identity_from_claims

VALID_TOKEN = "valid-id-token"


class FakeAuth:
    """Stands in for firebase_admin.auth."""

    def __init__(self):
        self.revoked = []
        self.verify_calls = []
        self.fail_revoke = False

    def verify_id_token(self, id_token, check_revoked=False):
        self.verify_calls.append((id_token, check_revoked))
        if id_token != VALID_TOKEN:
            raise ValueError("Could not verify token signature.")
        return {
            "uid": "firebase-uid",
            "name": "Ada Lovelace",
            "picture": "https://example.com/ada.png",
            "email": "ada@example.com",
        }

    def revoke_refresh_tokens(self, uid):
        if self.fail_revoke:
            raise ConnectionError("network down")
        self.revoked.append(uid)


@pytest.fixture
def auth():
    return FakeAuth()


@pytest.fixture
def provider(auth):
    return FirebaseIdentityProvider(auth_module=auth)


class TestIdentityFromClaims:
    """Claim mapping."""

    def test_maps_profile_claims(self):
        identity = identity_from_claims({"uid": "u1", "name": "Ada", "email": "a@example.com"})
        assert identity.uid == "u1"
        assert identity.display_name == "Ada"
        assert identity.photo_url is None

    def test_sub_fallback(self):
        assert identity_from_claims({"sub": "u2"}).uid == "u2"

    def test_missing_uid(self):
        with pytest.raises(RemoteUnavailableError):
            identity_from_claims({"name": "Nobody"})


class TestFirebaseIdentityProvider:
    """Verification and revocation."""

    @pytest.mark.asyncio
    async def test_sign_in_verifies_token(self, provider, auth):
        seen = []

        async def handler(identity):
            seen.append(identity)

        provider.on_identity_change(handler)
        identity = await provider.sign_in(f"  {VALID_TOKEN}  ")

        assert identity.uid == "firebase-uid"
        assert identity.avatar_url == "https://example.com/ada.png"
        assert auth.verify_calls == [(VALID_TOKEN, True)]
        assert seen == [identity]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "   "])
    async def test_token_required(self, provider, auth, token):
        with pytest.raises(RemoteUnavailableError):
            await provider.sign_in(token)
        assert auth.verify_calls == []

    @pytest.mark.asyncio
    async def test_invalid_token(self, provider):
        with pytest.raises(RemoteUnavailableError) as exc_info:
            await provider.sign_in("forged")
        assert exc_info.value.operation == "sign_in"

    @pytest.mark.asyncio
    async def test_sign_out_revokes(self, provider, auth):
        seen = []

        async def handler(identity):
            seen.append(identity)

        identity = await provider.sign_in(VALID_TOKEN)
        provider.on_identity_change(handler)
        await provider.sign_out(identity)

        assert auth.revoked == ["firebase-uid"]
        assert seen == [None]

    @pytest.mark.asyncio
    async def test_revocation_failure(self, provider, auth):
        identity = await provider.sign_in(VALID_TOKEN)
        auth.fail_revoke = True

        with pytest.raises(RemoteUnavailableError) as exc_info:
            await provider.sign_out(identity)
        assert exc_info.value.operation == "sign_out"
