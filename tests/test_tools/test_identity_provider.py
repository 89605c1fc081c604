"""
Tests for Identity Provider
Tests the database-backed directory and the HTTP auth server client
"""

import httpx
import pytest

from errors import IdentityProviderError, NotAuthenticatedError
from tools.identity_provider import (
    DatabaseIdentityProvider,
    HttpIdentityProvider,
    require_current_user,
)


# =============================================================================
# Test Database Provider
# =============================================================================

class TestDatabaseIdentityProvider:
    """Tests for identities stored in the application database"""

    @pytest.mark.asyncio
    async def test_current_user_from_token(self, db_session, test_user):
        provider = DatabaseIdentityProvider(db_session, "token-jane")

        user = await provider.get_current_user()

        assert user.id == test_user.id
        assert user.email == "jane.doe@example.com"
        assert user.user_metadata["first_name"] == "Jane"

    @pytest.mark.asyncio
    async def test_unknown_token(self, db_session, test_user):
        provider = DatabaseIdentityProvider(db_session, "nope")
        assert await provider.get_current_user() is None

    @pytest.mark.asyncio
    async def test_require_current_user_without_token(self, db_session):
        with pytest.raises(NotAuthenticatedError):
            await require_current_user(DatabaseIdentityProvider(db_session, None))

    @pytest.mark.asyncio
    async def test_list_and_get_users(self, db_session, test_user, other_user):
        provider = DatabaseIdentityProvider(db_session)

        users = await provider.list_all_users()
        assert {u.id for u in users} == {test_user.id, other_user.id}

        user = await provider.get_user_by_id(other_user.id)
        assert user.user_metadata == {"full_name": "Sam Lee"}

    @pytest.mark.asyncio
    async def test_get_unknown_user_raises(self, db_session):
        provider = DatabaseIdentityProvider(db_session)

        with pytest.raises(IdentityProviderError):
            await provider.get_user_by_id("missing")


# =============================================================================
# Test HTTP Provider
# =============================================================================

def _auth_server(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    auth = request.headers.get("Authorization")

    if path == "/auth/v1/user":
        if auth != "Bearer user-token":
            return httpx.Response(401, json={"msg": "invalid token"})
        return httpx.Response(200, json={
            "id": "u-1",
            "email": "jane.doe@example.com",
            "user_metadata": {"first_name": "Jane", "last_name": "Doe"}
        })

    if auth != "Bearer service-key":
        return httpx.Response(403)

    if path == "/auth/v1/admin/users":
        return httpx.Response(200, json={"users": [
            {"id": "u-1", "email": "jane.doe@example.com"},
            {"id": "u-2", "email": "sam_lee@example.com", "user_metadata": None},
        ]})
    if path == "/auth/v1/admin/users/u-2":
        return httpx.Response(200, json={"user": {"id": "u-2", "email": "sam_lee@example.com"}})
    return httpx.Response(404, json={"msg": "not found"})


def _provider(access_token="user-token", handler=_auth_server) -> HttpIdentityProvider:
    return HttpIdentityProvider(
        access_token=access_token,
        base_url="https://auth.example.com/auth/v1/",
        service_key="service-key",
        timeout=5,
        transport=httpx.MockTransport(handler)
    )


class TestHttpIdentityProvider:
    """Tests for the auth server client"""

    @pytest.mark.asyncio
    async def test_current_user(self):
        provider = _provider()
        try:
            user = await provider.get_current_user()
        finally:
            await provider.close()

        assert user.id == "u-1"
        assert user.user_metadata["last_name"] == "Doe"

    @pytest.mark.asyncio
    async def test_rejected_token_is_anonymous(self):
        provider = _provider(access_token="expired")
        try:
            assert await provider.get_current_user() is None
        finally:
            await provider.close()

    @pytest.mark.asyncio
    async def test_no_token_skips_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        provider = _provider(access_token=None, handler=handler)
        assert await provider.get_current_user() is None
        assert calls == []

    @pytest.mark.asyncio
    async def test_list_all_users(self):
        provider = _provider()
        try:
            users = await provider.list_all_users()
        finally:
            await provider.close()

        assert [u.id for u in users] == ["u-1", "u-2"]
        assert users[1].user_metadata == {}

    @pytest.mark.asyncio
    async def test_get_user_by_id_unwraps_user(self):
        provider = _provider()
        try:
            user = await provider.get_user_by_id("u-2")
        finally:
            await provider.close()

        assert user.email == "sam_lee@example.com"

    @pytest.mark.asyncio
    async def test_get_unknown_user_raises(self):
        provider = _provider()
        try:
            with pytest.raises(IdentityProviderError):
                await provider.get_user_by_id("u-404")
        finally:
            await provider.close()

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = _provider(handler=handler)
        try:
            with pytest.raises(IdentityProviderError):
                await provider.list_all_users()
        finally:
            await provider.close()
