"""
Tests for the Supabase identity adapter.

The Supabase client is a MagicMock; only the translation of provider
responses and errors is under test.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from supabase import AuthError as SupabaseAuthError

from modules.auth.exceptions import AccountExistsError, InvalidCredentialsError, NotSignedInError
from modules.auth.identity import IIdentityProvider, SupabaseIdentityProvider
from shared.exceptions import ExternalServiceError


class ProviderError(SupabaseAuthError):
    def __init__(self, message: str):
        Exception.__init__(self, message)
        self.message = message


def _user(identities=("email",), confirmed=None, metadata=None):
    return SimpleNamespace(
        id="user-1",
        email="ann@example.com",
        identities=list(identities) if identities is not None else None,
        email_confirmed_at=confirmed,
        user_metadata=metadata or {},
    )


def _session(user=None):
    return SimpleNamespace(
        access_token="access",
        refresh_token="refresh",
        expires_at=1735689600,
        user=user or _user(),
    )


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def provider(client):
    return SupabaseIdentityProvider(client)


def test_implements_protocol(provider):
    assert isinstance(provider, IIdentityProvider)


class TestSignUp:
    @pytest.mark.asyncio
    async def test_passes_metadata(self, provider, client):
        client.auth.sign_up.return_value = SimpleNamespace(user=_user(), session=_session())

        user = await provider.sign_up("ann@example.com", "secret1", {"name": "Ann"})

        assert user.id == "user-1"
        assert user.session.access_token == "access"
        args = client.auth.sign_up.call_args.args[0]
        assert args["options"] == {"data": {"name": "Ann"}}

    @pytest.mark.asyncio
    async def test_without_session(self, provider, client):
        client.auth.sign_up.return_value = SimpleNamespace(user=_user(), session=None)
        user = await provider.sign_up("ann@example.com", "secret1", {})
        assert user.session is None

    @pytest.mark.asyncio
    async def test_already_registered_error(self, provider, client):
        client.auth.sign_up.side_effect = ProviderError("User already registered")
        with pytest.raises(AccountExistsError) as exc:
            await provider.sign_up("ann@example.com", "secret1", {})
        assert exc.value.message == "Existing Account Found"

    @pytest.mark.asyncio
    async def test_empty_identities_means_existing_account(self, provider, client):
        client.auth.sign_up.return_value = SimpleNamespace(user=_user(identities=()), session=None)
        with pytest.raises(AccountExistsError):
            await provider.sign_up("ann@example.com", "secret1", {})

    @pytest.mark.asyncio
    async def test_other_provider_error(self, provider, client):
        client.auth.sign_up.side_effect = ProviderError("Signups not allowed")
        with pytest.raises(ExternalServiceError) as exc:
            await provider.sign_up("ann@example.com", "secret1", {})
        assert exc.value.code == "SIGNUP_FAILED"


class TestSessions:
    @pytest.mark.asyncio
    async def test_sign_in(self, provider, client):
        client.auth.sign_in_with_password.return_value = SimpleNamespace(
            session=_session(_user(metadata={"email_verified": True}))
        )
        session = await provider.sign_in("ann@example.com", "secret1")
        assert session.user_id == "user-1"
        assert session.email_verified is True

    @pytest.mark.asyncio
    async def test_sign_in_rejected(self, provider, client):
        client.auth.sign_in_with_password.side_effect = ProviderError("Invalid login credentials")
        with pytest.raises(InvalidCredentialsError):
            await provider.sign_in("ann@example.com", "wrong")

    @pytest.mark.asyncio
    async def test_refresh_without_session(self, provider, client):
        client.auth.refresh_session.return_value = SimpleNamespace(session=None)
        with pytest.raises(NotSignedInError):
            await provider.refresh_session()

    @pytest.mark.asyncio
    async def test_query_profile_reads_users_table(self, provider, client):
        chain = client.table.return_value.select.return_value.eq.return_value.limit.return_value
        chain.execute.return_value.data = [{"id": "user-1", "email": "ann@example.com", "user_role": "partner"}]

        profile = await provider.query_profile("user-1")

        assert profile.role == "partner"
        client.table.assert_called_with("users")
