from unittest.mock import MagicMock, patch

import jwt
import pytest

from core.auth.clerk_provider import ClerkAuthProvider
from core.auth.interface import AuthUser
from core.errors import AuthenticationError, ErrorCode


@pytest.fixture
def mock_clerk_user():
    primary = MagicMock(id="idn_1", email_address="jane@example.com")
    primary.verification.status = "verified"
    secondary = MagicMock(id="idn_2", email_address="jane@work.example.com")
    secondary.verification.status = "unverified"

    user = MagicMock()
    user.id = "user_123"
    user.first_name = "Jane"
    user.last_name = "Doe"
    user.username = "janedoe"
    user.email_addresses = [secondary, primary]
    user.primary_email_address_id = "idn_1"
    user.public_metadata = {"homeAirport": "CGK"}
    return user


def _signed_in(sub="user_123"):
    return MagicMock(is_signed_in=True, payload={"sub": sub}, message=None)


@pytest.mark.asyncio
async def test_verify_token_valid(mock_clerk_user):
    with (
        patch("core.auth.clerk_provider.Clerk") as mock_clerk_class,
        patch("core.auth.clerk_provider.authenticate_request", return_value=_signed_in()),
    ):
        mock_client = MagicMock()
        mock_client.users.get.return_value = mock_clerk_user
        mock_clerk_class.return_value = mock_client

        provider = ClerkAuthProvider(secret_key="sk_test_mock")
        result = await provider.verify_token("session_jwt")

        assert isinstance(result, AuthUser)
        assert result.user_id == "user_123"
        assert result.email == "jane@example.com"
        assert result.email_verified is True
        assert result.name == "Jane Doe"
        mock_client.users.get.assert_called_once_with(user_id="user_123")


@pytest.mark.asyncio
async def test_verify_token_not_signed_in():
    state = MagicMock(is_signed_in=False, payload=None, message="token-expired")
    with (
        patch("core.auth.clerk_provider.Clerk"),
        patch("core.auth.clerk_provider.authenticate_request", return_value=state),
    ):
        provider = ClerkAuthProvider(secret_key="sk_test_mock")

        with pytest.raises(AuthenticationError, match="token-expired") as exc_info:
            await provider.verify_token("expired_jwt")
        assert exc_info.value.code is ErrorCode.INVALID_TOKEN


@pytest.mark.asyncio
async def test_verify_token_sdk_error():
    with (
        patch("core.auth.clerk_provider.Clerk"),
        patch("core.auth.clerk_provider.authenticate_request", side_effect=RuntimeError("jwks unreachable")),
    ):
        provider = ClerkAuthProvider(secret_key="sk_test_mock")

        with pytest.raises(AuthenticationError, match="Token verification failed"):
            await provider.verify_token("invalid_token")


@pytest.mark.asyncio
async def test_get_user_falls_back_to_first_email(mock_clerk_user):
    mock_clerk_user.primary_email_address_id = None

    with patch("core.auth.clerk_provider.Clerk") as mock_clerk_class:
        mock_client = MagicMock()
        mock_client.users.get.return_value = mock_clerk_user
        mock_clerk_class.return_value = mock_client

        provider = ClerkAuthProvider(secret_key="sk_test_mock")
        result = await provider.get_user("user_123")

        assert result.email == "jane@work.example.com"
        assert result.email_verified is False
        assert result.metadata == {"homeAirport": "CGK"}


@pytest.mark.asyncio
async def test_get_user_no_email(mock_clerk_user):
    mock_clerk_user.email_addresses = []

    with patch("core.auth.clerk_provider.Clerk") as mock_clerk_class:
        mock_client = MagicMock()
        mock_client.users.get.return_value = mock_clerk_user
        mock_clerk_class.return_value = mock_client

        provider = ClerkAuthProvider(secret_key="sk_test_mock")
        result = await provider.get_user("user_123")

        assert result.email == ""
        assert result.email_verified is False


@pytest.mark.asyncio
async def test_get_user_no_name(mock_clerk_user):
    mock_clerk_user.first_name = None
    mock_clerk_user.last_name = None

    with patch("core.auth.clerk_provider.Clerk") as mock_clerk_class:
        mock_client = MagicMock()
        mock_client.users.get.return_value = mock_clerk_user
        mock_clerk_class.return_value = mock_client

        provider = ClerkAuthProvider(secret_key="sk_test_mock")
        result = await provider.get_user("user_123")

        assert result.name == "janedoe"


@pytest.mark.asyncio
async def test_get_user_api_error():
    with patch("core.auth.clerk_provider.Clerk") as mock_clerk_class:
        mock_client = MagicMock()
        mock_client.users.get.side_effect = Exception("API error")
        mock_clerk_class.return_value = mock_client

        provider = ClerkAuthProvider(secret_key="sk_test_mock")

        with pytest.raises(AuthenticationError, match="Failed to fetch user"):
            await provider.get_user("user_123")


@pytest.mark.asyncio
async def test_decode_claims_valid():
    with patch("core.auth.clerk_provider.Clerk"):
        provider = ClerkAuthProvider(secret_key="sk_test_mock")
        token = jwt.encode({"sub": "user_123", "exp": 9999999999}, "secret", algorithm="HS256")

        result = await provider.decode_claims(token)

        assert result["sub"] == "user_123"


@pytest.mark.asyncio
async def test_decode_claims_invalid():
    with patch("core.auth.clerk_provider.Clerk"):
        provider = ClerkAuthProvider(secret_key="sk_test_mock")

        with pytest.raises(AuthenticationError, match="Invalid token"):
            await provider.decode_claims("not_a_jwt")
