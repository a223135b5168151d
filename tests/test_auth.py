"""Tests for applying Google credentials to httpx requests."""

import httpx
import pytest

from gphotos_uploader.auth import CredentialsAuth, credentials_from_token


class FakeCredentials:
    """Credentials that start expired and can be refreshed."""

    def __init__(self, refresh_token: str | None = "refresh-token") -> None:
        self.token = "expired-token"
        self.valid = False
        self.refresh_token = refresh_token
        self.refresh_calls = 0

    def refresh(self, request) -> None:
        self.refresh_calls += 1
        self.token = "fresh-token"
        self.valid = True

    def apply(self, headers: dict[str, str]) -> None:
        headers["authorization"] = f"Bearer {self.token}"


def echo_authorization(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, text=request.headers["Authorization"])


@pytest.mark.asyncio
class TestCredentialsAuth:
    """Test bearer header and refresh of expired credentials."""

    async def test_bearer_token_applied(self) -> None:
        auth = CredentialsAuth(credentials_from_token("abc"))
        async with httpx.AsyncClient(
            auth=auth, transport=httpx.MockTransport(echo_authorization)
        ) as client:
            response = await client.get("https://photoslibrary.googleapis.com/v1/albums")

        assert response.text == "Bearer abc"

    async def test_expired_credentials_refreshed_once(self) -> None:
        """Test that refreshed credentials are reused by later requests."""
        credentials = FakeCredentials()
        async with httpx.AsyncClient(
            auth=CredentialsAuth(credentials),
            transport=httpx.MockTransport(echo_authorization),
        ) as client:
            first = await client.get("https://photoslibrary.googleapis.com/v1/albums")
            second = await client.get("https://photoslibrary.googleapis.com/v1/albums")

        assert credentials.refresh_calls == 1
        assert first.text == second.text == "Bearer fresh-token"

    async def test_no_refresh_without_refresh_token(self) -> None:
        credentials = FakeCredentials(refresh_token=None)
        async with httpx.AsyncClient(
            auth=CredentialsAuth(credentials),
            transport=httpx.MockTransport(echo_authorization),
        ) as client:
            response = await client.get("https://photoslibrary.googleapis.com/v1/albums")

        assert credentials.refresh_calls == 0
        assert response.text == "Bearer expired-token"


class TestCredentialsAuthSync:
    """Test the sync flow used by blocking clients."""

    def test_expired_credentials_refreshed(self) -> None:
        credentials = FakeCredentials()
        with httpx.Client(
            auth=CredentialsAuth(credentials),
            transport=httpx.MockTransport(echo_authorization),
        ) as client:
            response = client.get("https://photoslibrary.googleapis.com/v1/albums")

        assert credentials.refresh_calls == 1
        assert response.text == "Bearer fresh-token"
