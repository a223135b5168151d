"""Bridges google-auth credentials onto httpx requests."""

import asyncio
import logging
from pathlib import Path
from typing import AsyncGenerator, Generator

import httpx
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/photoslibrary.appendonly",
    "https://www.googleapis.com/auth/photoslibrary.readonly.appcreateddata",
]


class CredentialsAuth(httpx.Auth):
    """Adds the bearer token of a google-auth ``Credentials`` to each request.

    Credentials that expire mid-batch are refreshed before the next request
    when they carry a refresh token.
    """

    def __init__(self, credentials: Credentials) -> None:
        self.credentials = credentials
        self._refresh_lock = asyncio.Lock()

    def _needs_refresh(self) -> bool:
        return not self.credentials.valid and bool(
            getattr(self.credentials, "refresh_token", None)
        )

    def _apply(self, request: httpx.Request) -> None:
        headers: dict[str, str] = {}
        self.credentials.apply(headers)
        request.headers.update(headers)

    def sync_auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        if self._needs_refresh():
            logger.info("Refreshing expired Google credentials")
            self.credentials.refresh(Request())
        self._apply(request)
        yield request

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        if self._needs_refresh():
            async with self._refresh_lock:
                # another upload may have refreshed while we waited
                if self._needs_refresh():
                    logger.info("Refreshing expired Google credentials")
                    await asyncio.to_thread(self.credentials.refresh, Request())
        self._apply(request)
        yield request


def credentials_from_token(access_token: str) -> Credentials:
    """Wrap a bare access token; it cannot be refreshed."""
    return Credentials(token=access_token)


def load_credentials(token_path: Path) -> Credentials:
    """Load authorized-user credentials, refreshing them if they expired.

    Args:
        token_path: JSON file written by a previous OAuth consent flow

    Returns:
        Credentials ready to be applied to requests

    Raises:
        FileNotFoundError: If token_path doesn't exist
    """
    if not token_path.exists():
        raise FileNotFoundError(f"Credentials file not found: {token_path}")

    creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)
    if not creds.valid and creds.expired and creds.refresh_token:
        logger.info("Refreshing expired Google credentials")
        creds.refresh(Request())
    return creds
