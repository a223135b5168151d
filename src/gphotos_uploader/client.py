"""Google Photos client: raw byte uploads, media item creation and albums.

The Library API has no client-library call for ``/v1/uploads``, so the raw
upload is done directly on the transport while everything else goes through
``PhotosLibraryService``.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, AsyncIterator, BinaryIO

import httpx
from google.oauth2.credentials import Credentials

from gphotos_uploader.auth import CredentialsAuth
from gphotos_uploader.exceptions import (
    APIError,
    GooglePhotosError,
    ProtocolViolationError,
    RateLimitError,
    TransientError,
    TransportFailureError,
    UploadError,
    ValidationError,
)
from gphotos_uploader.models import Album, MediaItem
from gphotos_uploader.retry import (
    RetryAfter,
    RetryOutcome,
    SleepFunc,
    StopWithError,
    Success,
    parse_retry_after,
    retry,
)
from gphotos_uploader.service import (
    API_VERSION,
    PHOTOS_API_BASE_URL,
    PhotosLibraryService,
)

logger = logging.getLogger(__name__)

UPLOAD_ATTEMPTS = 3
UPLOAD_INITIAL_DELAY = 1.0
DEFAULT_TIMEOUT = 60.0
OK_STATUS_MESSAGE = "OK"
UPLOAD_CHUNK_SIZE = 1024 * 1024


async def _read_chunks(fh: BinaryIO) -> AsyncIterator[bytes]:
    while chunk := await asyncio.to_thread(fh.read, UPLOAD_CHUNK_SIZE):
        yield chunk


def _chained(error: GooglePhotosError, cause: BaseException) -> GooglePhotosError:
    error.__cause__ = cause
    return error


class PhotosClient:
    """Uploads media files to Google Photos and organizes them into albums."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        service: PhotosLibraryService | None = None,
        credentials: Credentials | None = None,
        base_url: str = PHOTOS_API_BASE_URL,
        sleep: SleepFunc | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            http_client: Transport already configured with valid credentials
            service: Library API wrapper; built on ``http_client`` if omitted
            credentials: Credentials the transport was configured with
            base_url: API root, without the version segment
            sleep: Awaitable sleep used between retries
        """
        self.http_client = http_client
        self.service = service or PhotosLibraryService(http_client, base_url)
        self.base_url = base_url.rstrip("/")
        self._credentials = credentials
        self._sleep = sleep
        self._owns_http_client = False

    @classmethod
    def from_credentials(
        cls,
        credentials: Credentials,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = PHOTOS_API_BASE_URL,
    ) -> "PhotosClient":
        """Build a client owning its own authorized transport.

        Use it as an async context manager so the transport gets closed.
        """
        http_client = httpx.AsyncClient(
            auth=CredentialsAuth(credentials), timeout=timeout
        )
        client = cls(http_client, credentials=credentials, base_url=base_url)
        client._owns_http_client = True
        return client

    async def __aenter__(self) -> "PhotosClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        if self._owns_http_client:
            await self.http_client.aclose()

    @property
    def token(self) -> Credentials | None:
        """Get the credentials this client was constructed with."""
        return self._credentials

    @property
    def upload_url(self) -> str:
        """Get the raw upload endpoint."""
        return f"{self.base_url}/{API_VERSION}/uploads"

    async def get_upload_token(self, fh: BinaryIO, filename: str) -> str:
        """Send the bytes of ``fh`` and return the upload token.

        The stream is rewound before every attempt so a retry resends the
        whole file. It is read in ``UPLOAD_CHUNK_SIZE`` chunks off the event
        loop, so large videos are never held in memory at once.

        Args:
            fh: Seekable binary stream, at any position
            filename: Name reported to the service

        Returns:
            Upload token to pass to ``mediaItems:batchCreate``

        Raises:
            TransportFailureError: If the request could not be sent
            RateLimitError: If every attempt was throttled
            ProtocolViolationError: If the service answered neither 200 nor 429
        """
        size = fh.seek(0, os.SEEK_END)
        headers = {
            "Content-Type": "application/octet-stream",
            "Content-Length": str(size),
            # non-ASCII filenames are sent as UTF-8
            "X-Goog-Upload-File-Name": filename.encode("utf-8"),
            "X-Goog-Upload-Protocol": "raw",
        }

        async def attempt() -> RetryOutcome:
            fh.seek(0)
            try:
                response = await self.http_client.post(
                    self.upload_url, content=_read_chunks(fh), headers=headers
                )
            except httpx.RequestError as e:
                return StopWithError(
                    _chained(
                        TransportFailureError(
                            f"Network error while uploading {filename}: {e}"
                        ),
                        e,
                    )
                )

            if response.status_code == 429:
                after = parse_retry_after(response.headers)
                logger.warning(f"429 throttle uploading {filename}, waiting {after} sec")
                return RetryAfter(
                    after,
                    RateLimitError(
                        f"Rate limit exceeded while uploading {filename}",
                        retry_after=after,
                    ),
                )

            # any other status ends the loop, the body is checked below
            return Success(response)

        response = await retry(
            UPLOAD_ATTEMPTS, UPLOAD_INITIAL_DELAY, attempt, sleep=self._sleep
        )
        if response.status_code != 200:
            raise ProtocolViolationError(
                f"Upload of {filename} answered {response.status_code}: "
                f"{response.text[:200]}"
            )

        upload_token = response.text
        logger.debug(f"Got upload token {upload_token[:8]}... for {filename}")
        return upload_token

    async def upload_file(self, file_path: str | Path, *album_ids: str) -> MediaItem:
        """Upload a file and create it as a media item.

        Args:
            file_path: Local file to upload
            album_ids: At most one album id to add the new item to

        Returns:
            The created media item

        Raises:
            ValidationError: If more than one album id is given
            UploadError: If the file can't be read, no upload token could be
                obtained, or media item creation kept failing
            ProtocolViolationError: If the creation response is malformed or
                its status is not OK
        """
        if len(album_ids) > 1:
            raise ValidationError("upload_file accepts at most one album id")
        album_id = album_ids[0] if album_ids else None

        path = Path(file_path)
        filename = path.name
        logger.info(f"Uploading {filename}")

        try:
            fh = path.open("rb")
        except OSError as e:
            raise UploadError(f"Failed opening {path}") from e

        with fh:
            try:
                upload_token = await self.get_upload_token(fh, filename)
            except (GooglePhotosError, OSError) as e:
                raise UploadError(f"Failed getting upload token for {filename}") from e

        new_item = {
            "description": filename,
            "simpleMediaItem": {"uploadToken": upload_token},
        }

        async def attempt() -> RetryOutcome:
            try:
                response = await self.service.batch_create_media_items(
                    [new_item], album_id=album_id
                )
            except APIError as e:
                if e.status_code == 429:
                    after = parse_retry_after(e.headers)
                    logger.warning(f"Rate limit reached, sleeping for {after} seconds...")
                    return RetryAfter(after, e)
                logger.warning(f"Unknown error adding {filename}, will retry: {e}")
                return RetryAfter(0, _chained(TransientError(str(e)), e))
            except GooglePhotosError as e:
                logger.warning(f"Unknown error adding {filename}, will retry: {e}")
                return RetryAfter(0, _chained(TransientError(str(e)), e))
            return Success(response)

        try:
            response = await retry(
                UPLOAD_ATTEMPTS, UPLOAD_INITIAL_DELAY, attempt, sleep=self._sleep
            )
        except GooglePhotosError as e:
            raise UploadError(f"Failed adding media {filename}") from e

        return self._media_item_from_response(response, filename)

    def _media_item_from_response(
        self, response: dict[str, Any], filename: str
    ) -> MediaItem:
        results = response.get("newMediaItemResults") or []
        if len(results) != 1:
            raise ProtocolViolationError(
                f"Expected 1 result creating {filename}, got {len(results)}"
            )

        result = results[0]
        message = (result.get("status") or {}).get("message")
        if message != OK_STATUS_MESSAGE:
            raise ProtocolViolationError(
                f"Status message for {filename} should be OK, found: {message}"
            )
        item = result.get("mediaItem")
        if not isinstance(item, dict) or not item.get("id"):
            raise ProtocolViolationError(f"No media item id returned for {filename}")

        media_item = MediaItem.from_api(item)
        logger.info(f"{filename} uploaded successfully as {media_item.id}")
        return media_item

    async def album_by_name(self, name: str) -> Album | None:
        """Return the first album titled ``name``, or None if there is none."""
        for album in await self.service.list_albums():
            if album.title == name:
                return album
        return None

    async def get_or_create_album_by_name(self, name: str) -> Album:
        """Return the album titled ``name``, creating it if needed.

        Raises:
            ValidationError: If name is empty
        """
        if not name:
            raise ValidationError("Album name can't be empty")

        album = await self.album_by_name(name)
        if album is not None:
            logger.info(f"Found existing album '{name}' with ID: {album.id}")
            return await self.service.get_album(album.id)

        return await self.service.create_album(name)
