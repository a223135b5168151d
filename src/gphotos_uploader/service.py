"""Thin async wrapper over the Photos Library REST resources."""

import logging
from typing import Any

import httpx

from gphotos_uploader.exceptions import (
    APIError,
    ProtocolViolationError,
    TransportFailureError,
)
from gphotos_uploader.models import Album

logger = logging.getLogger(__name__)

PHOTOS_API_BASE_URL = "https://photoslibrary.googleapis.com"
API_VERSION = "v1"


class PhotosLibraryService:
    """Calls the ``mediaItems`` and ``albums`` resources of the Library API."""

    def __init__(
        self, http_client: httpx.AsyncClient, base_url: str = PHOTOS_API_BASE_URL
    ) -> None:
        """Initialize the service.

        Args:
            http_client: Client already configured with credentials
            base_url: API root, without the version segment
        """
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")

    @property
    def api_url(self) -> str:
        """Get the versioned URL all resources live under."""
        return f"{self.base_url}/{API_VERSION}"

    async def batch_create_media_items(
        self, new_media_items: list[dict[str, Any]], album_id: str | None = None
    ) -> dict[str, Any]:
        """Turn upload tokens into media items, optionally inside an album.

        Args:
            new_media_items: ``newMediaItems`` entries of the request
            album_id: Album to add the new items to

        Returns:
            The decoded ``BatchCreateMediaItemsResponse``

        Raises:
            APIError: If the service answers with an error status
            TransportFailureError: If the request could not be sent
            ProtocolViolationError: If the response is not JSON
        """
        body: dict[str, Any] = {"newMediaItems": new_media_items}
        if album_id:
            body["albumId"] = album_id
        return await self._request(
            "POST", "/mediaItems:batchCreate", "creating media items", json=body
        )

    async def list_albums(self) -> list[Album]:
        """List the albums of the first result page."""
        result = await self._request("GET", "/albums", "listing albums")
        return [Album.from_api(album) for album in result.get("albums", [])]

    async def get_album(self, album_id: str) -> Album:
        """Fetch a single album by id."""
        result = await self._request(
            "GET", f"/albums/{album_id}", f"getting album {album_id}"
        )
        return Album.from_api(result)

    async def create_album(self, title: str) -> Album:
        """Create a new album with the given title."""
        result = await self._request(
            "POST",
            "/albums",
            f"creating album '{title}'",
            json={"album": {"title": title}},
        )
        album = Album.from_api(result)
        logger.info(f"Created album '{title}' with ID: {album.id}")
        return album

    async def _request(
        self, method: str, path: str, context: str, json: Any = None
    ) -> dict[str, Any]:
        try:
            response = await self.http_client.request(
                method, f"{self.api_url}{path}", json=json
            )
        except httpx.RequestError as e:
            logger.warning(f"Network error while {context}: {e}")
            raise TransportFailureError(f"Network error while {context}: {e}") from e

        if response.status_code >= 400:
            self._handle_error_response(response, context)

        return self._parse_json_response(response, context)

    def _parse_json_response(
        self, response: httpx.Response, context: str
    ) -> dict[str, Any]:
        """Parse a JSON body, rejecting anything that is not an object.

        Raises:
            ProtocolViolationError: If the body is not a JSON object
        """
        try:
            result = response.json()
        except ValueError:
            raise ProtocolViolationError(
                f"Invalid API response while {context}: {response.text[:200]}"
            )
        if not isinstance(result, dict):
            raise ProtocolViolationError(
                f"Expected a JSON object while {context}, got {type(result).__name__}"
            )
        return result

    def _handle_error_response(self, response: httpx.Response, context: str) -> None:
        """Raise an APIError built from Google's error envelope.

        Raises:
            APIError: Always
        """
        try:
            error = response.json().get("error", {})
        except (ValueError, AttributeError):
            error = {}
        message = (
            error.get("message") if isinstance(error, dict) else None
        ) or response.text[:200]

        logger.warning(
            f"Google Photos API returned {response.status_code} while {context}: {message}"
        )
        raise APIError(response.status_code, message, response.headers)
