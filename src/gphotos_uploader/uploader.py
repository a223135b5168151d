"""Batch uploader with concurrency control."""

import asyncio
import logging
from pathlib import Path

from gphotos_uploader.client import PhotosClient
from gphotos_uploader.models import LocalAlbum, UploadResult

logger = logging.getLogger(__name__)


class PhotoUploader:
    """Manages concurrent uploads of local albums to Google Photos."""

    def __init__(
        self,
        client: PhotosClient,
        max_concurrent_uploads: int = 10,
        dry_run: bool = False,
    ) -> None:
        """Initialize photo uploader.

        Args:
            client: Google Photos client instance
            max_concurrent_uploads: Maximum number of concurrent uploads
            dry_run: If True, simulate uploads without making API calls
        """
        self.client = client
        self.max_concurrent_uploads = max_concurrent_uploads
        self.dry_run = dry_run
        self._semaphore = asyncio.Semaphore(max_concurrent_uploads)

    async def upload_albums(self, albums: list[LocalAlbum]) -> list[UploadResult]:
        """Upload all albums with their files.

        Args:
            albums: List of albums to upload

        Returns:
            List of upload results for all files
        """
        results: list[UploadResult] = []

        for album in albums:
            logger.info(
                f"Processing album '{album.title}' with {len(album.files)} file(s)"
            )
            results.extend(await self._upload_album(album))

        return results

    async def _upload_album(self, album: LocalAlbum) -> list[UploadResult]:
        if self.dry_run:
            logger.info(f"[DRY RUN] Would find or create album: {album.title}")
            album_id = "dry_run_album_id"
        else:
            try:
                remote = await self.client.get_or_create_album_by_name(album.title)
                album_id = remote.id
            except Exception as e:
                logger.error(f"Failed to resolve album '{album.title}': {e}")
                return [
                    UploadResult(
                        path=path,
                        album_title=album.title,
                        success=False,
                        error_message=f"Album resolution failed: {e}",
                    )
                    for path in album.files
                ]

        tasks = [
            self._upload_file_with_semaphore(album_id, album.title, path)
            for path in album.files
        ]
        return list(await asyncio.gather(*tasks))

    async def _upload_file_with_semaphore(
        self, album_id: str, album_title: str, path: Path
    ) -> UploadResult:
        async with self._semaphore:
            return await self._upload_file(album_id, album_title, path)

    async def _upload_file(
        self, album_id: str, album_title: str, path: Path
    ) -> UploadResult:
        """Upload a single file, capturing any failure in the result."""
        if self.dry_run:
            logger.info(f"[DRY RUN] Would upload {path.name} to album '{album_title}'")
            return UploadResult(
                path=path,
                album_title=album_title,
                success=True,
                media_item_id="dry_run_media_item_id",
            )

        try:
            media_item = await self.client.upload_file(path, album_id)
            return UploadResult(
                path=path,
                album_title=album_title,
                success=True,
                media_item_id=media_item.id,
            )
        except Exception as e:
            logger.error(f"Failed to upload {path.name}: {e}")
            return UploadResult(
                path=path,
                album_title=album_title,
                success=False,
                error_message=str(e),
            )
