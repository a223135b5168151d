"""White-box tests for uploader concurrency control."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from gphotos_uploader.client import PhotosClient
from gphotos_uploader.exceptions import UploadError, ValidationError
from gphotos_uploader.models import Album, LocalAlbum, MediaItem
from gphotos_uploader.uploader import PhotoUploader
from gphotos_uploader.utils import scan_albums


def make_client() -> PhotosClient:
    client = AsyncMock(spec=PhotosClient)
    client.get_or_create_album_by_name.side_effect = lambda title: Album(
        id=f"id_{title}", title=title
    )
    client.upload_file.side_effect = lambda path, album_id: MediaItem(
        id=f"media_{path.name}"
    )
    return client


@pytest.mark.asyncio
class TestPhotoUploader:
    """Test photo uploader functionality."""

    async def test_concurrent_upload_limit(self, temp_photos_dir: Path) -> None:
        """Test that concurrent uploads respect the semaphore limit."""
        max_concurrent = 0
        current_concurrent = 0
        lock = asyncio.Lock()

        async def mock_upload(path, album_id):
            nonlocal max_concurrent, current_concurrent
            async with lock:
                current_concurrent += 1
                max_concurrent = max(max_concurrent, current_concurrent)

            await asyncio.sleep(0.01)

            async with lock:
                current_concurrent -= 1

            return MediaItem(id="media_123")

        files = [temp_photos_dir / "album1" / f"photo{i}.jpg" for i in range(20)]
        for path in files:
            path.write_bytes(b"fake image")

        client = make_client()
        client.upload_file.side_effect = mock_upload
        uploader = PhotoUploader(client, max_concurrent_uploads=5)

        results = await uploader.upload_albums([LocalAlbum(title="Trip", files=files)])

        assert all(r.success for r in results)
        assert max_concurrent <= 5
        assert max_concurrent > 1

    async def test_upload_albums_success(self, temp_photos_dir: Path) -> None:
        """Test successful upload of multiple albums."""
        client = make_client()
        uploader = PhotoUploader(client)

        results = await uploader.upload_albums(scan_albums(temp_photos_dir))

        assert len(results) == 3
        assert all(r.success for r in results)
        assert {r.media_item_id for r in results} == {
            "media_photo1.jpg",
            "media_photo2.png",
            "media_clip3.mp4",
        }
        assert [c.args[0] for c in client.get_or_create_album_by_name.await_args_list] == [
            "album1",
            "album2",
        ]
        album_ids = {c.args[1] for c in client.upload_file.await_args_list}
        assert album_ids == {"id_album1", "id_album2"}

    async def test_album_resolution_failure(self, temp_photos_dir: Path) -> None:
        """Test that a failed album lookup fails every file of that album."""
        client = make_client()
        client.get_or_create_album_by_name.side_effect = ValidationError("bad name")
        uploader = PhotoUploader(client)

        results = await uploader.upload_albums(scan_albums(temp_photos_dir))

        assert len(results) == 3
        assert not any(r.success for r in results)
        assert all("Album resolution failed" in r.error_message for r in results)
        client.upload_file.assert_not_awaited()

    async def test_single_upload_failure(self, temp_photos_dir: Path) -> None:
        """Test that one failed file does not abort the others."""
        client = make_client()

        async def flaky_upload(path, album_id):
            if path.name == "photo2.png":
                raise UploadError("Failed adding media photo2.png")
            return MediaItem(id=f"media_{path.name}")

        client.upload_file.side_effect = flaky_upload
        uploader = PhotoUploader(client)

        results = await uploader.upload_albums(scan_albums(temp_photos_dir))

        failed = [r for r in results if not r.success]
        assert len(failed) == 1
        assert failed[0].path.name == "photo2.png"
        assert failed[0].album_title == "album1"
        assert "photo2.png" in failed[0].error_message

    async def test_dry_run(self, temp_photos_dir: Path) -> None:
        """Test that dry run makes no client calls."""
        client = make_client()
        uploader = PhotoUploader(client, dry_run=True)

        results = await uploader.upload_albums(scan_albums(temp_photos_dir))

        assert len(results) == 3
        assert all(r.success for r in results)
        client.get_or_create_album_by_name.assert_not_awaited()
        client.upload_file.assert_not_awaited()
