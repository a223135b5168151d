"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Awaitable, Callable

import httpx
import pytest

from gphotos_uploader.client import PhotosClient


@pytest.fixture
def temp_photos_dir(tmp_path: Path) -> Path:
    """Create a temporary directory structure with test media.

    Structure:
        temp_dir/
            album1/
                photo1.jpg
                photo2.png
            album2/
                clip3.mp4
            empty_album/
            not_a_dir.txt
    """
    album1 = tmp_path / "album1"
    album1.mkdir()
    (album1 / "photo1.jpg").write_bytes(b"fake jpg content")
    (album1 / "photo2.png").write_bytes(b"fake png content")

    album2 = tmp_path / "album2"
    album2.mkdir()
    (album2 / "clip3.mp4").write_bytes(b"fake mp4 content")

    empty_album = tmp_path / "empty_album"
    empty_album.mkdir()

    (tmp_path / "not_a_dir.txt").write_text("not a directory")

    return tmp_path


@pytest.fixture
def access_token() -> str:
    """Return a fake access token for testing."""
    return "test_access_token_123"


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested by the retry engine, in order."""
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]) -> Callable[[float], Awaitable[None]]:
    """Awaitable sleep that records the delay instead of waiting."""

    async def sleep(seconds: float) -> None:
        sleeps.append(float(seconds))

    return sleep


@pytest.fixture
def make_client(fake_sleep: Callable[[float], Awaitable[None]]):
    """Build a PhotosClient whose transport is served by ``handler``."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> PhotosClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return PhotosClient(http_client, sleep=fake_sleep)

    return factory
