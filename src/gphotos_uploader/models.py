"""Data models for the Google Photos uploader."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class Album:
    """A Google Photos album as returned by the Library API."""

    id: str
    title: str
    product_url: str | None = None
    media_items_count: int = 0
    is_writeable: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Album":
        """Build an album from its JSON representation."""
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            product_url=data.get("productUrl"),
            # the API encodes int64 counters as strings
            media_items_count=int(data.get("mediaItemsCount", 0)),
            is_writeable=bool(data.get("isWriteable", False)),
        )


@dataclass(frozen=True)
class MediaItem:
    """A media item created in the user's library."""

    id: str
    description: str | None = None
    product_url: str | None = None
    mime_type: str | None = None
    filename: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "MediaItem":
        """Build a media item from its JSON representation."""
        return cls(
            id=data["id"],
            description=data.get("description"),
            product_url=data.get("productUrl"),
            mime_type=data.get("mimeType"),
            filename=data.get("filename"),
        )


@dataclass(frozen=True)
class LocalAlbum:
    """A local directory of media files to upload into one album."""

    title: str
    files: list[Path]

    def __post_init__(self) -> None:
        """Validate album data."""
        if not self.title:
            raise ValueError("Album title cannot be empty")
        if not self.files:
            raise ValueError("Album must contain at least one file")


@dataclass(frozen=True)
class UploadResult:
    """Result of uploading one file."""

    path: Path
    album_title: str | None
    success: bool
    media_item_id: str | None = None
    error_message: str | None = None

    def __post_init__(self) -> None:
        """Validate upload result."""
        if self.success and not self.media_item_id:
            raise ValueError("Successful upload must have a media_item_id")
        if not self.success and not self.error_message:
            raise ValueError("Failed upload must have an error_message")
