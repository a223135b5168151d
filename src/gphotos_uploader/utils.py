"""Utility functions for the Google Photos uploader."""

import logging
from pathlib import Path

from gphotos_uploader.models import LocalAlbum

logger = logging.getLogger(__name__)

# Extensions accepted by the Library API upload endpoint
PHOTO_EXTENSIONS = {
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".heic", ".heif",
    ".tif", ".tiff", ".ico", ".avif",
}
VIDEO_EXTENSIONS = {
    ".mp4", ".mov", ".m4v", ".3gp", ".3g2", ".avi", ".mkv", ".mpg",
    ".mpeg", ".mts", ".m2ts", ".wmv", ".asf",
}
MEDIA_EXTENSIONS = PHOTO_EXTENSIONS | VIDEO_EXTENSIONS


def is_media_file(path: Path) -> bool:
    """Check if a file is a supported photo or video.

    Args:
        path: Path to the file to check

    Returns:
        True if the file is a supported media format, False otherwise
    """
    return path.is_file() and path.suffix.lower() in MEDIA_EXTENSIONS


def scan_albums(root_dir: Path) -> list[LocalAlbum]:
    """Scan root directory for albums.

    Each subdirectory in the root is treated as an album, with its name
    as the album title. All media files in the subdirectory are collected
    for that album.

    Args:
        root_dir: Root directory to scan

    Returns:
        List of LocalAlbum objects

    Raises:
        FileNotFoundError: If root_dir doesn't exist
        NotADirectoryError: If root_dir is not a directory
    """
    if not root_dir.exists():
        raise FileNotFoundError(f"Root directory does not exist: {root_dir}")

    if not root_dir.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {root_dir}")

    albums: list[LocalAlbum] = []

    for subdir in sorted(root_dir.iterdir()):
        if not subdir.is_dir():
            logger.debug(f"Skipping non-directory: {subdir}")
            continue

        files = [path for path in sorted(subdir.iterdir()) if is_media_file(path)]

        if files:
            album = LocalAlbum(title=subdir.name, files=files)
            albums.append(album)
            logger.info(f"Found album '{album.title}' with {len(album.files)} file(s)")
        else:
            logger.warning(f"Skipping album directory without media: {subdir}")

    logger.info(f"Found {len(albums)} album(s) with media")
    return albums
