"""Google Photos Uploader - Upload media files into Google Photos albums."""

__version__ = "0.1.0"

from gphotos_uploader.client import PhotosClient
from gphotos_uploader.exceptions import (
    APIError,
    GooglePhotosError,
    ProtocolViolationError,
    RateLimitError,
    RetryExhaustedError,
    TransientError,
    TransportFailureError,
    UploadError,
    ValidationError,
)
from gphotos_uploader.models import Album, LocalAlbum, MediaItem, UploadResult
from gphotos_uploader.retry import RetryAfter, StopWithError, Success, retry
from gphotos_uploader.service import PhotosLibraryService
from gphotos_uploader.uploader import PhotoUploader
from gphotos_uploader.utils import scan_albums

__all__ = [
    "PhotosClient",
    "PhotosLibraryService",
    "PhotoUploader",
    "Album",
    "LocalAlbum",
    "MediaItem",
    "UploadResult",
    "RetryAfter",
    "StopWithError",
    "Success",
    "retry",
    "scan_albums",
    "GooglePhotosError",
    "APIError",
    "ProtocolViolationError",
    "RateLimitError",
    "RetryExhaustedError",
    "TransientError",
    "TransportFailureError",
    "UploadError",
    "ValidationError",
]
