"""Exceptions raised by the Google Photos uploader."""

from typing import Mapping


class GooglePhotosError(Exception):
    """Base exception for Google Photos errors."""

    pass


class TransportFailureError(GooglePhotosError):
    """Exception raised when the request never produced a response."""

    pass


class APIError(GooglePhotosError):
    """Exception raised for non-2xx responses from the Photos Library API."""

    def __init__(
        self,
        status_code: int,
        message: str,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(f"Google Photos API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.headers = headers or {}


class RateLimitError(GooglePhotosError):
    """Exception raised when the service answers 429."""

    def __init__(self, message: str, retry_after: int = 0) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class TransientError(GooglePhotosError):
    """Exception raised for unclassified errors that are retried blindly."""

    pass


class ValidationError(GooglePhotosError, ValueError):
    """Exception raised for invalid arguments, before any network call."""

    pass


class ProtocolViolationError(GooglePhotosError):
    """Exception raised when a response does not have the expected shape."""

    pass


class RetryExhaustedError(GooglePhotosError):
    """Exception raised when retries ran out without a recorded cause."""

    pass


class UploadError(GooglePhotosError):
    """Exception raised when uploading a file fails; chained to the cause."""

    pass
