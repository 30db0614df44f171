"""Exception hierarchy for user storage operations."""

from typing import Dict, Optional


class SpaceStorageError(Exception):
    """Base exception for all storage errors raised by this package."""

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnauthenticatedError(SpaceStorageError):
    """Raised when the user has no storage credentials."""

    def __init__(self) -> None:
        super().__init__("User is not authenticated with the storage hub")


class DirEntryNotFoundError(SpaceStorageError):
    """Raised when a path does not exist in the requested bucket."""

    def __init__(self, path: str, bucket: str) -> None:
        super().__init__(
            f"Directory entry not found: {path} in bucket {bucket}",
            {"path": path, "bucket": bucket},
        )
        self.path = path
        self.bucket = bucket


class BucketsApiError(SpaceStorageError):
    """Raised by the hub client when the hub answers with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        details = {"status_code": str(status_code)} if status_code is not None else {}
        super().__init__(message, details)
        self.status_code = status_code
