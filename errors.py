"""Exceptions raised by the Storj-Fluree connector."""

from typing import Optional


class ConnectorError(Exception):
    """Base class for all connector errors."""


class ConfigLoadError(ConnectorError):
    """Configuration file is missing or unreadable."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Could not load configuration from {path}: {reason}")


class DirectoryNotFoundError(ConnectorError):
    """Snapshot directory does not exist or cannot be listed."""

    def __init__(self, directory: str, reason: str = "directory not found"):
        self.directory = directory
        super().__init__(f"Cannot list snapshot directory {directory}: {reason}")


class SnapshotNotFoundError(ConnectorError):
    """Requested snapshot is not in the snapshot catalog."""

    def __init__(self, snapshot_name: str, database: str):
        self.snapshot_name = snapshot_name
        self.database = database
        super().__init__(
            f"Snapshot provided not in snapshot list for {database}. Provided: {snapshot_name}"
        )


class NetworkError(ConnectorError):
    """Remote endpoint could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class UploadError(ConnectorError):
    """Object write failed after every allowed attempt."""

    def __init__(self, object_name: str, attempts: int, cause: Exception):
        self.object_name = object_name
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Could not upload {object_name} after {attempts} attempt(s): {cause}")


class VerificationMismatchError(ConnectorError):
    """Downloaded object differs from the uploaded payload."""

    def __init__(self, object_name: str, uploaded_size: int, downloaded_size: int):
        self.object_name = object_name
        self.uploaded_size = uploaded_size
        self.downloaded_size = downloaded_size
        super().__init__(
            f"Uploaded data != downloaded data for {object_name} "
            f"({uploaded_size} bytes uploaded, {downloaded_size} bytes downloaded)"
        )
