"""Storj Backup Module for the Storj-Fluree connector.

Uploads Fluree snapshots to a Storj bucket through the S3-compatible gateway.
"""

from .retry import RetryPolicy
from .uploader import (
    StorjSession,
    StorjUploader,
    UploadResult,
    build_object_name,
    upload_data,
)

__all__ = [
    'RetryPolicy',
    'StorjSession',
    'StorjUploader',
    'UploadResult',
    'build_object_name',
    'upload_data',
]
