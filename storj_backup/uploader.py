"""Storj upload - places a single object in a Storj bucket.

Storj is reached through its S3-compatible gateway: the configured satellite
is the gateway endpoint, the API key is the access key and the encryption
passphrase is the secret key the gateway uses to derive the content key.
"""

import io
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from tqdm import tqdm

from config import StorjConfig
from errors import NetworkError, UploadError, VerificationMismatchError
from storj_backup.retry import RetryPolicy

logger = logging.getLogger(__name__)

USER_AGENT = "fluree"
GATEWAY_REGION = "us-1"
DIAL_TIMEOUT_SECONDS = 10


def format_size(bytes_size: int) -> str:
    """Format bytes as human-readable size."""
    if bytes_size == 0:
        return "0 B"
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_size < 1024.0:
            return f"{bytes_size:.2f} {unit}"
        bytes_size /= 1024.0
    return f"{bytes_size:.2f} PB"


def build_object_name(upload_path: str, database_name: str, snapshot_name: str) -> str:
    """Object name in the bucket: ``{uploadPath}{database}_{snapshot}``.

    Existing objects were stored under this exact layout, so no separator is
    added after ``upload_path``.
    """
    return f"{upload_path}{database_name}_{snapshot_name}"


@dataclass
class UploadResult:
    """Result of a single object upload."""
    bucket: str
    object_name: str
    size: int
    attempts: int
    etag: Optional[str] = None
    verified: bool = False
    upload_time: float = 0.0


class StorjSession:
    """Open connection to one Storj bucket.

    Use as a context manager; the client is closed on every exit path.
    """

    def __init__(self, config: StorjConfig, dial_timeout: int = DIAL_TIMEOUT_SECONDS):
        self.config = config
        self.dial_timeout = dial_timeout
        self.client = None

    @property
    def bucket(self) -> str:
        return self.config.bucket

    @property
    def endpoint_url(self) -> str:
        satellite = self.config.satellite
        if "://" not in satellite:
            return f"https://{satellite}"
        return satellite

    def __enter__(self) -> "StorjSession":
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
        return False

    def open(self):
        """Create the S3 client and open the bucket."""
        if not self.config.satellite:
            raise NetworkError("No satellite address configured")

        # SDK retries are off so RetryPolicy is the only retry
        boto_config = BotoConfig(
            region_name=GATEWAY_REGION,
            connect_timeout=self.dial_timeout,
            user_agent_extra=USER_AGENT,
            retries={'total_max_attempts': 1, 'mode': 'standard'}
        )

        try:
            self.client = boto3.client(
                's3',
                endpoint_url=self.endpoint_url,
                aws_access_key_id=self.config.api_key.get_secret_value(),
                aws_secret_access_key=self.config.encryption_passphrase.get_secret_value(),
                config=boto_config
            )
        except (BotoCoreError, ValueError) as e:
            raise NetworkError(f"Could not create Storj client for {self.endpoint_url}: {e}") from e

        logger.debug(f"Opened Storj client for {self.endpoint_url}")

        try:
            self.client.head_bucket(Bucket=self.bucket)
        except ClientError as e:
            self.close()
            error_code = e.response['Error']['Code']
            if error_code == '404':
                raise NetworkError(f"Bucket not found: {self.bucket}") from e
            elif error_code == '403':
                raise NetworkError(f"Access denied to bucket: {self.bucket}") from e
            else:
                raise NetworkError(f"Could not open bucket {self.bucket}: {e}") from e
        except BotoCoreError as e:
            self.close()
            raise NetworkError(f"Could not reach {self.endpoint_url}: {e}") from e

        logger.debug(f"Opened bucket: {self.bucket}")

    def close(self):
        if self.client is not None:
            self.client.close()
            self.client = None
            logger.debug("Closed Storj client")


class StorjUploader:
    """Uploads payloads as single objects through an open StorjSession."""

    def __init__(self, session: StorjSession, retry_policy: Optional[RetryPolicy] = None,
                 verify: bool = False, show_progress: bool = False,
                 download_dir: Optional[Path] = None):
        self.session = session
        self.retry_policy = retry_policy or RetryPolicy()
        self.verify = verify
        self.show_progress = show_progress
        self.download_dir = download_dir

    def upload(self, payload: bytes, object_name: str) -> UploadResult:
        """Write ``payload`` under ``object_name``.

        A failed write is repeated per the retry policy. Retries are not
        idempotent: a partial first write is left to the backend to resolve.

        Raises:
            UploadError: If the write fails on every attempt
            VerificationMismatchError: If verification is on and the
                object read back differs from ``payload``
        """
        bucket = self.session.bucket
        logger.info(f"Uploading {format_size(len(payload))} to bucket {bucket}: {object_name}")

        start_time = datetime.now()
        try:
            etag, attempts = self.retry_policy.run(
                lambda: self._write(payload, object_name),
                description=f"Upload of {object_name}"
            )
        except self.retry_policy.retry_on as e:
            raise UploadError(object_name, self.retry_policy.max_attempts, e) from e
        upload_time = (datetime.now() - start_time).total_seconds()

        logger.info(f"Upload complete: {object_name} ({attempts} attempt(s), {upload_time:.1f}s)")

        result = UploadResult(
            bucket=bucket,
            object_name=object_name,
            size=len(payload),
            attempts=attempts,
            etag=etag,
            upload_time=upload_time
        )

        if self.verify:
            self.verify_object(payload, object_name)
            result.verified = True

        return result

    def _write(self, payload: bytes, object_name: str) -> Optional[str]:
        """One write attempt; returns the ETag once the object is visible."""
        client = self.session.client
        bucket = self.session.bucket

        with tqdm(total=len(payload), unit='B', unit_scale=True,
                  desc="  Uploading", leave=False, disable=not self.show_progress) as pbar:
            client.upload_fileobj(
                io.BytesIO(payload),
                bucket,
                object_name,
                Callback=pbar.update
            )

        response = client.head_object(Bucket=bucket, Key=object_name)
        etag = response.get('ETag')
        return etag.strip('"') if etag else None

    def verify_object(self, payload: bytes, object_name: str) -> bytes:
        """Read the object back and compare it with ``payload``."""
        logger.info(f"Downloading {object_name} from bucket {self.session.bucket} for verification")

        try:
            response = self.session.client.get_object(Bucket=self.session.bucket, Key=object_name)
            received = response['Body'].read()
        except (ClientError, BotoCoreError) as e:
            raise NetworkError(f"Could not read back {object_name}: {e}") from e

        if self.download_dir is not None:
            self._save_download(received, object_name)

        if received != payload:
            raise VerificationMismatchError(object_name, len(payload), len(received))

        logger.info(f"Verified {object_name}: downloaded data matches upload")
        return received

    def _save_download(self, received: bytes, object_name: str):
        download_dir = Path(self.download_dir)
        download_path = download_dir / f"downloadeddata_{Path(object_name).name}"
        try:
            download_dir.mkdir(parents=True, exist_ok=True)
            download_path.write_bytes(received)
            logger.debug(f"Saved downloaded copy to {download_path}")
        except OSError as e:
            logger.warning(f"Could not save downloaded copy to {download_path}: {e}")


def upload_data(config: StorjConfig, payload: bytes, snapshot_name: str, database_name: str,
                verify: bool = False, show_progress: bool = False,
                download_dir: Optional[Path] = None,
                retry_policy: Optional[RetryPolicy] = None) -> UploadResult:
    """Connect to the configured bucket and upload ``payload``.

    The object is named ``{uploadPath}{database_name}_{snapshot_name}``.
    """
    object_name = build_object_name(config.upload_path, database_name, snapshot_name)

    with StorjSession(config) as session:
        uploader = StorjUploader(
            session,
            retry_policy=retry_policy,
            verify=verify,
            show_progress=show_progress,
            download_dir=download_dir
        )
        return uploader.upload(payload, object_name)
