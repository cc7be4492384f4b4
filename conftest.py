"""Shared pytest fixtures."""

import io
import json
import logging

import pytest
from botocore.exceptions import ClientError


@pytest.fixture(autouse=True)
def reset_logging():
    """Commands replace the root handlers; restore them after each test."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)


@pytest.fixture
def storage_root(tmp_path):
    """Snapshot storage root holding net1/db1 with a few snapshots."""
    snapshot_dir = tmp_path / "ledger" / "net1" / "db1" / "snapshot"
    snapshot_dir.mkdir(parents=True)
    for number in (3, 10, 2):
        (snapshot_dir / f"{number}.avro").write_bytes(f"snapshot-{number}".encode())
    return tmp_path / "ledger"


@pytest.fixture
def fluree_config_file(tmp_path, storage_root):
    path = tmp_path / "db_property.json"
    path.write_text(json.dumps({
        "ip": "http://localhost:8090/",
        "network": "net1",
        "dbid": "db1",
        "storageDirectory": str(storage_root)
    }))
    return path


@pytest.fixture
def storj_config_file(tmp_path):
    path = tmp_path / "storj_config.json"
    path.write_text(json.dumps({
        "apikey": "access-key",
        "satellite": "https://gateway.example.test",
        "bucket": "snapshots",
        "uploadPath": "up/",
        "encryptionpassphrase": "secret-key"
    }))
    return path


def client_error(code: str = '500', operation: str = 'PutObject') -> ClientError:
    return ClientError({'Error': {'Code': code, 'Message': 'simulated failure'}}, operation)


class FakeS3Client:
    """In-memory stand-in for a boto3 S3 client.

    ``write_failures`` makes that many upload calls fail before writes
    succeed. ``tamper`` changes what reads return.
    """

    def __init__(self, write_failures: int = 0, bucket_error: ClientError = None,
                 tamper: bool = False):
        self.objects = {}
        self.write_failures = write_failures
        self.bucket_error = bucket_error
        self.tamper = tamper
        self.upload_calls = 0
        self.closed = False

    def head_bucket(self, Bucket):
        if self.bucket_error is not None:
            raise self.bucket_error
        return {}

    def upload_fileobj(self, Fileobj, Bucket, Key, Callback=None):
        self.upload_calls += 1
        data = Fileobj.read()
        if self.write_failures > 0:
            self.write_failures -= 1
            raise client_error()
        self.objects[(Bucket, Key)] = data
        if Callback:
            Callback(len(data))

    def head_object(self, Bucket, Key):
        if (Bucket, Key) not in self.objects:
            raise client_error('404', 'HeadObject')
        return {'ETag': '"etag-1"', 'ContentLength': len(self.objects[(Bucket, Key)])}

    def get_object(self, Bucket, Key):
        data = self.objects[(Bucket, Key)]
        if self.tamper:
            data = data + b"!"
        return {'Body': io.BytesIO(data)}

    def close(self):
        self.closed = True


@pytest.fixture
def fake_s3(monkeypatch):
    """Route boto3.client in the uploader to a FakeS3Client."""
    fake = FakeS3Client()
    calls = []

    def fake_client(service_name, **kwargs):
        calls.append((service_name, kwargs))
        return fake

    monkeypatch.setattr('storj_backup.uploader.boto3.client', fake_client)
    fake.client_calls = calls
    return fake
