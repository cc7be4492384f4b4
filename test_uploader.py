"""Tests for the Storj uploader and its retry policy."""

from unittest.mock import Mock

import pytest
from botocore.exceptions import EndpointConnectionError

from conftest import client_error
from config import StorjConfig
from errors import NetworkError, UploadError, VerificationMismatchError
from storj_backup import (
    RetryPolicy,
    StorjSession,
    StorjUploader,
    build_object_name,
    upload_data,
)

CONFIG = StorjConfig(
    api_key="access-key",
    satellite="https://gateway.example.test",
    bucket="snapshots",
    upload_path="up/",
    encryption_passphrase="secret-key"
)


def test_object_name_composition():
    assert build_object_name("up/", "n/d", "5.avro") == "up/n/d_5.avro"
    assert build_object_name("", "testdb", "test.json") == "testdb_test.json"
    # No separator is inserted after the upload path
    assert build_object_name("backups", "n/d", "5.avro") == "backupsn/d_5.avro"


class TestRetryPolicy:

    def test_default_allows_one_retry(self):
        assert RetryPolicy().max_attempts == 2
        assert RetryPolicy().backoff_seconds == 0.0

    def test_success_first_time(self):
        operation = Mock(return_value="ok")
        assert RetryPolicy().run(operation) == ("ok", 1)
        assert operation.call_count == 1

    def test_single_failure_is_masked(self):
        operation = Mock(side_effect=[client_error(), "ok"])
        assert RetryPolicy().run(operation) == ("ok", 2)

    def test_gives_up_after_max_attempts(self):
        operation = Mock(side_effect=client_error())
        with pytest.raises(Exception):
            RetryPolicy(max_attempts=3).run(operation)
        assert operation.call_count == 3

    def test_non_transient_errors_are_not_retried(self):
        operation = Mock(side_effect=KeyError("bug"))
        with pytest.raises(KeyError):
            RetryPolicy().run(operation)
        assert operation.call_count == 1

    def test_backoff_sleeps_between_attempts(self, monkeypatch):
        sleeps = []
        monkeypatch.setattr('storj_backup.retry.time.sleep', sleeps.append)
        operation = Mock(side_effect=[client_error(), client_error(), "ok"])

        RetryPolicy(max_attempts=3, backoff_seconds=0.5).run(operation)

        assert sleeps == [0.5, 0.5]

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)
        with pytest.raises(ValueError):
            RetryPolicy(backoff_seconds=-1)


class TestStorjSession:

    def test_opens_client_and_bucket(self, fake_s3):
        with StorjSession(CONFIG, dial_timeout=7) as session:
            assert session.client is fake_s3

        service_name, kwargs = fake_s3.client_calls[0]
        assert service_name == 's3'
        assert kwargs['endpoint_url'] == "https://gateway.example.test"
        assert kwargs['aws_access_key_id'] == "access-key"
        assert kwargs['aws_secret_access_key'] == "secret-key"
        assert kwargs['config'].connect_timeout == 7
        assert fake_s3.closed

    def test_satellite_without_scheme_uses_https(self):
        config = CONFIG.model_copy(update={'satellite': "gateway.example.test:7777"})
        assert StorjSession(config).endpoint_url == "https://gateway.example.test:7777"

    def test_missing_satellite(self):
        with pytest.raises(NetworkError, match="satellite"):
            StorjSession(CONFIG.model_copy(update={'satellite': ""})).open()

    def test_bucket_not_found(self, fake_s3):
        fake_s3.bucket_error = client_error('404', 'HeadBucket')
        with pytest.raises(NetworkError, match="Bucket not found"):
            with StorjSession(CONFIG):
                pass
        assert fake_s3.closed

    def test_access_denied(self, fake_s3):
        fake_s3.bucket_error = client_error('403', 'HeadBucket')
        with pytest.raises(NetworkError, match="Access denied"):
            StorjSession(CONFIG).open()
        assert fake_s3.closed

    def test_unreachable_gateway(self, fake_s3):
        fake_s3.bucket_error = EndpointConnectionError(endpoint_url="https://gateway.example.test")
        with pytest.raises(NetworkError):
            StorjSession(CONFIG).open()
        assert fake_s3.closed

    def test_closed_on_error_inside_block(self, fake_s3):
        with pytest.raises(RuntimeError):
            with StorjSession(CONFIG):
                raise RuntimeError("boom")
        assert fake_s3.closed


class TestStorjUploader:

    def test_upload_writes_object(self, fake_s3):
        with StorjSession(CONFIG) as session:
            result = StorjUploader(session).upload(b"payload", "up/n/d_5.avro")

        assert fake_s3.objects[("snapshots", "up/n/d_5.avro")] == b"payload"
        assert result.object_name == "up/n/d_5.avro"
        assert result.bucket == "snapshots"
        assert result.size == 7
        assert result.attempts == 1
        assert result.etag == "etag-1"
        assert not result.verified

    def test_verified_round_trip(self, fake_s3):
        with StorjSession(CONFIG) as session:
            result = StorjUploader(session, verify=True).upload(b"\x00\x01avro", "obj")
        assert result.verified

    def test_single_failure_then_success(self, fake_s3):
        fake_s3.write_failures = 1
        with StorjSession(CONFIG) as session:
            result = StorjUploader(session).upload(b"payload", "obj")

        assert result.attempts == 2
        assert fake_s3.upload_calls == 2
        assert fake_s3.objects[("snapshots", "obj")] == b"payload"

    def test_two_failures_raise_upload_error(self, fake_s3):
        fake_s3.write_failures = 2
        with StorjSession(CONFIG) as session:
            with pytest.raises(UploadError) as exc_info:
                StorjUploader(session).upload(b"payload", "obj")

        assert exc_info.value.attempts == 2
        assert exc_info.value.object_name == "obj"
        assert fake_s3.upload_calls == 2

    def test_custom_policy_bound(self, fake_s3):
        fake_s3.write_failures = 2
        with StorjSession(CONFIG) as session:
            result = StorjUploader(session, retry_policy=RetryPolicy(max_attempts=3)).upload(b"x", "obj")
        assert result.attempts == 3

    def test_verification_mismatch(self, fake_s3):
        fake_s3.tamper = True
        with StorjSession(CONFIG) as session:
            with pytest.raises(VerificationMismatchError) as exc_info:
                StorjUploader(session, verify=True).upload(b"payload", "obj")
        assert exc_info.value.uploaded_size == 7
        assert exc_info.value.downloaded_size == 8

    def test_verification_saves_download(self, fake_s3, tmp_path):
        with StorjSession(CONFIG) as session:
            StorjUploader(session, verify=True, download_dir=tmp_path).upload(b"payload", "up/n/d_5.avro")
        assert (tmp_path / "downloadeddata_d_5.avro").read_bytes() == b"payload"


def test_upload_data_names_object_and_closes_session(fake_s3):
    result = upload_data(CONFIG, b"snapshot", "5.avro", "n/d")

    assert result.object_name == "up/n/d_5.avro"
    assert fake_s3.objects[("snapshots", "up/n/d_5.avro")] == b"snapshot"
    assert fake_s3.closed


def test_upload_data_closes_session_on_failure(fake_s3):
    fake_s3.write_failures = 5
    with pytest.raises(UploadError):
        upload_data(CONFIG, b"snapshot", "5.avro", "n/d")
    assert fake_s3.closed
