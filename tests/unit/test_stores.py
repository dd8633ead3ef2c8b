"""Unit tests for local and S3 store implementations."""

import io
import json
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from signature_engine.config import Settings
from signature_engine.models.signing import AuditRecord, DocumentRect
from signature_engine.stores.abstractions import (
    ArtifactExists,
    SourceNotFound,
    StoreStatus,
    StoreUnavailable,
)
from signature_engine.stores.factory import create_stores
from signature_engine.stores.local import LocalArtifactStore, LocalDocumentSource
from signature_engine.stores.memory import InMemoryAuditStore
from signature_engine.stores.s3 import S3ArtifactStore, S3AuditStore, S3DocumentSource


def _client_error(code: str, operation: str = "GetObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def _record(minute: int) -> AuditRecord:
    return AuditRecord(
        document_id="sample",
        original_hash="a" * 64,
        signed_hash="b" * 64,
        signed_at=datetime(2024, 1, 15, 9, minute, tzinfo=UTC),
        target_rect=DocumentRect(x=1, y=2, width=3, height=4),
        artifact_filename=f"signed_sample_{minute}.pdf",
    )


class TestLocalDocumentSource:
    """Test cases for LocalDocumentSource."""

    def test_reads_pdf_by_id(self, documents_dir, blank_pdf):
        assert LocalDocumentSource(documents_dir).get("sample") == blank_pdf

    def test_missing_document(self, documents_dir):
        with pytest.raises(SourceNotFound):
            LocalDocumentSource(documents_dir).get("nope")

    def test_id_outside_directory(self, documents_dir, blank_pdf):
        """A neighbouring file is never served through a relative id."""
        (documents_dir.parent / "outside.pdf").write_bytes(blank_pdf)

        with pytest.raises(SourceNotFound):
            LocalDocumentSource(documents_dir).get("../outside")


class TestLocalArtifactStore:
    """Test cases for LocalArtifactStore."""

    def test_put_and_get(self, tmp_path):
        store = LocalArtifactStore(tmp_path / "signed", "http://localhost:3002/")

        location = store.put("signed_a.pdf", b"%PDF")

        assert location == "http://localhost:3002/signed/signed_a.pdf"
        assert store.get("signed_a.pdf") == b"%PDF"

    def test_write_once(self, tmp_path):
        store = LocalArtifactStore(tmp_path, "http://localhost:3002")
        store.put("signed_a.pdf", b"first")

        with pytest.raises(ArtifactExists):
            store.put("signed_a.pdf", b"second")
        assert store.get("signed_a.pdf") == b"first"

    @pytest.mark.parametrize("name", ["../escape.pdf", "sub/dir.pdf", ".."])
    def test_rejects_path_names(self, tmp_path, name):
        with pytest.raises(ValueError):
            LocalArtifactStore(tmp_path, "http://localhost:3002").put(name, b"x")

    def test_get_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LocalArtifactStore(tmp_path, "http://localhost:3002").get("absent.pdf")


class TestS3DocumentSource:
    """Test cases for S3DocumentSource."""

    def test_get(self):
        client = MagicMock()
        client.get_object.return_value = {"Body": io.BytesIO(b"%PDF-1.7")}

        assert S3DocumentSource(client, "bucket").get("sample") == b"%PDF-1.7"
        client.get_object.assert_called_once_with(Bucket="bucket", Key="documents/sample.pdf")

    def test_missing_key(self):
        client = MagicMock()
        client.get_object.side_effect = _client_error("NoSuchKey")

        with pytest.raises(SourceNotFound):
            S3DocumentSource(client, "bucket").get("sample")

    def test_access_denied(self):
        client = MagicMock()
        client.get_object.side_effect = _client_error("AccessDenied")

        with pytest.raises(StoreUnavailable):
            S3DocumentSource(client, "bucket").get("sample")

    def test_unreachable(self):
        client = MagicMock()
        client.get_object.side_effect = EndpointConnectionError(endpoint_url="http://s3")

        with pytest.raises(StoreUnavailable):
            S3DocumentSource(client, "bucket").get("sample")


class TestS3ArtifactStore:
    """Test cases for S3ArtifactStore."""

    def test_put_returns_presigned_url(self):
        client = MagicMock()
        client.generate_presigned_url.return_value = "https://s3/signed/x.pdf?sig"
        store = S3ArtifactStore(client, "bucket", presigned_url_expiration=60)

        assert store.put("x.pdf", b"%PDF") == "https://s3/signed/x.pdf?sig"

        kwargs = client.put_object.call_args.kwargs
        assert kwargs["Key"] == "signed/x.pdf"
        assert kwargs["IfNoneMatch"] == "*"
        assert kwargs["ContentType"] == "application/pdf"
        client.generate_presigned_url.assert_called_once_with(
            "get_object", Params={"Bucket": "bucket", "Key": "signed/x.pdf"}, ExpiresIn=60
        )

    def test_existing_key(self):
        client = MagicMock()
        client.put_object.side_effect = _client_error("PreconditionFailed", "PutObject")

        with pytest.raises(ArtifactExists):
            S3ArtifactStore(client, "bucket").put("x.pdf", b"%PDF")

    def test_upload_failure(self):
        client = MagicMock()
        client.put_object.side_effect = _client_error("InternalError", "PutObject")

        with pytest.raises(StoreUnavailable):
            S3ArtifactStore(client, "bucket").put("x.pdf", b"%PDF")

    def test_get_missing(self):
        client = MagicMock()
        client.get_object.side_effect = _client_error("NoSuchKey")

        with pytest.raises(FileNotFoundError):
            S3ArtifactStore(client, "bucket").get("x.pdf")


class TestS3AuditStore:
    """Test cases for S3AuditStore."""

    def test_connect_failure_leaves_store_disconnected(self):
        client = MagicMock()
        client.head_bucket.side_effect = EndpointConnectionError(endpoint_url="http://s3")
        store = S3AuditStore(client, "bucket")

        assert store.connect() is StoreStatus.DISCONNECTED
        with pytest.raises(StoreUnavailable):
            store.insert(_record(1))

    def test_insert_writes_json_under_document_prefix(self):
        client = MagicMock()
        store = S3AuditStore(client, "bucket")
        store.connect()

        store.insert(_record(1))

        kwargs = client.put_object.call_args.kwargs
        assert kwargs["Key"].startswith("audit/sample/20240115T090100")
        assert json.loads(kwargs["Body"])["signedHash"] == "b" * 64

    def test_find_newest_first(self):
        client = MagicMock()
        bodies = {
            f"audit/sample/{m}.json": _record(m).model_dump_json(by_alias=True).encode()
            for m in (1, 9, 4)
        }
        client.get_paginator.return_value.paginate.return_value = [
            {"Contents": [{"Key": key} for key in bodies]}
        ]
        client.get_object.side_effect = lambda Bucket, Key: {"Body": io.BytesIO(bodies[Key])}
        store = S3AuditStore(client, "bucket")
        store.connect()

        records = store.find("sample")

        assert [r.signed_at.minute for r in records] == [9, 4, 1]
        client.get_paginator.return_value.paginate.assert_called_once_with(
            Bucket="bucket", Prefix="audit/sample/"
        )

    def test_find_without_records(self):
        client = MagicMock()
        client.get_paginator.return_value.paginate.return_value = [{"KeyCount": 0}]
        store = S3AuditStore(client, "bucket")
        store.connect()

        assert store.find("sample") == []

    def test_insert_failure(self):
        client = MagicMock()
        client.put_object.side_effect = _client_error("SlowDown", "PutObject")
        store = S3AuditStore(client, "bucket")
        store.connect()

        with pytest.raises(StoreUnavailable):
            store.insert(_record(1))


class TestCreateStores:
    """Test cases for create_stores."""

    def test_local_defaults(self, tmp_path):
        settings = Settings(documents_dir=str(tmp_path / "docs"), signed_dir=str(tmp_path / "signed"))

        stores = create_stores(settings)

        assert isinstance(stores.document_source, LocalDocumentSource)
        assert isinstance(stores.artifact_store, LocalArtifactStore)
        assert isinstance(stores.audit_store, InMemoryAuditStore)

    @patch("signature_engine.stores.s3.boto3")
    def test_s3_backends(self, mock_boto3):
        settings = Settings(storage_backend="s3", audit_backend="s3", s3_bucket_name="bucket")

        stores = create_stores(settings)

        assert isinstance(stores.document_source, S3DocumentSource)
        assert isinstance(stores.artifact_store, S3ArtifactStore)
        assert isinstance(stores.audit_store, S3AuditStore)
        mock_boto3.client.assert_called_once()
        assert mock_boto3.client.call_args.args == ("s3",)

    def test_s3_requires_bucket(self):
        with pytest.raises(ValueError, match="S3_BUCKET_NAME"):
            create_stores(Settings(audit_backend="s3"))

    def test_invalid_backend_rejected(self):
        with pytest.raises(ValueError):
            Settings(storage_backend="ftp")
