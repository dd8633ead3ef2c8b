"""S3-backed document source, artifact store and audit store."""

import json
import uuid

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from signature_engine.config import Settings
from signature_engine.models.signing import AuditRecord
from signature_engine.stores.abstractions import (
    ArtifactExists,
    IArtifactStore,
    IAuditStore,
    IDocumentSource,
    SourceNotFound,
    StoreStatus,
    StoreUnavailable,
)
from signature_engine.utils.logger import component_logger

logger = component_logger("stores")

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def create_s3_client(settings: Settings):
    """Build a boto3 client with bounded timeouts and no automatic retries."""
    kwargs = {
        "region_name": settings.s3_region,
        "aws_access_key_id": settings.s3_access_key,
        "aws_secret_access_key": settings.s3_secret_key,
        "config": Config(
            connect_timeout=settings.store_timeout_seconds,
            read_timeout=settings.store_timeout_seconds,
            retries={"max_attempts": 1, "mode": "standard"},
        ),
    }
    if settings.s3_endpoint_url:
        kwargs["endpoint_url"] = settings.s3_endpoint_url
    return boto3.client("s3", **kwargs)


class S3DocumentSource(IDocumentSource):
    """Reads ``<prefix><document_id>.pdf`` from a bucket."""

    def __init__(self, s3_client, bucket_name: str, prefix: str = "documents/"):
        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.prefix = prefix

    def get(self, document_id: str) -> bytes:
        key = f"{self.prefix}{document_id}.pdf"
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
            content: bytes = response["Body"].read()
            logger.info(f"Loaded source document {key} from S3")
            return content
        except ClientError as e:
            if _error_code(e) in _MISSING_KEY_CODES:
                raise SourceNotFound(f"Source document '{document_id}' not found") from e
            logger.error(f"Failed to download {key} from S3: {e}")
            raise StoreUnavailable(f"S3 download failed: {e}") from e
        except BotoCoreError as e:
            logger.error(f"S3 unreachable while loading {key}: {e}")
            raise StoreUnavailable(f"S3 download failed: {e}") from e


class S3ArtifactStore(IArtifactStore):
    """Uploads signed PDFs and hands out pre-signed download URLs."""

    def __init__(
        self,
        s3_client,
        bucket_name: str,
        prefix: str = "signed/",
        presigned_url_expiration: int = 3600,
    ):
        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.prefix = prefix
        self.presigned_url_expiration = presigned_url_expiration

    def put(self, name: str, content: bytes) -> str:
        key = f"{self.prefix}{name}"
        kwargs = {
            "Bucket": self.bucket_name,
            "Key": key,
            "Body": content,
            "ContentType": "application/pdf",
            # conditional write: refuse to overwrite an existing artifact
            "IfNoneMatch": "*",
        }
        try:
            self.s3_client.put_object(**kwargs)
        except ClientError as e:
            if _error_code(e) in ("PreconditionFailed", "412"):
                raise ArtifactExists(f"Artifact {name} already exists") from e
            logger.error(f"Failed to upload {key} to S3: {e}")
            raise StoreUnavailable(f"S3 upload failed: {e}") from e
        except BotoCoreError as e:
            logger.error(f"S3 unreachable while uploading {key}: {e}")
            raise StoreUnavailable(f"S3 upload failed: {e}") from e

        logger.info(f"Successfully uploaded {key} to S3 bucket {self.bucket_name}")
        return self.generate_presigned_url(name)

    def get(self, name: str) -> bytes:
        key = f"{self.prefix}{name}"
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
            return response["Body"].read()
        except ClientError as e:
            if _error_code(e) in _MISSING_KEY_CODES:
                raise FileNotFoundError(name) from e
            logger.error(f"Failed to download {key} from S3: {e}")
            raise StoreUnavailable(f"S3 download failed: {e}") from e
        except BotoCoreError as e:
            raise StoreUnavailable(f"S3 download failed: {e}") from e

    def generate_presigned_url(self, name: str) -> str:
        """Generate a pre-signed URL for a stored artifact."""
        key = f"{self.prefix}{name}"
        try:
            url: str = self.s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=self.presigned_url_expiration,
            )
            return url
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to generate pre-signed URL for {key}: {e}")
            raise StoreUnavailable(f"Failed to generate pre-signed URL: {e}") from e


class S3AuditStore(IAuditStore):
    """One JSON object per audit record under ``<prefix><document_id>/``."""

    def __init__(self, s3_client, bucket_name: str, prefix: str = "audit/"):
        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.prefix = prefix
        self._status = StoreStatus.DISCONNECTED

    def connect(self) -> StoreStatus:
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            self._status = StoreStatus.CONNECTED
            logger.info(f"Connected to audit bucket {self.bucket_name}")
        except (ClientError, BotoCoreError) as e:
            self._status = StoreStatus.DISCONNECTED
            logger.error(f"Audit store connection failed: {e}")
        return self._status

    @property
    def status(self) -> StoreStatus:
        return self._status

    def insert(self, record: AuditRecord) -> None:
        self._ensure_connected()
        stamp = record.signed_at.strftime("%Y%m%dT%H%M%S%fZ")
        key = f"{self.prefix}{record.document_id}/{stamp}_{uuid.uuid4().hex}.json"
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=record.model_dump_json(by_alias=True).encode("utf-8"),
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to write audit record {key}: {e}")
            raise StoreUnavailable(f"Audit write failed: {e}") from e

    def find(self, document_id: str) -> list[AuditRecord]:
        self._ensure_connected()
        records: list[AuditRecord] = []
        try:
            paginator = self.s3_client.get_paginator("list_objects_v2")
            pages = paginator.paginate(
                Bucket=self.bucket_name, Prefix=f"{self.prefix}{document_id}/"
            )
            for page in pages:
                for obj in page.get("Contents", []):
                    response = self.s3_client.get_object(Bucket=self.bucket_name, Key=obj["Key"])
                    payload = json.loads(response["Body"].read())
                    records.append(AuditRecord.model_validate(payload))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to read audit records for {document_id}: {e}")
            raise StoreUnavailable(f"Audit query failed: {e}") from e

        return sorted(records, key=lambda r: r.signed_at, reverse=True)

    def _ensure_connected(self) -> None:
        if self._status is not StoreStatus.CONNECTED:
            raise StoreUnavailable("Audit store is not connected")
