"""Build the configured document source, artifact store and audit store."""

from typing import NamedTuple

from signature_engine.config import Settings
from signature_engine.stores.abstractions import IArtifactStore, IAuditStore, IDocumentSource
from signature_engine.stores.local import LocalArtifactStore, LocalDocumentSource
from signature_engine.stores.memory import InMemoryAuditStore
from signature_engine.stores.s3 import (
    S3ArtifactStore,
    S3AuditStore,
    S3DocumentSource,
    create_s3_client,
)


class Stores(NamedTuple):
    document_source: IDocumentSource
    artifact_store: IArtifactStore
    audit_store: IAuditStore


def create_stores(settings: Settings) -> Stores:
    """Instantiate stores for the configured backends.

    Local storage reads sources from ``documents_dir`` and writes artifacts to
    ``signed_dir``; the S3 backend uses one bucket with separate prefixes.
    The audit store is not connected here; call ``connect()`` at startup.
    """
    needs_s3 = settings.storage_backend == "s3" or settings.audit_backend == "s3"
    s3_client = None
    if needs_s3:
        if not settings.s3_bucket_name:
            raise ValueError("S3_BUCKET_NAME must be set when an S3 backend is selected")
        s3_client = create_s3_client(settings)

    if settings.storage_backend == "s3":
        document_source: IDocumentSource = S3DocumentSource(
            s3_client, settings.s3_bucket_name, settings.s3_source_prefix
        )
        artifact_store: IArtifactStore = S3ArtifactStore(
            s3_client,
            settings.s3_bucket_name,
            settings.s3_artifact_prefix,
            settings.s3_presigned_url_expiration,
        )
    else:
        document_source = LocalDocumentSource(settings.get_documents_dir())
        artifact_store = LocalArtifactStore(settings.get_signed_dir(), settings.public_base_url)

    if settings.audit_backend == "s3":
        audit_store: IAuditStore = S3AuditStore(
            s3_client, settings.s3_bucket_name, settings.s3_audit_prefix
        )
    else:
        audit_store = InMemoryAuditStore()

    return Stores(document_source, artifact_store, audit_store)
