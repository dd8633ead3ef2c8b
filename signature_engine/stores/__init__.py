"""Storage layer - collaborator interfaces and their implementations."""

from signature_engine.stores.abstractions import (
    ArtifactExists,
    IArtifactStore,
    IAuditStore,
    IDocumentSource,
    SourceNotFound,
    StoreError,
    StoreStatus,
    StoreUnavailable,
)
from signature_engine.stores.local import LocalArtifactStore, LocalDocumentSource
from signature_engine.stores.memory import InMemoryAuditStore

__all__ = [
    "ArtifactExists",
    "IArtifactStore",
    "IAuditStore",
    "IDocumentSource",
    "InMemoryAuditStore",
    "LocalArtifactStore",
    "LocalDocumentSource",
    "SourceNotFound",
    "StoreError",
    "StoreStatus",
    "StoreUnavailable",
]
