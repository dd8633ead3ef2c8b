"""Abstract interfaces for the collaborators of the signing pipeline.

The signing service only talks to these interfaces; concrete local, in-memory
and S3 implementations live next to this module and are chosen at startup.
"""

from abc import ABC, abstractmethod
from enum import Enum

from signature_engine.models.signing import AuditRecord


class StoreError(Exception):
    """Base class for store failures."""

    pass


class StoreUnavailable(StoreError):
    """Raised when a backing store cannot be reached."""

    pass


class ArtifactExists(StoreError):
    """Raised when an artifact name is already taken (artifacts are write-once)."""

    pass


class SourceNotFound(LookupError):
    """Raised when no source document exists for the requested identifier."""

    pass


class StoreStatus(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class IDocumentSource(ABC):
    """Read-only provider of original (unsigned) documents."""

    @abstractmethod
    def get(self, document_id: str) -> bytes:
        """
        Return the source document bytes.

        :raises SourceNotFound: no document with this identifier.
        :raises StoreUnavailable: the backing store cannot be reached.
        """
        pass


class IArtifactStore(ABC):
    """Write-once blob store for signed documents."""

    @abstractmethod
    def put(self, name: str, content: bytes) -> str:
        """
        Persist ``content`` under ``name`` and return its public location.

        Must not return before the bytes are durably written.
        """
        pass

    @abstractmethod
    def get(self, name: str) -> bytes:
        """Return a stored artifact, raising ``FileNotFoundError`` when absent."""
        pass


class IAuditStore(ABC):
    """Append-only, queryable store of audit records."""

    @abstractmethod
    def connect(self) -> StoreStatus:
        """Establish the long-lived connection and report the resulting status."""
        pass

    @property
    @abstractmethod
    def status(self) -> StoreStatus:
        pass

    @abstractmethod
    def insert(self, record: AuditRecord) -> None:
        pass

    @abstractmethod
    def find(self, document_id: str) -> list[AuditRecord]:
        """Records for ``document_id``, newest first."""
        pass
