"""In-memory audit store for development and tests."""

import threading

from signature_engine.models.signing import AuditRecord
from signature_engine.stores.abstractions import IAuditStore, StoreStatus, StoreUnavailable
from signature_engine.utils.logger import component_logger

logger = component_logger("stores")


class InMemoryAuditStore(IAuditStore):
    """Process-local audit trail. Records are lost on restart."""

    def __init__(self) -> None:
        self._records: list[AuditRecord] = []
        self._lock = threading.Lock()
        self._status = StoreStatus.DISCONNECTED

    def connect(self) -> StoreStatus:
        self._status = StoreStatus.CONNECTED
        logger.info("In-memory audit store ready")
        return self._status

    def disconnect(self) -> None:
        """Mark the store unreachable (used to simulate an outage)."""
        self._status = StoreStatus.DISCONNECTED

    @property
    def status(self) -> StoreStatus:
        return self._status

    def insert(self, record: AuditRecord) -> None:
        self._ensure_connected()
        with self._lock:
            self._records.append(record)

    def find(self, document_id: str) -> list[AuditRecord]:
        self._ensure_connected()
        with self._lock:
            matches = [r for r in self._records if r.document_id == document_id]
        return sorted(matches, key=lambda r: r.signed_at, reverse=True)

    def clear(self) -> None:
        """Clear the audit trail (for testing)."""
        with self._lock:
            self._records.clear()

    def _ensure_connected(self) -> None:
        if self._status is not StoreStatus.CONNECTED:
            raise StoreUnavailable("Audit store is not connected")
