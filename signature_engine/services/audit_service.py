"""Read access to the signing audit trail."""

from signature_engine.models.signing import AuditRecord
from signature_engine.stores.abstractions import IAuditStore, StoreStatus, StoreUnavailable


class AuditQueryService:
    """Lists audit records for a document, newest first."""

    def __init__(self, audit_store: IAuditStore):
        self.audit_store = audit_store

    def query_by_document(self, document_id: str) -> list[AuditRecord]:
        """Return every audit record for ``document_id``; empty when none exist.

        Raises:
            StoreUnavailable: If the audit store cannot be reached
        """
        if self.audit_store.status is not StoreStatus.CONNECTED:
            raise StoreUnavailable("Audit store is not connected")
        records = self.audit_store.find(document_id)
        return sorted(records, key=lambda r: r.signed_at, reverse=True)
