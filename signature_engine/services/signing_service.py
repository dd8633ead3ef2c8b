"""Signing pipeline: place a signature image on a PDF and record the audit trail."""

import time
import uuid
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import ValidationError as ModelValidationError

from signature_engine.core.hashing import content_hash
from signature_engine.core.placement import fit
from signature_engine.models.signing import (
    AuditRecord,
    DocumentRect,
    PageDimensions,
    SigningResult,
    SignRequest,
)
from signature_engine.services.embedder import DocumentEmbedder
from signature_engine.stores.abstractions import (
    IArtifactStore,
    IAuditStore,
    IDocumentSource,
    SourceNotFound,
    StoreStatus,
)
from signature_engine.utils.logger import logger
from signature_engine.utils.validators import (
    ValidationError,
    decode_image_payload,
    validate_document_id,
)

_RECT_FIELDS = ("x", "y", "width", "height")


class SigningStage(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    LOADED = "loaded"
    EMBEDDED = "embedded"
    HASHED = "hashed"
    PERSISTED = "persisted"
    AUDIT_WRITTEN = "audit_written"
    RESPONDED = "responded"
    FAILED = "failed"


class BadRequest(Exception):
    """Raised when the caller supplied missing or invalid input."""

    pass


class SigningFailed(Exception):
    """Raised when the pipeline fails after validation.

    ``stage`` is the step that was being attempted when the error occurred;
    the original exception is chained as ``__cause__``.
    """

    state = SigningStage.FAILED

    def __init__(self, stage: SigningStage, message: str):
        super().__init__(message)
        self.stage = stage


class SigningService:
    """Orchestrates validate → load → embed → hash → persist → audit."""

    def __init__(
        self,
        document_source: IDocumentSource,
        artifact_store: IArtifactStore,
        audit_store: IAuditStore,
        embedder: DocumentEmbedder | None = None,
        clock: Callable[[], datetime] | None = None,
        max_signature_bytes: int | None = None,
    ):
        self.document_source = document_source
        self.artifact_store = artifact_store
        self.audit_store = audit_store
        self.embedder = embedder or DocumentEmbedder()
        self.max_signature_bytes = max_signature_bytes
        self._clock = clock or (lambda: datetime.now(UTC))

    def build_request(
        self,
        document_id: str | None,
        signature_image: str | None,
        coordinates: Mapping[str, Any] | DocumentRect | None,
        page_index: int = 0,
    ) -> SignRequest:
        """Turn the transport payload into a validated SignRequest.

        Raises:
            BadRequest: If any part of the payload is missing or invalid
        """
        if not signature_image or not coordinates:
            raise BadRequest("Missing signature or coordinates")
        if not validate_document_id(document_id or ""):
            raise BadRequest("Invalid or missing document id")
        if page_index < 0:
            raise BadRequest("Page index must not be negative")

        try:
            image_bytes = decode_image_payload(signature_image, self.max_signature_bytes)
        except ValidationError as e:
            raise BadRequest(str(e)) from e

        if isinstance(coordinates, DocumentRect):
            target_rect = coordinates
        else:
            missing = [k for k in _RECT_FIELDS if coordinates.get(k) is None]
            if missing:
                raise BadRequest(f"Coordinates missing: {', '.join(missing)}")
            try:
                target_rect = DocumentRect(**{k: coordinates[k] for k in _RECT_FIELDS})
            except ModelValidationError as e:
                raise BadRequest("Coordinates must be finite numbers") from e

        request = SignRequest(
            document_id=document_id,
            signature_image=image_bytes,
            target_rect=target_rect,
            page_index=page_index,
        )
        self._validate(request)
        return request

    def sign(self, request: SignRequest) -> SigningResult:
        """Run the full signing pipeline for one request.

        Raises:
            BadRequest: If the request is incomplete
            SourceNotFound: If the source document does not exist
            SigningFailed: For any failure while loading, embedding, hashing or persisting
        """
        document_id = request.document_id
        stage = self._advance(document_id, SigningStage.RECEIVED)
        try:
            stage = self._advance(document_id, SigningStage.VALIDATED)
            self._validate(request)

            stage = self._advance(document_id, SigningStage.LOADED)
            source = self.document_source.get(document_id)

            stage = self._advance(document_id, SigningStage.EMBEDDED)
            image = self.embedder.load_image(request.signature_image)
            placement = fit(request.target_rect, image.aspect_ratio)
            signed = self.embedder.embed(source, image, request.page_index, placement.rect)

            stage = self._advance(document_id, SigningStage.HASHED)
            original_hash = content_hash(source)
            signed_hash = content_hash(signed)

            stage = self._advance(document_id, SigningStage.PERSISTED)
            filename = self._artifact_filename(document_id)
            location = self.artifact_store.put(filename, signed)
        except (BadRequest, SourceNotFound):
            raise
        except Exception as e:
            logger.error(
                f"Signing failed for {document_id} at stage '{stage.value}': {e}",
                exc_info=True,
            )
            raise SigningFailed(stage, f"Signing failed at stage '{stage.value}'") from e

        self._advance(document_id, SigningStage.AUDIT_WRITTEN)
        record = AuditRecord(
            document_id=request.document_id,
            original_hash=original_hash,
            signed_hash=signed_hash,
            signed_at=self._clock(),
            target_rect=request.target_rect,
            artifact_filename=filename,
            page_index=request.page_index,
        )
        audit_recorded = self._write_audit(record)

        self._advance(document_id, SigningStage.RESPONDED)
        logger.info(
            f"Signed {request.document_id} -> {filename}. "
            f"Original hash: {original_hash[:16]}... signed hash: {signed_hash[:16]}..."
        )
        return SigningResult(
            artifact_location=location,
            artifact_filename=filename,
            original_hash=original_hash,
            signed_hash=signed_hash,
            audit_recorded=audit_recorded,
        )

    def describe_page(self, document_id: str, page_index: int = 0) -> tuple[PageDimensions, int]:
        """Return the page size and total page count of a source document."""
        if not validate_document_id(document_id):
            raise BadRequest("Invalid document id")
        source = self.document_source.get(document_id)
        dimensions = self.embedder.page_dimensions(source, page_index)
        return dimensions, self.embedder.page_count(source)

    @staticmethod
    def _advance(document_id: str, stage: SigningStage) -> SigningStage:
        logger.debug(f"sign {document_id}: {stage.value}")
        return stage

    def _validate(self, request: SignRequest) -> None:
        if not validate_document_id(request.document_id):
            raise BadRequest("Invalid or missing document id")
        if not request.signature_image:
            raise BadRequest("Missing signature image")
        rect = request.target_rect
        if rect.width <= 0 or rect.height <= 0:
            raise BadRequest("Coordinates width and height must be positive")

    def _write_audit(self, record: AuditRecord) -> bool:
        """Append the audit record; a failure here never fails the signing."""
        if self.audit_store.status is not StoreStatus.CONNECTED:
            logger.warning(
                f"Audit store disconnected, audit record for {record.artifact_filename} not written"
            )
            return False
        try:
            self.audit_store.insert(record)
        except Exception as e:
            logger.error(
                f"Failed to write audit record for {record.artifact_filename}: {e}",
                exc_info=True,
            )
            return False
        return True

    @staticmethod
    def _artifact_filename(document_id: str) -> str:
        # millisecond timestamp alone collides under concurrent load
        return f"signed_{document_id}_{time.time_ns() // 1_000_000}_{uuid.uuid4().hex[:12]}.pdf"
