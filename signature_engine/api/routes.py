"""API routes: sign a PDF, query its audit trail, fetch signed artifacts."""

import asyncio
from functools import partial
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel, ConfigDict, Field

from signature_engine.config import settings
from signature_engine.core.geometry import to_document_space
from signature_engine.models.signing import PageDimensions, ScreenRect, Viewport
from signature_engine.services.audit_service import AuditQueryService
from signature_engine.services.signing_service import BadRequest, SigningService
from signature_engine.stores.abstractions import IArtifactStore
from signature_engine.utils.logger import logger

router = APIRouter(tags=["signing"])


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class SignPdfRequest(BaseModel):
    """Body of ``POST /sign-pdf``; coordinates are already in PDF space."""

    model_config = ConfigDict(populate_by_name=True)

    pdf_id: str | None = Field(None, alias="pdfId")
    signature_image: str | None = Field(None, alias="signatureImage")
    coordinates: dict[str, Any] | None = None
    page: int | None = None


class GeometryRequest(BaseModel):
    rect: ScreenRect
    viewport: Viewport
    page: PageDimensions


# ---------------------------------------------------------------------------
# Dependencies (wired in main.lifespan)
# ---------------------------------------------------------------------------

def get_signing_service(request: Request) -> SigningService:
    return request.app.state.signing_service


def get_audit_query_service(request: Request) -> AuditQueryService:
    return request.app.state.audit_query_service


def get_artifact_store(request: Request) -> IArtifactStore:
    return request.app.state.artifact_store


async def _run_blocking(func, *args):
    """Run store/PDF work off the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args))


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/sign-pdf", status_code=status.HTTP_200_OK)
async def sign_pdf(
        payload: SignPdfRequest,
        service: SigningService = Depends(get_signing_service),
) -> dict:
    """Embed the signature image into the source PDF and return the signed copy's URL."""
    page_index = payload.page if payload.page is not None else settings.default_page_index
    logger.info(f"sign-pdf | pdfId={payload.pdf_id} page={page_index}")

    sign_request = await _run_blocking(
        service.build_request,
        payload.pdf_id,
        payload.signature_image,
        payload.coordinates,
        page_index,
    )
    result = await _run_blocking(service.sign, sign_request)

    return {
        "success": True,
        "signedPdfUrl": result.artifact_location,
        "originalHash": result.original_hash,
        "signedHash": result.signed_hash,
        "auditRecorded": result.audit_recorded,
    }


@router.get("/audit/{document_id}")
async def get_audit_trail(
        document_id: str,
        service: AuditQueryService = Depends(get_audit_query_service),
) -> list[dict]:
    """Audit records for a document, newest first."""
    records = await _run_blocking(service.query_by_document, document_id)
    return [record.model_dump(mode="json", by_alias=True) for record in records]


@router.get("/signed/{filename}")
async def download_signed(
        filename: str,
        store: IArtifactStore = Depends(get_artifact_store),
) -> Response:
    """Serve a stored signed PDF by name."""
    try:
        content = await _run_blocking(store.get, filename)
    except (FileNotFoundError, ValueError) as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Signed document not found") from exc
    return Response(content=content, media_type="application/pdf")


@router.get("/documents/{document_id}/pages/{page_index}")
async def describe_page(
        document_id: str,
        page_index: int,
        service: SigningService = Depends(get_signing_service),
) -> dict:
    """Page size in PDF points, needed by clients to convert screen coordinates."""
    if page_index < 0:
        raise BadRequest("Page index must not be negative")
    dimensions, page_count = await _run_blocking(service.describe_page, document_id, page_index)
    return {
        "width": dimensions.width,
        "height": dimensions.height,
        "pageCount": page_count,
    }


@router.post("/geometry/to-document")
async def convert_to_document_space(body: GeometryRequest) -> dict:
    """Convert a field drawn on the rendered page into PDF coordinates."""
    rect = to_document_space(body.rect, body.viewport, body.page)
    return rect.model_dump(by_alias=True)
