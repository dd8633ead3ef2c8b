"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from signature_engine.api.routes import router
from signature_engine.config import settings
from signature_engine.core.geometry import InvalidGeometry
from signature_engine.services.audit_service import AuditQueryService
from signature_engine.services.embedder import DocumentEmbedder, EmbeddingError, PageNotFound
from signature_engine.services.signing_service import BadRequest, SigningFailed, SigningService
from signature_engine.stores.abstractions import SourceNotFound, StoreStatus, StoreUnavailable
from signature_engine.stores.factory import create_stores
from signature_engine.utils.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    settings.ensure_directories()

    stores = create_stores(settings)
    audit_status = stores.audit_store.connect()
    if audit_status is not StoreStatus.CONNECTED:
        logger.warning("Audit store unavailable at startup; signing will continue without audit records")

    app.state.artifact_store = stores.artifact_store
    app.state.audit_store = stores.audit_store
    app.state.signing_service = SigningService(
        document_source=stores.document_source,
        artifact_store=stores.artifact_store,
        audit_store=stores.audit_store,
        embedder=DocumentEmbedder(),
        max_signature_bytes=settings.max_signature_bytes,
    )
    app.state.audit_query_service = AuditQueryService(stores.audit_store)

    logger.info("Application startup complete")
    yield
    # Shutdown
    logger.info("Application shutdown")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Embed hand-drawn signatures into PDF pages with a content-hash audit trail.",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


# ---------------------------------------------------------------------------
# Error translation: domain exceptions -> {"error": ...}
# ---------------------------------------------------------------------------

def jsonable_errors(errors: list) -> list:
    """Drop non-serialisable context (e.g. exception objects) from pydantic errors."""
    return [{k: v for k, v in err.items() if k in ("type", "loc", "msg")} for err in errors]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return 422 with validation details for malformed request bodies."""
    detail = exc.errors()
    logger.warning("Validation error on %s: %s", request.url.path, detail)
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request body", "detail": jsonable_errors(detail)},
    )


@app.exception_handler(BadRequest)
async def bad_request_handler(request: Request, exc: BadRequest):
    logger.info("Rejected request on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(InvalidGeometry)
async def invalid_geometry_handler(request: Request, exc: InvalidGeometry):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(SourceNotFound)
async def source_not_found_handler(request: Request, exc: SourceNotFound):
    return JSONResponse(status_code=404, content={"error": str(exc)})


@app.exception_handler(PageNotFound)
async def page_not_found_handler(request: Request, exc: PageNotFound):
    return JSONResponse(status_code=404, content={"error": str(exc)})


@app.exception_handler(EmbeddingError)
async def embedding_error_handler(request: Request, exc: EmbeddingError):
    logger.error(f"Document processing error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Failed to process document"})


@app.exception_handler(SigningFailed)
async def signing_failed_handler(request: Request, exc: SigningFailed):
    # details are logged by the service; never leaked to the caller
    return JSONResponse(status_code=500, content={"error": "Failed to sign PDF"})


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error(f"Store unavailable on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"error": "Storage backend unavailable"})


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "operational",
    }


@app.get("/health")
async def health(request: Request):
    """Health check endpoint; a disconnected audit store is reported as degraded."""
    audit_store = getattr(request.app.state, "audit_store", None)
    audit_status = audit_store.status.value if audit_store else StoreStatus.DISCONNECTED.value
    return {
        "status": "healthy" if audit_status == StoreStatus.CONNECTED.value else "degraded",
        "auditStore": audit_status,
    }


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
