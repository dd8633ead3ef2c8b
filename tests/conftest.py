"""Shared fixtures: real PDFs and PNGs built with PyMuPDF and Pillow."""

import pytest

from signature_engine.services.signing_service import SigningService
from signature_engine.stores.local import LocalArtifactStore, LocalDocumentSource
from signature_engine.stores.memory import InMemoryAuditStore
from tests.factories import StepClock, make_pdf, make_png


@pytest.fixture
def blank_pdf() -> bytes:
    return make_pdf()


@pytest.fixture
def signature_png() -> bytes:
    return make_png(100, 30)


@pytest.fixture
def documents_dir(tmp_path, blank_pdf):
    directory = tmp_path / "documents"
    directory.mkdir()
    (directory / "sample.pdf").write_bytes(blank_pdf)
    (directory / "three-pages.pdf").write_bytes(make_pdf(pages=3))
    (directory / "broken.pdf").write_bytes(b"this is not a pdf")
    return directory


@pytest.fixture
def audit_store() -> InMemoryAuditStore:
    store = InMemoryAuditStore()
    store.connect()
    return store


@pytest.fixture
def artifact_store(tmp_path) -> LocalArtifactStore:
    return LocalArtifactStore(tmp_path / "signed", "http://localhost:3002")


@pytest.fixture
def signing_service(documents_dir, artifact_store, audit_store) -> SigningService:
    return SigningService(
        document_source=LocalDocumentSource(documents_dir),
        artifact_store=artifact_store,
        audit_store=audit_store,
        clock=StepClock(),
    )
