"""Embedding of a signature image into a PDF page using PyMuPDF."""

import io
import threading

import fitz
from PIL import Image, UnidentifiedImageError

from signature_engine.models.signing import DocumentRect, PageDimensions, SignatureImage
from signature_engine.utils.logger import logger

SUPPORTED_IMAGE_FORMAT = "PNG"

# PyMuPDF is not thread-safe
_MUPDF_LOCK = threading.Lock()


class EmbeddingError(Exception):
    """Base class for failures while producing the signed document."""

    pass


class MalformedDocument(EmbeddingError):
    """Raised when the source bytes are not a parseable PDF."""

    pass


class PageNotFound(EmbeddingError):
    """Raised when the requested page index does not exist."""

    pass


class UnsupportedImageFormat(EmbeddingError):
    """Raised when the signature is not a decodable PNG."""

    pass


class DocumentEmbedder:
    """Draws a raster signature onto one page of a PDF.

    All rectangles are given in document space (points, origin bottom-left).
    The source bytes are only read; every call returns a fresh serialisation
    of the whole document.
    """

    def load_image(self, data: bytes) -> SignatureImage:
        """Decode the signature and read its intrinsic size.

        Raises:
            UnsupportedImageFormat: If the bytes are not a valid PNG image
        """
        try:
            with Image.open(io.BytesIO(data)) as img:
                image_format = img.format
                width, height = img.size
                img.verify()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
            raise UnsupportedImageFormat(f"Signature image could not be decoded: {e}") from e

        if image_format != SUPPORTED_IMAGE_FORMAT:
            raise UnsupportedImageFormat(
                f"Signature image must be {SUPPORTED_IMAGE_FORMAT}, got {image_format}"
            )
        if width <= 0 or height <= 0:
            raise UnsupportedImageFormat("Signature image has no pixels")

        return SignatureImage(data=bytes(data), width=width, height=height)

    def page_count(self, source: bytes) -> int:
        with _MUPDF_LOCK:
            doc = self._open(source)
            try:
                return doc.page_count
            finally:
                doc.close()

    def page_dimensions(self, source: bytes, page_index: int = 0) -> PageDimensions:
        """Size of ``page_index`` in points, as read from the page itself."""
        with _MUPDF_LOCK:
            doc = self._open(source)
            try:
                page = self._page(doc, page_index)
                return PageDimensions(width=page.rect.width, height=page.rect.height)
            finally:
                doc.close()

    def embed(
        self,
        source: bytes,
        image: SignatureImage,
        page_index: int,
        rect: DocumentRect,
    ) -> bytes:
        """Return a new PDF with ``image`` drawn into ``rect`` on ``page_index``.

        Args:
            source: Original PDF bytes (never modified)
            image: Decoded PNG signature
            page_index: Zero-based page number
            rect: Final placement in document space, already aspect-fitted

        Raises:
            MalformedDocument: If the source cannot be parsed
            PageNotFound: If the page index is out of range
            UnsupportedImageFormat: If PyMuPDF rejects the image
        """
        with _MUPDF_LOCK:
            doc = self._open(source)
            try:
                page = self._page(doc, page_index)

                # PyMuPDF page space is y-down from the top edge
                page_height = page.rect.height
                image_rect = fitz.Rect(
                    rect.x,
                    page_height - rect.y - rect.height,
                    rect.x + rect.width,
                    page_height - rect.y,
                )

                try:
                    page.insert_image(image_rect, stream=image.data, keep_proportion=False)
                except (RuntimeError, ValueError) as e:
                    raise UnsupportedImageFormat(f"Failed to embed signature image: {e}") from e

                pdf_bytes: bytes = doc.tobytes()
            finally:
                doc.close()

        logger.info(
            f"Signature embedded on page {page_index} at "
            f"({rect.x:.2f}, {rect.y:.2f}) size {rect.width:.2f}x{rect.height:.2f}"
        )
        return pdf_bytes

    @staticmethod
    def _open(source: bytes) -> fitz.Document:
        if not source:
            raise MalformedDocument("Source document is empty")
        try:
            doc = fitz.open(stream=bytes(source), filetype="pdf")
        except (RuntimeError, ValueError) as e:
            raise MalformedDocument(f"Source document is not a valid PDF: {e}") from e
        if not doc.is_pdf:
            doc.close()
            raise MalformedDocument("Source document is not a PDF")
        return doc

    @staticmethod
    def _page(doc: fitz.Document, page_index: int) -> fitz.Page:
        if page_index < 0 or page_index >= doc.page_count:
            raise PageNotFound(
                f"Page {page_index} does not exist (document has {doc.page_count} pages)"
            )
        return doc[page_index]
