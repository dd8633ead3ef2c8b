"""Filesystem-backed document source and artifact store."""

from pathlib import Path

from signature_engine.stores.abstractions import (
    ArtifactExists,
    IArtifactStore,
    IDocumentSource,
    SourceNotFound,
    StoreUnavailable,
)
from signature_engine.utils.logger import component_logger

logger = component_logger("stores")


class LocalDocumentSource(IDocumentSource):
    """Serves ``<directory>/<document_id>.pdf``."""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def get(self, document_id: str) -> bytes:
        path = (self.directory / f"{document_id}.pdf").resolve()
        if not path.is_relative_to(self.directory.resolve()):
            logger.warning(f"Rejected document id outside {self.directory}: {document_id!r}")
            raise SourceNotFound(f"Source document '{document_id}' not found")
        if not path.is_file():
            raise SourceNotFound(f"Source document '{document_id}' not found")
        try:
            return path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read source document {path}: {e}")
            raise StoreUnavailable(f"Failed to read source document: {e}") from e


class LocalArtifactStore(IArtifactStore):
    """Writes signed PDFs into a directory served under ``<base_url>/signed/``."""

    def __init__(self, directory: Path | str, base_url: str):
        self.directory = Path(directory)
        self.base_url = base_url.rstrip("/")

    def put(self, name: str, content: bytes) -> str:
        path = self._path(name)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # exclusive create keeps artifacts write-once
            with open(path, "xb") as f:
                f.write(content)
                f.flush()
        except FileExistsError as e:
            raise ArtifactExists(f"Artifact {name} already exists") from e
        except OSError as e:
            logger.error(f"Failed to write artifact {path}: {e}")
            raise StoreUnavailable(f"Artifact write failed: {e}") from e

        logger.info(f"Stored signed document {name} ({len(content)} bytes)")
        return self.location(name)

    def get(self, name: str) -> bytes:
        path = self._path(name)
        if not path.is_file():
            raise FileNotFoundError(name)
        return path.read_bytes()

    def location(self, name: str) -> str:
        return f"{self.base_url}/signed/{name}"

    def _path(self, name: str) -> Path:
        if Path(name).name != name or name in ("", ".", ".."):
            raise ValueError(f"Invalid artifact name: {name!r}")
        return self.directory / name
