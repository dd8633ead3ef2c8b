"""Application configuration using Pydantic settings."""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Signature Injection Engine")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3002)
    public_base_url: str = Field(
        default="http://localhost:3002",
        description="Base URL used to build links to locally stored signed PDFs",
    )

    # Signing
    default_page_index: int = Field(default=0, ge=0)
    max_signature_bytes: int = Field(default=10 * 1024 * 1024, gt=0)

    # Storage
    storage_backend: str = Field(default="local", description="local or s3")
    audit_backend: str = Field(default="memory", description="memory or s3")
    documents_dir: str = Field(default="./documents")
    signed_dir: str = Field(default="./signed")
    store_timeout_seconds: float = Field(default=5.0, gt=0)

    # S3
    s3_bucket_name: Optional[str] = Field(default=None)
    s3_region: str = Field(default="us-east-1")
    s3_access_key: Optional[str] = Field(default=None)
    s3_secret_key: Optional[str] = Field(default=None)
    s3_endpoint_url: Optional[str] = Field(default=None)
    s3_source_prefix: str = Field(default="documents/")
    s3_artifact_prefix: str = Field(default="signed/")
    s3_audit_prefix: str = Field(default="audit/")
    s3_presigned_url_expiration: int = Field(default=3600)

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        """Validate artifact storage backend."""
        if v.lower() not in ["local", "s3"]:
            raise ValueError("Storage backend must be 'local' or 's3'")
        return v.lower()

    @field_validator("audit_backend")
    @classmethod
    def validate_audit_backend(cls, v: str) -> str:
        """Validate audit store backend."""
        if v.lower() not in ["memory", "s3"]:
            raise ValueError("Audit backend must be 'memory' or 's3'")
        return v.lower()

    def get_documents_dir(self) -> Path:
        """Get source documents directory as Path object."""
        return Path(self.documents_dir)

    def get_signed_dir(self) -> Path:
        """Get signed artifacts directory as Path object."""
        return Path(self.signed_dir)

    def ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        self.get_documents_dir().mkdir(parents=True, exist_ok=True)
        if self.storage_backend == "local":
            self.get_signed_dir().mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
