"""Application configuration using Pydantic Settings."""
from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_CONTENT_TYPE = "application/vnd.ms-excel"
JSON_CONTENT_TYPE = "application/json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/exam-prep.db",
        description="Async SQLAlchemy database URL"
    )
    db_create_all: bool = Field(
        default=True, description="Create missing tables on startup"
    )
    db_echo: bool = Field(default=False, description="Echo SQL statements")

    # Security
    admin_api_keys: str = Field(
        default="dev-admin-key", description="Comma-separated admin API keys"
    )

    # Uploads
    upload_path: str = Field(default="./uploads", description="Staging directory for imports")
    max_file_size: int = Field(default=5 * 1024 * 1024, description="Max upload size in bytes")
    allowed_upload_types: str = Field(
        default=f"{JSON_CONTENT_TYPE},{XLSX_CONTENT_TYPE},{XLS_CONTENT_TYPE}",
        description="Comma-separated MIME types accepted by the import endpoint"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Application
    app_name: str = Field(default="Exam Prep Question Bank", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")

    def get_admin_api_keys_list(self) -> List[str]:
        """Parse comma-separated admin API keys."""
        return [k.strip() for k in self.admin_api_keys.split(",") if k.strip()]

    def get_allowed_upload_types(self) -> List[str]:
        """Parse comma-separated upload MIME types."""
        return [t.strip() for t in self.allowed_upload_types.split(",") if t.strip()]


# Global settings instance
settings = Settings()
