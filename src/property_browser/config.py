"""Application configuration using pydantic-settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DataBackend = Literal["memory", "remote", "sqlite"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROPERTY_BROWSER_",
        extra="ignore",
    )

    # Which repository implementation backs the browser
    data_backend: DataBackend = Field(
        default="memory",
        description="memory (mock listings), remote (hosted table API) or sqlite",
    )

    # Hosted table API (required when data_backend=remote)
    remote_base_url: str = Field(
        default="",
        description="Base URL of the hosted table API (e.g. https://api.example.com/v1)",
    )
    remote_project_id: str = Field(default="", description="Project identifier")
    remote_public_key: SecretStr = Field(
        default=SecretStr(""),
        description="Public API key sent as a bearer token",
    )
    remote_timeout_seconds: float = Field(default=10.0, gt=0, le=120)
    page_size: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Maximum records fetched per listing request",
    )
    property_table: str = Field(default="property_c")
    saved_property_table: str = Field(default="saved_property_c")

    # Local SQLite backend
    database_path: str = Field(default="data/listings.db")
    seed_mock_data: bool = Field(
        default=True,
        description="Load the bundled mock listings into an empty database",
    )

    # Filter result cache (0 disables)
    result_cache_size: int = Field(default=64, ge=0, le=4096)

    # Web API
    web_port: int = Field(default=8000, description="Web server port")
    web_host: str = Field(default="0.0.0.0", description="Web server host")
    refresh_interval_minutes: int = Field(
        default=15,
        ge=0,
        description="Minutes between background listing reloads in serve mode (0 disables)",
    )

    # Logging
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    @property
    def data_dir(self) -> str:
        """Return the directory containing the SQLite database."""
        return str(Path(self.database_path).parent)

    def validate_backend(self) -> None:
        """Check that the selected backend has everything it needs.

        Raises:
            ValueError: If the remote backend is selected without a base URL
                or project id.
        """
        if self.data_backend != "remote":
            return
        missing = [
            name
            for name, value in (
                ("PROPERTY_BROWSER_REMOTE_BASE_URL", self.remote_base_url),
                ("PROPERTY_BROWSER_REMOTE_PROJECT_ID", self.remote_project_id),
            )
            if not value.strip()
        ]
        if missing:
            raise ValueError(f"remote backend requires {', '.join(missing)}")
