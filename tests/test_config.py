"""Tests for application configuration."""

import pytest
from pydantic import ValidationError

from property_browser.config import Settings


class TestDefaults:
    def test_default_backend_is_memory(self) -> None:
        settings = Settings()
        assert settings.data_backend == "memory"
        assert settings.page_size == 50
        assert settings.seed_mock_data is True
        assert settings.refresh_interval_minutes == 15

    def test_data_dir(self) -> None:
        assert Settings(database_path="var/db/listings.db").data_dir == "var/db"


class TestEnvironment:
    def test_reads_prefixed_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROPERTY_BROWSER_DATA_BACKEND", "sqlite")
        monkeypatch.setenv("PROPERTY_BROWSER_PAGE_SIZE", "25")
        monkeypatch.setenv("PROPERTY_BROWSER_REMOTE_PUBLIC_KEY", "pk_test")
        settings = Settings()
        assert settings.data_backend == "sqlite"
        assert settings.page_size == 25
        assert settings.remote_public_key.get_secret_value() == "pk_test"

    def test_public_key_is_masked(self) -> None:
        settings = Settings(remote_public_key="pk_secret")  # type: ignore[arg-type]
        assert "pk_secret" not in repr(settings)

    def test_unknown_backend_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(data_backend="postgres")  # type: ignore[arg-type]

    @pytest.mark.parametrize("page_size", [0, 501])
    def test_page_size_bounds(self, page_size: int) -> None:
        with pytest.raises(ValidationError):
            Settings(page_size=page_size)


class TestValidateBackend:
    def test_memory_needs_nothing(self) -> None:
        Settings(data_backend="memory").validate_backend()

    def test_remote_requires_url_and_project(self) -> None:
        settings = Settings(data_backend="remote")
        with pytest.raises(ValueError, match="PROPERTY_BROWSER_REMOTE_BASE_URL"):
            settings.validate_backend()

    def test_remote_reports_only_missing_values(self) -> None:
        settings = Settings(data_backend="remote", remote_base_url="https://api.example.com")
        with pytest.raises(ValueError) as exc_info:
            settings.validate_backend()
        assert "PROPERTY_BROWSER_REMOTE_PROJECT_ID" in str(exc_info.value)
        assert "BASE_URL" not in str(exc_info.value)

    def test_remote_configured(self) -> None:
        Settings(
            data_backend="remote",
            remote_base_url="https://api.example.com",
            remote_project_id="proj_1",
        ).validate_backend()
