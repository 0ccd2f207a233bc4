"""Listing and saved-property repositories, selected by configuration."""

from dataclasses import dataclass

from property_browser.config import Settings
from property_browser.logging import get_logger
from property_browser.repositories.base import (
    PropertyRepository,
    Repository,
    RepositoryError,
    SavedPropertyRepository,
)
from property_browser.repositories.memory import (
    InMemoryPropertyRepository,
    InMemorySavedPropertyRepository,
)
from property_browser.repositories.mock_data import MOCK_SAVED_PROPERTIES

logger = get_logger(__name__)

__all__ = [
    "PropertyRepository",
    "Repositories",
    "Repository",
    "RepositoryError",
    "SavedPropertyRepository",
    "create_repositories",
]


@dataclass
class Repositories:
    """The two repositories a browser needs."""

    properties: PropertyRepository
    saved: SavedPropertyRepository
    backend: str = "memory"

    async def close(self) -> None:
        """Close both repositories. Safe to call twice."""
        await self.properties.close()
        await self.saved.close()


async def create_repositories(settings: Settings) -> Repositories:
    """Build the repositories for ``settings.data_backend``.

    Raises:
        ValueError: If the remote backend is selected but not configured.
    """
    settings.validate_backend()

    if settings.data_backend == "remote":
        from property_browser.repositories.remote import (
            RemotePropertyRepository,
            RemoteSavedPropertyRepository,
            TableClient,
        )

        client = TableClient(
            settings.remote_base_url,
            settings.remote_project_id,
            settings.remote_public_key.get_secret_value(),
            timeout=settings.remote_timeout_seconds,
        )
        repos = Repositories(
            properties=RemotePropertyRepository(
                client, table=settings.property_table, page_size=settings.page_size
            ),
            saved=RemoteSavedPropertyRepository(
                client, table=settings.saved_property_table, page_size=settings.page_size
            ),
            backend="remote",
        )
    elif settings.data_backend == "sqlite":
        from property_browser.repositories.sqlite import open_sqlite

        _, properties, saved = await open_sqlite(
            settings.database_path, seed_mock_data=settings.seed_mock_data
        )
        repos = Repositories(properties=properties, saved=saved, backend="sqlite")
    else:
        repos = Repositories(
            properties=InMemoryPropertyRepository(None if settings.seed_mock_data else ()),
            saved=InMemorySavedPropertyRepository(
                MOCK_SAVED_PROPERTIES if settings.seed_mock_data else ()
            ),
            backend="memory",
        )

    logger.info("repositories_ready", backend=repos.backend)
    return repos
