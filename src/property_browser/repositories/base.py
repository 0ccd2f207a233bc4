"""Repository interfaces for listings and saved properties."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import TracebackType
from typing import Any, Self

from pydantic.alias_generators import to_snake

from property_browser.models import Property, SavedProperty


class RepositoryError(Exception):
    """A repository backend failed to complete a request."""


def snake_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize camelCase input keys (``zipCode``, ``Id``) to field names."""
    return {to_snake(key): value for key, value in data.items()}


class Repository(ABC):
    """Common lifecycle for repositories: ``close()`` and ``async with`` support."""

    async def close(self) -> None:
        """Release connections or clients held by the repository."""

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


class PropertyRepository(Repository):
    """Source of the property collection."""

    @abstractmethod
    async def get_all(self) -> list[Property]:
        """Return every listing, newest first.

        Raises:
            RepositoryError: If the backend cannot be read.
        """
        ...

    @abstractmethod
    async def get_by_id(self, property_id: int) -> Property | None:
        """Return one listing, or None when it is missing or the lookup fails."""
        ...

    @abstractmethod
    async def create(self, data: Mapping[str, Any]) -> Property:
        """Create a listing; the repository assigns its id.

        Raises:
            RepositoryError: If the record could not be created.
        """
        ...

    @abstractmethod
    async def update(self, property_id: int, changes: Mapping[str, Any]) -> Property | None:
        """Apply field changes to a listing. Returns None if it does not exist.

        Raises:
            RepositoryError: If the backend rejects the update.
        """
        ...

    @abstractmethod
    async def delete(self, property_id: int) -> bool:
        """Delete a listing. Returns False if nothing was deleted."""
        ...


class SavedPropertyRepository(Repository):
    """Source of saved-property bookmarks."""

    @abstractmethod
    async def get_all(self) -> list[SavedProperty]:
        """Return every bookmark, most recently saved first.

        Raises:
            RepositoryError: If the backend cannot be read.
        """
        ...

    @abstractmethod
    async def get_by_id(self, saved_id: int) -> SavedProperty | None:
        """Return one bookmark, or None when it is missing or the lookup fails."""
        ...

    @abstractmethod
    async def create(self, property_id: int, notes: str | None = None) -> SavedProperty:
        """Bookmark a property.

        Raises:
            RepositoryError: If the bookmark could not be created.
        """
        ...

    @abstractmethod
    async def update(self, saved_id: int, *, notes: str) -> SavedProperty | None:
        """Replace a bookmark's notes. Returns None if it does not exist."""
        ...

    @abstractmethod
    async def delete(self, saved_id: int) -> bool:
        """Remove a bookmark. Returns False if nothing was deleted."""
        ...
