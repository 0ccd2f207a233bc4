"""In-memory repositories backed by the bundled mock listings."""

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from property_browser.logging import get_logger
from property_browser.models import Property, SavedProperty
from property_browser.repositories.base import (
    PropertyRepository,
    SavedPropertyRepository,
    snake_keys,
)
from property_browser.repositories.mock_data import MOCK_PROPERTIES

logger = get_logger(__name__)


def _next_id(existing: Iterable[int]) -> int:
    return max(existing, default=0) + 1


class InMemoryPropertyRepository(PropertyRepository):
    """Listings held in a dict; changes are lost when the process exits."""

    def __init__(self, seed: Iterable[Property] | None = None) -> None:
        """Initialize the store.

        Args:
            seed: Initial listings. Defaults to the bundled mock listings.
        """
        listings = MOCK_PROPERTIES if seed is None else seed
        self._items: dict[int, Property] = {p.id: p for p in listings}

    async def get_all(self) -> list[Property]:
        ordered = sorted(self._items.values(), key=lambda p: p.listing_date, reverse=True)
        return [p.model_copy(deep=True) for p in ordered]

    async def get_by_id(self, property_id: int) -> Property | None:
        prop = self._items.get(property_id)
        return prop.model_copy(deep=True) if prop is not None else None

    async def create(self, data: Mapping[str, Any]) -> Property:
        fields = snake_keys(data)
        fields["id"] = _next_id(self._items)
        prop = Property.model_validate(fields)
        self._items[prop.id] = prop
        logger.info("property_created", property_id=prop.id, backend="memory")
        return prop.model_copy(deep=True)

    async def update(self, property_id: int, changes: Mapping[str, Any]) -> Property | None:
        existing = self._items.get(property_id)
        if existing is None:
            return None
        fields = {**existing.model_dump(), **snake_keys(changes), "id": property_id}
        updated = Property.model_validate(fields)
        self._items[property_id] = updated
        return updated.model_copy(deep=True)

    async def delete(self, property_id: int) -> bool:
        return self._items.pop(property_id, None) is not None


class InMemorySavedPropertyRepository(SavedPropertyRepository):
    """Bookmarks held in a dict."""

    def __init__(self, seed: Iterable[SavedProperty] = ()) -> None:
        self._items: dict[int, SavedProperty] = {s.id: s for s in seed}

    async def get_all(self) -> list[SavedProperty]:
        return sorted(self._items.values(), key=lambda s: s.saved_date, reverse=True)

    async def get_by_id(self, saved_id: int) -> SavedProperty | None:
        return self._items.get(saved_id)

    async def create(self, property_id: int, notes: str | None = None) -> SavedProperty:
        saved = SavedProperty(
            id=_next_id(self._items),
            property_id=property_id,
            saved_date=datetime.now(UTC),
            notes=notes or "",
        )
        self._items[saved.id] = saved
        logger.info("saved_property_created", saved_id=saved.id, property_id=property_id)
        return saved

    async def update(self, saved_id: int, *, notes: str) -> SavedProperty | None:
        existing = self._items.get(saved_id)
        if existing is None:
            return None
        updated = existing.model_copy(update={"notes": notes})
        self._items[saved_id] = updated
        return updated

    async def delete(self, saved_id: int) -> bool:
        return self._items.pop(saved_id, None) is not None
