"""Browsing service: listing collection, filtering and bookmarks."""

from collections import OrderedDict

from property_browser.filters.engine import apply_filters
from property_browser.logging import get_logger
from property_browser.models import FilterCriteria, Property, SavedListing, SavedProperty
from property_browser.repositories.base import (
    PropertyRepository,
    RepositoryError,
    SavedPropertyRepository,
)

logger = get_logger(__name__)

_CacheKey = tuple[int, str, FilterCriteria]


class ListingBrowser:
    """Holds the loaded listing collection and the user's bookmarks.

    Filtering runs over the collection fetched by the last ``load()``;
    results are cached per ``(collection_version, search_term, criteria)``
    and the cache is dropped whenever the collection is reloaded.
    """

    def __init__(
        self,
        properties: PropertyRepository,
        saved: SavedPropertyRepository,
        *,
        cache_size: int = 64,
    ) -> None:
        self._property_repo = properties
        self._saved_repo = saved
        self._properties: list[Property] = []
        self._saved: list[SavedProperty] = []
        self._saved_loaded = False
        self._cache: OrderedDict[_CacheKey, list[Property]] = OrderedDict()
        self._cache_size = cache_size
        self.collection_version = 0

    @property
    def properties(self) -> list[Property]:
        """The loaded collection, newest listing first."""
        return list(self._properties)

    @property
    def saved_property_ids(self) -> set[int]:
        return {s.property_id for s in self._saved}

    def is_saved(self, property_id: int) -> bool:
        return any(s.property_id == property_id for s in self._saved)

    async def load(self) -> None:
        """Fetch listings and bookmarks from the repositories.

        A bookmark fetch failure is logged and leaves no bookmarks; a listing
        fetch failure propagates and keeps the previous collection.

        Raises:
            RepositoryError: If the listings could not be read.
        """
        properties = await self._property_repo.get_all()
        self._properties = properties
        self.collection_version += 1
        self._cache.clear()
        await self.load_saved()
        logger.info(
            "listings_loaded",
            properties=len(self._properties),
            saved=len(self._saved),
            version=self.collection_version,
        )

    async def load_saved(self) -> None:
        """Refresh bookmarks, leaving none if they cannot be read."""
        try:
            await self.refresh_saved()
        except RepositoryError:
            logger.warning("saved_properties_unavailable", exc_info=True)
            self._saved = []
            self._saved_loaded = False

    async def refresh_saved(self) -> None:
        """Re-fetch bookmarks from the repository.

        Raises:
            RepositoryError: If the bookmarks could not be read.
        """
        self._saved = await self._saved_repo.get_all()
        self._saved_loaded = True

    async def _ensure_saved(self) -> None:
        # An unreadable bookmark set must not be mistaken for an empty one
        if not self._saved_loaded:
            await self.refresh_saved()

    def search(
        self, search_term: str | None = "", criteria: FilterCriteria | None = None
    ) -> list[Property]:
        """Filter the loaded collection. Returns a new list each call."""
        term = search_term or ""
        criteria = criteria or FilterCriteria()
        if self._cache_size == 0:
            return apply_filters(self._properties, term, criteria)

        key: _CacheKey = (self.collection_version, term, criteria)
        cached = self._cache.get(key)
        if cached is None:
            cached = apply_filters(self._properties, term, criteria)
            self._cache[key] = cached
            if len(self._cache) > self._cache_size:
                self._cache.popitem(last=False)
        else:
            self._cache.move_to_end(key)
        return list(cached)

    async def get_property(self, property_id: int) -> Property | None:
        """Look up one listing in the repository (not just the loaded page)."""
        return await self._property_repo.get_by_id(property_id)

    async def toggle_saved(self, property_id: int) -> bool:
        """Save the property if it is not saved, otherwise remove the bookmark.

        Returns:
            True if the property is saved after the call.

        Raises:
            RepositoryError: If the bookmark could not be created or removed.
        """
        await self._ensure_saved()
        existing = next((s for s in self._saved if s.property_id == property_id), None)
        if existing is not None:
            if not await self._saved_repo.delete(existing.id):
                raise RepositoryError(f"failed to remove saved property {existing.id}")
            self._saved = [s for s in self._saved if s.property_id != property_id]
            logger.info("property_unsaved", property_id=property_id, saved_id=existing.id)
            return False

        created = await self._saved_repo.create(property_id)
        self._saved.append(created)
        logger.info("property_saved", property_id=property_id, saved_id=created.id)
        return True

    async def save(self, property_id: int, notes: str | None = None) -> SavedProperty:
        """Bookmark a property, reusing an existing bookmark if there is one.

        Raises:
            RepositoryError: If the bookmark could not be created.
        """
        await self._ensure_saved()
        existing = next((s for s in self._saved if s.property_id == property_id), None)
        if existing is not None:
            return existing
        created = await self._saved_repo.create(property_id, notes)
        self._saved.append(created)
        logger.info("property_saved", property_id=property_id, saved_id=created.id)
        return created

    async def remove_saved(self, saved_id: int) -> bool:
        """Delete a bookmark by its own id."""
        if not await self._saved_repo.delete(saved_id):
            return False
        self._saved = [s for s in self._saved if s.id != saved_id]
        return True

    def saved_listings(self) -> list[SavedListing]:
        """Bookmarks joined with their listings, most recently saved first.

        Bookmarks whose listing is no longer in the collection are left out.
        """
        by_id = {p.id: p for p in self._properties}
        listings = [
            SavedListing(
                listing=by_id[s.property_id],
                saved_id=s.id,
                saved_date=s.saved_date,
                notes=s.notes,
            )
            for s in self._saved
            if s.property_id in by_id
        ]
        return sorted(listings, key=lambda item: item.saved_date, reverse=True)
