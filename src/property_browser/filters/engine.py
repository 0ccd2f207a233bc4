"""Search-term and criteria filtering of property collections.

Every function here is pure: inputs are never mutated and the output
keeps the relative order of the input collection.
"""

from collections.abc import Iterable

from property_browser.logging import get_logger
from property_browser.models import FilterCriteria, Property

logger = get_logger(__name__)

_NO_CRITERIA = FilterCriteria()


def matches_search(prop: Property, search_term: str | None) -> bool:
    """Check a property's location fields against a free-text search term.

    Address, city and state match case-insensitively; the zip code matches
    as a plain substring. An empty term matches everything.
    """
    if not search_term:
        return True
    needle = search_term.lower()
    return (
        needle in (prop.address or "").lower()
        or needle in (prop.city or "").lower()
        or needle in (prop.state or "").lower()
        or search_term in (prop.zip_code or "")
    )


def _matches_keywords(prop: Property, keywords: str) -> bool:
    needle = keywords.lower()
    if needle in (prop.description or "").lower():
        return True
    return any(needle in feature.lower() for feature in prop.features or ())


def matches_criteria(prop: Property, criteria: FilterCriteria) -> bool:
    """Check a property against every active criteria dimension.

    Unset bounds and an empty type set never exclude anything.
    """
    if criteria.price_min is not None and prop.price < criteria.price_min:
        return False
    if criteria.price_max is not None and prop.price > criteria.price_max:
        return False
    if criteria.property_types and prop.property_type not in criteria.property_types:
        return False
    if criteria.bedrooms_min is not None and prop.bedrooms < criteria.bedrooms_min:
        return False
    if criteria.bathrooms_min is not None and prop.bathrooms < criteria.bathrooms_min:
        return False
    if criteria.square_feet_min is not None and prop.square_feet < criteria.square_feet_min:
        return False
    if criteria.keywords and not _matches_keywords(prop, criteria.keywords):
        return False
    return True


def apply_filters(
    properties: Iterable[Property],
    search_term: str | None = "",
    criteria: FilterCriteria | None = None,
) -> list[Property]:
    """Return the properties that pass the search term and all active criteria.

    Args:
        properties: Collection to filter (left untouched).
        search_term: Free-text location search; empty matches everything.
        criteria: Structured filters; None behaves like ``FilterCriteria()``.

    Returns:
        A new list, in input order. Empty when nothing matches.
    """
    criteria = criteria or _NO_CRITERIA
    return [
        p for p in properties if matches_search(p, search_term) and matches_criteria(p, criteria)
    ]


class CriteriaFilter:
    """Filter properties by search term and criteria, logging a summary."""

    def __init__(self, criteria: FilterCriteria, search_term: str = "") -> None:
        """Initialize the criteria filter.

        Args:
            criteria: Filter criteria to apply.
            search_term: Free-text location search.
        """
        self.criteria = criteria
        self.search_term = search_term

    def filter_properties(self, properties: list[Property]) -> list[Property]:
        """Filter properties by search term and criteria.

        Args:
            properties: List of properties to filter.

        Returns:
            List of properties matching every active filter.
        """
        matching = apply_filters(properties, self.search_term, self.criteria)

        logger.info(
            "criteria_filter_complete",
            total_properties=len(properties),
            matching=len(matching),
            search_term=self.search_term or None,
            active_filters=self.criteria.active_count,
            price_min=self.criteria.price_min,
            price_max=self.criteria.price_max,
            property_types=list(self.criteria.property_types),
        )

        return matching
