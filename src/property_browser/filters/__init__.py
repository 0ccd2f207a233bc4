"""Search and filtering over an in-memory property collection."""

from property_browser.filters.engine import (
    CriteriaFilter,
    apply_filters,
    matches_criteria,
    matches_search,
)
from property_browser.filters.tags import active_filter_tags, clear_filters, remove_filter_tag

__all__ = [
    "CriteriaFilter",
    "active_filter_tags",
    "apply_filters",
    "clear_filters",
    "matches_criteria",
    "matches_search",
    "remove_filter_tag",
]
