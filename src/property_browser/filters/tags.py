"""Active-filter tags: human-readable labels with a key that removes each filter."""

from typing import Final

from property_browser.models import FilterCriteria, FilterTag

PRICE_KEY: Final = "price"
PROPERTY_TYPE_PREFIX: Final = "property_type:"
BEDROOMS_KEY: Final = "bedrooms_min"
BATHROOMS_KEY: Final = "bathrooms_min"
SQUARE_FEET_KEY: Final = "square_feet_min"
KEYWORDS_KEY: Final = "keywords"

# Single-field tags: removal key -> criteria field it clears
_FIELD_KEYS: Final[dict[str, str]] = {
    BEDROOMS_KEY: "bedrooms_min",
    BATHROOMS_KEY: "bathrooms_min",
    SQUARE_FEET_KEY: "square_feet_min",
    KEYWORDS_KEY: "keywords",
}


def _format_number(value: float) -> str:
    """Render 2.0 as "2" and 1.5 as "1.5"."""
    return f"{value:g}" if value != int(value) else f"{int(value):,}"


def _format_price(value: float | None, missing: str) -> str:
    if value is None:
        return missing
    return f"${value:,.0f}"


def active_filter_tags(criteria: FilterCriteria) -> list[FilterTag]:
    """Build one tag per active filter, in display order.

    The price range yields a single combined tag; each selected property
    type yields its own tag.
    """
    tags: list[FilterTag] = []
    if criteria.price_min is not None or criteria.price_max is not None:
        low = _format_price(criteria.price_min, "0")
        high = _format_price(criteria.price_max, "∞")
        tags.append(FilterTag(key=PRICE_KEY, label=f"{low} - {high}"))
    for property_type in criteria.property_types:
        tags.append(FilterTag(key=f"{PROPERTY_TYPE_PREFIX}{property_type}", label=property_type))
    if criteria.bedrooms_min is not None:
        tags.append(FilterTag(key=BEDROOMS_KEY, label=f"{criteria.bedrooms_min}+ bedrooms"))
    if criteria.bathrooms_min is not None:
        tags.append(
            FilterTag(
                key=BATHROOMS_KEY,
                label=f"{_format_number(criteria.bathrooms_min)}+ bathrooms",
            )
        )
    if criteria.square_feet_min is not None:
        tags.append(
            FilterTag(key=SQUARE_FEET_KEY, label=f"{criteria.square_feet_min:,}+ sq ft")
        )
    if criteria.keywords:
        tags.append(FilterTag(key=KEYWORDS_KEY, label=f'"{criteria.keywords}"'))
    return tags


def remove_filter_tag(criteria: FilterCriteria, key: str) -> FilterCriteria:
    """Return a copy of ``criteria`` with the filter behind ``key`` cleared.

    Only the field(s) the tag represents change. Unknown keys leave the
    criteria as it was.
    """
    if key == PRICE_KEY:
        return criteria.model_copy(update={"price_min": None, "price_max": None})
    if key.startswith(PROPERTY_TYPE_PREFIX):
        removed = key[len(PROPERTY_TYPE_PREFIX) :]
        remaining = tuple(t for t in criteria.property_types if t != removed)
        return criteria.model_copy(update={"property_types": remaining})
    field = _FIELD_KEYS.get(key)
    if field is None:
        return criteria
    return criteria.model_copy(update={field: None})


def clear_filters() -> FilterCriteria:
    """Criteria with every filter unset."""
    return FilterCriteria()
