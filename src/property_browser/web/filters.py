"""FastAPI dependency turning query parameters into FilterCriteria."""

from typing import Annotated

from fastapi import Depends, Query

from property_browser.models import FilterCriteria


def parse_filters(
    price_min: str | None = None,
    price_max: str | None = None,
    property_type: list[str] = Query(default=[]),
    bedrooms_min: str | None = None,
    bathrooms_min: str | None = None,
    square_feet_min: str | None = None,
    keywords: str | None = None,
) -> FilterCriteria:
    """Parse query params into FilterCriteria.

    Bounds arrive as raw strings so that malformed values are dropped by
    the model's validators instead of failing the request with a 422.
    """
    return FilterCriteria.model_validate(
        {
            "price_min": price_min,
            "price_max": price_max,
            "property_types": property_type,
            "bedrooms_min": bedrooms_min,
            "bathrooms_min": bathrooms_min,
            "square_feet_min": square_feet_min,
            "keywords": keywords,
        }
    )


FilterDep = Annotated[FilterCriteria, Depends(parse_filters)]
