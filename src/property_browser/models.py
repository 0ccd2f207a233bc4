"""Pydantic models for listings, saved properties and filter criteria."""

import math
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class PropertyType(StrEnum):
    """Property types offered in the filter panel.

    The set is open: listings may carry any other type string.
    """

    HOUSE = "House"
    CONDO = "Condo"
    TOWNHOUSE = "Townhouse"
    APARTMENT = "Apartment"
    LAND = "Land"


KNOWN_PROPERTY_TYPES: Final[tuple[str, ...]] = tuple(t.value for t in PropertyType)


class PropertyStatus(StrEnum):
    """Listing status values used by the hosted table."""

    FOR_SALE = "For Sale"
    PENDING = "Pending"
    SOLD = "Sold"


def split_lines(value: object) -> list[str]:
    """Normalize a list field that may be stored as newline-delimited text.

    Entries are stripped and blank entries dropped.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split("\n")
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value if v is not None]
    else:
        return []
    return [item.strip() for item in items if item.strip()]


# Values used when the source leaves a field out or sends null.
_PROPERTY_DEFAULTS: Final[dict[str, Any]] = {
    "name": "",
    "address": "",
    "city": "",
    "state": "",
    "zip_code": "",
    "price": 0,
    "property_type": "",
    "status": PropertyStatus.FOR_SALE.value,
    "bedrooms": 0,
    "bathrooms": 0,
    "square_feet": 0,
    "year_built": 0,
    "description": "",
    "features": [],
    "images": [],
}


def _coalesce(data: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
    """Replace missing or null fields with defaults, honouring camelCase keys."""
    result = dict(data)
    if "id" not in result and "Id" in result:
        result["id"] = result.pop("Id")
    for field_name, default in defaults.items():
        alias = to_camel(field_name)
        key = alias if alias in result and field_name not in result else field_name
        if result.get(key) is None:
            result.pop(alias, None)
            result[field_name] = list(default) if isinstance(default, list) else default
    return result


class Property(BaseModel):
    """A real-estate listing."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int = Field(description="Assigned by the repository, never changes")
    name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    price: float = Field(default=0, ge=0)
    property_type: str = ""
    status: str = PropertyStatus.FOR_SALE.value
    bedrooms: int = Field(default=0, ge=0)
    bathrooms: float = Field(default=0, ge=0)
    square_feet: int = Field(default=0, ge=0)
    year_built: int = 0
    description: str = ""
    features: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    listing_date: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="before")
    @classmethod
    def fill_missing(cls, data: Any) -> Any:
        """Treat absent text as "", absent numbers as 0 and absent lists as []."""
        if not isinstance(data, dict):
            return data
        result = _coalesce(data, _PROPERTY_DEFAULTS)
        for key in ("listing_date", "listingDate"):
            if key in result and result[key] is None:
                del result[key]
        return result

    @field_validator("features", "images", mode="before")
    @classmethod
    def parse_lines(cls, v: object) -> list[str]:
        return split_lines(v)

    @property
    def location(self) -> str:
        """Single-line "address, city, state zip" for display."""
        region = " ".join(part for part in (self.state, self.zip_code) if part)
        return ", ".join(part for part in (self.address, self.city, region) if part)


class SavedProperty(BaseModel):
    """A bookmark linking the user to a property."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    property_id: int
    saved_date: datetime = Field(default_factory=lambda: datetime.now(UTC))
    notes: str = ""
    name: str = ""

    @model_validator(mode="before")
    @classmethod
    def fill_missing(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        result = _coalesce(data, {"notes": "", "name": ""})
        for key in ("saved_date", "savedDate"):
            if key in result and result[key] is None:
                del result[key]
        return result


class SavedListing(BaseModel):
    """A saved property joined with its bookmark details."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    listing: Property
    saved_id: int
    saved_date: datetime
    notes: str = ""


def parse_bound(value: object) -> float | None:
    """Read a numeric filter bound.

    Anything that is not a finite, non-negative number (blank strings,
    "abc", "nan", "-5") is treated as unset.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def parse_int_bound(value: object) -> int | None:
    """Read a whole-number bound, truncating decimals ("2.9" -> 2)."""
    number = parse_bound(value)
    if number is None:
        return None
    return int(number)


class FilterCriteria(BaseModel):
    """The user's current narrowing intent.

    All fields default to None/() (no filter). Validators coerce strings
    to numbers and silently discard values that are not usable bounds.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    price_min: float | None = None
    price_max: float | None = None
    property_types: tuple[str, ...] = ()
    bedrooms_min: int | None = None
    bathrooms_min: float | None = None
    square_feet_min: int | None = None
    keywords: str | None = None

    @field_validator("price_min", "price_max", "bathrooms_min", mode="before")
    @classmethod
    def coerce_bound(cls, v: object) -> float | None:
        return parse_bound(v)

    @field_validator("bedrooms_min", "square_feet_min", mode="before")
    @classmethod
    def coerce_int_bound(cls, v: object) -> int | None:
        return parse_int_bound(v)

    @field_validator("property_types", mode="before")
    @classmethod
    def clean_property_types(cls, v: object) -> tuple[str, ...]:
        if not v:
            return ()
        if isinstance(v, str):
            items: list[object] = list(v.split(","))
        elif isinstance(v, (set, frozenset)):
            items = sorted(v, key=str)
        elif isinstance(v, (list, tuple)):
            items = list(v)
        else:
            return ()
        cleaned: list[str] = []
        for item in items:
            if not isinstance(item, str):
                continue
            value = item.strip()
            if value and value not in cleaned:
                cleaned.append(value)
        return tuple(cleaned)

    @field_validator("keywords", mode="before")
    @classmethod
    def clean_keywords(cls, v: object) -> str | None:
        if v is None:
            return None
        s = str(v)
        # Matched as typed; only whitespace-only input counts as unset
        return s if s.strip() else None

    @property
    def active_count(self) -> int:
        """Number of active filter dimensions (price range counts once)."""
        return sum(
            1
            for active in (
                self.price_min is not None or self.price_max is not None,
                bool(self.property_types),
                self.bedrooms_min is not None,
                self.bathrooms_min is not None,
                self.square_feet_min is not None,
                self.keywords is not None,
            )
            if active
        )

    @property
    def is_empty(self) -> bool:
        return self.active_count == 0


class FilterTag(BaseModel):
    """One active filter, with the key that removes it."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
