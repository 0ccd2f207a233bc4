"""Mapping between model fields and hosted-table column names."""

from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any, Final, TypeVar

from pydantic import BaseModel, ValidationError

from property_browser.logging import get_logger
from property_browser.models import Property, SavedProperty

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

PROPERTY_COLUMNS: Final[dict[str, str]] = {
    "name": "Name",
    "address": "address_c",
    "city": "city_c",
    "state": "state_c",
    "zip_code": "zip_code_c",
    "price": "price_c",
    "property_type": "property_type_c",
    "bedrooms": "bedrooms_c",
    "bathrooms": "bathrooms_c",
    "square_feet": "square_feet_c",
    "year_built": "year_built_c",
    "description": "description_c",
    "images": "images_c",
    "features": "features_c",
    "listing_date": "listing_date_c",
    "status": "status_c",
}

SAVED_PROPERTY_COLUMNS: Final[dict[str, str]] = {
    "name": "Name",
    "property_id": "property_id_c",
    "saved_date": "saved_date_c",
    "notes": "notes_c",
}

# Columns holding one entry per line
_LIST_FIELDS: Final = frozenset({"features", "images"})


def query_fields(columns: Mapping[str, str]) -> list[dict[str, Any]]:
    """Field selection block for a table query."""
    fields: list[dict[str, Any]] = []
    for column in columns.values():
        if column == "property_id_c":
            # Lookup column: also pull the referenced record's name
            fields.append(
                {
                    "field": {"Name": column},
                    "referenceField": {"field": {"Name": "Name"}},
                }
            )
        else:
            fields.append({"field": {"Name": column}})
    return fields


def _encode(field: str, value: Any) -> Any:
    if field in _LIST_FIELDS and isinstance(value, (list, tuple)):
        return "\n".join(str(v) for v in value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _decode(record: Mapping[str, Any], columns: Mapping[str, str]) -> dict[str, Any]:
    fields: dict[str, Any] = {"id": record.get("Id")}
    for field, column in columns.items():
        if column in record:
            fields[field] = record[column]
    return fields


def record_to_property(record: Mapping[str, Any]) -> Property:
    """Build a Property from a table record.

    Raises:
        ValidationError: If the record has no usable id or invalid values.
    """
    return Property.model_validate(_decode(record, PROPERTY_COLUMNS))


def property_to_record(data: Mapping[str, Any], *, partial: bool = False) -> dict[str, Any]:
    """Build a table record from property fields.

    Args:
        data: Property fields keyed by model field name.
        partial: Only emit columns present in ``data`` (for updates).
            Otherwise every column is emitted, defaulting missing values.
    """
    if partial:
        fields = dict(data)
    else:
        fields = Property.model_validate({**data, "id": 0}).model_dump()
        fields["name"] = data.get("name") or fields["address"]
    return {
        column: _encode(field, fields[field])
        for field, column in PROPERTY_COLUMNS.items()
        if field in fields
    }


def record_to_saved_property(record: Mapping[str, Any]) -> SavedProperty:
    """Build a SavedProperty from a table record.

    The property reference may arrive as a nested ``{"Id": ..., "Name": ...}``
    lookup or as a bare id.
    """
    fields = _decode(record, SAVED_PROPERTY_COLUMNS)
    reference = fields.get("property_id")
    if isinstance(reference, Mapping):
        fields["property_id"] = reference.get("Id")
    return SavedProperty.model_validate(fields)


def saved_property_to_record(data: Mapping[str, Any]) -> dict[str, Any]:
    """Build a table record from bookmark fields present in ``data``."""
    return {
        column: _encode(field, data[field])
        for field, column in SAVED_PROPERTY_COLUMNS.items()
        if field in data
    }


def parse_records(
    records: Iterable[Mapping[str, Any]],
    parse: Callable[[Mapping[str, Any]], ModelT],
    *,
    table: str,
) -> list[ModelT]:
    """Parse records, skipping (and logging) any that fail validation."""
    parsed: list[ModelT] = []
    for record in records:
        try:
            parsed.append(parse(record))
        except ValidationError as e:
            logger.warning(
                "record_skipped",
                table=table,
                record_id=record.get("Id"),
                errors=e.error_count(),
            )
    return parsed
