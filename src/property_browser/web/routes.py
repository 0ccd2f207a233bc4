"""JSON API routes."""

from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from property_browser.browser import ListingBrowser
from property_browser.filters.tags import active_filter_tags, remove_filter_tag
from property_browser.logging import get_logger
from property_browser.models import FilterCriteria
from property_browser.repositories.base import RepositoryError
from property_browser.web.filters import FilterDep

logger = get_logger(__name__)

router = APIRouter()

LOAD_ERROR_MESSAGE = "Failed to load properties. Please try again."
SAVED_LOAD_ERROR_MESSAGE = "Failed to load saved properties. Please try again."
SAVE_ERROR_MESSAGE = "Failed to update saved properties."
NOT_FOUND_MESSAGE = "Property not found."


class SaveRequest(BaseModel):
    """Body of ``POST /api/saved``."""

    property_id: int
    notes: str | None = None


class RemoveTagRequest(BaseModel):
    """Body of ``POST /api/filters/remove``."""

    criteria: FilterCriteria = FilterCriteria()
    key: str


def _get_browser(request: Request) -> ListingBrowser:
    return request.app.state.browser  # type: ignore[no-any-return]


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


def _filters_payload(criteria: FilterCriteria) -> dict[str, Any]:
    return {
        "criteria": _dump(criteria),
        "active_filters": [_dump(tag) for tag in active_filter_tags(criteria)],
    }


async def _ensure_loaded(browser: ListingBrowser) -> None:
    """Load the collection if startup could not."""
    if browser.collection_version == 0:
        await browser.load()


@router.get("/health")
async def health_check() -> JSONResponse:
    """Liveness check."""
    return JSONResponse({"status": "ok"})


@router.get("/api/properties")
async def list_properties(request: Request, filters: FilterDep, q: str = "") -> JSONResponse:
    """Listings matching the search term and filters, in listing order."""
    browser = _get_browser(request)
    try:
        await _ensure_loaded(browser)
    except RepositoryError:
        logger.error("property_list_failed", exc_info=True)
        return JSONResponse({"error": LOAD_ERROR_MESSAGE}, status_code=503)

    properties = browser.search(q, filters)
    return JSONResponse(
        {
            "properties": [_dump(p) for p in properties],
            "total": len(properties),
            "search_term": q,
            **_filters_payload(filters),
            "saved_ids": sorted(browser.saved_property_ids),
        }
    )


@router.post("/api/properties/reload")
async def reload_properties(request: Request) -> JSONResponse:
    """Re-fetch listings and bookmarks from the repositories."""
    browser = _get_browser(request)
    try:
        await browser.load()
    except RepositoryError:
        logger.error("property_reload_failed", exc_info=True)
        return JSONResponse({"error": LOAD_ERROR_MESSAGE}, status_code=503)
    return JSONResponse(
        {"total": len(browser.properties), "version": browser.collection_version}
    )


@router.get("/api/properties/{property_id}")
async def property_detail(request: Request, property_id: int) -> JSONResponse:
    """One listing with its gallery and saved state."""
    browser = _get_browser(request)
    prop = await browser.get_property(property_id)
    if prop is None:
        return JSONResponse({"error": NOT_FOUND_MESSAGE}, status_code=404)
    return JSONResponse({"property": _dump(prop), "is_saved": browser.is_saved(property_id)})


@router.post("/api/properties/{property_id}/toggle-save")
async def toggle_saved(request: Request, property_id: int) -> JSONResponse:
    """Save or un-save a listing."""
    browser = _get_browser(request)
    if await browser.get_property(property_id) is None:
        return JSONResponse({"error": NOT_FOUND_MESSAGE}, status_code=404)
    try:
        saved = await browser.toggle_saved(property_id)
    except RepositoryError:
        logger.error("toggle_saved_failed", property_id=property_id, exc_info=True)
        return JSONResponse({"error": SAVE_ERROR_MESSAGE}, status_code=503)
    message = "Property saved successfully" if saved else "Property removed from saved"
    return JSONResponse({"property_id": property_id, "saved": saved, "message": message})


@router.get("/api/saved")
async def saved_properties(request: Request) -> JSONResponse:
    """Saved listings, most recently saved first."""
    browser = _get_browser(request)
    try:
        await _ensure_loaded(browser)
        await browser.refresh_saved()
    except RepositoryError:
        logger.error("saved_list_failed", exc_info=True)
        return JSONResponse({"error": SAVED_LOAD_ERROR_MESSAGE}, status_code=503)
    listings = browser.saved_listings()
    return JSONResponse({"saved": [_dump(item) for item in listings], "total": len(listings)})


@router.post("/api/saved")
async def create_saved(request: Request, body: SaveRequest) -> JSONResponse:
    """Bookmark a listing, with optional notes."""
    browser = _get_browser(request)
    if await browser.get_property(body.property_id) is None:
        return JSONResponse({"error": NOT_FOUND_MESSAGE}, status_code=404)
    try:
        saved = await browser.save(body.property_id, body.notes)
    except RepositoryError:
        logger.error("create_saved_failed", property_id=body.property_id, exc_info=True)
        return JSONResponse({"error": SAVE_ERROR_MESSAGE}, status_code=503)
    return JSONResponse(_dump(saved), status_code=201)


@router.delete("/api/saved/{saved_id}")
async def delete_saved(request: Request, saved_id: int) -> Response:
    """Remove a bookmark by its id."""
    browser = _get_browser(request)
    if not await browser.remove_saved(saved_id):
        return JSONResponse({"error": "Saved property not found."}, status_code=404)
    return Response(status_code=204)


@router.get("/api/filters")
async def describe_filters(filters: FilterDep) -> JSONResponse:
    """Normalized criteria and active-filter tags for the given query params."""
    return JSONResponse(_filters_payload(filters))


@router.post("/api/filters/remove")
async def remove_filter(body: RemoveTagRequest) -> JSONResponse:
    """Clear the filter behind one tag key and return the new criteria."""
    return JSONResponse(_filters_payload(remove_filter_tag(body.criteria, body.key)))
