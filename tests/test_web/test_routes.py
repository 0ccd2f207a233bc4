"""Tests for the JSON API routes and app factory."""

import asyncio
import logging
from datetime import UTC, datetime
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from property_browser.browser import ListingBrowser
from property_browser.config import Settings
from property_browser.models import Property, SavedProperty
from property_browser.repositories import Repositories
from property_browser.repositories.base import RepositoryError
from property_browser.repositories.memory import (
    InMemoryPropertyRepository,
    InMemorySavedPropertyRepository,
)
from property_browser.web.app import _refresh_loop, create_app
from property_browser.web.routes import router


class UnavailablePropertyRepository(InMemoryPropertyRepository):
    async def get_all(self) -> list[Property]:
        raise RepositoryError("listings unavailable")


class ReadOnlySavedRepository(InMemorySavedPropertyRepository):
    async def create(self, property_id: int, notes: str | None = None) -> SavedProperty:
        raise RepositoryError("bookmarks are read-only")


class UnreadableSavedRepository(InMemorySavedPropertyRepository):
    async def get_all(self) -> list[SavedProperty]:
        raise RepositoryError("bookmarks unavailable")


@pytest.fixture
def listings() -> list[Property]:
    return [
        Property(
            id=1,
            address="455 Main St",
            city="Austin",
            state="TX",
            zip_code="78701",
            price=300_000,
            property_type="Condo",
            bedrooms=2,
            features=["Rooftop pool"],
            listing_date=datetime(2024, 3, 1, tzinfo=UTC),
        ),
        Property(
            id=2,
            address="1200 Benedict Canyon Dr",
            city="Beverly Hills",
            state="CA",
            zip_code="90210",
            price=500_000,
            property_type="House",
            bedrooms=4,
            listing_date=datetime(2024, 2, 1, tzinfo=UTC),
        ),
    ]


def _make_client(
    properties: InMemoryPropertyRepository, saved: InMemorySavedPropertyRepository
) -> TestClient:
    app = FastAPI()
    app.state.browser = ListingBrowser(properties, saved)
    app.include_router(router)
    return TestClient(app)


@pytest.fixture
def client(listings: list[Property]) -> TestClient:
    return _make_client(
        InMemoryPropertyRepository(listings),
        InMemorySavedPropertyRepository(
            [SavedProperty(id=1, property_id=2, saved_date=datetime(2024, 3, 4, tzinfo=UTC))]
        ),
    )


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestListProperties:
    def test_all_properties(self, client: TestClient) -> None:
        resp = client.get("/api/properties")
        assert resp.status_code == 200
        body = resp.json()
        assert [p["id"] for p in body["properties"]] == [1, 2]
        assert body["total"] == 2
        assert body["active_filters"] == []
        assert body["saved_ids"] == [2]

    def test_camel_case_fields(self, client: TestClient) -> None:
        prop = client.get("/api/properties").json()["properties"][0]
        assert prop["zipCode"] == "78701"
        assert prop["propertyType"] == "Condo"
        assert prop["features"] == ["Rooftop pool"]

    def test_search_by_zip(self, client: TestClient) -> None:
        body = client.get("/api/properties", params={"q": "90210"}).json()
        assert [p["id"] for p in body["properties"]] == [2]
        assert body["search_term"] == "90210"

    def test_price_and_type(self, client: TestClient) -> None:
        body = client.get(
            "/api/properties", params={"price_min": "400000", "property_type": "House"}
        ).json()
        assert [p["id"] for p in body["properties"]] == [2]
        assert body["criteria"]["priceMin"] == 400000
        assert [tag["key"] for tag in body["active_filters"]] == [
            "price",
            "property_type:House",
        ]

    def test_bedrooms_min(self, client: TestClient) -> None:
        body = client.get("/api/properties", params={"bedrooms_min": "3"}).json()
        assert [p["id"] for p in body["properties"]] == [2]
        body = client.get("/api/properties", params={"bedrooms_min": "1"}).json()
        assert [p["id"] for p in body["properties"]] == [1, 2]

    def test_malformed_filter_ignored(self, client: TestClient) -> None:
        resp = client.get("/api/properties", params={"price_min": "cheap"})
        assert resp.status_code == 200
        assert resp.json()["total"] == 2

    def test_keywords(self, client: TestClient) -> None:
        body = client.get("/api/properties", params={"keywords": "POOL"}).json()
        assert [p["id"] for p in body["properties"]] == [1]

    def test_no_matches(self, client: TestClient) -> None:
        body = client.get("/api/properties", params={"q": "Denver"}).json()
        assert body["properties"] == []
        assert body["total"] == 0

    def test_load_failure(self) -> None:
        client = _make_client(UnavailablePropertyRepository(()), InMemorySavedPropertyRepository())
        resp = client.get("/api/properties")
        assert resp.status_code == 503
        assert resp.json() == {"error": "Failed to load properties. Please try again."}

    def test_reload(self, client: TestClient) -> None:
        client.get("/api/properties")
        resp = client.post("/api/properties/reload")
        assert resp.status_code == 200
        assert resp.json() == {"total": 2, "version": 2}

    def test_reload_failure(self) -> None:
        client = _make_client(UnavailablePropertyRepository(()), InMemorySavedPropertyRepository())
        assert client.post("/api/properties/reload").status_code == 503


class TestPropertyDetail:
    def test_detail(self, client: TestClient) -> None:
        resp = client.get("/api/properties/2")
        assert resp.status_code == 200
        body = resp.json()
        assert body["property"]["city"] == "Beverly Hills"

    def test_detail_saved_flag(self, client: TestClient) -> None:
        client.get("/api/properties")
        assert client.get("/api/properties/2").json()["is_saved"] is True
        assert client.get("/api/properties/1").json()["is_saved"] is False

    def test_missing(self, client: TestClient) -> None:
        resp = client.get("/api/properties/99")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Property not found."}


class TestToggleSaved:
    def test_save_then_remove(self, client: TestClient) -> None:
        client.get("/api/properties")
        resp = client.post("/api/properties/1/toggle-save")
        assert resp.status_code == 200
        assert resp.json() == {
            "property_id": 1,
            "saved": True,
            "message": "Property saved successfully",
        }
        assert client.get("/api/properties").json()["saved_ids"] == [1, 2]

        resp = client.post("/api/properties/1/toggle-save")
        assert resp.json()["saved"] is False
        assert resp.json()["message"] == "Property removed from saved"

    def test_missing_property(self, client: TestClient) -> None:
        assert client.post("/api/properties/99/toggle-save").status_code == 404

    def test_repository_failure(self, listings: list[Property]) -> None:
        client = _make_client(InMemoryPropertyRepository(listings), ReadOnlySavedRepository())
        resp = client.post("/api/properties/1/toggle-save")
        assert resp.status_code == 503
        assert resp.json() == {"error": "Failed to update saved properties."}


class TestSavedRoutes:
    def test_list_saved(self, client: TestClient) -> None:
        resp = client.get("/api/saved")
        assert resp.status_code == 200
        body = resp.json()
        assert body["total"] == 1
        assert body["saved"][0]["listing"]["id"] == 2
        assert body["saved"][0]["savedId"] == 1

    def test_create_saved_with_notes(self, client: TestClient) -> None:
        client.get("/api/saved")
        resp = client.post("/api/saved", json={"property_id": 1, "notes": "Visit Saturday"})
        assert resp.status_code == 201
        assert resp.json()["propertyId"] == 1
        assert resp.json()["notes"] == "Visit Saturday"
        assert client.get("/api/saved").json()["total"] == 2

    def test_create_saved_missing_property(self, client: TestClient) -> None:
        resp = client.post("/api/saved", json={"property_id": 99})
        assert resp.status_code == 404

    def test_create_saved_invalid_body(self, client: TestClient) -> None:
        assert client.post("/api/saved", json={}).status_code == 422

    def test_delete_saved(self, client: TestClient) -> None:
        client.get("/api/saved")
        assert client.delete("/api/saved/1").status_code == 204
        assert client.get("/api/saved").json()["total"] == 0

    def test_delete_missing(self, client: TestClient) -> None:
        resp = client.delete("/api/saved/42")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Saved property not found."}

    def test_saved_load_failure(self) -> None:
        client = _make_client(UnavailablePropertyRepository(()), InMemorySavedPropertyRepository())
        assert client.get("/api/saved").status_code == 503


class TestFilterRoutes:
    def test_describe_filters(self, client: TestClient) -> None:
        resp = client.get(
            "/api/filters",
            params=[("price_max", "600000"), ("property_type", "Land"), ("keywords", "view")],
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["criteria"]["priceMax"] == 600000
        assert [tag["label"] for tag in body["active_filters"]] == [
            "0 - $600,000",
            "Land",
            '"view"',
        ]

    def test_remove_filter(self, client: TestClient) -> None:
        resp = client.post(
            "/api/filters/remove",
            json={
                "criteria": {"priceMin": 100000, "priceMax": 900000, "bedroomsMin": 2},
                "key": "price",
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["criteria"]["priceMin"] is None
        assert body["criteria"]["priceMax"] is None
        assert body["criteria"]["bedroomsMin"] == 2
        assert [tag["key"] for tag in body["active_filters"]] == ["bedrooms_min"]


class TestCreateApp:
    @pytest.fixture
    def repositories(self, listings: list[Property]) -> Repositories:
        return Repositories(
            properties=InMemoryPropertyRepository(listings),
            saved=InMemorySavedPropertyRepository(),
        )

    def test_lifespan_loads_listings(self, repositories: Repositories) -> None:
        app = create_app(Settings(), repositories=repositories, run_refresh=False)
        with TestClient(app) as client:
            assert app.state.browser.collection_version == 1
            assert client.get("/api/properties").json()["total"] == 2

    def test_security_headers(self, repositories: Repositories) -> None:
        app = create_app(Settings(), repositories=repositories, run_refresh=False)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"

    def test_startup_survives_load_failure(self) -> None:
        repos = Repositories(
            properties=UnavailablePropertyRepository(()), saved=InMemorySavedPropertyRepository()
        )
        app = create_app(Settings(), repositories=repos, run_refresh=False)
        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
            assert client.get("/api/properties").status_code == 503

    def test_refresh_task_is_cancelled_on_shutdown(self, repositories: Repositories) -> None:
        app = create_app(Settings(refresh_interval_minutes=60), repositories=repositories)
        with TestClient(app) as client:
            assert client.get("/health").status_code == 200

    def test_builds_memory_repositories_from_settings(self) -> None:
        app = create_app(Settings(data_backend="memory"), run_refresh=False)
        with TestClient(app) as client:
            body = client.get("/api/properties").json()
            assert body["total"] > 0
            assert app.state.repositories.backend == "memory"


class TestBookmarkBackendDown:
    @pytest.fixture
    def down_client(self, listings: list[Property]) -> TestClient:
        return _make_client(InMemoryPropertyRepository(listings), UnreadableSavedRepository())

    def test_saved_list_reports_failure(self, down_client: TestClient) -> None:
        resp = down_client.get("/api/saved")
        assert resp.status_code == 503
        assert resp.json() == {"error": "Failed to load saved properties. Please try again."}

    def test_listings_still_served(self, down_client: TestClient) -> None:
        body = down_client.get("/api/properties").json()
        assert body["total"] == 2
        assert body["saved_ids"] == []

    def test_toggle_does_not_guess(self, down_client: TestClient) -> None:
        resp = down_client.post("/api/properties/2/toggle-save")
        assert resp.status_code == 503
        assert resp.json() == {"error": "Failed to update saved properties."}


class FlakyBrowser:
    """Stand-in browser: the first reload hits a bug, the second stops the loop."""

    def __init__(self) -> None:
        self.calls = 0

    async def load(self) -> None:
        self.calls += 1
        if self.calls == 1:
            raise ValueError("unexpected row")
        raise asyncio.CancelledError


class TestRefreshLoop:
    async def test_unexpected_errors_do_not_stop_refresh(self) -> None:
        browser = FlakyBrowser()
        with pytest.raises(asyncio.CancelledError):
            await _refresh_loop(browser, 0)  # type: ignore[arg-type]
        assert browser.calls == 2

    def test_log_level_is_passed_through(self) -> None:
        with patch("property_browser.web.app.configure_logging") as mock_configure:
            create_app(Settings(), run_refresh=False, log_level=logging.DEBUG)
        mock_configure.assert_called_once_with(json_output=False, level=logging.DEBUG)
