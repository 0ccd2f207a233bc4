"""Tests for the query-parameter filter dependency."""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from property_browser.models import FilterCriteria
from property_browser.web.filters import FilterDep, parse_filters


def _echo_client() -> TestClient:
    app = FastAPI()

    @app.get("/echo")
    async def echo(filters: FilterDep) -> dict[str, object]:
        return filters.model_dump(mode="json")

    return TestClient(app)


class TestParseFilters:
    def test_no_params(self) -> None:
        assert parse_filters(property_type=[]) == FilterCriteria()

    def test_string_bounds_coerced(self) -> None:
        criteria = parse_filters(
            price_min="400000", bedrooms_min="3", bathrooms_min="1.5", property_type=[]
        )
        assert criteria.price_min == 400_000
        assert criteria.bedrooms_min == 3
        assert criteria.bathrooms_min == 1.5

    def test_malformed_bounds_dropped(self) -> None:
        criteria = parse_filters(price_max="lots", square_feet_min="-10", property_type=[])
        assert criteria.is_empty


class TestFilterDependency:
    def test_repeated_property_type(self) -> None:
        resp = _echo_client().get(
            "/echo", params=[("property_type", "House"), ("property_type", "Condo")]
        )
        assert resp.status_code == 200
        assert resp.json()["property_types"] == ["House", "Condo"]

    def test_malformed_values_do_not_fail_request(self) -> None:
        resp = _echo_client().get(
            "/echo", params={"price_min": "abc", "bedrooms_min": "", "keywords": "  pool "}
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["price_min"] is None
        assert body["bedrooms_min"] is None
        assert body["keywords"] == "  pool "
