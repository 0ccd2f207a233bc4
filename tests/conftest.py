"""Shared pytest fixtures."""

import gc
import os
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest
from hypothesis import HealthCheck, settings

from property_browser.config import Settings
from property_browser.models import Property

# Hypothesis settings profiles for different environments
settings.register_profile("fast", max_examples=25)
settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fast"))


@pytest.fixture(autouse=True)
def _isolate_settings_from_dotenv(monkeypatch: pytest.MonkeyPatch) -> None:
    """Prevent a local .env file or shell env from leaking into test Settings."""
    monkeypatch.setattr(
        Settings,
        "model_config",
        {**Settings.model_config, "env_file": None},
    )
    for key in list(os.environ):
        if key.startswith("PROPERTY_BROWSER_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def _cleanup_aiosqlite_threads():
    """Safety net: stop aiosqlite worker threads leaked by a test.

    Each aiosqlite connection runs a worker thread; a connection that is
    never closed keeps the process alive after the run.
    """
    yield

    from aiosqlite.core import Connection

    gc.collect()
    leaked = False
    for obj in gc.get_objects():
        if isinstance(obj, Connection) and obj._connection is not None:
            leaked = True
            obj.stop()

    if leaked:
        import warnings

        warnings.warn(
            "Test leaked aiosqlite connection(s) - close the database in fixture teardown",
            ResourceWarning,
            stacklevel=1,
        )
    for thread in threading.enumerate():
        if "_connection_worker_thread" in (thread.name or ""):
            thread.join(timeout=1.0)


@pytest.fixture
def make_property() -> Callable[..., Property]:
    """Factory for Property instances with sensible defaults and auto-incrementing IDs."""
    _counter = 0

    def _make(
        price: float = 450_000,
        property_type: str = "House",
        bedrooms: int = 3,
        bathrooms: float = 2,
        square_feet: int = 1800,
        **overrides: Any,
    ) -> Property:
        nonlocal _counter
        _counter += 1
        defaults: dict[str, Any] = {
            "id": overrides.pop("id", _counter),
            "address": f"{_counter} Main St",
            "city": "Springfield",
            "state": "IL",
            "zip_code": "62701",
            "price": price,
            "property_type": property_type,
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "square_feet": square_feet,
            "description": "Well-kept home close to schools.",
            "features": ["Garage"],
            "listing_date": datetime(2024, 1, _counter % 28 + 1, tzinfo=UTC),
        }
        defaults.update(overrides)
        return Property(**defaults)

    return _make


@pytest.fixture
def scenario_properties() -> list[Property]:
    """The two-listing collection used by the documented filter scenarios."""
    return [
        Property.model_validate(
            {"Id": 1, "price": 300000, "bedrooms": 2, "propertyType": "Condo"}
        ),
        Property.model_validate(
            {"Id": 2, "price": 500000, "bedrooms": 4, "propertyType": "House"}
        ),
    ]
