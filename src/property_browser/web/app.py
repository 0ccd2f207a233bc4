"""FastAPI application factory with background listing refresh."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from property_browser.browser import ListingBrowser
from property_browser.config import Settings
from property_browser.logging import configure_logging, get_logger
from property_browser.repositories import Repositories, RepositoryError, create_repositories

logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


async def _refresh_loop(browser: ListingBrowser, interval_minutes: int) -> None:
    """Reload listings on a fixed interval so new listings show up."""
    while True:
        await asyncio.sleep(interval_minutes * 60)
        logger.info("listing_refresh_running")
        try:
            await browser.load()
        except Exception:
            logger.error("listing_refresh_failed", exc_info=True)


def create_app(
    settings: Settings | None = None,
    *,
    repositories: Repositories | None = None,
    run_refresh: bool = True,
    log_level: int = logging.INFO,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings. Loaded from env if not provided.
        repositories: Pre-built repositories (caller keeps ownership).
            Built from ``settings.data_backend`` if not provided.
        run_refresh: Whether to start the background listing refresh.
        log_level: Minimum log level (logging.DEBUG with --debug).
    """
    if settings is None:
        settings = Settings()

    configure_logging(json_output=settings.log_json, level=log_level)

    refresh_task: asyncio.Task[None] | None = None

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        nonlocal refresh_task
        repos = repositories if repositories is not None else await create_repositories(settings)
        browser = ListingBrowser(
            repos.properties, repos.saved, cache_size=settings.result_cache_size
        )
        try:
            await browser.load()
        except RepositoryError:
            # Routes retry the load on the next request
            logger.error("initial_listing_load_failed", exc_info=True)

        app.state.settings = settings
        app.state.repositories = repos
        app.state.browser = browser

        if run_refresh and settings.refresh_interval_minutes > 0:
            refresh_task = asyncio.create_task(
                _refresh_loop(browser, settings.refresh_interval_minutes)
            )
        logger.info(
            "web_server_started",
            backend=repos.backend,
            refresh_interval=settings.refresh_interval_minutes if run_refresh else None,
        )

        try:
            yield
        finally:
            if refresh_task:
                refresh_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await refresh_task
            if repositories is None:
                await repos.close()
        logger.info("web_server_stopped")

    app = FastAPI(title="Property Browser", lifespan=lifespan)

    app.add_middleware(SecurityHeadersMiddleware)

    from property_browser.web.routes import router

    app.include_router(router)

    return app
