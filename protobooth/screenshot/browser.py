"""Playwright browser controller — one navigation, fixture injection and full-page capture per call."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from protobooth.errors import TargetConnectionError
from protobooth.models.config import ViewportConfig
from protobooth.models.fixtures import AuthFixture
from protobooth.models.screenshot import Dimensions, ScreenshotResult
from protobooth.url_utils import route_from_url

logger = logging.getLogger(__name__)

AUTH_STORAGE_KEY = "auth"
GLOBAL_STATE_STORAGE_KEY = "globalState"

_SET_LOCAL_STORAGE = "([key, value]) => window.localStorage.setItem(key, value)"


async def launch_browser(playwright: Playwright, headless: bool = True) -> Browser:
    """Launch headless Chromium."""
    return await playwright.chromium.launch(headless=headless)


async def create_capture_context(
    browser: Browser,
    viewport: ViewportConfig,
    user_agent: Optional[str] = None,
) -> BrowserContext:
    """Create an isolated browser context sized to the viewport."""
    context_kwargs: dict = {
        "viewport": {"width": viewport.width, "height": viewport.height},
        "locale": "en-US",
    }
    if user_agent:
        context_kwargs["user_agent"] = user_agent
    return await browser.new_context(**context_kwargs)


class PlaywrightBrowserController:
    """Captures one screenshot of one URL at one viewport."""

    def __init__(
        self,
        browser: Browser,
        navigation_timeout_ms: int = 30000,
        user_agent: Optional[str] = None,
    ):
        self.browser = browser
        self.navigation_timeout_ms = navigation_timeout_ms
        self.user_agent = user_agent

    async def capture_screenshot(
        self,
        url: str,
        viewport: ViewportConfig,
        auth_fixture: Optional[AuthFixture],
        global_state: Optional[dict[str, Any]],
        output_path: str,
    ) -> ScreenshotResult:
        context = await create_capture_context(self.browser, viewport, self.user_agent)
        page = None
        try:
            page = await context.new_page()

            try:
                await page.goto(url, wait_until="networkidle", timeout=self.navigation_timeout_ms)
            except PlaywrightError as e:
                raise TargetConnectionError(
                    f"Failed to connect to application server at {url}: {e}"
                ) from e

            injected = False
            if auth_fixture is not None:
                payload = auth_fixture.model_dump(mode="json", exclude_none=True)
                await page.evaluate(_SET_LOCAL_STORAGE, [AUTH_STORAGE_KEY, json.dumps(payload)])
                injected = True
            if global_state is not None:
                await page.evaluate(_SET_LOCAL_STORAGE, [GLOBAL_STATE_STORAGE_KEY, json.dumps(global_state)])
                injected = True

            # App code that reads storage only at startup must observe the fixtures.
            if injected:
                try:
                    await page.reload(wait_until="networkidle", timeout=self.navigation_timeout_ms)
                except PlaywrightError as e:
                    raise TargetConnectionError(
                        f"Failed to reload {url} after fixture injection: {e}"
                    ) from e

            await page.screenshot(path=output_path, full_page=True)
            logger.debug("Captured %s at %s -> %s", url, viewport.name, output_path)

            return ScreenshotResult(
                route=route_from_url(url),
                viewport=viewport.name,
                dimensions=Dimensions(width=viewport.width, height=viewport.height),
                file_path=output_path,
                timestamp=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            )
        finally:
            if page is not None:
                await page.close()
            await context.close()


class BrowserSession:
    """Owns the Playwright driver and one browser for the lifetime of a process.

    Per-call contexts and pages are created and released by the controller;
    the browser itself is released only by ``close()``.
    """

    def __init__(self, headless: bool = True, navigation_timeout_ms: int = 30000):
        self.headless = headless
        self.navigation_timeout_ms = navigation_timeout_ms
        self._playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None

    async def start(self) -> "BrowserSession":
        if self.browser is None:
            logger.debug("Launching Chromium for screenshot capture...")
            self._playwright = await async_playwright().start()
            self.browser = await launch_browser(self._playwright, headless=self.headless)
        return self

    def controller(self) -> PlaywrightBrowserController:
        if self.browser is None:
            raise RuntimeError("Browser session has not been started")
        return PlaywrightBrowserController(self.browser, self.navigation_timeout_ms)

    async def close(self) -> None:
        if self.browser is not None:
            await self.browser.close()
            self.browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def __aenter__(self) -> "BrowserSession":
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
