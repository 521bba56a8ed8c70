import sys
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from manatee_pao.config import Settings
from manatee_pao.errors import ErrorCode, PAOScrapeError

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-features=IsolateOrigins,site-per-process",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--no-sandbox",
    "--disable-setuid-sandbox",
]


class BrowserPool:
    """
    Owns one Chromium engine shared by concurrent lookups.

    Each lookup borrows an isolated context through `page()`; contexts never
    share cookies or navigation state and are closed when the borrower exits,
    fails, or is cancelled. The engine itself is started lazily and relaunched
    if it disconnects.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def start(self) -> Browser:
        async with self._lock:
            if self.is_connected:
                return self._browser
            try:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self._browser = await self._launch(self._playwright)
            except (PlaywrightError, OSError) as e:
                logger.error(f"BrowserPool: could not start Chromium: {e}")
                raise PAOScrapeError(
                    f"Failed to launch browser: {e}",
                    ErrorCode.BROWSER_LAUNCH_FAILED,
                    step="launch",
                    cause=e,
                ) from e
            self._browser.on("disconnected", self._on_disconnected)
            return self._browser

    async def _launch(self, p: Playwright) -> Browser:
        ws_endpoint = self.settings.ws_endpoint
        if ws_endpoint:
            logger.info(f"BrowserPool: connecting to remote browser at {ws_endpoint}")
            return await p.chromium.connect(ws_endpoint, timeout=self.settings.nav_timeout_ms)

        kwargs = dict(headless=self.settings.headless, args=LAUNCH_ARGS)
        if sys.platform == 'win32':
            kwargs['handle_sigint'] = False
        logger.info(f"BrowserPool: launching local Chromium (headless={self.settings.headless})")
        return await p.chromium.launch(**kwargs)

    def _on_disconnected(self, browser: Browser):
        logger.warning("BrowserPool: browser disconnected, will relaunch on next request")
        if self._browser is browser:
            self._browser = None

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Request-scoped page in a fresh browser context."""
        browser = await self.start()
        try:
            context = await browser.new_context(
                user_agent=self.settings.user_agent,
                viewport={"width": 1920, "height": 1080},
                locale="en-US",
                timezone_id="America/New_York",
                ignore_https_errors=True,
            )
        except PlaywrightError as e:
            raise PAOScrapeError(
                f"Failed to open browser context: {e}",
                ErrorCode.BROWSER_LAUNCH_FAILED,
                step="new_context",
                cause=e,
            ) from e

        try:
            context.set_default_navigation_timeout(self.settings.nav_timeout_ms)
            context.set_default_timeout(self.settings.nav_timeout_ms)
            page = await context.new_page()
            yield page
        finally:
            try:
                await context.close()
            except PlaywrightError as e:
                logger.debug(f"BrowserPool: context already closed: {e}")

    async def close(self):
        async with self._lock:
            if self._browser is not None:
                try:
                    await self._browser.close()
                except PlaywrightError as e:
                    logger.debug(f"BrowserPool: browser close failed: {e}")
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
            logger.info("BrowserPool: closed")
