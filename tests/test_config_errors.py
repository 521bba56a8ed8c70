import os
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from playwright.async_api import Error as PlaywrightError

from manatee_pao.agents.browser_pool import BrowserPool
from manatee_pao.config import DEFAULT_USER_AGENT, Settings, load_settings
from manatee_pao.errors import ErrorCode, PAOScrapeError, user_message_for


class TestLoadSettings(unittest.TestCase):
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings()
        self.assertEqual(settings.nav_timeout_ms, 45000)
        self.assertEqual(settings.operation_timeout_ms, 60000)
        self.assertEqual(settings.tab_wait_ms, 5000)
        self.assertEqual(settings.scope, "full")
        self.assertTrue(settings.headless)
        self.assertIsNone(settings.ws_endpoint)
        self.assertEqual(settings.user_agent, DEFAULT_USER_AGENT)
        self.assertIsNone(settings.exa_api_key)

    def test_environment_overrides(self):
        env = {
            "PAO_NAV_TIMEOUT_MS": "30000",
            "PAO_SCRAPE_TIMEOUT_MS": "90000",
            "PAO_TAB_WAIT_MS": "2000",
            "PAO_SCRAPE_SCOPE": "BASIC",
            "PLAYWRIGHT_HEADLESS": "false",
            "PLAYWRIGHT_WS_ENDPOINT": "ws://browser:3000",
            "EXA_API_KEY": "abc",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = load_settings()
        self.assertEqual(settings.nav_timeout_ms, 30000)
        self.assertEqual(settings.operation_timeout_s, 90.0)
        self.assertEqual(settings.tab_wait_ms, 2000)
        self.assertEqual(settings.scope, "basic")
        self.assertFalse(settings.headless)
        self.assertEqual(settings.ws_endpoint, "ws://browser:3000")
        self.assertEqual(settings.exa_api_key, "abc")

    def test_invalid_values_fall_back(self):
        env = {"PAO_NAV_TIMEOUT_MS": "soon", "PAO_TAB_WAIT_MS": "-5", "PAO_SCRAPE_SCOPE": "everything"}
        with patch.dict(os.environ, env, clear=True):
            settings = load_settings()
        self.assertEqual(settings.nav_timeout_ms, 45000)
        self.assertEqual(settings.tab_wait_ms, 5000)
        self.assertEqual(settings.scope, "full")


class TestPAOScrapeError(unittest.TestCase):
    def test_context_is_carried(self):
        error = PAOScrapeError(
            "Timed out loading page", ErrorCode.TIMEOUT,
            address="4659 56th Ter E", url="https://www.manateepao.gov/search/", step="search_form",
        )
        self.assertTrue(error.retryable)
        self.assertEqual(error.to_dict()["code"], "TIMEOUT")
        self.assertIn("step=search_form", str(error))
        self.assertIn("url=https://www.manateepao.gov/search/", str(error))

    def test_blocked_is_not_retryable(self):
        self.assertFalse(PAOScrapeError("captcha", ErrorCode.BLOCKED).retryable)

    def test_user_messages(self):
        self.assertIn("automated access", user_message_for(PAOScrapeError("x", ErrorCode.BLOCKED)))
        self.assertIn("rate limit", user_message_for(RuntimeError("HTTP 429 from upstream")))
        self.assertIn("timed out", user_message_for(RuntimeError("operation timed out")))
        self.assertIn("unexpected", user_message_for(RuntimeError("boom")))


class TestBrowserPool(unittest.IsolatedAsyncioTestCase):
    async def test_launch_failure_is_typed(self):
        manager = MagicMock()
        manager.start = AsyncMock(side_effect=PlaywrightError("Executable doesn't exist"))
        pool = BrowserPool(Settings())

        with patch("manatee_pao.agents.browser_pool.async_playwright", return_value=manager):
            with self.assertRaises(PAOScrapeError) as ctx:
                async with pool.page():
                    pass

        self.assertEqual(ctx.exception.code, ErrorCode.BROWSER_LAUNCH_FAILED)
        self.assertFalse(pool.is_connected)

    async def test_context_closed_when_borrower_fails(self):
        context = MagicMock()
        context.new_page = AsyncMock(return_value=MagicMock())
        context.close = AsyncMock()
        browser = MagicMock()
        browser.is_connected.return_value = True
        browser.new_context = AsyncMock(return_value=context)
        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(return_value=browser)
        manager = MagicMock()
        manager.start = AsyncMock(return_value=playwright)
        pool = BrowserPool(Settings(headless=True))

        with patch("manatee_pao.agents.browser_pool.async_playwright", return_value=manager):
            with self.assertRaises(RuntimeError):
                async with pool.page():
                    raise RuntimeError("scrape failed")

        context.close.assert_awaited_once()
        kwargs = browser.new_context.call_args.kwargs
        self.assertEqual(kwargs["viewport"], {"width": 1920, "height": 1080})
        self.assertEqual(kwargs["timezone_id"], "America/New_York")
        self.assertIn("--disable-blink-features=AutomationControlled", playwright.chromium.launch.call_args.kwargs["args"])


if __name__ == "__main__":
    unittest.main()
