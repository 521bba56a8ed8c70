import unittest

from manatee_pao.utils.blocking_detector import detect_blocking, is_blocked

import pao_fixtures as fx


class TestBlockingDetector(unittest.TestCase):
    def test_recaptcha_page(self):
        self.assertEqual(detect_blocking(fx.CAPTCHA_HTML), "CAPTCHA challenge")

    def test_cloudflare_title(self):
        self.assertEqual(detect_blocking("<html></html>", title="Just a moment..."), "Cloudflare challenge")

    def test_rate_limit_page(self):
        self.assertEqual(detect_blocking("<h1>429 Too Many Requests</h1>"), "Rate limited")

    def test_access_denied(self):
        self.assertTrue(is_blocked("<p>Sorry, you have been blocked</p>"))

    def test_normal_pages_are_not_blocked(self):
        for html in (fx.SEARCH_FORM_HTML, fx.RESULTS_HTML, fx.NO_RESULTS_HTML, fx.detail_page_html()):
            with self.subTest(html=html[:40]):
                self.assertIsNone(detect_blocking(html, title="Manatee County Property Appraiser"))

    def test_empty_content(self):
        self.assertIsNone(detect_blocking(None))
        self.assertIsNone(detect_blocking(""))


if __name__ == "__main__":
    unittest.main()
