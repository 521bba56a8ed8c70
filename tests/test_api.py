import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from manatee_pao import main
from manatee_pao.errors import ErrorCode, PAOScrapeError
from manatee_pao.models.property_record import LookupResult, PropertyRecord

import pao_fixtures as fx


class StubSearchService:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.addresses = []

    async def lookup(self, address):
        self.addresses.append(address)
        if self.error is not None:
            raise self.error
        return self.result


class TestPropertyAPI(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(main.app)

    def test_root(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["browser_connected"])

    def test_lookup_found(self):
        result = LookupResult(
            detail_url=fx.DETAIL_URL,
            record=PropertyRecord(parcel_id=fx.PARCEL_ID, market_value=405500),
            found=True,
        )
        service = StubSearchService(result=result)
        with patch.object(main, "search_service", service):
            response = self.client.get("/api/property", params={"address": "4659 56th Ter E, Bradenton, FL"})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["found"])
        self.assertEqual(body["record"]["parcel_id"], fx.PARCEL_ID)
        self.assertEqual(service.addresses, ["4659 56th Ter E, Bradenton, FL"])

    def test_not_found_is_still_200(self):
        service = StubSearchService(result=LookupResult(message="Property not found"))
        with patch.object(main, "search_service", service):
            response = self.client.get("/api/property", params={"address": "1 Nowhere Ln"})
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["detail_url"])

    def test_error_codes_map_to_status(self):
        cases = {
            ErrorCode.BLOCKED: 429,
            ErrorCode.TIMEOUT: 504,
            ErrorCode.BROWSER_LAUNCH_FAILED: 503,
            ErrorCode.NAVIGATION_FAILED: 502,
        }
        for code, status in cases.items():
            with self.subTest(code=code):
                error = PAOScrapeError("failed", code, url=fx.SEARCH_URL, step="search_form")
                with patch.object(main, "search_service", StubSearchService(error=error)):
                    response = self.client.get("/api/property", params={"address": "4659 56th Ter E"})
                self.assertEqual(response.status_code, status)
                detail = response.json()["detail"]
                self.assertEqual(detail["code"], code.value)
                self.assertEqual(detail["step"], "search_form")

    def test_address_is_required(self):
        self.assertEqual(self.client.get("/api/property").status_code, 422)


if __name__ == "__main__":
    unittest.main()
