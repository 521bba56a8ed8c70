import unittest

from manatee_pao.utils.address_utils import (
    is_real_address,
    normalize_address_for_pao,
    normalize_street_for_usps,
    split_street,
)


class TestAddressNormalization(unittest.TestCase):
    def test_suffix_and_directional_are_abbreviated(self):
        result = normalize_address_for_pao("4659 56th Terrace East, Bradenton, FL 34208")
        self.assertEqual(result.normalized_street, "4659 56th Ter E")
        self.assertEqual(result.normalized_full, "4659 56th Ter E, Bradenton, FL 34208")
        self.assertEqual(result.city, "Bradenton")
        self.assertEqual(result.state, "FL")
        self.assertEqual(result.zip_code, "34208")
        self.assertTrue(result.was_normalized)
        self.assertIn("Terrace → Ter", result.normalizations)
        self.assertIn("East → E", result.normalizations)

    def test_already_abbreviated_address_is_unchanged(self):
        result = normalize_address_for_pao("4659 56th Ter E, Bradenton, FL 34208")
        self.assertEqual(result.normalized_full, "4659 56th Ter E, Bradenton, FL 34208")
        self.assertFalse(result.was_normalized)
        self.assertEqual(result.normalizations, [])

    def test_pre_directional_and_unit(self):
        self.assertEqual(
            normalize_street_for_usps("100 North Main Street Apartment 4"),
            "100 N Main St Apt 4",
        )

    def test_house_number_is_never_treated_as_suffix(self):
        # "Way" as the first token of a street line is left alone
        self.assertEqual(normalize_street_for_usps("Way Road"), "Way Rd")

    def test_normalization_is_idempotent(self):
        inputs = [
            "4659 56th Terrace East, Bradenton, FL 34208",
            "1200 Manatee Avenue West, Bradenton, FL",
            "55 Gulf of Mexico Drive, Longboat Key, FL 34228",
            "7 Southwest Boulevard Suite 200",
            ", North Port",
            "  8101   Lakewood   Ranch   Boulevard  ,  Lakewood Ranch , FL 34202-1234",
            "",
        ]
        for raw in inputs:
            with self.subTest(raw=raw):
                once = normalize_address_for_pao(raw).normalized_full
                twice = normalize_address_for_pao(once).normalized_full
                self.assertEqual(once, twice)

    def test_blank_city_keeps_its_slot(self):
        once = normalize_address_for_pao("4659 56th Ter E, , FL 34208")
        self.assertEqual(once.normalized_full, "4659 56th Ter E, , FL 34208")
        twice = normalize_address_for_pao(once.normalized_full)
        for field in ("normalized_street", "city", "state", "zip_code"):
            with self.subTest(field=field):
                self.assertEqual(getattr(once, field), getattr(twice, field))
        self.assertIsNone(twice.city)
        self.assertEqual(twice.zip_code, "34208")

    def test_zip_in_fourth_component(self):
        result = normalize_address_for_pao("100 Main St, Bradenton, FL, 34205")
        self.assertEqual(result.state, "FL")
        self.assertEqual(result.zip_code, "34205")

    def test_street_only(self):
        result = normalize_address_for_pao("100 Main Street")
        self.assertEqual(result.normalized_full, "100 Main St")
        self.assertIsNone(result.city)
        self.assertIsNone(result.zip_code)


class TestIsRealAddress(unittest.TestCase):
    def test_street_address(self):
        self.assertTrue(is_real_address("4659 56th Ter E, Bradenton, FL"))

    def test_parcel_number_is_not_an_address(self):
        self.assertFalse(is_real_address("1234567890"))

    def test_blank_and_numeric_input(self):
        self.assertFalse(is_real_address(""))
        self.assertFalse(is_real_address("   "))
        self.assertFalse(is_real_address("12345"))


class TestSplitStreet(unittest.TestCase):
    def test_number_and_words(self):
        self.assertEqual(split_street("4659 56th Ter E"), ("4659", ["56th", "ter"]))

    def test_no_house_number(self):
        number, words = split_street("Main Street")
        self.assertEqual(number, "")
        self.assertEqual(words, ["main", "street"])

    def test_empty(self):
        self.assertEqual(split_street(None), ("", []))


if __name__ == "__main__":
    unittest.main()
