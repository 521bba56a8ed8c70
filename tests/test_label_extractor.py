import unittest

from manatee_pao.parsers.label_extractor import clean_value, extract_field

import pao_fixtures as fx


class TestExtractField(unittest.TestCase):
    def test_bold_label_sibling_column(self):
        self.assertEqual(extract_field(fx.OWNER_CARD, ["Owner Type"]), "Individual")
        self.assertEqual(
            extract_field(fx.OWNER_CARD, ["Situs Address"]),
            "4659 56TH TER E, BRADENTON FL 34208",
        )

    def test_strong_label_in_parent_row(self):
        html = """
        <div class="row">
          <div class="col-sm-4"><strong>Jurisdiction</strong></div>
          <div class="col-sm-8">UNINCORPORATED</div>
        </div>
        """
        self.assertEqual(extract_field(html, ["Jurisdiction"]), "UNINCORPORATED")

    def test_definition_list(self):
        html = "<dl><dt>Neighborhood</dt><dd>CREEKWOOD</dd><dt>Zoning</dt><dd>PD-R</dd></dl>"
        self.assertEqual(extract_field(html, ["Zoning"]), "PD-R")

    def test_table_row(self):
        html = "<table><tr><td>Tax District</td><td>-</td></tr><tr><td>Tax District</td><td>4020</td></tr></table>"
        self.assertEqual(extract_field(html, ["Tax District"]), "4020")

    def test_inline_text(self):
        html = "<div><p>Homestead: Yes</p></div>"
        self.assertEqual(extract_field(html, ["Homestead"]), "Yes")

    def test_label_order_is_preference(self):
        html = "<dl><dt>Owner Name</dt><dd>DOE JANE</dd><dt>Ownership</dt><dd>SMITH JOHN</dd></dl>"
        self.assertEqual(extract_field(html, ["Ownership", "Owner Name"]), "SMITH JOHN")

    def test_missing_label(self):
        self.assertIsNone(extract_field(fx.OWNER_CARD, ["Mailing Address"]))
        self.assertIsNone(extract_field("", ["Owner"]))
        self.assertIsNone(extract_field(None, ["Owner"]))


class TestCleanValue(unittest.TestCase):
    def test_strips_link_text_and_notes(self):
        self.assertEqual(clean_value("CREEKWOOD PH ONE  Go to subdivision"), "CREEKWOOD PH ONE")
        self.assertEqual(clean_value("0100 [Residential]  "), "0100")

    def test_blank(self):
        self.assertIsNone(clean_value(""))
        self.assertIsNone(clean_value("   "))


if __name__ == "__main__":
    unittest.main()
