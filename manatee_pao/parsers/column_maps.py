"""
Positional column layouts for the PAO detail-page tables.

The site's value and sales tables have no stable semantic headers, so cells
are read by index. A layout change on the site is fixed here by adding a new
version and pointing the ACTIVE_* names at it.
"""
from typing import Dict

VALUATION_COLUMNS_V1: Dict[str, int] = {
    "year": 0,
    "homestead": 1,
    "land": 2,
    "building": 3,
    "just": 4,
    "assessed": 5,
    "school_assessed": 6,
    "taxable": 7,
}
# Rows wider than this carry ad valorem / non-ad valorem taxes in the last two cells
VALUATION_TAX_COLUMNS_MIN_WIDTH_V1 = 10

SALES_COLUMNS_V1: Dict[str, int] = {
    "date": 0,
    "book_page": 1,
    "instrument_type": 2,
    "vacant_or_improved": 3,
    "qualification_code": 4,
    "price": 5,
    "grantee": 6,
}
SALES_MIN_CELLS_V1 = 5

VALUATION_COLUMNS = VALUATION_COLUMNS_V1
VALUATION_TAX_COLUMNS_MIN_WIDTH = VALUATION_TAX_COLUMNS_MIN_WIDTH_V1
SALES_COLUMNS = SALES_COLUMNS_V1
SALES_MIN_CELLS = SALES_MIN_CELLS_V1
COLUMN_MAP_VERSION = "v1"

# Header keyword -> field for the header-keyed building and land tabs.
# Order matters: the first keyword contained in a header cell wins.
BUILDING_HEADERS = (
    ("eff", "effective_year_built"),
    ("year", "year_built"),
    ("living", "living_area_sqft"),
    ("under roof", "total_area_sqft"),
    ("total area", "total_area_sqft"),
    ("bed", "bed_bath"),
    ("stor", "stories"),
    ("construction", "construction_exterior"),
    ("exterior", "construction_exterior"),
    ("foundation", "foundation"),
    ("roof", "roof"),
    ("floor", "flooring"),
    ("interior", "interior_walls"),
    ("heat", "heat_cool"),
    ("cool", "heat_cool"),
    ("a/c", "heat_cool"),
    ("units", "units"),
)

LAND_HEADERS = (
    ("land use", "land_use"),
    ("use", "land_use"),
    ("acre", "acres"),
    ("sq", "sqft"),
    ("size", "size"),
    ("road", "road_surface_type"),
    ("front", "frontage"),
    ("depth", "depth"),
    ("dimension", "dimensions"),
    ("zon", "zoning"),
)
