import re
import logging
import functools
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from manatee_pao.models.property_record import (
    ExtraFeatureRecord,
    InspectionRecord,
    PropertyBasicInfo,
    PropertyBuilding,
    PropertyLand,
    PropertyRecord,
    SaleRecord,
    ValuationRecord,
    ValueBreakdown,
)
from manatee_pao.parsers import column_maps
from manatee_pao.parsers.label_extractor import clean_value, extract_field, make_soup, text_of

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r'\b(\d{1,2})/(\d{1,2})/(\d{4})\b')
_SHORT_DATE_RE = re.compile(r'\d{1,2}/\d{1,2}/\d{2,4}')
_YEAR_RE = re.compile(r'\b(?:19|20)\d{2}\b')
_PARCEL_RE = re.compile(r'\b(\d{10})\b')
_ZIP_TAIL_RE = re.compile(r'([A-Z]{2})\s+(\d{5}(?:-\d{4})?)\s*$', re.IGNORECASE)


# ─── Value helpers ───────────────────────────────────────────────────────────

def parse_money(text: Optional[str]) -> Optional[float]:
    """'$1,234,567' -> 1234567.0. Blank or non-numeric cells give None."""
    if not text:
        return None
    clean = re.sub(r'[$,\s]', '', str(text))
    negative = clean.startswith("(") and clean.endswith(")")
    clean = clean.strip("()")
    if not clean or "n/a" in clean.lower():
        return None
    try:
        value = float(clean)
    except (ValueError, TypeError):
        return None
    return -value if negative else value


def parse_number(text: Optional[str]) -> Optional[float]:
    if not text:
        return None
    match = re.search(r'-?\d[\d,]*(?:\.\d+)?', str(text))
    if not match:
        return None
    try:
        return float(match.group(0).replace(",", ""))
    except ValueError:
        return None


def parse_int(text: Optional[str]) -> Optional[int]:
    value = parse_number(text)
    return int(value) if value is not None else None


def parse_flag(text: Optional[str]) -> Optional[bool]:
    if text is None:
        return None
    value = text.strip().lower()
    if value in ("y", "yes", "x", "true", "hx", "homestead"):
        return True
    if value in ("n", "no", "false"):
        return False
    return None


def parse_sale_date(text: Optional[str]) -> Optional[datetime]:
    if not text:
        return None
    match = _DATE_RE.search(text)
    if not match:
        return None
    try:
        return datetime(int(match.group(3)), int(match.group(1)), int(match.group(2)))
    except ValueError:
        return None


def parse_bed_bath(text: Optional[str]) -> Tuple[Optional[int], Optional[int], Optional[int]]:
    """'3/2/0' -> (bedrooms, full baths, half baths). Missing parts are None."""
    if not text:
        return None, None, None
    match = re.match(r'^\s*(\d+)\s*/\s*(\d+)(?:\s*/\s*(\d+))?\s*$', text)
    if not match:
        return None, None, None
    half = int(match.group(3)) if match.group(3) is not None else None
    return int(match.group(1)), int(match.group(2)), half


def split_composite(text: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """'MASONRY/STUCCO' -> ('MASONRY', 'STUCCO'); a single value fills the first slot."""
    if not text:
        return None, None
    parts = [p.strip() for p in text.split("/", 1)]
    first = parts[0] or None
    second = parts[1] or None if len(parts) > 1 else None
    return first, second


def parse_lot_size(text: Optional[str]) -> Tuple[Optional[float], Optional[float]]:
    """Returns (acres, square feet) from text like '0.2500 Acres / 10,890 SqFt'."""
    if not text:
        return None, None
    acres = None
    sqft = None
    acres_match = re.search(r'([\d.,]+)\s*(?:Acres?|AC)\b', text, re.IGNORECASE)
    if acres_match:
        acres = parse_number(acres_match.group(1))
    sqft_match = re.search(r'([\d,]+(?:\.\d+)?)\s*(?:Square\s*Feet|Sq\.?\s*Ft|SqFt|SF)\b', text, re.IGNORECASE)
    if sqft_match:
        sqft = parse_number(sqft_match.group(1))
    return acres, sqft


def _split_use(text: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """'0100 - SINGLE FAMILY RESIDENTIAL' -> ('0100', 'SINGLE FAMILY RESIDENTIAL')"""
    if not text:
        return None, None
    match = re.match(r'^\s*(\d{2,4})\s*[-:]?\s*(.*)$', text)
    if match:
        return match.group(1), (match.group(2).strip() or None)
    return None, text.strip() or None


def _has_values(model) -> bool:
    return any(v is not None for v in model.model_dump().values())


def total_parser(default_factory: Callable):
    """
    Makes a section parser total: blank input short-circuits to the empty
    result, and any unexpected layout is logged and treated as an absent
    section instead of aborting the other sections.
    """
    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(html, *args, **kwargs):
            if html is None or (isinstance(html, str) and not html.strip()):
                return default_factory()
            try:
                return fn(html, *args, **kwargs)
            except Exception as e:
                logger.warning(f"Parser {fn.__name__} could not read section, omitting it: {e}")
                return default_factory()
        return wrapper
    return decorator


def _data_rows(soup: BeautifulSoup) -> List[List[str]]:
    rows = []
    for tr in soup.find_all("tr"):
        cells = tr.find_all("td")
        if cells:
            rows.append([text_of(c) for c in cells])
    return rows


def _header_columns(soup: BeautifulSoup, header_map) -> Dict[str, int]:
    """Maps field names to column indexes using the first row that has th cells."""
    for tr in soup.find_all("tr"):
        headers = tr.find_all("th")
        if not headers:
            continue
        columns: Dict[str, int] = {}
        for idx, th in enumerate(headers):
            header = text_of(th).lower()
            for keyword, field in header_map:
                if keyword in header:
                    columns.setdefault(field, idx)
                    break
        if columns:
            return columns
    return {}


# ─── Owner / basic info ─────────────────────────────────────────────────────

def _split_situs(situs: str) -> Tuple[str, Optional[str], Optional[str], Optional[str]]:
    """
    '4659 56TH TER E, BRADENTON FL 34208'   -> street, city, state, zip
    '4659 56TH TER E, BRADENTON, FL 34208'  -> same
    """
    parts = [p.strip() for p in situs.split(",") if p.strip()]
    if len(parts) < 2:
        return situs, None, None, None

    street = parts[0]
    tail = " ".join(parts[1:])
    state = zip_code = None
    match = _ZIP_TAIL_RE.search(tail)
    if match:
        state = match.group(1).upper()
        zip_code = match.group(2)
        tail = tail[:match.start()].strip()
    city = tail.strip(" ,") or None
    return street, city, state, zip_code


@total_parser(PropertyRecord)
def parse_owner_section(html) -> PropertyRecord:
    """
    Parses the owner card at the top of the parcel page into a partial record.

    Labels are looked up with the four-strategy extractor, so the card can be a
    bold-label grid, a dl, or a key/value table.
    """
    soup = make_soup(html)
    record = PropertyRecord()
    basic = PropertyBasicInfo()
    land = PropertyLand()
    building = PropertyBuilding()

    ownership = extract_field(soup, ["Ownership", "Owner Name", "Owner"])
    if ownership:
        owner = re.split(r'[;\n]', ownership)[0].strip()
        # Deed date sometimes trails the name
        owner = re.sub(r'\s+\d{1,2}/\d{1,2}/\d{4}.*$', '', owner).strip()
        record.owner = owner or None

    owner_type = clean_value(extract_field(soup, ["Owner Type"]))
    if owner_type:
        basic.owner_type = owner_type
        record.owner_type = owner_type

    parcel_text = extract_field(soup, ["Parcel ID", "Parcel Id", "Account"])
    parcel_match = _PARCEL_RE.search(parcel_text or "")
    if not parcel_match:
        parcel_match = re.search(r'parcel\s*(?:id|#|number)?[:\s]*(\d{10})', text_of(soup), re.IGNORECASE)
    if parcel_match:
        record.parcel_id = parcel_match.group(1)
        basic.account_number = parcel_match.group(1)

    situs = clean_value(extract_field(soup, ["Situs Address", "Property Address", "Site Address"]))
    if situs:
        basic.situs_address = situs
        street, city, state, zip_code = _split_situs(situs)
        record.address = street
        record.city = city
        record.state = state
        record.zip_code = zip_code

    mailing = clean_value(extract_field(soup, ["Mailing Address"]))
    if mailing:
        basic.mailing_address = mailing

    for label, attr in (
        ("Jurisdiction", "jurisdiction"),
        ("Tax District", "tax_district"),
        ("Neighborhood", "neighborhood"),
        ("Subdivision", "subdivision"),
        ("Municipality", "municipality"),
        ("Sec/Twp/Rng", "section_township_range"),
        ("Short Description", "short_description"),
        ("Legal Description", "legal_description"),
    ):
        value = clean_value(extract_field(soup, [label]))
        if value:
            setattr(basic, attr, value)

    land_use = clean_value(extract_field(soup, ["Land Use"]))
    if land_use:
        code, description = _split_use(land_use)
        land.land_use = land_use
        land.land_use_code = code
        basic.use_code = code
        basic.use_description = description

    land_size = extract_field(soup, ["Land Size", "Lot Size"])
    if land_size:
        land.lot_size_acres, land.lot_size_sqft = parse_lot_size(land_size)

    building_area = extract_field(soup, ["Building Area"])
    if building_area:
        under_roof = re.search(r'([\d,]+)\s*(?:SqFt|Sq\s*Ft|SF)?\s*Under\s*Roof', building_area, re.IGNORECASE)
        if under_roof:
            building.total_area_sqft = parse_number(under_roof.group(1))
        living = re.search(r'([\d,]+)\s*(?:SqFt|Sq\s*Ft|SF)?\s*Living', building_area, re.IGNORECASE)
        if living:
            building.living_area_sqft = parse_number(living.group(1))

    living_units = extract_field(soup, ["Living Units"])
    if living_units:
        basic.living_units = parse_int(living_units)

    homestead = extract_field(soup, ["Homestead"])
    if homestead:
        basic.homestead_exemption = parse_flag(homestead.split()[0]) if homestead.split() else None

    if _has_values(basic):
        record.basic_info = basic
    if _has_values(land):
        record.land = land
    if _has_values(building):
        record.building = building
    return record


# ─── Valuations ─────────────────────────────────────────────────────────────

def _valid_year(text: str) -> Optional[int]:
    if not re.fullmatch(r'\d{4}', text.strip()):
        return None
    year = int(text)
    return year if 1900 <= year <= 2100 else None


@total_parser(list)
def parse_valuations(html) -> List[ValuationRecord]:
    """
    Reads the Values table positionally (see column_maps.VALUATION_COLUMNS).

    The first cell must be a plausible four digit year; rows that fail the
    check are dropped rather than risk shifting every column.
    """
    soup = make_soup(html)
    cols = column_maps.VALUATION_COLUMNS
    by_year: Dict[int, ValuationRecord] = {}

    for tr in soup.find_all("tr"):
        cells = [text_of(c) for c in tr.find_all(["td", "th"])]
        if len(cells) < 4:
            continue
        year = _valid_year(cells[cols["year"]])
        if year is None or year in by_year:
            continue

        def cell(name: str) -> Optional[str]:
            idx = cols[name]
            return cells[idx] if idx < len(cells) else None

        record = ValuationRecord(
            year=year,
            homestead=parse_flag(cell("homestead")),
            just=ValueBreakdown(
                land=parse_money(cell("land")),
                building=parse_money(cell("building")),
                total=parse_money(cell("just")),
            ),
        )
        assessed = parse_money(cell("assessed"))
        if assessed is not None:
            record.assessed = ValueBreakdown(total=assessed)
        record.school_assessed = parse_money(cell("school_assessed"))
        taxable = parse_money(cell("taxable"))
        if taxable is not None:
            record.taxable = ValueBreakdown(total=taxable)
        if len(cells) >= column_maps.VALUATION_TAX_COLUMNS_MIN_WIDTH:
            record.ad_valorem_taxes = parse_money(cells[-2])
            record.non_ad_valorem_taxes = parse_money(cells[-1])

        by_year[year] = record

    return sorted(by_year.values(), key=lambda v: v.year, reverse=True)


# ─── Sales ──────────────────────────────────────────────────────────────────

def _qualified(code: Optional[str]) -> Optional[bool]:
    if not code:
        return None
    code = code.strip().upper()
    if code in ("Q", "01"):
        return True
    if code == "U":
        return False
    return None


def sort_sales(sales: List[SaleRecord]) -> List[SaleRecord]:
    """Newest first; undated sales go last in their original order."""
    dated = [s for s in sales if parse_sale_date(s.date)]
    undated = [s for s in sales if not parse_sale_date(s.date)]
    dated.sort(key=lambda s: parse_sale_date(s.date), reverse=True)
    return dated + undated


@total_parser(list)
def parse_sales(html) -> List[SaleRecord]:
    soup = make_soup(html)
    cols = column_maps.SALES_COLUMNS
    seen = set()
    sales: List[SaleRecord] = []

    for cells in _data_rows(soup):
        if len(cells) < column_maps.SALES_MIN_CELLS:
            continue

        def cell(name: str) -> Optional[str]:
            idx = cols[name]
            value = cells[idx] if idx < len(cells) else ""
            return value or None

        date_match = _DATE_RE.search(cell("date") or "")
        date = date_match.group(0) if date_match else None
        price = parse_money(cell("price"))
        if date is None and price is None:
            continue
        if date is not None:
            if date in seen:
                continue
            seen.add(date)

        book_page = cell("book_page")
        instrument_number = book_page if book_page and re.fullmatch(r'\d+', book_page) else None
        code = cell("qualification_code")
        sales.append(SaleRecord(
            date=date,
            price=price,
            deed_type=cell("instrument_type"),
            instrument_number=instrument_number,
            book_page=None if instrument_number else book_page,
            grantee=cell("grantee"),
            vacant_or_improved=cell("vacant_or_improved"),
            qualification_code=code,
            qualified=_qualified(code),
        ))

    return sort_sales(sales)


# ─── Building ───────────────────────────────────────────────────────────────

def _apply_building_value(building: PropertyBuilding, field: str, value: Optional[str]):
    if not value:
        return
    if field == "bed_bath":
        beds, full, half = parse_bed_bath(value)
        if beds is not None:
            building.bedrooms = beds
            building.full_bathrooms = full
            building.half_bathrooms = half
            building.bathrooms = full + 0.5 * (half or 0)
    elif field == "construction_exterior":
        building.construction_type, building.exterior_walls = split_composite(value)
    elif field == "heat_cool":
        building.heating, building.cooling = split_composite(value)
    elif field == "roof":
        # "HIP/SHINGLE" is structure/cover, a lone value is the cover
        if "/" in value:
            building.roof_type, building.roof_cover = split_composite(value)
        else:
            building.roof_cover = value
    elif field in ("year_built", "effective_year_built"):
        year = _YEAR_RE.search(value)
        if year:
            setattr(building, field, int(year.group(0)))
    elif field in ("living_area_sqft", "total_area_sqft", "stories"):
        setattr(building, field, parse_number(value))
    elif field == "units":
        building.units = parse_int(value)
    else:
        setattr(building, field, value)


_BUILDING_LABELS = (
    (["Year Built", "Actual Year Built"], "year_built"),
    (["Effective Year Built", "Eff. Year"], "effective_year_built"),
    (["Living Area", "Heated Area"], "living_area_sqft"),
    (["Under Roof", "Total Area"], "total_area_sqft"),
    (["Bed/Bath/Half", "Beds/Baths", "Bed/Bath"], "bed_bath"),
    (["Stories"], "stories"),
    (["Construction/Exterior", "Construction"], "construction_exterior"),
    (["Foundation"], "foundation"),
    (["Roof Structure/Cover", "Roof Cover", "Roof"], "roof"),
    (["Floor Cover", "Flooring"], "flooring"),
    (["Interior Walls"], "interior_walls"),
    (["Heat/Cool", "Heating/Cooling"], "heat_cool"),
)


@total_parser(lambda: None)
def parse_building(html) -> Optional[PropertyBuilding]:
    """
    Buildings tab. Prefers the header-keyed table (first building row); falls
    back to label lookups when the tab is a label/value layout. Composite cells
    such as "3/2/0" (bed/full/half) and "MASONRY/STUCCO" are split here.
    """
    soup = make_soup(html)
    building = PropertyBuilding()

    columns = _header_columns(soup, column_maps.BUILDING_HEADERS)
    rows = _data_rows(soup) if columns else []
    if columns and rows:
        first = rows[0]
        for field, idx in columns.items():
            if idx < len(first):
                _apply_building_value(building, field, first[idx])
    else:
        for labels, field in _BUILDING_LABELS:
            _apply_building_value(building, field, clean_value(extract_field(soup, labels)))

    text = text_of(soup).lower()
    if re.search(r'\bpool\b', text):
        building.pool = True
    if "fireplace" in text:
        building.fireplace = True
    garage = re.search(r'\b(attached|detached)\s+garage\b', text)
    if garage:
        building.garage_type = garage.group(0).title()

    return building if _has_values(building) else None


# ─── Land ───────────────────────────────────────────────────────────────────

def _apply_land_value(land: PropertyLand, field: str, value: Optional[str]):
    if not value:
        return
    if field == "land_use":
        land.land_use_code, description = _split_use(value)
        land.land_use = value
    elif field in ("acres", "sqft", "size"):
        acres, sqft = parse_lot_size(value)
        if field == "acres" and acres is None:
            acres = parse_number(value)
        if field == "sqft" and sqft is None:
            sqft = parse_number(value)
        if acres is not None and land.lot_size_acres is None:
            land.lot_size_acres = acres
        if sqft is not None and land.lot_size_sqft is None:
            land.lot_size_sqft = sqft
    elif field in ("frontage", "depth"):
        setattr(land, field, parse_number(value))
    else:
        setattr(land, field, value)


_LAND_LABELS = (
    (["Land Use"], "land_use"),
    (["Land Size", "Lot Size"], "size"),
    (["Acres"], "acres"),
    (["Road Surface", "Road Type"], "road_surface_type"),
    (["Frontage"], "frontage"),
    (["Depth"], "depth"),
    (["Dimensions"], "dimensions"),
    (["Zoning"], "zoning"),
)


@total_parser(lambda: None)
def parse_land(html) -> Optional[PropertyLand]:
    soup = make_soup(html)
    land = PropertyLand()

    columns = _header_columns(soup, column_maps.LAND_HEADERS)
    rows = _data_rows(soup) if columns else []
    if columns and rows:
        for field, idx in columns.items():
            if idx < len(rows[0]):
                _apply_land_value(land, field, rows[0][idx])
    else:
        for labels, field in _LAND_LABELS:
            _apply_land_value(land, field, clean_value(extract_field(soup, labels)))

    return land if _has_values(land) else None


# ─── Extra features / inspections ───────────────────────────────────────────

def _row_cells(row: Tag) -> List[Tag]:
    cells = row.find_all("td")
    if cells:
        return cells
    if row.name != "tr":
        return row.find_all(recursive=False)
    return []


@total_parser(list)
def parse_extra_features(html) -> List[ExtraFeatureRecord]:
    """Features tab. Columns vary by parcel so values are sniffed by pattern."""
    soup = make_soup(html)
    features: List[ExtraFeatureRecord] = []

    for row in soup.select("table tr, .feature-row"):
        if row.find("th") is not None or not text_of(row):
            continue
        cells = _row_cells(row)
        if not cells:
            continue
        description = text_of(cells[0])
        if not description:
            continue

        feature = ExtraFeatureRecord(description=description)
        for cell in cells[1:]:
            cell_text = text_of(cell)
            if not cell_text:
                continue
            area = re.search(r'([\d,]+(?:\.\d+)?)\s*(?:sq\s*ft|sqft|SF)\b', cell_text, re.IGNORECASE)
            money = re.search(r'\$\s*[\d,]+(?:\.\d+)?', cell_text)
            year = _YEAR_RE.fullmatch(cell_text)
            if money and feature.value is None:
                feature.value = parse_money(money.group(0))
            elif area and feature.area_sqft is None:
                feature.area_sqft = parse_number(area.group(1))
            elif year and feature.year is None:
                feature.year = int(cell_text)
            elif re.fullmatch(r'[\d,]+(?:\.\d+)?', cell_text) and feature.units is None:
                feature.units = parse_number(cell_text)
        features.append(feature)

    return features


_RESULT_RE = re.compile(r'pass|fail|complete|pending|approved', re.IGNORECASE)


@total_parser(list)
def parse_inspections(html) -> List[InspectionRecord]:
    soup = make_soup(html)
    inspections: List[InspectionRecord] = []

    for row in soup.find_all("tr"):
        if row.find("th") is not None:
            continue
        cells = row.find_all("td")
        if len(cells) < 2:
            continue

        inspection = InspectionRecord()
        for i, cell in enumerate(cells):
            cell_text = text_of(cell)
            if not cell_text:
                continue
            date = _SHORT_DATE_RE.search(cell_text)
            if inspection.date is None and date:
                inspection.date = date.group(0)
            elif i <= 1 and inspection.type is None and 2 < len(cell_text) < 50:
                inspection.type = cell_text
            elif inspection.result is None and _RESULT_RE.search(cell_text):
                inspection.result = cell_text
            elif inspection.inspector is None and re.match(r'^[A-Z][a-z]+ [A-Z]', cell_text):
                inspection.inspector = cell_text
            elif inspection.notes is None and len(cell_text) > 20:
                inspection.notes = cell_text

        if inspection.date or inspection.type:
            inspections.append(inspection)

    return inspections
