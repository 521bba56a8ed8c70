import re
import logging
from typing import Dict, List, Optional, Tuple

from manatee_pao.models.property_record import NormalizedAddress

logger = logging.getLogger(__name__)

# ── USPS Publication 28 abbreviations ──────────────────────────────────────
# The PAO search form only matches the USPS forms ("Ter", not "Terrace").
# Keys are the full lowercase word.
STREET_SUFFIX_MAP: Dict[str, str] = {
    "alley": "Aly", "avenue": "Ave", "boulevard": "Blvd", "circle": "Cir",
    "court": "Ct", "drive": "Dr", "expressway": "Expy", "freeway": "Fwy",
    "highway": "Hwy", "lane": "Ln", "parkway": "Pkwy", "place": "Pl",
    "road": "Rd", "street": "St", "terrace": "Ter", "trail": "Trl", "way": "Way",
    "arcade": "Arc", "bayou": "Byu", "beach": "Bch", "bend": "Bnd",
    "bluff": "Blf", "bluffs": "Blfs", "bottom": "Btm", "branch": "Br",
    "bridge": "Brg", "brook": "Brk", "brooks": "Brks", "burg": "Bg",
    "burgs": "Bgs", "bypass": "Byp", "camp": "Cp", "canyon": "Cyn",
    "cape": "Cpe", "causeway": "Cswy", "center": "Ctr", "centers": "Ctrs",
    "cliff": "Clf", "cliffs": "Clfs", "club": "Clb", "common": "Cmn",
    "commons": "Cmns", "corner": "Cor", "corners": "Cors", "course": "Crse",
    "cove": "Cv", "coves": "Cvs", "creek": "Crk", "crescent": "Cres",
    "crest": "Crst", "crossing": "Xing", "crossroad": "Xrd", "crossroads": "Xrds",
    "curve": "Curv", "dale": "Dl", "dam": "Dm", "divide": "Dv", "drives": "Drs",
    "estate": "Est", "estates": "Ests", "extension": "Ext", "extensions": "Exts",
    "fall": "Fall", "falls": "Fls", "ferry": "Fry", "field": "Fld",
    "fields": "Flds", "flat": "Flt", "flats": "Flts", "ford": "Frd",
    "fords": "Frds", "forest": "Frst", "forge": "Frg", "forges": "Frgs",
    "fork": "Frk", "forks": "Frks", "fort": "Ft", "garden": "Gdn",
    "gardens": "Gdns", "gateway": "Gtwy", "glen": "Gln", "glens": "Glns",
    "green": "Grn", "greens": "Grns", "grove": "Grv", "groves": "Grvs",
    "harbor": "Hbr", "harbors": "Hbrs", "haven": "Hvn", "heights": "Hts",
    "hill": "Hl", "hills": "Hls", "hollow": "Holw", "inlet": "Inlt",
    "island": "Is", "islands": "Iss", "isle": "Isle", "junction": "Jct",
    "junctions": "Jcts", "key": "Ky", "keys": "Kys", "knoll": "Knl",
    "knolls": "Knls", "lake": "Lk", "lakes": "Lks", "land": "Land",
    "landing": "Lndg", "light": "Lgt", "lights": "Lgts", "loaf": "Lf",
    "lock": "Lck", "locks": "Lcks", "lodge": "Ldg", "loop": "Loop",
    "mall": "Mall", "manor": "Mnr", "manors": "Mnrs", "meadow": "Mdw",
    "meadows": "Mdws", "mews": "Mews", "mill": "Ml", "mills": "Mls",
    "mission": "Msn", "motorway": "Mtwy", "mount": "Mt", "mountain": "Mtn",
    "mountains": "Mtns", "neck": "Nck", "orchard": "Orch", "oval": "Oval",
    "overpass": "Opas", "park": "Park", "parks": "Parks", "pass": "Pass",
    "passage": "Psge", "path": "Path", "pike": "Pike", "pine": "Pne",
    "pines": "Pnes", "plain": "Pln", "plains": "Plns", "plaza": "Plz",
    "point": "Pt", "points": "Pts", "port": "Prt", "ports": "Prts",
    "prairie": "Pr", "radial": "Radl", "ramp": "Ramp", "ranch": "Rnch",
    "rapid": "Rpd", "rapids": "Rpds", "rest": "Rst", "ridge": "Rdg",
    "ridges": "Rdgs", "river": "Riv", "roads": "Rds", "route": "Rte",
    "row": "Row", "rue": "Rue", "run": "Run", "shoal": "Shl", "shoals": "Shls",
    "shore": "Shr", "shores": "Shrs", "skyway": "Skwy", "spring": "Spg",
    "springs": "Spgs", "spur": "Spur", "spurs": "Spurs", "square": "Sq",
    "squares": "Sqs", "station": "Sta", "stravenue": "Stra", "stream": "Strm",
    "streets": "Sts", "summit": "Smt", "throughway": "Trwy", "trace": "Trce",
    "track": "Trak", "trafficway": "Trfy", "trails": "Trls", "trailer": "Trlr",
    "tunnel": "Tunl", "turnpike": "Tpke", "underpass": "Upas", "union": "Un",
    "unions": "Uns", "valley": "Vly", "valleys": "Vlys", "viaduct": "Via",
    "view": "Vw", "views": "Vws", "village": "Vlg", "villages": "Vlgs",
    "ville": "Vl", "vista": "Vis", "walk": "Walk", "walks": "Walks",
    "wall": "Wall", "ways": "Ways", "well": "Wl", "wells": "Wls",
}

DIRECTIONAL_MAP: Dict[str, str] = {
    "north": "N", "south": "S", "east": "E", "west": "W",
    "northeast": "NE", "northwest": "NW", "southeast": "SE", "southwest": "SW",
}

UNIT_DESIGNATOR_MAP: Dict[str, str] = {
    "apartment": "Apt", "basement": "Bsmt", "building": "Bldg",
    "department": "Dept", "floor": "Fl", "front": "Frnt", "hangar": "Hngr",
    "lobby": "Lbby", "lot": "Lot", "lower": "Lowr", "office": "Ofc",
    "penthouse": "Ph", "pier": "Pier", "rear": "Rear", "room": "Rm",
    "side": "Side", "slip": "Slip", "space": "Spc", "stop": "Stop",
    "suite": "Ste", "trailer": "Trlr", "unit": "Unit", "upper": "Uppr",
}

_ZIP_RE = re.compile(r'^\d{5}(-\d{4})?$')
_STATE_RE = re.compile(r'^[A-Za-z]{2}$')


def is_real_address(address: str) -> bool:
    """
    Detects placeholder input or a bare parcel number typed into the address box.
    Returns True if the input looks like a street address worth searching.
    """
    if not address or not address.strip():
        return False

    first_token = address.split(",")[0].strip().split()[0] if address.split(",")[0].strip() else ""
    # A 10-digit Manatee parcel id is not an address
    if first_token.isdigit() and len(first_token) >= 8:
        return False

    if not any(c.isalpha() for c in address):
        return False

    return True


def _normalize_street(street: str) -> Tuple[str, List[str]]:
    changes: List[str] = []
    tokens = re.sub(r'\s+', ' ', street.strip()).split(' ')
    out: List[str] = []

    for i, token in enumerate(tokens):
        lower = token.lower()

        # Pre- and post-directionals both collapse
        if lower in DIRECTIONAL_MAP:
            abbrev = DIRECTIONAL_MAP[lower]
            if token != abbrev:
                changes.append(f"{token} → {abbrev}")
            out.append(abbrev)
            continue

        # Never treat the house number as a suffix
        if lower in STREET_SUFFIX_MAP and i > 0 and not token.isdigit():
            abbrev = STREET_SUFFIX_MAP[lower]
            if token != abbrev:
                changes.append(f"{token} → {abbrev}")
            out.append(abbrev)
            continue

        if lower in UNIT_DESIGNATOR_MAP:
            abbrev = UNIT_DESIGNATOR_MAP[lower]
            if token != abbrev:
                changes.append(f"{token} → {abbrev}")
            out.append(abbrev)
            continue

        out.append(token)

    return " ".join(out), changes


def normalize_street_for_usps(street: str) -> str:
    """'4659 56th Terrace East' -> '4659 56th Ter E'"""
    if not street or not street.strip():
        return ""
    return _normalize_street(street)[0]


def _parse_components(address: str) -> Dict[str, Optional[str]]:
    parts = [p.strip() for p in address.split(",")]
    result: Dict[str, Optional[str]] = {"street": None, "city": None, "state": None, "zip_code": None}

    if parts and parts[0]:
        result["street"] = parts[0]
    if len(parts) >= 2 and parts[1]:
        result["city"] = parts[1]
    if len(parts) >= 3:
        # "FL 34208", "FL", or "34208"
        for token in parts[2].split():
            if result["state"] is None and _STATE_RE.match(token):
                result["state"] = token.upper()
            elif result["zip_code"] is None and _ZIP_RE.match(token):
                result["zip_code"] = token
    if len(parts) >= 4 and result["zip_code"] is None and _ZIP_RE.match(parts[3]):
        result["zip_code"] = parts[3]

    return result


def normalize_address_for_pao(raw: str) -> NormalizedAddress:
    """
    Canonicalizes a free-text address to the token form the PAO search expects.

    "4659 56th Terrace East, Bradenton, FL 34208"
        -> normalized_street "4659 56th Ter E"
        -> normalized_full   "4659 56th Ter E, Bradenton, FL 34208"

    Running it on its own output is a no-op. Malformed input degrades to
    whatever components could be recovered.
    """
    original = (raw or "").strip()
    components = _parse_components(original)

    normalizations: List[str] = []
    normalized_street = None
    if components["street"]:
        normalized_street, normalizations = _normalize_street(components["street"])

    region = " ".join(p for p in (components["state"], components["zip_code"]) if p)
    # Empty street and city slots are kept so re-parsing never shifts a
    # component into the wrong position
    parts: List[str] = [normalized_street or ""]
    if components["city"] or region:
        parts.append(components["city"] or "")
    if region:
        parts.append(region)
    if not any(parts):
        parts = []

    if normalizations:
        logger.info(f"Address normalized: '{original}' ({', '.join(normalizations)})")

    return NormalizedAddress(
        original=original,
        street=components["street"],
        city=components["city"],
        state=components["state"],
        zip_code=components["zip_code"],
        normalized_street=normalized_street,
        normalized_full=", ".join(parts),
        was_normalized=bool(normalizations),
        normalizations=normalizations,
    )


def split_street(street: Optional[str]) -> Tuple[str, List[str]]:
    """
    Splits a street line into its house number and the significant name words
    (longer than two characters, lowercased) used for textual matching.
    "4659 56th Ter E" -> ("4659", ["56th", "ter"])
    """
    tokens = (street or "").split()
    if not tokens:
        return "", []
    number = tokens[0] if any(c.isdigit() for c in tokens[0]) else ""
    rest = tokens[1:] if number else tokens
    words = [t.lower().strip(".,#") for t in rest]
    return number, [w for w in words if len(w) > 2]
