import re
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from manatee_pao.models.property_record import NormalizedAddress
from manatee_pao.utils.address_utils import normalize_address_for_pao, split_street

logger = logging.getLogger(__name__)

PAO_BASE_URL = "https://www.manateepao.gov"
PARCEL_URL_TEMPLATE = PAO_BASE_URL + "/parcel/?parid={parcel_id}"


@dataclass
class ResultRow:
    row_text: str
    parcel_id: Optional[str] = None
    href: Optional[str] = None


@dataclass
class MatchResult:
    """
    Outcome of picking a row from the search results list.

    confirmed=False means the row did not textually contain the searched street
    number and name. Callers treat that as "not found".
    """
    detail_url: Optional[str] = None
    parcel_id: Optional[str] = None
    confirmed: bool = False
    row_text: Optional[str] = None
    candidates: int = 0
    reasons: List[str] = field(default_factory=list)


def _as_normalized(address: Union[str, NormalizedAddress]) -> NormalizedAddress:
    if isinstance(address, NormalizedAddress):
        return address
    return normalize_address_for_pao(address)


def _street_variants(address: NormalizedAddress) -> List[str]:
    streets = []
    for street in (address.normalized_street, address.street):
        if street and street not in streets:
            streets.append(street)
    return streets


def address_matches(text: Optional[str], address: Union[str, NormalizedAddress]) -> bool:
    """
    True when `text` contains the searched house number (as a whole token) and
    at least one significant street-name word, in either the raw or the USPS
    abbreviated spelling.
    """
    if not text:
        return False
    address = _as_normalized(address)
    haystack = text.lower()

    for street in _street_variants(address):
        number, words = split_street(street)
        if not number or not words:
            continue
        if not _has_token(haystack, number.lower()):
            continue
        if any(_has_token(haystack, word) for word in words):
            return True
    return False


def _has_token(haystack: str, token: str) -> bool:
    # "56th" must not match inside "156th", nor "ter" inside "waterford"
    return re.search(rf'(?<![\w-]){re.escape(token)}(?![\w-])', haystack) is not None


def resolve_detail_url(href: Optional[str], parcel_id: Optional[str]) -> Optional[str]:
    if href:
        if href.startswith("http"):
            return href
        return PAO_BASE_URL + ("" if href.startswith("/") else "/") + href
    if parcel_id:
        return PARCEL_URL_TEMPLATE.format(parcel_id=parcel_id)
    return None


def select_best_result(rows: Sequence[ResultRow], address: Union[str, NormalizedAddress]) -> MatchResult:
    """
    Chooses the results row for the searched address.

    The first row containing both the street number and a street-name word is
    returned as confirmed. Otherwise the first row's link comes back
    unconfirmed so the caller can log it, never use it.
    """
    address = _as_normalized(address)
    if not rows:
        return MatchResult(reasons=["no result rows"])

    for row in rows:
        if address_matches(row.row_text, address):
            url = resolve_detail_url(row.href, row.parcel_id)
            logger.info(f"Result matcher: confirmed row '{row.row_text[:80]}' -> {url}")
            return MatchResult(
                detail_url=url,
                parcel_id=row.parcel_id,
                confirmed=url is not None,
                row_text=row.row_text,
                candidates=len(rows),
                reasons=[] if url else ["matched row has no link or parcel id"],
            )

    first = rows[0]
    logger.warning(
        f"Result matcher: none of {len(rows)} rows mention '{address.normalized_street}', "
        f"first row left unconfirmed"
    )
    return MatchResult(
        detail_url=resolve_detail_url(first.href, first.parcel_id),
        parcel_id=first.parcel_id,
        confirmed=False,
        row_text=first.row_text,
        candidates=len(rows),
        reasons=["no row contains the street number and name"],
    )
