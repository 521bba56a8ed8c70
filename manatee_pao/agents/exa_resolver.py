import re
import logging
from typing import Dict, List, Optional, Union

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from manatee_pao.models.property_record import NormalizedAddress
from manatee_pao.utils.address_utils import normalize_address_for_pao
from manatee_pao.utils.result_matcher import PARCEL_URL_TEMPLATE, address_matches

logger = logging.getLogger(__name__)

EXA_SEARCH_URL = "https://api.exa.ai/search"
PAO_DOMAIN = "manateepao.gov"

_URL_PARCEL_RE = re.compile(r'(?:parid|parcel)=(\d{10})', re.IGNORECASE)
_TEXT_PARCEL_PATTERNS = (
    re.compile(r'parcel\s*(?:id|#|number)?[:\s#]*(\d{10})\b', re.IGNORECASE),
    re.compile(r'account\s*(?:#|number)?[:\s#]*(\d{10})\b', re.IGNORECASE),
    re.compile(r'\b(\d{10})\b'),
)


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500 or exc.response.status_code == 429
    return False


def extract_parcel_id(result: Dict, address: NormalizedAddress) -> Optional[str]:
    """
    Pulls a parcel id out of one search hit, but only if the hit's text or
    title also mentions the searched street number and street name.
    """
    url = result.get("url") or ""
    text = result.get("text") or ""
    title = result.get("title") or ""

    if not address_matches(f"{title}\n{text}\n{url}", address):
        return None

    match = _URL_PARCEL_RE.search(url)
    if match:
        return match.group(1)
    for pattern in _TEXT_PARCEL_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


class ExaParcelResolver:
    """
    Fallback parcel lookup through the Exa semantic search API, restricted to
    manateepao.gov pages. Only used when the PAO form search finds no
    confirmed match. Returns None on any failure so the caller can report
    "not found" instead of erroring.
    """

    def __init__(self, api_key: Optional[str] = None, client: Optional[httpx.AsyncClient] = None,
                 num_results: int = 5, max_characters: int = 3000):
        self.api_key = api_key
        self.client = client
        self.num_results = num_results
        self.max_characters = max_characters

    def check_api_key(self) -> bool:
        if not self.api_key:
            logger.warning("Exa: EXA_API_KEY is not set, fallback search disabled")
            return False
        return True

    async def search(self, query: str) -> List[Dict]:
        payload = {
            "query": query,
            "type": "auto",
            "numResults": self.num_results,
            "includeDomains": [PAO_DOMAIN],
            "contents": {"text": {"maxCharacters": self.max_characters}},
        }
        headers = {"x-api-key": self.api_key, "Content-Type": "application/json"}

        @retry(
            wait=wait_exponential(multiplier=1, min=2, max=10),
            stop=stop_after_attempt(3),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        async def _make_request(client: httpx.AsyncClient):
            resp = await client.post(EXA_SEARCH_URL, json=payload, headers=headers)
            resp.raise_for_status()
            return resp

        if self.client is not None:
            response = await _make_request(self.client)
        else:
            async with httpx.AsyncClient(timeout=15) as client:
                response = await _make_request(client)
        return response.json().get("results") or []

    async def resolve(self, address: Union[str, NormalizedAddress]) -> Optional[str]:
        """Returns a 10-digit parcel id for the address, or None."""
        if not self.check_api_key():
            return None
        if not isinstance(address, NormalizedAddress):
            address = normalize_address_for_pao(address)

        query = f"site:{PAO_DOMAIN} {address.normalized_full or address.original} parcel"
        logger.info(f"Exa: searching for '{query}'")
        try:
            results = await self.search(query)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Exa: search failed: {e}")
            return None

        logger.info(f"Exa: {len(results)} results")
        for result in results:
            parcel_id = extract_parcel_id(result, address)
            if parcel_id:
                logger.info(f"Exa: parcel {parcel_id} from {result.get('url')}")
                return parcel_id

        logger.info("Exa: no result mentioned the address with a parcel id")
        return None

    @staticmethod
    def parcel_url(parcel_id: str) -> str:
        return PARCEL_URL_TEMPLATE.format(parcel_id=parcel_id)
