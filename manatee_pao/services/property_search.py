import time
import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from bs4 import BeautifulSoup

from manatee_pao.agents.browser_pool import BrowserPool
from manatee_pao.agents.exa_resolver import ExaParcelResolver
from manatee_pao.agents.manatee_scraper import (
    BASIC_SECTIONS,
    FULL_SECTIONS,
    ManateePAOScraper,
    SectionExtraction,
)
from manatee_pao.config import Settings, load_settings
from manatee_pao.errors import ErrorCode, PAOScrapeError
from manatee_pao.models.property_record import (
    LookupResult,
    NormalizedAddress,
    PropertyExtras,
    PropertyRecord,
)
from manatee_pao.parsers import section_parsers
from manatee_pao.services.record_merge import finalize_record, merge_records
from manatee_pao.utils.address_utils import is_real_address, normalize_address_for_pao
from manatee_pao.utils.result_matcher import address_matches, select_best_result

logger = logging.getLogger(__name__)


def parse_extraction(extraction: SectionExtraction) -> PropertyRecord:
    """
    Runs every section parser over one extraction pass. Sections that were not
    extracted stay None on the record; an extracted section with no rows
    becomes an empty list.
    """
    owner = section_parsers.parse_owner_section(extraction.html("owner"))

    tabs = PropertyRecord()
    values_html = extraction.html("values")
    if values_html is not None:
        tabs.valuations = section_parsers.parse_valuations(values_html)
    sales_html = extraction.html("sales")
    if sales_html is not None:
        tabs.sales_history = section_parsers.parse_sales(sales_html)
    tabs.building = section_parsers.parse_building(extraction.html("buildings"))
    tabs.land = section_parsers.parse_land(extraction.html("land"))

    features_html = extraction.html("features")
    inspections_html = extraction.html("inspections")
    if features_html is not None or inspections_html is not None:
        tabs.extras = PropertyExtras(
            pao_extra_features=section_parsers.parse_extra_features(features_html) if features_html is not None else None,
            inspections=section_parsers.parse_inspections(inspections_html) if inspections_html is not None else None,
        )

    return merge_records(owner, tabs)


def _extraction_text(*extractions: SectionExtraction) -> str:
    chunks = []
    for extraction in extractions:
        for section in extraction.sections.values():
            if section.html:
                chunks.append(BeautifulSoup(section.html, "html.parser").get_text(" ", strip=True))
    return "\n".join(chunks)


class PropertySearchService:
    """
    Address in, typed PropertyRecord out.

    Search the PAO form, confirm the matching row (or accept a direct
    redirect), extract the parcel page in a basic and a full pass, merge, and
    verify the page really is the searched address. Falls back to Exa when
    the form search gives no confirmed match. The browser pool is injected so
    concurrent lookups share one engine but never a context.
    """

    def __init__(
        self,
        pool: BrowserPool,
        settings: Optional[Settings] = None,
        resolver: Optional[ExaParcelResolver] = None,
        scraper_factory: Callable[..., ManateePAOScraper] = ManateePAOScraper,
    ):
        self.pool = pool
        self.settings = settings or load_settings()
        self.resolver = resolver or ExaParcelResolver(api_key=self.settings.exa_api_key)
        self.scraper_factory = scraper_factory

    async def lookup(self, address: str) -> LookupResult:
        normalized = normalize_address_for_pao(address)
        debug: Dict[str, Any] = {
            "normalized_address": normalized.normalized_full,
            "normalizations": normalized.normalizations,
            "step": "normalize",
        }

        if not is_real_address(address) or not normalized.normalized_street:
            return LookupResult(
                debug=debug,
                message=f"'{address}' does not look like a street address.",
            )

        started = time.monotonic()
        try:
            result = await asyncio.wait_for(
                self._lookup(normalized, debug), timeout=self.settings.operation_timeout_s
            )
        except asyncio.TimeoutError as e:
            logger.error(f"PAO: lookup for '{address}' exceeded {self.settings.operation_timeout_ms}ms")
            raise PAOScrapeError(
                f"Lookup exceeded {self.settings.operation_timeout_ms}ms",
                ErrorCode.TIMEOUT,
                address=normalized.original,
                step=debug.get("step"),
                cause=e,
            ) from e
        result.debug["elapsed_ms"] = int((time.monotonic() - started) * 1000)
        return result

    async def _extract(self, scraper: ManateePAOScraper, debug: Dict) -> Tuple[PropertyRecord, str]:
        debug["step"] = "extract_basic"
        basic = await scraper.extract_sections(BASIC_SECTIONS, allow_click=False)
        records = [parse_extraction(basic)]
        extractions = [basic]
        states = basic.states()

        if self.settings.scope == "full":
            debug["step"] = "extract_full"
            remaining = [name for name in FULL_SECTIONS if basic.html(name) is None]
            if remaining:
                full = await scraper.extract_sections(remaining, allow_click=True)
                records.append(parse_extraction(full))
                extractions.append(full)
                states.update(full.states())

        debug["sections"] = states
        return merge_records(*records), _extraction_text(*extractions)

    async def _lookup(self, normalized: NormalizedAddress, debug: Dict) -> LookupResult:
        detail_url: Optional[str] = None
        parcel_id: Optional[str] = None
        method: Optional[str] = None
        record: Optional[PropertyRecord] = None
        page_text = ""

        async with self.pool.page() as page:
            scraper = self.scraper_factory(page, self.settings, address=normalized.original)
            debug["step"] = "search"
            outcome = await scraper.search(normalized)
            debug["strategy"] = outcome.kind
            debug["rows_found"] = len(outcome.rows)

            if outcome.kind == "direct":
                detail_url, parcel_id, method = outcome.url, outcome.parcel_id, "direct_redirect"
                await scraper.wait_for_detail()
            elif outcome.kind == "results":
                match = select_best_result(outcome.rows, normalized)
                debug["match"] = {
                    "confirmed": match.confirmed,
                    "row_text": match.row_text,
                    "candidate_url": match.detail_url,
                    "reasons": match.reasons,
                }
                if match.confirmed:
                    detail_url, parcel_id, method = match.detail_url, match.parcel_id, "results_list"
                    debug["step"] = "detail"
                    await scraper.open_detail(detail_url)

            if detail_url:
                record, page_text = await self._extract(scraper, debug)

        if detail_url is None:
            debug["step"] = "fallback"
            debug["fallback_attempted"] = True
            parcel_id = await self.resolver.resolve(normalized)
            if parcel_id:
                detail_url, method = self.resolver.parcel_url(parcel_id), "exa_fallback"
                async with self.pool.page() as page:
                    scraper = self.scraper_factory(page, self.settings, address=normalized.original)
                    debug["step"] = "detail"
                    await scraper.open_detail(detail_url)
                    record, page_text = await self._extract(scraper, debug)

        debug["method"] = method
        if detail_url is None or record is None:
            logger.info(f"PAO: no confident match for '{normalized.original}'")
            return LookupResult(
                debug=debug,
                message=(
                    f"Property not found at \"{normalized.original}\". The address was not found in "
                    "Manatee County Property Appraiser records. Please verify the address is in "
                    "Manatee County, FL and the street name and number are correct."
                ),
            )

        return self._verified_result(normalized, record, detail_url, parcel_id, method, page_text, debug)

    def _verified_result(self, normalized: NormalizedAddress, record: PropertyRecord, detail_url: str,
                         parcel_id: Optional[str], method: str, page_text: str, debug: Dict) -> LookupResult:
        extracted = record.address or (record.basic_info.situs_address if record.basic_info else None)
        verified = address_matches(extracted, normalized) if extracted else address_matches(page_text, normalized)
        debug["address_verified"] = verified
        if not verified:
            logger.error(
                f"PAO: address mismatch, searched '{normalized.original}' but page shows '{extracted}' ({detail_url})"
            )
            debug["rejected_url"] = detail_url
            return LookupResult(
                debug=debug,
                message=(
                    f"Address verification failed. Searched for \"{normalized.original}\" but the property "
                    f"page returned data for \"{extracted or 'an unidentified parcel'}\"."
                ),
            )

        # The parcel id in the URL identifies the page we actually read
        base = PropertyRecord(parcel_id=parcel_id) if parcel_id else PropertyRecord()
        merged = merge_records(base, record)
        final = finalize_record(merged, detail_url=detail_url, method=method)
        logger.info(
            f"PAO: extracted parcel {final.parcel_id} "
            f"({len(final.valuations or [])} valuations, {len(final.sales_history or [])} sales)"
        )
        return LookupResult(detail_url=detail_url, record=final, debug=debug, found=True)
