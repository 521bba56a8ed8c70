import re
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup
from playwright.async_api import Page
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from manatee_pao.config import Settings
from manatee_pao.errors import ErrorCode, PAOScrapeError
from manatee_pao.models.property_record import NormalizedAddress
from manatee_pao.utils.blocking_detector import detect_blocking
from manatee_pao.utils.result_matcher import PAO_BASE_URL, ResultRow, resolve_detail_url

logger = logging.getLogger(__name__)

PAO_SEARCH_URL = PAO_BASE_URL + "/search/"

# Everything the driver knows about the site's markup lives here.
SITE_SELECTORS = {
    "owner_last": "#OwnLast",
    "owner_first": "#OwnFirst",
    "parcel_id": "#ParcelId",
    "address": "#Address",
    "zip_code": "#Zip",
    "submit": 'input[type="submit"].btn-success, input.btn.btn-success',
    "results_table": "table.table, .search-results table, #searchResults table",
    "no_results": ".no-results, .alert-info, .alert-warning",
    "owner_card": ".owner-content, .card-body.owner-content, #property-card .card-body",
    "active_pane": ".tab-pane.active",
}

RESULT_ROW_SELECTORS = (
    "table.table tbody tr",
    ".search-results table tbody tr",
    "#searchResults tbody tr",
    "table tbody tr",
)

NO_RESULTS_PHRASES = (
    "no results",
    "no records found",
    "no properties found",
    "no matching",
    "0 results",
    "zero results",
    "search returned no",
)

PARID_URL_RE = re.compile(r'[?&]parid=(\d{10})', re.IGNORECASE)
_HREF_PARCEL_RE = re.compile(r'(?:parid|parcel|parcelid)=(\d{10})', re.IGNORECASE)
_TEXT_PARCEL_RE = re.compile(r'\b(\d{10})\b')

_OUTER_HTML_JS = "el => el.outerHTML"
_POINTER_EVENTS_JS = "el => getComputedStyle(el).pointerEvents"
_POLL_INTERVAL_MS = 250


@dataclass(frozen=True)
class SectionSpec:
    name: str
    content_selector: Optional[str] = None  # readable without a click
    tab: Optional[str] = None               # "#land" style pane id
    description: Optional[str] = None       # visible tab label
    keywords: Tuple[str, ...] = ()          # text an unlabelled active pane must mention


SECTIONS: Dict[str, SectionSpec] = {
    "owner": SectionSpec("owner", content_selector=SITE_SELECTORS["owner_card"]),
    "values": SectionSpec("values", content_selector="#tableValue", tab="#values", description="Values",
                          keywords=("just", "assessed", "taxable")),
    "sales": SectionSpec("sales", content_selector="#tableSales", tab="#sales", description="Sales",
                         keywords=("sale date", "sale price", "grantee")),
    "land": SectionSpec("land", tab="#land", description="Land", keywords=("land use", "road surface", "frontage")),
    "buildings": SectionSpec("buildings", tab="#buildings", description="Buildings",
                             keywords=("year built", "living area", "bed/bath")),
    "features": SectionSpec("features", tab="#features", description="Features", keywords=("feature", "extra")),
    "inspections": SectionSpec("inspections", tab="#inspections", description="Inspections",
                               keywords=("inspection", "inspector")),
}
BASIC_SECTIONS = ("owner", "values", "sales")
FULL_SECTIONS = ("owner", "values", "sales", "land", "buildings", "features", "inspections")


class SectionState(str, Enum):
    PENDING = "pending"
    REVEALING = "revealing"
    EXTRACTED = "extracted"
    UNAVAILABLE = "unavailable"


_TRANSITIONS = {
    SectionState.PENDING: {SectionState.REVEALING, SectionState.EXTRACTED, SectionState.UNAVAILABLE},
    SectionState.REVEALING: {SectionState.EXTRACTED, SectionState.UNAVAILABLE},
    SectionState.EXTRACTED: set(),
    SectionState.UNAVAILABLE: set(),
}


@dataclass
class SectionResult:
    name: str
    state: SectionState = SectionState.PENDING
    html: Optional[str] = None
    note: Optional[str] = None

    def advance(self, state: SectionState, note: Optional[str] = None):
        if state not in _TRANSITIONS[self.state]:
            raise ValueError(f"Section {self.name}: illegal transition {self.state.value} -> {state.value}")
        self.state = state
        if note:
            self.note = note


@dataclass
class SectionExtraction:
    url: str
    sections: Dict[str, SectionResult] = field(default_factory=dict)

    def html(self, name: str) -> Optional[str]:
        section = self.sections.get(name)
        if section and section.state == SectionState.EXTRACTED:
            return section.html
        return None

    def states(self) -> Dict[str, str]:
        return {name: s.state.value for name, s in self.sections.items()}


@dataclass
class SearchOutcome:
    kind: str  # "direct" | "results" | "no_results" | "unknown"
    url: str
    parcel_id: Optional[str] = None
    rows: List[ResultRow] = field(default_factory=list)


# ─── Pure page classification ───────────────────────────────────────────────

def parse_search_results(html: str) -> List[ResultRow]:
    soup = BeautifulSoup(html or "", "html.parser")
    trs = []
    for selector in RESULT_ROW_SELECTORS:
        trs = soup.select(selector)
        if trs:
            break

    rows: List[ResultRow] = []
    for tr in trs:
        if tr.find("th") is not None:
            continue
        row_text = re.sub(r'\s+', ' ', tr.get_text(" ", strip=True)).strip()
        if not row_text:
            continue

        href = None
        for a in tr.find_all("a", href=True):
            candidate = a["href"]
            if re.search(r'parcel|parid|detail', candidate, re.IGNORECASE):
                href = candidate
                break

        parcel_id = None
        match = _HREF_PARCEL_RE.search(href or "") or _TEXT_PARCEL_RE.search(row_text)
        if match:
            parcel_id = match.group(1)

        rows.append(ResultRow(row_text=row_text, parcel_id=parcel_id, href=resolve_detail_url(href, None)))
    return rows


def detect_no_results(html: str) -> bool:
    text = BeautifulSoup(html or "", "html.parser").get_text(" ", strip=True).lower()
    return any(phrase in text for phrase in NO_RESULTS_PHRASES)


def classify_search_page(url: str, html: str) -> SearchOutcome:
    """
    Direct redirect (the URL already carries a parcel id), a results list, or
    an empty-state page. Anything else is "unknown" and handled like no match.
    """
    match = PARID_URL_RE.search(url or "")
    if match:
        return SearchOutcome(kind="direct", url=url, parcel_id=match.group(1))

    rows = parse_search_results(html)
    if rows:
        return SearchOutcome(kind="results", url=url, rows=rows)
    if detect_no_results(html):
        return SearchOutcome(kind="no_results", url=url)
    return SearchOutcome(kind="unknown", url=url)


# ─── Browser driver ─────────────────────────────────────────────────────────

class ManateePAOScraper:
    """
    Drives one Manatee County PAO session on a page borrowed from BrowserPool.

    search() fills and submits the address form and classifies what came
    back; open_detail()/wait_for_detail() land on a parcel page; and
    extract_sections() reveals each tab and hands back its raw HTML.
    """

    def __init__(self, page: Page, settings: Settings, address: Optional[str] = None):
        self.page = page
        self.settings = settings
        self.address = address

    def _error(self, message: str, code: ErrorCode, step: str, cause: Optional[BaseException] = None) -> PAOScrapeError:
        url = getattr(self.page, "url", None)
        return PAOScrapeError(message, code, address=self.address, url=url, step=step, cause=cause)

    async def _navigate(self, url: str, step: str):
        logger.info(f"PAO: navigating to {url} ({step})")
        try:
            await self.page.goto(url, wait_until="domcontentloaded", timeout=self.settings.nav_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise self._error(f"Timed out loading {url}", ErrorCode.TIMEOUT, step, e) from e
        except PlaywrightError as e:
            raise self._error(f"Navigation to {url} failed: {e}", ErrorCode.NAVIGATION_FAILED, step, e) from e

    async def _check_blocking(self, step: str, html: Optional[str] = None):
        if html is None:
            html = await self.page.content()
        title = None
        try:
            title = await self.page.title()
        except PlaywrightError as e:
            logger.debug(f"PAO: could not read page title: {e}")
        reason = detect_blocking(html, title)
        if reason:
            logger.error(f"PAO: blocked at {step}: {reason}")
            raise self._error(f"Site blocked automated access: {reason}", ErrorCode.BLOCKED, step)

    async def _clear_and_fill(self, selector: str, value: str) -> bool:
        try:
            await self.page.click(selector, timeout=self.settings.tab_wait_ms)
            await self.page.keyboard.press("Control+a")
            await self.page.fill(selector, value, timeout=self.settings.tab_wait_ms)
            return True
        except PlaywrightError as e:
            logger.debug(f"PAO: could not fill {selector}: {e}")
            return False

    # ── search ──

    async def search(self, address: NormalizedAddress) -> SearchOutcome:
        street = address.normalized_street or address.street
        if not street:
            raise self._error("Address has no street component to search", ErrorCode.PARSE_ERROR, "search_form")

        await self._navigate(PAO_SEARCH_URL, "search_form")
        try:
            await self.page.wait_for_selector(
                SITE_SELECTORS["address"], state="attached", timeout=self.settings.nav_timeout_ms
            )
        except PlaywrightTimeoutError as e:
            await self._check_blocking("search_form")
            raise self._error("Search form never appeared", ErrorCode.TIMEOUT, "search_form", e) from e
        await self._check_blocking("search_form")

        # The form rejects empty owner/parcel fields, "*" matches anything
        for key in ("owner_last", "owner_first", "parcel_id"):
            await self._clear_and_fill(SITE_SELECTORS[key], "*")

        if not await self._clear_and_fill(SITE_SELECTORS["address"], street):
            raise self._error("Could not type into the address field", ErrorCode.PARSE_ERROR, "search_form")
        await self.page.wait_for_timeout(500)
        # Dismiss the address autocomplete dropdown
        await self.page.keyboard.press("Escape")
        if address.zip_code:
            await self._clear_and_fill(SITE_SELECTORS["zip_code"], address.zip_code.split("-")[0])

        submit = await self.page.query_selector(SITE_SELECTORS["submit"])
        if submit is None:
            raise self._error("Search submit button not found", ErrorCode.PARSE_ERROR, "submit")

        logger.info(f"PAO: submitting search for '{street}'")
        try:
            async with self.page.expect_navigation(
                wait_until="domcontentloaded", timeout=self.settings.nav_timeout_ms
            ):
                await submit.click()
        except PlaywrightTimeoutError as e:
            raise self._error("Timed out waiting for search results", ErrorCode.TIMEOUT, "submit", e) from e
        except PlaywrightError as e:
            raise self._error(f"Search submit failed: {e}", ErrorCode.NAVIGATION_FAILED, "submit", e) from e

        markers = ", ".join([
            SITE_SELECTORS["results_table"], SITE_SELECTORS["no_results"], SITE_SELECTORS["owner_card"],
        ])
        try:
            await self.page.wait_for_selector(markers, timeout=self.settings.tab_wait_ms)
        except PlaywrightTimeoutError:
            logger.warning("PAO: no result marker appeared, classifying page as-is")
        await self.page.wait_for_timeout(1000)

        html = await self.page.content()
        await self._check_blocking("results", html)

        outcome = classify_search_page(self.page.url, html)
        logger.info(f"PAO: search outcome '{outcome.kind}' ({len(outcome.rows)} rows) at {outcome.url}")
        return outcome

    # ── detail page ──

    async def open_detail(self, url: str):
        await self._navigate(url, "detail")
        await self.wait_for_detail()

    async def wait_for_detail(self):
        try:
            await self.page.wait_for_selector(
                SITE_SELECTORS["owner_card"], state="attached", timeout=self.settings.tab_wait_ms
            )
        except PlaywrightTimeoutError:
            logger.warning(f"PAO: owner card not found on {self.page.url}")
        await self._check_blocking("detail")

    async def _read_html(self, selector: str, outer: bool = True) -> Optional[str]:
        handle = await self.page.query_selector(selector)
        if handle is None:
            return None
        if outer:
            return await handle.evaluate(_OUTER_HTML_JS)
        return await handle.inner_html()

    @staticmethod
    def _has_content(html: Optional[str]) -> bool:
        if not html:
            return False
        if "<table" in html or "<tr" in html:
            return True
        text = BeautifulSoup(html, "html.parser").get_text(" ", strip=True)
        return len(text) > 50

    async def _find_tab(self, spec: SectionSpec):
        pane_id = spec.tab.lstrip("#")
        candidates = [
            f'a[href="{spec.tab}"]',
            f'a[href$="{spec.tab}"]',
            f'[aria-controls="{pane_id}"]',
            f'[data-bs-target="{spec.tab}"]',
            f'button[data-bs-target="{spec.tab}"]',
        ]
        if spec.description:
            candidates.append(f'.nav-link:has-text("{spec.description}")')
        for selector in candidates:
            try:
                handle = await self.page.query_selector(selector)
            except PlaywrightError as e:
                logger.debug(f"PAO: tab selector {selector} rejected: {e}")
                continue
            if handle is not None:
                return handle
        return None

    @staticmethod
    async def _pane_selector(tab, spec: SectionSpec) -> str:
        controls = await tab.get_attribute("aria-controls")
        if controls:
            return f"#{controls}"
        target = await tab.get_attribute("data-bs-target")
        if target and target.startswith("#"):
            return target
        href = await tab.get_attribute("href") or ""
        if "#" in href and href.split("#", 1)[1]:
            return "#" + href.split("#", 1)[1]
        return spec.tab

    @staticmethod
    async def _is_active(tab) -> bool:
        classes = (await tab.get_attribute("class") or "").split()
        return "active" in classes or (await tab.get_attribute("aria-selected")) == "true"

    @staticmethod
    async def _is_disabled(tab) -> bool:
        if await tab.get_attribute("disabled") is not None:
            return True
        if (await tab.get_attribute("aria-disabled")) == "true":
            return True
        if "disabled" in (await tab.get_attribute("class") or "").split():
            return True
        try:
            return (await tab.evaluate(_POINTER_EVENTS_JS)) == "none"
        except PlaywrightError:
            return False

    async def _reveal(self, spec: SectionSpec, result: SectionResult, allow_click: bool):
        if spec.content_selector:
            html = await self._read_html(spec.content_selector, outer=spec.name != "owner")
            if self._has_content(html):
                result.html = html
                result.advance(SectionState.EXTRACTED)
                return

        if not spec.tab or not allow_click:
            result.advance(SectionState.UNAVAILABLE, "not visible without a tab click")
            return

        tab = await self._find_tab(spec)
        if tab is None:
            result.advance(SectionState.UNAVAILABLE, "tab control not found")
            return
        pane = await self._pane_selector(tab, spec)

        if await self._is_active(tab) or await self._is_disabled(tab):
            html = await self._read_html(pane, outer=False)
            if self._has_content(html):
                result.html = html
                result.advance(SectionState.EXTRACTED)
            else:
                result.advance(SectionState.UNAVAILABLE, "tab inactive or empty")
            return

        result.advance(SectionState.REVEALING)
        await tab.click(timeout=self.settings.tab_wait_ms)

        # Pane content is fetched after the click; poll for it
        attempts = max(1, self.settings.tab_wait_ms // _POLL_INTERVAL_MS)
        for _ in range(attempts):
            await self.page.wait_for_timeout(_POLL_INTERVAL_MS)
            html = await self._read_html(pane, outer=False)
            if self._has_content(html):
                result.html = html
                result.advance(SectionState.EXTRACTED)
                return

        html = await self._read_active_pane(spec, pane)
        if html is not None:
            result.html = html
            result.advance(SectionState.EXTRACTED, "read from active pane")
        else:
            result.advance(SectionState.UNAVAILABLE, f"no content after {attempts} polls")

    async def _read_active_pane(self, spec: SectionSpec, pane: str) -> Optional[str]:
        """
        Last resort after a click. The page-wide active pane is accepted only
        when its id is this section's pane or its text names the section;
        otherwise it belongs to another tab card.
        """
        html = await self._read_html(SITE_SELECTORS["active_pane"], outer=True)
        if not self._has_content(html):
            return None
        root = BeautifulSoup(html, "html.parser").find()
        if root is None:
            return None
        pane_id = root.get("id")
        if pane_id and f"#{pane_id}" == pane:
            return root.decode_contents()
        text = root.get_text(" ", strip=True).lower()
        if any(keyword in text for keyword in spec.keywords):
            return root.decode_contents()
        logger.warning(
            f"PAO: active pane '{pane_id or '?'}' does not belong to section '{spec.name}', ignoring it"
        )
        return None

    async def extract_sections(self, names=FULL_SECTIONS, allow_click: bool = True) -> SectionExtraction:
        """
        Reads each named section off the current parcel page. A failing section
        is marked unavailable and the rest still run.
        """
        extraction = SectionExtraction(url=self.page.url)
        for name in names:
            spec = SECTIONS[name]
            result = SectionResult(name=name)
            extraction.sections[name] = result
            try:
                await self._reveal(spec, result, allow_click)
            except PlaywrightError as e:
                logger.warning(f"PAO: section '{name}' unavailable: {e}")
                if result.state in (SectionState.PENDING, SectionState.REVEALING):
                    result.advance(SectionState.UNAVAILABLE, str(e)[:200])
            logger.info(f"PAO: section '{name}' -> {result.state.value}")
        return extraction
