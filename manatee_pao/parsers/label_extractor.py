import re
import logging
from typing import Iterable, Optional, Union

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

_BOLD_LABEL_SELECTOR = ".font-weight-bold, strong, b, .label"
_COLUMN_SELECTOR = ".col, .col-sm, [class*='col-']"
_EMPTY_VALUES = {"", "-", "n/a", "N/A"}


def make_soup(html: Union[str, BeautifulSoup, None]) -> BeautifulSoup:
    if isinstance(html, BeautifulSoup):
        return html
    return BeautifulSoup(html or "", "html.parser")


def text_of(node: Optional[Tag], sep: str = " ") -> str:
    if node is None:
        return ""
    return re.sub(r'\s+', ' ', node.get_text(sep, strip=True)).strip()


def clean_value(value: Optional[str]) -> Optional[str]:
    """Strips 'Go to ...' link text and [bracketed] notes, collapses whitespace."""
    if not value:
        return None
    value = re.sub(r'Go to.*$', '', value, flags=re.IGNORECASE)
    value = re.sub(r'\[.*?\]', '', value)
    value = re.sub(r'\s+', ' ', value).strip()
    return value or None


def _squash(text: str) -> str:
    return re.sub(r'[:\s]', '', text.lower())


def _from_bold_label(soup: BeautifulSoup, label: str) -> Optional[str]:
    lower_label = label.lower()
    for el in soup.select(_BOLD_LABEL_SELECTOR):
        label_text = text_of(el).lower()
        if lower_label not in label_text and _squash(label_text) != _squash(label):
            continue

        nxt = el.find_next_sibling()
        if nxt is not None and "font-weight-bold" not in (nxt.get("class") or []):
            val = text_of(nxt)
            if 0 < len(val) < 500:
                return val

        parent = el.parent
        parent_next = parent.find_next_sibling() if parent is not None else None
        if parent_next is not None:
            val = text_of(parent_next)
            if 0 < len(val) < 500 and lower_label not in val.lower():
                return val

        row = el.find_parent(class_="row")
        if row is not None:
            found_label = False
            for col in row.select(_COLUMN_SELECTOR):
                col_text = text_of(col)
                if found_label and col_text and lower_label not in col_text.lower():
                    return col_text
                if lower_label in col_text.lower():
                    found_label = True
    return None


def _from_definition_list(soup: BeautifulSoup, label: str) -> Optional[str]:
    lower_label = label.lower()
    for dt in soup.find_all("dt"):
        if lower_label in text_of(dt).lower():
            dd = dt.find_next_sibling("dd")
            val = text_of(dd)
            if val:
                return val
    return None


def _from_table_rows(soup: BeautifulSoup, label: str) -> Optional[str]:
    lower_label = label.lower()
    for row in soup.find_all("tr"):
        cells = row.find_all(["td", "th"])
        for i, cell in enumerate(cells[:-1]):
            if lower_label in text_of(cell).lower():
                val = text_of(cells[i + 1])
                if val not in _EMPTY_VALUES:
                    return val
    return None


def _from_inline_text(soup: BeautifulSoup, label: str) -> Optional[str]:
    lower_label = label.lower()
    for el in soup.find_all(["div", "span", "p"]):
        text = el.get_text("\n")
        idx = text.lower().find(lower_label)
        if idx == -1:
            continue
        after = text[idx + len(label):]
        after = re.sub(r'^[:\s]+', '', after).split("\n")[0].strip()
        # Another "Label:" means we ran into the next field
        if after and len(after) < 200 and not re.match(r'^[A-Z][a-z]+:', after):
            return after
    return None


_STRATEGIES = (_from_bold_label, _from_definition_list, _from_table_rows, _from_inline_text)


def extract_field(html: Union[str, BeautifulSoup, None], labels: Iterable[str]) -> Optional[str]:
    """
    Finds the value shown next to any of `labels`.

    Each label is tried against four layouts in order: a bold label with the
    value in a sibling/adjacent column, a dt/dd pair, a key/value table row,
    and finally "Label: value" inline text. First hit wins; None when nothing
    matched.
    """
    soup = make_soup(html)
    for label in labels:
        for strategy in _STRATEGIES:
            try:
                found = strategy(soup, label)
            except (AttributeError, TypeError, ValueError) as e:
                logger.debug(f"Label extractor: {strategy.__name__} failed for '{label}': {e}")
                continue
            if found:
                return found
    return None
