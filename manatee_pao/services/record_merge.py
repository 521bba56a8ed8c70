import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from manatee_pao.models.property_record import (
    PropertyCommunity,
    PropertyExtras,
    PropertyListing,
    PropertyRecord,
    SaleRecord,
    ValuationRecord,
)
from manatee_pao.parsers import column_maps
from manatee_pao.parsers.section_parsers import sort_sales

logger = logging.getLogger(__name__)

# List fields deduplicated by natural key when passes are combined
_KEYED_LISTS = {
    "valuations": lambda v: v.year,
    "sales_history": lambda s: s.date,
}


def _fill_gaps(base: BaseModel, extra: BaseModel) -> None:
    """Fills unset fields of `base` in place from `extra`. Never overwrites."""
    for name in type(base).model_fields:
        current = getattr(base, name)
        incoming = getattr(extra, name, None)
        if incoming is None:
            continue

        if name in _KEYED_LISTS:
            key = _KEYED_LISTS[name]
            existing = list(current or [])
            seen = {key(item) for item in existing if key(item) is not None}
            for item in incoming:
                item_key = key(item)
                # Undated sales have no natural key and are always kept
                if item_key is None or item_key not in seen:
                    existing.append(item.model_copy(deep=True))
                    if item_key is not None:
                        seen.add(item_key)
            setattr(base, name, existing)
        elif current is None:
            value = incoming.model_copy(deep=True) if isinstance(incoming, BaseModel) else incoming
            if isinstance(value, list):
                value = [v.model_copy(deep=True) if isinstance(v, BaseModel) else v for v in value]
            setattr(base, name, value)
        elif isinstance(current, BaseModel) and isinstance(incoming, BaseModel):
            _fill_gaps(current, incoming)
        elif isinstance(current, list) and not current and incoming:
            setattr(base, name, list(incoming))
        elif isinstance(current, dict) and isinstance(incoming, dict):
            for k, v in incoming.items():
                current.setdefault(k, v)


def merge_records(base: PropertyRecord, *supplemental: Optional[PropertyRecord]) -> PropertyRecord:
    """
    Combines extraction passes. The base pass wins: supplemental passes only
    fill fields that are still unset, and valuations/sales are appended only
    for years/dates not already present. Inputs are left untouched.
    """
    merged = base.model_copy(deep=True)
    for extra in supplemental:
        if extra is not None:
            _fill_gaps(merged, extra)
    return merged


def _latest_valuation(valuations: Optional[List[ValuationRecord]]) -> Optional[ValuationRecord]:
    if not valuations:
        return None
    return max(valuations, key=lambda v: v.year)


def _latest_priced_sale(sales: Optional[List[SaleRecord]]) -> Optional[SaleRecord]:
    for sale in sort_sales(list(sales or [])):
        if sale.price:
            return sale
    return None


def _format_lot_size(acres: Optional[float], sqft: Optional[float]) -> Optional[str]:
    if acres:
        return f"{acres:g} acres"
    if sqft:
        return f"{sqft:,.0f} sq ft"
    return None


def finalize_record(
    record: PropertyRecord,
    detail_url: Optional[str] = None,
    method: Optional[str] = None,
    extra_raw: Optional[Dict[str, Any]] = None,
) -> PropertyRecord:
    """
    Orders the nested lists and derives the summary scalars from them.

    Summary fields are never authoritative: whenever the nested groups carry a
    value it replaces whatever summary value was there.
    """
    out = record.model_copy(deep=True)

    if out.valuations:
        out.valuations = sorted(out.valuations, key=lambda v: v.year, reverse=True)
    if out.sales_history:
        out.sales_history = sort_sales(out.sales_history)

    latest = _latest_valuation(out.valuations)
    if latest is not None:
        if latest.just and latest.just.total is not None:
            out.market_value = latest.just.total
        if latest.assessed and latest.assessed.total is not None:
            out.assessed_value = latest.assessed.total
        taxes = [t for t in (latest.ad_valorem_taxes, latest.non_ad_valorem_taxes) if t is not None]
        if taxes:
            out.tax_amount = round(sum(taxes), 2)

    sale = _latest_priced_sale(out.sales_history)
    if sale is not None:
        out.last_sale_price = sale.price
        out.last_sale_date = sale.date

    if out.building:
        b = out.building
        if b.year_built is not None:
            out.year_built = b.year_built
        if b.bedrooms is not None:
            out.bedrooms = b.bedrooms
        if b.bathrooms is not None:
            out.bathrooms = b.bathrooms
        if b.living_area_sqft is not None:
            out.living_area_sqft = b.living_area_sqft

    if out.land:
        lot_size = _format_lot_size(out.land.lot_size_acres, out.land.lot_size_sqft)
        if lot_size:
            out.lot_size = lot_size
        if out.land.zoning:
            out.zoning = out.land.zoning

    if out.basic_info:
        info = out.basic_info
        if info.legal_description:
            out.legal_description = info.legal_description
        if not out.property_type and info.use_description:
            out.property_type = info.use_description
        if not out.owner_type and info.owner_type:
            out.owner_type = info.owner_type
        if not out.parcel_id and info.account_number:
            out.parcel_id = info.account_number
        if info.subdivision:
            if out.community is None:
                out.community = PropertyCommunity()
            if not out.community.subdivision_name:
                out.community.subdivision_name = info.subdivision

    if out.market_value and out.living_area_sqft and out.living_area_sqft > 0:
        if out.listing is None:
            out.listing = PropertyListing()
        out.listing.price_per_sqft = round(out.market_value / out.living_area_sqft)

    if out.extras and out.extras.pao_extra_features:
        tags = []
        for feature in out.extras.pao_extra_features:
            tag = feature.description.strip().title()
            if tag and tag not in tags:
                tags.append(tag)
        if tags and not out.extras.features:
            out.extras.features = tags
    if out.building and out.building.pool:
        if out.extras is None:
            out.extras = PropertyExtras()
        features = list(out.extras.features or [])
        if "Pool" not in features:
            features.append("Pool")
        out.extras.features = features

    raw = dict(out.raw_data or {})
    raw.setdefault("source", "manatee_pao")
    raw["column_map_version"] = column_maps.COLUMN_MAP_VERSION
    if method:
        raw["method"] = method
    if detail_url:
        raw["detail_url"] = detail_url
    raw["scraped_at"] = datetime.now(timezone.utc).isoformat()
    if extra_raw:
        raw.update(extra_raw)
    out.raw_data = raw

    return out
