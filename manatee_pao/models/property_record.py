from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class ValueBreakdown(BaseModel):
    land: Optional[float] = None
    building: Optional[float] = None
    extra_features: Optional[float] = None
    total: Optional[float] = None


class ValuationRecord(BaseModel):
    year: int
    homestead: Optional[bool] = None
    just: Optional[ValueBreakdown] = None
    assessed: Optional[ValueBreakdown] = None
    school_assessed: Optional[float] = None
    taxable: Optional[ValueBreakdown] = None
    ad_valorem_taxes: Optional[float] = None
    non_ad_valorem_taxes: Optional[float] = None


class SaleRecord(BaseModel):
    date: Optional[str] = None  # MM/DD/YYYY as shown on the site
    price: Optional[float] = None
    deed_type: Optional[str] = None
    instrument_number: Optional[str] = None
    book_page: Optional[str] = None
    grantor: Optional[str] = None
    grantee: Optional[str] = None
    qualified: Optional[bool] = None
    vacant_or_improved: Optional[str] = None
    qualification_code: Optional[str] = None


class ExtraFeatureRecord(BaseModel):
    description: str
    year: Optional[int] = None
    area_sqft: Optional[float] = None
    units: Optional[float] = None
    value: Optional[float] = None


class InspectionRecord(BaseModel):
    date: Optional[str] = None
    type: Optional[str] = None
    result: Optional[str] = None
    inspector: Optional[str] = None
    notes: Optional[str] = None


class PropertyBasicInfo(BaseModel):
    account_number: Optional[str] = None
    use_code: Optional[str] = None
    use_description: Optional[str] = None
    situs_address: Optional[str] = None
    mailing_address: Optional[str] = None
    subdivision: Optional[str] = None
    neighborhood: Optional[str] = None
    municipality: Optional[str] = None
    jurisdiction: Optional[str] = None
    tax_district: Optional[str] = None
    section_township_range: Optional[str] = None
    legal_description: Optional[str] = None
    short_description: Optional[str] = None
    homestead_exemption: Optional[bool] = None
    fema_value: Optional[float] = None
    owner_type: Optional[str] = None
    living_units: Optional[int] = None


class PropertyBuilding(BaseModel):
    year_built: Optional[int] = None
    effective_year_built: Optional[int] = None
    living_area_sqft: Optional[float] = None
    total_area_sqft: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    full_bathrooms: Optional[int] = None
    half_bathrooms: Optional[int] = None
    stories: Optional[float] = None
    units: Optional[int] = None
    construction_type: Optional[str] = None
    foundation: Optional[str] = None
    exterior_walls: Optional[str] = None
    roof_type: Optional[str] = None
    roof_cover: Optional[str] = None
    flooring: Optional[str] = None
    interior_walls: Optional[str] = None
    heating: Optional[str] = None
    cooling: Optional[str] = None
    fireplace: Optional[bool] = None
    garage_type: Optional[str] = None
    garage_spaces: Optional[int] = None
    pool: Optional[bool] = None


class PropertyLand(BaseModel):
    lot_size_sqft: Optional[float] = None
    lot_size_acres: Optional[float] = None
    land_use: Optional[str] = None
    land_use_code: Optional[str] = None
    frontage: Optional[float] = None
    depth: Optional[float] = None
    dimensions: Optional[str] = None
    road_surface_type: Optional[str] = None
    zoning: Optional[str] = None


class PropertyCommunity(BaseModel):
    subdivision_name: Optional[str] = None
    has_hoa: Optional[bool] = None
    hoa_fee: Optional[float] = None
    hoa_fee_frequency: Optional[str] = None


class PropertyListing(BaseModel):
    price_per_sqft: Optional[float] = None


class PropertyExtras(BaseModel):
    features: Optional[List[str]] = None
    pao_extra_features: Optional[List[ExtraFeatureRecord]] = None
    inspections: Optional[List[InspectionRecord]] = None


class PropertyRecord(BaseModel):
    """
    Typed property record assembled from the PAO detail page.

    Summary scalars (year_built, market_value, last_sale_price, ...) are derived
    from the nested groups by record_merge.finalize_record. Every nested group
    is optional: None means the section was not observed, not that it was empty.
    """
    parcel_id: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    owner: Optional[str] = None
    owner_type: Optional[str] = None
    property_type: Optional[str] = None

    year_built: Optional[int] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    living_area_sqft: Optional[float] = None
    lot_size: Optional[str] = None
    assessed_value: Optional[float] = None
    market_value: Optional[float] = None
    last_sale_price: Optional[float] = None
    last_sale_date: Optional[str] = None
    tax_amount: Optional[float] = None
    legal_description: Optional[str] = None
    zoning: Optional[str] = None

    basic_info: Optional[PropertyBasicInfo] = None
    building: Optional[PropertyBuilding] = None
    land: Optional[PropertyLand] = None
    valuations: Optional[List[ValuationRecord]] = None
    sales_history: Optional[List[SaleRecord]] = None
    community: Optional[PropertyCommunity] = None
    listing: Optional[PropertyListing] = None
    extras: Optional[PropertyExtras] = None

    raw_data: Optional[Dict[str, Any]] = None


class NormalizedAddress(BaseModel):
    original: str
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    normalized_street: Optional[str] = None
    normalized_full: str = ""
    was_normalized: bool = False
    normalizations: List[str] = Field(default_factory=list)


class LookupResult(BaseModel):
    """Response of a single address lookup. detail_url None means no confident match."""
    detail_url: Optional[str] = None
    record: PropertyRecord = Field(default_factory=PropertyRecord)
    debug: Dict[str, Any] = Field(default_factory=dict)
    found: bool = False
    message: Optional[str] = None
