"""Record and result types shared across the comparable and regulation code.

Registry rows are parsed into frozen dataclasses at the registry boundary so
downstream code never touches raw SODA dicts. Unknown numeric values parse to
None (nullable fields) or 0 (counts and areas the registries report as 0).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from nycprop.boroughs import borough_code, normalize_key_part

ZOLA_LOT_URL = "https://zola.planninglabs.nyc/l/lot/{borough}/{block}/{lot}"


# ---------------------------------------------------------------------------
# Row parsing helpers
# ---------------------------------------------------------------------------

def _text(row: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = row.get(key)
        if value not in (None, ""):
            return str(value).strip()
    return ""


def _float(value: Any) -> float | None:
    if value in (None, ""):
        return None
    try:
        return float(str(value).replace(",", "").replace("$", ""))
    except (TypeError, ValueError):
        return None


def _int(value: Any) -> int:
    """Parse an integer count; unknown or junk values become 0."""
    number = _float(value)
    return int(number) if number is not None else 0


def _year(value: Any) -> int | None:
    """Registries use 0 for an unknown construction year."""
    year = _int(value)
    return year if year > 0 else None


def _date(value: Any) -> str:
    return str(value).split("T", 1)[0] if value else ""


def zola_url(borough: str, block: str, lot: str) -> str:
    if not (borough and block and lot):
        return ""
    return ZOLA_LOT_URL.format(borough=borough, block=block, lot=lot)


# ---------------------------------------------------------------------------
# Registry records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ParcelRecord:
    """One PLUTO tax lot."""
    borough: str
    block: str
    lot: str
    bbl: str = ""
    address: str = ""
    latitude: float | None = None
    longitude: float | None = None
    units: int = 0
    units_total: int = 0
    year_built: int | None = None
    building_class: str = ""
    owner: str = ""
    zoning: str = ""
    lot_area: int = 0
    building_area: int = 0
    assessed_land: float | None = None
    assessed_total: float | None = None
    exempt_total: float | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.borough, self.block, self.lot)

    @property
    def unit_count(self) -> int:
        """Total units preferred over residential units when both are known."""
        return self.units_total or self.units

    @property
    def class_category(self) -> str:
        return self.building_class[:1].upper()

    @property
    def zola_url(self) -> str:
        return zola_url(self.borough, self.block, self.lot)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ParcelRecord:
        borough = _text(row, "borocode") or borough_code(_text(row, "borough")) or ""
        return cls(
            borough=normalize_key_part(borough) if borough else "",
            block=normalize_key_part(row.get("block")),
            lot=normalize_key_part(row.get("lot")),
            bbl=_text(row, "bbl").split(".", 1)[0],
            address=_text(row, "address").upper(),
            latitude=_float(row.get("latitude")),
            longitude=_float(row.get("longitude")),
            units=_int(row.get("unitsres")),
            units_total=_int(row.get("unitstotal")),
            year_built=_year(row.get("yearbuilt")),
            building_class=_text(row, "bldgclass").upper(),
            owner=_text(row, "ownername"),
            zoning=_text(row, "zonedist1"),
            lot_area=_int(row.get("lotarea")),
            building_area=_int(row.get("bldgarea")),
            assessed_land=_float(row.get("assessland")),
            assessed_total=_float(row.get("assesstot")),
            exempt_total=_float(row.get("exempttot")),
        )


@dataclass(frozen=True)
class SaleRecord:
    """One row of the citywide rolling sales ledger."""
    borough: str
    block: str
    lot: str
    sale_date: str
    address: str = ""
    apartment_number: str = ""
    sale_price: float = 0.0
    building_class: str = ""
    neighborhood: str = ""
    units: int = 0
    units_total: int = 0
    sqft: int = 0
    year_built: int | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.borough, self.block, self.lot)

    @property
    def is_whole_building(self) -> bool:
        return not self.apartment_number

    @property
    def zola_url(self) -> str:
        return zola_url(self.borough, self.block, self.lot)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> SaleRecord:
        return cls(
            borough=normalize_key_part(row.get("borough")),
            block=normalize_key_part(row.get("block")),
            lot=normalize_key_part(row.get("lot")),
            sale_date=_date(row.get("sale_date")),
            address=_text(row, "address"),
            apartment_number=_text(row, "apartment_number"),
            sale_price=_float(row.get("sale_price")) or 0.0,
            building_class=_text(
                row, "building_class_at_time_of_sale", "building_class_at_present"
            ).upper(),
            neighborhood=_text(row, "neighborhood").upper(),
            units=_int(row.get("residential_units")),
            units_total=_int(row.get("total_units")),
            sqft=_int(row.get("gross_square_feet")),
            year_built=_year(row.get("year_built")),
        )


@dataclass(frozen=True)
class ExemptionRow:
    bbl: str
    tax_year: str
    exemption_code: str
    exemption_description: str
    exempt_value: float
    percent_exempt: float | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ExemptionRow:
        return cls(
            bbl=_text(row, "bbl").split(".", 1)[0],
            tax_year=_text(row, "taxyear", "tax_year", "year"),
            exemption_code=_text(row, "exmptcode", "exemption_code", "exmp_code"),
            exemption_description=_text(
                row, "exmptdesc", "exemption_description", "exmptname", "exname"
            ),
            exempt_value=_float(
                row.get("exmpttot") or row.get("exempt_value") or row.get("curexmptot")
            ) or 0.0,
            percent_exempt=_float(row.get("pctexmpt")),
        )


@dataclass(frozen=True)
class AbatementRow:
    bbl: str
    tax_year: str
    abatement_code: str
    abatement_description: str
    abatement_amount: float
    benefit_start_date: str | None = None
    benefit_end_date: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> AbatementRow:
        return cls(
            bbl=_text(row, "bbl").split(".", 1)[0],
            tax_year=_text(row, "taxyear", "tax_year", "year"),
            abatement_code=_text(row, "apts_code", "abatement_code", "abatmtcode"),
            abatement_description=_text(
                row, "apts_desc", "abatement_description", "abatmtname", "abtdesc"
            ),
            abatement_amount=_float(
                row.get("curabttot") or row.get("abatement_amount") or row.get("appliedabt")
            ) or 0.0,
            benefit_start_date=_date(row.get("benstrtdt")) or None,
            benefit_end_date=_date(row.get("benenddt")) or None,
        )


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------

@dataclass
class CandidateComp:
    """A sale joined with the best-available parcel data and scored."""
    sale: SaleRecord
    units_total: int
    sqft: int
    year_built: int | None
    assessed_total: float | None
    price_per_unit: float | None
    price_per_sqft: float | None
    is_same_neighborhood: bool = False
    is_adjacent_neighborhood: bool = False
    similarity_score: int = 0
    enrichment: str = "full"  # full | missing | degraded
    score_breakdown: dict[str, int] = field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str, str]:
        return self.sale.key


@dataclass
class TaxBenefitSummary:
    bbl: str
    exemptions: list[ExemptionRow] = field(default_factory=list)
    abatements: list[AbatementRow] = field(default_factory=list)
    has_421a: bool = False
    has_j51: bool = False
    has_icap: bool = False
    has_star: bool = False
    total_exemption_value: float = 0.0
    total_abatement_amount: float = 0.0
    degraded_sources: list[str] = field(default_factory=list)


@dataclass
class RentRegulationAssessment:
    likely_stabilized: bool = False
    reasons: list[str] = field(default_factory=list)
    confidence: str = "medium"  # high | medium | low
    notes: list[str] = field(default_factory=list)


@dataclass
class CompsSummary:
    comps_found: int
    avg_price_per_unit: float | None
    avg_price_per_sqft: float | None
    implied_value_by_unit: float | None
    implied_value_by_sqft: float | None
    degraded_enrichment: int = 0


@dataclass
class CompsResult:
    subject: ParcelRecord
    neighborhood: str
    neighborhood_source: str
    building_class_category: str
    neighborhoods_searched: list[str]
    include_adjacent: bool
    summary: CompsSummary
    comps: list[CandidateComp] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


@dataclass
class PropertyReport:
    """Result of a property lookup with its regulation assessment."""
    parcel: ParcelRecord
    rent_info: RentRegulationAssessment
    tax_benefits: TaxBenefitSummary | None = None
    notes: list[str] = field(default_factory=list)
