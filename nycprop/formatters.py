"""Response formatters for MCP tool outputs.

Render parsed registry records and derived results as structured markdown
text optimized for Claude consumption.
"""

from __future__ import annotations

from nycprop.boroughs import borough_name
from nycprop.models import (
    CompsResult,
    ParcelRecord,
    PropertyReport,
    RentRegulationAssessment,
    SaleRecord,
    TaxBenefitSummary,
)


def _money(value: float | None) -> str:
    return f"${value:,.0f}" if value is not None else "N/A"


def _num(value: float | int | None, suffix: str = "") -> str:
    if value is None or value == 0:
        return "N/A"
    return f"{value:,.0f}{suffix}"


def _or_na(value) -> str:
    return str(value) if value not in (None, "") else "N/A"


def format_error(exc: Exception, **context) -> str:
    """Explicit failure message echoing the caller's input."""
    kind = getattr(exc, "kind", "error")
    lines = [f"**Error ({kind}):** {exc}"]
    for key, value in context.items():
        if value not in (None, ""):
            lines.append(f"- {key}: {value}")
    return "\n".join(lines)


def format_parcel(p: ParcelRecord) -> list[str]:
    borough = borough_name(p.borough) or p.borough
    lines = [f"# Property: {p.address or 'Unknown'}\n"]
    lines.append(f"**BBL:** {p.bbl or 'N/A'} ({borough}, block {p.block}, lot {p.lot})")
    lines.append(f"**Owner:** {_or_na(p.owner)}")
    lines.append(f"**Building Class:** {_or_na(p.building_class)}")
    lines.append(f"**Zoning:** {_or_na(p.zoning)}")
    lines.append(f"**Year Built:** {_or_na(p.year_built)}")
    lines.append(f"**Units:** {p.units} residential / {p.units_total} total")
    lines.append(f"**Lot Area:** {_num(p.lot_area, ' sq ft')}")
    lines.append(f"**Building Area:** {_num(p.building_area, ' sq ft')}")
    if p.assessed_total is not None:
        lines.append(
            f"**Assessed Value:** {_money(p.assessed_total)} "
            f"(land {_money(p.assessed_land)}, exempt {_money(p.exempt_total)})"
        )
    if p.latitude is not None and p.longitude is not None:
        lines.append(f"**Coordinates:** {p.latitude:.6f}, {p.longitude:.6f}")
    if p.zola_url:
        lines.append(f"**ZoLa:** {p.zola_url}")
    return lines


def format_rent_info(info: RentRegulationAssessment) -> list[str]:
    verdict = "Likely" if info.likely_stabilized else "Unlikely"
    lines = [f"\n## Rent Stabilization: {verdict} (confidence: {info.confidence})"]
    for reason in info.reasons:
        lines.append(f"- {reason}")
    if info.notes:
        lines.append("\n**Notes:**")
        for note in info.notes:
            lines.append(f"- {note}")
    return lines


def format_property_report(report: PropertyReport) -> str:
    lines = format_parcel(report.parcel)
    lines.extend(format_rent_info(report.rent_info))
    tb = report.tax_benefits
    if tb is not None:
        lines.append("\n## Tax Benefits")
        lines.append(
            f"421-a: {'yes' if tb.has_421a else 'no'} | J-51: {'yes' if tb.has_j51 else 'no'} | "
            f"ICAP/ICIP: {'yes' if tb.has_icap else 'no'}"
        )
        lines.append(f"Total abatement: {_money(tb.total_abatement_amount)}")
        if tb.degraded_sources:
            lines.append(f"*Unavailable: {', '.join(tb.degraded_sources)} registry*")
    for note in report.notes:
        lines.append(f"\n*{note}*")
    return "\n".join(lines)


def format_sale_line(s: SaleRecord, extra: str = "") -> str:
    unit = f" #{s.apartment_number}" if s.apartment_number else ""
    return (
        f"- **{s.address}{unit}** — {_money(s.sale_price)} on {s.sale_date or 'N/A'}\n"
        f"  Class: {_or_na(s.building_class)} | Units: {s.units_total or s.units} | "
        f"Sq Ft: {_num(s.sqft)} | Built: {_or_na(s.year_built)}\n"
        f"  Neighborhood: {_or_na(s.neighborhood)}{extra}\n"
    )


def format_sales_list(sales: list[tuple[SaleRecord, ParcelRecord | None]]) -> str:
    """Format a sales search; parcels are optional per sale."""
    if not sales:
        return "No sales found matching your criteria."
    lines = [f"Found {len(sales)} sales:\n"]
    for sale, parcel in sales:
        extra = ""
        if parcel is not None:
            extra = f"\n  Owner: {_or_na(parcel.owner)} | Zoning: {_or_na(parcel.zoning)}"
        lines.append(format_sale_line(sale, extra))
    return "\n".join(lines)


def format_sale_history(parcel: ParcelRecord, sales: list[SaleRecord]) -> str:
    lines = [f"# Sale History: {parcel.address}\n", f"**BBL:** {parcel.bbl or 'N/A'}"]
    if not sales:
        lines.append("\nNo recorded sales for this property.")
        return "\n".join(lines)
    lines.append(f"**Sales:** {len(sales)}\n")
    for s in sales:
        lines.append(format_sale_line(s))
    return "\n".join(lines)


def format_property_list(parcels: list[ParcelRecord]) -> str:
    if not parcels:
        return "No properties found matching your criteria."
    lines = [f"Found {len(parcels)} properties:\n"]
    for p in parcels:
        lines.append(
            f"- **{p.address}** (BBL {p.bbl or 'N/A'})\n"
            f"  Class: {_or_na(p.building_class)} | Units: {p.unit_count} | "
            f"Built: {_or_na(p.year_built)} | Zoning: {_or_na(p.zoning)}\n"
            f"  Owner: {_or_na(p.owner)}\n"
        )
    return "\n".join(lines)


def format_comps(result: CompsResult) -> str:
    s = result.subject
    summary = result.summary
    lines = [f"# Comparable Sales: {s.address}\n"]
    lines.append(
        f"**Subject:** {borough_name(s.borough) or s.borough} | "
        f"Neighborhood: {result.neighborhood} (from {result.neighborhood_source} sales) | "
        f"Class: {_or_na(s.building_class)} | Units: {s.unit_count} | "
        f"Built: {_or_na(s.year_built)} | Sq Ft: {_num(s.building_area)}"
    )
    lines.append(
        f"**Searched:** class {result.building_class_category}*, "
        f"{', '.join(result.neighborhoods_searched)}"
        + ("" if result.include_adjacent else " (adjacent neighborhoods excluded)")
    )

    lines.append("\n## Summary")
    lines.append(f"- Comps found: {summary.comps_found}")
    lines.append(f"- Avg price/unit: {_money(summary.avg_price_per_unit)}")
    lines.append(f"- Avg price/sq ft: {_money(summary.avg_price_per_sqft)}")
    lines.append(f"- Implied value (by unit): {_money(summary.implied_value_by_unit)}")
    lines.append(f"- Implied value (by sq ft): {_money(summary.implied_value_by_sqft)}")
    if summary.degraded_enrichment:
        lines.append(
            f"- {summary.degraded_enrichment} comp(s) lack PLUTO data; "
            "sale-record fields were used"
        )

    if result.comps:
        lines.append("\n## Comps")
    for c in result.comps:
        relation = (
            "same neighborhood" if c.is_same_neighborhood
            else "adjacent" if c.is_adjacent_neighborhood
            else "other"
        )
        flag = "" if c.enrichment == "full" else f" | PLUTO: {c.enrichment}"
        lines.append(
            f"- **{c.sale.address}** — score {c.similarity_score}/100\n"
            f"  {_money(c.sale.sale_price)} on {c.sale.sale_date or 'N/A'} | "
            f"{_money(c.price_per_unit)}/unit | {_money(c.price_per_sqft)}/sq ft\n"
            f"  Class: {c.sale.building_class} | Units: {c.units_total} | "
            f"Built: {_or_na(c.year_built)} | {c.sale.neighborhood} ({relation}){flag}\n"
            f"  {c.sale.zola_url}\n"
        )

    for note in result.notes:
        lines.append(f"*{note}*")
    return "\n".join(lines)


def format_tax_benefits(benefits: TaxBenefitSummary, summary: str) -> str:
    lines = [f"# Tax Benefits: BBL {benefits.bbl}\n", summary, ""]
    lines.append(
        f"**Programs:** 421-a: {'yes' if benefits.has_421a else 'no'} | "
        f"J-51: {'yes' if benefits.has_j51 else 'no'} | "
        f"ICAP/ICIP: {'yes' if benefits.has_icap else 'no'} | "
        f"STAR: {'yes' if benefits.has_star else 'no'}"
    )
    lines.append(
        f"**Totals (all tax years):** exemptions {_money(benefits.total_exemption_value)}, "
        f"abatements {_money(benefits.total_abatement_amount)}"
    )
    if benefits.exemptions:
        lines.append("\n## Exemptions")
        for e in benefits.exemptions:
            lines.append(
                f"- {e.tax_year or 'N/A'} {e.exemption_code} {e.exemption_description}: "
                f"{_money(e.exempt_value)}"
            )
    if benefits.abatements:
        lines.append("\n## Abatements")
        for a in benefits.abatements:
            period = ""
            if a.benefit_start_date or a.benefit_end_date:
                period = f" ({a.benefit_start_date or '?'} to {a.benefit_end_date or '?'})"
            lines.append(
                f"- {a.tax_year or 'N/A'} {a.abatement_code} {a.abatement_description}: "
                f"{_money(a.abatement_amount)}{period}"
            )
    if benefits.degraded_sources:
        lines.append(
            f"\n*Partial data: the {', '.join(benefits.degraded_sources)} "
            "registry did not respond.*"
        )
    return "\n".join(lines)
