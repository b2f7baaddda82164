"""Tool: get_property — Look up an NYC property by address with a rent-stabilization screen."""

import logging

from nycprop.boroughs import format_bbl, require_borough_code
from nycprop.comps.resolver import resolve_parcel
from nycprop.errors import PropertyError
from nycprop.formatters import format_error, format_property_report
from nycprop.models import PropertyReport
from nycprop.registries import Registries
from nycprop.regulation.rent import assess_parcel
from nycprop.regulation.tax_benefits import fetch_tax_benefits
from nycprop.tools._context import tool_logger

logger = logging.getLogger(__name__)


async def lookup_property(
    registries: Registries,
    address: str,
    borough: str | None = None,
    include_tax_benefits: bool = True,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> PropertyReport:
    """Resolve a parcel and screen it for rent stabilization.

    When include_tax_benefits is set, 421-a and J-51 flags from the tax
    benefit registries refine the screen. Those lookups never fail the call.
    """
    log = log or logger
    borough_code = require_borough_code(borough) if borough else None

    resolution = await resolve_parcel(registries.parcels, address, borough_code, log=log)
    parcel = resolution.parcel
    notes = list(resolution.notes)

    benefits = None
    if include_tax_benefits and parcel.borough and parcel.block and parcel.lot:
        try:
            bbl = format_bbl(parcel.borough, parcel.block, parcel.lot)
            benefits = await fetch_tax_benefits(registries.tax_benefits, bbl, log=log)
        except PropertyError as exc:
            log.warning("Tax benefit refinement skipped: %s", exc)
            notes.append(f"Tax benefit data unavailable: {exc}")

    rent_info = assess_parcel(
        parcel,
        has_421a=bool(benefits and benefits.has_421a),
        has_j51=bool(benefits and benefits.has_j51),
    )
    return PropertyReport(parcel=parcel, rent_info=rent_info, tax_benefits=benefits, notes=notes)


async def get_property(
    address: str,
    borough: str | None = None,
    include_tax_benefits: bool = True,
) -> str:
    """Get NYC property details from PLUTO with a rent-stabilization assessment.

    Args:
        address: Street address (e.g., '522 East 5th Street')
        borough: Borough name (manhattan, bronx, brooklyn, queens, staten island)
        include_tax_benefits: Check 421-a / J-51 benefits to refine the
            rent-stabilization assessment (default True)

    Returns:
        Owner, units, year built, building class, zoning, assessed values,
        coordinates and a rent-stabilization likelihood with reasons and caveats.
    """
    log = tool_logger(__name__, "get_property", address=address, borough=borough)
    try:
        async with Registries.open() as regs:
            report = await lookup_property(
                regs, address, borough, include_tax_benefits, log=log
            )
        return format_property_report(report)
    except PropertyError as exc:
        log.info("Failed: %s", exc)
        return format_error(exc, address=address, borough=borough)
