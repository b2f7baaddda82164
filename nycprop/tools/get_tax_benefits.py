"""Tool: get_tax_benefits — NYC property tax exemptions and abatements."""

import logging

from nycprop.boroughs import format_bbl, require_borough_code, validate_bbl
from nycprop.comps.resolver import resolve_parcel
from nycprop.errors import InvalidInput, PropertyError
from nycprop.formatters import format_error, format_tax_benefits
from nycprop.models import TaxBenefitSummary
from nycprop.registries import Registries
from nycprop.regulation.tax_benefits import fetch_tax_benefits, summarize_benefits
from nycprop.tools._context import tool_logger

logger = logging.getLogger(__name__)


async def resolve_bbl(
    registries: Registries,
    address: str | None = None,
    borough: str | None = None,
    borough_code: str | None = None,
    block: str | None = None,
    lot: str | None = None,
    bbl: str | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> str:
    """Pick the BBL from explicit parts, a full BBL, or an address lookup."""
    if bbl:
        return validate_bbl(bbl)
    if borough_code and block and lot:
        return format_bbl(require_borough_code(borough_code), block, lot)
    if address:
        code = require_borough_code(borough) if borough else None
        resolution = await resolve_parcel(registries.parcels, address, code, log=log)
        p = resolution.parcel
        return format_bbl(p.borough, p.block, p.lot)
    raise InvalidInput("Provide either address (+ borough), borough_code + block + lot, or bbl")


async def lookup_tax_benefits(
    registries: Registries,
    log: logging.Logger | logging.LoggerAdapter | None = None,
    **location,
) -> TaxBenefitSummary:
    log = log or logger
    bbl = await resolve_bbl(registries, log=log, **location)
    return await fetch_tax_benefits(registries.tax_benefits, bbl, log=log)


async def get_tax_benefits(
    address: str | None = None,
    borough: str | None = None,
    borough_code: str | None = None,
    block: str | None = None,
    lot: str | None = None,
    bbl: str | None = None,
) -> str:
    """Get property tax exemptions and abatements (421-a, J-51, ICAP, STAR).

    Identify the property by address (plus borough), by borough code + block
    + lot, or by a 10-digit BBL.

    Args:
        address: Street address (e.g., '522 East 5th Street')
        borough: Borough name, used with address
        borough_code: Borough code 1-5 (or name), used with block and lot
        block: Tax block
        lot: Tax lot
        bbl: 10-digit borough-block-lot

    Returns:
        Program flags, totals across all tax years, and every exemption and
        abatement row. A registry that fails is reported as partial data.
    """
    log = tool_logger(__name__, "get_tax_benefits", address=address, bbl=bbl)
    try:
        async with Registries.open() as regs:
            benefits = await lookup_tax_benefits(
                regs,
                log=log,
                address=address,
                borough=borough,
                borough_code=borough_code,
                block=block,
                lot=lot,
                bbl=bbl,
            )
        return format_tax_benefits(benefits, summarize_benefits(benefits))
    except PropertyError as exc:
        log.info("Failed: %s", exc)
        return format_error(
            exc, address=address, borough=borough, block=block, lot=lot, bbl=bbl
        )
