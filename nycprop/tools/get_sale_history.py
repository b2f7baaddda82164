"""Tool: get_sale_history — All recorded sales of one NYC property."""

import logging

from nycprop.boroughs import require_borough_code
from nycprop.comps.resolver import resolve_parcel
from nycprop.errors import PropertyError
from nycprop.formatters import format_error, format_sale_history
from nycprop.models import ParcelRecord, SaleRecord
from nycprop.registries import Registries
from nycprop.tools._context import tool_logger

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


async def sale_history(
    registries: Registries,
    address: str,
    borough: str | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> tuple[ParcelRecord, list[SaleRecord]]:
    """Resolve the parcel, then list its sales newest first."""
    log = log or logger
    code = require_borough_code(borough) if borough else None
    resolution = await resolve_parcel(registries.parcels, address, code, log=log)
    parcel = resolution.parcel
    sales = await registries.sales.get_by_key(
        parcel.borough, parcel.block, parcel.lot, limit=HISTORY_LIMIT
    )
    return parcel, sorted(sales, key=lambda s: s.sale_date, reverse=True)


async def get_sale_history(address: str, borough: str | None = None) -> str:
    """Get every recorded sale for an NYC property.

    Args:
        address: Street address (e.g., '522 East 5th Street')
        borough: Borough name (optional)

    Returns:
        The property's sales, newest first, including unit sales.
    """
    log = tool_logger(__name__, "get_sale_history", address=address, borough=borough)
    try:
        async with Registries.open() as regs:
            parcel, sales = await sale_history(regs, address, borough, log=log)
        return format_sale_history(parcel, sales)
    except PropertyError as exc:
        log.info("Failed: %s", exc)
        return format_error(exc, address=address, borough=borough)
