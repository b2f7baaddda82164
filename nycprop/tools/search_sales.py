"""Tool: search_sales — Search NYC rolling sales with filters."""

import logging

from nycprop.boroughs import require_borough_code
from nycprop.comps.candidates import OVERFETCH_FACTOR
from nycprop.comps.enrichment import enrich_sales
from nycprop.comps.ranking import clamp_limit
from nycprop.errors import InvalidInput, PropertyError
from nycprop.formatters import format_error, format_sales_list
from nycprop.models import ParcelRecord, SaleRecord
from nycprop.registries import Registries
from nycprop.soql import And, Contains, DateBound, Eq, Gt, Gte, IsBlank, Lte, StartsWith
from nycprop.tools._context import tool_logger

logger = logging.getLogger(__name__)


def build_sales_filter(
    neighborhood: str | None = None,
    borough: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    building_class: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    whole_buildings_only: bool = True,
) -> And:
    """Translate search arguments into a sales predicate.

    Raises InvalidInput for an unknown borough before anything is queried.
    """
    terms = [Gt("sale_price", 0)]
    if neighborhood:
        terms.append(Contains("neighborhood", neighborhood.strip().upper()))
    if borough:
        terms.append(Eq("borough", require_borough_code(borough)))
    if min_price is not None:
        terms.append(Gte("sale_price", min_price))
    if max_price is not None:
        terms.append(Lte("sale_price", max_price))
    if building_class:
        terms.append(
            StartsWith("building_class_at_time_of_sale", building_class.strip().upper())
        )
    if date_from:
        terms.append(DateBound("sale_date", date_from, ">="))
    if date_to:
        terms.append(DateBound("sale_date", date_to, "<="))
    if whole_buildings_only:
        terms.append(IsBlank("apartment_number"))
    return And(*terms)


def _unit_count(sale: SaleRecord, parcel: ParcelRecord | None) -> int:
    # PLUTO's unit counts are more reliable than the ledger's
    if parcel is not None and parcel.unit_count:
        return parcel.unit_count
    return sale.units_total or sale.units


async def find_sales(
    registries: Registries,
    limit: int | None = 10,
    min_units: int | None = None,
    max_units: int | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
    **filters,
) -> list[tuple[SaleRecord, ParcelRecord | None]]:
    """Query sales, attach PLUTO parcels, then apply unit filters.

    Unit counts live on the parcel, so unit filters run after the ledger
    query; when they are set the ledger is over-fetched like comps
    candidates and the filtered list is cut back to ``limit``. A page with
    too few matching buildings still yields fewer than ``limit`` rows.
    """
    log = log or logger
    if min_units is not None and max_units is not None and min_units > max_units:
        raise InvalidInput("min_units cannot exceed max_units")
    where = build_sales_filter(**filters)
    where.compile()  # raises InvalidInput on bad dates or prices
    requested = clamp_limit(limit)
    fetch = requested
    if min_units is not None or max_units is not None:
        fetch = requested * OVERFETCH_FACTOR
    sales = await registries.sales.query(where, limit=fetch)
    enriched = await enrich_sales(registries.parcels, sales, log=log)

    results = []
    for item in enriched:
        units = _unit_count(item.sale, item.parcel)
        if min_units is not None and units < min_units:
            continue
        if max_units is not None and units > max_units:
            continue
        results.append((item.sale, item.parcel))
        if len(results) == requested:
            break
    log.info("Sales search: %d fetched, %d after unit filters", len(sales), len(results))
    return results


async def search_sales(
    neighborhood: str | None = None,
    borough: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    min_units: int | None = None,
    max_units: int | None = None,
    building_class: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    whole_buildings_only: bool = True,
    limit: int = 10,
) -> str:
    """Search recent NYC property sales, enriched with PLUTO owner and zoning.

    Args:
        neighborhood: Sales neighborhood (e.g., 'EAST VILLAGE', 'PARK SLOPE')
        borough: Borough name (manhattan, bronx, brooklyn, queens, staten island)
        min_price: Minimum sale price
        max_price: Maximum sale price
        min_units: Minimum unit count
        max_units: Maximum unit count
        building_class: Class prefix: C=walk-up, D=elevator, R=condo
        date_from: Sales on or after this date (YYYY-MM-DD)
        date_to: Sales on or before this date (YYYY-MM-DD)
        whole_buildings_only: Exclude individual unit sales (default True)
        limit: Max results (default 10, max 50)

    Returns:
        Formatted list of matching sales, newest first.
    """
    log = tool_logger(__name__, "search_sales", neighborhood=neighborhood, borough=borough)
    try:
        async with Registries.open() as regs:
            results = await find_sales(
                regs,
                limit=limit,
                min_units=min_units,
                max_units=max_units,
                log=log,
                neighborhood=neighborhood,
                borough=borough,
                min_price=min_price,
                max_price=max_price,
                building_class=building_class,
                date_from=date_from,
                date_to=date_to,
                whole_buildings_only=whole_buildings_only,
            )
        return format_sales_list(results)
    except PropertyError as exc:
        log.info("Failed: %s", exc)
        return format_error(exc, neighborhood=neighborhood, borough=borough)
