"""Tool: search_properties — Search PLUTO tax lots (not sales) by attributes."""

from nycprop.boroughs import require_borough_code
from nycprop.comps.ranking import clamp_limit
from nycprop.errors import PropertyError
from nycprop.formatters import format_error, format_property_list
from nycprop.models import ParcelRecord
from nycprop.registries import Registries
from nycprop.soql import And, Eq, Gte, Lte, Predicate, StartsWith
from nycprop.tools._context import tool_logger


def build_property_filter(
    borough: str | None = None,
    min_units: int | None = None,
    max_units: int | None = None,
    building_class: str | None = None,
    zoning: str | None = None,
    min_year_built: int | None = None,
    max_year_built: int | None = None,
) -> Predicate | None:
    terms: list[Predicate] = []
    if borough:
        terms.append(Eq("borocode", require_borough_code(borough)))
    if min_units is not None:
        terms.append(Gte("unitsres", min_units))
    if max_units is not None:
        terms.append(Lte("unitsres", max_units))
    if building_class:
        terms.append(StartsWith("bldgclass", building_class.strip().upper()))
    if zoning:
        terms.append(StartsWith("zonedist1", zoning.strip().upper()))
    if min_year_built is not None:
        terms.append(Gte("yearbuilt", min_year_built))
    if max_year_built is not None:
        terms.append(Lte("yearbuilt", max_year_built))
    return And(*terms) if terms else None


async def find_properties(registries: Registries, limit: int | None = 10, **filters) -> list[ParcelRecord]:
    where = build_property_filter(**filters)
    if where is not None:
        where.compile()
    return await registries.parcels.query(where, limit=clamp_limit(limit))


async def search_properties(
    borough: str | None = None,
    min_units: int | None = None,
    max_units: int | None = None,
    building_class: str | None = None,
    zoning: str | None = None,
    min_year_built: int | None = None,
    max_year_built: int | None = None,
    limit: int = 10,
) -> str:
    """Search the NYC PLUTO tax-lot database for properties matching criteria.

    Args:
        borough: Borough name (manhattan, bronx, brooklyn, queens, staten island)
        min_units: Minimum residential units
        max_units: Maximum residential units
        building_class: Class prefix (e.g., 'C', 'D4')
        zoning: Zoning district prefix (e.g., 'R7')
        min_year_built: Built in or after this year
        max_year_built: Built in or before this year
        limit: Max results (default 10, max 50)
    """
    log = tool_logger(__name__, "search_properties", borough=borough)
    try:
        async with Registries.open() as regs:
            parcels = await find_properties(
                regs,
                limit=limit,
                borough=borough,
                min_units=min_units,
                max_units=max_units,
                building_class=building_class,
                zoning=zoning,
                min_year_built=min_year_built,
                max_year_built=max_year_built,
            )
        return format_property_list(parcels)
    except PropertyError as exc:
        log.info("Failed: %s", exc)
        return format_error(exc, borough=borough, building_class=building_class)
