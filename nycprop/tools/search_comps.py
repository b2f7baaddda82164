"""Tool: search_comps — Comparable whole-building sales for an NYC property."""

from nycprop.comps.pipeline import find_comparables
from nycprop.errors import PropertyError
from nycprop.formatters import format_comps, format_error
from nycprop.registries import Registries
from nycprop.tools._context import tool_logger


async def search_comps(
    address: str,
    borough: str,
    limit: int = 10,
    building_class: str | None = None,
    include_adjacent_neighborhoods: bool = True,
) -> str:
    """Find comparable sales for a subject property and estimate its value.

    The subject's sales neighborhood is inferred from recorded sales on its
    lot or block. Candidates are whole-building sales over $100K in the same
    borough and building-class category, in the same or adjacent
    neighborhoods, scored 0-100 on neighborhood, class, units, age and size.

    Args:
        address: Subject street address (e.g., '522 East 5th Street')
        borough: Borough name (manhattan, bronx, brooklyn, queens, staten island)
        limit: Number of comps to return (default 10, max 50)
        building_class: Override the subject's class (e.g., 'C', 'D4');
            only the first letter drives the search
        include_adjacent_neighborhoods: Also search adjacent neighborhoods (default True)

    Returns:
        Ranked comps with price per unit and per square foot, averages, and
        implied values for the subject.
    """
    log = tool_logger(__name__, "search_comps", address=address, borough=borough)
    try:
        async with Registries.open() as regs:
            result = await find_comparables(
                regs,
                address,
                borough,
                limit=limit,
                building_class=building_class,
                include_adjacent=include_adjacent_neighborhoods,
                log=log,
            )
        return format_comps(result)
    except PropertyError as exc:
        log.info("Failed: %s", exc)
        return format_error(exc, address=address, borough=borough)
