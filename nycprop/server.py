"""NYC Property MCP Server — FastMCP entry point.

Exposes NYC property registries to Claude via MCP tools:
PLUTO tax lots, citywide rolling sales, and DOF exemption/abatement detail,
plus comparable-sales valuation and a rent-stabilization screen.
"""

import logging
import os
import sys

from fastmcp import FastMCP

from nycprop.tools.get_property import get_property
from nycprop.tools.search_sales import search_sales
from nycprop.tools.search_comps import search_comps
from nycprop.tools.get_tax_benefits import get_tax_benefits
from nycprop.tools.get_sale_history import get_sale_history
from nycprop.tools.search_properties import search_properties

# stdout carries the MCP stdio transport; logs go to stderr
logging.basicConfig(
    stream=sys.stderr,
    level=os.environ.get("NYCPROP_LOG_LEVEL", "INFO").upper(),
    format="%(levelname)s %(name)s: %(message)s",
)

# Create MCP server
mcp = FastMCP(
    "NYC Property",
    instructions=(
        "NYC Property MCP server — query New York City property records live from "
        "NYC Open Data. get_property resolves an address to its PLUTO tax lot and "
        "screens it for rent stabilization (refined by 421-a / J-51 tax benefits). "
        "search_sales and get_sale_history query the citywide rolling sales ledger. "
        "search_comps finds comparable whole-building sales, scores them 0-100 and "
        "estimates implied value. get_tax_benefits lists exemptions and abatements. "
        "search_properties searches PLUTO by units, class, zoning and year built. "
        "Rent-stabilization results are heuristic, not legal determinations."
    ),
)

mcp.tool()(get_property)
mcp.tool()(search_sales)
mcp.tool()(search_comps)
mcp.tool()(get_tax_benefits)
mcp.tool()(get_sale_history)
mcp.tool()(search_properties)


if __name__ == "__main__":
    mcp.run()
