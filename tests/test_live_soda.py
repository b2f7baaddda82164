"""Integration tests against the live SODA API at data.cityofnewyork.us.

They require network access but no authentication (app token optional).
Deselected by default; run with ``pytest -m network``.
"""

import pytest

from nycprop.registries import PLUTO_ENDPOINT, SALES_ENDPOINT, Registries
from nycprop.soda_client import SODAClient
from nycprop.soql import And, Eq, Gt

# Mark all tests in this module as network-dependent
pytestmark = pytest.mark.network


@pytest.mark.asyncio
async def test_pluto_accessible():
    """PLUTO answers a borough-filtered query."""
    client = SODAClient()
    try:
        results = await client.query(PLUTO_ENDPOINT, where=Eq("borocode", "1"), limit=3)
        assert len(results) == 3
        assert all(r.get("borocode") == "1" for r in results)
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_sales_ledger_has_priced_sales():
    """Rolling sales returns market-price rows for Manhattan."""
    async with Registries.open() as regs:
        sales = await regs.sales.query(
            And(Eq("borough", "1"), Gt("sale_price", 100000)), limit=5
        )
    assert sales
    assert all(s.sale_price > 100000 for s in sales)
    assert all(s.neighborhood for s in sales)


@pytest.mark.asyncio
async def test_parcel_key_round_trip():
    """A parcel found by query can be looked up again by its key."""
    async with Registries.open() as regs:
        found = await regs.parcels.query(Gt("unitsres", 10), limit=1)
        assert found
        again = await regs.parcels.get_by_key(*found[0].key)
    assert again is not None
    assert again.key == found[0].key
