"""Tests for nycprop.comps.enrichment — concurrent parcel joins."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from nycprop.comps.enrichment import (
    DEGRADED,
    FULL,
    MISSING,
    Enrichment,
    enrich_sales,
    to_candidate,
)
from nycprop.errors import UpstreamUnavailable
from nycprop.models import ParcelRecord, SaleRecord


def _sale(lot, price=3_000_000.0, **kw):
    return SaleRecord("1", "400", str(lot), "2024-01-01", sale_price=price, **kw)


def _parcel(lot, **kw):
    return ParcelRecord("1", "400", str(lot), **kw)


def _registry(by_lot):
    async def get_by_key(borough, block, lot):
        outcome = by_lot.get(lot)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    parcels = MagicMock()
    parcels.get_by_key = AsyncMock(side_effect=get_by_key)
    return parcels


class TestEnrichSales:
    @pytest.mark.asyncio
    async def test_statuses_in_order(self):
        parcels = _registry({
            "1": _parcel(1, units_total=10),
            "2": None,
            "3": UpstreamUnavailable("parcel", "timeout"),
        })
        sales = [_sale(1), _sale(2), _sale(3)]
        result = await enrich_sales(parcels, sales)
        assert [e.sale.lot for e in result] == ["1", "2", "3"]
        assert [e.status for e in result] == [FULL, MISSING, DEGRADED]
        assert result[2].parcel is None
        assert "timeout" in result[2].error

    @pytest.mark.asyncio
    async def test_unexpected_error_degrades_only_that_sale(self):
        parcels = _registry({"1": _parcel(1), "2": ValueError("bad row")})
        result = await enrich_sales(parcels, [_sale(1), _sale(2)])
        assert [e.status for e in result] == [FULL, DEGRADED]

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await enrich_sales(_registry({}), []) == []

    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self, monkeypatch):
        monkeypatch.setenv("NYCPROP_ENRICH_CONCURRENCY", "4")
        started = 0
        release = asyncio.Event()

        async def get_by_key(borough, block, lot):
            nonlocal started
            started += 1
            if started == 3:
                release.set()
            await release.wait()
            return None

        parcels = MagicMock()
        parcels.get_by_key = AsyncMock(side_effect=get_by_key)
        result = await asyncio.wait_for(
            enrich_sales(parcels, [_sale(1), _sale(2), _sale(3)]), timeout=2
        )
        assert len(result) == 3

    @pytest.mark.asyncio
    async def test_concurrency_limit(self, monkeypatch):
        monkeypatch.setenv("NYCPROP_ENRICH_CONCURRENCY", "2")
        active = 0
        peak = 0

        async def get_by_key(borough, block, lot):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0)
            active -= 1
            return None

        parcels = MagicMock()
        parcels.get_by_key = AsyncMock(side_effect=get_by_key)
        await enrich_sales(parcels, [_sale(i) for i in range(1, 7)])
        assert peak <= 2


class TestToCandidate:
    def test_full_enrichment(self):
        sale = _sale(1, price=5_000_000.0, sqft=10_000, units_total=4)
        parcel = _parcel(1, units_total=10, year_built=1925, assessed_total=900_000.0)
        comp = to_candidate(Enrichment(sale, parcel, FULL))
        assert comp.units_total == 10
        assert comp.year_built == 1925
        assert comp.price_per_unit == 500_000.0
        assert comp.price_per_sqft == 500.0
        assert comp.assessed_total == 900_000.0
        assert comp.enrichment == FULL

    def test_degraded_falls_back_to_sale_fields(self):
        sale = _sale(1, price=4_000_000.0, sqft=8_000, units=8, year_built=1930)
        comp = to_candidate(Enrichment(sale, None, DEGRADED, "timeout"))
        assert comp.units_total == 8
        assert comp.year_built == 1930
        assert comp.price_per_unit == 500_000.0
        assert comp.assessed_total is None
        assert comp.enrichment == DEGRADED

    def test_no_rates_without_divisors(self):
        comp = to_candidate(Enrichment(_sale(1), None, MISSING))
        assert comp.units_total == 0
        assert comp.price_per_unit is None
        assert comp.price_per_sqft is None
