"""Tests for nycprop.regulation.tax_benefits — exemption/abatement aggregation."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from nycprop.errors import InvalidInput, UpstreamUnavailable
from nycprop.models import AbatementRow, ExemptionRow, TaxBenefitSummary
from nycprop.regulation.tax_benefits import (
    fetch_tax_benefits,
    program_flags,
    summarize_benefits,
)

BBL = "1004000012"


def _exemption(code="", desc="", value=0.0, year="2024"):
    return ExemptionRow(BBL, year, code, desc, value)


def _abatement(code="", desc="", amount=0.0, year="2024"):
    return AbatementRow(BBL, year, code, desc, amount)


def _registry(exemptions=None, abatements=None):
    registry = MagicMock()
    for name, value in (("query_exemptions", exemptions), ("query_abatements", abatements)):
        if isinstance(value, Exception):
            setattr(registry, name, AsyncMock(side_effect=value))
        else:
            setattr(registry, name, AsyncMock(return_value=value or []))
    return registry


class TestProgramFlags:
    def test_all_false_when_empty(self):
        assert program_flags([], []) == {
            "has_421a": False, "has_j51": False, "has_icap": False, "has_star": False,
        }

    @pytest.mark.parametrize("text,flag", [
        ("421A-16", "has_421a"),
        ("421-a new construction", "has_421a"),
        ("J51", "has_j51"),
        ("j-51 alteration", "has_j51"),
        ("ICAP", "has_icap"),
        ("icip", "has_icap"),
        ("Basic STAR", "has_star"),
        ("S.T.A.R. credit", "has_star"),
    ])
    def test_spelling_variants(self, text, flag):
        flags = program_flags([_exemption(desc=text)], [])
        assert flags[flag] is True
        assert sum(flags.values()) == 1

    def test_abatement_codes_searched(self):
        assert program_flags([], [_abatement(code="J51")])["has_j51"] is True


class TestFetchTaxBenefits:
    @pytest.mark.asyncio
    async def test_totals_span_all_years(self):
        registry = _registry(
            exemptions=[_exemption(value=100.0, year="2024"), _exemption(value=50.0, year="2023")],
            abatements=[_abatement(amount=25.0)],
        )
        result = await fetch_tax_benefits(registry, BBL)
        assert result.total_exemption_value == 150.0
        assert result.total_abatement_amount == 25.0
        assert result.degraded_sources == []

    @pytest.mark.asyncio
    async def test_one_registry_failing_degrades_that_source(self):
        registry = _registry(
            exemptions=UpstreamUnavailable("tax_benefit", "timeout"),
            abatements=[_abatement(code="421A", desc="421A ABATEMENT", amount=1234.5)],
        )
        result = await fetch_tax_benefits(registry, BBL)
        assert result.exemptions == []
        assert len(result.abatements) == 1
        assert result.has_421a is True
        assert result.total_exemption_value == 0
        assert result.total_abatement_amount == 1234.5
        assert result.degraded_sources == ["exemptions"]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_also_degraded(self):
        registry = _registry(exemptions=[], abatements=RuntimeError("bad"))
        result = await fetch_tax_benefits(registry, BBL)
        assert result.degraded_sources == ["abatements"]

    @pytest.mark.asyncio
    async def test_both_failing(self):
        err = UpstreamUnavailable("tax_benefit")
        result = await fetch_tax_benefits(_registry(err, err), BBL)
        assert result.degraded_sources == ["abatements", "exemptions"]

    @pytest.mark.asyncio
    async def test_queries_run_concurrently(self):
        both_started = asyncio.Event()
        started = []

        async def query(bbl):
            started.append(bbl)
            if len(started) == 2:
                both_started.set()
            await both_started.wait()
            return []

        registry = MagicMock()
        registry.query_exemptions = AsyncMock(side_effect=query)
        registry.query_abatements = AsyncMock(side_effect=query)
        await asyncio.wait_for(fetch_tax_benefits(registry, BBL), timeout=2)
        assert started == [BBL, BBL]

    @pytest.mark.asyncio
    async def test_invalid_bbl_rejected_before_query(self):
        registry = _registry()
        with pytest.raises(InvalidInput):
            await fetch_tax_benefits(registry, "12345")
        registry.query_exemptions.assert_not_called()
        registry.query_abatements.assert_not_called()


class TestSummary:
    def test_none_found(self):
        assert summarize_benefits(TaxBenefitSummary(bbl=BBL)) == (
            "No tax exemptions or abatements found for this property."
        )

    def test_lists_programs_and_total(self):
        benefits = TaxBenefitSummary(
            bbl=BBL,
            abatements=[_abatement(code="J51", desc="J-51 ALTERATION", amount=2000.0)],
            has_j51=True,
            total_abatement_amount=2000.0,
        )
        text = summarize_benefits(benefits)
        assert "J-51 exemption/abatement" in text
        assert "1 abatement type(s): J-51 ALTERATION" in text
        assert "Total abatement: $2,000" in text
