"""Tests for nycprop.soda_client and the registry wrappers around it."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from nycprop.comps.enrichment import DEGRADED, enrich_sales
from nycprop.errors import UpstreamUnavailable
from nycprop.models import SaleRecord
from nycprop.registries import (
    ABATEMENT_ENDPOINT,
    EXEMPTION_ENDPOINT,
    PLUTO_ENDPOINT,
    ParcelRegistry,
    Registries,
    SalesLedger,
    TaxBenefitRegistry,
)
from nycprop.soda_client import CircuitBreaker, CircuitOpenError, SODAClient
from nycprop.soql import Eq, Gt


def _response(status=200, json=None):
    request = httpx.Request("GET", "https://data.cityofnewyork.us/resource/x.json")
    return httpx.Response(status, json=json if json is not None else [], request=request)


def _client(monkeypatch, response=None, side_effect=None, token=None):
    if token:
        monkeypatch.setenv("NYC_SODA_APP_TOKEN", token)
    else:
        monkeypatch.delenv("NYC_SODA_APP_TOKEN", raising=False)
    client = SODAClient(circuit_breaker=CircuitBreaker(failure_threshold=2))
    client.client = MagicMock()
    client.client.get = AsyncMock(return_value=response, side_effect=side_effect)
    client.client.aclose = AsyncMock()
    return client


# ---------------------------------------------------------------------------
# CircuitBreaker
# ---------------------------------------------------------------------------

class TestCircuitBreaker:
    def test_starts_closed(self):
        cb = CircuitBreaker()
        assert cb.state == "closed"
        assert cb.is_open() is False

    def test_opens_at_threshold(self):
        cb = CircuitBreaker(failure_threshold=3)
        cb.record_failure()
        cb.record_failure()
        assert cb.is_open() is False
        cb.record_failure()
        assert cb.state == "open"
        assert cb.is_open() is True

    def test_half_open_after_timeout(self):
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=60)
        with patch("nycprop.soda_client.time.monotonic", return_value=1000.0):
            cb.record_failure()
        with patch("nycprop.soda_client.time.monotonic", return_value=1061.0):
            assert cb.is_open() is False
        assert cb.state == "half-open"

    def test_failed_trial_request_reopens(self):
        cb = CircuitBreaker(failure_threshold=5)
        cb.state = "half-open"
        cb.record_failure()
        assert cb.state == "open"

    def test_success_resets(self):
        cb = CircuitBreaker(failure_threshold=1)
        cb.record_failure()
        cb.record_success()
        assert cb.state == "closed"
        assert cb.failure_count == 0


# ---------------------------------------------------------------------------
# SODAClient.query
# ---------------------------------------------------------------------------

class TestQuery:
    @pytest.mark.asyncio
    async def test_compiles_where_and_params(self, monkeypatch):
        client = _client(monkeypatch, _response(json=[{"bbl": "1"}]))
        rows = await client.query(
            "muvi-b6kx",
            where=Gt("sale_price", 0),
            order="taxyear DESC",
            params={"bbl": "1004000012"},
            limit=5,
        )
        assert rows == [{"bbl": "1"}]
        url = client.client.get.call_args.args[0]
        sent = client.client.get.call_args.kwargs["params"]
        assert url.endswith("/muvi-b6kx.json")
        assert sent["$where"] == "sale_price > 0"
        assert sent["$order"] == "taxyear DESC"
        assert sent["$limit"] == 5
        assert sent["bbl"] == "1004000012"

    @pytest.mark.asyncio
    async def test_no_where_when_predicate_absent(self, monkeypatch):
        client = _client(monkeypatch, _response())
        await client.query("64uk-42ks")
        assert "$where" not in client.client.get.call_args.kwargs["params"]

    @pytest.mark.asyncio
    async def test_app_token_header(self, monkeypatch):
        client = _client(monkeypatch, _response(), token="abc123")
        await client.query("64uk-42ks", where=Eq("borocode", "1"))
        assert client.client.get.call_args.kwargs["headers"] == {"X-App-Token": "abc123"}

    @pytest.mark.asyncio
    async def test_base_url_override(self, monkeypatch):
        monkeypatch.setenv("NYC_SODA_BASE_URL", "http://localhost:9000/resource/")
        client = _client(monkeypatch, _response())
        await client.query("64uk-42ks")
        assert client.client.get.call_args.args[0] == "http://localhost:9000/resource/64uk-42ks.json"

    @pytest.mark.asyncio
    async def test_server_error_counts_as_failure(self, monkeypatch):
        client = _client(monkeypatch, _response(503))
        with pytest.raises(httpx.HTTPStatusError):
            await client.query("64uk-42ks")
        assert client.circuit_breaker.failure_count == 1

    @pytest.mark.asyncio
    async def test_client_error_does_not_count(self, monkeypatch):
        client = _client(monkeypatch, _response(400))
        with pytest.raises(httpx.HTTPStatusError):
            await client.query("64uk-42ks")
        assert client.circuit_breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_open_breaker_refuses_without_request(self, monkeypatch):
        client = _client(monkeypatch, side_effect=httpx.ConnectError("boom"))
        for _ in range(2):
            with pytest.raises(httpx.ConnectError):
                await client.query("64uk-42ks")
        with pytest.raises(CircuitOpenError) as exc_info:
            await client.query("64uk-42ks")
        assert exc_info.value.endpoint_id == "64uk-42ks"
        assert isinstance(exc_info.value, httpx.TransportError)
        assert client.client.get.await_count == 2

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, monkeypatch):
        client = _client(monkeypatch, _response())
        async with client:
            pass
        client.client.aclose.assert_awaited_once()


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------

class TestRegistries:
    @pytest.mark.asyncio
    async def test_transport_error_becomes_upstream_unavailable(self):
        client = MagicMock()
        client.query = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(UpstreamUnavailable) as exc_info:
            await ParcelRegistry(client).get_by_key("1", "400", "12")
        assert exc_info.value.source == "parcel"
        assert exc_info.value.kind == "upstream_unavailable"

    @pytest.mark.asyncio
    async def test_parcel_key_lookup(self):
        client = MagicMock()
        client.query = AsyncMock(return_value=[{"borocode": "1", "block": "400", "lot": "12"}])
        parcel = await ParcelRegistry(client).get_by_key("1", "00400", "0012")
        assert parcel.key == ("1", "400", "12")
        args = client.query.call_args
        assert args.args[0] == PLUTO_ENDPOINT
        assert args.kwargs["where"].compile() == (
            "borocode = '1' AND block = '400' AND lot = '12'"
        )
        assert args.kwargs["limit"] == 1

    @pytest.mark.asyncio
    async def test_parcel_key_lookup_missing(self):
        client = MagicMock()
        client.query = AsyncMock(return_value=[])
        assert await ParcelRegistry(client).get_by_key("1", "400", "12") is None

    @pytest.mark.asyncio
    async def test_sales_ordered_newest_first(self):
        client = MagicMock()
        client.query = AsyncMock(return_value=[])
        await SalesLedger(client).get_by_key("3", "100", "5")
        assert client.query.call_args.kwargs["order"] == "sale_date DESC"
        assert client.query.call_args.kwargs["where"].compile().startswith("borough = '3'")

    @pytest.mark.asyncio
    async def test_benefit_queries_filter_by_bbl(self):
        client = MagicMock()
        client.query = AsyncMock(return_value=[])
        registry = TaxBenefitRegistry(client)
        await registry.query_exemptions("1004000012")
        await registry.query_abatements("1004000012")
        endpoints = [c.args[0] for c in client.query.call_args_list]
        assert endpoints == [EXEMPTION_ENDPOINT, ABATEMENT_ENDPOINT]
        for call in client.query.call_args_list:
            assert call.kwargs["params"] == {"bbl": "1004000012"}

    @pytest.mark.asyncio
    async def test_bundle_closes_client(self):
        client = MagicMock()
        client.close = AsyncMock()
        async with Registries(client) as regs:
            assert regs.parcels.client is client
        client.close.assert_awaited_once()


# ---------------------------------------------------------------------------
# Open breaker behind the registries
# ---------------------------------------------------------------------------

class TestOpenBreakerIsNotEmpty:
    @pytest.mark.asyncio
    async def test_primary_lookup_raises_upstream_unavailable(self, monkeypatch):
        client = _client(monkeypatch, _response(503))
        parcels = ParcelRegistry(client)
        for _ in range(2):
            with pytest.raises(UpstreamUnavailable):
                await parcels.get_by_key("1", "400", "12")
        with pytest.raises(UpstreamUnavailable) as exc_info:
            await parcels.get_by_key("1", "400", "12")
        assert isinstance(exc_info.value.__cause__, CircuitOpenError)
        assert client.client.get.await_count == 2

    @pytest.mark.asyncio
    async def test_enrichment_after_trip_is_degraded_not_missing(self, monkeypatch):
        monkeypatch.setenv("NYCPROP_ENRICH_CONCURRENCY", "1")
        client = _client(monkeypatch, _response(503))
        sales = [SaleRecord("1", "400", str(lot), "2024-01-01") for lot in range(1, 9)]

        enriched = await enrich_sales(ParcelRegistry(client), sales)

        assert [e.status for e in enriched] == [DEGRADED] * 8
        assert all(e.parcel is None for e in enriched)
        assert "circuit open" in enriched[-1].error
        assert client.client.get.await_count == 2
