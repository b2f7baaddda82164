"""Typed access to the NYC registries behind the property tools.

Each registry wraps a ``SODAClient`` and returns parsed records. Transport
errors are re-raised as ``UpstreamUnavailable`` so callers decide whether a
failure is fatal (primary lookups) or degrades (secondary enrichment).
"""

from __future__ import annotations

import logging

import httpx

from nycprop.boroughs import normalize_key_part
from nycprop.errors import UpstreamUnavailable
from nycprop.models import AbatementRow, ExemptionRow, ParcelRecord, SaleRecord
from nycprop.soda_client import SODAClient
from nycprop.soql import And, Eq, Predicate

logger = logging.getLogger(__name__)

PLUTO_ENDPOINT = "64uk-42ks"        # PLUTO (Primary Land Use Tax Lot Output)
SALES_ENDPOINT = "usep-8jbt"        # Citywide Rolling Calendar Sales
EXEMPTION_ENDPOINT = "muvi-b6kx"    # Property Exemption Detail
ABATEMENT_ENDPOINT = "rgyu-ii48"    # Property Abatement Detail

BENEFIT_ROW_LIMIT = 100


def key_predicate(borough_field: str, borough: str, block: str, lot: str) -> Predicate:
    return And(
        Eq(borough_field, normalize_key_part(borough)),
        Eq("block", normalize_key_part(block)),
        Eq("lot", normalize_key_part(lot)),
    )


class _Registry:
    name = ""

    def __init__(self, client: SODAClient):
        self.client = client

    async def _fetch(self, endpoint_id: str, **kwargs) -> list[dict]:
        try:
            return await self.client.query(endpoint_id, **kwargs)
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(self.name, str(exc) or type(exc).__name__) from exc


class ParcelRegistry(_Registry):
    """PLUTO tax lots."""

    name = "parcel"

    async def query(self, where: Predicate | None, limit: int = 10) -> list[ParcelRecord]:
        rows = await self._fetch(PLUTO_ENDPOINT, where=where, limit=limit)
        return [ParcelRecord.from_row(r) for r in rows]

    async def get_by_key(self, borough: str, block: str, lot: str) -> ParcelRecord | None:
        results = await self.query(key_predicate("borocode", borough, block, lot), limit=1)
        return results[0] if results else None


class SalesLedger(_Registry):
    """Rolling sales, newest first."""

    name = "sales"

    async def query(self, where: Predicate | None, limit: int = 10) -> list[SaleRecord]:
        rows = await self._fetch(
            SALES_ENDPOINT, where=where, order="sale_date DESC", limit=limit
        )
        return [SaleRecord.from_row(r) for r in rows]

    async def get_by_key(
        self, borough: str, block: str, lot: str, limit: int = 50
    ) -> list[SaleRecord]:
        return await self.query(key_predicate("borough", borough, block, lot), limit=limit)


class TaxBenefitRegistry(_Registry):
    """Department of Finance exemption and abatement detail."""

    name = "tax_benefit"

    async def query_exemptions(self, bbl: str) -> list[ExemptionRow]:
        rows = await self._fetch(
            EXEMPTION_ENDPOINT,
            params={"bbl": bbl},
            order="taxyear DESC",
            limit=BENEFIT_ROW_LIMIT,
        )
        return [ExemptionRow.from_row(r) for r in rows]

    async def query_abatements(self, bbl: str) -> list[AbatementRow]:
        rows = await self._fetch(
            ABATEMENT_ENDPOINT,
            params={"bbl": bbl},
            order="taxyear DESC",
            limit=BENEFIT_ROW_LIMIT,
        )
        return [AbatementRow.from_row(r) for r in rows]


class Registries:
    """The three registries over one shared SODA client.

    Usage:
        async with Registries.open() as regs:
            parcel = await regs.parcels.get_by_key("1", "400", "12")
    """

    def __init__(self, client: SODAClient):
        self.client = client
        self.parcels = ParcelRegistry(client)
        self.sales = SalesLedger(client)
        self.tax_benefits = TaxBenefitRegistry(client)

    @classmethod
    def open(cls) -> Registries:
        return cls(SODAClient())

    async def __aenter__(self) -> Registries:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.client.close()
