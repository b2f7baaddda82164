"""Root-level test conftest — fixtures shared across all test files.

No test touches the network: registries are either AsyncMock doubles
(``registries`` fixture) or run over an in-memory SODA client
(``soda`` fixture) patched in place of the real one.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest


# ---------------------------------------------------------------------------
# Registry doubles
# ---------------------------------------------------------------------------

@pytest.fixture
def registries():
    """Registries bundle whose query methods are AsyncMocks returning []."""
    regs = MagicMock()
    regs.parcels.query = AsyncMock(return_value=[])
    regs.parcels.get_by_key = AsyncMock(return_value=None)
    regs.sales.query = AsyncMock(return_value=[])
    regs.sales.get_by_key = AsyncMock(return_value=[])
    regs.tax_benefits.query_exemptions = AsyncMock(return_value=[])
    regs.tax_benefits.query_abatements = AsyncMock(return_value=[])
    return regs


class FakeSODAClient:
    """Stands in for SODAClient; answers by endpoint id.

    ``responses`` maps an endpoint id to a list of rows, an exception to
    raise, or a callable ``(where, params) -> rows | Exception``.
    """

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []
        self.closed = False

    async def query(self, endpoint_id, where=None, select=None, order=None,
                    params=None, limit=100, offset=0):
        compiled = where.compile() if where is not None else None
        self.calls.append({
            "endpoint": endpoint_id,
            "where": compiled,
            "params": params,
            "order": order,
            "limit": limit,
        })
        resp = self.responses.get(endpoint_id, [])
        if callable(resp):
            resp = resp(compiled or "", params or {})
        if isinstance(resp, Exception):
            raise resp
        return resp

    async def close(self):
        self.closed = True


@pytest.fixture
def soda(monkeypatch):
    """Patch Registries.open() to run over a FakeSODAClient."""
    client = FakeSODAClient()
    monkeypatch.setattr("nycprop.registries.SODAClient", lambda: client)
    return client
