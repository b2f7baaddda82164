"""Client for Socrata Open Data API (SODA) 2.1 — data.cityofnewyork.us"""

import httpx
import logging
import os
import time
from typing import Any

from nycprop.soql import Predicate, compile_where


logger = logging.getLogger(__name__)


class CircuitOpenError(httpx.TransportError):
    """Raised instead of sending a request while the breaker is open.

    Subclasses ``httpx.TransportError`` so registries treat a short-circuited
    query exactly like a failed one; it is never an empty answer.
    """

    def __init__(self, endpoint_id: str, retry_in: float):
        self.endpoint_id = endpoint_id
        self.retry_in = retry_in
        super().__init__(
            f"circuit open for {endpoint_id}, retry in {retry_in:.0f}s"
        )


class CircuitBreaker:
    """Trips after repeated registry failures within one client's lifetime.

    A comps search fans out dozens of parcel lookups over one client; once
    the registry has failed ``failure_threshold`` times in a row the rest are
    refused without a round trip. States:

        closed     requests go through
        open       requests raise CircuitOpenError
        half-open  recovery_timeout has passed; the next request is a trial

    Thresholds come from NYCPROP_CB_THRESHOLD (default 5) and
    NYCPROP_CB_TIMEOUT (seconds, default 60).
    """

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.last_failure_time: float | None = None
        self.state: str = "closed"  # closed | open | half-open

    def retry_in(self) -> float:
        """Seconds until an open breaker lets a trial request through."""
        if self.state != "open" or self.last_failure_time is None:
            return 0.0
        elapsed = time.monotonic() - self.last_failure_time
        return max(0.0, self.recovery_timeout - elapsed)

    def is_open(self) -> bool:
        """True while requests must be refused; moves open -> half-open on timeout."""
        if self.state != "open":
            return False
        if self.retry_in() > 0:
            return True
        self.state = "half-open"
        logger.info("SODA circuit half-open after %ds, sending a trial request", self.recovery_timeout)
        return False

    def check(self, endpoint_id: str) -> None:
        """Raise CircuitOpenError when a query to endpoint_id must not be sent."""
        if self.is_open():
            raise CircuitOpenError(endpoint_id, self.retry_in())

    def record_success(self) -> None:
        if self.state != "closed":
            logger.info("SODA circuit closed after %d failures", self.failure_count)
        self.failure_count = 0
        self.last_failure_time = None
        self.state = "closed"

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.monotonic()
        if self.state == "half-open" or self.failure_count >= self.failure_threshold:
            if self.state != "open":
                logger.warning(
                    "SODA circuit open (%d failures, cooldown %ds)",
                    self.failure_count, self.recovery_timeout,
                )
            self.state = "open"


class SODAClient:
    """Async client for Socrata Open Data API (SODA) 2.1.

    Runs SoQL queries against NYC Open Data datasets (PLUTO, rolling sales,
    exemption and abatement detail). Filters are passed as
    ``nycprop.soql`` predicates and compiled here, never as raw strings.

    Environment:
        NYC_SODA_APP_TOKEN    — app token for higher rate limits (optional)
        NYC_SODA_BASE_URL     — override the resource base URL
        NYCPROP_SODA_TIMEOUT  — request timeout in seconds (default 30)
        NYCPROP_CB_THRESHOLD  — failures before the breaker opens (default 5)
        NYCPROP_CB_TIMEOUT    — seconds before attempting recovery (default 60)
    """

    BASE_URL = "https://data.cityofnewyork.us/resource"

    def __init__(self, circuit_breaker: CircuitBreaker | None = None):
        self.app_token = os.environ.get("NYC_SODA_APP_TOKEN")
        self.base_url = os.environ.get("NYC_SODA_BASE_URL", self.BASE_URL).rstrip("/")
        self.client = httpx.AsyncClient(
            timeout=float(os.environ.get("NYCPROP_SODA_TIMEOUT", "30"))
        )
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=int(os.environ.get("NYCPROP_CB_THRESHOLD", "5")),
            recovery_timeout=int(os.environ.get("NYCPROP_CB_TIMEOUT", "60")),
        )

    async def __aenter__(self) -> "SODAClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def query(
        self,
        endpoint_id: str,
        where: Predicate | None = None,
        select: str | None = None,
        order: str | None = None,
        params: dict[str, str] | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Execute a SoQL query against a SODA endpoint.

        Args:
            endpoint_id: The 9-char dataset identifier (e.g., '64uk-42ks')
            where: Filter predicate, compiled to the $where clause
            select: SoQL $select clause (columns, aggregations)
            order: SoQL $order clause (sort)
            params: Simple column=value filters passed as query parameters
            limit: Max records to return (default 100, SODA max 50,000)
            offset: Pagination offset

        Returns:
            List of result dictionaries; empty only when the dataset
            really has no matching rows.

        Raises:
            CircuitOpenError: The breaker is open; no request was sent
            httpx.HTTPStatusError: On API errors (4xx, 5xx)
            httpx.TimeoutException, httpx.NetworkError: On transport failures
        """
        self.circuit_breaker.check(endpoint_id)

        url = f"{self.base_url}/{endpoint_id}.json"
        query_params: dict[str, Any] = {"$limit": limit, "$offset": offset}

        compiled = compile_where(where)
        if compiled:
            query_params["$where"] = compiled
        if select:
            query_params["$select"] = select
        if order:
            query_params["$order"] = order
        if params:
            query_params.update(params)

        headers = {}
        if self.app_token:
            headers["X-App-Token"] = self.app_token

        logger.debug("SODA %s where=%s limit=%d", endpoint_id, compiled, limit)

        try:
            response = await self.client.get(url, params=query_params, headers=headers)
            response.raise_for_status()
            result = response.json()
            self.circuit_breaker.record_success()
            return result
        except (httpx.TimeoutException, httpx.NetworkError) as exc:
            logger.warning(
                "SODA network error for %s: %s — recording failure",
                endpoint_id,
                exc,
            )
            self.circuit_breaker.record_failure()
            raise
        except httpx.HTTPStatusError as exc:
            # 5xx errors count as failures; 4xx are caller errors and don't
            if exc.response.status_code >= 500:
                logger.warning(
                    "SODA 5xx error %d for %s — recording failure",
                    exc.response.status_code,
                    endpoint_id,
                )
                self.circuit_breaker.record_failure()
            raise

    async def close(self):
        """Close the underlying HTTP client."""
        await self.client.aclose()
