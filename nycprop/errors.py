"""Error types raised by the property tools.

Every tool catches ``PropertyError`` at its boundary and renders it as an
explicit failure message. Secondary enrichment failures never surface as
exceptions; they are recorded on the result instead.
"""

from __future__ import annotations


class PropertyError(Exception):
    """Base class for failures reported back to the caller."""

    kind = "error"


class InvalidInput(PropertyError):
    """Caller input rejected before any registry query was issued."""

    kind = "invalid_input"


class NotFound(PropertyError):
    """Primary parcel resolution returned nothing."""

    kind = "not_found"

    def __init__(self, address: str, borough: str | None = None):
        self.address = address
        self.borough = borough
        where = f" in borough {borough}" if borough else ""
        super().__init__(f"Property not found for address '{address}'{where}")


class Undetermined(PropertyError):
    """Neighborhood cascade exhausted without finding a label."""

    kind = "undetermined"

    def __init__(self, address: str):
        self.address = address
        super().__init__(
            f"Could not determine neighborhood for '{address}'. "
            "No recent sales found on or next to its block."
        )


class UpstreamUnavailable(PropertyError):
    """A registry call failed (network error, timeout or HTTP error)."""

    kind = "upstream_unavailable"

    def __init__(self, source: str, detail: str = ""):
        self.source = source
        self.detail = detail
        msg = f"{source} registry unavailable"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
