"""Aggregate exemption and abatement rows into program flags and totals.

Both registries are queried concurrently; either one failing leaves its list
empty and is recorded in ``degraded_sources``. Totals add up every returned
row regardless of tax year, so multi-year histories are summed together.
"""

from __future__ import annotations

import asyncio
import logging

from nycprop.boroughs import validate_bbl
from nycprop.errors import UpstreamUnavailable
from nycprop.models import AbatementRow, ExemptionRow, TaxBenefitSummary
from nycprop.registries import TaxBenefitRegistry

logger = logging.getLogger(__name__)

# Program flag -> spellings seen in codes and descriptions
PROGRAM_TOKENS: dict[str, tuple[str, ...]] = {
    "has_421a": ("421A", "421-A"),
    "has_j51": ("J51", "J-51"),
    "has_icap": ("ICAP", "ICIP"),
    "has_star": ("STAR", "S.T.A.R"),
}


def program_flags(
    exemptions: list[ExemptionRow], abatements: list[AbatementRow]
) -> dict[str, bool]:
    """Case-insensitive token search across every code and description."""
    haystack = " ".join(
        [e.exemption_code for e in exemptions]
        + [a.abatement_code for a in abatements]
        + [e.exemption_description for e in exemptions]
        + [a.abatement_description for a in abatements]
    ).upper()
    return {
        flag: any(token in haystack for token in tokens)
        for flag, tokens in PROGRAM_TOKENS.items()
    }


async def _guarded(coro, source: str, bbl: str, degraded: list[str], log):
    try:
        return await coro
    except UpstreamUnavailable as exc:
        log.warning("%s query failed for BBL %s: %s", source, bbl, exc)
        degraded.append(source)
        return []
    except Exception:
        log.warning("%s query raised for BBL %s (non-fatal)", source, bbl, exc_info=True)
        degraded.append(source)
        return []


async def fetch_tax_benefits(
    registry: TaxBenefitRegistry,
    bbl: str,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> TaxBenefitSummary:
    """Exemptions, abatements, program flags and totals for one BBL.

    Raises:
        InvalidInput: malformed BBL (before any query)
    """
    log = log or logger
    bbl = validate_bbl(bbl)
    degraded: list[str] = []

    exemptions, abatements = await asyncio.gather(
        _guarded(registry.query_exemptions(bbl), "exemptions", bbl, degraded, log),
        _guarded(registry.query_abatements(bbl), "abatements", bbl, degraded, log),
    )
    flags = program_flags(exemptions, abatements)

    summary = TaxBenefitSummary(
        bbl=bbl,
        exemptions=list(exemptions),
        abatements=list(abatements),
        total_exemption_value=sum(e.exempt_value for e in exemptions),
        total_abatement_amount=sum(a.abatement_amount for a in abatements),
        degraded_sources=sorted(degraded),
        **flags,
    )
    log.info(
        "Tax benefits for %s: %d exemptions, %d abatements, flags=%s",
        bbl, len(exemptions), len(abatements),
        ",".join(k for k, v in flags.items() if v) or "none",
    )
    return summary


def summarize_benefits(benefits: TaxBenefitSummary) -> str:
    """One-paragraph plain-English summary of a TaxBenefitSummary."""
    if not benefits.exemptions and not benefits.abatements:
        return "No tax exemptions or abatements found for this property."

    parts: list[str] = []
    if benefits.has_421a:
        parts.append("421a tax exemption (new construction incentive)")
    if benefits.has_j51:
        parts.append("J-51 exemption/abatement (rehabilitation incentive)")
    if benefits.has_icap:
        parts.append("ICAP/ICIP (industrial/commercial incentive)")
    if benefits.has_star:
        parts.append("STAR (school tax relief)")

    if benefits.exemptions:
        kinds = list(dict.fromkeys(e.exemption_description for e in benefits.exemptions))
        parts.append(f"{len(kinds)} exemption type(s): {', '.join(kinds[:5])}")
    if benefits.abatements:
        kinds = list(dict.fromkeys(a.abatement_description for a in benefits.abatements))
        parts.append(f"{len(kinds)} abatement type(s): {', '.join(kinds[:5])}")

    if benefits.total_abatement_amount > 0:
        parts.append(f"Total abatement: ${benefits.total_abatement_amount:,.0f}")

    return ". ".join(parts) + "."
