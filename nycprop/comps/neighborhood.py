"""Infer a parcel's sales neighborhood from nearby recorded sales.

PLUTO has no neighborhood column matching the sales ledger's labels, so the
label is borrowed from sales, widening step by step:

1. Sales of the parcel itself
2. Sales on the same block (mode of 5)
3. Sales on block - 1, then block + 1 (mode of 3 each)

Best-effort only; the first step that produces a label wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from nycprop.errors import Undetermined
from nycprop.models import ParcelRecord, SaleRecord
from nycprop.registries import SalesLedger, key_predicate
from nycprop.soql import And, Eq, Gt

logger = logging.getLogger(__name__)

EXACT_LIMIT = 5
BLOCK_LIMIT = 5
ADJACENT_BLOCK_LIMIT = 3


@dataclass(frozen=True)
class InferredNeighborhood:
    label: str
    source: str  # exact | block | adjacent_block


def most_common(labels: list[str]) -> str | None:
    """Mode of the labels; the first-encountered label wins ties."""
    counts: dict[str, int] = {}
    for label in labels:
        counts[label] = counts.get(label, 0) + 1
    best: str | None = None
    best_count = 0
    for label, count in counts.items():  # dicts keep first-seen order
        if count > best_count:
            best, best_count = label, count
    return best


def _labels(sales: list[SaleRecord]) -> list[str]:
    return [s.neighborhood for s in sales if s.neighborhood]


def _block_filter(borough: str, block: int):
    return And(
        Eq("borough", borough),
        Eq("block", str(block)),
        Gt("sale_price", 0),
    )


async def infer_neighborhood(
    sales: SalesLedger,
    parcel: ParcelRecord,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> InferredNeighborhood:
    """Run the cascade for a resolved parcel.

    Raises:
        Undetermined: every step came back without a label
    """
    log = log or logger

    exact = await sales.query(
        key_predicate("borough", parcel.borough, parcel.block, parcel.lot),
        limit=EXACT_LIMIT,
    )
    for sale in exact:
        if sale.neighborhood:
            log.debug("Neighborhood from own sales: %s", sale.neighborhood)
            return InferredNeighborhood(sale.neighborhood, "exact")

    try:
        block_num = int(parcel.block)
    except ValueError:
        log.info("Non-numeric block %r; cannot widen search", parcel.block)
        raise Undetermined(parcel.address)

    label = most_common(_labels(
        await sales.query(_block_filter(parcel.borough, block_num), limit=BLOCK_LIMIT)
    ))
    if label:
        log.debug("Neighborhood from block %s: %s", block_num, label)
        return InferredNeighborhood(label, "block")

    for adj in (block_num - 1, block_num + 1):
        if adj <= 0:
            continue
        label = most_common(_labels(
            await sales.query(_block_filter(parcel.borough, adj), limit=ADJACENT_BLOCK_LIMIT)
        ))
        if label:
            log.debug("Neighborhood from adjacent block %s: %s", adj, label)
            return InferredNeighborhood(label, "adjacent_block")

    log.info("Neighborhood undetermined for %s/%s/%s",
             parcel.borough, parcel.block, parcel.lot)
    raise Undetermined(parcel.address)
