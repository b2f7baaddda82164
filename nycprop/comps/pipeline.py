"""Comparable-sales search: resolve, infer neighborhood, fetch, enrich, score, rank."""

from __future__ import annotations

import logging

from nycprop.boroughs import require_borough_code
from nycprop.comps.candidates import fetch_candidates
from nycprop.comps.enrichment import enrich_sales, to_candidate
from nycprop.comps.neighborhood import infer_neighborhood
from nycprop.comps.ranking import clamp_limit, rank_comps, summarize
from nycprop.comps.resolver import resolve_parcel
from nycprop.comps.scoring import ScoreInputs, score_breakdown, similarity_score
from nycprop.errors import InvalidInput
from nycprop.models import CandidateComp, CompsResult, ParcelRecord
from nycprop.neighborhoods import (
    compatible_neighborhoods,
    is_adjacent_neighborhood,
    is_same_neighborhood,
)
from nycprop.registries import Registries

logger = logging.getLogger(__name__)


def subject_inputs(subject: ParcelRecord, building_class: str) -> ScoreInputs:
    return ScoreInputs(
        building_class=building_class,
        units=subject.units,
        units_total=subject.units_total,
        year_built=subject.year_built,
        building_area=subject.building_area,
    )


def score_candidate(
    subject: ScoreInputs,
    neighborhood: str,
    comp: CandidateComp,
) -> CandidateComp:
    comp.is_same_neighborhood = is_same_neighborhood(neighborhood, comp.sale.neighborhood)
    comp.is_adjacent_neighborhood = is_adjacent_neighborhood(neighborhood, comp.sale.neighborhood)
    comp_inputs = ScoreInputs(
        building_class=comp.sale.building_class,
        units=comp.units_total,
        units_total=comp.units_total,
        year_built=comp.year_built,
        building_area=comp.sqft,
    )
    comp.score_breakdown = score_breakdown(
        subject, comp_inputs, comp.is_same_neighborhood, comp.is_adjacent_neighborhood
    )
    comp.similarity_score = similarity_score(
        subject, comp_inputs, comp.is_same_neighborhood, comp.is_adjacent_neighborhood
    )
    return comp


async def find_comparables(
    registries: Registries,
    address: str,
    borough: str,
    limit: int | None = 10,
    building_class: str | None = None,
    include_adjacent: bool = True,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> CompsResult:
    """Find and rank comparable whole-building sales for a subject address.

    Raises:
        InvalidInput: unknown borough or bad class override
        NotFound: subject address did not resolve
        Undetermined: no neighborhood could be inferred
        UpstreamUnavailable: parcel resolution or candidate query failed
    """
    log = log or logger
    borough_code = require_borough_code(borough)
    if building_class is not None and not building_class.strip()[:1].isalpha():
        raise InvalidInput(f"Invalid building class: '{building_class}'")
    requested = clamp_limit(limit)

    resolution = await resolve_parcel(registries.parcels, address, borough_code, log=log)
    subject = resolution.parcel
    log.info("Subject resolved: %s (%s/%s/%s, class %s)",
             subject.address, subject.borough, subject.block, subject.lot,
             subject.building_class)

    inferred = await infer_neighborhood(registries.sales, subject, log=log)

    subject_class = (building_class or subject.building_class).strip().upper()
    category = subject_class[:1]
    if not category:
        raise InvalidInput(
            f"Subject '{subject.address}' has no building class; pass building_class"
        )
    neighborhoods = compatible_neighborhoods(inferred.label, include_adjacent)

    sales = await fetch_candidates(
        registries.sales, subject, category, neighborhoods, requested, log=log
    )
    enriched = await enrich_sales(registries.parcels, sales, log=log)

    scoring_subject = subject_inputs(subject, subject_class)
    scored = [
        score_candidate(scoring_subject, inferred.label, to_candidate(item))
        for item in enriched
    ]
    top = rank_comps(scored, requested)
    summary = summarize(subject, top)
    if summary.degraded_enrichment:
        log.info("%d of %d comps used sale-only data", summary.degraded_enrichment, len(top))

    return CompsResult(
        subject=subject,
        neighborhood=inferred.label,
        neighborhood_source=inferred.source,
        building_class_category=category,
        neighborhoods_searched=neighborhoods,
        include_adjacent=include_adjacent,
        summary=summary,
        comps=top,
        notes=list(resolution.notes),
    )
