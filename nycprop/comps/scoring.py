"""Similarity score between a subject parcel and a candidate comp.

Five independent components add up to at most 100:

    neighborhood  30 same / 15 adjacent
    class         25 exact / 15 same category
    units         up to 20, by min/max ratio
    year built    up to 15, by age difference
    size          up to 10, by min/max ratio

Every component contributes 0 when its inputs are missing or zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

NEIGHBORHOOD_SAME = 30
NEIGHBORHOOD_ADJACENT = 15
CLASS_EXACT = 25
CLASS_CATEGORY = 15
UNITS_MAX = 20
SIZE_MAX = 10

# (max |year difference|, points), checked in order
YEAR_BANDS: list[tuple[int, int]] = [
    (5, 15),
    (10, 12),
    (20, 8),
    (30, 4),
]

MAX_SCORE = 100


@dataclass(frozen=True)
class ScoreInputs:
    building_class: str
    units: int
    units_total: int
    year_built: int | None
    building_area: int | None


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _ratio_points(a: float | None, b: float | None, weight: int) -> int:
    if not a or not b or a <= 0 or b <= 0:
        return 0
    return _round_half_up(weight * min(a, b) / max(a, b))


def neighborhood_points(same: bool, adjacent: bool) -> int:
    if same:
        return NEIGHBORHOOD_SAME
    if adjacent:
        return NEIGHBORHOOD_ADJACENT
    return 0


def class_points(subject_class: str, comp_class: str) -> int:
    a = (subject_class or "").strip().upper()
    b = (comp_class or "").strip().upper()
    if not a or not b:
        return 0
    if a == b:
        return CLASS_EXACT
    if a[0] == b[0]:
        return CLASS_CATEGORY
    return 0


def unit_points(subject: ScoreInputs, comp: ScoreInputs) -> int:
    return _ratio_points(
        max(subject.units or 0, subject.units_total or 0),
        max(comp.units or 0, comp.units_total or 0),
        UNITS_MAX,
    )


def year_points(subject_year: int | None, comp_year: int | None) -> int:
    if not subject_year or not comp_year:
        return 0
    diff = abs(subject_year - comp_year)
    for limit, points in YEAR_BANDS:
        if diff <= limit:
            return points
    return 0


def size_points(subject_area: int | None, comp_area: int | None) -> int:
    return _ratio_points(subject_area, comp_area, SIZE_MAX)


def score_breakdown(
    subject: ScoreInputs,
    comp: ScoreInputs,
    same_neighborhood: bool,
    adjacent_neighborhood: bool,
) -> dict[str, int]:
    return {
        "neighborhood": neighborhood_points(same_neighborhood, adjacent_neighborhood),
        "building_class": class_points(subject.building_class, comp.building_class),
        "units": unit_points(subject, comp),
        "year_built": year_points(subject.year_built, comp.year_built),
        "size": size_points(subject.building_area, comp.building_area),
    }


def similarity_score(
    subject: ScoreInputs,
    comp: ScoreInputs,
    same_neighborhood: bool,
    adjacent_neighborhood: bool,
) -> int:
    """Total score, clamped to [0, 100]."""
    total = sum(score_breakdown(subject, comp, same_neighborhood, adjacent_neighborhood).values())
    return max(0, min(MAX_SCORE, total))
