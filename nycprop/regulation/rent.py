"""Rule-based rent-stabilization likelihood.

This is a heuristic screen from public registry attributes, not a legal
determination. Rules run in a fixed order:

1. Public-housing owner -> not stabilized, high confidence, stop.
2. Accumulate:
   a. condo/co-op class (R) -> note only
   b. built before 1974 with 6+ units, not condo/co-op -> likely (medium)
   c. 421-a exemption -> likely (high)
   d. J-51 benefit -> likely (high)
3. Likely -> standard caveats.
4. Not likely, 6+ units built 1974 or later -> tax-benefit exception note.
5. Not likely, 1-5 units -> below-threshold note.
6. Not likely, year unknown and under 6 units -> low confidence.

The relative order of 2b-2d with the condo note is a policy assumption
carried over from how the screen has always behaved.
"""

from __future__ import annotations

import re

from nycprop.models import ParcelRecord, RentRegulationAssessment

STABILIZATION_CUTOFF_YEAR = 1974
RENT_CONTROL_CUTOFF_YEAR = 1947
MIN_STABILIZED_UNITS = 6

PUBLIC_HOUSING_RE = re.compile(
    r"\b(?:NYC|N\.Y\.C\.|NEW YORK CITY)\s+HOUSING\s+AUTH|\bNYCHA\b"
)

NOTE_PUBLIC_HOUSING = (
    "Owned by the NYC Housing Authority: public housing is regulated under "
    "federal and NYCHA rules, not the Rent Stabilization Law."
)
NOTE_CONDO_COOP = (
    "Condo/co-op building class: the building as a whole is usually not "
    "stabilized, but individual rented units can be."
)
NOTE_PRE_1947 = (
    "Built before 1947: long-term tenants in continuous occupancy since "
    "before July 1971 may be under rent control rather than stabilization."
)
NOTE_421A_EXPIRY = (
    "421-a units stay stabilized for the benefit period; units whose first "
    "lease predates the benefit's end may remain stabilized after it expires."
)
NOTE_J51_EXTENSION = (
    "J-51 stabilization lasts at least as long as the benefit and can extend "
    "past it for tenants in occupancy when the benefit began."
)
NOTE_DEREGULATION = (
    "Individual units may have been deregulated (e.g. high-rent vacancy "
    "deregulation before 2019); building status does not guarantee unit status."
)
NOTE_VERIFY = (
    "Verify with NYS Homes and Community Renewal (HCR) rent registration "
    "records before relying on this."
)
NOTE_TAX_BENEFIT_PATH = (
    "Built 1974 or later with 6+ units: stabilized only if the building took "
    "a tax benefit such as 421-a or J-51."
)
NOTE_BELOW_THRESHOLD = (
    "Fewer than 6 units: below the threshold for mandatory rent stabilization."
)
NOTE_YEAR_UNKNOWN = (
    "Year built is unknown; the pre-1974 test could not be applied."
)


def assess_rent_regulation(
    year_built: int | None,
    units: int | None,
    building_class: str | None,
    owner: str | None,
    has_421a: bool = False,
    has_j51: bool = False,
) -> RentRegulationAssessment:
    """Screen a building for likely rent stabilization.

    Args:
        year_built: Construction year, None when unknown
        units: Unit count (total units preferred over residential)
        building_class: DOF building class code, e.g. 'C1', 'D4', 'R4'
        owner: Owner of record
        has_421a: 421-a exemption found in the tax-benefit registries
        has_j51: J-51 exemption/abatement found
    """
    units = units or 0
    category = (building_class or "").strip().upper()[:1]

    if owner and PUBLIC_HOUSING_RE.search(owner.upper()):
        return RentRegulationAssessment(
            likely_stabilized=False,
            reasons=[],
            confidence="high",
            notes=[NOTE_PUBLIC_HOUSING],
        )

    result = RentRegulationAssessment(likely_stabilized=False, confidence="medium")
    is_condo_coop = category == "R"

    if is_condo_coop:
        result.notes.append(NOTE_CONDO_COOP)

    if (
        year_built is not None
        and year_built < STABILIZATION_CUTOFF_YEAR
        and units >= MIN_STABILIZED_UNITS
        and not is_condo_coop
    ):
        result.likely_stabilized = True
        result.reasons.append(
            f"Built in {year_built} with {units} units: buildings of 6+ units "
            f"built before {STABILIZATION_CUTOFF_YEAR} are generally rent stabilized."
        )
        result.confidence = "medium"
        if year_built < RENT_CONTROL_CUTOFF_YEAR:
            result.notes.append(NOTE_PRE_1947)

    if has_421a:
        result.likely_stabilized = True
        result.reasons.append(
            "Receives a 421-a tax exemption, which requires rent stabilization "
            "for the benefit period."
        )
        result.confidence = "high"
        result.notes.append(NOTE_421A_EXPIRY)

    if has_j51:
        result.likely_stabilized = True
        result.reasons.append(
            "Receives a J-51 tax benefit, which requires rent stabilization."
        )
        result.confidence = "high"
        result.notes.append(NOTE_J51_EXTENSION)

    if result.likely_stabilized:
        result.notes.append(NOTE_DEREGULATION)
        result.notes.append(NOTE_VERIFY)
        return result

    if (
        units >= MIN_STABILIZED_UNITS
        and year_built is not None
        and year_built >= STABILIZATION_CUTOFF_YEAR
    ):
        result.notes.append(NOTE_TAX_BENEFIT_PATH)
    elif 0 < units < MIN_STABILIZED_UNITS:
        result.notes.append(NOTE_BELOW_THRESHOLD)

    if year_built is None and units < MIN_STABILIZED_UNITS:
        result.confidence = "low"
        result.notes.append(NOTE_YEAR_UNKNOWN)

    return result


def assess_parcel(
    parcel: ParcelRecord, has_421a: bool = False, has_j51: bool = False
) -> RentRegulationAssessment:
    """Run the screen on a PLUTO parcel."""
    return assess_rent_regulation(
        year_built=parcel.year_built,
        units=parcel.unit_count,
        building_class=parcel.building_class,
        owner=parcel.owner,
        has_421a=has_421a,
        has_j51=has_j51,
    )
