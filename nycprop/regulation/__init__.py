"""Rent-stabilization screen and the tax-benefit data that refines it."""

from nycprop.regulation.rent import assess_parcel, assess_rent_regulation
from nycprop.regulation.tax_benefits import fetch_tax_benefits, program_flags

__all__ = [
    "assess_parcel",
    "assess_rent_regulation",
    "fetch_tax_benefits",
    "program_flags",
]
