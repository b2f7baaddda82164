"""Comparable-sales search — resolve, infer neighborhood, score and rank."""

from nycprop.comps.pipeline import find_comparables
from nycprop.comps.resolver import Resolution, resolve_parcel
from nycprop.comps.scoring import ScoreInputs, similarity_score

__all__ = [
    "find_comparables",
    "Resolution",
    "resolve_parcel",
    "ScoreInputs",
    "similarity_score",
]
