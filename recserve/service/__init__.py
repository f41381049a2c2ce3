"""
Serving side: the fitted recommender and the structures it reads from.
"""

from .idmap import IdentityMap
from .interactions import InteractionSet
from .matrix import FactorMatrix
from .recommender import Rec, Recommender

__all__ = [
    "IdentityMap",
    "InteractionSet",
    "FactorMatrix",
    "Rec",
    "Recommender",
]
