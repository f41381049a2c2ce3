"""
recserve
========

Top-k recommendations, similar items/users and rating predictions served
from a pair of learned user/item factor matrices.

    from recserve import Dataset, Recommender

    data = Dataset()
    data.add(1, "A", 5.0)
    rec = Recommender.fit_explicit(data)
    rec.user_recs(1, 10)
"""

from .errors import EmptyTrainingSetError
from .offline import Dataset, ExplicitALSTrainer, ImplicitALSTrainer, Rating, Triples
from .options import Mode, RecommenderOptions
from .service import Rec, Recommender

__version__ = "0.1.0"

__all__ = [
    "Dataset",
    "EmptyTrainingSetError",
    "ExplicitALSTrainer",
    "ImplicitALSTrainer",
    "Mode",
    "Rating",
    "Rec",
    "Recommender",
    "RecommenderOptions",
    "Triples",
]
