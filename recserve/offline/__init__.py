"""
Offline side: training-set containers, trainers and evaluation helpers.
"""

from recserve.options import Mode

from .base import UNKNOWN_INDEX, Trainer, Triples, validation_rmse
from .batch_generate import batch_user_recs
from .dataset import Dataset, Rating, unpack_rating
from .eval_metrics import recall_at_k, rmse
from .train_als import ImplicitALSTrainer
from .train_explicit import ExplicitALSTrainer


def default_trainer(mode: Mode) -> Trainer:
    if Mode(mode) is Mode.IMPLICIT:
        return ImplicitALSTrainer()
    return ExplicitALSTrainer()


__all__ = [
    "UNKNOWN_INDEX",
    "Trainer",
    "Triples",
    "validation_rmse",
    "Dataset",
    "Rating",
    "unpack_rating",
    "ImplicitALSTrainer",
    "ExplicitALSTrainer",
    "default_trainer",
    "recall_at_k",
    "rmse",
    "batch_user_recs",
]
