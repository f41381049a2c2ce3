from collections import defaultdict
from typing import Iterable

import numpy as np

from recserve.offline.dataset import unpack_rating


def recall_at_k(recommender, valid_set: Iterable, k: int = 10) -> float:
    """Mean over known validation users of |held-out items in top-k| / |held-out items|."""
    truth_by_user = defaultdict(set)
    for user_id, item_id, _ in map(unpack_rating, valid_set):
        truth_by_user[user_id].add(item_id)

    recalls = []
    for user_id, truth in truth_by_user.items():
        if recommender.user_factors(user_id) is None:
            continue  # cold-start user, no recs to score
        topk = recommender.user_recs(user_id, k)
        hits = len(truth & {rec.id for rec in topk})
        recalls.append(hits / len(truth))
    return float(np.mean(recalls)) if recalls else 0.0


def rmse(recommender, valid_set: Iterable) -> float:
    """RMSE of predict() on held-out ratings; unknown pairs fall back to the global mean."""
    errors = [
        recommender.predict(user_id, item_id) - value
        for user_id, item_id, value in map(unpack_rating, valid_set)
    ]
    if not errors:
        return float("nan")
    return float(np.sqrt(np.mean(np.square(errors))))
