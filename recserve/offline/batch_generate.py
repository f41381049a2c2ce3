from typing import Iterable, Optional

import pandas as pd


def batch_user_recs(recommender, k: int = 50, users: Optional[Iterable] = None) -> pd.DataFrame:
    """Top-k for many users at once as a long frame: user_id, rank, item_id, score."""
    if users is None:
        users = recommender.user_ids()

    rows = []
    for user_id in users:
        for rank, rec in enumerate(recommender.user_recs(user_id, k), 1):
            rows.append((user_id, rank, rec.id, rec.score))
    return pd.DataFrame(rows, columns=["user_id", "rank", "item_id", "score"])
