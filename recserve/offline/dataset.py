from typing import Hashable, Iterator, List, NamedTuple, Optional, Tuple

import numpy as np, pandas as pd


class Rating(NamedTuple):
    user_id: Hashable
    item_id: Hashable
    value: float = 1.0


def unpack_rating(triple) -> Rating:
    """(user, item, value) or (user, item) -> Rating; a missing value means 1.0."""
    if len(triple) == 2:
        user_id, item_id = triple
        return Rating(user_id, item_id, 1.0)
    user_id, item_id, value = triple
    return Rating(user_id, item_id, float(value))


class Dataset:
    """In-memory (user, item, value) triples; value defaults to 1.0 for implicit feedback."""

    def __init__(self, ratings: Optional[List[Rating]] = None):
        self._data: List[Rating] = list(ratings) if ratings else []

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Rating]:
        return iter(self._data)

    def add(self, user_id, item_id, value: float = 1.0) -> None:
        self._data.append(Rating(user_id, item_id, float(value)))

    def split_random(self, p: float, random_state: Optional[int] = None) -> Tuple["Dataset", "Dataset"]:
        """Shuffle, then the first int(p * n) ratings train and the rest validate."""
        if not 0.0 <= p <= 1.0:
            raise ValueError(f"p must be in [0, 1], got {p}")
        cut = int(p * len(self._data))
        order = np.random.default_rng(random_state).permutation(len(self._data))
        shuffled = [self._data[i] for i in order]
        return Dataset(shuffled[:cut]), Dataset(shuffled[cut:])

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        user_col: str = "user_id",
        item_col: str = "item_id",
        value_col: Optional[str] = "rating",
    ) -> "Dataset":
        missing = {user_col, item_col} - set(frame.columns)
        if value_col is not None and value_col not in frame.columns:
            missing.add(value_col)
        if missing:
            raise ValueError(f"frame is missing columns: {sorted(missing)}")

        values = frame[value_col].astype(float) if value_col is not None else [1.0] * len(frame)
        return cls([
            Rating(u, i, float(v))
            for u, i, v in zip(frame[user_col].tolist(), frame[item_col].tolist(), values)
        ])

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self._data, columns=["user_id", "item_id", "value"])
