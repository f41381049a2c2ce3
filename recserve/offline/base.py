"""
Boundary between the recommender and whatever learns the factors.

A trainer receives fully indexed triples plus cardinalities and returns two
dense float32 arrays: user factors (n_users x factors) and item factors
(n_items x factors). Nothing else crosses this boundary.
"""

from typing import Optional, Protocol, Tuple

import numpy as np, pandas as pd, scipy.sparse as sp

from recserve.options import Mode, RecommenderOptions

# Validation rows whose user or item never appeared in training
UNKNOWN_INDEX = -1


class Triples:
    """Parallel (user index, item index, label) arrays."""

    def __init__(self, user_indices, item_indices, labels):
        self.user_indices = np.asarray(user_indices, dtype=np.int64)
        self.item_indices = np.asarray(item_indices, dtype=np.int64)
        self.labels = np.asarray(labels, dtype=np.float32)
        if not (len(self.user_indices) == len(self.item_indices) == len(self.labels)):
            raise ValueError("user, item and label arrays must have the same length")

    def __len__(self) -> int:
        return len(self.labels)

    def known(self) -> "Triples":
        mask = (self.user_indices != UNKNOWN_INDEX) & (self.item_indices != UNKNOWN_INDEX)
        if mask.all():
            return self
        return Triples(self.user_indices[mask], self.item_indices[mask], self.labels[mask])

    def to_csr(self, shape: Tuple[int, int]) -> sp.csr_matrix:
        """USER x ITEM matrix from the known rows; duplicate pairs are summed."""
        kept = self.known()
        return sp.csr_matrix(
            (kept.labels, (kept.user_indices, kept.item_indices)),
            shape=shape,
            dtype=np.float32,
        )

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "uidx": self.user_indices,
            "iidx": self.item_indices,
            "label": self.labels,
        })


class Trainer(Protocol):
    def fit(
        self,
        train: Triples,
        valid: Optional[Triples],
        n_users: int,
        n_items: int,
        mode: Mode,
        options: RecommenderOptions,
        verbose: bool,
    ) -> Tuple[np.ndarray, np.ndarray]:
        ...


def validation_rmse(U: np.ndarray, V: np.ndarray, triples: Triples) -> float:
    """RMSE of dot-product predictions over rows with known indices; nan if none."""
    kept = triples.known()
    if len(kept) == 0:
        return float("nan")
    preds = np.einsum("ij,ij->i", U[kept.user_indices], V[kept.item_indices])
    return float(np.sqrt(np.mean((preds - kept.labels) ** 2)))
