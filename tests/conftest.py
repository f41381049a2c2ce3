import numpy as np
import pytest

from recserve import Dataset


class FixedTrainer:
    """Returns preset factors and remembers what it was called with."""

    def __init__(self, user_factors, item_factors):
        self.user_factors = np.asarray(user_factors, dtype=np.float32)
        self.item_factors = np.asarray(item_factors, dtype=np.float32)
        self.calls = []

    def fit(self, train, valid, n_users, n_items, mode, options, verbose):
        self.calls.append(dict(
            train=train, valid=valid, n_users=n_users, n_items=n_items,
            mode=mode, options=options, verbose=verbose,
        ))
        return self.user_factors, self.item_factors


@pytest.fixture
def fixed_trainer():
    return FixedTrainer


@pytest.fixture
def rated_data():
    data = Dataset()
    for user_id, item_id in [(1, "A"), (1, "B"), (1, "C"), (1, "D"),
                             (2, "C"), (2, "D"), (2, "E"), (2, "F")]:
        data.add(user_id, item_id, 1.0)
    return data
