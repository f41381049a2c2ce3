import logging
from typing import Hashable, Iterable, List, NamedTuple, Optional

import numpy as np

from recserve.errors import EmptyTrainingSetError
from recserve.offline import UNKNOWN_INDEX, Trainer, Triples, default_trainer, unpack_rating
from recserve.options import Mode, RecommenderOptions
from recserve.service.idmap import IdentityMap
from recserve.service.interactions import InteractionSet
from recserve.service.matrix import FactorMatrix

logger = logging.getLogger(__name__)

# Stand-in cosine denominator when either factor row is all zeros
ZERO_NORM_EPSILON = np.float32(1e-5)


class Rec(NamedTuple):
    id: Hashable
    score: float


class Recommender:
    """
    Frozen post-fit state: id maps, rated items, user/item factors, global mean.
    Every query is a read-only scan over the factor matrices.
    """

    def __init__(
        self,
        user_map: IdentityMap,
        item_map: IdentityMap,
        rated: InteractionSet,
        global_mean: float,
        user_factors: FactorMatrix,
        item_factors: FactorMatrix,
    ):
        self._user_map = user_map
        self._item_map = item_map
        self._rated = rated
        self._global_mean = float(global_mean)
        self._user_factors = user_factors
        self._item_factors = item_factors

    # ---------- Fitting ----------
    @classmethod
    def fit_explicit(cls, train_set: Iterable, valid_set: Optional[Iterable] = None,
                     options: Optional[RecommenderOptions] = None,
                     trainer: Optional[Trainer] = None) -> "Recommender":
        return cls.fit(train_set, valid_set, options, trainer, mode=Mode.EXPLICIT)

    @classmethod
    def fit_implicit(cls, train_set: Iterable, valid_set: Optional[Iterable] = None,
                     options: Optional[RecommenderOptions] = None,
                     trainer: Optional[Trainer] = None) -> "Recommender":
        return cls.fit(train_set, valid_set, options, trainer, mode=Mode.IMPLICIT)

    @classmethod
    def fit(cls, train_set: Iterable, valid_set: Optional[Iterable] = None,
            options: Optional[RecommenderOptions] = None,
            trainer: Optional[Trainer] = None,
            mode: Mode = Mode.EXPLICIT) -> "Recommender":
        mode = Mode(mode)
        options = options or RecommenderOptions()

        ratings = [unpack_rating(t) for t in train_set]
        if not ratings:
            raise EmptyTrainingSetError()

        user_map, item_map, rated = IdentityMap(), IdentityMap(), InteractionSet()
        uidx = np.empty(len(ratings), dtype=np.int64)
        iidx = np.empty(len(ratings), dtype=np.int64)
        values = np.empty(len(ratings), dtype=np.float64)
        for row, (user_id, item_id, value) in enumerate(ratings):
            u = user_map.add(user_id)
            i = item_map.add(item_id)
            rated.record(u, i)
            uidx[row], iidx[row], values[row] = u, i, value
        train = Triples(uidx, iidx, values)

        n_users, n_items = len(user_map), len(item_map)
        global_mean = 0.0 if mode is Mode.IMPLICIT else float(values.mean())

        valid = None
        if valid_set is not None:
            valid = cls._index_valid(valid_set, user_map, item_map)

        logger.info("Fitting %s model: users=%d items=%d ratings=%d factors=%d",
                    mode.value, n_users, n_items, len(train), options.factors)

        trainer = trainer or default_trainer(mode)
        U, V = trainer.fit(
            train, valid, n_users, n_items, mode, options,
            options.resolve_verbose(valid is not None),
        )

        return cls(
            user_map,
            item_map,
            rated,
            global_mean,
            FactorMatrix(n_users, options.factors, U),
            FactorMatrix(n_items, options.factors, V),
        )

    @staticmethod
    def _index_valid(valid_set: Iterable, user_map: IdentityMap, item_map: IdentityMap) -> Triples:
        # unseen ids stay out of the maps; the trainer skips those rows
        uidx, iidx, values = [], [], []
        for user_id, item_id, value in map(unpack_rating, valid_set):
            u = user_map.lookup_index(user_id)
            i = item_map.lookup_index(item_id)
            uidx.append(UNKNOWN_INDEX if u is None else u)
            iidx.append(UNKNOWN_INDEX if i is None else i)
            values.append(value)
        valid = Triples(uidx, iidx, values)
        logger.debug("Validation set: %d ratings, %d with unknown ids",
                     len(valid), len(valid) - len(valid.known()))
        return valid

    # ---------- Queries ----------
    def predict(self, user_id, item_id) -> float:
        u = self._user_map.lookup_index(user_id)
        i = self._item_map.lookup_index(item_id)
        if u is None or i is None:
            logger.debug("Cold-start predict (%r, %r): global mean", user_id, item_id)
            return self._global_mean
        return float(np.dot(self._user_factors.row(u), self._item_factors.row(i)))

    def user_recs(self, user_id, count: int) -> List[Rec]:
        """Top `count` unrated items by dot product; unknown users get []."""
        u = self._user_map.lookup_index(user_id)
        if u is None:
            logger.debug("Cold-start user %r: no recs", user_id)
            return []
        if count <= 0:
            return []

        rated = self._rated.rated_items(u)
        scores = self._item_factors.values @ self._user_factors.row(u)
        # stable: equal scores keep ascending item index
        # over-fetch by len(rated) so filtering can still leave `count` items
        candidates = np.argsort(-scores, kind="stable")[: count + len(rated)]

        recs = [
            Rec(self._item_map.lookup_key(j), float(scores[j]))
            for j in candidates.tolist()
            if j not in rated
        ]
        return recs[:count]

    def item_recs(self, item_id, count: int) -> List[Rec]:
        return self._similar(self._item_map, self._item_factors, item_id, count)

    def similar_users(self, user_id, count: int) -> List[Rec]:
        return self._similar(self._user_map, self._user_factors, user_id, count)

    def _similar(self, id_map: IdentityMap, factors: FactorMatrix, key, count: int) -> List[Rec]:
        """Cosine neighbours of `key` within one factor matrix, excluding itself."""
        i = id_map.lookup_index(key)
        if i is None:
            logger.debug("Cold-start id %r: no similar entries", key)
            return []
        if count <= 0:
            return []

        norms = factors.row_norms()
        denom = norms * norms[i]
        denom[denom == 0] = ZERO_NORM_EPSILON
        sims = (factors.values @ factors.row(i)) / denom
        candidates = np.argsort(-sims, kind="stable")[: count + 1]

        recs = [
            Rec(id_map.lookup_key(j), float(sims[j]))
            for j in candidates.tolist()
            if j != i
        ]
        return recs[:count]

    # ---------- Accessors ----------
    def global_mean(self) -> float:
        return self._global_mean

    def user_factors(self, user_id) -> Optional[np.ndarray]:
        u = self._user_map.lookup_index(user_id)
        return None if u is None else self._user_factors.row(u).copy()

    def item_factors(self, item_id) -> Optional[np.ndarray]:
        i = self._item_map.lookup_index(item_id)
        return None if i is None else self._item_factors.row(i).copy()

    def user_ids(self) -> list:
        return self._user_map.keys()

    def item_ids(self) -> list:
        return self._item_map.keys()

    def __repr__(self):
        return (f"Recommender(users={len(self._user_map)}, items={len(self._item_map)}, "
                f"factors={self._user_factors.cols})")
