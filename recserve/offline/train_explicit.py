import logging
from typing import Optional, Tuple

import numpy as np, scipy.sparse as sp

from recserve.offline.base import Triples, validation_rmse
from recserve.options import Mode, RecommenderOptions

logger = logging.getLogger(__name__)


class ExplicitALSTrainer:
    """
    Alternating least squares on observed ratings only (NumPy).

    Each sweep solves (Q^T Q + reg * I) p_u = Q^T r_u for every user over the
    items they rated, then the same for every item over its raters.
    Predictions are the plain dot product p_u . q_i (no biases).
    """

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
        if Mode(mode) is not Mode.EXPLICIT:
            raise ValueError(f"ExplicitALSTrainer fits squared error on ratings, got mode={Mode(mode).value!r}")

        R = self._ratings_matrix(train, n_users, n_items)
        Rt = R.T.tocsr()  # ITEM x USER

        rng = np.random.default_rng(options.random_state)
        k = options.factors
        U = rng.normal(0, 0.1, (n_users, k))
        V = rng.normal(0, 0.1, (n_items, k))
        reg = options.regularization * np.eye(k)

        log = logger.info if verbose else logger.debug
        for it in range(1, options.iterations + 1):
            self._solve(R, V, U, reg)
            self._solve(Rt, U, V, reg)

            msg = f"Iter {it:02d} | train RMSE {self._rmse(R, U, V):.4f}"
            if valid is not None:
                msg += f" | valid RMSE {validation_rmse(U, V, valid):.4f}"
            log(msg)

        return U.astype(np.float32), V.astype(np.float32)

    @staticmethod
    def _ratings_matrix(train: Triples, n_users: int, n_items: int) -> sp.csr_matrix:
        # a user rating the same item twice counts as the mean of both
        df = train.known().to_frame()
        df = df.groupby(["uidx", "iidx"], sort=False, as_index=False)["label"].mean()
        return sp.csr_matrix(
            (df["label"].to_numpy(dtype=np.float64), (df["uidx"].to_numpy(), df["iidx"].to_numpy())),
            shape=(n_users, n_items),
        )

    @staticmethod
    def _solve(R: sp.csr_matrix, fixed: np.ndarray, out: np.ndarray, reg: np.ndarray) -> None:
        for row in range(R.shape[0]):
            start, end = R.indptr[row], R.indptr[row + 1]
            if start == end:
                continue
            cols = R.indices[start:end]
            Q = fixed[cols]
            # lstsq: stays defined when reg == 0 and the user has fewer ratings than factors
            out[row] = np.linalg.lstsq(Q.T @ Q + reg, Q.T @ R.data[start:end], rcond=None)[0]

    @staticmethod
    def _rmse(R: sp.csr_matrix, U: np.ndarray, V: np.ndarray) -> float:
        coo = R.tocoo()
        preds = np.einsum("ij,ij->i", U[coo.row], V[coo.col])
        return float(np.sqrt(np.mean((preds - coo.data) ** 2)))
