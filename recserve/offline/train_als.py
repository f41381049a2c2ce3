import logging
from typing import Optional, Tuple

import numpy as np
from implicit.als import AlternatingLeastSquares

from recserve.offline.base import Triples, validation_rmse
from recserve.options import Mode, RecommenderOptions

logger = logging.getLogger(__name__)


class ImplicitALSTrainer:
    """One-class ALS (Hu et al. 2008) on a USER x ITEM confidence matrix via `implicit`."""

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
        if Mode(mode) is not Mode.IMPLICIT:
            raise ValueError(f"ImplicitALSTrainer fits one-class implicit feedback, got mode={Mode(mode).value!r}")

        # Load USER x ITEM matrix (rows = users, cols = items)
        X = train.to_csr((n_users, n_items))

        # Confidence: C = 1 + alpha * r  (keep orientation as USER x ITEM)
        Xui = X.copy()
        Xui.data = 1.0 + options.alpha * Xui.data

        model = AlternatingLeastSquares(
            factors=options.factors,
            regularization=options.regularization,
            iterations=options.iterations,
            calculate_training_loss=verbose,
            use_gpu=False,
            random_state=options.random_state,
        )
        log = logger.info if verbose else logger.debug
        log("ALS fit: users=%d items=%d nnz=%d factors=%d iterations=%d",
            n_users, n_items, Xui.nnz, options.factors, options.iterations)

        def on_iteration(iteration, elapsed, loss=None):
            msg = f"Iter {iteration + 1:02d} | {elapsed:.2f}s"
            if loss is not None:
                msg += f" | loss {loss:.4f}"
            if valid is not None:
                msg += f" | valid RMSE {validation_rmse(model.user_factors, model.item_factors, valid):.4f}"
            log(msg)

        model.fit(Xui, show_progress=False, callback=on_iteration)

        U = np.asarray(model.user_factors, dtype=np.float32)
        V = np.asarray(model.item_factors, dtype=np.float32)
        return U, V
