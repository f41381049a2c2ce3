import numpy as np


class FactorMatrix:
    """
    Dense row-major float32 factor matrix (one row per user or item).
    Rows are read-only views; per-row L2 norms are computed once up front.
    """

    def __init__(self, rows: int, cols: int, data):
        values = np.asarray(data, dtype=np.float32)
        if values.size != rows * cols:
            raise ValueError(
                f"expected {rows * cols} values for a {rows}x{cols} matrix, got {values.size}"
            )
        if values.ndim not in (1, 2) or (values.ndim == 2 and values.shape != (rows, cols)):
            raise ValueError(f"expected shape ({rows}, {cols}), got {values.shape}")

        # copy so the caller's buffer can't change factors under us
        self._values = np.array(values.reshape(rows, cols), dtype=np.float32, order="C")
        self._values.flags.writeable = False

        self._norms = np.linalg.norm(self._values, axis=1).astype(np.float32)
        self._norms.flags.writeable = False

    @property
    def rows(self) -> int:
        return self._values.shape[0]

    @property
    def cols(self) -> int:
        return self._values.shape[1]

    @property
    def values(self) -> np.ndarray:
        return self._values

    def row(self, i: int) -> np.ndarray:
        if i < 0 or i >= self.rows:
            raise IndexError(f"row {i} out of range for matrix with {self.rows} rows")
        return self._values[i]

    def row_norms(self) -> np.ndarray:
        return self._norms

    def __repr__(self):
        return f"FactorMatrix(rows={self.rows}, cols={self.cols})"
