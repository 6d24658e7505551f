# qflowsim/state.py
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Tuple

from .errors import ErrorCode, StateError

@dataclass
class State:
    n: int
    buf: np.ndarray  # shape (2 * 2**n,), float64, interleaved (re, im)
    _scratch: Dict[Tuple[int, int], Tuple[np.ndarray, np.ndarray]] = field(
        default_factory=dict, repr=False, compare=False)

    @staticmethod
    def zero(n: int) -> "State":
        N = 1 << n
        buf = np.zeros(2 * N, dtype=np.float64)
        buf[0] = 1.0
        return State(n=n, buf=buf)

    @property
    def dim(self) -> int:
        return 1 << self.n

    @property
    def psi(self) -> np.ndarray:
        """complex128 view sharing memory with buf."""
        return self.buf.view(np.complex128)

    def scratch(self, rows: int, cols: int) -> Tuple[np.ndarray, np.ndarray]:
        """Two reusable (rows, cols) complex work arrays for gate kernels."""
        key = (rows, cols)
        if key not in self._scratch:
            self._scratch[key] = (np.empty(key, dtype=np.complex128),
                                  np.empty(key, dtype=np.complex128))
        return self._scratch[key]

    def norm2(self) -> float:
        return float(np.dot(self.buf, self.buf))

    def check_normalized(self, tol=1e-6):
        n2 = self.norm2()
        if not (abs(1.0 - n2) <= tol):
            raise StateError(f"Normalization failed: ||psi||^2={n2}",
                             ErrorCode.STATE_NOT_NORMALIZED,
                             {"norm": n2, "tolerance": tol})

    def set_basis(self, index: int):
        self.buf.fill(0.0)
        self.buf[2 * index] = 1.0

    def load(self, vector: np.ndarray):
        self.psi[:] = vector

    def copy(self) -> "State":
        return State(self.n, self.buf.copy())

    def as_numpy(self) -> np.ndarray:
        return self.psi
