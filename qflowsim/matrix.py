# qflowsim/matrix.py
# Dense complex matrices as 2-D numpy arrays. Used to build and verify gate
# matrices; the engine never materialises a 2^n x 2^n operator.
from functools import reduce
import numpy as np

DTYPE = np.complex128


def as_matrix(m) -> np.ndarray:
    return np.asarray(m, dtype=DTYPE)

def identity(n: int) -> np.ndarray:
    return np.eye(n, dtype=DTYPE)

def matmul(a, b) -> np.ndarray:
    a, b = as_matrix(a), as_matrix(b)
    if a.shape[1] != b.shape[0]:
        raise ValueError(f"shape mismatch: {a.shape} @ {b.shape}")
    return a @ b

def matvec(m, v) -> np.ndarray:
    m, v = as_matrix(m), np.asarray(v, dtype=DTYPE)
    if m.shape[1] != v.shape[0]:
        raise ValueError(f"shape mismatch: {m.shape} @ {v.shape}")
    return m @ v

def dagger(m) -> np.ndarray:
    """Conjugate transpose."""
    return as_matrix(m).conj().T

def kron(*ms) -> np.ndarray:
    """Tensor product; kron(A, B, C) acts with A on the most-significant qubit."""
    if not ms:
        raise ValueError("kron needs at least one operand")
    return reduce(np.kron, (as_matrix(m) for m in ms))

def trace(m) -> complex:
    return complex(np.trace(as_matrix(m)))

def is_unitary(m, epsilon: float = 1e-9) -> bool:
    """True if M†M equals I entry-wise within epsilon."""
    m = as_matrix(m)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        return False
    if not np.all(np.isfinite(m)):
        return False
    diff = dagger(m) @ m - identity(m.shape[0])
    return bool(np.max(np.abs(diff)) <= epsilon)
