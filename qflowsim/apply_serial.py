# qflowsim/apply_serial.py
# Vectorised numpy kernel. One routine covers every arity: 1- and 2-qubit
# gates are the k=1 and k=2 cases of the same gather/scatter.
from functools import lru_cache
from typing import Sequence, Tuple
import numpy as np
from .state import State

CHUNK = 1 << 14  # basis groups per gather; bounds the per-gate temporaries

def qubit_mask(n: int, q: int) -> int:
    """Qubit 0 is the most-significant bit of the basis index."""
    return 1 << (n - 1 - q)

@lru_cache(maxsize=256)
def _offsets(n: int, qubits: Tuple[int, ...]) -> np.ndarray:
    k = len(qubits)
    masks = [qubit_mask(n, q) for q in qubits]
    offs = np.zeros(1 << k, dtype=np.int64)
    for j in range(1 << k):
        for b, m in enumerate(masks):
            if (j >> (k - 1 - b)) & 1:
                offs[j] |= m
    offs.setflags(write=False)
    return offs

def sub_offsets(n: int, qubits: Sequence[int]) -> np.ndarray:
    """Offset of each of the 2^k gate-basis states from a base index.

    Bit (k-1-b) of the sub-index selects qubits[b], so qubits[0] is the
    most-significant bit of the gate's own basis whatever its position in
    the register. The returned array is cached and read-only.
    """
    return _offsets(n, tuple(int(q) for q in qubits))

def group_bases(n: int, qubits: Sequence[int], start: int, stop: int) -> np.ndarray:
    """Base indices (all target bits clear) of groups start..stop-1.

    A zero bit is inserted at each target position, lowest first, so only
    the requested slice is ever materialised.
    """
    bases = np.arange(start, stop, dtype=np.int64)
    for m in sorted(qubit_mask(n, q) for q in qubits):
        low = bases & (m - 1)
        bases ^= low
        bases <<= 1
        bases |= low
    return bases

def gate_indices(n: int, qubits: Sequence[int], start: int = 0,
                 stop: int = None) -> np.ndarray:
    """(2^k, stop-start) grid; column c holds the basis indices of one group."""
    if stop is None:
        stop = 1 << (n - len(qubits))
    offs = sub_offsets(n, qubits)
    return offs[:, None] | group_bases(n, qubits, start, stop)[None, :]

def apply_gate(state: State, U: np.ndarray, qubits: Sequence[int]):
    """Apply a 2^k x 2^k gate U to the listed qubits, in place."""
    k = len(qubits)
    assert U.shape == (1 << k, 1 << k)
    psi = state.psi
    groups = 1 << (state.n - k)
    cols = min(groups, CHUNK)  # both powers of two, so chunks tile exactly
    gathered, product = state.scratch(1 << k, cols)
    for start in range(0, groups, cols):
        idx = gate_indices(state.n, qubits, start, start + cols)
        np.take(psi, idx, out=gathered, mode="clip")
        np.matmul(U, gathered, out=product)
        psi[idx] = product

def apply_single_qubit(state: State, U2: np.ndarray, q: int):
    apply_gate(state, U2, (q,))

def apply_two_qubit(state: State, U4: np.ndarray, q1: int, q2: int):
    apply_gate(state, U4, (q1, q2))
