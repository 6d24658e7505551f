# qflowsim/apply_numba.py
import numpy as np
from numba import njit, prange, set_num_threads, get_num_threads
from .state import State
from .apply_serial import sub_offsets

# ---------- low-level kernel (Numba JIT) ----------

@njit(parallel=True, fastmath=True)
def _k_qubit_kernel(buf, offs, total, u_re, u_im):
    # buf is the interleaved (re, im) float64 buffer
    N = buf.shape[0] // 2
    dim = offs.shape[0]
    for ii in prange(N):
        base = np.int64(ii)
        if (base & total) == 0:
            v_re = np.empty(dim)
            v_im = np.empty(dim)
            for j in range(dim):
                i = base | offs[j]
                v_re[j] = buf[2*i]
                v_im[j] = buf[2*i + 1]
            for row in range(dim):
                acc_re = 0.0
                acc_im = 0.0
                for col in range(dim):
                    g_re = u_re[row, col]
                    g_im = u_im[row, col]
                    acc_re += g_re*v_re[col] - g_im*v_im[col]
                    acc_im += g_re*v_im[col] + g_im*v_re[col]
                i = base | offs[row]
                buf[2*i] = acc_re
                buf[2*i + 1] = acc_im

# ---------- user-facing apply helpers ----------

def set_threads(n: int):
    set_num_threads(n)

def get_threads() -> int:
    return get_num_threads()

def apply_gate(state: State, U: np.ndarray, qubits):
    offs = sub_offsets(state.n, qubits)
    U = np.asarray(U, dtype=np.complex128)
    _k_qubit_kernel(state.buf, offs, int(offs[-1]),
                    np.ascontiguousarray(U.real), np.ascontiguousarray(U.imag))

def apply_single_qubit(state: State, U2: np.ndarray, q: int):
    apply_gate(state, U2, (q,))

def apply_two_qubit(state: State, U4: np.ndarray, q1: int, q2: int):
    apply_gate(state, U4, (q1, q2))
