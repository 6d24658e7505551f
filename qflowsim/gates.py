# qflowsim/gates.py
# Multi-qubit matrices are written in the basis of the listed qubits, first
# listed qubit = most-significant sub-index bit: CNOT(c, t) rows are
# |c t> = 00, 01, 10, 11.
from dataclasses import dataclass
from typing import Callable, Dict, Sequence, Tuple, Union
import numpy as np

from .matrix import identity

DTYPE = np.complex128
SQRT2_INV = 1.0 / np.sqrt(2.0)


def _frozen(m: np.ndarray) -> np.ndarray:
    m.setflags(write=False)
    return m

def _controlled(u: np.ndarray, dtype=DTYPE) -> np.ndarray:
    """|0><0| (x) I + |1><1| (x) U, control on the first qubit."""
    d = u.shape[0]
    mat = np.eye(2 * d, dtype=dtype)
    mat[d:, d:] = u
    return mat

# ----------------------------- single qubit -----------------------------

def I(dtype=DTYPE) -> np.ndarray:
    return identity(2).astype(dtype)

def X(dtype=DTYPE) -> np.ndarray:
    return np.array([[0, 1],
                     [1, 0]], dtype=dtype)

def Y(dtype=DTYPE) -> np.ndarray:
    return np.array([[0, -1j],
                     [1j, 0]], dtype=dtype)

def Z(dtype=DTYPE) -> np.ndarray:
    return np.array([[1, 0],
                     [0, -1]], dtype=dtype)

def H(dtype=DTYPE) -> np.ndarray:
    s = SQRT2_INV
    return np.array([[s, s],
                     [s, -s]], dtype=dtype)

def S(dtype=DTYPE) -> np.ndarray:
    return np.array([[1, 0],
                     [0, 1j]], dtype=dtype)

def Sdg(dtype=DTYPE) -> np.ndarray:
    return np.array([[1, 0],
                     [0, -1j]], dtype=dtype)

def T(dtype=DTYPE) -> np.ndarray:
    return np.array([[1, 0],
                     [0, np.exp(0.25j*np.pi)]], dtype=dtype)

def Tdg(dtype=DTYPE) -> np.ndarray:
    return np.array([[1, 0],
                     [0, np.exp(-0.25j*np.pi)]], dtype=dtype)

def SX(dtype=DTYPE) -> np.ndarray:
    # sqrt(X); SX @ SX == X
    return 0.5 * np.array([[1+1j, 1-1j],
                           [1-1j, 1+1j]], dtype=dtype)

def SXdg(dtype=DTYPE) -> np.ndarray:
    return 0.5 * np.array([[1-1j, 1+1j],
                           [1+1j, 1-1j]], dtype=dtype)

def RX(theta: float, dtype=DTYPE) -> np.ndarray:
    c = np.cos(theta/2.0)
    s = -1j*np.sin(theta/2.0)
    return np.array([[c, s],
                     [s, c]], dtype=dtype)

def RY(theta: float, dtype=DTYPE) -> np.ndarray:
    c = np.cos(theta/2.0)
    s = np.sin(theta/2.0)
    return np.array([[c, -s],
                     [s, c]], dtype=dtype)

def RZ(theta: float, dtype=DTYPE) -> np.ndarray:
    return np.array([[np.exp(-0.5j*theta), 0],
                     [0, np.exp(+0.5j*theta)]], dtype=dtype)

def PHASE(phi: float, dtype=DTYPE) -> np.ndarray:
    return np.array([[1, 0],
                     [0, np.exp(1j*phi)]], dtype=dtype)

def U3(theta: float, phi: float, lam: float, dtype=DTYPE) -> np.ndarray:
    c = np.cos(theta/2.0)
    s = np.sin(theta/2.0)
    return np.array([[c, -np.exp(1j*lam)*s],
                     [np.exp(1j*phi)*s, np.exp(1j*(phi+lam))*c]], dtype=dtype)

# ------------------------------- two qubit -------------------------------

def CNOT(dtype=DTYPE) -> np.ndarray:
    return _controlled(X(dtype), dtype)

def CZ(dtype=DTYPE) -> np.ndarray:
    return _controlled(Z(dtype), dtype)

def CH(dtype=DTYPE) -> np.ndarray:
    return _controlled(H(dtype), dtype)

def SWAP(dtype=DTYPE) -> np.ndarray:
    mat = np.eye(4, dtype=dtype)
    mat[[1, 2]] = mat[[2, 1]]
    return mat

def ISWAP(dtype=DTYPE) -> np.ndarray:
    mat = np.zeros((4, 4), dtype=dtype)
    mat[0, 0] = mat[3, 3] = 1
    mat[1, 2] = mat[2, 1] = 1j
    return mat

def CPHASE(phi: float, dtype=DTYPE) -> np.ndarray:
    return _controlled(PHASE(phi, dtype), dtype)

def RXX(theta: float, dtype=DTYPE) -> np.ndarray:
    # exp(-i theta/2 X(x)X)
    c = np.cos(theta/2.0)
    s = -1j*np.sin(theta/2.0)
    return np.array([[c, 0, 0, s],
                     [0, c, s, 0],
                     [0, s, c, 0],
                     [s, 0, 0, c]], dtype=dtype)

def RYY(theta: float, dtype=DTYPE) -> np.ndarray:
    # exp(-i theta/2 Y(x)Y)
    c = np.cos(theta/2.0)
    s = 1j*np.sin(theta/2.0)
    return np.array([[c, 0, 0, s],
                     [0, c, -s, 0],
                     [0, -s, c, 0],
                     [s, 0, 0, c]], dtype=dtype)

def RZZ(theta: float, dtype=DTYPE) -> np.ndarray:
    # exp(-i theta/2 Z(x)Z)
    a = np.exp(-0.5j*theta)
    b = np.exp(+0.5j*theta)
    return np.diag(np.array([a, b, b, a], dtype=dtype))

# ------------------------------ three qubit ------------------------------

def TOFFOLI(dtype=DTYPE) -> np.ndarray:
    return _controlled(CNOT(dtype), dtype)

def FREDKIN(dtype=DTYPE) -> np.ndarray:
    return _controlled(SWAP(dtype), dtype)

def CCZ(dtype=DTYPE) -> np.ndarray:
    return _controlled(CZ(dtype), dtype)

def RCCX(dtype=DTYPE) -> np.ndarray:
    """Margolus gate: Toffoli up to a -1 phase on |101>."""
    mat = TOFFOLI(dtype)
    mat[5, 5] = -1
    return mat

# ----------------------------- gate library -----------------------------

Matrix = np.ndarray
MatrixFn = Callable[[Sequence[float]], np.ndarray]


@dataclass(frozen=True)
class GateInfo:
    name: str
    symbol: str
    qubits: int
    matrix: Union[Matrix, MatrixFn]
    params: Tuple[str, ...] = ()
    description: str = ""

    @property
    def is_parameterized(self) -> bool:
        return callable(self.matrix)

    def resolve(self, params: Sequence[float] = ()) -> np.ndarray:
        if self.is_parameterized:
            return self.matrix(tuple(float(p) for p in params))
        return self.matrix


def _const(name, symbol, qubits, builder, description):
    return GateInfo(name, symbol, qubits, _frozen(builder()), (), description)

def _param(name, symbol, qubits, builder, params, description):
    return GateInfo(name, symbol, qubits, lambda p: builder(*p), params, description)


GATE_LIBRARY: Dict[str, GateInfo] = {g.symbol: g for g in (
    _const("Identity", "I", 1, I, "No operation"),
    _const("Pauli-X", "X", 1, X, "Bit flip (NOT gate)"),
    _const("Pauli-Y", "Y", 1, Y, "Bit and phase flip"),
    _const("Pauli-Z", "Z", 1, Z, "Phase flip"),
    _const("Hadamard", "H", 1, H, "Creates superposition"),
    _const("S Gate", "S", 1, S, "pi/2 phase gate"),
    _const("S-dagger", "Sdg", 1, Sdg, "-pi/2 phase gate"),
    _const("T Gate", "T", 1, T, "pi/4 phase gate"),
    _const("T-dagger", "Tdg", 1, Tdg, "-pi/4 phase gate"),
    _const("Sqrt-X", "SX", 1, SX, "Square root of X"),
    _const("Sqrt-X-dagger", "SXdg", 1, SXdg, "Inverse square root of X"),
    _param("X Rotation", "Rx", 1, RX, ("theta",), "Rotation around X-axis"),
    _param("Y Rotation", "Ry", 1, RY, ("theta",), "Rotation around Y-axis"),
    _param("Z Rotation", "Rz", 1, RZ, ("theta",), "Rotation around Z-axis"),
    _param("Phase", "Phase", 1, PHASE, ("phi",), "Arbitrary phase on |1>"),
    _param("U3", "U3", 1, U3, ("theta", "phi", "lambda"), "Universal single-qubit gate"),
    _const("CNOT", "CNOT", 2, CNOT, "Controlled-NOT gate"),
    _const("CZ", "CZ", 2, CZ, "Controlled-Z gate"),
    _const("CH", "CH", 2, CH, "Controlled-Hadamard gate"),
    _const("SWAP", "SWAP", 2, SWAP, "Swaps two qubits"),
    _const("iSWAP", "iSWAP", 2, ISWAP, "Swap with i phase on exchanged states"),
    _param("Controlled Phase", "CPhase", 2, CPHASE, ("phi",), "Phase on |11>"),
    _param("XX Rotation", "RXX", 2, RXX, ("theta",), "Ising XX coupling"),
    _param("YY Rotation", "RYY", 2, RYY, ("theta",), "Ising YY coupling"),
    _param("ZZ Rotation", "RZZ", 2, RZZ, ("theta",), "Ising ZZ coupling"),
    _const("Toffoli", "Toffoli", 3, TOFFOLI, "Controlled-controlled-NOT"),
    _const("Fredkin", "Fredkin", 3, FREDKIN, "Controlled-SWAP"),
    _const("CCZ", "CCZ", 3, CCZ, "Controlled-controlled-Z"),
    _const("Relative-phase Toffoli", "RCCX", 3, RCCX, "Toffoli up to relative phase"),
)}

ALIASES: Dict[str, str] = {
    "ID": "I",
    "CX": "CNOT",
    "CCX": "Toffoli",
    "CSWAP": "Fredkin",
    "P": "Phase",
}


def lookup(name: str):
    """GateInfo for a name or alias, or None."""
    return GATE_LIBRARY.get(ALIASES.get(name, name))
