# qflowsim/simulator.py
"""
Dense state-vector engine.

The amplitudes live in one float64 buffer of interleaved (re, im) pairs
owned by the instance (see State). Basis index bit (n-1-q) holds qubit q,
so qubit 0 is the leftmost character of every bitstring this module
produces. Every public operation validates its inputs first; a failed check
leaves the buffer untouched.
"""
import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union
import numpy as np

from . import apply_serial, complex_ops
from .config import LIMITS, NoiseModel, SimulatorConfig
from .errors import ErrorCode, StateError
from .state import State
from .validators import (validate_basis_state, validate_gate_matrix,
                         validate_gate_operation, validate_limit, validate_qubit_count,
                         validate_qubit_index, validate_shots, validate_state_vector)

logger = logging.getLogger(__name__)


@dataclass
class MeasurementResult:
    outcome: int
    probability: float
    collapsed_state: np.ndarray
    qubit: Optional[int] = None     # None for measure_all
    bitstring: Optional[str] = None


@dataclass(frozen=True)
class SparseAmplitude:
    index: int
    bitstring: str
    amplitude: complex
    probability: float

    def __str__(self) -> str:
        return (f"|{self.bitstring}⟩: {complex_ops.to_string(self.amplitude)}"
                f" (p={self.probability:.4f})")


@dataclass(frozen=True)
class BlochVector:
    x: float
    y: float
    z: float

    @property
    def length(self) -> float:
        return float(np.sqrt(self.x*self.x + self.y*self.y + self.z*self.z))

    def is_pure(self, tol: float = 1e-6) -> bool:
        """False for the reduced (mixed) state of an entangled qubit."""
        return abs(self.length - 1.0) <= tol

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class OperationRecord:
    kind: str                  # gate | measure | measure_all | reset | initialize | set_state
    name: str = ""
    qubits: Tuple[int, ...] = ()
    params: Tuple[float, ...] = ()
    outcome: Optional[int] = None


def _load_backend(name: str):
    if name == "serial":
        return apply_serial.apply_gate
    if name == "numba":
        try:
            from .apply_numba import apply_gate
        except ImportError as e:
            raise RuntimeError("Numba backend not available. Did you `pip install numba`?") from e
        return apply_gate
    raise ValueError(f"Unknown backend: {name}")


class QuantumSimulator:
    """Pure-state simulator for 1..20 qubits, initialised to |0...0>."""

    def __init__(self, config: Union[SimulatorConfig, int],
                 noise_model: Union[NoiseModel, Mapping, None] = None, *,
                 backend: Optional[str] = None, seed: Optional[int] = None,
                 max_shots: Optional[int] = None, history_size: Optional[int] = None):
        if isinstance(config, SimulatorConfig):
            cfg = config
        else:
            # qubit count first, so an oversized request fails before anything else
            validate_qubit_count(config)
            cfg = SimulatorConfig(
                num_qubits=config,
                noise_model=noise_model,
                backend=backend or "serial",
                seed=seed,
                max_shots=LIMITS.max_shots if max_shots is None else max_shots,
                history_size=256 if history_size is None else history_size,
            )
        validate_qubit_count(cfg.num_qubits, cfg.limits)
        self._config = cfg
        self._limits = cfg.limits
        self._apply_kernel = _load_backend(cfg.backend)
        self._rng = np.random.default_rng(cfg.seed)
        self._history = deque(maxlen=cfg.history_size)
        self._state = State.zero(int(cfg.num_qubits))

        nm = cfg.noise_model
        if nm is not None and not nm.is_ideal:
            logger.warning("Noise model %s is carried but not simulated", nm)
        logger.info("Simulator ready: %d qubits, backend=%s, buffer=%d bytes",
                    self.num_qubits, cfg.backend, self._state.buf.nbytes)

    # ------------------------------------------------------------ accessors

    @property
    def num_qubits(self) -> int:
        return self._state.n

    @property
    def dim(self) -> int:
        return self._state.dim

    @property
    def backend(self) -> str:
        return self._config.backend

    @property
    def noise_model(self) -> Optional[NoiseModel]:
        return self._config.noise_model

    @property
    def config(self) -> SimulatorConfig:
        return self._config

    @property
    def history(self) -> List[OperationRecord]:
        return list(self._history)

    def clear_history(self):
        self._history.clear()

    def _bitstring(self, index: int) -> str:
        return format(index, f"0{self.num_qubits}b")

    def _mask(self, qubit: int) -> int:
        return apply_serial.qubit_mask(self.num_qubits, qubit)

    # ---------------------------------------------------------------- gates

    def apply(self, gate: str, *args) -> "QuantumSimulator":
        """apply('H', 0), apply('CNOT', 0, 1), apply('Rx', [theta], 0).

        A list/tuple (or ndarray) in first position is taken as the
        parameter vector; the remaining arguments are qubit indices.
        """
        params: Tuple = ()
        qubits = args
        if args and isinstance(args[0], (list, tuple, np.ndarray)):
            params = tuple(args[0])
            qubits = args[1:]

        info = validate_gate_operation(gate, qubits, params, self.num_qubits)
        if info.is_parameterized:
            with np.errstate(all="ignore"):
                matrix = np.asarray(info.resolve(params), dtype=np.complex128)
            validate_gate_matrix(gate, matrix, info.qubits, self._limits.unitarity_tolerance)
        else:
            matrix = info.matrix

        qubits = tuple(int(q) for q in qubits)
        self._apply_kernel(self._state, matrix, qubits)
        self._history.append(OperationRecord("gate", info.symbol, qubits,
                                             tuple(float(p) for p in params)))
        logger.debug("apply %s%s on %s", info.symbol, list(params) if params else "", qubits)
        return self

    # ---------------------------------------------------------- measurement

    def measure(self, qubit: int) -> MeasurementResult:
        """Projective measurement of one qubit; collapses the state."""
        validate_qubit_index(qubit, self.num_qubits, "measure")
        psi = self._state.psi
        probs = self._probabilities()
        ones = (np.arange(self.dim) & self._mask(qubit)) != 0
        p1 = float(probs[ones].sum())
        p0 = float(probs[~ones].sum())
        total = p0 + p1

        r = self._rng.random() * total
        outcome = 0 if r < p0 else 1
        p = p0 if outcome == 0 else p1
        if p <= 0.0:
            # r landed on a zero-probability branch through rounding
            outcome, p = 1 - outcome, total - p

        keep = ones if outcome == 1 else ~ones
        psi[~keep] = 0.0
        psi[keep] /= np.sqrt(p)

        prob = p / total
        self._history.append(OperationRecord("measure", "M", (int(qubit),), (), outcome))
        logger.info("measure q%d -> %d (p=%.6f)", qubit, outcome, prob)
        return MeasurementResult(outcome, prob, psi.copy(), qubit=int(qubit))

    def measure_all(self) -> MeasurementResult:
        """Measure every qubit at once; collapses to one basis state."""
        probs = self._probabilities()
        cdf = np.cumsum(probs)
        r = self._rng.random() * cdf[-1]
        index = min(int(np.searchsorted(cdf, r, side="right")), self.dim - 1)
        prob = float(probs[index] / cdf[-1])

        self._state.set_basis(index)
        bits = self._bitstring(index)
        self._history.append(OperationRecord("measure_all", "M",
                                             tuple(range(self.num_qubits)), (), index))
        logger.info("measure_all -> |%s> (p=%.6f)", bits, prob)
        return MeasurementResult(index, prob, self._state.psi.copy(), bitstring=bits)

    def sample(self, shots: int) -> Dict[str, int]:
        """Histogram of `shots` full-register measurements; state is untouched."""
        validate_shots(shots, self._config.max_shots)
        cdf = np.cumsum(self._probabilities())
        draws = self._rng.random(int(shots)) * cdf[-1]
        hits = np.searchsorted(cdf, draws, side="right")
        np.minimum(hits, self.dim - 1, out=hits)
        idx, counts = np.unique(hits, return_counts=True)
        logger.debug("sampled %d shots over %d outcomes", shots, idx.size)
        return {self._bitstring(int(i)): int(c) for i, c in zip(idx, counts)}

    # -------------------------------------------------------------- queries

    def _probabilities(self) -> np.ndarray:
        psi = self._state.psi
        return psi.real**2 + psi.imag**2

    def get_probabilities(self) -> np.ndarray:
        return self._probabilities()

    def get_state(self, limit: Optional[int] = LIMITS.display_limit) -> np.ndarray:
        """Copy of the amplitudes, truncated to `limit` entries (None = all)."""
        psi = self._state.psi
        if limit is not None:
            validate_limit(limit, "limit")
            psi = psi[:limit]
        return psi.copy()

    def get_sparse_state(self, max_elements: int = 1000) -> List[SparseAmplitude]:
        validate_limit(max_elements, "max_elements")
        probs = self._probabilities()
        nz = np.flatnonzero(probs > self._limits.sparse_threshold)[:max_elements]
        psi = self._state.psi
        return [SparseAmplitude(int(i), self._bitstring(int(i)), complex(psi[i]), float(probs[i]))
                for i in nz]

    def get_bloch_coordinates(self, qubit: int) -> BlochVector:
        """Bloch vector of the reduced density matrix of one qubit.

        rho01 is summed over every configuration of the other qubits, so an
        entangled qubit yields a vector shorter than 1.
        """
        validate_qubit_index(qubit, self.num_qubits, "bloch")
        psi = self._state.psi
        mask = self._mask(qubit)
        i0 = np.flatnonzero((np.arange(self.dim) & mask) == 0)
        a0 = psi[i0]
        a1 = psi[i0 | mask]
        rho00 = float(np.vdot(a0, a0).real)
        rho11 = float(np.vdot(a1, a1).real)
        rho01 = complex(np.vdot(a1, a0))  # sum a0 * conj(a1)
        return BlochVector(2.0 * rho01.real, -2.0 * rho01.imag, rho00 - rho11)

    def get_all_bloch_coordinates(self) -> List[BlochVector]:
        return [self.get_bloch_coordinates(q) for q in range(self.num_qubits)]

    def fidelity(self, target) -> float:
        """|<target|psi>|^2 against a normalised vector of the same dimension."""
        t = validate_state_vector(target, self.num_qubits, self._limits.normalization_tolerance)
        return float(abs(np.vdot(t, self._state.psi)) ** 2)

    def expectation(self, observable) -> float:
        """<psi|O|psi> for a dense 2^n x 2^n Hermitian observable."""
        O = np.asarray(observable, dtype=np.complex128)
        if O.shape != (self.dim, self.dim):
            raise StateError(
                f"Observable has shape {O.shape}, expected {(self.dim, self.dim)}",
                ErrorCode.INVALID_STATE_VECTOR, {"shape": O.shape})
        psi = self._state.psi
        return float(np.vdot(psi, O @ psi).real)

    # ------------------------------------------------------- state loading

    def reset(self) -> "QuantumSimulator":
        self._state.set_basis(0)
        self._history.append(OperationRecord("reset"))
        return self

    def initialize(self, basis: Union[str, int]) -> "QuantumSimulator":
        """Prepare a computational basis state: initialize('|101>') or initialize(5)."""
        index = validate_basis_state(basis, self.num_qubits)
        self._state.set_basis(index)
        self._history.append(OperationRecord("initialize", self._bitstring(index)))
        logger.info("initialized to |%s>", self._bitstring(index))
        return self

    def set_state(self, vector: Sequence) -> "QuantumSimulator":
        v = validate_state_vector(vector, self.num_qubits, self._limits.normalization_tolerance)
        self._state.load(v)
        self._history.append(OperationRecord("set_state"))
        logger.info("state vector loaded (%d amplitudes)", v.size)
        return self

    def check_normalized(self, tol: Optional[float] = None):
        if tol is None:
            tol = self._limits.normalization_tolerance
        self._state.check_normalized(tol)

    def __repr__(self) -> str:
        return f"QuantumSimulator(qubits={self.num_qubits}, backend={self.backend!r})"
