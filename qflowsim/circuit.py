# qflowsim/circuit.py
import ast
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import numpy as np

from .config import LIMITS
from .errors import ErrorCode, QuantumValidationError, ResourceLimitError
from .simulator import BlochVector, QuantumSimulator


@dataclass
class GateOperation:
    gate: str
    qubits: Tuple[int, ...]
    params: Tuple[float, ...] = ()
    step: int = 0


@dataclass
class SimulationResult:
    simulator: QuantumSimulator
    state_vector: np.ndarray
    probabilities: np.ndarray
    bloch: List[BlochVector]

    def sample(self, shots: int):
        return self.simulator.sample(shots)


@dataclass
class Circuit:
    n: int
    ops: List[GateOperation] = field(default_factory=list)

    @staticmethod
    def empty(n: int) -> "Circuit":
        return Circuit(n, [])

    def add(self, gate: str, *qubits: int, params=None, step: Optional[int] = None) -> "Circuit":
        if step is None:
            step = self.ops[-1].step + 1 if self.ops else 0
        self.ops.append(GateOperation(gate, tuple(qubits), tuple(params or ()), step))
        return self

    def h(self, k:int): return self.add("H", k)
    def x(self, k:int): return self.add("X", k)
    def y(self, k:int): return self.add("Y", k)
    def z(self, k:int): return self.add("Z", k)
    def s(self, k:int): return self.add("S", k)
    def t(self, k:int): return self.add("T", k)
    def rx(self, k:int, theta:float): return self.add("Rx", k, params=(theta,))
    def ry(self, k:int, theta:float): return self.add("Ry", k, params=(theta,))
    def rz(self, k:int, theta:float): return self.add("Rz", k, params=(theta,))
    def cnot(self, c:int, t:int): return self.add("CNOT", c, t)
    def cz(self, c:int, t:int): return self.add("CZ", c, t)
    def swap(self, a:int, b:int): return self.add("SWAP", a, b)
    def toffoli(self, c1:int, c2:int, t:int): return self.add("Toffoli", c1, c2, t)

    @property
    def depth(self) -> int:
        return len({op.step for op in self.ops})

    def run(self, backend: str = "serial", seed=None, check_norm=True,
            num_threads=None, check_norm_tol=None) -> SimulationResult:
        """Execute the ops in step order on a fresh simulator."""
        if self.depth > LIMITS.max_circuit_depth:
            raise ResourceLimitError(
                f"Circuit depth {self.depth} exceeds maximum of {LIMITS.max_circuit_depth}",
                ErrorCode.DEPTH_LIMIT, {"depth": self.depth, "max": LIMITS.max_circuit_depth})

        sim = QuantumSimulator(self.n, backend=backend, seed=seed)
        if backend == "numba" and num_threads is not None:
            from .apply_numba import set_threads
            set_threads(int(num_threads))

        for op in sorted(self.ops, key=lambda o: o.step):
            if op.params:
                sim.apply(op.gate, list(op.params), *op.qubits)
            else:
                sim.apply(op.gate, *op.qubits)

        if check_norm:
            sim.check_normalized(tol=check_norm_tol)
        return SimulationResult(
            simulator=sim,
            state_vector=sim.get_state(limit=None),
            probabilities=sim.get_probabilities(),
            bloch=sim.get_all_bloch_coordinates(),
        )

    # ------------------------------------------------------------ scripts

    @classmethod
    def from_script(cls, text: str, default_qubits: int = 2) -> "Circuit":
        """Rebuild a circuit from lines like ``sim.apply('Rx', [0.5], 1)``.

        ``QuantumSimulator(3)`` sets the register size. Chained calls are
        taken in source order; lines mentioning neither call are ignored.
        Qubits and parameters are kept as written and checked at run time.
        """
        n = default_qubits
        ops: List[GateOperation] = []
        for lineno, line in enumerate(text.splitlines(), 1):
            src = line.strip()
            if "QuantumSimulator" not in src and ".apply" not in src:
                continue
            try:
                tree = ast.parse(src)
            except SyntaxError as e:
                raise _script_error(lineno, src, f"cannot parse: {e.msg}") from e
            calls = sorted((node for node in ast.walk(tree) if isinstance(node, ast.Call)),
                           key=lambda c: (c.end_lineno, c.end_col_offset))
            for call in calls:
                name = _call_name(call)
                if name == "QuantumSimulator":
                    values = _literal_args(call, lineno, src)
                    if len(values) != 1:
                        raise _script_error(lineno, src, "QuantumSimulator() takes one qubit count")
                    n = values[0]
                elif name == "apply":
                    values = _literal_args(call, lineno, src)
                    if not values or not isinstance(values[0], str):
                        raise _script_error(lineno, src, "apply() needs a gate name first")
                    gate, values = values[0], values[1:]
                    params: Tuple = ()
                    if values and isinstance(values[0], (list, tuple)):
                        params, values = tuple(values[0]), values[1:]
                    ops.append(GateOperation(gate, tuple(values), params, len(ops)))
        return cls(n, ops)


def _call_name(call: ast.Call) -> Optional[str]:
    if isinstance(call.func, ast.Attribute):
        return call.func.attr
    if isinstance(call.func, ast.Name):
        return call.func.id
    return None

def _literal_args(call: ast.Call, lineno: int, src: str) -> tuple:
    if call.keywords:
        raise _script_error(lineno, src, "keyword arguments are not supported")
    try:
        return tuple(ast.literal_eval(a) for a in call.args)
    except (ValueError, TypeError) as e:
        raise _script_error(lineno, src, "arguments must be literals") from e

def _script_error(lineno: int, src: str, reason: str) -> QuantumValidationError:
    return QuantumValidationError(f"Script line {lineno}: {reason}: {src!r}",
                                  ErrorCode.INVALID_SCRIPT, {"line": lineno, "text": src})
