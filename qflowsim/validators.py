# qflowsim/validators.py
# Precondition checks. Each raises a QuantumValidationError subclass and
# never touches simulator state; callers run them before mutating.
import math
import numbers
import re
from typing import Optional, Sequence, Union
import numpy as np

from .config import LIMITS
from .errors import (ErrorCode, GateError, QubitBoundsError, ResourceLimitError,
                     StateError)
from .gates import ALIASES, GATE_LIBRARY, GateInfo, lookup
from .matrix import is_unitary


def _is_int(x) -> bool:
    return isinstance(x, (int, np.integer)) and not isinstance(x, (bool, np.bool_))

def _is_real(x) -> bool:
    return isinstance(x, numbers.Real) and not isinstance(x, (bool, np.bool_))


def validate_qubit_index(index, num_qubits: int, context: str = "operation") -> None:
    if not _is_int(index):
        raise QubitBoundsError(
            f"Qubit index must be an integer, got {index!r}",
            ErrorCode.INVALID_QUBIT_INDEX, {"index": index, "context": context})
    if index < 0 or index >= num_qubits:
        raise QubitBoundsError(
            f"Qubit index {index} out of range [0, {num_qubits - 1}] for {context}",
            ErrorCode.INVALID_QUBIT_INDEX,
            {"index": int(index), "num_qubits": num_qubits, "context": context})


def validate_qubit_count(num_qubits, limits=LIMITS) -> None:
    if not _is_int(num_qubits):
        raise QubitBoundsError(
            f"Number of qubits must be an integer, got {num_qubits!r}",
            ErrorCode.INVALID_QUBIT_COUNT, {"num_qubits": num_qubits})
    if num_qubits < limits.min_qubits:
        raise QubitBoundsError(
            f"Number of qubits must be at least {limits.min_qubits}, got {num_qubits}",
            ErrorCode.INVALID_QUBIT_COUNT,
            {"num_qubits": int(num_qubits), "min": limits.min_qubits})
    if num_qubits > limits.max_qubits:
        amplitudes = 2 ** int(num_qubits)
        mib = amplitudes * 16 / (1024 * 1024)
        raise ResourceLimitError(
            f"Number of qubits ({num_qubits}) exceeds maximum of {limits.max_qubits}. "
            f"This would require {amplitudes} amplitudes (~{mib:.1f} MiB)",
            ErrorCode.MEMORY_LIMIT,
            {"num_qubits": int(num_qubits), "max": limits.max_qubits,
             "amplitudes": amplitudes, "bytes": amplitudes * 16})


def validate_gate_name(gate_name) -> GateInfo:
    info = lookup(gate_name) if isinstance(gate_name, str) else None
    if info is None:
        available = sorted(GATE_LIBRARY) + sorted(ALIASES)
        raise GateError(
            f"Unknown gate {gate_name!r}. Available gates: {', '.join(available)}",
            ErrorCode.INVALID_GATE, {"gate": gate_name, "available": available})
    return info


def validate_gate_params(gate_name: str, params: Optional[Sequence], info: GateInfo) -> None:
    params = tuple(params or ())
    if len(params) != len(info.params):
        raise GateError(
            f"Gate {gate_name!r} takes {len(info.params)} parameter(s)"
            f"{' (' + ', '.join(info.params) + ')' if info.params else ''}, "
            f"got {len(params)}",
            ErrorCode.INVALID_GATE_PARAMS,
            {"gate": gate_name, "required": list(info.params), "provided": list(params)})
    for i, p in enumerate(params):
        if not _is_real(p) or not math.isfinite(p):
            raise GateError(
                f"Invalid parameter value at index {i}: {p!r}. Must be a finite number.",
                ErrorCode.INVALID_GATE_PARAMS,
                {"gate": gate_name, "param_index": i, "value": p})


def validate_qubit_array(qubits: Sequence, required: int, num_qubits: int,
                         gate_name: str) -> None:
    if len(qubits) != required:
        raise QubitBoundsError(
            f"Gate {gate_name!r} requires {required} qubit(s), but {len(qubits)} provided",
            ErrorCode.INSUFFICIENT_QUBITS,
            {"gate": gate_name, "required": required, "provided": len(qubits)})
    for q in qubits:
        validate_qubit_index(q, num_qubits, f"gate {gate_name}")
    if len(set(int(q) for q in qubits)) != len(qubits):
        raise QubitBoundsError(
            f"Duplicate qubit indices in gate {gate_name!r}: {list(qubits)}",
            ErrorCode.DUPLICATE_QUBITS, {"gate": gate_name, "qubits": list(qubits)})


def validate_gate_matrix(gate_name: str, matrix: np.ndarray, arity: int,
                         tolerance: float = LIMITS.unitarity_tolerance) -> None:
    dim = 1 << arity
    if matrix.shape != (dim, dim):
        raise GateError(
            f"Gate {gate_name!r} produced a {matrix.shape} matrix, expected {(dim, dim)}",
            ErrorCode.NON_UNITARY_GATE, {"gate": gate_name, "shape": matrix.shape})
    if not np.all(np.isfinite(matrix)):
        raise GateError(
            f"Gate {gate_name!r} produced non-finite matrix entries",
            ErrorCode.NON_FINITE_MATRIX, {"gate": gate_name})
    if not is_unitary(matrix, tolerance):
        raise GateError(
            f"Gate {gate_name!r} matrix is not unitary within {tolerance}",
            ErrorCode.NON_UNITARY_GATE, {"gate": gate_name, "tolerance": tolerance})


def validate_state_vector(vector, num_qubits: int,
                          tolerance: float = LIMITS.normalization_tolerance) -> np.ndarray:
    """Check shape, finiteness and norm; return the vector as complex128."""
    try:
        v = np.asarray(vector, dtype=np.complex128)
    except (TypeError, ValueError) as e:
        raise StateError(
            f"State vector is not a sequence of complex numbers: {e}",
            ErrorCode.INVALID_STATE_VECTOR, {"type": type(vector).__name__}) from e
    expected = 1 << num_qubits
    if v.ndim != 1 or v.shape[0] != expected:
        raise StateError(
            f"State vector has shape {v.shape}, expected ({expected},) for {num_qubits} qubits",
            ErrorCode.INVALID_STATE_VECTOR,
            {"size": int(v.size), "expected": expected, "num_qubits": num_qubits})
    bad = np.flatnonzero(~np.isfinite(v))
    if bad.size:
        raise StateError(
            f"Invalid amplitude at index {int(bad[0])}: {v[bad[0]]}",
            ErrorCode.NAN_AMPLITUDE, {"index": int(bad[0]), "count": int(bad.size)})
    norm = float(np.vdot(v, v).real)
    if abs(norm - 1.0) > tolerance:
        raise StateError(
            f"State vector is not normalized (|psi|^2 = {norm:.6f}, expected 1)",
            ErrorCode.STATE_NOT_NORMALIZED, {"norm": norm, "tolerance": tolerance})
    return v


def validate_shots(shots, max_shots: int = LIMITS.max_shots) -> None:
    if not _is_int(shots) or shots < 1:
        raise QubitBoundsError(
            f"Number of shots must be a positive integer, got {shots!r}",
            ErrorCode.INVALID_SHOTS, {"shots": shots})
    if shots > max_shots:
        raise ResourceLimitError(
            f"Number of shots ({shots}) exceeds maximum of {max_shots}",
            ErrorCode.SHOT_LIMIT, {"shots": int(shots), "max": max_shots})


def validate_limit(limit, name: str = "limit") -> None:
    if not _is_int(limit) or limit < 1:
        raise QubitBoundsError(
            f"{name} must be a positive integer, got {limit!r}",
            ErrorCode.INVALID_LIMIT, {name: limit})


_BASIS_DECOR = re.compile(r"[|⟩><\s]")

def validate_basis_state(label: Union[str, int], num_qubits: int) -> int:
    """Basis index for an int or a label such as '|01⟩' or '01'."""
    if _is_int(label):
        if not 0 <= label < (1 << num_qubits):
            raise StateError(
                f"Basis index {label} out of range [0, {(1 << num_qubits) - 1}]",
                ErrorCode.INVALID_BASIS_STATE, {"index": int(label), "num_qubits": num_qubits})
        return int(label)
    if not isinstance(label, str):
        raise StateError(
            f"Basis state must be a bit label or an integer, got {label!r}",
            ErrorCode.INVALID_BASIS_STATE, {"state": label})
    bits = _BASIS_DECOR.sub("", label)
    if not bits or set(bits) - {"0", "1"}:
        raise StateError(
            f"Invalid basis state {label!r}. Must contain only 0s and 1s.",
            ErrorCode.INVALID_BASIS_STATE, {"state": label})
    if len(bits) != num_qubits:
        raise StateError(
            f"Basis state {label!r} has {len(bits)} bits, expected {num_qubits}",
            ErrorCode.INVALID_BASIS_STATE,
            {"state": label, "bits": len(bits), "expected": num_qubits})
    return int(bits, 2)


def validate_gate_operation(gate_name, qubits: Sequence, params: Optional[Sequence],
                            num_qubits: int) -> GateInfo:
    info = validate_gate_name(gate_name)
    validate_gate_params(gate_name, params, info)
    validate_qubit_array(qubits, info.qubits, num_qubits, gate_name)
    return info
