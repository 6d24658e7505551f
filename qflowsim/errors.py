# qflowsim/errors.py
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    # bounds
    INVALID_QUBIT_INDEX = "INVALID_QUBIT_INDEX"
    INVALID_QUBIT_COUNT = "INVALID_QUBIT_COUNT"
    DUPLICATE_QUBITS = "DUPLICATE_QUBITS"
    INSUFFICIENT_QUBITS = "INSUFFICIENT_QUBITS"
    INVALID_SHOTS = "INVALID_SHOTS"
    INVALID_LIMIT = "INVALID_LIMIT"
    # gates
    INVALID_GATE = "INVALID_GATE"
    INVALID_GATE_PARAMS = "INVALID_GATE_PARAMS"
    NON_FINITE_MATRIX = "NON_FINITE_MATRIX"
    NON_UNITARY_GATE = "NON_UNITARY_GATE"
    INVALID_SCRIPT = "INVALID_SCRIPT"
    # state
    INVALID_STATE_VECTOR = "INVALID_STATE_VECTOR"
    STATE_NOT_NORMALIZED = "STATE_NOT_NORMALIZED"
    NAN_AMPLITUDE = "NAN_AMPLITUDE"
    INVALID_BASIS_STATE = "INVALID_BASIS_STATE"
    INVALID_NOISE_MODEL = "INVALID_NOISE_MODEL"
    # resources
    MEMORY_LIMIT = "MEMORY_LIMIT"
    SHOT_LIMIT = "SHOT_LIMIT"
    DEPTH_LIMIT = "DEPTH_LIMIT"


class QuantumValidationError(ValueError):
    """Raised before any mutation when an operation would corrupt the state.

    ``code`` is stable and safe to branch on; ``details`` carries the
    offending values (index, expected vs. actual, ...).
    """

    def __init__(self, message: str, code: ErrorCode,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = dict(details or {})

    def __repr__(self):
        return f"{type(self).__name__}({self.code.value}: {self.args[0]!r})"


class QubitBoundsError(QuantumValidationError):
    pass

class GateError(QuantumValidationError):
    pass

class StateError(QuantumValidationError):
    pass

class ResourceLimitError(QuantumValidationError):
    pass
