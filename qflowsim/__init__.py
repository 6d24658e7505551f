# qflowsim/__init__.py
from .config import LIMITS, Limits, NoiseModel, SimulatorConfig
from .errors import (ErrorCode, GateError, QuantumValidationError, QubitBoundsError,
                     ResourceLimitError, StateError)
from .gates import GATE_LIBRARY, GateInfo
from .simulator import (BlochVector, MeasurementResult, OperationRecord, QuantumSimulator,
                        SparseAmplitude)
from .circuit import Circuit, GateOperation, SimulationResult
from . import complex_ops

__version__ = "0.1.0"
