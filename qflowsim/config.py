# qflowsim/config.py
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Optional, Union

from .errors import ErrorCode, QuantumValidationError

BACKENDS = ("serial", "numba")


@dataclass(frozen=True)
class Limits:
    min_qubits: int = 1
    max_qubits: int = 20            # 2^20 amplitudes, 16 MiB of doubles
    max_shots: int = 100_000
    max_circuit_depth: int = 1000
    normalization_tolerance: float = 1e-6
    unitarity_tolerance: float = 1e-9
    display_limit: int = 16 * 1024  # largest dense slice handed to a display
    sparse_threshold: float = 1e-10

LIMITS = Limits()


@dataclass
class NoiseModel:
    """Noise parameters carried by the engine but not simulated."""
    depolarizing: float = 0.0
    amplitude_damping: float = 0.0
    phase_damping: float = 0.0
    readout_error: float = 0.0

    def __post_init__(self):
        for f in fields(self):
            p = getattr(self, f.name)
            if not isinstance(p, (int, float)) or isinstance(p, bool) or not (0.0 <= p <= 1.0):
                raise QuantumValidationError(
                    f"noise parameter {f.name}={p!r} must be a probability in [0, 1]",
                    ErrorCode.INVALID_NOISE_MODEL,
                    {"parameter": f.name, "value": p})

    @property
    def is_ideal(self) -> bool:
        return all(getattr(self, f.name) == 0.0 for f in fields(self))


@dataclass
class SimulatorConfig:
    num_qubits: int
    noise_model: Union[NoiseModel, Mapping, None] = None
    backend: str = "serial"
    seed: Optional[int] = None
    max_shots: int = LIMITS.max_shots
    history_size: int = 256
    limits: Limits = field(default=LIMITS, repr=False)

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend {self.backend!r}; expected one of {BACKENDS}")
        if self.history_size < 1:
            raise ValueError("history_size must be >= 1")
        if self.max_shots < 1:
            raise ValueError("max_shots must be >= 1")
        if isinstance(self.noise_model, Mapping):
            names = {f.name for f in fields(NoiseModel)}
            unknown = sorted(str(k) for k in set(self.noise_model) - names)
            if unknown:
                raise QuantumValidationError(
                    f"unknown noise parameter(s) {unknown}; expected some of {sorted(names)}",
                    ErrorCode.INVALID_NOISE_MODEL, {"unknown": unknown})
            self.noise_model = NoiseModel(**self.noise_model)
        elif self.noise_model is not None and not isinstance(self.noise_model, NoiseModel):
            raise QuantumValidationError(
                f"noise model must be a NoiseModel or a mapping, got {type(self.noise_model).__name__}",
                ErrorCode.INVALID_NOISE_MODEL, {"type": type(self.noise_model).__name__})
