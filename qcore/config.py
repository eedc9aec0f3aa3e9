import os
from dataclasses import dataclass


def _int_from_env(name: str, default: int | None) -> int | None:
    val = os.getenv(name)
    if val is None:
        return default
    if val.lower() == "none":
        return None
    try:
        return int(val)
    except ValueError:
        return default


def _float_from_env(name: str, default: float) -> float:
    """Return a floating-point value parsed from the environment."""

    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return float(val)
    except ValueError:
        return default


@dataclass
class Config:
    """Runtime configuration defaults for qcore.

    Values may be overridden via environment variables or by supplying
    explicit arguments to the functions and backends that consume them.
    """

    max_simulator_qubits: int = _int_from_env("QCORE_MAX_SIMULATOR_QUBITS", 20)
    norm_tolerance: float = _float_from_env("QCORE_NORM_TOLERANCE", 1e-10)
    default_shots: int = _int_from_env("QCORE_DEFAULT_SHOTS", 1000)
    # Single-spin Metropolis updates per annealing read.
    annealing_steps: int = _int_from_env("QCORE_ANNEALING_STEPS", 100)


# Global configuration instance used when modules import ``qcore.config``.
DEFAULT = Config()
