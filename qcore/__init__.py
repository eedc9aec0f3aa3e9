"""qcore: local state-vector simulation and backend-targeting circuit toolchain."""

from .circuit import Circuit, CircuitStats, Gate
from .config import Config
from .errors import (
    CircuitValidationError,
    InvalidGateError,
    InvalidQubitCountError,
    InvalidStateError,
    NoCompatibleBackendError,
    NotImplementedFeatureError,
    OperationCancelledError,
    OperationError,
    QCoreError,
)
from .simulator import StateVector
from .ising import IsingProblem
from .qaoa import QaoaCircuit
from .validator import BackendConstraints, get_constraints, validate_circuit
from .transpiler import transpile, transpile_for_backend
from .backends import (
    AerStatevectorBackend,
    Backend,
    ExecutionResult,
    LocalBackend,
    Paradigm,
    SimulatedAnnealingBackend,
)
from .capability import (
    BackendCapability,
    execute_with_automatic_backend,
    execute_with_automatic_backend_async,
    select_best_backend,
)
from .partitioner import (
    AdaptiveToBackend,
    FixedPartition,
    NoDecomposition,
    RunDecomposed,
    RunDirect,
    execute_partitioned,
    solve_with_decomposition,
)

__all__ = [
    "Circuit",
    "CircuitStats",
    "Gate",
    "Config",
    "QCoreError",
    "InvalidGateError",
    "InvalidQubitCountError",
    "InvalidStateError",
    "OperationError",
    "NoCompatibleBackendError",
    "OperationCancelledError",
    "CircuitValidationError",
    "NotImplementedFeatureError",
    "StateVector",
    "IsingProblem",
    "QaoaCircuit",
    "BackendConstraints",
    "get_constraints",
    "validate_circuit",
    "transpile",
    "transpile_for_backend",
    "Backend",
    "ExecutionResult",
    "Paradigm",
    "LocalBackend",
    "AerStatevectorBackend",
    "SimulatedAnnealingBackend",
    "BackendCapability",
    "select_best_backend",
    "execute_with_automatic_backend",
    "execute_with_automatic_backend_async",
    "NoDecomposition",
    "FixedPartition",
    "AdaptiveToBackend",
    "RunDirect",
    "RunDecomposed",
    "solve_with_decomposition",
    "execute_partitioned",
]
