from __future__ import annotations

"""Common backend interface for qcore executors."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Sequence, TYPE_CHECKING, Union

import numpy as np

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..circuit import Circuit, Gate
    from ..qaoa import QaoaCircuit

    Executable = Union[Circuit, QaoaCircuit]


class Paradigm(str, Enum):
    """Execution model a backend natively supports."""

    GATE_BASED = "GateBased"
    ANNEALING = "Annealing"


@dataclass
class ExecutionResult:
    """Sampled outcome of running a circuit.

    ``measurements`` has one row per shot and one column per qubit, column
    ``i`` holding the measured value of qubit ``i``.
    """

    num_shots: int
    measurements: np.ndarray
    backend_name: str
    metadata: Dict[str, Any] = field(default_factory=dict)


class Backend:
    """Abstract execution backend.

    Concrete backends implement four core methods:

    ``supports_operation``
        Report whether a single gate can be applied incrementally.
    ``apply_operation``
        Apply one gate to a backend state and return the new state.
    ``initialize_state``
        Return the backend's initial state for ``n`` qubits.
    ``execute_to_state``
        Run a whole circuit and return the final backend state.

    ``execute`` samples measurements and is what automatic backend selection
    calls.  ``max_qubits`` is ``None`` for backends without a qubit limit.
    """

    #: Human readable backend name.
    name: str = "backend"
    #: Paradigm of the states produced by the backend.
    native_state_type: Paradigm = Paradigm.GATE_BASED
    #: Largest register the backend accepts, ``None`` when unlimited.
    max_qubits: int | None = None
    #: Gate kinds (see :attr:`qcore.circuit.Gate.kind`) the backend executes.
    supported_gates: Sequence[str] = ()

    def supports_operation(self, gate: "Gate") -> bool:
        raise NotImplementedError

    def apply_operation(self, gate: "Gate", state: Any) -> Any:
        """Return ``state`` after applying ``gate``."""
        raise NotImplementedError

    def initialize_state(self, num_qubits: int) -> Any:
        raise NotImplementedError

    def execute_to_state(self, circuit: "Executable") -> Any:
        """Run ``circuit`` and return the backend's final state."""
        raise NotImplementedError

    def execute(self, circuit: "Executable", shots: int) -> ExecutionResult:
        """Run ``circuit`` and sample ``shots`` measurements."""
        raise NotImplementedError

    async def execute_async(self, circuit: "Executable", shots: int) -> ExecutionResult:
        """Run :meth:`execute` in a worker thread."""
        return await asyncio.to_thread(self.execute, circuit, shots)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


__all__ = ["Backend", "ExecutionResult", "Paradigm"]
