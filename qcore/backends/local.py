from __future__ import annotations

"""Local numpy state-vector backend."""

import logging
from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from .. import config, simulator
from ..circuit import DIRECTIVE_KINDS, GATE_SPECS, Circuit, Gate
from ..errors import OperationError
from ..qaoa import QaoaCircuit
from ..simulator import StateVector
from .base import Backend, ExecutionResult, Paradigm

LOGGER = logging.getLogger(__name__)

_UNITARY_KINDS: Tuple[str, ...] = tuple(
    spec.kind for spec in GATE_SPECS.values() if spec.kind not in DIRECTIVE_KINDS
)


@dataclass
class LocalBackend(Backend):
    """Execute circuits with :mod:`qcore.simulator`.

    Parameters
    ----------
    max_qubits:
        Largest register accepted.  Defaults to
        ``config.DEFAULT.max_simulator_qubits``.
    seed:
        Seed of the sampling generator.  Successive executions draw from one
        generator, so a seeded backend reproduces its whole sequence of runs.
    """

    name: str = "Local Simulator"
    max_qubits: int | None = None
    seed: int | None = None
    native_state_type: Paradigm = field(default=Paradigm.GATE_BASED, init=False)
    supported_gates: Tuple[str, ...] = field(default=_UNITARY_KINDS, init=False)
    _rng: np.random.Generator = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.max_qubits is None:
            self.max_qubits = config.DEFAULT.max_simulator_qubits
        self._rng = np.random.default_rng(self.seed)

    # ------------------------------------------------------------------
    def _lower(self, circuit: Circuit | QaoaCircuit) -> Circuit:
        if isinstance(circuit, QaoaCircuit):
            circuit = circuit.to_circuit()
        if not isinstance(circuit, Circuit):
            raise OperationError(
                "execute", f"{self.name} cannot execute {type(circuit).__name__}"
            )
        if circuit.num_qubits > self.max_qubits:
            raise OperationError(
                "execute",
                f"Circuit requires {circuit.num_qubits} qubits but {self.name} "
                f"supports maximum {self.max_qubits}",
            )
        return circuit

    def supports_operation(self, gate: Gate) -> bool:
        return gate.kind in self.supported_gates or gate.is_directive

    def apply_operation(self, gate: Gate, state: StateVector) -> StateVector:
        return simulator.apply_gate(gate, state)

    def initialize_state(self, num_qubits: int) -> StateVector:
        return simulator.init(num_qubits)

    def execute_to_state(self, circuit: Circuit | QaoaCircuit) -> StateVector:
        return simulator.run(self._lower(circuit))

    def execute(self, circuit: Circuit | QaoaCircuit, shots: int) -> ExecutionResult:
        lowered = self._lower(circuit)
        state = simulator.run(lowered)
        LOGGER.debug(
            "Sampling %d shots from %d-qubit state", shots, lowered.num_qubits
        )
        measurements = simulator.measure(state, shots, seed=self._rng)
        return ExecutionResult(
            num_shots=shots,
            measurements=measurements,
            backend_name=self.name,
            metadata={"backend_type": "local_statevector", "gate_count": lowered.gate_count},
        )


__all__ = ["LocalBackend"]
