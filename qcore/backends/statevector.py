from __future__ import annotations

"""Statevector backend powered by Qiskit Aer."""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
from qiskit.quantum_info import Statevector
from qiskit_aer import AerSimulator

from .. import simulator
from ..circuit import Circuit, Gate
from ..errors import OperationError
from ..qaoa import QaoaCircuit
from ..simulator import StateVector
from .base import Backend, ExecutionResult, Paradigm
from .local import _UNITARY_KINDS


@dataclass
class AerStatevectorBackend(Backend):
    """Backend that converts circuits to Qiskit and evaluates them via Aer.

    Qiskit orders qubits little-endian like qcore, so Aer statevectors are
    returned without reindexing.

    Parameters
    ----------
    method:
        Aer simulation method to use.  The default is ``"statevector"``.  A
        :class:`ValueError` is raised if an unsupported method is requested.
    max_qubits:
        Optional register limit reported to backend selection.
    seed:
        Seeds the generator that draws ``seed_simulator`` for every run.
    """

    name: str = "Qiskit Aer Statevector"
    method: str = "statevector"
    max_qubits: int | None = None
    seed: int | None = None
    native_state_type: Paradigm = field(default=Paradigm.GATE_BASED, init=False)
    supported_gates: Tuple[str, ...] = field(default=_UNITARY_KINDS, init=False)
    _rng: np.random.Generator = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:  # pragma: no cover - trivial
        available = AerSimulator().available_methods()
        if self.method not in available:
            raise ValueError(
                f"Unsupported Aer method '{self.method}'. Available: {available}"
            )
        self._rng = np.random.default_rng(self.seed)

    # ------------------------------------------------------------------
    def _unitary_part(self, circuit: Circuit | QaoaCircuit) -> Circuit:
        if isinstance(circuit, QaoaCircuit):
            circuit = circuit.to_circuit()
        if not isinstance(circuit, Circuit):
            raise OperationError(
                "execute", f"{self.name} cannot execute {type(circuit).__name__}"
            )
        if self.max_qubits is not None and circuit.num_qubits > self.max_qubits:
            raise OperationError(
                "execute",
                f"Circuit requires {circuit.num_qubits} qubits but {self.name} "
                f"supports maximum {self.max_qubits}",
            )
        return circuit.with_gates(g for g in circuit.gates if g.gate != "MEASURE")

    def supports_operation(self, gate: Gate) -> bool:
        return gate.kind in self.supported_gates or gate.is_directive

    def apply_operation(self, gate: Gate, state: StateVector) -> StateVector:
        single = Circuit(state.num_qubits, [gate])
        evolved = Statevector(np.asarray(state.amplitudes)).evolve(single.to_qiskit())
        return simulator.from_amplitudes(evolved.data)

    def initialize_state(self, num_qubits: int) -> StateVector:
        return simulator.init(num_qubits)

    def execute_to_state(self, circuit: Circuit | QaoaCircuit) -> StateVector:
        qc = self._unitary_part(circuit).to_qiskit()
        qc.save_statevector()
        result = AerSimulator(method=self.method).run(qc).result()
        return simulator.from_amplitudes(np.asarray(result.get_statevector(qc)))

    def execute(self, circuit: Circuit | QaoaCircuit, shots: int) -> ExecutionResult:
        unitary = self._unitary_part(circuit)
        qc = unitary.to_qiskit()
        qc.measure_all()
        sim = AerSimulator(method=self.method)
        options = {"shots": shots, "memory": True}
        if self.seed is not None:
            options["seed_simulator"] = int(self._rng.integers(2**31))
        result = sim.run(qc, **options).result()
        n = unitary.num_qubits
        # Memory strings list clbit n-1 first.
        rows = [[int(bits[n - 1 - i]) for i in range(n)] for bits in result.get_memory(qc)]
        measurements = np.asarray(rows, dtype=np.int8).reshape(len(rows), n)
        return ExecutionResult(
            num_shots=shots,
            measurements=measurements,
            backend_name=self.name,
            metadata={"backend_type": "aer", "method": self.method},
        )


__all__ = ["AerStatevectorBackend"]
