from __future__ import annotations

"""Simulated-annealing backend standing in for a D-Wave annealer."""

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import numpy as np

from .. import config
from ..errors import OperationError
from ..ising import IsingProblem, ising_energy, ising_to_qubo
from ..qaoa import QaoaCircuit
from .base import Backend, ExecutionResult, Paradigm

LOGGER = logging.getLogger(__name__)

#: Solver names and their qubit counts.
SOLVERS: Dict[str, int] = {
    "Advantage_system6.1": 5640,
    "Advantage_system4.1": 5627,
    "Advantage2_prototype": 1200,
}


@dataclass(frozen=True)
class AnnealingSample:
    """Distinct spin configuration and how often it was read."""

    spins: Dict[int, int]
    energy: float
    num_occurrences: int


@dataclass(frozen=True)
class AnnealingSamples:
    """Backend state of an annealer: the problem and its samples by energy."""

    problem: IsingProblem
    samples: Tuple[AnnealingSample, ...] = ()


def anneal(
    problem: IsingProblem,
    num_variables: int,
    num_reads: int,
    *,
    steps: int | None = None,
    initial_temperature: float = 10.0,
    cooling_rate: float = 0.95,
    seed: int | np.random.Generator | None = None,
) -> List[AnnealingSample]:
    """Draw ``num_reads`` low-energy spin configurations of ``problem``.

    Every read starts from random spins and performs ``steps`` single-spin
    Metropolis updates under a geometric cooling schedule.  Identical
    configurations are merged and the result is sorted by energy.
    """

    num_steps = config.DEFAULT.annealing_steps if steps is None else steps
    rng = np.random.default_rng(seed)
    h, J = problem.coupling_matrix(num_variables)
    reads: List[Tuple[int, ...]] = []
    for _ in range(num_reads):
        s = rng.choice(np.array([-1, 1]), size=num_variables)
        temperature = initial_temperature
        for _ in range(num_steps):
            i = int(rng.integers(num_variables))
            delta = -2.0 * s[i] * (h[i] + 2.0 * float(J[i] @ s))
            if delta < 0.0 or rng.random() < math.exp(-delta / temperature):
                s[i] = -s[i]
            temperature *= cooling_rate
        reads.append(tuple(int(v) for v in s))

    samples = []
    for spins, count in Counter(reads).items():
        mapping = dict(enumerate(spins))
        samples.append(AnnealingSample(mapping, ising_energy(problem, mapping), count))
    samples.sort(key=lambda sample: sample.energy)
    return samples


@dataclass
class SimulatedAnnealingBackend(Backend):
    """Mock D-Wave annealer solving QAOA cost Hamiltonians classically.

    Only :class:`~qcore.qaoa.QaoaCircuit` inputs are accepted; the gate
    content of a circuit is meaningless to an annealer.
    """

    solver: str = "Advantage_system6.1"
    seed: int | None = None
    steps: int | None = None
    name: str = field(init=False)
    max_qubits: int | None = field(init=False)
    native_state_type: Paradigm = field(default=Paradigm.ANNEALING, init=False)
    supported_gates: Tuple[str, ...] = field(default=(), init=False)
    _rng: np.random.Generator = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.solver not in SOLVERS:
            raise ValueError(
                f"Unknown D-Wave solver '{self.solver}'. Available: {sorted(SOLVERS)}"
            )
        self.name = f"Mock D-Wave {self.solver}"
        self.max_qubits = SOLVERS[self.solver]
        self._rng = np.random.default_rng(self.seed)

    # ------------------------------------------------------------------
    def _problem_of(self, circuit: Any) -> QaoaCircuit:
        if not isinstance(circuit, QaoaCircuit):
            raise OperationError(
                "execute",
                f"{self.name} only executes QAOA circuits, got {type(circuit).__name__}",
            )
        if circuit.num_qubits > self.max_qubits:
            raise OperationError(
                "execute",
                f"Problem requires {circuit.num_qubits} qubits, but {self.solver} "
                f"supports max {self.max_qubits}",
            )
        return circuit

    def supports_operation(self, gate: Any) -> bool:
        return False

    def apply_operation(self, gate: Any, state: Any) -> Any:
        raise OperationError(
            "apply_operation", "annealing backends only support full circuit execution"
        )

    def initialize_state(self, num_qubits: int) -> AnnealingSamples:
        return AnnealingSamples(IsingProblem())

    def execute_to_state(self, circuit: Any) -> AnnealingSamples:
        qaoa = self._problem_of(circuit)
        samples = anneal(
            qaoa.problem, qaoa.num_qubits, 1, steps=self.steps, seed=self._rng
        )
        return AnnealingSamples(qaoa.problem, tuple(samples))

    def execute(self, circuit: Any, shots: int) -> ExecutionResult:
        if shots <= 0:
            raise OperationError("execute", f"shots must be positive, got {shots}")
        qaoa = self._problem_of(circuit)
        n = qaoa.num_qubits
        samples = anneal(qaoa.problem, n, shots, steps=self.steps, seed=self._rng)
        LOGGER.debug(
            "Annealed %d reads into %d distinct samples", shots, len(samples)
        )
        rows = []
        for sample in samples:
            binary = ising_to_qubo(sample.spins)
            rows.extend([[binary[i] for i in range(n)]] * sample.num_occurrences)
        return ExecutionResult(
            num_shots=shots,
            measurements=np.asarray(rows, dtype=np.int8),
            backend_name=self.name,
            metadata={
                "backend_type": "mock_dwave",
                "solver": self.solver,
                "best_energy": samples[0].energy,
                "num_solutions": len(samples),
            },
        )


__all__ = [
    "AnnealingSample",
    "AnnealingSamples",
    "SOLVERS",
    "SimulatedAnnealingBackend",
    "anneal",
]
