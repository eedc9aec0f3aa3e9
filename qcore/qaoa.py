"""QAOA circuit wrapper.

:class:`QaoaCircuit` keeps the cost Hamiltonian alongside the variational
angles so that annealing backends can solve the underlying Ising problem
directly, while gate-based backends lower it with :meth:`QaoaCircuit.to_circuit`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .circuit import Circuit, Gate, h, rx, rz, rzz
from .errors import CircuitValidationError, InvalidQubitCountError, NotImplementedFeatureError
from .ising import IsingProblem, Qubo, qubo_num_variables, qubo_to_ising
from .validator import validate_qaoa_parameters

#: Mixer Hamiltonians that can be lowered to gates.
SUPPORTED_MIXERS = ("x",)


@dataclass(frozen=True)
class QaoaCircuit:
    """Cost Hamiltonian plus ``p`` layers of ``(gamma, beta)`` angles.

    Parameters
    ----------
    problem:
        Ising cost Hamiltonian.  Variable ``i`` is carried by qubit ``i``.
    num_qubits:
        Register size; must cover every variable of ``problem``.
    gammas, betas:
        Cost and mixer angles, one of each per layer.
    depth:
        Number of layers.  Defaults to ``len(gammas)``.
    mixer:
        Mixer Hamiltonian.  Only the transverse-field ``"x"`` mixer is
        available.

    Raises
    ------
    CircuitValidationError
        If the angle arrays do not match ``depth``.
    InvalidQubitCountError
        If ``num_qubits`` is too small for ``problem``.
    NotImplementedFeatureError
        For any mixer other than ``"x"``.
    """

    problem: IsingProblem
    num_qubits: int
    gammas: Tuple[float, ...]
    betas: Tuple[float, ...]
    depth: int | None = None
    mixer: str = "x"

    def __post_init__(self) -> None:
        object.__setattr__(self, "gammas", tuple(float(g) for g in self.gammas))
        object.__setattr__(self, "betas", tuple(float(b) for b in self.betas))
        if self.depth is None:
            object.__setattr__(self, "depth", len(self.gammas))
        errors = validate_qaoa_parameters(self.depth, self.gammas, self.betas)
        if errors:
            raise CircuitValidationError(errors)
        if self.num_qubits < max(1, self.problem.num_variables):
            raise InvalidQubitCountError(
                f"QAOA problem has {self.problem.num_variables} variables but the "
                f"circuit only has {self.num_qubits} qubits"
            )
        if self.mixer.lower() not in SUPPORTED_MIXERS:
            raise NotImplementedFeatureError(
                f"QAOA mixer '{self.mixer}'",
                "only the transverse-field 'x' mixer can be lowered to gates",
            )

    @classmethod
    def from_qubo(
        cls,
        qubo: Qubo,
        gammas: Sequence[float],
        betas: Sequence[float],
        num_qubits: int | None = None,
    ) -> "QaoaCircuit":
        """Build a QAOA circuit whose cost Hamiltonian encodes ``qubo``."""

        n = qubo_num_variables(qubo) if num_qubits is None else num_qubits
        return cls(qubo_to_ising(qubo), n, tuple(gammas), tuple(betas))

    @property
    def gate_count(self) -> int:
        return self.to_circuit().gate_count

    def to_circuit(self) -> Circuit:
        """Lower to gates: an ``H`` layer then ``depth`` cost/mixer layers.

        A cost layer applies ``RZ(2γh_i)`` for each field and ``RZZ(2γJ_ij)``
        for each coupling, a mixer layer ``RX(2β)`` on every qubit.
        """

        gates: list[Gate] = [h(q) for q in range(self.num_qubits)]
        for gamma, beta in zip(self.gammas, self.betas):
            for i, field_ in sorted(self.problem.linear.items()):
                if field_:
                    gates.append(rz(i, 2.0 * gamma * field_))
            for (i, j), coupling in sorted(self.problem.quadratic.items()):
                if coupling:
                    gates.append(rzz(i, j, 2.0 * gamma * coupling))
            gates.extend(rx(q, 2.0 * beta) for q in range(self.num_qubits))
        return Circuit(self.num_qubits, gates)


__all__ = ["QaoaCircuit", "SUPPORTED_MIXERS"]
