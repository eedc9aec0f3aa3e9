"""QUBO and Ising encodings of combinatorial optimisation problems.

A QUBO assigns energy ``E(x) = Σ Q_ij x_i x_j`` to binary variables
``x ∈ {0, 1}``.  The equivalent Ising model uses spins ``s ∈ {-1, +1}``
with ``E(s) = Σ h_i s_i + Σ J_ij s_i s_j + offset``.  The substitution
``x = (1 + s) / 2`` maps one onto the other without changing energies.

QUBO matrices are sparse mappings ``{(i, j): Q_ij}``; either the upper
triangle or both triangles may be populated.  Assignments are mappings
``{variable: value}``; missing variables count as ``0``.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple

import numpy as np

Qubo = Mapping[Tuple[int, int], float]


@dataclass(frozen=True)
class IsingProblem:
    """Ising Hamiltonian with linear fields, couplings and a constant."""

    linear: Dict[int, float] = field(default_factory=dict)
    quadratic: Dict[Tuple[int, int], float] = field(default_factory=dict)
    offset: float = 0.0

    @property
    def num_variables(self) -> int:
        """Return ``1 + max index`` over all fields and couplings."""
        indices = set(self.linear)
        for i, j in self.quadratic:
            indices.update((i, j))
        return max(indices) + 1 if indices else 0

    def coupling_matrix(self, num_variables: int | None = None) -> Tuple[np.ndarray, np.ndarray]:
        """Return dense ``(h, J)`` arrays with ``J`` symmetric and zero diagonal."""

        n = self.num_variables if num_variables is None else num_variables
        h = np.zeros(n)
        J = np.zeros((n, n))
        for i, value in self.linear.items():
            h[i] += value
        for (i, j), value in self.quadratic.items():
            J[i, j] += value / 2.0
            J[j, i] += value / 2.0
        return h, J


def qubo_num_variables(qubo: Qubo) -> int:
    indices = {k for pair in qubo for k in pair}
    return max(indices) + 1 if indices else 0


def qubo_to_ising(qubo: Qubo) -> IsingProblem:
    """Convert a QUBO matrix into an equivalent :class:`IsingProblem`.

    Diagonal entries contribute ``Q_ii / 2`` to ``h_i`` and the offset.
    Off-diagonal entries contribute ``Q_ij / 4`` to ``h_i``, ``h_j``,
    ``J_ij`` (stored with ``i < j``) and the offset.
    """

    linear: Dict[int, float] = defaultdict(float)
    quadratic: Dict[Tuple[int, int], float] = defaultdict(float)
    offset = 0.0
    for (i, j), q in qubo.items():
        if i == j:
            linear[i] += q / 2.0
            offset += q / 2.0
        else:
            linear[i] += q / 4.0
            linear[j] += q / 4.0
            quadratic[(min(i, j), max(i, j))] += q / 4.0
            offset += q / 4.0
    return IsingProblem(dict(linear), dict(quadratic), offset)


def ising_to_qubo(spins: Mapping[int, int]) -> Dict[int, int]:
    """Map spins to binary values via ``x = (1 + s) / 2``."""
    return {i: (1 + s) // 2 for i, s in spins.items()}


def qubo_to_ising_solution(binary: Mapping[int, int]) -> Dict[int, int]:
    """Map binary values to spins via ``s = 2x - 1``."""
    return {i: 2 * x - 1 for i, x in binary.items()}


def ising_energy(problem: IsingProblem, spins: Mapping[int, int]) -> float:
    energy = sum(h * spins.get(i, 0) for i, h in problem.linear.items())
    energy += sum(
        J * spins.get(i, 0) * spins.get(j, 0) for (i, j), J in problem.quadratic.items()
    )
    return float(energy + problem.offset)


def qubo_energy(qubo: Qubo, binary: Mapping[int, int]) -> float:
    return float(sum(q * binary.get(i, 0) * binary.get(j, 0) for (i, j), q in qubo.items()))


def validate_spins(spins: Mapping[int, int]) -> None:
    """Raise ``ValueError`` naming every variable whose spin is not ``±1``."""

    invalid = [i for i, s in spins.items() if s not in (-1, 1)]
    if invalid:
        raise ValueError(f"Invalid spin values (must be -1 or +1) for qubits: {invalid}")


def validate_binary(binary: Mapping[int, int]) -> None:
    """Raise ``ValueError`` naming every variable whose value is not 0 or 1."""

    invalid = [i for i, x in binary.items() if x not in (0, 1)]
    if invalid:
        raise ValueError(f"Invalid binary values (must be 0 or 1) for qubits: {invalid}")


def verify_conversion(qubo: Qubo, binary: Mapping[int, int]) -> float:
    """Return ``|E_QUBO(x) - E_Ising(s(x))|``, which is zero up to rounding."""

    validate_binary(binary)
    spins = qubo_to_ising_solution(binary)
    validate_spins(spins)
    return abs(qubo_energy(qubo, binary) - ising_energy(qubo_to_ising(qubo), spins))


__all__ = [
    "IsingProblem",
    "Qubo",
    "qubo_num_variables",
    "qubo_to_ising",
    "ising_to_qubo",
    "qubo_to_ising_solution",
    "ising_energy",
    "qubo_energy",
    "validate_spins",
    "validate_binary",
    "verify_conversion",
]
