"""Gate decomposition utilities for qcore.

This module provides the rewrite rules used by :mod:`qcore.transpiler` to
express gates in terms of a smaller gate set.  Each rule is exact up to a
global phase, so measurement statistics are preserved.
"""

from __future__ import annotations

import math
from typing import List

from .circuit import Gate, cnot, h, rz, t, tdg


def decompose_s(qubit: int) -> List[Gate]:
    """Return ``S`` as ``RZ(π/2)``."""
    return [rz(qubit, math.pi / 2)]


def decompose_sdg(qubit: int) -> List[Gate]:
    """Return ``S†`` as ``RZ(-π/2)``."""
    return [rz(qubit, -math.pi / 2)]


def decompose_t(qubit: int) -> List[Gate]:
    """Return ``T`` as ``RZ(π/4)``."""
    return [rz(qubit, math.pi / 4)]


def decompose_tdg(qubit: int) -> List[Gate]:
    """Return ``T†`` as ``RZ(-π/4)``."""
    return [rz(qubit, -math.pi / 4)]


PHASE_DECOMPOSITIONS = {
    "S": decompose_s,
    "SDG": decompose_sdg,
    "T": decompose_t,
    "TDG": decompose_tdg,
}


def decompose_cz(control: int, target: int) -> List[Gate]:
    """Return ``CZ`` as ``H·CNOT·H`` conjugation on the target."""
    return [h(target), cnot(control, target), h(target)]


def decompose_ccx(
    control1: int, control2: int, target: int, *, phase_as_rz: bool = False
) -> List[Gate]:
    """Return a decomposition of a Toffoli (``CCX``) gate.

    The returned sequence consists solely of single- and two-qubit gates
    (``H``, ``T``, ``CNOT`` and ``TDG``) as commonly used for a fault-tolerant
    implementation of the Toffoli gate: six ``CNOT`` gates and seven phase
    gates.

    Parameters
    ----------
    control1, control2, target:
        Indices of the first control, second control and target qubits.
    phase_as_rz:
        Emit ``RZ(±π/4)`` instead of ``T``/``TDG`` for targets without
        native phase gates.
    """

    gates = [
        h(target),
        cnot(control2, target),
        tdg(target),
        cnot(control1, target),
        t(target),
        cnot(control2, target),
        tdg(target),
        cnot(control1, target),
        t(control2),
        t(target),
        h(target),
        cnot(control1, control2),
        t(control1),
        tdg(control2),
        cnot(control1, control2),
    ]
    if not phase_as_rz:
        return gates
    expanded: List[Gate] = []
    for gate in gates:
        rule = PHASE_DECOMPOSITIONS.get(gate.gate)
        expanded.extend(rule(gate.qubits[0]) if rule else [gate])
    return expanded


__all__ = [
    "PHASE_DECOMPOSITIONS",
    "decompose_s",
    "decompose_sdg",
    "decompose_t",
    "decompose_tdg",
    "decompose_cz",
    "decompose_ccx",
]
