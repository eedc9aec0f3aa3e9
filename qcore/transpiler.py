"""Legalise circuits for a backend's native gate set.

Each gate is rewritten independently and in order, so the output keeps the
relative order of the input.  Gates that a backend supports pass through
unchanged; the rules in :mod:`qcore.decompositions` are applied otherwise.

Backend support matrix of the built-in profiles:

* IonQ (``X Y Z H Rx Ry Rz CNOT SWAP``): phase gates become ``RZ``, ``CZ``
  becomes ``H·CNOT·H`` and ``CCX`` the six-``CNOT`` ladder.
* Rigetti (adds ``CZ``): phase gates and ``CCX`` are rewritten.
* Local simulator: no rewriting.

Custom profiles are legalised per gate kind: only the kinds missing from
the profile are rewritten.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, List, Tuple

from .circuit import DIRECTIVE_KINDS, Circuit, Gate
from .decompositions import PHASE_DECOMPOSITIONS, decompose_ccx, decompose_cz
from .validator import BackendConstraints, get_constraints

LOGGER = logging.getLogger(__name__)


_PHASE_KINDS = frozenset(PHASE_DECOMPOSITIONS)
_REWRITABLE_KINDS = _PHASE_KINDS | {"CZ", "CCX"}


@dataclass(frozen=True)
class _Rewrites:
    """Gate kinds a target cannot execute and that must be rewritten."""

    kinds: FrozenSet[str]

    @classmethod
    def for_constraints(cls, constraints: BackendConstraints) -> "_Rewrites":
        return cls(frozenset(_REWRITABLE_KINDS - constraints.supported_gates))

    @classmethod
    def for_provider(cls, name: str) -> "_Rewrites":
        lowered = name.lower()
        if "ionq" in lowered:
            return cls(_REWRITABLE_KINDS)
        if "rigetti" in lowered:
            return cls(_PHASE_KINDS | {"CCX"})
        if "local" in lowered:
            return cls(frozenset())
        # Unknown backend: decompose everything.
        return cls(_REWRITABLE_KINDS)

    @property
    def phase_as_rz(self) -> bool:
        """Whether the Toffoli ladder must avoid ``T`` and ``TDG``."""
        return bool({"T", "TDG"} & self.kinds)

    def needed_by(self, gate: Gate) -> bool:
        return gate.kind in self.kinds


def _transpile_gate(rewrites: _Rewrites, gate: Gate) -> List[Gate]:
    if not rewrites.needed_by(gate):
        return [gate]
    if gate.gate in PHASE_DECOMPOSITIONS:
        replacement = PHASE_DECOMPOSITIONS[gate.gate](gate.qubits[0])
    elif gate.gate == "CZ":
        replacement = decompose_cz(*gate.qubits)
    else:
        replacement = decompose_ccx(*gate.qubits, phase_as_rz=rewrites.phase_as_rz)
    LOGGER.debug(
        "Rewrote %s%s into %d gate(s)", gate.gate, gate.qubits, len(replacement)
    )
    return replacement


def _apply(rewrites: _Rewrites, circuit: Circuit) -> Circuit:
    gates: List[Gate] = []
    for gate in circuit.gates:
        gates.extend(_transpile_gate(rewrites, gate))
    return circuit.with_gates(gates)


def transpile(constraints: BackendConstraints, circuit: Circuit) -> Circuit:
    """Return ``circuit`` rewritten into ``constraints.supported_gates``."""
    return _apply(_Rewrites.for_constraints(constraints), circuit)


def transpile_for_backend(backend_name: str, circuit: Circuit) -> Circuit:
    """Transpile ``circuit`` for a backend identified by name.

    ``backend_name`` is looked up in the profile registry first (either a
    target string such as ``"ionq.qpu"`` or a profile name such as
    ``"IonQ Hardware"``).  Unknown names fall back to provider detection by
    substring, and to decomposing every rewritable gate when no provider
    matches.
    """

    constraints = get_constraints(backend_name)
    if constraints is not None:
        return transpile(constraints, circuit)
    LOGGER.debug("No profile for '%s'; using provider defaults", backend_name)
    return _apply(_Rewrites.for_provider(backend_name), circuit)


def needs_transpilation(constraints: BackendConstraints, circuit: Circuit) -> bool:
    """Return ``True`` iff some gate kind of ``circuit`` is unsupported.

    Measurement and barrier directives are never considered unsupported.
    """

    return any(
        kind not in constraints.supported_gates
        for kind in circuit.gate_kinds()
        if kind not in DIRECTIVE_KINDS
    )


def get_transpilation_stats(
    constraints: BackendConstraints, circuit: Circuit
) -> Tuple[int, int, int]:
    """Return ``(original_count, transpiled_count, decomposed_count)``.

    ``decomposed_count`` is the number of gates added by rewriting, i.e.
    ``transpiled_count - original_count``.
    """

    original = circuit.gate_count
    transpiled = transpile(constraints, circuit).gate_count
    return original, transpiled, transpiled - original


__all__ = [
    "transpile",
    "transpile_for_backend",
    "needs_transpilation",
    "get_transpilation_stats",
]
