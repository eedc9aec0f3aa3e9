"""Backend capability descriptions and automatic backend selection.

Capabilities are derived on demand from live backend objects.  The
performance score only serves to rank backends against each other: it grows
with the qubit limit, rewards gate variety on gate-based backends and is
halved when the backend's paradigm does not fit the evaluated circuit.
Backends without a qubit limit rank above every limited one.
"""

from __future__ import annotations

import logging
import math
import sys
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

from . import config
from .backends.annealing import SimulatedAnnealingBackend
from .backends.base import Backend, ExecutionResult, Paradigm
from .backends.local import LocalBackend
from .circuit import Circuit
from .errors import NoCompatibleBackendError
from .qaoa import QaoaCircuit

LOGGER = logging.getLogger(__name__)

Executable = Union[Circuit, QaoaCircuit]

#: Score multiplier for a backend whose paradigm does not fit the circuit.
MISMATCH_WEIGHT = 0.5

#: Qubit count standing in for an unlimited backend when scoring.
UNLIMITED_QUBITS = sys.maxsize


@dataclass(frozen=True)
class BackendCapability:
    """Comparable description of what a backend can run."""

    name: str
    paradigm: Paradigm
    max_qubits: int | None
    supported_gates: Tuple[str, ...]
    performance_score: float
    is_available: bool = True

    @property
    def is_unlimited(self) -> bool:
        return self.max_qubits is None


def detect_circuit_paradigm(circuit: Executable) -> Paradigm:
    """Return ``ANNEALING`` for QAOA wrappers and ``GATE_BASED`` otherwise."""
    if isinstance(circuit, QaoaCircuit):
        return Paradigm.ANNEALING
    return Paradigm.GATE_BASED


def _performance_score(
    paradigm: Paradigm,
    max_qubits: int | None,
    supported_gates: Sequence[str],
    circuit: Executable | None,
) -> float:
    qubits = UNLIMITED_QUBITS if max_qubits is None else max_qubits
    score = math.log2(1 + max(0, qubits))
    if paradigm is Paradigm.GATE_BASED:
        score += len(supported_gates) / 10.0
    if circuit is not None and detect_circuit_paradigm(circuit) is not paradigm:
        score *= MISMATCH_WEIGHT
    return score


def get_backend_capability(
    backend: Backend, circuit: Executable | None = None
) -> BackendCapability:
    """Describe ``backend``, optionally scored for running ``circuit``.

    A backend without a ``max_qubits`` attribute, or with ``None``, is
    treated as unlimited.  Annealing backends report no supported gates.
    """

    paradigm = Paradigm(backend.native_state_type)
    max_qubits = getattr(backend, "max_qubits", None)
    gates: Tuple[str, ...] = (
        () if paradigm is Paradigm.ANNEALING else tuple(getattr(backend, "supported_gates", ()))
    )
    return BackendCapability(
        name=backend.name,
        paradigm=paradigm,
        max_qubits=max_qubits,
        supported_gates=gates,
        performance_score=_performance_score(paradigm, max_qubits, gates, circuit),
    )


def can_execute_circuit(backend: Backend, circuit: Executable) -> bool:
    """Return ``True`` if paradigms match and the circuit fits the backend."""

    capability = get_backend_capability(backend, circuit)
    if capability.paradigm is not detect_circuit_paradigm(circuit):
        return False
    return capability.max_qubits is None or circuit.num_qubits <= capability.max_qubits


def _paradigm_label(paradigm: Paradigm) -> str:
    return "gate-based" if paradigm is Paradigm.GATE_BASED else "annealing"


def _ranked(
    backends: Iterable[Backend], circuit: Executable
) -> List[Tuple[Backend, BackendCapability]]:
    ranked = [
        (backend, get_backend_capability(backend, circuit))
        for backend in backends
        if can_execute_circuit(backend, circuit)
    ]
    # Unlimited backends first; stable sort keeps pool order among ties.
    ranked.sort(
        key=lambda item: (item[1].is_unlimited, item[1].performance_score),
        reverse=True,
    )
    return ranked


def select_best_backend(backends: Sequence[Backend], circuit: Executable) -> Backend:
    """Return the compatible backend with the highest performance score.

    Raises
    ------
    NoCompatibleBackendError
        If no backend in ``backends`` can execute ``circuit``.
    """

    ranked = _ranked(backends, circuit)
    if not ranked:
        raise NoCompatibleBackendError(
            f"No compatible backend found for "
            f"{_paradigm_label(detect_circuit_paradigm(circuit))} circuit with "
            f"{circuit.num_qubits} qubits"
        )
    return ranked[0][0]


def create_default_backend_pool() -> List[Backend]:
    """Return the local simulator and a simulated D-Wave annealer."""
    return [LocalBackend(), SimulatedAnnealingBackend()]


def get_backend_recommendations(
    circuit: Executable, backends: Sequence[Backend] | None = None
) -> List[Tuple[Backend, BackendCapability, str]]:
    """Return ``(backend, capability, rationale)`` for every compatible backend.

    Entries are sorted by descending performance score.  ``backends``
    defaults to :func:`create_default_backend_pool`.
    """

    pool = create_default_backend_pool() if backends is None else backends
    recommendations = []
    for backend, capability in _ranked(pool, circuit):
        limit = "unlimited" if capability.max_qubits is None else capability.max_qubits
        if capability.paradigm is Paradigm.ANNEALING:
            reason = f"Optimal for QAOA/annealing ({limit} qubits available)"
        else:
            reason = (
                f"Supports {len(capability.supported_gates)} gate types "
                f"({limit} qubits available)"
            )
        recommendations.append((backend, capability, reason))
    return recommendations


def format_backend_recommendations(
    circuit: Executable, backends: Sequence[Backend] | None = None
) -> str:
    """Return a numbered, human readable recommendation list."""

    lines = [
        f"Qubits: {circuit.num_qubits}",
        f"Paradigm: {detect_circuit_paradigm(circuit).value}",
    ]
    for i, (backend, capability, reason) in enumerate(
        get_backend_recommendations(circuit, backends), 1
    ):
        lines.append(f"{i}. {backend.name}")
        lines.append(f"   {reason}")
        lines.append(f"   Performance Score: {capability.performance_score:.2f}")
    return "\n".join(lines)


def detect_provider(target_id: str) -> str | None:
    """Return the hardware provider named by a target string, if any."""

    lowered = target_id.lower()
    for needle, provider in (
        ("ionq", "IonQ"),
        ("rigetti", "Rigetti"),
        ("quantinuum", "Quantinuum"),
        ("d-wave", "D-Wave"),
        ("dwave", "D-Wave"),
        ("local", "Local"),
    ):
        if needle in lowered:
            return provider
    return None


def execute_with_automatic_backend(
    circuit: Executable,
    shots: int | None = None,
    backends: Sequence[Backend] | None = None,
) -> ExecutionResult:
    """Select the best backend for ``circuit`` and execute it once.

    Backend errors propagate unchanged; no other backend is tried.
    """

    pool = create_default_backend_pool() if backends is None else backends
    backend = select_best_backend(pool, circuit)
    LOGGER.info("Auto-selected backend: %s", backend.name)
    return backend.execute(circuit, config.DEFAULT.default_shots if shots is None else shots)


async def execute_with_automatic_backend_async(
    circuit: Executable,
    shots: int | None = None,
    backends: Sequence[Backend] | None = None,
) -> ExecutionResult:
    """Asynchronous variant of :func:`execute_with_automatic_backend`.

    Selection runs synchronously; only the backend call is awaited.
    """

    pool = create_default_backend_pool() if backends is None else backends
    backend = select_best_backend(pool, circuit)
    LOGGER.info("Auto-selected backend: %s", backend.name)
    return await backend.execute_async(
        circuit, config.DEFAULT.default_shots if shots is None else shots
    )


__all__ = [
    "BackendCapability",
    "Executable",
    "detect_circuit_paradigm",
    "get_backend_capability",
    "can_execute_circuit",
    "select_best_backend",
    "create_default_backend_pool",
    "get_backend_recommendations",
    "format_backend_recommendations",
    "detect_provider",
    "execute_with_automatic_backend",
    "execute_with_automatic_backend_async",
]
