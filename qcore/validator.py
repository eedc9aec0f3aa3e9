"""Validate circuits against backend constraint profiles.

Validation never short-circuits: every check runs and all violations are
returned together so a caller can fix a circuit in one pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple, Union

from .circuit import DIRECTIVE_KINDS, Circuit
from .errors import CircuitValidationError


# ----------------------------------------------------------------------
# Constraint profiles
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class AllToAll:
    """Every qubit pair can be coupled directly."""

    def allows(self, q1: int, q2: int) -> bool:
        return True


@dataclass(frozen=True)
class Limited:
    """Only the listed undirected qubit pairs can be coupled."""

    edges: FrozenSet[Tuple[int, int]] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "edges", frozenset((int(a), int(b)) for a, b in self.edges)
        )

    def allows(self, q1: int, q2: int) -> bool:
        return (q1, q2) in self.edges or (q2, q1) in self.edges


Connectivity = Union[AllToAll, Limited]


@dataclass(frozen=True)
class BackendConstraints:
    """Named hardware profile a circuit is validated against."""

    name: str
    max_qubits: int
    supported_gates: FrozenSet[str]
    max_circuit_depth: int | None = None
    connectivity: Connectivity = field(default_factory=AllToAll)

    def __post_init__(self) -> None:
        object.__setattr__(self, "supported_gates", frozenset(self.supported_gates))


def create(
    name: str,
    max_qubits: int,
    supported_gates: Iterable[str],
    max_circuit_depth: int | None = None,
    connected_pairs: Iterable[Tuple[int, int]] | None = None,
) -> BackendConstraints:
    """Create a custom profile.

    ``connected_pairs=None`` denotes all-to-all connectivity.
    """

    connectivity: Connectivity = (
        AllToAll() if connected_pairs is None else Limited(frozenset(connected_pairs))
    )
    return BackendConstraints(
        name=name,
        max_qubits=max_qubits,
        supported_gates=frozenset(supported_gates),
        max_circuit_depth=max_circuit_depth,
        connectivity=connectivity,
    )


_IONQ_GATES = ("X", "Y", "Z", "H", "Rx", "Ry", "Rz", "CNOT", "SWAP")


def ionq_simulator() -> BackendConstraints:
    """IonQ simulator: 29 qubits, all-to-all, depth 100."""
    return create("IonQ Simulator", 29, _IONQ_GATES, 100)


def ionq_hardware() -> BackendConstraints:
    """IonQ Aria hardware: 11 qubits, all-to-all, depth 100."""
    return create("IonQ Hardware", 11, _IONQ_GATES, 100)


def rigetti_aspen_m3() -> BackendConstraints:
    """Rigetti Aspen-M-3: 79 qubits, linear coupling chain, depth 50."""
    return create(
        "Rigetti Aspen-M-3",
        79,
        _IONQ_GATES + ("CZ",),
        50,
        [(0, 1), (1, 2), (2, 3), (3, 4)],
    )


def local_simulator() -> BackendConstraints:
    """Local state-vector simulator: every qcore gate, no depth limit."""
    from . import config

    return create(
        "Local Simulator",
        config.DEFAULT.max_simulator_qubits,
        (
            "X", "Y", "Z", "H", "S", "SDG", "T", "TDG", "Rx", "Ry", "Rz",
            "RZZ", "CNOT", "CZ", "SWAP", "CCX",
        ),
    )


#: Azure-style target strings and their profile factories.
KNOWN_TARGETS = {
    "local": local_simulator,
    "local.simulator": local_simulator,
    "ionq.simulator": ionq_simulator,
    "ionq.qpu": ionq_hardware,
    "ionq.qpu.aria-1": ionq_hardware,
    "ionq.qpu.aria-2": ionq_hardware,
    "rigetti.sim.qvm": rigetti_aspen_m3,
    "rigetti.qpu.aspen-m-3": rigetti_aspen_m3,
}


def get_constraints(target: str) -> BackendConstraints | None:
    """Return the profile for a target string or profile name.

    Lookup is case-insensitive.  ``None`` is returned for unknown targets so
    callers can supply custom constraints.
    """

    key = target.strip().lower()
    factory = KNOWN_TARGETS.get(key)
    if factory is not None:
        return factory()
    for factory in dict.fromkeys(KNOWN_TARGETS.values()):
        profile = factory()
        if profile.name.lower() == key:
            return profile
    return None


# ----------------------------------------------------------------------
# Validation errors
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class ValidationError:
    """Base class of every constraint violation."""


@dataclass(frozen=True)
class QubitCountExceeded(ValidationError):
    requested: int
    limit: int
    backend: str


@dataclass(frozen=True)
class UnsupportedGate(ValidationError):
    gate: str
    backend: str
    supported: FrozenSet[str]


@dataclass(frozen=True)
class CircuitDepthExceeded(ValidationError):
    depth: int
    limit: int
    backend: str


@dataclass(frozen=True)
class ConnectivityViolation(ValidationError):
    qubit1: int
    qubit2: int
    backend: str


@dataclass(frozen=True)
class InvalidParameter(ValidationError):
    message: str


# ----------------------------------------------------------------------
# Checks
# ----------------------------------------------------------------------
def validate_qubit_count(
    constraints: BackendConstraints, circuit: Circuit
) -> List[ValidationError]:
    if circuit.num_qubits > constraints.max_qubits:
        return [
            QubitCountExceeded(circuit.num_qubits, constraints.max_qubits, constraints.name)
        ]
    return []


def validate_gate_set(
    constraints: BackendConstraints, circuit: Circuit
) -> List[ValidationError]:
    """Return one :class:`UnsupportedGate` per distinct unsupported kind."""

    return [
        UnsupportedGate(kind, constraints.name, constraints.supported_gates)
        for kind in circuit.gate_kinds()
        if kind not in DIRECTIVE_KINDS and kind not in constraints.supported_gates
    ]


def validate_circuit_depth(
    constraints: BackendConstraints, circuit: Circuit
) -> List[ValidationError]:
    limit = constraints.max_circuit_depth
    if limit is not None and circuit.gate_count > limit:
        return [CircuitDepthExceeded(circuit.gate_count, limit, constraints.name)]
    return []


def validate_connectivity(
    constraints: BackendConstraints, circuit: Circuit
) -> List[ValidationError]:
    """Return a violation for every two-qubit gate on an uncoupled pair."""

    return [
        ConnectivityViolation(q1, q2, constraints.name)
        for q1, q2 in circuit.two_qubit_pairs()
        if not constraints.connectivity.allows(q1, q2)
    ]


def validate_circuit(
    constraints: BackendConstraints, circuit: Circuit
) -> List[ValidationError]:
    """Run every check and return all violations; an empty list means valid."""

    errors: List[ValidationError] = []
    errors.extend(validate_qubit_count(constraints, circuit))
    errors.extend(validate_gate_set(constraints, circuit))
    errors.extend(validate_circuit_depth(constraints, circuit))
    errors.extend(validate_connectivity(constraints, circuit))
    return errors


def ensure_valid(constraints: BackendConstraints, circuit: Circuit) -> Circuit:
    """Return ``circuit`` unchanged or raise :class:`CircuitValidationError`."""

    errors = validate_circuit(constraints, circuit)
    if errors:
        raise CircuitValidationError(errors)
    return circuit


def validate_qaoa_parameters(
    depth: int, gammas: Sequence[float], betas: Sequence[float]
) -> List[ValidationError]:
    """Check that QAOA angle arrays match the number of layers."""

    errors: List[ValidationError] = []
    if len(gammas) != depth:
        errors.append(
            InvalidParameter(
                f"Gamma parameter array length ({len(gammas)}) must match QAOA depth ({depth})"
            )
        )
    if len(betas) != depth:
        errors.append(
            InvalidParameter(
                f"Beta parameter array length ({len(betas)}) must match QAOA depth ({depth})"
            )
        )
    return errors


# ----------------------------------------------------------------------
# Formatting
# ----------------------------------------------------------------------
def format_validation_error(error: ValidationError) -> str:
    """Return a user-facing message naming the backend and the numbers."""

    if isinstance(error, QubitCountExceeded):
        return (
            f"Circuit requires {error.requested} qubits but {error.backend} supports "
            f"maximum {error.limit} qubits. Please reduce circuit size or choose a "
            "different backend."
        )
    if isinstance(error, UnsupportedGate):
        supported = ", ".join(sorted(error.supported))
        return (
            f"Gate '{error.gate}' is not supported by {error.backend}. "
            f"Supported gates: {supported}"
        )
    if isinstance(error, CircuitDepthExceeded):
        return (
            f"Circuit depth of {error.depth} gates exceeds {error.backend} recommended "
            f"limit of {error.limit}. Consider circuit optimization or decomposition."
        )
    if isinstance(error, ConnectivityViolation):
        return (
            f"Two-qubit gate between qubits {error.qubit1} and {error.qubit2} violates "
            f"{error.backend} connectivity constraints. These qubits are not directly "
            "connected."
        )
    if isinstance(error, InvalidParameter):
        return f"Invalid parameter: {error.message}"
    raise TypeError(f"Unknown validation error {error!r}")


def format_validation_errors(errors: Sequence[ValidationError]) -> str:
    header = f"Circuit validation failed with {len(errors)} validation error(s):"
    lines = [f"{i}. {format_validation_error(err)}" for i, err in enumerate(errors, 1)]
    return "\n".join([header, *lines])


__all__ = [
    "AllToAll",
    "Limited",
    "BackendConstraints",
    "create",
    "ionq_simulator",
    "ionq_hardware",
    "rigetti_aspen_m3",
    "local_simulator",
    "KNOWN_TARGETS",
    "get_constraints",
    "ValidationError",
    "QubitCountExceeded",
    "UnsupportedGate",
    "CircuitDepthExceeded",
    "ConnectivityViolation",
    "InvalidParameter",
    "validate_qubit_count",
    "validate_gate_set",
    "validate_circuit_depth",
    "validate_connectivity",
    "validate_circuit",
    "ensure_valid",
    "validate_qaoa_parameters",
    "format_validation_error",
    "format_validation_errors",
]
