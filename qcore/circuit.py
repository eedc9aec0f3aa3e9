"""Circuit representation and interchange utilities for qcore."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Tuple, TYPE_CHECKING

from .errors import InvalidGateError

if TYPE_CHECKING:  # pragma: no cover - typing only
    from qiskit.circuit import QuantumCircuit


@dataclass(frozen=True)
class GateSpec:
    """Arity and parameter layout of a gate variant."""

    num_qubits: int | None
    params: Tuple[str, ...] = ()
    kind: str = ""


#: Closed set of gate variants understood by every qcore component.
#: ``num_qubits=None`` marks variadic directives (``BARRIER``).
GATE_SPECS: Dict[str, GateSpec] = {
    "H": GateSpec(1, kind="H"),
    "X": GateSpec(1, kind="X"),
    "Y": GateSpec(1, kind="Y"),
    "Z": GateSpec(1, kind="Z"),
    "S": GateSpec(1, kind="S"),
    "SDG": GateSpec(1, kind="SDG"),
    "T": GateSpec(1, kind="T"),
    "TDG": GateSpec(1, kind="TDG"),
    "RX": GateSpec(1, ("theta",), kind="Rx"),
    "RY": GateSpec(1, ("theta",), kind="Ry"),
    "RZ": GateSpec(1, ("theta",), kind="Rz"),
    "CNOT": GateSpec(2, kind="CNOT"),
    "CZ": GateSpec(2, kind="CZ"),
    "SWAP": GateSpec(2, kind="SWAP"),
    "RZZ": GateSpec(2, ("theta",), kind="RZZ"),
    "CCX": GateSpec(3, kind="CCX"),
    "MEASURE": GateSpec(1, kind="Measure"),
    "BARRIER": GateSpec(None, kind="Barrier"),
}

#: Gate names accepted as aliases when importing circuits.
GATE_ALIASES = {"CX": "CNOT", "TOFFOLI": "CCX", "M": "MEASURE"}

#: Kinds that are directives rather than unitaries.
DIRECTIVE_KINDS = frozenset({"Measure", "Barrier"})


@dataclass(frozen=True)
class Gate:
    """Single operation of a :class:`Circuit`.

    ``gate`` names one of the variants in :data:`GATE_SPECS`, ``qubits``
    carries exactly the indices the variant acts on and ``params`` its real
    valued angles.  Instances are validated on construction so a malformed
    gate can never enter a circuit.
    """

    gate: str
    qubits: Tuple[int, ...]
    params: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        name = GATE_ALIASES.get(self.gate.upper(), self.gate.upper())
        spec = GATE_SPECS.get(name)
        if spec is None:
            raise InvalidGateError(f"Unknown gate '{self.gate}'")
        qubits = tuple(int(q) for q in self.qubits)
        params = tuple(float(p) for p in self.params)
        if spec.num_qubits is not None and len(qubits) != spec.num_qubits:
            raise InvalidGateError(
                f"{name} acts on {spec.num_qubits} qubit(s), got {len(qubits)}"
            )
        if name == "BARRIER" and not qubits:
            raise InvalidGateError("BARRIER requires at least one qubit")
        if len(params) != len(spec.params):
            raise InvalidGateError(
                f"{name} expects {len(spec.params)} parameter(s), got {len(params)}"
            )
        if any(q < 0 for q in qubits):
            raise InvalidGateError(f"{name} has a negative qubit index: {qubits}")
        if len(set(qubits)) != len(qubits):
            raise InvalidGateError(f"{name} qubit indices must be distinct: {qubits}")
        object.__setattr__(self, "gate", name)
        object.__setattr__(self, "qubits", qubits)
        object.__setattr__(self, "params", params)

    @property
    def kind(self) -> str:
        """Gate-kind name used in backend gate sets (e.g. ``"Rx"``)."""
        return GATE_SPECS[self.gate].kind

    @property
    def theta(self) -> float:
        """Rotation angle of a parameterised gate."""
        if not self.params:
            raise InvalidGateError(f"{self.gate} has no rotation angle")
        return self.params[0]

    @property
    def is_directive(self) -> bool:
        return self.kind in DIRECTIVE_KINDS

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation of the gate."""

        data: Dict[str, Any] = {"gate": self.gate, "qubits": list(self.qubits)}
        if self.params:
            spec = GATE_SPECS[self.gate]
            data["params"] = dict(zip(spec.params, self.params))
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Gate":
        """Create a :class:`Gate` instance from a mapping."""

        params = data.get("params", ())
        if isinstance(params, Mapping):
            params = tuple(params.values())
        return cls(str(data["gate"]), tuple(data["qubits"]), tuple(params))


# Constructors -------------------------------------------------------------
def h(q: int) -> Gate:
    return Gate("H", (q,))


def x(q: int) -> Gate:
    return Gate("X", (q,))


def y(q: int) -> Gate:
    return Gate("Y", (q,))


def z(q: int) -> Gate:
    return Gate("Z", (q,))


def s(q: int) -> Gate:
    return Gate("S", (q,))


def sdg(q: int) -> Gate:
    return Gate("SDG", (q,))


def t(q: int) -> Gate:
    return Gate("T", (q,))


def tdg(q: int) -> Gate:
    return Gate("TDG", (q,))


def rx(q: int, theta: float) -> Gate:
    return Gate("RX", (q,), (theta,))


def ry(q: int, theta: float) -> Gate:
    return Gate("RY", (q,), (theta,))


def rz(q: int, theta: float) -> Gate:
    return Gate("RZ", (q,), (theta,))


def cnot(control: int, target: int) -> Gate:
    return Gate("CNOT", (control, target))


def cz(control: int, target: int) -> Gate:
    return Gate("CZ", (control, target))


def swap(q1: int, q2: int) -> Gate:
    return Gate("SWAP", (q1, q2))


def rzz(q1: int, q2: int, theta: float) -> Gate:
    return Gate("RZZ", (q1, q2), (theta,))


def ccx(control1: int, control2: int, target: int) -> Gate:
    return Gate("CCX", (control1, control2, target))


def measure(q: int) -> Gate:
    return Gate("MEASURE", (q,))


def barrier(*qubits: int) -> Gate:
    return Gate("BARRIER", tuple(qubits))


@dataclass(frozen=True)
class CircuitStats:
    """Statistical summary of a circuit used for validation and reporting."""

    num_qubits: int
    gate_count: int
    used_gates: Tuple[str, ...]
    two_qubit_gates: Tuple[Tuple[int, int], ...]
    measurement_count: int
    gate_counts: Dict[str, int] = field(default_factory=dict)


class Circuit:
    """Immutable gate sequence over a fixed number of qubits.

    Parameters
    ----------
    num_qubits:
        Register size.  Every gate must only reference indices below it.
    gates:
        Iterable of :class:`Gate` or dictionaries describing gates.

    Circuits are grown with :meth:`add_gate`, which returns a new circuit and
    leaves the receiver untouched.
    """

    __slots__ = ("_num_qubits", "_gates")

    def __init__(
        self,
        num_qubits: int,
        gates: Iterable[Gate | Mapping[str, Any]] = (),
    ) -> None:
        if num_qubits < 0:
            raise InvalidGateError(f"Circuit size must be non-negative, got {num_qubits}")
        self._num_qubits = int(num_qubits)
        checked: List[Gate] = []
        for gate in gates:
            if not isinstance(gate, Gate):
                gate = Gate.from_dict(gate)
            self._check_bounds(gate)
            checked.append(gate)
        self._gates: Tuple[Gate, ...] = tuple(checked)

    def _check_bounds(self, gate: Gate) -> None:
        for q in gate.qubits:
            if q >= self._num_qubits:
                raise InvalidGateError(
                    f"Qubit index {q} of {gate.gate} out of range for "
                    f"{self._num_qubits}-qubit circuit"
                )

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def empty(cls, num_qubits: int) -> "Circuit":
        return cls(num_qubits)

    def add_gate(self, gate: Gate) -> "Circuit":
        """Return a new circuit with ``gate`` appended."""
        self._check_bounds(gate)
        new = Circuit.__new__(Circuit)
        new._num_qubits = self._num_qubits
        new._gates = self._gates + (gate,)
        return new

    def add_gates(self, gates: Iterable[Gate]) -> "Circuit":
        """Return a new circuit with every gate of ``gates`` appended in order."""
        result = self
        for gate in gates:
            result = result.add_gate(gate)
        return result

    def with_gates(self, gates: Iterable[Gate]) -> "Circuit":
        """Return a circuit of the same width holding ``gates`` instead."""
        return Circuit(self._num_qubits, gates)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def num_qubits(self) -> int:
        """Number of qubits of the register."""
        return self._num_qubits

    @property
    def gates(self) -> Tuple[Gate, ...]:
        return self._gates

    @property
    def gate_count(self) -> int:
        """Number of gates in the circuit."""
        return len(self._gates)

    def __len__(self) -> int:
        return len(self._gates)

    def __iter__(self):
        return iter(self._gates)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Circuit):
            return NotImplemented
        return self._num_qubits == other._num_qubits and self._gates == other._gates

    def __hash__(self) -> int:
        return hash((self._num_qubits, self._gates))

    def __repr__(self) -> str:
        return f"Circuit(num_qubits={self._num_qubits}, gates={len(self._gates)})"

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------
    def gate_kinds(self) -> List[str]:
        """Return the distinct gate kinds in order of first use."""
        seen: Dict[str, None] = {}
        for gate in self._gates:
            seen.setdefault(gate.kind, None)
        return list(seen)

    def two_qubit_pairs(self) -> List[Tuple[int, int]]:
        """Return the ``(q1, q2)`` pair of every two-qubit gate in order."""
        return [
            (gate.qubits[0], gate.qubits[1])
            for gate in self._gates
            if len(gate.qubits) == 2 and not gate.is_directive
        ]

    def depth(self) -> int:
        """Return the layered depth of the circuit.

        Directives are ignored.  A gate starts one layer after the latest
        layer occupied by any of its qubits.
        """
        layers = [0] * self._num_qubits
        for gate in self._gates:
            if gate.is_directive:
                continue
            level = max(layers[q] for q in gate.qubits) + 1
            for q in gate.qubits:
                layers[q] = level
        return max(layers, default=0)

    def stats(self) -> CircuitStats:
        counts = Counter(gate.kind for gate in self._gates)
        return CircuitStats(
            num_qubits=self._num_qubits,
            gate_count=len(self._gates),
            used_gates=tuple(self.gate_kinds()),
            two_qubit_gates=tuple(self.two_qubit_pairs()),
            measurement_count=counts.get("Measure", 0),
            gate_counts=dict(counts),
        )

    # ------------------------------------------------------------------
    # Qiskit / OpenQASM interchange
    # ------------------------------------------------------------------
    def to_qiskit(self) -> "QuantumCircuit":
        """Return an equivalent Qiskit ``QuantumCircuit``.

        Qiskit uses the same little-endian qubit ordering as qcore so no
        reindexing takes place.  ``MEASURE`` gates write to a classical bit
        with the qubit's index.
        """

        from qiskit.circuit import QuantumCircuit

        has_measure = any(g.gate == "MEASURE" for g in self._gates)
        qc = (
            QuantumCircuit(self._num_qubits, self._num_qubits)
            if has_measure
            else QuantumCircuit(self._num_qubits)
        )
        for gate in self._gates:
            name = gate.gate
            q = gate.qubits
            if name == "CNOT":
                qc.cx(*q)
            elif name == "MEASURE":
                qc.measure(q[0], q[0])
            elif name == "BARRIER":
                qc.barrier(*q)
            elif gate.params:
                getattr(qc, name.lower())(*gate.params, *q)
            else:
                getattr(qc, name.lower())(*q)
        return qc

    @classmethod
    def from_qiskit(cls, circuit: "QuantumCircuit") -> "Circuit":
        """Build a :class:`Circuit` from a Qiskit ``QuantumCircuit``.

        Raises
        ------
        InvalidGateError
            If the Qiskit circuit contains an operation outside the qcore
            gate set.
        """
        gates: List[Gate] = []
        for ci in circuit.data:
            op = ci.operation
            qubits = tuple(circuit.find_bit(q).index for q in ci.qubits)
            params = tuple(float(p) for p in getattr(op, "params", ()) or ())
            gates.append(Gate(op.name.upper(), qubits, params))
        return cls(circuit.num_qubits, gates)

    @classmethod
    def from_qasm(cls, text: str) -> "Circuit":
        """Build a :class:`Circuit` from an OpenQASM 2 or 3 program string."""

        if text.lstrip().startswith("OPENQASM 3"):
            from qiskit_qasm3_import import api as qasm3_api

            qc = qasm3_api.parse(text)
        else:
            from qiskit import qasm2

            qc = qasm2.loads(text, custom_instructions=qasm2.LEGACY_CUSTOM_INSTRUCTIONS)
        return cls.from_qiskit(qc)

    def to_qasm(self) -> str:
        """Return the circuit as an OpenQASM 2 program string."""

        from qiskit import qasm2

        return qasm2.dumps(self.to_qiskit())


__all__ = [
    "GATE_SPECS",
    "Gate",
    "GateSpec",
    "Circuit",
    "CircuitStats",
    "h",
    "x",
    "y",
    "z",
    "s",
    "sdg",
    "t",
    "tdg",
    "rx",
    "ry",
    "rz",
    "cnot",
    "cz",
    "swap",
    "rzz",
    "ccx",
    "measure",
    "barrier",
]
