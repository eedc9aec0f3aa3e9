"""Dense state-vector simulation of qcore circuits.

Amplitudes are stored little-endian: bit ``i`` of a basis index is the value
of qubit ``i``.  Every function returns a new :class:`StateVector`; the
underlying arrays are read-only so a state handed out once can never change
underneath its owner.

Gates act on the tensor view of the state.  A ``k``-qubit gate matrix is
indexed with the gate's first qubit as least significant bit, contracted
against the ``k`` tensor axes it touches and moved back into place.  This
keeps every gate at ``O(2**n)`` work without materialising full-register
operators.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np

from . import config
from .circuit import Circuit, Gate
from .errors import InvalidGateError, InvalidQubitCountError, InvalidStateError


@dataclass(frozen=True, eq=False)
class StateVector:
    """Immutable amplitude vector of an ``n``-qubit register."""

    amplitudes: np.ndarray

    @property
    def num_qubits(self) -> int:
        return int(self.amplitudes.shape[0]).bit_length() - 1

    @property
    def dimension(self) -> int:
        return int(self.amplitudes.shape[0])

    def __len__(self) -> int:
        return self.dimension


def _freeze(data: np.ndarray) -> StateVector:
    data.flags.writeable = False
    return StateVector(data)


def _check_num_qubits(num_qubits: int) -> None:
    limit = config.DEFAULT.max_simulator_qubits
    if num_qubits < 1 or num_qubits > limit:
        raise InvalidQubitCountError(
            f"Number of qubits must be between 1 and {limit}, got {num_qubits}"
        )


# ----------------------------------------------------------------------
# Construction and queries
# ----------------------------------------------------------------------
def init(num_qubits: int) -> StateVector:
    """Return the all-zero basis state ``|0…0⟩`` on ``num_qubits`` qubits."""

    _check_num_qubits(num_qubits)
    data = np.zeros(1 << num_qubits, dtype=complex)
    data[0] = 1.0
    return _freeze(data)


def from_amplitudes(
    amplitudes: Sequence[complex], *, tolerance: float | None = None
) -> StateVector:
    """Wrap ``amplitudes`` in a :class:`StateVector` after validating it.

    Raises
    ------
    InvalidStateError
        If the length is not a power of two or the vector is not normalised.
    """

    data = np.array(amplitudes, dtype=complex).reshape(-1)
    n = int(data.shape[0]).bit_length() - 1
    if data.shape[0] == 0 or 1 << n != data.shape[0]:
        raise InvalidStateError("Statevector length is not a power of two")
    _check_num_qubits(n)
    tol = config.DEFAULT.norm_tolerance if tolerance is None else tolerance
    total = float(np.vdot(data, data).real)
    if abs(total - 1.0) > tol:
        raise InvalidStateError(f"Statevector is not normalised (norm² = {total})")
    return _freeze(data)


def norm(state: StateVector) -> float:
    """Return ``sqrt(Σ|amp|²)``."""
    return float(np.linalg.norm(state.amplitudes))


def _check_index(index: int, state: StateVector) -> None:
    if index < 0 or index >= state.dimension:
        raise InvalidStateError(
            f"Basis index {index} out of range for {state.num_qubits}-qubit state"
        )


def get_amplitude(index: int, state: StateVector) -> complex:
    _check_index(index, state)
    return complex(state.amplitudes[index])


def probability(index: int, state: StateVector) -> float:
    """Return the probability ``|amp_index|²`` of measuring basis ``index``."""
    _check_index(index, state)
    return float(abs(state.amplitudes[index]) ** 2)


def probabilities(state: StateVector) -> np.ndarray:
    return np.abs(state.amplitudes) ** 2


def equals(state1: StateVector, state2: StateVector, tolerance: float = 1e-10) -> bool:
    """Return ``True`` if both states agree amplitude-wise within ``tolerance``."""
    if state1.dimension != state2.dimension:
        return False
    return bool(np.all(np.abs(state1.amplitudes - state2.amplitudes) <= tolerance))


# ----------------------------------------------------------------------
# Gate matrices
# ----------------------------------------------------------------------
_SQRT_HALF = 1.0 / math.sqrt(2.0)

_FIXED_MATRICES: Dict[str, np.ndarray] = {
    "H": np.array([[1, 1], [1, -1]], dtype=complex) * _SQRT_HALF,
    "X": np.array([[0, 1], [1, 0]], dtype=complex),
    "Y": np.array([[0, -1j], [1j, 0]], dtype=complex),
    "Z": np.array([[1, 0], [0, -1]], dtype=complex),
    "S": np.array([[1, 0], [0, 1j]], dtype=complex),
    "SDG": np.array([[1, 0], [0, -1j]], dtype=complex),
    "T": np.array([[1, 0], [0, np.exp(1j * math.pi / 4)]], dtype=complex),
    "TDG": np.array([[1, 0], [0, np.exp(-1j * math.pi / 4)]], dtype=complex),
    # Two-qubit matrices index the first listed qubit as the low bit:
    # basis order |q1 q0⟩ = 00, 01, 10, 11.
    "CNOT": np.array(
        [[1, 0, 0, 0], [0, 0, 0, 1], [0, 0, 1, 0], [0, 1, 0, 0]], dtype=complex
    ),
    "CZ": np.diag([1, 1, 1, -1]).astype(complex),
    "SWAP": np.array(
        [[1, 0, 0, 0], [0, 0, 1, 0], [0, 1, 0, 0], [0, 0, 0, 1]], dtype=complex
    ),
}


def _ccx_matrix() -> np.ndarray:
    # Controls are bits 0 and 1, target bit 2: swap |011⟩ and |111⟩.
    matrix = np.eye(8, dtype=complex)
    matrix[[3, 7]] = matrix[[7, 3]]
    return matrix


_FIXED_MATRICES["CCX"] = _ccx_matrix()


def gate_matrix(gate: Gate) -> np.ndarray:
    """Return the unitary matrix of ``gate``.

    Raises
    ------
    InvalidGateError
        For ``MEASURE`` and ``BARRIER``, which have no unitary.
    """

    name = gate.gate
    if name in _FIXED_MATRICES:
        return _FIXED_MATRICES[name]
    if name in {"RX", "RY", "RZ", "RZZ"}:
        half = gate.theta / 2.0
        c, s = math.cos(half), math.sin(half)
        if name == "RX":
            return np.array([[c, -1j * s], [-1j * s, c]], dtype=complex)
        if name == "RY":
            return np.array([[c, -s], [s, c]], dtype=complex)
        if name == "RZ":
            return np.diag([np.exp(-1j * half), np.exp(1j * half)])
        return np.diag(
            [np.exp(-1j * half), np.exp(1j * half), np.exp(1j * half), np.exp(-1j * half)]
        )
    raise InvalidGateError(f"{name} has no unitary matrix")


# ----------------------------------------------------------------------
# Gate application
# ----------------------------------------------------------------------
def _apply_matrix(
    matrix: np.ndarray, qubits: Sequence[int], amplitudes: np.ndarray, n: int
) -> np.ndarray:
    k = len(qubits)
    psi = amplitudes.reshape([2] * n)
    # Axis 0 of the reshaped state is the most significant qubit.
    axes = [n - 1 - q for q in reversed(qubits)]
    op = matrix.reshape([2] * (2 * k))
    out = np.tensordot(op, psi, axes=(list(range(k, 2 * k)), axes))
    out = np.moveaxis(out, list(range(k)), axes)
    return np.ascontiguousarray(out).reshape(-1)


def _check_gate_qubits(gate: Gate, n: int) -> None:
    if len(set(gate.qubits)) != len(gate.qubits):
        raise InvalidGateError(f"{gate.gate} qubit indices must be distinct: {gate.qubits}")
    for q in gate.qubits:
        if q < 0 or q >= n:
            raise InvalidGateError(
                f"Qubit index {q} out of range for {n}-qubit state"
            )


def apply_gate(gate: Gate, state: StateVector) -> StateVector:
    """Return the state obtained by applying ``gate`` to ``state``.

    ``MEASURE`` and ``BARRIER`` leave the amplitudes unchanged; sampling is
    performed by :func:`measure`.
    """

    n = state.num_qubits
    _check_gate_qubits(gate, n)
    if gate.is_directive:
        return state
    data = _apply_matrix(gate_matrix(gate), gate.qubits, state.amplitudes, n)
    return _freeze(data)


def run(circuit: Circuit, state: StateVector | None = None) -> StateVector:
    """Apply every gate of ``circuit`` in order, starting from ``|0…0⟩``."""

    if state is None:
        state = init(circuit.num_qubits)
    elif state.num_qubits != circuit.num_qubits:
        raise InvalidStateError(
            f"Circuit has {circuit.num_qubits} qubits but state has {state.num_qubits}"
        )
    for gate in circuit.gates:
        state = apply_gate(gate, state)
    return state


def apply_rotation_layer(
    axis: str, angles: Sequence[float], state: StateVector
) -> StateVector:
    """Rotate qubit ``i`` about ``axis`` by ``angles[i]`` for every qubit.

    Raises
    ------
    InvalidStateError
        If ``len(angles)`` differs from the state's qubit count.
    """

    name = f"R{axis.upper()}"
    if name not in {"RX", "RY", "RZ"}:
        raise InvalidGateError(f"Unknown rotation axis '{axis}'")
    if len(angles) != state.num_qubits:
        raise InvalidStateError(
            f"Rotation layer needs {state.num_qubits} angles, got {len(angles)}"
        )
    for q, angle in enumerate(angles):
        state = apply_gate(Gate(name, (q,), (angle,)), state)
    return state


# ----------------------------------------------------------------------
# Measurement
# ----------------------------------------------------------------------
def _basis_bits(indices: np.ndarray, n: int) -> np.ndarray:
    shifts = np.arange(n, dtype=np.int64)
    return ((indices[:, None] >> shifts) & 1).astype(np.int8)


def measure(
    state: StateVector, shots: int, seed: int | np.random.Generator | None = None
) -> np.ndarray:
    """Sample ``shots`` computational-basis measurements.

    Returns an ``(shots, num_qubits)`` array where column ``i`` holds the
    measured value of qubit ``i``.  A fixed ``seed`` reproduces the samples;
    a :class:`numpy.random.Generator` is used as is.
    """

    if shots < 0:
        raise InvalidStateError(f"Number of shots must be non-negative, got {shots}")
    probs = probabilities(state)
    probs = probs / probs.sum()
    rng = np.random.default_rng(seed)
    indices = rng.choice(state.dimension, size=shots, p=probs)
    return _basis_bits(np.asarray(indices, dtype=np.int64), state.num_qubits)


def measure_qubit(
    state: StateVector, qubit: int, seed: int | np.random.Generator | None = None
) -> tuple[int, StateVector]:
    """Projectively measure ``qubit`` and return ``(outcome, collapsed_state)``."""

    n = state.num_qubits
    if qubit < 0 or qubit >= n:
        raise InvalidGateError(f"Qubit index {qubit} out of range for {n}-qubit state")
    mask = 1 << qubit
    indices = np.arange(state.dimension)
    is_one = (indices & mask) != 0
    p_one = float(np.sum(np.abs(state.amplitudes[is_one]) ** 2))
    rng = np.random.default_rng(seed)
    outcome = int(rng.random() < p_one)
    keep = is_one if outcome else ~is_one
    p_keep = p_one if outcome else 1.0 - p_one
    data = np.where(keep, state.amplitudes, 0.0).astype(complex) / math.sqrt(p_keep)
    return outcome, _freeze(data)


__all__ = [
    "StateVector",
    "init",
    "from_amplitudes",
    "norm",
    "get_amplitude",
    "probability",
    "probabilities",
    "equals",
    "gate_matrix",
    "apply_gate",
    "run",
    "apply_rotation_layer",
    "measure",
    "measure_qubit",
]
