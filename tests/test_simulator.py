import math

import numpy as np
import pytest
from qiskit.quantum_info import Statevector

from qcore import config, simulator
from qcore.circuit import (
    Circuit,
    Gate,
    ccx,
    cnot,
    cz,
    h,
    rx,
    rz,
    swap,
    x,
    y,
    z,
)
from qcore.errors import InvalidGateError, InvalidQubitCountError, InvalidStateError

_ONE_QUBIT = ["H", "X", "Y", "Z", "S", "SDG", "T", "TDG"]
_ROTATIONS = ["RX", "RY", "RZ"]
_TWO_QUBIT = ["CNOT", "CZ", "SWAP"]
# Gate families available on narrow registers: one-qubit gates and
# rotations on one qubit, plus two-qubit gates on two.
_FAMILIES_BY_WIDTH = {1: 2, 2: 4}


def _random_circuit(num_qubits: int, num_gates: int, seed: int) -> Circuit:
    rng = np.random.default_rng(seed)
    gates = []
    for _ in range(num_gates):
        family = rng.integers(_FAMILIES_BY_WIDTH.get(num_qubits, 5))
        if family == 0:
            gates.append(Gate(str(rng.choice(_ONE_QUBIT)), (int(rng.integers(num_qubits)),)))
        elif family == 1:
            gates.append(
                Gate(
                    str(rng.choice(_ROTATIONS)),
                    (int(rng.integers(num_qubits)),),
                    (float(rng.uniform(-math.pi, math.pi)),),
                )
            )
        elif family == 2:
            q1, q2 = rng.choice(num_qubits, size=2, replace=False)
            gates.append(Gate(str(rng.choice(_TWO_QUBIT)), (int(q1), int(q2))))
        elif family == 3:
            q1, q2 = rng.choice(num_qubits, size=2, replace=False)
            gates.append(Gate("RZZ", (int(q1), int(q2)), (float(rng.uniform(-2, 2)),)))
        else:
            qs = rng.choice(num_qubits, size=3, replace=False)
            gates.append(Gate("CCX", tuple(int(q) for q in qs)))
    return Circuit(num_qubits, gates)


@pytest.mark.parametrize("n", [1, 2, 5, 10])
def test_init_is_all_zero_state(n):
    state = simulator.init(n)
    assert state.num_qubits == n
    assert state.dimension == 2**n
    assert simulator.get_amplitude(0, state) == 1
    assert np.count_nonzero(state.amplitudes) == 1


@pytest.mark.parametrize("n", [0, -1, 21])
def test_init_rejects_out_of_range_sizes(n):
    with pytest.raises(InvalidQubitCountError):
        simulator.init(n)


def test_init_limit_follows_config(monkeypatch):
    monkeypatch.setattr(config.DEFAULT, "max_simulator_qubits", 3)
    simulator.init(3)
    with pytest.raises(InvalidQubitCountError):
        simulator.init(4)


def test_states_are_read_only():
    state = simulator.init(2)
    with pytest.raises(ValueError):
        state.amplitudes[0] = 0
    after = simulator.apply_gate(h(0), state)
    assert simulator.get_amplitude(0, state) == 1
    assert after is not state


@pytest.mark.parametrize(
    ("num_qubits", "num_gates"),
    [(1, 30), (2, 40), (5, 60), (config.DEFAULT.max_simulator_qubits, 12)],
)
@pytest.mark.parametrize("seed", range(3))
def test_norm_is_preserved(num_qubits, num_gates, seed):
    circuit = _random_circuit(num_qubits, num_gates, seed)
    state = simulator.run(circuit)
    assert abs(simulator.norm(state) - 1.0) < 1e-10


@pytest.mark.parametrize("seed", range(3))
def test_matches_qiskit_statevector(seed):
    circuit = _random_circuit(4, 40, seed)
    ours = simulator.run(circuit).amplitudes
    reference = Statevector.from_instruction(circuit.to_qiskit()).data
    assert np.allclose(ours, reference, atol=1e-10)


@pytest.mark.parametrize(
    "gate",
    [h(0), x(1), y(2), z(0), cnot(0, 2), cnot(2, 1), cz(1, 2), swap(0, 2), ccx(2, 0, 1)],
)
def test_self_inverse_gates(gate):
    start = simulator.run(_random_circuit(3, 20, 11))
    twice = simulator.apply_gate(gate, simulator.apply_gate(gate, start))
    assert simulator.equals(start, twice, 1e-10)


def test_little_endian_basis_order():
    state = simulator.apply_gate(x(1), simulator.init(3))
    assert simulator.probability(0b010, state) == pytest.approx(1.0)
    state = simulator.apply_gate(cnot(1, 2), state)
    assert simulator.probability(0b110, state) == pytest.approx(1.0)


def test_toffoli_flips_target_only_when_both_controls_set():
    base = simulator.run(Circuit(3, [x(0), x(1)]))
    assert simulator.probability(0b111, simulator.apply_gate(ccx(0, 1, 2), base)) == pytest.approx(1)
    one_control = simulator.run(Circuit(3, [x(0)]))
    after = simulator.apply_gate(ccx(0, 1, 2), one_control)
    assert simulator.equals(after, one_control)


def test_rz_phase_convention():
    one = simulator.apply_gate(x(0), simulator.init(1))
    rotated = simulator.apply_gate(rz(0, math.pi / 2), one)
    assert simulator.get_amplitude(1, rotated) == pytest.approx(np.exp(1j * math.pi / 4))


def test_gate_outside_state_is_rejected():
    with pytest.raises(InvalidGateError):
        simulator.apply_gate(cnot(0, 3), simulator.init(2))


def test_directives_leave_state_unchanged():
    state = simulator.apply_gate(h(0), simulator.init(2))
    assert simulator.apply_gate(Gate("MEASURE", (0,)), state) is state
    assert simulator.apply_gate(Gate("BARRIER", (0, 1)), state) is state
    with pytest.raises(InvalidGateError):
        simulator.gate_matrix(Gate("MEASURE", (0,)))


def test_from_amplitudes_validates_input():
    plus = simulator.from_amplitudes([1 / math.sqrt(2), 1 / math.sqrt(2)])
    assert plus.num_qubits == 1
    with pytest.raises(InvalidStateError):
        simulator.from_amplitudes([1, 0, 0])
    with pytest.raises(InvalidStateError):
        simulator.from_amplitudes([1, 1])


def test_run_rejects_state_of_other_width():
    with pytest.raises(InvalidStateError):
        simulator.run(Circuit(2, [h(0)]), simulator.init(3))


def test_rotation_layer():
    state = simulator.apply_rotation_layer("x", [math.pi, 0.0], simulator.init(2))
    assert simulator.probability(0b01, state) == pytest.approx(1.0)
    with pytest.raises(InvalidStateError):
        simulator.apply_rotation_layer("x", [0.1], simulator.init(2))
    with pytest.raises(InvalidGateError):
        simulator.apply_rotation_layer("w", [0.1, 0.2], simulator.init(2))


def test_measure_is_reproducible_with_seed():
    bell = simulator.run(Circuit(2, [h(0), cnot(0, 1)]))
    first = simulator.measure(bell, 200, seed=42)
    second = simulator.measure(bell, 200, seed=42)
    assert first.shape == (200, 2)
    assert np.array_equal(first, second)
    assert np.array_equal(first[:, 0], first[:, 1])
    assert 0 < first[:, 0].sum() < 200


def test_measure_basis_state_is_deterministic():
    state = simulator.run(Circuit(3, [x(0), x(2)]))
    shots = simulator.measure(state, 10)
    assert (shots == np.array([1, 0, 1])).all()
    with pytest.raises(InvalidStateError):
        simulator.measure(state, -1)


def test_measure_qubit_collapses_state():
    bell = simulator.run(Circuit(2, [h(0), cnot(0, 1)]))
    outcome, collapsed = simulator.measure_qubit(bell, 0, seed=3)
    expected = 0b11 if outcome else 0b00
    assert simulator.probability(expected, collapsed) == pytest.approx(1.0)
    assert abs(simulator.norm(collapsed) - 1.0) < 1e-10


def test_rx_pi_matches_x_up_to_phase():
    via_rx = simulator.apply_gate(rx(0, math.pi), simulator.init(1))
    assert simulator.probability(1, via_rx) == pytest.approx(1.0)
