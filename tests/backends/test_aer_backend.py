import math

import numpy as np
import pytest

from qcore import simulator
from qcore.backends import AerStatevectorBackend, LocalBackend
from qcore.circuit import Circuit, ccx, cnot, cz, h, measure, rx, rz, rzz, s, swap, t
from qcore.errors import OperationError


def _sample_circuit() -> Circuit:
    return Circuit(
        4,
        [
            h(0),
            rx(1, 0.3),
            cnot(0, 2),
            rzz(1, 3, 1.1),
            s(2),
            t(3),
            cz(0, 3),
            ccx(0, 1, 3),
            swap(1, 2),
            rz(0, -math.pi / 3),
            measure(0),
        ],
    )


def test_aer_state_matches_local_engine():
    circuit = _sample_circuit()
    aer = AerStatevectorBackend().execute_to_state(circuit)
    local = LocalBackend().execute_to_state(circuit)
    assert simulator.equals(aer, local, 1e-8)


def test_apply_operation_matches_local_engine():
    backend = AerStatevectorBackend()
    state = backend.initialize_state(3)
    for gate in [h(0), cnot(0, 1), rzz(1, 2, 0.4), t(2)]:
        state = backend.apply_operation(gate, state)
    expected = simulator.run(Circuit(3, [h(0), cnot(0, 1), rzz(1, 2, 0.4), t(2)]))
    assert simulator.equals(state, expected, 1e-8)


def test_sampled_bits_are_little_endian():
    backend = AerStatevectorBackend(seed=4)
    result = backend.execute(Circuit(3, [h(0), cnot(0, 1), measure(0)]), 100)
    m = result.measurements
    assert m.shape == (100, 3)
    assert np.array_equal(m[:, 0], m[:, 1])
    assert not m[:, 2].any()


def test_seeded_sampling_is_reproducible():
    circuit = Circuit(2, [h(0), h(1)])
    a = AerStatevectorBackend(seed=11).execute(circuit, 64)
    b = AerStatevectorBackend(seed=11).execute(circuit, 64)
    assert np.array_equal(a.measurements, b.measurements)


def test_invalid_method_is_rejected():
    with pytest.raises(ValueError):
        AerStatevectorBackend(method="no_such_method")


def test_qubit_limit():
    with pytest.raises(OperationError):
        AerStatevectorBackend(max_qubits=2).execute_to_state(Circuit.empty(3))
