import numpy as np
import pytest

from qcore import simulator
from qcore.backends import LocalBackend, Paradigm
from qcore.circuit import Circuit, cnot, h, measure, x
from qcore.errors import OperationError


def test_contract_attributes():
    backend = LocalBackend()
    assert backend.name == "Local Simulator"
    assert backend.native_state_type is Paradigm.GATE_BASED
    assert backend.max_qubits == 20
    assert backend.supports_operation(h(0))
    assert backend.supports_operation(measure(0))
    assert "Measure" not in backend.supported_gates


def test_incremental_application_matches_execute_to_state():
    backend = LocalBackend()
    circuit = Circuit(2, [h(0), cnot(0, 1)])
    state = backend.initialize_state(2)
    for gate in circuit.gates:
        state = backend.apply_operation(gate, state)
    assert simulator.equals(state, backend.execute_to_state(circuit))


def test_seeded_backend_reproduces_runs():
    circuit = Circuit(3, [h(0), h(1), h(2)])
    first = LocalBackend(seed=9)
    second = LocalBackend(seed=9)
    a1, a2 = first.execute(circuit, 40), first.execute(circuit, 40)
    b1, b2 = second.execute(circuit, 40), second.execute(circuit, 40)
    assert np.array_equal(a1.measurements, b1.measurements)
    assert np.array_equal(a2.measurements, b2.measurements)
    assert not np.array_equal(a1.measurements, a2.measurements)


def test_execute_reports_metadata():
    result = LocalBackend().execute(Circuit(2, [x(1)]), 5)
    assert result.num_shots == 5
    assert result.measurements.tolist() == [[0, 1]] * 5
    assert result.metadata["gate_count"] == 1


def test_oversized_circuit_is_rejected():
    with pytest.raises(OperationError, match="supports maximum 2"):
        LocalBackend(max_qubits=2).execute(Circuit.empty(3), 1)


def test_unknown_input_type_is_rejected():
    with pytest.raises(OperationError):
        LocalBackend().execute("not a circuit", 1)
