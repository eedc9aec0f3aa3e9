import numpy as np
import pytest

from qcore import simulator
from qcore.backends import LocalBackend, SimulatedAnnealingBackend
from qcore.errors import CircuitValidationError, InvalidQubitCountError, NotImplementedFeatureError
from qcore.ising import IsingProblem, qubo_energy
from qcore.qaoa import QaoaCircuit

PROBLEM = IsingProblem({0: 1.0}, {(0, 1): 0.5})


def test_layers_must_match_depth():
    with pytest.raises(CircuitValidationError) as info:
        QaoaCircuit(PROBLEM, 2, [0.1], [0.2, 0.3], depth=2)
    assert "Gamma parameter array length (1) must match QAOA depth (2)" in str(info.value)
    with pytest.raises(CircuitValidationError, match="Beta parameter array length"):
        QaoaCircuit(PROBLEM, 2, [0.1, 0.2], [0.3])


def test_register_must_cover_problem():
    with pytest.raises(InvalidQubitCountError):
        QaoaCircuit(PROBLEM, 1, [0.1], [0.2])


def test_only_x_mixer_is_available():
    with pytest.raises(NotImplementedFeatureError) as info:
        QaoaCircuit(PROBLEM, 2, [0.1], [0.2], mixer="xy")
    assert info.value.feature == "QAOA mixer 'xy'"


def test_lowering_layout():
    qaoa = QaoaCircuit(PROBLEM, 3, [0.1, 0.2], [0.3, 0.4])
    circ = qaoa.to_circuit()
    names = [g.gate for g in circ.gates]
    assert names[:3] == ["H", "H", "H"]
    assert names[3:8] == ["RZ", "RZZ", "RX", "RX", "RX"]
    assert circ.gate_count == 3 + 2 * 5
    assert circ.gates[3].theta == pytest.approx(2 * 0.1 * 1.0)
    assert circ.gates[4].theta == pytest.approx(2 * 0.1 * 0.5)
    assert circ.gates[-1].theta == pytest.approx(2 * 0.4)


def test_zero_angles_give_uniform_distribution():
    qaoa = QaoaCircuit(PROBLEM, 2, [0.0], [0.0])
    probs = simulator.probabilities(LocalBackend().execute_to_state(qaoa))
    assert np.allclose(probs, 0.25)


def test_local_backend_lowers_qaoa():
    qaoa = QaoaCircuit.from_qubo({(0, 0): -1.0, (0, 1): 2.0}, [0.4], [0.6])
    assert qaoa.num_qubits == 2
    result = LocalBackend(seed=1).execute(qaoa, 30)
    assert result.measurements.shape == (30, 2)


def test_annealer_finds_ground_state():
    qubo = {(0, 0): -1.0, (1, 1): -1.0, (0, 1): 2.0}
    qaoa = QaoaCircuit.from_qubo(qubo, [0.1], [0.2])
    result = SimulatedAnnealingBackend(seed=7).execute(qaoa, 50)
    assert result.measurements.shape == (50, 2)
    energies = [qubo_energy(qubo, dict(enumerate(row.tolist()))) for row in result.measurements]
    assert min(energies) == pytest.approx(-1.0)
    assert energies[0] == pytest.approx(-1.0)
    assert result.metadata["best_energy"] == pytest.approx(-1.0)
    assert result.metadata["backend_type"] == "mock_dwave"
