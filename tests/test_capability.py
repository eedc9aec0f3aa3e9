import asyncio
import logging

import numpy as np
import pytest

from qcore.backends import Backend, LocalBackend, Paradigm, SimulatedAnnealingBackend
from qcore.capability import (
    can_execute_circuit,
    create_default_backend_pool,
    detect_circuit_paradigm,
    detect_provider,
    execute_with_automatic_backend,
    execute_with_automatic_backend_async,
    format_backend_recommendations,
    get_backend_capability,
    get_backend_recommendations,
    select_best_backend,
)
from qcore.circuit import Circuit, cnot, h
from qcore.errors import NoCompatibleBackendError, OperationError
from qcore.ising import IsingProblem
from qcore.qaoa import QaoaCircuit


def _bell() -> Circuit:
    return Circuit(2, [h(0), cnot(0, 1)])


def _qaoa() -> QaoaCircuit:
    problem = IsingProblem({0: 0.5}, {(0, 1): -1.0})
    return QaoaCircuit(problem, 2, [0.3], [0.7])


class _UnlimitedBackend(Backend):
    name = "Unlimited"
    supported_gates = ("H", "CNOT")


class _WideBackend(Backend):
    name = "Wide"
    max_qubits = 100
    supported_gates = ("H", "CNOT")


class _FailingBackend(Backend):
    name = "Failing"
    max_qubits = 1000
    supported_gates = ("H", "CNOT", "X")

    def execute(self, circuit, shots):
        raise OperationError("execute", "hardware offline")


def test_paradigm_detection():
    assert detect_circuit_paradigm(_bell()) is Paradigm.GATE_BASED
    assert detect_circuit_paradigm(_qaoa()) is Paradigm.ANNEALING


def test_capability_of_builtin_backends():
    local = get_backend_capability(LocalBackend(max_qubits=8))
    assert local.paradigm is Paradigm.GATE_BASED
    assert local.max_qubits == 8
    assert "CCX" in local.supported_gates
    assert local.is_available
    annealer = get_backend_capability(SimulatedAnnealingBackend())
    assert annealer.paradigm is Paradigm.ANNEALING
    assert annealer.max_qubits == 5640
    assert annealer.supported_gates == ()


def test_missing_qubit_limit_means_unlimited():
    capability = get_backend_capability(_UnlimitedBackend())
    assert capability.max_qubits is None
    assert capability.is_unlimited
    assert can_execute_circuit(_UnlimitedBackend(), Circuit.empty(500))


def test_score_grows_with_qubit_limit():
    scores = [
        get_backend_capability(LocalBackend(max_qubits=n)).performance_score
        for n in (1, 4, 10, 20)
    ]
    assert scores == sorted(scores)
    assert len(set(scores)) == len(scores)


def test_score_penalises_paradigm_mismatch():
    backend = LocalBackend()
    matched = get_backend_capability(backend, _bell()).performance_score
    mismatched = get_backend_capability(backend, _qaoa()).performance_score
    assert mismatched == pytest.approx(matched / 2)


def test_can_execute_requires_paradigm_and_size():
    assert can_execute_circuit(LocalBackend(max_qubits=2), _bell())
    assert not can_execute_circuit(LocalBackend(max_qubits=1), _bell())
    assert not can_execute_circuit(SimulatedAnnealingBackend(), _bell())
    assert can_execute_circuit(SimulatedAnnealingBackend(), _qaoa())
    assert not can_execute_circuit(LocalBackend(), _qaoa())


def test_select_from_empty_pool_fails():
    with pytest.raises(NoCompatibleBackendError) as info:
        select_best_backend([], _bell())
    assert "No compatible backend found for gate-based circuit with 2 qubits" in str(info.value)


def test_select_prefers_larger_backend():
    small = LocalBackend(name="small", max_qubits=5)
    large = LocalBackend(name="large", max_qubits=10)
    assert select_best_backend([small, large], _bell()) is large
    assert select_best_backend([large, small], _bell()) is large


def test_select_routes_by_paradigm():
    pool = create_default_backend_pool()
    assert isinstance(select_best_backend(pool, _bell()), LocalBackend)
    assert isinstance(select_best_backend(pool, _qaoa()), SimulatedAnnealingBackend)
    with pytest.raises(NoCompatibleBackendError, match="annealing circuit with 2 qubits"):
        select_best_backend([LocalBackend()], _qaoa())


def test_recommendations_are_sorted():
    pool = [LocalBackend(name="a", max_qubits=3), LocalBackend(name="b", max_qubits=12)]
    recs = get_backend_recommendations(_bell(), pool)
    assert [b.name for b, _, _ in recs] == ["b", "a"]
    assert recs[0][2] == f"Supports {len(recs[0][1].supported_gates)} gate types (12 qubits available)"
    annealing = get_backend_recommendations(_qaoa())
    assert len(annealing) == 1
    assert annealing[0][2] == "Optimal for QAOA/annealing (5640 qubits available)"
    text = format_backend_recommendations(_bell(), pool)
    assert "1. b" in text and "2. a" in text


def test_detect_provider():
    assert detect_provider("ionq.qpu.aria-1") == "IonQ"
    assert detect_provider("rigetti.sim.qvm") == "Rigetti"
    assert detect_provider("local.simulator") == "Local"
    assert detect_provider("something.else") is None


def test_execute_with_automatic_backend(caplog):
    caplog.set_level(logging.INFO, logger="qcore.capability")
    result = execute_with_automatic_backend(_bell(), 100, [LocalBackend(seed=1)])
    assert result.num_shots == 100
    assert result.measurements.shape == (100, 2)
    assert np.array_equal(result.measurements[:, 0], result.measurements[:, 1])
    assert result.backend_name == "Local Simulator"
    assert "Auto-selected backend: Local Simulator" in caplog.text


def test_execute_with_default_pool_runs_qaoa_on_annealer():
    result = execute_with_automatic_backend(_qaoa(), 20)
    assert result.backend_name.startswith("Mock D-Wave")
    assert result.measurements.shape == (20, 2)


def test_backend_errors_are_not_retried():
    pool = [_FailingBackend(), LocalBackend()]
    with pytest.raises(OperationError, match="hardware offline"):
        execute_with_automatic_backend(_bell(), 10, pool)


def test_annealer_rejects_raw_circuit():
    with pytest.raises(OperationError):
        SimulatedAnnealingBackend().execute(_bell(), 10)


def test_async_execution():
    result = asyncio.run(
        execute_with_automatic_backend_async(_bell(), 50, [LocalBackend(seed=5)])
    )
    assert result.measurements.shape == (50, 2)
    with pytest.raises(NoCompatibleBackendError):
        asyncio.run(execute_with_automatic_backend_async(_bell(), 50, []))


def test_unlimited_backend_outranks_any_finite_limit():
    unlimited, wide = _UnlimitedBackend(), _WideBackend()
    assert select_best_backend([wide, unlimited], _bell()) is unlimited
    assert (
        get_backend_capability(unlimited, _bell()).performance_score
        > get_backend_capability(wide, _bell()).performance_score
    )
    recs = get_backend_recommendations(_bell(), [wide, unlimited])
    assert [b.name for b, _, _ in recs] == ["Unlimited", "Wide"]
    assert recs[0][2] == "Supports 2 gate types (unlimited qubits available)"
