"""Split oversized problems into backend-sized, independently solvable parts.

Problems are decomposed along the connected components of their interaction
graph.  :func:`plan` decides whether a problem runs directly or decomposed
and :func:`execute` drives the solves and the recombination.  Both are
generic over the problem and solution types; :func:`execute_partitioned`
wires them up for circuits whose qubits fall into independent groups.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Protocol,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

import networkx as nx
import numpy as np

from .backends.base import Backend, ExecutionResult
from .circuit import Circuit, Gate
from .errors import OperationCancelledError

LOGGER = logging.getLogger(__name__)

P = TypeVar("P")
S = TypeVar("S")

Edge = Tuple[int, int]


# ----------------------------------------------------------------------
# Graph helpers
# ----------------------------------------------------------------------
def connected_components(num_vertices: int, edges: Sequence[Edge]) -> List[List[int]]:
    """Return the connected components of an undirected graph.

    Vertices are ``0..num_vertices-1``.  Edges with an endpoint outside that
    range are ignored and self-loops do not connect anything.  Components
    are ordered by their smallest vertex and list vertices ascending.
    """

    if num_vertices <= 0:
        return []
    parent = list(range(num_vertices))

    def find(x: int) -> int:
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    def union(a: int, b: int) -> None:
        ra, rb = find(a), find(b)
        if ra != rb:
            parent[max(ra, rb)] = min(ra, rb)

    for i, j in edges:
        if 0 <= i < num_vertices and 0 <= j < num_vertices:
            union(i, j)

    groups: Dict[int, List[int]] = {}
    for v in range(num_vertices):
        groups.setdefault(find(v), []).append(v)
    return list(groups.values())


def partition_by_components(
    num_vertices: int, edges: Sequence[Edge]
) -> List[Tuple[List[int], List[Edge]]]:
    """Return ``(global_vertices, local_edges)`` for every component.

    ``local_edges`` are renumbered so that ``global_vertices[k]`` becomes
    vertex ``k``.
    """

    parts = []
    for component in connected_components(num_vertices, edges):
        local = {v: k for k, v in enumerate(component)}
        local_edges = [(local[i], local[j]) for i, j in edges if i in local and j in local]
        parts.append((component, local_edges))
    return parts


def can_decompose_within_limit(
    num_vertices: int,
    edges: Sequence[Edge],
    qubit_limit: int,
    qubits_per_vertex: int = 1,
) -> bool:
    """Return ``True`` if every component needs at most ``qubit_limit`` qubits."""

    return all(
        len(component) * qubits_per_vertex <= qubit_limit
        for component in connected_components(num_vertices, edges)
    )


# ----------------------------------------------------------------------
# Plans
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class NoDecomposition:
    """Always run the problem as a whole."""


@dataclass(frozen=True)
class FixedPartition:
    """Decompose problems needing more than ``max_size`` qubits."""

    max_size: int


@dataclass(frozen=True)
class AdaptiveToBackend:
    """Decompose against the backend's qubit limit, if it has one."""


DecompositionStrategy = Union[NoDecomposition, FixedPartition, AdaptiveToBackend]


@dataclass(frozen=True)
class RunDirect(Generic[P]):
    problem: P


@dataclass(frozen=True)
class RunDecomposed(Generic[P]):
    problems: Tuple[P, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "problems", tuple(self.problems))


DecompositionPlan = Union[RunDirect, RunDecomposed]


class CancellationToken(Protocol):
    """Anything with ``is_set()``, e.g. :class:`threading.Event`."""

    def is_set(self) -> bool:
        ...


def _plan_against_limit(
    limit: int,
    estimate_qubits: Callable[[P], int],
    decompose_fn: Callable[[P], Sequence[P]],
    problem: P,
) -> DecompositionPlan:
    needed = estimate_qubits(problem)
    if needed <= limit:
        return RunDirect(problem)
    sub_problems = list(decompose_fn(problem))
    if len(sub_problems) == 1:
        LOGGER.info(
            "Problem needs %d qubits (limit %d) but cannot be decomposed; running directly",
            needed,
            limit,
        )
        return RunDirect(problem)
    LOGGER.info(
        "Problem needs %d qubits (limit %d); decomposed into %d parts",
        needed,
        limit,
        len(sub_problems),
    )
    return RunDecomposed(sub_problems)


def plan(
    strategy: DecompositionStrategy,
    backend: Backend | None,
    estimate_qubits: Callable[[P], int],
    decompose_fn: Callable[[P], Sequence[P]],
    problem: P,
) -> DecompositionPlan:
    """Decide whether ``problem`` runs directly or as sub-problems.

    A decomposition yielding a single part cannot be split further and
    falls back to :class:`RunDirect`.
    """

    if isinstance(strategy, NoDecomposition):
        return RunDirect(problem)
    if isinstance(strategy, FixedPartition):
        return _plan_against_limit(strategy.max_size, estimate_qubits, decompose_fn, problem)
    if isinstance(strategy, AdaptiveToBackend):
        limit = getattr(backend, "max_qubits", None)
        if limit is None:
            return RunDirect(problem)
        return _plan_against_limit(limit, estimate_qubits, decompose_fn, problem)
    raise TypeError(f"Unknown decomposition strategy {strategy!r}")


def execute(
    solve_fn: Callable[[P], S],
    recombine_fn: Callable[[List[S]], S],
    plan: DecompositionPlan,
    cancel: CancellationToken | None = None,
) -> S:
    """Carry out ``plan``.

    Sub-problems are solved in order.  The first exception raised by
    ``solve_fn`` propagates and later sub-problems are not attempted.

    Raises
    ------
    OperationCancelledError
        If ``cancel`` is set before a sub-problem solve starts.
    """

    if isinstance(plan, RunDirect):
        return solve_fn(plan.problem)
    solutions: List[S] = []
    for index, sub_problem in enumerate(plan.problems):
        if cancel is not None and cancel.is_set():
            raise OperationCancelledError(
                "decomposed execution",
                f"cancelled after {index} of {len(plan.problems)} sub-problems",
            )
        LOGGER.debug("Solving sub-problem %d of %d", index + 1, len(plan.problems))
        solutions.append(solve_fn(sub_problem))
    return recombine_fn(solutions)


def solve_with_decomposition(
    backend: Backend,
    problem: P,
    estimate_qubits: Callable[[P], int],
    decompose_fn: Callable[[P], Sequence[P]],
    recombine_fn: Callable[[List[S]], S],
    solve_fn: Callable[[P], S],
    cancel: CancellationToken | None = None,
) -> S:
    """Plan against ``backend`` with :class:`AdaptiveToBackend`, then execute."""

    decomposition = plan(AdaptiveToBackend(), backend, estimate_qubits, decompose_fn, problem)
    return execute(solve_fn, recombine_fn, decomposition, cancel)


# ----------------------------------------------------------------------
# Circuits
# ----------------------------------------------------------------------
def interaction_edges(circuit: Circuit) -> List[Edge]:
    """Return one qubit pair per coupling of every multi-qubit gate.

    Barriers couple nothing.  A three-qubit gate contributes all its pairs.
    """

    edges: List[Edge] = []
    for gate in circuit.gates:
        if gate.gate == "BARRIER":
            continue
        qs = gate.qubits
        edges.extend((qs[a], qs[b]) for a in range(len(qs)) for b in range(a + 1, len(qs)))
    return edges


def interaction_graph(circuit: Circuit) -> nx.Graph:
    """Return the qubit interaction graph, weighted by gate count."""

    graph = nx.Graph()
    graph.add_nodes_from(range(circuit.num_qubits))
    for a, b in interaction_edges(circuit):
        if graph.has_edge(a, b):
            graph[a][b]["weight"] += 1
        else:
            graph.add_edge(a, b, weight=1)
    return graph


@dataclass(frozen=True)
class CircuitPart:
    """Sub-circuit acting on ``qubits`` of the original register."""

    qubits: Tuple[int, ...]
    circuit: Circuit


def partition_circuit(circuit: Circuit) -> List[CircuitPart]:
    """Split ``circuit`` into sub-circuits over independent qubit groups.

    Gate order is preserved within each part.  Barriers are restricted to
    the qubits of each part they touch.
    """

    components = connected_components(circuit.num_qubits, interaction_edges(circuit))
    owner = {q: k for k, component in enumerate(components) for q in component}
    local = {q: component.index(q) for component in components for q in component}
    gates: List[List[Gate]] = [[] for _ in components]
    for gate in circuit.gates:
        if gate.gate == "BARRIER":
            touched: Dict[int, List[int]] = {}
            for q in gate.qubits:
                touched.setdefault(owner[q], []).append(local[q])
            for k, qs in touched.items():
                gates[k].append(Gate("BARRIER", tuple(qs)))
            continue
        k = owner[gate.qubits[0]]
        gates[k].append(Gate(gate.gate, tuple(local[q] for q in gate.qubits), gate.params))
    return [
        CircuitPart(tuple(component), Circuit(len(component), part_gates))
        for component, part_gates in zip(components, gates)
    ]


def merge_measurements(
    num_qubits: int, parts: Sequence[Tuple[Sequence[int], np.ndarray]]
) -> np.ndarray:
    """Scatter per-part measurement columns into a global register.

    Parameters
    ----------
    num_qubits:
        Width of the global register.
    parts:
        ``(qubits, measurements)`` pairs where column ``k`` of
        ``measurements`` belongs to global qubit ``qubits[k]``.

    Raises
    ------
    ValueError
        If the parts disagree on the number of shots.
    """

    shots = {np.asarray(m).shape[0] for _, m in parts}
    if len(shots) > 1:
        raise ValueError(f"Parts disagree on the number of shots: {sorted(shots)}")
    merged = np.zeros((shots.pop() if shots else 0, num_qubits), dtype=np.int8)
    for qubits, measurements in parts:
        merged[:, list(qubits)] = measurements
    return merged


@dataclass(frozen=True)
class _PartResult:
    qubits: Tuple[int, ...]
    result: ExecutionResult


def execute_partitioned(
    backend: Backend,
    circuit: Circuit,
    shots: int,
    cancel: CancellationToken | None = None,
) -> ExecutionResult:
    """Execute ``circuit`` on ``backend``, splitting it when it is too wide.

    The circuit runs directly when it fits the backend's qubit limit or has
    a single interaction component.  Otherwise every independent part runs
    separately and the shots are merged column-wise; qubits of different
    parts are uncorrelated so this preserves the joint distribution.
    """

    n = circuit.num_qubits

    def solve(part: CircuitPart) -> _PartResult:
        return _PartResult(part.qubits, backend.execute(part.circuit, shots))

    def recombine(results: List[_PartResult]) -> _PartResult:
        merged = merge_measurements(
            n, [(r.qubits, r.result.measurements) for r in results]
        )
        metadata: Dict[str, Any] = {"num_parts": len(results)}
        return _PartResult(
            tuple(range(n)), ExecutionResult(shots, merged, backend.name, metadata)
        )

    outcome = solve_with_decomposition(
        backend,
        CircuitPart(tuple(range(n)), circuit),
        lambda part: part.circuit.num_qubits,
        lambda part: partition_circuit(part.circuit),
        recombine,
        solve,
        cancel,
    )
    return outcome.result


__all__ = [
    "connected_components",
    "partition_by_components",
    "can_decompose_within_limit",
    "NoDecomposition",
    "FixedPartition",
    "AdaptiveToBackend",
    "DecompositionStrategy",
    "RunDirect",
    "RunDecomposed",
    "DecompositionPlan",
    "plan",
    "execute",
    "solve_with_decomposition",
    "interaction_edges",
    "interaction_graph",
    "CircuitPart",
    "partition_circuit",
    "merge_measurements",
    "execute_partitioned",
]
