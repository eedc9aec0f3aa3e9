"""Execution backends for qcore."""

from importlib.util import find_spec

from .base import Backend, ExecutionResult, Paradigm
from .local import LocalBackend
from .annealing import SimulatedAnnealingBackend


def _require(package: str, backend: str) -> None:
    """Ensure that *package* is available.

    Parameters
    ----------
    package:
        Name of the Python package providing the backend.
    backend:
        Name of the backend class that depends on ``package``.

    Raises
    ------
    ImportError
        If the requested ``package`` cannot be found.
    """

    if find_spec(package) is None:  # pragma: no cover - environment specific
        raise ImportError(
            f"{backend} requires the '{package}' package. Install it to use this backend."
        )


_require("qiskit_aer", "AerStatevectorBackend")
from .statevector import AerStatevectorBackend

__all__ = [
    "Backend",
    "ExecutionResult",
    "Paradigm",
    "LocalBackend",
    "AerStatevectorBackend",
    "SimulatedAnnealingBackend",
]
