################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
"""Concrete simulation engines.

All engines implement the same SimulationEngine protocol, so callers pick the
representation once, when the engine is created::

    engine = create_engine("mps", 20, max_bond_dimension=32)
"""
from typing import Any, Dict, Type

from ..api.simulation_engine import BaseSimulationEngine
from .dense import DenseEngine
from .mps import MPSEngine
from .tensor import TensorEngine

ENGINES: Dict[str, Type[BaseSimulationEngine]] = {
    "dense": DenseEngine,
    "tensor": TensorEngine,
    "mps": MPSEngine,
}


def create_engine(kind: str, n_qubits: int, **options: Any) -> BaseSimulationEngine:
    """Create engine of given kind.

    Args:
        kind: one of "dense", "tensor" or "mps" (case-insensitive).
        n_qubits: number of simulated qubits.
        options: keyword arguments passed to the engine's constructor, e.g.
            `max_bond_dimension` for MPS or `max_memory_bytes` for the others.
    Raises:
        ValueError: if `kind` is not a known engine.
    """
    try:
        engine_cls = ENGINES[kind.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown engine {kind}. Available engines: {', '.join(ENGINES)}."
        ) from None
    return engine_cls(n_qubits, **options)


__all__ = ["DenseEngine", "TensorEngine", "MPSEngine", "ENGINES", "create_engine"]
