################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
import logging
from typing import Optional, Sequence

import numpy as np

from ..api.simulation_engine import BaseSimulationEngine
from ..circuits import QubitPermutation
from ..config import DEFAULT_MAX_MEMORY_BYTES, DEFAULT_TOLERANCES, Tolerances
from ..errors import ResourceExceeded
from ..measurements import project_onto_outcome

logger = logging.getLogger(__name__)

_COMPLEX_SIZE = np.dtype(np.complex128).itemsize

# The state, the contraction result and its contiguous reordering coexist
# while a gate is applied.
_STATE_COPIES = 3


class TensorEngine(BaseSimulationEngine):
    """An engine storing the state as an order-N tensor with one axis per qubit.

    Gates are contracted directly with the axes of their targets, so applying a
    K-qubit gate costs O(2^N * 2^K) instead of the O(4^N) of DenseEngine.

    Args:
        n_qubits: number of simulated qubits.
        tolerances: numerical tolerances used for validation.
        max_memory_bytes: ceiling on memory used while applying a gate. Defaults
            to 1 GiB.
    Raises:
        ResourceExceeded: if the state on `n_qubits` would not fit
            `max_memory_bytes`.
    """

    def __init__(
        self,
        n_qubits: int,
        *,
        tolerances: Tolerances = DEFAULT_TOLERANCES,
        max_memory_bytes: Optional[int] = DEFAULT_MAX_MEMORY_BYTES,
    ):
        super().__init__(n_qubits, tolerances=tolerances)
        required = _STATE_COPIES * _COMPLEX_SIZE * 2**self.n_qubits
        if max_memory_bytes is not None and required > max_memory_bytes:
            raise ResourceExceeded(
                f"State of {self.n_qubits} qubits needs {required} bytes, "
                f"more than the allowed {max_memory_bytes}."
            )
        self.max_memory_bytes = max_memory_bytes
        logger.debug("Allocating tensor state of %d qubits", self.n_qubits)
        self.reset()

    def reset(self) -> None:
        self._state = np.zeros((2,) * self.n_qubits, dtype=np.complex128)
        self._state[(0,) * self.n_qubits] = 1.0

    def _apply_matrix(self, matrix: np.ndarray, targets: Sequence[int]) -> None:
        n_targets = len(targets)
        gate = matrix.reshape((2,) * (2 * n_targets))
        # Contraction puts the gate's output axes first, move them back in place.
        gate_inputs = list(range(n_targets, 2 * n_targets))
        contracted = np.tensordot(gate, self._state, axes=(gate_inputs, list(targets)))
        self._state = np.ascontiguousarray(
            np.moveaxis(contracted, list(range(n_targets)), list(targets))
        )

    def _project_qubit(self, qubit: int, bit: int, probability: float) -> None:
        project_onto_outcome(self._state, qubit, bit, probability)

    def _permute(self, permutation: QubitPermutation) -> None:
        self._state = np.ascontiguousarray(permutation.permute_axes(self._state))

    def get_amplitudes(self) -> np.ndarray:
        return self._state.reshape(-1) / np.linalg.norm(self._state)

    def norm(self) -> float:
        return float(np.linalg.norm(self._state))
