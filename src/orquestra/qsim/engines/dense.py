################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
import logging
from typing import Optional, Sequence

import numpy as np

from ..api.simulation_engine import BaseSimulationEngine
from ..circuits import QubitPermutation, lift_matrix
from ..config import DEFAULT_MAX_MEMORY_BYTES, DEFAULT_TOLERANCES, Tolerances
from ..errors import ResourceExceeded
from ..measurements import project_onto_outcome

logger = logging.getLogger(__name__)

_COMPLEX_SIZE = np.dtype(np.complex128).itemsize

# Lifting keeps the operator and its permuted copy alive at the same time.
_OPERATOR_COPIES = 2


class DenseEngine(BaseSimulationEngine):
    """An engine computing the state by multiplying it with full 2^N x 2^N operators.

    Every gate is lifted to the whole register before being applied, which makes
    this engine the simplest reference for the other ones and limits it to small
    registers.

    Args:
        n_qubits: number of simulated qubits.
        tolerances: numerical tolerances used for validation.
        max_memory_bytes: ceiling on memory used while lifting an operator.
            Defaults to 1 GiB.
    Raises:
        ResourceExceeded: if a lifted operator for `n_qubits` would not fit
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
        required = _OPERATOR_COPIES * _COMPLEX_SIZE * 4**self.n_qubits
        if max_memory_bytes is not None and required > max_memory_bytes:
            raise ResourceExceeded(
                f"Lifted operators on {self.n_qubits} qubits need {required} bytes, "
                f"more than the allowed {max_memory_bytes}."
            )
        self.max_memory_bytes = max_memory_bytes
        logger.debug("Allocating dense state of %d qubits", self.n_qubits)
        self.reset()

    def reset(self) -> None:
        self._state = np.zeros(2**self.n_qubits, dtype=np.complex128)
        self._state[0] = 1.0

    def _apply_matrix(self, matrix: np.ndarray, targets: Sequence[int]) -> None:
        self._state = lift_matrix(matrix, targets, self.n_qubits) @ self._state

    def _project_qubit(self, qubit: int, bit: int, probability: float) -> None:
        project_onto_outcome(
            self._state.reshape((2,) * self.n_qubits), qubit, bit, probability
        )

    def _permute(self, permutation: QubitPermutation) -> None:
        tensor = permutation.permute_axes(self._state.reshape((2,) * self.n_qubits))
        self._state = np.ascontiguousarray(tensor).reshape(-1)

    def get_amplitudes(self) -> np.ndarray:
        return self._state / np.linalg.norm(self._state)

    def norm(self) -> float:
        return float(np.linalg.norm(self._state))
