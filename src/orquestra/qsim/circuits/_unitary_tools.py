################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
"""Lifting of gate matrices to operators on the whole register."""
from typing import Sequence

import numpy as np

from ..errors import DimensionMismatch
from ._permutations import permutation_moving_to_front


def lift_matrix(
    matrix: np.ndarray, qubit_indices: Sequence[int], n_qubits: int
) -> np.ndarray:
    """Build the 2^N x 2^N operator acting as `matrix` on `qubit_indices`.

    The targets are first moved to the front of the register, where the operator
    is simply `matrix ⊗ I`, and the result is permuted back. Target order matters:
    `qubit_indices[0]` is the most significant qubit of `matrix`.
    """
    matrix = np.asarray(matrix, dtype=np.complex128)
    n_targets = len(qubit_indices)
    if matrix.shape != (2**n_targets, 2**n_targets):
        raise DimensionMismatch(
            f"Matrix of shape {matrix.shape} cannot act on {n_targets} qubit(s)."
        )

    front = np.kron(matrix, np.eye(2 ** (n_qubits - n_targets)))
    permutation = permutation_moving_to_front(qubit_indices, n_qubits)
    if permutation.is_identity:
        return front

    restore = permutation.inverse()
    operator = front.reshape((2,) * (2 * n_qubits))
    operator = restore.permute_axes(operator, offset=0)
    operator = restore.permute_axes(operator, offset=n_qubits)
    return operator.reshape(2**n_qubits, 2**n_qubits)
