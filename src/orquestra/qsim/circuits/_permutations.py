################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
"""Permutations of qubit positions expressed as sequences of transpositions.

A `QubitPermutation` is shared by all engines: the dense engine uses it to lift
gates acting on non-adjacent qubits, the tensor engine transposes state axes
with it and the MPS engine turns it into a network of adjacent SWAPs.
"""
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from ..errors import DimensionMismatch, IndexOutOfRange
from ..typing import Transposition


@dataclass(frozen=True)
class QubitPermutation:
    """Permutation of `n_qubits` positions.

    Transpositions are applied left to right. Applying transposition (i, j)
    exchanges whatever qubits currently sit at positions i and j.

    Args:
        n_qubits: number of positions being permuted.
        transpositions: pairs of positions to exchange.
    """

    n_qubits: int
    transpositions: Tuple[Transposition, ...] = ()

    def __post_init__(self):
        transpositions = tuple(
            (int(first), int(second)) for first, second in self.transpositions
        )
        for first, second in transpositions:
            for position in (first, second):
                if not 0 <= position < self.n_qubits:
                    raise IndexOutOfRange(
                        f"Position {position} out of range for {self.n_qubits} "
                        "qubit(s)."
                    )
        object.__setattr__(self, "transpositions", transpositions)

    @property
    def ordering(self) -> Tuple[int, ...]:
        """`ordering[p]` is the original position of the qubit now at position p."""
        order = list(range(self.n_qubits))
        for first, second in self.transpositions:
            order[first], order[second] = order[second], order[first]
        return tuple(order)

    @property
    def is_identity(self) -> bool:
        return self.ordering == tuple(range(self.n_qubits))

    def inverse(self) -> "QubitPermutation":
        return QubitPermutation(self.n_qubits, tuple(reversed(self.transpositions)))

    def compose(self, other: "QubitPermutation") -> "QubitPermutation":
        """Permutation applying `self` first and `other` afterwards."""
        if other.n_qubits != self.n_qubits:
            raise DimensionMismatch(
                "Cannot compose permutations of different number of qubits."
            )
        return QubitPermutation(
            self.n_qubits, self.transpositions + other.transpositions
        )

    def permute_axes(self, tensor: np.ndarray, offset: int = 0) -> np.ndarray:
        """Transpose `n_qubits` consecutive axes of `tensor` starting at `offset`.

        Axis `offset + p` of the result is axis `offset + ordering[p]` of `tensor`.
        """
        axes = list(range(tensor.ndim))
        axes[offset : offset + self.n_qubits] = [
            offset + position for position in self.ordering
        ]
        return np.transpose(tensor, axes)

    def adjacent_transpositions(self) -> List[Transposition]:
        """Equivalent sequence of transpositions of neighbouring positions."""
        result: List[Transposition] = []
        for first, second in self.transpositions:
            low, high = min(first, second), max(first, second)
            if low == high:
                continue
            # bubble the qubit at `low` up to `high`, then the displaced one back
            up = [(position, position + 1) for position in range(low, high)]
            down = [(position - 1, position) for position in range(high - 1, low, -1)]
            result.extend(up + down)
        return result


def _validate_targets(targets: Sequence[int], n_qubits: int):
    if len(set(targets)) != len(targets):
        raise DimensionMismatch(f"Target qubits have to be distinct: {tuple(targets)}.")
    for target in targets:
        if not 0 <= target < n_qubits:
            raise IndexOutOfRange(
                f"Qubit index {target} out of range for {n_qubits} qubit(s)."
            )


def permutation_moving_to_front(
    targets: Sequence[int], n_qubits: int
) -> QubitPermutation:
    """Permutation placing `targets[k]` at position k, for every k."""
    _validate_targets(targets, n_qubits)
    order = list(range(n_qubits))
    transpositions = []
    for destination, target in enumerate(targets):
        current = order.index(target)
        if current != destination:
            transpositions.append((destination, current))
            order[destination], order[current] = order[current], order[destination]
    return QubitPermutation(n_qubits, tuple(transpositions))


def adjacent_swap_network(
    targets: Sequence[int], n_qubits: int
) -> Tuple[QubitPermutation, int]:
    """Adjacent transpositions bringing `targets` onto consecutive positions.

    After the returned permutation is applied, `targets[k]` sits at position
    `start + k`, where `start` is the smallest target position. Only qubits
    strictly between the targets are moved.

    Returns:
        The permutation (made of neighbouring transpositions only) and `start`.
    """
    _validate_targets(targets, n_qubits)
    start = min(targets)
    order = list(range(n_qubits))
    transpositions: List[Transposition] = []
    for offset, target in enumerate(targets):
        destination = start + offset
        current = order.index(target)
        for position in range(current, destination, -1):
            transpositions.append((position - 1, position))
            order[position - 1], order[position] = order[position], order[position - 1]
    return QubitPermutation(n_qubits, tuple(transpositions)), start


def is_consecutive_ascending(targets: Iterable[int]) -> bool:
    targets = list(targets)
    return all(second == first + 1 for first, second in zip(targets, targets[1:]))
