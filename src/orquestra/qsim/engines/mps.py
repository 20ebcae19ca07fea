################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
"""Matrix product state engine with bond dimension truncation.

The state is kept as a list of site tensors ``A[i]`` of shape (left, 2, right),
where the first and last bonds have dimension 1. The chain is kept in mixed
canonical form: sites left of the orthogonality center are left-orthonormal and
sites right of it are right-orthonormal. This makes the norm of the whole state
the norm of the center tensor, makes truncations optimal, and lets per-qubit
probabilities be read from a single site.
"""
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
import scipy.linalg

from ..api.simulation_engine import BaseSimulationEngine
from ..circuits import (
    SWAP,
    QubitPermutation,
    adjacent_swap_network,
    gate_matrix,
    is_consecutive_ascending,
)
from ..config import DEFAULT_TOLERANCES, Tolerances
from ..errors import NumericalInstability
from ..linalg import TruncatedSVD, truncated_svd
from ..measurements import draw_bit
from ..typing import Bitstring, RNGLike, Transposition
from ..utils import get_rng

logger = logging.getLogger(__name__)

_SWAP_MATRIX = gate_matrix(SWAP)


class MPSEngine(BaseSimulationEngine):
    """An engine storing the state as a matrix product state.

    Two-qubit gates entangling neighbouring sites grow the bond between them.
    If `max_bond_dimension` is set, bonds are truncated to at most that many
    singular values, and the discarded weight is accumulated in
    `truncation_error` while `fidelity` estimates the overlap with the exact
    state. Gates on non-neighbouring qubits are routed through adjacent SWAPs.

    Args:
        n_qubits: number of simulated qubits.
        max_bond_dimension: maximal bond dimension (chi_max). None means no
            truncation apart from numerically negligible singular values.
        tolerances: numerical tolerances used for validation and truncation.
    """

    def __init__(
        self,
        n_qubits: int,
        *,
        max_bond_dimension: Optional[int] = None,
        tolerances: Tolerances = DEFAULT_TOLERANCES,
    ):
        super().__init__(n_qubits, tolerances=tolerances)
        if max_bond_dimension is not None and max_bond_dimension < 1:
            raise ValueError(
                f"Maximal bond dimension has to be positive, got {max_bond_dimension}."
            )
        self.max_bond_dimension = max_bond_dimension
        self.reset()

    def reset(self) -> None:
        zero = np.zeros((1, 2, 1), dtype=np.complex128)
        zero[0, 0, 0] = 1.0
        self._tensors: List[np.ndarray] = [zero.copy() for _ in range(self.n_qubits)]
        self._center = 0
        self._truncation_error = 0.0
        self._fidelity = 1.0

    @property
    def truncation_error(self) -> float:
        return self._truncation_error

    @property
    def fidelity(self) -> float:
        return self._fidelity

    @property
    def tensors(self) -> Tuple[np.ndarray, ...]:
        """Site tensors, each of shape (left bond, 2, right bond)."""
        return tuple(self._tensors)

    @property
    def bond_dimensions(self) -> List[int]:
        """Dimensions of the N - 1 bonds between neighbouring sites."""
        return [tensor.shape[2] for tensor in self._tensors[:-1]]

    def norm(self) -> float:
        return float(np.linalg.norm(self._tensors[self._center]))

    def _apply_matrix(self, matrix: np.ndarray, targets: Sequence[int]) -> None:
        if len(targets) == 1:
            site = targets[0]
            self._tensors[site] = np.einsum(
                "ab,lbr->lar", matrix, self._tensors[site]
            )
        elif is_consecutive_ascending(targets):
            self._apply_to_consecutive_sites(matrix, targets[0], len(targets))
        else:
            permutation, start = adjacent_swap_network(targets, self.n_qubits)
            logger.debug(
                "Routing gate on qubits %s through %d adjacent swaps",
                tuple(targets),
                len(permutation.transpositions),
            )
            self._apply_transpositions(permutation.transpositions)
            self._apply_to_consecutive_sites(matrix, start, len(targets))
            self._apply_transpositions(permutation.inverse().transpositions)

    def _apply_to_consecutive_sites(
        self, matrix: np.ndarray, start: int, n_sites: int
    ) -> None:
        self._move_center(start)

        merged = self._tensors[start]
        for site in range(start + 1, start + n_sites):
            merged = np.tensordot(merged, self._tensors[site], axes=(-1, 0))

        gate = matrix.reshape((2,) * (2 * n_sites))
        merged = np.tensordot(
            gate,
            merged,
            axes=(list(range(n_sites, 2 * n_sites)), list(range(1, n_sites + 1))),
        )
        # (out_1, ..., out_K, left, right) -> (left, out_1, ..., out_K, right)
        merged = np.moveaxis(merged, n_sites, 0)

        for offset in range(n_sites - 1):
            site = start + offset
            left_bond = merged.shape[0]
            svd = truncated_svd(
                merged.reshape(left_bond * 2, -1),
                max_rank=self.max_bond_dimension,
                cutoff=self.tolerances.svd_cutoff,
            )
            if offset == 0:
                self._check_merged_norm(svd.norm)
            self._record_truncation(site, svd)
            self._tensors[site] = svd.u.reshape(left_bond, 2, svd.rank)
            merged = (svd.singular_values[:, np.newaxis] * svd.vh).reshape(
                (svd.rank,) + merged.shape[2:]
            )

        self._tensors[start + n_sites - 1] = merged
        self._center = start + n_sites - 1

    def _apply_transpositions(self, transpositions: Sequence[Transposition]) -> None:
        for first, second in transpositions:
            self._apply_to_consecutive_sites(_SWAP_MATRIX, min(first, second), 2)

    def _check_merged_norm(self, norm: float) -> None:
        if not abs(norm**2 - 1.0) <= self.tolerances.normalization:
            raise NumericalInstability(
                f"State norm drifted to {norm} "
                f"(tolerance {self.tolerances.normalization})."
            )

    def _record_truncation(self, site: int, svd: TruncatedSVD) -> None:
        if svd.discarded_weight > 0:
            self._truncation_error += svd.discarded_weight
            self._fidelity *= 1.0 - svd.discarded_weight
            logger.debug(
                "Truncated bond %d-%d to dimension %d, discarded weight %.3e",
                site,
                site + 1,
                svd.rank,
                svd.discarded_weight,
            )

    def _move_center(self, position: int) -> None:
        while self._center < position:
            self._shift_center_right()
        while self._center > position:
            self._shift_center_left()

    def _shift_center_right(self) -> None:
        site = self._center
        left, physical, right = self._tensors[site].shape
        q, r = scipy.linalg.qr(
            self._tensors[site].reshape(left * physical, right), mode="economic"
        )
        self._tensors[site] = q.reshape(left, physical, -1)
        self._tensors[site + 1] = np.tensordot(r, self._tensors[site + 1], axes=(1, 0))
        self._center = site + 1

    def _shift_center_left(self) -> None:
        site = self._center
        left, physical, right = self._tensors[site].shape
        r, q = scipy.linalg.rq(
            self._tensors[site].reshape(left, physical * right), mode="economic"
        )
        self._tensors[site] = q.reshape(-1, physical, right)
        self._tensors[site - 1] = np.tensordot(self._tensors[site - 1], r, axes=(2, 0))
        self._center = site - 1

    def _probability_of_zero(self, qubit: int) -> float:
        self._move_center(qubit)
        tensor = self._tensors[qubit]
        weight_of_zero = np.linalg.norm(tensor[:, 0, :]) ** 2
        return float(weight_of_zero / np.linalg.norm(tensor) ** 2)

    def _project_qubit(self, qubit: int, bit: int, probability: float) -> None:
        self._move_center(qubit)
        tensor = self._tensors[qubit].copy()
        tensor[:, 1 - bit, :] = 0
        weight = np.linalg.norm(tensor)
        if not weight > 0:
            raise ValueError("Cannot project onto an outcome with zero probability.")
        self._tensors[qubit] = tensor / weight

    def _permute(self, permutation: QubitPermutation) -> None:
        transpositions = permutation.adjacent_transpositions()
        logger.debug("Permuting qubits with %d adjacent swaps", len(transpositions))
        self._apply_transpositions(transpositions)

    def get_marginal_probabilities(self, qubit_indices: Sequence[int]) -> np.ndarray:
        """Joint distribution of `qubit_indices`, in their listed order.

        Only sites between the smallest and largest of `qubit_indices` are
        contracted, one branch of left environments per partial outcome.
        """
        qubit_indices = self._validate_measured_qubits(qubit_indices)
        measured = sorted(qubit_indices)
        first, last = measured[0], measured[-1]
        # With the center at `first`, environments beyond [first, last] are trivial.
        self._move_center(first)

        environments = {(): np.eye(self._tensors[first].shape[0], dtype=np.complex128)}
        for site in range(first, last + 1):
            tensor = self._tensors[site]
            if site in measured:
                environments = {
                    outcome + (bit,): _transfer(environment, tensor[:, bit, :])
                    for outcome, environment in environments.items()
                    for bit in (0, 1)
                }
            else:
                environments = {
                    outcome: sum(
                        _transfer(environment, tensor[:, bit, :]) for bit in (0, 1)
                    )
                    for outcome, environment in environments.items()
                }

        probabilities = np.zeros((2,) * len(measured))
        for outcome, environment in environments.items():
            probabilities[outcome] = max(np.trace(environment).real, 0.0)
        probabilities = np.transpose(
            probabilities, [measured.index(qubit) for qubit in qubit_indices]
        ).reshape(-1)
        return probabilities / probabilities.sum()

    def sample_bitstrings(self, n_samples: int, rng: RNGLike = None) -> List[Bitstring]:
        """Draw `n_samples` bitstrings qubit by qubit, without altering the state.

        Each bit is drawn from its distribution conditioned on the bits already
        drawn, so a single sample costs O(N * chi^2).
        """
        if n_samples <= 0:
            raise ValueError(f"Number of samples has to be positive, got {n_samples}")
        rng = get_rng(rng)
        # Sites right of the center are right-orthonormal, nothing to contract there.
        self._move_center(0)
        return [self._sample_once(rng) for _ in range(n_samples)]

    def _sample_once(self, rng: np.random.Generator) -> Bitstring:
        vector = np.ones(1, dtype=np.complex128)
        bits = []
        for tensor in self._tensors:
            branches = [vector @ tensor[:, bit, :] for bit in (0, 1)]
            weights = [np.vdot(branch, branch).real for branch in branches]
            bit = draw_bit(weights[0] / (weights[0] + weights[1]), rng)
            vector = branches[bit] / np.sqrt(weights[bit])
            bits.append(bit)
        return tuple(bits)

    def get_amplitudes(self) -> np.ndarray:
        """Contract the whole chain into 2^N amplitudes. Meant for small N."""
        state = self._tensors[0]
        for tensor in self._tensors[1:]:
            state = np.tensordot(state, tensor, axes=(-1, 0))
        amplitudes = state.reshape(-1)
        return amplitudes / np.linalg.norm(amplitudes)


def _transfer(environment: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    return matrix.conj().T @ environment @ matrix
