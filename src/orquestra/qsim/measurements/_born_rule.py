################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
"""Born-rule probabilities, basis changes and projective collapse.

These helpers are shared by the simulation engines. The dense and tensor engines
use the array helpers directly; the MPS engine only needs the basis changes and
`draw_bit`, as it computes its marginals without materializing the state.
"""
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

import numpy as np

from ..circuits import H, S, Basis, GateOperation
from ..typing import Bitstring
from ..utils import index_to_bits, tuple_to_bitstring

# Gates rotating eigenstates of the given basis onto |0> and |1>.
_BASIS_CHANGE_GATES = {
    Basis.Z: (),
    Basis.X: (H,),
    Basis.Y: (S.dagger, H),
}


@dataclass(frozen=True)
class MeasurementOutcome:
    """Result of a projective measurement.

    Attributes:
        qubit_indices: measured qubits, in the order the bits are reported.
        basis: basis the qubits were measured in. Bit 0 denotes the +1 eigenstate.
        bits: measured values.
        probability: Born probability of obtaining `bits` in the pre-measurement
            state.
    """

    qubit_indices: Tuple[int, ...]
    basis: Basis
    bits: Bitstring
    probability: float

    @property
    def bitstring(self) -> str:
        return tuple_to_bitstring(self.bits)


def basis_change_operations(
    qubit_index: int, basis: Union[str, Basis]
) -> List[GateOperation]:
    """Operations to apply before collapsing `qubit_index` in the Z basis.

    Z needs nothing, X needs a Hadamard, Y needs S† followed by a Hadamard.
    """
    return [gate(qubit_index) for gate in _BASIS_CHANGE_GATES[Basis.parse(basis)]]


def inverse_basis_change_operations(
    qubit_index: int, basis: Union[str, Basis]
) -> List[GateOperation]:
    """Operations restoring the original frame after a collapse."""
    return [
        op.gate.dagger(*op.qubit_indices)
        for op in reversed(basis_change_operations(qubit_index, basis))
    ]


def born_probabilities(amplitudes: np.ndarray) -> np.ndarray:
    """Squared magnitudes of `amplitudes`, rescaled to sum to 1."""
    probabilities = np.abs(amplitudes) ** 2
    total = probabilities.sum()
    if not total > 0:
        raise ValueError("Cannot compute probabilities of a zero vector.")
    return probabilities / total


def marginalize(
    probabilities: np.ndarray, n_qubits: int, qubit_indices: Sequence[int]
) -> np.ndarray:
    """Marginal distribution of `qubit_indices`, in their listed order.

    Args:
        probabilities: 2^N probabilities, flat or shaped (2,) * N.
        n_qubits: N.
        qubit_indices: qubits whose joint distribution is returned.
    Returns:
        Flat array of 2^k probabilities, `qubit_indices[0]` being the most
        significant bit.
    """
    tensor = np.reshape(probabilities, (2,) * n_qubits)
    others = tuple(q for q in range(n_qubits) if q not in qubit_indices)
    marginal = tensor.sum(axis=others)
    # after summing, remaining axes are ordered by qubit index
    remaining = sorted(qubit_indices)
    marginal = np.transpose(marginal, [remaining.index(q) for q in qubit_indices])
    return marginal.reshape(-1)


def project_onto_outcome(
    state: np.ndarray, qubit_index: int, bit: int, probability: float
) -> np.ndarray:
    """Collapse an order-N state tensor in place onto `bit` of `qubit_index`.

    The remaining amplitudes are rescaled by 1/sqrt(probability).
    """
    if not probability > 0:
        raise ValueError("Cannot project onto an outcome with zero probability.")
    discarded = [slice(None)] * state.ndim
    discarded[qubit_index] = 1 - bit
    state[tuple(discarded)] = 0
    state /= np.sqrt(probability)
    return state


def draw_bit(probability_of_zero: float, rng: np.random.Generator) -> int:
    """Draw a single bit, 0 with the given probability."""
    return 0 if rng.random() < probability_of_zero else 1


def sample_bitstrings_from_probabilities(
    probabilities: np.ndarray, n_samples: int, rng: np.random.Generator
) -> List[Bitstring]:
    """Draw `n_samples` basis states from a flat, big-endian distribution."""
    n_qubits = int(np.log2(len(probabilities)))
    indices = rng.choice(len(probabilities), size=n_samples, p=probabilities)
    return [index_to_bits(int(index), n_qubits) for index in indices]
