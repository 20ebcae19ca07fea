################################################################################
# © Copyright 2021-2022 Zapata Computing Inc.
################################################################################
from math import log2
from typing import Dict, List, Optional
from warnings import warn

import numpy as np

from .measurements import born_probabilities, sample_bitstrings_from_probabilities
from .typing import Bitstring, StateVector
from .utils import get_ordered_list_of_bitstrings, get_rng


class Wavefunction:
    """
    A simple wavefunction data structure holding the 2^N amplitudes of a pure state,
    basis index b being the big-endian concatenation of qubit bits.

    Args:
        amplitude_vector: the amplitudes of the system.
        atol: allowed deviation of the squared norm from 1.
    """

    def __init__(self, amplitude_vector: StateVector, atol: float = 1e-8) -> None:
        if len(amplitude_vector) == 0 or bin(len(amplitude_vector)).count("1") != 1:
            raise ValueError(
                "Provided wavefunction does not have a size of a power of 2."
            )

        self._amplitude_vector = np.array(amplitude_vector, dtype=np.complex128)
        self._check_normalization(self._amplitude_vector, atol)

    @property
    def amplitudes(self) -> np.ndarray:
        return self._amplitude_vector

    @property
    def n_qubits(self):
        return int(log2(len(self)))

    @staticmethod
    def _check_normalization(arr: np.ndarray, atol: float):
        probs_of_ground_entries = np.sum(np.abs(arr) ** 2)

        if not np.isclose(probs_of_ground_entries, 1.0, rtol=0, atol=atol):
            raise ValueError("Vector does not result in a unit probability.")

    def __len__(self) -> int:
        return len(self._amplitude_vector)

    def __iter__(self):
        return iter(self._amplitude_vector)

    def __getitem__(self, idx):
        return self._amplitude_vector[idx]

    def __array__(self, dtype=None, copy=None):
        return np.asarray(self._amplitude_vector, dtype=dtype)

    def __str__(self) -> str:
        return f"Wavefunction({self._amplitude_vector})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Wavefunction):
            return False

        return np.array_equal(self.amplitudes, other.amplitudes)

    def isclose(self, other: "Wavefunction", atol: float = 1e-9) -> bool:
        """Equality up to `atol`, without ignoring the global phase."""
        return len(self) == len(other) and np.allclose(
            self.amplitudes, other.amplitudes, rtol=0, atol=atol
        )

    def fidelity(self, other: "Wavefunction") -> float:
        """Squared overlap |<self|other>|^2."""
        return float(abs(np.vdot(self.amplitudes, other.amplitudes)) ** 2)

    @staticmethod
    def zero_state(n_qubits: int) -> "Wavefunction":
        if not isinstance(n_qubits, int):
            warn(
                f"Non-integer value {n_qubits} passed as number of qubits! "
                "Will be cast to integer."
            )
            n_qubits = int(n_qubits)

        if n_qubits <= 0:
            raise ValueError(f"Invalid number of qubits in system. Got {n_qubits}.")

        np_arr = np.zeros(2**n_qubits, dtype=np.complex128)
        np_arr[0] = 1.0
        return Wavefunction(np_arr)

    def get_probabilities(self) -> np.ndarray:
        return born_probabilities(self.amplitudes)

    def get_outcome_probs(self) -> Dict[str, float]:
        return dict(
            zip(get_ordered_list_of_bitstrings(self.n_qubits), self.get_probabilities())
        )


def sample_from_wavefunction(
    wavefunction: Wavefunction,
    n_samples: int,
    seed: Optional[int] = None,
) -> List[Bitstring]:
    """Sample bitstrings from a wavefunction.

    Args:
        wavefunction: the wavefunction to sample from.
        n_samples: the number of samples taken. Needs to be greater than 0.
        seed: the seed of the sampler

    Returns:
        List[Tuple[int]]: A list of tuples where the each tuple is a sampled bitstring.
    """
    if n_samples < 1:
        raise ValueError("Must sample from wavefunction at least once.")
    return sample_bitstrings_from_probabilities(
        wavefunction.get_probabilities(), n_samples, get_rng(seed)
    )
