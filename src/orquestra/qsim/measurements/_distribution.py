################################################################################
# © Copyright 2021-2022 Zapata Computing Inc.
################################################################################
"""Probability distributions over measured bitstrings."""
from typing import Dict, Sequence

import numpy as np

from ..utils import get_ordered_list_of_bitstrings


def _normalize(distribution_dict: Dict[str, float]) -> Dict[str, float]:
    norm = sum(distribution_dict.values())
    if not norm > 0:
        raise ValueError("Cannot normalize distribution with zero total probability.")
    return {key: value / norm for key, value in distribution_dict.items()}


def is_normalized(distribution_dict: Dict[str, float], atol: float = 1e-9) -> bool:
    return bool(np.isclose(sum(distribution_dict.values()), 1.0, rtol=0, atol=atol))


class MeasurementOutcomeDistribution:
    """Distribution of bitstrings, keyed by big-endian strings such as "01".

    Args:
        distribution_dict: mapping from bitstrings to probabilities (or weights,
            if `normalize` is True).
        normalize: whether the weights should be rescaled to sum to 1.
    """

    def __init__(self, distribution_dict: Dict[str, float], normalize: bool = False):
        if any(value < 0 for value in distribution_dict.values()):
            raise ValueError("Probabilities cannot be negative.")
        lengths = {len(key) for key in distribution_dict}
        if len(lengths) > 1:
            raise ValueError("All bitstrings of a distribution must have equal length.")
        self.distribution_dict = (
            _normalize(distribution_dict) if normalize else dict(distribution_dict)
        )

    def get_number_of_subsystems(self) -> int:
        return len(next(iter(self.distribution_dict))) if self.distribution_dict else 0

    def __getitem__(self, bitstring: str) -> float:
        return self.distribution_dict.get(bitstring, 0.0)

    def __repr__(self) -> str:
        return f"MeasurementOutcomeDistribution({self.distribution_dict})"


def create_bitstring_distribution_from_probability_distribution(
    probabilities: Sequence[float],
) -> MeasurementOutcomeDistribution:
    """Label probabilities of all 2^N basis states with their bitstrings."""
    n_qubits = int(np.log2(len(probabilities)))
    if 2**n_qubits != len(probabilities):
        raise ValueError(
            "Length of probability vector has to be a power of 2, got "
            f"{len(probabilities)}."
        )
    return MeasurementOutcomeDistribution(
        dict(zip(get_ordered_list_of_bitstrings(n_qubits), map(float, probabilities)))
    )
