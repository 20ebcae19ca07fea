################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
from collections import Counter
from typing import Dict, List, Optional, Sequence

from ..typing import Bitstring
from ..utils import convert_tuples_to_bitstrings
from ._distribution import MeasurementOutcomeDistribution


def convert_bitstring_to_int(bitstring: Sequence[int]) -> int:
    """Convert a bitstring to an integer.

    Args:
        bitstring (list): A list of integers.
    Returns:
        int: The value of the bitstring, where the first bit is the most
            significant (big endian).
    """
    return int("".join(str(bit) for bit in bitstring), 2)


class Measurements:
    """A class representing measurements from a quantum circuit. The bitstrings variable
    represents the internal data structure of the Measurements class. It is expressed as
    a list of tuples wherein each tuple is a measurement and the value of the tuple at a
    given index is the measured bit-value of the qubit (indexed from 0 -> N-1)"""

    def __init__(self, bitstrings: Optional[List[Bitstring]] = None):
        if bitstrings is None:
            self.bitstrings = []
        else:
            self.bitstrings = [tuple(int(bit) for bit in bits) for bits in bitstrings]

    @classmethod
    def from_counts(cls, counts: Dict[str, int]):
        """Create an instance of the Measurements class from a dictionary

        Args:
            counts: mapping of bitstrings to integers representing the number of times
                the bitstring was measured
        """
        measurements = cls()
        measurements.add_counts(counts)
        return measurements

    def __len__(self) -> int:
        return len(self.bitstrings)

    def get_counts(self) -> Dict[str, int]:
        """Get the measurements as a histogram

        Returns:
            A dictionary mapping bitstrings to integers representing the number of times
            the bitstring was measured
        """
        bitstrings = convert_tuples_to_bitstrings(self.bitstrings)
        return dict(Counter(bitstrings))

    def add_counts(self, counts: Dict[str, int]):
        """Add measurements from a histogram

        Args:
            counts: mapping of bitstrings to integers representing the number of times
                the bitstring was measured
                NOTE: bitstrings are indexed from 0 -> N-1, where the "001"
                bitstring represents a measurement of qubit 2 in the 1 state
        """
        for bitstring, count in counts.items():
            self.bitstrings += [tuple(int(bit) for bit in bitstring)] * count

    def get_distribution(self) -> MeasurementOutcomeDistribution:
        """Get the normalized probability distribution representing the measurements

        Returns:
            distribution: bitstring distribution based on the frequency of measurements
        """
        if not self.bitstrings:
            raise ValueError("Cannot compute distribution of empty measurements.")
        counts = self.get_counts()
        num_measurements = len(self.bitstrings)

        return MeasurementOutcomeDistribution(
            {bitstring: count / num_measurements for bitstring, count in counts.items()}
        )
