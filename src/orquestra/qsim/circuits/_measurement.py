################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
"""Measurement requests that can be placed in a circuit."""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Tuple, Union

import sympy

from ..errors import DimensionMismatch, IndexOutOfRange
from ..typing import Parameter


class Basis(str, Enum):
    """Single-qubit measurement basis."""

    X = "X"
    Y = "Y"
    Z = "Z"

    @classmethod
    def parse(cls, basis: Union[str, "Basis"]) -> "Basis":
        try:
            return cls(basis.upper() if isinstance(basis, str) else basis)
        except ValueError:
            raise ValueError(
                f"Unknown measurement basis {basis}. Expected one of X, Y, Z."
            ) from None


@dataclass(frozen=True)
class MeasureOperation:
    """Projective measurement of one or more qubits in a common basis.

    Outcomes of a measurement operation are reported in the order of
    `qubit_indices`.
    """

    qubit_indices: Tuple[int, ...]
    basis: Basis = Basis.Z

    def __post_init__(self):
        indices = self.qubit_indices
        if isinstance(indices, int):
            indices = (indices,)
        indices = tuple(int(index) for index in indices)
        if not indices:
            raise DimensionMismatch("Measurement has to act on at least one qubit.")
        if len(set(indices)) != len(indices):
            raise DimensionMismatch(f"Measured qubits have to be distinct: {indices}.")
        if any(index < 0 for index in indices):
            raise IndexOutOfRange(f"Negative qubit index in {indices}.")
        object.__setattr__(self, "qubit_indices", indices)
        object.__setattr__(self, "basis", Basis.parse(self.basis))

    @property
    def free_symbols(self) -> Iterable[sympy.Symbol]:
        return []

    def bind(self, symbols_map: Dict[sympy.Symbol, Parameter]) -> "MeasureOperation":
        return self

    def __str__(self):
        return f"Measure[{self.basis.value}]({','.join(map(str, self.qubit_indices))})"


def measure(*qubit_indices: int, basis: Union[str, Basis] = Basis.Z):
    """Shorthand for building `MeasureOperation`s, mirroring `gate(*qubits)`."""
    return MeasureOperation(qubit_indices, Basis.parse(basis))
