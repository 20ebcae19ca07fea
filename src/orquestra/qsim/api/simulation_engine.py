################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
"""The SimulationEngine protocol and ABC for implementing it."""
import copy
import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Protocol, Sequence, Union

import numpy as np

from ..circuits import (
    Basis,
    Circuit,
    Gate,
    GateOperation,
    MeasureOperation,
    QubitPermutation,
    check_unitarity,
    gate_matrix,
    validate_qubit_indices,
)
from ..config import DEFAULT_TOLERANCES, Tolerances
from ..errors import DimensionMismatch, IndexOutOfRange, NumericalInstability
from ..measurements import (
    MeasurementOutcome,
    basis_change_operations,
    born_probabilities,
    draw_bit,
    inverse_basis_change_operations,
    marginalize,
    sample_bitstrings_from_probabilities,
)
from ..typing import Bitstring, RNGLike, Transposition
from ..utils import get_rng
from ..wavefunction import Wavefunction

logger = logging.getLogger(__name__)


class SimulationEngine(Protocol):
    """The protocol for objects holding and evolving an N-qubit pure state.

    Every engine starts in |0...0> and mutates its state in place. All engines
    produce the same results for the same circuit, up to floating point error and,
    for truncating engines, up to the reported `truncation_error`.
    """

    @property
    def n_qubits(self) -> int:
        """Number of qubits, fixed at construction."""

    @property
    def truncation_error(self) -> float:
        """Accumulated discarded weight of all truncations so far."""

    @property
    def fidelity(self) -> float:
        """Estimated fidelity of the state with the exact one (1 if exact)."""

    def apply_gate(self, gate: Gate, targets: Sequence[int]) -> None:
        """Apply `gate` to the ordered `targets`.

        Raises:
            DimensionMismatch: if gate arity differs from the number of targets.
            IndexOutOfRange: if any target is outside [0, n_qubits).
            NonUnitaryGate: if the gate matrix is not unitary.
        """

    def apply(
        self,
        operation: Union[GateOperation, MeasureOperation],
        rng: RNGLike = None,
    ) -> Optional[MeasurementOutcome]:
        """Apply a single circuit operation, returning outcome of measurements."""

    def run(self, circuit: Circuit, rng: RNGLike = None) -> List[MeasurementOutcome]:
        """Apply all operations of `circuit` in order.

        Returns:
            Outcomes of the measure operations of `circuit`, in circuit order.
        """

    def measure(
        self,
        qubit_indices: Union[int, Sequence[int]],
        basis: Union[str, Basis] = Basis.Z,
        rng: RNGLike = None,
    ) -> MeasurementOutcome:
        """Projectively measure `qubit_indices` in `basis`, collapsing the state."""

    def sample(self, rng: RNGLike = None) -> MeasurementOutcome:
        """Measure all qubits in the Z basis, collapsing the state."""

    def sample_bitstrings(self, n_samples: int, rng: RNGLike = None) -> List[Bitstring]:
        """Draw `n_samples` bitstrings without altering the state."""

    def get_probabilities(self) -> np.ndarray:
        """Born probabilities of all 2^N basis states, summing to 1."""

    def get_marginal_probabilities(self, qubit_indices: Sequence[int]) -> np.ndarray:
        """Joint distribution of `qubit_indices`, in their listed order."""

    def get_amplitudes(self) -> np.ndarray:
        """Normalized 2^N amplitude vector. Meant for diagnostics on small N."""

    def get_wavefunction(self) -> Wavefunction:
        """The state as a Wavefunction."""

    def norm(self) -> float:
        """Norm of the stored (possibly slightly unnormalized) state."""

    def permute_qubits(self, transpositions: Iterable[Transposition]) -> None:
        """Exchange qubits at the given pairs of positions, left to right."""

    def reset(self) -> None:
        """Return to |0...0>, clearing truncation statistics."""

    def copy(self) -> "SimulationEngine":
        """Independent engine holding a copy of the state."""


class BaseSimulationEngine(ABC, SimulationEngine):
    """ABC for implementing simulation engines.

    Concrete engines decide how the state is stored. They have to implement:

    - `_apply_matrix`, applying an already validated unitary to distinct targets,
    - `_project_qubit`, collapsing one qubit onto a given bit,
    - `_permute`, reordering qubits,
    - `get_amplitudes`, `norm` and `reset`.

    Measurement, sampling, probabilities and circuit execution are built on top of
    those. Engines able to compute marginals more cheaply than through the full
    probability vector should override `get_marginal_probabilities` and
    `_probability_of_zero`.

    Measurements collapse the measured qubits one at a time: each qubit is drawn
    from its marginal under the already collapsed state, so that the joint outcome
    follows the Born rule while engines never need the joint distribution.

    Args:
        n_qubits: number of simulated qubits.
        tolerances: numerical tolerances used for validation.
    """

    def __init__(self, n_qubits: int, *, tolerances: Tolerances = DEFAULT_TOLERANCES):
        if isinstance(n_qubits, bool) or not isinstance(n_qubits, (int, np.integer)):
            raise TypeError(f"Number of qubits has to be an integer, got {n_qubits}.")
        if n_qubits < 1:
            raise ValueError(f"Invalid number of qubits in system. Got {n_qubits}.")
        self._n_qubits = int(n_qubits)
        self.tolerances = tolerances

    @property
    def n_qubits(self) -> int:
        return self._n_qubits

    @property
    def truncation_error(self) -> float:
        return 0.0

    @property
    def fidelity(self) -> float:
        return 1.0

    def apply_gate(self, gate: Gate, targets: Sequence[int]) -> None:
        targets = tuple(targets)
        validate_qubit_indices(targets, gate.num_qubits, self.n_qubits)
        matrix = gate_matrix(gate)
        check_unitarity(matrix, str(gate), self.tolerances.unitarity)
        self._apply_matrix(matrix, targets)
        self._check_norm()

    def apply(
        self,
        operation: Union[GateOperation, MeasureOperation],
        rng: RNGLike = None,
    ) -> Optional[MeasurementOutcome]:
        if isinstance(operation, GateOperation):
            self.apply_gate(operation.gate, operation.qubit_indices)
            return None
        elif isinstance(operation, MeasureOperation):
            return self.measure(operation.qubit_indices, operation.basis, rng)
        raise TypeError(f"Operation {operation} is not supported.")

    def run(self, circuit: Circuit, rng: RNGLike = None) -> List[MeasurementOutcome]:
        if circuit.n_qubits > self.n_qubits:
            raise DimensionMismatch(
                f"Circuit acting on {circuit.n_qubits} qubits cannot be run on "
                f"an engine with {self.n_qubits} qubits."
            )
        if circuit.free_symbols:
            raise ValueError(
                f"Cannot run circuit with free symbols {circuit.free_symbols}."
            )
        rng = get_rng(rng)
        outcomes = []
        for operation in circuit.operations:
            outcome = self.apply(operation, rng)
            if outcome is not None:
                outcomes.append(outcome)
        return outcomes

    def measure(
        self,
        qubit_indices: Union[int, Sequence[int]],
        basis: Union[str, Basis] = Basis.Z,
        rng: RNGLike = None,
    ) -> MeasurementOutcome:
        qubit_indices = self._validate_measured_qubits(qubit_indices)
        basis = Basis.parse(basis)
        rng = get_rng(rng)

        for qubit in qubit_indices:
            for operation in basis_change_operations(qubit, basis):
                self.apply(operation)

        bits = []
        probability = 1.0
        for qubit in qubit_indices:
            probability_of_zero = min(max(self._probability_of_zero(qubit), 0.0), 1.0)
            bit = draw_bit(probability_of_zero, rng)
            bit_probability = (
                probability_of_zero if bit == 0 else 1.0 - probability_of_zero
            )
            self._project_qubit(qubit, bit, bit_probability)
            bits.append(bit)
            probability *= bit_probability

        for qubit in qubit_indices:
            for operation in inverse_basis_change_operations(qubit, basis):
                self.apply(operation)

        logger.debug(
            "Measured qubits %s in %s basis: %s (p=%.6g)",
            qubit_indices,
            basis.value,
            bits,
            probability,
        )
        return MeasurementOutcome(qubit_indices, basis, tuple(bits), probability)

    def sample(self, rng: RNGLike = None) -> MeasurementOutcome:
        return self.measure(range(self.n_qubits), Basis.Z, rng)

    def sample_bitstrings(self, n_samples: int, rng: RNGLike = None) -> List[Bitstring]:
        if n_samples <= 0:
            raise ValueError(f"Number of samples has to be positive, got {n_samples}")
        return sample_bitstrings_from_probabilities(
            self.get_probabilities(), n_samples, get_rng(rng)
        )

    def get_probabilities(self) -> np.ndarray:
        return born_probabilities(self.get_amplitudes())

    def get_marginal_probabilities(self, qubit_indices: Sequence[int]) -> np.ndarray:
        qubit_indices = self._validate_measured_qubits(qubit_indices)
        return marginalize(self.get_probabilities(), self.n_qubits, qubit_indices)

    def get_wavefunction(self) -> Wavefunction:
        return Wavefunction(self.get_amplitudes())

    def permute_qubits(self, transpositions: Iterable[Transposition]) -> None:
        self._permute(QubitPermutation(self.n_qubits, tuple(transpositions)))

    def copy(self) -> "BaseSimulationEngine":
        return copy.deepcopy(self)

    def _probability_of_zero(self, qubit: int) -> float:
        return float(self.get_marginal_probabilities([qubit])[0])

    def _validate_measured_qubits(
        self, qubit_indices: Union[int, Iterable[int]]
    ) -> tuple:
        if isinstance(qubit_indices, (int, np.integer)):
            qubit_indices = (qubit_indices,)
        qubit_indices = tuple(int(qubit) for qubit in qubit_indices)
        if not qubit_indices:
            raise DimensionMismatch("At least one qubit has to be given.")
        if len(set(qubit_indices)) != len(qubit_indices):
            raise DimensionMismatch(f"Qubits have to be distinct: {qubit_indices}.")
        for qubit in qubit_indices:
            if not 0 <= qubit < self.n_qubits:
                raise IndexOutOfRange(
                    f"Qubit index {qubit} out of range for {self.n_qubits} qubit(s)."
                )
        return qubit_indices

    def _check_norm(self) -> None:
        squared_norm = self.norm() ** 2
        if not abs(squared_norm - 1.0) <= self.tolerances.normalization:
            raise NumericalInstability(
                f"State norm drifted to {np.sqrt(squared_norm)} "
                f"(tolerance {self.tolerances.normalization})."
            )

    @abstractmethod
    def _apply_matrix(self, matrix: np.ndarray, targets: Sequence[int]) -> None:
        """Apply unitary `matrix` to distinct, in-range `targets`.

        Implementations can assume that the matrix has been validated and that
        `targets[0]` is the most significant qubit of `matrix`.
        """

    @abstractmethod
    def _project_qubit(self, qubit: int, bit: int, probability: float) -> None:
        """Collapse `qubit` onto `bit` and renormalize.

        `probability` is the probability of `bit` under the current state.
        """

    @abstractmethod
    def _permute(self, permutation: QubitPermutation) -> None:
        """Reorder qubits according to `permutation`."""

    @abstractmethod
    def get_amplitudes(self) -> np.ndarray:
        """Normalized 2^N amplitude vector."""

    @abstractmethod
    def norm(self) -> float:
        """Norm of the stored state."""

    @abstractmethod
    def reset(self) -> None:
        """Return to |0...0>."""
