################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import numpy as np

from ..api.circuit_runner import BaseCircuitRunner
from ..api.simulation_engine import BaseSimulationEngine
from ..circuits import Circuit
from ..engines import ENGINES, create_engine
from ..measurements import (
    MeasurementOutcome,
    MeasurementOutcomeDistribution,
    Measurements,
    create_bitstring_distribution_from_probability_distribution,
)
from ..utils import get_rng
from ..wavefunction import Wavefunction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationResult:
    """Final state of a single circuit run.

    Attributes:
        amplitudes: 2^N normalized amplitudes, big-endian.
        probabilities: 2^N Born probabilities.
        outcomes: outcomes of the circuit's measure operations, in circuit order.
        truncation_error: discarded weight accumulated by truncating engines.
        fidelity: estimated fidelity with the exact final state.
    """

    amplitudes: np.ndarray
    probabilities: np.ndarray
    outcomes: List[MeasurementOutcome]
    truncation_error: float
    fidelity: float

    @property
    def wavefunction(self) -> Wavefunction:
        return Wavefunction(self.amplitudes)


class EngineCircuitRunner(BaseCircuitRunner):
    """A circuit runner simulating every circuit on a fresh engine.

    Circuits without measure operations are simulated once per call and sampled
    without collapsing the state. Circuits containing measure operations are
    simulated once per shot, and each sampled bitstring concatenates the bits of
    their measurements, in circuit order.

    `n_circuits_executed` counts engine runs, so a job sampling a circuit with
    measure operations adds `n_samples` to it while any other job adds one.

    Args:
        engine_kind: "dense", "tensor" or "mps".
        seed: the seed of the sampler.
        engine_options: passed to every created engine, e.g.
            `max_bond_dimension` for "mps".
    """

    def __init__(
        self,
        engine_kind: str = "dense",
        *,
        seed: Optional[int] = None,
        **engine_options: Any,
    ):
        super().__init__()
        if engine_kind.lower() not in ENGINES:
            raise ValueError(
                f"Unknown engine {engine_kind}. "
                f"Available engines: {', '.join(ENGINES)}."
            )
        self.engine_kind = engine_kind.lower()
        self.engine_options = engine_options
        self.seed = seed
        self._rng = get_rng(seed)
        self.last_truncation_error = 0.0

    def create_engine(self, n_qubits: int) -> BaseSimulationEngine:
        return create_engine(self.engine_kind, n_qubits, **self.engine_options)

    def simulate(self, circuit: Circuit) -> SimulationResult:
        """Run `circuit` once and return its final state.

        Note:
            The result holds 2^N amplitudes, which is only feasible for small
            circuits, regardless of the engine used.
        """
        engine, outcomes = self._execute(circuit)
        self._n_jobs_executed += 1
        return SimulationResult(
            amplitudes=engine.get_amplitudes(),
            probabilities=engine.get_probabilities(),
            outcomes=outcomes,
            truncation_error=engine.truncation_error,
            fidelity=engine.fidelity,
        )

    def _execute(
        self, circuit: Circuit
    ) -> Tuple[BaseSimulationEngine, List[MeasurementOutcome]]:
        if circuit.free_symbols:
            raise ValueError("Cannot sample from circuit with unbound free symbols")
        if circuit.n_qubits < 1:
            raise ValueError("Cannot run circuit acting on no qubits.")
        engine = self.create_engine(circuit.n_qubits)
        outcomes = engine.run(circuit, self._rng)
        self._n_circuits_executed += 1
        self.last_truncation_error = engine.truncation_error
        if engine.truncation_error > 0:
            logger.debug(
                "Circuit run on %s engine lost fidelity: truncation error %.3e",
                self.engine_kind,
                engine.truncation_error,
            )
        return engine, outcomes

    def _run_and_measure(self, circuit: Circuit, n_samples: int) -> Measurements:
        if circuit.has_measurements:
            bitstrings = []
            for _ in range(n_samples):
                _, outcomes = self._execute(circuit)
                bitstrings.append(
                    tuple(bit for outcome in outcomes for bit in outcome.bits)
                )
            return Measurements(bitstrings)

        engine, _ = self._execute(circuit)
        return Measurements(engine.sample_bitstrings(n_samples, self._rng))

    def get_measurement_outcome_distribution(
        self, circuit: Circuit, n_samples: Optional[int] = None
    ) -> MeasurementOutcomeDistribution:
        """Get a distribution of measurement outcomes from a given circuit.

        Args:
            circuit: circuit to be sampled.
            n_samples: number of samples. If None, the exact distribution of the
                final state is returned, which requires `circuit` to contain no
                measure operations.
        Raises:
            ValueError: if n_samples is not positive, or if it is None and the
                circuit contains measure operations.
        """
        if n_samples is not None:
            return super().get_measurement_outcome_distribution(circuit, n_samples)
        if circuit.has_measurements:
            raise ValueError(
                "Exact distribution is only available for circuits without "
                "measure operations."
            )
        engine, _ = self._execute(circuit)
        self._n_jobs_executed += 1
        return create_bitstring_distribution_from_probability_distribution(
            engine.get_probabilities()
        )
