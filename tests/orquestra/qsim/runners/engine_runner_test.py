################################################################################
# © Copyright 2021-2022 Zapata Computing Inc.
################################################################################
import numpy as np
import pytest
import sympy

from orquestra.qsim.api.circuit_runner_contracts import CIRCUIT_RUNNER_CONTRACTS
from orquestra.qsim.circuits import CNOT, RX, U3, XX, Circuit, H, X, measure
from orquestra.qsim.runners import EngineCircuitRunner
from orquestra.qsim.utils import RNDSEED

ENGINE_KINDS = ["dense", "tensor", "mps"]


@pytest.fixture(params=ENGINE_KINDS)
def runner(request):
    return EngineCircuitRunner(request.param, seed=RNDSEED)


@pytest.mark.parametrize("contract", CIRCUIT_RUNNER_CONTRACTS)
def test_engine_runner_fulfills_circuit_runner_contracts(contract, runner):
    assert contract(runner)


class TestEngineCircuitRunner:
    @pytest.mark.parametrize(
        "gate",
        [
            XX(sympy.Symbol("theta"))(2, 1),
            U3(
                sympy.Symbol("alpha"),
                sympy.Symbol("beta"),
                sympy.Symbol("gamma"),
            )(1),
        ],
    )
    def test_cannot_sample_from_circuit_containing_free_symbols(self, gate, runner):
        circuit = Circuit([gate])

        with pytest.raises(ValueError):
            runner.run_and_measure(circuit, n_samples=1000)

    def test_unknown_engine_kind_raises_value_error(self):
        with pytest.raises(ValueError):
            EngineCircuitRunner("stabilizer")

    def test_engine_kind_is_case_insensitive(self):
        assert EngineCircuitRunner("MPS").engine_kind == "mps"

    def test_empty_circuit_cannot_be_run(self, runner):
        with pytest.raises(ValueError):
            runner.simulate(Circuit())

    def test_simulate_returns_final_state(self, runner):
        result = runner.simulate(Circuit([H(0), CNOT(0, 1)]))

        np.testing.assert_allclose(
            result.amplitudes, np.array([1, 0, 0, 1]) / np.sqrt(2), atol=1e-12
        )
        np.testing.assert_allclose(result.probabilities, [0.5, 0, 0, 0.5], atol=1e-12)
        assert result.outcomes == []
        assert result.truncation_error == 0
        assert result.fidelity == 1
        assert result.wavefunction.n_qubits == 2

    def test_simulate_reports_outcomes_of_measure_operations(self, runner):
        result = runner.simulate(Circuit([X(1), measure(1), measure(0)]))
        assert [outcome.bits for outcome in result.outcomes] == [(1,), (0,)]

    def test_simulate_counts_as_single_job(self, runner):
        runner.simulate(Circuit([H(0)]))
        assert runner.n_jobs_executed == 1
        assert runner.n_circuits_executed == 1

    def test_circuits_without_measurements_are_simulated_once(self, runner):
        runner.run_and_measure(Circuit([H(0), H(1)]), n_samples=50)
        assert runner.n_circuits_executed == 1

    def test_circuits_with_measurements_are_simulated_once_per_shot(self, runner):
        measurements = runner.run_and_measure(
            Circuit([H(0), measure(0), CNOT(0, 1), measure(1)]), n_samples=20
        )
        assert runner.n_jobs_executed == 1
        assert runner.n_circuits_executed == 20
        assert all(first == second for first, second in measurements.bitstrings)

    def test_same_seed_gives_same_measurements(self):
        circuit = Circuit([H(0), RX(0.4)(1), CNOT(1, 2)])
        first = EngineCircuitRunner("tensor", seed=RNDSEED).run_and_measure(circuit, 30)
        second = EngineCircuitRunner("tensor", seed=RNDSEED).run_and_measure(circuit, 30)
        assert first.bitstrings == second.bitstrings

    def test_counts_of_bell_state_are_correlated(self, runner):
        counts = runner.run_and_measure(
            Circuit([H(0), CNOT(0, 1)]), n_samples=500
        ).get_counts()
        assert set(counts) <= {"00", "11"}
        assert sum(counts.values()) == 500


class TestMeasurementOutcomeDistribution:
    def test_exact_distribution_is_returned_when_n_samples_is_none(self, runner):
        distribution = runner.get_measurement_outcome_distribution(
            Circuit([H(0), CNOT(0, 2)])
        )

        assert distribution.distribution_dict == pytest.approx(
            {
                "000": 0.5,
                "001": 0.0,
                "010": 0.0,
                "011": 0.0,
                "100": 0.0,
                "101": 0.5,
                "110": 0.0,
                "111": 0.0,
            }
        )

    def test_exact_distribution_of_circuit_with_measurements_raises(self, runner):
        with pytest.raises(ValueError):
            runner.get_measurement_outcome_distribution(Circuit([H(0), measure(0)]))

    def test_empirical_distribution_for_given_n_samples(self, runner):
        distribution = runner.get_measurement_outcome_distribution(
            Circuit([X(0), X(1)]), n_samples=10
        )
        assert distribution.distribution_dict == {"11": 1.0}


class TestTruncation:
    def test_last_truncation_error_is_reported(self):
        runner = EngineCircuitRunner("mps", seed=RNDSEED, max_bond_dimension=1)

        runner.run_and_measure(Circuit([H(0), CNOT(0, 1)]), n_samples=10)

        assert runner.last_truncation_error == pytest.approx(0.5)

    def test_simulation_result_carries_fidelity(self):
        runner = EngineCircuitRunner("mps", max_bond_dimension=1)

        result = runner.simulate(Circuit([H(0), CNOT(0, 1)]))

        assert result.fidelity == pytest.approx(0.5)
        assert result.truncation_error == pytest.approx(0.5)

    def test_engines_without_bond_limit_report_no_truncation(self, runner):
        runner.run_and_measure(Circuit([H(0), CNOT(0, 1)]), n_samples=10)
        assert runner.last_truncation_error == 0
