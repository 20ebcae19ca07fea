################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
from functools import partial

import numpy as np
import pytest

from orquestra.qsim.api.simulation_engine_contracts import (
    engine_contracts_for_tolerance,
    engine_error_contracts,
    engine_gate_compatibility_contracts,
)
from orquestra.qsim.circuits import CCX, CNOT, Circuit, H, X, measure
from orquestra.qsim.engines import DenseEngine, MPSEngine
from orquestra.qsim.testing import create_random_circuit
from orquestra.qsim.utils import RNDSEED

MPS_FACTORIES = [MPSEngine, partial(MPSEngine, max_bond_dimension=16)]


def _ghz_circuit(n_qubits):
    return Circuit(
        [H(0)] + [CNOT(qubit, qubit + 1) for qubit in range(n_qubits - 1)]
    )


def _assert_chain_is_left_orthonormal_up_to(engine, site):
    for tensor in engine.tensors[:site]:
        left, physical, right = tensor.shape
        matrix = tensor.reshape(left * physical, right)
        np.testing.assert_allclose(
            matrix.conj().T @ matrix, np.eye(right), atol=1e-10
        )


@pytest.mark.parametrize("factory", MPS_FACTORIES)
@pytest.mark.parametrize("contract", engine_contracts_for_tolerance())
def test_mps_engine_fulfills_engine_contracts(contract, factory):
    assert contract(factory)


@pytest.mark.parametrize("contract", engine_error_contracts())
def test_mps_engine_fulfills_error_contracts(contract):
    assert contract(MPSEngine)


@pytest.mark.parametrize("contract", engine_gate_compatibility_contracts())
def test_mps_engine_uses_correct_gate_definitions(contract):
    assert contract(MPSEngine)


class TestBondDimensions:
    def test_product_state_has_trivial_bonds(self):
        engine = MPSEngine(4)
        engine.run(Circuit([H(0), X(2), H(3)]))
        assert engine.bond_dimensions == [1, 1, 1]

    def test_site_tensors_have_dimension_one_end_bonds(self):
        engine = MPSEngine(3)
        engine.run(_ghz_circuit(3))
        assert engine.tensors[0].shape[0] == 1
        assert engine.tensors[-1].shape[2] == 1
        assert all(tensor.shape[1] == 2 for tensor in engine.tensors)

    def test_ghz_state_has_bonds_of_dimension_two(self):
        engine = MPSEngine(6)
        engine.run(_ghz_circuit(6))
        assert engine.bond_dimensions == [2] * 5
        assert engine.truncation_error == 0
        assert engine.fidelity == 1

    def test_bonds_never_exceed_max_bond_dimension(self):
        engine = MPSEngine(6, max_bond_dimension=2)
        engine.run(create_random_circuit(6, 40, seed=RNDSEED))
        assert max(engine.bond_dimensions) <= 2

    def test_chain_left_of_last_updated_site_is_left_orthonormal(self):
        engine = MPSEngine(5)
        engine.run(create_random_circuit(5, 20, seed=RNDSEED))
        engine.apply_gate(CNOT, [3, 4])
        _assert_chain_is_left_orthonormal_up_to(engine, 4)


class TestTruncation:
    def test_bell_pair_truncated_to_single_bond_loses_half_of_weight(self):
        engine = MPSEngine(2, max_bond_dimension=1)
        engine.run(Circuit([H(0), CNOT(0, 1)]))

        assert engine.truncation_error == pytest.approx(0.5)
        assert engine.fidelity == pytest.approx(0.5)
        assert engine.bond_dimensions == [1]

        probabilities = engine.get_probabilities()
        assert probabilities[0] + probabilities[3] == pytest.approx(1.0)
        assert sorted(probabilities) == pytest.approx([0, 0, 0, 1])

    def test_truncated_state_stays_normalized(self):
        engine = MPSEngine(6, max_bond_dimension=2)
        engine.run(create_random_circuit(6, 40, seed=RNDSEED))

        assert engine.norm() == pytest.approx(1.0)
        assert 0 < engine.truncation_error
        assert 0 < engine.fidelity < 1

    def test_truncation_error_is_monotone(self):
        engine = MPSEngine(5, max_bond_dimension=2)
        errors = []
        for operation in create_random_circuit(5, 30, seed=RNDSEED).operations:
            engine.apply(operation)
            errors.append(engine.truncation_error)
        assert all(later >= earlier for earlier, later in zip(errors, errors[1:]))

    def test_large_bond_dimension_is_exact(self):
        circuit = create_random_circuit(6, 40, seed=RNDSEED)
        engine = MPSEngine(6, max_bond_dimension=8)
        reference = DenseEngine(6)
        engine.run(circuit)
        reference.run(circuit)

        np.testing.assert_allclose(
            engine.get_amplitudes(), reference.get_amplitudes(), atol=1e-9
        )
        assert engine.truncation_error < 1e-20

    def test_reset_clears_truncation_statistics(self):
        engine = MPSEngine(2, max_bond_dimension=1)
        engine.run(Circuit([H(0), CNOT(0, 1)]))
        engine.reset()
        assert engine.truncation_error == 0
        assert engine.fidelity == 1

    @pytest.mark.parametrize("max_bond_dimension", [0, -4])
    def test_non_positive_max_bond_dimension_raises_value_error(
        self, max_bond_dimension
    ):
        with pytest.raises(ValueError):
            MPSEngine(3, max_bond_dimension=max_bond_dimension)


class TestNonAdjacentGates:
    @pytest.mark.parametrize(
        "circuit",
        [
            Circuit([H(0), CNOT(0, 4)]),
            Circuit([H(4), CNOT(4, 1), X(2)]),
            Circuit([X(0), H(3), CCX(3, 0, 2)]),
            Circuit([H(1), CCX(4, 1, 0)]),
        ],
    )
    def test_match_dense_engine(self, circuit):
        engine = MPSEngine(5)
        reference = DenseEngine(5)
        engine.run(circuit)
        reference.run(circuit)

        np.testing.assert_allclose(
            engine.get_amplitudes(), reference.get_amplitudes(), atol=1e-12
        )

    def test_qubits_are_returned_to_their_sites(self):
        engine = MPSEngine(4)
        engine.run(Circuit([X(1), CNOT(1, 3)]))
        np.testing.assert_allclose(
            engine.get_amplitudes(), np.eye(16)[0b0101], atol=1e-12
        )


class TestMarginalsAndSampling:
    def test_marginals_do_not_contract_the_whole_chain(self, monkeypatch):
        engine = MPSEngine(8)
        engine.run(_ghz_circuit(8))

        def _fail():
            raise AssertionError("Full contraction should not be needed.")

        monkeypatch.setattr(engine, "get_amplitudes", _fail)

        np.testing.assert_allclose(
            engine.get_marginal_probabilities([6, 2]), [0.5, 0, 0, 0.5], atol=1e-12
        )
        np.testing.assert_allclose(
            engine.get_marginal_probabilities([5]), [0.5, 0.5], atol=1e-12
        )

    def test_marginals_of_non_adjacent_qubits_match_dense_engine(self):
        circuit = create_random_circuit(6, 30, seed=RNDSEED)
        engine = MPSEngine(6)
        reference = DenseEngine(6)
        engine.run(circuit)
        reference.run(circuit)

        for qubits in ([0], [5, 1], [2, 4, 3], [0, 5]):
            np.testing.assert_allclose(
                engine.get_marginal_probabilities(qubits),
                reference.get_marginal_probabilities(qubits),
                atol=1e-10,
            )

    def test_samples_of_ghz_state_are_perfectly_correlated(self):
        engine = MPSEngine(7)
        engine.run(_ghz_circuit(7))

        samples = engine.sample_bitstrings(200, rng=RNDSEED)

        assert set(samples) == {(0,) * 7, (1,) * 7}

    def test_sampling_does_not_change_bond_dimensions(self):
        engine = MPSEngine(5)
        engine.run(_ghz_circuit(5))
        engine.sample_bitstrings(10, rng=RNDSEED)
        assert engine.bond_dimensions == [2] * 4

    def test_sampling_needs_positive_number_of_samples(self):
        with pytest.raises(ValueError):
            MPSEngine(2).sample_bitstrings(0)

    def test_measuring_one_qubit_of_ghz_state_collapses_all(self):
        engine = MPSEngine(5)
        outcomes = engine.run(_ghz_circuit(5) + measure(2))

        bit = outcomes[0].bits[0]
        np.testing.assert_allclose(
            engine.get_probabilities(), np.eye(32)[31 * bit], atol=1e-12
        )
