################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
from functools import reduce

import numpy as np
import pytest

from orquestra.qsim.circuits import Basis, H, S, gate_matrix
from orquestra.qsim.measurements import (
    MeasurementOutcome,
    basis_change_operations,
    born_probabilities,
    draw_bit,
    inverse_basis_change_operations,
    marginalize,
    project_onto_outcome,
    sample_bitstrings_from_probabilities,
)
from orquestra.qsim.utils import RNDSEED


class FixedDraw:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def _product_of_gate_matrices(operations):
    # operations are applied left to right
    return reduce(
        lambda acc, op: gate_matrix(op.gate) @ acc, operations, np.eye(2)
    )


def test_born_probabilities_are_normalized_squared_magnitudes():
    np.testing.assert_allclose(
        born_probabilities(np.array([1, 1j, 0, -1]) / np.sqrt(3)),
        [1 / 3, 1 / 3, 0, 1 / 3],
    )
    np.testing.assert_allclose(born_probabilities(np.array([3, 4])), [0.36, 0.64])


def test_born_probabilities_of_zero_vector_raise_value_error():
    with pytest.raises(ValueError):
        born_probabilities(np.zeros(4))


class TestMarginalize:
    @pytest.fixture
    def probabilities(self):
        return np.array([0.1, 0.2, 0.3, 0.4])

    @pytest.mark.parametrize(
        "qubit_indices, expected",
        [
            ([0], [0.3, 0.7]),
            ([1], [0.4, 0.6]),
            ([0, 1], [0.1, 0.2, 0.3, 0.4]),
            ([1, 0], [0.1, 0.3, 0.2, 0.4]),
        ],
    )
    def test_marginal_is_ordered_as_requested(
        self, probabilities, qubit_indices, expected
    ):
        np.testing.assert_allclose(
            marginalize(probabilities, 2, qubit_indices), expected
        )

    def test_marginal_of_middle_qubit(self):
        probabilities = np.zeros(8)
        probabilities[0b010] = 0.25
        probabilities[0b111] = 0.75
        np.testing.assert_allclose(marginalize(probabilities, 3, [1]), [0, 1])


class TestBasisChange:
    def test_z_basis_needs_no_operations(self):
        assert basis_change_operations(0, Basis.Z) == []
        assert inverse_basis_change_operations(0, "z") == []

    def test_x_basis_is_rotated_with_hadamard(self):
        assert basis_change_operations(2, "X") == [H(2)]

    def test_y_basis_is_rotated_with_s_dagger_and_hadamard(self):
        assert basis_change_operations(1, "Y") == [S.dagger(1), H(1)]
        assert inverse_basis_change_operations(1, "Y") == [H(1), S(1)]

    @pytest.mark.parametrize(
        "basis, plus_eigenstate",
        [
            ("X", np.array([1, 1]) / np.sqrt(2)),
            ("Y", np.array([1, 1j]) / np.sqrt(2)),
            ("Z", np.array([1, 0])),
        ],
    )
    def test_plus_one_eigenstate_is_rotated_onto_zero(self, basis, plus_eigenstate):
        rotation = _product_of_gate_matrices(basis_change_operations(0, basis))
        np.testing.assert_allclose(
            np.abs(rotation @ plus_eigenstate), [1, 0], atol=1e-15
        )

    @pytest.mark.parametrize("basis", ["X", "Y", "Z"])
    def test_inverse_operations_undo_basis_change(self, basis):
        operations = basis_change_operations(0, basis) + inverse_basis_change_operations(
            0, basis
        )
        np.testing.assert_allclose(
            _product_of_gate_matrices(operations), np.eye(2), atol=1e-15
        )


def test_projecting_bell_state_collapses_both_qubits():
    state = (np.array([1, 0, 0, 1], dtype=complex) / np.sqrt(2)).reshape(2, 2)

    collapsed = project_onto_outcome(state, 0, 1, 0.5)

    np.testing.assert_allclose(collapsed.reshape(-1), [0, 0, 0, 1], atol=1e-15)


def test_projecting_onto_impossible_outcome_raises():
    with pytest.raises(ValueError):
        project_onto_outcome(np.array([1.0, 0.0]), 0, 1, 0.0)


@pytest.mark.parametrize(
    "probability_of_zero, drawn_value, expected_bit",
    [(0.3, 0.2, 0), (0.3, 0.5, 1), (1.0, 0.999, 0), (0.0, 0.0, 1)],
)
def test_draw_bit(probability_of_zero, drawn_value, expected_bit):
    assert draw_bit(probability_of_zero, FixedDraw(drawn_value)) == expected_bit


def test_sampling_deterministic_distribution():
    rng = np.random.default_rng(RNDSEED)
    samples = sample_bitstrings_from_probabilities(np.array([0, 0, 1, 0]), 5, rng)
    assert samples == [(1, 0)] * 5


def test_measurement_outcome_bitstring():
    outcome = MeasurementOutcome((2, 0), Basis.Z, (1, 0), 0.5)
    assert outcome.bitstring == "10"
