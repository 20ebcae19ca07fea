################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
import numpy as np
import pytest
import sympy

from orquestra.qsim.circuits import (
    CCX,
    CNOT,
    CPHASE,
    ISWAP,
    PHASE,
    RX,
    RY,
    RZ,
    SWAP,
    SX,
    U3,
    XX,
    YY,
    ZZ,
    H,
    S,
    T,
    X,
    Z,
    builtin_gate_by_name,
    gate_matrix,
    is_parametric,
)

SQRT_HALF = 1 / np.sqrt(2)


@pytest.mark.parametrize(
    "gate, expected_matrix",
    [
        (X, [[0, 1], [1, 0]]),
        (H, [[SQRT_HALF, SQRT_HALF], [SQRT_HALF, -SQRT_HALF]]),
        (S, [[1, 0], [0, 1j]]),
        (T, [[1, 0], [0, np.exp(1j * np.pi / 4)]]),
        (PHASE(0.3), [[1, 0], [0, np.exp(0.3j)]]),
        (CNOT, [[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 0, 1], [0, 0, 1, 0]]),
        (SWAP, [[1, 0, 0, 0], [0, 0, 1, 0], [0, 1, 0, 0], [0, 0, 0, 1]]),
        (CPHASE(0.7), np.diag([1, 1, 1, np.exp(0.7j)])),
    ],
)
def test_builtin_gate_has_expected_matrix(gate, expected_matrix):
    np.testing.assert_allclose(gate_matrix(gate), expected_matrix, atol=1e-15)


def test_sx_squared_is_x():
    np.testing.assert_allclose(
        gate_matrix(SX) @ gate_matrix(SX), gate_matrix(X), atol=1e-15
    )


def test_hadamard_squared_is_identity():
    np.testing.assert_allclose(
        gate_matrix(H) @ gate_matrix(H), np.eye(2), atol=1e-15
    )


def test_toffoli_flips_target_only_when_both_controls_are_set():
    expected = np.eye(8)
    expected[[6, 7]] = expected[[7, 6]]
    np.testing.assert_array_equal(gate_matrix(CCX), expected)
    assert CCX.num_qubits == 3


@pytest.mark.parametrize("angle", [0.0, 0.4, np.pi, -2.1])
def test_rotations_are_exponentials_of_paulis(angle):
    paulis = {
        RX: np.array([[0, 1], [1, 0]]),
        RY: np.array([[0, -1j], [1j, 0]]),
        RZ: np.array([[1, 0], [0, -1]]),
    }
    for prototype, pauli in paulis.items():
        expected = np.cos(angle / 2) * np.eye(2) - 1j * np.sin(angle / 2) * pauli
        np.testing.assert_allclose(gate_matrix(prototype(angle)), expected, atol=1e-12)


@pytest.mark.parametrize("angle", [0.3, 1.7])
def test_two_qubit_pauli_rotations_are_exponentials_of_pauli_products(angle):
    x = np.array([[0, 1], [1, 0]])
    y = np.array([[0, -1j], [1j, 0]])
    z = np.diag([1, -1])
    for prototype, pauli in ((XX, x), (YY, y), (ZZ, z)):
        product = np.kron(pauli, pauli)
        expected = np.cos(angle / 2) * np.eye(4) - 1j * np.sin(angle / 2) * product
        np.testing.assert_allclose(gate_matrix(prototype(angle)), expected, atol=1e-12)


def test_u3_reduces_to_ry_when_phases_vanish():
    np.testing.assert_allclose(
        gate_matrix(U3(0.9, 0, 0)), gate_matrix(RY(0.9)), atol=1e-12
    )


def test_iswap_exchanges_01_and_10_with_phase_i():
    matrix = gate_matrix(ISWAP)
    assert matrix[1, 2] == 1j and matrix[2, 1] == 1j


def test_s_dagger_is_inverse_of_s():
    np.testing.assert_allclose(
        gate_matrix(S.dagger) @ gate_matrix(S), np.eye(2), atol=1e-15
    )


class TestBuiltinGateByName:
    @pytest.mark.parametrize(
        "name, expected_gate",
        [("X", X), ("h", H), ("cx", CNOT), ("CNOT", CNOT), ("toffoli", CCX), ("Z", Z)],
    )
    def test_returns_non_parametric_gates(self, name, expected_gate):
        assert builtin_gate_by_name(name) == expected_gate

    @pytest.mark.parametrize("name", ["RX", "p", "U3", "cphase", "ZZ"])
    def test_returns_prototypes_of_parametric_gates(self, name):
        assert is_parametric(builtin_gate_by_name(name))

    def test_prototype_creates_gate_with_given_params(self):
        theta = sympy.Symbol("theta")
        gate = builtin_gate_by_name("RX")(theta)
        assert gate == RX(theta)
        assert gate.free_symbols == [theta]

    @pytest.mark.parametrize(
        "prototype, params", [(RX, ()), (RZ, (0.1, 0.2)), (U3, (0.1, 0.2))]
    )
    def test_prototype_rejects_wrong_number_of_params(self, prototype, params):
        with pytest.raises(ValueError, match="expects"):
            prototype(*params)

    def test_unknown_name_raises_value_error(self):
        with pytest.raises(ValueError):
            builtin_gate_by_name("FOO")


def test_non_parametric_gates_are_not_parametric():
    assert not is_parametric(X)
    assert not is_parametric(CCX)
