################################################################################
# © Copyright 2021-2022 Zapata Computing Inc.
################################################################################
"""Definition of predefined gate matrices.

Matrices are exact sympy expressions written in big-endian order: for two-qubit
gates the first target qubit is the most significant bit of the row/column
index.
"""
import sympy

_SQRT_HALF = 1 / sympy.sqrt(2)

# --- non-parametric gates ---


def i_matrix():
    return sympy.eye(2)


def x_matrix():
    return sympy.Matrix([[0, 1], [1, 0]])


def y_matrix():
    return sympy.Matrix([[0, -sympy.I], [sympy.I, 0]])


def z_matrix():
    return sympy.Matrix([[1, 0], [0, -1]])


def h_matrix():
    return _SQRT_HALF * sympy.Matrix([[1, 1], [1, -1]])


def s_matrix():
    return phase_matrix(sympy.pi / 2)


def t_matrix():
    return phase_matrix(sympy.pi / 4)


def sx_matrix():
    return sympy.Rational(1, 2) * sympy.Matrix(
        [[1 + sympy.I, 1 - sympy.I], [1 - sympy.I, 1 + sympy.I]]
    )


# --- gates with a single param ---


def rx_matrix(angle):
    cos, sin = sympy.cos(angle / 2), sympy.sin(angle / 2)
    return sympy.Matrix([[cos, -sympy.I * sin], [-sympy.I * sin, cos]])


def ry_matrix(angle):
    cos, sin = sympy.cos(angle / 2), sympy.sin(angle / 2)
    return sympy.Matrix([[cos, -sin], [sin, cos]])


def rz_matrix(angle):
    return sympy.diag(sympy.exp(-sympy.I * angle / 2), sympy.exp(sympy.I * angle / 2))


def phase_matrix(angle):
    return sympy.diag(1, sympy.exp(sympy.I * angle))


def u3_matrix(theta, phi, lambda_):
    """Qiskit's U3 convention, i.e. without the global phase of RZ·RY·RZ."""
    cos, sin = sympy.cos(theta / 2), sympy.sin(theta / 2)
    return sympy.Matrix(
        [
            [cos, -sympy.exp(sympy.I * lambda_) * sin],
            [sympy.exp(sympy.I * phi) * sin, sympy.exp(sympy.I * (phi + lambda_)) * cos],
        ]
    )


# --- two qubit gates ---


def cnot_matrix():
    return controlled_matrix(x_matrix())


def cz_matrix():
    return sympy.diag(1, 1, 1, -1)


def swap_matrix():
    return sympy.Matrix([[1, 0, 0, 0], [0, 0, 1, 0], [0, 1, 0, 0], [0, 0, 0, 1]])


def iswap_matrix():
    return sympy.Matrix(
        [[1, 0, 0, 0], [0, 0, sympy.I, 0], [0, sympy.I, 0, 0], [0, 0, 0, 1]]
    )


def cphase_matrix(angle):
    return sympy.diag(1, 1, 1, sympy.exp(sympy.I * angle))


def _pauli_rotation(pauli_product, angle):
    # exp(-i angle/2 P) = cos(angle/2) I - i sin(angle/2) P, valid since P² = I
    return sympy.cos(angle / 2) * sympy.eye(4) - sympy.I * sympy.sin(
        angle / 2
    ) * pauli_product


def xx_matrix(angle):
    return _pauli_rotation(sympy.kronecker_product(x_matrix(), x_matrix()), angle)


def yy_matrix(angle):
    return _pauli_rotation(sympy.kronecker_product(y_matrix(), y_matrix()), angle)


def zz_matrix(angle):
    return _pauli_rotation(sympy.kronecker_product(z_matrix(), z_matrix()), angle)


# --- composite ---


def controlled_matrix(matrix: sympy.Matrix, num_control_qubits: int = 1):
    """Block-diagonal diag(I, U) with controls as the leading qubits."""
    size = matrix.shape[0] * 2**num_control_qubits
    return sympy.diag(sympy.eye(size - matrix.shape[0]), matrix)
