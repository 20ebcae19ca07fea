################################################################################
# © Copyright 2021-2022 Zapata Computing Inc.
################################################################################
"""Data structures for gates and gate operations."""
import math
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, Protocol, Tuple, runtime_checkable

import numpy as np
import sympy

from ..config import DEFAULT_TOLERANCES
from ..errors import DimensionMismatch, IndexOutOfRange, NonUnitaryGate
from ..typing import Parameter
from ..utils import is_unitary
from ._matrices import controlled_matrix
from ._operations import get_free_symbols, sub_symbols
from ._unitary_tools import lift_matrix

DAGGER_GATE_NAME = "Dagger"
CONTROLLED_GATE_NAME = "Control"


@runtime_checkable
class Gate(Protocol):
    """Interface of a quantum gate representable by a unitary matrix.

    See `orquestra.qsim.circuits` for a list of built-in gates.
    """

    @property
    def name(self) -> str:
        """Globally unique name of the gate.

        Name is used for dispatching in `builtin_gate_by_name` and in textual
        representation. Defining different gates with the same name as built-in ones
        is discouraged."""
        raise NotImplementedError()

    @property
    def params(self) -> Tuple[Parameter, ...]:
        """Value of parameters bound to this gate.

        Nonparametric gates always return (). Parameters can be numbers or sympy
        expressions; gates with free symbols cannot be simulated until bound.
        """
        raise NotImplementedError()

    @property
    def free_symbols(self) -> Iterable[sympy.Symbol]:
        """Unbound symbols in the gate matrix."""
        return get_free_symbols(self.params)

    @property
    def num_qubits(self) -> int:
        """Number of qubits this gate acts on.

        Matrix is computed lazily, and we don't want to create matrix just to know
        the number of qubits.
        """
        raise NotImplementedError()

    @property
    def matrix(self) -> sympy.Matrix:
        """Unitary matrix describing gate's action on state vector."""
        raise NotImplementedError()

    def controlled(self, num_control_qubits: int) -> "Gate":
        raise NotImplementedError()

    @property
    def dagger(self) -> "Gate":
        raise NotImplementedError()

    def bind(self, symbols_map: Dict[sympy.Symbol, Parameter]) -> "Gate":
        raise NotImplementedError()

    def replace_params(self, new_params: Tuple[Parameter, ...]) -> "Gate":
        raise NotImplementedError()

    def __call__(self, *qubit_indices: int) -> "GateOperation":
        """Returns representation of applying this gate on qubits in a circuit."""
        return GateOperation(self, qubit_indices)


def gate_matrix(gate: Gate) -> np.ndarray:
    """Numeric 2^K x 2^K matrix of a gate without free symbols."""
    if gate.free_symbols:
        raise ValueError(
            f"Cannot compute numeric matrix of {gate}, it has free symbols "
            f"{list(gate.free_symbols)}."
        )
    try:
        return np.array(gate.matrix.evalf(), dtype=np.complex128)
    except TypeError as error:
        raise ValueError(f"Matrix of {gate} is not numeric.") from error


def gate_tensor(gate: Gate) -> np.ndarray:
    """Order-2K tensor of a gate: K output indices followed by K input indices."""
    return gate_matrix(gate).reshape((2,) * (2 * gate.num_qubits))


def check_unitarity(matrix: np.ndarray, name: str, tol=DEFAULT_TOLERANCES.unitarity):
    if not is_unitary(matrix, tol):
        raise NonUnitaryGate(f"Matrix of gate {name} is not unitary (tol={tol}).")


def validate_qubit_indices(
    qubit_indices: Tuple[int, ...], num_qubits: int, n_qubits: int = None
):
    """Check arity, uniqueness and (optionally) range of target qubits."""
    if len(qubit_indices) != num_qubits:
        raise DimensionMismatch(
            f"Gate acting on {num_qubits} qubit(s) cannot be applied to "
            f"{len(qubit_indices)} target(s): {qubit_indices}."
        )
    if len(set(qubit_indices)) != len(qubit_indices):
        raise DimensionMismatch(f"Target qubits have to be distinct: {qubit_indices}.")
    upper = math.inf if n_qubits is None else n_qubits
    for index in qubit_indices:
        if not 0 <= index < upper:
            raise IndexOutOfRange(
                f"Qubit index {index} out of range for {n_qubits} qubit(s)."
            )


@dataclass(frozen=True)
class GateOperation:
    """Represents applying a `Gate` to 1 or more qubits in a circuit."""

    gate: Gate
    qubit_indices: Tuple[int, ...]

    def __post_init__(self):
        object.__setattr__(
            self, "qubit_indices", tuple(int(index) for index in self.qubit_indices)
        )
        validate_qubit_indices(self.qubit_indices, self.gate.num_qubits)

    @property
    def params(self) -> Tuple[Parameter, ...]:
        return self.gate.params

    def bind(self, symbols_map: Dict[sympy.Symbol, Parameter]) -> "GateOperation":
        return GateOperation(self.gate.bind(symbols_map), self.qubit_indices)

    def replace_params(self, new_params: Tuple[Parameter, ...]) -> "GateOperation":
        return GateOperation(self.gate.replace_params(new_params), self.qubit_indices)

    def lifted_matrix(self, num_qubits: int) -> np.ndarray:
        return lift_matrix(gate_matrix(self.gate), self.qubit_indices, num_qubits)

    @property
    def free_symbols(self) -> Iterable[sympy.Symbol]:
        return self.gate.free_symbols

    def __str__(self):
        return f"{self.gate}({','.join(map(str, self.qubit_indices))})"


def _all_attrs_equal(obj, other_obj, attrs):
    return all(getattr(obj, attr) == getattr(other_obj, attr) for attr in attrs)


@dataclass(frozen=True)
class MatrixFactoryGate:
    """Data structure for a `Gate` with deferred matrix construction.

    Most built-in gates are instances of this class.

    Keeping a `matrix_factory` instead of a plain gate matrix allows us to defer matrix
    construction to _after_ parameter binding.

    Args:
        name: Name of this gate. Implementers of new gates should make sure that the
            names are unique.
        matrix_factory: a callable mapping arbitrary number of parameters into gate
            matrix. Implementers of new gates should make sure the returned matrices are
            square and of dimension being 2 ** `num_qubits`.
        params: gate parameters - either concrete values or opaque symbols.
            Will be passed to `matrix_factory` when `matrix` property is requested.
        num_qubits: number of qubits this gate acts on.
        is_hermitian: whether the gate is its own inverse.
    """

    name: str
    matrix_factory: Callable[..., sympy.Matrix]
    params: Tuple[Parameter, ...]
    num_qubits: int
    is_hermitian: bool = False

    @property
    def matrix(self) -> sympy.Matrix:
        """Unitary matrix defining action of this gate."""
        return self.matrix_factory(*self.params)

    def bind(self, symbols_map) -> "MatrixFactoryGate":
        return self.replace_params(
            tuple(sub_symbols(param, symbols_map) for param in self.params)
        )

    def replace_params(self, new_params: Tuple[Parameter, ...]) -> "MatrixFactoryGate":
        return replace(self, params=new_params)

    def controlled(self, num_control_qubits: int) -> Gate:
        return ControlledGate(self, num_control_qubits)

    @property
    def dagger(self) -> Gate:
        return self if self.is_hermitian else Dagger(self)

    def __str__(self):
        return (
            f"{self.name}({', '.join(map(str, self.params))})"
            if self.params
            else self.name
        )

    def __eq__(self, other):
        if type(self) != type(other):
            return False

        if not _all_attrs_equal(
            self, other, set(self.__dataclass_fields__) - {"params"}
        ):
            return False

        if len(self.params) != len(other.params):
            return False

        return all(
            _are_matrix_elements_equal(p1, p2)
            for p1, p2 in zip(self.params, other.params)
        )

    # We can't inherit the default implementations from the Gate protocol because
    # of dataclass field ordering, so they are bound explicitly.
    @property
    def free_symbols(self) -> Iterable[sympy.Symbol]:
        """Unbound symbols in the gate matrix. See Gate.free_symbols for details."""
        return get_free_symbols(self.params)

    __call__ = Gate.__call__


@dataclass(frozen=True)
class ControlledGate(Gate):
    """`wrapped_gate` conditioned on `num_control_qubits` leading control qubits.

    Its matrix is the block-diagonal diag(I, U).
    """

    wrapped_gate: Gate
    num_control_qubits: int

    def __post_init__(self):
        if self.num_control_qubits < 1:
            raise ValueError(
                f"Invalid number of control qubits. Got {self.num_control_qubits}"
            )

    @property
    def name(self):
        return CONTROLLED_GATE_NAME

    @property
    def num_qubits(self):
        return self.wrapped_gate.num_qubits + self.num_control_qubits

    @property
    def matrix(self):
        return controlled_matrix(self.wrapped_gate.matrix, self.num_control_qubits)

    @property
    def params(self):
        return self.wrapped_gate.params

    def controlled(self, num_control_qubits: int) -> "ControlledGate":
        return ControlledGate(
            wrapped_gate=self.wrapped_gate,
            num_control_qubits=self.num_control_qubits + num_control_qubits,
        )

    @property
    def dagger(self) -> "ControlledGate":
        return ControlledGate(
            wrapped_gate=self.wrapped_gate.dagger,
            num_control_qubits=self.num_control_qubits,
        )

    def bind(self, symbols_map) -> "Gate":
        return self.wrapped_gate.bind(symbols_map).controlled(self.num_control_qubits)

    def replace_params(self, new_params: Tuple[Parameter, ...]) -> "Gate":
        return self.wrapped_gate.replace_params(new_params).controlled(
            self.num_control_qubits
        )

    def __str__(self):
        return self.num_control_qubits * "c-" + str(self.wrapped_gate)


@dataclass(frozen=True)
class Dagger(Gate):
    wrapped_gate: Gate

    @property
    def matrix(self) -> sympy.Matrix:
        return self.wrapped_gate.matrix.adjoint()

    @property
    def params(self) -> Tuple[Parameter, ...]:
        return self.wrapped_gate.params

    @property
    def num_qubits(self) -> int:
        return self.wrapped_gate.num_qubits

    @property
    def name(self):
        return self.wrapped_gate.name + "_" + DAGGER_GATE_NAME

    def controlled(self, num_control_qubits: int) -> Gate:
        return self.wrapped_gate.controlled(num_control_qubits).dagger

    def bind(self, symbols_map) -> "Gate":
        return self.wrapped_gate.bind(symbols_map).dagger

    def replace_params(self, new_params: Tuple[Parameter, ...]) -> "Gate":
        return self.wrapped_gate.replace_params(new_params).dagger

    @property
    def dagger(self) -> "Gate":
        return self.wrapped_gate

    def __str__(self):
        wrapped_string = str(self.wrapped_gate)
        before_and_after_params = wrapped_string.split("(")
        before_and_after_params[0] += "†"
        return "(".join(before_and_after_params)


def _n_qubits(matrix):
    n_qubits = math.floor(math.log2(matrix.shape[0]))
    if 2**n_qubits != matrix.shape[0] or 2**n_qubits != matrix.shape[1]:
        raise DimensionMismatch("Gate's matrix has to be square with dimension 2^N")
    return n_qubits


@dataclass(frozen=True)
class CustomGateMatrixFactory:
    """Can be passed as `matrix_factory` when a gate matrix isn't lazily evaluated."""

    gate_definition: "CustomGateDefinition"

    @property
    def matrix(self) -> sympy.Matrix:
        return self.gate_definition.matrix

    @property
    def params_ordering(self) -> Tuple[Parameter, ...]:
        return self.gate_definition.params_ordering

    def __call__(self, *gate_params):
        return self.matrix.subs(
            {symbol: arg for symbol, arg in zip(self.params_ordering, gate_params)}
        )


@dataclass(frozen=True)
class CustomGateDefinition:
    """Use this class to define a non-built-in gate.

    Matrices without free symbols are checked for unitarity when the definition is
    created; parametric matrices are checked once bound, when an engine applies them.

    Raises:
        DimensionMismatch: if the matrix is not square of size 2^N.
        NonUnitaryGate: if a numeric matrix is not unitary within `tolerance`.
    """

    gate_name: str
    matrix: sympy.Matrix
    params_ordering: Tuple[sympy.Symbol, ...] = ()
    tolerance: float = DEFAULT_TOLERANCES.unitarity

    def __post_init__(self):
        object.__setattr__(self, "matrix", sympy.ImmutableMatrix(self.matrix))
        n_qubits = _n_qubits(self.matrix)
        object.__setattr__(self, "_n_qubits", n_qubits)
        if not self.matrix.free_symbols:
            check_unitarity(
                np.array(self.matrix.evalf(), dtype=np.complex128),
                self.gate_name,
                self.tolerance,
            )

    def __call__(self, *gate_params):
        return MatrixFactoryGate(
            self.gate_name,
            CustomGateMatrixFactory(self),
            gate_params,
            self._n_qubits,
        )


def _are_matrix_elements_equal(element, another_element):
    """Determine if two elements from gates' matrices are equal.

    Args:
        element: first value to compare. It can be float, complex or a sympy expression.
        another_element: second value to compare.
    """
    difference = sympy.N(sympy.expand(element) - sympy.expand(another_element))

    try:
        return np.allclose(
            float(sympy.re(difference)) + 1j * float(sympy.im(difference)), 0
        )
    except TypeError:
        return False
