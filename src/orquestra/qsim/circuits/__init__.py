################################################################################
# © Copyright 2021-2022 Zapata Computing Inc.
################################################################################
"""Gates, operations and circuits consumed by the simulation engines.

Built-in gates
--------------
Non-parametric: I, X, Y, Z, H, S, T, SX, CNOT, CZ, SWAP, ISWAP, CCX.
Parametric (call with parameters first): RX, RY, RZ, PHASE, U3, CPHASE, XX, YY, ZZ.

Usage::

    circuit = Circuit([H(0), CNOT(0, 1), RX(np.pi / 2)(2), measure(0, 1)])

Custom gates
------------
Use `CustomGateDefinition` to define gates from a matrix. Numeric matrices are
checked for unitarity when defined.

Qubit ordering is big-endian: qubit 0 is the most significant bit of basis
indices and the first character of bitstrings.
"""
from ._builtin_gates import (
    CCX,
    CNOT,
    CPHASE,
    CZ,
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
    GatePrototype,
    GateRef,
    H,
    I,
    S,
    T,
    X,
    Y,
    Z,
    builtin_gate_by_name,
    is_parametric,
)
from ._circuit import Circuit, CircuitOperation
from ._gates import (
    ControlledGate,
    CustomGateDefinition,
    Dagger,
    Gate,
    GateOperation,
    MatrixFactoryGate,
    check_unitarity,
    gate_matrix,
    gate_tensor,
    validate_qubit_indices,
)
from ._measurement import Basis, MeasureOperation, measure
from ._operations import Operation, get_free_symbols, sub_symbols
from ._permutations import (
    QubitPermutation,
    adjacent_swap_network,
    is_consecutive_ascending,
    permutation_moving_to_front,
)
from ._unitary_tools import lift_matrix
