################################################################################
# © Copyright 2021-2022 Zapata Computing Inc.
################################################################################
"""Catalogue of built-in gates."""
from typing import Callable, Dict, Union

from . import _gates
from . import _matrices as _mat

GatePrototype = Callable[..., _gates.MatrixFactoryGate]
GateRef = Union[_gates.Gate, GatePrototype]


def make_parametric_gate_prototype(
    name, matrix_factory, num_qubits, num_params=1
) -> GatePrototype:
    def _factory(*gate_params):
        if len(gate_params) != num_params:
            raise ValueError(
                f"Gate {name} expects {num_params} parameter(s), "
                f"got {len(gate_params)}."
            )
        return _gates.MatrixFactoryGate(name, matrix_factory, gate_params, num_qubits)

    _factory.__name__ = name
    _factory.num_params = num_params  # type: ignore
    return _factory


def _fixed(name, matrix_factory, num_qubits, is_hermitian=False):
    return _gates.MatrixFactoryGate(
        name, matrix_factory, (), num_qubits, is_hermitian=is_hermitian
    )


# --- non-parametric, single qubit gates ---
I = _fixed("I", _mat.i_matrix, 1, is_hermitian=True)  # noqa: E741
X = _fixed("X", _mat.x_matrix, 1, is_hermitian=True)
Y = _fixed("Y", _mat.y_matrix, 1, is_hermitian=True)
Z = _fixed("Z", _mat.z_matrix, 1, is_hermitian=True)
H = _fixed("H", _mat.h_matrix, 1, is_hermitian=True)
S = _fixed("S", _mat.s_matrix, 1)
T = _fixed("T", _mat.t_matrix, 1)
SX = _fixed("SX", _mat.sx_matrix, 1)

# --- parametric, single qubit gates ---
RX = make_parametric_gate_prototype("RX", _mat.rx_matrix, 1)
RY = make_parametric_gate_prototype("RY", _mat.ry_matrix, 1)
RZ = make_parametric_gate_prototype("RZ", _mat.rz_matrix, 1)
PHASE = make_parametric_gate_prototype("PHASE", _mat.phase_matrix, 1)
U3 = make_parametric_gate_prototype("U3", _mat.u3_matrix, 1, num_params=3)

# --- non-parametric, two qubit gates ---
CNOT = _fixed("CNOT", _mat.cnot_matrix, 2, is_hermitian=True)
CZ = _fixed("CZ", _mat.cz_matrix, 2, is_hermitian=True)
SWAP = _fixed("SWAP", _mat.swap_matrix, 2, is_hermitian=True)
ISWAP = _fixed("ISWAP", _mat.iswap_matrix, 2)

# --- parametric, two qubit gates ---
CPHASE = make_parametric_gate_prototype("CPHASE", _mat.cphase_matrix, 2)
XX = make_parametric_gate_prototype("XX", _mat.xx_matrix, 2)
YY = make_parametric_gate_prototype("YY", _mat.yy_matrix, 2)
ZZ = make_parametric_gate_prototype("ZZ", _mat.zz_matrix, 2)

# --- three qubit gates ---
CCX = X.controlled(2)

_BUILTIN_GATES: Dict[str, GateRef] = {
    "I": I,
    "X": X,
    "Y": Y,
    "Z": Z,
    "H": H,
    "S": S,
    "T": T,
    "SX": SX,
    "RX": RX,
    "RY": RY,
    "RZ": RZ,
    "PHASE": PHASE,
    "U3": U3,
    "CNOT": CNOT,
    "CZ": CZ,
    "SWAP": SWAP,
    "ISWAP": ISWAP,
    "CPHASE": CPHASE,
    "XX": XX,
    "YY": YY,
    "ZZ": ZZ,
    "CCX": CCX,
}

_ALIASES = {"P": "PHASE", "CX": "CNOT", "TOFFOLI": "CCX", "ID": "I"}


def builtin_gate_by_name(name: str) -> GateRef:
    """Look up a built-in gate (or a prototype, for parametric gates) by name.

    Names are case insensitive; "P", "CX", "TOFFOLI" and "ID" are accepted as
    aliases.
    """
    key = name.upper()
    key = _ALIASES.get(key, key)
    try:
        return _BUILTIN_GATES[key]
    except KeyError:
        raise ValueError(f"Unknown gate {name}.") from None


def is_parametric(gate_ref: GateRef) -> bool:
    return not isinstance(gate_ref, _gates.Gate)
