################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
"""Operation protocol and helpers for symbolic parameters."""
from typing import Dict, Iterable, List, Protocol, Tuple, runtime_checkable

import sympy

from ..typing import Parameter


def get_free_symbols(parameters: Iterable[Parameter]) -> List[sympy.Symbol]:
    """Free symbols of the given parameters, in order of first occurrence."""
    symbols = []
    for param in parameters:
        if isinstance(param, sympy.Expr):
            for symbol in sorted(param.free_symbols, key=str):
                if symbol not in symbols:
                    symbols.append(symbol)
    return symbols


def sub_symbols(parameter: Parameter, symbols_map: Dict[sympy.Symbol, Parameter]):
    if isinstance(parameter, sympy.Expr):
        return parameter.subs(symbols_map)
    return parameter


@runtime_checkable
class Operation(Protocol):
    """Anything that can be placed in a circuit.

    Engines dispatch on the concrete operation type, see
    `BaseSimulationEngine.apply`.
    """

    @property
    def qubit_indices(self) -> Tuple[int, ...]:
        raise NotImplementedError()

    @property
    def free_symbols(self) -> Iterable[sympy.Symbol]:
        raise NotImplementedError()

    def bind(self, symbols_map: Dict[sympy.Symbol, Parameter]) -> "Operation":
        raise NotImplementedError()
