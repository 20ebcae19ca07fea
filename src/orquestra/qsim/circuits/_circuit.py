################################################################################
# © Copyright 2021-2022 Zapata Computing Inc.
################################################################################
"""Ordered sequence of gate and measurement operations."""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import sympy

from ..typing import Parameter
from ._builtin_gates import builtin_gate_by_name, is_parametric
from ._gates import GateOperation
from ._measurement import Basis, MeasureOperation
from ._operations import Operation, get_free_symbols

CircuitOperation = Union[GateOperation, MeasureOperation]


def _circuit_size_by_operations(operations: Iterable[CircuitOperation]) -> int:
    return max(
        (max(op.qubit_indices) + 1 for op in operations if op.qubit_indices),
        default=0,
    )


class Circuit:
    """Orquestra representation of a quantum circuit.

    Operations sharing a qubit are strictly ordered, as they appear in
    `operations`. Operations on disjoint qubits commute.

    Args:
        operations: gate and measurement operations.
        n_qubits: width of the circuit. Defaults to one more than the largest
            qubit index used by `operations`.
    """

    def __init__(
        self,
        operations: Optional[Iterable[CircuitOperation]] = None,
        n_qubits: Optional[int] = None,
    ):
        self._operations: List[CircuitOperation] = (
            list(operations) if operations is not None else []
        )
        self._n_qubits = (
            n_qubits
            if n_qubits is not None
            else _circuit_size_by_operations(self._operations)
        )
        if self._n_qubits < _circuit_size_by_operations(self._operations):
            raise ValueError(
                f"Circuit declared with {self._n_qubits} qubits uses qubit indices "
                "beyond that."
            )

    @property
    def operations(self) -> List[CircuitOperation]:
        return self._operations

    @property
    def n_qubits(self) -> int:
        return self._n_qubits

    @property
    def free_symbols(self) -> List[sympy.Symbol]:
        """Unbound symbols of all gate operations, in order of first occurrence."""
        return get_free_symbols(
            symbol for operation in self._operations for symbol in operation.free_symbols
        )

    @property
    def measurement_operations(self) -> List[MeasureOperation]:
        return [op for op in self._operations if isinstance(op, MeasureOperation)]

    @property
    def has_measurements(self) -> bool:
        return any(isinstance(op, MeasureOperation) for op in self._operations)

    def bind(self, symbols_map: Dict[sympy.Symbol, Parameter]) -> "Circuit":
        return type(self)(
            [op.bind(symbols_map) for op in self._operations], self._n_qubits
        )

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, type(self)):
            return False
        return (
            self.n_qubits == other.n_qubits and self.operations == other.operations
        )

    def __add__(self, other: Union["Circuit", Operation]) -> "Circuit":
        return _append_to_circuit(other, self)

    def __iadd__(self, other: Union["Circuit", Operation]) -> "Circuit":
        new_circuit = _append_to_circuit(other, self)
        if new_circuit is NotImplemented:
            return NotImplemented
        self._operations = new_circuit.operations
        self._n_qubits = new_circuit.n_qubits
        return self

    def __len__(self) -> int:
        return len(self._operations)

    def __repr__(self):
        return f"{type(self).__name__}(operations=[{', '.join(map(str, self.operations))}], n_qubits={self.n_qubits})"  # noqa: E501

    @classmethod
    def from_records(
        cls, records: Sequence[Mapping[str, Any]], n_qubits: Optional[int] = None
    ) -> "Circuit":
        """Build a circuit from plain records.

        Each record is either a gate application
        `{"gate_id": "CX", "target_qubits": [0, 1], "params": [...]}` (params are
        optional) or a measurement request
        `{"measure": True, "qubit_index": 0, "basis": "Z"}` (`qubit_index` may be
        a list, `basis` defaults to Z).
        """
        return cls([_operation_from_record(record) for record in records], n_qubits)


def _operation_from_record(record: Mapping[str, Any]) -> CircuitOperation:
    if record.get("measure"):
        try:
            qubits = record["qubit_index"]
        except KeyError:
            raise ValueError(f"Measurement record {record} lacks qubit_index.") from None
        return MeasureOperation(
            (qubits,) if isinstance(qubits, int) else tuple(qubits),
            Basis.parse(record.get("basis", Basis.Z)),
        )

    try:
        gate_ref = builtin_gate_by_name(record["gate_id"])
        targets = tuple(record["target_qubits"])
    except KeyError as error:
        raise ValueError(f"Gate record {record} lacks field {error}.") from None

    params = tuple(record.get("params", ()))
    if is_parametric(gate_ref):
        if len(params) != gate_ref.num_params:
            raise ValueError(
                f"Gate {record['gate_id']} expects {gate_ref.num_params} "
                f"parameter(s), got {len(params)}."
            )
        gate = gate_ref(*params)
    elif params:
        raise ValueError(f"Gate {record['gate_id']} does not take parameters.")
    else:
        gate = gate_ref
    return gate(*targets)


def _append_to_circuit(other: Union[Circuit, Operation], circuit: Circuit):
    if isinstance(other, Circuit):
        return type(circuit)(
            operations=[*circuit.operations, *other.operations],
            n_qubits=max(circuit.n_qubits, other.n_qubits),
        )
    elif isinstance(other, (GateOperation, MeasureOperation)):
        return type(circuit)(
            operations=[*circuit.operations, other],
            n_qubits=max(circuit.n_qubits, max(other.qubit_indices) + 1),
        )
    else:
        return NotImplemented
