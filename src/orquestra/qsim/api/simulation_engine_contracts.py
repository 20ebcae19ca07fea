################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
"""Contracts every SimulationEngine has to fulfill.

Each contract is a callable taking an engine factory, i.e. a callable creating an
engine for a given number of qubits, and returning True iff the contract holds.
"""
from functools import partial
from typing import Callable

import numpy as np
import sympy

from ..circuits import (
    CNOT,
    CZ,
    RX,
    SWAP,
    Basis,
    Circuit,
    CustomGateDefinition,
    H,
    S,
    T,
    X,
    builtin_gate_by_name,
    gate_matrix,
    lift_matrix,
    measure,
)
from ..config import Tolerances
from ..errors import (
    DimensionMismatch,
    IndexOutOfRange,
    NonUnitaryGate,
    NumericalInstability,
)
from .simulation_engine import SimulationEngine

EngineFactory = Callable[[int], SimulationEngine]

_EXAMPLE_CIRCUITS = [
    Circuit([H(0)]),
    Circuit([H(0), CNOT(0, 1)]),
    Circuit([H(0), CNOT(0, 1), CNOT(1, 2)]),
    Circuit([X(0), CNOT(0, 2)]),
    Circuit([H(2), CNOT(2, 0)]),
]

_CORRESPONDING_AMPLITUDES = [
    np.array([1, 1]) / np.sqrt(2),
    np.array([1, 0, 0, 1]) / np.sqrt(2),
    np.array([1, 0, 0, 0, 0, 0, 0, 1]) / np.sqrt(2),
    np.array([0, 0, 0, 0, 0, 1, 0, 0]),
    np.array([1, 0, 0, 0, 0, 1, 0, 0]) / np.sqrt(2),
]

_ENTANGLING_CIRCUIT = Circuit(
    [H(0), H(1), CNOT(0, 2), RX(0.3)(1), T(2), CZ(1, 3), S(0), CNOT(3, 0), H(2)]
)

_SINGLE_QUBIT_GATES = ["I", "X", "Y", "Z", "H", "S", "T", "SX"]
_TWO_QUBIT_GATES = ["CNOT", "CZ", "SWAP", "ISWAP"]


def _verify_engine_starts_in_zero_state(engine_factory: EngineFactory):
    engine = engine_factory(3)
    expected = np.zeros(8)
    expected[0] = 1
    return np.allclose(engine.get_amplitudes(), expected)


def _verify_amplitudes_of_example_circuits(atol):
    def _contract(engine_factory: EngineFactory):
        results = []
        for circuit, amplitudes in zip(_EXAMPLE_CIRCUITS, _CORRESPONDING_AMPLITUDES):
            engine = engine_factory(circuit.n_qubits)
            engine.run(circuit)
            results.append(np.allclose(engine.get_amplitudes(), amplitudes, atol=atol))
        return all(results)

    return _contract


def _verify_gate_compatibility(engine_factory: EngineFactory, gate_name, atol):
    gate = builtin_gate_by_name(gate_name)
    n_targets = gate.num_qubits
    # Reference: lifted matrix applied to a non-trivial initial state.
    preparation = Circuit([H(0), T(0), H(1), RX(0.7)(2)])
    targets = (2, 0) if n_targets == 2 else (1,)

    engine = engine_factory(3)
    engine.run(preparation)
    initial = engine.get_amplitudes()
    engine.apply_gate(gate, targets)

    expected = lift_matrix(gate_matrix(gate), targets, 3) @ initial
    return np.allclose(engine.get_amplitudes(), expected, atol=atol)


def _verify_probabilities_sum_to_one(engine_factory: EngineFactory):
    engine = engine_factory(4)
    engine.run(_ENTANGLING_CIRCUIT)
    probabilities = engine.get_probabilities()
    return len(probabilities) == 16 and np.isclose(probabilities.sum(), 1.0)


def _verify_norm_is_preserved_by_gates(engine_factory: EngineFactory):
    engine = engine_factory(4)
    norms = []
    for operation in _ENTANGLING_CIRCUIT.operations:
        engine.apply(operation)
        norms.append(engine.norm())
    return np.allclose(norms, 1.0, atol=1e-9)


def _verify_marginals_agree_with_probabilities(engine_factory: EngineFactory):
    engine = engine_factory(4)
    engine.run(_ENTANGLING_CIRCUIT)
    full = engine.get_probabilities().reshape((2,) * 4)
    expected = np.transpose(full.sum(axis=(0, 2)), (1, 0)).reshape(-1)
    return np.allclose(engine.get_marginal_probabilities([3, 1]), expected)


def _verify_sampling_bitstrings_does_not_alter_state(engine_factory: EngineFactory):
    engine = engine_factory(4)
    engine.run(_ENTANGLING_CIRCUIT)
    amplitudes = engine.get_amplitudes()
    samples = engine.sample_bitstrings(20, rng=7)
    return (
        len(samples) == 20
        and all(len(sample) == 4 for sample in samples)
        and np.allclose(engine.get_amplitudes(), amplitudes)
    )


def _verify_sampling_with_same_seed_is_reproducible(engine_factory: EngineFactory):
    engine = engine_factory(4)
    engine.run(_ENTANGLING_CIRCUIT)
    return engine.sample_bitstrings(50, rng=3) == engine.sample_bitstrings(50, rng=3)


def _verify_measurement_is_idempotent(basis):
    def _contract(engine_factory: EngineFactory):
        results = []
        for seed in range(5):
            engine = engine_factory(4)
            engine.run(_ENTANGLING_CIRCUIT)
            first = engine.measure([0, 2], basis, rng=seed)
            second = engine.measure([0, 2], basis, rng=seed + 100)
            results.append(
                first.bits == second.bits and np.isclose(second.probability, 1.0)
            )
        return all(results)

    return _contract


def _verify_measurement_collapses_state_consistently(engine_factory: EngineFactory):
    engine = engine_factory(2)
    engine.run(Circuit([H(0), CNOT(0, 1)]))
    outcome = engine.measure(0, rng=11)
    expected = np.zeros(4)
    expected[3 * outcome.bits[0]] = 1
    return np.isclose(outcome.probability, 0.5) and np.allclose(
        np.abs(engine.get_amplitudes()), expected
    )


def _verify_run_returns_outcomes_of_measure_operations(engine_factory: EngineFactory):
    engine = engine_factory(3)
    outcomes = engine.run(Circuit([X(1), measure(1), measure(0, 2, basis="X")]))
    return (
        len(outcomes) == 2
        and outcomes[0].bits == (1,)
        and outcomes[1].qubit_indices == (0, 2)
        and outcomes[1].basis == Basis.X
    )


def _verify_permuting_qubits_matches_swap_gates(engine_factory: EngineFactory):
    permuted = engine_factory(4)
    permuted.run(_ENTANGLING_CIRCUIT)
    swapped = permuted.copy()
    permuted.permute_qubits([(0, 3), (1, 2), (3, 1)])
    for first, second in [(0, 3), (1, 2), (3, 1)]:
        swapped.apply_gate(SWAP, (first, second))
    return np.allclose(permuted.get_amplitudes(), swapped.get_amplitudes())


def _verify_copy_is_independent(engine_factory: EngineFactory):
    engine = engine_factory(2)
    engine.apply_gate(H, [0])
    duplicate = engine.copy()
    duplicate.apply_gate(X, [1])
    return np.allclose(
        engine.get_amplitudes(), np.array([1, 0, 1, 0]) / np.sqrt(2)
    ) and np.allclose(duplicate.get_amplitudes(), np.array([0, 1, 0, 1]) / np.sqrt(2))


def _verify_reset_returns_to_zero_state(engine_factory: EngineFactory):
    engine = engine_factory(3)
    engine.run(Circuit([H(0), CNOT(0, 2)]))
    engine.reset()
    return np.allclose(engine.get_probabilities(), np.eye(8)[0])


def _raises(engine_factory: EngineFactory, action, error_type):
    engine = engine_factory(3)
    try:
        action(engine)
        return False
    except error_type:
        return True
    except Exception:
        return False


def _verify_gate_arity_mismatch_raises_dimension_mismatch(
    engine_factory: EngineFactory,
):
    return _raises(
        engine_factory, lambda engine: engine.apply_gate(CNOT, [0]), DimensionMismatch
    ) and _raises(
        engine_factory, lambda engine: engine.apply_gate(H, [0, 1]), DimensionMismatch
    )


def _verify_out_of_range_qubit_raises_index_out_of_range(
    engine_factory: EngineFactory,
):
    return (
        _raises(
            engine_factory, lambda engine: engine.apply_gate(X, [3]), IndexOutOfRange
        )
        and _raises(
            engine_factory,
            lambda engine: engine.apply_gate(CNOT, [0, -1]),
            IndexOutOfRange,
        )
        and _raises(
            engine_factory, lambda engine: engine.measure(5), IndexOutOfRange
        )
    )


def _verify_non_unitary_gate_raises_non_unitary_gate(engine_factory: EngineFactory):
    # Symbolic definitions skip the check until parameters are bound.
    theta = sympy.Symbol("theta")
    definition = CustomGateDefinition(
        "SCALE", sympy.Matrix([[theta, 0], [0, 1]]), (theta,)
    )
    return _raises(
        engine_factory,
        lambda engine: engine.apply_gate(definition(2.0), [0]),
        NonUnitaryGate,
    )


def _verify_norm_drift_raises_numerical_instability(engine_factory: EngineFactory):
    # Passes a loose unitarity check but breaks normalization of |00>.
    leaky = CustomGateDefinition(
        "LEAKY", sympy.Matrix(sympy.diag(1.001, 1, 1, 1)), tolerance=1e-2
    )
    engine = engine_factory(2, tolerances=Tolerances(unitarity=1e-2))
    try:
        engine.apply_gate(leaky(), [0, 1])
        return False
    except NumericalInstability:
        return True
    except Exception:
        return False


def _verify_running_too_wide_circuit_raises_dimension_mismatch(
    engine_factory: EngineFactory,
):
    return _raises(
        engine_factory,
        lambda engine: engine.run(Circuit([H(0), CNOT(0, 3)])),
        DimensionMismatch,
    )


def engine_contracts_for_tolerance(atol=1e-9):
    return [
        _verify_engine_starts_in_zero_state,
        _verify_amplitudes_of_example_circuits(atol),
        _verify_probabilities_sum_to_one,
        _verify_norm_is_preserved_by_gates,
        _verify_marginals_agree_with_probabilities,
        _verify_sampling_bitstrings_does_not_alter_state,
        _verify_sampling_with_same_seed_is_reproducible,
        _verify_measurement_is_idempotent(Basis.Z),
        _verify_measurement_is_idempotent(Basis.X),
        _verify_measurement_is_idempotent(Basis.Y),
        _verify_measurement_collapses_state_consistently,
        _verify_run_returns_outcomes_of_measure_operations,
        _verify_permuting_qubits_matches_swap_gates,
        _verify_copy_is_independent,
        _verify_reset_returns_to_zero_state,
    ]


def engine_error_contracts():
    return [
        _verify_gate_arity_mismatch_raises_dimension_mismatch,
        _verify_out_of_range_qubit_raises_index_out_of_range,
        _verify_non_unitary_gate_raises_non_unitary_gate,
        _verify_norm_drift_raises_numerical_instability,
        _verify_running_too_wide_circuit_raises_dimension_mismatch,
    ]


def engine_gate_compatibility_contracts(atol=1e-9, gates_to_exclude=None):
    gates_to_exclude = [] if gates_to_exclude is None else gates_to_exclude

    return [
        partial(_verify_gate_compatibility, gate_name=gate_name, atol=atol)
        for gate_name in _SINGLE_QUBIT_GATES + _TWO_QUBIT_GATES
        if gate_name not in gates_to_exclude
    ]
