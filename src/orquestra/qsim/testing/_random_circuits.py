################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
from typing import Optional, Sequence

import numpy as np

from ..circuits import Circuit, builtin_gate_by_name, is_parametric

CATALOGUE_GATE_NAMES = (
    "I",
    "X",
    "Y",
    "Z",
    "H",
    "S",
    "T",
    "SX",
    "RX",
    "RY",
    "RZ",
    "PHASE",
    "U3",
    "CNOT",
    "CZ",
    "SWAP",
    "ISWAP",
    "CPHASE",
    "XX",
    "YY",
    "ZZ",
    "CCX",
)


def create_random_circuit(
    n_qubits: int,
    depth: int,
    seed: Optional[int] = None,
    gate_names: Sequence[str] = CATALOGUE_GATE_NAMES,
) -> Circuit:
    """Create a circuit of `depth` random catalogue gates for testing purposes.

    Targets of each gate are distinct qubits drawn in random order, so that
    non-adjacent and descending targets are exercised. Gates acting on more
    qubits than `n_qubits` are skipped.
    """
    rng = np.random.default_rng(seed)
    candidates = []
    for name in gate_names:
        gate_ref = builtin_gate_by_name(name)
        if is_parametric(gate_ref):
            n_targets = gate_ref(*[0.0] * gate_ref.num_params).num_qubits
        else:
            n_targets = gate_ref.num_qubits
        if n_targets <= n_qubits:
            candidates.append((name, gate_ref, n_targets))

    operations = []
    for _ in range(depth):
        name, gate_ref, n_targets = candidates[rng.integers(len(candidates))]
        if is_parametric(gate_ref):
            params = rng.uniform(-np.pi, np.pi, size=gate_ref.num_params)
            gate = gate_ref(*(float(param) for param in params))
        else:
            gate = gate_ref
        targets = rng.choice(n_qubits, size=n_targets, replace=False)
        operations.append(gate(*(int(target) for target in targets)))

    return Circuit(operations, n_qubits=n_qubits)
