################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
"""Errors raised by circuits and simulation engines.

Every error is raised at the operation that triggers it and is never retried:
all of them signal a malformed circuit or gate definition, or a numerical
breakdown the caller has to know about. Approximation introduced by bond
dimension truncation is *not* an error, see `MPSEngine.truncation_error`.
"""


class SimulationError(Exception):
    """Base class of all errors raised by orquestra.qsim."""


class DimensionMismatch(SimulationError, ValueError):
    """Gate arity does not match the number of target qubits, or a circuit does
    not fit the engine it is run on."""


class IndexOutOfRange(SimulationError, IndexError):
    """Qubit index outside of [0, n_qubits)."""


class NonUnitaryGate(SimulationError, ValueError):
    """Gate matrix does not satisfy G†G = I within tolerance."""


class NumericalInstability(SimulationError, ArithmeticError):
    """SVD failed to converge or the state norm drifted beyond tolerance."""


class ResourceExceeded(SimulationError, MemoryError):
    """Requested representation does not fit the configured memory ceiling."""
