################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
"""Numerical tolerances shared by gates and engines."""
from dataclasses import dataclass

DEFAULT_MAX_MEMORY_BYTES = 2**30


@dataclass(frozen=True)
class Tolerances:
    """Tolerances used when validating gates and states.

    Args:
        unitarity: maximal elementwise deviation of G†G from identity.
        normalization: maximal deviation of the squared state norm from 1 before
            the state is considered numerically broken.
        svd_cutoff: singular values smaller than `svd_cutoff` times the largest
            one are dropped when splitting MPS tensors.
    """

    unitarity: float = 1e-9
    normalization: float = 1e-8
    svd_cutoff: float = 1e-14

    def __post_init__(self):
        for name in ("unitarity", "normalization", "svd_cutoff"):
            if getattr(self, name) < 0:
                raise ValueError(f"Tolerance {name} has to be nonnegative.")


DEFAULT_TOLERANCES = Tolerances()
