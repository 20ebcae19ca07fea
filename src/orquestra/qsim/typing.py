################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
"""Types commonly encountered across orquestra.qsim."""
from numbers import Number
from typing import Sequence, Tuple, Union

import numpy as np
import sympy

Parameter = Union[sympy.Symbol, Number]

StateVector = Union[Sequence[complex], np.ndarray]

Bitstring = Tuple[int, ...]

# Anything accepted by numpy.random.default_rng.
RNGLike = Union[None, int, np.random.Generator]

Transposition = Tuple[int, int]
