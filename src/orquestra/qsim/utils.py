################################################################################
# © Copyright 2020-2022 Zapata Computing Inc.
################################################################################
"""General-purpose utilities.

Bitstrings are big-endian throughout orquestra.qsim: the first character (or
the first tuple entry) is qubit 0, which is also the most significant bit of
the corresponding basis index.
"""
from functools import lru_cache
from typing import Iterable, List, Tuple

import numpy as np

from .typing import Bitstring, RNGLike

RNDSEED = 12345


def is_identity(u: np.ndarray, tol=1e-15) -> bool:
    """Test if a matrix is identity.

    Args:
        u: np.ndarray
            Matrix to be checked.
        tol: float
            Threshold below which two matrix elements are considered equal.
    """

    dims = np.array(u).shape
    if len(dims) != 2 or dims[0] != dims[1]:
        raise ValueError("Input matrix is not square.")

    return np.allclose(u, np.eye(u.shape[0]), rtol=0, atol=tol)


def is_unitary(u: np.ndarray, tol=1e-15) -> bool:
    """Test if a matrix is unitary.

    Args:
        u: array
            Matrix to be checked.
        tol: float
            Threshold below which two matrix elements are considered equal.
    """

    u = np.asarray(u)
    dims = u.shape
    if len(dims) != 2 or dims[0] != dims[1]:
        raise ValueError("Input matrix is not square.")

    test_matrix = np.dot(u.T.conj(), u)
    return is_identity(test_matrix, tol)


def get_rng(rng: RNGLike = None) -> np.random.Generator:
    """Coerce None, a seed or an existing generator into a numpy Generator.

    Generators are passed through untouched, so that consecutive calls sharing
    one generator draw consecutive numbers.
    """
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def index_to_bits(index: int, n_qubits: int) -> Bitstring:
    """Convert basis index into a tuple of bits, qubit 0 first."""
    if not 0 <= index < 2**n_qubits:
        raise ValueError(
            f"Index {index} cannot be represented using {n_qubits} bits."
        )
    return tuple((index >> (n_qubits - 1 - qubit)) & 1 for qubit in range(n_qubits))


def bits_to_index(bits: Iterable[int]) -> int:
    """Convert a tuple of bits, qubit 0 first, into a basis index."""
    index = 0
    for bit in bits:
        index = (index << 1) | int(bit)
    return index


def convert_bitstrings_to_tuples(bitstrings: Iterable[str]) -> List[Bitstring]:
    """Given the measured bitstrings, convert each bitstring to tuple format

    Args:
        bitstrings (list of strings): the measured bitstrings
    Returns:
        A list of tuples
    """
    return [bitstring_to_tuple(bitstring) for bitstring in bitstrings]


@lru_cache()
def bitstring_to_tuple(bitstring: str) -> Bitstring:
    """Given a bitstring, convert it to tuple format

    Args:
        bitstring (string): the measured bitstring
    Returns:
        A tuple of 0s and 1s
    """
    return tuple(int(bit) for bit in bitstring)


def convert_tuples_to_bitstrings(tuples: Iterable[Tuple[int, ...]]) -> List[str]:
    """Given a set of measurement tuples, convert each to a string.

    Args:
        tuples (list of tuples): the measurement tuples
    Returns:
        A list of bitstrings
    """
    return [tuple_to_bitstring(tuple(tup)) for tup in tuples]


@lru_cache()
def tuple_to_bitstring(tup: Tuple[int, ...]) -> str:
    """Given a tuple, convert to an equivalent string.

    Args:
        tup (tuple): the measurement tuple
    Returns:
        A string with binary digits
    """
    return "".join(str(int(bit)) for bit in tup)


def get_ordered_list_of_bitstrings(num_qubits: int) -> List[str]:
    """Create list of binary strings corresponding to 2^num_qubits integers
    and save them in ascending order.

    Args:
        num_qubits: number of binary digits in each bitstring

    Returns:
        The ordered bitstring representations of the integers
    """
    return [format(i, f"0{num_qubits}b") for i in range(2**num_qubits)]
