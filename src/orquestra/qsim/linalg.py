################################################################################
# © Copyright 2022 Zapata Computing Inc.
################################################################################
"""SVD with truncation, used to split merged MPS tensors."""
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import scipy.linalg

from .errors import NumericalInstability

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TruncatedSVD:
    """Result of `truncated_svd`.

    `u @ np.diag(singular_values) @ vh` approximates the decomposed matrix scaled to
    unit Frobenius norm.

    Attributes:
        u: left singular vectors, shape (m, chi).
        singular_values: kept singular values, descending, renormalized so that
            their squares sum to 1.
        vh: right singular vectors, shape (chi, n).
        discarded_weight: sum of squares of discarded singular values divided by
            the sum of squares of all of them. 0 when nothing was cut.
        norm: Frobenius norm of the decomposed matrix.
    """

    u: np.ndarray
    singular_values: np.ndarray
    vh: np.ndarray
    discarded_weight: float
    norm: float

    @property
    def rank(self) -> int:
        return len(self.singular_values)


def _svd(matrix: np.ndarray):
    try:
        return scipy.linalg.svd(
            matrix, full_matrices=False, lapack_driver="gesdd", check_finite=True
        )
    except np.linalg.LinAlgError:
        logger.debug("gesdd did not converge, retrying with gesvd")
    except ValueError as error:
        raise NumericalInstability(f"Matrix is not finite: {error}") from error
    try:
        return scipy.linalg.svd(matrix, full_matrices=False, lapack_driver="gesvd")
    except np.linalg.LinAlgError as error:
        raise NumericalInstability("SVD did not converge.") from error


def truncated_svd(
    matrix: np.ndarray,
    max_rank: Optional[int] = None,
    cutoff: float = 0.0,
) -> TruncatedSVD:
    """Decompose `matrix` keeping only its largest singular values.

    Singular values smaller than `cutoff` times the largest one are always dropped.
    If `max_rank` is given, at most `max_rank` singular values are kept. Among
    equal singular values at the boundary, the ones LAPACK reports first are kept.

    Raises:
        NumericalInstability: if the SVD does not converge, the matrix is not
            finite or has zero norm.
    """
    if max_rank is not None and max_rank < 1:
        raise ValueError(f"Maximal rank has to be positive, got {max_rank}.")

    u, s, vh = _svd(matrix)
    total_weight = float(np.sum(s**2))
    if not total_weight > 0:
        raise NumericalInstability("Cannot truncate a matrix with zero norm.")

    keep = max(1, int(np.count_nonzero(s > cutoff * s[0])))
    if max_rank is not None:
        keep = min(keep, max_rank)

    kept = s[:keep]
    kept_weight = float(np.sum(kept**2))
    discarded_weight = float(np.sum(s[keep:] ** 2)) / total_weight

    return TruncatedSVD(
        u=u[:, :keep],
        singular_values=kept / np.sqrt(kept_weight),
        vh=vh[:keep, :],
        discarded_weight=discarded_weight,
        norm=float(np.sqrt(total_weight)),
    )
