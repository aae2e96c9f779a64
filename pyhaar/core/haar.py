"""
Implements the in-place Haar wavelet transform and its exact inverse.
Both directions run a butterfly over a working prefix of the buffer, one
level at a time, with the orthonormal 1/sqrt(2) scaling so that the
energy of the signal equals the energy of its coefficients.
"""

from typing import MutableSequence, Union

import numpy as np

from pyhaar.common.constants import SQRT2
from pyhaar.common.debug_logger import log_debug
from pyhaar.core.layout import buffer_length, validate_length

SignalBuffer = Union[np.ndarray, MutableSequence[float]]


def _working_array(buffer: SignalBuffer) -> np.ndarray:
    """
    Returns the float64 array the butterflies run on.
    A float64 ndarray is used directly; anything else is copied and written
    back by _write_back() once every level has completed.
    """
    if isinstance(buffer, np.ndarray):
        if not np.issubdtype(buffer.dtype, np.floating):
            raise TypeError(
                f"Signal buffer must hold floating point values, got dtype {buffer.dtype}"
            )
        if buffer.dtype == np.float64:
            return buffer
    return np.array(buffer, dtype=np.float64)


def _write_back(buffer: SignalBuffer, work: np.ndarray) -> None:
    if work is buffer:
        return
    if isinstance(buffer, np.ndarray):
        buffer[...] = work
    else:
        buffer[:] = work.tolist()


def forward(buffer: SignalBuffer) -> SignalBuffer:
    """
    Overwrites buffer with its full Haar decomposition.

    Each pass reads the pairs (b[2i], b[2i+1]) of the working prefix
    b[0:L], writes averages (b[2i] + b[2i+1]) / sqrt(2) to scratch[0:L/2]
    and details (b[2i] - b[2i+1]) / sqrt(2) to scratch[L/2:L], then copies
    the scratch back. The details at [L/2, L) are final; the next pass works
    on the averages in [0, L/2). The result is ordered by increasing
    frequency (see pyhaar.core.layout).

    Args:
        buffer: Signal of length 2**k, an ndarray or a list of floats.

    Returns:
        The same buffer object, now holding the coefficients.

    Raises:
        InvalidLengthError: Length is 0 or not a power of two. The buffer is
            left untouched.
    """
    n = buffer_length(buffer)
    levels = validate_length(n)
    work = _working_array(buffer)
    # One scratch array per call, reused by every level
    scratch = np.empty(n, dtype=np.float64)

    log_debug("FORWARD_INPUT", "samples", work, level=levels, operation="haar_forward")

    with np.errstate(over="ignore", invalid="ignore"):
        prefix_len = n
        level = levels
        while prefix_len > 1:
            half = prefix_len >> 1
            even = work[0:prefix_len:2]
            odd = work[1:prefix_len:2]
            scratch[:half] = (even + odd) / SQRT2
            scratch[half:prefix_len] = (even - odd) / SQRT2
            work[:prefix_len] = scratch[:prefix_len]

            log_debug("FORWARD_LEVEL", "details", work[half:prefix_len], level=level,
                      operation="haar_forward", prefix_len=prefix_len)
            prefix_len = half
            level -= 1

    log_debug("FORWARD_OUTPUT", "coeffs", work, level=0, operation="haar_forward")
    _write_back(buffer, work)
    return buffer


def inverse(buffer: SignalBuffer) -> SignalBuffer:
    """
    Overwrites a decomposed buffer with the signal it was computed from.

    Mirrors forward(): starting from L = 1, the averages b[0:L] and details
    b[L:2L] are recombined into left = (a + d) / sqrt(2) and
    right = (a - d) / sqrt(2), interleaved into scratch[0:2L] and copied
    back, until L reaches the buffer length. A buffer that is not a Haar
    decomposition is transformed anyway; the output is then meaningless.

    Raises:
        InvalidLengthError: Length is 0 or not a power of two.
    """
    n = buffer_length(buffer)
    validate_length(n)
    work = _working_array(buffer)
    scratch = np.empty(n, dtype=np.float64)

    log_debug("INVERSE_INPUT", "coeffs", work, level=0, operation="haar_inverse")

    with np.errstate(over="ignore", invalid="ignore"):
        prefix_len = 1
        level = 1
        while prefix_len < n:
            span = prefix_len << 1
            averages = work[:prefix_len]
            details = work[prefix_len:span]
            scratch[0:span:2] = (averages + details) / SQRT2
            scratch[1:span:2] = (averages - details) / SQRT2
            work[:span] = scratch[:span]

            log_debug("INVERSE_LEVEL", "averages", work[:span], level=level,
                      operation="haar_inverse", prefix_len=span)
            prefix_len = span
            level += 1

    log_debug("INVERSE_OUTPUT", "samples", work, level=0, operation="haar_inverse")
    _write_back(buffer, work)
    return buffer
