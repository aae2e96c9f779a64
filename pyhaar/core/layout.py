"""
Coefficient layout of an in-place Haar decomposition.

After a full forward transform of a buffer of length N = 2**k the
coefficients are already ordered by increasing frequency:

    index 0                 overall average (scaled by sqrt(N))
    [2**(j-1), 2**j)        the 2**(j-1) detail coefficients of level j,
                            for j = 1 .. k

so the highest-frequency details occupy [N/2, N). Readers locate a band
purely from its level and N with band_range(); no index table is stored.
"""

from typing import Iterator, List, Sequence, Tuple

import numpy as np

from pyhaar.common.utils import is_power_of_two, log2_int


class InvalidLengthError(ValueError):
    """Buffer length is zero or not a power of two."""

    pass


class EmptyInputError(InvalidLengthError):
    """Buffer holds no samples."""

    pass


def buffer_length(buffer: Sequence[float]) -> int:
    """
    Returns the length of a one-dimensional signal buffer.

    Raises:
        InvalidLengthError: If the buffer is a multi-dimensional ndarray.
    """
    if isinstance(buffer, np.ndarray) and buffer.ndim != 1:
        raise InvalidLengthError(
            f"Signal buffer must be one-dimensional, got shape {buffer.shape}"
        )
    return len(buffer)


def validate_length(n: int) -> int:
    """
    Checks that n is a usable transform length.

    Args:
        n: Number of samples in the buffer.

    Returns:
        The number of decomposition levels, log2(n).

    Raises:
        EmptyInputError: If n is 0.
        InvalidLengthError: If n is not a power of two.
    """
    if n == 0:
        raise EmptyInputError("Signal buffer is empty, nothing to transform")
    if not is_power_of_two(n):
        raise InvalidLengthError(f"Signal length must be a power of two, got {n}")
    return log2_int(n)


def num_levels(buffer: Sequence[float]) -> int:
    """Number of detail levels held by a buffer, after validating its length."""
    return validate_length(buffer_length(buffer))


def band_range(level: int, n: int) -> Tuple[int, int]:
    """
    Half-open index range [start, end) of one band in a decomposed buffer.

    Level 0 is the singleton average at index 0. Level j (1 <= j <= log2(n))
    is the detail band [2**(j-1), 2**j), i.e. [n / 2**(k-j+1), n / 2**(k-j)).

    Args:
        level: Band level, 0 .. log2(n).
        n: Buffer length (power of two).

    Returns:
        (start, end) indices of the band.
    """
    levels = validate_length(n)
    if not 0 <= level <= levels:
        raise ValueError(f"Level must be in [0, {levels}] for length {n}, got {level}")
    if level == 0:
        return 0, 1
    return 1 << (level - 1), 1 << level


def band_ranges(n: int) -> List[Tuple[int, int, int]]:
    """
    All bands of a decomposed buffer of length n as (level, start, end),
    from the average up to the highest-frequency details. The ranges
    partition [0, n) without gaps or overlaps.
    """
    levels = validate_length(n)
    return [(level,) + band_range(level, n) for level in range(levels + 1)]


def ordered_bands(buffer: Sequence[float]) -> Iterator[Tuple[int, Sequence[float]]]:
    """
    Yields (level, coefficients) for every band of a decomposed buffer in
    increasing frequency order. For an ndarray the coefficients are read-only
    views into the buffer; other sequences yield slice copies.
    """
    n = buffer_length(buffer)
    for level, start, end in band_ranges(n):
        band = buffer[start:end]
        if isinstance(band, np.ndarray):
            band = band.view()
            band.flags.writeable = False
        yield level, band
