"""
Per-band energy of a Haar decomposition.
"""

from typing import Iterator, Sequence, Tuple

import numpy as np

from pyhaar.common.debug_logger import log_debug
from pyhaar.core.layout import band_range, buffer_length, validate_length


def _band_iter(coeffs: np.ndarray, levels: int,
               include_average: bool) -> Iterator[Tuple[int, float]]:
    n = coeffs.size
    first = 0 if include_average else 1
    for level in range(first, levels + 1):
        start, end = band_range(level, n)
        band = coeffs[start:end]
        energy = float(np.dot(band, band))
        log_debug("SPECTRUM_BAND", "energy", energy, level=level,
                  operation="wavelet_spectrum", start=start, end=end)
        yield level, energy


def wavelet_spectrum(buffer: Sequence[float],
                     include_average: bool = True) -> Iterator[Tuple[int, float]]:
    """
    Band energies of a buffer holding a forward Haar decomposition.

    The length is checked immediately; the energies are produced lazily, in
    increasing frequency: (0, b[0]**2) for the average when include_average
    is set, then (j, sum of squares of band j) for j = 1 .. log2(N). The
    buffer is only read.

    Raises:
        InvalidLengthError: Length is 0 or not a power of two.
    """
    levels = validate_length(buffer_length(buffer))
    coeffs = np.asarray(buffer, dtype=np.float64)
    return _band_iter(coeffs, levels, include_average)


def band_energies(buffer: Sequence[float]) -> np.ndarray:
    """Band energies as an array indexed by level; index 0 is the average term."""
    return np.array([energy for _, energy in wavelet_spectrum(buffer)], dtype=np.float64)


def total_energy(buffer: Sequence[float]) -> float:
    """Sum of squares of the buffer, signal or coefficients alike."""
    values = np.asarray(buffer, dtype=np.float64)
    return float(np.dot(values, values))
