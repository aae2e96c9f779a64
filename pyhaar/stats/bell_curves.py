"""
Histograms of Haar coefficients against a normal curve.

For every detail band large enough to be meaningful, two gnuplot files are
written: coef{n}, the histogram of the band's n coefficients expressed as
the fraction of points per bin, and normal{n}, the area under a normal
curve with the band's mean and standard deviation over the same bins. Both
have area one, so they plot on the same scale:

    plot 'coef256' with boxes, 'normal256' with lines
"""

import math
import os
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

import numpy as np

from pyhaar.common.constants import (
    COEF_FILE_PREFIX,
    MIN_PLOT_COEFFS,
    NORMAL_FILE_PREFIX,
    NUM_HISTOGRAM_BINS,
)
from pyhaar.common.debug_logger import log_debug
from pyhaar.core.layout import buffer_length, validate_length
from pyhaar.plot.gnuplot_writer import GnuplotWriter, GnuplotWriterError


class BellCurveError(ValueError):
    """Coefficients cannot be histogrammed or fitted."""

    pass


@dataclass
class BellInfo:
    """Mean and standard deviation of a set of values."""

    mean: float
    sigma: float


def stddev(values: Sequence[float]) -> BellInfo:
    """
    Mean and sample standard deviation (N - 1 denominator) of values.

    Raises:
        BellCurveError: Fewer than two values.
    """
    v = np.asarray(values, dtype=np.float64)
    if v.size < 2:
        raise BellCurveError(f"Need at least 2 values for a standard deviation, got {v.size}")
    return BellInfo(mean=float(np.mean(v)), sigma=float(np.std(v, ddof=1)))


def normal_interval(info: BellInfo, low: float, high: float, num_points: int) -> float:
    """
    Area under the normal curve with info.mean and info.sigma from low to high.

    The density

        f(y) = 1 / (s * sqrt(2 * pi)) * exp(-(y - u)**2 / (2 * s**2))

    is integrated with left rectangles: the interval is cut into num_points
    steps and the first num_points - 1 rectangles step * f(x_i) are summed.
    """
    if num_points < 2:
        return 0.0
    if info.sigma <= 0.0:
        raise BellCurveError("Standard deviation must be positive to build a normal curve")
    step = (high - low) / num_points
    x = low + step * np.arange(num_points - 1, dtype=np.float64)
    t = x - info.mean
    density = np.exp(-(t * t) / (2.0 * info.sigma * info.sigma)) / (info.sigma * math.sqrt(2.0 * math.pi))
    return float(np.sum(step * density))


def _check_bins(num_bins: int, low: float, high: float):
    if num_bins < 1:
        raise BellCurveError(f"Number of bins must be positive, got {num_bins}")
    if not (math.isfinite(low) and math.isfinite(high)):
        raise BellCurveError(f"Histogram range is not finite: [{low}, {high}]")
    if not low + (high - low) / num_bins > low:
        raise BellCurveError(f"Histogram range is too narrow for {num_bins} bins: [{low}, {high}]")


def histogram_coef(sorted_values: Sequence[float], num_bins: int,
                   low: float, high: float) -> List[Tuple[float, float]]:
    """
    Histogram of sorted values as (bin start, fraction of all values).

    Bins are num_bins equal steps from low. Values are counted in
    [start, end); the walk stops when the values run out or a bin would end
    past high, so a value equal to high is not counted. At most num_bins
    bins are returned.
    """
    _check_bins(num_bins, low, high)
    length = len(sorted_values)
    step = (high - low) / num_bins
    i = 0
    bins: List[Tuple[float, float]] = []

    for b in range(num_bins):
        if i >= length:
            break
        start = low + b * step
        end = low + (b + 1) * step
        if end > high:
            break
        count = 0
        while i < length and start <= sorted_values[i] < end:
            count += 1
            i += 1
        bins.append((start, count / length))
    return bins


def normal_curve(values: Sequence[float], num_bins: int, low: float,
                 high: float) -> Tuple[BellInfo, List[Tuple[float, float]]]:
    """
    Area under the fitted normal curve for each of num_bins bins over [low, high).

    Returns:
        The fitted BellInfo and a list of (bin start, area).
    """
    _check_bins(num_bins, low, high)
    info = stddev(values)
    points_per_bin = len(values) // num_bins
    step = (high - low) / num_bins
    start = low
    curve: List[Tuple[float, float]] = []
    for _ in range(num_bins):
        end = start + step
        curve.append((start, normal_interval(info, start, end, points_per_bin)))
        start = end
    return info, curve


def plot_freq(values: Sequence[float], directory: str = ".",
              writer_factory: Callable[[str], GnuplotWriter] = GnuplotWriter,
              num_bins: int = NUM_HISTOGRAM_BINS) -> Tuple[str, str]:
    """
    Writes the coefficient histogram and its normal curve for one band.

    Returns:
        Paths of the coef{n} and normal{n} files.
    """
    v = np.sort(np.asarray(values, dtype=np.float64))
    n = v.size
    if n == 0:
        raise BellCurveError("No coefficients to plot")
    low, high = float(v[0]), float(v[-1])

    bins = histogram_coef(v, num_bins, low, high)
    info, curve = normal_curve(v, num_bins, low, high)

    coef_path = os.path.join(directory, f"{COEF_FILE_PREFIX}{n}")
    with writer_factory(coef_path) as writer:
        writer.write_comment()
        writer.write_comment("Histogram of Haar coefficients")
        writer.write_comment()
        writer.write_series(bins)
        writer.write_comment()
        writer.write_comment(f"Total area under curve = {sum(p for _, p in bins)}")
        writer.write_comment()

    normal_path = os.path.join(directory, f"{NORMAL_FILE_PREFIX}{n}")
    with writer_factory(normal_path) as writer:
        writer.write_comment()
        writer.write_comment("histogram of normal curve")
        writer.write_comment(f"mean = {info.mean}, std. dev. = {info.sigma}")
        writer.write_comment()
        writer.write_series(curve)
        writer.write_comment()
        writer.write_comment(f"Total area under curve = {sum(a for _, a in curve)}")
        writer.write_comment()

    log_debug("PLOT_FREQ", "band", v, level=n.bit_length(),
              operation="plot_freq", mean=info.mean, sigma=info.sigma)
    return coef_path, normal_path


def plot_curves(coefficients: Sequence[float], directory: str = ".",
                writer_factory: Callable[[str], GnuplotWriter] = GnuplotWriter,
                min_coeffs: int = MIN_PLOT_COEFFS) -> List[str]:
    """
    Histograms every detail band of a decomposed buffer, highest frequency
    first, down to bands of min_coeffs values. For a length of 512 that is
    [256, 512), then [128, 256), then [64, 128).

    Plotting stops at the first band that cannot be written or fitted; the
    files already written are kept.

    Returns:
        Paths of all files written.
    """
    length = buffer_length(coefficients)
    validate_length(length)
    values = np.asarray(coefficients, dtype=np.float64)
    written: List[str] = []

    end = length
    start = length >> 1
    while start >= max(min_coeffs, 1):
        try:
            written.extend(plot_freq(values[start:end], directory, writer_factory))
        except (GnuplotWriterError, BellCurveError) as e:
            log_debug("PLOT_CURVES_STOPPED", "band", values[start:end],
                      operation="plot_curves", start=start, end=end, error=e)
            break
        end = start
        start = end >> 1
    return written
