"""
Global constants for the pyhaar package.
These constants define the Haar normalization, the numeric tolerance used
when comparing reconstructions, and the parameters of the histogram and
gnuplot output stages.
"""

import math

SQRT2 = math.sqrt(2.0)
DEFAULT_TOLERANCE = 1e-9
NUM_HISTOGRAM_BINS = 32
MIN_PLOT_COEFFS = 64
COEF_FILE_PREFIX = "coef"
NORMAL_FILE_PREFIX = "normal"
DEFAULT_SPECTRUM_FILE = "foofile"

DEMO_SIGNAL_8 = (3.0, 1.0, 0.0, 4.0, 8.0, 6.0, 9.0, 9.0)
DEMO_SIGNAL_16 = (
    32.0, 10.0, 20.0, 38.0,
    37.0, 28.0, 38.0, 34.0,
    18.0, 24.0, 18.0, 9.0,
    23.0, 24.0, 28.0, 34.0,
)
