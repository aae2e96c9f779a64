import argparse
import sys

import numpy as np

from pyhaar.core.haar import forward, inverse
from pyhaar.core.layout import InvalidLengthError, ordered_bands
from pyhaar.core.spectrum import total_energy, wavelet_spectrum
from pyhaar.stats.bell_curves import plot_curves
from pyhaar.plot.gnuplot_writer import GnuplotWriter, GnuplotWriterError, write_spectrum_3d
from pyhaar.common.constants import DEFAULT_SPECTRUM_FILE, DEMO_SIGNAL_8, DEMO_SIGNAL_16
from pyhaar.common.debug_logger import enable_debug_logging


def format_values(values) -> str:
    return ", ".join(str(float(v)) for v in values)


def wavelet_test(values: np.ndarray, out=None) -> np.ndarray:
    """
    Prints a signal, its coefficients ordered by increasing frequency and
    the inverse transform of those coefficients.

    Returns:
        The coefficients.
    """
    out = out or sys.stdout
    print("test data: ", file=out)
    print(format_values(values), file=out)
    print(file=out)

    coeffs = forward(values.copy())
    print("wavelet coefficients, ordered by increasing frequency:", file=out)
    for level, band in ordered_bands(coeffs):
        print(f"  level {level}: {format_values(band)}", file=out)
    print(file=out)

    print("after calculating inverse Haar transform:", file=out)
    print(format_values(inverse(coeffs.copy())), file=out)
    print(file=out)
    return coeffs


def print_spectrum(coeffs: np.ndarray, out=None):
    out = out or sys.stdout
    print("wavelet spectrum (level: band energy):", file=out)
    for level, energy in wavelet_spectrum(coeffs):
        print(f"  {level}: {energy}", file=out)
    print(f"  total energy = {total_energy(coeffs)}", file=out)
    print(file=out)


def load_signal(path: str) -> np.ndarray:
    return np.atleast_1d(np.loadtxt(path, dtype=np.float64)).ravel()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Haar wavelet transform CLI Tool")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "-i",
        "--input",
        type=str,
        help="Path to a text file of whitespace-separated samples (length must be a power of two)",
    )
    source.add_argument(
        "--demo",
        action="store_true",
        help="Run the built-in 8 and 16 point test signals",
    )
    parser.add_argument(
        "--spectrum-file",
        type=str,
        default=DEFAULT_SPECTRUM_FILE,
        help=f"Output file for the 3-D gnuplot spectrum (default: {DEFAULT_SPECTRUM_FILE})",
    )
    parser.add_argument(
        "--histograms",
        type=str,
        metavar="DIR",
        help="Write coefficient histograms and normal curves (coef{n}, normal{n}) to DIR",
    )
    parser.add_argument(
        "--debug-log",
        type=str,
        help="Enable debug logging to specified file (e.g., --debug-log pyhaar_debug.log)",
    )

    args = parser.parse_args(argv)

    if args.debug_log:
        enable_debug_logging(args.debug_log)
        print(f"Debug logging enabled to: {args.debug_log}")

    try:
        if args.demo:
            wavelet_test(np.array(DEMO_SIGNAL_8, dtype=np.float64))
            print()
            signal = np.array(DEMO_SIGNAL_16, dtype=np.float64)
        else:
            signal = load_signal(args.input)

        coeffs = wavelet_test(signal)
        print_spectrum(coeffs)

        with GnuplotWriter(args.spectrum_file) as writer:
            rows = write_spectrum_3d(coeffs, writer)
        print(f"Wrote {rows} spectrum points to: {args.spectrum_file}")

        if args.histograms:
            written = plot_curves(coeffs, args.histograms)
            if written:
                print(f"Wrote histograms: {', '.join(written)}")
            else:
                print("No band large enough for a histogram.")

    except InvalidLengthError as e:
        print(f"Error: {e}")
        return 1
    except GnuplotWriterError as e:
        print(f"Error writing gnuplot file: {e}")
        return 1
    except (OSError, ValueError) as e:
        print(f"Error reading input signal: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
