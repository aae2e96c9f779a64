"""
Writes data files in gnuplot's plain text format: one point per line as
whitespace-separated columns, '#' comment lines, and blank lines between
data blocks.
"""

import os
from typing import Iterable, Optional, Sequence, TextIO, Type, Union
from types import TracebackType

import numpy as np

from pyhaar.core.layout import band_range, buffer_length, validate_length


class GnuplotWriterError(Exception):
    """Custom exception for gnuplot writer errors."""

    pass


class GnuplotWriter:
    """
    Sink for a gnuplot data series. Histogram, normal curve and spectrum
    producers all write through this one interface.
    """

    def __init__(self, filepath_or_stream: Union[str, os.PathLike, TextIO]):
        """
        Initializes the writer.

        Args:
            filepath_or_stream: Path of the data file to create/overwrite or an
                                already open text stream.
        """
        if isinstance(filepath_or_stream, (str, os.PathLike)):
            self.path: Optional[str] = os.fspath(filepath_or_stream)
            try:
                self.stream: TextIO = open(self.path, "w")
            except OSError as e:
                raise GnuplotWriterError(
                    f"Failed to open gnuplot file for writing: {self.path}"
                ) from e
            self._close_on_exit = True
        else:
            self.path = None
            self.stream = filepath_or_stream
            self._close_on_exit = False
        self.points_written: int = 0

    def _write(self, text: str):
        try:
            self.stream.write(text)
        except (OSError, ValueError) as e:
            raise GnuplotWriterError("Failed to write gnuplot data.") from e

    def write_comment(self, text: str = ""):
        """Writes a comment line; an empty text gives a bare '#'."""
        self._write(f"# {text}\n" if text else "#\n")

    def write_row(self, *columns: float):
        """Writes one data line with any number of numeric columns."""
        self._write(" " + "  ".join(str(_plain(c)) for c in columns) + "\n")
        self.points_written += 1

    def write_point(self, x: float, y: float):
        """Writes one (x, y) point of a two-column series."""
        self.write_row(x, y)

    def write_series(self, points: Iterable[Sequence[float]]):
        for x, y in points:
            self.write_point(x, y)

    def write_blank(self):
        """Ends the current data block."""
        self._write("\n")

    def close(self):
        if self.stream and not self.stream.closed:
            try:
                self.stream.flush()
            except OSError as e:
                raise GnuplotWriterError("Failed to flush gnuplot data.") from e
            finally:
                if self._close_on_exit:
                    self.stream.close()

    def __enter__(self):
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> Optional[bool]:
        self.close()
        return False


def _plain(value):
    # numpy scalars print as np.float64(...) under numpy 2
    if isinstance(value, (np.integer, int)):
        return int(value)
    return float(value)


def write_spectrum_3d(coefficients: Sequence[float], writer: GnuplotWriter) -> int:
    """
    Writes the detail bands of a decomposed buffer as a 3-D surface.

    One block per level, highest frequency first, each row being
    'level  index-in-band  coefficient'; blocks are separated by a blank
    line so that 'splot' draws every level as its own line.

    Returns:
        Number of rows written.
    """
    n = buffer_length(coefficients)
    levels = validate_length(n)
    values = np.asarray(coefficients, dtype=np.float64)

    writer.write_comment()
    writer.write_comment(f"Haar wavelet spectrum, {n} points, {levels} levels")
    writer.write_comment("level  index  coefficient")
    writer.write_comment()
    rows = 0
    for level in range(levels, 0, -1):
        start, end = band_range(level, n)
        for idx, value in enumerate(values[start:end]):
            writer.write_row(level, idx, value)
            rows += 1
        writer.write_blank()
    return rows
