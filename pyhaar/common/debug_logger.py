"""
Debug logging for pyhaar transform stages.
Records every processing stage with source location and coefficient
statistics so that a run can be traced level by level.
"""

import time
import inspect
import numpy as np
from typing import List, Union, Any
import os


class HaarDebugLogger:
    """
    Stage logger for the Haar transform, inverse and spectrum extraction.
    Each entry carries the source location, the level and array statistics.
    """

    def __init__(self, log_file: str = "pyhaar_debug.log", enabled: bool = True):
        self.log_file = log_file
        self.enabled = enabled
        if enabled:
            # Clear log file and write header
            with open(log_file, 'w') as f:
                f.write(f"# pyhaar Debug Log - {time.strftime('%Y-%m-%d %H:%M:%S')}\n")
                f.write("# Format: [TIMESTAMP][PYHAAR][FILE:LINE][FUNC][LVL{n}] STAGE: data_type=values |META: ... |SRC: ...\n")
                f.write("#\n")

    @staticmethod
    def _source():
        # First frame outside this module is the caller being logged
        frame_info = inspect.currentframe()
        while frame_info is not None and frame_info.f_code.co_filename == __file__:
            frame_info = frame_info.f_back
        if frame_info is None:
            return "?", 0, "?"
        filename = os.path.basename(frame_info.f_code.co_filename)
        return filename, frame_info.f_lineno, frame_info.f_code.co_name

    @staticmethod
    def _timestamp() -> str:
        return time.strftime('%Y-%m-%dT%H:%M:%S.') + f"{int(time.time() * 1000000) % 1000000:06d}"

    @staticmethod
    def _format_values(values_array: np.ndarray, is_scalar: bool) -> str:
        if is_scalar:
            return f"{float(values_array[0]):.6f}"
        if values_array.size <= 10:
            return f"[{','.join(f'{v:.6f}' for v in values_array)}]"
        # Show first 5 and last 5 values
        first_5 = ','.join(f'{v:.6f}' for v in values_array[:5])
        last_5 = ','.join(f'{v:.6f}' for v in values_array[-5:])
        return f"[{first_5}...{last_5}]"

    def log_stage(self, stage: str, data_type: str, values: Union[List, np.ndarray, float, int],
                  level: int = 0, **context) -> None:
        """
        Log a processing stage with its metadata.

        Args:
            stage: Processing stage name (e.g., 'FORWARD_LEVEL', 'SPECTRUM_BAND')
            data_type: Type of data being logged (e.g., 'samples', 'coeffs', 'energy')
            values: The actual data values
            level: Decomposition level the values belong to
            **context: Additional context (operation, prefix_len, band range, etc.)
        """
        if not self.enabled:
            return

        filename, line_no, func_name = self._source()

        is_scalar = isinstance(values, (int, float, np.floating))
        values_array = np.atleast_1d(np.asarray(values, dtype=np.float64))

        size = values_array.size
        if size > 0:
            min_val = float(np.min(values_array))
            max_val = float(np.max(values_array))
            sum_val = float(np.sum(values_array))
            energy_val = float(np.sum(values_array * values_array))
            nonzero_count = int(np.count_nonzero(values_array))
        else:
            min_val = max_val = sum_val = energy_val = 0.0
            nonzero_count = 0

        values_str = self._format_values(values_array, is_scalar)
        context_str = " ".join(f"{key}={value}" for key, value in context.items())

        log_entry = (
            f"[{self._timestamp()}][PYHAAR][{filename}:{line_no}][{func_name}]"
            f"[LVL{level}] {stage}: "
            f"{data_type}={values_str} "
            f"|META: size={size} range=[{min_val:.6f},{max_val:.6f}] "
            f"sum={sum_val:.6f} energy={energy_val:.6f} nonzero={nonzero_count} "
            f"|SRC: {context_str}\n"
        )

        with open(self.log_file, 'a') as f:
            f.write(log_entry)

    def enable(self):
        """Enable logging."""
        self.enabled = True

    def disable(self):
        """Disable logging."""
        self.enabled = False


# Global logger instance, silent until enable_debug_logging() is called
debug_logger = HaarDebugLogger(enabled=False)


def log_debug(stage: str, data_type: str, values: Any, **kwargs) -> None:
    """
    Convenience function for logging with global logger instance.

    Usage:
        log_debug("FORWARD_LEVEL", "coeffs", buffer[:prefix_len],
                  level=2, operation="haar_forward")
    """
    debug_logger.log_stage(stage, data_type, values, **kwargs)


def enable_debug_logging(log_file: str = "pyhaar_debug.log") -> None:
    """
    Enable debug logging with specified log file.
    """
    global debug_logger
    debug_logger = HaarDebugLogger(log_file, enabled=True)


def disable_debug_logging() -> None:
    """
    Disable debug logging.
    """
    debug_logger.disable()
