# spectroscope/utils/helpers.py - Helper functions
"""
General utility and helper functions.
"""

from pathlib import Path
from typing import Sequence, Tuple
import logging

import numpy as np


logger = logging.getLogger(__name__)


def mean_and_std(values: Sequence[float]) -> Tuple[float, float]:
    """
    Compute the mean and sample standard deviation of a latency set.

    Args:
        values: Observed latencies

    Returns:
        Tuple of (mean, std); (0.0, 0.0) for an empty set and a std of 0.0
        for a single observation
    """
    data = np.asarray(values, dtype=float)

    if data.size == 0:
        return 0.0, 0.0
    if data.size == 1:
        return float(data[0]), 0.0

    return float(data.mean()), float(data.std(ddof=1))


def round_half_away(values: np.ndarray) -> np.ndarray:
    """
    Round to the nearest integer, halves away from zero.

    np.round sends halves to the even neighbour (2.5 -> 2.0).

    Args:
        values: Array of floats

    Returns:
        Array of rounded floats
    """
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def format_duration(duration_us: float) -> str:
    """
    Format a duration in microseconds to a human-readable string.

    Args:
        duration_us: Duration in microseconds

    Returns:
        Formatted string (e.g., "1.5ms")
    """
    if duration_us < 1000:
        return f"{duration_us:.0f}us"
    elif duration_us < 1_000_000:
        return f"{duration_us/1000:.1f}ms"
    else:
        return f"{duration_us/1_000_000:.1f}s"


def ensure_parent_dir(path: str) -> Path:
    """
    Make sure the directory an output file goes into exists.

    Args:
        path: Output file path

    Returns:
        The path as a Path object
    """
    output_path = Path(path)
    if not output_path.parent.exists():
        logger.debug(f"Creating output directory {output_path.parent}")
        output_path.parent.mkdir(parents=True, exist_ok=True)

    return output_path
