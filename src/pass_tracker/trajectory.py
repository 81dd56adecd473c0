"""
Trajectory sampling for a pass window.
"""

import logging
from datetime import datetime
from typing import List, Tuple

from .config import TRACK_STEP_SECONDS
from .models import LookAngleSample, SearchWindow
from .oracle import LookAngleOracle

logger = logging.getLogger(__name__)


def sample_track(
    oracle: LookAngleOracle,
    start_time: datetime,
    end_time: datetime,
    step_seconds: float = TRACK_STEP_SECONDS,
) -> Tuple[LookAngleSample, ...]:
    """
    Sample the visible arc between two instants.

    Samples every ``step_seconds`` from start_time to end_time inclusive and
    always evaluates end_time itself, so windows that are not a whole number
    of steps still end on the endpoint. Samples below the horizon and
    unavailable samples are dropped.

    Args:
        oracle: Look-angle oracle
        start_time: Window start
        end_time: Window end
        step_seconds: Sampling step in seconds

    Returns:
        Time-ordered tuple of visible samples (empty if end_time <= start_time)
    """
    if end_time <= start_time:
        return ()
    window = SearchWindow(start_time, end_time, step_seconds)

    points: List[LookAngleSample] = []
    for when in window.times():
        sample = oracle(when)
        if sample is not None and sample.is_visible:
            points.append(sample)

    logger.debug(
        f"Sampled {len(points)} visible points from {start_time} to {end_time}"
    )
    return tuple(points)


def sample_window(oracle: LookAngleOracle, window: SearchWindow) -> Tuple[LookAngleSample, ...]:
    """Sample the visible arc described by a SearchWindow."""
    return sample_track(oracle, window.start_time, window.end_time, window.step_seconds)
