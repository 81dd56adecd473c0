"""
Window of the pass currently in progress.

When the object is already above the horizon, the rise and set instants
are found by scanning backward and forward from "now" and refining the
first bracket that crosses the horizon.
"""

import logging
from datetime import timedelta
from typing import Optional

from .config import DEFAULT_CONFIG, PassSearchConfig
from .events import refine_crossing
from .models import LookAngleSample, Pass
from .oracle import LookAngleOracle
from .trajectory import sample_track

logger = logging.getLogger(__name__)


def find_aos_before(
    oracle: LookAngleOracle,
    current_sample: LookAngleSample,
    config: PassSearchConfig = DEFAULT_CONFIG,
) -> Optional[LookAngleSample]:
    """
    Find the rise of the pass that contains current_sample.

    Steps backward in ``pass_scan_step_seconds`` increments up to
    ``los_search_limit_seconds``.

    Returns:
        The refined rise sample, or None if the object stayed visible over
        the whole lookback window
    """
    last_visible = current_sample
    step = config.pass_scan_step_seconds
    elapsed = step

    while elapsed <= config.los_search_limit_seconds:
        when = current_sample.time - timedelta(seconds=elapsed)
        elapsed += step

        candidate = oracle(when)
        if candidate is None:
            continue

        if not candidate.is_visible:
            refined = refine_crossing(
                oracle, when, last_visible.time, True, config.refine_iterations
            )
            if refined is None:
                logger.debug(f"AOS refinement failed, using sample at {last_visible.time}")
                return last_visible
            return refined

        last_visible = candidate

    logger.debug(f"No AOS within {config.los_search_limit_seconds}s before {current_sample.time}")
    return None


def find_los_after(
    oracle: LookAngleOracle,
    current_sample: LookAngleSample,
    config: PassSearchConfig = DEFAULT_CONFIG,
) -> Optional[LookAngleSample]:
    """
    Find the set of the pass that contains current_sample.

    Steps forward in ``pass_scan_step_seconds`` increments up to
    ``los_search_limit_seconds``.

    Returns:
        The refined set sample, or None if the object stays visible over
        the whole lookahead window
    """
    last_visible = current_sample
    step = config.pass_scan_step_seconds
    elapsed = step

    while elapsed <= config.los_search_limit_seconds:
        when = current_sample.time + timedelta(seconds=elapsed)
        elapsed += step

        candidate = oracle(when)
        if candidate is None:
            continue

        if not candidate.is_visible:
            refined = refine_crossing(
                oracle, last_visible.time, when, False, config.refine_iterations
            )
            if refined is None:
                logger.debug(f"LOS refinement failed, using sample at {when}")
                return candidate
            return refined

        last_visible = candidate

    logger.debug(f"No LOS within {config.los_search_limit_seconds}s after {current_sample.time}")
    return None


def current_pass_window(
    oracle: LookAngleOracle,
    current_sample: LookAngleSample,
    config: PassSearchConfig = DEFAULT_CONFIG,
) -> Pass:
    """
    Build the pass that is in progress at current_sample.

    The track runs from the rise (or current_sample when the rise is
    unknown) to the set, or to ``max_pass_duration_seconds`` after the start
    when the set could not be located.

    Args:
        oracle: Look-angle oracle
        current_sample: A visible sample, normally "now"
        config: Search configuration

    Returns:
        Pass with aos/los set to None where the event was not found

    Raises:
        ValueError: If current_sample is below the horizon
    """
    if not current_sample.is_visible:
        raise ValueError(
            f"current_sample must be visible (elevation {current_sample.elevation_deg:.2f}°)"
        )

    aos = find_aos_before(oracle, current_sample, config)
    los = find_los_after(oracle, current_sample, config)

    start_time = aos.time if aos is not None else current_sample.time
    if los is not None and los.time > start_time:
        end_time = los.time
    else:
        end_time = start_time + timedelta(seconds=config.max_pass_duration_seconds)

    track = sample_track(oracle, start_time, end_time, config.track_step_seconds)

    peak = current_sample
    for point in track:
        if point.elevation_deg > peak.elevation_deg:
            peak = point

    return Pass(
        aos=aos,
        los=los,
        peak=peak,
        track=track,
        start_time=start_time,
        end_time=end_time,
    )
