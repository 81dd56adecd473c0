"""
Next pass search.

Scans forward from a reference time for the next rise, then follows the
pass with a finer step to find its peak elevation and its set.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from .config import DEFAULT_CONFIG, PassSearchConfig
from .events import refine_crossing
from .models import LookAngleSample, Pass
from .oracle import LookAngleOracle
from .trajectory import sample_track

logger = logging.getLogger(__name__)


def find_next_pass(
    oracle: LookAngleOracle,
    reference_time: datetime,
    max_search_seconds: Optional[float] = None,
    config: PassSearchConfig = DEFAULT_CONFIG,
) -> Optional[Pass]:
    """
    Find the next pass whose rise is strictly after reference_time.

    A pass already in progress at reference_time is not reported; use
    ``window.current_pass_window`` for that case. Unavailable samples are
    skipped. Passes shorter than one coarse step can be missed.

    Args:
        oracle: Look-angle oracle
        reference_time: Search start
        max_search_seconds: How far ahead to look for a rise (defaults to
            ``config.next_pass_search_seconds``)
        config: Search configuration

    Returns:
        The next Pass, or None if no rise occurs within the search span
    """
    if max_search_seconds is None:
        max_search_seconds = config.next_pass_search_seconds

    step = config.pass_scan_step_seconds
    previous_time = reference_time
    previous = oracle(previous_time)
    elapsed = step
    evaluations = 1

    while elapsed <= max_search_seconds:
        current_time = reference_time + timedelta(seconds=elapsed)
        elapsed += step

        current = oracle(current_time)
        evaluations += 1
        if current is None:
            continue

        if current.is_visible and previous is not None and not previous.is_visible:
            aos = refine_crossing(
                oracle, previous_time, current_time, True, config.refine_iterations
            )
            if aos is None:
                logger.debug(f"AOS refinement failed, using sample at {current_time}")
                aos = current
            return _follow_pass(oracle, aos, config)

        previous_time = current_time
        previous = current

    logger.debug(
        f"No pass within {max_search_seconds:.0f}s of {reference_time} "
        f"({evaluations} evaluations)"
    )
    return None


def _follow_pass(
    oracle: LookAngleOracle, aos: LookAngleSample, config: PassSearchConfig
) -> Pass:
    """Scan a pass from its rise for the peak and the set."""
    step = timedelta(seconds=config.peak_scan_step_seconds)
    limit = aos.time + timedelta(seconds=config.max_pass_duration_seconds)

    peak = aos
    last_visible = aos
    los: Optional[LookAngleSample] = None
    scan_time = aos.time + step

    while scan_time <= limit:
        candidate = oracle(scan_time)
        if candidate is not None:
            if candidate.elevation_deg > peak.elevation_deg:
                peak = candidate

            if candidate.is_visible:
                last_visible = candidate
            else:
                los = refine_crossing(
                    oracle, last_visible.time, scan_time, False, config.refine_iterations
                )
                if los is None:
                    logger.debug(f"LOS refinement failed, using sample at {scan_time}")
                    los = candidate
                break

        scan_time += step

    end_time = los.time if los is not None else limit
    if los is None:
        logger.debug(
            f"No LOS within {config.max_pass_duration_seconds}s of AOS at {aos.time}"
        )

    track = sample_track(oracle, aos.time, end_time, config.track_step_seconds)

    return Pass(
        aos=aos,
        los=los,
        peak=peak,
        track=track,
        start_time=aos.time,
        end_time=end_time,
    )
