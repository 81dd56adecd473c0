"""
Horizon crossing refinement.

Narrows a bracket known to contain a rise or set event down to the
crossing instant by bisection.
"""

import logging
from datetime import datetime
from typing import Optional

from .config import REFINE_ITERATIONS
from .models import LookAngleSample
from .oracle import LookAngleOracle

logger = logging.getLogger(__name__)


def refine_crossing(
    oracle: LookAngleOracle,
    low_time: datetime,
    high_time: datetime,
    rising: bool,
    iterations: int = REFINE_ITERATIONS,
) -> Optional[LookAngleSample]:
    """
    Refine a horizon crossing inside [low_time, high_time] using bisection.

    The caller guarantees the elevation sign differs between the bounds:
    not visible at low_time and visible at high_time for a rising edge, the
    reverse for a setting edge. The bracket is not re-checked.

    Args:
        oracle: Look-angle oracle
        low_time: Bracket start (before the crossing)
        high_time: Bracket end (after the crossing)
        rising: True for a rise (AOS), False for a set (LOS)
        iterations: Fixed number of bisection steps

    Returns:
        The last midpoint sample found past the crossing (visible for a
        rise, not visible for a set), or None if no midpoint landed there
        or the oracle became unavailable
    """
    low = low_time
    high = high_time
    best: Optional[LookAngleSample] = None

    for _ in range(iterations):
        mid = low + (high - low) / 2
        sample = oracle(mid)
        if sample is None:
            logger.debug(f"Oracle unavailable at {mid} during crossing refinement")
            return None

        if sample.is_visible == rising:
            best = sample
            high = mid
        else:
            low = mid

    return best
