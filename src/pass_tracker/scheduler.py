"""
Upcoming pass schedule.

Enumerates the passes over a multi-day horizon by calling the next pass
search repeatedly with an advancing cursor.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import List, Optional

from .config import DEFAULT_CONFIG, DEFAULT_HORIZON_DAYS, PassSearchConfig
from .finder import find_next_pass
from .models import Pass
from .oracle import LookAngleOracle
from .utils import get_current_utc

logger = logging.getLogger(__name__)


def enumerate_passes(
    oracle: LookAngleOracle,
    horizon_days: float = DEFAULT_HORIZON_DAYS,
    start_time: Optional[datetime] = None,
    config: PassSearchConfig = DEFAULT_CONFIG,
) -> List[Pass]:
    """
    Enumerate the passes that rise within ``horizon_days`` of start_time.

    After each pass the cursor moves ``scheduler_advance_seconds`` past its
    set, or past ``aos + max_pass_duration`` when the set is unknown, so the
    returned passes are time-ordered and never overlap. The search span
    given to each call shrinks as the cursor approaches the horizon. At most
    ``config.max_scheduled_passes`` passes are returned.

    Args:
        oracle: Look-angle oracle
        horizon_days: Horizon length in days
        start_time: Horizon start (defaults to the current UTC time)
        config: Search configuration

    Returns:
        List of passes (empty if none is found)
    """
    if start_time is None:
        start_time = get_current_utc()

    limit_time = start_time + timedelta(days=horizon_days)
    advance = timedelta(seconds=config.scheduler_advance_seconds)
    max_duration = timedelta(seconds=config.max_pass_duration_seconds)

    passes: List[Pass] = []
    cursor = start_time

    for _ in range(config.max_scheduled_passes):
        remaining_seconds = max(0, math.floor((limit_time - cursor).total_seconds()))
        if remaining_seconds <= 0:
            break

        found = find_next_pass(oracle, cursor, remaining_seconds, config)
        if found is None:
            break
        passes.append(found)

        if found.los is not None:
            cursor = found.los.time + advance
        else:
            cursor = found.start_time + max_duration + advance

        if cursor > limit_time:
            break

    logger.info(
        f"Found {len(passes)} passes between {start_time} and {limit_time}"
    )
    return passes
