"""
Pass tracking coordination.

This module provides the PassTracker class that ties one look-angle oracle
to the pass search functions, and the periodic refresh used by live
tracking displays.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .config import DEFAULT_CONFIG, DEFAULT_HORIZON_DAYS, PassSearchConfig
from .finder import find_next_pass
from .models import CurrentPassCache, LookAngleSample, NextPassCache, Pass
from .observer import Observer
from .oracle import LookAngleOracle, SatelliteLookAngleOracle
from .satellite import SatelliteOrbit
from .scheduler import enumerate_passes
from .utils import get_current_utc
from .window import current_pass_window

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackingState:
    """
    Result of one tracking refresh.

    Passed back into the next ``PassTracker.tick`` call so cached passes can
    be reused while they are still valid.
    """

    sample: Optional[LookAngleSample] = None
    current: CurrentPassCache = field(default_factory=CurrentPassCache)
    next: NextPassCache = field(default_factory=NextPassCache)

    @property
    def current_pass(self) -> Optional[Pass]:
        return self.current.pass_

    @property
    def next_pass(self) -> Optional[Pass]:
        return self.next.pass_


class PassTracker:
    """
    Main pass tracking coordinator.

    Holds no state besides the oracle and the search configuration; cached
    results live in the TrackingState values returned by ``tick``.
    """

    def __init__(
        self, oracle: LookAngleOracle, config: PassSearchConfig = DEFAULT_CONFIG
    ) -> None:
        self.oracle = oracle
        self.config = config

    @classmethod
    def from_satellite(
        cls,
        satellite: SatelliteOrbit,
        observer: Observer,
        config: PassSearchConfig = DEFAULT_CONFIG,
    ) -> "PassTracker":
        """Create a tracker for a TLE satellite seen from an observer."""
        logger.info(f"Tracking {satellite.satellite_name} from {observer}")
        return cls(SatelliteLookAngleOracle(satellite, observer), config)

    def look(self, when: Optional[datetime] = None) -> Optional[LookAngleSample]:
        """Look angles at ``when`` (default: now), or None if unavailable."""
        return self.oracle(when or get_current_utc())

    def current_pass(self, when: Optional[datetime] = None) -> Optional[Pass]:
        """The pass in progress at ``when``, or None if the object is not visible."""
        sample = self.look(when)
        if sample is None or not sample.is_visible:
            return None
        return current_pass_window(self.oracle, sample, self.config)

    def next_pass(
        self,
        when: Optional[datetime] = None,
        max_search_seconds: Optional[float] = None,
    ) -> Optional[Pass]:
        """The next pass rising after ``when``."""
        return find_next_pass(
            self.oracle, when or get_current_utc(), max_search_seconds, self.config
        )

    def upcoming_passes(
        self,
        days: float = DEFAULT_HORIZON_DAYS,
        start_time: Optional[datetime] = None,
    ) -> List[Pass]:
        """All passes rising within ``days`` of ``start_time``."""
        return enumerate_passes(self.oracle, days, start_time, self.config)

    def tick(
        self, now: Optional[datetime] = None, previous: Optional[TrackingState] = None
    ) -> TrackingState:
        """
        Refresh the tracking state for ``now``.

        While the object is visible, the in-progress pass is kept until its
        set time has passed and the next pass is dropped. While it is not
        visible, the in-progress pass is dropped and the next pass is kept
        until its rise time has passed. When look angles are unavailable both
        cached passes carry over unchanged.

        Args:
            now: Refresh instant (default: now)
            previous: State returned by the previous call

        Returns:
            New TrackingState
        """
        now = now or get_current_utc()
        previous = previous or TrackingState()

        sample = self.oracle(now)
        if sample is None:
            logger.debug(f"Look angles unavailable at {now}")
            return TrackingState(current=previous.current, next=previous.next)

        if sample.is_visible:
            current = previous.current
            if not current.is_valid(now):
                current = CurrentPassCache(
                    current_pass_window(self.oracle, sample, self.config), now
                )
                logger.debug(f"Recomputed current pass at {now}")
            return TrackingState(sample=sample, current=current, next=NextPassCache())

        upcoming = previous.next
        if not upcoming.is_valid(now):
            upcoming = NextPassCache(
                find_next_pass(self.oracle, now, None, self.config), now
            )
            logger.debug(f"Recomputed next pass at {now}")
        return TrackingState(sample=sample, current=CurrentPassCache(), next=upcoming)
