"""
Value types produced by the pass-prediction engine.

All types here are immutable. Caches of engine results are plain values
owned by the caller; the engine itself never keeps them.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple


def normalize_azimuth(azimuth_deg: float) -> float:
    """Wrap an azimuth into [0, 360)."""
    value = math.fmod(azimuth_deg, 360.0)
    if value < 0:
        value += 360.0
    # fmod of a tiny negative number can round back up to 360.0
    if value >= 360.0:
        value = 0.0
    return value


@dataclass(frozen=True)
class LookAngleSample:
    """Look angles from the observer to the tracked object at one instant."""

    time: datetime
    azimuth_deg: float  # 0 = north, clockwise
    elevation_deg: float
    range_km: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "azimuth_deg", normalize_azimuth(self.azimuth_deg))

    @property
    def is_visible(self) -> bool:
        """True if the object is on or above the local horizon."""
        return self.elevation_deg >= 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time.isoformat(),
            "azimuth_deg": round(self.azimuth_deg, 2),
            "elevation_deg": round(self.elevation_deg, 2),
            "range_km": round(self.range_km, 2),
        }


class EventStatus(Enum):
    """Outcome of the search for a rise (AOS) or set (LOS) event."""

    FOUND = "found"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Pass:
    """
    A single visible pass.

    ``aos`` is None when the rise could not be located (the object was
    already visible for longer than the lookback window). ``los`` is None
    when the set was not found within the search bound; ``end_time`` then
    holds the fallback bound used for the track.
    """

    aos: Optional[LookAngleSample]
    los: Optional[LookAngleSample]
    peak: LookAngleSample
    track: Tuple[LookAngleSample, ...]
    start_time: datetime
    end_time: datetime

    @property
    def aos_status(self) -> EventStatus:
        return EventStatus.FOUND if self.aos is not None else EventStatus.NOT_FOUND

    @property
    def los_status(self) -> EventStatus:
        return EventStatus.FOUND if self.los is not None else EventStatus.NOT_FOUND

    @property
    def duration_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    def contains(self, when: datetime) -> bool:
        return self.start_time <= when <= self.end_time

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aos": self.aos.to_dict() if self.aos else None,
            "los": self.los.to_dict() if self.los else None,
            "peak": self.peak.to_dict(),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration_s": round(self.duration_seconds, 1),
            "track": [sample.to_dict() for sample in self.track],
        }


@dataclass(frozen=True)
class SearchWindow:
    """Time span and step that drive a fixed-step scan."""

    start_time: datetime
    end_time: datetime
    step_seconds: float

    def __post_init__(self) -> None:
        if self.end_time < self.start_time:
            raise ValueError(
                f"end_time ({self.end_time}) must not precede start_time ({self.start_time})"
            )
        if not self.step_seconds > 0:
            raise ValueError(f"step_seconds must be > 0, got {self.step_seconds}")

    @property
    def duration_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    def times(self) -> Iterator[datetime]:
        """Yield the fixed-step instants, then end_time if not already on the grid."""
        step = timedelta(seconds=self.step_seconds)
        current = self.start_time
        last = None
        while current <= self.end_time:
            yield current
            last = current
            current += step
        if last != self.end_time:
            yield self.end_time


@dataclass(frozen=True)
class NextPassCache:
    """Caller-held next pass, valid until its rise is no longer in the future."""

    pass_: Optional[Pass] = None
    computed_at: Optional[datetime] = field(default=None)

    def is_valid(self, now: datetime) -> bool:
        if self.pass_ is None or self.pass_.aos is None:
            return False
        return self.pass_.aos.time > now


@dataclass(frozen=True)
class CurrentPassCache:
    """Caller-held in-progress pass, valid until its set time has passed."""

    pass_: Optional[Pass] = None
    computed_at: Optional[datetime] = field(default=None)

    def is_valid(self, now: datetime) -> bool:
        if self.pass_ is None or not self.pass_.track:
            return False
        if self.pass_.los is not None and now > self.pass_.los.time:
            return False
        return True
