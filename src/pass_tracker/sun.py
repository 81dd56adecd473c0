"""
Solar look angles for the sky-plot overlay.

Uses the low-precision NOAA solar position algorithm (accurate to a
fraction of a degree).
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .models import LookAngleSample, normalize_azimuth
from .observer import Observer

J2000 = datetime(2000, 1, 1, 12, 0, 0)


@dataclass(frozen=True)
class SunPosition:
    """Sun azimuth/elevation seen by the observer."""

    time: datetime
    azimuth_deg: float
    elevation_deg: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time.isoformat(),
            "azimuth_deg": round(self.azimuth_deg, 2),
            "elevation_deg": round(self.elevation_deg, 2),
        }


def _days_since_j2000(timestamp: datetime) -> float:
    if timestamp.tzinfo is not None:
        timestamp = timestamp.replace(tzinfo=None)
    return (timestamp - J2000).total_seconds() / 86400.0


def calculate_gmst(timestamp: datetime) -> float:
    """
    Calculate Greenwich Mean Sidereal Time (GMST) in degrees.

    Args:
        timestamp: UTC datetime

    Returns:
        GMST in degrees
    """
    days = _days_since_j2000(timestamp)
    T = days / 36525.0
    gmst = 280.46061837 + 360.98564736629 * days + 0.000387933 * T * T
    return gmst % 360.0


def compute_sun_look_angles(observer: Observer, timestamp: datetime) -> Optional[SunPosition]:
    """
    Azimuth and elevation of the Sun for an observer.

    Args:
        observer: Ground observer
        timestamp: UTC datetime

    Returns:
        SunPosition, or None when the Sun is at or below the horizon
    """
    T = _days_since_j2000(timestamp) / 36525.0

    mean_lon = (280.46646 + T * (36000.76983 + 0.0003032 * T)) % 360.0
    mean_anomaly = math.radians(357.52911 + T * (35999.05029 - 0.0001537 * T))
    eq_center = (
        math.sin(mean_anomaly) * (1.914602 - T * (0.004817 + 0.000014 * T))
        + math.sin(2 * mean_anomaly) * (0.019993 - 0.000101 * T)
        + math.sin(3 * mean_anomaly) * 0.000289
    )
    true_lon = (mean_lon + eq_center) % 360.0

    omega = math.radians(125.04 - 1934.136 * T)
    mean_obliq = 23 + (26 + (21.448 - T * (46.815 + T * (0.00059 - T * 0.001813))) / 60) / 60
    obliq = math.radians(mean_obliq + 0.00256 * math.cos(omega))
    app_lon = math.radians(true_lon - 0.00569 - 0.00478 * math.sin(omega)) % (2 * math.pi)

    decl = math.asin(math.sin(obliq) * math.sin(app_lon))
    ra = math.atan2(math.cos(obliq) * math.sin(app_lon), math.cos(app_lon))

    hour_angle = math.radians(calculate_gmst(timestamp) + observer.longitude) - ra
    hour_angle = (hour_angle + math.pi) % (2 * math.pi) - math.pi

    lat = math.radians(observer.latitude)
    sin_alt = math.sin(lat) * math.sin(decl) + math.cos(lat) * math.cos(decl) * math.cos(hour_angle)
    elevation = math.degrees(math.asin(max(-1.0, min(1.0, sin_alt))))
    if elevation <= 0:
        return None

    azimuth = math.atan2(
        -math.sin(hour_angle),
        math.tan(decl) * math.cos(lat) - math.sin(lat) * math.cos(hour_angle),
    )
    return SunPosition(
        time=timestamp,
        azimuth_deg=normalize_azimuth(math.degrees(azimuth)),
        elevation_deg=elevation,
    )


def sun_track_for(observer: Observer, track: Iterable[LookAngleSample]) -> List[SunPosition]:
    """Sun positions at the instants of a pass track, skipping those below the horizon."""
    positions = []
    for point in track:
        sun = compute_sun_look_angles(observer, point.time)
        if sun is not None:
            positions.append(sun)
    return positions
