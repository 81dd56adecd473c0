"""
Look-angle oracles.

An oracle maps an instant to the look angles of the tracked object, or to
None when propagation has no valid solution. The pass search treats it as a
black box.
"""

import logging
import math
from datetime import datetime
from typing import Optional, Protocol, Tuple

import numpy as np

from .models import LookAngleSample
from .observer import Observer
from .satellite import SatelliteOrbit

logger = logging.getLogger(__name__)

# WGS-84
WGS84_A_KM = 6378.137
WGS84_F = 1 / 298.257223563
WGS84_E2 = WGS84_F * (2 - WGS84_F)


class LookAngleOracle(Protocol):
    """Callable returning the look angles at an instant, or None if unavailable."""

    def __call__(self, when: datetime) -> Optional[LookAngleSample]:
        ...


def geodetic_to_ecef(latitude_deg: float, longitude_deg: float, altitude_km: float) -> np.ndarray:
    """Convert WGS-84 geodetic coordinates to ECEF (km)."""
    lat = math.radians(latitude_deg)
    lon = math.radians(longitude_deg)
    sin_lat = math.sin(lat)
    n = WGS84_A_KM / math.sqrt(1 - WGS84_E2 * sin_lat * sin_lat)
    return np.array(
        [
            (n + altitude_km) * math.cos(lat) * math.cos(lon),
            (n + altitude_km) * math.cos(lat) * math.sin(lon),
            (n * (1 - WGS84_E2) + altitude_km) * sin_lat,
        ]
    )


def enu_rotation(latitude_deg: float, longitude_deg: float) -> np.ndarray:
    """Rotation matrix from ECEF to local East-North-Up."""
    lat = math.radians(latitude_deg)
    lon = math.radians(longitude_deg)
    sin_lat, cos_lat = math.sin(lat), math.cos(lat)
    sin_lon, cos_lon = math.sin(lon), math.cos(lon)
    return np.array(
        [
            [-sin_lon, cos_lon, 0.0],
            [-sin_lat * cos_lon, -sin_lat * sin_lon, cos_lat],
            [cos_lat * cos_lon, cos_lat * sin_lon, sin_lat],
        ]
    )


def look_angles_from_ecef(
    observer_ecef: np.ndarray, rotation: np.ndarray, target_ecef: np.ndarray
) -> Tuple[float, float, float]:
    """
    Azimuth, elevation (degrees) and range (km) of an ECEF point.

    Azimuth is measured from north, clockwise.
    """
    los = np.asarray(target_ecef, dtype=float) - observer_ecef
    range_km = float(np.linalg.norm(los))
    if range_km == 0:
        return 0.0, 90.0, 0.0

    east, north, up = rotation @ los
    elevation = math.degrees(math.asin(max(-1.0, min(1.0, up / range_km))))
    azimuth = math.degrees(math.atan2(east, north)) % 360.0
    return azimuth, elevation, range_km


class SatelliteLookAngleOracle:
    """
    Look angles of a TLE satellite seen from a ground observer.

    Propagation is done by orbit-predictor; the topocentric conversion is
    done here with a WGS-84 observer.
    """

    def __init__(self, satellite: SatelliteOrbit, observer: Observer) -> None:
        self.satellite = satellite
        self.observer = observer
        self._observer_ecef = geodetic_to_ecef(
            observer.latitude, observer.longitude, observer.altitude_m / 1000.0
        )
        self._rotation = enu_rotation(observer.latitude, observer.longitude)

    def __call__(self, when: datetime) -> Optional[LookAngleSample]:
        try:
            position = self.satellite.predictor.get_position(when)
            target_ecef = np.asarray(position.position_ecef, dtype=float)
        except Exception as e:
            logger.debug(f"Propagation unavailable at {when}: {e}")
            return None

        if not np.all(np.isfinite(target_ecef)):
            logger.debug(f"Propagation returned a non-finite position at {when}")
            return None

        azimuth, elevation, range_km = look_angles_from_ecef(
            self._observer_ecef, self._rotation, target_ecef
        )
        return LookAngleSample(
            time=when,
            azimuth_deg=azimuth,
            elevation_deg=elevation,
            range_km=range_km,
        )

    def __repr__(self) -> str:
        return (
            f"SatelliteLookAngleOracle(satellite='{self.satellite.satellite_name}', "
            f"observer='{self.observer.name}')"
        )
