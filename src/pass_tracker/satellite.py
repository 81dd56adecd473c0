"""
Satellite TLE handling.

This module loads two-line element sets, builds the orbit-predictor
propagator for them and summarises the orbital elements they carry.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from orbit_predictor.sources import get_predictor_from_tle_lines  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6378.137  # WGS-84 equatorial radius
MU_EARTH_KM3_S2 = 398600.4418


@dataclass(frozen=True)
class SatelliteElements:
    """Orbital elements read from a TLE."""

    name: str
    catalog_number: str
    designator: str
    epoch: datetime
    inclination_deg: float
    raan_deg: float
    eccentricity: float
    arg_perigee_deg: float
    mean_anomaly_deg: float
    mean_motion_rev_per_day: float
    period_minutes: float
    perigee_altitude_km: float
    apogee_altitude_km: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "catalog_number": self.catalog_number,
            "designator": self.designator,
            "epoch": self.epoch.isoformat(),
            "inclination_deg": round(self.inclination_deg, 4),
            "raan_deg": round(self.raan_deg, 4),
            "eccentricity": round(self.eccentricity, 7),
            "arg_perigee_deg": round(self.arg_perigee_deg, 4),
            "mean_anomaly_deg": round(self.mean_anomaly_deg, 4),
            "mean_motion_rev_per_day": round(self.mean_motion_rev_per_day, 8),
            "period_minutes": round(self.period_minutes, 2),
            "perigee_altitude_km": round(self.perigee_altitude_km, 1),
            "apogee_altitude_km": round(self.apogee_altitude_km, 1),
        }


def split_tle_lines(lines: Sequence[str]) -> Tuple[Optional[str], str, str]:
    """
    Pick the name, line 1 and line 2 out of a TLE block.

    The name line is optional and must precede line 1.

    Raises:
        ValueError: If line 1 and line 2 are missing or out of order
    """
    cleaned = [line.strip() for line in lines if line and line.strip()]

    line1_index = next(
        (i for i, line in enumerate(cleaned) if line.startswith("1 ")), -1
    )
    if line1_index == -1 or line1_index + 1 >= len(cleaned):
        raise ValueError("TLE must contain line 1 followed by line 2")
    if not cleaned[line1_index + 1].startswith("2 "):
        raise ValueError("TLE line 2 must immediately follow line 1")

    name = cleaned[line1_index - 1] if line1_index > 0 else None
    return name, cleaned[line1_index], cleaned[line1_index + 1]


class SatelliteOrbit:
    """
    A satellite defined by a TLE, with an orbit-predictor propagator.
    """

    def __init__(self, tle_lines: Sequence[str], satellite_name: Optional[str] = None) -> None:
        """
        Initialize satellite orbit from TLE data.

        Args:
            tle_lines: TLE lines, optionally preceded by a name line
            satellite_name: Name of the satellite (defaults to the TLE name line)

        Raises:
            ValueError: If TLE data is invalid
        """
        name_line, line1, line2 = split_tle_lines(tle_lines)
        self.satellite_name = satellite_name or name_line or line1[2:7].strip()
        self.line1 = line1
        self.line2 = line2

        try:
            self.predictor = get_predictor_from_tle_lines((line1, line2))
        except Exception as e:
            logger.error(f"Failed to initialize satellite orbit: {e}")
            raise ValueError(f"Invalid TLE data for satellite {self.satellite_name}: {e}")

        logger.info(f"Loaded orbit for satellite: {self.satellite_name}")

    @property
    def tle_lines(self) -> List[str]:
        return [self.satellite_name, self.line1, self.line2]

    @classmethod
    def from_tle_text(cls, text: str, satellite_name: Optional[str] = None) -> "SatelliteOrbit":
        """Create a SatelliteOrbit from a pasted TLE block."""
        return cls(text.splitlines(), satellite_name)

    @classmethod
    def from_tle_file(
        cls, tle_file_path: Union[str, Path], satellite_name: str
    ) -> "SatelliteOrbit":
        """
        Create SatelliteOrbit instance from a multi-satellite TLE file.

        Args:
            tle_file_path: Path to TLE file
            satellite_name: Name of the satellite to extract from the file

        Raises:
            FileNotFoundError: If TLE file doesn't exist
            ValueError: If satellite not found in TLE file
        """
        tle_path = Path(tle_file_path)
        if not tle_path.exists():
            raise FileNotFoundError(f"TLE file not found: {tle_file_path}")

        with open(tle_path, "r") as f:
            lines = [line.strip() for line in f.readlines() if line.strip()]

        for i in range(0, len(lines) - 2):
            name_line = lines[i]
            if name_line.startswith(("1 ", "2 ")):
                continue
            if satellite_name.upper() in name_line.upper():
                return cls(lines[i:i + 3], satellite_name)

        raise ValueError(f"Satellite '{satellite_name}' not found in TLE file")

    def get_position(self, timestamp: datetime) -> Tuple[float, float, float]:
        """
        Get satellite geodetic position at a timestamp.

        Returns:
            Tuple of (latitude, longitude, altitude_km)
        """
        position = self.predictor.get_position(timestamp)
        lat, lon, alt = position.position_llh
        return (lat, lon, alt)

    def element_summary(self) -> SatelliteElements:
        """
        Read the orbital elements out of the TLE columns.

        Returns:
            SatelliteElements
        """
        line1, line2 = self.line1, self.line2
        try:
            epoch_year = int(line1[18:20])
            epoch_day = float(line1[20:32])
            inclination = float(line2[8:16])
            raan = float(line2[17:25])
            eccentricity = float("0." + line2[26:33].strip())
            arg_perigee = float(line2[34:42])
            mean_anomaly = float(line2[43:51])
            mean_motion = float(line2[52:63])
        except ValueError as e:
            raise ValueError(f"Malformed TLE for {self.satellite_name}: {e}") from e

        year = 2000 + epoch_year if epoch_year < 57 else 1900 + epoch_year
        epoch = datetime(year, 1, 1) + timedelta(days=epoch_day - 1)

        period_minutes = 1440.0 / mean_motion if mean_motion > 0 else float("nan")
        n_rad_s = mean_motion * 2 * math.pi / 86400.0
        semi_major_km = (MU_EARTH_KM3_S2 / (n_rad_s ** 2)) ** (1.0 / 3.0) if n_rad_s > 0 else float("nan")

        return SatelliteElements(
            name=self.satellite_name,
            catalog_number=line1[2:7].strip(),
            designator=line1[9:17].strip(),
            epoch=epoch,
            inclination_deg=inclination,
            raan_deg=raan,
            eccentricity=eccentricity,
            arg_perigee_deg=arg_perigee,
            mean_anomaly_deg=mean_anomaly,
            mean_motion_rev_per_day=mean_motion,
            period_minutes=period_minutes,
            perigee_altitude_km=semi_major_km * (1 - eccentricity) - EARTH_RADIUS_KM,
            apogee_altitude_km=semi_major_km * (1 + eccentricity) - EARTH_RADIUS_KM,
        )

    def get_orbital_period(self) -> timedelta:
        return timedelta(minutes=self.element_summary().period_minutes)

    def __repr__(self) -> str:
        return f"SatelliteOrbit(name='{self.satellite_name}')"
