"""
Ground observer definition.

This module provides the observer location used for look-angle
calculations.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Observer:
    """
    A ground observer on the Earth's surface.

    Latitude and longitude are geodetic degrees; altitude is metres above
    the WGS-84 ellipsoid.
    """

    name: str
    latitude: float  # degrees, -90 to +90
    longitude: float  # degrees, -180 to +180
    altitude_m: float = 0.0

    def __post_init__(self) -> None:
        """Validate observer coordinates."""
        if not math.isfinite(self.latitude) or not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Invalid latitude: {self.latitude}. Must be between -90 and 90 degrees."
            )
        if not math.isfinite(self.longitude) or not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Invalid longitude: {self.longitude}. Must be between -180 and 180 degrees."
            )
        if not math.isfinite(self.altitude_m):
            raise ValueError(f"Invalid altitude: {self.altitude_m}. Must be a finite number.")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude_m": self.altitude_m,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Observer":
        return cls(
            name=data.get("name", "observer"),
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            altitude_m=float(data.get("altitude_m", 0.0)),
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.latitude:.4f}°, {self.longitude:.4f}°, {self.altitude_m:.0f} m)"
