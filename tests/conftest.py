"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides:
- Custom markers for test categorization
- Synthetic look-angle oracles with known horizon crossings
- Shared satellite, observer and time fixtures
"""

import math
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional, Tuple

import pytest
from _pytest.config import Config

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pass_tracker.models import LookAngleSample  # noqa: E402


def pytest_configure(config: Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# =============================================================================
# SYNTHETIC ORACLES
# =============================================================================

PASS_PERIOD_SECONDS = 5400.0
PASS_AMPLITUDE_DEG = 45.0
PASS_OFFSET_DEG = -10.0

# Horizon crossings of 45*sin(2*pi*t/5400) - 10 within the first period
FIRST_AOS_SECONDS = PASS_PERIOD_SECONDS / (2 * math.pi) * math.asin(2.0 / 9.0)
FIRST_LOS_SECONDS = PASS_PERIOD_SECONDS / 2 - FIRST_AOS_SECONDS
FIRST_PEAK_SECONDS = PASS_PERIOD_SECONDS / 4
PEAK_ELEVATION_DEG = PASS_AMPLITUDE_DEG + PASS_OFFSET_DEG


class FunctionOracle:
    """
    Oracle driven by an elevation function of the seconds elapsed since base.

    Azimuth sweeps at 1 degree per 15 seconds. ``unavailable`` marks the
    instants (in seconds since base) where the oracle returns None.
    """

    def __init__(
        self,
        base: datetime,
        elevation: Callable[[float], float],
        unavailable: Optional[Callable[[float], bool]] = None,
    ) -> None:
        self.base = base
        self.elevation = elevation
        self.unavailable = unavailable
        self.calls = 0

    def seconds(self, when: datetime) -> float:
        return (when - self.base).total_seconds()

    def at(self, seconds: float) -> datetime:
        return self.base + timedelta(seconds=seconds)

    def __call__(self, when: datetime) -> Optional[LookAngleSample]:
        self.calls += 1
        seconds = self.seconds(when)
        if self.unavailable is not None and self.unavailable(seconds):
            return None
        return LookAngleSample(
            time=when,
            azimuth_deg=seconds / 15.0,
            elevation_deg=self.elevation(seconds),
            range_km=1000.0,
        )


def sinusoidal_elevation(seconds: float) -> float:
    return PASS_AMPLITUDE_DEG * math.sin(2 * math.pi * seconds / PASS_PERIOD_SECONDS) + PASS_OFFSET_DEG


# =============================================================================
# FIXTURES - Common test setup
# =============================================================================


@pytest.fixture
def base_datetime() -> datetime:
    """Standard base datetime for tests."""
    return datetime(2025, 11, 8, 0, 0, 0)


@pytest.fixture
def make_oracle(base_datetime: datetime) -> Callable[..., FunctionOracle]:
    """Factory for oracles with a custom elevation profile."""
    def factory(
        elevation: Callable[[float], float] = sinusoidal_elevation,
        unavailable: Optional[Callable[[float], bool]] = None,
    ) -> FunctionOracle:
        return FunctionOracle(base_datetime, elevation, unavailable)
    return factory


@pytest.fixture
def sine_oracle(make_oracle: Callable[..., FunctionOracle]) -> FunctionOracle:
    """Object rising every 90 minutes, peaking at 35 degrees."""
    return make_oracle()


@pytest.fixture
def never_visible_oracle(make_oracle: Callable[..., FunctionOracle]) -> FunctionOracle:
    """Object that stays below the horizon."""
    return make_oracle(lambda s: -30.0 + 5.0 * math.sin(s / 1000.0))


@pytest.fixture
def always_visible_oracle(make_oracle: Callable[..., FunctionOracle]) -> FunctionOracle:
    """Object that stays above the horizon."""
    return make_oracle(lambda s: 50.0 + 10.0 * math.sin(s / 1000.0))


@pytest.fixture
def unavailable_oracle(make_oracle: Callable[..., FunctionOracle]) -> FunctionOracle:
    """Oracle with no valid propagation anywhere."""
    return make_oracle(unavailable=lambda s: True)


@pytest.fixture
def sample_tle_lines() -> Tuple[str, str]:
    """Sample TLE data for ICEYE-X44."""
    return (
        "1 62707U 25009DC  25306.22031033  .00004207  00000+0  39848-3 0  9995",
        "2 62707  97.7269  23.9854 0002193 135.9671 224.1724 14.94137357 66022",
    )


@pytest.fixture
def sample_tle_file(sample_tle_lines: Tuple[str, str], tmp_path: Path) -> Path:
    """TLE file holding ICEYE-X44."""
    tle_file = tmp_path / "test.tle"
    tle_file.write_text(f"ICEYE-X44\n{sample_tle_lines[0]}\n{sample_tle_lines[1]}\n")
    return tle_file


@pytest.fixture
def sample_satellite(sample_tle_file: Path):
    """Create a sample SatelliteOrbit for testing."""
    from pass_tracker.satellite import SatelliteOrbit

    return SatelliteOrbit.from_tle_file(str(sample_tle_file), satellite_name="ICEYE-X44")


@pytest.fixture
def sample_observer():
    """Create a sample Observer for testing."""
    from pass_tracker.observer import Observer

    return Observer(name="Dubai", latitude=25.2048, longitude=55.2708, altitude_m=5.0)
