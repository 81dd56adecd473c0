"""
Satellite Pass Tracker

Predicts when an orbiting object is visible from a ground observer: look
angles, the pass in progress, the next pass and the pass schedule over a
horizon of days.
"""

from .config import PassSearchConfig, load_config
from .models import LookAngleSample, Pass
from .observer import Observer
from .satellite import SatelliteOrbit
from .tracker import PassTracker, TrackingState

__version__ = "0.1.0"
__author__ = "Pass Tracker Team"

__all__ = [
    "LookAngleSample",
    "Observer",
    "Pass",
    "PassSearchConfig",
    "PassTracker",
    "SatelliteOrbit",
    "TrackingState",
    "load_config",
]
