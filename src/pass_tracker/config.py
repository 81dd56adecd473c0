"""
Pass search configuration.

This module collects the step sizes and search limits used by the
pass-prediction engine and provides loading from a YAML file.
"""

import logging
import math
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

MAX_PASS_DURATION_SECONDS = 2 * 3600  # Safety bound on a single pass
PASS_SCAN_STEP_SECONDS = 30  # Coarse scan for rise events
PEAK_SCAN_STEP_SECONDS = 10  # Fine scan for peak and set inside a pass
LOS_SEARCH_LIMIT_SECONDS = 24 * 3600  # Back/forward limit around "now"
TRACK_STEP_SECONDS = 30  # Trajectory sampling step
REFINE_ITERATIONS = 14  # Bisection iterations per horizon crossing

DEFAULT_NEXT_PASS_SEARCH_SECONDS = 24 * 3600
DEFAULT_HORIZON_DAYS = 7
MAX_SCHEDULED_PASSES = 100
SCHEDULER_ADVANCE_SECONDS = 60

CONFIG_ENV_VAR = "PASS_TRACKER_CONFIG"


def iterations_for_precision(bracket_seconds: float, precision_seconds: float) -> int:
    """
    Number of bisection iterations needed to shrink a bracket below a precision.

    Args:
        bracket_seconds: Initial bracket length in seconds
        precision_seconds: Desired time precision in seconds

    Returns:
        Iteration count (at least 1)
    """
    if bracket_seconds <= 0 or precision_seconds <= 0:
        raise ValueError("bracket_seconds and precision_seconds must be > 0")
    if precision_seconds >= bracket_seconds:
        return 1
    return max(1, math.ceil(math.log2(bracket_seconds / precision_seconds)))


@dataclass(frozen=True)
class PassSearchConfig:
    """
    Step sizes and limits for the pass search.

    The defaults reproduce the tracker's fixed-step behaviour. Passes shorter
    than ``pass_scan_step_seconds`` can fall between two coarse samples and
    are not guaranteed to be found.
    """

    max_pass_duration_seconds: float = MAX_PASS_DURATION_SECONDS
    pass_scan_step_seconds: float = PASS_SCAN_STEP_SECONDS
    peak_scan_step_seconds: float = PEAK_SCAN_STEP_SECONDS
    los_search_limit_seconds: float = LOS_SEARCH_LIMIT_SECONDS
    track_step_seconds: float = TRACK_STEP_SECONDS
    refine_iterations: int = REFINE_ITERATIONS
    next_pass_search_seconds: float = DEFAULT_NEXT_PASS_SEARCH_SECONDS
    max_scheduled_passes: int = MAX_SCHEDULED_PASSES
    scheduler_advance_seconds: float = SCHEDULER_ADVANCE_SECONDS

    def __post_init__(self) -> None:
        """Validate step sizes and limits."""
        for name in (
            "max_pass_duration_seconds",
            "pass_scan_step_seconds",
            "peak_scan_step_seconds",
            "los_search_limit_seconds",
            "track_step_seconds",
            "next_pass_search_seconds",
            "scheduler_advance_seconds",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")
            if name != "scheduler_advance_seconds" and not value > 0:
                raise ValueError(f"{name} must be > 0, got {value}")

        for name in ("refine_iterations", "max_scheduled_passes"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise ValueError(f"{name} must be >= 1, got {value}")

        if self.scheduler_advance_seconds < 0:
            raise ValueError(
                f"scheduler_advance_seconds must be >= 0, got {self.scheduler_advance_seconds}"
            )

    def with_refine_precision(self, precision_seconds: float) -> "PassSearchConfig":
        """
        Return a copy whose bisection count meets a time-precision target.

        The largest bracket the engine refines is one coarse scan step.
        """
        iterations = iterations_for_precision(
            self.pass_scan_step_seconds, precision_seconds
        )
        return replace(self, refine_iterations=iterations)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PassSearchConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**data)


DEFAULT_CONFIG = PassSearchConfig()


def load_config(path: Optional[Union[str, Path]] = None) -> PassSearchConfig:
    """
    Load pass search configuration from a YAML file.

    Args:
        path: YAML file path. When omitted, the file named by the
            PASS_TRACKER_CONFIG environment variable is used, and the
            built-in defaults when that is unset.

    Returns:
        PassSearchConfig

    Raises:
        FileNotFoundError: If the configuration file doesn't exist
        ValueError: If the file contents are not a valid configuration
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
        if not path:
            return DEFAULT_CONFIG

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Configuration in {config_path} must be a mapping")

    config = PassSearchConfig.from_dict(data)
    logger.info(f"Loaded pass search configuration from {config_path}")
    return config
