"""
Matplotlib sky plots for satellite passes.

Draws a pass track on a polar azimuth/elevation chart: north up, azimuth
clockwise, zenith at the centre and the horizon on the outer ring.
"""

import logging
import math
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from matplotlib.figure import Figure

from .models import Pass
from .sun import SunPosition
from .utils import format_timestamp

logger = logging.getLogger(__name__)


def to_polar(azimuth_deg: float, elevation_deg: float) -> Tuple[float, float]:
    """Convert look angles to (theta radians, radius) for the sky plot."""
    return math.radians(azimuth_deg), 90.0 - max(0.0, min(90.0, elevation_deg))


class PolarPlotter:
    """
    Creates polar sky plots of pass trajectories.
    """

    def __init__(self, figsize: Tuple[float, float] = (6, 6)) -> None:
        self.figsize = figsize
        self.fig = None
        self.ax = None

    def _create_axes(self) -> None:
        self.fig = Figure(figsize=self.figsize)
        self.ax = self.fig.add_subplot(111, projection="polar")
        self.ax.set_theta_zero_location("N")
        self.ax.set_theta_direction(-1)
        self.ax.set_ylim(0, 90)
        self.ax.set_yticks([0, 30, 60, 90])
        self.ax.set_yticklabels(["90°", "60°", "30°", "0°"])
        self.ax.grid(True, linestyle="--", alpha=0.6)

    def plot_pass(
        self,
        pass_: Pass,
        sun_track: Optional[Sequence[SunPosition]] = None,
        title: Optional[str] = None,
    ):
        """
        Draw a pass track, its AOS/LOS/peak markers and an optional Sun track.

        Args:
            pass_: Pass to draw
            sun_track: Sun positions over the pass
            title: Plot title

        Returns:
            Tuple of (figure, axes)

        Raises:
            ValueError: If the pass has no track samples
        """
        if not pass_.track:
            raise ValueError("Pass has no trajectory samples to plot")

        self._create_axes()

        thetas, radii = zip(*(to_polar(p.azimuth_deg, p.elevation_deg) for p in pass_.track))
        self.ax.plot(thetas, radii, color="tab:blue", linewidth=2, label="Track")

        markers = [
            ("AOS", pass_.aos, "tab:green"),
            ("MAX", pass_.peak, "tab:red"),
            ("LOS", pass_.los, "tab:purple"),
        ]
        for label, sample, color in markers:
            if sample is None:
                continue
            theta, radius = to_polar(sample.azimuth_deg, sample.elevation_deg)
            self.ax.scatter([theta], [radius], color=color, zorder=3, label=label)

        if sun_track:
            sun_theta = np.radians([s.azimuth_deg for s in sun_track])
            sun_radius = 90.0 - np.clip([s.elevation_deg for s in sun_track], 0.0, 90.0)
            self.ax.plot(sun_theta, sun_radius, color="orange", linestyle=":", label="Sun")

        self.ax.set_title(title or f"Pass {format_timestamp(pass_.start_time)} UTC")
        self.ax.legend(loc="lower left", bbox_to_anchor=(-0.1, -0.1), fontsize=8)

        return self.fig, self.ax

    def save(self, output_file: Union[str, Path], dpi: int = 150) -> Path:
        """Save the current figure and release it."""
        if self.fig is None:
            raise ValueError("Nothing to save: call plot_pass first")

        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.fig.savefig(output_path, dpi=dpi, bbox_inches="tight")
        self.fig = None
        self.ax = None

        logger.info(f"Saved pass plot to {output_path}")
        return output_path
