"""
Command-line interface for the satellite pass tracker.

This module provides a CLI for look angles, pass predictions and pass
schedule exports.
"""

import functools
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

import click
import requests

from .config import DEFAULT_HORIZON_DAYS, load_config
from .export import export_passes
from .models import LookAngleSample, Pass
from .observer import Observer
from .satellite import SatelliteOrbit
from .sun import sun_track_for
from .tracker import PassTracker
from .utils import (
    download_tle_file, fetch_tle_catalog, format_duration, format_timestamp,
    get_common_tle_sources, get_current_utc, parse_datetime, search_tle_catalog,
    setup_logging
)
from .visualization import PolarPlotter

logger = logging.getLogger(__name__)


def _tracking_options(func: Callable) -> Callable:
    """Options shared by every command that needs a satellite and an observer."""
    @click.option('--tle', required=True, type=click.Path(exists=True),
                  help='Path to TLE file')
    @click.option('--satellite', default=None,
                  help='Satellite name (must match name in TLE file; default: first entry)')
    @click.option('--observer', required=True, nargs=3, metavar='NAME LAT LON',
                  help='Observer: name latitude longitude')
    @click.option('--altitude', default=0.0, type=float,
                  help='Observer altitude in metres (default: 0)')
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)
    return wrapper


def _build_tracker(
    ctx: click.Context, tle: str, satellite: Optional[str],
    observer: Tuple[str, str, str], altitude: float
) -> Tuple[PassTracker, SatelliteOrbit, Observer]:
    if satellite:
        sat = SatelliteOrbit.from_tle_file(tle, satellite)
    else:
        sat = SatelliteOrbit.from_tle_text(Path(tle).read_text())

    name, lat_str, lon_str = observer
    obs = Observer(name, float(lat_str), float(lon_str), altitude)

    config = ctx.obj.get("config") if ctx.obj else None
    if config is None:
        config = load_config()
    return PassTracker.from_satellite(sat, obs, config), sat, obs


def _when(time_str: Optional[str]):
    return parse_datetime(time_str) if time_str else get_current_utc()


def _format_event(sample: Optional[LookAngleSample], missing: str = "--") -> str:
    if sample is None:
        return missing
    return f"{format_timestamp(sample.time)} UTC (az {sample.azimuth_deg:.1f}°)"


def _format_peak(sample: LookAngleSample) -> str:
    return (f"{format_timestamp(sample.time)} UTC "
            f"(az {sample.azimuth_deg:.1f}°, el {sample.elevation_deg:.1f}°)")


def _echo_pass(item: Pass) -> None:
    click.echo(f"AOS:      {_format_event(item.aos, 'before lookback window')}")
    click.echo(f"MAX:      {_format_peak(item.peak)}")
    click.echo(f"LOS:      {_format_event(item.los, 'not found')}")
    click.echo(f"Duration: {format_duration(item.duration_seconds)}")


def _fail(message: str, error: Exception) -> None:
    logger.error(f"{message}: {error}")
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.option('--log-level', default='WARNING',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set logging level')
@click.option('--log-file', type=click.Path(), help='Log file path')
@click.option('--config', 'config_file', type=click.Path(exists=True),
              help='YAML file with pass search settings')
@click.pass_context
def main(ctx: click.Context, log_level: str, log_file: Optional[str],
         config_file: Optional[str]) -> None:
    """Satellite Pass Tracker - look angles and visible pass predictions."""
    setup_logging(log_level, log_file)
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(config_file)
    except (ValueError, FileNotFoundError) as e:
        _fail("Configuration loading failed", e)


@main.command()
@_tracking_options
@click.option('--time', 'time_str', help='UTC time (default: now)')
@click.pass_context
def look(ctx: click.Context, tle: str, satellite: Optional[str],
         observer: Tuple[str, str, str], altitude: float, time_str: Optional[str]) -> None:
    """Show the current look angles of a satellite."""
    try:
        tracker, sat, _ = _build_tracker(ctx, tle, satellite, observer, altitude)
        when = _when(time_str)
        sample = tracker.look(when)
    except (ValueError, OSError) as e:
        _fail("Look angle calculation failed", e)
        return

    if sample is None:
        click.echo(f"Look angles for {sat.satellite_name} are unavailable at {format_timestamp(when)} UTC")
        return

    click.echo(f"{sat.satellite_name} at {format_timestamp(sample.time)} UTC")
    click.echo(f"Azimuth:   {sample.azimuth_deg:.1f}°")
    click.echo(f"Elevation: {sample.elevation_deg:.1f}°")
    click.echo(f"Range:     {sample.range_km:.1f} km")


@main.command('current-pass')
@_tracking_options
@click.option('--time', 'time_str', help='UTC time (default: now)')
@click.pass_context
def current_pass(ctx: click.Context, tle: str, satellite: Optional[str],
                 observer: Tuple[str, str, str], altitude: float,
                 time_str: Optional[str]) -> None:
    """Show the pass in progress, if the satellite is visible."""
    try:
        tracker, sat, obs = _build_tracker(ctx, tle, satellite, observer, altitude)
        found = tracker.current_pass(_when(time_str))
    except (ValueError, OSError) as e:
        _fail("Current pass calculation failed", e)
        return

    if found is None:
        click.echo(f"{sat.satellite_name} is not visible from {obs.name}")
        return

    click.echo(f"\nCurrent pass of {sat.satellite_name} over {obs.name}:")
    _echo_pass(found)


@main.command('next-pass')
@_tracking_options
@click.option('--time', 'time_str', help='UTC search start (default: now)')
@click.option('--hours', default=24, type=int,
              help='Hours to search ahead (default: 24)')
@click.pass_context
def next_pass(ctx: click.Context, tle: str, satellite: Optional[str],
              observer: Tuple[str, str, str], altitude: float,
              time_str: Optional[str], hours: int) -> None:
    """Find the next visible pass of a satellite."""
    try:
        tracker, sat, obs = _build_tracker(ctx, tle, satellite, observer, altitude)
        found = tracker.next_pass(_when(time_str), hours * 3600)
    except (ValueError, OSError) as e:
        _fail("Next pass calculation failed", e)
        return

    if found is None:
        click.echo(f"No passes found for {sat.satellite_name} over {obs.name} in the next {hours} hours")
        return

    click.echo(f"\nNext pass of {sat.satellite_name} over {obs.name}:")
    _echo_pass(found)


@main.command()
@_tracking_options
@click.option('--days', default=DEFAULT_HORIZON_DAYS, type=float,
              help=f'Days to search ahead (default: {DEFAULT_HORIZON_DAYS})')
@click.option('--start-time', help='UTC start time (default: now)')
@click.option('--output', type=click.Path(), help='Export file (.csv or .json)')
@click.option('--format', 'output_format', default='auto',
              type=click.Choice(['auto', 'json', 'csv']),
              help='Export format')
@click.pass_context
def passes(ctx: click.Context, tle: str, satellite: Optional[str],
           observer: Tuple[str, str, str], altitude: float, days: float,
           start_time: Optional[str], output: Optional[str], output_format: str) -> None:
    """List the upcoming visible passes of a satellite."""
    try:
        tracker, sat, obs = _build_tracker(ctx, tle, satellite, observer, altitude)
        upcoming = tracker.upcoming_passes(days, _when(start_time))
        if output:
            export_passes(upcoming, output, output_format,
                          satellite_name=sat.satellite_name, observer_name=obs.name)
    except (ValueError, OSError) as e:
        _fail("Pass schedule calculation failed", e)
        return

    if not upcoming:
        click.echo(f"No passes found for {sat.satellite_name} over {obs.name} in the next {days:g} days")
        return

    click.echo(f"\n{len(upcoming)} passes of {sat.satellite_name} over {obs.name}:")
    for index, item in enumerate(upcoming, start=1):
        click.echo(f"\nPASS {index}")
        _echo_pass(item)

    if output:
        click.echo(f"\nSchedule exported to {output}")


@main.command('satellite-info')
@click.option('--tle', required=True, type=click.Path(exists=True),
              help='Path to TLE file')
@click.option('--satellite', default=None,
              help='Satellite name (must match name in TLE file; default: first entry)')
def satellite_info(tle: str, satellite: Optional[str]) -> None:
    """Show the orbital elements of a TLE."""
    try:
        if satellite:
            sat = SatelliteOrbit.from_tle_file(tle, satellite)
        else:
            sat = SatelliteOrbit.from_tle_text(Path(tle).read_text())
        elements = sat.element_summary()
    except (ValueError, OSError) as e:
        _fail("Reading satellite data failed", e)
        return

    click.echo(f"Name:            {elements.name}")
    click.echo(f"Catalog number:  {elements.catalog_number}")
    click.echo(f"Designator:      {elements.designator}")
    click.echo(f"Epoch:           {format_timestamp(elements.epoch)} UTC")
    click.echo(f"Inclination:     {elements.inclination_deg:.3f}°")
    click.echo(f"RAAN:            {elements.raan_deg:.3f}°")
    click.echo(f"Eccentricity:    {elements.eccentricity:.7f}")
    click.echo(f"Arg. of perigee: {elements.arg_perigee_deg:.3f}°")
    click.echo(f"Mean anomaly:    {elements.mean_anomaly_deg:.3f}°")
    click.echo(f"Mean motion:     {elements.mean_motion_rev_per_day:.5f} rev/day")
    click.echo(f"Period:          {elements.period_minutes:.2f} min")
    click.echo(f"Perigee:         {elements.perigee_altitude_km:.1f} km")
    click.echo(f"Apogee:          {elements.apogee_altitude_km:.1f} km")


@main.command('plot-pass')
@_tracking_options
@click.option('--days', default=DEFAULT_HORIZON_DAYS, type=float,
              help='Days to search ahead (default: 7)')
@click.option('--start-time', help='UTC start time (default: now)')
@click.option('--index', default=1, type=int, help='Pass number to plot (default: 1)')
@click.option('--output', required=True, type=click.Path(), help='Output image file')
@click.option('--sun/--no-sun', default=True, help='Overlay the Sun track')
@click.pass_context
def plot_pass(ctx: click.Context, tle: str, satellite: Optional[str],
              observer: Tuple[str, str, str], altitude: float, days: float,
              start_time: Optional[str], index: int, output: str, sun: bool) -> None:
    """Draw a polar sky plot of one upcoming pass."""
    try:
        tracker, sat, obs = _build_tracker(ctx, tle, satellite, observer, altitude)
        upcoming = tracker.upcoming_passes(days, _when(start_time))
        if not 1 <= index <= len(upcoming):
            raise ValueError(f"Pass {index} not available ({len(upcoming)} passes found)")

        selected = upcoming[index - 1]
        sun_track = sun_track_for(obs, selected.track) if sun else None

        plotter = PolarPlotter()
        plotter.plot_pass(selected, sun_track,
                          title=f"{sat.satellite_name} pass {index} over {obs.name}")
        plotter.save(output)
    except (ValueError, OSError) as e:
        _fail("Pass plot failed", e)
        return

    click.echo(f"Pass plot saved to {output}")


@main.command('download-tle')
@click.option('--source', default='celestrak_stations',
              help='TLE source (use "list-sources" to see available)')
@click.option('--output', required=True, type=click.Path(),
              help='Output TLE file path')
def download_tle(source: str, output: str) -> None:
    """Download TLE data from an online source."""
    sources = get_common_tle_sources()
    if source not in sources:
        click.echo(f"Unknown source '{source}'. Use 'list-sources' to see available sources.", err=True)
        sys.exit(1)

    if download_tle_file(sources[source], output):
        click.echo(f"TLE data downloaded to {output}")
    else:
        click.echo("Failed to download TLE data", err=True)
        sys.exit(1)


@main.command('search-tle')
@click.argument('keyword', default='')
@click.option('--source', default='celestrak_active',
              help='TLE source (use "list-sources" to see available)')
@click.option('--output', default=None, type=click.Path(),
              help='Save the matching entries as a TLE file')
def search_tle(keyword: str, source: str, output: Optional[str]) -> None:
    """Search an online TLE catalog by satellite name."""
    sources = get_common_tle_sources()
    if source not in sources:
        click.echo(f"Unknown source '{source}'. Use 'list-sources' to see available sources.", err=True)
        sys.exit(1)

    try:
        matches = search_tle_catalog(fetch_tle_catalog(sources[source]), keyword)
    except (requests.RequestException, ValueError) as e:
        _fail("TLE search failed", e)
        return

    if not matches:
        click.echo(f"No satellites matching '{keyword}'")
        return

    for entry in matches:
        click.echo(f"{entry.name} (NORAD {entry.catalog_number})")
        click.echo(f"  {entry.line1}")
        click.echo(f"  {entry.line2}")

    if output:
        Path(output).write_text("\n".join(entry.to_text() for entry in matches) + "\n")
        click.echo(f"{len(matches)} entries saved to {output}")


@main.command('list-sources')
def list_sources() -> None:
    """List available TLE data sources."""
    click.echo("Available TLE sources:")
    for name, url in get_common_tle_sources().items():
        click.echo(f"  {name}: {url}")


if __name__ == '__main__':
    main()
