"""
Tests for the CLI module.

Commands run against a real TLE file; pass searches use a synthetic oracle
so the expected passes are known.
"""

import json
from unittest.mock import patch

import pytest
import requests
from click.testing import CliRunner

from pass_tracker.cli import main
from pass_tracker.tracker import PassTracker
from pass_tracker.utils import TleEntry

OBSERVER_ARGS = ['--observer', 'Dubai', '25.2', '55.3']


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def synthetic_tracker(sine_oracle):
    """Route PassTracker.from_satellite to the synthetic oracle."""
    with patch('pass_tracker.cli.PassTracker.from_satellite',
               return_value=PassTracker(sine_oracle)) as mock_factory:
        yield mock_factory


def _tracking_args(command, tle_file, *extra):
    return [command, '--tle', str(tle_file), *OBSERVER_ARGS, *extra]


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, cli_runner) -> None:
        result = cli_runner.invoke(main, ['--help'])
        assert result.exit_code == 0
        assert 'Satellite Pass Tracker' in result.output

    def test_main_with_log_level(self, cli_runner) -> None:
        with patch('pass_tracker.cli.setup_logging') as mock_setup:
            result = cli_runner.invoke(main, ['--log-level', 'DEBUG', 'list-sources'])
        assert result.exit_code == 0
        mock_setup.assert_called_once_with('DEBUG', None)

    def test_invalid_config(self, cli_runner, tmp_path) -> None:
        config_file = tmp_path / "search.yaml"
        config_file.write_text("no_such_setting: 1\n")

        with patch('pass_tracker.cli.setup_logging'):
            result = cli_runner.invoke(main, ['--config', str(config_file), 'list-sources'])

        assert result.exit_code == 1
        assert 'Unknown configuration keys' in result.output

    def test_wrong_typed_config(self, cli_runner, tmp_path) -> None:
        config_file = tmp_path / "search.yaml"
        config_file.write_text("pass_scan_step_seconds: fast\n")

        with patch('pass_tracker.cli.setup_logging'):
            result = cli_runner.invoke(main, ['--config', str(config_file), 'list-sources'])

        assert result.exit_code == 1
        assert not isinstance(result.exception, TypeError)
        assert 'pass_scan_step_seconds must be a number' in result.output

    def test_config_passed_to_tracker(self, cli_runner, sample_tle_file, tmp_path,
                                      synthetic_tracker) -> None:
        config_file = tmp_path / "search.yaml"
        config_file.write_text("refine_iterations: 9\n")

        with patch('pass_tracker.cli.setup_logging'):
            result = cli_runner.invoke(
                main,
                ['--config', str(config_file),
                 *_tracking_args('next-pass', sample_tle_file, '--time', '2025-11-08 00:00:00')],
            )

        assert result.exit_code == 0
        config = synthetic_tracker.call_args[0][2]
        assert config.refine_iterations == 9


class TestLookCommand:
    """Tests for the look command."""

    def test_look(self, cli_runner, sample_tle_file, synthetic_tracker) -> None:
        result = cli_runner.invoke(
            main, _tracking_args('look', sample_tle_file, '--time', '2025-11-08 00:00:00')
        )
        assert result.exit_code == 0
        assert 'Elevation: -10.0°' in result.output
        assert 'Range:     1000.0 km' in result.output

    def test_missing_tle_file(self, cli_runner, tmp_path) -> None:
        result = cli_runner.invoke(main, _tracking_args('look', tmp_path / "missing.tle"))
        assert result.exit_code != 0

    def test_invalid_observer(self, cli_runner, sample_tle_file) -> None:
        result = cli_runner.invoke(
            main, ['look', '--tle', str(sample_tle_file), '--observer', 'Nowhere', '95', '0']
        )
        assert result.exit_code == 1
        assert 'Invalid latitude' in result.output

    def test_invalid_time(self, cli_runner, sample_tle_file, synthetic_tracker) -> None:
        result = cli_runner.invoke(main, _tracking_args('look', sample_tle_file, '--time', 'soon'))
        assert result.exit_code == 1
        assert 'Could not parse' in result.output


class TestCurrentPassCommand:
    """Tests for the current-pass command."""

    def test_visible(self, cli_runner, sample_tle_file, synthetic_tracker) -> None:
        result = cli_runner.invoke(
            main, _tracking_args('current-pass', sample_tle_file, '--time', '2025-11-08 00:16:40')
        )
        assert result.exit_code == 0
        assert 'Current pass of ICEYE-X44 over Dubai' in result.output
        assert 'AOS:      2025-11-08 00:03:12 UTC' in result.output
        assert 'LOS:      2025-11-08 00:41:47 UTC' in result.output

    def test_not_visible(self, cli_runner, sample_tle_file, synthetic_tracker) -> None:
        result = cli_runner.invoke(
            main, _tracking_args('current-pass', sample_tle_file, '--time', '2025-11-08 00:00:00')
        )
        assert result.exit_code == 0
        assert 'ICEYE-X44 is not visible from Dubai' in result.output


class TestNextPassCommand:
    """Tests for the next-pass command."""

    def test_next_pass(self, cli_runner, sample_tle_file, synthetic_tracker) -> None:
        result = cli_runner.invoke(
            main, _tracking_args('next-pass', sample_tle_file, '--time', '2025-11-08 00:00:00')
        )
        assert result.exit_code == 0
        assert 'Next pass of ICEYE-X44 over Dubai' in result.output
        assert 'el 35.0°' in result.output

    def test_no_pass(self, cli_runner, sample_tle_file, never_visible_oracle) -> None:
        with patch('pass_tracker.cli.PassTracker.from_satellite',
                   return_value=PassTracker(never_visible_oracle)):
            result = cli_runner.invoke(
                main,
                _tracking_args('next-pass', sample_tle_file,
                               '--time', '2025-11-08 00:00:00', '--hours', '2'),
            )
        assert result.exit_code == 0
        assert 'No passes found' in result.output


class TestPassesCommand:
    """Tests for the passes command."""

    def test_list(self, cli_runner, sample_tle_file, synthetic_tracker) -> None:
        result = cli_runner.invoke(
            main,
            _tracking_args('passes', sample_tle_file, '--days', '0.25',
                           '--start-time', '2025-11-08 00:00:00'),
        )
        assert result.exit_code == 0
        assert '4 passes of ICEYE-X44 over Dubai' in result.output
        assert 'PASS 4' in result.output

    def test_export_json(self, cli_runner, sample_tle_file, synthetic_tracker, tmp_path) -> None:
        output = tmp_path / "passes.json"
        result = cli_runner.invoke(
            main,
            _tracking_args('passes', sample_tle_file, '--days', '0.25',
                           '--start-time', '2025-11-08 00:00:00', '--output', str(output)),
        )

        assert result.exit_code == 0
        data = json.loads(output.read_text())
        assert data["metadata"]["total_passes"] == 4
        assert data["metadata"]["satellite"] == "ICEYE-X44"

    def test_export_csv(self, cli_runner, sample_tle_file, synthetic_tracker, tmp_path) -> None:
        output = tmp_path / "passes.dat"
        result = cli_runner.invoke(
            main,
            _tracking_args('passes', sample_tle_file, '--days', '0.25',
                           '--start-time', '2025-11-08 00:00:00',
                           '--output', str(output), '--format', 'csv'),
        )

        assert result.exit_code == 0
        lines = output.read_text().strip().splitlines()
        assert lines[0].startswith("pass,aos_time")
        assert len(lines) == 5


class TestSatelliteInfoCommand:
    """Tests for the satellite-info command."""

    def test_info(self, cli_runner, sample_tle_file) -> None:
        result = cli_runner.invoke(main, ['satellite-info', '--tle', str(sample_tle_file)])
        assert result.exit_code == 0
        assert 'ICEYE-X44' in result.output
        assert '62707' in result.output
        assert '97.727°' in result.output

    def test_unknown_satellite(self, cli_runner, sample_tle_file) -> None:
        result = cli_runner.invoke(
            main, ['satellite-info', '--tle', str(sample_tle_file), '--satellite', 'HUBBLE']
        )
        assert result.exit_code == 1
        assert "not found" in result.output


class TestPlotPassCommand:
    """Tests for the plot-pass command."""

    def test_plot(self, cli_runner, sample_tle_file, synthetic_tracker, tmp_path) -> None:
        output = tmp_path / "pass.png"
        result = cli_runner.invoke(
            main,
            _tracking_args('plot-pass', sample_tle_file, '--days', '0.25',
                           '--start-time', '2025-11-08 00:00:00', '--index', '2',
                           '--output', str(output)),
        )
        assert result.exit_code == 0
        assert output.exists()

    def test_index_out_of_range(self, cli_runner, sample_tle_file, synthetic_tracker,
                                tmp_path) -> None:
        result = cli_runner.invoke(
            main,
            _tracking_args('plot-pass', sample_tle_file, '--days', '0.25',
                           '--start-time', '2025-11-08 00:00:00', '--index', '9',
                           '--output', str(tmp_path / "pass.png")),
        )
        assert result.exit_code == 1
        assert 'Pass 9 not available' in result.output


class TestTleSourceCommands:
    """Tests for download-tle and list-sources."""

    def test_list_sources(self, cli_runner) -> None:
        result = cli_runner.invoke(main, ['list-sources'])
        assert result.exit_code == 0
        assert 'celestrak_stations' in result.output

    def test_download(self, cli_runner, tmp_path) -> None:
        output = tmp_path / "stations.tle"
        with patch('pass_tracker.cli.download_tle_file', return_value=True) as mock_download:
            result = cli_runner.invoke(main, ['download-tle', '--output', str(output)])

        assert result.exit_code == 0
        assert mock_download.call_args[0][1] == str(output)

    def test_download_unknown_source(self, cli_runner, tmp_path) -> None:
        result = cli_runner.invoke(
            main, ['download-tle', '--source', 'nowhere', '--output', str(tmp_path / "x.tle")]
        )
        assert result.exit_code == 1
        assert "Unknown source" in result.output

    def test_download_failure(self, cli_runner, tmp_path) -> None:
        with patch('pass_tracker.cli.download_tle_file', return_value=False):
            result = cli_runner.invoke(main, ['download-tle', '--output', str(tmp_path / "x.tle")])
        assert result.exit_code == 1

    def test_search(self, cli_runner, sample_tle_lines, tmp_path) -> None:
        entry = TleEntry("ICEYE-X44", *sample_tle_lines)
        output = tmp_path / "found.tle"
        with patch('pass_tracker.cli.fetch_tle_catalog', return_value=[entry]) as mock_fetch:
            result = cli_runner.invoke(main, ['search-tle', 'iceye', '--output', str(output)])

        assert result.exit_code == 0
        assert 'GROUP=active' in mock_fetch.call_args[0][0]
        assert 'ICEYE-X44 (NORAD 62707)' in result.output
        assert output.read_text().splitlines() == ["ICEYE-X44", *sample_tle_lines]

    def test_search_no_match(self, cli_runner, sample_tle_lines) -> None:
        entry = TleEntry("ICEYE-X44", *sample_tle_lines)
        with patch('pass_tracker.cli.fetch_tle_catalog', return_value=[entry]):
            result = cli_runner.invoke(main, ['search-tle', 'hubble'])

        assert result.exit_code == 0
        assert "No satellites matching 'hubble'" in result.output

    def test_search_fetch_failure(self, cli_runner) -> None:
        with patch('pass_tracker.cli.fetch_tle_catalog',
                   side_effect=requests.ConnectionError("offline")):
            result = cli_runner.invoke(main, ['search-tle', 'iss'])

        assert result.exit_code == 1
        assert 'offline' in result.output
