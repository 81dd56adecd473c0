"""
Shared helpers: logging, UTC time handling, display formatting and the
CelesTrak TLE catalog.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

import requests

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV_VAR = "PASS_TRACKER_LOG_LEVEL"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%d",
)

CELESTRAK_GP_URL = "https://celestrak.org/NORAD/elements/gp.php?GROUP={group}&FORMAT=tle"
CELESTRAK_GROUPS = ("stations", "active", "visual", "weather", "amateur", "cubesat")
DOWNLOAD_TIMEOUT_SECONDS = 30
# Unfiltered listings show at most this many entries
CATALOG_LIST_LIMIT = 200


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Route root logging to stderr and optionally a file.

    ``PASS_TRACKER_LOG_LEVEL`` wins over ``level`` when set. Unknown level
    names fall back to INFO.
    """
    level = os.environ.get(LOG_LEVEL_ENV_VAR) or level
    formatter = logging.Formatter(LOG_FORMAT)

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logger.info(f"Logging configured at {level} level")


def parse_datetime(date_string: str) -> datetime:
    """
    Read a user-supplied timestamp as a naive UTC datetime.

    Strings carrying an offset are converted to UTC; strings without one are
    taken to be UTC already.

    Raises:
        ValueError: If no known format matches
    """
    for fmt in TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(date_string, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    raise ValueError(f"Could not parse datetime string: {date_string}")


def get_current_utc() -> datetime:
    """Wall-clock now, naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_timestamp(value: Optional[datetime]) -> str:
    """Format a UTC instant for display, or '--' if missing."""
    if value is None:
        return "--"
    return value.strftime("%Y-%m-%d %H:%M:%S")


def format_duration(seconds: float) -> str:
    """Compact duration: seconds below a minute, minutes below an hour, else hours."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    if seconds < 3600:
        return f"{seconds / 60:.1f}m"
    return f"{seconds / 3600:.1f}h"


def get_common_tle_sources() -> Dict[str, str]:
    """CelesTrak group feeds keyed by the name the CLI accepts."""
    return {
        f"celestrak_{group}": CELESTRAK_GP_URL.format(group=group)
        for group in CELESTRAK_GROUPS
    }


@dataclass(frozen=True)
class TleEntry:
    """One named element set from a catalog."""

    name: str
    line1: str
    line2: str

    @property
    def catalog_number(self) -> str:
        return self.line1[2:7].strip()

    def to_text(self) -> str:
        return f"{self.name}\n{self.line1}\n{self.line2}"


def parse_tle_catalog(text: str) -> List[TleEntry]:
    """
    Split a three-line TLE listing into entries.

    The listing is read in fixed groups of name, line 1 and line 2. Groups
    whose second and third lines are not TLE lines are skipped.
    """
    lines = [line.strip() for line in text.splitlines()]
    entries = []
    for i in range(0, len(lines) - 2, 3):
        name, line1, line2 = lines[i:i + 3]
        if line1.startswith("1 ") and line2.startswith("2 "):
            entries.append(TleEntry(name, line1, line2))
    return entries


def search_tle_catalog(
    entries: List[TleEntry], keyword: str = "", limit: int = CATALOG_LIST_LIMIT
) -> List[TleEntry]:
    """
    Entries whose name contains ``keyword``, ignoring case.

    A blank keyword lists the first ``limit`` entries; a keyword returns
    every match.
    """
    word = keyword.strip().lower()
    if not word:
        return entries[:limit]
    return [entry for entry in entries if word in entry.name.lower()]


def fetch_tle_catalog(url: str) -> List[TleEntry]:
    """
    Download a TLE listing and parse it.

    Raises:
        requests.RequestException: On network or HTTP failure
        ValueError: If the listing holds no element sets
    """
    logger.info(f"Fetching TLE catalog from {url}")
    response = requests.get(url, timeout=DOWNLOAD_TIMEOUT_SECONDS)
    response.raise_for_status()

    entries = parse_tle_catalog(response.text)
    if not entries:
        raise ValueError(f"No TLE entries found at {url}")
    logger.info(f"Fetched {len(entries)} TLE entries")
    return entries


def download_tle_file(url: str, output_file: Union[str, Path]) -> bool:
    """
    Save the catalog at ``url`` to ``output_file``.

    Returns False, after logging the reason, if the download fails, the
    listing is empty or the file cannot be written.
    """
    try:
        entries = fetch_tle_catalog(url)
        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text("\n".join(entry.to_text() for entry in entries) + "\n")
    except (requests.RequestException, ValueError, OSError) as e:
        logger.error(f"Error downloading TLE file: {e}")
        return False

    logger.info(f"Saved {len(entries)} TLE entries to {output_path}")
    return True
