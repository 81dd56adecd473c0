"""
Export of upcoming pass schedules to CSV and JSON.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from .models import LookAngleSample, Pass
from .utils import get_current_utc

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "pass",
    "aos_time",
    "aos_azimuth",
    "los_time",
    "los_azimuth",
    "peak_time",
    "peak_azimuth",
    "peak_elevation",
    "duration_s",
]


def _event_time(sample: Optional[LookAngleSample]) -> str:
    return sample.time.isoformat() if sample is not None else "N/A"


def _event_azimuth(sample: Optional[LookAngleSample]) -> Optional[float]:
    return round(sample.azimuth_deg, 1) if sample is not None else None


def passes_to_rows(passes: Sequence[Pass]) -> List[Dict[str, Any]]:
    """
    Flatten passes to one row per pass.

    Missing rise/set events are written as "N/A" times with empty azimuths.
    """
    rows = []
    for index, item in enumerate(passes, start=1):
        rows.append(
            {
                "pass": f"Pass {index}",
                "aos_time": _event_time(item.aos),
                "aos_azimuth": _event_azimuth(item.aos),
                "los_time": _event_time(item.los),
                "los_azimuth": _event_azimuth(item.los),
                "peak_time": item.peak.time.isoformat(),
                "peak_azimuth": round(item.peak.azimuth_deg, 1),
                "peak_elevation": round(item.peak.elevation_deg, 1),
                "duration_s": round(item.duration_seconds, 1),
            }
        )
    return rows


def export_passes(
    passes: Sequence[Pass],
    output_file: Union[str, Path],
    format: str = "auto",
    satellite_name: Optional[str] = None,
    observer_name: Optional[str] = None,
) -> Path:
    """
    Export a pass schedule to file.

    Args:
        passes: Passes to export
        output_file: Output file path
        format: Output format ("json", "csv", or "auto" to pick by suffix)
        satellite_name: Optional satellite name for JSON metadata
        observer_name: Optional observer name for JSON metadata

    Returns:
        Path written

    Raises:
        ValueError: If the format is not supported
    """
    output_path = Path(output_file)

    if format == "auto":
        format = output_path.suffix.lower().lstrip('.')
        if format not in ["json", "csv"]:
            format = "json"

    if format not in ["json", "csv"]:
        raise ValueError(f"Unsupported format: {format}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    rows = passes_to_rows(passes)

    if format == "json":
        _export_json(passes, output_path, satellite_name, observer_name)
    else:
        _export_csv(rows, output_path)

    logger.info(f"Exported {len(rows)} passes to {output_path}")
    return output_path


def _export_json(
    passes: Sequence[Pass],
    output_path: Path,
    satellite_name: Optional[str],
    observer_name: Optional[str],
) -> None:
    export_data = {
        "metadata": {
            "satellite": satellite_name,
            "observer": observer_name,
            "export_time": get_current_utc().isoformat(),
            "total_passes": len(passes),
        },
        "passes": [item.to_dict() for item in passes],
    }

    with open(output_path, 'w') as f:
        json.dump(export_data, f, indent=2)


def _export_csv(rows: List[Dict[str, Any]], output_path: Path) -> None:
    if not rows:
        with open(output_path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(CSV_COLUMNS)
        return

    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    df.to_csv(output_path, index=False)
