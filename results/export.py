"""
Export and summary helpers for parsed docking poses.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .parser import DockingResultRecord

logger = logging.getLogger(__name__)

FIELDNAMES = ['source', 'mode', 'affinity', 'rmsd_lb', 'rmsd_ub', 'reported_mode']


def records_to_csv(records: Sequence[DockingResultRecord], output_path: Path) -> None:
    """Export poses to a CSV file.

    Args:
        records: Parsed poses
        output_path: Path for output CSV
    """
    if not records:
        logger.warning("No poses to export")

    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        for record in records:
            writer.writerow(record.to_dict())

    logger.info(f"Exported {len(records)} poses to {output_path}")


def records_to_json(records: Sequence[DockingResultRecord], output_path: Path) -> None:
    """Export poses and their summary to a JSON file.

    Args:
        records: Parsed poses
        output_path: Path for output JSON
    """
    data = {
        'summary': summarize_records(records),
        'poses': [record.to_dict() for record in records],
    }
    with open(output_path, 'w') as f:
        json.dump(data, f, indent=2)

    logger.info(f"Exported {len(records)} poses to {output_path}")


def records_to_dataframe(records: Sequence[DockingResultRecord]):
    """Convert poses to a pandas DataFrame.

    Returns:
        DataFrame with one row per pose
    """
    try:
        import pandas as pd
    except ImportError:
        raise ImportError("pandas required for DataFrame export")

    return pd.DataFrame([record.to_dict() for record in records], columns=FIELDNAMES)


def summarize_records(records: Sequence[DockingResultRecord]) -> Dict[str, Any]:
    """Summary statistics for a set of poses.

    Returns:
        Dict with ``num_poses``, ``best_affinity``, ``worst_affinity`` and
        ``affinity_spread`` (affinity values are None when there are no poses)
    """
    affinities: List[float] = [record.affinity for record in records]
    if not affinities:
        return {
            'num_poses': 0,
            'best_affinity': None,
            'worst_affinity': None,
            'affinity_spread': None,
        }

    best = min(affinities)
    worst = max(affinities)
    return {
        'num_poses': len(affinities),
        'best_affinity': best,
        'worst_affinity': worst,
        'affinity_spread': round(worst - best, 3),
    }


def format_table(records: Sequence[DockingResultRecord]) -> str:
    """Render poses as the fixed-width table Vina prints."""
    lines = [
        'mode |   affinity | rmsd l.b. | rmsd u.b.',
        '-----+------------+-----------+----------',
    ]
    for record in records:
        lines.append(
            f"{record.mode:>4} | {record.affinity:>10.3f} | {record.rmsd_lb:>9.3f} | {record.rmsd_ub:>9.3f}"
        )
    return '\n'.join(lines)
