"""
Parsers for AutoDock Vina docking results.

Two sources are understood:

- Output poses (``output.pdbqt``), where each pose carries a line
  ``REMARK VINA RESULT:    -8.5      0.000      0.000``
- The pose table Vina prints to stdout and ``vina.log``::

    mode |   affinity | dist from best mode
         | (kcal/mol) | rmsd l.b.| rmsd u.b.
    -----+------------+----------+----------
       1       -8.5      0.000      0.000

Parsing is forgiving: lines that do not match are skipped and text without
any result yields an empty list.
"""

import dataclasses
import logging
import re
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

NUMBER = r'[-+]?(?:\d+\.?\d*|\.\d+)'

REMARK_PATTERN = re.compile(
    rf'REMARK VINA RESULT:\s+({NUMBER})\s+({NUMBER})\s+({NUMBER})'
)
TABLE_ROW_PATTERN = re.compile(
    rf'^\s*(\d+)\s+({NUMBER})\s+({NUMBER})\s+({NUMBER})\s*$'
)


@dataclass(frozen=True)
class DockingResultRecord:
    """One docked pose.

    Attributes:
        mode: 1-based pose index, assigned in parse order
        affinity: Predicted binding affinity (kcal/mol, lower is better)
        rmsd_lb: RMSD lower bound from the best mode
        rmsd_ub: RMSD upper bound from the best mode
        reported_mode: Index printed by Vina, when the source has one
        source: File the pose was read from, if any
    """
    mode: int
    affinity: float
    rmsd_lb: float
    rmsd_ub: float
    reported_mode: Optional[int] = None
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ResultParser:
    """Extract poses from ``REMARK VINA RESULT`` lines.

    Example:
        >>> ResultParser().parse('REMARK VINA RESULT:    -8.5      0.000      0.000')
        [DockingResultRecord(mode=1, affinity=-8.5, rmsd_lb=0.0, rmsd_ub=0.0, reported_mode=None, source=None)]
    """

    def parse(self, text: str) -> List[DockingResultRecord]:
        records = []
        for line in text.splitlines():
            match = REMARK_PATTERN.search(line)
            if not match:
                continue
            affinity, rmsd_lb, rmsd_ub = (float(value) for value in match.groups())
            records.append(DockingResultRecord(
                mode=len(records) + 1,
                affinity=affinity,
                rmsd_lb=rmsd_lb,
                rmsd_ub=rmsd_ub,
            ))
        logger.debug(f"Parsed {len(records)} REMARK results")
        return records


class VinaLogParser:
    """Extract poses from the table Vina prints to its log."""

    def parse(self, text: str) -> List[DockingResultRecord]:
        records = []
        for line in text.splitlines():
            match = TABLE_ROW_PATTERN.match(line)
            if not match:
                continue
            reported = int(match.group(1))
            mode = len(records) + 1
            if reported != mode:
                logger.warning(f"Log row reports mode {reported}, numbering it {mode}")
            records.append(DockingResultRecord(
                mode=mode,
                affinity=float(match.group(2)),
                rmsd_lb=float(match.group(3)),
                rmsd_ub=float(match.group(4)),
                reported_mode=reported,
            ))
        logger.debug(f"Parsed {len(records)} log table rows")
        return records


def parse_docking_output(text: str) -> List[DockingResultRecord]:
    """Parse either a poses file or a Vina log.

    ``REMARK`` lines win; the log table is only read when there are none.
    """
    records = ResultParser().parse(text)
    if not records:
        records = VinaLogParser().parse(text)
    return records


def parse_docking_file(path: Union[str, Path]) -> List[DockingResultRecord]:
    """Read and parse a result file from disk.

    Each record is tagged with ``source`` so poses from several files can be
    exported together.

    Raises:
        OSError: If the file cannot be read
    """
    path = Path(path)
    text = path.read_text(encoding='utf-8', errors='replace')
    records = [dataclasses.replace(record, source=str(path)) for record in parse_docking_output(text)]
    logger.info(f"Parsed {len(records)} poses from {path.name}")
    return records
