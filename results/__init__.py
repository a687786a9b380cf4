"""
Results module for parsing and exporting AutoDock Vina poses.

Sources:
    - output.pdbqt (REMARK VINA RESULT lines)
    - vina.log (printed pose table)
"""

from .parser import (
    DockingResultRecord, ResultParser, VinaLogParser,
    parse_docking_output, parse_docking_file,
)
from .export import (
    records_to_csv, records_to_json, records_to_dataframe, summarize_records, format_table,
)

__all__ = [
    'DockingResultRecord',
    'ResultParser',
    'VinaLogParser',
    'parse_docking_output',
    'parse_docking_file',
    'records_to_csv',
    'records_to_json',
    'records_to_dataframe',
    'summarize_records',
    'format_table',
]
