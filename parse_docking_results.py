#!/usr/bin/env python3
"""
Parse AutoDock Vina results.

Reads output.pdbqt files (REMARK VINA RESULT lines) or vina.log files
(printed pose table), prints the poses and a summary, and optionally exports
them.

Usage:
    python parse_docking_results.py output.pdbqt
    python parse_docking_results.py job1/vina.log job2/vina.log \
                                    --output_csv poses.csv --top 3
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from results import (
    parse_docking_file, records_to_csv, records_to_json,
    summarize_records, format_table,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Parse AutoDock Vina docking results',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument('logs', type=Path, nargs='+', metavar='LOG',
                        help='Result files (output.pdbqt or vina.log)')
    parser.add_argument('--output_csv', type=Path,
                        help='Export all poses to CSV')
    parser.add_argument('--output_json', type=Path,
                        help='Export all poses and summary to JSON')
    parser.add_argument('--top', type=int,
                        help='Only show the N best poses per file')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    all_records = []
    n_error = 0

    for log_path in args.logs:
        try:
            records = parse_docking_file(log_path)
        except OSError as e:
            logger.error(f"Failed to read {log_path}: {e}")
            n_error += 1
            continue

        shown = sorted(records, key=lambda r: r.affinity)[:args.top] if args.top is not None else records
        summary = summarize_records(records)

        print(f"\n{log_path}")
        print(format_table(shown))
        if summary['num_poses']:
            print(f"Poses: {summary['num_poses']}  "
                  f"Best: {summary['best_affinity']:.2f} kcal/mol  "
                  f"Spread: {summary['affinity_spread']:.2f}")
        else:
            logger.warning(f"No docking results found in {log_path}")

        all_records.extend(records)

    if args.output_csv:
        records_to_csv(all_records, args.output_csv)
    if args.output_json:
        records_to_json(all_records, args.output_json)

    return 0 if n_error == 0 else 1


if __name__ == '__main__':
    sys.exit(main())
