#!/usr/bin/env python3
"""
Build a portable AutoDock Vina docking job.

This script walks a receptor and a ligand through the docking workflow
(input, preparation, search region, execution) and writes a zip archive
containing the Vina config, the raw inputs, Open Babel preparation scripts
and launchers for Windows and Linux/macOS.

Usage:
    python build_docking_job.py --receptor protein.pdb \
                                --ligand ligand.sdf \
                                --output_dir jobs \
                                --center 10.5 22.1 -5.4 \
                                --size 20 20 20

Unzip the archive on the execution host and run run_job.sh (or run_job.bat).
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from docking import (
    FORCE_FIELDS, CHARGE_METHODS, SearchRegion, SearchParameters, PackageGenerationError,
    PathValidationError, find_on_path, resolve_executable,
    search_region_from_ligand, search_region_from_residues,
)
from docking.base import CONFIG_NAME, PREPARATION_TOOL, DOCKING_EXECUTABLE
from docking.utils import parse_residue_ids
from workflow import WorkflowController, WorkflowError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Build an AutoDock Vina docking job package',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Required arguments
    parser.add_argument('--receptor', type=Path, required=True,
                        help='Receptor structure (PDB, PDBQT, ...)')
    parser.add_argument('--ligand', type=Path, required=True,
                        help='Ligand structure (SDF, MOL2, PDB, ...)')
    parser.add_argument('--output_dir', type=Path, default=Path('.'),
                        help='Directory receiving the job archive')

    # Chemical preparation
    prep_group = parser.add_argument_group('Preparation')
    prep_group.add_argument('--no_remove_water', action='store_true',
                            help='Keep water molecules in the receptor')
    prep_group.add_argument('--no_protonate', action='store_true',
                            help='Do not add hydrogens to the receptor')
    prep_group.add_argument('--ph', type=float, default=7.4,
                            help='pH used for protonation (receptor and ligand)')
    prep_group.add_argument('--no_force_field', action='store_true',
                            help='Skip receptor minimization')
    prep_group.add_argument('--force_field', choices=FORCE_FIELDS, default='mmff94',
                            help='Force field for receptor minimization')
    prep_group.add_argument('--no_ligand_protonate', action='store_true',
                            help='Do not add hydrogens to the ligand')
    prep_group.add_argument('--charge_method', choices=CHARGE_METHODS, default='gasteiger',
                            help='Ligand partial charge method')
    prep_group.add_argument('--no_minimization', action='store_true',
                            help='Do not generate 3D ligand coordinates')

    # Docking box specification
    box_group = parser.add_argument_group('Docking Box')
    box_group.add_argument('--center', type=float, nargs=3, metavar=('X', 'Y', 'Z'),
                           help='Docking box center coordinates')
    box_group.add_argument('--size', type=float, nargs=3, default=[20, 20, 20],
                           metavar=('X', 'Y', 'Z'),
                           help='Docking box dimensions (Angstroms)')
    box_group.add_argument('--reference_ligand', type=Path,
                           help='Reference ligand for automatic box definition')
    box_group.add_argument('--pocket_residues', type=str,
                           help='Comma-separated residue IDs for pocket definition')
    box_group.add_argument('--padding', type=float, default=5.0,
                           help='Padding around detected binding site')

    # Vina parameters
    dock_group = parser.add_argument_group('Docking Parameters')
    dock_group.add_argument('--exhaustiveness', type=int, default=8,
                            help='Search exhaustiveness')
    dock_group.add_argument('--num_modes', type=int, default=9,
                            help='Number of poses to generate')
    dock_group.add_argument('--energy_range', type=float, default=3,
                            help='Maximum energy difference from best pose (kcal/mol)')

    # Execution options
    exec_group = parser.add_argument_group('Execution Options')
    exec_group.add_argument('--vina_path', type=str, default='',
                            help='Path to the Vina executable on the execution host')
    exec_group.add_argument('--date', type=date.fromisoformat,
                            help='Date used in the archive name (YYYY-MM-DD, default: today)')
    exec_group.add_argument('--dry_run', action='store_true',
                            help='Print the package contents without writing it')

    return parser.parse_args(argv)


def determine_search_region(args) -> SearchRegion:
    """Determine the docking box from the command line.

    Args:
        args: Command line arguments

    Returns:
        SearchRegion
    """
    if args.center:
        return SearchRegion.from_center_size(args.center, args.size)

    if args.reference_ligand:
        logger.info(f"Detecting box from reference ligand: {args.reference_ligand}")
        return search_region_from_ligand(args.reference_ligand, args.padding)

    if args.pocket_residues:
        residue_ids = parse_residue_ids(args.pocket_residues)
        logger.info(f"Detecting box from residues: {residue_ids}")
        return search_region_from_residues(args.receptor, residue_ids, padding=args.padding)

    logger.warning("No docking box center specified, using the origin")
    return SearchRegion.from_center_size((0, 0, 0), args.size)


def report_tools(vina_path: str = '') -> None:
    """Log which preparation tool and Vina executable this host would use."""
    found = find_on_path(PREPARATION_TOOL)
    if found:
        logger.info(f"  {PREPARATION_TOOL}: {found}")
    else:
        logger.info(f"  {PREPARATION_TOOL}: not found on this host, inputs would be copied as-is")

    # Same resolution the run scripts apply: user path if present, else PATH lookup
    vina = resolve_executable(vina_path)
    if vina != DOCKING_EXECUTABLE:
        logger.info(f"  {DOCKING_EXECUTABLE}: {vina} (configured path)")
        return
    found = find_on_path(DOCKING_EXECUTABLE)
    if found:
        logger.info(f"  {DOCKING_EXECUTABLE}: {found}")
    else:
        logger.info(f"  {DOCKING_EXECUTABLE}: not found on this host")


def main(argv=None):
    args = parse_args(argv)

    controller = WorkflowController()
    try:
        # Input
        controller.load_receptor(args.receptor)
        controller.load_ligand(args.ligand)
        controller.advance()

        # Preparation
        controller.configure_preparation(
            remove_water=not args.no_remove_water,
            protein_protonate=not args.no_protonate,
            ph_level=args.ph,
            add_force_field=not args.no_force_field,
            force_field_type=args.force_field,
            ligand_protonate=not args.no_ligand_protonate,
            ligand_charge_method=args.charge_method,
            ligand_minimization=not args.no_minimization,
        )
        controller.confirm_preparation()

        # Search region
        controller.set_search_region(determine_search_region(args))
        controller.set_search_parameters(SearchParameters(
            exhaustiveness=args.exhaustiveness,
            num_modes=args.num_modes,
            energy_range=args.energy_range,
        ))

        # Execution
        error = controller.set_executable_path(args.vina_path)
        if error:
            logger.error(f"Invalid --vina_path: {error}")
            return 1

        if args.dry_run:
            package = controller.preview_package(today=args.date)
            logger.info(f"[DRY RUN] Would write {args.output_dir / package.name}")
            for member in package.members:
                logger.info(f"  {member} ({len(package.artifacts[member])} bytes)")
            logger.info(f"[DRY RUN] {CONFIG_NAME}:\n{package.text(CONFIG_NAME)}")
            logger.info("Tools on this host:")
            report_tools(args.vina_path)
            return 0

        path = controller.generate_package(args.output_dir, today=args.date)

    except (WorkflowError, PathValidationError, PackageGenerationError, ValueError, ImportError) as e:
        logger.error(f"Failed to build docking job: {e}")
        return 1

    logger.info("=" * 60)
    logger.info(f"Job package: {path}")
    logger.info("Unzip it on the execution host and run run_job.sh or run_job.bat")
    logger.info("=" * 60)
    return 0


if __name__ == '__main__':
    sys.exit(main())
