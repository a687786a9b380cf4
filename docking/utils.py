"""
Utility functions for defining the docking search region.

This module derives a SearchRegion (docking box) from atomic coordinates,
from a reference ligand, or from a set of pocket residues.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from .base import SearchRegion

logger = logging.getLogger(__name__)


def search_region_from_coordinates(coords, padding: float = 5.0) -> SearchRegion:
    """Fit a docking box around a set of coordinates.

    Args:
        coords: Array-like of shape (n_atoms, 3) in Angstroms
        padding: Extra space on each side (Angstroms)

    Returns:
        SearchRegion centered on the mean position

    Raises:
        ValueError: If no coordinates are given
    """
    coords = np.asarray(coords, dtype=float)
    if coords.ndim != 2 or coords.shape[1] != 3:
        raise ValueError(f"Expected coordinates of shape (n, 3), got {coords.shape}")
    if len(coords) == 0:
        raise ValueError("No coordinates given for search region")

    center = coords.mean(axis=0)
    size = (coords.max(axis=0) - coords.min(axis=0)) + 2 * padding
    return SearchRegion.from_center_size(
        [round(float(v), 3) for v in center],
        [round(float(v), 3) for v in size],
    )


def search_region_from_ligand(ligand_path: Path, padding: float = 5.0) -> SearchRegion:
    """Calculate the docking box from a reference ligand.

    Args:
        ligand_path: Path to reference ligand file (SDF, MOL2, PDB, PDBQT)
        padding: Extra space around ligand (Angstroms)

    Returns:
        SearchRegion enclosing the ligand
    """
    try:
        from rdkit import Chem
    except ImportError:
        raise ImportError("RDKit is required for ligand box calculation")

    ligand_path = Path(ligand_path)
    suffix = ligand_path.suffix.lower()

    if suffix == '.sdf':
        mol = Chem.SDMolSupplier(str(ligand_path))[0]
    elif suffix == '.mol2':
        mol = Chem.MolFromMol2File(str(ligand_path))
    elif suffix in ['.pdb', '.pdbqt']:
        mol = Chem.MolFromPDBFile(str(ligand_path), sanitize=False)
    else:
        raise ValueError(f"Unsupported ligand format: {suffix}")

    if mol is None:
        raise ValueError(f"Failed to load ligand: {ligand_path}")

    conf = mol.GetConformer()
    coords = np.array([list(conf.GetAtomPosition(i)) for i in range(mol.GetNumAtoms())])
    region = search_region_from_coordinates(coords, padding)
    logger.info(f"Box from reference ligand {ligand_path.name}: center={region.center}, size={region.size}")
    return region


def search_region_from_residues(pdb_path: Path,
                                residue_ids: Sequence[int],
                                chain: Optional[int] = None,
                                padding: float = 5.0) -> SearchRegion:
    """Calculate the docking box around pocket residues.

    Args:
        pdb_path: Path to receptor PDB file
        residue_ids: Residue sequence numbers lining the pocket
        chain: Optional chain index
        padding: Extra space around the pocket (Angstroms)

    Returns:
        SearchRegion enclosing the selected residues
    """
    try:
        import mdtraj as md
    except ImportError:
        raise ImportError("MDTraj is required for pocket residue detection")

    if not residue_ids:
        raise ValueError("At least one residue id is required")

    traj = md.load(str(pdb_path))
    selection = ' or '.join(f'resSeq {r}' for r in residue_ids)
    if chain is not None:
        selection = f'({selection}) and chainid {chain}'
    atom_indices = traj.topology.select(selection)

    if len(atom_indices) == 0:
        raise ValueError(f"No atoms found for residues {list(residue_ids)}")

    # MDTraj works in nanometers
    coords = traj.xyz[0, atom_indices, :] * 10.0
    region = search_region_from_coordinates(coords, padding)
    logger.info(f"Box from {len(residue_ids)} pocket residues: center={region.center}, size={region.size}")
    return region


def parse_residue_ids(text: str) -> List[int]:
    """Parse a comma-separated residue list such as ``'45,46,101'``."""
    return [int(part.strip()) for part in text.split(',') if part.strip()]
