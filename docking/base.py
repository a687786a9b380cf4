"""
Base data model for docking job preparation.

This module defines the structures shared by the configuration writer, the
preparation pipeline builder and the package assembler, plus the abstract
interface that every platform script renderer must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union
import logging

logger = logging.getLogger(__name__)

FORCE_FIELDS = ('uff', 'gaff', 'mmff94', 'ghemical')
CHARGE_METHODS = ('gasteiger', 'mmff94', 'qtpie', 'qeq')

# Standard names used inside every job package
CONFIG_NAME = 'config.txt'
RECEPTOR_INPUT_STEM = 'receptor_input'
LIGAND_INPUT_STEM = 'ligand_input'
RECEPTOR_PREPARED = 'receptor_prepared.pdbqt'
LIGAND_PREPARED = 'ligand_prepared.pdbqt'
OUTPUT_NAME = 'output.pdbqt'
LOG_NAME = 'vina.log'
PREPARE_SCRIPT_STEM = 'prepare_structures'
RUN_SCRIPT_STEM = 'run_job'
DEFAULT_EXTENSION = 'pdb'

PREPARATION_TOOL = 'obabel'
DOCKING_EXECUTABLE = 'vina'


@dataclass(frozen=True)
class MoleculeInput:
    """A user-supplied structure file held in memory.

    Attributes:
        name: Original file name; only its extension is meaningful
        content: Raw file bytes, never parsed or validated
    """
    name: str
    content: bytes

    @property
    def extension(self) -> str:
        """Lower-case extension hint without the dot ('' if absent)."""
        return Path(self.name).suffix.lower().lstrip('.')

    @property
    def text(self) -> str:
        return self.content.decode('utf-8', errors='replace')

    def standard_name(self, stem: str) -> str:
        """Name used inside the job package for this input."""
        return f"{stem}.{self.extension or DEFAULT_EXTENSION}"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> 'MoleculeInput':
        """Read a structure file from disk.

        Raises:
            OSError: If the file cannot be read
        """
        path = Path(path)
        content = path.read_bytes()
        logger.debug(f"Read {len(content)} bytes from {path}")
        return cls(name=path.name, content=content)


@dataclass(frozen=True)
class PreparationConfig:
    """Chemical preparation options for the receptor and the ligand.

    The pH is shared by both molecules. ``ph_level`` only matters when a
    protonation flag is set and ``force_field_type`` only when
    ``add_force_field`` is set.

    Attributes:
        remove_water: Delete water molecules from the receptor
        protein_protonate: Add hydrogens to the receptor for ``ph_level``
        ph_level: Target pH for protonation
        add_force_field: Minimize the receptor with ``force_field_type``
        force_field_type: Open Babel force field name
        ligand_protonate: Add hydrogens to the ligand for ``ph_level``
        ligand_charge_method: Partial charge model for the ligand
        ligand_minimization: Generate 3D coordinates for the ligand
    """
    remove_water: bool = True
    protein_protonate: bool = True
    ph_level: float = 7.4
    add_force_field: bool = True
    force_field_type: str = 'mmff94'
    ligand_protonate: bool = True
    ligand_charge_method: str = 'gasteiger'
    ligand_minimization: bool = True

    def __post_init__(self):
        if self.force_field_type not in FORCE_FIELDS:
            raise ValueError(
                f"Invalid force field: {self.force_field_type}. Must be one of {list(FORCE_FIELDS)}"
            )
        if self.ligand_charge_method not in CHARGE_METHODS:
            raise ValueError(
                f"Invalid charge method: {self.ligand_charge_method}. Must be one of {list(CHARGE_METHODS)}"
            )


@dataclass(frozen=True)
class SearchRegion:
    """Docking box in Angstroms.

    Extents are not checked here; see ``is_degenerate``.
    """
    center_x: float = 0
    center_y: float = 0
    center_z: float = 0
    size_x: float = 20
    size_y: float = 20
    size_z: float = 20

    @property
    def center(self) -> Tuple[float, float, float]:
        return (self.center_x, self.center_y, self.center_z)

    @property
    def size(self) -> Tuple[float, float, float]:
        return (self.size_x, self.size_y, self.size_z)

    @property
    def volume(self) -> float:
        return self.size_x * self.size_y * self.size_z

    @property
    def is_degenerate(self) -> bool:
        return any(extent <= 0 for extent in self.size)

    @classmethod
    def from_center_size(cls, center, size) -> 'SearchRegion':
        return cls(
            center_x=center[0], center_y=center[1], center_z=center[2],
            size_x=size[0], size_y=size[1], size_z=size[2],
        )


@dataclass(frozen=True)
class SearchParameters:
    """Vina search settings.

    Attributes:
        exhaustiveness: Search effort (higher = more thorough)
        num_modes: Number of binding poses to report
        energy_range: Maximum energy difference from best pose (kcal/mol)
    """
    exhaustiveness: int = 8
    num_modes: int = 9
    energy_range: float = 3


class ScriptRenderer(ABC):
    """Abstract base class for platform script renderers.

    A renderer turns an already computed preparation plan into a
    preparation script and writes the launcher that runs Vina. Renderers
    must never rebuild the preparation commands themselves.

    Example:
        >>> renderer = ShellScriptRenderer()
        >>> text = renderer.render_preparation(plan)
    """

    extension: str = ''
    line_ending: str = '\n'

    @property
    def preparation_script_name(self) -> str:
        return f"{PREPARE_SCRIPT_STEM}.{self.extension}"

    @property
    def run_script_name(self) -> str:
        return f"{RUN_SCRIPT_STEM}.{self.extension}"

    def join(self, lines: List[str]) -> str:
        return self.line_ending.join(lines) + self.line_ending

    @abstractmethod
    def render_preparation(self, plan) -> str:
        """Render the preparation script.

        Args:
            plan: PreparationPlan holding the receptor and ligand commands

        Returns:
            Script text
        """
        pass

    @abstractmethod
    def render_run(self, executable_path: Optional[str] = None) -> str:
        """Render the launcher that prepares structures and runs Vina.

        Args:
            executable_path: User-supplied Vina path ('' or None for PATH lookup)

        Returns:
            Script text
        """
        pass

    def get_platform_name(self) -> str:
        return self.__class__.__name__.replace('ScriptRenderer', '')
