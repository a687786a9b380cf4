"""
AutoDock Vina configuration writer.

Vina reads a flat ``key = value`` file passed with ``--config``. Field names
and their order follow what the engine expects; the file points at the
prepared structures produced by the preparation scripts.

Reference: https://autodock-vina.readthedocs.io/en/latest/docking_basic.html
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Tuple

from .base import (
    SearchRegion, SearchParameters,
    RECEPTOR_PREPARED, LIGAND_PREPARED, OUTPUT_NAME, LOG_NAME,
)

logger = logging.getLogger(__name__)

CONFIG_KEYS = (
    'receptor', 'ligand',
    'center_x', 'center_y', 'center_z',
    'size_x', 'size_y', 'size_z',
    'exhaustiveness', 'num_modes', 'energy_range',
    'out', 'log',
)


def format_number(value) -> str:
    """Render a number the way a user typed it.

    Integral floats drop the trailing ``.0`` (``20.0`` -> ``20``); anything
    else uses Python's shortest round-tripping repr, so nothing is rounded.
    """
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass
class VinaConfigBuilder:
    """Render search settings into a Vina configuration file.

    Attributes:
        receptor: Receptor file referenced by the config
        ligand: Ligand file referenced by the config
        out: Output poses file
        log: Log file
    """
    receptor: str = RECEPTOR_PREPARED
    ligand: str = LIGAND_PREPARED
    out: str = OUTPUT_NAME
    log: str = LOG_NAME

    def entries(self, region: SearchRegion,
                params: SearchParameters) -> List[Tuple[str, str]]:
        """Ordered ``(key, value)`` pairs for the config file."""
        self._warn_unusual(region, params)
        return [
            ('receptor', self.receptor),
            ('ligand', self.ligand),
            ('center_x', format_number(region.center_x)),
            ('center_y', format_number(region.center_y)),
            ('center_z', format_number(region.center_z)),
            ('size_x', format_number(region.size_x)),
            ('size_y', format_number(region.size_y)),
            ('size_z', format_number(region.size_z)),
            ('exhaustiveness', format_number(params.exhaustiveness)),
            ('num_modes', format_number(params.num_modes)),
            ('energy_range', format_number(params.energy_range)),
            ('out', self.out),
            ('log', self.log),
        ]

    def render(self, region: SearchRegion, params: SearchParameters) -> str:
        """Render the config text.

        Keys are grouped (files, center, size, search, outputs) with a blank
        line between groups.

        Args:
            region: Docking box
            params: Search settings

        Returns:
            Config file content
        """
        entries = self.entries(region, params)
        groups = [entries[0:2], entries[2:5], entries[5:8], entries[8:11], entries[11:13]]
        blocks = ['\n'.join(f"{key} = {value}" for key, value in group) for group in groups]
        return '\n\n'.join(blocks) + '\n'

    def _warn_unusual(self, region: SearchRegion, params: SearchParameters) -> None:
        # Values are written as given; the engine decides whether they are usable.
        if region.is_degenerate:
            logger.warning(f"Search region has non-positive extents: size={region.size}")
        if params.exhaustiveness < 1:
            logger.warning(f"Exhaustiveness {params.exhaustiveness} is below 1")
        if params.num_modes < 1:
            logger.warning(f"num_modes {params.num_modes} is below 1")


def render_vina_config(region: SearchRegion, params: SearchParameters) -> str:
    """Render a config file using the standard package file names."""
    return VinaConfigBuilder().render(region, params)
