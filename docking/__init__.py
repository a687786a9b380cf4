"""
Docking job module for AutoDock Vina.

This module turns a receptor, a ligand, preparation options and search
settings into a portable job package: a Vina config, the raw inputs,
Open Babel preparation scripts and launchers for Windows and POSIX hosts.

Supported Platforms:
    - Windows batch (cmd.exe)
    - POSIX shell (bash)
"""

from .base import (
    MoleculeInput, PreparationConfig, SearchRegion, SearchParameters, ScriptRenderer,
    FORCE_FIELDS, CHARGE_METHODS,
)
from .vina import VinaConfigBuilder, render_vina_config, format_number
from .preparation import PreparationPipelineBuilder, PreparationPlan
from .scripts import BatchScriptRenderer, ShellScriptRenderer, default_renderers
from .paths import (
    PathValidationError, validate_executable_path, require_valid_executable_path,
    resolve_executable, find_on_path,
)
from .package import (
    JobPackage, PackageAssembler, ZipPackageWriter, PackageGenerationError, package_name,
)
from .utils import (
    search_region_from_coordinates, search_region_from_ligand, search_region_from_residues,
)

__all__ = [
    'MoleculeInput',
    'PreparationConfig',
    'SearchRegion',
    'SearchParameters',
    'ScriptRenderer',
    'FORCE_FIELDS',
    'CHARGE_METHODS',
    'VinaConfigBuilder',
    'render_vina_config',
    'format_number',
    'PreparationPipelineBuilder',
    'PreparationPlan',
    'BatchScriptRenderer',
    'ShellScriptRenderer',
    'default_renderers',
    'PathValidationError',
    'validate_executable_path',
    'require_valid_executable_path',
    'resolve_executable',
    'find_on_path',
    'JobPackage',
    'PackageAssembler',
    'ZipPackageWriter',
    'PackageGenerationError',
    'package_name',
    'search_region_from_coordinates',
    'search_region_from_ligand',
    'search_region_from_residues',
]
