"""
Job package assembly.

A job package is a zip archive with everything needed to prepare structures
and run Vina on another machine:

    docking_job_2024-05-01.zip
    ├── config.txt
    ├── receptor_input.pdb
    ├── ligand_input.sdf
    ├── prepare_structures.bat
    ├── prepare_structures.sh
    ├── run_job.bat
    └── run_job.sh

Packages are rebuilt from scratch on every request.
"""

import io
import logging
import os
import stat
import tempfile
import zipfile
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .base import (
    MoleculeInput, PreparationConfig, SearchRegion, SearchParameters, ScriptRenderer,
    CONFIG_NAME, RECEPTOR_INPUT_STEM, LIGAND_INPUT_STEM,
)
from .paths import require_valid_executable_path
from .preparation import PreparationPipelineBuilder, PreparationPlan
from .scripts import default_renderers
from .vina import VinaConfigBuilder

logger = logging.getLogger(__name__)

PACKAGE_PREFIX = 'docking_job'


class PackageGenerationError(RuntimeError):
    """Raised when a job package cannot be written."""


def package_name(today: Optional[date] = None) -> str:
    """Archive name embedding the ISO date."""
    today = today or date.today()
    return f"{PACKAGE_PREFIX}_{today.isoformat()}.zip"


@dataclass
class JobPackage:
    """Named collection of generated artifacts.

    Attributes:
        name: Archive file name
        artifacts: Archive member name -> content, in archive order
        plan: Preparation plan the scripts were rendered from
    """
    name: str
    artifacts: Dict[str, bytes] = field(default_factory=OrderedDict)
    plan: Optional[PreparationPlan] = None

    @property
    def members(self) -> List[str]:
        return list(self.artifacts.keys())

    def text(self, member: str) -> str:
        return self.artifacts[member].decode('utf-8')

    def to_bytes(self) -> bytes:
        """Serialize the package as zip bytes."""
        buffer = io.BytesIO()
        _write_zip(self, buffer)
        return buffer.getvalue()


class PackageAssembler:
    """Compose config, inputs and scripts into a JobPackage.

    Example:
        >>> assembler = PackageAssembler()
        >>> package = assembler.assemble(receptor, ligand, PreparationConfig(),
        ...                              SearchRegion(), SearchParameters())
        >>> ZipPackageWriter().write(package, Path('jobs'))
    """

    def __init__(self,
                 renderers: Optional[Sequence[ScriptRenderer]] = None,
                 config_builder: Optional[VinaConfigBuilder] = None):
        """Initialize assembler.

        Args:
            renderers: Platform renderers (default: batch and shell)
            config_builder: Vina config writer
        """
        self.renderers = list(renderers) if renderers is not None else default_renderers()
        self.config_builder = config_builder or VinaConfigBuilder()

    def assemble(self,
                 receptor: MoleculeInput,
                 ligand: MoleculeInput,
                 preparation: PreparationConfig,
                 region: SearchRegion,
                 params: SearchParameters,
                 executable_path: Optional[str] = None,
                 today: Optional[date] = None,
                 progress: Optional[Callable[[int, int, str], None]] = None) -> JobPackage:
        """Build a complete job package.

        Args:
            receptor: Receptor input
            ligand: Ligand input
            preparation: Preparation options
            region: Docking box
            params: Search settings
            executable_path: Optional user path to the Vina executable
            today: Date embedded in the package name (default: today)
            progress: Optional callback ``(completed, total, member)``

        Returns:
            JobPackage

        Raises:
            PathValidationError: If ``executable_path`` is invalid
        """
        executable_path = require_valid_executable_path(executable_path)
        if executable_path and not Path(executable_path).is_file():
            logger.warning(
                f"Vina executable not found on this host: {executable_path}. "
                "The run script will fall back to 'vina' if it is missing on the execution host too."
            )

        plan = PreparationPipelineBuilder(preparation).build_for(receptor, ligand)

        artifacts: Dict[str, bytes] = OrderedDict()
        artifacts[CONFIG_NAME] = self.config_builder.render(region, params).encode('utf-8')
        artifacts[receptor.standard_name(RECEPTOR_INPUT_STEM)] = receptor.content
        artifacts[ligand.standard_name(LIGAND_INPUT_STEM)] = ligand.content
        for renderer in self.renderers:
            artifacts[renderer.preparation_script_name] = renderer.render_preparation(plan).encode('utf-8')
        for renderer in self.renderers:
            artifacts[renderer.run_script_name] = renderer.render_run(executable_path).encode('utf-8')

        total = len(artifacts)
        for index, member in enumerate(artifacts, start=1):
            logger.debug(f"Added {member} ({len(artifacts[member])} bytes)")
            if progress:
                progress(index, total, member)

        package = JobPackage(name=package_name(today), artifacts=artifacts, plan=plan)
        logger.info(f"Assembled {package.name} with {total} artifacts")
        return package


def _member_info(name: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=(1980, 1, 1, 0, 0, 0))
    info.compress_type = zipfile.ZIP_DEFLATED
    mode = 0o755 if name.endswith('.sh') else 0o644
    info.external_attr = (stat.S_IFREG | mode) << 16
    return info


def _write_zip(package: JobPackage, handle) -> None:
    with zipfile.ZipFile(handle, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in package.artifacts.items():
            zf.writestr(_member_info(name), content)


class ZipPackageWriter:
    """Write a JobPackage to disk as a single zip archive.

    The archive is written to a temporary file in the target directory and
    moved into place, so readers never see a partial file.
    """

    def write(self, package: JobPackage, output_dir: Path) -> Path:
        """Write the archive.

        Args:
            package: Package to write
            output_dir: Destination directory (created if missing)

        Returns:
            Path to the written archive

        Raises:
            PackageGenerationError: If writing fails
        """
        output_dir = Path(output_dir)
        target = output_dir / package.name
        tmp_path = None
        replaced = False
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{package.name}.", suffix='.tmp', dir=output_dir)
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, 'wb') as handle:
                _write_zip(package, handle)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, target)
            replaced = True
        except OSError as e:
            raise PackageGenerationError(f"Failed to write job package {target}: {e}") from e
        finally:
            if not replaced and tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()

        logger.info(f"Wrote job package: {target}")
        return target
