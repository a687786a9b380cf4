"""
Workflow state machine for building a docking job.

The workflow moves through four steps::

    INPUT -> PREPARATION -> SEARCH_REGION -> EXECUTION

Each step is represented by its own frozen state object carrying the data
collected so far, so later steps always have both structures loaded. Going
back keeps what was entered in later steps as drafts, which are restored
when moving forward again.

Example:
    >>> controller = WorkflowController()
    >>> controller.load_receptor('protein.pdb')
    >>> controller.load_ligand('ligand.sdf')
    >>> controller.advance()
    >>> controller.confirm_preparation()
    >>> controller.set_search_region(SearchRegion(center_x=10.5))
    >>> controller.generate_package(Path('jobs'))
"""

import dataclasses
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from docking.base import MoleculeInput, PreparationConfig, SearchRegion, SearchParameters
from docking.package import JobPackage, PackageAssembler, ZipPackageWriter
from docking.paths import PathValidationError, validate_executable_path
from results.parser import DockingResultRecord, parse_docking_output

from .progress import ProgressEvent, ProgressReporter, log_progress

logger = logging.getLogger(__name__)

Source = Union[str, Path, MoleculeInput]


class WorkflowError(RuntimeError):
    """Raised when an action is not possible in the current step."""


class MissingInputError(WorkflowError):
    """Raised when advancing without both structures loaded."""


class WorkflowBusyError(WorkflowError):
    """Raised when an action is requested while another is running."""


class WorkflowStep(Enum):
    """Enumeration of workflow steps, in order."""
    INPUT = 1
    PREPARATION = 2
    SEARCH_REGION = 3
    EXECUTION = 4

    @property
    def label(self) -> str:
        return self.name.replace('_', ' ').title()


@dataclass(frozen=True)
class InputState:
    receptor: Optional[MoleculeInput] = None
    ligand: Optional[MoleculeInput] = None

    step = WorkflowStep.INPUT


@dataclass(frozen=True)
class PreparationState:
    receptor: MoleculeInput
    ligand: MoleculeInput
    preparation: PreparationConfig = PreparationConfig()

    step = WorkflowStep.PREPARATION


@dataclass(frozen=True)
class SearchRegionState:
    receptor: MoleculeInput
    ligand: MoleculeInput
    preparation: PreparationConfig
    region: SearchRegion = SearchRegion()
    params: SearchParameters = SearchParameters()

    step = WorkflowStep.SEARCH_REGION


@dataclass(frozen=True)
class ExecutionState:
    """Final step: package generation and result loading.

    Attributes:
        executable_path: User path to Vina as typed ('' for PATH lookup)
        package_path: Last written archive, if any
        result_log: Uploaded result file, if any
        results: Poses parsed from ``result_log``
    """
    receptor: MoleculeInput
    ligand: MoleculeInput
    preparation: PreparationConfig
    region: SearchRegion
    params: SearchParameters
    executable_path: str = ''
    package_path: Optional[Path] = None
    result_log: Optional[MoleculeInput] = None
    results: Tuple[DockingResultRecord, ...] = ()

    step = WorkflowStep.EXECUTION


WorkflowState = Union[InputState, PreparationState, SearchRegionState, ExecutionState]


class WorkflowController:
    """Drive a docking job from inputs to a generated package.

    Every action belongs to one step; calling it from another step raises
    WorkflowError. File reads and package generation set ``busy`` for their
    duration.
    """

    def __init__(self,
                 assembler: Optional[PackageAssembler] = None,
                 writer: Optional[ZipPackageWriter] = None,
                 reporter: Optional[ProgressReporter] = None):
        """Initialize controller.

        Args:
            assembler: Package assembler (default: batch and shell scripts)
            writer: Archive writer
            reporter: Progress callback (default: log events)
        """
        self.assembler = assembler or PackageAssembler()
        self.writer = writer or ZipPackageWriter()
        self.reporter = reporter or log_progress
        self._state: WorkflowState = InputState()
        self._drafts: Dict[str, Any] = {}
        self._path_error: Optional[str] = None
        self._busy = False

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def step(self) -> WorkflowStep:
        return self._state.step

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def path_error(self) -> Optional[str]:
        return self._path_error

    @property
    def results(self) -> List[DockingResultRecord]:
        if isinstance(self._state, ExecutionState):
            return list(self._state.results)
        return list(self._drafts.get('results', ()))

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def load_receptor(self, source: Source) -> MoleculeInput:
        """Load the receptor structure, replacing any previous one."""
        self._require(WorkflowStep.INPUT, 'load a receptor')
        molecule = self._read(source, 'receptor')
        self._state = dataclasses.replace(self._state, receptor=molecule)
        return molecule

    def load_ligand(self, source: Source) -> MoleculeInput:
        """Load the ligand structure, replacing any previous one."""
        self._require(WorkflowStep.INPUT, 'load a ligand')
        molecule = self._read(source, 'ligand')
        self._state = dataclasses.replace(self._state, ligand=molecule)
        return molecule

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def can_advance(self) -> Tuple[bool, str]:
        """Check whether ``advance()`` would succeed.

        Returns:
            (allowed, reason)
        """
        state = self._state
        if isinstance(state, InputState):
            missing = [name for name in ('receptor', 'ligand') if getattr(state, name) is None]
            if missing:
                return False, f"Missing {' and '.join(missing)} structure"
            return True, "Both structures loaded"
        if isinstance(state, ExecutionState):
            return False, "Already at the final step"
        return True, f"Ready for {WorkflowStep(state.step.value + 1).label}"

    def advance(self) -> WorkflowStep:
        """Move forward one step.

        Raises:
            MissingInputError: If leaving INPUT without both structures
            WorkflowError: If already at the final step
        """
        self._check_idle()
        allowed, reason = self.can_advance()
        state = self._state
        if not allowed:
            if isinstance(state, InputState):
                raise MissingInputError(reason)
            raise WorkflowError(reason)

        if isinstance(state, InputState):
            self._state = PreparationState(
                receptor=state.receptor,
                ligand=state.ligand,
                preparation=self._drafts.pop('preparation', PreparationConfig()),
            )
        elif isinstance(state, PreparationState):
            self._state = SearchRegionState(
                receptor=state.receptor,
                ligand=state.ligand,
                preparation=state.preparation,
                region=self._drafts.pop('region', SearchRegion()),
                params=self._drafts.pop('params', SearchParameters()),
            )
        elif isinstance(state, SearchRegionState):
            self._state = self._execution_state(state)

        logger.info(f"Workflow advanced to {self.step.label}")
        return self.step

    def back(self) -> WorkflowStep:
        """Move back one step, keeping later data as drafts.

        Raises:
            WorkflowError: If already at the first step
        """
        self._check_idle()
        state = self._state
        if isinstance(state, InputState):
            raise WorkflowError("Already at the first step")

        if isinstance(state, PreparationState):
            self._drafts['preparation'] = state.preparation
            self._state = InputState(receptor=state.receptor, ligand=state.ligand)
        elif isinstance(state, SearchRegionState):
            self._drafts['region'] = state.region
            self._drafts['params'] = state.params
            self._state = PreparationState(
                receptor=state.receptor, ligand=state.ligand, preparation=state.preparation,
            )
        elif isinstance(state, ExecutionState):
            self._drafts['executable_path'] = state.executable_path
            self._drafts['package_path'] = state.package_path
            self._drafts['result_log'] = state.result_log
            self._drafts['results'] = state.results
            self._state = SearchRegionState(
                receptor=state.receptor, ligand=state.ligand, preparation=state.preparation,
                region=state.region, params=state.params,
            )

        logger.info(f"Workflow moved back to {self.step.label}")
        return self.step

    # ------------------------------------------------------------------
    # Preparation and search region
    # ------------------------------------------------------------------

    def configure_preparation(self, **changes) -> PreparationConfig:
        """Update preparation options.

        Raises:
            ValueError: If a force field or charge method name is invalid
        """
        self._require(WorkflowStep.PREPARATION, 'configure preparation')
        preparation = dataclasses.replace(self._state.preparation, **changes)
        self._state = dataclasses.replace(self._state, preparation=preparation)
        return preparation

    def confirm_preparation(self) -> WorkflowStep:
        """Accept the preparation options and continue."""
        self._require(WorkflowStep.PREPARATION, 'confirm preparation')
        self._emit(ProgressEvent('preparation', 'Preparation options confirmed'))
        return self.advance()

    def set_search_region(self, region: SearchRegion) -> None:
        self._require(WorkflowStep.SEARCH_REGION, 'set the search region')
        if region.is_degenerate:
            logger.warning(f"Search region has non-positive extents: size={region.size}")
        self._state = dataclasses.replace(self._state, region=region)

    def set_search_parameters(self, params: SearchParameters) -> None:
        self._require(WorkflowStep.SEARCH_REGION, 'set search parameters')
        self._state = dataclasses.replace(self._state, params=params)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def set_executable_path(self, path: Optional[str]) -> Optional[str]:
        """Store the Vina executable path and validate it.

        Returns:
            Validation error message, or None if the path is acceptable
        """
        self._require((WorkflowStep.SEARCH_REGION, WorkflowStep.EXECUTION), 'set the executable path')
        cleaned = (path or '').strip()
        self._path_error = validate_executable_path(cleaned)
        if self._path_error:
            logger.warning(f"Invalid executable path {cleaned!r}: {self._path_error}")

        if isinstance(self._state, ExecutionState):
            self._state = dataclasses.replace(self._state, executable_path=cleaned)
        else:
            self._drafts['executable_path'] = cleaned
        return self._path_error

    def preview_package(self, today: Optional[date] = None) -> JobPackage:
        """Assemble the package in memory without writing it."""
        self._require((WorkflowStep.SEARCH_REGION, WorkflowStep.EXECUTION), 'preview the package')
        self._check_generation_allowed()
        return self._assemble(self._execution_state(self._state), today)

    def generate_package(self, output_dir: Path, today: Optional[date] = None) -> Path:
        """Assemble and write the job package.

        Called from SEARCH_REGION, a successful generation also advances the
        workflow to EXECUTION.

        Args:
            output_dir: Directory receiving the archive
            today: Date embedded in the archive name (default: today)

        Returns:
            Path to the written archive

        Raises:
            PathValidationError: If the executable path is invalid
            WorkflowBusyError: If a generation is already running
            PackageGenerationError: If the archive cannot be written
        """
        self._require((WorkflowStep.SEARCH_REGION, WorkflowStep.EXECUTION), 'generate the package')
        self._check_generation_allowed()

        execution = self._execution_state(self._state)
        self._busy = True
        try:
            package = self._assemble(execution, today)
            path = self.writer.write(package, output_dir)
        except Exception as e:
            logger.error(f"Package generation failed: {e}", exc_info=True)
            raise
        finally:
            self._busy = False

        self._drafts.pop('package_path', None)
        self._state = dataclasses.replace(execution, package_path=path)
        self._emit(ProgressEvent('package', f"Wrote {path.name}", 1, 1))
        return path

    def load_result_log(self, source: Source) -> List[DockingResultRecord]:
        """Load a result file (output.pdbqt or vina.log) and parse it."""
        self._require(WorkflowStep.EXECUTION, 'load results')
        molecule = self._read(source, 'results')
        records = parse_docking_output(molecule.text)
        if not records:
            logger.warning(f"No docking results found in {molecule.name}")
        else:
            logger.info(f"Loaded {len(records)} poses from {molecule.name}")
        self._state = dataclasses.replace(self._state, result_log=molecule, results=tuple(records))
        return records

    def visualization_sources(self) -> Tuple[Optional[MoleculeInput], Optional[MoleculeInput]]:
        """Structures to display: the receptor and the docked poses.

        The result file is shown in place of the ligand once loaded.
        """
        state = self._state
        result_log = state.result_log if isinstance(state, ExecutionState) else None
        return state.receptor, result_log or state.ligand

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, steps, action: str) -> None:
        if isinstance(steps, WorkflowStep):
            steps = (steps,)
        if self.step not in steps:
            allowed = ' or '.join(step.label for step in steps)
            raise WorkflowError(f"Cannot {action} during {self.step.label}; only during {allowed}")
        self._check_idle()

    def _check_idle(self) -> None:
        if self._busy:
            raise WorkflowBusyError("Another action is in progress")

    def _check_generation_allowed(self) -> None:
        if self._path_error:
            raise PathValidationError(self._path_error)

    def _execution_state(self, state: Union[SearchRegionState, ExecutionState]) -> ExecutionState:
        if isinstance(state, ExecutionState):
            return state
        return ExecutionState(
            receptor=state.receptor,
            ligand=state.ligand,
            preparation=state.preparation,
            region=state.region,
            params=state.params,
            executable_path=self._drafts.get('executable_path', ''),
            package_path=self._drafts.get('package_path'),
            result_log=self._drafts.get('result_log'),
            results=self._drafts.get('results', ()),
        )

    def _assemble(self, state: ExecutionState, today: Optional[date]) -> JobPackage:
        def on_artifact(completed: int, total: int, member: str) -> None:
            self._emit(ProgressEvent('package', f"Added {member}", completed, total))

        return self.assembler.assemble(
            state.receptor, state.ligand, state.preparation, state.region, state.params,
            executable_path=state.executable_path, today=today, progress=on_artifact,
        )

    def _read(self, source: Source, stage: str) -> MoleculeInput:
        if isinstance(source, MoleculeInput):
            self._emit(ProgressEvent(stage, f"Loaded {source.name}", len(source.content), len(source.content)))
            return source

        path = Path(source)
        self._busy = True
        try:
            self._emit(ProgressEvent(stage, f"Reading {path.name}", 0, None))
            molecule = MoleculeInput.from_path(path)
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise WorkflowError(f"Failed to read {path}: {e}") from e
        finally:
            self._busy = False

        size = len(molecule.content)
        self._emit(ProgressEvent(stage, f"Read {path.name}", size, size))
        return molecule

    def _emit(self, event: ProgressEvent) -> None:
        self.reporter(event)
