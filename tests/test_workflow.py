import zipfile
from datetime import date

import pytest

from docking.base import PreparationConfig, SearchRegion, SearchParameters, MoleculeInput
from docking.package import PackageGenerationError
from docking.paths import PathValidationError
from workflow import (
    WorkflowController, WorkflowStep, WorkflowError, MissingInputError, WorkflowBusyError,
    ProgressRecorder, InputState, ExecutionState,
)

POSES = b"""REMARK VINA RESULT:    -8.5      0.000      0.000
REMARK VINA RESULT:    -7.9      1.200      1.500
"""


@pytest.fixture
def recorder():
    return ProgressRecorder()


@pytest.fixture
def controller(recorder):
    return WorkflowController(reporter=recorder)


def _to_search_region(controller, receptor, ligand):
    controller.load_receptor(receptor)
    controller.load_ligand(ligand)
    controller.advance()
    controller.confirm_preparation()
    return controller


def test_starts_at_input(controller):
    assert controller.step == WorkflowStep.INPUT
    assert isinstance(controller.state, InputState)
    assert not controller.busy
    assert controller.results == []


def test_cannot_advance_without_both_inputs(controller, receptor):
    allowed, reason = controller.can_advance()
    assert not allowed
    assert 'receptor and ligand' in reason

    controller.load_receptor(receptor)
    with pytest.raises(MissingInputError, match='ligand'):
        controller.advance()
    assert controller.step == WorkflowStep.INPUT


def test_load_from_files_reports_real_progress(controller, recorder, input_files):
    receptor_path, ligand_path = input_files
    molecule = controller.load_receptor(receptor_path)
    assert molecule.name == 'protein.pdb'
    events = [e for e in recorder.events if e.stage == 'receptor']
    assert events[0].indeterminate
    assert events[-1].completed == events[-1].total == receptor_path.stat().st_size
    assert not controller.busy


def test_missing_file_raises_and_clears_busy(controller, tmp_path):
    with pytest.raises(WorkflowError, match='Failed to read'):
        controller.load_receptor(tmp_path / 'missing.pdb')
    assert not controller.busy
    assert controller.state.receptor is None


def test_actions_are_owned_by_steps(controller, receptor, ligand):
    with pytest.raises(WorkflowError):
        controller.configure_preparation(ph_level=6)
    with pytest.raises(WorkflowError):
        controller.set_search_region(SearchRegion())
    with pytest.raises(WorkflowError):
        controller.generate_package('.')
    with pytest.raises(WorkflowError):
        controller.back()

    _to_search_region(controller, receptor, ligand)
    with pytest.raises(WorkflowError):
        controller.load_receptor(receptor)
    with pytest.raises(WorkflowError):
        controller.load_result_log(MoleculeInput('vina.log', POSES))


def test_preparation_step(controller, recorder, receptor, ligand):
    controller.load_receptor(receptor)
    controller.load_ligand(ligand)
    assert controller.advance() == WorkflowStep.PREPARATION
    assert controller.state.preparation == PreparationConfig()

    config = controller.configure_preparation(ph_level=6.0, force_field_type='uff')
    assert config.ph_level == 6.0
    with pytest.raises(ValueError):
        controller.configure_preparation(ligand_charge_method='bogus')
    assert controller.state.preparation.force_field_type == 'uff'

    assert controller.confirm_preparation() == WorkflowStep.SEARCH_REGION
    confirm = [e for e in recorder.events if e.stage == 'preparation']
    assert len(confirm) == 1 and confirm[0].indeterminate


def test_back_keeps_drafts(controller, receptor, ligand):
    _to_search_region(controller, receptor, ligand)
    region = SearchRegion(center_x=4.5, size_x=12)
    controller.set_search_region(region)
    controller.set_search_parameters(SearchParameters(exhaustiveness=16))

    controller.back()
    controller.configure_preparation(remove_water=False)
    controller.back()
    assert controller.step == WorkflowStep.INPUT

    controller.advance()
    assert controller.state.preparation.remove_water is False
    controller.advance()
    assert controller.state.region == region
    assert controller.state.params.exhaustiveness == 16


def test_generate_package_advances_to_execution(controller, recorder, tmp_path, receptor, ligand):
    _to_search_region(controller, receptor, ligand)
    controller.set_search_region(SearchRegion(center_x=1, center_y=2, center_z=3))
    path = controller.generate_package(tmp_path, today=date(2024, 5, 1))

    assert path.name == 'docking_job_2024-05-01.zip'
    assert controller.step == WorkflowStep.EXECUTION
    assert isinstance(controller.state, ExecutionState)
    assert controller.state.package_path == path
    with zipfile.ZipFile(path) as zf:
        assert b'center_z = 3' in zf.read('config.txt')

    package_events = [e for e in recorder.events if e.stage == 'package']
    assert [e.completed for e in package_events[:7]] == list(range(1, 8))
    assert not controller.busy


def test_invalid_path_blocks_generation(controller, tmp_path, receptor, ligand):
    _to_search_region(controller, receptor, ligand)
    controller.advance()
    assert controller.set_executable_path('vina|exe') is not None
    with pytest.raises(PathValidationError):
        controller.generate_package(tmp_path)
    assert list(tmp_path.iterdir()) == []

    assert controller.set_executable_path('/usr/local/bin/vina') is None
    assert controller.path_error is None
    path = controller.generate_package(tmp_path)
    with zipfile.ZipFile(path) as zf:
        assert b'USER_PATH=/usr/local/bin/vina' in zf.read('run_job.sh')


def test_generation_is_blocked_while_busy(controller, tmp_path, receptor, ligand):
    _to_search_region(controller, receptor, ligand)
    controller._busy = True
    with pytest.raises(WorkflowBusyError):
        controller.generate_package(tmp_path)


def test_generation_failure_clears_busy(controller, tmp_path, receptor, ligand):
    _to_search_region(controller, receptor, ligand)
    blocker = tmp_path / 'file'
    blocker.write_text('')
    with pytest.raises(PackageGenerationError):
        controller.generate_package(blocker)
    assert not controller.busy
    assert controller.step == WorkflowStep.SEARCH_REGION


def test_results_and_visualization(controller, tmp_path, receptor, ligand):
    _to_search_region(controller, receptor, ligand)
    controller.advance()
    assert controller.visualization_sources() == (receptor, ligand)

    log_path = tmp_path / 'output.pdbqt'
    log_path.write_bytes(POSES)
    records = controller.load_result_log(log_path)
    assert [r.mode for r in records] == [1, 2]
    assert controller.results == records

    shown_receptor, shown_ligand = controller.visualization_sources()
    assert shown_receptor == receptor
    assert shown_ligand.name == 'output.pdbqt'

    controller.back()
    assert controller.results == records
    controller.advance()
    assert controller.results == records


def test_cannot_advance_past_execution(controller, receptor, ligand):
    _to_search_region(controller, receptor, ligand)
    controller.advance()
    assert controller.can_advance() == (False, 'Already at the final step')
    with pytest.raises(WorkflowError):
        controller.advance()


def test_unexpected_generation_error_is_logged(controller, tmp_path, monkeypatch, caplog, receptor, ligand):
    _to_search_region(controller, receptor, ligand)

    def broken_assemble(*args, **kwargs):
        raise ValueError('renderer exploded')

    monkeypatch.setattr(controller.assembler, 'assemble', broken_assemble)
    with pytest.raises(ValueError, match='renderer exploded'):
        controller.generate_package(tmp_path)
    assert 'Package generation failed: renderer exploded' in caplog.text
    assert not controller.busy
    assert controller.step == WorkflowStep.SEARCH_REGION
