import pytest

from docking.base import PreparationConfig
from docking.preparation import PreparationPipelineBuilder
from docking.scripts import BatchScriptRenderer, ShellScriptRenderer, default_renderers


@pytest.fixture
def plan():
    return PreparationPipelineBuilder(PreparationConfig(remove_water=False, ph_level=6.8)).build(
        'receptor_input.pdb', 'ligand_input.sdf')


def _lines(text):
    return [line.strip() for line in text.splitlines()]


@pytest.mark.parametrize('config', [
    PreparationConfig(),
    PreparationConfig(remove_water=False, add_force_field=False),
    PreparationConfig(protein_protonate=False, ligand_protonate=False, ligand_minimization=False,
                      ligand_charge_method='qeq', force_field_type='gaff'),
])
def test_both_platforms_run_identical_commands(config):
    plan = PreparationPipelineBuilder(config).build()
    for renderer in default_renderers():
        lines = _lines(renderer.render_preparation(plan))
        assert lines.count(plan.receptor_command) == 1
        assert lines.count(plan.ligand_command) == 1


def test_batch_preparation_script(plan):
    text = BatchScriptRenderer().render_preparation(plan)
    assert text.startswith('@echo off\r\n')
    assert '\n' not in text.replace('\r\n', '')
    lines = _lines(text)
    assert 'where obabel >nul 2>nul' in lines
    assert 'copy /Y "receptor_input.pdb" "receptor_prepared.pdbqt" >nul' in lines
    assert 'copy /Y "ligand_input.sdf" "ligand_prepared.pdbqt" >nul' in lines


def test_shell_preparation_script(plan):
    text = ShellScriptRenderer().render_preparation(plan)
    assert text.startswith('#!/bin/bash\n')
    assert '\r' not in text
    lines = _lines(text)
    assert 'if command -v obabel > /dev/null 2>&1; then' in lines
    assert 'cp "receptor_input.pdb" "receptor_prepared.pdbqt"' in lines
    assert 'cp "ligand_input.sdf" "ligand_prepared.pdbqt"' in lines


def test_script_names():
    assert BatchScriptRenderer().preparation_script_name == 'prepare_structures.bat'
    assert BatchScriptRenderer().run_script_name == 'run_job.bat'
    assert ShellScriptRenderer().preparation_script_name == 'prepare_structures.sh'
    assert ShellScriptRenderer().run_script_name == 'run_job.sh'


def test_batch_run_script_with_user_path():
    lines = _lines(BatchScriptRenderer().render_run(r'C:\Program Files\Vina\vina.exe'))
    assert 'call prepare_structures.bat' in lines
    assert r'set "USER_PATH=C:\Program Files\Vina\vina.exe"' in lines
    assert 'set "VINA_EXEC=vina"' in lines
    assert '"%VINA_EXEC%" --config config.txt' in lines
    assert 'exit /b %VINA_STATUS%' in lines
    assert lines[-1] == 'exit /b 0'


def test_shell_run_script_quotes_user_path():
    lines = _lines(ShellScriptRenderer().render_run('/opt/my vina/vina'))
    assert 'bash prepare_structures.sh' in lines
    assert "USER_PATH='/opt/my vina/vina'" in lines
    assert '"$VINA_EXEC" --config config.txt' in lines
    assert 'exit "$VINA_STATUS"' in lines
    assert 'echo "Check vina.log for details."' in lines


def test_run_script_without_user_path():
    lines = _lines(ShellScriptRenderer().render_run(None))
    assert "USER_PATH=''" in lines
    assert 'echo "No Vina path configured, using \'vina\' on PATH."' in lines


def test_platform_names():
    assert [r.get_platform_name() for r in default_renderers()] == ['Batch', 'Shell']


def test_batch_run_script_quotes_user_path_in_messages():
    path = r'C:\Program Files (x86)\Vina\vina.exe'
    lines = _lines(BatchScriptRenderer().render_run(path))
    assert f'set "USER_PATH={path}"' in lines

    echoes = [line for line in lines if line.startswith('echo') and '%' in line]
    user_echoes = [line for line in echoes if 'USER_PATH' in line]
    assert len(user_echoes) == 2
    for line in echoes:
        assert '%USER_PATH%' not in line.replace('"%USER_PATH%"', '')
        assert '%VINA_EXEC%' not in line.replace('"%VINA_EXEC%"', '')
