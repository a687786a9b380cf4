"""
Platform script renderers for the job package.

Two families are supported: Windows batch files and POSIX shell scripts.
Both render the same PreparationPlan and share their messages, so the only
differences between them are shell syntax.
"""

import logging
import shlex
from typing import List, Optional

from .base import (
    ScriptRenderer, CONFIG_NAME, OUTPUT_NAME, LOG_NAME, DOCKING_EXECUTABLE,
)
from .preparation import PreparationPlan

logger = logging.getLogger(__name__)

JOB_BANNER = 'AutoDock Vina Docking Job'
MSG_PREP_START = 'Running chemical preparation with Open Babel...'
MSG_RECEPTOR = 'Processing receptor...'
MSG_LIGAND = 'Processing ligand...'
MSG_TOOL_MISSING = '[WARNING] {tool} not found in PATH.'
MSG_COPY_FALLBACK = 'Copying raw inputs to prepared file names, assuming they are already PDBQT.'
MSG_PREP_DONE = 'Preparation done.'
MSG_USER_EXEC = 'Using configured Vina executable: {path}'
MSG_USER_MISSING = '[WARNING] User path not found: {path}'
MSG_PATH_FALLBACK = "Falling back to '{default}' on PATH."
MSG_NO_USER_PATH = "No Vina path configured, using '{default}' on PATH."
MSG_START = 'Starting docking with: {exe}'
MSG_FAILURE = '[FAILURE] Docking execution failed with exit code {status}.'
MSG_CHECK_LOG = f'Check {LOG_NAME} for details.'
MSG_SUCCESS = f'[SUCCESS] Docking complete. Output: {OUTPUT_NAME}'
RULE = '=' * 40

# cmd.exe expands variables before parsing blocks; quotes keep ')' and '&' literal
QUOTED_USER_PATH = '"%USER_PATH%"'
QUOTED_VINA_EXEC = '"%VINA_EXEC%"'


class BatchScriptRenderer(ScriptRenderer):
    """Windows batch (cmd.exe) renderer."""

    extension = 'bat'
    line_ending = '\r\n'

    def render_preparation(self, plan: PreparationPlan) -> str:
        lines: List[str] = [
            '@echo off',
            'cd /d "%~dp0"',
            f'echo {MSG_PREP_START}',
        ]
        lines.extend(f'echo {line}' for line in plan.summary)
        lines.extend([
            '',
            f'where {plan.tool} >nul 2>nul',
            'if %errorlevel% equ 0 (',
            f'    echo {MSG_RECEPTOR}',
            f'    {plan.receptor_command}',
            f'    echo {MSG_LIGAND}',
            f'    {plan.ligand_command}',
            ') else (',
            f'    echo {MSG_TOOL_MISSING.format(tool=plan.tool)}',
            f'    echo {MSG_COPY_FALLBACK}',
        ])
        lines.extend(f'    copy /Y "{raw}" "{prepared}" >nul' for raw, prepared in plan.copies)
        lines.extend([
            ')',
            f'echo {MSG_PREP_DONE}',
        ])
        return self.join(lines)

    def render_run(self, executable_path: Optional[str] = None) -> str:
        default = DOCKING_EXECUTABLE
        lines = [
            '@echo off',
            'setlocal',
            'cd /d "%~dp0"',
            f'echo {RULE}',
            f'echo {JOB_BANNER}',
            f'echo {RULE}',
            '',
            f'call {self.preparation_script_name}',
            '',
            f'set "USER_PATH={executable_path or ""}"',
            f'set "VINA_EXEC={default}"',
            '',
            'if not "%USER_PATH%"=="" (',
            '    if exist "%USER_PATH%" (',
            '        set "VINA_EXEC=%USER_PATH%"',
            f'        echo {MSG_USER_EXEC.format(path=QUOTED_USER_PATH)}',
            '    ) else (',
            f'        echo {MSG_USER_MISSING.format(path=QUOTED_USER_PATH)}',
            f'        echo {MSG_PATH_FALLBACK.format(default=default)}',
            '    )',
            ') else (',
            f'    echo {MSG_NO_USER_PATH.format(default=default)}',
            ')',
            '',
            'echo.',
            f'echo {MSG_START.format(exe=QUOTED_VINA_EXEC)}',
            f'"%VINA_EXEC%" --config {CONFIG_NAME}',
            'set "VINA_STATUS=%errorlevel%"',
            'if not "%VINA_STATUS%"=="0" (',
            f'    echo {MSG_FAILURE.format(status="%VINA_STATUS%")}',
            f'    echo {MSG_CHECK_LOG}',
            '    exit /b %VINA_STATUS%',
            ')',
            f'echo {MSG_SUCCESS}',
            'exit /b 0',
        ]
        return self.join(lines)


class ShellScriptRenderer(ScriptRenderer):
    """POSIX shell (bash) renderer."""

    extension = 'sh'

    def render_preparation(self, plan: PreparationPlan) -> str:
        lines: List[str] = [
            '#!/bin/bash',
            'cd "$(dirname "$0")" || exit 1',
            f'echo "{MSG_PREP_START}"',
        ]
        lines.extend(f'echo "{line}"' for line in plan.summary)
        lines.extend([
            '',
            f'if command -v {plan.tool} > /dev/null 2>&1; then',
            f'    echo "{MSG_RECEPTOR}"',
            f'    {plan.receptor_command}',
            f'    echo "{MSG_LIGAND}"',
            f'    {plan.ligand_command}',
            'else',
            f'    echo "{MSG_TOOL_MISSING.format(tool=plan.tool)}"',
            f'    echo "{MSG_COPY_FALLBACK}"',
        ])
        lines.extend(f'    cp "{raw}" "{prepared}"' for raw, prepared in plan.copies)
        lines.extend([
            'fi',
            f'echo "{MSG_PREP_DONE}"',
        ])
        return self.join(lines)

    def render_run(self, executable_path: Optional[str] = None) -> str:
        default = DOCKING_EXECUTABLE
        lines = [
            '#!/bin/bash',
            'cd "$(dirname "$0")" || exit 1',
            f'echo "{RULE}"',
            f'echo "{JOB_BANNER}"',
            f'echo "{RULE}"',
            '',
            f'bash {self.preparation_script_name}',
            '',
            f'USER_PATH={shlex.quote(executable_path or "")}',
            f'VINA_EXEC="{default}"',
            '',
            'if [ -n "$USER_PATH" ]; then',
            '    if [ -f "$USER_PATH" ]; then',
            '        VINA_EXEC="$USER_PATH"',
            f'        echo "{MSG_USER_EXEC.format(path="$USER_PATH")}"',
            '    else',
            f'        echo "{MSG_USER_MISSING.format(path="$USER_PATH")}"',
            f'        echo "{MSG_PATH_FALLBACK.format(default=default)}"',
            '    fi',
            'else',
            f'    echo "{MSG_NO_USER_PATH.format(default=default)}"',
            'fi',
            '',
            'echo ""',
            f'echo "{MSG_START.format(exe="$VINA_EXEC")}"',
            f'"$VINA_EXEC" --config {CONFIG_NAME}',
            'VINA_STATUS=$?',
            'if [ "$VINA_STATUS" -ne 0 ]; then',
            f'    echo "{MSG_FAILURE.format(status="$VINA_STATUS")}"',
            f'    echo "{MSG_CHECK_LOG}"',
            '    exit "$VINA_STATUS"',
            'fi',
            f'echo "{MSG_SUCCESS}"',
            'exit 0',
        ]
        return self.join(lines)


def default_renderers() -> List[ScriptRenderer]:
    """Renderers for every supported platform family."""
    return [BatchScriptRenderer(), ShellScriptRenderer()]
