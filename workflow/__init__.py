"""
Workflow module: step-by-step assembly of a docking job.
"""

from .progress import ProgressEvent, ProgressRecorder, log_progress
from .state import (
    WorkflowController, WorkflowStep, WorkflowError, MissingInputError, WorkflowBusyError,
    InputState, PreparationState, SearchRegionState, ExecutionState,
)

__all__ = [
    'ProgressEvent',
    'ProgressRecorder',
    'log_progress',
    'WorkflowController',
    'WorkflowStep',
    'WorkflowError',
    'MissingInputError',
    'WorkflowBusyError',
    'InputState',
    'PreparationState',
    'SearchRegionState',
    'ExecutionState',
]
