"""
Progress reporting for long-running workflow actions.

Actions report real counts (bytes read, artifacts archived). When no real
count exists the event is indeterminate (``total`` is None) and callers
should show a spinner rather than a percentage.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress update.

    Attributes:
        stage: Action that emitted the event (e.g. 'input', 'package')
        message: Human-readable status line
        completed: Units done so far
        total: Units expected, or None when indeterminate
    """
    stage: str
    message: str
    completed: int = 0
    total: Optional[int] = None

    @property
    def indeterminate(self) -> bool:
        return self.total is None

    @property
    def fraction(self) -> Optional[float]:
        if self.total is None:
            return None
        if self.total == 0:
            return 1.0
        return min(self.completed / self.total, 1.0)


ProgressReporter = Callable[[ProgressEvent], None]


def log_progress(event: ProgressEvent) -> None:
    """Reporter that writes events to the log."""
    if event.indeterminate:
        logger.info(f"[{event.stage}] {event.message}")
    else:
        logger.info(f"[{event.stage}] {event.message} ({event.completed}/{event.total})")


class ProgressRecorder:
    """Reporter that keeps every event, optionally forwarding them."""

    def __init__(self, forward: Optional[ProgressReporter] = None):
        self.events: List[ProgressEvent] = []
        self.forward = forward

    def __call__(self, event: ProgressEvent) -> None:
        self.events.append(event)
        if self.forward:
            self.forward(event)

    def stages(self) -> List[str]:
        return [event.stage for event in self.events]
