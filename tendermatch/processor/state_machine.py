"""Allowed transitions of the processing job state machine.

idle -> uploading -> processing -> analyzing -> completed, and every
non-terminal state may fall to error. No transition re-enters a prior state.
"""

from tendermatch.processor.exceptions import InvalidTransitionError
from tendermatch.processor.models import JobState

_FORWARD: dict[JobState, JobState] = {
    JobState.IDLE: JobState.UPLOADING,
    JobState.UPLOADING: JobState.PROCESSING,
    JobState.PROCESSING: JobState.ANALYZING,
    JobState.ANALYZING: JobState.COMPLETED,
}


def next_state(state: JobState) -> JobState:
    """Return the forward successor of a non-terminal state."""
    successor = _FORWARD.get(state)
    if successor is None:
        raise InvalidTransitionError(f"State '{state.value}' has no successor")
    return successor


def can_transition(current: JobState, target: JobState) -> bool:
    if current.is_terminal:
        return False
    if target == JobState.ERROR:
        return True
    return _FORWARD.get(current) == target


def ensure_transition(current: JobState, target: JobState) -> None:
    """Raise InvalidTransitionError unless current -> target is allowed."""
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Cannot transition job from '{current.value}' to '{target.value}'"
        )

