"""
Processing status state machine shared by transcriptions and translations.

Allowed moves::

    NOT_STARTED -> IN_PROGRESS -> COMPLETED -> IN_PROGRESS (explicit re-transcription)
                              \\-> FAILED -> IN_PROGRESS (retry with a new job)

Nothing ever moves back to ``NOT_STARTED``.
"""

from enum import StrEnum

from src.core.exceptions import InvalidTransitionError


class ProcessingStatus(StrEnum):
    """Status of a transcription or translation attempt."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (ProcessingStatus.COMPLETED, ProcessingStatus.FAILED)

    def can_start(self) -> bool:
        """A new job may start unless one is already running."""
        return self is not ProcessingStatus.IN_PROGRESS

    def can_complete(self) -> bool:
        return self is ProcessingStatus.IN_PROGRESS

    def can_fail(self) -> bool:
        return self is ProcessingStatus.IN_PROGRESS


_TRANSITIONS: dict[ProcessingStatus, frozenset[ProcessingStatus]] = {
    ProcessingStatus.NOT_STARTED: frozenset({ProcessingStatus.IN_PROGRESS}),
    ProcessingStatus.IN_PROGRESS: frozenset(
        {ProcessingStatus.COMPLETED, ProcessingStatus.FAILED}
    ),
    ProcessingStatus.FAILED: frozenset({ProcessingStatus.IN_PROGRESS}),
    ProcessingStatus.COMPLETED: frozenset({ProcessingStatus.IN_PROGRESS}),
}


def ensure_transition(
    current: ProcessingStatus | str, target: ProcessingStatus | str
) -> ProcessingStatus:
    """Validate ``current -> target`` and return the target status.

    Raises:
        InvalidTransitionError: If the move is not part of the state machine.
    """
    current = ProcessingStatus(current)
    target = ProcessingStatus(target)
    if target not in _TRANSITIONS[current]:
        raise InvalidTransitionError(current.value, target.value)
    return target
