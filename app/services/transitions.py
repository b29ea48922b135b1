"""Idea status transition rules for the admin review and owner project paths."""

from typing import Any, Dict, FrozenSet, Mapping, Optional, Union

from app.models.idea import IdeaStatus
from app.services.validation import IdeaValidationError, is_blank

# Nominal forward lifecycle. The admin review path does not enforce it.
ALLOWED_TRANSITIONS: Dict[IdeaStatus, FrozenSet[IdeaStatus]] = {
    IdeaStatus.PENDING: frozenset({IdeaStatus.APPROVED, IdeaStatus.REJECTED}),
    IdeaStatus.APPROVED: frozenset({IdeaStatus.IN_PROGRESS}),
    IdeaStatus.IN_PROGRESS: frozenset({IdeaStatus.COMPLETED}),
    IdeaStatus.COMPLETED: frozenset(),
    IdeaStatus.REJECTED: frozenset(),
}

PROJECT_UPDATE_STATUSES = frozenset({IdeaStatus.IN_PROGRESS, IdeaStatus.COMPLETED})

# github_url is informational and never counts as evidence.
EVIDENCE_LINK_FIELDS = ("demo_url", "documentation_url", "video_url")
MIN_EVIDENCE_LINKS = 2

COMPLETED_LOCKED = "Cannot change status of a completed idea"
INSUFFICIENT_EVIDENCE = (
    "To mark as Completed, provide at least two of: Live Demo, Documentation, Video"
)


def parse_status(value: Union[str, IdeaStatus, None]) -> IdeaStatus:
    if isinstance(value, IdeaStatus):
        return value
    try:
        return IdeaStatus(value)
    except ValueError:
        raise IdeaValidationError("Invalid status")


def is_forward_transition(current: IdeaStatus, target: IdeaStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def count_evidence_links(links: Mapping[str, Any]) -> int:
    return sum(1 for field in EVIDENCE_LINK_FIELDS if not is_blank(links.get(field)))


def _check_completed_lock(current: IdeaStatus, target: IdeaStatus) -> None:
    if current == IdeaStatus.COMPLETED and target != IdeaStatus.COMPLETED:
        raise IdeaValidationError(COMPLETED_LOCKED)


def check_review_transition(current: IdeaStatus, target: Union[str, IdeaStatus, None]) -> IdeaStatus:
    """Admin review: any status may be set unless the idea is already COMPLETED."""
    if is_blank(target):
        raise IdeaValidationError("Status is required")
    new_status = parse_status(target)
    _check_completed_lock(current, new_status)
    return new_status


def check_project_transition(
    current: IdeaStatus,
    target: Union[str, IdeaStatus],
    links: Optional[Mapping[str, Any]] = None,
) -> IdeaStatus:
    """
    Owner project update: only IN_PROGRESS or COMPLETED may be requested.

    ``links`` is the link set the idea will have after the update; moving to
    COMPLETED needs at least two non-blank evidence links in it.
    """
    new_status = parse_status(target)
    _check_completed_lock(current, new_status)
    if new_status not in PROJECT_UPDATE_STATUSES:
        raise IdeaValidationError("Invalid status")
    if new_status == IdeaStatus.COMPLETED and count_evidence_links(links or {}) < MIN_EVIDENCE_LINKS:
        raise IdeaValidationError(INSUFFICIENT_EVIDENCE)
    return new_status
