from __future__ import annotations

from enum import Enum

from orbis_moderation.domain.errors import InvalidTransition, ReasonRequired


class ResourceStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SUSPENDED = "SUSPENDED"
    ARCHIVED = "ARCHIVED"
    DELETED = "DELETED"


class VersionStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


RESOURCE_TRANSITIONS: dict[ResourceStatus, frozenset[ResourceStatus]] = {
    ResourceStatus.DRAFT: frozenset({ResourceStatus.PENDING, ResourceStatus.ARCHIVED, ResourceStatus.DELETED}),
    ResourceStatus.PENDING: frozenset({ResourceStatus.APPROVED, ResourceStatus.REJECTED, ResourceStatus.DRAFT}),
    ResourceStatus.APPROVED: frozenset({ResourceStatus.SUSPENDED, ResourceStatus.ARCHIVED, ResourceStatus.DELETED}),
    ResourceStatus.REJECTED: frozenset({ResourceStatus.PENDING, ResourceStatus.DELETED}),
    ResourceStatus.SUSPENDED: frozenset({ResourceStatus.APPROVED, ResourceStatus.DELETED, ResourceStatus.ARCHIVED}),
    ResourceStatus.ARCHIVED: frozenset({ResourceStatus.APPROVED, ResourceStatus.DELETED, ResourceStatus.DRAFT}),
    ResourceStatus.DELETED: frozenset(),  # terminal
}

# rejection_reason is kept only for these.
REASON_REQUIRED_STATUSES = frozenset({ResourceStatus.REJECTED, ResourceStatus.SUSPENDED})

_ACTION_MESSAGES = {
    ResourceStatus.APPROVED: "approved",
    ResourceStatus.REJECTED: "rejected",
    ResourceStatus.SUSPENDED: "suspended",
    ResourceStatus.ARCHIVED: "archived",
    ResourceStatus.DELETED: "deleted",
    ResourceStatus.PENDING: "set to pending",
    ResourceStatus.DRAFT: "set to draft",
}


def allowed_transitions(current: ResourceStatus | str) -> frozenset[ResourceStatus]:
    return RESOURCE_TRANSITIONS.get(ResourceStatus(current), frozenset())


def validate_transition(
    current: ResourceStatus | str,
    requested: ResourceStatus | str,
    reason: str | None = None,
) -> None:
    """Raise unless current -> requested is in the table.

    REJECTED and SUSPENDED additionally need a non-blank reason.
    """

    cur = ResourceStatus(current)
    req = ResourceStatus(requested)

    if req not in RESOURCE_TRANSITIONS[cur]:
        raise InvalidTransition(cur.value, req.value)

    if req in REASON_REQUIRED_STATUSES and not (reason or "").strip():
        raise ReasonRequired()


def status_action_message(status: ResourceStatus | str) -> str:
    try:
        return _ACTION_MESSAGES[ResourceStatus(status)]
    except (KeyError, ValueError):
        return "updated"
