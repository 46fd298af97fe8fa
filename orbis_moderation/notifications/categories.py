from __future__ import annotations

from enum import Enum


class NotificationType(str, Enum):
    LIKED_PROJECT_UPDATE = "LIKED_PROJECT_UPDATE"
    NEW_CREATOR_UPLOAD = "NEW_CREATOR_UPLOAD"
    NEW_FOLLOWER = "NEW_FOLLOWER"
    VERSION_APPROVED = "VERSION_APPROVED"
    VERSION_REJECTED = "VERSION_REJECTED"
    COLLECTION_ADDITION = "COLLECTION_ADDITION"
    SHOWCASE_LIKE = "SHOWCASE_LIKE"
    SHOWCASE_COMMENT = "SHOWCASE_COMMENT"


class PreferenceSwitch(str, Enum):
    """Value is the User column holding the switch."""

    LIKED_PROJECT_UPDATES = "notif_liked_project_updates"
    NEW_CREATOR_UPLOADS = "notif_new_creator_uploads"
    NEW_FOLLOWERS = "notif_new_followers"
    VERSION_STATUS = "notif_version_status"
    COLLECTION_ADDITIONS = "notif_collection_additions"
    SHOWCASE_INTERACTIONS = "notif_showcase_interactions"


def preference_switch_for(category: NotificationType | str) -> PreferenceSwitch | None:
    """Map a category to the switch that gates it.

    None means "no switch known": callers deliver (fail open) so a category added
    to NotificationType before it is mapped here is never silently dropped.
    """

    try:
        kind = NotificationType(category)
    except ValueError:
        return None

    match kind:
        case NotificationType.LIKED_PROJECT_UPDATE:
            return PreferenceSwitch.LIKED_PROJECT_UPDATES
        case NotificationType.NEW_CREATOR_UPLOAD:
            return PreferenceSwitch.NEW_CREATOR_UPLOADS
        case NotificationType.NEW_FOLLOWER:
            return PreferenceSwitch.NEW_FOLLOWERS
        case NotificationType.VERSION_APPROVED | NotificationType.VERSION_REJECTED:
            return PreferenceSwitch.VERSION_STATUS
        case NotificationType.COLLECTION_ADDITION:
            return PreferenceSwitch.COLLECTION_ADDITIONS
        case NotificationType.SHOWCASE_LIKE | NotificationType.SHOWCASE_COMMENT:
            return PreferenceSwitch.SHOWCASE_INTERACTIONS
        case _:
            return None
