from __future__ import annotations

from pydantic import BaseModel


class NotificationPreferencesIn(BaseModel):
    notif_liked_project_updates: bool | None = None
    notif_new_creator_uploads: bool | None = None
    notif_new_followers: bool | None = None
    notif_version_status: bool | None = None
    notif_collection_additions: bool | None = None
    notif_showcase_interactions: bool | None = None
