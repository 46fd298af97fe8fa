from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from orbis_moderation.domain.status import ResourceStatus


class ModerateResourceIn(BaseModel):
    status: ResourceStatus
    # Required for REJECTED/SUSPENDED; checked by the coordinator, not here.
    reason: str | None = None
    moderation_notes: str | None = Field(default=None, description="Internal; never shown to the owner")


class ModerateVersionIn(BaseModel):
    action: Literal["APPROVE", "REJECT"]
    reason: str | None = None


class RejectVersionIn(BaseModel):
    reason: str | None = None


class CreateResourceIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    team_id: str | None = None


class SubmitVersionIn(BaseModel):
    version_number: str = Field(min_length=1, max_length=100)
    name: str | None = None
    changelog: str | None = None
