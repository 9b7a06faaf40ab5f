"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class NotificationCreate(BaseModel):
    """Payload used to record a new notification."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., max_length=120)
    message: str
    project_id: str | None = Field(
        default=None, validation_alias=AliasChoices("project", "projectId", "project_id")
    )
    recipient_email: str | None = Field(
        default=None, validation_alias=AliasChoices("recipientEmail", "recipient_email")
    )

    @field_validator("title", "message")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Title and message are required")
        return stripped

    @field_validator("project_id", "recipient_email")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    message: str
    project_id: str | None = Field(default=None, alias="projectId")
    recipient_email: str | None = Field(default=None, alias="recipientEmail")
    timestamp: datetime | None = None
    read: bool = False


class PendingJoinRequestRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    notification_id: int = Field(..., alias="notificationId")
    email: str
    project_id: str = Field(..., alias="projectId")
    timestamp: datetime | None = None


class MarkAllReadResponse(BaseModel):
    success: bool = True
    updated: int = 0


__all__ = [
    "NotificationCreate",
    "NotificationRead",
    "PendingJoinRequestRead",
    "MarkAllReadResponse",
]
