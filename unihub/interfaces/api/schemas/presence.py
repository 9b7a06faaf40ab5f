"""Schemas for presence endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class OnlineUsersRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_ids: list[str] = Field(default_factory=list, alias="userIds")
