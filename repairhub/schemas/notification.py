from typing import Optional

from pydantic import BaseModel, Field, field_validator

from repairhub.models.role import UserRole
from repairhub.utils.validators import not_blank


class NotificationCreateRequest(BaseModel):
    userId:  Optional[int] = None     # defaults to the caller; only admins may target others
    message: str = Field(max_length=1000)
    type:    str = "general"

    @field_validator("message")
    @classmethod
    def check_message(cls, v): return not_blank(v, "Message")


class MarkReadRequest(BaseModel):
    notificationIds: list[int] = []
    markAll:         bool = False


class DeleteNotificationsRequest(BaseModel):
    notificationIds: list[int] = []
    deleteAll:       bool = False


class BroadcastFilter(BaseModel):
    role:     Optional[UserRole] = None
    isActive: Optional[bool] = None


class BroadcastRequest(BaseModel):
    """`userIds` wins over `filterCriteria` when both are sent."""
    message:        str = Field(max_length=1000)
    type:           str = "broadcast"
    userIds:        Optional[list[int]] = None
    filterCriteria: Optional[BroadcastFilter] = None

    @field_validator("message")
    @classmethod
    def check_message(cls, v): return not_blank(v, "Message")
