"""Schemas for role listing."""

from pydantic import BaseModel, ConfigDict


class RoleItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None


class AdminOnlyResponse(BaseModel):
    message: str
    roles: list[RoleItem]
