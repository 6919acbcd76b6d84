"""Role and policy schemas"""

from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime


class RoleCreate(BaseModel):
    """Schema for creating a role"""
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""


class PolicyCreate(BaseModel):
    """Schema for adding a policy to a role"""
    module: str = Field(..., min_length=1, max_length=100)
    function: str = Field(..., min_length=1, max_length=100)
    limitations: dict[str, list[str]] = Field(default_factory=dict)


class PolicyRead(BaseModel):
    id: UUID
    role_id: UUID
    module: str
    function: str
    limitations: dict[str, list[str]]
    created_at: datetime

    model_config = {"from_attributes": True}


class RoleRead(BaseModel):
    id: UUID
    name: str
    description: str
    policies: list[PolicyRead]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
