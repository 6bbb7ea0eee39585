"""Pydantic schemas for users.

The password is write-only: accepted on create/update, hashed, and never
part of UserRead.
"""

from typing import Optional

from pydantic import BaseModel, Field

from proctor.schemas.common import ResourceName, RoleName


class UserCreate(BaseModel):
    name: ResourceName
    role: RoleName = "user"
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    name: Optional[ResourceName] = None
    role: Optional[RoleName] = None
    password: Optional[str] = Field(None, min_length=1)


class UserRead(BaseModel):
    name: str
    role: str

    model_config = {"from_attributes": True}
