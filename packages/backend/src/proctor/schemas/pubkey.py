"""Pydantic schemas for SSH public keys."""

from typing import Optional

from pydantic import BaseModel, Field

from proctor.schemas.common import ResourceName


class PubkeyCreate(BaseModel):
    title: ResourceName
    key: str = Field(..., min_length=1)


class PubkeyUpdate(BaseModel):
    title: Optional[ResourceName] = None
    key: Optional[str] = Field(None, min_length=1)


class PubkeyRead(BaseModel):
    title: str
    key: str
    fingerprint: str

    model_config = {"from_attributes": True}
