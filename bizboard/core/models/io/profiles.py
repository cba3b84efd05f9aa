"""
Profile (settings page) and upload I/O models.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .auth import ProfileRead


class MembershipRead(BaseModel):
    business_id: str
    business_name: str
    role: str


class ProfileWithMemberships(ProfileRead):
    memberships: List[MembershipRead] = Field(default_factory=list)


class ProfileUpdate(BaseModel):
    """Blank strings clear the field."""

    full_name: Optional[str] = None
    phone: Optional[str] = None


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    path: str
    public_url: str = Field(alias="publicUrl")
