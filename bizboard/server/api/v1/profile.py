"""
Profile (settings page) API Endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, File, UploadFile

from bizboard.core.models.io.profiles import ProfileUpdate, ProfileWithMemberships
from bizboard.server.services.deps import CurrentUserDep, SessionDep, StorageDep
from bizboard.server.services.profiles import ProfileService

router = APIRouter(tags=["profile"])


@router.get("", response_model=ProfileWithMemberships, summary="Get Profile")
async def get_profile(user: CurrentUserDep, session: SessionDep) -> ProfileWithMemberships:
    """The current user with their business memberships."""
    return await ProfileService(session).read(user)


@router.patch("", response_model=ProfileWithMemberships, summary="Update Profile")
async def update_profile(data: ProfileUpdate, user: CurrentUserDep, session: SessionDep) -> ProfileWithMemberships:
    """Full name and phone are trimmed; blank values clear the field."""
    service = ProfileService(session)
    user = await service.update(user, data)
    return await service.read(user)


@router.post("/avatar", response_model=ProfileWithMemberships, summary="Upload Avatar")
async def upload_avatar(
    user: CurrentUserDep,
    session: SessionDep,
    storage: StorageDep,
    file: UploadFile = File(...),
) -> ProfileWithMemberships:
    """Images only, up to ``AVATAR_MAX_BYTES``."""
    service = ProfileService(session)
    data = await file.read()
    user = await service.set_avatar(user, storage, file.filename or "avatar", file.content_type, data)
    return await service.read(user)
