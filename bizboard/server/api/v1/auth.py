"""
Authentication API Endpoints.

Login issues a session token (returned in the body and set as a cookie),
logout revokes it. Admins create users and reset their passwords.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response, status

from bizboard.core.logging_config import get_logger
from bizboard.core.models.io.auth import LoginRequest, LoginResponse, PasswordReset, ProfileRead, UserCreate
from bizboard.server.core.config import settings
from bizboard.server.services.auth import AuthService
from bizboard.server.services.deps import AdminUserDep, CurrentUserDep, SessionDep, extract_token

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log In",
    responses={401: {"description": "Wrong email or password"}, 403: {"description": "User is deactivated"}},
)
async def login(credentials: LoginRequest, response: Response, session: SessionDep) -> LoginResponse:
    """
    Authenticate with email and password.

    The email is trimmed and lower-cased before lookup. On success the session
    token is returned and also set as an HTTP-only cookie.
    """
    auth_session, profile = await AuthService(session).login(credentials.email, credentials.password)
    response.set_cookie(
        key=settings.auth.cookie_name,
        value=auth_session.token,
        max_age=settings.auth.session_ttl_hours * 3600,
        httponly=True,
        samesite="lax",
    )
    return LoginResponse(
        access_token=auth_session.token,
        expires_at=auth_session.expires_at,
        user=ProfileRead.model_validate(profile),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Log Out")
async def logout(request: Request, response: Response, user: CurrentUserDep, session: SessionDep) -> Response:
    """Revoke the session used for this request."""
    await AuthService(session).logout(extract_token(request))
    response.delete_cookie(settings.auth.cookie_name)
    response.status_code = status.HTTP_204_NO_CONTENT
    return response


@router.get("/me", response_model=ProfileRead, summary="Current User")
async def me(user: CurrentUserDep) -> ProfileRead:
    return ProfileRead.model_validate(user)


@router.post("/users", response_model=ProfileRead, status_code=status.HTTP_201_CREATED, summary="Create User")
async def create_user(data: UserCreate, admin: AdminUserDep, session: SessionDep) -> ProfileRead:
    """Create a user with a password (admins only)."""
    profile = await AuthService(session).create_user(data)
    return ProfileRead.model_validate(profile)


@router.put("/users/{user_id}/password", status_code=status.HTTP_204_NO_CONTENT, summary="Reset Password")
async def reset_password(user_id: str, data: PasswordReset, admin: AdminUserDep, session: SessionDep) -> Response:
    """Set a new password for a user and revoke their open sessions (admins only)."""
    await AuthService(session).set_password(user_id, data.password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
