"""
Account and session endpoints.

POST /auth/register
    ``{"name", "email", "password", "role"}`` — role is ``librarian`` or
    anything else for ``student``.  **400** on missing fields, **409** if the
    email is taken.

POST /auth/login
    ``{"email", "password"}`` — returns the user and a session ``token``; the
    token is also set as the session cookie.  **401** on bad credentials.

POST /auth/logout
    Discards the session.

GET /auth/me
    ``{"user": {...}}`` or ``{"user": null}``.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from library_desk.api.deps import (
    current_user,
    get_library,
    get_settings,
    http_error,
    session_token,
)
from library_desk.api.routes.catalog import UserOut
from library_desk.circulation import CirculationError, Conflict, LibraryContext
from library_desk.circulation.models import User
from library_desk.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter()


class RegisterRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class LoginResponse(BaseModel):
    ok: bool
    token: str
    user: UserOut


class MeResponse(BaseModel):
    user: UserOut | None


class OkResponse(BaseModel):
    ok: bool


@router.post("/auth/register", response_model=UserOut)
def register(
    data: RegisterRequest, library: LibraryContext = Depends(get_library)
) -> UserOut:
    try:
        user = library.accounts.register(
            data.name, data.email, data.password, data.role
        )
    except Conflict as exc:
        raise http_error(exc, status_code=409)
    except CirculationError as exc:
        raise http_error(exc)
    return UserOut.model_validate(user)


@router.post("/auth/login", response_model=LoginResponse)
def login(
    data: LoginRequest,
    response: Response,
    library: LibraryContext = Depends(get_library),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    if not data.email or not data.password:
        raise HTTPException(
            status_code=400,
            detail={
                "status": "invalid_argument",
                "message": "email and password required",
            },
        )

    user = library.accounts.authenticate(data.email, data.password)
    if user is None:
        logger.warning("Failed login for %s", data.email)
        raise HTTPException(
            status_code=401,
            detail={"status": "unauthorized", "message": "Invalid credentials"},
        )

    token = library.accounts.open_session(user)
    response.set_cookie(settings.session_cookie_name, token, samesite="lax")
    logger.info("Login: user %d <%s>", user.id, user.email)
    return LoginResponse(ok=True, token=token, user=UserOut.model_validate(user))


@router.post("/auth/logout", response_model=OkResponse)
def logout(
    response: Response,
    token: str | None = Depends(session_token),
    library: LibraryContext = Depends(get_library),
    settings: Settings = Depends(get_settings),
) -> OkResponse:
    if token:
        library.accounts.close_session(token)
    response.delete_cookie(settings.session_cookie_name)
    return OkResponse(ok=True)


@router.get("/auth/me", response_model=MeResponse)
def me(user: User | None = Depends(current_user)) -> MeResponse:
    return MeResponse(user=UserOut.model_validate(user) if user else None)
