"""
Shared FastAPI dependencies.

The authenticated principal comes from the session token, sent either as the
``sid`` cookie (browser console) or the ``x-api-token`` header (scripts).
"""

import logging

from fastapi import Depends, Header, HTTPException, Request

from library_desk.circulation import CirculationError, LibraryContext
from library_desk.circulation.models import User
from library_desk.config import Settings

logger = logging.getLogger(__name__)


def get_library(request: Request) -> LibraryContext:
    return request.app.state.library


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def session_token(
    request: Request,
    x_api_token: str | None = Header(default=None, alias="x-api-token"),
) -> str | None:
    cookie_name = request.app.state.settings.session_cookie_name
    return x_api_token or request.cookies.get(cookie_name)


def current_user(
    token: str | None = Depends(session_token),
    library: LibraryContext = Depends(get_library),
) -> User | None:
    return library.accounts.principal(token)


def require_login(user: User | None = Depends(current_user)) -> User:
    """Raises **401** if the request carries no valid session."""
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"status": "unauthorized", "message": "Not logged in"},
        )
    return user


def require_librarian(user: User | None = Depends(current_user)) -> User:
    """Raises **403** unless the session belongs to a librarian."""
    if user is None or not user.is_librarian:
        logger.warning(
            "Librarian-only endpoint refused for %s",
            user.email if user else "anonymous",
        )
        raise HTTPException(
            status_code=403,
            detail={"status": "forbidden", "message": "Librarian only"},
        )
    return user


def require_device(
    settings: Settings = Depends(get_settings),
    x_device_token: str | None = Header(default=None, alias="x-device-token"),
) -> None:
    """Check the shared device secret when one is configured."""
    if settings.device_token and x_device_token != settings.device_token:
        logger.warning("Rejected device request with bad x-device-token")
        raise HTTPException(
            status_code=401,
            detail={"status": "unauthorized", "message": "Invalid device token"},
        )


def http_error(exc: CirculationError, status_code: int = 400) -> HTTPException:
    """Translate a circulation error into the API's error envelope."""
    return HTTPException(
        status_code=status_code,
        detail={"status": exc.code, "message": str(exc)},
    )
