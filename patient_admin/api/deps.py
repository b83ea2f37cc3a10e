"""Shared dependencies for routes."""

from collections.abc import Awaitable, Callable
from pathlib import Path
from urllib.parse import urlsplit

from fastapi import Depends, Request, Response
from fastapi.templating import Jinja2Templates

from patient_admin.config import AppConfig
from patient_admin.models.session import BrowserSession
from patient_admin.services.patients_data import PatientsDataAccess
from patient_admin.services.session_manager import InMemorySessionManager

SESSION_COOKIE = "patient_admin_session"

templates = Jinja2Templates(directory=Path(__file__).resolve().parent.parent / "templates")


async def browser_session_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Keep the session cookie current for requests that used a BrowserSession."""
    response = await call_next(request)

    session: BrowserSession | None = getattr(request.state, "browser_session", None)
    if session is not None and request.cookies.get(SESSION_COOKIE) != session.session_id:
        response.set_cookie(SESSION_COOKIE, session.session_id, httponly=True, samesite="lax")
    return response


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_browser_session(request: Request) -> BrowserSession:
    """The caller's BrowserSession, created on first use by a page."""
    session: BrowserSession | None = getattr(request.state, "browser_session", None)
    if session is None:
        session_manager: InMemorySessionManager = request.app.state.session_manager
        session = session_manager.get_or_create_session(request.cookies.get(SESSION_COOKIE))
        request.state.browser_session = session
    return session


def get_patients_data(
    request: Request, session: BrowserSession = Depends(get_browser_session)
) -> PatientsDataAccess:
    """Data access bound to the caller's query cache and toast queue."""
    return PatientsDataAccess(
        service=request.app.state.patients_service,
        cache=session.query_cache,
        notify=session.push_toast,
    )


def safe_return_to(value: str | None, default: str = "/") -> str:
    """Accept only same-site relative paths as a navigation target."""
    # Browsers read "//host" and "/\host" as another site
    if not value or not value.startswith("/") or value.startswith("//") or "\\" in value:
        return default
    parts = urlsplit(value)
    if parts.scheme or parts.netloc:
        return default
    return value
