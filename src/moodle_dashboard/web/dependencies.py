"""FastAPI dependencies shared by the routers."""

from fastapi import Depends, Request

from ..auth import COOKIE_NAME
from ..config import Settings
from .db import ConnectionFactory
from .errors import NotAuthenticated
from .sessions import SessionContext, SessionStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_connect_db(request: Request) -> ConnectionFactory:
    return request.app.state.connect_db


def require_session(
    request: Request,
    sessions: SessionStore = Depends(get_sessions),
) -> SessionContext:
    """The caller's authenticated session; 401 (and a cleared cookie) otherwise."""
    context = sessions.get(request.cookies.get(COOKIE_NAME))
    if context is None:
        raise NotAuthenticated()
    return context
