"""Login, session restore and logout."""

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, ConfigDict, Field

from ...auth import COOKIE_MAX_AGE, COOKIE_NAME, LoginError
from ...config import Settings
from ...config.models import MoodleConfig
from ...utils.logging import get_logger
from ..dependencies import get_sessions, get_settings
from ..errors import error_response
from ..sessions import SessionStore

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base_url: str = Field(alias="baseUrl", min_length=1)
    token: str = ""
    demo_mode: bool = Field(default=False, alias="demoMode")


@router.post("/login")
def login(
    payload: LoginRequest,
    response: Response,
    sessions: SessionStore = Depends(get_sessions),
    settings: Settings = Depends(get_settings),
):
    config = MoodleConfig(base_url=payload.base_url, token=payload.token, demo_mode=payload.demo_mode)
    try:
        context, cookie_value = sessions.login(config)
    except LoginError as e:
        return error_response(401, str(e))

    response.set_cookie(
        COOKIE_NAME,
        cookie_value,
        max_age=COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    user = context.session.user
    return {
        "success": True,
        "message": f"Welcome, {user.fullname}!",
        "user": user.to_dict(),
        "demoMode": context.session.config.demo_mode,
    }


@router.get("/session")
def current_session(
    request: Request,
    response: Response,
    sessions: SessionStore = Depends(get_sessions),
):
    """Validate the saved cookie, as the front end does on page load."""
    context, message = sessions.restore(request.cookies.get(COOKIE_NAME))
    if context is None:
        if message:
            response.delete_cookie(COOKIE_NAME)
        return {"authenticated": False, "user": None, "message": message}

    return {
        "authenticated": True,
        "user": context.session.user.to_dict(),
        "demoMode": context.session.config.demo_mode,
    }


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    sessions: SessionStore = Depends(get_sessions),
):
    sessions.discard(request.cookies.get(COOKIE_NAME))
    response.delete_cookie(COOKIE_NAME)
    return {"success": True, "message": "Logged out successfully"}
