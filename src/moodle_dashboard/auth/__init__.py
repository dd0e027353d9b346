"""
Authentication module.

Session lifecycle on top of a Moodle web services token, persisted in a
signed cookie.
"""

from .cookies import COOKIE_MAX_AGE, COOKIE_NAME, ConfigCookie
from .session import AuthSession, LoginError, SessionState, normalize_base_url

__all__ = [
    "AuthSession",
    "ConfigCookie",
    "COOKIE_MAX_AGE",
    "COOKIE_NAME",
    "LoginError",
    "SessionState",
    "normalize_base_url",
]
