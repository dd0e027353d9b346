"""
Session lifecycle.

An `AuthSession` moves between three states:

    UNAUTHENTICATED -> VALIDATING -> AUTHENTICATED
    AUTHENTICATED   -> UNAUTHENTICATED   (logout or invalid token)

It holds the authenticated user and the Moodle client every other part of
the dashboard works through.
"""

import re
from enum import Enum
from typing import Callable

from ..config.models import MoodleConfig
from ..moodle import MoodleAPI, MoodleAPIError, MoodleNetworkError, MoodleUser, create_moodle_api
from ..utils.logging import get_logger
from .cookies import ConfigCookie

logger = get_logger(__name__)

SESSION_EXPIRED_MESSAGE = "Session expired. Please login again."
NETWORK_ERROR_MESSAGE = "Network error. Please check your Moodle URL."
INVALID_TOKEN_MESSAGE = "Invalid token. Please check your API token."


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    VALIDATING = "validating"
    AUTHENTICATED = "authenticated"


class LoginError(Exception):
    """Login failed; the message is meant for the user."""

    pass


def normalize_base_url(url: str) -> str:
    """Prefix ``https://`` when no scheme is given and drop one trailing slash."""
    url = url.strip()
    if not url.startswith("http"):
        url = "https://" + url
    return re.sub(r"/$", "", url)


class AuthSession:
    """Authentication state of one browser session."""

    def __init__(
        self,
        cookie: ConfigCookie,
        api_factory: Callable[[MoodleConfig], MoodleAPI] = create_moodle_api,
    ):
        self.cookie = cookie
        self.api_factory = api_factory
        self.state = SessionState.UNAUTHENTICATED
        self.user: MoodleUser | None = None
        self.api: MoodleAPI | None = None
        self.config: MoodleConfig | None = None
        self.message: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.api is not None

    def restore(self, cookie_value: str | None) -> bool:
        """
        Re-establish a session from a saved cookie.

        Returns:
            True if the session is authenticated afterwards. When a cookie was
            present but could not be validated, ``message`` explains why and
            the caller should clear the cookie.
        """
        self.message = None
        if not cookie_value:
            return False

        config = self.cookie.loads(cookie_value)
        if config is None:
            self._reset()
            self.message = SESSION_EXPIRED_MESSAGE
            return False

        self.state = SessionState.VALIDATING
        api = self.api_factory(config)
        try:
            if not api.validate_token():
                raise MoodleAPIError("Token rejected")
            user = api.get_user_info()
        except MoodleAPIError as e:
            logger.warning(f"Saved session for {config.base_url} is no longer valid: {e}")
            api.close()
            self._reset()
            self.message = SESSION_EXPIRED_MESSAGE
            return False

        self._authenticate(config, api, user)
        return True

    def login(self, config: MoodleConfig) -> MoodleUser:
        """
        Validate a config against Moodle and authenticate the session.

        The base URL is normalised before any request is made.

        Raises:
            LoginError: With a user-facing message
        """
        config = MoodleConfig(
            base_url=normalize_base_url(config.base_url),
            token=config.token,
            demo_mode=config.demo_mode,
        )

        self.state = SessionState.VALIDATING
        api = self.api_factory(config)
        try:
            user = api.get_user_info()
        except MoodleAPIError as e:
            api.close()
            self._reset()
            logger.error(f"Login to {config.base_url} failed: {e}")
            raise LoginError(self._login_message(e)) from e

        self._authenticate(config, api, user)
        logger.info(f"Welcome, {user.fullname}!")
        return user

    def logout(self) -> None:
        if self.api is not None:
            self.api.close()
        self._reset()
        logger.info("Logged out successfully")

    def cookie_value(self) -> str:
        """Signed cookie persisting the current config."""
        if self.config is None:
            raise RuntimeError("No authenticated session to persist")
        return self.cookie.dumps(self.config)

    def _authenticate(self, config: MoodleConfig, api: MoodleAPI, user: MoodleUser) -> None:
        self.config = config
        self.api = api
        self.user = user
        self.state = SessionState.AUTHENTICATED

    def _reset(self) -> None:
        self.config = None
        self.api = None
        self.user = None
        self.state = SessionState.UNAUTHENTICATED

    @staticmethod
    def _login_message(error: MoodleAPIError) -> str:
        if isinstance(error, MoodleNetworkError):
            return NETWORK_ERROR_MESSAGE
        if "token" in str(error).lower():
            return INVALID_TOKEN_MESSAGE
        return str(error) or "Failed to connect to Moodle"
