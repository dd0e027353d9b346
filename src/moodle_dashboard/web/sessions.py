"""Server-side registry of authenticated sessions, keyed by cookie value."""

import threading
from dataclasses import dataclass
from typing import Callable

from ..auth import AuthSession, ConfigCookie
from ..config.models import MoodleConfig
from ..moodle import MoodleAPI, QueryCache
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SessionContext:
    """An authenticated session and the query cache of its reads."""

    session: AuthSession
    cache: QueryCache

    @property
    def api(self) -> MoodleAPI:
        return self.session.api

    @property
    def user_id(self) -> int:
        return self.session.user.id


class SessionStore:
    """
    Keeps validated sessions so the token is checked once per cookie, not per request.
    """

    def __init__(
        self,
        cookie: ConfigCookie,
        api_factory: Callable[[MoodleConfig], MoodleAPI],
        stale_time: float = 300.0,
    ):
        self.cookie = cookie
        self.api_factory = api_factory
        self.stale_time = stale_time
        self._sessions: dict[str, SessionContext] = {}
        self._lock = threading.Lock()

    def new_session(self) -> AuthSession:
        return AuthSession(self.cookie, api_factory=self.api_factory)

    def restore(self, cookie_value: str | None) -> tuple[SessionContext | None, str | None]:
        """
        Validate a cookie afresh, as on page load.

        Returns:
            The session context (or None) and a user-facing message when the
            cookie was present but is no longer usable.
        """
        if cookie_value:
            self.discard(cookie_value)

        session = self.new_session()
        if not session.restore(cookie_value):
            return None, session.message

        context = SessionContext(session=session, cache=QueryCache(self.stale_time))
        with self._lock:
            self._sessions[cookie_value] = context
        return context, None

    def get(self, cookie_value: str | None) -> SessionContext | None:
        """The session for a cookie, restoring it on first use.

        A cached session is only returned while its cookie is still within
        its signed lifetime; an expired one is logged out and forgotten.
        """
        if not cookie_value:
            return None
        with self._lock:
            context = self._sessions.get(cookie_value)
        if context is not None:
            if self.cookie.loads(cookie_value) is not None:
                return context
            self.discard(cookie_value)
            return None
        context, _ = self.restore(cookie_value)
        return context

    def prune(self) -> int:
        """Log out every session whose cookie has expired; returns how many."""
        with self._lock:
            values = list(self._sessions)
        expired = [v for v in values if self.cookie.loads(v) is None]
        for value in expired:
            self.discard(value)
        if expired:
            logger.info(f"Pruned {len(expired)} expired session(s)")
        return len(expired)

    def login(self, config: MoodleConfig) -> tuple[SessionContext, str]:
        """
        Log in with a config.

        Returns:
            The new session context and the cookie value persisting it

        Raises:
            LoginError: If Moodle rejects the config
        """
        self.prune()
        session = self.new_session()
        session.login(config)
        cookie_value = session.cookie_value()
        context = SessionContext(session=session, cache=QueryCache(self.stale_time))
        with self._lock:
            self._sessions[cookie_value] = context
        return context, cookie_value

    def discard(self, cookie_value: str | None) -> None:
        """Log out and forget the session of a cookie."""
        if not cookie_value:
            return
        with self._lock:
            context = self._sessions.pop(cookie_value, None)
        if context is not None:
            context.session.logout()

    def close(self) -> None:
        with self._lock:
            contexts = list(self._sessions.values())
            self._sessions.clear()
        for context in contexts:
            context.session.logout()
