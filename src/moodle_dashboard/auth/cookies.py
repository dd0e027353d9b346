"""Signed cookie holding the session's Moodle config."""

from itsdangerous import BadData, URLSafeTimedSerializer

from ..config.models import MoodleConfig
from ..utils.logging import get_logger

logger = get_logger(__name__)

COOKIE_NAME = "moodle_config"
COOKIE_MAX_AGE = 7 * 24 * 60 * 60


class ConfigCookie:
    """Encodes `MoodleConfig` as a signed, timestamped cookie value."""

    def __init__(self, secret: str, max_age: int = COOKIE_MAX_AGE):
        self.max_age = max_age
        self._serializer = URLSafeTimedSerializer(secret, salt="moodle-config")

    def dumps(self, config: MoodleConfig) -> str:
        return self._serializer.dumps(config.to_dict())

    def loads(self, value: str | None) -> MoodleConfig | None:
        """Decode a cookie value; tampered, expired or malformed values give None."""
        if not value:
            return None
        try:
            data = self._serializer.loads(value, max_age=self.max_age)
        except BadData as e:
            logger.warning(f"Rejected session cookie: {e}")
            return None
        if not isinstance(data, dict):
            return None
        return MoodleConfig.from_dict(data)
