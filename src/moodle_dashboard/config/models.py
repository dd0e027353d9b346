"""Configuration data models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class MoodleConfig:
    """Connection settings for one Moodle session.

    This is the object persisted in the session cookie, serialised with the
    camelCase keys the browser front end uses.
    """

    base_url: str
    token: str
    demo_mode: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MoodleConfig":
        return cls(
            base_url=data.get("baseUrl", data.get("base_url", "")) or "",
            token=data.get("token", "") or "",
            demo_mode=bool(data.get("demoMode", data.get("demo_mode", False))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "baseUrl": self.base_url,
            "token": self.token,
            "demoMode": self.demo_mode,
        }


@dataclass
class DatabaseSettings:
    """MariaDB connection settings for the SQL-backed routes."""

    host: str = "mariadb"
    port: int = 3306
    user: str = "app_user"
    password: str = ""
    name: str = "moodle_app"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DatabaseSettings":
        return cls(
            host=data.get("host", "mariadb"),
            port=int(data.get("port", 3306)),
            user=data.get("user", "app_user"),
            password=data.get("password", ""),
            name=data.get("name", "moodle_app"),
        )

    def connect_args(self) -> dict[str, Any]:
        """Keyword arguments for ``mysql.connector.connect``."""
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "database": self.name,
        }


@dataclass
class Settings:
    """Process-wide settings, read once at start-up."""

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    moodle_base_url: str | None = None
    moodle_ws_token: str | None = None
    auth_secret: str | None = None
    app_env: str = "development"
    log_level: str = "INFO"
    demo_latency_scale: float = 1.0
    query_stale_time: float = 300.0
    default_user_id: int = 4
    cookie_secure: bool = False

    # Settings /api/health reports as missing
    REQUIRED = ("moodle_base_url", "auth_secret")
    ENV_NAMES = {
        "moodle_base_url": "MOODLE_BASE_URL",
        "auth_secret": "AUTH_SECRET",
    }

    def missing_required(self) -> list[str]:
        """Environment names of required settings that are unset."""
        return [self.ENV_NAMES[name] for name in self.REQUIRED if not getattr(self, name)]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        moodle = data.get("moodle", {}) or {}
        return cls(
            database=DatabaseSettings.from_dict(data.get("database", {}) or {}),
            moodle_base_url=moodle.get("base_url"),
            moodle_ws_token=moodle.get("ws_token"),
            auth_secret=data.get("auth_secret"),
            app_env=data.get("app_env", "development"),
            log_level=data.get("log_level", "INFO"),
            demo_latency_scale=float(data.get("demo_latency_scale", 1.0)),
            query_stale_time=float(data.get("query_stale_time", 300.0)),
            default_user_id=int(data.get("default_user_id", 4)),
            cookie_secure=bool(data.get("cookie_secure", False)),
        )
