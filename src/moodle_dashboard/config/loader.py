"""Configuration loader for the dashboard service settings."""

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .models import DatabaseSettings, Settings

CONFIG_FILE_ENV = "MOODLE_DASHBOARD_CONFIG"


class ConfigLoader:
    """Loads settings from a YAML file, then applies environment overrides."""

    def __init__(self, config_dir: Path | None = None):
        """Initialize the config loader.

        Args:
            config_dir: Directory relative config paths resolve against.
                Defaults to the current working directory.
        """
        self.config_dir = config_dir or Path.cwd()

    def load(
        self,
        config_file: str | Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> Settings:
        """Build the settings.

        Args:
            config_file: Optional YAML file with base values
            env: Environment mapping to read overrides from. Defaults to os.environ

        Returns:
            Parsed Settings object
        """
        if env is None:
            env = os.environ

        data: dict[str, Any] = {}
        if config_file:
            data = self._load_yaml(self._resolve_path(config_file)) or {}

        settings = Settings.from_dict(data)
        self._apply_env(settings, env)
        return settings

    def _apply_env(self, settings: Settings, env: Mapping[str, str]) -> None:
        """Override settings with any non-empty environment variables."""

        def get(name: str) -> str | None:
            value = env.get(name)
            if value is None:
                return None
            value = value.strip()
            return value or None

        db = settings.database
        settings.database = DatabaseSettings(
            host=get("DB_HOST") or db.host,
            port=int(get("DB_PORT") or db.port),
            user=get("DB_USER") or db.user,
            password=get("DB_PASSWORD") or db.password,
            name=get("DB_NAME") or db.name,
        )

        settings.moodle_base_url = get("MOODLE_BASE_URL") or settings.moodle_base_url
        settings.moodle_ws_token = get("MOODLE_WS_TOKEN") or settings.moodle_ws_token
        settings.auth_secret = get("AUTH_SECRET") or settings.auth_secret
        settings.app_env = get("APP_ENV") or settings.app_env
        settings.log_level = get("LOG_LEVEL") or settings.log_level

        if get("DEMO_LATENCY_SCALE"):
            settings.demo_latency_scale = float(get("DEMO_LATENCY_SCALE"))
        if get("QUERY_STALE_TIME"):
            settings.query_stale_time = float(get("QUERY_STALE_TIME"))
        if get("DEFAULT_USER_ID"):
            settings.default_user_id = int(get("DEFAULT_USER_ID"))
        if get("COOKIE_SECURE"):
            settings.cookie_secure = get("COOKIE_SECURE").lower() in ("1", "true", "yes")

    def _resolve_path(self, file_path: str | Path) -> Path:
        """Resolve a config file path."""
        path = Path(file_path)
        if not path.is_absolute():
            path = self.config_dir / path
        return path

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load and parse a YAML file."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)


def load_settings(config_file: str | Path | None = None) -> Settings:
    """
    Load process settings.

    Reads `.env` if present (without overriding real environment variables),
    then the YAML file named by ``config_file`` or ``MOODLE_DASHBOARD_CONFIG``,
    then environment variables.
    """
    load_dotenv(override=False)
    config_file = config_file or os.environ.get(CONFIG_FILE_ENV)
    return ConfigLoader().load(config_file)
