"""Tests for settings loading."""

import pytest

from moodle_dashboard.config import ConfigLoader, DatabaseSettings, MoodleConfig, Settings


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / "settings.yml").write_text(
        """
database:
  host: db.internal
  port: 3307
  name: dashboard
moodle:
  base_url: https://moodle.yaml.test
auth_secret: from-yaml
query_stale_time: 120
""",
        encoding="utf-8",
    )
    return tmp_path


class TestConfigLoader:
    def test_defaults_without_file_or_env(self):
        settings = ConfigLoader().load(env={})
        assert settings.database == DatabaseSettings()
        assert settings.database.host == "mariadb"
        assert settings.default_user_id == 4
        assert settings.query_stale_time == 300.0
        assert settings.missing_required() == ["MOODLE_BASE_URL", "AUTH_SECRET"]

    def test_yaml_file(self, config_dir):
        settings = ConfigLoader(config_dir).load("settings.yml", env={})
        assert settings.database.host == "db.internal"
        assert settings.database.port == 3307
        assert settings.database.user == "app_user"
        assert settings.moodle_base_url == "https://moodle.yaml.test"
        assert settings.query_stale_time == 120.0
        assert settings.missing_required() == []

    def test_environment_wins_over_yaml(self, config_dir):
        env = {
            "DB_HOST": "db.env",
            "DB_PORT": "3310",
            "MOODLE_BASE_URL": "https://moodle.env.test",
            "DEMO_LATENCY_SCALE": "0",
            "COOKIE_SECURE": "true",
            "AUTH_SECRET": "",
        }
        settings = ConfigLoader(config_dir).load("settings.yml", env=env)
        assert settings.database.host == "db.env"
        assert settings.database.port == 3310
        assert settings.database.name == "dashboard"
        assert settings.moodle_base_url == "https://moodle.env.test"
        assert settings.demo_latency_scale == 0.0
        assert settings.cookie_secure is True
        # Empty variables are ignored
        assert settings.auth_secret == "from-yaml"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader(tmp_path).load("absent.yml", env={})


class TestModels:
    def test_moodle_config_uses_front_end_keys(self):
        config = MoodleConfig(base_url="https://m.test", token="t", demo_mode=True)
        assert config.to_dict() == {"baseUrl": "https://m.test", "token": "t", "demoMode": True}
        assert MoodleConfig.from_dict(config.to_dict()) == config

    def test_database_connect_args(self):
        args = DatabaseSettings(password="pw").connect_args()
        assert args == {
            "host": "mariadb",
            "port": 3306,
            "user": "app_user",
            "password": "pw",
            "database": "moodle_app",
        }

    def test_missing_required(self):
        assert Settings(moodle_base_url="https://m.test").missing_required() == ["AUTH_SECRET"]
