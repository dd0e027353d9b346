"""Tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from moodle_dashboard import cli
from moodle_dashboard.moodle import DemoMoodleAPI, MoodleAuthError

runner = CliRunner()

ENV = {"COLUMNS": "200", "DEMO_LATENCY_SCALE": "0"}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("MOODLE_BASE_URL", "MOODLE_WS_TOKEN", "MOODLE_DASHBOARD_CONFIG"):
        monkeypatch.delenv(name, raising=False)


def invoke(*args):
    return runner.invoke(cli.app, list(args), env=ENV)


def test_courses_demo():
    result = invoke("courses", "--demo")
    assert result.exit_code == 0
    for shortname in ("WEB101", "REACT201", "DB101"):
        assert shortname in result.output


def test_site_info_demo():
    result = invoke("site-info", "--demo")
    assert result.exit_code == 0
    assert "Demo Moodle Site" in result.output


def test_search_demo():
    result = invoke("search", "sql", "--demo")
    assert result.exit_code == 0
    assert "SQL Joins Practice Quiz" in result.output
    assert "HTML Basics Tutorial" not in result.output


def test_search_without_results():
    result = invoke("search", "astrophysics", "--demo")
    assert result.exit_code == 0
    assert "No results" in result.output


def test_assignments_of_one_course():
    result = invoke("assignments", "--course", "1", "--demo")
    assert result.exit_code == 0
    assert "Assignments (1)" in result.output


def test_grades_overview_demo():
    result = invoke("grades", "--demo")
    assert result.exit_code == 0
    assert "87.5%" in result.output


def test_unread_notifications():
    result = invoke("notifications", "--filter", "unread", "--demo")
    assert result.exit_code == 0
    assert "New assignment posted" in result.output
    assert "Grade updated" not in result.output


def test_invalid_notification_filter():
    result = invoke("notifications", "--filter", "starred", "--demo")
    assert result.exit_code == 1


def test_live_mode_needs_url_and_token():
    result = invoke("courses")
    assert result.exit_code == 1
    assert "required" in result.output


def test_moodle_error_exits_with_code_1(monkeypatch):
    class Rejecting(DemoMoodleAPI):
        def get_user_courses(self, userid=None):
            raise MoodleAuthError("Invalid token - token not found", "invalidtoken")

    monkeypatch.setattr(cli, "create_moodle_api", lambda config, latency_scale: Rejecting(config, latency_scale=0))

    result = invoke("courses", "--base-url", "moodle.test", "--token", "bad")
    assert result.exit_code == 1
    assert "Invalid token - token not found" in result.output
