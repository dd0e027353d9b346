"""Shared fixtures for the moodle_dashboard tests."""

import json
from typing import Any, Callable
from urllib.parse import parse_qsl

import httpx
import pytest

from moodle_dashboard.config import MoodleConfig, Settings
from moodle_dashboard.moodle import DemoMoodleAPI, LiveMoodleAPI

MOODLE_URL = "https://moodle.test"

SITE_INFO = {
    "sitename": "Test Moodle",
    "siteurl": MOODLE_URL,
    "userid": 7,
    "username": "student7",
    "firstname": "Ada",
    "lastname": "Lovelace",
    "fullname": "Ada Lovelace",
    "useremail": "ada@example.edu",
}


class FakeMoodle:
    """In-process stand-in for a Moodle site, served through httpx.MockTransport.

    ``responses`` maps a wsfunction to a JSON payload or to a callable taking
    the flattened request params. Every request is recorded.
    """

    def __init__(self, responses: dict[str, Any] | None = None):
        self.responses = {"core_webservice_get_site_info": SITE_INFO, **(responses or {})}
        self.calls: list[dict[str, str]] = []
        self.uploads: list[httpx.Request] = []
        self.upload_itemid = 555

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/webservice/upload.php"):
            self.uploads.append(request)
            body = request.content.decode("latin-1")
            filename = body.split('filename="')[1].split('"')[0]
            return httpx.Response(
                200,
                json=[{"component": "user", "filearea": "draft", "itemid": self.upload_itemid, "filename": filename}],
            )

        params = dict(parse_qsl(request.url.query.decode()))
        self.calls.append(params)
        payload = self.responses.get(params.get("wsfunction"))
        if callable(payload):
            payload = payload(params)
        if payload is None:
            payload = {
                "exception": "invalid_parameter_exception",
                "errorcode": "invalidrecord",
                "message": f"No fake response for {params.get('wsfunction')}",
            }
        return httpx.Response(200, content=json.dumps(payload), headers={"Content-Type": "application/json"})

    def functions(self) -> list[str]:
        return [c["wsfunction"] for c in self.calls]

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_moodle() -> FakeMoodle:
    return FakeMoodle()


@pytest.fixture
def live_api(fake_moodle) -> LiveMoodleAPI:
    api = LiveMoodleAPI(MoodleConfig(base_url=MOODLE_URL, token="secret-token"), http_client=fake_moodle.client())
    yield api
    api.close()


@pytest.fixture
def demo_api() -> DemoMoodleAPI:
    return DemoMoodleAPI(MoodleConfig(base_url="", token="", demo_mode=True), latency_scale=0)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        moodle_base_url=MOODLE_URL,
        moodle_ws_token="service-token",
        auth_secret="test-secret",
        app_env="test",
        demo_latency_scale=0.0,
    )


class FakeCursor:
    def __init__(self, connection: "FakeConnection"):
        self.connection = connection
        self.rowcount = 0

    def execute(self, sql: str, params: tuple = ()) -> None:
        if self.connection.error is not None:
            raise self.connection.error
        self.connection.executed.append((sql, params))
        self.rowcount = 1

    def fetchall(self) -> list[dict]:
        return list(self.connection.rows)

    def close(self) -> None:
        pass


class FakeConnection:
    def __init__(self, rows: list[dict] | None = None, error: Exception | None = None):
        self.rows = rows or []
        self.error = error
        self.executed: list[tuple[str, tuple]] = []
        self.committed = False
        self.closed = False

    def cursor(self, dictionary: bool = False) -> FakeCursor:
        return FakeCursor(self)

    def commit(self) -> None:
        self.committed = True

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_db() -> Callable[..., FakeConnection]:
    """Connection factory whose connections share one row set; tweak ``.rows``/``.error``."""
    connection = FakeConnection()

    def connect() -> FakeConnection:
        return connection

    connect.connection = connection
    return connect
