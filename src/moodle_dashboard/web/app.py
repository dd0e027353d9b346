"""
FastAPI application serving the dashboard front end.

Routes:
    /auth/*     session lifecycle (login, restore, logout)
    /moodle/*   Moodle operations on behalf of the logged-in user
    /api/*      MariaDB-backed listings, submissions and health
"""

import secrets
import time
from contextlib import asynccontextmanager
from functools import partial
from typing import Callable

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..auth import ConfigCookie
from ..config import Settings, load_settings
from ..config.models import MoodleConfig
from ..moodle import MoodleAPI, create_moodle_api
from ..utils.logging import get_logger
from .db import ConnectionFactory, connection_factory
from .errors import register_error_handlers
from .routes import database, health, moodle, session
from .sessions import SessionStore

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app.state.sessions.close()


def create_app(
    settings: Settings | None = None,
    *,
    http_client: httpx.Client | None = None,
    api_factory: Callable[[MoodleConfig], MoodleAPI] | None = None,
    connect_db: ConnectionFactory | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Process settings. Loaded from the environment when omitted
        http_client: HTTP client shared by live Moodle sessions and the health probe
        api_factory: Builds the Moodle client for a session config
        connect_db: Opens a database connection for the SQL routes
    """
    if settings is None:
        settings = load_settings()

    secret = settings.auth_secret
    if not secret:
        logger.warning("AUTH_SECRET is not set; session cookies will not survive a restart")
        secret = secrets.token_urlsafe(32)

    if api_factory is None:
        api_factory = partial(
            create_moodle_api,
            latency_scale=settings.demo_latency_scale,
            http_client=http_client,
        )

    app = FastAPI(title="Moodle Dashboard", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.http_client = http_client
    app.state.connect_db = connect_db or connection_factory(settings.database)
    app.state.sessions = SessionStore(
        ConfigCookie(secret),
        api_factory=api_factory,
        stale_time=settings.query_stale_time,
    )

    register_error_handlers(app)
    app.include_router(session.router)
    app.include_router(moodle.router)
    app.include_router(database.router)
    app.include_router(health.router)

    logger.info(f"Moodle Dashboard {__version__} ready ({settings.app_env})")
    return app
