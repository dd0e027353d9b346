"""Liveness and configuration check, optionally probing Moodle."""

import time
from datetime import datetime, timezone

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ... import __version__
from ...config import Settings
from ...utils.logging import get_logger
from ..dependencies import get_settings

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["health"])

PROBE_TIMEOUT = 5.0

ENDPOINTS = {
    "health": "/api/health",
    "health-full": "/api/health?full=true",
}


def probe_moodle(settings: Settings, client: httpx.Client | None = None) -> str:
    """
    Call core_webservice_get_site_info with the service token.

    Returns:
        "connected" on a 2xx response, "error" on any other status,
        "unreachable" when no response arrived within the timeout
    """
    url = f"{settings.moodle_base_url.rstrip('/')}/webservice/rest/server.php"
    params = {
        "wstoken": settings.moodle_ws_token,
        "wsfunction": "core_webservice_get_site_info",
        "moodlewsrestformat": "json",
    }
    headers = {"User-Agent": f"Moodle-Dashboard/{__version__}"}

    own_client = client is None
    if own_client:
        client = httpx.Client()
    try:
        response = client.get(url, params=params, headers=headers, timeout=PROBE_TIMEOUT)
    except (httpx.RequestError, httpx.InvalidURL) as e:
        logger.warning(f"Moodle probe failed: {e}")
        return "unreachable"
    finally:
        if own_client:
            client.close()

    return "connected" if response.is_success else "error"


@router.get("/health")
def health(
    request: Request,
    full: bool = False,
    settings: Settings = Depends(get_settings),
):
    started = time.perf_counter()
    try:
        checks = {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "environment": settings.app_env,
            "version": __version__,
        }

        missing = settings.missing_required()
        if missing:
            return JSONResponse(
                {
                    **checks,
                    "status": "unhealthy",
                    "errors": [f"Missing environment variables: {', '.join(missing)}"],
                },
                status_code=503,
            )

        moodle = "unknown"
        if full:
            moodle = probe_moodle(settings, request.app.state.http_client)

        elapsed_ms = round((time.perf_counter() - started) * 1000)
        return {
            **checks,
            "moodle": moodle,
            "responseTime": f"{elapsed_ms}ms",
            "endpoints": ENDPOINTS,
        }

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            {
                "status": "unhealthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "error": str(e),
            },
            status_code=500,
        )
