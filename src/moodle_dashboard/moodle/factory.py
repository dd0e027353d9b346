"""Construction of the Moodle client for a session."""

import httpx

from ..config.models import MoodleConfig
from .api import MoodleAPI
from .demo import DemoMoodleAPI
from .live import LiveMoodleAPI


def create_moodle_api(
    config: MoodleConfig,
    latency_scale: float = 1.0,
    http_client: httpx.Client | None = None,
) -> MoodleAPI:
    """
    Create the client matching a session config.

    Args:
        config: Session config; ``demo_mode`` selects the fixture client
        latency_scale: Delay multiplier for the demo client
        http_client: HTTP client for the live client (tests inject one)

    Returns:
        A DemoMoodleAPI or LiveMoodleAPI instance
    """
    if config.demo_mode:
        return DemoMoodleAPI(config, latency_scale=latency_scale)
    return LiveMoodleAPI(config, http_client=http_client)
