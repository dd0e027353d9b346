"""
Utility module.

Logging setup shared by the service and the CLI.
"""

from .logging import setup_logging, get_logger

__all__ = ["setup_logging", "get_logger"]
