"""
Web module.

The HTTP service behind the dashboard front end.
"""

from .app import create_app

__all__ = ["create_app"]
