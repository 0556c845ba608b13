"""
Admin HTTP API

FastAPI server for runtime level control.
"""

from .server import create_app

__all__ = ["create_app"]
