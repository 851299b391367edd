"""
HTTP layer - FastAPI application exposing slot availability.
"""

from .app import create_app

__all__ = ["create_app"]
