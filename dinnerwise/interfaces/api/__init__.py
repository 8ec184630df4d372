"""
API Interface - FastAPI REST API for recipe suggestions.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
