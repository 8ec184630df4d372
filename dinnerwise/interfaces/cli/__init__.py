"""
CLI Interface - Typer-based command-line tools.
"""

from .main import app

__all__ = ["app"]
