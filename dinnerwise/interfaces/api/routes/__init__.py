"""
API Routes.
"""

from . import health, recipes

__all__ = ["health", "recipes"]
