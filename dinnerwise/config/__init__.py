"""
Configuration - Application settings, error taxonomy, and logging setup.
"""

from .errors import (
    ConfigurationError,
    DinnerwiseError,
    ErrorCode,
    ExhaustedError,
    InvalidRequestError,
    LedgerWriteError,
    PermanentError,
    TransientError,
)
from .log_setup import configure_logging
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "configure_logging",
    # Errors
    "ErrorCode",
    "DinnerwiseError",
    "InvalidRequestError",
    "TransientError",
    "PermanentError",
    "ExhaustedError",
    "LedgerWriteError",
    "ConfigurationError",
]
