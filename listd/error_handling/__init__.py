"""
Error handling module for the catalog API.

Provides the error taxonomy, diagnostic logging and HTTP error mapping.
"""

from .errors import (
    GENERIC_ERROR_MESSAGE,
    ListdError,
    ValidationError,
    ConfigurationError,
    ExecutionError,
    NotFoundError,
    RecordingError,
)
from .error_handler import log_error, register_exception_handlers

__all__ = [
    'GENERIC_ERROR_MESSAGE',
    'ListdError',
    'ValidationError',
    'ConfigurationError',
    'ExecutionError',
    'NotFoundError',
    'RecordingError',
    'log_error',
    'register_exception_handlers',
]
