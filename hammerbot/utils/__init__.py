"""
HammerBot - Utilities
=====================
"""

from .error_handler import ErrorContext, ErrorHandler

__all__ = [
    "ErrorContext",
    "ErrorHandler",
]
