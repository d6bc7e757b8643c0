"""
HammerBot - Error Handler
=========================

Provides detailed error context and consistent logging for failures that
the session survives (send failures, read errors) and for the few that
end it (startup errors).

Features:
- Detailed error context with stack traces
- Error categorization (transport, protocol, config)
- Recovery suggestions
- Critical error file logging
"""

import json
import sys
import traceback
from datetime import datetime
from typing import Any, Dict

from hammerbot.core.config import ConfigValidationError
from hammerbot.core.logger import logger
from hammerbot.irc.errors import MessageSourceError, TagParseError, WireParseError


class ErrorContext:
    """Captures and formats detailed error context"""

    @staticmethod
    def get_full_context(e: Exception, location: str, **kwargs) -> Dict[str, Any]:
        """
        Get comprehensive error context.

        Args:
            e: The exception
            location: Where the error occurred
            **kwargs: Additional context (nickname, text, etc.)

        Returns:
            Dictionary with full error context
        """
        return {
            'timestamp': datetime.now().isoformat(),
            'location': location,
            'error_type': type(e).__name__,
            'error_message': str(e),
            'traceback': ''.join(traceback.format_exception(type(e), e, e.__traceback__)),
            'python_version': sys.version,
            'additional_context': kwargs,
        }


class ErrorHandler:
    """Error handling with context and recovery hints"""

    ERROR_CATEGORIES = {
        'config': (ConfigValidationError,),
        'protocol': (WireParseError, TagParseError),
        'transport': (MessageSourceError, ConnectionError, TimeoutError, OSError),
    }

    RECOVERY_SUGGESTIONS = {
        'config': "Check the .env file against the documented variables",
        'protocol': "Malformed input from the server - the event was skipped",
        'transport': "Connection issue - check network access and the IRC server settings",
    }

    @classmethod
    def categorize_error(cls, e: Exception) -> str:
        """
        Categorize the error type.

        Args:
            e: The exception

        Returns:
            Error category string
        """
        for category, error_types in cls.ERROR_CATEGORIES.items():
            if isinstance(e, error_types):
                return category
        return 'general'

    @classmethod
    def get_recovery_suggestion(cls, category: str) -> str:
        """Get recovery suggestion for an error category."""
        return cls.RECOVERY_SUGGESTIONS.get(category, "Unexpected error - check logs for details")

    @classmethod
    def handle(cls, e: Exception, location: str, critical: bool = False, **context) -> None:
        """
        Handle an error with full context.

        Args:
            e: The exception
            location: Where the error occurred
            critical: Whether this error stops the bot
            **context: Additional context, logged as tree details
        """
        category = cls.categorize_error(e)
        suggestion = cls.get_recovery_suggestion(category)
        full_context = ErrorContext.get_full_context(e, location, **context)

        error_msg = f"[{category.upper()}] in {location}"
        details = [(key, str(value)) for key, value in context.items()]
        details.append(("Recovery", suggestion))

        if critical:
            logger.critical(
                f"CRITICAL ERROR {error_msg}: {full_context['error_type']} - {full_context['error_message']}",
                details,
            )
            logger.info(f"Traceback:\n{full_context['traceback']}")
            cls._store_critical_error(full_context)
        else:
            logger.error(
                f"ERROR {error_msg}: {full_context['error_type']} - {str(e)[:100]}",
                details,
            )

    @staticmethod
    def _store_critical_error(context: Dict[str, Any]) -> None:
        """
        Store critical error for later analysis.

        Args:
            context: Full error context
        """
        error_dir = logger.logs_dir / 'errors'
        try:
            error_dir.mkdir(exist_ok=True, parents=True)
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            error_file = error_dir / f"error_{timestamp}.json"
            with open(error_file, 'w', encoding='utf-8') as f:
                json.dump(context, f, indent=2, default=str)
            logger.info(f"Critical error saved to {error_file}")
        except OSError as save_error:
            logger.warning(f"Failed to save error details: {save_error}")


__all__ = [
    "ErrorContext",
    "ErrorHandler",
]
