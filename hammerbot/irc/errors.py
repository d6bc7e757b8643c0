"""
HammerBot - Protocol Errors
===========================

Exceptions raised while tokenizing lines, decoding tags and reading from
the message source.
"""

from typing import Optional


class WireParseError(ValueError):
    """A raw line could not be tokenized into a RawEvent."""

    def __init__(self, message: str, line: str = "") -> None:
        super().__init__(message)
        self.line = line


class TagParseError(ValueError):
    """
    A message tag carried a value that could not be decoded.

    Attributes:
        key: Name of the offending tag (e.g. "room-id").
        value: Raw value that failed to parse.
    """

    def __init__(self, key: str, value: Optional[str]) -> None:
        super().__init__(f"Invalid value for tag '{key}': {value!r}")
        self.key = key
        self.value = value


class MessageSourceError(Exception):
    """Reading the next raw event from the message source failed."""

    pass


__all__ = [
    "MessageSourceError",
    "TagParseError",
    "WireParseError",
]
