"""
HammerBot - IRC Package
=======================

Everything between raw socket lines and typed chat events: the wire
tokenizer, the tag parser, the event types and the classifier.
"""

from .classifier import classify
from .errors import MessageSourceError, TagParseError, WireParseError
from .models import RawEvent
from .tags import MessageTags, parse_message_tags
from .wire import parse_irc_line


__all__ = [
    "MessageSourceError",
    "MessageTags",
    "RawEvent",
    "TagParseError",
    "WireParseError",
    "classify",
    "parse_irc_line",
    "parse_message_tags",
]
