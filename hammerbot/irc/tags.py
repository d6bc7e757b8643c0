"""
HammerBot - Message Tag Parser
==============================

Decodes the IRCv3 tags attached to chat messages into typed fields.

DESIGN:
    Parsing is all-or-nothing: a numeric tag that does not parse rejects
    the whole tag set, so a message is never half-applied to the roster.
    Unknown keys are only logged; the platform adds tags regularly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

from hammerbot.core.logger import logger
from hammerbot.irc.errors import TagParseError
from hammerbot.irc.models import Tag


# =============================================================================
# User Type
# =============================================================================

class UserType(Enum):
    """Known values of the ``user-type`` tag."""

    NONE = ""
    MOD = "mod"
    GLOBAL_MOD = "global_mod"
    ADMIN = "admin"
    STAFF = "staff"


@dataclass(frozen=True)
class OtherUserType:
    """A ``user-type`` value this bot does not know about."""

    value: str


AnyUserType = Union[UserType, OtherUserType]


def parse_user_type(value: Optional[str]) -> AnyUserType:
    """
    Map a ``user-type`` tag value to a UserType.

    An empty or missing value means a regular user.
    """
    if not value:
        return UserType.NONE
    try:
        return UserType(value)
    except ValueError:
        return OtherUserType(value)


# =============================================================================
# Message Tags
# =============================================================================

@dataclass(frozen=True)
class MessageTags:
    """
    Typed view over the tags of one chat message.

    Every field is optional: None means the tag was not sent.
    """

    display_name: Optional[str] = None
    color: Optional[str] = None
    message_id: Optional[str] = None
    is_mod: Optional[bool] = None
    is_subscriber: Optional[bool] = None
    is_turbo: Optional[bool] = None
    room_id: Optional[int] = None
    user_id: Optional[int] = None
    user_type: Optional[AnyUserType] = None

    @property
    def is_paying(self) -> bool:
        """Whether any paid-support signal is set."""
        return bool(self.is_subscriber or self.is_turbo)


IGNORED_TAGS = frozenset({"badges", "emotes"})


def _parse_flag(value: Optional[str]) -> bool:
    return value == "1"


def _parse_id(key: str, value: Optional[str]) -> int:
    """
    Parse a non-negative integer tag.

    Raises:
        TagParseError: If the value is missing, empty or not a
            non-negative integer.
    """
    if not value or not (value.isascii() and value.isdigit()):
        raise TagParseError(key, value)
    return int(value)


def parse_message_tags(tags: Iterable[Tag]) -> MessageTags:
    """
    Decode a tag list into MessageTags.

    Args:
        tags: Ordered (key, value) pairs; value may be None.

    Returns:
        The decoded tags.

    Raises:
        TagParseError: If ``room-id`` or ``user-id`` is not a non-negative
            integer. No partial result is returned.
    """
    fields = {}

    for key, value in tags:
        if key in IGNORED_TAGS:
            continue
        if key == "color":
            fields["color"] = value or None
        elif key == "display-name":
            fields["display_name"] = value or None
        elif key == "id":
            fields["message_id"] = value or None
        elif key == "mod":
            fields["is_mod"] = _parse_flag(value)
        elif key == "subscriber":
            fields["is_subscriber"] = _parse_flag(value)
        elif key == "turbo":
            fields["is_turbo"] = _parse_flag(value)
        elif key == "room-id":
            fields["room_id"] = _parse_id(key, value)
        elif key == "user-id":
            fields["user_id"] = _parse_id(key, value)
        elif key == "user-type":
            fields["user_type"] = parse_user_type(value)
        else:
            logger.debug("Unknown Message Tag", [("Key", key), ("Value", str(value))])

    return MessageTags(**fields)


__all__ = [
    "AnyUserType",
    "MessageTags",
    "OtherUserType",
    "UserType",
    "parse_message_tags",
    "parse_user_type",
]
