"""
HammerBot - Chat Events
=======================

The closed set of typed events the classifier produces.

DESIGN:
    One frozen dataclass per event kind, all deriving from ChatEvent.
    Consumers dispatch on the concrete type; the set is closed, so a new
    kind means a new class here and a new branch in the engine.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from hammerbot.irc.tags import MessageTags


class ChatEvent:
    """Base class of every classified chat event."""

    __slots__ = ()


# =============================================================================
# Room Traffic
# =============================================================================

@dataclass(frozen=True)
class Message(ChatEvent):
    """A chat line from ``author``."""
    author: str
    text: str
    tags: MessageTags = field(default_factory=MessageTags)


@dataclass(frozen=True)
class Join(ChatEvent):
    nickname: str


@dataclass(frozen=True)
class Leave(ChatEvent):
    nickname: str


@dataclass(frozen=True)
class Operator(ChatEvent):
    """Operator status granted to or revoked from ``nickname``."""
    nickname: str
    granted: bool


@dataclass(frozen=True)
class RoomState(ChatEvent):
    """Room settings; None means the setting was not part of the update."""
    language: Optional[str] = None
    r9k: Optional[bool] = None
    subs_only: Optional[bool] = None
    slow: Optional[bool] = None


# =============================================================================
# Moderation Actions (CLEARCHAT)
# =============================================================================

@dataclass(frozen=True)
class Clear(ChatEvent):
    """The whole channel history was cleared."""


@dataclass(frozen=True)
class Timeout(ChatEvent):
    nickname: str
    seconds: int
    reason: Optional[str] = None


@dataclass(frozen=True)
class Ban(ChatEvent):
    nickname: str
    reason: Optional[str] = None


# =============================================================================
# Session
# =============================================================================

@dataclass(frozen=True)
class Capability(ChatEvent):
    """Capabilities acknowledged by the server, in server order."""
    names: Tuple[str, ...]


@dataclass(frozen=True)
class InvalidAuthToken(ChatEvent):
    """The server rejected the bot's credentials."""


# =============================================================================
# Notices (NOTICE with msg-id)
# =============================================================================

@dataclass(frozen=True)
class SubModeOn(ChatEvent):
    pass


@dataclass(frozen=True)
class SubModeOff(ChatEvent):
    pass


@dataclass(frozen=True)
class SubModeAlreadyOn(ChatEvent):
    pass


@dataclass(frozen=True)
class SubModeAlreadyOff(ChatEvent):
    pass


@dataclass(frozen=True)
class R9kModeOn(ChatEvent):
    pass


@dataclass(frozen=True)
class R9kModeOff(ChatEvent):
    pass


@dataclass(frozen=True)
class R9kModeAlreadyOn(ChatEvent):
    pass


@dataclass(frozen=True)
class R9kModeAlreadyOff(ChatEvent):
    pass


@dataclass(frozen=True)
class SlowModeOn(ChatEvent):
    seconds: int


@dataclass(frozen=True)
class SlowModeOff(ChatEvent):
    pass


@dataclass(frozen=True)
class HostModeOn(ChatEvent):
    target: str


@dataclass(frozen=True)
class HostModeAlreadyOn(ChatEvent):
    target: str


@dataclass(frozen=True)
class HostModeOff(ChatEvent):
    pass


@dataclass(frozen=True)
class HostsRemaining(ChatEvent):
    count: int


@dataclass(frozen=True)
class EmoteModeOn(ChatEvent):
    pass


@dataclass(frozen=True)
class EmoteModeOff(ChatEvent):
    pass


@dataclass(frozen=True)
class EmoteModeAlreadyOn(ChatEvent):
    pass


@dataclass(frozen=True)
class EmoteModeAlreadyOff(ChatEvent):
    pass


@dataclass(frozen=True)
class ChannelSuspended(ChatEvent):
    pass


@dataclass(frozen=True)
class TimeoutConfirmed(ChatEvent):
    nickname: str
    seconds: int


@dataclass(frozen=True)
class BanConfirmed(ChatEvent):
    nickname: str


@dataclass(frozen=True)
class UnbanConfirmed(ChatEvent):
    nickname: str


@dataclass(frozen=True)
class UnbanNoBan(ChatEvent):
    nickname: str


@dataclass(frozen=True)
class BanAlreadyBanned(ChatEvent):
    nickname: str


@dataclass(frozen=True)
class UnrecognisedCommand(ChatEvent):
    text: str


NOTICE_EVENTS = (
    SubModeOn, SubModeOff, SubModeAlreadyOn, SubModeAlreadyOff,
    R9kModeOn, R9kModeOff, R9kModeAlreadyOn, R9kModeAlreadyOff,
    SlowModeOn, SlowModeOff,
    HostModeOn, HostModeAlreadyOn, HostModeOff, HostsRemaining,
    EmoteModeOn, EmoteModeOff, EmoteModeAlreadyOn, EmoteModeAlreadyOff,
    ChannelSuspended,
    TimeoutConfirmed, BanConfirmed, UnbanConfirmed, UnbanNoBan, BanAlreadyBanned,
    UnrecognisedCommand,
)
"""Confirmation and mode-change events produced from tagged NOTICEs."""


__all__ = [
    "ChatEvent",
    "Message", "Join", "Leave", "Operator", "RoomState",
    "Clear", "Timeout", "Ban",
    "Capability", "InvalidAuthToken",
    "SubModeOn", "SubModeOff", "SubModeAlreadyOn", "SubModeAlreadyOff",
    "R9kModeOn", "R9kModeOff", "R9kModeAlreadyOn", "R9kModeAlreadyOff",
    "SlowModeOn", "SlowModeOff",
    "HostModeOn", "HostModeAlreadyOn", "HostModeOff", "HostsRemaining",
    "EmoteModeOn", "EmoteModeOff", "EmoteModeAlreadyOn", "EmoteModeAlreadyOff",
    "ChannelSuspended",
    "TimeoutConfirmed", "BanConfirmed", "UnbanConfirmed", "UnbanNoBan", "BanAlreadyBanned",
    "UnrecognisedCommand",
    "NOTICE_EVENTS",
]
