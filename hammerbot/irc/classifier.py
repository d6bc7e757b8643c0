"""
HammerBot - Protocol Classifier
===============================

Maps tokenized protocol events onto the closed ChatEvent set.

DESIGN:
    classify() is a pure function of the raw event apart from logging:
    every raw event yields exactly one ChatEvent or None. Malformed or
    irrelevant input is dropped and logged, never raised, so one bad line
    cannot take the session down.

    Twitch overloads a few commands:
    - CLEARCHAT carries a channel clear, a timeout or a ban
    - NOTICE carries the login failure (untagged) and every moderation
      confirmation (tagged with msg-id)
"""

from typing import Callable, Dict, Optional, Tuple

from hammerbot.core.constants import AUTH_FAILED_NOTICE
from hammerbot.core.logger import logger
from hammerbot.irc.errors import TagParseError
from hammerbot.irc.events import (
    Ban,
    BanAlreadyBanned,
    BanConfirmed,
    Capability,
    ChannelSuspended,
    ChatEvent,
    Clear,
    EmoteModeAlreadyOff,
    EmoteModeAlreadyOn,
    EmoteModeOff,
    EmoteModeOn,
    HostModeAlreadyOn,
    HostModeOff,
    HostModeOn,
    HostsRemaining,
    InvalidAuthToken,
    Join,
    Leave,
    Message,
    Operator,
    R9kModeAlreadyOff,
    R9kModeAlreadyOn,
    R9kModeOff,
    R9kModeOn,
    RoomState,
    SlowModeOff,
    SlowModeOn,
    SubModeAlreadyOff,
    SubModeAlreadyOn,
    SubModeOff,
    SubModeOn,
    Timeout,
    TimeoutConfirmed,
    UnbanConfirmed,
    UnbanNoBan,
    UnrecognisedCommand,
)
from hammerbot.irc.models import RawEvent
from hammerbot.irc.tags import parse_message_tags


# =============================================================================
# Helpers
# =============================================================================

def nickname_from_prefix(prefix: Optional[str]) -> Optional[str]:
    """
    Extract the nickname from a ``nick!user@host`` prefix.

    Returns:
        The part before '!', or None if there is no prefix, no '!' or an
        empty nickname.
    """
    if not prefix or "!" not in prefix:
        return None
    nickname = prefix.split("!", 1)[0]
    return nickname or None


def _parse_count(value: Optional[str]) -> Optional[int]:
    """Parse a non-negative integer tag value, None if it is not one."""
    if value is None or not (value.isascii() and value.isdigit()):
        return None
    return int(value)


def _parse_room_flag(raw: RawEvent, key: str) -> Optional[bool]:
    if not raw.has_tag(key):
        return None
    return raw.tag(key) not in (None, "", "0")


def _drop(reason: str, raw: RawEvent, warn: bool = False) -> None:
    """Log a dropped event. Malformed input warns, irrelevant input is debug."""
    details = [
        ("Command", raw.command),
        ("Prefix", str(raw.prefix)),
        ("Reason", reason),
    ]
    if warn:
        logger.warning("Dropped Malformed Event", details)
    else:
        logger.debug("Dropped Event", details)


# =============================================================================
# Command Classifiers
# =============================================================================

def _classify_privmsg(raw: RawEvent) -> Optional[ChatEvent]:
    if raw.prefix is None:
        _drop("chat message without prefix", raw, warn=True)
        return None
    if raw.tags is None:
        _drop("chat message without tags", raw, warn=True)
        return None

    author = nickname_from_prefix(raw.prefix)
    if author is None:
        _drop("prefix has no nickname separator", raw, warn=True)
        return None

    try:
        tags = parse_message_tags(raw.tags)
    except TagParseError as e:
        _drop(str(e), raw, warn=True)
        return None

    if raw.trailing is not None:
        text = raw.trailing
    elif len(raw.params) > 1:
        text = raw.params[1]
    else:
        text = ""

    return Message(author=author, text=text, tags=tags)


def _classify_cap(raw: RawEvent) -> Optional[ChatEvent]:
    if len(raw.params) < 2 or raw.params[1].upper() != "ACK":
        _drop("capability subcommand other than ACK", raw)
        return None

    if raw.trailing is not None:
        param = raw.trailing
    elif len(raw.params) > 2:
        param = raw.params[2]
    else:
        _drop("capability acknowledged without a name", raw, warn=True)
        return None

    return Capability(names=tuple(param.split()))


def _classify_mode(raw: RawEvent) -> Optional[ChatEvent]:
    if len(raw.params) < 3 or not raw.params[2]:
        _drop("mode change without target nickname", raw)
        return None

    mode, nickname = raw.params[1], raw.params[2]
    if mode == "+o":
        return Operator(nickname=nickname, granted=True)
    if mode == "-o":
        return Operator(nickname=nickname, granted=False)

    _drop(f"unsupported mode '{mode}'", raw)
    return None


def _classify_membership(raw: RawEvent) -> Optional[ChatEvent]:
    nickname = nickname_from_prefix(raw.prefix)
    if nickname is None:
        _drop("membership change without usable prefix", raw, warn=True)
        return None
    if raw.command.upper() == "JOIN":
        return Join(nickname=nickname)
    return Leave(nickname=nickname)


def _classify_clearchat(raw: RawEvent) -> Optional[ChatEvent]:
    target = raw.trailing if raw.trailing is not None else (
        raw.params[1] if len(raw.params) > 1 else None
    )
    if not target:
        return Clear()

    if raw.tags is None:
        _drop("targeted clear without tags", raw, warn=True)
        return None

    reason = raw.tag("ban-reason") or None
    duration = _parse_count(raw.tag("ban-duration"))
    if duration is not None:
        return Timeout(nickname=target, seconds=duration, reason=reason)
    return Ban(nickname=target, reason=reason)


def _classify_roomstate(raw: RawEvent) -> Optional[ChatEvent]:
    if raw.tags is None:
        _drop("room state without tags", raw, warn=True)
        return None

    return RoomState(
        language=raw.tag("broadcaster-lang") or None,
        r9k=_parse_room_flag(raw, "r9k"),
        subs_only=_parse_room_flag(raw, "subs-only"),
        slow=_parse_room_flag(raw, "slow"),
    )


# =============================================================================
# Notices
# =============================================================================

def _require(raw: RawEvent, *keys: str) -> Optional[Tuple[str, ...]]:
    """
    Collect required companion tags.

    Returns:
        The tag values in order, or None (logged) if any is missing or empty.
    """
    values = []
    for key in keys:
        value = raw.tag(key)
        if not value:
            _drop(f"notice '{raw.tag('msg-id')}' missing tag '{key}'", raw, warn=True)
            return None
        values.append(value)
    return tuple(values)


def _require_count(raw: RawEvent, key: str) -> Optional[int]:
    values = _require(raw, key)
    if values is None:
        return None
    count = _parse_count(values[0])
    if count is None:
        _drop(f"tag '{key}' is not a number: {values[0]!r}", raw, warn=True)
    return count


def _slow_on(raw: RawEvent) -> Optional[ChatEvent]:
    seconds = _require_count(raw, "slow-duration")
    return SlowModeOn(seconds=seconds) if seconds is not None else None


def _host_on(raw: RawEvent) -> Optional[ChatEvent]:
    values = _require(raw, "target-channel")
    return HostModeOn(target=values[0]) if values else None


def _host_already_on(raw: RawEvent) -> Optional[ChatEvent]:
    values = _require(raw, "target-channel")
    return HostModeAlreadyOn(target=values[0]) if values else None


def _hosts_remaining(raw: RawEvent) -> Optional[ChatEvent]:
    count = _require_count(raw, "hosts-remaining")
    return HostsRemaining(count=count) if count is not None else None


def _timeout_success(raw: RawEvent) -> Optional[ChatEvent]:
    values = _require(raw, "target-user")
    seconds = _require_count(raw, "ban-duration") if values else None
    if seconds is None:
        return None
    return TimeoutConfirmed(nickname=values[0], seconds=seconds)


def _targeted(event_type) -> Callable[[RawEvent], Optional[ChatEvent]]:
    """Build a handler for notices that only carry ``target-user``."""
    def build(raw: RawEvent) -> Optional[ChatEvent]:
        values = _require(raw, "target-user")
        return event_type(nickname=values[0]) if values else None
    return build


def _unrecognized_cmd(raw: RawEvent) -> Optional[ChatEvent]:
    if raw.trailing is None:
        _drop("unrecognized command notice without text", raw, warn=True)
        return None
    return UnrecognisedCommand(text=raw.trailing)


NOTICE_HANDLERS: Dict[str, Callable[[RawEvent], Optional[ChatEvent]]] = {
    "subs_on": lambda raw: SubModeOn(),
    "subs_off": lambda raw: SubModeOff(),
    "already_subs_on": lambda raw: SubModeAlreadyOn(),
    "already_subs_off": lambda raw: SubModeAlreadyOff(),
    "r9k_on": lambda raw: R9kModeOn(),
    "r9k_off": lambda raw: R9kModeOff(),
    "already_r9k_on": lambda raw: R9kModeAlreadyOn(),
    "already_r9k_off": lambda raw: R9kModeAlreadyOff(),
    "slow_on": _slow_on,
    "slow_off": lambda raw: SlowModeOff(),
    "host_on": _host_on,
    "bad_host_hosting": _host_already_on,
    "host_off": lambda raw: HostModeOff(),
    "hosts_remaining": _hosts_remaining,
    "emote_only_on": lambda raw: EmoteModeOn(),
    "emote_only_off": lambda raw: EmoteModeOff(),
    "already_emote_only_on": lambda raw: EmoteModeAlreadyOn(),
    "already_emote_only_off": lambda raw: EmoteModeAlreadyOff(),
    "msg_channel_suspended": lambda raw: ChannelSuspended(),
    "timeout_success": _timeout_success,
    "ban_success": _targeted(BanConfirmed),
    "unban_success": _targeted(UnbanConfirmed),
    "bad_unban_no_ban": _targeted(UnbanNoBan),
    "already_banned": _targeted(BanAlreadyBanned),
    "unrecognized_cmd": _unrecognized_cmd,
}
"""msg-id value -> builder. Builders return None when a companion tag is missing."""


def _classify_notice(raw: RawEvent) -> Optional[ChatEvent]:
    msg_id = raw.tag("msg-id")

    if msg_id is None:
        if raw.trailing == AUTH_FAILED_NOTICE:
            return InvalidAuthToken()
        _drop(f"untagged notice: {raw.trailing!r}", raw)
        return None

    handler = NOTICE_HANDLERS.get(msg_id)
    if handler is None:
        _drop(f"unknown msg-id '{msg_id}'", raw)
        return None
    return handler(raw)


# =============================================================================
# Entry Point
# =============================================================================

COMMAND_HANDLERS: Dict[str, Callable[[RawEvent], Optional[ChatEvent]]] = {
    "PRIVMSG": _classify_privmsg,
    "CAP": _classify_cap,
    "MODE": _classify_mode,
    "NOTICE": _classify_notice,
    "JOIN": _classify_membership,
    "PART": _classify_membership,
    "CLEARCHAT": _classify_clearchat,
    "ROOMSTATE": _classify_roomstate,
}


def classify(raw: RawEvent) -> Optional[ChatEvent]:
    """
    Classify one raw protocol event.

    Args:
        raw: Tokenized event from the message source.

    Returns:
        Exactly one ChatEvent, or None when the event is malformed or of
        no interest to the bot.
    """
    handler = COMMAND_HANDLERS.get(raw.command.upper())
    if handler is None:
        _drop("unhandled command", raw)
        return None
    return handler(raw)


__all__ = [
    "COMMAND_HANDLERS",
    "NOTICE_HANDLERS",
    "classify",
    "nickname_from_prefix",
]
