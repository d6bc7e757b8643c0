"""
HammerBot - IRC Wire Format
===========================

Parse and build Twitch IRC protocol lines.

Format: [@tags] [:prefix] COMMAND [params...] [:trailing]

Reference: https://datatracker.ietf.org/doc/html/rfc1459#section-2.3.1
Tags: https://ircv3.net/specs/extensions/message-tags
"""

from typing import Iterable, List, Optional

from hammerbot.irc.errors import WireParseError
from hammerbot.irc.models import RawEvent, Tag


# =============================================================================
# Parsing
# =============================================================================

_TAG_ESCAPES = {
    ":": ";",
    "s": " ",
    "\\": "\\",
    "r": "\r",
    "n": "\n",
}


def unescape_tag_value(value: str) -> str:
    """
    Undo IRCv3 tag value escaping (``\\s`` -> space, ``\\:`` -> ';', ...).

    An unknown escape drops the backslash; a trailing lone backslash is removed.
    """
    if "\\" not in value:
        return value

    out = []
    chars = iter(value)
    for char in chars:
        if char != "\\":
            out.append(char)
            continue
        escaped = next(chars, None)
        if escaped is None:
            break
        out.append(_TAG_ESCAPES.get(escaped, escaped))
    return "".join(out)


def parse_tags(raw: str) -> List[Tag]:
    """
    Parse an IRC tags string (without the '@') into ordered pairs.

    ``key`` and ``key=`` both yield a None value.
    """
    tags: List[Tag] = []
    for item in raw.split(";"):
        if not item:
            continue
        if "=" in item:
            key, value = item.split("=", 1)
            tags.append((key, unescape_tag_value(value) if value else None))
        else:
            tags.append((item, None))
    return tags


def parse_irc_line(raw: str) -> RawEvent:
    """
    Parse a raw IRC line into a RawEvent.

    Raises:
        WireParseError: If the line is empty or has no command.
    """
    line = raw.rstrip("\r\n")
    if not line.strip():
        raise WireParseError("Empty IRC line", raw)

    tags: Optional[List[Tag]] = None
    prefix: Optional[str] = None

    if line.startswith("@"):
        if " " not in line:
            raise WireParseError("Tags without command", raw)
        tag_part, line = line.split(" ", 1)
        tags = parse_tags(tag_part[1:])
        line = line.lstrip(" ")

    if line.startswith(":"):
        if " " not in line:
            raise WireParseError("Prefix without command", raw)
        prefix_part, line = line.split(" ", 1)
        prefix = prefix_part[1:] or None
        line = line.lstrip(" ")

    trailing: Optional[str] = None
    if line.startswith(":"):
        raise WireParseError("Missing command", raw)
    if " :" in line:
        line, trailing = line.split(" :", 1)

    parts = line.split()
    if not parts:
        raise WireParseError("Missing command", raw)

    return RawEvent(
        command=parts[0].upper(),
        prefix=prefix,
        tags=tags,
        params=parts[1:],
        trailing=trailing,
    )


# =============================================================================
# Building
# =============================================================================

def build_privmsg(channel: str, text: str) -> str:
    return f"PRIVMSG {channel} :{text}"


def build_pong(payload: str) -> str:
    return f"PONG :{payload}"


def build_join(channel: str) -> str:
    return f"JOIN {channel}"


def build_pass_nick(token: str, nick: str) -> List[str]:
    return [f"PASS {token}", f"NICK {nick}"]


def build_cap_req(capabilities: Iterable[str]) -> str:
    return f"CAP REQ :{' '.join(capabilities)}"


__all__ = [
    "build_cap_req",
    "build_join",
    "build_pass_nick",
    "build_pong",
    "build_privmsg",
    "parse_irc_line",
    "parse_tags",
    "unescape_tag_value",
]
