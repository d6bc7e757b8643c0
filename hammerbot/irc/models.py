"""
HammerBot - Raw Protocol Models
===============================

Tokenized protocol events as they come off the wire, before any semantic
interpretation.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

Tag = Tuple[str, Optional[str]]
"""One message tag: key and optional value (``key`` alone means no value)."""


@dataclass(frozen=True)
class RawEvent:
    """
    A parsed IRC protocol message.

    Attributes:
        command: Command name or numeric, uppercased (e.g. "PRIVMSG").
        prefix: Sender prefix without the leading ':' (nick!user@host).
        tags: Ordered IRCv3 tags, or None when the line had no tag section.
        params: Middle parameters.
        trailing: Trailing parameter (after " :"), if any.
    """

    command: str
    prefix: Optional[str] = None
    tags: Optional[List[Tag]] = None
    params: List[str] = field(default_factory=list)
    trailing: Optional[str] = None

    def tag(self, key: str) -> Optional[str]:
        """Value of the first tag named ``key``; None if absent or valueless."""
        for name, value in self.tags or ():
            if name == key:
                return value
        return None

    def has_tag(self, key: str) -> bool:
        """Whether a tag named ``key`` is present, with or without a value."""
        return any(name == key for name, _ in self.tags or ())


__all__ = [
    "RawEvent",
    "Tag",
]
