"""
HammerBot - Roster
==================

In-memory trust state for everyone seen in the channel.

DESIGN:
    The roster is the only place user flags change, so its invariants hold
    everywhere:
    - entries are created lazily and never removed
    - is_paying only goes from False to True
    - auto_ban_date is set at most once

    Single-threaded: the moderation engine owns the roster and
    mutates it from the session loop only.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterator, Optional


@dataclass
class ChatUser:
    """
    Locally tracked state of one chat participant.

    Attributes:
        nickname: Login name, the roster key. Never changes.
        display_name: Name shown in chat, defaults to the nickname.
        is_mod: Channel operator status.
        is_paying: Subscriber, turbo or other paid support seen at least once.
        auto_ban_date: When the bot sanctioned this user, if it did.
    """

    nickname: str
    display_name: str = ""
    is_mod: bool = False
    is_paying: bool = False
    auto_ban_date: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.nickname

    def __setattr__(self, name: str, value) -> None:
        if name == "nickname" and "nickname" in self.__dict__:
            raise AttributeError("ChatUser.nickname cannot be changed")
        super().__setattr__(name, value)

    @property
    def is_protected(self) -> bool:
        """Exempt from automatic sanctions: mods, paying users, already handled."""
        return self.is_mod or self.is_paying or self.auto_ban_date is not None


class Roster:
    """Nickname -> ChatUser mapping. Nicknames are case-sensitive."""

    def __init__(self) -> None:
        self._users: Dict[str, ChatUser] = {}

    # =========================================================================
    # Lookup
    # =========================================================================

    def ensure(self, nickname: str) -> bool:
        """
        Create the entry for ``nickname`` if it does not exist yet.

        Existing entries are left untouched.

        Returns:
            True if the user already existed.
        """
        if nickname in self._users:
            return True
        self._users[nickname] = ChatUser(nickname=nickname)
        return False

    def get(self, nickname: str) -> Optional[ChatUser]:
        return self._users.get(nickname)

    def _get_or_create(self, nickname: str) -> ChatUser:
        self.ensure(nickname)
        return self._users[nickname]

    def __contains__(self, nickname: object) -> bool:
        return nickname in self._users

    def __len__(self) -> int:
        return len(self._users)

    def __iter__(self) -> Iterator[ChatUser]:
        return iter(self._users.values())

    # =========================================================================
    # Flag Updates
    # =========================================================================

    def set_mod(self, nickname: str, granted: bool) -> ChatUser:
        """Grant or revoke moderator status, creating the user if needed."""
        user = self._get_or_create(nickname)
        user.is_mod = granted
        return user

    def set_display_name(self, nickname: str, display_name: str) -> ChatUser:
        user = self._get_or_create(nickname)
        user.display_name = display_name
        return user

    def mark_paying(self, nickname: str) -> bool:
        """
        Record a paid-support signal. Never resets.

        Returns:
            True if the flag changed.
        """
        user = self._get_or_create(nickname)
        if user.is_paying:
            return False
        user.is_paying = True
        return True

    def mark_auto_banned(self, nickname: str, when: datetime) -> bool:
        """
        Record that the bot sanctioned ``nickname``.

        Only the first call has an effect.

        Returns:
            True if the date was set by this call.
        """
        user = self._get_or_create(nickname)
        if user.auto_ban_date is not None:
            return False
        user.auto_ban_date = when
        return True

    def is_protected(self, nickname: str) -> bool:
        """Protection of a user; unknown users are not protected."""
        user = self._users.get(nickname)
        return user is not None and user.is_protected


__all__ = [
    "ChatUser",
    "Roster",
]
