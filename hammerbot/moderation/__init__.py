"""
HammerBot - Moderation Package
==============================

Roster, phrase policy and the engine that ties them together.
"""

from .engine import ModerationEngine, SessionState
from .policy import BannedPhraseMatcher, PhraseMatcher
from .roster import ChatUser, Roster

__all__ = [
    "BannedPhraseMatcher",
    "ChatUser",
    "ModerationEngine",
    "PhraseMatcher",
    "Roster",
    "SessionState",
]
