"""
HammerBot - Test Fixtures
=========================

Shared fixtures for all tests.
"""

import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set up test environment before importing modules
os.environ["TESTING"] = "1"
os.environ.setdefault("HAMMER_LOG_DIR", tempfile.mkdtemp(prefix="hammer-logs-"))

from hammerbot.core.logger import NY_TZ  # noqa: E402
from hammerbot.irc.errors import MessageSourceError  # noqa: E402
from hammerbot.irc.models import RawEvent  # noqa: E402
from hammerbot.moderation.engine import ModerationEngine, SessionState  # noqa: E402
from hammerbot.moderation.policy import BannedPhraseMatcher  # noqa: E402


FIXED_NOW = datetime(2024, 3, 1, 20, 15, 0, tzinfo=NY_TZ)

BOT_NICK = "hammer_bot"
CHANNEL = "streamer"


# =============================================================================
# Raw Event Builders
# =============================================================================

def privmsg(
    author: str,
    text: str,
    tags: Optional[list] = None,
    prefix: Optional[str] = "",
) -> RawEvent:
    """Build a chat line from ``author``; prefix "" means derive from author."""
    if prefix == "":
        prefix = f"{author}!{author}@{author}.tmi.twitch.tv"
    return RawEvent(
        command="PRIVMSG",
        prefix=prefix,
        tags=tags if tags is not None else [],
        params=[f"#{CHANNEL}"],
        trailing=text,
    )


def notice(msg_id: Optional[str], text: str = "", **tags: str) -> RawEvent:
    """Build a NOTICE; keyword tags use underscores for dashes."""
    tag_list = [("msg-id", msg_id)] if msg_id is not None else []
    tag_list += [(key.replace("_", "-"), value) for key, value in tags.items()]
    return RawEvent(
        command="NOTICE",
        prefix="tmi.twitch.tv",
        tags=tag_list if msg_id is not None else None,
        params=[f"#{CHANNEL}"],
        trailing=text,
    )


# =============================================================================
# Fakes
# =============================================================================

class FakeSource:
    """Message source replaying a scripted list of events and errors."""

    def __init__(self, script: list) -> None:
        self.script = list(script)
        self.sent: List[str] = []
        self.reads = 0

    def next_event(self) -> Optional[RawEvent]:
        self.reads += 1
        if not self.script:
            return None
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def send(self, text: str) -> None:
        self.sent.append(text)


class FailingSink:
    """Send callable that always fails, recording attempts."""

    def __init__(self) -> None:
        self.attempts: List[str] = []

    def __call__(self, text: str) -> None:
        self.attempts.append(text)
        raise ConnectionError("socket closed")


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def sent() -> List[str]:
    """List collecting every line the engine sends."""
    return []


@pytest.fixture
def engine(sent) -> ModerationEngine:
    """Engine with the default phrases, hammer off, owner seeded as mod."""
    return ModerationEngine(
        session=SessionState(bot_nickname=BOT_NICK),
        send=sent.append,
        matcher=BannedPhraseMatcher(["ban me!", "hello"]),
        channel_owner=CHANNEL,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def armed_engine(engine) -> ModerationEngine:
    """Engine with the hammer already on."""
    engine.session.hammer_enabled = True
    return engine


@pytest.fixture
def read_error() -> MessageSourceError:
    return MessageSourceError("Read failed: timed out")
