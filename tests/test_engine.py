"""
HammerBot - Moderation Engine Tests
===================================

Tests for the hammer state machine, exemptions and roster updates.
"""

from conftest import BOT_NICK, CHANNEL, FIXED_NOW, FailingSink
from hammerbot.core.constants import HAMMER_OFF_ANNOUNCEMENT, HAMMER_ON_ANNOUNCEMENT
from hammerbot.irc.events import (
    BanConfirmed,
    Capability,
    InvalidAuthToken,
    Join,
    Message,
    Operator,
    SubModeOn,
    Timeout,
)
from hammerbot.irc.tags import MessageTags
from hammerbot.moderation.engine import ModerationEngine, SessionState, build_sanction
from hammerbot.moderation.policy import BannedPhraseMatcher


def say(author: str, text: str, **tags) -> Message:
    return Message(author=author, text=text, tags=MessageTags(**tags))


# =============================================================================
# Setup
# =============================================================================

class TestEngineSetup:
    """Tests for engine construction."""

    def test_channel_owner_seeded_as_mod(self, engine):
        owner = engine.roster.get(CHANNEL)
        assert owner is not None
        assert owner.is_mod is True

    def test_extra_owners_seeded(self, sent):
        engine = ModerationEngine(
            session=SessionState(bot_nickname=BOT_NICK),
            send=sent.append,
            matcher=BannedPhraseMatcher([]),
            channel_owner=CHANNEL,
            owners=["friend"],
        )
        assert engine.roster.get("friend").is_mod is True

    def test_hammer_starts_off(self, engine):
        assert engine.session.hammer_enabled is False


# =============================================================================
# Control Phrases
# =============================================================================

class TestControlPhrases:
    """Tests for turning the hammer on and off."""

    def test_moderator_turns_hammer_on(self, engine, sent):
        engine.handle(say(CHANNEL, "turn sanctions on"))
        assert engine.session.hammer_enabled is True
        assert sent == [HAMMER_ON_ANNOUNCEMENT]

    def test_moderator_turns_hammer_off(self, armed_engine, sent):
        armed_engine.handle(say(CHANNEL, "turn sanctions off"))
        assert armed_engine.session.hammer_enabled is False
        assert sent == [HAMMER_OFF_ANNOUNCEMENT]

    def test_control_phrase_is_trimmed(self, engine):
        engine.handle(say(CHANNEL, "  turn sanctions on \r"))
        assert engine.session.hammer_enabled is True

    def test_non_moderator_is_ignored(self, engine, sent):
        engine.handle(say("viewer", "turn sanctions on"))
        assert engine.session.hammer_enabled is False
        assert sent == []

    def test_non_moderator_control_phrase_updates_roster(self, engine):
        engine.handle(say("viewer", "turn sanctions on", display_name="Viewer", is_subscriber=True))
        user = engine.roster.get("viewer")
        assert user.display_name == "Viewer"
        assert user.is_paying is True

    def test_non_moderator_control_phrase_never_sanctioned(self, sent):
        engine = ModerationEngine(
            session=SessionState(bot_nickname=BOT_NICK, hammer_enabled=True),
            send=sent.append,
            matcher=BannedPhraseMatcher(["turn sanctions on"]),
            channel_owner=CHANNEL,
            clock=lambda: FIXED_NOW,
        )
        engine.handle(say("viewer", "turn sanctions on"))
        assert sent == []
        assert engine.roster.get("viewer").auto_ban_date is None

    def test_mod_tag_alone_does_not_authorize(self, engine, sent):
        engine.handle(say("viewer", "turn sanctions on", is_mod=True))
        assert engine.session.hammer_enabled is False
        assert sent == []

    def test_operator_grant_authorizes(self, engine, sent):
        engine.handle(Operator(nickname="alice", granted=True))
        engine.handle(say("alice", "turn sanctions on"))
        assert engine.session.hammer_enabled is True

    def test_revoked_operator_is_ignored(self, engine):
        engine.handle(Operator(nickname="alice", granted=True))
        engine.handle(Operator(nickname="alice", granted=False))
        engine.handle(say("alice", "turn sanctions on"))
        assert engine.session.hammer_enabled is False

    def test_phrase_is_case_sensitive(self, engine):
        engine.handle(say(CHANNEL, "Turn Sanctions On"))
        assert engine.session.hammer_enabled is False

    def test_custom_phrases(self, sent):
        engine = ModerationEngine(
            session=SessionState(bot_nickname=BOT_NICK),
            send=sent.append,
            matcher=BannedPhraseMatcher([]),
            channel_owner=CHANNEL,
            hammer_on_phrase="!hammer",
            hammer_off_phrase="!unhammer",
        )
        engine.handle(say(CHANNEL, "!hammer"))
        assert engine.session.hammer_enabled is True


# =============================================================================
# Sanctions
# =============================================================================

class TestSanctions:
    """Tests for the exact-match sanction policy."""

    def test_banned_phrase_sanctioned(self, armed_engine, sent):
        armed_engine.handle(say("spammer", "ban me!"))
        assert sent == ["/ban spammer"]
        assert armed_engine.roster.get("spammer").auto_ban_date == FIXED_NOW

    def test_trailing_space_is_trimmed(self, armed_engine, sent):
        armed_engine.handle(say("spammer", "ban me! "))
        assert sent == ["/ban spammer"]

    def test_case_difference_not_sanctioned(self, armed_engine, sent):
        armed_engine.handle(say("spammer", "Ban me!"))
        assert sent == []
        assert armed_engine.roster.get("spammer").auto_ban_date is None

    def test_substring_not_sanctioned(self, armed_engine, sent):
        armed_engine.handle(say("spammer", "please ban me! now"))
        assert sent == []

    def test_hammer_off_no_sanction(self, engine, sent):
        engine.handle(say("spammer", "ban me!"))
        assert sent == []
        assert engine.roster.get("spammer").auto_ban_date is None

    def test_sanctioned_only_once(self, armed_engine, sent):
        armed_engine.handle(say("spammer", "ban me!"))
        armed_engine.handle(say("spammer", "hello"))
        assert sent == ["/ban spammer"]
        assert armed_engine.sanction_count == 1

    def test_moderator_not_sanctioned(self, armed_engine, sent):
        armed_engine.handle(Operator(nickname="alice", granted=True))
        armed_engine.handle(say("alice", "ban me!"))
        assert sent == []

    def test_subscriber_not_sanctioned(self, armed_engine, sent):
        armed_engine.handle(say("fan", "ban me!", is_subscriber=True))
        assert sent == []

    def test_turbo_not_sanctioned(self, armed_engine, sent):
        armed_engine.handle(say("fan", "hello", is_turbo=True))
        assert sent == []

    def test_bot_never_sanctions_itself(self, armed_engine, sent):
        armed_engine.handle(say(BOT_NICK, "hello"))
        assert sent == []
        assert armed_engine.roster.get(BOT_NICK) is None

    def test_timeout_sanction(self, sent):
        engine = ModerationEngine(
            session=SessionState(bot_nickname=BOT_NICK, hammer_enabled=True),
            send=sent.append,
            matcher=BannedPhraseMatcher(["hello"]),
            channel_owner=CHANNEL,
            sanction_timeout_seconds=600,
        )
        engine.handle(say("spammer", "hello"))
        assert sent == ["/timeout spammer 600"]

    def test_failed_send_keeps_ban_date(self):
        sink = FailingSink()
        engine = ModerationEngine(
            session=SessionState(bot_nickname=BOT_NICK, hammer_enabled=True),
            send=sink,
            matcher=BannedPhraseMatcher(["hello"]),
            channel_owner=CHANNEL,
            clock=lambda: FIXED_NOW,
        )
        engine.handle(say("spammer", "hello"))
        assert sink.attempts == ["/ban spammer"]
        assert engine.roster.get("spammer").auto_ban_date == FIXED_NOW


class TestBuildSanction:
    """Tests for sanction command text."""

    def test_ban(self):
        assert build_sanction("spammer") == "/ban spammer"

    def test_timeout(self):
        assert build_sanction("spammer", 60) == "/timeout spammer 60"


# =============================================================================
# Roster Updates
# =============================================================================

class TestRosterUpdates:
    """Tests for roster changes driven by events."""

    def test_message_creates_user(self, engine):
        engine.handle(say("viewer", "hi"))
        assert "viewer" in engine.roster

    def test_display_name_applied(self, engine):
        engine.handle(say("viewer", "hi", display_name="Viewer"))
        assert engine.roster.get("viewer").display_name == "Viewer"

    def test_subscriber_marks_paying_monotonically(self, engine):
        engine.handle(say("fan", "hi", is_subscriber=True))
        engine.handle(say("fan", "hi again", is_subscriber=False))
        engine.handle(say("fan", "still here"))
        assert engine.roster.get("fan").is_paying is True

    def test_operator_grant_creates_entry(self, engine):
        engine.handle(Operator(nickname="X", granted=True))
        user = engine.roster.get("X")
        assert user.is_mod is True
        assert user.is_paying is False

    def test_notice_events_leave_roster_alone(self, engine):
        before = len(engine.roster)
        engine.handle(SubModeOn())
        engine.handle(BanConfirmed(nickname="spammer"))
        engine.handle(Timeout(nickname="spammer", seconds=10))
        assert len(engine.roster) == before


# =============================================================================
# Session Events
# =============================================================================

class TestSessionEvents:
    """Tests for capability, auth and join handling."""

    def test_capabilities_acknowledged(self, engine):
        engine.handle(Capability(names=("twitch.tv/membership", "twitch.tv/tags", "twitch.tv/other")))
        assert engine.session.cap_membership is True
        assert engine.session.cap_tags is True
        assert engine.session.cap_commands is False

    def test_capability_flags_are_monotonic(self, engine):
        engine.handle(Capability(names=("twitch.tv/commands",)))
        engine.handle(Capability(names=()))
        assert engine.session.cap_commands is True

    def test_invalid_auth_does_not_raise(self, engine, sent):
        engine.handle(InvalidAuthToken())
        assert sent == []

    def test_own_join_sends_greeting(self, sent):
        engine = ModerationEngine(
            session=SessionState(bot_nickname=BOT_NICK),
            send=sent.append,
            matcher=BannedPhraseMatcher([]),
            channel_owner=CHANNEL,
            join_greeting="Hi",
        )
        engine.handle(Join(nickname="viewer"))
        engine.handle(Join(nickname=BOT_NICK))
        assert sent == ["Hi"]

    def test_own_join_without_greeting(self, engine, sent):
        engine.handle(Join(nickname=BOT_NICK))
        assert sent == []


class TestEngineSend:
    """Tests for send failure handling."""

    def test_send_failure_is_swallowed(self):
        sink = FailingSink()
        engine = ModerationEngine(
            session=SessionState(bot_nickname=BOT_NICK),
            send=sink,
            matcher=BannedPhraseMatcher([]),
            channel_owner=CHANNEL,
        )
        assert engine.send("hello") is False
        assert sink.attempts == ["hello"]

    def test_send_success(self, engine, sent):
        assert engine.send("hello") is True
        assert sent == ["hello"]
