"""
HammerBot - Roster Tests
========================

Tests for roster entries and the invariants on their flags.
"""

from datetime import datetime, timedelta

import pytest

from hammerbot.moderation.roster import ChatUser, Roster


class TestChatUser:
    """Tests for ChatUser defaults and protection."""

    def test_defaults(self):
        user = ChatUser(nickname="ronni")
        assert user.display_name == "ronni"
        assert user.is_mod is False
        assert user.is_paying is False
        assert user.auto_ban_date is None
        assert user.is_protected is False

    def test_nickname_is_immutable(self):
        user = ChatUser(nickname="ronni")
        with pytest.raises(AttributeError):
            user.nickname = "someone_else"

    @pytest.mark.parametrize("field,value", [
        ("is_mod", True),
        ("is_paying", True),
        ("auto_ban_date", datetime(2024, 1, 1)),
    ])
    def test_protected_by_any_flag(self, field, value):
        user = ChatUser(nickname="ronni")
        setattr(user, field, value)
        assert user.is_protected is True


class TestRoster:
    """Tests for Roster operations."""

    def test_ensure_creates_once(self):
        roster = Roster()
        assert roster.ensure("ronni") is False
        assert roster.ensure("ronni") is True
        assert len(roster) == 1

    def test_ensure_does_not_reset_flags(self):
        roster = Roster()
        roster.set_mod("ronni", True)
        roster.mark_paying("ronni")
        roster.ensure("ronni")
        user = roster.get("ronni")
        assert user.is_mod is True
        assert user.is_paying is True

    def test_get_unknown(self):
        assert Roster().get("nobody") is None

    def test_nicknames_are_case_sensitive(self):
        roster = Roster()
        roster.ensure("Ronni")
        assert "Ronni" in roster
        assert "ronni" not in roster

    def test_set_mod_creates_entry(self):
        roster = Roster()
        user = roster.set_mod("alice", True)
        assert user.is_mod is True
        assert user.is_paying is False
        assert roster.get("alice") is user

    def test_set_mod_revokes(self):
        roster = Roster()
        roster.set_mod("alice", True)
        roster.set_mod("alice", False)
        assert roster.get("alice").is_mod is False

    def test_mark_paying_is_monotonic(self):
        roster = Roster()
        assert roster.mark_paying("ronni") is True
        assert roster.mark_paying("ronni") is False
        assert roster.get("ronni").is_paying is True

    def test_auto_ban_date_set_once(self):
        roster = Roster()
        first = datetime(2024, 1, 1, 12, 0)
        assert roster.mark_auto_banned("ronni", first) is True
        assert roster.mark_auto_banned("ronni", first + timedelta(hours=1)) is False
        assert roster.get("ronni").auto_ban_date == first

    def test_set_display_name(self):
        roster = Roster()
        roster.set_display_name("ronni", "Ronni")
        assert roster.get("ronni").display_name == "Ronni"
        assert roster.get("ronni").nickname == "ronni"

    def test_unknown_user_not_protected(self):
        assert Roster().is_protected("nobody") is False

    def test_iteration(self):
        roster = Roster()
        roster.ensure("a")
        roster.ensure("b")
        assert sorted(user.nickname for user in roster) == ["a", "b"]
