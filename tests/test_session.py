"""
HammerBot - Session Loop Tests
==============================

Integration tests running scripted raw events through classifier and engine.
"""

from conftest import CHANNEL, FakeSource, privmsg
from hammerbot.irc.events import Message
from hammerbot.irc.models import RawEvent
from hammerbot.session import Session


def no_sleep(_seconds: float) -> None:
    pass


def run(engine, script, **kwargs):
    source = FakeSource(script)
    engine._send_fn = source.send
    session = Session(source, engine, sleep=no_sleep, **kwargs)
    stats = session.run()
    return source, stats


class TestSessionLoop:
    """Tests for Session.run."""

    def test_empty_source_ends_cleanly(self, engine):
        source, stats = run(engine, [])
        assert stats.raw_events == 0
        assert source.reads == 1

    def test_full_scenario(self, engine):
        script = [
            RawEvent(command="CAP", params=["*", "ACK"], trailing="twitch.tv/tags twitch.tv/commands"),
            RawEvent(command="MODE", prefix="jtv", params=[f"#{CHANNEL}", "+o", "alice"]),
            privmsg("alice", "turn sanctions on", tags=[]),
            privmsg("fan", "ban me!", tags=[("subscriber", "1")]),
            privmsg("spammer", "ban me! ", tags=[("display-name", "Spammer")]),
            privmsg("spammer", "ban me!", tags=[]),
            privmsg("other", "Ban me!", tags=[]),
        ]
        source, stats = run(engine, script)

        assert source.sent[1:] == ["/ban spammer"]
        assert engine.session.cap_tags is True
        assert engine.roster.get("fan").is_paying is True
        assert engine.roster.get("spammer").display_name == "Spammer"
        assert stats.raw_events == 7
        assert stats.chat_events == 7
        assert stats.dropped == 0

    def test_malformed_events_are_dropped(self, engine):
        script = [
            privmsg("ronni", "hi", tags=[], prefix=None),
            RawEvent(command="USERSTATE", params=[f"#{CHANNEL}"]),
            privmsg("ronni", "hi", tags=[]),
        ]
        _, stats = run(engine, script)
        assert stats.dropped == 2
        assert stats.chat_events == 1

    def test_read_errors_are_retried(self, engine, read_error):
        sleeps = []
        source = FakeSource([read_error, read_error, privmsg("ronni", "hi", tags=[])])
        session = Session(source, engine, retry_delay=0.5, sleep=sleeps.append)
        stats = session.run()
        assert stats.read_errors == 2
        assert stats.chat_events == 1
        assert sleeps == [0.5, 0.5]

    def test_handler_error_does_not_stop_session(self, engine):
        calls = []

        def explode(event):
            calls.append(event)
            raise RuntimeError("boom")

        engine.handle = explode
        _, stats = run(engine, [privmsg("a", "x", tags=[]), privmsg("b", "y", tags=[])])
        assert len(calls) == 2
        assert stats.handler_errors == 2

    def test_custom_classifier(self, engine):
        seen = []

        def classifier(raw):
            seen.append(raw.command)
            return Message(author="ronni", text="hi")

        source = FakeSource([RawEvent(command="ANYTHING")])
        Session(source, engine, classifier=classifier, sleep=no_sleep).run()
        assert seen == ["ANYTHING"]
        assert "ronni" in engine.roster
