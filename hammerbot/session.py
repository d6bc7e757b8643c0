"""
HammerBot - Session Loop
========================

Pulls raw events from the message source, classifies them and feeds the
moderation engine, one event at a time.

DESIGN:
    Strictly sequential: an event is classified and fully handled
    (including any sends) before the next read. The loop only ends when
    the source reports end of stream; read errors are logged and retried.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from hammerbot.core.constants import DEFAULT_READ_RETRY_DELAY
from hammerbot.core.logger import logger
from hammerbot.irc.classifier import classify
from hammerbot.irc.errors import MessageSourceError
from hammerbot.irc.events import ChatEvent
from hammerbot.irc.models import RawEvent
from hammerbot.moderation.engine import ModerationEngine
from hammerbot.utils.error_handler import ErrorHandler


class MessageSource(Protocol):
    """Produces raw protocol events and accepts outgoing chat lines."""

    def next_event(self) -> Optional[RawEvent]:
        """Next raw event; None at end of stream; MessageSourceError on failure."""
        ...

    def send(self, text: str) -> None:
        ...


@dataclass
class SessionStats:
    """Counters reported when the session ends."""
    raw_events: int = 0
    chat_events: int = 0
    dropped: int = 0
    read_errors: int = 0
    handler_errors: int = 0


class Session:
    """
    One run of the read → classify → moderate loop.

    Attributes:
        source: Where raw events come from.
        engine: Receives every classified event.
        stats: Counters for this run.
    """

    def __init__(
        self,
        source: MessageSource,
        engine: ModerationEngine,
        retry_delay: float = DEFAULT_READ_RETRY_DELAY,
        classifier: Callable[[RawEvent], Optional[ChatEvent]] = classify,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.source = source
        self.engine = engine
        self.retry_delay = retry_delay
        self.stats = SessionStats()
        self._classify = classifier
        self._sleep = sleep

    def run(self) -> SessionStats:
        """
        Process events until the source is exhausted.

        Returns:
            Counters for this run.
        """
        logger.info("Session started")

        while True:
            try:
                raw = self.source.next_event()
            except MessageSourceError as e:
                self.stats.read_errors += 1
                ErrorHandler.handle(e, location="Session.run", attempt=self.stats.read_errors)
                if self.retry_delay > 0:
                    self._sleep(self.retry_delay)
                continue

            if raw is None:
                break

            self.stats.raw_events += 1
            self.process(raw)

        logger.tree("Session Ended", [
            ("Raw Events", str(self.stats.raw_events)),
            ("Chat Events", str(self.stats.chat_events)),
            ("Dropped", str(self.stats.dropped)),
            ("Read Errors", str(self.stats.read_errors)),
            ("Sanctions", str(self.engine.sanction_count)),
            ("Users Seen", str(len(self.engine.roster))),
        ], emoji="🏁")
        return self.stats

    def process(self, raw: RawEvent) -> None:
        """Classify one raw event and hand the result to the engine."""
        event = self._classify(raw)
        if event is None:
            self.stats.dropped += 1
            return

        self.stats.chat_events += 1
        try:
            self.engine.handle(event)
        except Exception as e:
            self.stats.handler_errors += 1
            ErrorHandler.handle(
                e,
                location="Session.process",
                event=type(event).__name__,
                command=raw.command,
            )


__all__ = [
    "MessageSource",
    "Session",
    "SessionStats",
]
