"""
HammerBot - Moderation Engine
=============================

Consumes classified chat events, keeps the roster current and sanctions
banned phrases while the hammer is on.

DESIGN:
    The engine is a small state machine over ``hammer_enabled``:
    - a moderator saying the "on" phrase arms it, the "off" phrase disarms it
    - anyone else saying either phrase gets no reply and no toggle, only
      the usual roster updates

    While armed, a message whose trimmed text matches the policy is
    sanctioned once per user: the sanction date is stored on the roster and
    makes the user protected from then on, even if the command failed to
    send. Moderators and paying users are never sanctioned.

    Outgoing text goes through a single send callable. A failing send is
    logged with the text and never rolls back state.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Dict, Iterable, Optional, Type

from hammerbot.core.constants import (
    CAP_COMMANDS,
    CAP_MEMBERSHIP,
    CAP_TAGS,
    DEFAULT_HAMMER_OFF_PHRASE,
    DEFAULT_HAMMER_ON_PHRASE,
    HAMMER_OFF_ANNOUNCEMENT,
    HAMMER_ON_ANNOUNCEMENT,
    LOG_TEXT_PREVIEW,
)
from hammerbot.core.logger import NY_TZ, logger
from hammerbot.irc.events import (
    NOTICE_EVENTS,
    Ban,
    Capability,
    ChatEvent,
    Clear,
    InvalidAuthToken,
    Join,
    Leave,
    Message,
    Operator,
    RoomState,
    Timeout,
)
from hammerbot.moderation.policy import BannedPhraseMatcher, PhraseMatcher
from hammerbot.moderation.roster import Roster
from hammerbot.utils.error_handler import ErrorHandler

if TYPE_CHECKING:
    from hammerbot.core.config import Config


Clock = Callable[[], datetime]


def _now() -> datetime:
    return datetime.now(NY_TZ)


# =============================================================================
# Session State
# =============================================================================

@dataclass
class SessionState:
    """
    Per-connection flags.

    Attributes:
        bot_nickname: The bot's own account, never moderated.
        hammer_enabled: Whether banned phrases are sanctioned.
        cap_membership: Server acknowledged twitch.tv/membership.
        cap_commands: Server acknowledged twitch.tv/commands.
        cap_tags: Server acknowledged twitch.tv/tags.
    """

    bot_nickname: str
    hammer_enabled: bool = False
    cap_membership: bool = False
    cap_commands: bool = False
    cap_tags: bool = False

    def acknowledge(self, capability: str) -> bool:
        """
        Record an acknowledged capability. Flags never go back to False.

        Returns:
            True if the capability is one the bot tracks.
        """
        if capability == CAP_MEMBERSHIP:
            self.cap_membership = True
        elif capability == CAP_COMMANDS:
            self.cap_commands = True
        elif capability == CAP_TAGS:
            self.cap_tags = True
        else:
            return False
        return True

    def is_self(self, nickname: str) -> bool:
        return nickname.lower() == self.bot_nickname.lower()


# =============================================================================
# Sanction Commands
# =============================================================================

def build_sanction(nickname: str, timeout_seconds: int = 0) -> str:
    """
    Chat command sanctioning ``nickname``.

    Args:
        nickname: User to sanction.
        timeout_seconds: 0 for a permanent ban, else the timeout length.
    """
    if timeout_seconds > 0:
        return f"/timeout {nickname} {timeout_seconds}"
    return f"/ban {nickname}"


# =============================================================================
# Engine
# =============================================================================

class ModerationEngine:
    """
    Applies the moderation policy to classified chat events.

    Attributes:
        session: Flags for the current connection.
        roster: Trust state of every user seen so far.
        matcher: Policy deciding which texts are sanctionable.
    """

    def __init__(
        self,
        session: SessionState,
        send: Callable[[str], None],
        matcher: PhraseMatcher,
        channel_owner: str,
        owners: Iterable[str] = (),
        hammer_on_phrase: str = DEFAULT_HAMMER_ON_PHRASE,
        hammer_off_phrase: str = DEFAULT_HAMMER_OFF_PHRASE,
        sanction_timeout_seconds: int = 0,
        join_greeting: Optional[str] = None,
        roster: Optional[Roster] = None,
        clock: Clock = _now,
    ) -> None:
        self.session = session
        self.matcher = matcher
        self.roster = roster if roster is not None else Roster()
        self.hammer_on_phrase = hammer_on_phrase
        self.hammer_off_phrase = hammer_off_phrase
        self.sanction_timeout_seconds = sanction_timeout_seconds
        self.join_greeting = join_greeting
        self._send_fn = send
        self._clock = clock
        self.sanction_count = 0

        for nickname in (channel_owner, *owners):
            self.roster.set_mod(nickname, True)

        self._handlers: Dict[Type[ChatEvent], Callable] = {
            Message: self._on_message,
            Operator: self._on_operator,
            Capability: self._on_capability,
            InvalidAuthToken: self._on_invalid_auth,
            Join: self._on_join,
            Leave: self._on_leave,
            Clear: self._on_clear,
            Timeout: self._on_timeout,
            Ban: self._on_ban,
            RoomState: self._on_room_state,
        }

    @classmethod
    def from_config(cls, config: "Config", send: Callable[[str], None]) -> "ModerationEngine":
        """Build the engine from the loaded configuration."""
        return cls(
            session=SessionState(
                bot_nickname=config.username,
                hammer_enabled=config.hammer_enabled,
            ),
            send=send,
            matcher=BannedPhraseMatcher(config.banned_phrases),
            channel_owner=config.channel,
            owners=config.owners,
            hammer_on_phrase=config.hammer_on_phrase,
            hammer_off_phrase=config.hammer_off_phrase,
            sanction_timeout_seconds=config.sanction_timeout_seconds,
            join_greeting=config.join_greeting,
        )

    # =========================================================================
    # Dispatch
    # =========================================================================

    def handle(self, event: ChatEvent) -> None:
        """Process one classified event, sending any resulting chat lines."""
        handler = self._handlers.get(type(event))
        if handler is not None:
            handler(event)
        elif isinstance(event, NOTICE_EVENTS):
            # Informational for now; moderation confirmations land here.
            logger.info(f"Channel Notice: {type(event).__name__}", [
                (key, str(value)) for key, value in vars(event).items()
            ] or None)
        else:
            logger.debug(f"No handler for {type(event).__name__}")

    def send(self, text: str) -> bool:
        """
        Send a chat line, logging failures instead of raising.

        Returns:
            True if the message source accepted the text.
        """
        try:
            self._send_fn(text)
        except Exception as e:
            ErrorHandler.handle(e, location="ModerationEngine.send", text=text)
            return False
        return True

    # =========================================================================
    # Messages
    # =========================================================================

    def _on_message(self, event: Message) -> None:
        text = event.text.strip()
        is_control = text in (self.hammer_on_phrase, self.hammer_off_phrase)

        if is_control and self._on_control_phrase(event.author, text == self.hammer_on_phrase):
            return

        if self.session.is_self(event.author):
            return

        nickname = event.author
        self.roster.ensure(nickname)

        if event.tags.display_name:
            self.roster.set_display_name(nickname, event.tags.display_name)
        if event.tags.is_paying and self.roster.mark_paying(nickname):
            logger.debug(f"{nickname} marked as paying supporter")

        # Unauthorized control phrases only update the roster.
        if is_control:
            return

        user = self.roster.get(nickname)
        if not self.session.hammer_enabled or user.is_protected:
            return
        if not self.matcher.matches(text):
            return

        self._sanction(nickname, text)

    def _on_control_phrase(self, nickname: str, turn_on: bool) -> bool:
        """
        Toggle the hammer if ``nickname`` is a moderator.

        Returns:
            True if the phrase was authorized and applied.
        """
        user = self.roster.get(nickname)
        if user is None or not user.is_mod:
            logger.debug(f"Ignored hammer control from non-moderator {nickname}")
            return False

        self.session.hammer_enabled = turn_on
        logger.tree("Hammer Toggled", [
            ("By", nickname),
            ("State", "on" if turn_on else "off"),
        ], emoji="🔨")
        self.send(HAMMER_ON_ANNOUNCEMENT if turn_on else HAMMER_OFF_ANNOUNCEMENT)
        return True

    def _sanction(self, nickname: str, text: str) -> None:
        # Recorded before sending: a failed send still counts as handled.
        self.roster.mark_auto_banned(nickname, self._clock())
        self.sanction_count += 1

        command = build_sanction(nickname, self.sanction_timeout_seconds)
        logger.tree("Sanction Issued", [
            ("User", nickname),
            ("Text", text[:LOG_TEXT_PREVIEW]),
            ("Command", command),
        ], emoji="🔨")
        self.send(command)

    # =========================================================================
    # Roster & Session Events
    # =========================================================================

    def _on_operator(self, event: Operator) -> None:
        self.roster.set_mod(event.nickname, event.granted)
        logger.info(f"Operator {'granted to' if event.granted else 'revoked from'} {event.nickname}")

    def _on_capability(self, event: Capability) -> None:
        for name in event.names:
            if self.session.acknowledge(name):
                logger.success(f"Capability acknowledged: {name}")
            else:
                logger.debug(f"Capability {name} acknowledged but not tracked")

    def _on_invalid_auth(self, event: InvalidAuthToken) -> None:
        logger.critical("Chat server rejected the OAuth token", [
            ("Account", self.session.bot_nickname),
            ("Action", "Check TWITCH_OAUTH; waiting for the server to close the connection"),
        ])

    def _on_join(self, event: Join) -> None:
        if not self.session.is_self(event.nickname):
            logger.debug(f"{event.nickname} joined")
            return
        logger.success(f"Joined channel as {event.nickname}")
        if self.join_greeting:
            self.send(self.join_greeting)

    def _on_leave(self, event: Leave) -> None:
        logger.debug(f"{event.nickname} left")

    # =========================================================================
    # Moderation Actions By Others
    # =========================================================================

    def _on_clear(self, event: Clear) -> None:
        logger.info("Channel chat was cleared")

    def _on_timeout(self, event: Timeout) -> None:
        logger.info(f"{event.nickname} timed out", [
            ("Seconds", str(event.seconds)),
            ("Reason", event.reason or "None"),
        ])

    def _on_ban(self, event: Ban) -> None:
        logger.info(f"{event.nickname} banned", [("Reason", event.reason or "None")])

    def _on_room_state(self, event: RoomState) -> None:
        logger.debug("Room State", [
            ("Language", str(event.language)),
            ("R9K", str(event.r9k)),
            ("Subs Only", str(event.subs_only)),
            ("Slow", str(event.slow)),
        ])


__all__ = [
    "ModerationEngine",
    "SessionState",
    "build_sanction",
]
