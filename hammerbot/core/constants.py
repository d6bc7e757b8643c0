"""
HammerBot - Centralized Constants
=================================

Protocol strings, defaults and limits shared across the bot.
Import from this module instead of hardcoding values.
"""

from typing import Tuple

# =============================================================================
# Network Constants
# =============================================================================

DEFAULT_IRC_SERVER = "irc.chat.twitch.tv"
DEFAULT_IRC_PORT = 6667
SOCKET_RECV_SIZE = 4096
SOCKET_TIMEOUT = 10.0                 # Connect timeout, reads block afterwards
DEFAULT_READ_RETRY_DELAY = 1.0        # Seconds between failed reads

# =============================================================================
# Twitch Capabilities
# =============================================================================

CAP_MEMBERSHIP = "twitch.tv/membership"
CAP_COMMANDS = "twitch.tv/commands"
CAP_TAGS = "twitch.tv/tags"

REQUESTED_CAPABILITIES: Tuple[str, ...] = (CAP_MEMBERSHIP, CAP_COMMANDS, CAP_TAGS)

# =============================================================================
# Notices
# =============================================================================

AUTH_FAILED_NOTICE = "Login authentication failed"

# =============================================================================
# Moderation Defaults
# =============================================================================

DEFAULT_BANNED_PHRASES: Tuple[str, ...] = ("ban me!", "hello")
BANNED_PHRASE_SEPARATOR = "|"

DEFAULT_HAMMER_ON_PHRASE = "turn sanctions on"
DEFAULT_HAMMER_OFF_PHRASE = "turn sanctions off"

HAMMER_ON_ANNOUNCEMENT = "The hammer is up. Banned phrases will now be sanctioned."
HAMMER_OFF_ANNOUNCEMENT = "The hammer is down. Automatic sanctions are off."

MAX_TIMEOUT_SECONDS = 1209600         # Twitch limit: two weeks

# =============================================================================
# Log Truncation
# =============================================================================

LOG_TEXT_PREVIEW = 100
