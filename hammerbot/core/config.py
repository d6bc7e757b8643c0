"""
HammerBot - Configuration Module
================================

Centralized configuration management with environment variable validation.

DESIGN:
    This module provides a single source of truth for all configuration,
    loaded from environment variables at startup. `.env` is read with
    python-dotenv, and a developer overlay `.env.dev` overrides it when
    present so a local account can be used without touching the main file.

    Key patterns:
    - Singleton pattern via get_config() ensures one Config instance
    - Validation happens once at load time, not on every access
    - Everything is immutable after load
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from hammerbot.core.constants import (
    BANNED_PHRASE_SEPARATOR,
    DEFAULT_BANNED_PHRASES,
    DEFAULT_HAMMER_OFF_PHRASE,
    DEFAULT_HAMMER_ON_PHRASE,
    DEFAULT_IRC_PORT,
    DEFAULT_IRC_SERVER,
    DEFAULT_READ_RETRY_DELAY,
    MAX_TIMEOUT_SECONDS,
)


ENV_FILE = Path(".env")
DEV_ENV_FILE = Path(".env.dev")


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass(frozen=True)
class Config:
    """
    Bot configuration loaded from environment variables.

    DESIGN:
        Required fields raise ConfigValidationError if missing.
        Optional fields have sensible defaults for development.
        The channel is stored lowercase and without the leading '#'.

    Attributes:
        username: Bot account nickname.
        oauth: Chat password, always carrying the "oauth:" prefix.
        channel: Channel name (also the channel owner's nickname).
        owners: Extra nicknames seeded as moderators.
        banned_phrases: Exact phrases that trigger a sanction.
    """

    # -------------------------------------------------------------------------
    # Required: Account
    # -------------------------------------------------------------------------

    username: str
    oauth: str
    channel: str

    # -------------------------------------------------------------------------
    # Optional: Moderation
    # -------------------------------------------------------------------------

    owners: Tuple[str, ...] = ()
    banned_phrases: Tuple[str, ...] = DEFAULT_BANNED_PHRASES
    hammer_on_phrase: str = DEFAULT_HAMMER_ON_PHRASE
    hammer_off_phrase: str = DEFAULT_HAMMER_OFF_PHRASE
    hammer_enabled: bool = False
    sanction_timeout_seconds: int = 0  # 0 = permanent ban
    join_greeting: Optional[str] = None

    # -------------------------------------------------------------------------
    # Optional: Transport
    # -------------------------------------------------------------------------

    irc_server: str = DEFAULT_IRC_SERVER
    irc_port: int = DEFAULT_IRC_PORT
    irc_use_tls: bool = False
    read_retry_delay: float = DEFAULT_READ_RETRY_DELAY

    # -------------------------------------------------------------------------
    # Optional: Logging
    # -------------------------------------------------------------------------

    log_retention_days: int = 7

    @property
    def irc_channel(self) -> str:
        """Channel name in IRC form ("#channel")."""
        return f"#{self.channel}"


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """
    Raised when required configuration is missing or invalid.

    DESIGN:
        Custom exception type allows callers to distinguish config
        errors from other startup failures.
    """

    pass


def _parse_bool(value: Optional[str], default: bool) -> bool:
    """
    Parse a boolean flag such as "true", "1", "yes" or "off".

    Args:
        value: String value from environment variable.
        default: Value used when unset.

    Returns:
        Parsed boolean.
    """
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """
    Parse optional integer with default and range validation.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    from hammerbot.core.logger import logger
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if min_val is not None and parsed < min_val:
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _parse_float_with_default(value: Optional[str], default: float, name: str) -> float:
    """Parse an optional non-negative float, falling back to the default."""
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        parsed = -1.0
    if parsed < 0:
        from hammerbot.core.logger import logger
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    return parsed


def _parse_name_list(value: Optional[str]) -> Tuple[str, ...]:
    """
    Parse comma-separated nicknames into lowercase logins.

    Args:
        value: Comma-separated string (e.g., "Alice, bob").

    Returns:
        Tuple of non-empty lowercase names, empty if input is None or empty.
    """
    if not value:
        return ()
    return tuple(part.strip().lower() for part in value.split(",") if part.strip())


def _parse_phrases(value: Optional[str]) -> Tuple[str, ...]:
    """
    Parse the banned phrase list.

    Phrases are separated by '|' since they may contain commas and spaces.
    Each phrase is trimmed because incoming messages are trimmed before
    being matched.
    """
    if value is None:
        return DEFAULT_BANNED_PHRASES
    return tuple(
        part.strip()
        for part in value.split(BANNED_PHRASE_SEPARATOR)
        if part.strip()
    )


def _normalize_channel(value: str) -> str:
    """Lowercase the channel and drop a leading '#'."""
    return value.strip().lstrip("#").lower()


def _normalize_oauth(value: str) -> str:
    """Ensure the password carries the "oauth:" prefix Twitch expects."""
    value = value.strip()
    return value if value.startswith("oauth:") else f"oauth:{value}"


# =============================================================================
# Configuration Loading
# =============================================================================

def load_environment() -> None:
    """
    Load `.env` then the developer overlay `.env.dev` if it exists.

    Variables already present in the process environment win over `.env`;
    `.env.dev` overrides both.
    """
    load_dotenv(ENV_FILE)
    if DEV_ENV_FILE.exists():
        load_dotenv(DEV_ENV_FILE, override=True)


def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    DESIGN:
        Validates all required variables upfront before creating the
        Config object. This fail-fast approach prevents partial
        initialization and unclear runtime errors.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If any required variable is missing or invalid.
    """
    missing = []

    # -------------------------------------------------------------------------
    # Collect Required Variables
    # -------------------------------------------------------------------------

    username = (os.getenv("TWITCH_USERNAME") or "").strip()
    if not username:
        missing.append("TWITCH_USERNAME")

    oauth = (os.getenv("TWITCH_OAUTH") or "").strip()
    if not oauth:
        missing.append("TWITCH_OAUTH")

    channel = _normalize_channel(os.getenv("TWITCH_CHANNEL") or "")
    if not channel:
        missing.append("TWITCH_CHANNEL")

    # -------------------------------------------------------------------------
    # Fail Fast on Missing Required
    # -------------------------------------------------------------------------

    if missing:
        raise ConfigValidationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    # -------------------------------------------------------------------------
    # Parse Optional Values
    # -------------------------------------------------------------------------

    banned_phrases = _parse_phrases(os.getenv("BANNED_PHRASES"))
    hammer_on_phrase = (os.getenv("HAMMER_ON_PHRASE") or DEFAULT_HAMMER_ON_PHRASE).strip()
    hammer_off_phrase = (os.getenv("HAMMER_OFF_PHRASE") or DEFAULT_HAMMER_OFF_PHRASE).strip()

    if hammer_on_phrase == hammer_off_phrase:
        raise ConfigValidationError(
            "HAMMER_ON_PHRASE and HAMMER_OFF_PHRASE must be different"
        )

    return Config(
        username=username,
        oauth=_normalize_oauth(oauth),
        channel=channel,
        owners=_parse_name_list(os.getenv("OWNERS")),
        banned_phrases=banned_phrases,
        hammer_on_phrase=hammer_on_phrase,
        hammer_off_phrase=hammer_off_phrase,
        hammer_enabled=_parse_bool(os.getenv("HAMMER_ENABLED"), False),
        sanction_timeout_seconds=_parse_int_with_default(
            os.getenv("SANCTION_TIMEOUT_SECONDS"), 0, "SANCTION_TIMEOUT_SECONDS",
            min_val=0, max_val=MAX_TIMEOUT_SECONDS,
        ),
        join_greeting=(os.getenv("JOIN_GREETING") or "").strip() or None,
        irc_server=(os.getenv("IRC_SERVER") or DEFAULT_IRC_SERVER).strip(),
        irc_port=_parse_int_with_default(
            os.getenv("IRC_PORT"), DEFAULT_IRC_PORT, "IRC_PORT", min_val=1, max_val=65535
        ),
        irc_use_tls=_parse_bool(os.getenv("IRC_USE_TLS"), False),
        read_retry_delay=_parse_float_with_default(
            os.getenv("READ_RETRY_DELAY"), DEFAULT_READ_RETRY_DELAY, "READ_RETRY_DELAY"
        ),
        log_retention_days=_parse_int_with_default(
            os.getenv("LOG_RETENTION_DAYS"), 7, "LOG_RETENTION_DAYS", min_val=1, max_val=365
        ),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Returns:
        The global Config instance.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        load_environment()
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached instance so the next get_config() reloads."""
    global _config
    _config = None


# =============================================================================
# Config Validation & Logging
# =============================================================================

def validate_and_log_config() -> Config:
    """
    Validate configuration and log results at startup.

    Returns:
        The loaded configuration.

    Raises:
        ConfigValidationError: If required configuration is missing.
    """
    from hammerbot.core.logger import logger

    config = get_config()
    logger.set_retention(config.log_retention_days)

    if not config.banned_phrases:
        logger.warning("No banned phrases configured, the hammer will never fire")

    sanction = (
        f"timeout {config.sanction_timeout_seconds}s"
        if config.sanction_timeout_seconds
        else "ban"
    )

    logger.tree("Configuration Validated", [
        ("Bot", config.username),
        ("Channel", config.irc_channel),
        ("Owners", ", ".join(config.owners) if config.owners else "None"),
        ("Banned Phrases", str(len(config.banned_phrases))),
        ("Sanction", sanction),
        ("Hammer", "on" if config.hammer_enabled else "off"),
        ("Server", f"{config.irc_server}:{config.irc_port}{' (TLS)' if config.irc_use_tls else ''}"),
    ], emoji="⚙️")

    return config


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "Config",
    "ConfigValidationError",
    "get_config",
    "load_config",
    "load_environment",
    "reset_config",
    "validate_and_log_config",
]
