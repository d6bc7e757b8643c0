#!/usr/bin/env python3
"""
HammerBot Entry Point
=====================

Connects to Twitch chat as the bot account, joins the configured channel
and moderates it until the server closes the connection.

Features:
- Banned phrase sanctions (toggled by moderators in chat)
- Moderator, subscriber and turbo exemptions
- Twitch capability negotiation (membership, commands, tags)
- Graceful error handling
"""

import sys

from hammerbot.core.config import ConfigValidationError, validate_and_log_config
from hammerbot.core.logger import logger
from hammerbot.irc.transport import IrcConnection
from hammerbot.moderation.engine import ModerationEngine
from hammerbot.session import Session
from hammerbot.utils.error_handler import ErrorHandler


def main() -> int:
    """
    Main entry point for HammerBot.

    Handles the complete bot lifecycle:
    1. Loads and validates configuration
    2. Connects and identifies with the chat server
    3. Runs the session loop until end of stream
    4. Closes the connection

    Returns:
        Process exit code.
    """
    try:
        config = validate_and_log_config()
    except ConfigValidationError as e:
        logger.error(f"Configuration invalid: {e}")
        logger.error("   Please check your .env file")
        return 1

    connection = IrcConnection.from_config(config)
    engine = ModerationEngine.from_config(config, send=connection.send)
    session = Session(connection, engine, retry_delay=config.read_retry_delay)

    logger.tree("HAMMER STARTING", [
        ("Channel", config.irc_channel),
        ("Bot", config.username),
        ("Controls", f"'{config.hammer_on_phrase}' / '{config.hammer_off_phrase}'"),
    ], "🔨")

    try:
        connection.connect()
        connection.identify()
        session.run()
    except OSError as e:
        ErrorHandler.handle(e, location="main.main", critical=True, server=config.irc_server)
        return 1
    finally:
        connection.close()

    logger.info(f"Disconnected from channel {config.irc_channel}")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("🛑 Bot stopped by user (Ctrl+C)")
    except Exception as e:
        ErrorHandler.handle(
            e,
            location="main.__main__",
            critical=True
        )
        sys.exit(1)
