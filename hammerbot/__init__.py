"""
HammerBot
=========

Twitch chat moderation bot: classifies IRC traffic for one channel and
sanctions banned phrases while exempting moderators and paying supporters.
"""

__version__ = "0.2.0"
